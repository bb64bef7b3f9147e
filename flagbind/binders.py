"""
flagbind binders: discover, tokenize, convert, apply, dispatch.

What this module provides
- Binder: the configuration context. It owns a TypeReaders registry and a
  list of discovery sources, and runs the whole pipeline on init():
    1. discover arguments and commands (every call, fresh),
    2. drop commands whose callback is not a zero-argument action,
    3. tokenize the argument vector against the known names,
    4. apply argument values in discovery order,
    5. dispatch triggered commands in discovery order,
    6. report the collected faults and return them.
- binder: the process-wide default Binder (scans every loaded module).
- init(args=Unset) / register_type_reader(type, reader): module-level
  shortcuts over the default binder.

Failure policy
- Declaration problems (empty names, duplicate names) raise ConfigurationError
  subclasses: they are build-time mistakes and fail the whole call.
- Everything else is per binding and recovered: the fault is collected, the
  remaining bindings proceed, and once every command has run the faults are
  reported (warnings outside shell mode, rich on stderr in shell mode, or a
  custom fallback).

Quick start
    from flagbind import Argument, command, init

    class Window:
        width: int = Argument("width", "window width in pixels", default=1280)
        fullscreen: bool = Argument("fullscreen")

    @command("reset", "restore the factory settings")
    def reset():
        ...

    if __name__ == "__main__":
        init()  # e.g. python game.py -width 1920 -fullscreen true -reset

See also
- flagbind.readers for the conversion rules.
- flagbind.faults for fault codes and rendering.
"""
import builtins
import copy
import enum
import os.path
import shlex
import sys
from collections import defaultdict
from collections.abc import Iterable

from rich.box import ROUNDED
from rich.console import Group
from rich.table import Table
from rich.text import Text

from .discovery import discover_arguments, discover_commands
from .faults import *
from .readers import TypeReaders
from .tokens import tokenize
from .utils import *


def _typename(type, /):
    return getattr(type, "__qualname__", None) or repr(type)


class Binder:
    """
    Process-wide configuration context for command-line bindings.

    Parameters
    - *sources: discovery sources (modules, classes, module names, bindings).
      With no sources, every loaded module is scanned on each init().
    - readers: Unset | Mapping (keyword-only)
      Type readers to start from; Unset seeds the defaults.
    - prefix: str (keyword-only)
      Flag marker, "-" by default.
    - name: Unset | str (keyword-only)
      Program label used in fault headers; defaults to the script name.
    - shell / fancy / colorful: bool (keyword-only)
      Fault rendering: shell prints faults on stderr instead of warning,
      fancy wraps them in a panel, colorful enables the palette.

    Not safe for concurrent use; configure readers and sources before init().
    """

    sources = mirror("sources")
    prefix = mirror("prefix")
    name = mirror("name")
    shell = mirror("shell")
    fancy = mirror("fancy")
    colorful = mirror("colorful")

    def __init__(
            self,
            *sources,
            readers=Unset,
            prefix="-",
            name=Unset,
            shell=False,
            fancy=False,
            colorful=False
    ):
        if not isinstance(prefix, str) or not prefix.strip():
            raise ValueError("binder 'prefix' must be a non-empty string")
        if not isinstance(name, str | Unset):
            raise TypeError("binder 'name' must be a string")

        self._sources = list(sources)
        self._readers = readers if isinstance(readers, TypeReaders) else TypeReaders(readers)
        self._prefix = prefix
        self._name = coalesce(name, os.path.basename(sys.argv[0]) or "flagbind")
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        self._fallback = Unset

    @property
    def readers(self):
        return self._readers

    def __repr__(self):
        return "Binder(sources=%r, readers=%r, prefix=%r)" % (self.sources, self._readers, self._prefix)

    def include(self, source, /):
        """
        Add a discovery source; returns it, so classes can be decorated.

            @binder.include
            class Settings:
                width: int = Argument("width")
        """
        self._sources.append(source)
        return source

    def register_type_reader(self, type, reader, /):
        """
        Insert or replace the reader for `type` (last writer wins).
        """
        self._readers.register(type, reader)

    def fallback(self, fallback, /):
        """
        Install a reporter that receives every fault instead of trigger().

        The reporter is called with the fault (options already merged);
        returns the reporter so it can be used as a decorator.
        """
        if not callable(fallback):
            raise TypeError("fallback() argument must be callable")
        self._fallback = fallback
        return fallback

    def trigger(self, fault, /, **options):
        """
        Report a fault now, with this binder's runtime options merged in.

        Faults found by init() take the same route once the run is over.
        """
        if (
                not hasattr(fault, "__trigger__") or
                not callable(fault.__trigger__) or
                not hasattr(fault, "__replace__") or
                not callable(fault.__replace__)
        ):
            raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
        fault = self._merge(fault, **options)
        self._report(fault)
        return fault

    def _merge(self, fault, /, **options):
        return copy.replace(fault, **options, tool=self, shell=self.shell, fancy=self.fancy, colorful=self.colorful)

    def _report(self, fault, /):
        if self._fallback:
            self._fallback(fault)
        else:
            fault.__trigger__()

    def discover(self):
        """
        Return (arguments, commands) for the configured sources.

        Raises
        - DuplicateBindingError: two bindings of the same kind share a name.
        """
        return discover_arguments(*self._sources), discover_commands(*self._sources)

    def _tokens(self, args):
        """
        Normalize the argument vector.

        - Unset: sys.argv[1:].
        - str: shell-like string, split via shlex.split.
        - Iterable[str]: used verbatim (values are not trimmed).
        """
        if args is Unset:
            return sys.argv[1:]
        if isinstance(args, str):
            return shlex.split(args)
        if isinstance(args, Iterable):
            tokens = list(args)
            for token in tokens:
                if not isinstance(token, str):
                    raise TypeError("init() argument must be a string or an iterable of strings")
            return tokens
        raise TypeError("init() argument must be a string or an iterable of strings")

    def _validate(self, commands, faults, /):
        """
        Drop (and report) commands that are not zero-argument actions.
        """
        valid = {}
        for name, command in commands.items():
            if (reason := command.mismatch) is None:
                valid[name] = command
                continue
            faults.append(self._merge(SignatureMismatchWarning(
                "command %r cannot be dispatched: %s" % (name, reason),
                title="command signature mismatch",
                code=FaultCode.SIGNATURE_MISMATCH,
                hint="commands must be callable without arguments and return None",
                docs=getdoc(FaultCode.SIGNATURE_MISMATCH),
                name=name,
                command=command,
            )))
        return valid

    def _apply(self, argument, input, faults, /):
        """
        Convert `input` and write it into the argument's field.

        - input None (flag without value): the field keeps its current value.
        - no reader: UnsupportedTypeWarning, except for enumerations whose
          underlying reader is missing, which are skipped silently.
        - reader raises: ConversionFailedWarning, field unchanged.
        - reader returns None: field unchanged.
        """
        if input is None:
            return

        type = argument.type
        reader = self._readers.resolve(type)

        if reader is None:
            if isinstance(type, builtins.type) and issubclass(type, enum.Enum):
                return
            faults.append(self._merge(UnsupportedTypeWarning(
                "argument %r has no reader for type %s" % (argument.name, _typename(type)),
                title="unsupported argument type",
                code=FaultCode.UNSUPPORTED_TYPE,
                hint="register one with register_type_reader(%s, reader)" % _typename(type),
                docs=getdoc(FaultCode.UNSUPPORTED_TYPE),
                name=argument.name,
                argument=argument,
                input=input,
            )))
            return

        try:
            value = reader(input)
        except Exception as exception:
            faults.append(self._merge(ConversionFailedWarning(
                "argument %r could not convert %r to %s" % (argument.name, input, _typename(type)),
                title="conversion failed",
                code=FaultCode.CONVERSION_FAILED,
                hint="check the value passed to %s%s or the reader for %s" % (
                    self._prefix, argument.name, _typename(type)
                ),
                docs=getdoc(FaultCode.CONVERSION_FAILED),
                name=argument.name,
                argument=argument,
                input=input,
                exception=exception,
            )))
            return

        if value is None:
            return

        argument.write(value)

    def _dispatch(self, command, faults, /):
        """
        Invoke a command, reporting (not propagating) whatever it raises.
        """
        try:
            command()
        except Exception as exception:
            faults.append(self._merge(DelegatedCommandWarning(
                "command %r failed: %s" % (command.name, str(exception) or type(exception).__name__),
                title="delegated command error",
                code=FaultCode.DELEGATED_COMMAND,
                hint="check additional logs for more details",
                docs=getdoc(FaultCode.DELEGATED_COMMAND),
                name=command.name,
                command=command,
                exception=exception,
            )))

    def init(self, args=Unset, /):
        """
        Parse `args` (default: sys.argv[1:]) and apply every matching binding.

        Returns
        - tuple of the faults reported during this call (empty on success).

        Raises
        - TypeError: args is not Unset, a string, or an iterable of strings.
        - DuplicateBindingError: discovery found conflicting names.
        """
        tokens = self._tokens(args)
        faults = []

        arguments, commands = self.discover()
        commands = self._validate(commands, faults)

        matches = tokenize(tokens, arguments, commands, prefix=self._prefix)

        # Arguments complete before any command runs.
        for name, argument in arguments.items():
            if name in matches.values:
                self._apply(argument, matches.values[name], faults)

        for name, command in commands.items():
            if name in matches.triggered:
                self._dispatch(command, faults)

        return self._finalize(faults)

    def _finalize(self, faults, /):
        """
        Report the faults of a finished run, in the order they occurred.

        A warnings filter set to "error" raises the fault itself out of
        warnings.warn(); that fault is already part of the returned tuple, so
        reporting moves on to the next one.
        """
        for fault in faults:
            try:
                self._report(fault)
            except BindingWarning as escalated:
                if escalated is not fault:
                    raise
        return tuple(faults)

    def __rich__(self):
        """
        Render the discovered bindings as a listing:

            -width <WIDTH>   window width in pixels
            -reset           restore the factory settings
        """
        styles = defaultdict(str, {
            "group-label": "bold #FFFFFF",
            "argument-name": "bold #00E6FF",
            "command-name": "bold #22C55E",
            "metavar": "bold #FFD600",
            "type": "dim",
            "description": "#9CA3AF",
        } | getattr(__import__("__main__"), "__styles__", {}))

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not self.colorful:
                return Text(str(fragment))
            return Text(str(fragment), styles[style])

        arguments, commands = self.discover()
        renders = []

        if arguments:
            table = Table(box=ROUNDED if self.fancy else None, show_header=False, padding=(0, 2))
            for argument in arguments.values():
                table.add_row(
                    Text.assemble(
                        text(self._prefix + argument.name, "argument-name"),
                        " ",
                        text(argument.metavar, "metavar"),
                    ),
                    text(_typename(argument.type), "type"),
                    text(argument.descr, "description"),
                )
            renders += [text("arguments:", "group-label"), table]

        if commands:
            table = Table(box=ROUNDED if self.fancy else None, show_header=False, padding=(0, 2))
            for command in commands.values():
                table.add_row(
                    text(self._prefix + command.name, "command-name"),
                    text(command.descr, "description"),
                )
            renders += [text("commands:", "group-label"), table]

        return Group(*renders)


binder = Binder()
"""
Default binder: scans every loaded module and starts with the default readers.
"""


def init(args=Unset, /):
    """
    Parse the process arguments (or `args`) with the default binder.
    """
    return binder.init(args)


def register_type_reader(type, reader, /):
    """
    Insert or replace a reader on the default binder.
    """
    binder.register_type_reader(type, reader)


__all__ = (
    "Binder",
    "binder",
    "init",
    "register_type_reader",
)
