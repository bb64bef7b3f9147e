"""
flagbind faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every issue the binder
  can surface. Codes are grouped by domain (configuration vs. per-binding).
- BindingException / BindingWarning: base types that carry message + options
  and know how to render themselves (rich) and how to surface themselves.
- trigger(): central entry point to surface any fault.
- getdoc(): optional description lookup for a code from the host application.

Taxonomy
- Configuration errors are fatal to setup and are raised to the caller:
  • InvalidNameError: empty or whitespace-only binding name at declaration time.
  • DuplicateBindingError: two bindings of the same kind share a name.
- Per-binding faults are recovered; the run continues with the other bindings:
  • UnsupportedTypeWarning: no reader registered for a field's type.
  • ConversionFailedWarning: a (custom) reader raised while converting a value.
  • SignatureMismatchWarning: a command callback is not a zero-argument action.
  • DelegatedCommandWarning: a command body raised during dispatch.

Integration
- The binder calls trigger(fault, **ctx) for per-binding faults. Outside shell
  mode warnings go through the warnings module; in shell mode they are rendered
  on stderr via rich.
- Hosts may expose __prog__, __styles__, __codes__ and __docs__ in __main__ to
  customise the program label, the palette, the code labels and the docs.
"""
import copy
import inspect
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the binder (stable identifiers).

    grouping
    - configuration (211xx)
      • INVALID_NAME, DUPLICATE_BINDING
    - conversion (221xx)
      • UNSUPPORTED_TYPE, CONVERSION_FAILED
    - dispatch (222xx)
      • SIGNATURE_MISMATCH, DELEGATED_COMMAND
    """
    # --- configuration errors (21xxx) ---
    INVALID_NAME                = 21101
    DUPLICATE_BINDING           = 21102

    # --- conversion warnings (22xxx) ---
    UNSUPPORTED_TYPE            = 22101
    CONVERSION_FAILED           = 22102

    # --- dispatch warnings (22xxx) ---
    SIGNATURE_MISMATCH          = 22201
    DELEGATED_COMMAND           = 22202

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette, /):
    """
    Build the rich renderable shared by errors and warnings.

    Layout
    - header: "[ <prog> — <code> | <Title> ]"
    - body: message, then "→ hint" when a hint is present.
    - fancy: the same content inside a Panel titled with the header.
    """
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", True)
    fancy = options.get("fancy", False)

    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), styles[style])

    tool = options.get("tool")
    prog = text(getattr(main, "__prog__", getattr(tool, "name", "flagbind")), "prog-name")

    code = options.get("code")
    header = Text.assemble(
        "[ ",
        prog,
        " — ",
        text(code.normalize() if isinstance(code, FaultCode) else "?", "code"),
        " | ",
        text(str(options.get("title", type(fault).__name__)).title(), "title"),
        " ]"
    )
    body = [text(coalesce(fault.message, ""), "message")]
    if hint := options.get("hint"):
        body.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

    if fancy:
        return Panel(Group(*body), title=header, title_align="left")
    return Group(header, *body)


class BindingException(Exception):
    """
    Base class of every error raised by flagbind.

    Carries a message and a read-only mapping of options (title, code, hint
    and any context such as the binding name).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "title": "bold #FF4DA6",
            "message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        })

    def __trigger__(self) -> None:
        raise self from None

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ConfigurationError(BindingException):
    """
    Broken declaration-time configuration; fatal to setup, never recovered.
    """


class InvalidNameError(ConfigurationError, ValueError): ...
class DuplicateBindingError(ConfigurationError, ValueError): ...


class BindingWarning(Warning):
    """
    Base class of every recovered, per-binding fault.

    Outside shell mode the warning is emitted through the warnings module; in
    shell mode it is printed on the stderr console and parsing continues.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",
            "title": "bold #FFC2E0",
            "message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnsupportedTypeWarning(BindingWarning): ...
class ConversionFailedWarning(BindingWarning): ...
class SignatureMismatchWarning(BindingWarning): ...
class DelegatedCommandWarning(BindingWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via copy.replace before triggering.
    - errors are raised; warnings are warned (or printed in shell mode).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "BindingException",
    "ConfigurationError",
    "InvalidNameError",
    "DuplicateBindingError",
    "BindingWarning",
    "UnsupportedTypeWarning",
    "ConversionFailedWarning",
    "SignatureMismatchWarning",
    "DelegatedCommandWarning",
    "trigger",
    "getdoc",
)
