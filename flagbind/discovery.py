"""
flagbind discovery: find the declared bindings.

Sources
- module: its globals (module-level Argument/Command objects) and every class
  the module defines, nested classes included.
- class: its own namespace and its nested classes. Inherited bindings belong
  to the class that declares them and are not repeated.
- str: a dotted module name, e.g. "game.settings"; it is imported and
  scanned as a module.
- Argument / Command: explicit registration of a single binding.
- any other iterable: each item is treated as a source.
- no source at all: every module currently in sys.modules.

Rules
- The same binding object reached through several sources (re-exports,
  explicit + module) is reported once, at its first position.
- Two distinct bindings of the same kind sharing a name raise
  DuplicateBindingError; arguments and commands do not share a namespace.
- Results keep discovery order.
"""
import builtins
import importlib
import sys
from collections.abc import Iterable
from types import ModuleType

from .bindings import Argument, Command
from .faults import FaultCode, DuplicateBindingError, getdoc


def _isinstance(object, cls, /):
    # type() instead of isinstance(): lazy proxies in foreign modules may raise on __class__.
    return issubclass(builtins.type(object), cls)


def _scan_class(cls, visited, /):
    if id(cls) in visited:
        return
    visited.add(id(cls))

    for object in list(vars(cls).values()):
        if _isinstance(object, staticmethod | classmethod):
            object = object.__func__
        if _isinstance(object, Argument | Command):
            yield object
        elif _isinstance(object, type) and object.__qualname__.startswith(cls.__qualname__ + "."):
            yield from _scan_class(object, visited)


def _scan_module(module, visited, /):
    if id(module) in visited:
        return
    visited.add(id(module))

    for object in list(vars(module).values()):
        if _isinstance(object, Argument | Command):
            yield object
        elif _isinstance(object, type) and getattr(object, "__module__", None) == module.__name__:
            yield from _scan_class(object, visited)


def _scan(source, visited, /):
    if _isinstance(source, Argument | Command):
        yield source
    elif _isinstance(source, ModuleType):
        yield from _scan_module(source, visited)
    elif _isinstance(source, type):
        yield from _scan_class(source, visited)
    elif _isinstance(source, str):
        try:
            module = importlib.import_module(source)
        except (ImportError, ValueError):
            raise TypeError(f"unable to import module {source!r}") from None
        yield from _scan_module(module, visited)
    elif _isinstance(source, Iterable):
        for item in source:
            yield from _scan(item, visited)
    else:
        raise TypeError(
            "discovery sources must be modules, classes, module names, bindings or iterables of those"
        )


def walk(*sources):
    """
    Yield every binding reachable from `sources`, each object once.

    With no sources, every loaded module (sys.modules) is scanned.
    """
    if not sources:
        sources = tuple(
            module for module in list(sys.modules.values()) if _isinstance(module, ModuleType)
        )

    seen = set()
    visited = set()
    for binding in _scan(sources, visited):
        if id(binding) in seen:
            continue
        seen.add(id(binding))
        yield binding


def _where(binding, /):
    """
    Describe where a binding is declared, for diagnostics.
    """
    if _isinstance(binding, Argument) and binding.owner is not None:
        return "%s.%s.%s" % (binding.owner.__module__, binding.owner.__qualname__, binding.attribute)
    if _isinstance(binding, Command):
        callback = binding.callback
        return "%s.%s" % (
            getattr(callback, "__module__", "?"), getattr(callback, "__qualname__", repr(callback))
        )
    return repr(binding)


def _collect(kind, sources, /):
    bindings = {}
    for binding in walk(*sources):
        if not _isinstance(binding, kind):
            continue
        if (other := bindings.get(binding.name)) is not None:
            raise DuplicateBindingError(
                "%s name %r is declared more than once" % (kind.__typename__, binding.name),
                title="duplicate binding name",
                code=FaultCode.DUPLICATE_BINDING,
                hint="rename one of %s and %s" % (_where(other), _where(binding)),
                docs=getdoc(FaultCode.DUPLICATE_BINDING),
                name=binding.name,
                kind=kind.__typename__,
                bindings=(other, binding),
            )
        bindings[binding.name] = binding
    return bindings


def discover_arguments(*sources):
    """
    Map argument names to their Argument bindings, in discovery order.

    Raises
    - DuplicateBindingError: two arguments share a name.
    - TypeError: an unsupported source, or a module name that fails to import.
    """
    return _collect(Argument, sources)


def discover_commands(*sources):
    """
    Map command names to their Command bindings, in discovery order.

    Raises
    - DuplicateBindingError: two commands share a name.
    - TypeError: an unsupported source, or a module name that fails to import.
    """
    return _collect(Command, sources)


__all__ = (
    "walk",
    "discover_arguments",
    "discover_commands",
)
