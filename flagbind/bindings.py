r"""
flagbind binding declarations.

Overview
- Declarations
  • Argument[_T]: a class-level field bound to a value-bearing flag
    (e.g., `-width 1280`). It is a descriptor: reading the attribute yields the
    current value; the binder writes converted values through Argument.write().
  • Command: a zero-argument action bound to a presence-only flag
    (e.g., `-reset`). Calling the Command calls the wrapped callback.

- Decorators
  • @command(name, descr=""): wrap a function into a Command.

- Introspection & representation
  • BindingType metaclass provides stable __repr__/__rich_repr__ and exposes
    selected fields via read-only properties declared in __introspectable__.

Metadata (sanitized on construction)
- name: str, preserved verbatim; empty or whitespace-only names raise
  InvalidNameError (a ConfigurationError and a ValueError).
- descr: str, preserved verbatim; defaults to "".

Field type resolution (Argument.type)
- explicit `type=...` wins;
- otherwise the owner's annotation for the attribute (ClassVar[...] unwrapped;
  string annotations are evaluated against the class and its module, and one
  that names an unreachable local is ignored);
- otherwise type(default) when a non-None default is given;
- otherwise str.

Quick example:
    >>> from flagbind import Argument, command
    >>> class Window:
    ...     width: int = Argument("width", "window width in pixels", default=1280)
    ...     title: str = Argument("title")
    ...
    >>> @command("reset", "restore the factory settings")
    ... def reset(): ...
    ...
"""
import builtins
import functools
import inspect
import operator
import re
import sys
import typing
from inspect import Parameter, Signature

from .faults import FaultCode, InvalidNameError
from .utils import *


class BindingType(type):
    """
    Metaclass giving binding declarations a uniform, introspectable shape.

    Responsibilities
    - Derive __typename__ from the class name (camel-case split with hyphens)
      for consistent wording in messages.
    - Expose every name listed in __introspectable__ as a read-only property
      mirroring the private "_{name}" field.
    - Provide stable __repr__/__rich_repr__ implementations; __displayable__
      (if set) narrows which properties are shown.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - argument(name='width', descr='window width', type=<class 'int'>, default=1280)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate the shared binding metadata in place.

    - name: must be a string that is not empty after trimming. It is kept
      verbatim (no trimming) because flags are matched against it exactly.
    - descr: must be a string; kept verbatim, empty by default.

    Raises
    - TypeError: when name or descr is not a string.
    - InvalidNameError: when name is empty or whitespace-only.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not name.strip():
        raise InvalidNameError(
            f"{cls.__typename__} name cannot be empty",
            title="invalid binding name",
            code=FaultCode.INVALID_NAME,
            hint=f"give the {cls.__typename__} a non-empty name (for example: {cls.__name__}(\"width\"))",
            name=name,
        )

    if not isinstance(metadata["descr"], str):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")


def _diagnose(callback, /):
    """
    Internal: explain why `callback` is not a zero-argument action, or None.

    A command callback must be callable with no arguments (parameters with
    defaults and variadic parameters are fine) and must not declare a return
    annotation other than None. Callables without an introspectable signature
    are trusted.
    """
    try:
        signature = inspect.signature(callback)
    except (TypeError, ValueError):
        return None

    try:
        signature.bind()
    except TypeError:
        required = [
            parameter.name for parameter in signature.parameters.values()
            if parameter.default is Parameter.empty
            and parameter.kind not in (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD)
        ]
        return "it requires %s %s" % (
            "parameter" if len(required) == 1 else "parameters",
            ", ".join(map(repr, required))
        )

    if signature.return_annotation not in (Signature.empty, None, "None"):
        return "it declares a return type of %r" % (signature.return_annotation,)

    return None


def _evaluate(annotation, owner, /):
    """
    Internal: evaluate one string annotation (`from __future__ import annotations`).

    Names are looked up in the owner's class namespace, then in its module.
    Names local to an enclosing function are out of reach; the annotation is
    then returned unchanged.
    """
    module = sys.modules.get(owner.__module__)
    try:
        return eval(annotation, dict(vars(module)) if module else {}, dict(vars(owner)))
    except (NameError, AttributeError):
        return annotation


class Argument[_T](metaclass=BindingType):
    """
    Class-level field bound to a value-bearing flag.

    The descriptor keeps a single, class-wide value (static field semantics):
    reading `Owner.attribute` or `instance.attribute` returns it, assigning
    through an instance writes it. Assigning on the class itself replaces the
    descriptor, as with any class attribute.

    Module-level arguments are supported as well; there the Argument object is
    the global itself and its value is read through `.value`.

    Properties
    - name, descr, default, owner, attribute: read-only metadata.
    - type: the resolved field type (see module docs).
    - metavar: "<NAME>" label used in listings.
    - value: the current value.
    """

    __introspectable__ = (
        "name",
        "descr",
        "default",
        "owner",
        "attribute",
    )
    __displayable__ = (
        "name",
        "descr",
        "type",
        "default",
    )

    def __init__(self, name, descr="", /, *, type=Unset, default=None):
        """
        Construct an Argument.

        Parameters
        - name: str
          Flag name without the marker (`"width"` binds `-width`).
        - descr: str
          Short description used in listings.
        - type: Unset | Any (keyword-only)
          Semantic type looked up in the reader registry. Resolved lazily
          when Unset.
        - default: Any (keyword-only)
          Initial value of the field.
        """
        metadata = {
            "name": name,
            "descr": descr,
        }
        _sanitize_metadata(builtins.type(self), metadata)

        for key, object in metadata.items():
            setattr(self, "_" + key, object)

        self._type = type
        self._default = default
        self._value = default
        self._owner = None
        self._attribute = None

    def __set_name__(self, owner, attribute):
        if self._owner is not None:
            raise TypeError(
                f"argument {self.name!r} is already bound to {self._owner.__qualname__}.{self._attribute}"
            )
        self._owner = owner
        self._attribute = attribute

    def __get__(self, instance, owner=None):
        return self._value

    def __set__(self, instance, value):
        self.write(value)

    @property
    def type(self):
        if self._type is not Unset:
            return self._type
        if self._owner is not None:
            hint = inspect.get_annotations(self._owner).get(self._attribute, Unset)
            if isinstance(hint, str):
                hint = _evaluate(hint, self._owner)
            if typing.get_origin(hint) is typing.ClassVar:
                hint, = typing.get_args(hint)
            # unresolvable string annotations fall back to the default's type
            if hint is not Unset and not isinstance(hint, str):
                return hint
        if self._default is not None:
            return builtins.type(self._default)
        return str

    @property
    def metavar(self):
        return "<%s>" % self._name.upper()

    @property
    def value(self):
        return self._value

    def write(self, value, /):
        """
        Store `value` into the bound field.
        """
        self._value = value

    def reset(self):
        """
        Restore the field to its declared default.
        """
        self._value = self._default


class Command(metaclass=BindingType):
    """
    Zero-argument action bound to a presence-only flag.

    The callback is checked before dispatch; a callback that cannot be called
    without arguments (or declares a non-None return type) is reported through
    `mismatch` and skipped by the binder instead of failing the whole run.

    Properties
    - name, descr, callback: read-only metadata.
    - mismatch: None for a valid action, otherwise a short explanation.
    """

    __introspectable__ = (
        "name",
        "descr",
        "callback",
    )

    def __init__(self, callback, name, descr="", /):
        """
        Construct a Command.

        Parameters
        - callback: Callable[[], None]
          The action invoked when the flag is present.
        - name: str
          Flag name without the marker (`"reset"` binds `-reset`).
        - descr: str
          Short description used in listings.
        """
        if not callable(callback):
            raise TypeError(f"{type(self).__typename__} callback must be callable")

        metadata = {
            "name": name,
            "descr": descr,
        }
        _sanitize_metadata(type(self), metadata)

        for key, object in metadata.items():
            setattr(self, "_" + key, object)

        self._callback = callback
        functools.update_wrapper(self, callback, updated=())

    def __call__(self):
        return self._callback()

    @property
    def mismatch(self):
        return _diagnose(self._callback)


def command(name, descr="", /):
    """
    Decorator factory for declaring a command binding.

    Usage
        @command("reset", "restore the factory settings")
        def reset(): ...

    Behavior
    - Validates name/descr eagerly: `command("")` raises InvalidNameError
      before anything is decorated.
    - Returns a decorator that wraps the callable into a Command.

    Returns
    - Callable[[Callable[[], None]], Command]
    """
    _sanitize_metadata(Command, {"name": name, "descr": descr})

    @rename("command")
    def wrapper(callback, /):
        if isinstance(callback, staticmethod | classmethod):
            callback = callback.__func__
        if not callable(callback):
            raise TypeError("@command() must be applied to a callable")
        return Command(callback, name, descr)

    return wrapper


__all__ = (
    # Classes (declarations)
    "Argument",
    "Command",

    # Decorators
    "command",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in star-imports. Not part of the public API.
del BindingType
