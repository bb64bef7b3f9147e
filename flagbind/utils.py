"""
flagbind utilities shared by the bindings, discovery and binder layers.

- Unset: the "no value given" marker, used where None is a real value
  (an Argument default, a reader result).
- coalesce(value, default): materialize Unset.
- rename(name): decorator naming generated functions.
- mirror(name): read-only property over "_{name}".

    >>> coalesce(Unset, 8)
    8
    >>> coalesce(None, 8) is None
    True
"""
from collections.abc import Mapping, Sequence, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker. There is exactly one instance per process; it is
    falsy, prints as "Unset" and survives copy and pickle as itself.
    """
    __slots__ = ()

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = object.__new__(cls)
        return cls._instance

    def __init_subclass__(cls, **options):
        raise TypeError("UnsetType cannot be subclassed")

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __reduce__(self):
        # pickled by reference to the module global
        return "Unset"

    # `str | Unset` builds the union with UnsetType, for isinstance() checks.
    def __or__(self, other, /):
        return UnsetType | other

    def __ror__(self, other, /):
        return other | UnsetType


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Return `default` when `object` is Unset, else `object` (None included).
    """
    if object is Unset:
        return default
    return object


def rename(name, /):
    """
    Decorator setting __name__ and __qualname__ of a generated function, so
    tracebacks and reprs show `name` instead of the enclosing factory's locals.
    """
    if not isinstance(name, str):
        raise TypeError("rename() argument must be a string")

    def decorator(function, /):
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


def mirror(name, /):
    """
    Read-only property returning `self._{name}`.

    Lists, dicts and sets come back as tuple, MappingProxyType and frozenset
    so callers cannot mutate the owner's state through the property.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")
    attribute = "_" + name

    @rename(name)
    def getter(self):
        match value := getattr(self, attribute):
            case str():
                return value
            case Mapping():
                return MappingProxyType(value)
            case Set():
                return frozenset(value)
            case Sequence():
                return tuple(value)
        return value

    return property(getter)


__all__ = (
    "Unset",
    "UnsetType",
    "coalesce",
    "rename",
    "mirror",
)
