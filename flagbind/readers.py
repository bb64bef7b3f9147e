"""
flagbind type readers: the conversion registry.

Overview
- A type reader is a plain callable `reader(text) -> value` for exactly one
  semantic type. The default readers are total over every string: empty or
  unparsable input yields a documented default instead of raising.

    | type    | empty / unparsable | otherwise                          |
    |---------|--------------------|------------------------------------|
    | str     | the input itself   | the input unchanged                |
    | int     | 0                  | [+-]digits, ASCII only, stripped   |
    | float   | 0.0                | decimal or exponent form, ASCII    |
    | bool    | False              | "true"/"false", case-insensitive   |
    | Byte    | 0                  | an integer in 0..255               |

- TypeReaders maps semantic types to readers. It is mutable at runtime:
  register() inserts or replaces (last writer wins), unregister() removes.
- Enumerations are never registered directly. resolve() reads the enum's
  underlying representation (int for IntEnum/IntFlag or int-valued enums,
  str for StrEnum) and reinterprets the result through the enum. Values that
  are not members are kept as the raw underlying value (no bounds checks).

Quick example
    >>> readers = TypeReaders()
    >>> readers.lookup(int)("abc")
    0
    >>> readers.register(complex, complex)
    >>> readers.lookup(complex)("1+2j")
    (1+2j)
"""
import builtins
import enum
import re
from collections.abc import Mapping
from typing import NewType

from .utils import Unset, rename

Byte = NewType("Byte", int)
"""
Semantic type for an unsigned 8-bit value (0..255), stored as an int.
"""


def read_string(input, /):
    return input


_INTEGER = re.compile(r"[+-]?[0-9]+", re.ASCII)
_FLOAT = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?", re.ASCII)


def read_integer(input, /):
    # ASCII digits only; no "_" separators, no other scripts.
    if _INTEGER.fullmatch(text := input.strip()):
        return int(text)
    return 0


def read_float(input, /):
    if _FLOAT.fullmatch(text := input.strip()):
        return float(text)
    return 0.0


def read_boolean(input, /):
    # Only the invariant literals are accepted; everything else is False.
    return bool(input) and input.strip().lower() == "true"


def read_byte(input, /):
    value = read_integer(input)
    return Byte(value) if 0 <= value <= 255 else Byte(0)


def _underlying(type, /):
    """
    Return the representation type an enumeration is read through.
    """
    for base in (int, str, float):
        if issubclass(type, base):
            return base
    for member in type:
        return builtins.type(member.value)
    return int


def _reinterpret(type, reader, /):
    """
    Wrap `reader` so its result is mapped onto the enumeration `type`.
    """

    @rename("read_" + type.__name__.lower())
    def reinterpret(input, /):
        if (value := reader(input)) is None:
            return None
        try:
            return type(value)
        except ValueError:
            # Out-of-range values are accepted as-is.
            return value

    return reinterpret


class TypeReaders(Mapping):
    """
    Mapping of semantic types to type readers.

    Construction
    - TypeReaders() seeds the defaults (str, int, float, bool, Byte).
    - TypeReaders(mapping) starts from the given readers only.

    Mutation
    - register(type, reader): insert or replace; last writer wins.
    - unregister(type): remove; missing types are ignored.

    Lookup
    - lookup(type): the registered reader or None.
    - resolve(type): like lookup(), but enum-aware (see module docs).

    Not safe for concurrent mutation; configure it before parsing.
    """

    def __init__(self, readers=Unset, /):
        self._readers = {}
        if readers is Unset:
            readers = DEFAULTS
        if not isinstance(readers, Mapping):
            raise TypeError("TypeReaders() argument must be a mapping")
        for type, reader in readers.items():
            self.register(type, reader)

    def __getitem__(self, type, /):
        return self._readers[type]

    def __iter__(self):
        return iter(self._readers)

    def __len__(self):
        return len(self._readers)

    def __repr__(self):
        return "TypeReaders(%s)" % ", ".join(getattr(type, "__name__", repr(type)) for type in self._readers)

    def register(self, type, reader, /):
        """
        Insert or replace the reader for `type`.

        Raises
        - TypeError: when `type` is unhashable or `reader` is not callable.
        """
        try:
            hash(type)
        except TypeError:
            raise TypeError("register() first argument must be hashable") from None
        if not callable(reader):
            raise TypeError("register() second argument must be callable")
        self._readers[type] = reader

    def unregister(self, type, /):
        self._readers.pop(type, None)

    def lookup(self, type, /):
        try:
            return self._readers.get(type)
        except TypeError:
            return None

    def resolve(self, type, /):
        """
        Return a converter for `type`, or None when nothing can read it.

        A reader registered for the exact type always wins. Otherwise, for
        enumerations, the reader of the underlying representation is wrapped
        so its result is reinterpreted through the enum.
        """
        if (reader := self.lookup(type)) is not None:
            return reader
        if isinstance(type, builtins.type) and issubclass(type, enum.Enum):
            if (reader := self.lookup(_underlying(type))) is not None:
                return _reinterpret(type, reader)
        return None

    def copy(self):
        return TypeReaders(self._readers)


DEFAULTS = {
    str: read_string,
    int: read_integer,
    float: read_float,
    bool: read_boolean,
    Byte: read_byte,
}


__all__ = (
    "Byte",
    "TypeReaders",
    "read_string",
    "read_integer",
    "read_float",
    "read_boolean",
    "read_byte",
)
