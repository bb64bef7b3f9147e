"""
flagbind tokenizer: match raw arguments against the known flag names.

Classification
- A token that starts with the marker (default "-") and has something after
  it is a Switch; its name is the text after the marker ("-width" -> "width").
- Everything else, the lone marker "-" included, is a Value.

Matching (single left-to-right scan with an index cursor)
- known argument switch: peek the next token; a Value is consumed as the
  argument's value (cursor += 2), otherwise the argument is recorded without a
  value (cursor += 1). A value therefore never starts with the marker.
- known command switch: presence only, never consumes a value.
- a name known as both an argument and a command does both.
- anything else is ignored; the vector may carry arguments for other consumers.
- a repeated argument keeps the last value given; a later occurrence without a
  value does not erase an earlier one.

    >>> tokenize(["-count", "-name", "bob"], {"name", "count"}, ())
    Matches(values=mappingproxy({'count': None, 'name': 'bob'}), triggered=frozenset())
"""
from types import MappingProxyType
from typing import NamedTuple


class Switch(NamedTuple):
    name: str
    token: str


class Value(NamedTuple):
    text: str


class Matches(NamedTuple):
    """
    Result of tokenize().

    - values: argument name -> raw text, or None when the flag had no value.
    - triggered: names of the command flags present in the input.
    """
    values: MappingProxyType
    triggered: frozenset


def classify(token, /, prefix="-"):
    """
    Classify one raw token as a Switch or a Value.
    """
    if len(token) > len(prefix) and token.startswith(prefix):
        return Switch(token[len(prefix):], token)
    return Value(token)


def tokenize(args, arguments, commands, /, prefix="-"):
    """
    Scan `args` and collect the argument values and command triggers.

    Parameters
    - args: Sequence[str], the raw argument vector (without the program name).
    - arguments: Container[str], known argument names.
    - commands: Container[str], known command names.
    - prefix: str, the flag marker.

    Returns
    - Matches
    """
    values = {}
    triggered = set()

    index = 0
    while index < len(args):
        token = classify(args[index], prefix)
        index += 1

        match token:
            case Switch(name=name):
                if name in commands:
                    triggered.add(name)
                if name not in arguments:
                    continue
                if index < len(args) and isinstance(following := classify(args[index], prefix), Value):
                    values[name] = following.text
                    index += 1
                else:
                    values.setdefault(name, None)
            case Value():
                # unconsumed values belong to other consumers
                pass

    return Matches(MappingProxyType(values), frozenset(triggered))


__all__ = (
    "Switch",
    "Value",
    "Matches",
    "classify",
    "tokenize",
)
