from __future__ import annotations
from typing import Any, TypeVar

from collections.abc import Mapping, Sequence
from functools import reduce
from types import MappingProxyType

from parcomb import *

_I = TypeVar("_I")
_O = TypeVar("_O")
_E = TypeVar("_E")

# numbers

digit = char_in(const.DECIMAL, "Expected a digit.").map(int).named("digit")
"""A single decimal digit, as an `int`."""

def _digits(chars: frozenset[str], msg: str) -> StringParser[str]:
    return repeat1(char_in(chars, msg)).map("".join)

def _to_int(pair: tuple[Maybe[str], tuple[str, int]]) -> int:
    sign, (digits, base) = pair
    return int(sign.value_or("") + digits, base)

def integer_number(base: int = 0) -> StringParser[int]:
    """
    An optionally negative integer.

    If `base` is 0, the base is interpreted from the string.
    - `0b`: Binary
    - `0o`: Octal
    - `0x`: Hexadecimal
    - Otherwise decimal.
    """
    if base == 0:
        body = oneof(
            literal("0b").after(_digits(const.BINARY, "Expected a binary digit after 0b.")).map(lambda d: (d, 2)),
            literal("0o").after(_digits(const.OCTAL, "Expected an octal digit after 0o.")).map(lambda d: (d, 8)),
            anycase("0x").after(_digits(const.HEXADECIMAL, "Expected a hexadecimal digit after 0x.")).map(lambda d: (d, 16)),
            _digits(const.DECIMAL, "Expected a digit.").map(lambda d: (d, 10)),
        )
    elif base in const.DIGITS_OF_BASE:
        body = _digits(const.DIGITS_OF_BASE[base], f"Expected a base {base} digit.").map(lambda d: (d, base))
    else:
        raise ValueError(f"Unsupported base: {base}")
    return literal("-").optional().and_(body).map(_to_int).named("integer")

float_number = regex(
    r"-?(?:\d+(?:\.(?:\d+(?:[eE][+-]?\d+)?|[eE][+-]?\d+)|[eE][+-]?\d+)|\.\d+(?:[eE][+-]?\d+)?)"
).map(lambda m: float(m.group())).named("float")
"""A float. Needs either a `.` or an exponent, so plain integers don't match."""

def _check_byte(n: int) -> Either[ParseFailure, int]:
    if 0 <= n <= 255:
        return Value(n)
    return Error(ParseFailure(f"{n} doesn't fit in a byte."))

byte = integer_number(10).flat_map(_check_byte).named("byte")

# words and whitespace

identifier = (
    char_in(const.ALPHABETIC | {"_"}, "Expected an identifier.")
    .and_(char_in(const.ALNUM | {"_"}).loop())
    .map(lambda pair: pair[0] + "".join(pair[1]))
    .named("identifier")
)

ws0 = char_in(const.WHITESPACES).loop().map("".join).named("ws0")
"""Zero or more whitespaces. Never fails."""

ws1 = repeat1(char_in(const.WHITESPACES, "Expected whitespace.")).map("".join).named("ws1")
"""One or more whitespaces."""

def token(parser: StringParser[_O]) -> StringParser[_O]:
    """Skips the whitespace after `parser`."""
    return parser.before(ws0)

def separated(parser: Parser[_I, _O, _E], separator: Parser[_I, Any, _E]) -> Parser[_I, list[_O], _E]:
    """
    Zero or more matches of `parser` with `separator` between them. Never fails.

    A trailing separator isn't consumed.
    """
    some = parser.and_(separator.after(parser).loop()).map(lambda pair: [pair[0], *pair[1]])
    return some.optional().map(lambda found: found.value_or([]))

# quoted string

def _decode_hex(code: str) -> Either[ParseFailure, str]:
    if all(c in const.HEXADECIMAL for c in code):
        return Value(chr(int(code, base=16)))
    return Error(ParseFailure("Expected 4 hexadecimal characters after unicode escape sequence."))

unicode_escape = take(4).flat_map(_decode_hex).named("unicode_escape")
"""The four hex digits after `\\u`."""

def _replaced(sequence: str, replacement: str) -> StringParser[str]:
    return literal(sequence).map(lambda _: replacement)

def _not(*values: str) -> StringParser[None]:
    return inverted(literal(*values), ParseFailure(f"Unexpected `{values[0]}`."))

def quoted_string(
    *,
    start: Sequence[str] = ('"', "'"),
    end: Sequence[str] = ('"', "'"),
    escape: str = '\\',
    custom_escapes: Mapping[str, str] = const.GENERAL_ESCAPES,
    advanced_escapes: Mapping[str, StringParser[str]] = MappingProxyType({"u": unicode_escape}),
) -> StringParser[str]:
    """
    A quoted string with escape sequences. Outputs the contents with the escapes resolved.

    `start[i]` is closed by `end[i]`.
    `advanced_escapes` maps the character after `escape` to the parser for the rest of the sequence.
    Once that character matched, the sequence must be valid, or the string fails to parse.
    An escape character followed by anything else is kept as that character.
    """
    if len(start) != len(end):
        raise ValueError("The number of starting quotes and ending quotes don't match.")
    if len(start) <= 0:
        raise ValueError("At least one quote required.")
    fallback = take(1) if not advanced_escapes else _not(*advanced_escapes).after(take(1))
    escapes = reduce(
        Parser.flat_or,
        [
            *(_replaced(sequence, replacement) for sequence, replacement in custom_escapes.items()),
            *(literal(key).after(parser) for key, parser in advanced_escapes.items()),
            fallback,
        ],
    )
    escaped = literal(escape).after(escapes)
    def quoted(opening: str, closing: str) -> StringParser[str]:
        char = escaped.flat_or(_not(closing, escape).after(take(1)))
        return literal(opening).after(char.loop().map("".join)).before(literal(closing))
    return reduce(Parser.flat_or, [quoted(s, e) for s, e in zip(start, end)]).named("quoted_string")

def raw_quoted_string(
    *,
    start: Sequence[str] = ('r"', "r'"),
    end: Sequence[str] = ('"', "'"),
) -> StringParser[str]:
    """A quoted string without escape sequences."""
    if len(start) != len(end):
        raise ValueError("The number of starting quotes and ending quotes don't match.")
    if len(start) <= 0:
        raise ValueError("At least one quote required.")
    def quoted(opening: str, closing: str) -> StringParser[str]:
        char = _not(closing).after(take(1))
        return literal(opening).after(char.loop().map("".join)).before(literal(closing))
    return reduce(Parser.flat_or, [quoted(s, e) for s, e in zip(start, end)]).named("raw_quoted_string")
