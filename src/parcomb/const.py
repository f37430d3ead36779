"""
General use constants.
"""

from __future__ import annotations
from typing import Final

from collections.abc import Mapping
from types import MappingProxyType

WHITESPACES: Final[frozenset[str]] = frozenset({" ", "\t", "\n", "\r", "\f"})
BINARY: Final[frozenset[str]] = frozenset("01")
OCTAL: Final[frozenset[str]] = frozenset("01234567")
DECIMAL: Final[frozenset[str]] = frozenset("0123456789")
HEXADECIMAL: Final[frozenset[str]] = DECIMAL | frozenset("abcdefABCDEF")
ALPHABETIC: Final[frozenset[str]] = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ")
ALNUM: Final[frozenset[str]] = ALPHABETIC | DECIMAL

DIGITS_OF_BASE: Final[Mapping[int, frozenset[str]]] = MappingProxyType({
    2: BINARY,
    8: OCTAL,
    10: DECIMAL,
    16: HEXADECIMAL,
})
"""The digits accepted by `general.integer_number()` for each supported base."""

GENERAL_ESCAPES: Final[Mapping[str, str]] = MappingProxyType({
    'b': '\b',
    'f': '\f',
    'n': '\n',
    'r': '\r',
    't': '\t',
})
