"""
The implementations of the main classes.
"""

from __future__ import annotations
from typing import Any, Callable, Final, Generic, Literal, NoReturn, TypeVar

from abc import ABC, abstractmethod
from collections.abc import Container
from functools import cache
import logging
import re


log = logging.getLogger("parcomb")

debug: bool = False
"""
When `True`, parsers created by `Parser.named()` from then on log each attempt at DEBUG level.

```
import logging
logging.basicConfig(level=logging.DEBUG)
parcomb.main.debug = True
```
"""


_T = TypeVar("_T")
_E = TypeVar("_E")
_E2 = TypeVar("_E2")
_V = TypeVar("_V")
_W = TypeVar("_W")
_I = TypeVar("_I")
_I2 = TypeVar("_I2")
_O = TypeVar("_O")
_O2 = TypeVar("_O2")



class ParseError(Exception):
    """
    The exception that's raised when a failed result is unwrapped.

    The original error value is kept in `error`.
    """

    def __init__(self, error: object) -> None:
        super().__init__(str(error))
        self.error: Final[object] = error


class Either(ABC, Generic[_E, _V]):
    """
    The outcome of every parse. Either an `Error` or a `Value`.

    ```
    r = parser.parse(StringInput("abc"))
    if r:
        output, remainder = r.value     # `r` is a `Value`
    else:
        reason = r.error                # `r` is an `Error`
    ```

    Pattern matching works too:
    ```
    match parser.parse(StringInput("abc")):
        case Value((output, remainder)):
            ...
        case Error(reason):
            ...
    ```
    """
    __slots__ = ()

    @abstractmethod
    def is_error(self) -> bool:
        raise NotImplementedError

    def is_value(self) -> bool:
        return not self.is_error()

    @abstractmethod
    def map(self, f: Callable[[_V], _W]) -> Either[_E, _W]:
        """Applies `f` to the value. Errors are returned as-is."""
        raise NotImplementedError

    @abstractmethod
    def map_error(self, f: Callable[[_E], _E2]) -> Either[_E2, _V]:
        """Applies `f` to the error. Values are returned as-is."""
        raise NotImplementedError

    @abstractmethod
    def flat_map(self, f: Callable[[_V], Either[_E, _W]]) -> Either[_E, _W]:
        """Applies `f` to the value and returns its result. Errors are returned as-is."""
        raise NotImplementedError

    @abstractmethod
    def fold(self, on_error: Callable[[_E], _T], on_value: Callable[[_V], _T]) -> _T:
        """Collapses both cases into a single value."""
        raise NotImplementedError

    @abstractmethod
    def value_or(self, default: _T) -> _V | _T:
        raise NotImplementedError

    @abstractmethod
    def unwrap(self) -> _V:
        """Returns the value, or raises a `ParseError` holding the error."""
        raise NotImplementedError


class Error(Either[_E, Any]):
    """The failed case of `Either`. Always falsy."""
    __slots__ = ("error",)
    __match_args__ = ("error",)

    def __init__(self, error: _E) -> None:
        self.error: Final[_E] = error

    def is_error(self) -> bool:
        return True

    def map(self, f: Callable[[Any], _W]) -> Either[_E, _W]:
        return self

    def map_error(self, f: Callable[[_E], _E2]) -> Either[_E2, Any]:
        return Error(f(self.error))

    def flat_map(self, f: Callable[[Any], Either[_E, _W]]) -> Either[_E, _W]:
        return self

    def fold(self, on_error: Callable[[_E], _T], on_value: Callable[[Any], _T]) -> _T:
        return on_error(self.error)

    def value_or(self, default: _T) -> _T:
        return default

    def unwrap(self) -> NoReturn:
        raise ParseError(self.error)

    def __bool__(self) -> Literal[False]:
        return False

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Error) and self.error == other.error

    def __hash__(self) -> int:
        return hash((Error, self.error))

    def __repr__(self) -> str:
        return f"Error({self.error!r})"


class Value(Either[Any, _V]):
    """The successful case of `Either`. Always truthy."""
    __slots__ = ("value",)
    __match_args__ = ("value",)

    def __init__(self, value: _V) -> None:
        self.value: Final[_V] = value

    def is_error(self) -> bool:
        return False

    def map(self, f: Callable[[_V], _W]) -> Either[Any, _W]:
        return Value(f(self.value))

    def map_error(self, f: Callable[[Any], _E2]) -> Either[_E2, _V]:
        return self

    def flat_map(self, f: Callable[[_V], Either[_E, _W]]) -> Either[_E, _W]:
        return f(self.value)

    def fold(self, on_error: Callable[[Any], _T], on_value: Callable[[_V], _T]) -> _T:
        return on_value(self.value)

    def value_or(self, default: object) -> _V:
        return self.value

    def unwrap(self) -> _V:
        return self.value

    def __bool__(self) -> Literal[True]:
        return True

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Value) and self.value == other.value

    def __hash__(self) -> int:
        return hash((Value, self.value))

    def __repr__(self) -> str:
        return f"Value({self.value!r})"


class Maybe(ABC, Generic[_T]):
    """
    An optional value. Either `Some` or `Nothing`.

    Produced by `Parser.optional()`. Unlike `None`, `Some(None)` and `Nothing()` can be told apart.
    """
    __slots__ = ()

    @abstractmethod
    def is_present(self) -> bool:
        raise NotImplementedError

    def is_empty(self) -> bool:
        return not self.is_present()

    @abstractmethod
    def map(self, f: Callable[[_T], _W]) -> Maybe[_W]:
        raise NotImplementedError

    @abstractmethod
    def flat_map(self, f: Callable[[_T], Maybe[_W]]) -> Maybe[_W]:
        raise NotImplementedError

    @abstractmethod
    def value_or(self, default: _W) -> _T | _W:
        raise NotImplementedError


class Some(Maybe[_T]):
    """A present value. Truthy, even if the wrapped value isn't."""
    __slots__ = ("value",)
    __match_args__ = ("value",)

    def __init__(self, value: _T) -> None:
        self.value: Final[_T] = value

    def is_present(self) -> bool:
        return True

    def map(self, f: Callable[[_T], _W]) -> Maybe[_W]:
        return Some(f(self.value))

    def flat_map(self, f: Callable[[_T], Maybe[_W]]) -> Maybe[_W]:
        return f(self.value)

    def value_or(self, default: object) -> _T:
        return self.value

    def __bool__(self) -> Literal[True]:
        return True

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Some) and self.value == other.value

    def __hash__(self) -> int:
        return hash((Some, self.value))

    def __repr__(self) -> str:
        return f"Some({self.value!r})"


class Nothing(Maybe[Any]):
    """An absent value. Falsy. All instances are equal."""
    __slots__ = ()

    def is_present(self) -> bool:
        return False

    def map(self, f: Callable[[Any], _W]) -> Maybe[_W]:
        return self

    def flat_map(self, f: Callable[[Any], Maybe[_W]]) -> Maybe[_W]:
        return self

    def value_or(self, default: _W) -> _W:
        return default

    def __bool__(self) -> Literal[False]:
        return False

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Nothing)

    def __hash__(self) -> int:
        return hash(Nothing)

    def __repr__(self) -> str:
        return "Nothing()"



class Parser(Generic[_I, _O, _E]):
    """
    An immutable wrapper around a parse function.

    The function takes an input of type `I` and returns either `Error(e)`, or `Value((output, remainder))`.
    It must not mutate anything, and the remainder must never represent more input than it was given.

    Parsers don't do anything until called. Every combinator returns a new `Parser` and leaves its operands untouched, so parsers can be freely shared.

    ```
    digit = char_in(const.DECIMAL, "Expected a digit.").map(int)
    pair = digit.before(literal(",")).and_(digit)

    r = pair.parse(StringInput("1,2rest"))
    if r:
        (a, b), remainder = r.value     # a == 1, b == 2, remainder.rest() == "rest"
    else:
        print(r.error)
    ```
    """
    __slots__ = ("_fn", "name")

    def __init__(self, fn: Callable[[_I], Either[_E, tuple[_O, _I]]], name: str | None = None) -> None:
        self._fn: Final[Callable[[_I], Either[_E, tuple[_O, _I]]]] = fn
        self.name: Final[str | None] = name
        """Used for `repr()` and the debug log."""

    def parse(self, input: _I) -> Either[_E, tuple[_O, _I]]:
        """Runs the parser. Same as `Parser.__call__()`."""
        return self._fn(input)

    def __call__(self, input: _I) -> Either[_E, tuple[_O, _I]]:
        """Runs the parser. Same as `Parser.parse()`."""
        return self._fn(input)

    def unwrap(self, input: _I) -> tuple[_O, _I]:
        """Runs the parser and returns `(output, remainder)`, or raises a `ParseError` holding the error."""
        return self._fn(input).unwrap()

    def named(self, name: str) -> Parser[_I, _O, _E]:
        """
        Returns the same parser with a name attached.

        If `debug` is enabled when this is called, the returned parser logs every attempt at DEBUG level.
        """
        if not debug:
            return Parser(self._fn, name)
        fn = self._fn
        def logged(input: _I) -> Either[_E, tuple[_O, _I]]:
            log.debug("trying %s on %r", name, input)
            result = fn(input)
            if result:
                log.debug("matched %s, remainder %r", name, result.value[1])
            else:
                log.debug("failed %s: %r", name, result.error)
            return result
        return Parser(logged, name)

    def __repr__(self) -> str:
        if self.name is None:
            return "<Parser>"
        return f"<Parser {self.name}>"

    # transforms

    def map(self, f: Callable[[_O], _O2]) -> Parser[_I, _O2, _E]:
        """
        Applies `f` to the output. The remainder is left as-is and errors are propagated unchanged.

        `f` shouldn't fail. Use `flat_map()` for validation.
        """
        def parse(input: _I) -> Either[_E, tuple[_O2, _I]]:
            return self._fn(input).map(lambda success: (f(success[0]), success[1]))
        return Parser(parse)

    def flat_map(self, f: Callable[[_O], Either[_E, _O2]]) -> Parser[_I, _O2, _E]:
        """
        Applies `f` to the output, which may reject it.

        If `f` returns an `Error`, the whole parse fails with it, and the remainder is dropped.
        If it returns a `Value`, that value replaces the output and the remainder is kept.

        ```
        byte = integer.flat_map(lambda n: Value(n) if n <= 255 else Error(ParseFailure("Too large.")))
        ```
        """
        def parse(input: _I) -> Either[_E, tuple[_O2, _I]]:
            result = self._fn(input)
            if not result:
                return result
            output, remainder = result.value
            mapped = f(output)
            if not mapped:
                return mapped
            return Value((mapped.value, remainder))
        return Parser(parse)

    def local(self, f: Callable[[_I2], _I], g: Callable[[_I], _I2]) -> Parser[_I2, _O, _E]:
        """
        Adapts the parser to another input type.

        `f` converts the incoming input, and `g` converts the remainder back. Errors are propagated unchanged.
        `g(f(x))` should be equivalent to `x` for the remainders the parser actually returns. This isn't checked.
        """
        def parse(input: _I2) -> Either[_E, tuple[_O, _I2]]:
            return self._fn(f(input)).map(lambda success: (success[0], g(success[1])))
        return Parser(parse)

    # binary

    def and_(self, other: Parser[_I, _O2, _E]) -> Parser[_I, tuple[_O, _O2], _E]:
        """
        Sequence. Runs this parser, then `other` on the remainder. Outputs both outputs as a pair.

        The first parser to fail decides the error. If this parser fails, `other` isn't run.

        Same as `self & other`.
        """
        def parse(input: _I) -> Either[_E, tuple[tuple[_O, _O2], _I]]:
            first = self._fn(input)
            if not first:
                return first
            output1, remainder1 = first.value
            second = other._fn(remainder1)
            if not second:
                return second
            output2, remainder2 = second.value
            return Value(((output1, output2), remainder2))
        return Parser(parse)

    def __and__(self, other: Parser[_I, _O2, _E]) -> Parser[_I, tuple[_O, _O2], _E]:
        return self.and_(other)

    def or_(self, other: Parser[_I, _O2, _E]) -> Parser[_I, Either[_O2, _O], _E]:
        """
        Choice. Runs this parser, and if it fails, runs `other` on the same input.

        Output:
        - `Value(output)` if this parser matched. (`other` isn't run.)
        - `Error(output)` if `other` matched.

        If both fail, the error of `other` is returned. The first error is dropped.

        Same as `self | other`.
        """
        def parse(input: _I) -> Either[_E, tuple[Either[_O2, _O], _I]]:
            first = self._fn(input)
            if first:
                output1, remainder1 = first.value
                return Value((Value(output1), remainder1))
            second = other._fn(input)
            if not second:
                return second
            output2, remainder2 = second.value
            return Value((Error(output2), remainder2))
        return Parser(parse)

    def __or__(self, other: Parser[_I, _O2, _E]) -> Parser[_I, Either[_O2, _O], _E]:
        return self.or_(other)

    # derived

    def after(self, other: Parser[_I, _O2, _E]) -> Parser[_I, _O2, _E]:
        """Sequence, keeping only the output of `other`."""
        return self.and_(other).map(lambda pair: pair[1])

    def before(self, other: Parser[_I, _O2, _E]) -> Parser[_I, _O, _E]:
        """Sequence, keeping only the output of this parser."""
        return self.and_(other).map(lambda pair: pair[0])

    def flat_or(self, other: Parser[_I, _O, _E]) -> Parser[_I, _O, _E]:
        """Choice between two parsers with the same output type. The output isn't wrapped. Otherwise same as `or_()`."""
        return self.or_(other).map(lambda either: either.fold(_identity, _identity))

    def optional(self) -> Parser[_I, Maybe[_O], _E]:
        """
        Never fails.

        Outputs `Some(output)` if this parser matched, otherwise `Nothing()` without consuming anything.
        """
        return self.map(Some).flat_or(succeed(Nothing()))

    # iteration

    def loop(self) -> Parser[_I, list[_O], _E]:
        """
        Runs this parser repeatedly until it fails, collecting the outputs. Never fails.

        The remainder is wherever the failing attempt started.

        Doesn't recurse, so it's fine with any number of repetitions.
        Will never return if this parser can succeed without consuming anything, such as `p.optional().loop()`.
        """
        def parse(input: _I) -> Either[_E, tuple[list[_O], _I]]:
            outputs: list[_O] = []
            remainder = input
            while True:
                result = self._fn(remainder)
                if not result:
                    return Value((outputs, remainder))
                output, remainder = result.value
                outputs.append(output)
        return Parser(parse)


def _identity(value: _T) -> _T:
    return value



def succeed(value: _O = None) -> Parser[Any, _O, Any]:
    """A parser that always succeeds with `value`, consuming nothing."""
    return Parser(lambda input: Value((value, input)))

def fail(error: _E) -> Parser[Any, Any, _E]:
    """A parser that always fails with `error`."""
    return Parser(lambda input: Error(error))

def lazy(factory: Callable[[], Parser[_I, _O, _E]]) -> Parser[_I, _O, _E]:
    """
    Defers building a parser until it's first run. For recursive grammars.

    ```
    def _nested():
        return literal("(").after(nested.optional()).before(literal(")"))
    nested = lazy(_nested)
    ```
    """
    build = cache(factory)
    return Parser(lambda input: build().parse(input))

def seq(*parsers: Parser[_I, Any, _E]) -> Parser[_I, tuple[Any, ...], _E]:
    """
    All the given parsers must match in sequence for the parser to succeed.

    Outputs a flat tuple of all the outputs.
    """
    if len(parsers) < 2:
        raise ValueError("At least two parsers required.")
    combined: Parser[_I, tuple[Any, ...], _E] = parsers[0].map(lambda output: (output,))
    for parser in parsers[1:]:
        combined = combined.and_(parser).map(lambda pair: (*pair[0], pair[1]))
    return combined

def oneof(*parsers: Parser[_I, _O, _E]) -> Parser[_I, _O, _E]:
    """
    Attempts to match any of the parsers, in sequence, until one matches.

    If none match, fails with the error of the last parser.
    """
    if len(parsers) < 2:
        raise ValueError("At least two parsers required.")
    combined = parsers[0]
    for parser in parsers[1:]:
        combined = combined.flat_or(parser)
    return combined

def repeat1(parser: Parser[_I, _O, _E]) -> Parser[_I, list[_O], _E]:
    """Like `Parser.loop()`, but the first attempt must match."""
    return parser.and_(parser.loop()).map(lambda pair: [pair[0], *pair[1]])

def inverted(parser: Parser[_I, Any, _E], error: _E) -> Parser[_I, None, _E]:
    """
    Succeeds without consuming if `parser` fails, and fails with `error` if it matches.

    ```
    not_quote = inverted(literal('"'), ParseFailure("Unexpected quote."))
    ```
    """
    def parse(input: _I) -> Either[_E, tuple[None, _I]]:
        if parser.parse(input):
            return Error(error)
        return Value((None, input))
    return Parser(parse)

def lookahead(parser: Parser[_I, _O, _E]) -> Parser[_I, _O, _E]:
    """Matches without advancing. Outputs the output of `parser`."""
    return Parser(lambda input: parser.parse(input).map(lambda success: (success[0], input)))



class StringInput:
    """
    An immutable position in a string.

    Moving forward returns a new `StringInput`, so failed attempts can't leave anything behind.
    """
    __slots__ = ("src", "pos")

    def __init__(self, src: str, pos: int = 0) -> None:
        if pos < 0:
            raise ValueError("Position can't be negative.")
        self.src: Final[str] = src
        """The string that's being parsed."""
        self.pos: Final[int] = pos
        """The current position."""

    def __len__(self) -> int:
        """The amount of characters left."""
        return max(len(self.src) - self.pos, 0)

    def __bool__(self) -> bool:
        """Whether there are any characters left to parse. The opposite of `is_eof()`"""
        return self.pos < len(self.src)

    def has_chars(self, amount: int) -> bool:
        """Whether there are at least that many characters left."""
        if amount < 0:
            raise ValueError("Amount can't be negative.")
        return self.pos+amount <= len(self.src)

    def is_eof(self) -> bool:
        """Whether the end of the input has been reached."""
        return self.pos >= len(self.src)

    def peek(self, amount: int) -> str | None:
        """
        Retrieves the specified amount of characters.

        If there aren't enough characters, returns `None`.
        """
        if not self.has_chars(amount):
            return None
        return self.src[self.pos:self.pos+amount]

    def advance(self, amount: int) -> StringInput:
        if amount < 0:
            raise ValueError("Amount can't be negative.")
        return StringInput(self.src, self.pos+amount)

    def take(self, amount: int) -> tuple[str, StringInput] | None:
        """
        Retrieves the specified amount of characters, along with the position after them.

        If there aren't enough characters, returns `None`.
        """
        if not self.has_chars(amount):
            return None
        return self.src[self.pos:self.pos+amount], StringInput(self.src, self.pos+amount)

    def rest(self) -> str:
        """The characters left."""
        return self.src[self.pos:]

    def __eq__(self, other: object) -> bool:
        return isinstance(other, StringInput) and self.pos == other.pos and self.src == other.src

    def __hash__(self) -> int:
        return hash((self.src, self.pos))

    def __repr__(self) -> str:
        return f"StringInput({self.rest()[:20]!r} at {self.pos})"


class ParseFailure:
    """
    The error value of the string parsers.

    `pos` is `None` for failures that don't point at the input, such as rejections from `Parser.flat_map()`.
    """
    __slots__ = ("msg", "pos")

    def __init__(self, msg: str | None = None, pos: int | None = None) -> None:
        self.msg: Final[str | None] = msg
        """The reason for the failure."""
        self.pos: Final[int | None] = pos
        """The position of the failure."""

    def error(self) -> ParseError:
        """Converts this to a ParseError."""
        return ParseError(self)

    def __bool__(self) -> Literal[False]:
        return False

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ParseFailure) and self.msg == other.msg and self.pos == other.pos

    def __hash__(self) -> int:
        return hash((self.msg, self.pos))

    def __str__(self) -> str:
        msg = "Parse failure." if self.msg is None else self.msg
        if self.pos is None:
            return msg
        return f"{msg} (at position {self.pos})"

    def __repr__(self) -> str:
        return f"ParseFailure({self.msg!r}, {self.pos!r})"


StringParser = Parser[StringInput, _O, ParseFailure]


def literal(*values: str) -> StringParser[str]:
    """
    Matches any of the given strings, starting from the first. Case sensitive.

    Outputs the matched string.
    """
    if len(values) <= 0:
        raise ValueError("At least one literal required.")
    expected = " or ".join(f"`{value}`" for value in values)
    def parse(si: StringInput) -> Either[ParseFailure, tuple[str, StringInput]]:
        for value in values:
            if si.peek(len(value)) == value:
                return Value((value, si.advance(len(value))))
        return Error(ParseFailure(f"Expected {expected}.", si.pos))
    return Parser(parse)

def anycase(*values: str) -> StringParser[str]:
    """
    Matches any of the given strings, starting from the first. Non case sensitive.

    Outputs the text as it appears in the input.
    """
    if len(values) <= 0:
        raise ValueError("At least one literal required.")
    expected = " or ".join(f"`{value}`" for value in values)
    def parse(si: StringInput) -> Either[ParseFailure, tuple[str, StringInput]]:
        for value in values:
            text = si.peek(len(value))
            if text is not None and text.lower() == value.lower():
                return Value((text, si.advance(len(value))))
        return Error(ParseFailure(f"Expected {expected}.", si.pos))
    return Parser(parse)

def satisfy(predicate: Callable[[str], bool], msg: str | None = None) -> StringParser[str]:
    """Matches a single character that `predicate` accepts."""
    def parse(si: StringInput) -> Either[ParseFailure, tuple[str, StringInput]]:
        taken = si.take(1)
        if taken is None:
            return Error(ParseFailure(msg or "Unexpected end of input.", si.pos))
        char, remainder = taken
        if not predicate(char):
            return Error(ParseFailure(msg or f"Unexpected character `{char}`.", si.pos))
        return Value((char, remainder))
    return Parser(parse)

def char_in(chars: Container[str], msg: str | None = None) -> StringParser[str]:
    """Matches a single character from `chars`."""
    return satisfy(lambda char: char in chars, msg)

def regex(pattern: str | re.Pattern[str], flags: int | re.RegexFlag = 0) -> StringParser[re.Match[str]]:
    """
    Matches the regex at the current position.

    Outputs the `re.Match` object.
    """
    compiled = re.compile(pattern, flags)
    def parse(si: StringInput) -> Either[ParseFailure, tuple[re.Match[str], StringInput]]:
        m = compiled.match(si.src, si.pos)
        if m is None:
            return Error(ParseFailure(f"Expected a match for /{compiled.pattern}/.", si.pos))
        return Value((m, StringInput(si.src, m.end())))
    return Parser(parse)

def take(amount: int) -> StringParser[str]:
    """Matches exactly `amount` characters, whatever they are."""
    if amount < 0:
        raise ValueError("Amount can't be negative.")
    def parse(si: StringInput) -> Either[ParseFailure, tuple[str, StringInput]]:
        taken = si.take(amount)
        if taken is None:
            return Error(ParseFailure(f"Expected {amount} more characters.", si.pos))
        return Value(taken)
    return Parser(parse)

def _eof(si: StringInput) -> Either[ParseFailure, tuple[None, StringInput]]:
    if si.is_eof():
        return Value((None, si))
    return Error(ParseFailure("Expected the end of input.", si.pos))

eof: Final[StringParser[None]] = Parser(_eof, "eof")
"""A pre-defined parser (not a factory) that only matches at the end of input."""
