"""
Parser combinators.

A `Parser` wraps a function from an input to either `Error(error)` or `Value((output, remainder))`.
Parsers are immutable, and combining them builds new parsers without running anything.

See the `parcomb.general` module for general purpose parsers you can use as examples.

Defining parsers:
```
digit = char_in(const.DECIMAL, "Expected a digit.").map(int)
digits = digit.loop()                               # never fails
pair = digit.before(literal(",")).and_(digit)       # (int, int)
sign = literal("+").flat_or(literal("-")).optional()
small = digit.flat_map(lambda d: Value(d) if d < 5 else Error(ParseFailure("Too large.")))
```

Using parsers:
```
result = pair.parse(StringInput("1,2 rest"))
if result:
    output, remainder = result.value
else:
    ... # `result.error` is a `ParseFailure` object

output, remainder = pair.unwrap(StringInput("1,2"))   # raises `ParseError` on failure
```
"""

import parcomb.const as const
import parcomb.main
from parcomb.main import (
    ParseError,
    Either,
    Error,
    Value,
    Maybe,
    Some,
    Nothing,
    Parser,
    succeed,
    fail,
    lazy,
    seq,
    oneof,
    repeat1,
    inverted,
    lookahead,
    StringInput,
    ParseFailure,
    StringParser,
    literal,
    anycase,
    satisfy,
    char_in,
    regex,
    take,
    eof,
)
import parcomb.general as general
