"""
Shared parsers for the parcomb tests
"""

import pytest

from parcomb import Parser, Value, char_in, const


def _exploding(input):
    raise AssertionError(f"This parser must not run (got {input!r}).")


@pytest.fixture
def digit():
    """A single decimal digit, as an int"""
    return char_in(const.DECIMAL, "Expected a digit.").map(int)


@pytest.fixture
def exploding():
    """A parser that fails the test if it is ever invoked"""
    return Parser(_exploding)


@pytest.fixture
def recorder():
    """A parser that succeeds consuming nothing, and records every input it sees"""
    seen = []

    def parse(input):
        seen.append(input)
        return Value((None, input))

    return Parser(parse), seen
