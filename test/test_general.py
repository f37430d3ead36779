"""
Tests for the general purpose parsers
"""

import pytest

from parcomb import Error, ParseFailure, StringInput, Value, literal, take
from parcomb.general import (
    byte,
    digit,
    float_number,
    identifier,
    integer_number,
    quoted_string,
    raw_quoted_string,
    unicode_escape,
    separated,
    token,
    ws0,
    ws1,
)


def output_of(parser, text):
    output, _ = parser.unwrap(StringInput(text))
    return output


def rest_after(parser, text):
    _, remainder = parser.unwrap(StringInput(text))
    return remainder.rest()


class TestNumbers:
    """digit, integer_number(), float_number and byte"""

    def test_digit(self):
        assert digit.parse(StringInput("7a")) == Value((7, StringInput("7a", 1)))

    @pytest.mark.parametrize("text, expected", [
        ("42", 42),
        ("-42", -42),
        ("0b101", 5),
        ("0o17", 15),
        ("0x1F", 31),
        ("0X1f", 31),
        ("-0xff", -255),
        ("007", 7),
    ])
    def test_integer_with_detected_base(self, text, expected):
        assert output_of(integer_number(), text) == expected

    def test_integer_stops_at_non_digits(self):
        assert rest_after(integer_number(), "12ab") == "ab"

    def test_integer_prefix_without_digits_falls_back_to_zero(self):
        assert output_of(integer_number(), "0b2") == 0
        assert rest_after(integer_number(), "0b2") == "b2"

    def test_integer_with_explicit_base(self):
        assert output_of(integer_number(16), "ff") == 255
        assert output_of(integer_number(2), "1102") == 6

    def test_integer_failure(self):
        assert integer_number().parse(StringInput("abc")) == Error(ParseFailure("Expected a digit.", 0))
        assert not integer_number().parse(StringInput("-"))

    def test_unsupported_base(self):
        with pytest.raises(ValueError):
            integer_number(7)

    @pytest.mark.parametrize("text, expected", [
        ("1.5", 1.5),
        ("-0.25", -0.25),
        (".5", 0.5),
        ("1e3", 1000.0),
        ("2.5E-1", 0.25),
        ("1.e2", 100.0),
    ])
    def test_float(self, text, expected):
        assert output_of(float_number, text) == expected

    @pytest.mark.parametrize("text", ["12", "1.", "abc", "."])
    def test_float_needs_a_point_or_exponent(self, text):
        assert not float_number.parse(StringInput(text))

    def test_byte_in_range(self):
        assert output_of(byte, "255") == 255
        assert output_of(byte, "0") == 0

    def test_byte_out_of_range(self):
        assert byte.parse(StringInput("256")) == Error(ParseFailure("256 doesn't fit in a byte."))
        assert byte.parse(StringInput("-1")) == Error(ParseFailure("-1 doesn't fit in a byte."))


class TestWords:
    """identifier, whitespace, token() and separated()"""

    def test_identifier(self):
        assert output_of(identifier, "_foo1 bar") == "_foo1"
        assert rest_after(identifier, "_foo1 bar") == " bar"

    def test_identifier_cannot_start_with_digit(self):
        assert identifier.parse(StringInput("1abc")) == Error(ParseFailure("Expected an identifier.", 0))

    def test_ws0_never_fails(self):
        assert output_of(ws0, "abc") == ""
        assert output_of(ws0, " \t\nx") == " \t\n"

    def test_ws1_needs_whitespace(self):
        assert output_of(ws1, "  x") == "  "
        assert ws1.parse(StringInput("x")) == Error(ParseFailure("Expected whitespace.", 0))

    def test_token_skips_trailing_whitespace(self):
        assert output_of(token(identifier), "foo   bar") == "foo"
        assert rest_after(token(identifier), "foo   bar") == "bar"

    def test_separated(self):
        parser = separated(digit, literal(","))
        assert output_of(parser, "1,2,3") == [1, 2, 3]
        assert rest_after(parser, "1,2,3,") == ","
        assert output_of(parser, "x") == []
        assert rest_after(parser, "x") == "x"


class TestQuotedStrings:
    """quoted_string() and raw_quoted_string()"""

    @pytest.mark.parametrize("text, expected", [
        ('"abc"', "abc"),
        ("'abc'", "abc"),
        ('""', ""),
        ('"a\\nb"', "a\nb"),
        ('"tab\\there"', "tab\there"),
        ('"\\u0041BC"', "ABC"),
        ('"say \\"hi\\""', 'say "hi"'),
        ('"\\q"', "q"),
        ("'it\"s'", 'it"s'),
    ])
    def test_quoted_string(self, text, expected):
        assert output_of(quoted_string(), text) == expected

    def test_quoted_string_stops_at_closing_quote(self):
        assert rest_after(quoted_string(), '"a" + "b"') == ' + "b"'

    @pytest.mark.parametrize("text", ['"abc', "abc", '"abc\'', "", '"\\u12zz"', '"\\u00"', '"abc\\"'])
    def test_quoted_string_failures(self, text):
        assert not quoted_string().parse(StringInput(text))

    def test_custom_quotes(self):
        parser = quoted_string(start=["<<"], end=[">>"])
        assert output_of(parser, "<<a > b>>") == "a > b"

    def test_unicode_escape_needs_four_hex_digits(self):
        assert unicode_escape.parse(StringInput("12zz")) == Error(
            ParseFailure("Expected 4 hexadecimal characters after unicode escape sequence.")
        )
        assert output_of(unicode_escape, "00e9") == "\u00e9"

    def test_custom_advanced_escapes(self):
        parser = quoted_string(advanced_escapes={"x": take(2).map(lambda code: chr(int(code, 16)))})
        assert output_of(parser, '"\\x41\\u"') == "Au"

    def test_needs_a_quote(self):
        with pytest.raises(ValueError):
            quoted_string(start=[], end=[])
        with pytest.raises(ValueError):
            raw_quoted_string(start=[], end=[])

    def test_mismatched_quotes(self):
        with pytest.raises(ValueError):
            quoted_string(start=['"'], end=['"', "'"])
        with pytest.raises(ValueError):
            raw_quoted_string(start=['r"'], end=[])

    def test_raw_quoted_string_keeps_escapes(self):
        assert output_of(raw_quoted_string(), 'r"a\\nb"') == "a\\nb"
        assert output_of(raw_quoted_string(), "r'x'") == "x"
        assert not raw_quoted_string().parse(StringInput('"x"'))
