"""Tests for reading typed values from text."""

import math
from typing import List, Optional

import pytest

from paren_tools import Config, Symbol, Value, read, read_values
from paren_tools.config import ReadConfig
from paren_tools.exceptions import (
    ExpectedWhitespaceError,
    InvalidSyntaxError,
    ParenToolsError,
    ReadError,
    UnexpectedCloseError,
    UnexpectedFormError,
    UnexpectedTokenError,
)
from paren_tools.sexp.lexer import Span


class TestReadScalars:
    """Reading built-in atom shapes."""

    def test_int(self):
        assert read(int, "42") == 42

    def test_string(self):
        assert read(str, '"hi there"') == "hi there"

    def test_symbol(self):
        """Symbols read as Symbol instances."""
        value = read(Symbol, "abc")
        assert value == "abc"
        assert isinstance(value, Symbol)

    def test_bool(self):
        assert read(bool, "#f") is False

    def test_float(self):
        assert read(float, "2.5") == 2.5
        assert read(float, "#-inf") == -math.inf
        assert math.isnan(read(float, "#nan"))

    def test_int_is_not_float(self):
        """Integers do not read as floats."""
        with pytest.raises(UnexpectedTokenError, match="expected float, found int"):
            read(float, "1")


class TestReadComposite:
    """Reading sequence and optional shapes."""

    def test_list(self):
        """A list shape reads every top-level form."""
        assert read(list[int], "1 2 3") == [1, 2, 3]
        assert read(List[int], "") == []

    def test_tuple(self):
        """A fixed tuple reads one form per element."""
        assert read(tuple[int, str], '1 "a"') == (1, "a")

    def test_variadic_tuple(self):
        assert read(tuple[Symbol, ...], "a b c") == ("a", "b", "c")

    def test_optional(self):
        """Optional shapes read None at the end of input."""
        assert read(Optional[int], "") is None
        assert read(Optional[int], "5") == 5
        assert read(int | None, "") is None

    def test_values(self):
        """read_values is read(list[Value], ...)."""
        text = '(a 1) "b"'
        assert read_values(text) == read(list[Value], text)

    def test_unsupported_shape(self):
        """Shapes without a reader are rejected."""
        with pytest.raises(TypeError):
            read(dict, "1")


class TestReadErrors:
    """Error reporting from read()."""

    def test_trailing_form(self):
        """Forms left after the shape is read are an error."""
        with pytest.raises(UnexpectedFormError) as exc_info:
            read(int, "1 2")
        err = exc_info.value
        assert err.span == Span(2, 3)
        assert err.context["line"] == 1
        assert err.context["column"] == 3

    def test_type_mismatch(self):
        """A form of the wrong kind reports what was expected."""
        with pytest.raises(UnexpectedTokenError, match="expected integer, found string"):
            read(int, '"a"')

    def test_empty_input(self):
        """Reading a value from empty input fails at the end of the list."""
        with pytest.raises(UnexpectedTokenError, match="found end of list") as exc_info:
            read(int, "")
        assert exc_info.value.span == Span(0, 0)

    def test_line_and_column(self):
        """Errors point at the line and column of the offending text."""
        with pytest.raises(UnexpectedTokenError) as exc_info:
            read(list[int], "1\n2\n  x")
        err = exc_info.value
        assert err.context["line"] == 3
        assert err.context["column"] == 3
        assert err.context["text"] == "'x'"
        assert "line: 3" in str(err)

    def test_lexer_errors_get_positions(self):
        """Lexing errors carry source positions too."""
        with pytest.raises(UnexpectedCloseError) as exc_info:
            read_values("(a\n  b))")
        assert exc_info.value.context["line"] == 2
        assert exc_info.value.context["column"] == 5

    def test_error_hierarchy(self):
        """Every reading failure is a ParenToolsError."""
        with pytest.raises(ReadError):
            read_values("#t#f")
        with pytest.raises(ParenToolsError):
            read(int, "x")


class TestReadConfig:
    """The [read] configuration section."""

    def test_strict_whitespace_default(self):
        """Touching forms are rejected by default."""
        with pytest.raises(ExpectedWhitespaceError):
            read_values("()()")

    def test_strict_whitespace_disabled(self):
        """Touching forms are accepted when the check is off."""
        config = Config(read=ReadConfig(strict_whitespace=False))
        assert len(read_values("()()", config=config)) == 2

    def test_max_depth(self):
        """Nesting deeper than max_depth is rejected."""
        config = Config(read=ReadConfig(max_depth=2))
        assert len(read_values("((a)) (b)", config=config)) == 2
        with pytest.raises(InvalidSyntaxError):
            read_values("(((a)))", config=config)
