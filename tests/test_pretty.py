"""Tests for the pretty-printer."""

import math

import pytest

from paren_tools import Config, Symbol, read, read_values, render_pretty
from paren_tools.config import PrettyConfig
from paren_tools.sexp import FloatValue, ListValue, PrettyOutputStream, StringValue, SymbolValue, format_float
from paren_tools.sexp.pretty import LINE, group, nest, render, text

SYMBOL_FORM = '(symbol (lib_id "Device:R") (at 100.0 50.0 0) (property "Reference" "R1"))'


class TestFormatFloat:
    """Canonical float text."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (1.0, "1.0"),
            (-2.0, "-2.0"),
            (0.0, "0.0"),
            (-0.0, "-0.0"),
            (1.5, "1.5"),
            (0.1, "0.1"),
            (1e20, "100000000000000000000.0"),
            (1e-05, "1.0e-05"),
            (-2.5e-07, "-2.5e-07"),
            (math.nan, "#nan"),
            (math.inf, "#+inf"),
            (-math.inf, "#-inf"),
        ],
    )
    def test_format(self, value, expected):
        assert format_float(value) == expected

    @pytest.mark.parametrize("value", [1.0, -0.0, 0.1, 1e20, 1e-05, 123456.789, 5e-324])
    def test_reads_back_exactly(self, value):
        """Formatted floats read back as the same float, never as integers."""
        result = read(float, format_float(value))
        assert result == value
        assert math.copysign(1.0, result) == math.copysign(1.0, value)

    def test_non_finite_read_back(self):
        """Non-finite floats keep their classification."""
        assert math.isnan(read(float, render_pretty(math.nan)))
        assert read(float, render_pretty(math.inf)) == math.inf
        assert read(float, render_pretty(-math.inf)) == -math.inf


class TestRenderAtoms:
    """Rendering scalar values."""

    def test_scalars(self):
        """Every atom kind renders in its surface syntax."""
        assert render_pretty([1, -2, 2.0, True, False]) == "1\n-2\n2.0\n#t\n#f"

    def test_string_escaping(self):
        assert render_pretty('a"b\n') == '"a\\"b\\n"'

    def test_symbol_escaping(self):
        assert render_pretty(Symbol("plain")) == "plain"
        assert render_pretty(Symbol("has space")) == "|has space|"

    def test_value_variants(self):
        assert render_pretty(StringValue("s")) == '"s"'
        assert render_pretty(SymbolValue("s")) == "s"
        assert render_pretty(FloatValue(3.0)) == "3.0"


class TestLayout:
    """Line breaking and indentation."""

    def test_fits_on_one_line(self):
        """Lists that fit stay flat."""
        assert render_pretty(read_values(SYMBOL_FORM)) == SYMBOL_FORM

    def test_breaks_when_too_wide(self):
        """A list that does not fit puts each child on its own line."""
        expected = (
            "(symbol\n"
            '  (lib_id "Device:R")\n'
            "  (at 100.0 50.0 0)\n"
            '  (property "Reference" "R1"))'
        )
        assert render_pretty(read_values(SYMBOL_FORM), width=40) == expected

    def test_nested_breaks(self):
        """Each nesting level indents two more columns."""
        expected = "(a\n  (b\n    c\n    d\n    e\n    f)\n  g)"
        assert render_pretty(read_values("(a (b c d e f) g)"), width=10) == expected

    def test_exact_width(self):
        """A list exactly as wide as the limit stays flat."""
        values = read_values("(a b)")
        assert render_pretty(values, width=5) == "(a b)"
        assert render_pretty(values, width=4) == "(a\n  b)"

    def test_top_level_forms_on_separate_lines(self):
        assert render_pretty(read_values("a b (c)")) == "a\nb\n(c)"

    def test_empty_lists(self):
        assert render_pretty(read_values("()")) == "()"
        assert render_pretty(read_values("(())")) == "(())"
        assert render_pretty(ListValue(())) == "()"

    def test_empty_document(self):
        assert render_pretty([]) == ""

    def test_width_from_config(self):
        """The default width comes from the [pretty] section."""
        config = Config(pretty=PrettyConfig(width=4))
        assert render_pretty(read_values("(a b)"), config=config) == "(a\n  b)"

    def test_indent_from_config(self):
        config = Config(pretty=PrettyConfig(width=4, indent=4))
        assert render_pretty(read_values("(a b)"), config=config) == "(a\n    b)"

    def test_explicit_width_overrides_config(self):
        config = Config(pretty=PrettyConfig(width=4))
        assert render_pretty(read_values("(a b)"), width=80, config=config) == "(a b)"


class TestRoundTrip:
    """Rendered values read back unchanged."""

    @pytest.mark.parametrize("width", [1, 20, 80, 200])
    def test_sample_document(self, sample_document, width):
        values = read_values(sample_document)
        assert read_values(render_pretty(values, width=width)) == values

    @pytest.mark.parametrize(
        "source",
        [
            '(a "b\\tc" |d e| #t #f 1 -2 3.5 #nan #+inf #-inf)',
            "(((())))",
            '(|| "" |12| |#t|)',
            "(x 1.0e-05 1.0e300 -0.0)",
        ],
    )
    def test_literals(self, source):
        values = read_values(source)
        assert read_values(render_pretty(values, width=8)) == values


class TestDocAlgebra:
    """Using the document primitives directly."""

    def test_group_flat(self):
        assert render(group(text("a") + LINE + text("b")), 3) == "a b"

    def test_group_broken(self):
        assert render(group(text("a") + LINE + text("b")), 2) == "a\nb"

    def test_nest(self):
        assert render(group(nest(2, text("a") + LINE + text("b"))), 2) == "a\n  b"

    def test_ungrouped_lines_break(self):
        """Lines outside any group always break."""
        assert render(text("a") + LINE + text("b"), 80) == "a\nb"

    def test_doc_render_method(self):
        assert group(text("x") + LINE + text("y")).render(10) == "x y"


class TestPrettyOutputStream:
    """Building documents through the output stream."""

    def test_write_list_closes_on_error(self):
        """A failing callback still closes its list."""
        out = PrettyOutputStream()

        def failing(o):
            o.write_symbol("a")
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            out.write_list(failing)
        out.write_int(2)
        assert render(out.finish(), 80) == "(a)\n2"
