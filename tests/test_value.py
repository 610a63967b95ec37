"""Tests for the universal value tree."""

import math

import pytest

from paren_tools import read_values, render_pretty
from paren_tools.exceptions import UnexpectedFormError, UnexpectedTokenError
from paren_tools.sexp import (
    BoolValue,
    FloatValue,
    IntValue,
    ListValue,
    StringValue,
    Symbol,
    SymbolValue,
    Value,
    ValueInputStream,
    ValueOutputStream,
    from_values,
    to_values,
)
from paren_tools.sexp.lexer import Span

NAN = float("nan")


class TestValueEquality:
    """Structural equality and hashing."""

    def test_nan_equals_nan(self):
        """NaN floats are structurally equal."""
        assert FloatValue(NAN) == FloatValue(float("nan"))
        assert ListValue((FloatValue(NAN),)) == ListValue((FloatValue(NAN),))

    def test_signed_zero(self):
        """-0.0 and 0.0 are equal and hash alike."""
        assert FloatValue(-0.0) == FloatValue(0.0)
        assert hash(FloatValue(-0.0)) == hash(FloatValue(0.0))

    def test_string_is_not_symbol(self):
        """Strings and symbols with the same text differ."""
        assert StringValue("a") != SymbolValue("a")

    def test_int_is_not_float(self):
        """Integers and floats of the same magnitude differ."""
        assert IntValue(1) != FloatValue(1.0)
        assert BoolValue(True) != IntValue(1)

    def test_hashable(self):
        """Equal values collapse in sets."""
        values = {FloatValue(NAN), FloatValue(NAN), StringValue("a"), StringValue("a"), SymbolValue("a")}
        assert len(values) == 3

    def test_not_equal_to_plain_python(self):
        """Values never compare equal to unwrapped Python values."""
        assert IntValue(1) != 1
        assert StringValue("a") != "a"


class TestValueOrdering:
    """Total order over values."""

    def test_variant_rank(self):
        """Variants sort List < String < Symbol < Bool < Int < Float."""
        values = [
            FloatValue(1.0),
            IntValue(1),
            BoolValue(True),
            SymbolValue("a"),
            StringValue("a"),
            ListValue(()),
        ]
        assert sorted(values) == list(reversed(values))

    def test_nan_sorts_last(self):
        """NaN is greater than every other float."""
        floats = [FloatValue(NAN), FloatValue(math.inf), FloatValue(-1.0)]
        ordered = sorted(floats)
        assert ordered[0] == FloatValue(-1.0)
        assert ordered[1] == FloatValue(math.inf)
        assert math.isnan(ordered[2].value)
        assert FloatValue(math.inf) < FloatValue(NAN)

    def test_lists_compare_elementwise(self):
        """Lists compare by their items, shorter prefix first."""
        short = ListValue((IntValue(1),))
        long = ListValue((IntValue(1), IntValue(2)))
        assert short < long
        assert ListValue((IntValue(2),)) > long


class TestValueConstruction:
    """Variant construction rules."""

    def test_list_items_become_tuple(self):
        """ListValue stores its items as a tuple."""
        value = ListValue([IntValue(1), IntValue(2)])
        assert value.items == (IntValue(1), IntValue(2))
        assert len(value) == 2
        assert value[1] == IntValue(2)
        assert list(value) == [IntValue(1), IntValue(2)]

    def test_symbol_value_holds_symbol(self):
        """SymbolValue wraps its text in Symbol."""
        assert isinstance(SymbolValue("x").value, Symbol)

    def test_int_range(self):
        """IntValue is limited to signed 64 bits."""
        IntValue(2**63 - 1)
        with pytest.raises(ValueError):
            IntValue(2**63)

    def test_value_is_abstract(self):
        """Only the variants can be instantiated."""
        with pytest.raises(TypeError):
            Value()


class TestToValues:
    """Collecting written values."""

    def test_scalars_and_sequences(self):
        """Built-in values map onto value variants, sequences spliced."""
        assert to_values([1, "a", Symbol("b"), True, 2.5]) == [
            IntValue(1),
            StringValue("a"),
            SymbolValue("b"),
            BoolValue(True),
            FloatValue(2.5),
        ]

    def test_value_writes_itself(self):
        """Values write back as the same value."""
        value = ListValue((SymbolValue("x"), ListValue(())))
        assert to_values(value) == [value]

    def test_none_writes_nothing(self):
        """None produces no values."""
        assert to_values(None) == []

    def test_unsupported_type(self):
        """Objects without a representation are rejected."""
        with pytest.raises(TypeError):
            to_values({"a": 1})

    def test_output_stream_nesting(self):
        """write_list builds nested lists and returns the callback result."""
        out = ValueOutputStream()

        def inner(o):
            o.write_symbol("x")
            return "done"

        def outer(o):
            o.write_int(1)
            return o.write_list(inner)

        assert out.write_list(outer) == "done"
        assert out.finish() == [ListValue((IntValue(1), ListValue((SymbolValue("x"),))))]

    def test_write_list_closes_on_error(self):
        """A failing callback still closes its list."""
        out = ValueOutputStream()

        def failing(o):
            o.write_int(1)
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            out.write_list(failing)
        out.write_int(2)
        assert out.finish() == [ListValue((IntValue(1),)), IntValue(2)]


class TestFromValues:
    """Reading shapes from in-memory values."""

    def test_list_of_ints(self):
        """A list shape consumes every value."""
        assert from_values(list[int], [IntValue(1), IntValue(2)]) == [1, 2]

    def test_type_mismatch(self):
        """A value of the wrong kind is rejected."""
        with pytest.raises(UnexpectedTokenError, match="expected integer, found string"):
            from_values(int, [StringValue("a")])

    def test_leftover_values(self):
        """Values left after the shape is read are rejected."""
        with pytest.raises(UnexpectedFormError) as exc_info:
            from_values(int, [IntValue(1), IntValue(2)])
        assert exc_info.value.span == Span(1, 2)

    def test_variant_class_checks_kind(self):
        """Reading through a variant class checks the variant."""
        assert from_values(StringValue, [StringValue("a")]) == StringValue("a")
        with pytest.raises(UnexpectedTokenError, match="expected string, found int"):
            from_values(StringValue, [IntValue(1)])

    def test_round_trip(self, sample_document):
        """Values read from text survive to_values/from_values."""
        values = read_values(sample_document)
        assert from_values(list[Value], to_values(values)) == values

    def test_index_spans(self):
        """Spans of in-memory values are item indices."""
        stream = ValueInputStream([IntValue(1), ListValue((IntValue(2),))])
        stream.next()
        assert stream.span() == Span(0, 1)
        child = stream.next().value
        assert child.parent_span() == Span(1, 2)
        assert stream.is_end()


class TestReadValues:
    """Building values from text."""

    def test_nested(self):
        """Lists and atoms map onto variants."""
        assert read_values('(a (b 1) "c") #t') == [
            ListValue(
                (
                    SymbolValue("a"),
                    ListValue((SymbolValue("b"), IntValue(1))),
                    StringValue("c"),
                )
            ),
            BoolValue(True),
        ]

    def test_deep_nesting(self):
        """Deeply nested lists are read without recursion."""
        depth = 5000
        values = read_values("(" * depth + ")" * depth)
        value = values[0]
        for _ in range(depth - 1):
            assert len(value) == 1
            value = value[0]
        assert len(value) == 0

    def test_deep_nesting_compare_and_write(self):
        """Deeply nested values compare, hash and write back without recursion."""
        depth = 5000
        source = "(" * depth + ")" * depth
        values = read_values(source)
        again = read_values(source)

        assert values == again
        assert hash(values[0]) == hash(again[0])
        assert not values[0] < again[0]
        assert values[0] != read_values("(" * (depth - 1) + ")" * (depth - 1))[0]

        assert to_values(values) == values
        rendered = render_pretty(values)
        assert rendered == source
        assert read_values(rendered) == values

    def test_special_floats(self):
        """Non-finite floats read as float values."""
        nan, pos, neg = read_values("#nan #+inf #-inf")
        assert nan == FloatValue(NAN)
        assert pos == FloatValue(math.inf)
        assert neg == FloatValue(-math.inf)
