"""
Universal s-expression value tree.

:class:`Value` is the "read anything" type: it reads any form and writes
back the same form, so it can stand in wherever the exact shape of the data
is not known in advance.

    ==================  ==========================
    Variant             Form
    ==================  ==========================
    ``ListValue``       ``(a b c)``
    ``StringValue``     ``"text"``
    ``SymbolValue``     ``name``
    ``BoolValue``       ``#t`` / ``#f``
    ``IntValue``        ``42``
    ``FloatValue``      ``4.2``
    ==================  ==========================

Values compare structurally. Strings and symbols with the same text are not
equal. Floats use a total order instead of IEEE comparison: every NaN equals
every other NaN and sorts above all other floats, so value trees holding NaN
still compare equal to themselves and can be sorted and hashed.
"""

from __future__ import annotations

import abc
import math
from dataclasses import dataclass
from functools import total_ordering
from typing import Any, ClassVar, Iterable, Iterator, List, Optional, Sequence, Tuple

from paren_tools.exceptions import UnexpectedTokenError

from .lexer import INT_MAX, INT_MIN, Span
from .protocol import (
    InputStream,
    OutputStream,
    Symbol,
    TokenTree,
    TreeKind,
    from_parens,
    to_parens,
)

# Marks the end of a list's items in a sort key; sorts below every form.
_LIST_END = (-1,)


@total_ordering
class Value(abc.ABC):
    """
    Base class of all value variants.

    Variants are ordered List < String < Symbol < Bool < Int < Float, then by
    payload. Lists compare item by item, a shorter list sorting first.
    """

    _rank: ClassVar[int] = -1
    kind: ClassVar[str] = "value"

    @abc.abstractmethod
    def _payload(self) -> Any:
        """Payload compared between values of the same variant."""

    @abc.abstractmethod
    def to_parens(self, output: OutputStream) -> None:
        """Write this value into ``output``."""

    def sort_key(self) -> Tuple[Tuple[Any, ...], ...]:
        """
        Flat key implementing structural equality and the total order.

        Every form contributes ``(rank, payload)`` in pre-order, and every
        list is closed by an end marker. The tree is walked with an explicit
        stack, so deeply nested values compare and hash without recursion.
        """
        key: List[Tuple[Any, ...]] = []
        stack: List[Iterator[Value]] = [iter((self,))]
        while stack:
            item = next(stack[-1], None)
            if item is None:
                stack.pop()
                if stack:
                    key.append(_LIST_END)
                continue
            key.append((item._rank, item._payload()))
            if isinstance(item, ListValue):
                stack.append(iter(item.items))
        return tuple(key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return self.sort_key() == other.sort_key()

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __hash__(self) -> int:
        return hash(self.sort_key())

    @classmethod
    def from_parens(cls, input: InputStream) -> Value:
        """
        Read one form as a value.

        Reading through a variant class (``StringValue.from_parens``) also
        checks that the form is of that variant.
        """
        tree = input.next()
        if tree is None:
            raise UnexpectedTokenError(cls.kind, input.parent_span(), found="end of list")
        value = Value.from_tree(tree)
        if not isinstance(value, cls):
            raise UnexpectedTokenError(cls.kind, input.span(), found=value.kind)
        return value

    @staticmethod
    def from_tree(tree: TokenTree) -> Value:
        """
        Build a value from a token tree.

        Nested lists are collected with an explicit stack, so arbitrarily
        deep input does not recurse.
        """
        if tree.kind is not TreeKind.LIST:
            return _atom(tree)

        stack: List[Tuple[InputStream, List[Value]]] = [(tree.value, [])]
        while True:
            stream, items = stack[-1]
            child = stream.next()
            if child is None:
                stack.pop()
                done = ListValue(tuple(items))
                if not stack:
                    return done
                stack[-1][1].append(done)
            elif child.kind is TreeKind.LIST:
                stack.append((child.value, []))
            else:
                items.append(_atom(child))


@dataclass(frozen=True, eq=False)
class ListValue(Value):
    """Ordered list of values."""

    items: Tuple[Value, ...] = ()

    _rank: ClassVar[int] = 0
    kind: ClassVar[str] = "list"

    def __post_init__(self):
        if not isinstance(self.items, tuple):
            object.__setattr__(self, "items", tuple(self.items))

    def _payload(self) -> Any:
        # Items follow in the sort key
        return ()

    def __iter__(self) -> Iterator[Value]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index: int) -> Value:
        return self.items[index]

    def to_parens(self, output: OutputStream) -> None:
        # Nested lists are opened and closed from an explicit stack
        output.open_list()
        stack: List[Iterator[Value]] = [iter(self.items)]
        while stack:
            item = next(stack[-1], None)
            if item is None:
                stack.pop()
                output.close_list()
            elif isinstance(item, ListValue):
                output.open_list()
                stack.append(iter(item.items))
            else:
                item.to_parens(output)


@dataclass(frozen=True, eq=False)
class StringValue(Value):
    value: str

    _rank: ClassVar[int] = 1
    kind: ClassVar[str] = "string"

    def _payload(self) -> Any:
        return self.value

    def to_parens(self, output: OutputStream) -> None:
        output.write_string(self.value)


@dataclass(frozen=True, eq=False)
class SymbolValue(Value):
    value: Symbol

    _rank: ClassVar[int] = 2
    kind: ClassVar[str] = "symbol"

    def __post_init__(self):
        if not isinstance(self.value, Symbol):
            object.__setattr__(self, "value", Symbol(self.value))

    def _payload(self) -> Any:
        return str(self.value)

    def to_parens(self, output: OutputStream) -> None:
        output.write_symbol(self.value)


@dataclass(frozen=True, eq=False)
class BoolValue(Value):
    value: bool

    _rank: ClassVar[int] = 3
    kind: ClassVar[str] = "bool"

    def _payload(self) -> Any:
        return self.value

    def to_parens(self, output: OutputStream) -> None:
        output.write_bool(self.value)


@dataclass(frozen=True, eq=False)
class IntValue(Value):
    """Signed 64-bit integer."""

    value: int

    _rank: ClassVar[int] = 4
    kind: ClassVar[str] = "int"

    def __post_init__(self):
        if not INT_MIN <= self.value <= INT_MAX:
            raise ValueError(f"Integer {self.value} does not fit in 64 bits")

    def _payload(self) -> Any:
        return self.value

    def to_parens(self, output: OutputStream) -> None:
        output.write_int(self.value)


@dataclass(frozen=True, eq=False)
class FloatValue(Value):
    """64-bit float with NaN-aware equality and ordering."""

    value: float

    _rank: ClassVar[int] = 5
    kind: ClassVar[str] = "float"

    def _payload(self) -> Any:
        # NaN sorts above every other float and equals every NaN
        if math.isnan(self.value):
            return (1, 0.0)
        return (0, self.value)

    def to_parens(self, output: OutputStream) -> None:
        output.write_float(self.value)


_ATOM_VALUES = {
    TreeKind.STRING: StringValue,
    TreeKind.SYMBOL: SymbolValue,
    TreeKind.BOOL: BoolValue,
    TreeKind.INT: IntValue,
    TreeKind.FLOAT: FloatValue,
}


def _atom(tree: TokenTree) -> Value:
    return _ATOM_VALUES[tree.kind](tree.value)


class ValueOutputStream(OutputStream):
    """Output stream that collects everything written into values."""

    def __init__(self):
        self._stack: List[List[Value]] = []
        self._current: List[Value] = []

    def open_list(self) -> None:
        self._stack.append(self._current)
        self._current = []

    def close_list(self) -> None:
        items = self._current
        self._current = self._stack.pop()
        self._current.append(ListValue(tuple(items)))

    def write_string(self, string: str) -> None:
        self._current.append(StringValue(str(string)))

    def write_symbol(self, symbol: str) -> None:
        self._current.append(SymbolValue(Symbol(symbol)))

    def write_bool(self, value: bool) -> None:
        self._current.append(BoolValue(bool(value)))

    def write_int(self, value: int) -> None:
        self._current.append(IntValue(int(value)))

    def write_float(self, value: float) -> None:
        self._current.append(FloatValue(float(value)))

    def finish(self) -> List[Value]:
        """Values written at the top level."""
        return self._current


class ValueInputStream(InputStream):
    """
    Input stream over an in-memory sequence of values.

    There is no source text behind the values, so spans are item indices:
    ``span()`` of the third item of a list is ``Span(2, 3)`` and
    ``parent_span()`` is the index span of the enclosing list in its parent.
    """

    def __init__(self, values: Sequence[Value], parent_span: Optional[Span] = None):
        self._values = values
        self._pos = 0
        self._parent_span = parent_span if parent_span is not None else Span(0, len(values))
        self._cur_span = Span(0, 0)

    def peek(self) -> Optional[TokenTree]:
        if self._pos >= len(self._values):
            return None
        value = self._values[self._pos]
        if isinstance(value, ListValue):
            child = ValueInputStream(value.items, Span(self._pos, self._pos + 1))
            return TokenTree(TreeKind.LIST, child)
        return TokenTree(TreeKind(value.kind), value.value)

    def next(self) -> Optional[TokenTree]:
        tree = self.peek()
        if tree is None:
            return None
        self._cur_span = Span(self._pos, self._pos + 1)
        self._pos += 1
        return tree

    def next_stream(self) -> Optional[ValueInputStream]:
        if self._pos >= len(self._values):
            return None
        span = Span(self._pos, self._pos + 1)
        stream = ValueInputStream(self._values[self._pos : self._pos + 1], span)
        self._cur_span = span
        self._pos += 1
        return stream

    def span(self) -> Span:
        return self._cur_span

    def parent_span(self) -> Span:
        return self._parent_span

    def is_end(self) -> bool:
        return self._pos >= len(self._values)


def to_values(value: Any) -> List[Value]:
    """
    Write ``value`` through the visitor protocol and collect the result.

    Example::

        to_values([1, "a", Symbol("b")])
        # [IntValue(value=1), StringValue(value='a'), SymbolValue(value=Symbol('b'))]
    """
    output = ValueOutputStream()
    to_parens(value, output)
    return output.finish()


def from_values(shape: Any, values: Iterable[Value]) -> Any:
    """
    Read a value of the given shape from in-memory values.

    Raises:
        ParseError: If the values do not match the shape or some are left over
    """
    stream = ValueInputStream(list(values))
    result = from_parens(shape, stream)
    stream.expect_end()
    return result
