"""
Push/pull visitor protocol between host values and s-expressions.

Every value that can be written goes through an :class:`OutputStream`, and
every value that can be read comes from an :class:`InputStream`. Host types
never see a concrete tree type; they talk to whichever stream they are
handed, so the same ``to_parens`` method feeds the pretty-printer and the
``Value`` collector alike.

A class takes part in the protocol by defining either or both of::

    def to_parens(self, output: OutputStream) -> None: ...

    @classmethod
    def from_parens(cls, input: InputStream) -> Self: ...

Built-in shapes are handled by :func:`to_parens` and :func:`from_parens`:

    ========================  ===========================================
    Shape                     Form
    ========================  ===========================================
    ``str``                   ``"string"``
    ``Symbol``                ``symbol``
    ``bool``                  ``#t`` / ``#f``
    ``int``                   ``42`` (signed 64-bit)
    ``float``                 ``4.2``, ``#nan``, ``#+inf``, ``#-inf``
    ``list[T]``               every remaining form read as ``T``
    ``tuple[A, B]``           one ``A`` followed by one ``B``
    ``Optional[T]``           ``T``, or ``None`` at the end of the stream
    ========================  ===========================================

Sequences are spliced into the surrounding context rather than wrapped in a
list of their own; wrap them with ``output.write_list`` when a nested list
is wanted.
"""

from __future__ import annotations

import abc
import types
import typing
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Iterator, NamedTuple, Optional, TypeVar, Union

from paren_tools.exceptions import UnexpectedFormError, UnexpectedTokenError

if TYPE_CHECKING:
    from .lexer import Span

R = TypeVar("R")


class Symbol(str):
    """
    A bare identifier, as opposed to a quoted string.

    ``Symbol("name")`` writes as ``name`` while ``"name"`` writes as
    ``"name"``. Symbols compare equal to plain strings with the same text;
    use ``isinstance`` to tell them apart.
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return f"Symbol({str.__repr__(self)})"


class TreeKind(Enum):
    """Kinds of forms an input stream can yield."""

    LIST = "list"
    STRING = "string"
    SYMBOL = "symbol"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"


class TokenTree(NamedTuple):
    """
    One form pulled from an :class:`InputStream`.

    For ``TreeKind.LIST``, ``value`` is a child input stream positioned at
    the first element of the list. For atoms it is the decoded Python value.
    """

    kind: TreeKind
    value: Any

    @property
    def is_list(self) -> bool:
        return self.kind is TreeKind.LIST


class OutputStream(abc.ABC):
    """
    Push interface that s-expressions are written into.

    Implementations keep a stack of buffers: :meth:`open_list` pushes a
    fresh buffer and :meth:`close_list` pops it and wraps it as one list in
    the enclosing buffer.
    """

    @abc.abstractmethod
    def open_list(self) -> None:
        """Start a new list; following writes go into it."""

    @abc.abstractmethod
    def close_list(self) -> None:
        """Finish the innermost open list."""

    def write_list(self, f: Callable[[OutputStream], R]) -> R:
        """
        Write a list whose elements are written by ``f``.

        Opens a new list context, calls ``f`` with this stream, closes the
        context and returns whatever ``f`` returned. The context is closed
        even if ``f`` raises.
        """
        self.open_list()
        try:
            return f(self)
        finally:
            self.close_list()

    @abc.abstractmethod
    def write_string(self, string: str) -> None:
        """Write a string."""

    @abc.abstractmethod
    def write_symbol(self, symbol: str) -> None:
        """Write a symbol."""

    @abc.abstractmethod
    def write_bool(self, value: bool) -> None:
        """Write a boolean."""

    @abc.abstractmethod
    def write_int(self, value: int) -> None:
        """Write an integer."""

    @abc.abstractmethod
    def write_float(self, value: float) -> None:
        """Write a float."""


class InputStream(abc.ABC):
    """
    Pull interface that s-expressions are read from.

    A stream yields the sibling forms of one list (or of the top level) in
    order. Descending into a list is done through the child stream carried
    by a ``TreeKind.LIST`` token tree.
    """

    @abc.abstractmethod
    def peek(self) -> Optional[TokenTree]:
        """The next form without consuming it, or None at the end."""

    @abc.abstractmethod
    def next(self) -> Optional[TokenTree]:
        """Consume and return the next form, or None at the end."""

    @abc.abstractmethod
    def span(self) -> Span:
        """Span of the form most recently returned by :meth:`next`."""

    @abc.abstractmethod
    def parent_span(self) -> Span:
        """Span of the enclosing list, or of the whole input at the top level."""

    @abc.abstractmethod
    def is_end(self) -> bool:
        """True when every form of this stream has been consumed."""

    @abc.abstractmethod
    def next_stream(self) -> Optional[InputStream]:
        """
        Consume the next form and return a stream yielding only that form.

        Returns None at the end of the stream.
        """

    def expect_end(self) -> None:
        """
        Raise if any form is left in this stream.

        Raises:
            UnexpectedFormError: Pointing at the first leftover form
        """
        if not self.is_end():
            self.next()
            raise UnexpectedFormError(self.span())

    def __iter__(self) -> Iterator[TokenTree]:
        while True:
            tree = self.next()
            if tree is None:
                return
            yield tree


_ATOM_SHAPES = {
    str: (TreeKind.STRING, "string"),
    Symbol: (TreeKind.SYMBOL, "symbol"),
    bool: (TreeKind.BOOL, "boolean"),
    int: (TreeKind.INT, "integer"),
    float: (TreeKind.FLOAT, "float"),
}


def expect(input: InputStream, kind: TreeKind, expected: str) -> Any:
    """
    Consume the next form and check that it is of the given kind.

    Returns the token tree's value (a child stream for lists).

    Raises:
        UnexpectedTokenError: On a form of another kind or at the end of the stream
    """
    tree = input.next()
    if tree is None:
        raise UnexpectedTokenError(expected, input.parent_span(), found="end of list")
    if tree.kind is not kind:
        raise UnexpectedTokenError(expected, input.span(), found=tree.kind.value)
    return tree.value


def unwrap_optional(shape: Any) -> Any:
    """``T`` for ``Optional[T]`` / ``T | None``, otherwise None."""
    origin = typing.get_origin(shape)
    if origin is Union or origin is types.UnionType:
        args = [a for a in typing.get_args(shape) if a is not type(None)]
        if len(args) == 1 and len(typing.get_args(shape)) == 2:
            return args[0]
    return None


def from_parens(shape: Any, input: InputStream) -> Any:
    """
    Read a value of the given shape from ``input``.

    ``shape`` is a built-in shape (see the module docstring), a class with a
    ``from_parens`` classmethod, or a parametrized ``list``/``tuple``/
    ``Optional`` of those.

    Raises:
        ParseError: If the forms do not match the shape
        TypeError: If the shape is not readable
    """
    if shape in _ATOM_SHAPES:
        kind, expected = _ATOM_SHAPES[shape]
        return expect(input, kind, expected)

    reader = getattr(shape, "from_parens", None)
    if reader is not None and isinstance(shape, type):
        return reader(input)

    origin = typing.get_origin(shape)
    args = typing.get_args(shape)

    if origin is list:
        item = args[0] if args else Any
        return [from_parens(item, input) for _ in _until_end(input)]

    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return tuple(from_parens(args[0], input) for _ in _until_end(input))
        return tuple(from_parens(arg, input) for arg in args)

    inner = unwrap_optional(shape)
    if inner is not None:
        if input.is_end():
            return None
        return from_parens(inner, input)

    raise TypeError(f"Cannot read values of shape {shape!r}")


def _until_end(input: InputStream) -> Iterator[None]:
    while not input.is_end():
        yield None


def to_parens(value: Any, output: OutputStream) -> None:
    """
    Write ``value`` into ``output``.

    Objects with a ``to_parens`` method write themselves; built-in values are
    written as described in the module docstring. ``None`` writes nothing.

    Raises:
        TypeError: If the value has no s-expression representation
    """
    writer = getattr(value, "to_parens", None)
    if writer is not None and not isinstance(value, type):
        writer(output)
    elif isinstance(value, Symbol):
        output.write_symbol(value)
    elif isinstance(value, str):
        output.write_string(value)
    elif isinstance(value, bool):
        output.write_bool(value)
    elif isinstance(value, int):
        output.write_int(value)
    elif isinstance(value, float):
        output.write_float(value)
    elif isinstance(value, (list, tuple)):
        for item in value:
            to_parens(item, output)
    elif value is None:
        return
    else:
        raise TypeError(f"Cannot write value of type {type(value).__name__}")


def is_readable_shape(shape: Any) -> bool:
    """True if :func:`from_parens` knows how to read ``shape``."""
    if shape in _ATOM_SHAPES:
        return True
    if isinstance(shape, type) and hasattr(shape, "from_parens"):
        return True
    origin = typing.get_origin(shape)
    args = typing.get_args(shape)
    if origin is list:
        return bool(args) and is_readable_shape(args[0])
    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return is_readable_shape(args[0])
        return all(is_readable_shape(arg) for arg in args)
    inner = unwrap_optional(shape)
    if inner is not None:
        return is_readable_shape(inner)
    return False
