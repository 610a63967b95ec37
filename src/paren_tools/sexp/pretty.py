"""
Width-aware pretty-printing of s-expressions.

Values are written through the visitor protocol into a
:class:`PrettyOutputStream`, which builds a document from five primitives:

- ``Text``: literal text
- ``Line``: a space when its group fits on one line, otherwise a newline
  followed by the current indentation
- ``Nest``: increases the indentation of the line breaks inside it
- ``Group``: lays its contents out flat if they fit in the remaining
  width, otherwise breaks every ``Line`` directly inside it
- ``Concat``: a sequence of documents

Every list becomes ``"(" + group(nest(2, child Line child Line ...)) + ")"``,
so short lists stay on one line and long ones put each child on its own
line, indented two columns deeper than the list:

    (symbol
      (lib_id "Device:R")
      (at 100.0 50.0 0)
      (property "Reference" "R1"))

Top-level forms are always separated by newlines.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Optional, Tuple

from paren_tools.config import Config

from .escape import escape_string, escape_symbol
from .protocol import OutputStream, to_parens

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 80
DEFAULT_INDENT = 2


class Doc:
    """Base class of layout documents."""

    def __add__(self, other: Doc) -> Doc:
        return Concat((self, other))

    def render(self, width: int = DEFAULT_WIDTH) -> str:
        """Lay the document out for the given line width."""
        return render(self, width)


@dataclass(frozen=True)
class Text(Doc):
    text: str


@dataclass(frozen=True)
class Line(Doc):
    pass


@dataclass(frozen=True)
class Nest(Doc):
    indent: int
    doc: Doc


@dataclass(frozen=True)
class Group(Doc):
    doc: Doc


@dataclass(frozen=True)
class Concat(Doc):
    parts: Tuple[Doc, ...]


LINE = Line()
NIL = Concat(())


def text(s: str) -> Doc:
    return Text(s)


def nest(indent: int, doc: Doc) -> Doc:
    return Nest(indent, doc)


def group(doc: Doc) -> Doc:
    return Group(doc)


def concat(docs: Iterable[Doc]) -> Doc:
    return Concat(tuple(docs))


def intersperse(docs: Iterable[Doc], separator: Doc) -> Doc:
    """Join documents with a separator between each pair."""
    parts: List[Doc] = []
    for doc in docs:
        if parts:
            parts.append(separator)
        parts.append(doc)
    return Concat(tuple(parts))


class _Mode(Enum):
    FLAT = "flat"
    BREAK = "break"


_Command = Tuple[int, _Mode, Doc]


def _fits(remaining: int, command: _Command, rest: List[_Command]) -> bool:
    """
    Check whether ``command`` laid out flat fits in ``remaining`` columns.

    Text following the command on the same line (from ``rest``, up to its
    next line break) counts against the width as well.
    """
    pending: List[_Command] = [command]
    rest_index = len(rest)

    while remaining >= 0:
        if not pending:
            if rest_index == 0:
                return True
            rest_index -= 1
            pending.append(rest[rest_index])
            continue

        indent, mode, doc = pending.pop()
        if isinstance(doc, Text):
            remaining -= len(doc.text)
        elif isinstance(doc, Line):
            if mode is _Mode.BREAK:
                return True
            remaining -= 1
        elif isinstance(doc, Nest):
            pending.append((indent + doc.indent, mode, doc.doc))
        elif isinstance(doc, Group):
            pending.append((indent, mode, doc.doc))
        elif isinstance(doc, Concat):
            for part in reversed(doc.parts):
                pending.append((indent, mode, part))

    return False


def render(doc: Doc, width: int = DEFAULT_WIDTH) -> str:
    """
    Render a document, breaking groups that do not fit in ``width`` columns.

    Layout uses an explicit work stack, so document depth is not limited by
    the interpreter's recursion limit.
    """
    out: List[str] = []
    column = 0
    stack: List[_Command] = [(0, _Mode.BREAK, doc)]

    while stack:
        indent, mode, doc = stack.pop()
        if isinstance(doc, Text):
            out.append(doc.text)
            column += len(doc.text)
        elif isinstance(doc, Line):
            if mode is _Mode.FLAT:
                out.append(" ")
                column += 1
            else:
                out.append("\n" + " " * indent)
                column = indent
        elif isinstance(doc, Nest):
            stack.append((indent + doc.indent, mode, doc.doc))
        elif isinstance(doc, Group):
            if mode is _Mode.FLAT or _fits(width - column, (indent, _Mode.FLAT, doc.doc), stack):
                stack.append((indent, _Mode.FLAT, doc.doc))
            else:
                stack.append((indent, _Mode.BREAK, doc.doc))
        elif isinstance(doc, Concat):
            for part in reversed(doc.parts):
                stack.append((indent, mode, part))

    return "".join(out)


def format_float(value: float) -> str:
    """
    Format a float so that it reads back as the same float.

    Non-finite values use ``#nan``, ``#+inf`` and ``#-inf``. Finite values
    always contain a decimal point, so they never read back as integers.
    """
    if math.isnan(value):
        return "#nan"
    if math.isinf(value):
        return "#+inf" if value > 0 else "#-inf"
    if value.is_integer():
        sign = "-" if math.copysign(1.0, value) < 0 else ""
        return f"{sign}{int(abs(value))}.0"

    formatted = repr(value)
    mantissa, _, exponent = formatted.partition("e")
    if exponent and "." not in mantissa:
        formatted = f"{mantissa}.0e{exponent}"
    return formatted


class PrettyOutputStream(OutputStream):
    """Output stream that builds a layout document."""

    def __init__(self, indent: int = DEFAULT_INDENT):
        self.indent = indent
        self._stack: List[List[Doc]] = []
        self._current: List[Doc] = []

    def open_list(self) -> None:
        self._stack.append(self._current)
        self._current = []

    def close_list(self) -> None:
        docs = self._current
        self._current = self._stack.pop()
        self._current.append(
            Concat((Text("("), Group(Nest(self.indent, intersperse(docs, LINE))), Text(")")))
        )

    def write_string(self, string: str) -> None:
        self._current.append(Text(f'"{escape_string(string)}"'))

    def write_symbol(self, symbol: str) -> None:
        self._current.append(Text(escape_symbol(symbol)))

    def write_bool(self, value: bool) -> None:
        self._current.append(Text("#t" if value else "#f"))

    def write_int(self, value: int) -> None:
        self._current.append(Text(str(value)))

    def write_float(self, value: float) -> None:
        self._current.append(Text(format_float(value)))

    def finish(self) -> Doc:
        """Document of everything written, top-level forms on separate lines."""
        return intersperse(self._current, LINE)


def render_pretty(value: Any, width: Optional[int] = None, *, config=None) -> str:
    """
    Pretty-print any writable value.

    Args:
        value: Value implementing the visitor protocol (records, ``Value``,
            built-in scalars and sequences)
        width: Target line width; defaults to ``config.pretty.width``
        config: Optional :class:`~paren_tools.config.Config`, such as
            ``Config.load()``; defaults apply when omitted

    Returns:
        Rendered text without a trailing newline
    """
    if config is None:
        config = Config()
    if width is None:
        width = config.pretty.width

    output = PrettyOutputStream(indent=config.pretty.indent)
    to_parens(value, output)
    logger.debug(f"Rendering {type(value).__name__} at width {width}")
    return render(output.finish(), width)
