"""
Lexer for s-expression text.

Turns source text into a flat list of span-annotated tokens. Lists are not
materialized as nested containers: every ``(`` token records the distance to
its matching ``)`` instead, so consumers can skip an entire subtree with one
index addition.

Example::

    >>> buf = lex('(point (x 1) (y 2.5)) "label"')
    >>> [t.kind.name for t in buf.tokens][:3]
    ['OPEN_LIST', 'SYMBOL', 'OPEN_LIST']
    >>> buf.tokens[0].value  # index distance from "(" to its ")"
    10

Lexing happens in three passes:

1. tokenize: match literals and delimiters, drop whitespace and comments
2. adjacency check: reject tokens that touch without whitespace, unless a
   list delimiter separates them (``#t#f``, ``+#f`` and ``()()`` are errors)
3. balance: match delimiters with a stack and back-patch skip distances
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, List, NamedTuple, Optional

from paren_tools.exceptions import (
    EndOfFileError,
    ExpectedWhitespaceError,
    InvalidSyntaxError,
    UnexpectedCloseError,
)

from .escape import BARE_SYMBOL_PATTERN, unescape
from .protocol import Symbol

if TYPE_CHECKING:
    from .view import TokenView

logger = logging.getLogger(__name__)

INT_MIN = -(2**63)
INT_MAX = 2**63 - 1


class Span(NamedTuple):
    """Half-open character range ``[start, end)`` into the source text."""

    start: int
    end: int

    def merge(self, other: Span) -> Span:
        """Smallest span covering both spans."""
        return Span(min(self.start, other.start), max(self.end, other.end))


class TokenKind(Enum):
    """Kinds of tokens produced by the lexer."""

    OPEN_LIST = "("
    CLOSE_LIST = ")"
    STRING = "string"
    SYMBOL = "symbol"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"


class Token(NamedTuple):
    """
    A single lexed token.

    For ``OPEN_LIST`` tokens, ``value`` is the skip distance: the token at
    ``index + value`` is the matching ``CLOSE_LIST``. After balancing, the
    span of an ``OPEN_LIST`` covers the whole list up to and including its
    closing delimiter.
    """

    kind: TokenKind
    value: Any
    span: Span


_TOKEN_RE = re.compile(
    r"""
    (?P<ws>[\ \t\n\r\f]+)
    |(?P<comment>;[^\n]*)
    |(?P<open>\()
    |(?P<close>\))
    |(?P<string>"(?:[^"\\]|\\["\\tnr]|\\u\{[0-9a-fA-F]+\})*")
    |(?P<qsymbol>\|(?:[^|\\]|\\[|\\tnr]|\\u\{[0-9a-fA-F]+\})*\|)
    |(?P<bool>\#[tf])
    |(?P<special>\#\+inf|\#-inf|\#nan)
    |(?P<float>[+\-]?[0-9]+\.[0-9]*(?:[eE][+\-]?[0-9]+)?)
    |(?P<int>[+\-]?[0-9]+)
    |(?P<symbol>"""
    + BARE_SYMBOL_PATTERN
    + r""")
    """,
    re.VERBOSE,
)

_SPECIAL_FLOATS = {
    "#+inf": float("inf"),
    "#-inf": float("-inf"),
    "#nan": float("nan"),
}


@dataclass
class TokenBuffer:
    """
    Flat token sequence for one source text.

    The buffer owns the tokens; every ``TokenView`` created from it borrows
    index ranges of ``tokens`` and must not outlive it.
    """

    source: str
    tokens: List[Token]

    def __len__(self) -> int:
        return len(self.tokens)

    @property
    def span(self) -> Span:
        """Span of the whole source text."""
        return Span(0, len(self.source))

    def view(self) -> TokenView:
        """Top-level lazy view over the buffer."""
        from .view import TokenView

        return TokenView(self.tokens, 0, len(self.tokens), self.span)


def tokenize(text: str) -> List[Token]:
    """
    Split ``text`` into tokens, dropping whitespace and comments.

    ``OPEN_LIST`` tokens are emitted with a placeholder skip of 0; run
    :func:`balance` to fill them in.

    Raises:
        InvalidSyntaxError: On characters no token matches, malformed escapes
            and integers outside the signed 64-bit range
    """
    tokens: List[Token] = []
    pos = 0
    length = len(text)
    match_at = _TOKEN_RE.match

    while pos < length:
        m = match_at(text, pos)
        if m is None:
            raise InvalidSyntaxError(Span(pos, pos + 1))

        group = m.lastgroup
        span = Span(pos, m.end())
        slice_ = m.group()
        pos = m.end()

        if group == "ws" or group == "comment":
            continue
        elif group == "open":
            tokens.append(Token(TokenKind.OPEN_LIST, 0, span))
        elif group == "close":
            tokens.append(Token(TokenKind.CLOSE_LIST, None, span))
        elif group == "string":
            decoded = unescape(slice_[1:-1])
            if decoded is None:
                raise InvalidSyntaxError(span, "invalid escape sequence in string")
            tokens.append(Token(TokenKind.STRING, decoded, span))
        elif group == "qsymbol":
            decoded = unescape(slice_[1:-1])
            if decoded is None:
                raise InvalidSyntaxError(span, "invalid escape sequence in symbol")
            tokens.append(Token(TokenKind.SYMBOL, Symbol(decoded), span))
        elif group == "symbol":
            tokens.append(Token(TokenKind.SYMBOL, Symbol(slice_), span))
        elif group == "bool":
            tokens.append(Token(TokenKind.BOOL, slice_ == "#t", span))
        elif group == "special":
            tokens.append(Token(TokenKind.FLOAT, _SPECIAL_FLOATS[slice_], span))
        elif group == "float":
            tokens.append(Token(TokenKind.FLOAT, float(slice_), span))
        elif group == "int":
            value = int(slice_)
            if not INT_MIN <= value <= INT_MAX:
                raise InvalidSyntaxError(span, "integer literal out of range")
            tokens.append(Token(TokenKind.INT, value, span))

    return tokens


def check_whitespace(tokens: List[Token]) -> None:
    """
    Reject adjacent tokens that are not separated by whitespace.

    A pair is allowed to touch when the first token opens a list or the
    second token closes one.

    Raises:
        ExpectedWhitespaceError: For the first touching pair found
    """
    for a, b in zip(tokens, tokens[1:]):
        if a.kind is TokenKind.OPEN_LIST or b.kind is TokenKind.CLOSE_LIST:
            continue
        if a.span.end == b.span.start:
            raise ExpectedWhitespaceError(after=a.span, before=b.span)


def balance(tokens: List[Token], source_length: int, max_depth: Optional[int] = None) -> None:
    """
    Match list delimiters and back-patch skip distances in place.

    On success, every ``OPEN_LIST`` at index ``i`` holds the distance ``k``
    to its ``CLOSE_LIST`` at ``i + k``, and its span is extended to the end
    of that closing delimiter.

    Raises:
        UnexpectedCloseError: On a ``)`` with no open list
        EndOfFileError: If lists are still open at the end of input
        InvalidSyntaxError: If nesting exceeds ``max_depth``
    """
    stack: List[int] = []

    for i, token in enumerate(tokens):
        if token.kind is TokenKind.OPEN_LIST:
            stack.append(i)
            if max_depth is not None and len(stack) > max_depth:
                raise InvalidSyntaxError(token.span, f"lists nested deeper than {max_depth}")
        elif token.kind is TokenKind.CLOSE_LIST:
            if not stack:
                raise UnexpectedCloseError(token.span)
            j = stack.pop()
            opener = tokens[j]
            tokens[j] = Token(TokenKind.OPEN_LIST, i - j, Span(opener.span.start, token.span.end))

    if stack:
        raise EndOfFileError(Span(source_length, source_length), unclosed=len(stack))


def lex(text: str, strict_whitespace: bool = True, max_depth: Optional[int] = None) -> TokenBuffer:
    """
    Lex ``text`` into a balanced :class:`TokenBuffer`.

    Args:
        text: Source text
        strict_whitespace: Reject adjacent tokens without separating whitespace
        max_depth: Optional limit on list nesting

    Raises:
        ReadError: Any lexing or balancing failure; no partial result is returned
    """
    tokens = tokenize(text)
    if strict_whitespace:
        check_whitespace(tokens)
    balance(tokens, len(text), max_depth)
    logger.debug(f"Lexed {len(tokens)} tokens from {len(text)} characters")
    return TokenBuffer(text, tokens)
