"""
Lazy tree view over a flat token buffer.

A :class:`TokenView` is an index window ``[pos, stop)`` into the token list
of a :class:`~paren_tools.sexp.lexer.TokenBuffer`. Peeking at a list does not
build anything: it hands out another view bounded to the tokens strictly
between the list's delimiters, found from the skip distance stored on the
opening token. Stepping over a list in the parent view is a single index
addition, however large the list is.

Usage::

    view = lex('(wire (start 0 0) (end 10 0)) (label "x")').view()
    tree = view.next()           # TokenTree(LIST, <TokenView>)
    inner = tree.value
    inner.next()                 # TokenTree(SYMBOL, Symbol('wire'))
    view.next()                  # jumps straight to (label "x")
"""

from __future__ import annotations

from typing import List, Optional

from .lexer import Span, Token, TokenKind
from .protocol import InputStream, TokenTree, TreeKind

_ATOM_KINDS = {
    TokenKind.STRING: TreeKind.STRING,
    TokenKind.SYMBOL: TreeKind.SYMBOL,
    TokenKind.BOOL: TreeKind.BOOL,
    TokenKind.INT: TreeKind.INT,
    TokenKind.FLOAT: TreeKind.FLOAT,
}


class TokenView(InputStream):
    """
    Input stream over a window of a balanced token list.

    Views are cheap and independent: any number of them may walk the same
    token list at once, but none may outlive the buffer that owns it.

    Args:
        tokens: Balanced token list (shared, never copied)
        start: Index of the first token in the window
        stop: Index one past the last token in the window
        parent_span: Span of the enclosing list, or of the whole input
    """

    def __init__(self, tokens: List[Token], start: int, stop: int, parent_span: Span):
        self._tokens = tokens
        self._pos = start
        self._stop = stop
        self._parent_span = parent_span
        self._cur_span = Span(parent_span.start, parent_span.start)

    def __repr__(self) -> str:
        return f"TokenView(pos={self._pos}, stop={self._stop}, parent_span={tuple(self._parent_span)})"

    def _width(self) -> int:
        """Number of flat tokens taken up by the form at the current position."""
        token = self._tokens[self._pos]
        if token.kind is TokenKind.OPEN_LIST:
            return token.value + 1
        return 1

    def peek(self) -> Optional[TokenTree]:
        if self._pos >= self._stop:
            return None

        token = self._tokens[self._pos]
        if token.kind is TokenKind.OPEN_LIST:
            child = TokenView(self._tokens, self._pos + 1, self._pos + token.value, token.span)
            child._cur_span = Span(token.span.start + 1, token.span.start + 1)
            return TokenTree(TreeKind.LIST, child)
        if token.kind is TokenKind.CLOSE_LIST:
            return None
        return TokenTree(_ATOM_KINDS[token.kind], token.value)

    def next(self) -> Optional[TokenTree]:
        tree = self.peek()
        if tree is None:
            return None
        self._cur_span = self._tokens[self._pos].span
        self._pos += self._width()
        return tree

    def next_stream(self) -> Optional[TokenView]:
        if self.peek() is None:
            return None
        start = self._pos
        span = self._tokens[start].span
        self._cur_span = span
        self._pos += self._width()
        return TokenView(self._tokens, start, self._pos, span)

    def span(self) -> Span:
        return self._cur_span

    def parent_span(self) -> Span:
        return self._parent_span

    def is_end(self) -> bool:
        return self._pos >= self._stop

    def fork(self) -> TokenView:
        """Independent copy of this view at the same position."""
        view = TokenView(self._tokens, self._pos, self._stop, self._parent_span)
        view._cur_span = self._cur_span
        return view

    @property
    def remaining(self) -> int:
        """Number of flat tokens left in the window."""
        return self._stop - self._pos
