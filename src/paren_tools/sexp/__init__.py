"""
S-expression reading, binding and pretty-printing.

The pipeline is split into small layers:

- ``lexer``: text to a flat, balanced token list with spans
- ``view``: lazy tree-shaped reading over that token list
- ``protocol``: the visitor interfaces host types read from and write to
- ``value``: a universal value tree for untyped data
- ``binder``: matching sibling forms to the fields of a record
- ``pretty``: width-aware layout of anything writable

Usage:
    from paren_tools.sexp import lex, read, read_values, render_pretty

    values = read_values('(wire (start 0 0) (end 10 0))')
    print(render_pretty(values, width=20))
"""

from .binder import (
    Schema,
    Slot,
    SlotKind,
    optional,
    positional,
    record,
    repeated,
    required,
    schema_of,
)
from .escape import escape_string, escape_symbol, unescape
from .lexer import Span, Token, TokenBuffer, TokenKind, lex
from .pretty import Doc, PrettyOutputStream, format_float, render, render_pretty
from .protocol import (
    InputStream,
    OutputStream,
    Symbol,
    TokenTree,
    TreeKind,
    from_parens,
    to_parens,
)
from .read import read, read_values
from .value import (
    BoolValue,
    FloatValue,
    IntValue,
    ListValue,
    StringValue,
    SymbolValue,
    Value,
    ValueInputStream,
    ValueOutputStream,
    from_values,
    to_values,
)
from .view import TokenView

__all__ = [
    # Lexing
    "Span",
    "Token",
    "TokenKind",
    "TokenBuffer",
    "TokenView",
    "lex",
    # Protocol
    "Symbol",
    "TreeKind",
    "TokenTree",
    "InputStream",
    "OutputStream",
    "from_parens",
    "to_parens",
    # Values
    "Value",
    "ListValue",
    "StringValue",
    "SymbolValue",
    "BoolValue",
    "IntValue",
    "FloatValue",
    "ValueInputStream",
    "ValueOutputStream",
    "to_values",
    "from_values",
    # Records
    "Schema",
    "Slot",
    "SlotKind",
    "record",
    "schema_of",
    "positional",
    "required",
    "optional",
    "repeated",
    # Reading and printing
    "read",
    "read_values",
    "Doc",
    "PrettyOutputStream",
    "format_float",
    "render",
    "render_pretty",
    # Escaping
    "escape_string",
    "escape_symbol",
    "unescape",
]
