"""
paren-tools: typed s-expression reading and pretty-printing.

This package reads s-expression text into plain Python values, records
and a universal value tree, and writes them back out with a width-aware
pretty-printer.

Modules:
    sexp: Lexer, lazy token views, visitor protocol, values, records
    config: TOML configuration for reading and printing
    files: File I/O convenience wrappers
    exceptions: Error hierarchy with context and suggestions

Quick Start::

    from paren_tools import Symbol, read, record, render_pretty, repeated, required

    @record
    class Net:
        name: str = required()
        node: list[Symbol] = repeated()

    net = read(Net, '(name "GND") (node r1) (node c3)')
    print(render_pretty(net, width=30))
    # (name "GND")
    # (node r1)
    # (node c3)
"""

__version__ = "0.1.0"

from paren_tools.config import Config
from paren_tools.exceptions import (
    ConfigurationError,
    DuplicateFieldError,
    EndOfFileError,
    ExpectedWhitespaceError,
    InvalidSyntaxError,
    MissingFieldError,
    ParenToolsError,
    ParseError,
    ReadError,
    UnexpectedCloseError,
    UnexpectedFormError,
    UnexpectedTokenError,
)
from paren_tools.files import read_file, write_file
from paren_tools.sexp import (
    BoolValue,
    FloatValue,
    IntValue,
    ListValue,
    StringValue,
    Symbol,
    SymbolValue,
    Value,
    from_values,
    optional,
    positional,
    read,
    read_values,
    record,
    render_pretty,
    repeated,
    required,
    to_values,
)

__all__ = [
    # Version
    "__version__",
    # Reading and writing
    "read",
    "read_values",
    "render_pretty",
    "to_values",
    "from_values",
    "read_file",
    "write_file",
    # Records
    "record",
    "positional",
    "required",
    "optional",
    "repeated",
    # Values
    "Symbol",
    "Value",
    "ListValue",
    "StringValue",
    "SymbolValue",
    "BoolValue",
    "IntValue",
    "FloatValue",
    # Configuration
    "Config",
    # Errors
    "ParenToolsError",
    "ReadError",
    "InvalidSyntaxError",
    "UnexpectedCloseError",
    "EndOfFileError",
    "ExpectedWhitespaceError",
    "ParseError",
    "MissingFieldError",
    "DuplicateFieldError",
    "UnexpectedTokenError",
    "UnexpectedFormError",
    "ConfigurationError",
]
