"""
Escaping and unescaping of string and symbol literals.

Strings are written between double quotes. Symbols are written bare when
they read back as exactly one symbol, otherwise between vertical bars:

    "line one\\nline two"
    hello-world
    |has spaces|

Both literal kinds share one escape grammar: ``\\\\``, ``\\"``, ``\\|``,
``\\t``, ``\\n``, ``\\r`` and ``\\u{HEX}``.
"""

from __future__ import annotations

import re
from typing import Optional

_SIMPLE_ESCAPES = {
    "\\": "\\",
    '"': '"',
    "|": "|",
    "t": "\t",
    "n": "\n",
    "r": "\r",
}

_SYMBOL_START = r"A-Za-z!$%&*/:<=>?^_~.@"
_SYMBOL_REST = r"A-Za-z0-9!$%&*/:<=>?^_~+\-.@"

BARE_SYMBOL_PATTERN = (
    rf"[{_SYMBOL_START}][{_SYMBOL_REST}]*"
    rf"|[+\-](?:[{_SYMBOL_START}][{_SYMBOL_REST}]*)?"
)
NUMBER_PATTERN = r"[+\-]?[0-9]+(?:\.[0-9]*(?:[eE][+\-]?[0-9]+)?)?"

_BARE_SYMBOL_RE = re.compile(BARE_SYMBOL_PATTERN)
_NUMBER_RE = re.compile(NUMBER_PATTERN)


def unescape(raw: str) -> Optional[str]:
    """
    Decode the escape sequences in the body of a string or quoted symbol.

    Returns None if the text contains an unknown escape, a dangling
    backslash, a malformed ``\\u{...}`` sequence or a code point that is
    not a Unicode scalar value.
    """
    if "\\" not in raw:
        return raw

    result = []
    pos = 0
    length = len(raw)

    while pos < length:
        c = raw[pos]
        if c != "\\":
            result.append(c)
            pos += 1
            continue

        pos += 1
        if pos >= length:
            return None

        escaped = raw[pos]
        if escaped in _SIMPLE_ESCAPES:
            result.append(_SIMPLE_ESCAPES[escaped])
            pos += 1
        elif escaped == "u":
            if pos + 1 >= length or raw[pos + 1] != "{":
                return None
            close = raw.find("}", pos + 2)
            if close == -1:
                return None
            digits = raw[pos + 2 : close]
            if not digits or any(d not in "0123456789abcdefABCDEF" for d in digits):
                return None
            code = int(digits, 16)
            if code > 0x10FFFF or 0xD800 <= code <= 0xDFFF:
                return None
            result.append(chr(code))
            pos = close + 1
        else:
            return None

    return "".join(result)


def _escape(text: str, quote: str) -> str:
    result = []
    for c in text:
        if c == "\\" or c == quote:
            result.append("\\" + c)
        elif c == "\n":
            result.append("\\n")
        elif c == "\t":
            result.append("\\t")
        elif c == "\r":
            result.append("\\r")
        elif ord(c) < 0x20 or ord(c) == 0x7F:
            result.append(f"\\u{{{ord(c):x}}}")
        else:
            result.append(c)
    return "".join(result)


def escape_string(text: str) -> str:
    """Escape ``text`` for use between double quotes (quotes not included)."""
    return _escape(text, '"')


def escape_symbol(text: str) -> str:
    """
    Render a symbol name as it must appear in source text.

    Names that read back as a single bare symbol are returned unchanged;
    everything else (empty names, whitespace, names that look like numbers)
    is wrapped in vertical bars.
    """
    if _BARE_SYMBOL_RE.fullmatch(text) and not _NUMBER_RE.fullmatch(text):
        return text
    return f"|{_escape(text, '|')}|"
