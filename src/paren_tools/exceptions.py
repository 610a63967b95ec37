"""
Custom exception hierarchy for paren-tools.

Provides consistent error handling with context, suggestions, and actionable guidance.
All exceptions include:
- Context information (spans, line numbers, field names, etc.)
- Suggestions for how to fix the issue
- Clear, formatted error messages

Reading errors additionally carry the span of the offending text, so callers
can point at the exact characters that could not be read.

Example::

    from paren_tools.exceptions import MissingFieldError

    raise MissingFieldError(
        "name",
        span=Span(0, 12),
        suggestions=["Add a (name ...) form to the record"],
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from paren_tools.sexp.lexer import Span


class ParenToolsError(Exception):
    """
    Base exception for all paren-tools errors.

    Provides consistent formatting with context and suggestions.

    Attributes:
        context: Dictionary of contextual information (span, line, etc.)
        suggestions: List of actionable suggestions for fixing the error
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.message = message
        self.context = context or {}
        self.suggestions = suggestions or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context and suggestions."""
        parts = [self.message]

        if self.context:
            parts.append("\n\nContext:")
            for key, value in self.context.items():
                parts.append(f"\n  {key}: {value}")

        if self.suggestions:
            parts.append("\n\nSuggestions:")
            for suggestion in self.suggestions:
                parts.append(f"\n  - {suggestion}")

        return "".join(parts)

    def __str__(self) -> str:
        return self._format_message()


class ReadError(ParenToolsError):
    """
    Reading a value from s-expression text failed.

    Every read error carries the span of the offending text. Once the source
    is known, :meth:`attach_source` adds the 1-based line and column to the
    context.

    Attributes:
        span: Character range of the offending text
    """

    def __init__(
        self,
        message: str,
        span: Optional[Span] = None,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.span = span
        ctx = context or {}
        if span is not None and "span" not in ctx:
            ctx["span"] = f"{span.start}..{span.end}"
        super().__init__(message, ctx, suggestions)

    def attach_source(self, source: str) -> ReadError:
        """Add line, column and snippet information taken from ``source``."""
        if self.span is None or "line" in self.context:
            return self
        line, column = line_column(source, self.span.start)
        self.context["line"] = line
        self.context["column"] = column
        snippet = source[self.span.start : self.span.end]
        if snippet and len(snippet) <= 40 and "\n" not in snippet:
            self.context["text"] = repr(snippet)
        self.args = (self._format_message(),)
        return self


class InvalidSyntaxError(ReadError):
    """Unrecognized character sequence, malformed escape or out-of-range literal."""

    def __init__(self, span: Span, reason: str = "unrecognized syntax", **kwargs):
        super().__init__(reason, span, **kwargs)


class UnexpectedCloseError(ReadError):
    """Closing delimiter without a matching opening delimiter."""

    def __init__(self, span: Span, **kwargs):
        super().__init__(
            "unexpected closing delimiter",
            span,
            suggestions=kwargs.pop("suggestions", ["Remove the extra ')' or add a matching '('"]),
            **kwargs,
        )


class EndOfFileError(ReadError):
    """Input ended while lists were still open."""

    def __init__(self, span: Span, unclosed: int = 1, **kwargs):
        self.unclosed = unclosed
        super().__init__(
            "unexpected end of file",
            span,
            context={"unclosed lists": unclosed},
            suggestions=kwargs.pop("suggestions", ["Check for missing ')'"]),
            **kwargs,
        )


class ExpectedWhitespaceError(ReadError):
    """Two tokens touch without whitespace or a list delimiter between them."""

    def __init__(self, after: Span, before: Span, **kwargs):
        self.after = after
        self.before = before
        super().__init__(
            "expected whitespace",
            after.merge(before),
            context={"after": f"{after.start}..{after.end}", "before": f"{before.start}..{before.end}"},
            suggestions=kwargs.pop("suggestions", ["Separate adjacent tokens with a space"]),
            **kwargs,
        )


class ParseError(ReadError):
    """
    The token structure did not match the shape being read.

    Raised while binding records and reading typed values. There is no
    per-field recovery: a document that fails to bind is rejected as a whole.
    """

    pass


class MissingFieldError(ParseError):
    """A required field (or positional value) did not appear."""

    def __init__(self, field: str, span: Optional[Span] = None, **kwargs):
        self.field = field
        super().__init__(f"missing field '{field}'", span, **kwargs)


class DuplicateFieldError(ParseError):
    """A required or optional field appeared more than once."""

    def __init__(self, field: str, span: Optional[Span] = None, **kwargs):
        self.field = field
        super().__init__(
            f"duplicate field '{field}'",
            span,
            suggestions=kwargs.pop("suggestions", [f"Remove all but one ({field} ...) form"]),
            **kwargs,
        )


class UnexpectedTokenError(ParseError):
    """A form of the wrong kind was found where a specific kind was expected."""

    def __init__(self, expected: str, span: Optional[Span] = None, found: Optional[str] = None, **kwargs):
        self.expected = expected
        self.found = found
        message = f"expected {expected}"
        if found is not None:
            message += f", found {found}"
        super().__init__(message, span, **kwargs)


class UnexpectedFormError(ParseError):
    """A form was left over after every slot had been filled."""

    def __init__(self, span: Optional[Span] = None, reason: str = "unexpected form", **kwargs):
        super().__init__(reason, span, **kwargs)


class FileNotFoundError(ParenToolsError):
    """
    Required file was not found.

    Example::

        raise FileNotFoundError(
            "S-expression file not found",
            context={"file": "board.sexp"},
            suggestions=["Check that the file path is correct"]
        )
    """

    pass


class ConfigurationError(ParenToolsError):
    """
    Invalid record schema or unsupported value shape.

    Example::

        raise ConfigurationError(
            "Duplicate tag in record schema",
            context={"record": "Point", "tag": "x"},
            suggestions=["Give every tagged field a distinct tag"]
        )
    """

    pass


def line_column(source: str, offset: int) -> tuple[int, int]:
    """Convert a character offset into a 1-based (line, column) pair."""
    offset = max(0, min(offset, len(source)))
    line = source.count("\n", 0, offset) + 1
    column = offset - (source.rfind("\n", 0, offset) + 1) + 1
    return line, column


__all__ = [
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
    "FileNotFoundError",
    "ConfigurationError",
    "line_column",
]
