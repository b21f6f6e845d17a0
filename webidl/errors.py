"""
Diagnostics: source spans and the ParseError family.

Every error carries the span of the offending token so a caller can point at
the exact character that stopped the parse.
"""

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Span:
    """Contiguous range of the input text, end exclusive."""
    start: int
    end: int
    line: int
    column: int


class ParseError(Exception):
    """Base class for all errors raised while reading WebIDL source."""

    kind = "ParseError"

    def __init__(self, message: str, span: Span,
                 expected: Optional[Tuple[str, ...]] = None,
                 source: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.span = span
        self.expected = expected
        self.source = source

    @property
    def line(self) -> int:
        return self.span.line

    @property
    def column(self) -> int:
        return self.span.column

    def __str__(self):
        where = f"{self.source}:" if self.source else ""
        return f"{where}{self.line}:{self.column}: {self.message}"


class LexError(ParseError):
    """Unterminated literal or a character outside the WebIDL lexicon."""

    kind = "LexError"


class IdlSyntaxError(ParseError):
    """Token stream does not match the grammar at the current position."""

    kind = "SyntaxError"


def format_diagnostic(error: ParseError, text: str) -> str:
    """
    Render an error as ``source:line:col: message`` followed by the
    offending source line and a caret under the error column.
    """
    lines = text.splitlines()
    out = [str(error)]
    if 0 < error.line <= len(lines):
        src_line = lines[error.line - 1].expandtabs(1)
        width = max(1, min(error.span.end - error.span.start,
                           len(src_line) - error.column + 1))
        out.append(f"    {src_line}")
        out.append("    " + " " * (error.column - 1) + "^" * width)
    return "\n".join(out)
