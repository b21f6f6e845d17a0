"""
Lexer: tokenizes WebIDL source text into a lazy stream of tokens.
"""

import re
from dataclasses import dataclass
from typing import Iterator

from .errors import LexError, Span

# Token kinds.
TOK_IDENT   = "identifier"
TOK_KEYWORD = "keyword"
TOK_STRING  = "string"
TOK_INTEGER = "integer"
TOK_FLOAT   = "float"
TOK_PUNCT   = "punctuation"
TOK_EOF     = "eof"

# Words the grammar treats as terminals rather than identifiers.
KEYWORDS = {
    # definitions
    "async", "async_iterable", "attribute", "callback", "const",
    "constructor", "deleter", "dictionary", "enum", "getter", "includes",
    "inherit", "interface", "iterable", "maplike", "mixin", "namespace",
    "optional", "or", "partial",
    "readonly", "required", "setlike", "setter", "static", "stringifier",
    "typedef", "unrestricted",
    # types
    "any", "bigint", "boolean", "byte", "double", "float", "long", "object",
    "octet", "short", "symbol", "undefined", "unsigned",
    "ByteString", "DOMString", "USVString",
    "FrozenArray", "ObservableArray", "Promise", "record", "sequence",
    "ArrayBuffer", "SharedArrayBuffer", "DataView",
    "Int8Array", "Int16Array", "Int32Array",
    "Uint8Array", "Uint16Array", "Uint32Array", "Uint8ClampedArray",
    "BigInt64Array", "BigUint64Array",
    "Float16Array", "Float32Array", "Float64Array",
    # values
    "true", "false", "null", "Infinity", "-Infinity", "NaN",
}

# Longest first so "..." wins over ".".
PUNCTUATION = ("...", "(", ")", ",", "-", ".", ":", ";", "<", "=", ">",
               "?", "[", "]", "{", "}", "*")

RE_FLOAT = re.compile(
    r"-?(([0-9]+\.[0-9]*|[0-9]*\.[0-9]+)([Ee][+-]?[0-9]+)?|[0-9]+[Ee][+-]?[0-9]+)")
RE_INTEGER = re.compile(r"-?([1-9][0-9]*|0[Xx][0-9A-Fa-f]+|0[0-7]*)")
RE_IDENT = re.compile(r"[_-]?[A-Za-z][0-9A-Z_a-z-]*")


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    start: int
    end: int
    line: int
    column: int

    @property
    def span(self) -> Span:
        return Span(self.start, self.end, self.line, self.column)

    def describe(self) -> str:
        """Short human-readable form used in error messages."""
        if self.kind == TOK_EOF:
            return "end of input"
        return repr(self.text)


def tokenize(text: str) -> Iterator[Token]:
    """
    Lazily convert WebIDL source text into tokens, ending with one EOF token.

    Whitespace and comments (``//`` and ``/* ... */``) are skipped but still
    advance the offsets, so ``text[tok.start:tok.end] == tok.text`` holds for
    every token.  Raises LexError on an unterminated string or block comment
    and on characters that cannot start any token.
    """
    i = 0
    n = len(text)
    line = 1
    line_start = 0

    def make(kind: str, end: int) -> Token:
        return Token(kind, text[i:end], i, end, line, i - line_start + 1)

    def error(message: str, end: int) -> LexError:
        return LexError(message, Span(i, end, line, i - line_start + 1))

    while i < n:
        c = text[i]

        # Newlines
        if c == "\n":
            i += 1
            line += 1
            line_start = i
            continue

        # Whitespace
        if c in " \t\r":
            i += 1
            continue

        # Single-line comment
        if text.startswith("//", i):
            j = text.find("\n", i)
            i = n if j == -1 else j
            continue

        # Block comment
        if text.startswith("/*", i):
            end = text.find("*/", i + 2)
            if end == -1:
                raise error("unterminated block comment", i + 2)
            body = text[i:end + 2]
            newlines = body.count("\n")
            if newlines:
                line += newlines
                line_start = i + body.rfind("\n") + 1
            i = end + 2
            continue

        # String
        if c == '"':
            j = i + 1
            while j < n and text[j] not in '"\n':
                j += 1
            if j >= n or text[j] != '"':
                raise error("unterminated string literal", i + 1)
            yield make(TOK_STRING, j + 1)
            i = j + 1
            continue

        # Numbers, then identifiers (both may start with '-')
        m = RE_FLOAT.match(text, i)
        if m:
            yield make(TOK_FLOAT, m.end())
            i = m.end()
            continue

        m = RE_INTEGER.match(text, i)
        if m:
            yield make(TOK_INTEGER, m.end())
            i = m.end()
            continue

        m = RE_IDENT.match(text, i)
        if m:
            word = m.group(0)
            kind = TOK_KEYWORD if word in KEYWORDS else TOK_IDENT
            yield make(kind, m.end())
            i = m.end()
            continue

        # Punctuation
        for p in PUNCTUATION:
            if text.startswith(p, i):
                yield make(TOK_PUNCT, i + len(p))
                i += len(p)
                break
        else:
            raise error(f"unexpected character {c!r}", i + 1)

    yield Token(TOK_EOF, "", n, n, line, n - line_start + 1)
