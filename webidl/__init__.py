"""
webidl: WebIDL parser producing a serializable syntax tree.

Text flows one way: ``tokenize()`` produces tokens, ``Parser`` turns them
into definition nodes, and ``emitter`` serializes the tree as JSON or YAML.
"""

from .errors import IdlSyntaxError, LexError, ParseError, Span
from .lexer import Token, tokenize
from .parser import ParseResult, Parser, parse

__all__ = [
    "IdlSyntaxError", "LexError", "ParseError", "ParseResult", "Parser",
    "Span", "Token", "parse", "tokenize",
]
