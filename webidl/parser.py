"""
Parser: recursive-descent parser that builds a WebIDL syntax tree from a
token stream.
"""

import logging
import typing
from dataclasses import dataclass
from typing import Callable, ClassVar, List, Optional, Tuple, Union

from .errors import IdlSyntaxError, ParseError, Span
from .lexer import (Token, TOK_EOF, TOK_FLOAT, TOK_IDENT, TOK_INTEGER,
                    TOK_KEYWORD, TOK_PUNCT, TOK_STRING, tokenize)
from .types import (BUFFER_TYPES, GENERIC_TYPES, SIMPLE_TYPES, AnnotatedType,
                    IdlType, NamedType, NullableType, PrimitiveType,
                    RecordType, UnionType, can_be_nullable, generic_type)

log = logging.getLogger(__name__)


# ── AST nodes ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Literal:
    """Constant or default value; numbers keep their source spelling."""
    tag: ClassVar[str] = "literal"
    kind: str
    value: Union[str, bool, None]


@dataclass(frozen=True)
class ExtendedAttributeRhs:
    tag: ClassVar[str] = "extended-attribute-rhs"
    kind: str
    value: Union[str, Tuple[str, ...]]


@dataclass(frozen=True)
class ExtendedAttribute:
    tag: ClassVar[str] = "extended-attribute"
    name: str
    arguments: Optional[Tuple["Argument", ...]]
    rhs: Optional[ExtendedAttributeRhs]
    span: Span


@dataclass(frozen=True)
class Argument:
    tag: ClassVar[str] = "argument"
    name: str
    idl_type: IdlType
    optional: bool
    variadic: bool
    default: Optional[Literal]
    ext_attrs: Tuple[ExtendedAttribute, ...]
    span: Span


@dataclass(frozen=True)
class Attribute:
    tag: ClassVar[str] = "attribute"
    name: str
    idl_type: IdlType
    readonly: bool
    special: Optional[str]
    ext_attrs: Tuple[ExtendedAttribute, ...]
    span: Span


@dataclass(frozen=True)
class Operation:
    tag: ClassVar[str] = "operation"
    name: Optional[str]
    return_type: Optional[IdlType]
    arguments: Tuple[Argument, ...]
    special: Optional[str]
    ext_attrs: Tuple[ExtendedAttribute, ...]
    span: Span


@dataclass(frozen=True)
class Constructor:
    tag: ClassVar[str] = "constructor"
    arguments: Tuple[Argument, ...]
    ext_attrs: Tuple[ExtendedAttribute, ...]
    span: Span


@dataclass(frozen=True)
class Constant:
    tag: ClassVar[str] = "const"
    name: str
    idl_type: IdlType
    value: Literal
    ext_attrs: Tuple[ExtendedAttribute, ...]
    span: Span


@dataclass(frozen=True)
class Field:
    """Dictionary member."""
    tag: ClassVar[str] = "field"
    name: str
    idl_type: IdlType
    required: bool
    default: Optional[Literal]
    ext_attrs: Tuple[ExtendedAttribute, ...]
    span: Span


@dataclass(frozen=True)
class Iterable:
    tag: ClassVar[str] = "iterable"
    type_args: Tuple[IdlType, ...]
    async_: bool
    arguments: Tuple[Argument, ...]
    ext_attrs: Tuple[ExtendedAttribute, ...]
    span: Span


@dataclass(frozen=True)
class Maplike:
    tag: ClassVar[str] = "maplike"
    type_args: Tuple[IdlType, ...]
    readonly: bool
    ext_attrs: Tuple[ExtendedAttribute, ...]
    span: Span


@dataclass(frozen=True)
class Setlike:
    tag: ClassVar[str] = "setlike"
    type_args: Tuple[IdlType, ...]
    readonly: bool
    ext_attrs: Tuple[ExtendedAttribute, ...]
    span: Span


Member = Union[Attribute, Operation, Constructor, Constant, Field,
               Iterable, Maplike, Setlike]


@dataclass(frozen=True)
class Interface:
    tag: ClassVar[str] = "interface"
    name: str
    inheritance: Optional[str]
    members: Tuple[Member, ...]
    partial: bool
    ext_attrs: Tuple[ExtendedAttribute, ...]
    span: Span


@dataclass(frozen=True)
class InterfaceMixin:
    tag: ClassVar[str] = "interface mixin"
    name: str
    members: Tuple[Member, ...]
    partial: bool
    ext_attrs: Tuple[ExtendedAttribute, ...]
    span: Span


@dataclass(frozen=True)
class Namespace:
    tag: ClassVar[str] = "namespace"
    name: str
    members: Tuple[Member, ...]
    partial: bool
    ext_attrs: Tuple[ExtendedAttribute, ...]
    span: Span


@dataclass(frozen=True)
class Dictionary:
    tag: ClassVar[str] = "dictionary"
    name: str
    inheritance: Optional[str]
    members: Tuple[Field, ...]
    partial: bool
    ext_attrs: Tuple[ExtendedAttribute, ...]
    span: Span


@dataclass(frozen=True)
class CallbackInterface:
    tag: ClassVar[str] = "callback interface"
    name: str
    members: Tuple[Member, ...]
    ext_attrs: Tuple[ExtendedAttribute, ...]
    span: Span


@dataclass(frozen=True)
class CallbackFunction:
    tag: ClassVar[str] = "callback"
    name: str
    return_type: IdlType
    arguments: Tuple[Argument, ...]
    ext_attrs: Tuple[ExtendedAttribute, ...]
    span: Span


@dataclass(frozen=True)
class Enum:
    tag: ClassVar[str] = "enum"
    name: str
    values: Tuple[str, ...]
    ext_attrs: Tuple[ExtendedAttribute, ...]
    span: Span


@dataclass(frozen=True)
class Typedef:
    tag: ClassVar[str] = "typedef"
    name: str
    idl_type: IdlType
    ext_attrs: Tuple[ExtendedAttribute, ...]
    span: Span


@dataclass(frozen=True)
class Includes:
    tag: ClassVar[str] = "includes"
    target: str
    includes: str
    ext_attrs: Tuple[ExtendedAttribute, ...]
    span: Span


Definition = Union[Interface, InterfaceMixin, Namespace, Dictionary,
                   CallbackInterface, CallbackFunction, Enum, Typedef,
                   Includes]


@dataclass(frozen=True)
class ParseResult:
    """Outcome of ``parse()``: either definitions or the first error."""
    definitions: Tuple[Definition, ...] = ()
    error: Optional[ParseError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Tuple[Definition, ...]:
        if self.error is not None:
            raise self.error
        return self.definitions


# ── Grammar tables ───────────────────────────────────────────────────

DEFINITION_START = ("callback", "interface", "partial", "dictionary",
                    "namespace", "enum", "typedef", "identifier")

INTERFACE_MEMBER_START = ("const", "constructor", "attribute", "readonly",
                          "static", "stringifier", "inherit", "getter",
                          "setter", "deleter", "iterable", "async",
                          "async_iterable", "maplike", "setlike", "type")

# Keywords allowed where an argument name is expected.
ARGUMENT_NAME_KEYWORDS = {
    "async", "attribute", "callback", "const", "constructor", "deleter",
    "dictionary", "enum", "getter", "includes", "inherit", "interface",
    "iterable", "maplike", "mixin", "namespace", "partial", "readonly",
    "required", "setlike", "setter", "static", "stringifier", "typedef",
    "unrestricted",
}

ATTRIBUTE_NAME_KEYWORDS = {"async", "required"}

TYPE_KEYWORDS = (SIMPLE_TYPES | BUFFER_TYPES | set(GENERIC_TYPES) |
                 {"record", "unsigned", "unrestricted", "short", "long",
                  "float", "double"})

FLOAT_KEYWORDS = {"Infinity", "-Infinity", "NaN"}

# Deepest allowed nesting of types and extended-attribute argument lists.
MAX_NESTING = 64

RHS_LIST_KINDS = {
    TOK_IDENT:   "identifier-list",
    TOK_STRING:  "string-list",
    TOK_INTEGER: "integer-list",
    TOK_FLOAT:   "decimal-list",
}


# ── Parser ───────────────────────────────────────────────────────────

class Parser:
    """
    Recursive-descent parser for WebIDL.

    Pulls tokens lazily from any iterable produced by ``tokenize()`` and keeps
    exactly one token of lookahead.  ``parse()`` returns the top-level
    definitions in source order, or raises a ParseError at the first token
    that does not fit the grammar.  No backtracking is ever needed.
    """

    def __init__(self, tokens: typing.Iterable[Token],
                 source: Optional[str] = None):
        self.source = source
        self._tokens = iter(tokens)
        self._tok = next(self._tokens)
        self._prev: Optional[Token] = None
        self._depth = 0

    # ── Token helpers ────────────────────────────────────────────────

    def peek(self) -> Token:
        return self._tok

    def advance(self) -> Token:
        tok = self._tok
        if tok.kind != TOK_EOF:
            self._tok = next(self._tokens)
        self._prev = tok
        return tok

    def _is(self, text: str) -> bool:
        tok = self._tok
        return tok.kind in (TOK_KEYWORD, TOK_PUNCT) and tok.text == text

    def _accept(self, text: str) -> Optional[Token]:
        if self._is(text):
            return self.advance()
        return None

    def _expect(self, *texts: str) -> Token:
        for text in texts:
            if self._is(text):
                return self.advance()
        self._fail(texts)

    def _expect_ident(self) -> Token:
        if self._tok.kind != TOK_IDENT:
            self._fail(("identifier",))
        return self.advance()

    def _fail(self, expected=(), message: Optional[str] = None):
        tok = self._tok
        if message is None:
            if len(expected) == 1:
                wanted = expected[0]
            else:
                wanted = "one of: " + ", ".join(expected)
            message = f"expected {wanted} but found {tok.describe()}"
        raise IdlSyntaxError(message, tok.span, tuple(expected) or None,
                             self.source)

    def _enter(self):
        # Nested types and argument lists recurse; bound the depth.
        self._depth += 1
        if self._depth > MAX_NESTING:
            self._fail(message=f"nesting deeper than {MAX_NESTING} levels")

    def _span(self, start: Token) -> Span:
        return Span(start.start, self._prev.end, start.line, start.column)

    @staticmethod
    def _name(tok: Token) -> str:
        # A leading underscore escapes identifiers that clash with keywords.
        if tok.kind == TOK_IDENT and tok.text.startswith("_"):
            return tok.text[1:]
        return tok.text

    def _parse_body(self, parse_member: Callable) -> tuple:
        self._expect("{")
        members: List = []
        while not self._is("}"):
            members.append(parse_member())
        self._expect("}")
        self._expect(";")
        return tuple(members)

    # ── Top-level ────────────────────────────────────────────────────

    def parse(self) -> Tuple[Definition, ...]:
        definitions: List[Definition] = []
        while self._tok.kind != TOK_EOF:
            definitions.append(self._parse_definition())
        return tuple(definitions)

    def _parse_definition(self) -> Definition:
        start = self._tok
        ext_attrs = self._parse_ext_attrs()
        tok = self._tok

        if self._is("callback"):
            return self._parse_callback(start, ext_attrs)
        if self._is("interface"):
            return self._parse_interface(start, ext_attrs, partial=False)
        if self._is("partial"):
            return self._parse_partial(start, ext_attrs)
        if self._is("dictionary"):
            return self._parse_dictionary(start, ext_attrs, partial=False)
        if self._is("namespace"):
            return self._parse_namespace(start, ext_attrs, partial=False)
        if self._is("enum"):
            return self._parse_enum(start, ext_attrs)
        if self._is("typedef"):
            return self._parse_typedef(start, ext_attrs)
        if tok.kind == TOK_IDENT:
            return self._parse_includes(start, ext_attrs)
        self._fail(DEFINITION_START)

    # ── Definitions ──────────────────────────────────────────────────

    def _parse_inheritance(self) -> Optional[str]:
        if self._accept(":"):
            return self._name(self._expect_ident())
        return None

    def _parse_interface(self, start: Token, ext_attrs, partial: bool):
        self._expect("interface")
        if self._accept("mixin"):
            name = self._name(self._expect_ident())
            members = self._parse_body(self._parse_mixin_member)
            return InterfaceMixin(name=name, members=members, partial=partial,
                                  ext_attrs=ext_attrs, span=self._span(start))

        name = self._name(self._expect_ident())
        inheritance = None if partial else self._parse_inheritance()
        members = self._parse_body(self._parse_interface_member)
        return Interface(name=name, inheritance=inheritance, members=members,
                         partial=partial, ext_attrs=ext_attrs,
                         span=self._span(start))

    def _parse_partial(self, start: Token, ext_attrs):
        self._expect("partial")
        if self._is("interface"):
            return self._parse_interface(start, ext_attrs, partial=True)
        if self._is("dictionary"):
            return self._parse_dictionary(start, ext_attrs, partial=True)
        if self._is("namespace"):
            return self._parse_namespace(start, ext_attrs, partial=True)
        self._fail(("interface", "dictionary", "namespace"))

    def _parse_callback(self, start: Token, ext_attrs):
        self._expect("callback")
        if self._accept("interface"):
            name = self._name(self._expect_ident())
            members = self._parse_body(self._parse_callback_interface_member)
            return CallbackInterface(name=name, members=members,
                                     ext_attrs=ext_attrs,
                                     span=self._span(start))

        name = self._name(self._expect_ident())
        self._expect("=")
        return_type = self._parse_type()
        arguments = self._parse_arguments()
        self._expect(";")
        return CallbackFunction(name=name, return_type=return_type,
                                arguments=arguments, ext_attrs=ext_attrs,
                                span=self._span(start))

    def _parse_dictionary(self, start: Token, ext_attrs, partial: bool):
        self._expect("dictionary")
        name = self._name(self._expect_ident())
        inheritance = None if partial else self._parse_inheritance()
        members = self._parse_body(self._parse_field)
        return Dictionary(name=name, inheritance=inheritance, members=members,
                          partial=partial, ext_attrs=ext_attrs,
                          span=self._span(start))

    def _parse_namespace(self, start: Token, ext_attrs, partial: bool):
        self._expect("namespace")
        name = self._name(self._expect_ident())
        members = self._parse_body(self._parse_namespace_member)
        return Namespace(name=name, members=members, partial=partial,
                         ext_attrs=ext_attrs, span=self._span(start))

    def _parse_enum(self, start: Token, ext_attrs) -> Enum:
        self._expect("enum")
        name = self._name(self._expect_ident())
        self._expect("{")
        values: List[str] = []
        while True:
            if self._tok.kind != TOK_STRING:
                self._fail(("string",))
            values.append(self.advance().text[1:-1])
            if not self._accept(","):
                break
            if self._is("}"):
                break  # trailing comma
        self._expect("}")
        self._expect(";")
        return Enum(name=name, values=tuple(values), ext_attrs=ext_attrs,
                    span=self._span(start))

    def _parse_typedef(self, start: Token, ext_attrs) -> Typedef:
        self._expect("typedef")
        idl_type = self._parse_type_with_ext_attrs()
        name = self._name(self._expect_ident())
        self._expect(";")
        return Typedef(name=name, idl_type=idl_type, ext_attrs=ext_attrs,
                       span=self._span(start))

    def _parse_includes(self, start: Token, ext_attrs) -> Includes:
        target = self._name(self.advance())
        self._expect("includes")
        mixin = self._name(self._expect_ident())
        self._expect(";")
        return Includes(target=target, includes=mixin, ext_attrs=ext_attrs,
                        span=self._span(start))

    # ── Members ──────────────────────────────────────────────────────

    def _parse_interface_member(self) -> Member:
        start = self._tok
        ext_attrs = self._parse_ext_attrs()

        if self._is("const"):
            return self._parse_const(start, ext_attrs)
        if self._accept("constructor"):
            arguments = self._parse_arguments()
            self._expect(";")
            return Constructor(arguments=arguments, ext_attrs=ext_attrs,
                               span=self._span(start))
        if self._accept("static"):
            if self._is("readonly") or self._is("attribute"):
                return self._parse_attribute(start, ext_attrs, "static")
            return self._parse_operation(start, ext_attrs, "static")
        if self._is("stringifier"):
            return self._parse_stringifier(start, ext_attrs)
        if self._accept("inherit"):
            return self._parse_attribute_rest(start, ext_attrs, False,
                                              "inherit")
        for special in ("getter", "setter", "deleter"):
            if self._accept(special):
                return self._parse_operation(start, ext_attrs, special)
        if self._accept("readonly"):
            if self._is("maplike") or self._is("setlike"):
                return self._parse_maplike_or_setlike(start, ext_attrs,
                                                      readonly=True)
            if not self._is("attribute"):
                self._fail(("attribute", "maplike", "setlike"))
            return self._parse_attribute_rest(start, ext_attrs, True, None)
        if self._is("attribute"):
            return self._parse_attribute(start, ext_attrs, None)
        if self._is("iterable") or self._is("async") or \
                self._is("async_iterable"):
            return self._parse_iterable(start, ext_attrs)
        if self._is("maplike") or self._is("setlike"):
            return self._parse_maplike_or_setlike(start, ext_attrs,
                                                  readonly=False)
        if not self._at_type_start():
            self._fail(INTERFACE_MEMBER_START)
        return self._parse_operation(start, ext_attrs, None)

    def _parse_mixin_member(self) -> Member:
        start = self._tok
        ext_attrs = self._parse_ext_attrs()

        if self._is("const"):
            return self._parse_const(start, ext_attrs)
        if self._is("stringifier"):
            return self._parse_stringifier(start, ext_attrs)
        if self._is("readonly") or self._is("attribute"):
            return self._parse_attribute(start, ext_attrs, None)
        if not self._at_type_start():
            self._fail(("const", "stringifier", "readonly", "attribute",
                        "type"))
        return self._parse_operation(start, ext_attrs, None)

    def _parse_namespace_member(self) -> Member:
        start = self._tok
        ext_attrs = self._parse_ext_attrs()

        if self._is("const"):
            return self._parse_const(start, ext_attrs)
        if self._accept("readonly"):
            if not self._is("attribute"):
                self._fail(("attribute",))
            return self._parse_attribute_rest(start, ext_attrs, True, None)
        if not self._at_type_start():
            self._fail(("const", "readonly", "type"))
        return self._parse_operation(start, ext_attrs, None)

    def _parse_callback_interface_member(self) -> Member:
        start = self._tok
        ext_attrs = self._parse_ext_attrs()

        if self._is("const"):
            return self._parse_const(start, ext_attrs)
        if not self._at_type_start():
            self._fail(("const", "type"))
        return self._parse_operation(start, ext_attrs, None)

    def _parse_field(self) -> Field:
        start = self._tok
        ext_attrs = self._parse_ext_attrs()

        if self._accept("required"):
            idl_type = self._parse_type_with_ext_attrs()
            name = self._name(self._expect_ident())
            self._expect(";")
            return Field(name=name, idl_type=idl_type, required=True,
                         default=None, ext_attrs=ext_attrs,
                         span=self._span(start))

        if not self._at_type_start():
            self._fail(("required", "type"))
        idl_type = self._parse_type()
        name = self._name(self._expect_ident())
        default = self._parse_default()
        self._expect(";")
        return Field(name=name, idl_type=idl_type, required=False,
                     default=default, ext_attrs=ext_attrs,
                     span=self._span(start))

    def _parse_const(self, start: Token, ext_attrs) -> Constant:
        self._expect("const")
        idl_type = self._parse_const_type()
        name = self._name(self._expect_ident())
        self._expect("=")
        value = self._parse_const_value()
        self._expect(";")
        return Constant(name=name, idl_type=idl_type, value=value,
                        ext_attrs=ext_attrs, span=self._span(start))

    def _parse_attribute(self, start: Token, ext_attrs,
                         special: Optional[str]) -> Attribute:
        readonly = self._accept("readonly") is not None
        return self._parse_attribute_rest(start, ext_attrs, readonly, special)

    def _parse_attribute_rest(self, start: Token, ext_attrs, readonly: bool,
                              special: Optional[str]) -> Attribute:
        self._expect("attribute")
        idl_type = self._parse_type_with_ext_attrs()
        tok = self._tok
        if tok.kind == TOK_IDENT or (tok.kind == TOK_KEYWORD and
                                     tok.text in ATTRIBUTE_NAME_KEYWORDS):
            name = self._name(self.advance())
        else:
            self._fail(("identifier", "async", "required"))
        self._expect(";")
        return Attribute(name=name, idl_type=idl_type, readonly=readonly,
                         special=special, ext_attrs=ext_attrs,
                         span=self._span(start))

    def _parse_stringifier(self, start: Token, ext_attrs) -> Member:
        self._expect("stringifier")
        if self._accept(";"):
            return Operation(name=None, return_type=None, arguments=(),
                             special="stringifier", ext_attrs=ext_attrs,
                             span=self._span(start))
        if self._is("readonly") or self._is("attribute"):
            return self._parse_attribute(start, ext_attrs, "stringifier")
        return self._parse_operation(start, ext_attrs, "stringifier")

    def _parse_operation(self, start: Token, ext_attrs,
                         special: Optional[str]) -> Operation:
        return_type = self._parse_type()
        tok = self._tok
        name = None
        if tok.kind == TOK_IDENT or self._is("includes"):
            name = self._name(self.advance())
        elif special in (None, "static"):
            self._fail(("identifier", "includes"))
        arguments = self._parse_arguments()
        self._expect(";")
        return Operation(name=name, return_type=return_type,
                         arguments=arguments, special=special,
                         ext_attrs=ext_attrs, span=self._span(start))

    def _parse_iterable(self, start: Token, ext_attrs) -> Iterable:
        if self._accept("async_iterable"):
            is_async = True
        else:
            is_async = self._accept("async") is not None
            self._expect("iterable")
        type_args = self._parse_type_args(1, 2)
        arguments: Tuple[Argument, ...] = ()
        if is_async and self._is("("):
            arguments = self._parse_arguments()
        self._expect(";")
        return Iterable(type_args=type_args, async_=is_async,
                        arguments=arguments, ext_attrs=ext_attrs,
                        span=self._span(start))

    def _parse_maplike_or_setlike(self, start: Token, ext_attrs,
                                  readonly: bool) -> Member:
        if self._accept("maplike"):
            type_args = self._parse_type_args(2, 2)
            self._expect(";")
            return Maplike(type_args=type_args, readonly=readonly,
                           ext_attrs=ext_attrs, span=self._span(start))
        self._expect("setlike")
        type_args = self._parse_type_args(1, 1)
        self._expect(";")
        return Setlike(type_args=type_args, readonly=readonly,
                       ext_attrs=ext_attrs, span=self._span(start))

    def _parse_type_args(self, least: int, most: int) -> Tuple[IdlType, ...]:
        self._expect("<")
        type_args = [self._parse_type_with_ext_attrs()]
        while len(type_args) < most and self._accept(","):
            type_args.append(self._parse_type_with_ext_attrs())
        if len(type_args) < least:
            self._fail((",",))
        self._expect(">")
        return tuple(type_args)

    # ── Arguments ────────────────────────────────────────────────────

    def _parse_arguments(self) -> Tuple[Argument, ...]:
        self._expect("(")
        arguments: List[Argument] = []
        if not self._is(")"):
            arguments.append(self._parse_argument())
            while self._accept(","):
                arguments.append(self._parse_argument())
        self._expect(")")
        return tuple(arguments)

    def _parse_argument(self) -> Argument:
        start = self._tok
        ext_attrs = self._parse_ext_attrs()

        if self._accept("optional"):
            idl_type = self._parse_type_with_ext_attrs()
            name = self._parse_argument_name()
            default = self._parse_default()
            return Argument(name=name, idl_type=idl_type, optional=True,
                            variadic=False, default=default,
                            ext_attrs=ext_attrs, span=self._span(start))

        idl_type = self._parse_type()
        variadic = self._accept("...") is not None
        name = self._parse_argument_name()
        return Argument(name=name, idl_type=idl_type, optional=False,
                        variadic=variadic, default=None, ext_attrs=ext_attrs,
                        span=self._span(start))

    def _parse_argument_name(self) -> str:
        tok = self._tok
        if tok.kind == TOK_IDENT or (tok.kind == TOK_KEYWORD and
                                     tok.text in ARGUMENT_NAME_KEYWORDS):
            return self._name(self.advance())
        self._fail(("identifier",))

    # ── Values ───────────────────────────────────────────────────────

    def _parse_const_value(self) -> Literal:
        tok = self._tok
        if self._is("true") or self._is("false"):
            self.advance()
            return Literal("boolean", tok.text == "true")
        if tok.kind == TOK_INTEGER:
            self.advance()
            return Literal("integer", tok.text)
        if tok.kind == TOK_FLOAT or (tok.kind == TOK_KEYWORD and
                                     tok.text in FLOAT_KEYWORDS):
            self.advance()
            return Literal("float", tok.text)
        self._fail(("true", "false", "integer", "float"))

    def _parse_default(self) -> Optional[Literal]:
        if not self._accept("="):
            return None
        tok = self._tok
        if tok.kind == TOK_STRING:
            self.advance()
            return Literal("string", tok.text[1:-1])
        if self._accept("null"):
            return Literal("null", None)
        if self._accept("["):
            self._expect("]")
            return Literal("sequence", None)
        if self._accept("{"):
            self._expect("}")
            return Literal("dictionary", None)
        if tok.kind in (TOK_INTEGER, TOK_FLOAT) or tok.text in (
                "true", "false", "Infinity", "-Infinity", "NaN"):
            return self._parse_const_value()
        self._fail(("string", "null", "[", "{", "true", "false", "integer",
                    "float"))

    # ── Types ────────────────────────────────────────────────────────

    def _at_type_start(self) -> bool:
        tok = self._tok
        return (tok.kind == TOK_IDENT or self._is("(") or
                (tok.kind == TOK_KEYWORD and tok.text in TYPE_KEYWORDS))

    def _parse_type_with_ext_attrs(self) -> IdlType:
        ext_attrs = self._parse_ext_attrs()
        idl_type = self._parse_type()
        if ext_attrs:
            return AnnotatedType(idl_type, ext_attrs)
        return idl_type

    def _parse_type(self) -> IdlType:
        self._enter()
        try:
            if self._is("("):
                idl_type = self._parse_union()
            else:
                idl_type = self._parse_single_type()
            return self._parse_nullable(idl_type)
        finally:
            self._depth -= 1

    def _parse_nullable(self, idl_type: IdlType) -> IdlType:
        # '?' wraps everything parsed so far, so "(A or B)?" is a nullable union.
        while self._is("?"):
            if not can_be_nullable(idl_type):
                self._fail(
                    message="nullable suffix '?' is not allowed on this type")
            self.advance()
            idl_type = NullableType(idl_type)
        return idl_type

    def _parse_union(self) -> UnionType:
        self._expect("(")
        members = [self._parse_type_with_ext_attrs()]
        self._expect("or")
        members.append(self._parse_type_with_ext_attrs())
        while self._accept("or"):
            members.append(self._parse_type_with_ext_attrs())
        self._expect(")")
        return UnionType(tuple(members))

    def _parse_single_type(self) -> IdlType:
        tok = self._tok
        if tok.kind == TOK_IDENT:
            return NamedType(self._name(self.advance()))
        if tok.kind != TOK_KEYWORD or tok.text not in TYPE_KEYWORDS:
            self._fail(("type",))

        word = self.advance().text
        if word in GENERIC_TYPES:
            self._expect("<")
            element = self._parse_type_with_ext_attrs()
            self._expect(">")
            return generic_type(word, element)
        if word == "record":
            self._expect("<")
            key = self._parse_type_with_ext_attrs()
            self._expect(",")
            value = self._parse_type_with_ext_attrs()
            self._expect(">")
            return RecordType(key, value)
        return PrimitiveType(self._parse_primitive_rest(word))

    def _parse_primitive_rest(self, word: str) -> str:
        """Complete multiword primitive names after their first keyword."""
        if word == "unsigned":
            rest = self._expect("short", "long").text
            if rest == "long" and self._accept("long"):
                return "unsigned long long"
            return f"unsigned {rest}"
        if word == "unrestricted":
            return "unrestricted " + self._expect("float", "double").text
        if word == "long" and self._accept("long"):
            return "long long"
        return word

    def _parse_const_type(self) -> IdlType:
        tok = self._tok
        if tok.kind == TOK_IDENT:
            return NamedType(self._name(self.advance()))
        if tok.kind == TOK_KEYWORD and tok.text in TYPE_KEYWORDS \
                and tok.text not in GENERIC_TYPES and tok.text != "record":
            return PrimitiveType(self._parse_primitive_rest(self.advance().text))
        self._fail(("type",))

    # ── Extended attributes ──────────────────────────────────────────

    def _parse_ext_attrs(self) -> Tuple[ExtendedAttribute, ...]:
        if not self._is("["):
            return ()
        self._enter()
        try:
            self.advance()
            attrs = [self._parse_ext_attr()]
            while self._accept(","):
                attrs.append(self._parse_ext_attr())
            self._expect("]")
            return tuple(attrs)
        finally:
            self._depth -= 1

    def _parse_ext_attr(self) -> ExtendedAttribute:
        start = self._tok
        name = self._name(self._expect_ident())
        arguments = None
        rhs = None
        if self._is("("):
            arguments = self._parse_arguments()
        elif self._accept("="):
            rhs = self._parse_ext_attr_rhs()
            if rhs.kind == "identifier" and self._is("("):
                arguments = self._parse_arguments()
        return ExtendedAttribute(name=name, arguments=arguments, rhs=rhs,
                                 span=self._span(start))

    def _parse_ext_attr_rhs(self) -> ExtendedAttributeRhs:
        tok = self._tok
        if self._accept("*"):
            return ExtendedAttributeRhs("wildcard", "*")
        if tok.kind == TOK_IDENT:
            return ExtendedAttributeRhs("identifier", self._name(self.advance()))
        if tok.kind == TOK_STRING:
            return ExtendedAttributeRhs("string", self.advance().text[1:-1])
        if tok.kind in (TOK_INTEGER, TOK_FLOAT):
            return ExtendedAttributeRhs(tok.kind, self.advance().text)
        if not self._is("("):
            self._fail(("identifier", "string", "integer", "float", "*", "("))

        self.advance()
        first = self._tok
        if first.kind not in RHS_LIST_KINDS:
            self._fail(("identifier", "string", "integer", "float"))
        items: List[str] = []
        while True:
            if self._tok.kind != first.kind:
                self._fail((first.kind,))
            items.append(self._rhs_item(self.advance()))
            if not self._accept(","):
                break
        self._expect(")")
        return ExtendedAttributeRhs(RHS_LIST_KINDS[first.kind], tuple(items))

    def _rhs_item(self, tok: Token) -> str:
        if tok.kind == TOK_STRING:
            return tok.text[1:-1]
        return self._name(tok)


def parse(text: str, source: Optional[str] = None) -> ParseResult:
    """
    Parse WebIDL source text.

    Never raises for malformed input: the first LexError or IdlSyntaxError is
    returned in ``ParseResult.error`` with its position, and no partial tree
    is kept.
    """
    try:
        definitions = Parser(tokenize(text), source=source).parse()
    except ParseError as e:
        if e.source is None:
            e.source = source
        log.debug("parse failed: %s", e)
        return ParseResult(error=e)
    log.debug("parsed %d definitions from %s", len(definitions),
              source or "<string>")
    return ParseResult(definitions=definitions)
