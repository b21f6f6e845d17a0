"""
Type references: the closed set of WebIDL type expressions.

Types are plain values with no source positions, so two spellings of the same
type compare equal.
"""

from dataclasses import dataclass
from typing import ClassVar, Tuple, Union

# Keyword types that stand on their own.
SIMPLE_TYPES = {
    "any", "undefined", "boolean", "byte", "octet", "bigint", "object",
    "symbol", "ByteString", "DOMString", "USVString",
}

# Buffer-related types; primitive for parsing purposes.
BUFFER_TYPES = {
    "ArrayBuffer", "SharedArrayBuffer", "DataView",
    "Int8Array", "Int16Array", "Int32Array",
    "Uint8Array", "Uint16Array", "Uint32Array", "Uint8ClampedArray",
    "BigInt64Array", "BigUint64Array",
    "Float16Array", "Float32Array", "Float64Array",
}

# Types that may not take the nullable suffix.
NEVER_NULLABLE = {"any", "undefined"}

# Generic keywords taking exactly one type argument.
GENERIC_TYPES = ("sequence", "FrozenArray", "ObservableArray", "Promise")


@dataclass(frozen=True)
class PrimitiveType:
    tag: ClassVar[str] = "primitive"
    name: str


@dataclass(frozen=True)
class NamedType:
    """Reference to an interface, dictionary, enum, typedef or callback."""
    tag: ClassVar[str] = "named"
    name: str


@dataclass(frozen=True)
class SequenceType:
    tag: ClassVar[str] = "sequence"
    element: "IdlType"


@dataclass(frozen=True)
class FrozenArrayType:
    tag: ClassVar[str] = "FrozenArray"
    element: "IdlType"


@dataclass(frozen=True)
class ObservableArrayType:
    tag: ClassVar[str] = "ObservableArray"
    element: "IdlType"


@dataclass(frozen=True)
class PromiseType:
    tag: ClassVar[str] = "Promise"
    result: "IdlType"


@dataclass(frozen=True)
class RecordType:
    tag: ClassVar[str] = "record"
    key: "IdlType"
    value: "IdlType"


@dataclass(frozen=True)
class UnionType:
    tag: ClassVar[str] = "union"
    members: Tuple["IdlType", ...]


@dataclass(frozen=True)
class NullableType:
    tag: ClassVar[str] = "nullable"
    inner: "IdlType"


@dataclass(frozen=True)
class AnnotatedType:
    """A type written with leading extended attributes, e.g. ``[Clamp] long``."""
    tag: ClassVar[str] = "annotated"
    inner: "IdlType"
    ext_attrs: tuple


IdlType = Union[PrimitiveType, NamedType, SequenceType, FrozenArrayType,
                ObservableArrayType, PromiseType, RecordType, UnionType,
                NullableType, AnnotatedType]


def generic_type(keyword: str, element: IdlType) -> IdlType:
    """Build the single-argument generic named by ``keyword``."""
    if keyword == "sequence":
        return SequenceType(element)
    if keyword == "FrozenArray":
        return FrozenArrayType(element)
    if keyword == "ObservableArray":
        return ObservableArrayType(element)
    if keyword == "Promise":
        return PromiseType(element)
    raise ValueError(f"not a single-argument generic: {keyword!r}")


def can_be_nullable(t: IdlType) -> bool:
    """Whether the ``?`` suffix is allowed directly after ``t``."""
    if isinstance(t, NullableType) or isinstance(t, PromiseType):
        return False
    if isinstance(t, PrimitiveType) and t.name in NEVER_NULLABLE:
        return False
    return True
