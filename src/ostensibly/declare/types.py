"""Resolved types: the declaration-ready type model.

A closed set of frozen dataclasses built bottom-up by the type resolver and
the checker. Nothing in here refers back to documentation tags or syntax
nodes; every leaf is a keyword, a literal or a named reference.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Keyword:
    """``string``, ``number``, ``void``, ``never``, ``any`` ..."""

    name: str


@dataclass(frozen=True, slots=True)
class LiteralValue:
    value: str | int | float | bool


@dataclass(frozen=True, slots=True)
class NamedType:
    """A reference to a named type, e.g. ``Shapes.Foo`` or ``Promise<T>``."""

    name: str
    arguments: tuple[ResolvedType, ...] = ()


@dataclass(frozen=True, slots=True)
class UnionOf:
    members: tuple[ResolvedType, ...]


@dataclass(frozen=True, slots=True)
class IntersectionOf:
    members: tuple[ResolvedType, ...]


@dataclass(frozen=True, slots=True)
class ArrayOf:
    element: ResolvedType


@dataclass(frozen=True, slots=True)
class TypeOperator:
    """``typeof X`` or ``keyof T``, carried through as written."""

    operator: str
    operand: ResolvedType


@dataclass(frozen=True, slots=True)
class TypeParameter:
    name: str
    constraint: ResolvedType | None = None
    default: ResolvedType | None = None


@dataclass(frozen=True, slots=True)
class Parameter:
    name: str
    type: ResolvedType
    optional: bool = False
    rest: bool = False


@dataclass(frozen=True, slots=True)
class FunctionType:
    parameters: tuple[Parameter, ...]
    returns: ResolvedType
    type_parameters: tuple[TypeParameter, ...] = ()


@dataclass(frozen=True, slots=True)
class StructMember:
    name: str
    type: ResolvedType
    optional: bool = False
    description: str | None = None


@dataclass(frozen=True, slots=True)
class StructType:
    members: tuple[StructMember, ...] = ()


ResolvedType = (
    Keyword
    | LiteralValue
    | NamedType
    | UnionOf
    | IntersectionOf
    | ArrayOf
    | TypeOperator
    | FunctionType
    | StructType
)


@dataclass(frozen=True, slots=True)
class ErrorType:
    """Sentinel a checker returns when it cannot type an expression."""


ERROR_TYPE = ErrorType()
ANY = Keyword("any")
VOID = Keyword("void")
NEVER = Keyword("never")


def promise_of(inner: ResolvedType) -> NamedType:
    return NamedType("Promise", (inner,))
