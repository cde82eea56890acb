"""Type-checking oracle.

The declaration core asks a checker three questions: what a documented type
expression most likely is, how it reads as text, and whether a base type can
be constructed. :class:`DocumentedChecker` answers from what the loaded
program itself declares; anything it cannot place is the error sentinel.
"""

from __future__ import annotations

from typing import Protocol

from ostensibly.declare.types import (
    ANY,
    ERROR_TYPE,
    ArrayOf,
    ErrorType,
    FunctionType,
    IntersectionOf,
    Keyword,
    LiteralValue,
    NamedType,
    Parameter,
    ResolvedType,
    StructMember,
    StructType,
    TypeOperator,
    UnionOf,
    VOID,
)
from ostensibly.frontend.identifiers import qualified_text
from ostensibly.frontend.jsdoc import DocTypeLiteral, TagRole, TypeDefiningTag
from ostensibly.frontend.nodes import ClassDeclaration, HeritageExpression, ImportDeclaration
from ostensibly.frontend.program import Program
from ostensibly.frontend.typeexpr import (
    ArrayExpr,
    FunctionExpr,
    IntersectionExpr,
    KeywordExpr,
    LiteralExpr,
    OperatorExpr,
    OptionalExpr,
    RecordExpr,
    ReferenceExpr,
    RestExpr,
    TypeExpr,
    UnionExpr,
)

# JSDoc spellings of primitives
PRIMITIVE_ALIASES: dict[str, str] = {
    "String": "string",
    "Number": "number",
    "Boolean": "boolean",
    "Symbol": "symbol",
    "BigInt": "bigint",
    "Object": "any",
    "Undefined": "undefined",
    "Null": "null",
    "Void": "void",
}

CONSTRUCTABLE_GLOBALS = frozenset(
    {
        "Array",
        "ArrayBuffer",
        "Date",
        "Error",
        "EventTarget",
        "Function",
        "Map",
        "Object",
        "Promise",
        "RangeError",
        "RegExp",
        "Set",
        "TypeError",
        "Uint8Array",
        "URL",
        "WeakMap",
        "WeakSet",
    }
)

GLOBAL_TYPES = CONSTRUCTABLE_GLOBALS | frozenset(
    {
        "ArrayLike",
        "AsyncGenerator",
        "AsyncIterable",
        "AsyncIterator",
        "Exclude",
        "Extract",
        "Generator",
        "InstanceType",
        "Iterable",
        "IterableIterator",
        "Iterator",
        "NonNullable",
        "Omit",
        "Parameters",
        "Partial",
        "Pick",
        "PromiseLike",
        "Readonly",
        "ReadonlyArray",
        "Record",
        "Required",
        "ReturnType",
    }
)


class TypeChecker(Protocol):
    """What the declaration core needs from a type checker."""

    def guess(self, expr: TypeExpr) -> ResolvedType | ErrorType:
        """Best-guess declaration-ready type for a type expression."""
        ...

    def type_to_string(self, expr: TypeExpr | DocTypeLiteral | None) -> str:
        """Display text of a type expression."""
        ...

    def is_constructable(self, base: HeritageExpression | ReferenceExpr) -> bool:
        """Whether a base type has a construct signature."""
        ...


class DocumentedChecker:
    """Checker backed by the names a program declares.

    Known names are: classes (by their own name and by the namespace path
    their ``@namespace``/``@alias`` tag gives them), every typedef, callback
    and enum name, every imported binding, and well-known globals.
    """

    def __init__(
        self,
        classes: set[str] | None = None,
        type_names: set[str] | None = None,
        imported: set[str] | None = None,
    ) -> None:
        self._classes = classes or set()
        self._type_names = type_names or set()
        self._imported = imported or set()

    @classmethod
    def from_program(cls, program: Program) -> DocumentedChecker:
        classes: set[str] = set()
        type_names: set[str] = set()
        imported: set[str] = set()
        for node in program.walk():
            if isinstance(node, ClassDeclaration) and node.name is not None:
                classes.add(node.name.text)
                for tag in node.all_tags(TagRole.NAMESPACE, TagRole.ALIAS):
                    if tag.comment:
                        classes.add(tag.comment.split()[0])
            elif isinstance(node, ImportDeclaration):
                imported.update(node.local_names())
            for tag in node.all_tags(TagRole.TYPEDEF, TagRole.CALLBACK, TagRole.ENUM):
                if isinstance(tag, TypeDefiningTag) and tag.full_name is not None:
                    full = qualified_text(tag.full_name)
                    if tag.member_name:
                        full = f"{full}.{tag.member_name}"
                    type_names.add(full)
                    type_names.add(full.rsplit(".", 1)[-1])
        return cls(classes, type_names, imported)

    def is_known(self, name: str) -> bool:
        return (
            name in self._classes
            or name in self._type_names
            or name in self._imported
            or name.split(".", 1)[0] in self._imported
            or name in GLOBAL_TYPES
        )

    def guess(self, expr: TypeExpr) -> ResolvedType | ErrorType:
        if isinstance(expr, KeywordExpr):
            return Keyword(expr.name)
        if isinstance(expr, LiteralExpr):
            return LiteralValue(expr.value)
        if isinstance(expr, ReferenceExpr):
            return self._guess_reference(expr)
        if isinstance(expr, (OptionalExpr, RestExpr)):
            return self.guess(expr.inner)
        if isinstance(expr, ArrayExpr):
            return ArrayOf(self._guess_or_named(expr.element))
        if isinstance(expr, UnionExpr):
            return UnionOf(tuple(self._guess_or_named(m) for m in expr.members))
        if isinstance(expr, IntersectionExpr):
            return IntersectionOf(tuple(self._guess_or_named(m) for m in expr.members))
        if isinstance(expr, OperatorExpr):
            return TypeOperator(expr.operator, self._guess_or_named(expr.operand))
        if isinstance(expr, FunctionExpr):
            parameters = tuple(
                Parameter(
                    name=param.name or f"arg{index}",
                    type=self._guess_or_named(param.type),
                    optional=param.optional,
                    rest=param.rest,
                )
                for index, param in enumerate(expr.parameters)
            )
            returns = self._guess_or_named(expr.returns) if expr.returns is not None else VOID
            return FunctionType(parameters, returns)
        if isinstance(expr, RecordExpr):
            return StructType(
                tuple(
                    StructMember(
                        name=member.name,
                        type=self._guess_or_named(member.type) if member.type is not None else ANY,
                        optional=member.optional,
                    )
                    for member in expr.members
                )
            )
        return ERROR_TYPE

    def _guess_reference(self, expr: ReferenceExpr) -> ResolvedType | ErrorType:
        name = qualified_text(expr.name)
        if name in PRIMITIVE_ALIASES:
            if name == "Object" and len(expr.arguments) == 2:
                return NamedType("Record", tuple(self._guess_or_named(a) for a in expr.arguments))
            return Keyword(PRIMITIVE_ALIASES[name])
        if name == "Array" and not expr.arguments:
            return ArrayOf(ANY)
        if self.is_known(name):
            return NamedType(name, tuple(self._guess_or_named(a) for a in expr.arguments))
        return ERROR_TYPE

    def _guess_or_named(self, expr: TypeExpr) -> ResolvedType:
        guessed = self.guess(expr)
        if isinstance(guessed, ErrorType):
            if isinstance(expr, ReferenceExpr):
                return NamedType(qualified_text(expr.name))
            return ANY
        return guessed

    def type_to_string(self, expr: TypeExpr | DocTypeLiteral | None) -> str:
        if isinstance(expr, ReferenceExpr):
            return qualified_text(expr.name)
        if isinstance(expr, KeywordExpr):
            return expr.name
        return ""

    def is_constructable(self, base: HeritageExpression | ReferenceExpr) -> bool:
        name = qualified_text(base.name)
        return (
            name in self._classes
            or name in CONSTRUCTABLE_GLOBALS
            or name in self._imported
            or name.split(".", 1)[0] in self._imported
        )
