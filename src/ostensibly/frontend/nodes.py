"""Syntax-node model consumed by declaration discovery and assembly.

Front ends build these once per source file; nothing mutates them
afterwards. Every node carries the documentation blocks written directly
before it and a link to its parent. ``children()`` yields child nodes in
document order, which is the traversal order of a whole run.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum

from ostensibly.frontend.identifiers import Identifier, PrivateIdentifier, QualifiedName
from ostensibly.frontend.jsdoc import DocBlock, DocTag, TagRole, TypeParameter
from ostensibly.frontend.typeexpr import TypeExpr


class Modifier(str, Enum):
    EXPORT = "export"
    DEFAULT = "default"
    STATIC = "static"
    ASYNC = "async"
    PRIVATE = "private"
    PROTECTED = "protected"
    PUBLIC = "public"
    READONLY = "readonly"
    ABSTRACT = "abstract"


@dataclass(eq=False, kw_only=True)
class SyntaxNode:
    docs: list[DocBlock] = field(default_factory=list)
    parent: SyntaxNode | None = field(default=None, repr=False)

    def children(self) -> Iterator[SyntaxNode]:
        return iter(())

    def all_tags(self, *roles: TagRole) -> list[DocTag]:
        """Tags from every attached block, optionally limited to some roles."""
        return [tag for doc in self.docs for tag in doc.tags if not roles or tag.role in roles]

    def has_tag(self, *roles: TagRole) -> bool:
        return any(doc.has(*roles) for doc in self.docs)

    @property
    def template_parameters(self) -> list[TypeParameter]:
        return [param for doc in self.docs for param in doc.type_parameters]


# -- expressions -----------------------------------------------------------


@dataclass(eq=False, kw_only=True)
class LiteralExpression(SyntaxNode):
    value: str | int | float | bool


@dataclass(eq=False, kw_only=True)
class IdentifierReference(SyntaxNode):
    name: str


@dataclass(eq=False, kw_only=True)
class ArrayLiteral(SyntaxNode):
    elements: list[SyntaxNode] = field(default_factory=list)

    def children(self) -> Iterator[SyntaxNode]:
        yield from self.elements


@dataclass(eq=False, kw_only=True)
class PropertyAssignment(SyntaxNode):
    """``key: value`` inside an object literal."""

    name: Identifier
    initializer: SyntaxNode | None = None

    def children(self) -> Iterator[SyntaxNode]:
        if self.initializer is not None:
            yield self.initializer


@dataclass(eq=False, kw_only=True)
class ObjectLiteral(SyntaxNode):
    properties: list[SyntaxNode] = field(default_factory=list)

    def children(self) -> Iterator[SyntaxNode]:
        yield from self.properties


@dataclass(eq=False, kw_only=True)
class GenericNode(SyntaxNode):
    """Any construct the generator has no dedicated model for."""

    kind: str
    nodes: list[SyntaxNode] = field(default_factory=list)
    modifiers: frozenset[Modifier] = frozenset()

    def children(self) -> Iterator[SyntaxNode]:
        yield from self.nodes


# -- classes ---------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class HeritageExpression:
    """A base type written in a class's ``extends`` clause."""

    name: Identifier | QualifiedName
    type_arguments: tuple[TypeExpr, ...] = ()


@dataclass(eq=False, kw_only=True)
class Parameter(SyntaxNode):
    """A formal parameter. ``name`` is the source text for destructuring patterns."""

    name: str
    index: int = 0
    rest: bool = False
    has_initializer: bool = False
    pattern: bool = False


@dataclass(eq=False, kw_only=True)
class ClassMember(SyntaxNode):
    name: Identifier | PrivateIdentifier | None = None
    modifiers: frozenset[Modifier] = frozenset()

    @property
    def is_static(self) -> bool:
        return Modifier.STATIC in self.modifiers

    @property
    def is_async(self) -> bool:
        return Modifier.ASYNC in self.modifiers


@dataclass(eq=False, kw_only=True)
class PropertyDeclaration(ClassMember):
    initializer: SyntaxNode | None = None
    question: bool = False

    def children(self) -> Iterator[SyntaxNode]:
        if self.initializer is not None:
            yield self.initializer


@dataclass(eq=False, kw_only=True)
class FunctionLike(ClassMember):
    parameters: list[Parameter] = field(default_factory=list)
    body: list[SyntaxNode] = field(default_factory=list)

    def children(self) -> Iterator[SyntaxNode]:
        yield from self.parameters
        yield from self.body


@dataclass(eq=False, kw_only=True)
class ConstructorDeclaration(FunctionLike):
    pass


@dataclass(eq=False, kw_only=True)
class MethodDeclaration(FunctionLike):
    asterisk: bool = False
    question: bool = False


@dataclass(eq=False, kw_only=True)
class GetAccessor(FunctionLike):
    pass


@dataclass(eq=False, kw_only=True)
class SetAccessor(FunctionLike):
    pass


@dataclass(eq=False, kw_only=True)
class ClassDeclaration(SyntaxNode):
    name: Identifier | None = None
    modifiers: frozenset[Modifier] = frozenset()
    extends: HeritageExpression | None = None
    members: list[ClassMember] = field(default_factory=list)

    def children(self) -> Iterator[SyntaxNode]:
        yield from self.members


# -- statements ------------------------------------------------------------


@dataclass(eq=False, kw_only=True)
class VariableDeclaration(SyntaxNode):
    name: str
    initializer: SyntaxNode | None = None

    def children(self) -> Iterator[SyntaxNode]:
        if self.initializer is not None:
            yield self.initializer


@dataclass(eq=False, kw_only=True)
class VariableStatement(SyntaxNode):
    declarations: list[VariableDeclaration] = field(default_factory=list)
    modifiers: frozenset[Modifier] = frozenset()

    def children(self) -> Iterator[SyntaxNode]:
        yield from self.declarations


@dataclass(frozen=True, slots=True)
class ImportBinding:
    """``{property_name as name}``; ``property_name`` is None without ``as``."""

    name: str
    property_name: str | None = None


@dataclass(eq=False, kw_only=True)
class ImportDeclaration(SyntaxNode):
    module_specifier: str
    default_name: str | None = None
    namespace_name: str | None = None
    named_bindings: list[ImportBinding] = field(default_factory=list)

    def local_names(self) -> list[str]:
        names = [self.default_name, self.namespace_name, *(b.name for b in self.named_bindings)]
        return [name for name in names if name]


@dataclass(eq=False, kw_only=True)
class ExportDeclaration(SyntaxNode):
    """``export {a, b as c}`` with an optional ``from`` clause."""

    elements: list[ImportBinding] = field(default_factory=list)
    module_specifier: str | None = None


@dataclass(eq=False, kw_only=True)
class SourceFile(SyntaxNode):
    file_name: str
    statements: list[SyntaxNode] = field(default_factory=list)
    is_declaration_file: bool = False

    def children(self) -> Iterator[SyntaxNode]:
        yield from self.statements

    def imported_from(self, local_name: str) -> str | None:
        """Module specifier a top-level name was imported from, if any."""
        for statement in self.statements:
            if isinstance(statement, ImportDeclaration) and local_name in statement.local_names():
                return statement.module_specifier
        return None


def set_parents(node: SyntaxNode) -> None:
    """Link every descendant of ``node`` to its parent."""
    for child in node.children():
        child.parent = node
        set_parents(child)
