"""Documentation block and tag model.

A documentation block is one ``/** ... */`` comment: a free-text description
followed by tags. Tags are closed over :class:`TagRole`; each role that
carries structure has its own tag class, every other role keeps its body as
free text in ``comment``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ostensibly.frontend.identifiers import Identifier, QualifiedName
from ostensibly.frontend.typeexpr import ReferenceExpr, TypeExpr


class TagRole(str, Enum):
    """Every tag role the generator understands."""

    MODULE = "module"
    NAMESPACE = "namespace"
    ALIAS = "alias"
    ENUM = "enum"
    TYPEDEF = "typedef"
    CALLBACK = "callback"
    PARAM = "param"
    PROPERTY = "property"
    TEMPLATE = "template"
    TYPE_PARAM = "typeParam"
    ABSTRACT = "abstract"
    PRIVATE = "private"
    INTERNAL = "internal"
    OVERLOAD = "overload"
    THROWS = "throws"
    EXTENDS = "extends"
    IMPLEMENTS = "implements"
    INHERIT_DOC = "inheritDoc"
    RETURNS = "returns"
    TYPE = "type"
    OTHER = "other"

    @classmethod
    def from_tag_name(cls, tag_name: str) -> TagRole:
        """Classify a written tag name (case-insensitive, synonyms folded)."""
        return _TAG_NAMES.get(tag_name.lower(), cls.OTHER)


_TAG_NAMES: dict[str, TagRole] = {
    "module": TagRole.MODULE,
    "namespace": TagRole.NAMESPACE,
    "alias": TagRole.ALIAS,
    "enum": TagRole.ENUM,
    "typedef": TagRole.TYPEDEF,
    "callback": TagRole.CALLBACK,
    "param": TagRole.PARAM,
    "parameter": TagRole.PARAM,
    "arg": TagRole.PARAM,
    "argument": TagRole.PARAM,
    "prop": TagRole.PROPERTY,
    "property": TagRole.PROPERTY,
    "template": TagRole.TEMPLATE,
    "typeparam": TagRole.TYPE_PARAM,
    "abstract": TagRole.ABSTRACT,
    "virtual": TagRole.ABSTRACT,
    "private": TagRole.PRIVATE,
    "internal": TagRole.INTERNAL,
    "overload": TagRole.OVERLOAD,
    "throws": TagRole.THROWS,
    "exception": TagRole.THROWS,
    "extends": TagRole.EXTENDS,
    "augments": TagRole.EXTENDS,
    "implements": TagRole.IMPLEMENTS,
    "inheritdoc": TagRole.INHERIT_DOC,
    "returns": TagRole.RETURNS,
    "return": TagRole.RETURNS,
    "type": TagRole.TYPE,
}


@dataclass(frozen=True, slots=True)
class TypeParameter:
    """One name declared by a ``@template`` tag."""

    name: str
    constraint: TypeExpr | None = None
    default: TypeExpr | None = None


@dataclass(eq=False, kw_only=True)
class DocTag:
    role: TagRole
    tag_name: str
    comment: str | None = None
    body: str = ""  # everything written after the tag name
    block: DocBlock | None = field(default=None, repr=False)


@dataclass(eq=False, kw_only=True)
class PropertyLikeTag(DocTag):
    """``@param`` or ``@property``. Dotted names address nested members."""

    name: Identifier | QualifiedName
    type_expression: TypeExpr | DocTypeLiteral | None = None
    bracketed: bool = False
    default: str | None = None


@dataclass(eq=False, kw_only=True)
class ReturnTag(DocTag):
    type_expression: TypeExpr | None = None


@dataclass(eq=False, kw_only=True)
class TypeTag(DocTag):
    type_expression: TypeExpr | DocTypeLiteral | None = None


@dataclass(eq=False, kw_only=True)
class TemplateTag(DocTag):
    type_parameters: list[TypeParameter] = field(default_factory=list)


@dataclass(eq=False, kw_only=True)
class HeritageTag(DocTag):
    """``@extends``/``@augments`` or ``@implements``."""

    type_expression: ReferenceExpr | None = None


@dataclass(eq=False)
class Signature:
    type_parameters: list[TypeParameter] = field(default_factory=list)
    parameters: list[PropertyLikeTag] = field(default_factory=list)
    returns: ReturnTag | None = None


@dataclass(eq=False, kw_only=True)
class OverloadTag(DocTag):
    signature: Signature = field(default_factory=Signature)


@dataclass(eq=False, kw_only=True)
class TypeDefiningTag(DocTag):
    """Base for ``@typedef``, ``@callback`` and ``@enum``.

    ``full_name`` is the namepath up to a ``~``/``#`` member separator and
    ``member_name`` what follows it, so ``Shapes.Foo~Size`` is
    ``(Shapes.Foo, "Size")`` and ``Shapes.Foo`` is ``(Shapes.Foo, None)``.
    ``scope_type_parameters`` overrides the block's ``@template`` names as the
    alias-level type parameters.
    """

    full_name: Identifier | QualifiedName | None = None
    member_name: str | None = None
    type_expression: TypeExpr | DocTypeLiteral | None = None
    scope_type_parameters: list[TypeParameter] | None = None


@dataclass(eq=False, kw_only=True)
class TypedefTag(TypeDefiningTag):
    pass


@dataclass(eq=False, kw_only=True)
class CallbackTag(TypeDefiningTag):
    signature: Signature = field(default_factory=Signature)


@dataclass(eq=False, kw_only=True)
class EnumTag(TypeDefiningTag):
    pass


@dataclass(eq=False)
class DocTypeLiteral:
    """An object type spelled out by ``@property``/nested ``@param`` tags.

    ``base`` is set when the literal refines a tag's own declared type; the
    two are then intersected.
    """

    properties: list[PropertyLikeTag] = field(default_factory=list)
    is_array: bool = False
    base: TypeExpr | None = None


@dataclass(eq=False)
class DocBlock:
    description: str | None = None
    tags: list[DocTag] = field(default_factory=list)

    def __post_init__(self) -> None:
        for tag in self.tags:
            adopt(self, tag)

    def tags_with(self, *roles: TagRole) -> list[DocTag]:
        return [tag for tag in self.tags if tag.role in roles]

    def has(self, *roles: TagRole) -> bool:
        return any(tag.role in roles for tag in self.tags)

    @property
    def type_parameters(self) -> list[TypeParameter]:
        """Every ``@template`` name declared in this block, in order."""
        return [
            param
            for tag in self.tags
            if isinstance(tag, TemplateTag)
            for param in tag.type_parameters
        ]


def adopt(block: DocBlock, tag: DocTag) -> None:
    """Point a tag, and every tag nested inside it, at its owning block.

    Tags already owned by a block keep their owner.
    """
    if tag.block is None:
        tag.block = block
    if isinstance(tag, (PropertyLikeTag, TypeTag, TypeDefiningTag)) and isinstance(
        tag.type_expression, DocTypeLiteral
    ):
        for prop in tag.type_expression.properties:
            adopt(block, prop)
    if isinstance(tag, (CallbackTag, OverloadTag)):
        for param in tag.signature.parameters:
            adopt(block, param)
        if tag.signature.returns is not None:
            adopt(block, tag.signature.returns)
