"""Member visibility and class heritage."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ostensibly.declare.namespaces import EntryKind
from ostensibly.declare.vocabulary import is_extends, is_hidden
from ostensibly.frontend.identifiers import PrivateIdentifier, name_text
from ostensibly.frontend.jsdoc import HeritageTag, TagRole
from ostensibly.frontend.nodes import (
    ClassDeclaration,
    ClassMember,
    IdentifierReference,
    Modifier,
    PropertyDeclaration,
)
from ostensibly.frontend.typeexpr import ReferenceExpr

if TYPE_CHECKING:
    from ostensibly.frontend.checker import TypeChecker


@dataclass
class Heritage:
    extends: list[ReferenceExpr] = field(default_factory=list)
    implements: list[ReferenceExpr] = field(default_factory=list)


def filter_members(kind: EntryKind, members: list[ClassMember]) -> list[ClassMember]:
    """Members of a class that need declaring.

    ``#private`` names are always dropped. A namespace-kind class also drops
    members that merely re-expose a same-named value (``Foo = Foo``) unless
    they carry ``@type``; any other kind drops ``private`` members. Members
    tagged ``@internal`` or ``@inheritDoc`` never survive.
    """
    return [member for member in members if _is_declared(kind, member)]


def _is_declared(kind: EntryKind, member: ClassMember) -> bool:
    if any(is_hidden(tag) for tag in member.all_tags()):
        return False
    if member.name is None:
        return True
    if isinstance(member.name, PrivateIdentifier):
        return False
    if kind is EntryKind.NAMESPACE:
        initializer = member.initializer if isinstance(member, PropertyDeclaration) else None
        same_name = isinstance(initializer, IdentifierReference) and initializer.name == member.name.text
        return not same_name or member.has_tag(TagRole.TYPE)
    return Modifier.PRIVATE not in member.modifiers


def compute_heritage(node: ClassDeclaration) -> Heritage:
    """Extends from the class clause plus ``@extends`` tags, implements from ``@implements``.

    Extends entries are keyed by their rightmost name: a later entry for the
    same name replaces the earlier one but keeps its position.
    """
    extends: dict[str, ReferenceExpr] = {}
    if node.extends is not None:
        extends[name_text(node.extends.name) or ""] = ReferenceExpr(node.extends.name, node.extends.type_arguments)
    for tag in node.all_tags():
        if is_extends(tag) and isinstance(tag, HeritageTag) and tag.type_expression is not None:
            extends[name_text(tag.type_expression.name) or ""] = tag.type_expression

    implements = [
        tag.type_expression
        for tag in node.all_tags(TagRole.IMPLEMENTS)
        if isinstance(tag, HeritageTag) and tag.type_expression is not None
    ]
    return Heritage(extends=list(extends.values()), implements=implements)


def needs_interface(node: ClassDeclaration, checker: TypeChecker) -> bool:
    """Whether any extended type lacks a construct signature."""
    return any(not checker.is_constructable(base) for base in compute_heritage(node).extends)
