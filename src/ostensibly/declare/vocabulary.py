"""Tag classification predicates."""

from __future__ import annotations

from ostensibly.frontend.jsdoc import DocTag, TagRole

NAMESPACE_ROLES = frozenset({TagRole.NAMESPACE, TagRole.ALIAS})
TYPE_DEFINING_ROLES = frozenset({TagRole.TYPEDEF, TagRole.CALLBACK, TagRole.ENUM})
HIDDEN_ROLES = frozenset({TagRole.INTERNAL, TagRole.INHERIT_DOC})
GENERIC_ROLES = frozenset({TagRole.TEMPLATE, TagRole.TYPE_PARAM})


def is_namespace_defining(tag: DocTag) -> bool:
    return tag.role in NAMESPACE_ROLES


def is_module_tag(tag: DocTag) -> bool:
    return tag.role is TagRole.MODULE


def is_type_defining(tag: DocTag) -> bool:
    return tag.role in TYPE_DEFINING_ROLES


def is_hidden(tag: DocTag) -> bool:
    """``@internal`` and ``@inheritDoc`` keep a member out of declarations."""
    return tag.role in HIDDEN_ROLES


def is_internal(tag: DocTag) -> bool:
    return tag.role is TagRole.INTERNAL


def is_private(tag: DocTag) -> bool:
    return tag.role is TagRole.PRIVATE


def is_abstract(tag: DocTag) -> bool:
    return tag.role is TagRole.ABSTRACT


def is_generic(tag: DocTag) -> bool:
    return tag.role in GENERIC_ROLES


def is_type_param(tag: DocTag) -> bool:
    return tag.role is TagRole.TYPE_PARAM


def is_extends(tag: DocTag) -> bool:
    return tag.role is TagRole.EXTENDS


def is_property(tag: DocTag) -> bool:
    return tag.role is TagRole.PROPERTY


def is_throws(tag: DocTag) -> bool:
    return tag.role is TagRole.THROWS
