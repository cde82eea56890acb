"""Qualified name resolution, virtual re-tagging and understructuring."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ostensibly.frontend.docparse import parse_doc_comment
from ostensibly.frontend.identifiers import (
    MEMBER_SEPARATORS,
    Identifier,
    PrivateIdentifier,
    QualifiedName,
    qualified_text,
)
from ostensibly.frontend.jsdoc import (
    DocBlock,
    DocTag,
    DocTypeLiteral,
    PropertyLikeTag,
    TagRole,
    TypeDefiningTag,
    TypedefTag,
    TypeParameter,
    adopt,
)
from ostensibly.frontend.nodes import SyntaxNode

if TYPE_CHECKING:
    from ostensibly.frontend.checker import TypeChecker

_STRUCTURAL_TAG_NAMES = frozenset({"prop", "property"})


def resolve_qualified_name(*names: Identifier | PrivateIdentifier | QualifiedName | None) -> str:
    """Join name nodes into a dotted path; ``""`` when there are no segments."""
    return ".".join(
        name.text if isinstance(name, PrivateIdentifier) else qualified_text(name)
        for name in names
        if name is not None
    )


def namespace_name_for_tag(tag: TypeDefiningTag, checker: TypeChecker) -> tuple[str, str | None]:
    """Namespace path and local member name a type-defining tag registers under.

    The path comes from the tag's explicit name, else from the comment text
    up to its first member separator, else from the checker's display name
    of the declared type. An empty path means the tag has no owner.
    """
    path = resolve_qualified_name(tag.full_name)
    member = tag.member_name
    if not path and tag.comment:
        word = tag.comment.split()[0]
        match = MEMBER_SEPARATORS.search(word)
        if match is not None:
            path = word[: match.start()].strip(".")
            member = member or MEMBER_SEPARATORS.sub(".", word[match.end() :])
    if not path and member is not None and not isinstance(tag.type_expression, DocTypeLiteral):
        path = checker.type_to_string(tag.type_expression)
    return path, member


def reinterpret_tags(tag_name: str, tags: list[DocTag]) -> list[DocTag]:
    """Re-read free-text tags as if they had been written as ``@tag_name``.

    Property tags are read under a leading ``@typedef`` so they form one type
    literal, whose dotted members are then understructured.
    """
    if not tags:
        return []
    lines = ["/**"]
    if tag_name in _STRUCTURAL_TAG_NAMES:
        lines.append(" * @typedef")
    for tag in tags:
        body = "\n * ".join(tag.body.splitlines())
        lines.append(f" * @{tag_name} {body}".rstrip())
    lines.append(" */")
    block = parse_doc_comment("\n".join(lines))

    for tag in block.tags:
        if isinstance(tag, TypedefTag) and isinstance(tag.type_expression, DocTypeLiteral):
            literal = tag.type_expression
            if any(isinstance(prop.name, QualifiedName) for prop in literal.properties):
                literal.properties = understructure(literal.properties)
    return block.tags


def understructure(tags: list[PropertyLikeTag], parent: str | None = None) -> list[PropertyLikeTag]:
    """Nest flat dotted tags under the tag they extend, to any depth.

    ``options`` plus ``options.limit`` becomes ``options`` typed as its own
    declared type intersected with ``{limit}``. Dotted tags whose prefix names
    no tag are dropped. Returns new tags; the inputs are left untouched.
    """
    result: list[PropertyLikeTag] = []
    for tag in tags:
        if isinstance(tag.name, QualifiedName) and (parent is None or qualified_text(tag.name.left) != parent):
            continue
        path = qualified_text(tag.name)
        descendants = [
            t
            for t in tags
            if isinstance(t.name, QualifiedName)
            and (qualified_text(t.name.left) == path or qualified_text(t.name.left).startswith(path + "."))
        ]
        result.append(_nest(tag, understructure(descendants, path)) if descendants else tag)
    return result


def _nest(tag: PropertyLikeTag, children: list[PropertyLikeTag]) -> PropertyLikeTag:
    existing = tag.type_expression
    if isinstance(existing, DocTypeLiteral):
        literal = DocTypeLiteral([*existing.properties, *children], existing.is_array, existing.base)
    else:
        literal = DocTypeLiteral(children, base=existing)
    nested = PropertyLikeTag(
        role=tag.role,
        tag_name=tag.tag_name,
        comment=tag.comment,
        body=tag.body,
        name=tag.name,
        type_expression=literal,
        bracketed=tag.bracketed,
        default=tag.default,
    )
    if tag.block is not None:
        adopt(tag.block, nested)
    return nested


def resolve_node_locals(owner: SyntaxNode | DocBlock) -> dict[str, TypeParameter]:
    """Type parameters declared by ``@template`` tags, by name in declaration order."""
    parameters = owner.type_parameters if isinstance(owner, DocBlock) else owner.template_parameters
    return {param.name: param for param in parameters}


def param_tags_for(tags: list[DocTag], name: str, index: int, pattern: bool = False) -> list[PropertyLikeTag]:
    """``@param`` tags documenting one formal parameter.

    Named parameters match by name; destructuring patterns match the
    undotted tag at the same position.
    """
    params = [t for t in tags if isinstance(t, PropertyLikeTag) and t.role is TagRole.PARAM]
    if not pattern:
        return [t for t in params if isinstance(t.name, Identifier) and t.name.text == name]
    flat = [t for t in params if isinstance(t.name, Identifier)]
    return [flat[index]] if index < len(flat) else []
