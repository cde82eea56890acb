"""Carry documentation text onto generated declarations."""

from __future__ import annotations

import re

from ostensibly.declare.models import DocComment, DocCommentTag
from ostensibly.frontend.identifiers import qualified_text
from ostensibly.frontend.jsdoc import (
    CallbackTag,
    DocBlock,
    DocTag,
    DocTypeLiteral,
    OverloadTag,
    PropertyLikeTag,
    ReturnTag,
    TagRole,
)
from ostensibly.frontend.nodes import SyntaxNode

_LEADING = re.compile(r"^([-*]\s+)?(.)(.*)", re.DOTALL)


def standardise_comment(comment: str) -> str:
    """Drop a leading ``- `` bullet and upper-case the first letter."""
    return _LEADING.sub(lambda m: f"{m.group(2).upper()}{m.group(3)}", comment, count=1)


def annotate_params(tags: list[DocTag] | list[PropertyLikeTag], returns: ReturnTag | None = None) -> list[DocCommentTag]:
    """``@param`` tags, one level of their nested properties, then ``@returns`` lines.

    Parameters without a description are left out.
    """
    params: list[PropertyLikeTag] = []
    for tag in tags:
        if isinstance(tag, PropertyLikeTag) and tag.role is TagRole.PARAM:
            params.append(tag)
            if isinstance(tag.type_expression, DocTypeLiteral):
                params.extend(tag.type_expression.properties)

    result = [
        DocCommentTag(tag.tag_name, qualified_text(tag.name), standardise_comment(tag.comment))
        for tag in params
        if tag.comment
    ]
    if returns is not None and returns.comment:
        result.extend(
            DocCommentTag(returns.tag_name, None, standardise_comment(line))
            for line in returns.comment.splitlines()
            if line.strip()
        )
    return result


def annotate_prop(source: DocBlock | PropertyLikeTag | None) -> DocComment | None:
    if isinstance(source, PropertyLikeTag):
        text = source.comment
    else:
        text = source.description if source is not None else None
    return DocComment(standardise_comment(text)) if text else None


def annotate_node(node: SyntaxNode) -> DocComment | None:
    """Description of the documentation block closest to a node."""
    return annotate_prop(node.docs[-1] if node.docs else None)


def annotate_method(node: SyntaxNode) -> DocComment | None:
    """Description, parameters and return value of a method-like member.

    Uses the last block that has a description or a described parameter.
    """
    result: DocComment | None = None
    for doc in node.docs:
        described = any(isinstance(t, PropertyLikeTag) and t.role is TagRole.PARAM and t.comment for t in doc.tags)
        if doc.description or described:
            returns = next((t for t in doc.tags if isinstance(t, ReturnTag)), None)
            result = DocComment(doc.description, annotate_params(doc.tags, returns))
    return result


def annotate_function(tag: CallbackTag | OverloadTag) -> DocComment | None:
    description = tag.comment if isinstance(tag, OverloadTag) and tag.comment else None
    if description is None and tag.block is not None:
        description = tag.block.description
    if not description:
        return None
    return DocComment(description, annotate_params(tag.signature.parameters, tag.signature.returns))
