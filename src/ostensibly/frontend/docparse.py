"""Parse ``/** ... */`` comment text into documentation blocks.

Follows the TypeScript JSDoc parser where it matters to declarations:

- ``@property`` tags following an ``Object`` (or untyped) ``@typedef`` form
  its type literal;
- ``@param``/``@returns`` tags following ``@callback`` or ``@overload`` form
  that tag's signature;
- a ``@param``/``@property`` whose dotted name extends a preceding tag typed
  ``Object`` is nested into it; any other dotted name stays flat.
"""

from __future__ import annotations

import re

from ostensibly.core.logging import get_logger
from ostensibly.frontend.identifiers import (
    MEMBER_SEPARATORS,
    Identifier,
    QualifiedName,
    parse_name,
    qualified_text,
)
from ostensibly.frontend.jsdoc import (
    CallbackTag,
    DocBlock,
    DocTag,
    DocTypeLiteral,
    EnumTag,
    HeritageTag,
    OverloadTag,
    PropertyLikeTag,
    ReturnTag,
    TagRole,
    TemplateTag,
    TypeDefiningTag,
    TypedefTag,
    TypeParameter,
    TypeTag,
)
from ostensibly.frontend.typeexpr import (
    ReferenceExpr,
    TypeExpr,
    TypeExpressionError,
    is_object_array_reference,
    is_object_reference,
    parse_type_expression,
)

log = get_logger(__name__)

_LINE_PREFIX = re.compile(r"^\s*\*?\s?")
_TAG_START = re.compile(r"^@([A-Za-z][\w-]*)\s*")
_NAMEPATH = re.compile(r"^[A-Za-z_$][\w$]*(?:[.#~][A-Za-z_$][\w$]*)*$|^[#~][A-Za-z_$][\w$]*$")
_TEMPLATE_NAME = re.compile(r"^\s*(\[[^\]]*\]|[A-Za-z_$][\w$]*)")


def parse_doc_comment(text: str) -> DocBlock:
    """Parse one documentation comment, with or without its ``/**``/``*/`` fences."""
    description, chunks = _split_chunks(_clean_lines(text))
    tags: list[DocTag] = []
    params: list[PropertyLikeTag] = []
    container: TypedefTag | CallbackTag | OverloadTag | None = None

    for tag_name, body in chunks:
        tag = _build_tag(tag_name, body)

        if isinstance(container, TypedefTag) and isinstance(tag, PropertyLikeTag) and tag.role is TagRole.PROPERTY:
            literal = container.type_expression
            assert isinstance(literal, DocTypeLiteral)
            _attach_child(literal.properties, tag)
            continue
        if isinstance(container, (CallbackTag, OverloadTag)):
            if isinstance(tag, PropertyLikeTag) and tag.role is TagRole.PARAM:
                _attach_child(container.signature.parameters, tag)
                continue
            if isinstance(tag, ReturnTag) and container.signature.returns is None:
                container.signature.returns = tag
                continue
        container = None

        if isinstance(tag, TypedefTag) and (
            tag.type_expression is None
            or is_object_reference(tag.type_expression)
            or is_object_array_reference(tag.type_expression)
        ):
            tag.type_expression = DocTypeLiteral(
                is_array=tag.type_expression is not None
                and is_object_array_reference(tag.type_expression)
            )
            container = tag
        elif isinstance(tag, (CallbackTag, OverloadTag)):
            container = tag
        elif isinstance(tag, PropertyLikeTag) and tag.role is TagRole.PARAM:
            if _attach_child(params, tag, append=False):
                continue
            params.append(tag)

        tags.append(tag)

    return DocBlock(description=description, tags=tags)


# -- line handling -----------------------------------------------------


def _clean_lines(text: str) -> list[str]:
    body = text.strip()
    if body.startswith("/**"):
        body = body[3:]
    if body.endswith("*/"):
        body = body[:-2]
    return [_LINE_PREFIX.sub("", line, count=1).rstrip() for line in body.splitlines()]


def _split_chunks(lines: list[str]) -> tuple[str | None, list[tuple[str, str]]]:
    description: list[str] = []
    chunks: list[tuple[str, list[str]]] = []
    for line in lines:
        match = _TAG_START.match(line.lstrip())
        if match:
            chunks.append((match.group(1), [line.lstrip()[match.end() :]]))
        elif chunks:
            chunks[-1][1].append(line)
        else:
            description.append(line)
    text = "\n".join(description).strip()
    return text or None, [(name, "\n".join(body).strip()) for name, body in chunks]


# -- tag bodies --------------------------------------------------------


def _take_braced(body: str) -> tuple[str | None, str]:
    """Split a leading ``{...}`` (brace-balanced) off a tag body."""
    stripped = body.lstrip()
    if not stripped.startswith("{"):
        return None, body
    depth = 0
    for index, char in enumerate(stripped):
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return stripped[1:index], stripped[index + 1 :]
    return None, body


def _take_word(body: str) -> tuple[str | None, str]:
    stripped = body.lstrip()
    if not stripped:
        return None, ""
    parts = stripped.split(None, 1)
    return parts[0], parts[1] if len(parts) > 1 else ""


def _take_param_name(body: str) -> tuple[str | None, bool, str | None, str]:
    """Read ``name`` or ``[name=default]``; returns (name, bracketed, default, rest)."""
    stripped = body.lstrip()
    if stripped.startswith("["):
        end = stripped.find("]")
        if end == -1:
            return None, False, None, body
        inner, rest = stripped[1:end], stripped[end + 1 :]
        name, _, default = inner.partition("=")
        return name.strip().replace("[]", ""), True, default.strip() or None, rest
    word, rest = _take_word(stripped)
    return (word.replace("[]", "") if word else None), False, None, rest


def _parse_type(text: str | None) -> TypeExpr | None:
    if text is None:
        return None
    try:
        return parse_type_expression(text)
    except TypeExpressionError as e:
        log.debug("unparsable_type_expression", text=text, reason=str(e))
        return None


def _comment(text: str) -> str | None:
    text = text.strip()
    return text or None


def _split_namepath(word: str) -> tuple[Identifier | QualifiedName | None, str | None]:
    """``Shapes.Foo~Size`` -> (Shapes.Foo, "Size"); ``Shapes.Foo`` -> (Shapes.Foo, None)."""
    match = MEMBER_SEPARATORS.search(word)
    if match is None:
        return parse_name(word), None
    return parse_name(word[: match.start()]), MEMBER_SEPARATORS.sub(".", word[match.end() :])


def _build_tag(tag_name: str, body: str) -> DocTag:
    tag = _build_tag_payload(tag_name, body)
    tag.body = body
    return tag


def _build_tag_payload(tag_name: str, body: str) -> DocTag:
    role = TagRole.from_tag_name(tag_name)

    if role in (TagRole.PARAM, TagRole.PROPERTY):
        type_text, rest = _take_braced(body)
        name, bracketed, default, rest = _take_param_name(rest)
        parsed = parse_name(name) if name else None
        if parsed is None:
            return DocTag(role=role, tag_name=tag_name, comment=_comment(body))
        type_ = _parse_type(type_text)
        return PropertyLikeTag(
            role=role,
            tag_name=tag_name,
            name=parsed,
            type_expression=type_,
            bracketed=bracketed,
            default=default,
            comment=_comment(rest),
        )

    if role is TagRole.RETURNS:
        type_text, rest = _take_braced(body)
        return ReturnTag(role=role, tag_name=tag_name, type_expression=_parse_type(type_text), comment=_comment(rest))

    if role is TagRole.TYPE:
        type_text, rest = _take_braced(body)
        return TypeTag(role=role, tag_name=tag_name, type_expression=_parse_type(type_text), comment=_comment(rest))

    if role is TagRole.TEMPLATE:
        return _build_template(tag_name, body)

    if role in (TagRole.EXTENDS, TagRole.IMPLEMENTS):
        type_text, rest = _take_braced(body)
        if type_text is None:
            type_text, rest = _take_word(body)
        heritage = _parse_type(type_text)
        return HeritageTag(
            role=role,
            tag_name=tag_name,
            type_expression=heritage if isinstance(heritage, ReferenceExpr) else None,
            comment=_comment(rest),
        )

    if role in (TagRole.TYPEDEF, TagRole.CALLBACK, TagRole.ENUM):
        return _build_type_defining(role, tag_name, body)

    if role is TagRole.OVERLOAD:
        return OverloadTag(role=role, tag_name=tag_name, comment=_comment(body))

    return DocTag(role=role, tag_name=tag_name, comment=_comment(body))


def _build_template(tag_name: str, body: str) -> TemplateTag:
    constraint_text, rest = _take_braced(body)
    constraint = _parse_type(constraint_text)
    parameters: list[TypeParameter] = []
    while True:
        match = _TEMPLATE_NAME.match(rest)
        if match is None:
            break
        word = match.group(1)
        rest = rest[match.end() :]
        if word.startswith("["):
            name, _, default_text = word[1:-1].partition("=")
            default = _parse_type(default_text) if default_text.strip() else None
            parameters.append(TypeParameter(name.strip(), constraint, default))
        else:
            parameters.append(TypeParameter(word, constraint))
        stripped = rest.lstrip()
        if not stripped.startswith(","):
            break
        rest = stripped[1:]
    return TemplateTag(
        role=TagRole.TEMPLATE,
        tag_name=tag_name,
        type_parameters=parameters,
        comment=_comment(rest),
    )


def _build_type_defining(role: TagRole, tag_name: str, body: str) -> TypeDefiningTag:
    type_text, rest = _take_braced(body)
    word, after = _take_word(rest)
    full_name: Identifier | QualifiedName | None = None
    member_name: str | None = None
    if word is not None and _NAMEPATH.match(word):
        full_name, member_name = _split_namepath(word)
        rest = after

    tag_cls: type[TypeDefiningTag] = {
        TagRole.TYPEDEF: TypedefTag,
        TagRole.CALLBACK: CallbackTag,
        TagRole.ENUM: EnumTag,
    }[role]
    return tag_cls(
        role=role,
        tag_name=tag_name,
        full_name=full_name,
        member_name=member_name,
        type_expression=_parse_type(type_text),
        comment=_comment(rest),
    )


# -- nesting -------------------------------------------------------------


def _attach_child(siblings: list[PropertyLikeTag], tag: PropertyLikeTag, *, append: bool = True) -> bool:
    """Nest a dotted tag into the ``Object``-typed sibling it extends.

    Returns True when nested. Otherwise the tag is appended flat when
    ``append`` is set (an understructured tag) and False is returned.
    """
    if isinstance(tag.name, QualifiedName):
        parent_path = qualified_text(tag.name.left)
        for candidate in reversed(siblings):
            candidate_path = qualified_text(candidate.name)
            if candidate_path == parent_path:
                literal = _object_literal_of(candidate)
                if literal is not None:
                    literal.properties.append(tag)
                    return True
                break
            if parent_path.startswith(candidate_path + "."):
                literal = _object_literal_of(candidate)
                if literal is not None and _attach_child(literal.properties, tag, append=False):
                    return True
                break
    if append:
        siblings.append(tag)
    return False


def _object_literal_of(tag: PropertyLikeTag) -> DocTypeLiteral | None:
    """The type literal children nest into, converting an ``Object`` type on first use."""
    if isinstance(tag.type_expression, DocTypeLiteral):
        return tag.type_expression
    if tag.type_expression is None:
        return None
    if is_object_reference(tag.type_expression) or is_object_array_reference(tag.type_expression):
        tag.type_expression = DocTypeLiteral(is_array=is_object_array_reference(tag.type_expression))
        return tag.type_expression
    return None
