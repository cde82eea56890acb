"""JavaScript front end built on tree-sitter.

Converts JavaScript source text into the syntax-node model:

- ``/** ... */`` comments attach, in order, to the next named node in the same
  block; doc comments left over at the end of a file attach to a trailing
  ``end_of_file`` node
- ``export`` wrappers fold into the declaration they wrap as modifiers, so a
  comment written before ``export class`` documents the class
- constructs without a dedicated model become ``GenericNode`` so documentation
  anywhere in a file is still reachable by traversal
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any

import tree_sitter
import tree_sitter_javascript

from ostensibly.core.errors import LoadError
from ostensibly.core.logging import get_logger
from ostensibly.frontend.docparse import parse_doc_comment
from ostensibly.frontend.identifiers import Identifier, PrivateIdentifier, parse_name
from ostensibly.frontend.jsdoc import DocBlock
from ostensibly.frontend.nodes import (
    ArrayLiteral,
    ClassDeclaration,
    ClassMember,
    ConstructorDeclaration,
    ExportDeclaration,
    GenericNode,
    GetAccessor,
    HeritageExpression,
    IdentifierReference,
    ImportBinding,
    ImportDeclaration,
    LiteralExpression,
    MethodDeclaration,
    Modifier,
    ObjectLiteral,
    Parameter,
    PropertyAssignment,
    PropertyDeclaration,
    SetAccessor,
    SourceFile,
    SyntaxNode,
    VariableDeclaration,
    VariableStatement,
    set_parents,
)

log = get_logger(__name__)

_DOTTED_NAME = re.compile(r"^[A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*$")
_VARIABLE_KINDS = frozenset({"lexical_declaration", "variable_declaration"})

Converter = Callable[[Any, list[DocBlock]], SyntaxNode | None]


def _text(node: Any) -> str:
    return node.text.decode("utf-8") if node.text else ""


def _unquote(node: Any) -> str:
    return _text(node)[1:-1]


def _number(text: str) -> int | float | str:
    try:
        return int(text, 0)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return text


def _tokens(node: Any) -> set[str]:
    """Anonymous keyword tokens of a node (``static``, ``async``, ``get`` ...)."""
    return {child.type for child in node.children if not child.is_named}


def _member_name(node: Any) -> Identifier | PrivateIdentifier | None:
    if node is None:
        return None
    if node.type == "private_property_identifier":
        return PrivateIdentifier(_text(node))
    if node.type == "string":
        return Identifier(_unquote(node))
    return Identifier(_text(node))


def _heritage_expression(node: Any) -> HeritageExpression | None:
    text = _text(node)
    if node.type not in ("identifier", "member_expression") or not _DOTTED_NAME.match(text):
        return None
    name = parse_name(text)
    return HeritageExpression(name) if name is not None else None


class JavaScriptFrontEnd:
    """Parses JavaScript sources into :class:`SourceFile` trees.

    Usage::

        front_end = JavaScriptFrontEnd()
        source = front_end.parse("src/shapes.js", text)
    """

    def __init__(self) -> None:
        try:
            language = tree_sitter.Language(tree_sitter_javascript.language())
        except (TypeError, ValueError) as err:
            raise LoadError.grammar_unavailable("javascript") from err
        self._parser = tree_sitter.Parser(language)

    def parse(self, file_name: str, text: str) -> SourceFile:
        tree = self._parser.parse(text.encode("utf-8"))
        if tree.root_node.has_error:
            log.debug("source_has_syntax_errors", file=file_name)

        source = SourceFile(
            file_name=file_name,
            statements=self._block(tree.root_node, self._convert, trailing_kind="end_of_file"),
            is_declaration_file=file_name.endswith(".d.ts"),
        )
        set_parents(source)
        return source

    # -- blocks ----------------------------------------------------------

    def _block(
        self,
        node: Any,
        convert: Converter,
        trailing_kind: str | None = None,
    ) -> list[SyntaxNode]:
        result: list[SyntaxNode] = []
        pending: list[DocBlock] = []
        for child in node.named_children:
            if child.type == "comment":
                text = _text(child)
                if text.startswith("/**") and not text.startswith("/**/"):
                    pending.append(parse_doc_comment(text))
                continue
            converted = convert(child, pending)
            pending = []
            if converted is not None:
                result.append(converted)
        if pending and trailing_kind is not None:
            result.append(GenericNode(kind=trailing_kind, docs=pending))
        return result

    def _convert(self, node: Any, docs: list[DocBlock]) -> SyntaxNode | None:
        kind = node.type
        if kind == "export_statement":
            return self._export(node, docs)
        if kind in ("class_declaration", "class"):
            return self._class(node, docs, frozenset())
        if kind in _VARIABLE_KINDS:
            return self._variables(node, docs, frozenset())
        if kind == "import_statement":
            return self._import(node, docs)
        if kind == "object":
            return ObjectLiteral(docs=docs, properties=self._block(node, self._convert))
        if kind == "pair":
            value = node.child_by_field_name("value")
            return PropertyAssignment(
                docs=docs,
                name=Identifier(self._key(node.child_by_field_name("key"))),
                initializer=self._convert(value, []) if value is not None else None,
            )
        if kind == "array":
            return ArrayLiteral(docs=docs, elements=self._block(node, self._convert))
        if kind == "number":
            return LiteralExpression(docs=docs, value=_number(_text(node)))
        if kind == "string":
            return LiteralExpression(docs=docs, value=_unquote(node))
        if kind in ("true", "false"):
            return LiteralExpression(docs=docs, value=kind == "true")
        if kind == "unary_expression" and _text(node).startswith("-"):
            argument = node.child_by_field_name("argument")
            if argument is not None and argument.type == "number":
                value = _number(_text(argument))
                if not isinstance(value, str):
                    return LiteralExpression(docs=docs, value=-value)
        if kind == "identifier":
            return IdentifierReference(docs=docs, name=_text(node))
        return GenericNode(kind=kind, docs=docs, nodes=self._block(node, self._convert))

    @staticmethod
    def _key(node: Any) -> str:
        if node.type == "string":
            return _unquote(node)
        return _text(node)

    # -- declarations ----------------------------------------------------

    def _export(self, node: Any, docs: list[DocBlock]) -> SyntaxNode | None:
        modifiers = {Modifier.EXPORT}
        if "default" in _tokens(node):
            modifiers.add(Modifier.DEFAULT)

        declaration = node.child_by_field_name("declaration")
        if declaration is not None:
            if declaration.type == "class_declaration":
                return self._class(declaration, docs, frozenset(modifiers))
            if declaration.type in _VARIABLE_KINDS:
                return self._variables(declaration, docs, frozenset(modifiers))
            return GenericNode(
                kind=declaration.type,
                docs=docs,
                nodes=self._block(declaration, self._convert),
                modifiers=frozenset(modifiers),
            )

        value = node.child_by_field_name("value")
        if value is not None:
            if value.type == "class":
                return self._class(value, docs, frozenset(modifiers))
            converted = self._convert(value, [])
            return GenericNode(
                kind="export_assignment",
                docs=docs,
                nodes=[converted] if converted is not None else [],
                modifiers=frozenset(modifiers),
            )

        source = node.child_by_field_name("source")
        elements: list[ImportBinding] = []
        for clause in node.named_children:
            if clause.type != "export_clause":
                continue
            for specifier in clause.named_children:
                if specifier.type != "export_specifier":
                    continue
                name = _text(specifier.child_by_field_name("name"))
                alias = specifier.child_by_field_name("alias")
                elements.append(
                    ImportBinding(name=_text(alias), property_name=name) if alias is not None else ImportBinding(name)
                )
        return ExportDeclaration(
            docs=docs,
            elements=elements,
            module_specifier=_unquote(source) if source is not None else None,
        )

    def _class(self, node: Any, docs: list[DocBlock], modifiers: frozenset[Modifier]) -> ClassDeclaration:
        name = node.child_by_field_name("name")
        extends = None
        for child in node.named_children:
            if child.type == "class_heritage":
                bases = [c for c in child.named_children if c.type != "comment"]
                extends = _heritage_expression(bases[0]) if bases else None

        body = node.child_by_field_name("body")
        members = self._block(body, self._member) if body is not None else []
        return ClassDeclaration(
            docs=docs,
            name=Identifier(_text(name)) if name is not None else None,
            modifiers=modifiers,
            extends=extends,
            members=[m for m in members if isinstance(m, ClassMember)],
        )

    def _member(self, node: Any, docs: list[DocBlock]) -> SyntaxNode | None:
        tokens = _tokens(node)
        modifiers = set()
        if "static" in tokens:
            modifiers.add(Modifier.STATIC)
        if "async" in tokens:
            modifiers.add(Modifier.ASYNC)

        if node.type == "field_definition":
            value = node.child_by_field_name("value")
            return PropertyDeclaration(
                docs=docs,
                name=_member_name(node.child_by_field_name("property")),
                modifiers=frozenset(modifiers),
                initializer=self._convert(value, []) if value is not None else None,
            )

        if node.type != "method_definition":
            return None

        name = _member_name(node.child_by_field_name("name"))
        parameters = self._parameters(node.child_by_field_name("parameters"))
        body_node = node.child_by_field_name("body")
        body = self._block(body_node, self._convert) if body_node is not None else []
        common: dict[str, Any] = {
            "docs": docs,
            "name": name,
            "modifiers": frozenset(modifiers),
            "parameters": parameters,
            "body": body,
        }
        if isinstance(name, Identifier) and name.text == "constructor":
            return ConstructorDeclaration(**common)
        if "get" in tokens:
            return GetAccessor(**common)
        if "set" in tokens:
            return SetAccessor(**common)
        return MethodDeclaration(asterisk="*" in tokens, **common)

    @staticmethod
    def _parameters(node: Any) -> list[Parameter]:
        if node is None:
            return []
        result: list[Parameter] = []
        children = [c for c in node.named_children if c.type != "comment"]
        for index, child in enumerate(children):
            if child.type == "assignment_pattern":
                left = child.child_by_field_name("left")
                result.append(
                    Parameter(
                        name=_text(left),
                        index=index,
                        has_initializer=True,
                        pattern=left.type != "identifier",
                    )
                )
            elif child.type == "rest_pattern":
                inner = child.named_children[0] if child.named_children else child
                result.append(Parameter(name=_text(inner), index=index, rest=True, pattern=inner.type != "identifier"))
            else:
                result.append(Parameter(name=_text(child), index=index, pattern=child.type != "identifier"))
        return result

    def _variables(self, node: Any, docs: list[DocBlock], modifiers: frozenset[Modifier]) -> VariableStatement:
        declarations: list[VariableDeclaration] = []
        for declarator in node.named_children:
            if declarator.type != "variable_declarator":
                continue
            value = declarator.child_by_field_name("value")
            declarations.append(
                VariableDeclaration(
                    name=_text(declarator.child_by_field_name("name")),
                    initializer=self._convert(value, []) if value is not None else None,
                )
            )
        return VariableStatement(docs=docs, declarations=declarations, modifiers=modifiers)

    @staticmethod
    def _import(node: Any, docs: list[DocBlock]) -> ImportDeclaration:
        default_name: str | None = None
        namespace_name: str | None = None
        bindings: list[ImportBinding] = []
        for clause in node.named_children:
            if clause.type != "import_clause":
                continue
            for child in clause.named_children:
                if child.type == "identifier":
                    default_name = _text(child)
                elif child.type == "namespace_import":
                    identifiers = [c for c in child.named_children if c.type == "identifier"]
                    namespace_name = _text(identifiers[0]) if identifiers else None
                elif child.type == "named_imports":
                    for specifier in child.named_children:
                        if specifier.type != "import_specifier":
                            continue
                        name = _text(specifier.child_by_field_name("name"))
                        alias = specifier.child_by_field_name("alias")
                        bindings.append(
                            ImportBinding(name=_text(alias), property_name=name) if alias is not None else ImportBinding(name)
                        )

        source = node.child_by_field_name("source")
        return ImportDeclaration(
            docs=docs,
            module_specifier=_unquote(source) if source is not None else "",
            default_name=default_name,
            namespace_name=namespace_name,
            named_bindings=bindings,
        )
