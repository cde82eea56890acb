"""Declaration discovery: one traversal of the program builds the namespace tree.

Per node, in document order:

- external imports and re-exports are recorded for pass-through
- classes register under their ``@namespace``/``@alias`` path, and
  ``@module`` classes record a module alias
- type-defining tags (typedef, callback, enum) register under their
  namespace path, and generic abstract methods get a synthesized callback
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ostensibly.core.logging import get_logger
from ostensibly.declare.names import namespace_name_for_tag, reinterpret_tags, resolve_node_locals
from ostensibly.declare.namespaces import EntryKind, NamespaceEntry, NamespaceTree, find_or_create
from ostensibly.declare.vocabulary import (
    is_abstract,
    is_generic,
    is_internal,
    is_module_tag,
    is_namespace_defining,
    is_private,
    is_type_defining,
    is_type_param,
)
from ostensibly.frontend.identifiers import PrivateIdentifier, qualified_text
from ostensibly.frontend.jsdoc import (
    CallbackTag,
    DocBlock,
    DocTag,
    DocTypeLiteral,
    PropertyLikeTag,
    ReturnTag,
    Signature,
    TagRole,
    TemplateTag,
    TypeDefiningTag,
    TypeParameter,
)
from ostensibly.frontend.nodes import (
    ClassDeclaration,
    ClassMember,
    ExportDeclaration,
    ImportBinding,
    ImportDeclaration,
    SourceFile,
    SyntaxNode,
)
from ostensibly.frontend.typeexpr import (
    ArrayExpr,
    FunctionExpr,
    IntersectionExpr,
    OperatorExpr,
    OptionalExpr,
    RecordExpr,
    ReferenceExpr,
    RestExpr,
    TypeExpr,
    UnionExpr,
)

if TYPE_CHECKING:
    from ostensibly.frontend.checker import TypeChecker
    from ostensibly.frontend.program import Program

log = get_logger(__name__)


@dataclass
class ExternalImport:
    """Default names and named bindings imported from one external module."""

    names: list[str] = field(default_factory=list)
    bindings: list[ImportBinding] = field(default_factory=list)


@dataclass
class CollectedDeclarations:
    namespaces: NamespaceTree = field(default_factory=dict)
    modules: dict[str, str] = field(default_factory=dict)
    imports: dict[str, ExternalImport] = field(default_factory=dict)
    exports: list[ExportDeclaration] = field(default_factory=list)


def _first_tag_comment(node: SyntaxNode, predicate: Callable[[DocTag], bool]) -> tuple[DocTag | None, str | None]:
    for tag in node.all_tags():
        if predicate(tag):
            return tag, tag.comment.split()[0] if tag.comment else None
    return None, None


def class_namespace(node: ClassDeclaration) -> tuple[EntryKind | None, str | None]:
    """The kind and path a class's first ``@namespace``/``@alias`` tag names."""
    tag, path = _first_tag_comment(node, is_namespace_defining)
    if tag is None:
        return None, None
    return EntryKind(tag.role.value), path


class DeclarationCollector:
    """Single-pass traversal that populates a :class:`CollectedDeclarations`.

    Usage::

        collector = DeclarationCollector(checker, default_export="Shapes")
        collected = collector.collect(program)
    """

    def __init__(
        self,
        checker: TypeChecker,
        *,
        default_export: str | None = None,
        external_modules: list[str] | None = None,
    ) -> None:
        self._checker = checker
        self._default_export = default_export
        self._external_modules = list(external_modules or [])

    def collect(self, program: Program) -> CollectedDeclarations:
        collected = CollectedDeclarations()
        for source in program.source_files:
            if source.is_declaration_file:
                continue
            is_entry = program.is_entry(source)
            for child in source.children():
                self._visit(child, source, is_entry, collected)
        return collected

    def _visit(self, node: SyntaxNode, source: SourceFile, is_entry: bool, collected: CollectedDeclarations) -> None:
        if isinstance(node, ImportDeclaration):
            self._record_import(node, collected)
        elif isinstance(node, ExportDeclaration) and is_entry:
            self._record_export(node, source, collected)
        elif isinstance(node, ClassDeclaration):
            self._register_class(node, collected)

        resolve_implicit_type_defs(node, collected.namespaces, self._checker)
        for child in node.children():
            self._visit(child, source, is_entry, collected)

    def _record_import(self, node: ImportDeclaration, collected: CollectedDeclarations) -> None:
        if node.module_specifier not in self._external_modules:
            return
        external = collected.imports.setdefault(node.module_specifier, ExternalImport())
        if node.default_name and node.default_name not in external.names:
            external.names.append(node.default_name)
        for binding in node.named_bindings:
            if binding not in external.bindings:
                external.bindings.append(binding)

    def _record_export(self, node: ExportDeclaration, source: SourceFile, collected: CollectedDeclarations) -> None:
        origins = [source.imported_from(element.property_name or element.name) for element in node.elements]
        if node.module_specifier is not None:
            origins.append(node.module_specifier)
        if any(origin in self._external_modules for origin in origins):
            collected.exports.append(node)

    def _register_class(self, node: ClassDeclaration, collected: CollectedDeclarations) -> None:
        kind, path = class_namespace(node)
        if kind is not None and path:

            def register(existing: NamespaceEntry | None) -> NamespaceEntry:
                members = existing.members if existing is not None else {}
                return NamespaceEntry(kind=kind, anchor=node, source=node, members=members)

            find_or_create(path, collected.namespaces, register)

        module_tag, module_name = _first_tag_comment(node, is_module_tag)
        if module_tag is not None and module_name:
            _, namespace_path = _first_tag_comment(node, lambda t: t.role is TagRole.NAMESPACE)
            if namespace_path:
                collected.modules[module_name] = namespace_path

        name = node.name.text if node.name is not None else None
        if name is not None and name == self._default_export and name not in collected.namespaces:
            collected.namespaces[name] = NamespaceEntry(kind=EntryKind.ALIAS, anchor=node, source=node)


def resolve_implicit_type_defs(node: SyntaxNode, tree: NamespaceTree, checker: TypeChecker) -> None:
    """Register the type-defining tags on ``node``, and any hidden callback it implies."""
    for doc in node.docs:
        if not any(is_internal(tag) for tag in doc.tags):
            for tag in doc.tags:
                if isinstance(tag, TypeDefiningTag) and is_type_defining(tag):
                    _register_type(tag, node, tree, checker)
        if isinstance(node, ClassMember):
            _synthesize_callback(doc, node, tree)


def _register_type(tag: TypeDefiningTag, node: SyntaxNode, tree: NamespaceTree, checker: TypeChecker) -> None:
    path, member = namespace_name_for_tag(tag, checker)
    if not path:
        log.debug("type_tag_dropped", tag=tag.tag_name, reason="no namespace path")
        return
    full_path = f"{path}.{member}" if member else path
    find_or_create(full_path, tree, lambda _: NamespaceEntry(anchor=tag, source=node))


def _synthesize_callback(doc: DocBlock, node: ClassMember, tree: NamespaceTree) -> None:
    has_templates = any(is_generic(tag) for tag in doc.tags)
    has_type_params = any(is_type_param(tag) for tag in doc.tags)
    if not has_templates or not (has_type_params or any(is_abstract(tag) for tag in doc.tags)):
        return
    if any(is_private(tag) for tag in doc.tags) or isinstance(node.name, PrivateIdentifier) or node.name is None:
        return
    if not (node.is_static or has_type_params) or not isinstance(node.parent, ClassDeclaration):
        return

    owner = node.parent
    kind, path = class_namespace(owner)
    target = find_or_create(path, tree) if kind is not None and path else None
    name = node.name.text
    if target is None or name in target.members:
        return

    class_locals = resolve_node_locals(owner)
    templates = [
        param
        for tag in reinterpret_tags("template", [t for t in doc.tags if is_type_param(t)])
        if isinstance(tag, TemplateTag)
        for param in tag.type_parameters
    ]
    own = [param for param in templates if param.name not in class_locals]
    signature = Signature(
        type_parameters=own,
        parameters=[t for t in doc.tags if isinstance(t, PropertyLikeTag) and t.role is TagRole.PARAM],
        returns=next((t for t in doc.tags if isinstance(t, ReturnTag)), None),
    )

    if node.is_static:
        scope: list[TypeParameter] = list(resolve_node_locals(doc).values())
    else:
        referenced = _referenced_names(signature)
        own_names = {param.name for param in templates}
        scope = [p for n, p in class_locals.items() if n in referenced and n not in own_names]

    callback = CallbackTag(
        role=TagRole.CALLBACK,
        tag_name="callback",
        signature=signature,
        scope_type_parameters=scope,
    )
    # The block owns the synthesized tags
    DocBlock(
        description=doc.description,
        tags=[
            TemplateTag(role=TagRole.TEMPLATE, tag_name="template", type_parameters=own),
            callback,
            DocTag(role=TagRole.PRIVATE, tag_name="private"),
        ],
    )
    target.members[name] = NamespaceEntry(anchor=callback, source=node)
    log.debug("synthetic_callback_registered", namespace=path, name=name)


def _referenced_names(signature: Signature) -> set[str]:
    names: set[str] = set()
    exprs: list[TypeExpr | DocTypeLiteral | None] = [p.type_expression for p in signature.parameters]
    if signature.returns is not None:
        exprs.append(signature.returns.type_expression)
    for expr in exprs:
        _collect_references(expr, names)
    return names


def _collect_references(expr: TypeExpr | DocTypeLiteral | None, names: set[str]) -> None:
    if isinstance(expr, ReferenceExpr):
        names.add(qualified_text(expr.name))
        for argument in expr.arguments:
            _collect_references(argument, names)
    elif isinstance(expr, (UnionExpr, IntersectionExpr)):
        for member in expr.members:
            _collect_references(member, names)
    elif isinstance(expr, ArrayExpr):
        _collect_references(expr.element, names)
    elif isinstance(expr, (OptionalExpr, RestExpr)):
        _collect_references(expr.inner, names)
    elif isinstance(expr, OperatorExpr):
        _collect_references(expr.operand, names)
    elif isinstance(expr, FunctionExpr):
        for param in expr.parameters:
            _collect_references(param.type, names)
        _collect_references(expr.returns, names)
    elif isinstance(expr, RecordExpr):
        for member in expr.members:
            _collect_references(member.type, names)
    elif isinstance(expr, DocTypeLiteral):
        _collect_references(expr.base, names)
        for prop in expr.properties:
            _collect_references(prop.type_expression, names)
