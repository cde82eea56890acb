"""Declaration tree assembly.

Walks a collected namespace tree in insertion order and turns each entry
into declarations:

- class-backed entries become a class (plus a same-named interface when a
  base cannot be extended by a class) and, when they have members of their
  own, a namespace of the same name
- type entries become type aliases
- intermediate entries become plain namespaces

The result is wrapped in the module frame: external imports, re-exports,
module aliases and the ``declare module`` block itself.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from ostensibly.core.logging import get_logger
from ostensibly.declare.annotate import annotate_function, annotate_method, annotate_node, annotate_prop
from ostensibly.declare.discovery import CollectedDeclarations
from ostensibly.declare.members import compute_heritage, filter_members, needs_interface
from ostensibly.declare.models import (
    AccessorDecl,
    AccessorKind,
    ClassDecl,
    ConstructorDecl,
    DeclarationFile,
    ImportDecl,
    InterfaceDecl,
    MemberDecl,
    MethodDecl,
    ModuleAlias,
    ModuleDecl,
    NamespaceDecl,
    PropertyDecl,
    ReExportDecl,
    Statement,
    TypeAliasDecl,
)
from ostensibly.declare.names import reinterpret_tags
from ostensibly.declare.namespaces import NamespaceEntry, NamespaceTree, lookup
from ostensibly.declare.resolver import TypeResolver
from ostensibly.declare.types import ANY, NamedType, Parameter, ResolvedType, TypeParameter
from ostensibly.declare.vocabulary import is_abstract, is_property
from ostensibly.frontend.identifiers import Identifier, qualified_text
from ostensibly.frontend.jsdoc import (
    CallbackTag,
    DocTypeLiteral,
    HeritageTag,
    OverloadTag,
    ReturnTag,
    TagRole,
    TemplateTag,
    TypeDefiningTag,
    TypedefTag,
    TypeTag,
)
from ostensibly.frontend.nodes import (
    ClassDeclaration,
    ClassMember,
    ConstructorDeclaration,
    FunctionLike,
    GetAccessor,
    MethodDeclaration,
    PropertyDeclaration,
    SetAccessor,
)
from ostensibly.frontend.typeexpr import ReferenceExpr

if TYPE_CHECKING:
    from ostensibly.frontend.checker import TypeChecker

log = get_logger(__name__)

T = TypeVar("T", TypeTag, ReturnTag)


class DeclarationAssembler:
    """Build a :class:`DeclarationFile` from collected declarations.

    The namespace tree is only read here; ``assemble`` may be called more
    than once on the same collection.
    """

    def __init__(self, resolver: TypeResolver, checker: TypeChecker) -> None:
        self._resolver = resolver
        self._checker = checker
        self._tree: NamespaceTree = {}

    def assemble(self, collected: CollectedDeclarations, *, module_name: str, default_export: str) -> DeclarationFile:
        self._tree = collected.namespaces

        body = self.declarations(collected.namespaces)
        module = ModuleDecl(
            name=module_name,
            default_export=default_export,
            reexports=self.reexports(collected.namespaces, body, default_export),
            body=body,
        )

        imports: list[ImportDecl] = []
        for specifier, external in collected.imports.items():
            if not external.names:
                imports.append(ImportDecl(specifier, None, list(external.bindings)))
            for index, name in enumerate(external.names):
                imports.append(ImportDecl(specifier, name, list(external.bindings) if index == 0 else []))

        aliases = [
            ModuleAlias(name=name, default_export=default_export, module_name=module_name, target=target)
            for name, target in collected.modules.items()
            if name != module_name
        ]
        return DeclarationFile(
            module=module,
            imports=imports,
            exports=[ReExportDecl(list(node.elements), node.module_specifier) for node in collected.exports],
            module_aliases=aliases,
        )

    @staticmethod
    def reexports(tree: NamespaceTree, body: list[Statement], default_export: str) -> list[str]:
        """Class-backed members of the default export that were emitted as a class or namespace."""
        root = tree.get(default_export)
        if root is None:
            return []
        emitted = {
            statement.name
            for block in body
            if isinstance(block, NamespaceDecl) and block.name == default_export
            for statement in block.body
            if isinstance(statement, ClassDecl | NamespaceDecl)
        }
        return [name for name, entry in root.members.items() if entry.kind is not None and name in emitted]

    def declarations(self, tree: NamespaceTree) -> list[Statement]:
        """Declarations for one level of the tree, in insertion order."""
        result: list[Statement] = []
        for name, entry in tree.items():
            if entry.kind is not None and isinstance(entry.anchor, ClassDeclaration):
                members = filter_members(entry.kind, entry.anchor.members)
                if members:
                    result.extend(self.class_declarations(name, entry.anchor, members))
                if entry.members:
                    result.append(NamespaceDecl(name, self.declarations(entry.members)))
            elif entry.is_type:
                result.append(self.type_alias(name, entry))
            elif entry.members:
                result.append(NamespaceDecl(name, self.declarations(entry.members)))
        return result

    def class_declarations(
        self, name: str, node: ClassDeclaration, members: list[ClassMember]
    ) -> list[ClassDecl | InterfaceDecl]:
        heritage = compute_heritage(node)
        type_parameters = self._resolver.type_parameters(node.template_parameters)
        extends = heritage.extends
        interface_bases: list[ReferenceExpr] = []
        if needs_interface(node, self._checker):
            extends = [base for base in heritage.extends if self._checker.is_constructable(base)]
            interface_bases = [base for base in heritage.extends if not self._checker.is_constructable(base)]

        declaration = ClassDecl(
            name=name,
            type_parameters=type_parameters,
            extends=[self._resolver.resolve(base) for base in extends],
            implements=[self._resolver.resolve(base) for base in heritage.implements],
            members=[decl for member in members for decl in self.member_declarations(name, member)],
            doc=annotate_node(node),
        )
        if not interface_bases:
            return [declaration]
        interface = InterfaceDecl(
            name=name,
            type_parameters=type_parameters,
            extends=[self._resolver.resolve(base) for base in interface_bases],
        )
        return [declaration, interface]

    def type_alias(self, name: str, entry: NamespaceEntry) -> TypeAliasDecl:
        tag = entry.anchor
        assert isinstance(tag, TypeDefiningTag)
        block = tag.block
        if tag.scope_type_parameters is not None:
            parameters = tag.scope_type_parameters
        else:
            parameters = block.type_parameters if block is not None else []
        return TypeAliasDecl(
            name=name,
            type=self._resolver.resolve(tag, source=entry.source),
            type_parameters=self._resolver.type_parameters(parameters),
            exported=not (block is not None and block.has(TagRole.PRIVATE)),
            doc=annotate_function(tag) if isinstance(tag, CallbackTag) else annotate_prop(block),
        )

    # -- members -----------------------------------------------------------

    def member_declarations(self, class_name: str, member: ClassMember) -> list[MemberDecl]:
        if isinstance(member, ConstructorDeclaration):
            return self.constructor_declarations(member)
        if not isinstance(member.name, Identifier):
            return []
        if isinstance(member, PropertyDeclaration):
            return [self.property_declaration(member)]
        if isinstance(member, FunctionLike):
            return self.method_declarations(class_name, member)
        return []

    def property_declaration(self, node: PropertyDeclaration) -> PropertyDecl:
        assert isinstance(node.name, Identifier)
        type_tag = _first(node, TypeTag)
        return PropertyDecl(
            name=node.name.text,
            type=self._resolver.resolve(type_tag) if type_tag is not None else ANY,
            optional=node.question,
            static=node.is_static,
            doc=annotate_node(node),
        )

    def constructor_declarations(self, node: ConstructorDeclaration) -> list[MemberDecl]:
        """Instance properties from ``@prop`` tags, then the constructor itself."""
        result: list[MemberDecl] = []
        virtual = reinterpret_tags("prop", [tag for tag in node.all_tags() if is_property(tag)])
        typedef = next((tag for tag in virtual if isinstance(tag, TypedefTag)), None)
        if typedef is not None and isinstance(typedef.type_expression, DocTypeLiteral):
            for prop in typedef.type_expression.properties:
                result.append(
                    PropertyDecl(
                        name=qualified_text(prop.name),
                        type=self._resolver.resolve(prop),
                        optional=prop.bracketed,
                        doc=annotate_prop(prop),
                    )
                )
        result.append(
            ConstructorDecl(
                parameters=self._resolver.node_parameters(node, node.all_tags()),
                doc=annotate_method(node),
            )
        )
        return result

    def method_declarations(self, class_name: str, node: FunctionLike) -> list[MemberDecl]:
        assert isinstance(node.name, Identifier)
        name = node.name.text
        optional = isinstance(node, MethodDeclaration) and node.question
        doc = annotate_method(node)
        type_tag = _first(node, TypeTag)
        implements = next(
            (t for t in node.all_tags(TagRole.IMPLEMENTS) if isinstance(t, HeritageTag)),
            None,
        )
        implemented = implements.type_expression if implements is not None else None
        parameters = self._resolver.node_parameters(node, node.all_tags())

        if isinstance(node, (GetAccessor, SetAccessor)):
            type_ = self._accessor_type(node, type_tag, implemented)
            if isinstance(node, GetAccessor):
                return [AccessorDecl(name, AccessorKind.GET, type=type_, static=node.is_static, doc=doc)]
            if type_tag is not None and not node.all_tags(TagRole.PARAM):
                parameters = tuple(Parameter(p.name, type_, p.optional, p.rest) for p in parameters)
            return [AccessorDecl(name, AccessorKind.SET, parameters=parameters, static=node.is_static, doc=doc)]

        if type_tag is not None:
            return [PropertyDecl(name, self._resolver.resolve(type_tag), optional, node.is_static, doc)]

        templates = self._method_type_parameters(node)
        if node.is_static and templates and any(is_abstract(t) for t in node.all_tags()):
            arguments = tuple(ANY for _ in node.template_parameters)
            return [PropertyDecl(name, NamedType(f"{class_name}.{name}", arguments), optional, True, doc)]

        if implemented is not None and implemented.arguments:
            return [PropertyDecl(name, self._resolver.resolve(implemented), optional, node.is_static, doc)]
        if implemented is not None:
            log.debug("member_dropped", name=name, reason="untyped @implements")
            return []

        overloads = [tag for tag in node.all_tags(TagRole.OVERLOAD) if isinstance(tag, OverloadTag)]
        result: list[MemberDecl] = []
        for tag in overloads:
            result.append(
                MethodDecl(
                    name=name,
                    type_parameters=self._resolver.type_parameters(tag.block.type_parameters if tag.block else []),
                    parameters=self._resolver.parameters_from_tags(tag.signature.parameters),
                    returns=self._resolver.resolve(tag.signature.returns, node.is_async),
                    optional=optional,
                    static=node.is_static,
                    doc=annotate_function(tag),
                )
            )
        result.append(
            MethodDecl(
                name=name,
                type_parameters=() if overloads else templates,
                parameters=parameters,
                returns=self._resolver.resolve(_first(node, ReturnTag), node.is_async),
                optional=optional,
                static=node.is_static,
                doc=doc,
            )
        )
        return result

    def _method_type_parameters(self, node: FunctionLike) -> tuple[TypeParameter, ...]:
        """``@template`` names plus ``@typeParam`` tags read as templates."""
        own = list(node.template_parameters)
        for tag in reinterpret_tags("template", node.all_tags(TagRole.TYPE_PARAM)):
            if isinstance(tag, TemplateTag):
                own.extend(tag.type_parameters)
        return self._resolver.type_parameters(own)

    def _accessor_type(
        self, node: FunctionLike, type_tag: TypeTag | None, implemented: ReferenceExpr | None
    ) -> ResolvedType:
        """Accessor type from ``@type``, the implemented getter, ``@returns``, else ``any``."""
        if type_tag is not None:
            return self._resolver.resolve(type_tag)
        if implemented is not None and isinstance(node.name, Identifier):
            source = lookup(qualified_text(implemented.name), self._tree)
            if source is not None and isinstance(source.anchor, ClassDeclaration):
                for member in source.anchor.members:
                    if isinstance(member, GetAccessor) and member.name == node.name:
                        getter_type = _first(member, TypeTag)
                        if getter_type is not None:
                            return self._resolver.resolve(getter_type)
        returns = _first(node, ReturnTag)
        if returns is not None and returns.type_expression is not None:
            return self._resolver.resolve(returns)
        return ANY


def _first(node: ClassMember, tag_type: type[T]) -> T | None:
    return next((tag for tag in node.all_tags() if isinstance(tag, tag_type)), None)
