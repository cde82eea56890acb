"""Type resolution: documented types to declaration-ready types.

``TypeResolver.resolve`` accepts a documentation tag, a type literal or a
type expression and always returns a :data:`ResolvedType`. Named references
go through the checker; when the checker cannot place a name, the name as
written is kept.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ostensibly.core.logging import get_logger
from ostensibly.declare.annotate import standardise_comment
from ostensibly.declare.names import param_tags_for, understructure
from ostensibly.declare.types import (
    ANY,
    NEVER,
    VOID,
    ArrayOf,
    ErrorType,
    FunctionType,
    IntersectionOf,
    Keyword,
    LiteralValue,
    NamedType,
    Parameter,
    ResolvedType,
    StructMember,
    StructType,
    TypeOperator,
    TypeParameter,
    UnionOf,
    promise_of,
)
from ostensibly.declare.vocabulary import is_throws
from ostensibly.frontend.identifiers import QualifiedName, name_text, qualified_text
from ostensibly.frontend.jsdoc import (
    CallbackTag,
    DocTag,
    DocTypeLiteral,
    EnumTag,
    PropertyLikeTag,
    ReturnTag,
    TagRole,
    TypeDefiningTag,
    TypeTag,
)
from ostensibly.frontend.jsdoc import TypeParameter as DocTypeParameter
from ostensibly.frontend.nodes import (
    ArrayLiteral,
    ClassMember,
    FunctionLike,
    LiteralExpression,
    ObjectLiteral,
    PropertyAssignment,
    PropertyDeclaration,
    SyntaxNode,
    VariableDeclaration,
    VariableStatement,
)
from ostensibly.frontend.typeexpr import (
    ArrayExpr,
    FunctionExpr,
    IntersectionExpr,
    KeywordExpr,
    LiteralExpr,
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

log = get_logger(__name__)

Resolvable = DocTag | DocTypeLiteral | TypeExpr


class TypeResolver:
    """Resolve documented types against a :class:`TypeChecker`.

    Usage::

        resolver = TypeResolver(checker)
        resolver.resolve(return_tag, async_wrap=True)  # Promise<...>
    """

    def __init__(self, checker: TypeChecker) -> None:
        self._checker = checker

    def resolve(
        self,
        node: Resolvable | None,
        async_wrap: bool = False,
        *,
        source: SyntaxNode | None = None,
    ) -> ResolvedType:
        """Resolve ``node``; ``source`` is the syntax node an enum or callback tag sits on."""
        if async_wrap:
            return promise_of(self.resolve(node, source=source))
        if node is None:
            return VOID

        if isinstance(node, EnumTag):
            return self.enum_type(node, source)
        if isinstance(node, CallbackTag):
            return self.callback_type(node, source)
        if isinstance(node, PropertyLikeTag):
            return self.resolve(node.type_expression) if node.type_expression is not None else ANY
        if isinstance(node, TypeDefiningTag):
            return self.resolve(node.type_expression) if node.type_expression is not None else ANY
        if isinstance(node, (TypeTag, ReturnTag)):
            return self.resolve(node.type_expression)
        if isinstance(node, DocTag):
            return VOID
        if isinstance(node, DocTypeLiteral):
            return self._literal_type(node)
        return self._expression_type(node)

    # -- expressions -------------------------------------------------------

    def _expression_type(self, expr: TypeExpr) -> ResolvedType:
        if isinstance(expr, OperatorExpr):
            return TypeOperator(expr.operator, self._as_written(expr.operand))
        if isinstance(expr, UnionExpr):
            return UnionOf(tuple(self.resolve(member) for member in expr.members))
        if isinstance(expr, IntersectionExpr):
            return IntersectionOf(tuple(self.resolve(member) for member in expr.members))
        if isinstance(expr, ArrayExpr):
            return ArrayOf(self.resolve(expr.element))
        if isinstance(expr, (OptionalExpr, RestExpr)):
            return self.resolve(expr.inner)
        if isinstance(expr, ReferenceExpr):
            return self._reference_type(expr)
        if isinstance(expr, FunctionExpr):
            return FunctionType(
                tuple(
                    Parameter(
                        name=param.name or f"arg{index}",
                        type=ArrayOf(self.resolve(param.type)) if param.rest else self.resolve(param.type),
                        optional=param.optional,
                        rest=param.rest,
                    )
                    for index, param in enumerate(expr.parameters)
                ),
                self.resolve(expr.returns),
            )
        if isinstance(expr, RecordExpr):
            return StructType(
                tuple(
                    StructMember(member.name, self.resolve(member.type) if member.type else ANY, member.optional)
                    for member in expr.members
                )
            )

        guessed = self._checker.guess(expr)
        if isinstance(guessed, ErrorType):
            return ANY
        return guessed

    def _reference_type(self, expr: ReferenceExpr) -> ResolvedType:
        guessed = self._checker.guess(expr)
        written = qualified_text(expr.name)
        if (
            isinstance(expr.name, QualifiedName)
            or isinstance(guessed, NamedType)
            or (guessed == ANY and expr.arguments)
        ):
            name = guessed.name if isinstance(guessed, NamedType) else written
            return NamedType(name, tuple(self.resolve(argument) for argument in expr.arguments))
        if isinstance(guessed, ErrorType):
            return NamedType(written, tuple(self.resolve(argument) for argument in expr.arguments))
        return guessed

    def _as_written(self, expr: TypeExpr) -> ResolvedType:
        if isinstance(expr, ReferenceExpr):
            return NamedType(qualified_text(expr.name), tuple(self._as_written(a) for a in expr.arguments))
        if isinstance(expr, KeywordExpr):
            return Keyword(expr.name)
        if isinstance(expr, LiteralExpr):
            return LiteralValue(expr.value)
        if isinstance(expr, OperatorExpr):
            return TypeOperator(expr.operator, self._as_written(expr.operand))
        return self.resolve(expr)

    def _literal_type(self, literal: DocTypeLiteral) -> ResolvedType:
        struct = StructType(
            tuple(
                StructMember(
                    name=name_text(prop.name) or "",
                    type=self.resolve(prop),
                    optional=prop.bracketed or isinstance(prop.type_expression, OptionalExpr),
                    description=standardise_comment(prop.comment) if prop.comment else None,
                )
                for prop in literal.properties
            )
        )
        result: ResolvedType = NamedType("Array", (struct,)) if literal.is_array else struct
        if literal.base is not None:
            return IntersectionOf((self.resolve(literal.base), result))
        return result

    # -- type-defining tags ------------------------------------------------

    def callback_type(self, tag: CallbackTag, source: SyntaxNode | None = None) -> FunctionType:
        signature = tag.signature
        if tag.block is not None and any(is_throws(t) for t in tag.block.tags):
            returns: ResolvedType = NEVER
        else:
            is_async = isinstance(source, ClassMember) and source.is_async
            returns = self.resolve(signature.returns, is_async)
        return FunctionType(
            parameters=self.parameters_from_tags(signature.parameters),
            returns=returns,
            type_parameters=self.type_parameters(signature.type_parameters),
        )

    def enum_type(self, tag: EnumTag, source: SyntaxNode | None = None) -> UnionOf:
        """Union of the literal values an enum may take.

        An explicit literal (or union of literals) wins; otherwise the values
        come from the initializer the tag documents, one union per declaration
        when a statement declares several.
        """
        expr = tag.type_expression
        if isinstance(expr, LiteralExpr):
            return UnionOf((LiteralValue(expr.value),))
        if isinstance(expr, UnionExpr) and all(isinstance(m, LiteralExpr) for m in expr.members):
            return UnionOf(tuple(LiteralValue(m.value) for m in expr.members if isinstance(m, LiteralExpr)))

        per_declaration = [_literal_values(initializer) for initializer in _initializers(source)]
        if not any(per_declaration):
            log.warning("enum_without_values", tag=tag.tag_name, source=type(source).__name__ if source else None)
            return UnionOf(())
        if len(per_declaration) > 1:
            return UnionOf(tuple(UnionOf(values) for values in per_declaration))
        return UnionOf(per_declaration[0])

    # -- parameters --------------------------------------------------------

    def type_parameters(self, parameters: list[DocTypeParameter]) -> tuple[TypeParameter, ...]:
        return tuple(
            TypeParameter(
                name=param.name,
                constraint=self.resolve(param.constraint) if param.constraint is not None else None,
                default=self.resolve(param.default) if param.default is not None else None,
            )
            for param in parameters
        )

    def parameters_from_tags(self, tags: list[PropertyLikeTag]) -> tuple[Parameter, ...]:
        """One parameter per distinct tag name; repeated names form a union."""
        groups: dict[str, list[PropertyLikeTag]] = {}
        for tag in understructure(tags):
            groups.setdefault(qualified_text(tag.name), []).append(tag)
        return tuple(self._parameter(name, group) for name, group in groups.items())

    def node_parameters(self, node: FunctionLike, tags: list[DocTag]) -> tuple[Parameter, ...]:
        """Parameters of a function-like member, typed by its ``@param`` tags.

        Undocumented parameters are ``any``; a parameter with an initializer
        is optional.
        """
        param_tags: list[DocTag] = list(
            understructure([t for t in tags if isinstance(t, PropertyLikeTag) and t.role is TagRole.PARAM])
        )
        result: list[Parameter] = []
        for formal in node.parameters:
            matched = param_tags_for(param_tags, formal.name, formal.index, formal.pattern)
            name = formal.name
            if formal.pattern:
                name = qualified_text(matched[0].name) if matched else f"arg{formal.index}"
            if matched:
                parameter = self._parameter(name, matched, rest=formal.rest)
                if formal.has_initializer and not parameter.optional:
                    parameter = Parameter(parameter.name, parameter.type, True, parameter.rest)
            else:
                parameter = Parameter(
                    name,
                    ArrayOf(ANY) if formal.rest else ANY,
                    optional=formal.has_initializer,
                    rest=formal.rest,
                )
            result.append(parameter)
        return tuple(result)

    def _parameter(self, name: str, tags: list[PropertyLikeTag], rest: bool = False) -> Parameter:
        rest = rest or any(isinstance(t.type_expression, RestExpr) for t in tags)
        types = [self._slot_type(tag) for tag in tags]
        type_: ResolvedType = types[0] if len(types) == 1 else UnionOf(tuple(types))
        if rest and not _is_array(type_):
            type_ = ArrayOf(type_)
        optional = any(t.bracketed or isinstance(t.type_expression, OptionalExpr) for t in tags)
        return Parameter(name, type_, optional=optional and not rest, rest=rest)

    def _slot_type(self, tag: PropertyLikeTag) -> ResolvedType:
        if isinstance(tag.type_expression, RestExpr):
            return ArrayOf(self.resolve(tag.type_expression.inner))
        return self.resolve(tag)


def _is_array(type_: ResolvedType) -> bool:
    return isinstance(type_, ArrayOf) or (isinstance(type_, NamedType) and type_.name in ("Array", "ReadonlyArray"))


def _initializers(source: SyntaxNode | None) -> list[SyntaxNode | None]:
    if isinstance(source, (PropertyAssignment, PropertyDeclaration, VariableDeclaration)):
        return [source.initializer]
    if isinstance(source, VariableStatement):
        return [declaration.initializer for declaration in source.declarations]
    return []


def _literal_values(initializer: SyntaxNode | None) -> tuple[LiteralValue, ...]:
    if isinstance(initializer, ArrayLiteral):
        elements = initializer.elements
    elif isinstance(initializer, ObjectLiteral):
        elements = [p.initializer for p in initializer.properties if isinstance(p, PropertyAssignment)]
    else:
        return ()
    return tuple(LiteralValue(e.value) for e in elements if isinstance(e, LiteralExpression))
