"""Serialize a declaration tree as ``.d.ts`` text."""

from __future__ import annotations

import json

from ostensibly.core.errors import InternalError
from ostensibly.declare.models import (
    AccessorDecl,
    AccessorKind,
    ClassDecl,
    ConstructorDecl,
    DeclarationFile,
    DocComment,
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
from ostensibly.declare.types import (
    ArrayOf,
    FunctionType,
    IntersectionOf,
    Keyword,
    LiteralValue,
    NamedType,
    Parameter,
    ResolvedType,
    StructType,
    TypeOperator,
    TypeParameter,
    UnionOf,
)
from ostensibly.frontend.nodes import ImportBinding

INDENT = "    "


def render_declaration_file(file: DeclarationFile) -> str:
    """Render a whole declaration file, ending with a newline."""
    return DeclarationPrinter().print_file(file)


def format_literal(value: str | int | float | bool) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return json.dumps(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class DeclarationPrinter:
    """Line-oriented printer with four-space indentation.

    Usage::

        text = DeclarationPrinter().print_file(declaration_file)
    """

    def __init__(self) -> None:
        self._lines: list[str] = []
        self._depth = 0

    # -- output ------------------------------------------------------------

    def _emit(self, text: str) -> None:
        self._lines.append(f"{INDENT * self._depth}{text}" if text else "")

    def _open(self, header: str) -> None:
        self._emit(f"{header} {{")
        self._depth += 1

    def _close(self) -> None:
        self._depth -= 1
        self._emit("}")

    # -- file frame --------------------------------------------------------

    def print_file(self, file: DeclarationFile) -> str:
        self._lines = []
        self._depth = 0
        for declaration in file.imports:
            self._emit(self.import_text(declaration))
        for export in file.exports:
            self._emit(self.reexport_text(export))
        for alias in file.module_aliases:
            self._module_alias(alias)
        self._module(file.module)
        return "\n".join(self._lines) + "\n"

    @staticmethod
    def import_text(declaration: ImportDecl) -> str:
        clauses = []
        if declaration.default_name:
            clauses.append(declaration.default_name)
        if declaration.bindings:
            clauses.append(_bindings_text(declaration.bindings))
        if not clauses:
            return f"import {json.dumps(declaration.module)};"
        return f"import {', '.join(clauses)} from {json.dumps(declaration.module)};"

    @staticmethod
    def reexport_text(declaration: ReExportDecl) -> str:
        text = f"export {_bindings_text(declaration.elements)}"
        if declaration.module is not None:
            text += f" from {json.dumps(declaration.module)}"
        return f"{text};"

    def _module_alias(self, alias: ModuleAlias) -> None:
        self._open(f"declare module {json.dumps(alias.name)}")
        self._emit(f"import {alias.default_export} from {json.dumps(alias.module_name)};")
        self._emit(f"export = {alias.target};")
        self._close()

    def _module(self, module: ModuleDecl) -> None:
        self._open(f"declare module {json.dumps(module.name)}")
        self._emit(f"export default {module.default_export};")
        for name in module.reexports:
            self._emit(f"export import {name} = {module.default_export}.{name};")
        for statement in module.body:
            self._statement(statement)
        self._close()

    # -- statements --------------------------------------------------------

    def _statement(self, statement: Statement) -> None:
        if isinstance(statement, ClassDecl):
            self._class(statement)
        elif isinstance(statement, InterfaceDecl):
            header = f"export interface {statement.name}{self.type_parameters_text(statement.type_parameters)}"
            if statement.extends:
                header += f" extends {', '.join(self.type_text(t) for t in statement.extends)}"
            self._emit(f"{header} {{}}")
        elif isinstance(statement, TypeAliasDecl):
            self._doc(statement.doc)
            prefix = "export " if statement.exported else ""
            self._emit(
                f"{prefix}type {statement.name}{self.type_parameters_text(statement.type_parameters)}"
                f" = {self.type_text(statement.type)};"
            )
        elif isinstance(statement, NamespaceDecl):
            self._open(f"export namespace {statement.name}")
            for child in statement.body:
                self._statement(child)
            self._close()

    def _class(self, declaration: ClassDecl) -> None:
        self._doc(declaration.doc)
        header = f"export class {declaration.name}{self.type_parameters_text(declaration.type_parameters)}"
        if declaration.extends:
            header += f" extends {', '.join(self.type_text(t) for t in declaration.extends)}"
        if declaration.implements:
            header += f" implements {', '.join(self.type_text(t) for t in declaration.implements)}"
        self._open(header)
        for member in declaration.members:
            self._member(member)
        self._close()

    def _member(self, member: MemberDecl) -> None:
        self._doc(member.doc)
        if isinstance(member, ConstructorDecl):
            self._emit(f"constructor({self.parameters_text(member.parameters)});")
            return

        static = "static " if member.static else ""
        if isinstance(member, PropertyDecl):
            optional = "?" if member.optional else ""
            self._emit(f"{static}{member.name}{optional}: {self.type_text(member.type)};")
        elif isinstance(member, AccessorDecl):
            if member.kind is AccessorKind.GET:
                returns = self.type_text(member.type) if member.type is not None else "any"
                self._emit(f"{static}get {member.name}(): {returns};")
            else:
                self._emit(f"{static}set {member.name}({self.parameters_text(member.parameters)});")
        elif isinstance(member, MethodDecl):
            optional = "?" if member.optional else ""
            self._emit(
                f"{static}{member.name}{optional}{self.type_parameters_text(member.type_parameters)}"
                f"({self.parameters_text(member.parameters)}): {self.type_text(member.returns)};"
            )

    def _doc(self, doc: DocComment | None) -> None:
        if doc is None:
            return
        lines = doc.description.splitlines() if doc.description else []
        for tag in doc.tags:
            parts = [f"@{tag.name}", tag.parameter, tag.text]
            lines.append(" ".join(part for part in parts if part))
        if not lines:
            return
        self._emit("/**")
        for line in lines:
            self._emit(f" * {line}".rstrip())
        self._emit(" */")

    # -- types -------------------------------------------------------------

    def type_parameters_text(self, parameters: tuple[TypeParameter, ...]) -> str:
        if not parameters:
            return ""
        rendered = []
        for param in parameters:
            text = param.name
            if param.constraint is not None:
                text += f" extends {self.type_text(param.constraint)}"
            if param.default is not None:
                text += f" = {self.type_text(param.default)}"
            rendered.append(text)
        return f"<{', '.join(rendered)}>"

    def parameters_text(self, parameters: tuple[Parameter, ...]) -> str:
        rendered = []
        for param in parameters:
            prefix = "..." if param.rest else ""
            optional = "?" if param.optional else ""
            rendered.append(f"{prefix}{param.name}{optional}: {self.type_text(param.type)}")
        return ", ".join(rendered)

    def type_text(self, type_: ResolvedType) -> str:
        if isinstance(type_, Keyword):
            return type_.name
        if isinstance(type_, LiteralValue):
            return format_literal(type_.value)
        if isinstance(type_, NamedType):
            if not type_.arguments:
                return type_.name
            return f"{type_.name}<{', '.join(self.type_text(a) for a in type_.arguments)}>"
        if isinstance(type_, UnionOf):
            if not type_.members:
                return "never"
            return " | ".join(self._wrapped(m, (FunctionType, UnionOf)) for m in type_.members)
        if isinstance(type_, IntersectionOf):
            return " & ".join(self._wrapped(m, (FunctionType, UnionOf)) for m in type_.members)
        if isinstance(type_, ArrayOf):
            return f"{self._wrapped(type_.element, (FunctionType, UnionOf, IntersectionOf, TypeOperator))}[]"
        if isinstance(type_, TypeOperator):
            return f"{type_.operator} {self._wrapped(type_.operand, (FunctionType, UnionOf, IntersectionOf))}"
        if isinstance(type_, FunctionType):
            return (
                f"{self.type_parameters_text(type_.type_parameters)}"
                f"({self.parameters_text(type_.parameters)}) => {self.type_text(type_.returns)}"
            )
        if isinstance(type_, StructType):
            return self._struct_text(type_)
        raise InternalError.unexpected("unsupported resolved type", type=repr(type_))

    def _wrapped(self, type_: ResolvedType, needs_parens: tuple[type, ...]) -> str:
        text = self.type_text(type_)
        # A one-member union prints as its member
        if isinstance(type_, UnionOf) and len(type_.members) < 2:
            return text
        return f"({text})" if isinstance(type_, needs_parens) else text

    def _struct_text(self, struct: StructType) -> str:
        if not struct.members:
            return "{}"
        inner = DeclarationPrinter()
        inner._depth = self._depth + 1
        for member in struct.members:
            if member.description:
                inner._doc(DocComment(member.description))
            optional = "?" if member.optional else ""
            inner._emit(f"{member.name}{optional}: {inner.type_text(member.type)};")
        closing = INDENT * self._depth
        return "{\n" + "\n".join(inner._lines) + f"\n{closing}}}"


def _bindings_text(bindings: list[ImportBinding]) -> str:
    rendered = [
        f"{binding.property_name} as {binding.name}" if binding.property_name else binding.name
        for binding in bindings
    ]
    return f"{{{', '.join(rendered)}}}"
