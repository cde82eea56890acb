"""Declaration models - the tree handed to the printer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ostensibly.declare.types import Parameter, ResolvedType, TypeParameter
from ostensibly.frontend.nodes import ImportBinding


@dataclass
class DocCommentTag:
    """``@param name Text`` or ``@returns Text``."""

    name: str
    parameter: str | None = None
    text: str | None = None


@dataclass
class DocComment:
    """A documentation comment carried onto a declaration."""

    description: str | None = None
    tags: list[DocCommentTag] = field(default_factory=list)


class AccessorKind(str, Enum):
    GET = "get"
    SET = "set"


# -- class members ---------------------------------------------------------


@dataclass
class PropertyDecl:
    name: str
    type: ResolvedType
    optional: bool = False
    static: bool = False
    doc: DocComment | None = None


@dataclass
class ConstructorDecl:
    parameters: tuple[Parameter, ...] = ()
    doc: DocComment | None = None


@dataclass
class AccessorDecl:
    """A get accessor carries ``type``; a set accessor carries ``parameters``."""

    name: str
    kind: AccessorKind
    type: ResolvedType | None = None
    parameters: tuple[Parameter, ...] = ()
    static: bool = False
    doc: DocComment | None = None


@dataclass
class MethodDecl:
    name: str
    parameters: tuple[Parameter, ...]
    returns: ResolvedType
    type_parameters: tuple[TypeParameter, ...] = ()
    optional: bool = False
    static: bool = False
    doc: DocComment | None = None


MemberDecl = PropertyDecl | ConstructorDecl | AccessorDecl | MethodDecl


# -- declarations ----------------------------------------------------------


@dataclass
class ClassDecl:
    name: str
    members: list[MemberDecl] = field(default_factory=list)
    type_parameters: tuple[TypeParameter, ...] = ()
    extends: list[ResolvedType] = field(default_factory=list)
    implements: list[ResolvedType] = field(default_factory=list)
    doc: DocComment | None = None


@dataclass
class InterfaceDecl:
    """Same-named companion of a class whose bases cannot be extended by a class."""

    name: str
    type_parameters: tuple[TypeParameter, ...] = ()
    extends: list[ResolvedType] = field(default_factory=list)


@dataclass
class TypeAliasDecl:
    name: str
    type: ResolvedType
    type_parameters: tuple[TypeParameter, ...] = ()
    exported: bool = True
    doc: DocComment | None = None


@dataclass
class NamespaceDecl:
    name: str
    body: list[Statement] = field(default_factory=list)


Statement = ClassDecl | InterfaceDecl | TypeAliasDecl | NamespaceDecl


# -- file frame ------------------------------------------------------------


@dataclass
class ImportDecl:
    module: str
    default_name: str | None = None
    bindings: list[ImportBinding] = field(default_factory=list)


@dataclass
class ReExportDecl:
    elements: list[ImportBinding]
    module: str | None = None


@dataclass
class ModuleAlias:
    """``declare module "<name>"`` re-exporting one namespace of the main module."""

    name: str
    default_export: str
    module_name: str
    target: str


@dataclass
class ModuleDecl:
    name: str
    default_export: str
    reexports: list[str] = field(default_factory=list)
    body: list[Statement] = field(default_factory=list)


@dataclass
class DeclarationFile:
    module: ModuleDecl
    imports: list[ImportDecl] = field(default_factory=list)
    exports: list[ReExportDecl] = field(default_factory=list)
    module_aliases: list[ModuleAlias] = field(default_factory=list)
