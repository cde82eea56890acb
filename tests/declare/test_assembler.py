"""Tests for declaration tree assembly."""

from __future__ import annotations

from ostensibly.declare.assembler import DeclarationAssembler
from ostensibly.declare.discovery import DeclarationCollector
from ostensibly.declare.models import (
    AccessorDecl,
    AccessorKind,
    ClassDecl,
    ConstructorDecl,
    DeclarationFile,
    DocComment,
    DocCommentTag,
    ImportDecl,
    InterfaceDecl,
    MethodDecl,
    ModuleAlias,
    NamespaceDecl,
    PropertyDecl,
    TypeAliasDecl,
)
from ostensibly.declare.resolver import TypeResolver
from ostensibly.declare.types import (
    ANY,
    VOID,
    FunctionType,
    Keyword,
    NamedType,
    Parameter,
    TypeParameter,
    UnionOf,
    promise_of,
)
from ostensibly.frontend.checker import DocumentedChecker
from ostensibly.frontend.nodes import ImportBinding
from ostensibly.frontend.program import load_program

NUMBER = Keyword("number")
STRING = Keyword("string")


def assemble(
    sources: dict[str, str],
    *,
    entry_files: list[str] | None = None,
    default_export: str = "Lib",
    module_name: str = "lib",
    external_modules: list[str] | None = None,
) -> DeclarationFile:
    program = load_program(entry_files=entry_files, sources=sources)
    checker = DocumentedChecker.from_program(program)
    collected = DeclarationCollector(
        checker, default_export=default_export, external_modules=external_modules
    ).collect(program)
    return DeclarationAssembler(TypeResolver(checker), checker).assemble(
        collected, module_name=module_name, default_export=default_export
    )


def only_class(result: DeclarationFile) -> ClassDecl:
    classes = [s for s in result.module.body if isinstance(s, ClassDecl)]
    assert len(classes) == 1
    return classes[0]


class TestNamespaceLayout:
    """Classes, namespaces and aliases in tree order."""

    def test_given_class_with_nested_type_when_assembled_then_class_then_namespace(self) -> None:
        # Given
        source = """
/** @typedef {number} Shapes.Foo~Size */
const unit = 1;

/** @namespace Shapes.Foo */
class Foo {
    /** @param {number} size - the size */
    constructor(size) {}
}
"""

        # When
        result = assemble({"a.js": source})

        # Then
        assert len(result.module.body) == 1
        shapes = result.module.body[0]
        assert isinstance(shapes, NamespaceDecl) and shapes.name == "Shapes"
        foo_class, foo_namespace = shapes.body
        assert foo_class == ClassDecl(
            name="Foo",
            members=[
                ConstructorDecl(
                    parameters=(Parameter("size", NUMBER),),
                    doc=DocComment(None, [DocCommentTag("param", "size", "The size")]),
                )
            ],
        )
        assert foo_namespace == NamespaceDecl("Foo", [TypeAliasDecl("Size", NUMBER)])

    def test_given_class_without_members_when_assembled_then_only_its_namespace(self) -> None:
        source = "/** @namespace Empty */\nclass Empty {}\n/** @typedef {string} Empty.Key */\nconst k = 1;\n"

        result = assemble({"a.js": source})

        assert result.module.body == [NamespaceDecl("Empty", [TypeAliasDecl("Key", STRING)])]

    def test_given_type_only_base_when_assembled_then_companion_interface(self) -> None:
        """Bases without a construct signature move to a same-named interface."""
        # Given
        source = "/**\n * @namespace A\n * @extends {Shapes.Shape}\n */\nclass A extends Error {\n    m() {}\n}\n"

        # When
        body = assemble({"a.js": source}).module.body

        # Then
        declaration, interface = body
        assert isinstance(declaration, ClassDecl)
        assert declaration.extends == [NamedType("Error")]
        assert interface == InterfaceDecl("A", extends=[NamedType("Shapes.Shape")])

    def test_given_class_templates_and_implements_when_assembled_then_carried(self) -> None:
        source = (
            "/**\n * @namespace Box\n * @template T\n * @implements {Iterable<T>}\n */\n"
            "class Box {\n    m() {}\n}\n"
        )

        declaration = only_class(assemble({"a.js": source}))

        assert declaration.type_parameters == (TypeParameter("T"),)
        assert declaration.implements == [NamedType("Iterable", (NamedType("T"),))]


class TestTypeAliases:
    """Typedef, callback and enum entries."""

    def test_given_private_typedef_when_assembled_then_not_exported(self) -> None:
        source = "/**\n * @private\n * @typedef {string} Lib.Secret\n */\nconst s = 1;\n"

        lib = assemble({"a.js": source}).module.body[0]

        assert lib == NamespaceDecl("Lib", [TypeAliasDecl("Secret", STRING, exported=False)])

    def test_given_described_callback_when_assembled_then_function_alias_with_doc(self) -> None:
        # Given
        source = (
            "/**\n * Visits one item.\n * @template T\n * @callback Lib.Visit\n"
            " * @param {T} item - the item\n * @returns {boolean}\n */\nconst v = 1;\n"
        )

        # When
        lib = assemble({"a.js": source}).module.body[0]

        # Then
        assert isinstance(lib, NamespaceDecl)
        assert lib.body == [
            TypeAliasDecl(
                "Visit",
                FunctionType((Parameter("item", NamedType("T")),), Keyword("boolean")),
                type_parameters=(TypeParameter("T"),),
                doc=DocComment("Visits one item.", [DocCommentTag("param", "item", "The item")]),
            )
        ]

    def test_given_enum_when_assembled_then_literal_union(self) -> None:
        source = "/** @enum {string} Lib.Color */\nconst Color = ['red', 'green'];\n"

        lib = assemble({"a.js": source}).module.body[0]

        assert isinstance(lib, NamespaceDecl)
        alias = lib.body[0]
        assert isinstance(alias, TypeAliasDecl)
        assert isinstance(alias.type, UnionOf) and len(alias.type.members) == 2


class TestMembers:
    """Class member declarations."""

    def test_given_mixed_members_when_assembled_then_each_kind_declared(self) -> None:
        # Given
        source = """
/** @namespace Lib */
class Lib {
    /** @type {string} */
    label = 'x';

    /** @returns {number} */
    get size() {}

    /** @param {number} value */
    set size(value) {}

    async load() {}

    static make() {}
}
"""

        # When
        members = only_class(assemble({"a.js": source})).members

        # Then
        assert members == [
            PropertyDecl("label", STRING),
            AccessorDecl("size", AccessorKind.GET, type=NUMBER),
            AccessorDecl("size", AccessorKind.SET, parameters=(Parameter("value", NUMBER),)),
            MethodDecl("load", (), promise_of(VOID)),
            MethodDecl("make", (), VOID, static=True),
        ]

    def test_given_typed_setter_without_params_when_assembled_then_type_applied(self) -> None:
        source = "/** @namespace Lib */\nclass Lib {\n    /** @type {string} */\n    set name(v) {}\n}\n"

        members = only_class(assemble({"a.js": source})).members

        assert members == [AccessorDecl("name", AccessorKind.SET, parameters=(Parameter("v", STRING),))]

    def test_given_implemented_getter_when_assembled_then_type_borrowed(self) -> None:
        # Given
        source = """
/** @namespace Base */
class Base {
    /** @type {number} */
    get width() {}
}

/** @namespace Impl */
class Impl {
    /** @implements {Base} */
    get width() {}
}
"""

        # When
        body = assemble({"a.js": source}).module.body

        # Then
        impl = body[1]
        assert isinstance(impl, ClassDecl)
        assert impl.members == [AccessorDecl("width", AccessorKind.GET, type=NUMBER)]

    def test_given_method_typed_by_tag_when_assembled_then_property(self) -> None:
        source = "/** @namespace Lib */\nclass Lib {\n    /** @type {Handler} */\n    handle() {}\n}\n"

        members = only_class(assemble({"a.js": source})).members

        assert members == [PropertyDecl("handle", NamedType("Handler"))]

    def test_given_implements_on_method_when_assembled_then_typed_or_dropped(self) -> None:
        """A method typed by an interface needs type arguments to be declared."""
        # Given
        source = """
/** @namespace Lib */
class Lib {
    /** @implements {Visitor<Lib>} */
    visit() {}

    /** @implements {Visitor} */
    skip() {}
}
"""

        # When
        members = only_class(assemble({"a.js": source})).members

        # Then
        assert members == [PropertyDecl("visit", NamedType("Visitor", (NamedType("Lib"),)))]

    def test_given_static_abstract_generic_method_when_assembled_then_property_and_hidden_alias(self) -> None:
        # Given
        source = """
/** @namespace Shapes.Foo */
class Foo {
    /**
     * Builds one.
     * @abstract
     * @template T
     * @param {T} seed
     * @returns {Foo}
     */
    static create(seed) {}
}
"""

        # When
        shapes = assemble({"a.js": source}).module.body[0]

        # Then
        assert isinstance(shapes, NamespaceDecl)
        foo_class, foo_namespace = shapes.body
        assert isinstance(foo_class, ClassDecl)
        assert foo_class.members == [
            PropertyDecl("create", NamedType("Foo.create", (ANY,)), static=True, doc=DocComment("Builds one.", []))
        ]
        assert foo_namespace == NamespaceDecl(
            "Foo",
            [
                TypeAliasDecl(
                    "create",
                    FunctionType((Parameter("seed", NamedType("T")),), NamedType("Foo")),
                    type_parameters=(TypeParameter("T"),),
                    exported=False,
                    doc=DocComment("Builds one.", []),
                )
            ],
        )

    def test_given_overloads_when_assembled_then_one_method_per_signature(self) -> None:
        # Given
        source = """
/** @namespace Lib */
class Lib {
    /**
     * @overload
     * @param {string} key
     * @returns {string}
     */
    /**
     * Reads it.
     * @param {string|number} key
     * @returns {*}
     */
    read(key) {}
}
"""

        # When
        members = only_class(assemble({"a.js": source})).members

        # Then
        assert members == [
            MethodDecl("read", (Parameter("key", STRING),), STRING),
            MethodDecl("read", (Parameter("key", UnionOf((STRING, NUMBER))),), ANY, doc=DocComment("Reads it.", [])),
        ]

    def test_given_constructor_props_when_assembled_then_properties_before_constructor(self) -> None:
        source = """
/** @namespace Lib */
class Lib {
    /**
     * @property {number} width - the width
     * @property {string} [name]
     */
    constructor() {}
}
"""

        members = only_class(assemble({"a.js": source})).members

        assert members == [
            PropertyDecl("width", NUMBER, doc=DocComment("The width")),
            PropertyDecl("name", STRING, optional=True),
            ConstructorDecl(),
        ]


class TestModuleFrame:
    """Imports, re-exports and module aliases."""

    def test_given_default_export_root_when_assembled_then_class_members_reexported(self) -> None:
        # Given
        source = """
/** @namespace Lib */
class Lib {
    m() {}
}

/** @namespace Lib.Part */
class Part {
    m() {}
}

/** @typedef {number} Lib.Size */
const s = 1;
"""

        # When
        result = assemble({"a.js": source})

        # Then
        assert result.module.name == "lib"
        assert result.module.default_export == "Lib"
        assert result.module.reexports == ["Part"]

    def test_given_member_with_nothing_declared_when_assembled_then_not_reexported(self) -> None:
        # Given
        source = """
/** @namespace Lib.Part */
class Part {
    m() {}
}

/** @namespace Lib.Sealed */
class Sealed {
    #secret() {}
}
"""

        # When
        result = assemble({"a.js": source})

        # Then
        root = result.module.body[0]
        assert isinstance(root, NamespaceDecl)
        assert [statement.name for statement in root.body] == ["Part"]
        assert result.module.reexports == ["Part"]

    def test_given_external_imports_when_assembled_then_one_import_per_default_name(self) -> None:
        sources = {
            "a.js": "import Emitter, { on } from 'events';\n",
            "b.js": "import Bus from 'events';\n",
        }

        result = assemble(sources, external_modules=["events"])

        assert result.imports == [
            ImportDecl("events", "Emitter", [ImportBinding("on")]),
            ImportDecl("events", "Bus", []),
        ]

    def test_given_named_only_import_when_assembled_then_bindings_kept(self) -> None:
        result = assemble({"a.js": "import { on } from 'events';\n"}, external_modules=["events"])

        assert result.imports == [ImportDecl("events", None, [ImportBinding("on")])]

    def test_given_module_tags_when_assembled_then_aliases_except_main_module(self) -> None:
        # Given
        source = """
/**
 * @module lib/shapes
 * @namespace Lib.Shapes
 */
class Shapes {
    m() {}
}

/**
 * @module lib
 * @namespace Lib
 */
class Lib {
    m() {}
}
"""

        # When
        result = assemble({"a.js": source})

        # Then
        assert result.module_aliases == [ModuleAlias("lib/shapes", "Lib", "lib", "Lib.Shapes")]
