"""Tests for declaration file rendering."""

from __future__ import annotations

import pytest

from ostensibly.core.errors import InternalError
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
    ModuleDecl,
    NamespaceDecl,
    PropertyDecl,
    ReExportDecl,
    TypeAliasDecl,
)
from ostensibly.declare.types import (
    ERROR_TYPE,
    VOID,
    ArrayOf,
    FunctionType,
    IntersectionOf,
    Keyword,
    LiteralValue,
    NamedType,
    Parameter,
    StructMember,
    StructType,
    TypeOperator,
    TypeParameter,
    UnionOf,
    promise_of,
)
from ostensibly.frontend.nodes import ImportBinding
from ostensibly.render.printer import DeclarationPrinter, format_literal, render_declaration_file

NUMBER = Keyword("number")
STRING = Keyword("string")
NULL = Keyword("null")


class TestFormatLiteral:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("red", '"red"'),
            ('say "hi"', '"say \\"hi\\""'),
            (3, "3"),
            (-1, "-1"),
            (2.0, "2"),
            (2.5, "2.5"),
            (True, "true"),
            (False, "false"),
        ],
    )
    def test_given_literal_when_formatted_then_typescript_spelling(
        self, value: str | int | float | bool, expected: str
    ) -> None:
        assert format_literal(value) == expected


class TestTypeText:
    """Resolved types as TypeScript."""

    @pytest.mark.parametrize(
        ("type_", "expected"),
        [
            (NUMBER, "number"),
            (LiteralValue("a"), '"a"'),
            (NamedType("Shapes.Foo"), "Shapes.Foo"),
            (promise_of(VOID), "Promise<void>"),
            (NamedType("Map", (STRING, NUMBER)), "Map<string, number>"),
            (UnionOf((STRING, NUMBER)), "string | number"),
            (UnionOf(()), "never"),
            (ArrayOf(NUMBER), "number[]"),
            (ArrayOf(UnionOf((STRING, NUMBER))), "(string | number)[]"),
            (ArrayOf(UnionOf((STRING,))), "string[]"),
            (ArrayOf(ArrayOf(NUMBER)), "number[][]"),
            (IntersectionOf((NamedType("A"), UnionOf((NamedType("B"), NamedType("C"))))), "A & (B | C)"),
            (UnionOf((FunctionType((), VOID), NULL)), "(() => void) | null"),
            (TypeOperator("keyof", NamedType("T")), "keyof T"),
            (ArrayOf(TypeOperator("keyof", NamedType("T"))), "(keyof T)[]"),
            (UnionOf((UnionOf((LiteralValue(1), LiteralValue(2))), UnionOf((LiteralValue(3),)))), "(1 | 2) | 3"),
            (StructType(), "{}"),
        ],
    )
    def test_given_type_when_rendered_then_expected(self, type_: object, expected: str) -> None:
        assert DeclarationPrinter().type_text(type_) == expected  # type: ignore[arg-type]

    def test_given_generic_function_when_rendered_then_full_signature(self) -> None:
        # Given
        type_ = FunctionType(
            parameters=(
                Parameter("items", ArrayOf(NUMBER), rest=True),
                Parameter("label", STRING, optional=True),
            ),
            returns=VOID,
            type_parameters=(TypeParameter("T", NamedType("Base"), STRING),),
        )

        # When
        text = DeclarationPrinter().type_text(type_)

        # Then
        assert text == "<T extends Base = string>(...items: number[], label?: string) => void"

    def test_given_struct_when_rendered_then_indented_block_with_docs(self) -> None:
        type_ = StructType(
            (
                StructMember("x", NUMBER, description="The x"),
                StructMember("y", STRING, optional=True),
            )
        )

        text = DeclarationPrinter().type_text(type_)

        assert text == "{\n    /**\n     * The x\n     */\n    x: number;\n    y?: string;\n}"

    def test_given_unsupported_value_when_rendered_then_internal_error(self) -> None:
        with pytest.raises(InternalError) as exc_info:
            DeclarationPrinter().type_text(ERROR_TYPE)  # type: ignore[arg-type]

        assert "unsupported resolved type" in exc_info.value.message


class TestFrameText:
    """Import and re-export lines."""

    @pytest.mark.parametrize(
        ("declaration", "expected"),
        [
            (ImportDecl("events", "Emitter"), 'import Emitter from "events";'),
            (ImportDecl("events", None, [ImportBinding("on")]), 'import {on} from "events";'),
            (
                ImportDecl("events", "Emitter", [ImportBinding("on"), ImportBinding("off", "remove")]),
                'import Emitter, {on, remove as off} from "events";',
            ),
            (ImportDecl("polyfill"), 'import "polyfill";'),
        ],
    )
    def test_given_import_when_rendered_then_expected(self, declaration: ImportDecl, expected: str) -> None:
        assert DeclarationPrinter.import_text(declaration) == expected

    def test_given_reexports_when_rendered_then_with_and_without_source(self) -> None:
        assert DeclarationPrinter.reexport_text(ReExportDecl([ImportBinding("on")])) == "export {on};"
        assert (
            DeclarationPrinter.reexport_text(ReExportDecl([ImportBinding("x", "y")], "events"))
            == 'export {y as x} from "events";'
        )


class TestRenderDeclarationFile:
    """Whole-file output."""

    def test_given_full_tree_when_rendered_then_expected_text(self) -> None:
        # Given
        part = ClassDecl(
            name="Part",
            type_parameters=(TypeParameter("T"),),
            extends=[NamedType("Base")],
            implements=[NamedType("Sized")],
            doc=DocComment("A part."),
            members=[
                PropertyDecl("count", NUMBER, static=True),
                PropertyDecl("label", STRING, optional=True),
                ConstructorDecl((Parameter("size", NUMBER),)),
                AccessorDecl("size", AccessorKind.GET, type=NUMBER),
                AccessorDecl("size", AccessorKind.SET, parameters=(Parameter("value", NUMBER),)),
                AccessorDecl("raw", AccessorKind.GET),
                MethodDecl(
                    "read",
                    (Parameter("key", NamedType("K")),),
                    promise_of(STRING),
                    type_parameters=(TypeParameter("K"),),
                    doc=DocComment(
                        "Reads it.",
                        [DocCommentTag("param", "key", "The key"), DocCommentTag("returns", None, "The value")],
                    ),
                ),
                MethodDecl("hook", (), VOID, optional=True),
            ],
        )
        file = DeclarationFile(
            module=ModuleDecl(
                name="lib",
                default_export="Lib",
                reexports=["Part"],
                body=[
                    NamespaceDecl(
                        "Lib",
                        [
                            part,
                            InterfaceDecl("Part", (TypeParameter("T"),), [NamedType("Shape")]),
                            TypeAliasDecl("Size", NUMBER, doc=DocComment("Size in px.")),
                            TypeAliasDecl("Hidden", STRING, exported=False),
                        ],
                    )
                ],
            ),
            imports=[ImportDecl("events", "Emitter", [ImportBinding("on")])],
            exports=[ReExportDecl([ImportBinding("on")])],
            module_aliases=[ModuleAlias("lib/part", "Lib", "lib", "Lib.Part")],
        )

        # When
        text = render_declaration_file(file)

        # Then
        assert text == (
            'import Emitter, {on} from "events";\n'
            "export {on};\n"
            'declare module "lib/part" {\n'
            '    import Lib from "lib";\n'
            "    export = Lib.Part;\n"
            "}\n"
            'declare module "lib" {\n'
            "    export default Lib;\n"
            "    export import Part = Lib.Part;\n"
            "    export namespace Lib {\n"
            "        /**\n"
            "         * A part.\n"
            "         */\n"
            "        export class Part<T> extends Base implements Sized {\n"
            "            static count: number;\n"
            "            label?: string;\n"
            "            constructor(size: number);\n"
            "            get size(): number;\n"
            "            set size(value: number);\n"
            "            get raw(): any;\n"
            "            /**\n"
            "             * Reads it.\n"
            "             * @param key The key\n"
            "             * @returns The value\n"
            "             */\n"
            "            read<K>(key: K): Promise<string>;\n"
            "            hook?(): void;\n"
            "        }\n"
            "        export interface Part<T> extends Shape {}\n"
            "        /**\n"
            "         * Size in px.\n"
            "         */\n"
            "        export type Size = number;\n"
            "        type Hidden = string;\n"
            "    }\n"
            "}\n"
        )

    def test_given_empty_module_when_rendered_then_only_default_export(self) -> None:
        text = render_declaration_file(DeclarationFile(module=ModuleDecl("lib", "Lib")))

        assert text == 'declare module "lib" {\n    export default Lib;\n}\n'

    def test_given_empty_doc_when_rendered_then_no_comment(self) -> None:
        file = DeclarationFile(module=ModuleDecl("lib", "Lib", body=[TypeAliasDecl("A", STRING, doc=DocComment())]))

        assert "/**" not in render_declaration_file(file)
