"""End-to-end tests for the generation pipeline."""

from collections.abc import Callable
from pathlib import Path

import pytest

from ostensibly.config.models import GeneratorConfig
from ostensibly.core.errors import ErrorCode, LoadError
from ostensibly.core.logging import get_run_id
from ostensibly.declare.models import ClassDecl, NamespaceDecl
from ostensibly.ops import build_declaration_file, generate_declarations

Generate = Callable[..., str]


class TestGenerateDeclarations:
    """Sources in, ``.d.ts`` text out."""

    def test_given_namespaced_class_when_generated_then_nested_declaration(self, generate: Generate) -> None:
        # Given
        source = """
/**
 * A foo.
 * @namespace Shapes.Foo
 */
class Foo {
    /** @param {number} size */
    constructor(size) {}
}
"""

        # When
        text = generate({"shapes.js": source})

        # Then
        assert text == (
            'declare module "lib" {\n'
            "    export default Lib;\n"
            "    export namespace Shapes {\n"
            "        /**\n"
            "         * A foo.\n"
            "         */\n"
            "        export class Foo {\n"
            "            constructor(size: number);\n"
            "        }\n"
            "    }\n"
            "}\n"
        )

    def test_given_default_export_class_when_generated_then_members_reexported(self, generate: Generate) -> None:
        # Given
        source = """
/** @namespace Lib */
class Lib {
    /** @returns {Lib.Part} */
    part() {}
}

/** @namespace Lib.Part */
class Part {
    /** @type {number} */
    size = 0;
}
"""

        # When
        text = generate({"lib.js": source})

        # Then
        assert "    export import Part = Lib.Part;\n" in text
        assert "        part(): Lib.Part;\n" in text
        assert "            size: number;\n" in text

    def test_given_async_method_when_generated_then_single_promise(self, generate: Generate) -> None:
        source = "/** @namespace Lib */\nclass Lib {\n    /** @returns {string} */\n    async load() {}\n}\n"

        text = generate({"lib.js": source})

        assert "load(): Promise<string>;" in text

    def test_given_enum_without_values_when_generated_then_never(self, generate: Generate) -> None:
        source = "/** @enum {string} Lib.Nothing */\nconst Nothing = make();\n"

        text = generate({"lib.js": source})

        assert "        export type Nothing = never;\n" in text

    def test_given_enum_array_when_generated_then_literal_union(self, generate: Generate) -> None:
        source = "/** @enum {string} Lib.Size */\nconst Size = ['s', 'm', 'l'];\n"

        text = generate({"lib.js": source})

        assert 'export type Size = "s" | "m" | "l";' in text

    def test_given_external_import_when_generated_then_passed_through_first(self, generate: Generate) -> None:
        # Given
        sources = {
            "lib.js": (
                "import EventEmitter from 'events';\n"
                "/** @namespace Lib */\n"
                "class Lib extends EventEmitter {\n"
                "    start() {}\n"
                "}\n"
            )
        }

        # When
        text = generate(sources, external_modules=["events"])

        # Then
        assert text.startswith('import EventEmitter from "events";\n')
        assert "    export class Lib extends EventEmitter {\n" in text

    def test_given_module_tag_when_generated_then_module_alias_block(self, generate: Generate) -> None:
        source = "/**\n * @module lib/part\n * @namespace Lib.Part\n */\nclass Part {\n    m() {}\n}\n"

        text = generate({"lib.js": source})

        assert text.startswith(
            'declare module "lib/part" {\n    import Lib from "lib";\n    export = Lib.Part;\n}\n'
        )

    def test_given_generation_when_finished_then_run_id_cleared(self, generate: Generate) -> None:
        generate({"lib.js": "const a = 1;\n"})

        assert get_run_id() is None


class TestBuildDeclarationFile:
    """The declaration tree before rendering."""

    def test_given_sources_when_built_then_tree_returned(self) -> None:
        config = GeneratorConfig(module_name="shapes", default_export="Shapes")
        source = "/** @namespace Shapes.Circle */\nclass Circle {\n    area() {}\n}\n"

        result = build_declaration_file(config, {"circle.js": source})

        assert result.module.name == "shapes"
        namespace = result.module.body[0]
        assert isinstance(namespace, NamespaceDecl)
        assert isinstance(namespace.body[0], ClassDecl)

    def test_given_entry_files_on_disk_when_built_then_read(self, tmp_path: Path) -> None:
        # Given
        entry = tmp_path / "index.js"
        entry.write_text("/** @namespace Lib.Thing */\nclass Thing {\n    go() {}\n}\n")
        config = GeneratorConfig(module_name="lib", default_export="Lib", entry_files=[str(entry)])

        # When
        text = generate_declarations(config)

        # Then
        assert "export class Thing {" in text

    def test_given_missing_entry_when_generated_then_load_error_and_run_id_cleared(self) -> None:
        config = GeneratorConfig(module_name="lib", default_export="Lib", entry_files=["missing.js"])

        with pytest.raises(LoadError) as exc_info:
            generate_declarations(config, {})

        assert exc_info.value.code == ErrorCode.LOAD_ENTRY_NOT_FOUND
        assert get_run_id() is None
