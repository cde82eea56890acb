"""Generation pipeline: load, collect, assemble, render."""

from __future__ import annotations

from collections.abc import Mapping

from ostensibly.config.models import GeneratorConfig
from ostensibly.core.logging import clear_run_id, get_logger, set_run_id
from ostensibly.declare.assembler import DeclarationAssembler
from ostensibly.declare.discovery import DeclarationCollector
from ostensibly.declare.models import DeclarationFile
from ostensibly.declare.resolver import TypeResolver
from ostensibly.frontend.checker import DocumentedChecker
from ostensibly.frontend.program import load_program
from ostensibly.render.printer import render_declaration_file

log = get_logger(__name__)


def build_declaration_file(config: GeneratorConfig, sources: Mapping[str, str] | None = None) -> DeclarationFile:
    """Run discovery and assembly for one configuration.

    Raises:
        LoadError: when an entry file cannot be loaded. Nothing is assembled.
    """
    program = load_program(
        entry_files=config.entry_files or None,
        sources=sources,
        compiler_options=config.compiler_options,
    )
    checker = DocumentedChecker.from_program(program)
    collector = DeclarationCollector(
        checker,
        default_export=config.default_export,
        external_modules=config.external_modules,
    )
    collected = collector.collect(program)
    log.debug(
        "declarations_collected",
        namespaces=len(collected.namespaces),
        modules=len(collected.modules),
        imports=len(collected.imports),
    )
    assembler = DeclarationAssembler(TypeResolver(checker), checker)
    return assembler.assemble(collected, module_name=config.module_name, default_export=config.default_export)


def generate_declarations(config: GeneratorConfig, sources: Mapping[str, str] | None = None) -> str:
    """Generate ``.d.ts`` text for ``config``, in memory.

    ``sources`` maps file names to JavaScript text and shadows the file
    system; without ``entry_files`` every file in it is an entry.
    """
    set_run_id()
    log.info("generation_started", module=config.module_name)
    try:
        text = render_declaration_file(build_declaration_file(config, sources))
        log.info("generation_finished", module=config.module_name, size=len(text))
        return text
    finally:
        clear_run_id()
