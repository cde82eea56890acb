"""Program loading: entry files plus the relative modules they import."""

from __future__ import annotations

import posixpath
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ostensibly.core.errors import LoadError
from ostensibly.core.logging import get_logger
from ostensibly.frontend.nodes import (
    ExportDeclaration,
    ImportDeclaration,
    SourceFile,
    SyntaxNode,
)
from ostensibly.frontend.treesitter import JavaScriptFrontEnd

log = get_logger(__name__)

SOURCE_SUFFIXES = (".js", ".mjs", ".cjs")


@dataclass
class Program:
    """Every loaded source file in program order."""

    source_files: list[SourceFile]
    entry_files: list[str]
    compiler_options: dict[str, Any] = field(default_factory=dict)

    def is_entry(self, source: SourceFile) -> bool:
        return source.file_name in self.entry_files

    def walk(self) -> Iterator[SyntaxNode]:
        """Every node of every non-declaration file, depth first in document order."""
        for source in self.source_files:
            if not source.is_declaration_file:
                yield from _walk(source)


def _walk(node: SyntaxNode) -> Iterator[SyntaxNode]:
    yield node
    for child in node.children():
        yield from _walk(child)


def _normalize(file_name: str) -> str:
    return posixpath.normpath(file_name.replace("\\", "/"))


class _Loader:
    def __init__(self, sources: Mapping[str, str], front_end: JavaScriptFrontEnd) -> None:
        self._sources = {_normalize(name): text for name, text in sources.items()}
        self._front_end = front_end
        self._loaded: dict[str, SourceFile] = {}
        self.order: list[SourceFile] = []

    def exists(self, file_name: str) -> bool:
        return file_name in self._sources or Path(file_name).is_file()

    def read(self, file_name: str) -> str:
        if file_name in self._sources:
            return self._sources[file_name]
        try:
            return Path(file_name).read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise LoadError.entry_not_found(file_name) from e
        except (OSError, UnicodeDecodeError) as e:
            raise LoadError.unreadable_source(file_name, str(e)) from e

    def load(self, file_name: str) -> None:
        if file_name in self._loaded:
            return
        if not self.exists(file_name):
            raise LoadError.entry_not_found(file_name)

        source = self._front_end.parse(file_name, self.read(file_name))
        self._loaded[file_name] = source
        for dependency in self._dependencies(source):
            self.load(dependency)
        self.order.append(source)
        log.debug("source_loaded", file=file_name, statements=len(source.statements))

    def _dependencies(self, source: SourceFile) -> list[str]:
        found: list[str] = []
        for statement in source.statements:
            if not isinstance(statement, (ImportDeclaration, ExportDeclaration)):
                continue
            specifier = statement.module_specifier
            if not specifier or not specifier.startswith((".", "/")):
                continue
            resolved = self._resolve(source.file_name, specifier)
            if resolved is None:
                log.debug("import_unresolved", file=source.file_name, specifier=specifier)
            elif resolved not in found:
                found.append(resolved)
        return found

    def _resolve(self, importer: str, specifier: str) -> str | None:
        base = _normalize(posixpath.join(posixpath.dirname(importer), specifier))
        candidates = [base] if base.endswith(SOURCE_SUFFIXES) else []
        candidates += [base + suffix for suffix in SOURCE_SUFFIXES]
        candidates += [posixpath.join(base, "index" + suffix) for suffix in SOURCE_SUFFIXES]
        return next((candidate for candidate in candidates if self.exists(candidate)), None)


def load_program(
    entry_files: list[str] | None = None,
    sources: Mapping[str, str] | None = None,
    compiler_options: dict[str, Any] | None = None,
    front_end: JavaScriptFrontEnd | None = None,
) -> Program:
    """Load entry files and, ahead of each, the relative modules it imports.

    ``sources`` maps file names to text and takes precedence over the file
    system. Without ``entry_files`` every file in ``sources`` is an entry.

    Raises:
        LoadError: when an entry file is missing or unreadable.
    """
    sources = sources or {}
    entries = [_normalize(name) for name in (entry_files or list(sources))]
    loader = _Loader(sources, front_end or JavaScriptFrontEnd())
    for entry in entries:
        loader.load(entry)
    return Program(
        source_files=loader.order,
        entry_files=entries,
        compiler_options={**(compiler_options or {}), "allowJs": True},
    )
