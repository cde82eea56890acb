"""Namespace and type resolution core.

Discovery builds a namespace tree from documented syntax nodes; the
assembler turns that tree into declaration models, resolving documented
types through a :class:`~ostensibly.declare.resolver.TypeResolver`.
"""

from ostensibly.declare.assembler import DeclarationAssembler
from ostensibly.declare.discovery import CollectedDeclarations, DeclarationCollector
from ostensibly.declare.models import DeclarationFile
from ostensibly.declare.namespaces import EntryKind, NamespaceEntry, NamespaceTree, find_or_create
from ostensibly.declare.resolver import TypeResolver

__all__ = [
    "CollectedDeclarations",
    "DeclarationAssembler",
    "DeclarationCollector",
    "DeclarationFile",
    "EntryKind",
    "NamespaceEntry",
    "NamespaceTree",
    "TypeResolver",
    "find_or_create",
]
