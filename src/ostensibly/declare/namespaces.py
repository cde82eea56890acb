"""The namespace tree and its single read/write primitive."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from ostensibly.frontend.jsdoc import TypeDefiningTag
from ostensibly.frontend.nodes import ClassDeclaration, SyntaxNode


class EntryKind(str, Enum):
    """Set on entries backed by a class declaration."""

    NAMESPACE = "namespace"
    ALIAS = "alias"


@dataclass(eq=False)
class NamespaceEntry:
    """One path segment of the namespace tree.

    Kinded entries are anchored on a class; un-kinded entries with an anchor
    are type entries anchored on their defining tag; an entry with neither
    is an intermediate that only groups members.
    """

    kind: EntryKind | None = None
    anchor: ClassDeclaration | TypeDefiningTag | None = None
    source: SyntaxNode | None = None
    members: NamespaceTree = field(default_factory=dict)

    @property
    def is_type(self) -> bool:
        return self.kind is None and isinstance(self.anchor, TypeDefiningTag)


# Insertion order of keys is output order
NamespaceTree = dict[str, NamespaceEntry]

OnFound = Callable[[NamespaceEntry | None], NamespaceEntry]


def find_or_create(path: str, tree: NamespaceTree, on_found: OnFound | None = None) -> NamespaceEntry | None:
    """Walk ``path`` through ``tree``, creating empty intermediates on the way.

    With ``on_found`` the leaf entry is replaced by ``on_found(existing)``
    (``existing`` is None for a new leaf); without it the existing or a newly
    created empty entry is returned unchanged. Returns None for an empty path.
    """
    parts = [part for part in path.split(".") if part]
    if not parts:
        return None

    target = tree
    for part in parts[:-1]:
        target = target.setdefault(part, NamespaceEntry()).members

    leaf = parts[-1]
    if on_found is not None:
        target[leaf] = on_found(target.get(leaf))
    return target.setdefault(leaf, NamespaceEntry())


def lookup(path: str, tree: NamespaceTree) -> NamespaceEntry | None:
    """Read-only counterpart of :func:`find_or_create`."""
    parts = [part for part in path.split(".") if part]
    entry: NamespaceEntry | None = None
    members = tree
    for part in parts:
        entry = members.get(part)
        if entry is None:
            return None
        members = entry.members
    return entry
