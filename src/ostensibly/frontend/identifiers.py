"""Name nodes shared by syntax nodes, documentation tags and type expressions."""

from __future__ import annotations

import re
from dataclasses import dataclass

# `#` and `~` address instance and inner members in JSDoc namepaths
MEMBER_SEPARATORS = re.compile(r"[#~]")


@dataclass(frozen=True, slots=True)
class Identifier:
    text: str


@dataclass(frozen=True, slots=True)
class PrivateIdentifier:
    """An ECMAScript ``#private`` class member name."""

    text: str


@dataclass(frozen=True, slots=True)
class QualifiedName:
    left: Identifier | QualifiedName
    right: Identifier


Name = Identifier | PrivateIdentifier | QualifiedName


def parse_name(text: str) -> Identifier | QualifiedName | None:
    """Build a name node from dotted text, treating ``#``/``~`` as ``.``."""
    parts = [p for p in MEMBER_SEPARATORS.sub(".", text).split(".") if p]
    if not parts:
        return None
    name: Identifier | QualifiedName = Identifier(parts[0])
    for part in parts[1:]:
        name = QualifiedName(name, Identifier(part))
    return name


def name_text(name: Name | None) -> str | None:
    """Rightmost identifier of a name, or None."""
    if name is None:
        return None
    if isinstance(name, QualifiedName):
        return name.right.text
    return name.text


def qualified_text(name: Identifier | QualifiedName) -> str:
    """``QualifiedName(QualifiedName(a, b), c)`` -> ``"a.b.c"``."""
    if isinstance(name, QualifiedName):
        return f"{qualified_text(name.left)}.{name.right.text}"
    return name.text
