"""
Shadow resolution across PATH directories.

The first directory (in PATH order) that contains an executable name owns
it; the same name in any later directory is shadowed and never runs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .classifier import Classification


@dataclass(frozen=True)
class ShadowEntry:
    """
    One executable with its shadow linkage.

    Attributes:
        name: Executable name
        directory: Directory holding this copy
        classification: Classification of this copy
        shadowed: Whether an earlier directory holds the same name
        shadowed_by: Owning directory when shadowed, else None
    """
    name: str
    directory: str
    classification: Classification
    shadowed: bool = False
    shadowed_by: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "directory": self.directory,
            "classification": self.classification.to_dict(),
            "shadowed": self.shadowed,
            "shadowed_by": self.shadowed_by,
        }


class ShadowResolver:
    """
    Sequential fold of executables into a name → owner directory map.

    Entries must be added directory by directory in PATH order.
    """

    def __init__(self) -> None:
        self._owners: dict[str, str] = {}
        self.shadowed_count = 0

    def add(self, name: str, directory: str, classification: Classification) -> ShadowEntry:
        owner = self._owners.get(name)
        if owner is None:
            self._owners[name] = directory
            return ShadowEntry(name, directory, classification)

        self.shadowed_count += 1
        return ShadowEntry(name, directory, classification, shadowed=True, shadowed_by=owner)

    def owners(self) -> dict[str, str]:
        """Copy of the name → owning directory map."""
        return dict(self._owners)


def resolve_shadows(
    batches: Iterable[tuple[str, Iterable[tuple[str, Classification]]]],
) -> list[ShadowEntry]:
    """
    Resolve shadowing for classified executables.

    Args:
        batches: (directory, [(name, classification), ...]) in PATH order,
            names within a directory in canonical order

    Returns:
        One ShadowEntry per executable, in input order
    """
    resolver = ShadowResolver()
    entries: list[ShadowEntry] = []
    for directory, items in batches:
        for name, classification in items:
            entries.append(resolver.add(name, directory, classification))
    return entries
