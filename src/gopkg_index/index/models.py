"""Typed models for indexing state."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(slots=True, frozen=True)
class PackageDeclaration:
    """The package a single directory declares."""

    directory: Path
    name: str


@dataclass(slots=True, frozen=True, order=True)
class DefinitionRecord:
    """One (package name, import path) pair."""

    name: str
    path: str


@dataclass(slots=True)
class PackageIndex:
    """Package name to distinct import paths."""

    _entries: dict[str, set[str]] = field(default_factory=dict)

    @classmethod
    def from_records(cls, records: Iterable[DefinitionRecord]) -> PackageIndex:
        """Build an index from records, dropping repeated pairs."""
        index = cls()
        for record in records:
            index.add(record.name, record.path)
        return index

    def add(self, name: str, path: str) -> bool:
        """Insert a pair; return False when it was already present."""
        paths = self._entries.setdefault(name, set())
        if path in paths:
            return False
        paths.add(path)
        return True

    def candidates(self, name: str) -> tuple[str, ...]:
        """Return the sorted import paths known for a name."""
        return tuple(sorted(self._entries.get(name, ())))

    def names(self) -> tuple[str, ...]:
        return tuple(sorted(self._entries))

    def records(self) -> Iterator[DefinitionRecord]:
        """Yield every pair in (name, path) order."""
        for name in sorted(self._entries):
            for path in sorted(self._entries[name]):
                yield DefinitionRecord(name=name, path=path)

    def as_mapping(self) -> dict[str, frozenset[str]]:
        return {name: frozenset(paths) for name, paths in self._entries.items()}

    def __len__(self) -> int:
        return sum(len(paths) for paths in self._entries.values())

    def __bool__(self) -> bool:
        return bool(self._entries)
