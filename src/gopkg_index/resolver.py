"""Package name resolution over the loaded index."""

from __future__ import annotations

from dataclasses import dataclass

from gopkg_index.index.manager import IndexManager


@dataclass(slots=True, frozen=True)
class PackageNotFoundError(Exception):
    """Raised when no import path is known for a package name."""

    name: str

    def __str__(self) -> str:
        return f"Package not found: {self.name}"


@dataclass(slots=True, frozen=True)
class InvalidChoiceError(Exception):
    """Raised when a selected path is not one of the candidates."""

    name: str
    path: str

    def __str__(self) -> str:
        return f"{self.path} is not a known import path for package {self.name}"


@dataclass(slots=True, frozen=True)
class Resolved:
    """Exactly one import path matched."""

    name: str
    path: str


@dataclass(slots=True, frozen=True)
class Disambiguation:
    """Several import paths matched; the caller must pick one."""

    name: str
    candidates: tuple[str, ...]


Resolution = Resolved | Disambiguation


class Resolver:
    """Looks package names up in an :class:`IndexManager`."""

    def __init__(self, manager: IndexManager) -> None:
        self._manager = manager

    def resolve(self, name: str) -> Resolution:
        """Return the single match, or every candidate when ambiguous."""
        candidates = self._manager.candidates(name)
        if not candidates:
            raise PackageNotFoundError(name=name)
        if len(candidates) == 1:
            return Resolved(name=name, path=candidates[0])
        return Disambiguation(name=name, candidates=candidates)

    def choose(self, name: str, path: str) -> Resolved:
        """Confirm a caller's pick among the candidates for ``name``."""
        candidates = self._manager.candidates(name)
        if not candidates:
            raise PackageNotFoundError(name=name)
        if path not in candidates:
            raise InvalidChoiceError(name=name, path=path)
        return Resolved(name=name, path=path)
