"""Locate and read the nearest go.mod file."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

GO_MOD_NAME = "go.mod"

_MODULE_RE = re.compile(r"^module\s+(\S+)")
_GO_RE = re.compile(r"^go\s+(\S+)")
_REQUIRE_LINE_RE = re.compile(r"^require\s+(\S+)\s+(\S+)")
_REQUIRE_BLOCK_START_RE = re.compile(r"^require\s*\($")
_REQUIREMENT_RE = re.compile(r"^(\S+)\s+(\S+)")


@dataclass(slots=True, frozen=True)
class GoModNotFoundError(Exception):
    """Raised when no go.mod exists at or above the start directory."""

    start: str

    def __str__(self) -> str:
        return f"go.mod not found above {self.start}"


@dataclass(slots=True, frozen=True)
class Requirement:
    """One required module and its version."""

    module_path: str
    version: str
    indirect: bool


@dataclass(slots=True, frozen=True)
class GoModule:
    """Parsed module directives of a go.mod file."""

    path: Path
    module_path: str | None
    go_version: str | None
    requires: tuple[Requirement, ...]


def find_go_mod(start: Path) -> Path:
    """Walk upward from ``start`` and return the first go.mod found."""
    directory = start.resolve()
    if directory.is_file():
        directory = directory.parent
    while True:
        candidate = directory / GO_MOD_NAME
        if candidate.is_file():
            return candidate
        if directory.parent == directory:
            raise GoModNotFoundError(start=str(start))
        directory = directory.parent


def read_go_mod(path: Path) -> GoModule:
    """Parse module, go and require directives; other directives are ignored."""
    module_path: str | None = None
    go_version: str | None = None
    requires: list[Requirement] = []
    in_require_block = False
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line, _, comment = raw_line.partition("//")
        line = line.strip()
        indirect = comment.strip() == "indirect"
        if not line:
            continue
        if in_require_block:
            if line == ")":
                in_require_block = False
                continue
            entry = _REQUIREMENT_RE.match(line)
            if entry is not None:
                requires.append(Requirement(entry.group(1), entry.group(2), indirect))
            continue
        if _REQUIRE_BLOCK_START_RE.match(line):
            in_require_block = True
            continue
        single = _REQUIRE_LINE_RE.match(line)
        if single is not None:
            requires.append(Requirement(single.group(1), single.group(2), indirect))
            continue
        module_match = _MODULE_RE.match(line)
        if module_match is not None:
            module_path = module_match.group(1).strip('"')
            continue
        go_match = _GO_RE.match(line)
        if go_match is not None:
            go_version = go_match.group(1)
    return GoModule(
        path=path,
        module_path=module_path,
        go_version=go_version,
        requires=tuple(requires),
    )
