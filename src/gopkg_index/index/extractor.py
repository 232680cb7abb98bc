"""Lexical package declaration extraction for Go source files."""

from __future__ import annotations

import re
from pathlib import Path

_PACKAGE_RE = re.compile(r"^\s*package\s+([A-Za-z_][A-Za-z0-9_]*)\b")


def extract_package(path: Path) -> str | None:
    """Return the first declared package name, or None.

    Reading stops at the first matching line. A leading byte order mark is
    ignored. Files that cannot be opened or decoded yield None so a single bad
    file never aborts a scan.
    """
    try:
        with path.open("r", encoding="utf-8-sig") as handle:
            for line in handle:
                matched = _PACKAGE_RE.match(line)
                if matched is not None:
                    return matched.group(1)
    except (OSError, UnicodeDecodeError):
        return None
    return None


def is_qualifying_package(name: str, test_suffix: str, reserved_names: tuple[str, ...]) -> bool:
    """Return True when a package name can be imported as a library."""
    if test_suffix and name.endswith(test_suffix):
        return False
    return name not in reserved_names


def is_source_file(file_name: str, extensions: tuple[str, ...], test_suffix: str) -> bool:
    """Return True for a recognized, non-test source file name."""
    stem, dot, suffix = file_name.rpartition(".")
    if not dot or f".{suffix.lower()}" not in extensions:
        return False
    return not (test_suffix and stem.endswith(test_suffix))
