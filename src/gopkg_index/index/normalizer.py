"""Directory to import path conversion."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from gopkg_index.config import source_dir

VENDOR_SEGMENT = "vendor"


def normalize_import_path(directory: Path, roots: Sequence[Path]) -> str:
    """Return the import path Go code would use for a package directory.

    Vendored directories map to the path after their last ``vendor`` segment.
    Other directories are made relative to the first root whose ``src``
    directory contains them. Unmatched directories come back unchanged.
    """
    parts = directory.parts
    for index in range(len(parts) - 1, -1, -1):
        if parts[index] == VENDOR_SEGMENT and index + 1 < len(parts):
            return "/".join(parts[index + 1 :])
    for root in roots:
        base = source_dir(root)
        if directory != base and directory.is_relative_to(base):
            return directory.relative_to(base).as_posix()
    return directory.as_posix()
