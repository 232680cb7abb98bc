"""Deterministic depth-first package discovery."""

from __future__ import annotations

import os
from collections.abc import Iterator
from dataclasses import asdict, dataclass
from pathlib import Path

from gopkg_index.config import WalkOptions
from gopkg_index.index.extractor import extract_package, is_qualifying_package, is_source_file
from gopkg_index.index.models import PackageDeclaration


@dataclass(slots=True)
class WalkProfile:
    """Counters collected during one walk."""

    directories_visited: int = 0
    directories_revisited: int = 0
    directories_unreadable: int = 0
    files_scanned: int = 0
    declarations: int = 0


def walk(
    source_root: Path,
    options: WalkOptions | None = None,
    profile: dict[str, object] | None = None,
) -> Iterator[PackageDeclaration]:
    """Yield one declaration per directory holding a qualifying source file.

    Directories are visited in lexical order. Symlinked directories are
    followed, but each (device, inode) pair is entered at most once per walk.
    """
    opts = options or WalkOptions()
    counters = WalkProfile()
    visited: set[tuple[int, int]] = set()
    stack: list[Path] = [source_root]
    try:
        while stack:
            current = stack.pop()
            try:
                stat = os.stat(current)
            except OSError:
                counters.directories_unreadable += 1
                continue
            identity = (stat.st_dev, stat.st_ino)
            if identity in visited:
                counters.directories_revisited += 1
                continue
            visited.add(identity)
            try:
                with os.scandir(current) as entries:
                    ordered_entries = sorted(entries, key=lambda item: item.name)
            except OSError:
                counters.directories_unreadable += 1
                continue
            counters.directories_visited += 1

            subdirs: list[Path] = []
            files: list[Path] = []
            for entry in ordered_entries:
                if _is_skipped_name(entry.name, opts):
                    continue
                try:
                    if entry.is_dir():
                        subdirs.append(Path(entry.path))
                    elif entry.is_file() and is_source_file(
                        entry.name, opts.source_extensions, opts.test_suffix
                    ):
                        files.append(Path(entry.path))
                except OSError:
                    continue

            # files directly in the source root have no import path
            name = None if current == source_root else _directory_package(files, opts, counters)
            if name is not None:
                counters.declarations += 1
                yield PackageDeclaration(directory=current, name=name)
            stack.extend(reversed(subdirs))
    finally:
        if profile is not None:
            profile.update(asdict(counters))


def _is_skipped_name(name: str, options: WalkOptions) -> bool:
    if name in options.skip_dir_names:
        return True
    return any(name.startswith(prefix) for prefix in options.skip_prefixes)


def _directory_package(
    files: list[Path], options: WalkOptions, counters: WalkProfile
) -> str | None:
    for path in files:
        counters.files_scanned += 1
        name = extract_package(path)
        if name is None:
            continue
        if is_qualifying_package(name, options.test_suffix, options.reserved_names):
            return name
    return None
