"""Process-scoped index state: lazy load, build, persist and reload."""

from __future__ import annotations

import threading
import time
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from gopkg_index.config import validate_roots
from gopkg_index.index.models import PackageIndex
from gopkg_index.index.scanner import NativeScanner, Scanner
from gopkg_index.index.store import read_index, write_index
from gopkg_index.logging import utc_timestamp

STATE_EMPTY = "empty"
STATE_LOADING = "loading"
STATE_POPULATED = "populated"


@dataclass(slots=True, frozen=True)
class IndexStatus:
    """Current index status snapshot."""

    state: str
    index_path: str
    persisted: bool
    package_count: int
    record_count: int
    last_build_timestamp: str | None


class IndexManager:
    """Owns the in-memory package index for one process.

    The index is populated at most once, from the persisted file when present
    and by a full scan otherwise. Only :meth:`reload` rebuilds it.
    """

    def __init__(
        self,
        roots: Sequence[Path],
        index_path: Path,
        scanner: Scanner | None = None,
    ) -> None:
        self._roots = tuple(roots)
        self._index_path = index_path
        self._scanner: Scanner = scanner or NativeScanner()
        self._index = PackageIndex()
        self._state = STATE_EMPTY
        self._last_build_timestamp: str | None = None
        self._lock = threading.Lock()

    @property
    def roots(self) -> tuple[Path, ...]:
        return self._roots

    @property
    def index_path(self) -> Path:
        return self._index_path

    @property
    def state(self) -> str:
        return self._state

    def status(self) -> IndexStatus:
        """Return a snapshot without triggering a load."""
        return IndexStatus(
            state=self._state,
            index_path=str(self._index_path),
            persisted=self._index_path.exists(),
            package_count=len(self._index.names()),
            record_count=len(self._index),
            last_build_timestamp=self._last_build_timestamp,
        )

    def ensure_loaded(self) -> PackageIndex:
        """Populate the index on first use and return it."""
        with self._lock:
            if self._state == STATE_POPULATED:
                return self._index
            self._state = STATE_LOADING
            try:
                if self._index_path.exists():
                    index = read_index(self._index_path)
                else:
                    index, _ = self._build_and_persist()
            except Exception:
                self._state = STATE_EMPTY
                raise
            self._index = index
            self._state = STATE_POPULATED
            return self._index

    def candidates(self, name: str) -> tuple[str, ...]:
        """Return the sorted import paths declared under ``name``."""
        return self.ensure_loaded().candidates(name)

    def reload(self) -> dict[str, object]:
        """Rescan every root, overwrite the persisted file and swap the index in.

        A failed rebuild leaves the previous in-memory index and state untouched.
        """
        with self._lock:
            previous_state = self._state
            self._state = STATE_LOADING
            try:
                index, summary = self._build_and_persist()
            except Exception:
                self._state = previous_state
                raise
            self._index = index
            self._state = STATE_POPULATED
            return summary

    def build(self, profile: dict[str, object] | None = None) -> PackageIndex:
        """Scan all roots in order into a fresh index without persisting it."""
        return PackageIndex.from_records(self._scanner.scan(self._roots, profile=profile))

    def _build_and_persist(self) -> tuple[PackageIndex, dict[str, object]]:
        validate_roots(self._roots)
        start = time.perf_counter()
        scan_profile: dict[str, object] = {}
        index = self.build(profile=scan_profile)
        record_count = write_index(self._index_path, index)
        self._last_build_timestamp = utc_timestamp()
        summary: dict[str, object] = {
            "packages": len(index.names()),
            "records": record_count,
            "index_path": str(self._index_path),
            "scanner": self._scanner.name,
            "duration_ms": int((time.perf_counter() - start) * 1000),
            "timestamp": self._last_build_timestamp,
            "scan_profile": scan_profile,
        }
        return index, summary
