"""Scanner implementations producing definition records for a set of roots."""

from __future__ import annotations

import json
import subprocess
import sys
import tempfile
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from gopkg_index.config import WalkOptions, source_dir
from gopkg_index.index.models import DefinitionRecord
from gopkg_index.index.normalizer import normalize_import_path
from gopkg_index.index.store import MalformedRecordError, parse_records
from gopkg_index.index.walker import walk

HELPER_MODULE = "gopkg_index.index.helper"


@dataclass(slots=True, frozen=True)
class ScanFailedError(Exception):
    """Raised when a scan cannot produce a trustworthy record set."""

    reason: str
    returncode: int | None = None
    stderr: str = ""

    def __str__(self) -> str:
        return self.reason


class Scanner(Protocol):
    """Produces (name, import path) records for the given roots."""

    name: str

    def scan(
        self, roots: Sequence[Path], profile: dict[str, object] | None = None
    ) -> Iterator[DefinitionRecord]: ...


class NativeScanner:
    """In-process directory walk and declaration scan."""

    name = "native"

    def __init__(self, options: WalkOptions | None = None) -> None:
        self._options = options or WalkOptions()

    def scan(
        self, roots: Sequence[Path], profile: dict[str, object] | None = None
    ) -> Iterator[DefinitionRecord]:
        """Walk each root in order and normalize every declaration."""
        totals: dict[str, int] = {}
        try:
            for root in roots:
                walk_profile: dict[str, object] = {}
                for declaration in walk(source_dir(root), self._options, walk_profile):
                    yield DefinitionRecord(
                        name=declaration.name,
                        path=normalize_import_path(declaration.directory, roots),
                    )
                for key, value in walk_profile.items():
                    if isinstance(value, int):
                        totals[key] = totals.get(key, 0) + value
        finally:
            if profile is not None:
                profile["walk"] = totals


class ProcessScanner:
    """Delegates the scan to the helper module in a child interpreter."""

    name = "process"

    def __init__(
        self,
        options: WalkOptions | None = None,
        command: Sequence[str] | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        self._options = options or WalkOptions()
        if command is None:
            command = (sys.executable, "-m", HELPER_MODULE)
        self._command = tuple(command)
        self._timeout_seconds = timeout_seconds

    def scan(
        self, roots: Sequence[Path], profile: dict[str, object] | None = None
    ) -> Iterator[DefinitionRecord]:
        """Run the helper to completion, then parse its stdout strictly."""
        stdout, stderr = self._run(roots)
        if profile is not None:
            profile["diagnostics"] = stderr.strip()
        try:
            records = list(parse_records(stdout.splitlines()))
        except MalformedRecordError as error:
            raise ScanFailedError(
                reason=f"Scan helper produced a malformed record ({error}).",
                returncode=0,
                stderr=stderr,
            ) from error
        return iter(records)

    def _run(self, roots: Sequence[Path]) -> tuple[str, str]:
        request = {
            "roots": [str(root) for root in roots],
            "walk": self._options.to_dict(),
        }
        with tempfile.TemporaryDirectory(prefix="gopkg_index-") as staging:
            request_path = Path(staging) / "request.json"
            request_path.write_text(json.dumps(request, sort_keys=True), encoding="utf-8")
            try:
                completed = subprocess.run(
                    [*self._command, "--request", str(request_path)],
                    check=False,
                    capture_output=True,
                    text=True,
                    encoding="utf-8",
                    timeout=self._timeout_seconds,
                )
            except (OSError, subprocess.TimeoutExpired) as error:
                raise ScanFailedError(reason=f"Scan helper could not run: {error}") from error
        if completed.returncode != 0:
            raise ScanFailedError(
                reason=f"Scan helper exited with status {completed.returncode}.",
                returncode=completed.returncode,
                stderr=completed.stderr,
            )
        return completed.stdout, completed.stderr


def build_scanner(kind: str, options: WalkOptions) -> Scanner:
    """Return the scanner configured by name."""
    if kind == "native":
        return NativeScanner(options)
    if kind == "process":
        return ProcessScanner(options)
    raise ValueError(f"Unknown scanner: {kind}")
