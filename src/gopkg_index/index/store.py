"""JSONL persistence for the package index."""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator
from dataclasses import asdict, dataclass
from pathlib import Path

from gopkg_index.index.models import DefinitionRecord, PackageIndex

INDEX_SCHEMA_VERSION = 1


@dataclass(slots=True, frozen=True)
class IndexSchemaUnsupportedError(Exception):
    """Raised when stored index schema does not match supported version."""

    found: int
    expected: int


@dataclass(slots=True, frozen=True)
class MalformedRecordError(Exception):
    """Raised when a definition record line cannot be parsed."""

    line_number: int
    reason: str

    def __str__(self) -> str:
        return f"line {self.line_number}: {self.reason}"


def encode_record(record: DefinitionRecord) -> str:
    """Encode one record as a single JSON line without the newline."""
    return json.dumps(asdict(record), sort_keys=True)


def parse_record(raw_line: str, line_number: int) -> DefinitionRecord:
    """Parse one JSON line into a record."""
    try:
        obj = json.loads(raw_line)
    except json.JSONDecodeError as error:
        raise MalformedRecordError(line_number=line_number, reason="invalid JSON") from error
    if not isinstance(obj, dict):
        raise MalformedRecordError(line_number=line_number, reason="record is not an object")
    name = obj.get("name")
    path = obj.get("path")
    if not isinstance(name, str) or not name:
        raise MalformedRecordError(line_number=line_number, reason="missing name")
    if not isinstance(path, str) or not path:
        raise MalformedRecordError(line_number=line_number, reason="missing path")
    return DefinitionRecord(name=name, path=path)


def parse_records(lines: Iterable[str]) -> Iterator[DefinitionRecord]:
    """Parse JSON lines, skipping blank ones."""
    for line_number, raw_line in enumerate(lines, start=1):
        stripped = raw_line.strip()
        if not stripped:
            continue
        yield parse_record(stripped, line_number)


def write_index(path: Path, index: PackageIndex) -> int:
    """Overwrite ``path`` with a header and every record; return record count."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    count = 0
    try:
        with tmp.open("w", encoding="utf-8", newline="\n") as handle:
            handle.write(json.dumps({"schema_version": INDEX_SCHEMA_VERSION}, sort_keys=True))
            handle.write("\n")
            for record in index.records():
                handle.write(encode_record(record))
                handle.write("\n")
                count += 1
        tmp.replace(path)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise
    return count


def read_index(path: Path) -> PackageIndex:
    """Load a persisted index, validating its header and every record."""
    with path.open("r", encoding="utf-8") as handle:
        header_line = handle.readline().strip()
        _check_header(header_line)
        # header occupies line 1
        return PackageIndex.from_records(_parse_body(enumerate(handle, start=2)))


def _parse_body(numbered_lines: Iterable[tuple[int, str]]) -> Iterator[DefinitionRecord]:
    for line_number, raw_line in numbered_lines:
        stripped = raw_line.strip()
        if stripped:
            yield parse_record(stripped, line_number)


def _check_header(header_line: str) -> None:
    try:
        header = json.loads(header_line) if header_line else None
    except json.JSONDecodeError as error:
        raise MalformedRecordError(line_number=1, reason="invalid header") from error
    if not isinstance(header, dict):
        raise MalformedRecordError(line_number=1, reason="missing header")
    schema = header.get("schema_version")
    if not isinstance(schema, int):
        raise IndexSchemaUnsupportedError(found=-1, expected=INDEX_SCHEMA_VERSION)
    if schema != INDEX_SCHEMA_VERSION:
        raise IndexSchemaUnsupportedError(found=schema, expected=INDEX_SCHEMA_VERSION)
