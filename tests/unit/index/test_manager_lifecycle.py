from __future__ import annotations

import shutil
from collections.abc import Iterator, Sequence
from pathlib import Path

import pytest

from gopkg_index.config import ConfigurationError
from gopkg_index.index import (
    STATE_EMPTY,
    STATE_POPULATED,
    DefinitionRecord,
    IndexManager,
    NativeScanner,
    ScanFailedError,
)


class FakeScanner:
    name = "fake"

    def __init__(self, records: list[DefinitionRecord]) -> None:
        self.records = records
        self.calls = 0
        self.fail = False

    def scan(
        self, roots: Sequence[Path], profile: dict[str, object] | None = None
    ) -> Iterator[DefinitionRecord]:
        self.calls += 1
        if self.fail:
            raise ScanFailedError(reason="boom")
        return iter(list(self.records))


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def _root(tmp_path: Path) -> Path:
    root = tmp_path / "go"
    (root / "src").mkdir(parents=True, exist_ok=True)
    return root


def test_first_lookup_builds_and_persists_once(tmp_path: Path) -> None:
    scanner = FakeScanner([DefinitionRecord("json", "encoding/json")])
    index_path = tmp_path / "data" / "packages.jsonl"
    manager = IndexManager([_root(tmp_path)], index_path, scanner=scanner)
    assert manager.state == STATE_EMPTY

    assert manager.candidates("json") == ("encoding/json",)
    assert manager.candidates("json") == ("encoding/json",)

    assert scanner.calls == 1
    assert manager.state == STATE_POPULATED
    assert index_path.exists()


def test_persisted_index_is_authoritative_for_new_manager(tmp_path: Path) -> None:
    index_path = tmp_path / "packages.jsonl"
    scanner = FakeScanner([DefinitionRecord("json", "encoding/json")])
    first = IndexManager([_root(tmp_path)], index_path, scanner=scanner)
    first.ensure_loaded()

    rescan = FakeScanner([DefinitionRecord("json", "github.com/x/json")])
    second = IndexManager([_root(tmp_path)], index_path, scanner=rescan)

    assert second.candidates("json") == ("encoding/json",)
    assert rescan.calls == 0


def test_reload_rebuilds_and_overwrites(tmp_path: Path) -> None:
    index_path = tmp_path / "packages.jsonl"
    scanner = FakeScanner([DefinitionRecord("json", "encoding/json")])
    manager = IndexManager([_root(tmp_path)], index_path, scanner=scanner)
    manager.ensure_loaded()

    scanner.records = [DefinitionRecord("yaml", "gopkg.in/yaml.v3")]
    summary = manager.reload()

    assert summary["records"] == 1
    assert summary["packages"] == 1
    assert summary["scanner"] == "fake"
    assert manager.candidates("json") == ()
    assert manager.candidates("yaml") == ("gopkg.in/yaml.v3",)
    assert "yaml" in index_path.read_text(encoding="utf-8")


def test_failed_reload_keeps_previous_index_and_file(tmp_path: Path) -> None:
    index_path = tmp_path / "packages.jsonl"
    scanner = FakeScanner([DefinitionRecord("json", "encoding/json")])
    manager = IndexManager([_root(tmp_path)], index_path, scanner=scanner)
    manager.ensure_loaded()
    before = index_path.read_bytes()

    scanner.fail = True
    with pytest.raises(ScanFailedError):
        manager.reload()

    assert manager.state == STATE_POPULATED
    assert manager.candidates("json") == ("encoding/json",)
    assert index_path.read_bytes() == before


def test_failed_first_build_leaves_no_index_file(tmp_path: Path) -> None:
    index_path = tmp_path / "packages.jsonl"
    scanner = FakeScanner([])
    scanner.fail = True
    manager = IndexManager([_root(tmp_path)], index_path, scanner=scanner)

    with pytest.raises(ScanFailedError):
        manager.ensure_loaded()

    assert manager.state == STATE_EMPTY
    assert not index_path.exists()


def test_native_build_is_byte_identical_across_runs(tmp_path: Path) -> None:
    goroot = tmp_path / "go"
    gopath = tmp_path / "gopath"
    _write(goroot / "src" / "html" / "template" / "template.go", "package template\n")
    _write(goroot / "src" / "encoding" / "json" / "decode.go", "package json\n")
    _write(gopath / "src" / "github.com" / "x" / "json" / "json.go", "package json\n")
    vendored = gopath / "src" / "app" / "vendor" / "github.com" / "pkg" / "errors"
    _write(vendored / "e.go", "package errors\n")

    first_path = tmp_path / "first.jsonl"
    second_path = tmp_path / "second.jsonl"
    IndexManager([goroot, gopath], first_path).reload()
    IndexManager([goroot, gopath], second_path).reload()

    assert first_path.read_bytes() == second_path.read_bytes()
    manager = IndexManager([goroot, gopath], first_path, scanner=NativeScanner())
    assert manager.candidates("template") == ("html/template",)
    assert manager.candidates("json") == ("encoding/json", "github.com/x/json")
    assert manager.candidates("errors") == ("github.com/pkg/errors",)


def test_status_reports_counts_without_loading(tmp_path: Path) -> None:
    scanner = FakeScanner([DefinitionRecord("a", "x/a"), DefinitionRecord("a", "y/a")])
    manager = IndexManager([_root(tmp_path)], tmp_path / "packages.jsonl", scanner=scanner)

    before = manager.status()
    assert before.state == STATE_EMPTY
    assert before.persisted is False
    assert scanner.calls == 0

    manager.ensure_loaded()
    after = manager.status()
    assert after.state == STATE_POPULATED
    assert after.package_count == 1
    assert after.record_count == 2
    assert after.persisted is True


def test_reload_after_root_removed_keeps_previous_index(tmp_path: Path) -> None:
    goroot = tmp_path / "go"
    gopath = tmp_path / "gopath"
    _write(goroot / "src" / "encoding" / "json" / "decode.go", "package json\n")
    _write(gopath / "src" / "github.com" / "x" / "json" / "json.go", "package json\n")
    index_path = tmp_path / "packages.jsonl"
    manager = IndexManager([goroot, gopath], index_path)
    assert manager.candidates("json") == ("encoding/json", "github.com/x/json")
    before = index_path.read_bytes()

    shutil.rmtree(gopath)
    with pytest.raises(ConfigurationError, match="does not exist"):
        manager.reload()

    assert manager.state == STATE_POPULATED
    assert manager.candidates("json") == ("encoding/json", "github.com/x/json")
    assert index_path.read_bytes() == before


def test_build_without_roots_is_a_configuration_error(tmp_path: Path) -> None:
    index_path = tmp_path / "packages.jsonl"
    scanner = FakeScanner([DefinitionRecord("json", "encoding/json")])
    manager = IndexManager([], index_path, scanner=scanner)

    with pytest.raises(ConfigurationError, match="No source roots"):
        manager.ensure_loaded()

    assert manager.state == STATE_EMPTY
    assert scanner.calls == 0
    assert not index_path.exists()


def test_build_with_missing_source_dir_is_a_configuration_error(tmp_path: Path) -> None:
    root = tmp_path / "go"
    root.mkdir()
    manager = IndexManager([root], tmp_path / "packages.jsonl")

    with pytest.raises(ConfigurationError, match="no src directory"):
        manager.ensure_loaded()

    assert manager.state == STATE_EMPTY
