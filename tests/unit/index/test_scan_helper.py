from __future__ import annotations

import io
import json
from pathlib import Path

from gopkg_index.index.helper import run


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_helper_writes_records_to_stdout_and_summary_to_stderr(tmp_path: Path) -> None:
    root = tmp_path / "go"
    _write(root / "src" / "html" / "template" / "template.go", "package template\n")
    _write(root / "src" / "text" / "template" / "exec.go", "package template\n")
    out = io.StringIO()
    err = io.StringIO()

    code = run([str(root)], out_stream=out, err_stream=err)

    assert code == 0
    assert [json.loads(line) for line in out.getvalue().splitlines()] == [
        {"name": "template", "path": "html/template"},
        {"name": "template", "path": "text/template"},
    ]
    summary = json.loads(err.getvalue())
    assert summary["records"] == 2


def test_helper_reads_staged_request_with_walk_options(tmp_path: Path) -> None:
    root = tmp_path / "go"
    _write(root / "src" / "cmd" / "main.go", "package main\n")
    request = tmp_path / "request.json"
    request.write_text(
        json.dumps({"roots": [str(root)], "walk": {"reserved_names": []}}), encoding="utf-8"
    )
    out = io.StringIO()

    code = run(["--request", str(request)], out_stream=out, err_stream=io.StringIO())

    assert code == 0
    assert json.loads(out.getvalue()) == {"name": "main", "path": "cmd"}


def test_helper_rejects_missing_roots_without_touching_stdout(tmp_path: Path) -> None:
    out = io.StringIO()
    err = io.StringIO()

    code = run([str(tmp_path / "missing")], out_stream=out, err_stream=err)

    assert code == 2
    assert out.getvalue() == ""
    assert "does not exist" in err.getvalue()


def test_helper_requires_at_least_one_root() -> None:
    err = io.StringIO()
    assert run([], out_stream=io.StringIO(), err_stream=err) == 2
    assert "No source roots" in err.getvalue()
