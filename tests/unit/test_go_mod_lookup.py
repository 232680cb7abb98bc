from __future__ import annotations

from pathlib import Path

import pytest

from gopkg_index.gomod import GoModNotFoundError, Requirement, find_go_mod, read_go_mod

GO_MOD = """module github.com/acme/service

go 1.22

require github.com/stretchr/testify v1.9.0

require (
\tgithub.com/pkg/errors v0.9.1
\tgolang.org/x/sys v0.20.0 // indirect
)

replace example.com/old => example.com/new v1.0.0
"""


def test_find_go_mod_walks_upward(tmp_path: Path) -> None:
    (tmp_path / "go.mod").write_text(GO_MOD, encoding="utf-8")
    nested = tmp_path / "internal" / "handlers"
    nested.mkdir(parents=True)
    assert find_go_mod(nested) == (tmp_path / "go.mod").resolve()


def test_find_go_mod_raises_when_absent(tmp_path: Path) -> None:
    with pytest.raises(GoModNotFoundError):
        find_go_mod(tmp_path)


def test_read_go_mod_parses_module_and_requirements(tmp_path: Path) -> None:
    path = tmp_path / "go.mod"
    path.write_text(GO_MOD, encoding="utf-8")

    module = read_go_mod(path)

    assert module.module_path == "github.com/acme/service"
    assert module.go_version == "1.22"
    assert module.requires == (
        Requirement("github.com/stretchr/testify", "v1.9.0", False),
        Requirement("github.com/pkg/errors", "v0.9.1", False),
        Requirement("golang.org/x/sys", "v0.20.0", True),
    )
