from __future__ import annotations

from pathlib import Path

from gopkg_index.index import normalize_import_path


def test_root_source_prefix_is_stripped() -> None:
    roots = [Path("/go"), Path("/home/u/gopath")]
    assert normalize_import_path(Path("/go/src/html/template"), roots) == "html/template"
    assert (
        normalize_import_path(Path("/home/u/gopath/src/github.com/x/json"), roots)
        == "github.com/x/json"
    )


def test_vendor_segment_maps_to_logical_path_regardless_of_root() -> None:
    roots = [Path("/go"), Path("/home/u/gopath")]
    for directory in (
        Path("/home/u/gopath/src/app/vendor/github.com/pkg/errors"),
        Path("/go/src/cmd/vendor/github.com/pkg/errors"),
        Path("/unconfigured/vendor/github.com/pkg/errors"),
    ):
        assert normalize_import_path(directory, roots) == "github.com/pkg/errors"


def test_nested_vendor_uses_innermost_segment() -> None:
    directory = Path("/gp/src/app/vendor/a.io/lib/vendor/b.io/dep")
    assert normalize_import_path(directory, [Path("/gp")]) == "b.io/dep"


def test_first_matching_root_wins() -> None:
    roots = [Path("/gp"), Path("/gp/src/nested")]
    assert normalize_import_path(Path("/gp/src/nested/src/pkg"), roots) == "nested/src/pkg"


def test_unmatched_directory_is_returned_unchanged() -> None:
    assert normalize_import_path(Path("/opt/other/pkg"), [Path("/go")]) == "/opt/other/pkg"


def test_segment_prefix_is_not_a_root_match() -> None:
    directory = Path("/go/srcfoo/pkg")
    assert normalize_import_path(directory, [Path("/go")]) == "/go/srcfoo/pkg"
