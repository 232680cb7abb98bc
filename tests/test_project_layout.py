from __future__ import annotations

from pathlib import Path


def test_required_package_paths_exist() -> None:
    root = Path(__file__).resolve().parents[1]
    required = [
        "src/gopkg_index/server.py",
        "src/gopkg_index/resolver.py",
        "src/gopkg_index/gomod.py",
        "src/gopkg_index/tools/__init__.py",
        "src/gopkg_index/index/__init__.py",
        "src/gopkg_index/index/helper.py",
        "src/gopkg_index/logging/__init__.py",
    ]
    for rel in required:
        assert (root / rel).exists(), rel
