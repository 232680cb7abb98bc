"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

CONFIG_FILE_NAME = "gopkg_index.toml"
DATA_DIR_NAME = ".gopkg_index"
SCANNER_KINDS = ("native", "process")

DEFAULT_SOURCE_EXTENSIONS = (".go",)
DEFAULT_SKIP_PREFIXES = (".", "_")
DEFAULT_SKIP_DIR_NAMES = ("testdata",)
DEFAULT_TEST_SUFFIX = "_test"
DEFAULT_RESERVED_NAMES = ("main", "documentation")


class ConfigurationError(Exception):
    """Raised when roots are missing or unusable."""


@dataclass(slots=True, frozen=True)
class WalkOptions:
    """Rules deciding which directories and files take part in a scan."""

    source_extensions: tuple[str, ...] = DEFAULT_SOURCE_EXTENSIONS
    skip_prefixes: tuple[str, ...] = DEFAULT_SKIP_PREFIXES
    skip_dir_names: tuple[str, ...] = DEFAULT_SKIP_DIR_NAMES
    test_suffix: str = DEFAULT_TEST_SUFFIX
    reserved_names: tuple[str, ...] = DEFAULT_RESERVED_NAMES

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-serializable copy."""
        return {
            "source_extensions": list(self.source_extensions),
            "skip_prefixes": list(self.skip_prefixes),
            "skip_dir_names": list(self.skip_dir_names),
            "test_suffix": self.test_suffix,
            "reserved_names": list(self.reserved_names),
        }

    @classmethod
    def from_dict(cls, payload: dict[str, object]) -> WalkOptions:
        """Build options from a table, keeping defaults for missing fields."""
        base = cls()
        test_suffix = payload.get("test_suffix", base.test_suffix)
        if not isinstance(test_suffix, str):
            raise ValueError("Config field 'walk.test_suffix' must be a string.")
        return cls(
            source_extensions=_optional_strings(
                payload, "source_extensions", base.source_extensions
            ),
            skip_prefixes=_optional_strings(payload, "skip_prefixes", base.skip_prefixes),
            skip_dir_names=_optional_strings(payload, "skip_dir_names", base.skip_dir_names),
            test_suffix=test_suffix,
            reserved_names=_optional_strings(payload, "reserved_names", base.reserved_names),
        )


@dataclass(slots=True, frozen=True)
class IndexerConfig:
    """Fully merged indexer configuration."""

    roots: tuple[Path, ...]
    data_dir: Path
    scanner: str
    walk: WalkOptions

    @property
    def index_path(self) -> Path:
        """Return the persisted index file location."""
        return self.data_dir / "packages.jsonl"

    @property
    def audit_path(self) -> Path:
        """Return the audit log location."""
        return self.data_dir / "audit.jsonl"

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot for command responses."""
        return {
            "roots": [str(root) for root in self.roots],
            "data_dir": str(self.data_dir),
            "index_path": str(self.index_path),
            "scanner": self.scanner,
            "walk": self.walk.to_dict(),
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional startup overrides applied at highest precedence."""

    roots: tuple[Path, ...] | None = None
    data_dir: Path | None = None
    scanner: str | None = None


def source_dir(root: Path) -> Path:
    """Return the directory holding a root's package trees."""
    return root / "src"


def validate_roots(roots: tuple[Path, ...]) -> tuple[Path, ...]:
    """Fail on an empty root list or a root without a source directory."""
    if not roots:
        raise ConfigurationError("No source roots configured.")
    for root in roots:
        if not root.is_dir():
            raise ConfigurationError(f"Source root does not exist: {root}")
        if not source_dir(root).is_dir():
            raise ConfigurationError(f"Source root has no src directory: {root}")
    return roots


def load_config_file(config_path: Path) -> dict[str, object]:
    """Load an optional gopkg_index.toml."""
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILE_NAME} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _tuple_of_strings(value: object, section: str, field: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Config field '{section}.{field}' must be a list of strings.")
    output: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"Config field '{section}.{field}' must contain only strings.")
        output.append(item)
    return tuple(output)


def _optional_strings(
    payload: dict[str, object], field: str, default: tuple[str, ...]
) -> tuple[str, ...]:
    if field not in payload:
        return default
    return _tuple_of_strings(payload[field], "walk", field)


def merge_config(
    payload: dict[str, object], overrides: CliOverrides, base_dir: Path
) -> IndexerConfig:
    """Merge defaults, config file, then CLI/startup overrides."""
    index_payload = _get_table(payload, "index")
    walk_payload = _get_table(payload, "walk")

    roots: tuple[Path, ...] = ()
    if "roots" in index_payload:
        raw_roots = _tuple_of_strings(index_payload["roots"], "index", "roots")
        roots = tuple((base_dir / raw).resolve() for raw in raw_roots)
    if overrides.roots is not None:
        roots = tuple(root.resolve() for root in overrides.roots)
    validate_roots(roots)

    scanner = index_payload.get("scanner", "native")
    if overrides.scanner is not None:
        scanner = overrides.scanner
    if scanner not in SCANNER_KINDS:
        raise ValueError(f"Config field 'index.scanner' must be one of {list(SCANNER_KINDS)}.")

    data_dir = roots[0] / DATA_DIR_NAME
    if "data_dir" in index_payload:
        raw_data_dir = index_payload["data_dir"]
        if not isinstance(raw_data_dir, str) or not raw_data_dir:
            raise ValueError("Config field 'index.data_dir' must be a non-empty string.")
        data_dir = base_dir / raw_data_dir
    if overrides.data_dir is not None:
        data_dir = overrides.data_dir

    return IndexerConfig(
        roots=roots,
        data_dir=data_dir.resolve(),
        scanner=str(scanner),
        walk=WalkOptions.from_dict(walk_payload),
    )


def load_effective_config(
    config_path: Path | None = None, overrides: CliOverrides | None = None
) -> IndexerConfig:
    """Load effective config using merge order defaults -> config file -> overrides."""
    resolved_path = (config_path or Path.cwd() / CONFIG_FILE_NAME).resolve()
    payload = load_config_file(resolved_path)
    return merge_config(payload, overrides or CliOverrides(), base_dir=resolved_path.parent)
