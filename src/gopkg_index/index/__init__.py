"""Package discovery, persistence and index state."""

from .extractor import extract_package, is_qualifying_package, is_source_file
from .manager import (
    STATE_EMPTY,
    STATE_LOADING,
    STATE_POPULATED,
    IndexManager,
    IndexStatus,
)
from .models import DefinitionRecord, PackageDeclaration, PackageIndex
from .normalizer import normalize_import_path
from .scanner import NativeScanner, ProcessScanner, ScanFailedError, Scanner, build_scanner
from .store import (
    INDEX_SCHEMA_VERSION,
    IndexSchemaUnsupportedError,
    MalformedRecordError,
    read_index,
    write_index,
)
from .walker import walk

__all__ = [
    "DefinitionRecord",
    "INDEX_SCHEMA_VERSION",
    "IndexManager",
    "IndexSchemaUnsupportedError",
    "IndexStatus",
    "MalformedRecordError",
    "NativeScanner",
    "PackageDeclaration",
    "PackageIndex",
    "ProcessScanner",
    "STATE_EMPTY",
    "STATE_LOADING",
    "STATE_POPULATED",
    "ScanFailedError",
    "Scanner",
    "build_scanner",
    "extract_package",
    "is_qualifying_package",
    "is_source_file",
    "normalize_import_path",
    "read_index",
    "walk",
    "write_index",
]
