"""Built-in commands exposed to editor integrations."""

from __future__ import annotations

from dataclasses import asdict
from pathlib import Path

from gopkg_index.config import IndexerConfig
from gopkg_index.gomod import find_go_mod, read_go_mod
from gopkg_index.index import IndexManager
from gopkg_index.logging import JsonlAuditLogger
from gopkg_index.resolver import Disambiguation, Resolver
from gopkg_index.tools.registry import ToolDispatchError, ToolHandler, ToolRegistry

AUDIT_LOG_DEFAULT_LIMIT = 50
AUDIT_LOG_MAX_LIMIT = 500


def register_builtin_tools(
    registry: ToolRegistry,
    manager: IndexManager,
    resolver: Resolver,
    config: IndexerConfig,
    audit_logger: JsonlAuditLogger,
) -> None:
    """Register every editor-facing command on ``registry``."""
    registry.register("index.resolve", _resolve_handler(resolver))
    registry.register("index.choose", _choose_handler(resolver))
    registry.register("index.reload", _reload_handler(manager))
    registry.register("index.status", _status_handler(manager, config))
    registry.register("index.modules", _modules_handler())
    registry.register("index.audit_log", _audit_log_handler(audit_logger))


def _required_name(arguments: dict[str, object], command: str) -> str:
    name = arguments.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ToolDispatchError(
            code="INVALID_PARAMS",
            message=f"{command} name must be a non-empty string.",
        )
    return name.strip()


def _resolve_handler(resolver: Resolver) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        name = _required_name(arguments, "index.resolve")
        resolution = resolver.resolve(name)
        if isinstance(resolution, Disambiguation):
            return {
                "name": name,
                "status": "ambiguous",
                "candidates": list(resolution.candidates),
            }
        return {"name": name, "status": "resolved", "path": resolution.path}

    return handler


def _choose_handler(resolver: Resolver) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        name = _required_name(arguments, "index.choose")
        path = arguments.get("path")
        if not isinstance(path, str) or not path:
            raise ToolDispatchError(
                code="INVALID_PARAMS",
                message="index.choose path must be a non-empty string.",
            )
        resolved = resolver.choose(name, path)
        return {"name": name, "status": "resolved", "path": resolved.path}

    return handler


def _reload_handler(manager: IndexManager) -> ToolHandler:
    def handler(_: dict[str, object]) -> dict[str, object]:
        return manager.reload()

    return handler


def _status_handler(manager: IndexManager, config: IndexerConfig) -> ToolHandler:
    def handler(_: dict[str, object]) -> dict[str, object]:
        status = manager.status()
        return {
            **asdict(status),
            "effective_config": config.to_public_dict(),
        }

    return handler


def _modules_handler() -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        start = arguments.get("start", ".")
        if not isinstance(start, str) or not start:
            raise ToolDispatchError(
                code="INVALID_PARAMS",
                message="index.modules start must be a non-empty string.",
            )
        module = read_go_mod(find_go_mod(Path(start)))
        return {
            "go_mod": str(module.path),
            "module_path": module.module_path,
            "go_version": module.go_version,
            "requires": [asdict(requirement) for requirement in module.requires],
        }

    return handler


def _audit_log_handler(audit_logger: JsonlAuditLogger) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        since = arguments.get("since")
        command = arguments.get("command")
        limit = arguments.get("limit", AUDIT_LOG_DEFAULT_LIMIT)
        if since is not None and not isinstance(since, str):
            raise ToolDispatchError(
                code="INVALID_PARAMS",
                message="index.audit_log since must be a timestamp string.",
            )
        if command is not None and not isinstance(command, str):
            raise ToolDispatchError(
                code="INVALID_PARAMS",
                message="index.audit_log command must be a string.",
            )
        if isinstance(limit, bool) or not isinstance(limit, int):
            raise ToolDispatchError(
                code="INVALID_PARAMS",
                message="index.audit_log limit must be an integer.",
            )
        limit = min(max(limit, 1), AUDIT_LOG_MAX_LIMIT)
        return {"entries": audit_logger.read(since=since, limit=limit, command=command)}

    return handler
