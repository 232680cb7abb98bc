"""STDIO command server entrypoint for editor integrations."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from gopkg_index.config import (
    SCANNER_KINDS,
    CliOverrides,
    ConfigurationError,
    IndexerConfig,
    load_effective_config,
)
from gopkg_index.gomod import GoModNotFoundError
from gopkg_index.index import (
    IndexManager,
    IndexSchemaUnsupportedError,
    MalformedRecordError,
    ScanFailedError,
    Scanner,
    build_scanner,
)
from gopkg_index.logging import AuditEvent, JsonlAuditLogger, sanitize_arguments, utc_timestamp
from gopkg_index.resolver import InvalidChoiceError, PackageNotFoundError, Resolver
from gopkg_index.tools import ToolDispatchError, ToolRegistry, register_builtin_tools


@dataclass(slots=True, frozen=True)
class Request:
    """Normalized incoming request."""

    request_id: str
    method: str
    params: dict[str, object]


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for server startup configuration."""
    parser = argparse.ArgumentParser(prog="gopkg-index")
    parser.add_argument("--root", action="append", required=False, default=None)
    parser.add_argument("--config", required=False, default=None)
    parser.add_argument("--data-dir", required=False, default=None)
    parser.add_argument("--scanner", choices=SCANNER_KINDS, required=False, default=None)
    return parser


class StdioServer:
    """JSON-lines server routing editor commands to the resolver."""

    def __init__(self, config: IndexerConfig, scanner: Scanner | None = None) -> None:
        self._config = config
        self._audit_logger = JsonlAuditLogger(path=config.audit_path)
        self._manager = IndexManager(
            roots=config.roots,
            index_path=config.index_path,
            scanner=scanner or build_scanner(config.scanner, config.walk),
        )
        self._resolver = Resolver(self._manager)
        self._registry = ToolRegistry()
        register_builtin_tools(
            self._registry,
            manager=self._manager,
            resolver=self._resolver,
            config=config,
            audit_logger=self._audit_logger,
        )
        self._fallback_request_counter = 0

    @property
    def manager(self) -> IndexManager:
        return self._manager

    @property
    def audit_logger(self) -> JsonlAuditLogger:
        return self._audit_logger

    def serve(self, in_stream: TextIO, out_stream: TextIO) -> None:
        """Process JSON-line requests and write JSON-line responses."""
        for raw_line in in_stream:
            line = raw_line.strip()
            if not line:
                continue
            response = self.handle_json_line(line)
            out_stream.write(f"{json.dumps(response, sort_keys=True)}\n")
            out_stream.flush()

    def handle_json_line(self, raw_line: str) -> dict[str, object]:
        """Handle a single JSON-line request."""
        try:
            payload = json.loads(raw_line)
        except json.JSONDecodeError:
            request_id = self.next_request_id()
            response = self.error_response(
                request_id=request_id,
                code="INVALID_JSON",
                message="Request must be valid JSON.",
            )
            self.log_request(
                request_id=request_id,
                command="invalid_json",
                arguments={"raw_line_length": len(raw_line)},
                response=response,
            )
            return response
        return self.handle_payload(payload)

    def handle_payload(self, payload: object) -> dict[str, object]:
        """Validate and dispatch a parsed payload."""
        parsed = self.parse_request(payload)
        if isinstance(parsed, dict):
            request_id_value = parsed.get("request_id")
            request_id = (
                request_id_value if isinstance(request_id_value, str) else self.next_request_id()
            )
            self.log_request(
                request_id=request_id,
                command="invalid_request",
                arguments={},
                response=parsed,
            )
            return parsed

        request = parsed
        response = self._dispatch(request)
        self.log_request(
            request_id=request.request_id,
            command=request.method,
            arguments=request.params,
            response=response,
        )
        return response

    def _dispatch(self, request: Request) -> dict[str, object]:
        request_id = request.request_id
        try:
            result = self._registry.dispatch(name=request.method, arguments=request.params)
        except ToolDispatchError as error:
            return self.error_response(request_id, error.code, error.message)
        except PackageNotFoundError as error:
            return self.error_response(
                request_id, "PACKAGE_NOT_FOUND", f"Package not found: {error.name}"
            )
        except InvalidChoiceError as error:
            return self.error_response(request_id, "INVALID_CHOICE", str(error))
        except GoModNotFoundError as error:
            return self.error_response(request_id, "GO_MOD_NOT_FOUND", str(error))
        except ScanFailedError as error:
            return self.error_response(
                request_id,
                "SCAN_FAILED",
                f"{error.reason} The persisted index was not changed.",
            )
        except IndexSchemaUnsupportedError as error:
            return self.error_response(
                request_id,
                "INDEX_SCHEMA_UNSUPPORTED",
                (
                    f"Stored index schema {error.found} is unsupported; expected "
                    f"{error.expected}. Run index.reload."
                ),
            )
        except MalformedRecordError as error:
            return self.error_response(
                request_id,
                "INDEX_CORRUPT",
                f"Stored index is corrupt at {error}. Run index.reload.",
            )
        except ConfigurationError as error:
            return self.error_response(request_id, "CONFIG_ERROR", str(error))
        except Exception:
            return self.error_response(
                request_id,
                "INTERNAL_ERROR",
                "Unhandled server error while executing command.",
            )
        return self.success_response(request_id=request_id, result=result)

    def parse_request(self, payload: object) -> Request | dict[str, object]:
        """Validate request payload and return normalized Request."""
        if not isinstance(payload, dict):
            return self.error_response(
                request_id=self.next_request_id(),
                code="INVALID_REQUEST",
                message="Request must be an object.",
            )

        request_id = self.extract_request_id(payload.get("id"))
        method = payload.get("method")
        params = payload.get("params", {})

        if not isinstance(method, str) or not method:
            return self.error_response(
                request_id=request_id,
                code="INVALID_REQUEST",
                message="Request method must be a non-empty string.",
            )
        if not isinstance(params, dict):
            return self.error_response(
                request_id=request_id,
                code="INVALID_PARAMS",
                message="Request params must be an object.",
            )

        return Request(request_id=request_id, method=method, params=params)

    def extract_request_id(self, request_id: object) -> str:
        """Extract request ID from payload or synthesize deterministic fallback."""
        if isinstance(request_id, str) and request_id:
            return request_id
        if isinstance(request_id, int):
            return str(request_id)
        return self.next_request_id()

    def next_request_id(self) -> str:
        """Generate deterministic fallback request IDs for invalid/missing IDs."""
        self._fallback_request_counter += 1
        return f"req-{self._fallback_request_counter:06d}"

    @staticmethod
    def success_response(request_id: str, result: dict[str, object]) -> dict[str, object]:
        """Build success envelope."""
        return {
            "request_id": request_id,
            "ok": True,
            "result": result,
            "warnings": [],
        }

    @staticmethod
    def error_response(request_id: str, code: str, message: str) -> dict[str, object]:
        """Build explicit error envelope."""
        return {
            "request_id": request_id,
            "ok": False,
            "result": {},
            "warnings": [],
            "error": {"code": code, "message": message},
        }

    def log_request(
        self,
        request_id: str,
        command: str,
        arguments: dict[str, object],
        response: dict[str, object],
    ) -> None:
        """Log one sanitized request event."""
        error_payload = response.get("error")
        error_code: str | None = None
        if isinstance(error_payload, dict):
            code_value = error_payload.get("code")
            if isinstance(code_value, str):
                error_code = code_value
        outcome: str | None = None
        result = response.get("result")
        if isinstance(result, dict) and isinstance(result.get("status"), str):
            outcome = str(result["status"])
        event = AuditEvent(
            timestamp=utc_timestamp(),
            request_id=request_id,
            command=command,
            ok=bool(response.get("ok", False)),
            outcome=outcome,
            error_code=error_code,
            metadata=sanitize_arguments(arguments),
        )
        self._audit_logger.append(event)


def create_server(
    roots: Sequence[str] | None = None,
    config_path: str | None = None,
    data_dir: str | None = None,
    scanner: Scanner | str | None = None,
) -> StdioServer:
    """Create a configured STDIO server instance.

    ``scanner`` is either a scanner kind name or a ready scanner object.
    """
    scanner_kind = scanner if isinstance(scanner, str) else None
    overrides = CliOverrides(
        roots=tuple(Path(root) for root in roots) if roots is not None else None,
        data_dir=Path(data_dir).resolve() if data_dir is not None else None,
        scanner=scanner_kind,
    )
    config = load_effective_config(
        config_path=Path(config_path) if config_path is not None else None,
        overrides=overrides,
    )
    scanner_instance = None if isinstance(scanner, str) else scanner
    return StdioServer(config=config, scanner=scanner_instance)


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for the gopkg-index server process."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    try:
        server = create_server(
            roots=args.root,
            config_path=args.config,
            data_dir=args.data_dir,
            scanner=args.scanner,
        )
    except (ConfigurationError, ValueError) as error:
        sys.stderr.write(f"gopkg-index: {error}\n")
        return 2
    server.serve(in_stream=sys.stdin, out_stream=sys.stdout)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
