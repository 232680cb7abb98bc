"""Standalone scan helper: writes definition records for roots to stdout."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import TextIO

from gopkg_index.config import ConfigurationError, WalkOptions, validate_roots
from gopkg_index.index.scanner import NativeScanner
from gopkg_index.index.store import encode_record


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for the scan helper."""
    parser = argparse.ArgumentParser(prog="gopkg-index-scan")
    parser.add_argument("roots", nargs="*", help="Source roots to scan, in order.")
    parser.add_argument(
        "--request",
        required=False,
        default=None,
        help="JSON file with 'roots' and optional 'walk' options.",
    )
    return parser


def load_request(path: Path) -> tuple[list[str], WalkOptions]:
    """Read a staged scan request."""
    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError("Scan request must be a JSON object.")
    roots = payload.get("roots", [])
    if not isinstance(roots, list) or not all(isinstance(item, str) for item in roots):
        raise ValueError("Scan request 'roots' must be a list of strings.")
    walk_payload = payload.get("walk", {})
    if not isinstance(walk_payload, dict):
        raise ValueError("Scan request 'walk' must be an object.")
    return roots, WalkOptions.from_dict(walk_payload)


def run(argv: list[str] | None, out_stream: TextIO, err_stream: TextIO) -> int:
    """Scan and stream records; diagnostics go to ``err_stream`` only."""
    args = build_arg_parser().parse_args(argv)
    raw_roots: list[str] = list(args.roots)
    options = WalkOptions()
    try:
        if args.request is not None:
            requested_roots, options = load_request(Path(args.request))
            raw_roots = requested_roots + raw_roots
        roots = validate_roots(tuple(Path(raw).resolve() for raw in raw_roots))
    except (ConfigurationError, ValueError, OSError) as error:
        err_stream.write(f"gopkg-index-scan: {error}\n")
        return 2

    profile: dict[str, object] = {}
    count = 0
    for record in NativeScanner(options).scan(roots, profile=profile):
        out_stream.write(encode_record(record))
        out_stream.write("\n")
        count += 1
    out_stream.flush()
    err_stream.write(json.dumps({"records": count, **profile}, sort_keys=True))
    err_stream.write("\n")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for the scan helper process."""
    return run(argv, out_stream=sys.stdout, err_stream=sys.stderr)


if __name__ == "__main__":
    raise SystemExit(main())
