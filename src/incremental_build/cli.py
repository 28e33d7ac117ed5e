"""Command-line session runner."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import TextIO

from incremental_build.config import CliOverrides, load_effective_config
from incremental_build.engine import IncrementalBuildEngine
from incremental_build.errors import EvaluationError
from incremental_build.logging import JsonlAuditLogger
from incremental_build.session import load_session
from incremental_build.staleness import ModuleRegistry


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for a session run."""
    parser = argparse.ArgumentParser(prog="incremental-build")
    parser.add_argument("session", help="TOML file listing modules in build order")
    parser.add_argument("--no-incremental-build", action="store_true", default=False)
    parser.add_argument("--granularity-ms", type=int, required=False, default=None)
    parser.add_argument("--audit-log", required=False, default=None)
    parser.add_argument(
        "--history",
        type=int,
        required=False,
        default=None,
        metavar="N",
        help="Print the last N logged evaluations of each module instead of evaluating",
    )
    parser.add_argument("-v", "--verbose", action="store_true", default=False)
    return parser


def run_session(
    session_path: Path,
    overrides: CliOverrides,
    out_stream: TextIO,
    audit_log: Path | None = None,
) -> int:
    """Evaluate every module of a session in order with one shared registry."""
    config = load_effective_config(session_path.resolve().parent, overrides)
    modules = load_session(session_path)
    audit_logger = JsonlAuditLogger(audit_log) if audit_log is not None else None
    engine = IncrementalBuildEngine(config, ModuleRegistry(), audit_logger=audit_logger)
    for module in modules:
        try:
            result = engine.evaluate(module)
        except EvaluationError as exc:
            payload: dict[str, object] = {
                "module": str(exc.identifier),
                "error": {"code": exc.code, "message": str(exc), "path": str(exc.path)},
            }
            out_stream.write(f"{json.dumps(payload, sort_keys=True)}\n")
            return 1
        out_stream.write(f"{json.dumps(result.to_dict(), sort_keys=True)}\n")
    return 0


def show_history(session_path: Path, audit_log: Path, out_stream: TextIO, limit: int) -> int:
    """Print logged evaluations for each session module, in session order."""
    audit_logger = JsonlAuditLogger(audit_log)
    for module in load_session(session_path):
        for event in audit_logger.history(str(module.identifier), limit=limit):
            out_stream.write(f"{json.dumps(asdict(event), sort_keys=True)}\n")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for the incremental-build command."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    overrides = CliOverrides(
        enabled=False if args.no_incremental_build else None,
        granularity_ms=args.granularity_ms,
    )
    audit_log = Path(args.audit_log).resolve() if args.audit_log is not None else None
    if args.history is not None:
        if audit_log is None:
            parser.error("--history requires --audit-log")
        return show_history(Path(args.session), audit_log, sys.stdout, limit=args.history)
    return run_session(Path(args.session), overrides, sys.stdout, audit_log=audit_log)


if __name__ == "__main__":
    raise SystemExit(main())
