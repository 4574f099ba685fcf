"""Command-line access to profiler browsing and explain diagnostics."""

from __future__ import annotations

import argparse
from datetime import datetime
from typing import Any, Dict, List

from bson import json_util

from ..analysis import DiagnosticAssembler
from ..config import settings
from ..profiler import ProfileLog
from ..storage import close, connect


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Replay profiled MongoDB operations through explain")
    sub = parser.add_subparsers(dest="command", required=True)

    explain_parser = sub.add_parser("explain", help="Diagnose profiled operations by id or comment")
    explain_parser.add_argument("query_ids", nargs="+", help="Profile entry _id or command comment")
    explain_parser.add_argument(
        "--workers", type=int, default=None, help="Concurrent diagnoses (default: config value)"
    )

    list_parser = sub.add_parser("list", help="List profiled operations in a time window")
    list_parser.add_argument("--from", dest="start", required=True, help="ISO start timestamp")
    list_parser.add_argument("--to", dest="end", required=True, help="ISO end timestamp")
    list_parser.add_argument("--collection", default="all", help="Restrict to one collection")
    list_parser.add_argument(
        "--limit", type=int, default=settings.default_list_limit, help="Maximum rows"
    )

    sub.add_parser("stats", help="Show profiler overview statistics")
    return parser


def _dump(payload: Any) -> None:
    print(json_util.dumps(payload, indent=2, json_options=json_util.RELAXED_JSON_OPTIONS))


def _parse_timestamp(raw: str) -> datetime:
    value = raw.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def _run_explain(assembler: DiagnosticAssembler, query_ids: List[str]) -> int:
    exit_code = 0
    results: List[Dict[str, Any]] = []
    for outcome in assembler.diagnose_many(query_ids):
        if outcome.error is not None:
            exit_code = 1
            results.append(
                {
                    "query_id": outcome.query_id,
                    "success": False,
                    "error": type(outcome.error).__name__,
                    "message": str(outcome.error),
                }
            )
            continue
        response = outcome.response
        if response is None:
            exit_code = 1
            continue
        if not response.success:
            exit_code = 1
        results.append(response.as_dict())
    _dump(results[0] if len(results) == 1 else results)
    return exit_code


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    client, database = connect(settings)
    try:
        if args.command == "explain":
            assembler = DiagnosticAssembler.from_client(client, settings)
            if args.workers is not None:
                assembler.max_workers = max(1, args.workers)
            return _run_explain(assembler, args.query_ids)

        profile_log = ProfileLog(database[settings.profile_collection])
        if args.command == "list":
            try:
                start = _parse_timestamp(args.start)
                end = _parse_timestamp(args.end)
            except ValueError as exc:
                parser.error(f"Invalid timestamp: {exc}")
            operations = profile_log.list_operations(
                start=start, end=end, collection=args.collection, limit=args.limit
            )
            for operation in operations:
                print(
                    f"{operation.identifier} {operation.timestamp} {operation.namespace} "
                    f"op={operation.raw_op} millis={operation.millis} "
                    f"plan={operation.plan_summary or 'None'}"
                )
            print(f"Total: {len(operations)}")
            return 0

        if args.command == "stats":
            _dump(profile_log.stats())
            return 0
    finally:
        close(client)

    parser.error("Unknown command")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
