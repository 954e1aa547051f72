#!/usr/bin/env python3
"""Enrich tracked issues with fleet telemetry.

Searches the issue tracker, looks up each VIN in the primary (production)
and secondary (non-production) telemetry sources, and writes the newest
ownership/device fields to issues that have not been enriched yet.

Usage
-----
Set environment variables and run::

    export VINSYNC_TRACKER_URL="https://example.atlassian.net"
    export VINSYNC_TRACKER_EMAIL="you@example.com"
    export VINSYNC_TRACKER_API_TOKEN="..."
    export VINSYNC_PRIMARY_URL="https://telemetry.example.com/api"
    export VINSYNC_PRIMARY_API_KEY="..."
    python scripts/sync_issues.py --dry-run

Options::

    --jql QUERY            Override VINSYNC_JQL
    --dry-run              Compute updates without writing them
    --skip-preflight       Skip tracker capability checks
    --max-concurrency N    Issues processed at the same time
    --json                 Print the report as JSON
    --verbose, -v          Enable debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from vinsync import PreflightError, SyncConfig, SyncOutcome, SyncReport, VinSyncError, run_sync  # noqa: E402


def _print_report(report: SyncReport) -> None:
    for result in report.results:
        source = result.source.value if result.source is not None else "-"
        detail = result.reason or ", ".join(sorted(result.update_fields))
        marker = " (dry-run)" if result.dry_run else ""
        print(f"{result.issue_key:<14} {result.vin or '-':<18} {result.outcome.value:<14} {source:<10} {detail}{marker}")
        for label, error in result.source_errors.items():
            print(f"{'':<14} {'':<18} {label.value} unavailable: {error}")
    print()
    print(f"Summary: {report.summary()}")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sync fleet telemetry into tracked issues by VIN.")
    parser.add_argument("--jql", help="Issue query (default: VINSYNC_JQL)")
    parser.add_argument("--dry-run", action="store_true", help="Compute updates without writing them")
    parser.add_argument("--skip-preflight", action="store_true", help="Skip tracker capability checks")
    parser.add_argument("--max-concurrency", type=int, help="Issues processed at the same time")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    overrides: dict[str, Any] = {}
    if args.jql:
        overrides["jql"] = args.jql
    if args.dry_run:
        overrides["dry_run"] = True
    if args.skip_preflight:
        overrides["preflight_enabled"] = False
    if args.max_concurrency is not None:
        overrides["max_concurrency"] = args.max_concurrency

    try:
        config = SyncConfig.from_env(**overrides)
        report = await run_sync(config, handle_signals=True)
    except PreflightError as exc:
        for failure in exc.failures:
            print(f"pre-flight: {failure}", file=sys.stderr)
        return 2
    except VinSyncError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if args.json_mode:
        print(report.model_dump_json(indent=2))
    else:
        _print_report(report)
    return 1 if report.count(SyncOutcome.UPDATE_FAILED) else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
