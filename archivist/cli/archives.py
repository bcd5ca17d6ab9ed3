# =============================================================================
# archivist/cli/archives.py: Archive maintenance CLI
# =============================================================================
#
# Operator tool for the archive records database.  Talks to the same
# SQLite store and Wayback adapter as the API server, without the server.
#
#   poll       Reconcile every record still PROCESSING with a capture job id.
#              Nothing in the server does this on a timer, so run it from
#              cron (needs WAYBACK_ACCESS_KEY / WAYBACK_SECRET_KEY).
#   summary    Print the status summary for one article or source.
#   snapshots  List Wayback captures of a URL (CDX API).
#
# Typical usage:
#   python -m archivist.cli.archives poll --limit 100
#   python -m archivist.cli.archives summary article 6f1c...e2
#   python -m archivist.cli.archives snapshots https://example.com --from 2020
# =============================================================================

"""Standalone CLI for archive-record maintenance.

Usage::

    python -m archivist.cli.archives poll [--limit N]
    python -m archivist.cli.archives summary {article,source} ID
    python -m archivist.cli.archives snapshots URL [--from TS] [--to TS] [--limit N]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from dataclasses import asdict
from typing import Any

from archivist.config.loader import load_config
from archivist.config.settings import Settings
from archivist.main import build_archive_service
from archivist.models.archive import ArchivableType
from archivist.utils.errors import ArchivistError
from archivist.utils.logging import configure_logging

_DEFAULT_POLL_BATCH = 50


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


async def _handle_poll(args: argparse.Namespace, components: dict[str, Any], config: dict) -> int:
    limit = args.limit or config.get("archive", {}).get("poll_batch_size", _DEFAULT_POLL_BATCH)
    if not components["archiver"].has_credentials():
        print(
            "Error: job polling needs WAYBACK_ACCESS_KEY and WAYBACK_SECRET_KEY.",
            file=sys.stderr,
        )
        return 1

    updated = await components["archive_service"].poll_outstanding(limit)
    print(f"Polled {len(updated)} record(s)")
    for record in updated:
        detail = record.archive_url or record.error_message or record.job_id or ""
        print(f"  {record.id}  {record.status.value:<10}  {detail}")
    return 0


async def _handle_summary(args: argparse.Namespace, components: dict[str, Any]) -> int:
    summary = await components["archive_service"].get_status_summary(
        ArchivableType(args.archivable_type),
        args.archivable_id,
    )
    if args.json:
        print(json.dumps(summary.model_dump(), indent=2))
        return 0

    print(f"Archive summary for {args.archivable_type} {args.archivable_id}")
    print("=" * 40)
    print(f"  Archived:        {'yes' if summary.has_archive else 'no'}")
    print(f"  Total archives:  {summary.total_archives}")
    print(f"  Pending request: {'yes' if summary.pending_request else 'no'}")
    if summary.latest_archive_url:
        print(f"  Latest:          {summary.latest_archive_url}")
        print(f"  Captured:        {summary.latest_archive_date or 'unknown'}")
    return 0


async def _handle_snapshots(args: argparse.Namespace, components: dict[str, Any]) -> int:
    snapshots = await components["archive_service"].get_snapshots(
        args.url,
        from_=args.from_,
        to=args.to,
        limit=args.limit,
    )
    if args.json:
        print(json.dumps([asdict(s) for s in snapshots], indent=2))
        return 0

    if not snapshots:
        print(f"No snapshots found for {args.url}")
        return 0
    print(f"{len(snapshots)} snapshot(s) of {args.url}")
    for snap in snapshots:
        print(f"  {snap.timestamp}  {snap.status_code:>3}  {snap.mime_type:<12}  {snap.url}")
    return 0


async def _run(args: argparse.Namespace, app_settings: Settings) -> int:
    components = build_archive_service(app_settings)
    await components["archive_store"].initialize()
    try:
        if args.command == "poll":
            return await _handle_poll(args, components, load_config(settings=app_settings))
        if args.command == "summary":
            return await _handle_summary(args, components)
        if args.command == "snapshots":
            return await _handle_snapshots(args, components)
        return 1
    except ArchivistError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        await components["archiver"].aclose()


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m archivist.cli.archives",
        description="Maintain archive records and inspect Wayback captures.",
    )
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and errors")
    sub = parser.add_subparsers(dest="command")

    poll = sub.add_parser("poll", help="Reconcile records waiting on a capture job")
    poll.add_argument("--limit", type=int, default=None, help="Max records to poll")

    summary = sub.add_parser("summary", help="Show the archive summary for a subject")
    summary.add_argument("archivable_type", choices=[t.value for t in ArchivableType])
    summary.add_argument("archivable_id")
    summary.add_argument("--json", action="store_true", help="Print JSON")

    snapshots = sub.add_parser("snapshots", help="List Wayback captures of a URL")
    snapshots.add_argument("url")
    snapshots.add_argument("--from", dest="from_", default=None, help="Earliest timestamp (yyyyMMdd...)")
    snapshots.add_argument("--to", default=None, help="Latest timestamp (yyyyMMdd...)")
    snapshots.add_argument("--limit", type=int, default=None, help="Max snapshots")
    snapshots.add_argument("--json", action="store_true", help="Print JSON")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point: parse the subcommand and dispatch to its handler."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    app_settings = Settings()
    configure_logging(log_level="WARNING" if args.quiet else app_settings.log_level)

    sys.exit(asyncio.run(_run(args, app_settings)))


if __name__ == "__main__":
    main()
