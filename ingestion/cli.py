"""
Command-line entry point.

Usage:
    knesset-etl sync [--demo]
    knesset-etl aggregate
    knesset-etl backfill
    knesset-etl vote-records [--max-pages N]

Exit status is 0 on success and 1 when a sync run ends failed or an
unexpected error escapes.
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from core.config import Settings, settings as default_settings
from core.context import open_context
from core.logging import setup_logging
from ingestion.backfill import run_backfill
from ingestion.sync.orchestrator import run_sync
from ingestion.sync.vote_records import sync_vote_records
from scoring.aggregation import run_aggregate

logger = logging.getLogger(__name__)

DEMO_MESSAGE = "Demo mode: no upstream requests are made. Load fixture data separately."


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="knesset-etl", description="Parliament data pipeline")
    commands = parser.add_subparsers(dest="command", required=True)
    
    sync = commands.add_parser("sync", help="Fetch and upsert every entity type")
    sync.add_argument("--demo", action="store_true", help="Print an informational message and exit")
    
    commands.add_parser("aggregate", help="Recompute party × topic scores")
    commands.add_parser("backfill", help="Retry bill roles from stored snapshots")
    
    votes = commands.add_parser("vote-records", help="Resume paging per-legislator vote results")
    votes.add_argument("--max-pages", type=int, default=None, help="Stop after N pages")
    
    return parser


async def run_command(args: argparse.Namespace, settings: Settings) -> int:
    async with open_context(settings) as ctx:
        if args.command == "sync":
            result = await run_sync(ctx)
            print(json.dumps({
                "run_id": result.run_id,
                "status": result.status.value,
                "latency_ms": result.latency_ms,
                "totals": result.totals(),
                "errors": len(result.errors),
            }))
            return 1 if result.failed else 0
        
        if args.command == "aggregate":
            report = await run_aggregate(ctx)
            print(json.dumps(report))
            return 0
        
        if args.command == "backfill":
            report = await run_backfill(ctx)
            print(json.dumps(report))
            return 0
        
        if args.command == "vote-records":
            result = await sync_vote_records(ctx, max_pages=args.max_pages)
            print(json.dumps({"run_id": result.run_id, "status": result.status.value, "totals": result.totals()}))
            return 1 if result.failed else 0
    
    return 2


def main(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    settings = settings or default_settings
    args = build_parser().parse_args(argv)
    setup_logging(settings)
    
    if getattr(args, "demo", False):
        print(DEMO_MESSAGE)
        return 0
    
    try:
        return asyncio.run(run_command(args, settings))
    except Exception as e:
        logger.exception(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
