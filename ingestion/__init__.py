"""
Ingestion pipeline for the parliament open-data feed.

Subpackages:
    client: SSRF guard, $metadata discovery, HTTP client with retry, page stream
    mappers: Pure raw record → canonical record translation
    loaders: Natural-key upserts and append-only raw snapshots
    sync: Per-entity sync stages, run tracking and the orchestrator

Modules:
    backfill: Re-derives bill roles from stored snapshots, no HTTP
    scheduler: APScheduler nightly job (sync, then aggregation)
    cli: knesset-etl command-line entry point

Architecture:
    A run discovers collections from $metadata, then walks entity types
    in dependency order. Each stage pages its collection one page at a
    time and hands records to a bounded worker pool:
    
    1. Map - raw dict → canonical record (MappingError fails one record)
    2. Upsert - INSERT ... ON CONFLICT by natural key, own session per record
    3. Snapshot - raw payload stored after the upsert commits, best effort
    
    Failures are recorded on the run and never abort sibling records.

Usage:
    from core.context import open_context
    from ingestion.sync import run_sync

    async with open_context() as ctx:
        result = await run_sync(ctx)
        print(result.status, result.totals())
"""

__all__ = [
    "client",
    "mappers",
    "loaders",
    "sync",
    "backfill",
    "scheduler",
    "cli",
]
