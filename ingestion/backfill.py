"""
Bill-role backfill from stored snapshots.

Bill roles whose legislator or bill was unknown at sync time are skipped by
the sync but still snapshotted. This job re-reads those snapshots (no HTTP)
and retries the role upserts against id maps built from the store.
"""

from datetime import datetime
from typing import Any, Dict, List
import logging

from sqlalchemy import select

from core.context import PipelineContext
from core.exceptions import MappingError
from ingestion.loaders.upsert_store import UpsertStore
from ingestion.mappers.bill import map_bill_role
from ingestion.sync.base import run_bounded
from models import Bill, Legislator, RawSnapshot

logger = logging.getLogger(__name__)


async def _id_map(session, model) -> Dict[str, str]:
    rows = await session.execute(select(model.external_id, model.id))
    return {ext: internal for ext, internal in rows.all()}


async def run_backfill(ctx: PipelineContext) -> Dict[str, Any]:
    """
    Returns:
        rows_processed, roles_created, roles_existing, roles_skipped,
        errors and duration_ms
    """
    started_at = datetime.utcnow()
    logger.info("Starting bill-role backfill from stored snapshots")
    
    async with ctx.session_factory() as session:
        legislators = await _id_map(session, Legislator)
        bills = await _id_map(session, Bill)
        result = await session.execute(
            select(RawSnapshot.id, RawSnapshot.content_hash, RawSnapshot.payload)
            .where(RawSnapshot.entity_type == "bill_role")
            .order_by(RawSnapshot.fetched_at)
        )
        snapshots = result.all()
    
    logger.info(
        f"Backfill inputs: {len(snapshots)} snapshots, "
        f"{len(legislators)} legislators, {len(bills)} bills"
    )
    
    # The same record is snapshotted once per run; one attempt per payload
    unique: List[Any] = []
    seen_hashes = set()
    for row in snapshots:
        if row.content_hash in seen_hashes:
            continue
        seen_hashes.add(row.content_hash)
        unique.append(row)
    
    stats = {"roles_created": 0, "roles_existing": 0, "roles_skipped": 0, "errors": 0}
    
    async def process(row):
        try:
            record = map_bill_role(row.payload)
        except MappingError as e:
            stats["errors"] += 1
            logger.error(f"Snapshot {row.id}: {e}")
            return
        
        bill_id = bills.get(record.bill_external_id)
        legislator_id = legislators.get(record.legislator_external_id)
        if not bill_id or not legislator_id:
            stats["roles_skipped"] += 1
            return
        
        try:
            async with ctx.session_factory() as session:
                upserted = await UpsertStore(session).upsert_bill_role(
                    legislator_id, bill_id, record.role
                )
                await session.commit()
        except Exception as e:
            stats["errors"] += 1
            logger.error(f"Snapshot {row.id}: bill role upsert failed: {e}")
            return
        
        stats["roles_created" if upserted.created else "roles_existing"] += 1
    
    await run_bounded(unique, process, ctx.settings.SYNC_CONCURRENCY)
    
    report = {
        "rows_processed": len(snapshots),
        **stats,
        "duration_ms": int((datetime.utcnow() - started_at).total_seconds() * 1000),
    }
    logger.info(f"Bill-role backfill complete: {report}")
    return report
