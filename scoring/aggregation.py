"""
Party × topic activity aggregation.

    raw_score(party, topic) = Σ points(status(bill)) × role_weight(role)

summed over bills sponsored by legislators currently affiliated with the
party. Bills with no topic or topic "other" are excluded, rows with a
non-positive score are not written, and results are upserted by
(party, topic) in short batched transactions.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Set, Tuple
import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from core.context import PipelineContext
from core.exceptions import UpsertError
from ingestion.loaders.upsert_store import insert_for
from models import Bill, LegislatorBillRole, PartyMembership, PartyTopicAggregate
from models.base import new_uuid
from scoring.constants import BILL_STATUS_POINTS, ROLE_WEIGHTS

logger = logging.getLogger(__name__)


def compute_bill_points(status: str) -> int:
    return BILL_STATUS_POINTS.get(status, 0)


def role_weight(role: str) -> float:
    return ROLE_WEIGHTS.get(role, 0.0)


@dataclass
class AggregateRow:
    party_id: str
    topic: str
    raw_score: float
    bill_count: int


def aggregate_rows(facts: Iterable[Tuple[str, str, str, str, str]]) -> List[AggregateRow]:
    """
    Fold sponsorship facts into aggregate rows.

    Args:
        facts: (party_id, bill_id, topic, status, role) tuples, one per
            current member's role on a bill

    Returns:
        Rows with a positive score, ordered by party then topic
    """
    scores: Dict[Tuple[str, str], float] = {}
    bills: Dict[Tuple[str, str], Set[str]] = {}

    for party_id, bill_id, topic, status, role in facts:
        if not topic or topic == "other":
            continue
        if role not in ROLE_WEIGHTS:
            continue
        key = (party_id, topic)
        scores[key] = scores.get(key, 0.0) + compute_bill_points(status) * role_weight(role)
        bills.setdefault(key, set()).add(bill_id)

    return [
        AggregateRow(party_id=key[0], topic=key[1], raw_score=score, bill_count=len(bills[key]))
        for key, score in sorted(scores.items())
        if score > 0
    ]


async def fetch_sponsorship_facts(session) -> List[Tuple[str, str, str, str, str]]:
    # A legislator can hold several current rows for one party (inline and
    # per-term); count each (legislator, party) pair once
    current = (
        select(PartyMembership.legislator_id, PartyMembership.party_id)
        .where(PartyMembership.is_current.is_(True))
        .distinct()
        .subquery()
    )

    stmt = (
        select(current.c.party_id, Bill.id, Bill.topic, Bill.status, LegislatorBillRole.role)
        .select_from(LegislatorBillRole)
        .join(Bill, Bill.id == LegislatorBillRole.bill_id)
        .join(current, current.c.legislator_id == LegislatorBillRole.legislator_id)
        .where(
            LegislatorBillRole.role.in_(list(ROLE_WEIGHTS)),
            Bill.topic.isnot(None),
            Bill.topic != "other",
        )
    )
    result = await session.execute(stmt)
    return [tuple(row) for row in result.all()]


async def write_batch(session, rows: List[AggregateRow], computed_at: datetime):
    values = [
        {
            "id": new_uuid(),
            "party_id": row.party_id,
            "topic": row.topic,
            "raw_score": float(row.raw_score),
            "bill_count": int(row.bill_count),
            "computed_at": computed_at,
        }
        for row in rows
    ]

    stmt = insert_for(session)(PartyTopicAggregate).values(values)
    stmt = stmt.on_conflict_do_update(
        index_elements=["party_id", "topic"],
        set_={
            "raw_score": stmt.excluded.raw_score,
            "bill_count": stmt.excluded.bill_count,
            "computed_at": stmt.excluded.computed_at,
        },
    )
    await session.execute(stmt)


async def run_aggregate(ctx: PipelineContext) -> Dict[str, Any]:
    """
    Recompute and upsert every (party, topic) aggregate.

    A failed batch is logged and skipped; batches already committed stay.

    Returns:
        rows_written, parties_updated, duration_ms (and failed_batches)
    """
    started_at = datetime.utcnow()
    batch_size = max(1, ctx.settings.AGGREGATE_BATCH_SIZE)

    async with ctx.session_factory() as session:
        facts = await fetch_sponsorship_facts(session)

    rows = aggregate_rows(facts)
    logger.info(f"Aggregation produced {len(rows)} rows from {len(facts)} sponsorship facts")

    if not rows:
        logger.warning("No aggregate rows produced; has a sync been run?")

    rows_written = 0
    failed_batches = 0
    parties: Set[str] = set()
    computed_at = datetime.utcnow()
    total_batches = (len(rows) + batch_size - 1) // batch_size

    for number, start in enumerate(range(0, len(rows), batch_size), start=1):
        batch = rows[start:start + batch_size]
        try:
            async with ctx.session_factory() as session:
                await write_batch(session, batch, computed_at)
                await session.commit()
        except SQLAlchemyError as e:
            failed_batches += 1
            error = UpsertError(
                "Aggregate batch failed",
                context={"batch": number, "rows": len(batch)},
                original_exception=e
            )
            logger.error(str(error))
            continue

        rows_written += len(batch)
        parties.update(row.party_id for row in batch)
        logger.debug(f"Aggregate batch {number}/{total_batches}: {rows_written} rows written")

    report = {
        "rows_written": rows_written,
        "parties_updated": len(parties),
        "duration_ms": int((datetime.utcnow() - started_at).total_seconds() * 1000),
        "failed_batches": failed_batches,
    }
    logger.info(f"Aggregation complete: {report}")
    return report
