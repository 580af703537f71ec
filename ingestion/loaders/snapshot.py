"""
Append-only raw payload snapshots with SHA-256 content hash
"""

import hashlib
import json
from typing import Any, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker
import logging

from core.exceptions import SnapshotError
from models.snapshot import RawSnapshot

logger = logging.getLogger(__name__)


def serialize_payload(payload: Any) -> str:
    """Canonical JSON form used for hashing and sizing."""
    return json.dumps(payload, sort_keys=True, ensure_ascii=False, separators=(",", ":"), default=str)


def hash_payload(payload: Any) -> str:
    return hashlib.sha256(serialize_payload(payload).encode("utf-8")).hexdigest()


async def save_snapshot(
    session_factory: async_sessionmaker,
    entity_type: str,
    payload: Any,
    external_source: str,
    entity_id: Optional[str] = None,
    external_id: Optional[str] = None,
    run_id: Optional[str] = None,
) -> str:
    """
    Store one immutable snapshot in its own session.

    Runs after the entity upsert has committed, so a failure here never
    rolls the upsert back. Callers wrap it with best_effort().

    Returns:
        Snapshot id

    Raises:
        SnapshotError: If the row could not be written
    """
    serialized = serialize_payload(payload)
    
    snapshot = RawSnapshot(
        run_id=run_id,
        entity_type=entity_type,
        entity_id=entity_id,
        external_id=external_id,
        external_source=external_source,
        payload=payload,
        content_hash=hash_payload(payload),
        payload_size=len(serialized.encode("utf-8")),
    )
    
    try:
        async with session_factory() as session:
            session.add(snapshot)
            await session.commit()
    except SQLAlchemyError as e:
        raise SnapshotError(
            "Failed to save snapshot",
            context={"entity_type": entity_type, "entity_id": entity_id},
            original_exception=e
        )
    
    logger.debug(f"Snapshot {snapshot.id} saved for {entity_type} {external_id}")
    return snapshot.id
