"""
Bills, then initiator roles and stage history.
"""

from typing import Any, Dict
import logging

from ingestion.loaders.upsert_store import UpsertStore
from ingestion.mappers.bill import (
    BILL_CANDIDATES, BILL_INITIATOR_CANDIDATES, BILL_STAGE_CANDIDATES,
    map_bill, map_bill_role, map_bill_stage,
)
from ingestion.sync.base import Outcome, SyncStage

logger = logging.getLogger(__name__)


class BillsStage(SyncStage):
    entity_type = "bill"
    candidates = BILL_CANDIDATES
    
    async def handle(self, store: UpsertStore, raw: Dict[str, Any]) -> Outcome:
        record = map_bill(raw, self.base_url, self.source)
        result = await store.upsert_bill(record)
        await store.upsert_source_link(
            "bill", result.id, record.external_source, record.source_url, record.external_id
        )
        self.ids.bills[record.external_id] = result.id
        return Outcome.from_upsert(result, record.external_id)


class BillRolesStage(SyncStage):
    """
    Initiator / cosponsor links.

    Rows whose legislator or bill is unknown are still snapshotted so the
    backfill job can retry them later without another fetch.
    """
    entity_type = "bill_role"
    candidates = BILL_INITIATOR_CANDIDATES
    
    async def handle(self, store: UpsertStore, raw: Dict[str, Any]) -> Outcome:
        record = map_bill_role(raw)
        bill_id = self.ids.bills.get(record.bill_external_id)
        legislator_id = self.ids.legislators.get(record.legislator_external_id)
        external_id = f"{record.bill_external_id}:{record.legislator_external_id}"
        
        if not bill_id or not legislator_id:
            return Outcome(status="skipped", external_id=external_id)
        
        result = await store.upsert_bill_role(legislator_id, bill_id, record.role)
        return Outcome.from_upsert(result, external_id)


class BillStagesStage(SyncStage):
    entity_type = "bill_stage"
    candidates = BILL_STAGE_CANDIDATES
    
    async def handle(self, store: UpsertStore, raw: Dict[str, Any]) -> Outcome:
        record = map_bill_stage(raw)
        if record is None:
            logger.debug("Skipping bill stage with no external id")
            return Outcome(status="skipped", snapshot=False)
        
        bill_id = self.ids.bills.get(record.bill_external_id)
        if not bill_id:
            return Outcome(status="skipped", snapshot=False)
        
        result = await store.upsert_bill_stage(bill_id, record)
        return Outcome.from_upsert(result, record.external_id)
