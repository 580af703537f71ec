"""
Legislators, then their detailed faction memberships.
"""

from typing import Any, Dict, Optional
import logging

from ingestion.client.metadata import Collection
from ingestion.client.pagination import QueryOptions
from ingestion.loaders.upsert_store import UpsertStore
from ingestion.mappers.legislator import (
    LEGISLATOR_CANDIDATES, MEMBERSHIP_CANDIDATES, map_legislator, map_membership,
)
from ingestion.sync.base import Outcome, SyncStage

logger = logging.getLogger(__name__)


class LegislatorsStage(SyncStage):
    entity_type = "legislator"
    candidates = LEGISLATOR_CANDIDATES
    required = True
    
    async def handle(self, store: UpsertStore, raw: Dict[str, Any]) -> Outcome:
        record = map_legislator(raw, self.base_url, self.source)
        result = await store.upsert_legislator(record)
        await store.upsert_source_link(
            "legislator", result.id, record.external_source, record.source_url, record.external_id
        )
        self.ids.legislators[record.external_id] = result.id
        
        # Inline faction reference; refined by MembershipsStage
        party_id = self.ids.parties.get(record.faction_external_id or "")
        if party_id:
            await store.upsert_inline_membership(result.id, party_id, record.is_current)
        
        return Outcome.from_upsert(result, record.external_id)


class MembershipsStage(SyncStage):
    entity_type = "membership"
    candidates = MEMBERSHIP_CANDIDATES
    
    def query_for(self, collection: Collection) -> Optional[QueryOptions]:
        if collection.name == "KNS_PersonToPosition":
            return QueryOptions(filter="FactionID ne null")
        return None
    
    async def handle(self, store: UpsertStore, raw: Dict[str, Any]) -> Outcome:
        record = map_membership(raw)
        legislator_id = self.ids.legislators.get(record.legislator_external_id)
        party_id = self.ids.parties.get(record.party_external_id)
        
        if not legislator_id or not party_id:
            logger.debug(
                f"Skipping membership {record.legislator_external_id}->{record.party_external_id}: "
                f"legislator found={bool(legislator_id)}, party found={bool(party_id)}"
            )
            return Outcome(status="skipped", snapshot=False)
        
        result = await store.upsert_membership(legislator_id, party_id, record)
        return Outcome.from_upsert(result)
