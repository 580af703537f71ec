"""
Ministerial roles.

The person-to-position collection is large and mostly non-ministerial, so
it is paged once per minister position id instead of in one pass.
"""

from typing import Any, Dict, Set
import logging

from ingestion.client.metadata import CollectionRegistry
from ingestion.client.pagination import PageStream, QueryOptions
from ingestion.loaders.upsert_store import UpsertStore
from ingestion.mappers.government_role import (
    GOVERNMENT_ROLE_COLLECTION, MINISTER_POSITION_IDS, map_government_role,
    person_to_position_id,
)
from ingestion.sync.base import Outcome, SyncStage

logger = logging.getLogger(__name__)

SOURCE_LABEL = f"Knesset OData: {GOVERNMENT_ROLE_COLLECTION}"


class GovernmentRolesStage(SyncStage):
    entity_type = "government_role"
    candidates = [GOVERNMENT_ROLE_COLLECTION, "PersonToPosition"]
    
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._seen: Set[str] = set()
    
    async def run(self, registry: CollectionRegistry) -> bool:
        collection = self.resolve(registry)
        if collection is None:
            return False
        
        logger.info(f"Syncing {self.entity_type} from {collection.name}")
        self.tracker.init_entity(self.entity_type)
        
        for position_id in MINISTER_POSITION_IDS:
            stream = PageStream(
                self.ctx.http,
                collection.url,
                query=QueryOptions(filter=f"PositionID eq {position_id}"),
            )
            await self.consume(stream)
        
        logger.info(f"{self.entity_type} sync complete: {self.tracker.counts.get(self.entity_type)}")
        return True
    
    async def process_page(self, records):
        fresh = []
        for raw in records:
            record_id = person_to_position_id(raw) if isinstance(raw, dict) else None
            if record_id is not None:
                if record_id in self._seen:
                    continue
                self._seen.add(record_id)
            fresh.append(raw)
        await super().process_page(fresh)
    
    async def handle(self, store: UpsertStore, raw: Dict[str, Any]) -> Outcome:
        record = map_government_role(raw, self.base_url, self.source)
        legislator_id = self.ids.legislators.get(record.legislator_external_id)
        
        if not legislator_id:
            logger.warning(
                f"Government role {record.external_id}: unknown person {record.legislator_external_id}"
            )
            return Outcome(status="failed", external_id=record.external_id, snapshot=False)
        
        result = await store.upsert_government_role(record, legislator_id)
        await store.upsert_source_link(
            "government_role",
            result.id,
            record.external_source,
            record.source_url,
            record.external_id,
            label=SOURCE_LABEL,
        )
        return Outcome.from_upsert(result, record.external_id)
