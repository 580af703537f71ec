from typing import Any, Dict

from ingestion.loaders.upsert_store import UpsertStore
from ingestion.mappers.party import PARTY_CANDIDATES, map_party
from ingestion.sync.base import Outcome, SyncStage


class PartiesStage(SyncStage):
    entity_type = "party"
    candidates = PARTY_CANDIDATES
    required = True
    
    async def handle(self, store: UpsertStore, raw: Dict[str, Any]) -> Outcome:
        record = map_party(raw, self.base_url, self.source)
        result = await store.upsert_party(record)
        await store.upsert_source_link(
            "party", result.id, record.external_source, record.source_url, record.external_id
        )
        self.ids.parties[record.external_id] = result.id
        return Outcome.from_upsert(result, record.external_id)
