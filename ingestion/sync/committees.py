from typing import Any, Dict, Optional

from ingestion.client.metadata import Collection
from ingestion.client.pagination import QueryOptions
from ingestion.loaders.upsert_store import UpsertStore
from ingestion.mappers.committee import (
    COMMITTEE_CANDIDATES, COMMITTEE_MEMBER_CANDIDATES, PERSON_TO_POSITION,
    map_committee, map_committee_membership,
)
from ingestion.sync.base import Outcome, SyncStage


class CommitteesStage(SyncStage):
    entity_type = "committee"
    candidates = COMMITTEE_CANDIDATES
    
    async def handle(self, store: UpsertStore, raw: Dict[str, Any]) -> Outcome:
        record = map_committee(raw, self.base_url, self.source)
        result = await store.upsert_committee(record)
        self.ids.committees[record.external_id] = result.id
        return Outcome.from_upsert(result, record.external_id)


class CommitteeMembersStage(SyncStage):
    entity_type = "committee_member"
    candidates = COMMITTEE_MEMBER_CANDIDATES
    
    def query_for(self, collection: Collection) -> Optional[QueryOptions]:
        # Person-to-position covers every role; keep committee rows only
        if collection.name == PERSON_TO_POSITION:
            return QueryOptions(filter="CommitteeID ne null")
        return None
    
    async def handle(self, store: UpsertStore, raw: Dict[str, Any]) -> Outcome:
        record = map_committee_membership(raw)
        committee_id = self.ids.committees.get(record.committee_external_id)
        legislator_id = self.ids.legislators.get(record.legislator_external_id)
        
        if not committee_id or not legislator_id:
            return Outcome(status="skipped", snapshot=False)
        
        result = await store.upsert_committee_membership(legislator_id, committee_id, record)
        return Outcome.from_upsert(result)
