from typing import Any, Dict

from ingestion.loaders.upsert_store import UpsertStore
from ingestion.mappers.vote import VOTE_CANDIDATES, VOTE_SOURCE, map_vote
from ingestion.sync.base import Outcome, SyncStage


class VotesStage(SyncStage):
    """Plenum vote headers. Per-legislator ballots run as their own job."""
    entity_type = "vote"
    candidates = VOTE_CANDIDATES
    
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.source = VOTE_SOURCE
    
    async def handle(self, store: UpsertStore, raw: Dict[str, Any]) -> Outcome:
        record = map_vote(raw, self.base_url, self.source)
        result = await store.upsert_vote(record)
        self.ids.votes[record.external_id] = result.id
        return Outcome.from_upsert(result, record.external_id)
