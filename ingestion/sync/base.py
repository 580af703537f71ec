"""
Base class for one entity-type sync stage.

A stage resolves its collection, streams pages, and fans each page out to
a bounded worker pool. Every record gets its own session so concurrent
workers never share a transaction; a failing record is counted and
logged and the rest of the page carries on.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional
import logging

from core.context import PipelineContext
from core.exceptions import FetchError, MissingCollection
from core.utils import best_effort
from ingestion.client.metadata import Collection, CollectionRegistry
from ingestion.client.pagination import PageStream, QueryOptions
from ingestion.loaders.snapshot import save_snapshot
from ingestion.loaders.upsert_store import UpsertStore
from ingestion.sync.run_tracker import COUNTER_FIELDS, RunTracker

logger = logging.getLogger(__name__)


@dataclass
class IdMaps:
    """External id → internal id, threaded forward between stages."""
    parties: Dict[str, str] = field(default_factory=dict)
    legislators: Dict[str, str] = field(default_factory=dict)
    bills: Dict[str, str] = field(default_factory=dict)
    committees: Dict[str, str] = field(default_factory=dict)
    votes: Dict[str, str] = field(default_factory=dict)


@dataclass
class Outcome:
    """
    Result of handling one raw record.

    status is one of created / updated / failed / skipped; skipped
    records are not counted.
    """
    status: str
    entity_id: Optional[str] = None
    external_id: Optional[str] = None
    snapshot: bool = True
    
    @classmethod
    def from_upsert(cls, result, external_id: Optional[str] = None) -> "Outcome":
        return cls(
            status="created" if result.created else "updated",
            entity_id=result.id,
            external_id=external_id,
        )


async def run_bounded(
    items: Iterable[Any],
    worker: Callable[[Any], Awaitable[None]],
    limit: int,
):
    """Run worker over items with at most `limit` in flight."""
    semaphore = asyncio.Semaphore(max(1, limit))
    
    async def _run(item):
        async with semaphore:
            await worker(item)
    
    await asyncio.gather(*(_run(item) for item in items))


def describe_record(raw: Any) -> str:
    if not isinstance(raw, dict):
        return "<non-object record>"
    for key in ("Id", "ID", "PersonID", "FactionID", "BillID", "CommitteeID", "PersonToPositionID"):
        if raw.get(key) is not None:
            return f"{key}={raw[key]}"
    return "<no id>"


class SyncStage(ABC):
    """
    One entity type in the sync order.

    Subclasses set entity_type and candidates and implement handle().
    Required stages raise MissingCollection when no collection matches;
    optional ones record a warning and are skipped.
    """
    
    entity_type: str = ""
    candidates: List[str] = []
    required: bool = False
    
    def __init__(self, ctx: PipelineContext, tracker: RunTracker, ids: IdMaps):
        self.ctx = ctx
        self.tracker = tracker
        self.ids = ids
        self.settings = ctx.settings
        self.base_url = ctx.settings.ODATA_BASE_URL
        self.source = ctx.settings.EXTERNAL_SOURCE
    
    def query_for(self, collection: Collection) -> Optional[QueryOptions]:
        return None
    
    @abstractmethod
    async def handle(self, store: UpsertStore, raw: Dict[str, Any]) -> Outcome:
        """Map one raw record and upsert it."""
    
    def resolve(self, registry: CollectionRegistry) -> Optional[Collection]:
        collection = registry.resolve(self.candidates)
        if collection is None:
            if self.required:
                raise MissingCollection(self.entity_type, self.candidates)
            self.tracker.warn(
                f"No {self.entity_type} collection found. Tried: {', '.join(self.candidates)}"
            )
        return collection
    
    async def run(self, registry: CollectionRegistry) -> bool:
        """
        Sync every page of the resolved collection.

        Returns:
            False when the collection was absent and the stage skipped

        Raises:
            MissingCollection: Only for required stages
        """
        collection = self.resolve(registry)
        if collection is None:
            return False
        
        logger.info(f"Syncing {self.entity_type} from {collection.name}")
        self.tracker.init_entity(self.entity_type)
        
        stream = PageStream(self.ctx.http, collection.url, query=self.query_for(collection))
        await self.consume(stream)
        
        logger.info(f"{self.entity_type} sync complete: {self.tracker.counts.get(self.entity_type)}")
        return True
    
    async def consume(self, stream: PageStream):
        """Drain a stream; a page-level fetch failure ends this stage only."""
        try:
            async for page in stream:
                await self.process_page(page)
        except FetchError as e:
            self.tracker.add_error(
                f"{self.entity_type}: fetch failed after {stream.pages_fetched} pages: {e}"
            )
    
    async def process_page(self, records: List[Dict[str, Any]]):
        await run_bounded(records, self.process_record, self.settings.SYNC_CONCURRENCY)
    
    async def process_record(self, raw: Dict[str, Any]):
        self.tracker.increment(self.entity_type, "fetched")
        
        try:
            async with self.ctx.session_factory() as session:
                outcome = await self.handle(UpsertStore(session), raw)
                await session.commit()
        except Exception as e:
            self.tracker.increment(self.entity_type, "failed")
            self.tracker.add_error(f"{self.entity_type} {describe_record(raw)}: {e}")
            return
        
        if outcome.status in COUNTER_FIELDS:
            self.tracker.increment(self.entity_type, outcome.status)
        
        if outcome.snapshot:
            await best_effort(
                save_snapshot(
                    self.ctx.session_factory,
                    entity_type=self.entity_type,
                    payload=raw,
                    external_source=self.source,
                    entity_id=outcome.entity_id,
                    external_id=outcome.external_id,
                    run_id=self.tracker.run_id,
                ),
                f"Snapshot for {self.entity_type} {outcome.external_id}",
            )
