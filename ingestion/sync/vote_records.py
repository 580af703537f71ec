"""
Per-legislator vote results as a resumable batch job.

The ballot collection is too large for the nightly sync. This job pages it
on its own and writes a checkpoint after every page, so an interrupted pass
picks up where it stopped. A completed pass clears the cursor.
"""

from datetime import datetime
from typing import Any, Dict, Optional
import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from core.context import PipelineContext
from core.exceptions import CheckpointError, FetchError
from ingestion.client.pagination import PageStream
from ingestion.loaders.upsert_store import UpsertStore
from ingestion.mappers.vote import VOTE_RESULT_CANDIDATES, VOTE_SOURCE, map_ballot
from ingestion.sync.base import IdMaps, Outcome, SyncStage
from ingestion.sync.run_tracker import RunResult, RunTracker
from models import Legislator, RunStatus, SyncCheckpoint, Vote

logger = logging.getLogger(__name__)


class VoteRecordsStage(SyncStage):
    entity_type = "vote_record"
    candidates = VOTE_RESULT_CANDIDATES
    
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.source = VOTE_SOURCE
    
    async def handle(self, store: UpsertStore, raw: Dict[str, Any]) -> Outcome:
        record = map_ballot(raw)
        vote_id = self.ids.votes.get(record.vote_external_id)
        legislator_id = self.ids.legislators.get(record.legislator_external_id)
        
        if not vote_id or not legislator_id:
            return Outcome(status="skipped", snapshot=False)
        
        result = await store.upsert_vote_record(vote_id, legislator_id, record.value)
        return Outcome.from_upsert(result, f"{record.vote_external_id}:{record.legislator_external_id}")


async def load_id_maps(ctx: PipelineContext) -> IdMaps:
    """External → internal ids for votes and legislators, read from the store."""
    ids = IdMaps()
    async with ctx.session_factory() as session:
        rows = await session.execute(select(Vote.external_id, Vote.id))
        ids.votes = {ext: internal for ext, internal in rows.all()}
        
        rows = await session.execute(select(Legislator.external_id, Legislator.id))
        ids.legislators = {ext: internal for ext, internal in rows.all()}
    return ids


class CheckpointStore:
    """Reads and writes the single checkpoint row for one collection."""
    
    def __init__(self, session_factory, source: str, collection: str):
        self.session_factory = session_factory
        self.source = source
        self.collection = collection
    
    async def load(self) -> SyncCheckpoint:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(SyncCheckpoint).where(
                        SyncCheckpoint.source == self.source,
                        SyncCheckpoint.collection == self.collection,
                    )
                )
                checkpoint = result.scalar_one_or_none()
                if checkpoint is None:
                    checkpoint = SyncCheckpoint(
                        source=self.source,
                        collection=self.collection,
                        skip=0,
                        pages_done=0,
                        records_done=0,
                    )
                    session.add(checkpoint)
                    await session.commit()
                return checkpoint
        except SQLAlchemyError as e:
            raise CheckpointError(
                "Failed to load checkpoint",
                context={"collection": self.collection, "operation": "read"},
                original_exception=e
            )
    
    async def save(self, stream: PageStream, records: int, completed: bool = False):
        now = datetime.utcnow()
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(SyncCheckpoint).where(
                        SyncCheckpoint.source == self.source,
                        SyncCheckpoint.collection == self.collection,
                    )
                )
                checkpoint = result.scalar_one()
                checkpoint.last_run_at = now
                if completed:
                    checkpoint.next_url = None
                    checkpoint.skip = 0
                    checkpoint.pages_done = 0
                    checkpoint.records_done = 0
                    checkpoint.last_completed_at = now
                else:
                    checkpoint.next_url = stream.next_url
                    checkpoint.skip = stream.skip
                    checkpoint.pages_done += 1
                    checkpoint.records_done += records
                await session.commit()
        except SQLAlchemyError as e:
            raise CheckpointError(
                "Failed to write checkpoint",
                context={"collection": self.collection, "operation": "clear" if completed else "write"},
                original_exception=e
            )


async def sync_vote_records(
    ctx: PipelineContext,
    max_pages: Optional[int] = None,
) -> RunResult:
    """
    Page the ballot collection from the saved cursor.

    Args:
        ctx: Pipeline context
        max_pages: Stop after this many pages (cursor kept for the next call)

    Returns:
        RunResult for the "vote-records" run
    """
    tracker = RunTracker(ctx.session_factory, source=VOTE_SOURCE, job="vote-records")
    await tracker.start()
    
    try:
        registry = await ctx.http.fetch_metadata()
    except FetchError as e:
        tracker.add_error(f"Metadata fetch failed: {e}")
        return await tracker.complete(RunStatus.FAILED)
    
    stage = VoteRecordsStage(ctx, tracker, await load_id_maps(ctx))
    collection = stage.resolve(registry)
    if collection is None:
        return await tracker.complete(RunStatus.COMPLETED)
    
    tracker.init_entity(stage.entity_type)
    checkpoints = CheckpointStore(ctx.session_factory, VOTE_SOURCE, collection.name)
    
    try:
        checkpoint = await checkpoints.load()
        if checkpoint.has_cursor:
            logger.info(
                f"Resuming {collection.name} at skip={checkpoint.skip} "
                f"({checkpoint.pages_done} pages done)"
            )
        
        stream = PageStream(
            ctx.http,
            collection.url,
            next_url=checkpoint.next_url,
            skip=checkpoint.skip or 0,
        )
        
        pages = 0
        while max_pages is None or pages < max_pages:
            page = await stream.next_page()
            if page is None:
                break
            await stage.process_page(page)
            await checkpoints.save(stream, len(page))
            pages += 1
        
        if stream.exhausted:
            await checkpoints.save(stream, 0, completed=True)
            logger.info(f"{collection.name} pass complete")
        else:
            logger.info(f"{collection.name} paused after {pages} pages at skip={stream.skip}")
    
    except (FetchError, CheckpointError) as e:
        tracker.add_error(f"vote_record: {e}")
        return await tracker.complete(RunStatus.FAILED)
    
    return await tracker.complete(RunStatus.COMPLETED)
