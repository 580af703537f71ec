# ============================================================================
# File: ingestion/sync/orchestrator.py
# Description: Runs entity syncs in dependency order for one run
# ============================================================================
"""
Sync orchestrator.

Order:
    parties → legislators → memberships → bills → bill roles → bill stages
    → committees → committee members → government roles → votes

Each stage adds to the shared IdMaps so later stages can resolve foreign
keys. A missing required collection (parties, legislators) fails the run;
every other problem is recorded on the run and the run still completes.
"""

from typing import List, Optional, Type
import logging

from core.context import PipelineContext
from core.exceptions import FetchError, MissingCollection
from ingestion.client.metadata import CollectionRegistry
from ingestion.sync.base import IdMaps, SyncStage
from ingestion.sync.bills import BillRolesStage, BillStagesStage, BillsStage
from ingestion.sync.committees import CommitteeMembersStage, CommitteesStage
from ingestion.sync.government_roles import GovernmentRolesStage
from ingestion.sync.legislators import LegislatorsStage, MembershipsStage
from ingestion.sync.parties import PartiesStage
from ingestion.sync.run_tracker import RunResult, RunTracker
from ingestion.sync.votes import VotesStage
from models import RunStatus

logger = logging.getLogger(__name__)

STAGE_ORDER: List[Type[SyncStage]] = [
    PartiesStage,
    LegislatorsStage,
    MembershipsStage,
    BillsStage,
    BillRolesStage,
    BillStagesStage,
    CommitteesStage,
    CommitteeMembersStage,
    GovernmentRolesStage,
    VotesStage,
]


async def run_sync(
    ctx: PipelineContext,
    stages: Optional[List[Type[SyncStage]]] = None,
) -> RunResult:
    """
    Run one full sync.

    Args:
        ctx: Pipeline context
        stages: Stage classes to run, in order (defaults to STAGE_ORDER)

    Returns:
        RunResult of the finalized run record
    """
    tracker = RunTracker(ctx.session_factory, source=ctx.settings.EXTERNAL_SOURCE)
    await tracker.start()
    
    try:
        registry = await ctx.http.fetch_metadata()
    except FetchError as e:
        tracker.add_error(f"Metadata fetch failed: {e}")
        return await tracker.complete(RunStatus.FAILED)
    
    logger.info(f"Discovered {len(registry)} collections")
    await tracker.set_collections(registry.names)
    
    status = await run_stages(ctx, tracker, registry, stages or STAGE_ORDER)
    return await tracker.complete(status)


async def run_stages(
    ctx: PipelineContext,
    tracker: RunTracker,
    registry: CollectionRegistry,
    stages: List[Type[SyncStage]],
) -> RunStatus:
    ids = IdMaps()
    
    try:
        for stage_cls in stages:
            await stage_cls(ctx, tracker, ids).run(registry)
    
    except MissingCollection as e:
        tracker.add_error(str(e))
        logger.error(f"Required collection missing, run failed: {e.entity_type}")
        return RunStatus.FAILED
    
    except Exception as e:
        logger.exception(f"Sync aborted by unexpected error: {e}")
        tracker.add_error(f"Unexpected error: {type(e).__name__}: {e}")
        return RunStatus.FAILED
    
    return RunStatus.COMPLETED
