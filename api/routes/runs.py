"""
Recent sync run records
"""

from typing import Optional
import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_context, get_db
from api.routes.health import is_stale, stale_cutoff
from core.context import PipelineContext
from models import SyncRun
from schemas.api import RunListResponse, RunSummary

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Runs"])


@router.get("/runs", response_model=RunListResponse)
async def list_runs(
    limit: int = Query(10, ge=1, le=100, description="Number of recent runs to return"),
    job: Optional[str] = Query(None, description="Filter by job (sync, vote-records)"),
    db: AsyncSession = Depends(get_db),
    ctx: PipelineContext = Depends(get_context),
):
    """Most recent runs first."""
    query = select(SyncRun)
    count_query = select(func.count()).select_from(SyncRun)
    if job:
        query = query.where(SyncRun.job == job)
        count_query = count_query.where(SyncRun.job == job)
    
    result = await db.execute(query.order_by(SyncRun.started_at.desc()).limit(limit))
    runs = result.scalars().all()
    total = (await db.execute(count_query)).scalar() or 0
    
    cutoff = stale_cutoff(ctx.settings.STALE_RUN_HOURS)
    summaries = []
    for run in runs:
        summary = RunSummary.model_validate(run)
        summary.stale = is_stale(run, cutoff)
        summaries.append(summary)
    
    return RunListResponse(runs=summaries, total=total)
