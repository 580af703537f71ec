"""
Health check endpoint with database and sync run status
"""

from datetime import datetime, timedelta
from typing import Optional
import logging

from fastapi import APIRouter, Depends
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_context, get_db
from core.context import PipelineContext
from models import RunStatus, SyncRun
from schemas.api import HealthCheckResponse, RunSummary

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])


def stale_cutoff(hours: int, now: Optional[datetime] = None) -> datetime:
    return (now or datetime.utcnow()) - timedelta(hours=hours)


def is_stale(run: SyncRun, cutoff: datetime) -> bool:
    """A run still RUNNING after the cutoff was most likely killed."""
    return run.status == RunStatus.RUNNING and run.started_at < cutoff


def determine_status(database_connected: bool, last_run: Optional[RunSummary], stale_runs: int) -> str:
    if not database_connected:
        return "unhealthy"
    if stale_runs or (last_run is not None and last_run.status == RunStatus.FAILED.value):
        return "degraded"
    return "healthy"


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(
    db: AsyncSession = Depends(get_db),
    ctx: PipelineContext = Depends(get_context),
):
    """
    Health check endpoint.
    
    Returns:
    - Database connectivity status
    - Latest sync run, flagged when left RUNNING past the stale threshold
    - Completion time of the latest successful sync
    """
    db_connected = False
    last_run = None
    last_completed_at = None
    stale_runs = 0
    
    try:
        await db.execute(text("SELECT 1"))
        db_connected = True
    except SQLAlchemyError as e:
        logger.error(f"Database connection failed: {str(e)}")
    
    if db_connected:
        cutoff = stale_cutoff(ctx.settings.STALE_RUN_HOURS)
        try:
            result = await db.execute(
                select(SyncRun).where(SyncRun.job == "sync").order_by(SyncRun.started_at.desc()).limit(1)
            )
            run = result.scalar_one_or_none()
            if run is not None:
                last_run = RunSummary.model_validate(run)
                last_run.stale = is_stale(run, cutoff)
            
            result = await db.execute(
                select(func.count()).select_from(SyncRun).where(
                    SyncRun.status == RunStatus.RUNNING,
                    SyncRun.started_at < cutoff,
                )
            )
            stale_runs = result.scalar() or 0
            
            result = await db.execute(
                select(func.max(SyncRun.completed_at)).where(
                    SyncRun.status == RunStatus.COMPLETED,
                    SyncRun.job == "sync",
                )
            )
            last_completed_at = result.scalar()
        except SQLAlchemyError as e:
            logger.error(f"Failed to read sync runs: {str(e)}")
    
    return HealthCheckResponse(
        status=determine_status(db_connected, last_run, stale_runs),
        timestamp=datetime.utcnow(),
        database_connected=db_connected,
        last_run=last_run,
        last_completed_at=last_completed_at,
        stale_runs=stale_runs,
    )
