import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from core.config import Settings, settings as default_settings
from core.context import open_context
from ingestion.sync.orchestrator import run_sync
from scoring.aggregation import run_aggregate

logger = logging.getLogger(__name__)


class SyncScheduler:
    """Nightly batch: full sync, then aggregation."""
    
    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self.scheduler = AsyncIOScheduler(timezone="UTC")

    async def run_nightly_job(self):
        """Job to run sync and aggregate with a fresh context"""
        logger.info("Scheduler: Starting nightly sync")
        try:
            async with open_context(self.settings) as ctx:
                result = await run_sync(ctx)
                if result.failed:
                    logger.error(f"Scheduler: Sync run {result.run_id} failed; skipping aggregation")
                    return
                await run_aggregate(ctx)
        except Exception as e:
            logger.error(f"Scheduler: Nightly job failed - {e}")

    def start(self):
        """Start the scheduler"""
        self.scheduler.add_job(
            self.run_nightly_job,
            trigger=CronTrigger(hour=self.settings.SYNC_SCHEDULE_HOUR, minute=0),
            id="nightly_sync",
            replace_existing=True,
            max_instances=1,
        )
        self.scheduler.start()
        logger.info(f"Sync scheduler started (daily at {self.settings.SYNC_SCHEDULE_HOUR:02d}:00 UTC)")

    def stop(self):
        self.scheduler.shutdown()
        logger.info("Sync scheduler stopped")
