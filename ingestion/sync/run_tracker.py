"""
Run record lifecycle: RUNNING → COMPLETED | FAILED.

Counters and errors are kept in memory while the run is in progress and
written once at completion. The run row itself is created up front so a
crashed process leaves a RUNNING row that monitoring can flag as stale.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional
from sqlalchemy.ext.asyncio import async_sessionmaker
import logging

from models import SyncRun, RunStatus

logger = logging.getLogger(__name__)

COUNTER_FIELDS = ("fetched", "created", "updated", "failed")
MAX_ERRORS = 200


@dataclass
class RunResult:
    run_id: str
    status: RunStatus
    source: str
    started_at: datetime
    completed_at: datetime
    latency_ms: int
    counts: Dict[str, Dict[str, int]] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)
    
    @property
    def failed(self) -> bool:
        return self.status == RunStatus.FAILED
    
    def totals(self) -> Dict[str, int]:
        totals = {name: 0 for name in COUNTER_FIELDS}
        for counters in self.counts.values():
            for name in COUNTER_FIELDS:
                totals[name] += counters.get(name, 0)
        return totals


class RunTracker:
    """Owns one SyncRun row for the lifetime of a run."""
    
    def __init__(self, session_factory: async_sessionmaker, source: str, job: str = "sync"):
        self.session_factory = session_factory
        self.source = source
        self.job = job
        self.run_id: Optional[str] = None
        self.started_at = datetime.utcnow()
        self.counts: Dict[str, Dict[str, int]] = {}
        self.errors: List[str] = []
        self._dropped_errors = 0
    
    async def start(self) -> str:
        self.started_at = datetime.utcnow()
        self.counts = {}
        self.errors = []
        
        async with self.session_factory() as session:
            run = SyncRun(
                job=self.job,
                source=self.source,
                status=RunStatus.RUNNING,
                started_at=self.started_at,
                counts={},
                errors=[],
            )
            session.add(run)
            await session.commit()
            self.run_id = run.id
        
        logger.info(f"Run {self.run_id} started ({self.job}, source={self.source})")
        return self.run_id
    
    def init_entity(self, entity_type: str):
        if entity_type not in self.counts:
            self.counts[entity_type] = {name: 0 for name in COUNTER_FIELDS}
    
    def increment(self, entity_type: str, counter: str, amount: int = 1):
        self.init_entity(entity_type)
        self.counts[entity_type][counter] += amount
    
    def _append(self, message: str):
        if len(self.errors) < MAX_ERRORS:
            self.errors.append(message)
        else:
            self._dropped_errors += 1
    
    def add_error(self, message: str):
        self._append(message)
        logger.error(f"Run error recorded: {message}")
    
    def warn(self, message: str):
        """Non-fatal condition worth keeping on the run record."""
        self._append(f"warning: {message}")
        logger.warning(message)
    
    async def set_collections(self, names: List[str]):
        async with self.session_factory() as session:
            run = await session.get(SyncRun, self.run_id)
            run.collections = list(names)
            await session.commit()
    
    async def complete(self, status: RunStatus) -> RunResult:
        completed_at = datetime.utcnow()
        latency_ms = int((completed_at - self.started_at).total_seconds() * 1000)
        
        errors = list(self.errors)
        if self._dropped_errors:
            errors.append(f"... and {self._dropped_errors} more errors")
        
        async with self.session_factory() as session:
            run = await session.get(SyncRun, self.run_id)
            run.status = status
            run.completed_at = completed_at
            run.latency_ms = latency_ms
            run.counts = {k: dict(v) for k, v in self.counts.items()}
            run.errors = errors
            await session.commit()
        
        result = RunResult(
            run_id=self.run_id,
            status=status,
            source=self.source,
            started_at=self.started_at,
            completed_at=completed_at,
            latency_ms=latency_ms,
            counts=self.counts,
            errors=errors,
        )
        logger.info(
            f"Run {self.run_id} {status.value} in {latency_ms}ms "
            f"({len(errors)} errors, totals={result.totals()})"
        )
        return result
