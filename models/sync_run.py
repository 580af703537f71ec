from sqlalchemy import Column, String, Enum, DateTime, Integer, Index
from datetime import datetime
from models.base import Base, JSONType, RunStatus, new_uuid


class SyncRun(Base):
    """
    One ingestion attempt.

    Purpose:
    - Audit trail of every sync / vote-records job
    - Per-entity counters {fetched, created, updated, failed}
    - Accumulated non-fatal errors and warnings

    A row left in RUNNING after the process died is stale; the health
    endpoint reports it as such.
    """
    __tablename__ = "sync_runs"
    
    id = Column(String(36), primary_key=True, default=new_uuid)
    job = Column(String(50), nullable=False, default="sync", index=True)
    source = Column(String(50), nullable=False)
    
    status = Column(Enum(RunStatus), default=RunStatus.PENDING, nullable=False, index=True)
    
    # Timestamps
    started_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    completed_at = Column(DateTime, nullable=True)
    latency_ms = Column(Integer, nullable=True)
    
    # {"parties": {"fetched": 0, "created": 0, "updated": 0, "failed": 0}, ...}
    counts = Column(JSONType, nullable=False, default=dict)
    errors = Column(JSONType, nullable=False, default=list)
    collections = Column(JSONType, nullable=True)  # names discovered from metadata
    
    __table_args__ = (
        Index("idx_sync_run_job_started", "job", "started_at"),
    )
