from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, Index
from datetime import datetime
from models.base import Base, JSONType, new_uuid


class RawSnapshot(Base):
    """
    Immutable, content-hashed copy of one raw record as fetched.

    Append-only: rows are never updated or deleted. Used for audit replay
    and for the bill-role backfill.
    """
    __tablename__ = "raw_snapshots"
    
    id = Column(String(36), primary_key=True, default=new_uuid)
    run_id = Column(String(36), ForeignKey("sync_runs.id"), nullable=True, index=True)
    
    # Provenance
    entity_type = Column(String(50), nullable=False)
    entity_id = Column(String(36), nullable=True)
    external_id = Column(String(64), nullable=True)
    external_source = Column(String(50), nullable=False)
    
    payload = Column(JSONType, nullable=False)
    content_hash = Column(String(64), nullable=False)  # SHA-256 hex
    payload_size = Column(Integer, nullable=False)
    
    fetched_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    
    __table_args__ = (
        Index("idx_snapshot_entity", "entity_type", "entity_id"),
        Index("idx_snapshot_hash", "content_hash"),
    )
