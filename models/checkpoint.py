from sqlalchemy import Column, Integer, String, DateTime, Text, UniqueConstraint
from datetime import datetime
from models.base import Base


class SyncCheckpoint(Base):
    """
    Resumable paging state for long-running collection jobs.

    Design:
    - One row per (source, collection)
    - next_url holds the server continuation link when one was given,
      otherwise skip holds the next offset
    - A completed pass clears the cursor so the next run starts fresh
    """
    __tablename__ = "sync_checkpoints"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    
    source = Column(String(50), nullable=False)
    collection = Column(String(100), nullable=False)
    
    # Cursor
    next_url = Column(Text, nullable=True)
    skip = Column(Integer, nullable=False, default=0)
    
    # Statistics
    pages_done = Column(Integer, nullable=False, default=0)
    records_done = Column(Integer, nullable=False, default=0)
    last_run_at = Column(DateTime, nullable=True)
    last_completed_at = Column(DateTime, nullable=True)
    
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    __table_args__ = (
        UniqueConstraint("source", "collection", name="uq_checkpoint_source_collection"),
    )
    
    @property
    def has_cursor(self) -> bool:
        return bool(self.next_url) or self.skip > 0
