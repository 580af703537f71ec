from sqlalchemy import (
    Column, String, Integer, Float, DateTime, ForeignKey, UniqueConstraint
)
from datetime import datetime
from models.base import Base, new_uuid


class PartyTopicAggregate(Base):
    """
    Precomputed activity score per (party, topic).

    Derived cache: fully replaced by every aggregation run.
    """
    __tablename__ = "party_topic_aggregates"
    
    id = Column(String(36), primary_key=True, default=new_uuid)
    party_id = Column(String(36), ForeignKey("parties.id"), nullable=False)
    topic = Column(String(50), nullable=False, index=True)
    
    raw_score = Column(Float, nullable=False, default=0.0)
    bill_count = Column(Integer, nullable=False, default=0)
    computed_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    
    __table_args__ = (
        UniqueConstraint("party_id", "topic", name="uq_party_topic"),
    )
