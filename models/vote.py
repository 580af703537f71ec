from sqlalchemy import (
    Column, String, Integer, DateTime, Text, ForeignKey, UniqueConstraint
)
from models.base import Base, ExternalKeyMixin, TimestampMixin, new_uuid


class Vote(ExternalKeyMixin, Base):
    """Plenum vote header"""
    __tablename__ = "votes"
    
    title = Column(Text, nullable=True)
    vote_date = Column(DateTime, nullable=True, index=True)
    knesset_number = Column(Integer, nullable=True)
    result = Column(String(16), nullable=False, default="unknown")
    yes_count = Column(Integer, nullable=True)
    no_count = Column(Integer, nullable=True)
    abstain_count = Column(Integer, nullable=True)
    for_option_desc = Column(Text, nullable=True)
    against_option_desc = Column(Text, nullable=True)
    
    __table_args__ = (
        UniqueConstraint("external_id", "external_source", name="uq_vote_external"),
    )


class VoteRecord(TimestampMixin, Base):
    """One legislator's ballot in one vote"""
    __tablename__ = "vote_records"
    
    id = Column(String(36), primary_key=True, default=new_uuid)
    vote_id = Column(String(36), ForeignKey("votes.id"), nullable=False)
    legislator_id = Column(String(36), ForeignKey("legislators.id"), nullable=False)
    value = Column(String(16), nullable=False)
    
    __table_args__ = (
        UniqueConstraint("vote_id", "legislator_id", name="uq_vote_record"),
    )
