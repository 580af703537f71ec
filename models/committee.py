from sqlalchemy import (
    Column, String, Integer, Boolean, DateTime, ForeignKey, UniqueConstraint
)
from models.base import Base, ExternalKeyMixin, TimestampMixin, new_uuid


class Committee(ExternalKeyMixin, Base):
    __tablename__ = "committees"
    
    name = Column(String(255), nullable=False)
    knesset_number = Column(Integer, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    
    __table_args__ = (
        UniqueConstraint("external_id", "external_source", name="uq_committee_external"),
    )


class CommitteeMembership(TimestampMixin, Base):
    __tablename__ = "committee_memberships"
    
    id = Column(String(36), primary_key=True, default=new_uuid)
    legislator_id = Column(String(36), ForeignKey("legislators.id"), nullable=False)
    committee_id = Column(String(36), ForeignKey("committees.id"), nullable=False)
    
    position = Column(String(255), nullable=True)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    is_current = Column(Boolean, nullable=False, default=False)
    
    __table_args__ = (
        UniqueConstraint("legislator_id", "committee_id", name="uq_committee_membership"),
    )
