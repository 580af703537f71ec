from sqlalchemy import (
    Column, String, Integer, DateTime, Text, ForeignKey, UniqueConstraint, Index
)
from models.base import Base, ExternalKeyMixin, TimestampMixin, new_uuid


class Bill(ExternalKeyMixin, Base):
    """
    Private or government bill.

    status is one of the mapped bill statuses; topic is a keyword-inferred tag,
    NULL when the bill has no text and "other" when nothing matched.
    """
    __tablename__ = "bills"
    
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(32), nullable=False, default="unknown", index=True)
    topic = Column(String(50), nullable=True, index=True)
    knesset_number = Column(Integer, nullable=True)
    submitted_date = Column(DateTime, nullable=True)
    last_status_date = Column(DateTime, nullable=True)
    source_url = Column(Text, nullable=True)
    
    __table_args__ = (
        UniqueConstraint("external_id", "external_source", name="uq_bill_external"),
    )


class BillStage(TimestampMixin, Base):
    """One step in a bill's legislative history"""
    __tablename__ = "bill_stages"
    
    id = Column(String(36), primary_key=True, default=new_uuid)
    bill_id = Column(String(36), ForeignKey("bills.id"), nullable=False)
    external_id = Column(String(64), nullable=False)
    
    status = Column(String(32), nullable=False, default="unknown")
    description = Column(Text, nullable=True)
    stage_date = Column(DateTime, nullable=True)
    
    __table_args__ = (
        UniqueConstraint("bill_id", "external_id", name="uq_bill_stage"),
    )


class LegislatorBillRole(TimestampMixin, Base):
    """Initiator / cosponsor link between a legislator and a bill"""
    __tablename__ = "legislator_bill_roles"
    
    id = Column(String(36), primary_key=True, default=new_uuid)
    legislator_id = Column(String(36), ForeignKey("legislators.id"), nullable=False)
    bill_id = Column(String(36), ForeignKey("bills.id"), nullable=False)
    role = Column(String(20), nullable=False)
    
    __table_args__ = (
        UniqueConstraint("legislator_id", "bill_id", "role", name="uq_bill_role"),
        Index("idx_bill_role_bill", "bill_id"),
    )
