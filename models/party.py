from sqlalchemy import (
    Column, String, Integer, Boolean, DateTime, ForeignKey, UniqueConstraint, Index
)
from models.base import Base, ExternalKeyMixin, TimestampMixin, new_uuid


class Party(ExternalKeyMixin, Base):
    """Parliamentary faction"""
    __tablename__ = "parties"
    
    name = Column(String(255), nullable=False)
    abbreviation = Column(String(50), nullable=True)
    knesset_number = Column(Integer, nullable=True, index=True)
    seat_count = Column(Integer, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    last_changed_at = Column(DateTime, nullable=True)
    
    __table_args__ = (
        UniqueConstraint("external_id", "external_source", name="uq_party_external"),
    )


class PartyMembership(TimestampMixin, Base):
    """
    Legislator ↔ party affiliation for one Knesset term.

    knesset_number -1 marks an inline affiliation taken from the
    legislator record itself, before the detailed history is loaded.
    """
    __tablename__ = "party_memberships"
    
    id = Column(String(36), primary_key=True, default=new_uuid)
    legislator_id = Column(String(36), ForeignKey("legislators.id"), nullable=False)
    party_id = Column(String(36), ForeignKey("parties.id"), nullable=False)
    knesset_number = Column(Integer, nullable=False, default=-1)
    
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    is_current = Column(Boolean, nullable=False, default=False)
    
    __table_args__ = (
        UniqueConstraint(
            "legislator_id", "party_id", "knesset_number", name="uq_membership"
        ),
        Index("idx_membership_current", "party_id", "is_current"),
    )
