from sqlalchemy import (
    Column, String, Integer, Boolean, DateTime, Text, ForeignKey, UniqueConstraint
)
from models.base import Base, ExternalKeyMixin


class GovernmentRole(ExternalKeyMixin, Base):
    """Ministerial position (minister, deputy, prime minister) held by a legislator"""
    __tablename__ = "government_roles"
    
    legislator_id = Column(String(36), ForeignKey("legislators.id"), nullable=False, index=True)
    position_id = Column(Integer, nullable=False)
    position_label = Column(String(100), nullable=False)
    ministry_name = Column(String(255), nullable=True)
    duty_desc = Column(Text, nullable=True)
    government_number = Column(Integer, nullable=True)
    knesset_number = Column(Integer, nullable=True)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    is_current = Column(Boolean, nullable=False, default=False)
    
    __table_args__ = (
        UniqueConstraint("external_id", "external_source", name="uq_gov_role_external"),
    )
