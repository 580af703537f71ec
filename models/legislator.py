from sqlalchemy import Column, String, Boolean, UniqueConstraint
from models.base import Base, ExternalKeyMixin


class Legislator(ExternalKeyMixin, Base):
    """Member of Knesset"""
    __tablename__ = "legislators"
    
    first_name = Column(String(120), nullable=True)
    last_name = Column(String(120), nullable=True)
    full_name = Column(String(255), nullable=False)
    gender = Column(String(16), nullable=False, default="unknown")
    is_current = Column(Boolean, nullable=False, default=False)
    
    __table_args__ = (
        UniqueConstraint("external_id", "external_source", name="uq_legislator_external"),
    )
