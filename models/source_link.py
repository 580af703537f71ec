from sqlalchemy import Column, String, Text, UniqueConstraint, Index
from models.base import Base, TimestampMixin, new_uuid


class SourceLink(TimestampMixin, Base):
    """
    Provenance pointer for a user-facing fact.

    A bill with no SourceLink row is never surfaced as recommendation
    evidence.
    """
    __tablename__ = "source_links"
    
    id = Column(String(36), primary_key=True, default=new_uuid)
    entity_type = Column(String(50), nullable=False)
    entity_id = Column(String(36), nullable=False)
    external_source = Column(String(50), nullable=False)
    external_id = Column(String(64), nullable=True)
    label = Column(String(255), nullable=False)
    url = Column(Text, nullable=False)
    
    __table_args__ = (
        UniqueConstraint(
            "entity_type", "entity_id", "external_source", name="uq_source_link"
        ),
        Index("idx_source_link_entity", "entity_type", "entity_id"),
    )
