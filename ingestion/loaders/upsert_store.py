"""
Idempotent create-or-update keyed by natural keys (INSERT ... ON CONFLICT)
"""

from datetime import datetime
from typing import Any, Dict, Iterable, NamedTuple, Optional, Type
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.dialects import postgresql, sqlite
import logging

from core.exceptions import UpsertError
from models import (
    Bill, BillStage, Committee, CommitteeMembership, GovernmentRole, Legislator,
    LegislatorBillRole, Party, PartyMembership, SourceLink, Vote, VoteRecord,
)
from schemas.canonical import (
    BillRecord, BillStageRecord, CommitteeMembershipRecord, CommitteeRecord,
    GovernmentRoleRecord, LegislatorRecord, MembershipRecord, PartyRecord, VoteRecordHeader,
)

logger = logging.getLogger(__name__)

SOURCE_LINK_LABEL = "Knesset OData"


class UpsertResult(NamedTuple):
    id: str
    created: bool


def insert_for(session: AsyncSession):
    """Dialect-specific insert() that supports on_conflict_do_update."""
    dialect = session.bind.dialect.name if session.bind is not None else "postgresql"
    if dialect == "sqlite":
        return sqlite.insert
    return postgresql.insert


def column_values(model: Type, data: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only keys that are columns of the model's table."""
    columns = model.__table__.columns
    return {k: v for k, v in data.items() if k in columns}


async def upsert_row(
    session: AsyncSession,
    model: Type,
    key: Dict[str, Any],
    values: Dict[str, Any],
    update_fields: Optional[Iterable[str]] = None,
) -> UpsertResult:
    """
    Insert a row or update it in place on a natural-key conflict.

    Args:
        session: Session owned by the calling worker
        model: ORM model with a unique constraint over the key columns
        key: Natural key column → value
        values: Remaining column values
        update_fields: Columns refreshed on conflict (default: all of values)

    Returns:
        UpsertResult with the internal id and whether the row was new

    Raises:
        UpsertError: On constraint violations or connectivity problems
    """
    now = datetime.utcnow()
    update_fields = list(values.keys() if update_fields is None else update_fields)
    
    try:
        conditions = [getattr(model, name) == value for name, value in key.items()]
        existing = await session.execute(select(model.id).where(*conditions))
        existing_id = existing.scalar_one_or_none()
        
        row = {**key, **values}
        if "last_seen_at" in model.__table__.columns:
            row["last_seen_at"] = now
        
        stmt = insert_for(session)(model).values(**row)
        
        set_ = {name: stmt.excluded[name] for name in update_fields}
        if "updated_at" in model.__table__.columns:
            set_["updated_at"] = now
        if "last_seen_at" in model.__table__.columns:
            set_["last_seen_at"] = now
        
        stmt = stmt.on_conflict_do_update(
            index_elements=list(key.keys()),
            set_=set_
        ).returning(model.id)
        
        result = await session.execute(stmt)
        internal_id = result.scalar_one()
    
    except SQLAlchemyError as e:
        raise UpsertError(
            f"Upsert into {model.__tablename__} failed",
            context={"entity_type": model.__tablename__, "key": key},
            original_exception=e
        )
    
    return UpsertResult(id=internal_id, created=existing_id is None)


class UpsertStore:
    """
    Entity-level upserts for one session.

    Ensures:
    - Same input never yields a second row or a different internal id
    - Domain entities are keyed by (external_id, external_source)
    - Relationships are keyed by their composite natural key
    """
    
    def __init__(self, session: AsyncSession):
        self.session = session
    
    async def _upsert_entity(self, model: Type, record, exclude: Iterable[str] = ()) -> UpsertResult:
        data = record.model_dump(exclude={"external_id", "external_source", *exclude})
        return await upsert_row(
            self.session,
            model,
            key={"external_id": record.external_id, "external_source": record.external_source},
            values=column_values(model, data),
        )
    
    async def upsert_party(self, record: PartyRecord) -> UpsertResult:
        return await self._upsert_entity(Party, record)
    
    async def upsert_legislator(self, record: LegislatorRecord) -> UpsertResult:
        return await self._upsert_entity(Legislator, record, exclude={"faction_external_id"})
    
    async def upsert_bill(self, record: BillRecord) -> UpsertResult:
        return await self._upsert_entity(Bill, record)
    
    async def upsert_committee(self, record: CommitteeRecord) -> UpsertResult:
        return await self._upsert_entity(Committee, record)
    
    async def upsert_vote(self, record: VoteRecordHeader) -> UpsertResult:
        return await self._upsert_entity(Vote, record)
    
    async def upsert_government_role(self, record: GovernmentRoleRecord, legislator_id: str) -> UpsertResult:
        data = record.model_dump(exclude={"external_id", "external_source", "legislator_external_id"})
        data["legislator_id"] = legislator_id
        return await upsert_row(
            self.session,
            GovernmentRole,
            key={"external_id": record.external_id, "external_source": record.external_source},
            values=column_values(GovernmentRole, data),
        )
    
    async def upsert_membership(
        self, legislator_id: str, party_id: str, record: MembershipRecord
    ) -> UpsertResult:
        return await upsert_row(
            self.session,
            PartyMembership,
            key={
                "legislator_id": legislator_id,
                "party_id": party_id,
                "knesset_number": record.knesset_number,
            },
            values={
                "start_date": record.start_date,
                "end_date": record.end_date,
                "is_current": record.is_current,
            },
            update_fields=["end_date", "is_current"],
        )
    
    async def upsert_inline_membership(
        self, legislator_id: str, party_id: str, is_current: bool
    ) -> UpsertResult:
        """Affiliation taken from the legislator record (knesset number -1)."""
        return await upsert_row(
            self.session,
            PartyMembership,
            key={"legislator_id": legislator_id, "party_id": party_id, "knesset_number": -1},
            values={"is_current": is_current},
        )
    
    async def upsert_bill_role(self, legislator_id: str, bill_id: str, role: str) -> UpsertResult:
        return await upsert_row(
            self.session,
            LegislatorBillRole,
            key={"legislator_id": legislator_id, "bill_id": bill_id, "role": role},
            values={},
        )
    
    async def upsert_bill_stage(self, bill_id: str, record: BillStageRecord) -> UpsertResult:
        return await upsert_row(
            self.session,
            BillStage,
            key={"bill_id": bill_id, "external_id": record.external_id},
            values={
                "status": record.status,
                "description": record.description,
                "stage_date": record.stage_date,
            },
        )
    
    async def upsert_committee_membership(
        self, legislator_id: str, committee_id: str, record: CommitteeMembershipRecord
    ) -> UpsertResult:
        return await upsert_row(
            self.session,
            CommitteeMembership,
            key={"legislator_id": legislator_id, "committee_id": committee_id},
            values={
                "position": record.position,
                "start_date": record.start_date,
                "end_date": record.end_date,
                "is_current": record.is_current,
            },
            update_fields=["position", "end_date", "is_current"],
        )
    
    async def upsert_vote_record(self, vote_id: str, legislator_id: str, value: str) -> UpsertResult:
        return await upsert_row(
            self.session,
            VoteRecord,
            key={"vote_id": vote_id, "legislator_id": legislator_id},
            values={"value": value},
        )
    
    async def upsert_source_link(
        self,
        entity_type: str,
        entity_id: str,
        external_source: str,
        url: str,
        external_id: Optional[str] = None,
        label: str = SOURCE_LINK_LABEL,
    ) -> UpsertResult:
        return await upsert_row(
            self.session,
            SourceLink,
            key={
                "entity_type": entity_type,
                "entity_id": entity_id,
                "external_source": external_source,
            },
            values={"external_id": external_id, "label": label, "url": url},
        )
