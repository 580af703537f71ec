"""
Canonical records produced by the mappers and consumed by the sync stages.

Foreign keys are carried as upstream external ids; the sync stage resolves
them against the id maps built by earlier stages.
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class CanonicalRecord(BaseModel):
    external_id: str = Field(..., min_length=1, max_length=64)
    external_source: str
    source_url: Optional[str] = None


class PartyRecord(CanonicalRecord):
    name: str
    abbreviation: Optional[str] = None
    knesset_number: Optional[int] = None
    seat_count: Optional[int] = None
    is_active: bool = True
    last_changed_at: Optional[datetime] = None


class LegislatorRecord(CanonicalRecord):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: str
    gender: str = "unknown"
    is_current: bool = False
    # Inline faction reference, refined later by the membership collection
    faction_external_id: Optional[str] = None


class MembershipRecord(BaseModel):
    legislator_external_id: str
    party_external_id: str
    knesset_number: int = -1
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_current: bool = False


class BillRecord(CanonicalRecord):
    title: str
    description: Optional[str] = None
    status: str = "unknown"
    topic: Optional[str] = None
    knesset_number: Optional[int] = None
    submitted_date: Optional[datetime] = None
    last_status_date: Optional[datetime] = None


class BillRoleRecord(BaseModel):
    bill_external_id: str
    legislator_external_id: str
    role: str


class BillStageRecord(BaseModel):
    bill_external_id: str
    external_id: str
    status: str = "unknown"
    description: Optional[str] = None
    stage_date: Optional[datetime] = None


class CommitteeRecord(CanonicalRecord):
    name: str
    knesset_number: Optional[int] = None
    is_active: bool = True


class CommitteeMembershipRecord(BaseModel):
    committee_external_id: str
    legislator_external_id: str
    position: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_current: bool = False


class GovernmentRoleRecord(CanonicalRecord):
    legislator_external_id: str
    position_id: int
    position_label: str
    ministry_name: Optional[str] = None
    duty_desc: Optional[str] = None
    government_number: Optional[int] = None
    knesset_number: Optional[int] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_current: bool = False


class VoteRecordHeader(CanonicalRecord):
    title: str
    vote_date: Optional[datetime] = None
    knesset_number: Optional[int] = None
    result: str = "unknown"
    yes_count: Optional[int] = None
    no_count: Optional[int] = None
    abstain_count: Optional[int] = None
    for_option_desc: Optional[str] = None
    against_option_desc: Optional[str] = None


class BallotRecord(BaseModel):
    vote_external_id: str
    legislator_external_id: str
    value: str
