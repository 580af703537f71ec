from typing import Any, Dict

from ingestion.mappers.common import (
    DEFAULT_BASE_URL, DEFAULT_SOURCE, clean_str, current_flag, first_present,
    parse_datetime, parse_raw, record_url, require_id, to_external_id,
)
from schemas.canonical import CommitteeMembershipRecord, CommitteeRecord
from schemas.raw import RawCommittee, RawCommitteeMember
from core.exceptions import MappingError

COMMITTEE_CANDIDATES = ["KNS_Committee", "KnssCommittee", "Committee", "KnessetCommittee"]

# Person-to-position covers every role; the sync filters it to committee rows
COMMITTEE_MEMBER_CANDIDATES = [
    "KNS_PersonToPosition",
    "KNS_PersonToCommittee",
    "KnssCommitteeMember",
    "CommitteeMember",
    "PersonCommittee",
]

PERSON_TO_POSITION = "KNS_PersonToPosition"


def map_committee(
    raw: Dict[str, Any],
    base_url: str = DEFAULT_BASE_URL,
    external_source: str = DEFAULT_SOURCE,
) -> CommitteeRecord:
    record = parse_raw(RawCommittee, raw, "committee")
    external_id = require_id("committee", record.CommitteeID, record.ID, record.Id)
    
    if record.IsCurrent is not None:
        is_active = bool(record.IsCurrent)
    else:
        is_active = not record.FinishDate
    
    return CommitteeRecord(
        external_id=external_id,
        external_source=external_source,
        name=clean_str(first_present(record.Name, record.CommitteeName)) or "Unknown",
        knesset_number=record.KnessetNum,
        is_active=is_active,
        source_url=record_url(base_url, "KNS_Committee", external_id),
    )


def map_committee_membership(raw: Dict[str, Any]) -> CommitteeMembershipRecord:
    record = parse_raw(RawCommitteeMember, raw, "committee_member")
    committee_id = to_external_id(record.CommitteeID)
    legislator_id = to_external_id(record.PersonID, record.MemberID)
    
    if not committee_id or not legislator_id:
        raise MappingError(
            "Committee member record missing committee or person id",
            context={"committee_id": committee_id, "person_id": legislator_id}
        )
    
    end_date = parse_datetime(first_present(record.EndDate, record.FinishDate))
    
    return CommitteeMembershipRecord(
        committee_external_id=committee_id,
        legislator_external_id=legislator_id,
        position=clean_str(first_present(record.RoleDesc, record.DutyDesc)),
        start_date=parse_datetime(record.StartDate),
        end_date=end_date,
        is_current=current_flag(record.IsCurrent, end_date),
    )
