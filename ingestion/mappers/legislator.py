from typing import Any, Dict

from ingestion.mappers.common import (
    DEFAULT_BASE_URL, DEFAULT_SOURCE, clean_str, current_flag, first_present,
    parse_datetime, parse_raw, record_url, require_id, to_external_id,
)
from schemas.canonical import LegislatorRecord, MembershipRecord
from schemas.raw import RawMember, RawMemberFaction
from core.exceptions import MappingError

LEGISLATOR_CANDIDATES = ["KNS_Person", "KnssMember", "Person", "MK", "KnessetMember", "Member"]

MEMBERSHIP_CANDIDATES = [
    "KNS_PersonToPosition", "KnssMemberFaction", "MemberFaction", "FactionMember", "PersonToFaction",
]


def infer_gender(record: RawMember) -> str:
    desc = (record.GenderDesc or "").lower()
    if record.GenderID == 1 or "זכר" in desc:
        return "male"
    if record.GenderID == 2 or "נקבה" in desc:
        return "female"
    return "unknown"


def map_legislator(
    raw: Dict[str, Any],
    base_url: str = DEFAULT_BASE_URL,
    external_source: str = DEFAULT_SOURCE,
) -> LegislatorRecord:
    record = parse_raw(RawMember, raw, "legislator")
    external_id = require_id(
        "legislator", record.PersonID, record.MemberID, record.ID, record.Id
    )
    
    first_name = clean_str(record.FirstName)
    last_name = clean_str(record.LastName)
    full_name = clean_str(record.FullName) or " ".join(
        part for part in (first_name, last_name) if part
    )
    
    if record.IsCurrent is not None:
        is_current = bool(record.IsCurrent)
    else:
        is_current = bool(record.IsActive)
    
    return LegislatorRecord(
        external_id=external_id,
        external_source=external_source,
        first_name=first_name,
        last_name=last_name,
        full_name=full_name or "Unknown",
        gender=infer_gender(record),
        is_current=is_current,
        faction_external_id=to_external_id(record.FactionID),
        source_url=record_url(base_url, "KNS_Person", external_id),
    )


def map_membership(raw: Dict[str, Any]) -> MembershipRecord:
    """Person-to-faction row → MembershipRecord (knesset number -1 when absent)."""
    record = parse_raw(RawMemberFaction, raw, "membership")
    legislator_id = to_external_id(record.PersonID, record.MemberID)
    party_id = to_external_id(record.FactionID)
    
    if not legislator_id or not party_id:
        raise MappingError(
            "Membership record missing person or faction id",
            context={"person_id": legislator_id, "faction_id": party_id}
        )
    
    end_date = parse_datetime(first_present(record.EndDate, record.FinishDate))
    
    return MembershipRecord(
        legislator_external_id=legislator_id,
        party_external_id=party_id,
        knesset_number=record.KnessetNum if record.KnessetNum else -1,
        start_date=parse_datetime(record.StartDate),
        end_date=end_date,
        is_current=current_flag(record.IsCurrent, end_date),
    )
