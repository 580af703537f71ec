"""
Ministerial positions from the person-to-position collection.
"""

from typing import Any, Dict, Optional

from ingestion.mappers.common import (
    DEFAULT_BASE_URL, DEFAULT_SOURCE, clean_str, parse_datetime, parse_raw,
    record_url, to_external_id,
)
from schemas.canonical import GovernmentRoleRecord
from schemas.raw import RawPersonToPosition
from core.exceptions import MappingError

GOVERNMENT_ROLE_COLLECTION = "KNS_PersonToPosition"

MINISTER_POSITION_IDS = [39, 57, 45, 31, 50, 40, 59, 51, 285079]

MINISTER_POSITION_LABELS: Dict[int, str] = {
    39: "שר",
    57: "שרה",
    45: "ראש הממשלה",
    31: "משנה לראש הממשלה",
    50: "סגן ראש הממשלה",
    40: "סגן שר",
    59: "סגנית שר",
    51: 'מ"מ ראש הממשלה',
    285079: "סגן שרה",
}


def position_label(position_id: int) -> str:
    return MINISTER_POSITION_LABELS.get(position_id, f"תפקיד {position_id}")


def person_to_position_id(raw: Dict[str, Any]) -> Optional[str]:
    """Record key under either the v1 (PersonToPositionID) or v4 (Id) name."""
    return to_external_id(raw.get("PersonToPositionID"), raw.get("Id"))


def map_government_role(
    raw: Dict[str, Any],
    base_url: str = DEFAULT_BASE_URL,
    external_source: str = DEFAULT_SOURCE,
) -> GovernmentRoleRecord:
    record = parse_raw(RawPersonToPosition, raw, "government_role")
    external_id = to_external_id(record.PersonToPositionID, record.Id)
    legislator_id = to_external_id(record.PersonID)
    
    if not external_id or not legislator_id or record.PositionID is None:
        raise MappingError(
            "Position record missing id, person or position",
            context={"id": external_id, "person_id": legislator_id, "position_id": record.PositionID}
        )
    
    return GovernmentRoleRecord(
        external_id=external_id,
        external_source=external_source,
        legislator_external_id=legislator_id,
        position_id=record.PositionID,
        position_label=position_label(record.PositionID),
        ministry_name=clean_str(record.GovMinistryName),
        duty_desc=clean_str(record.DutyDesc),
        government_number=record.GovernmentNum,
        knesset_number=record.KnessetNum,
        start_date=parse_datetime(record.StartDate),
        end_date=parse_datetime(record.FinishDate),
        is_current=bool(record.IsCurrent),
        source_url=record_url(base_url, GOVERNMENT_ROLE_COLLECTION, external_id),
    )
