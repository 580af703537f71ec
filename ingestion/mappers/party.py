from typing import Any, Dict

from ingestion.mappers.common import (
    DEFAULT_BASE_URL, DEFAULT_SOURCE, clean_str, first_present, parse_datetime,
    parse_raw, record_url, require_id,
)
from schemas.canonical import PartyRecord
from schemas.raw import RawFaction

PARTY_CANDIDATES = ["KNS_Faction", "KnssFaction", "Faction", "FactionMember", "ParliamentFaction"]


def map_party(
    raw: Dict[str, Any],
    base_url: str = DEFAULT_BASE_URL,
    external_source: str = DEFAULT_SOURCE,
) -> PartyRecord:
    """Faction record → PartyRecord. A missing IsCurrent means active."""
    record = parse_raw(RawFaction, raw, "party")
    external_id = require_id("party", record.FactionID, record.ID, record.Id)
    
    return PartyRecord(
        external_id=external_id,
        external_source=external_source,
        name=clean_str(first_present(record.FactionName, record.Name)) or "Unknown",
        abbreviation=clean_str(record.ShortName),
        knesset_number=record.KnessetNum,
        seat_count=record.CountOfMembers,
        is_active=True if record.IsCurrent is None else bool(record.IsCurrent),
        last_changed_at=parse_datetime(first_present(record.LastUpdatedDate, record.StartDate)),
        source_url=record_url(base_url, "KNS_Faction", external_id),
    )
