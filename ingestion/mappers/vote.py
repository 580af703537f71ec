"""
Plenum vote headers and per-legislator ballots.

Result codes (KNS_PlenumVoteResult.ResultCode):
    7 = for, 8 = against, 9 = abstain,
    11 = voted by show of hands (counted as for),
    anything else = present or absent without a ballot
"""

from typing import Any, Dict, Optional
from urllib.parse import quote, urlencode

from ingestion.mappers.common import (
    DEFAULT_BASE_URL, clean_str, first_present, parse_datetime, parse_raw, require_id,
    to_external_id,
)
from schemas.canonical import BallotRecord, VoteRecordHeader
from schemas.raw import RawVoteHeader, RawVoteResult
from core.exceptions import MappingError

VOTE_CANDIDATES = ["KNS_PlenumVote"]
VOTE_RESULT_CANDIDATES = ["KNS_PlenumVoteResult"]

VOTE_SOURCE = "knesset_v4"

RESULT_CODES = {7: "yes", 8: "no", 9: "abstain", 11: "yes"}

PASSED_PATTERNS = ["להעביר", "לאשר", "לכלול", "לאמץ", "להעלות", "בעד", "אושר", "עבר"]
REJECTED_PATTERNS = ["לדחות", "נגד", "נדחה"]


def map_vote_value(result_code: Optional[int]) -> str:
    return RESULT_CODES.get(result_code, "did_not_vote")


def derive_vote_result(
    for_desc: Optional[str],
    against_desc: Optional[str],
    yes_count: Optional[int] = None,
    no_count: Optional[int] = None,
) -> str:
    """
    Counts decide when both are present (a tie is unknown); otherwise
    the wording of the "for" option is matched against known patterns.
    """
    if yes_count is not None and no_count is not None:
        if yes_count > no_count:
            return "passed"
        if no_count > yes_count:
            return "rejected"
        return "unknown"
    
    for_desc = for_desc or ""
    against_desc = against_desc or ""
    
    if not for_desc and not against_desc:
        return "unknown"
    if for_desc == against_desc:
        return "unknown"
    
    text = for_desc.lower()
    if any(pattern in text for pattern in PASSED_PATTERNS):
        return "passed"
    if any(pattern in text for pattern in REJECTED_PATTERNS):
        return "rejected"
    return "unknown"


def vote_url(base_url: str, external_id: str) -> str:
    """Feed query for one vote header, percent-encoded."""
    query = urlencode({"$filter": f"Id eq {external_id}"}, quote_via=quote, safe="$")
    return f"{base_url.rstrip('/')}/KNS_PlenumVote?{query}"


def map_vote(
    raw: Dict[str, Any],
    base_url: str = DEFAULT_BASE_URL,
    external_source: str = VOTE_SOURCE,
) -> VoteRecordHeader:
    record = parse_raw(RawVoteHeader, raw, "vote")
    external_id = require_id("vote", record.Id)
    
    return VoteRecordHeader(
        external_id=external_id,
        external_source=external_source,
        title=clean_str(first_present(record.VoteTitle, record.VoteSubject)) or "Unknown",
        vote_date=parse_datetime(record.VoteDateTime),
        knesset_number=record.KnessetNum,
        result=derive_vote_result(
            record.ForOptionDesc, record.AgainstOptionDesc, record.TotalFor, record.TotalAgainst
        ),
        yes_count=record.TotalFor,
        no_count=record.TotalAgainst,
        abstain_count=record.TotalAbstain,
        for_option_desc=clean_str(record.ForOptionDesc),
        against_option_desc=clean_str(record.AgainstOptionDesc),
        source_url=vote_url(base_url, external_id),
    )


def map_ballot(raw: Dict[str, Any]) -> BallotRecord:
    record = parse_raw(RawVoteResult, raw, "vote_record")
    vote_id = to_external_id(record.VoteID)
    legislator_id = to_external_id(record.MkId)
    
    if not vote_id or not legislator_id:
        raise MappingError(
            "Vote result record missing vote or member id",
            context={"vote_id": vote_id, "mk_id": legislator_id}
        )
    
    return BallotRecord(
        vote_external_id=vote_id,
        legislator_external_id=legislator_id,
        value=map_vote_value(record.ResultCode),
    )
