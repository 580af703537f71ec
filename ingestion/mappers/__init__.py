"""
Pure mapping functions: raw feed record → canonical record.

Every mapper raises MappingError for a record it cannot translate; the
error is fatal only for that record.
"""

from ingestion.mappers.party import map_party, PARTY_CANDIDATES
from ingestion.mappers.legislator import (
    map_legislator, map_membership, LEGISLATOR_CANDIDATES, MEMBERSHIP_CANDIDATES,
)
from ingestion.mappers.bill import (
    map_bill, map_bill_role, map_bill_stage, map_status, infer_topic,
    BILL_CANDIDATES, BILL_INITIATOR_CANDIDATES, BILL_STAGE_CANDIDATES,
)
from ingestion.mappers.committee import (
    map_committee, map_committee_membership, COMMITTEE_CANDIDATES, COMMITTEE_MEMBER_CANDIDATES,
)
from ingestion.mappers.government_role import map_government_role, MINISTER_POSITION_IDS
from ingestion.mappers.vote import (
    map_vote, map_ballot, map_vote_value, derive_vote_result,
    VOTE_CANDIDATES, VOTE_RESULT_CANDIDATES,
)

__all__ = [
    "map_party",
    "map_legislator",
    "map_membership",
    "map_bill",
    "map_bill_role",
    "map_bill_stage",
    "map_status",
    "infer_topic",
    "map_committee",
    "map_committee_membership",
    "map_government_role",
    "map_vote",
    "map_ballot",
    "map_vote_value",
    "derive_vote_result",
    "PARTY_CANDIDATES",
    "LEGISLATOR_CANDIDATES",
    "MEMBERSHIP_CANDIDATES",
    "BILL_CANDIDATES",
    "BILL_INITIATOR_CANDIDATES",
    "BILL_STAGE_CANDIDATES",
    "COMMITTEE_CANDIDATES",
    "COMMITTEE_MEMBER_CANDIDATES",
    "MINISTER_POSITION_IDS",
    "VOTE_CANDIDATES",
    "VOTE_RESULT_CANDIDATES",
]
