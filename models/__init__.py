"""
SQLAlchemy ORM models for database tables.

Models:
    base: Declarative base, run status enum and column mixins
    sync_run: Ingestion run tracking (status, counters, errors)
    snapshot: Append-only raw payload snapshots with SHA-256 hash
    checkpoint: Resumable paging cursor per (source, collection)
    party, legislator, bill, committee, government_role, vote:
        Domain entities keyed by (external_id, external_source)
    source_link: Provenance links for user-facing facts
    aggregate: Party × topic activity scores

Usage:
    from models import Party, Legislator, Bill, SyncRun
    from models.base import RunStatus
"""

from models.base import Base, RunStatus
from models.sync_run import SyncRun
from models.snapshot import RawSnapshot
from models.checkpoint import SyncCheckpoint
from models.party import Party, PartyMembership
from models.legislator import Legislator
from models.bill import Bill, BillStage, LegislatorBillRole
from models.committee import Committee, CommitteeMembership
from models.government_role import GovernmentRole
from models.vote import Vote, VoteRecord
from models.source_link import SourceLink
from models.aggregate import PartyTopicAggregate

__all__ = [
    "Base",
    "RunStatus",
    "SyncRun",
    "RawSnapshot",
    "SyncCheckpoint",
    "Party",
    "PartyMembership",
    "Legislator",
    "Bill",
    "BillStage",
    "LegislatorBillRole",
    "Committee",
    "CommitteeMembership",
    "GovernmentRole",
    "Vote",
    "VoteRecord",
    "SourceLink",
    "PartyTopicAggregate",
]
