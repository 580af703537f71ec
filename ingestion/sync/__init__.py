"""
Entity sync stages and the orchestrator that runs them.
"""

from ingestion.sync.base import IdMaps, Outcome, SyncStage, run_bounded
from ingestion.sync.orchestrator import STAGE_ORDER, run_sync
from ingestion.sync.run_tracker import RunResult, RunTracker
from ingestion.sync.vote_records import sync_vote_records

__all__ = [
    "IdMaps",
    "Outcome",
    "SyncStage",
    "run_bounded",
    "STAGE_ORDER",
    "run_sync",
    "RunResult",
    "RunTracker",
    "sync_vote_records",
]
