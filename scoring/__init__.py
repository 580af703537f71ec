"""
Party × topic aggregation and personal recommendation scoring.

Modules:
    constants: Topic catalogue, status points, role weights, keyword table
    aggregation: Raw activity score per (party, topic), upserted in batches
    recommendation: Normalization, weighted ranking and sourced highlights
"""

from scoring.aggregation import run_aggregate, compute_bill_points, role_weight, aggregate_rows
from scoring.recommendation import (
    get_recommendations,
    normalize_scores,
    compute_personal_score,
    confidence_tier,
    map_free_text,
)

__all__ = [
    "run_aggregate",
    "compute_bill_points",
    "role_weight",
    "aggregate_rows",
    "get_recommendations",
    "normalize_scores",
    "compute_personal_score",
    "confidence_tier",
    "map_free_text",
]
