"""
Pydantic schemas for feed records and API payloads.

Schemas:
    raw: All-optional shapes of upstream feed records
    canonical: Validated records produced by the mappers
    recommendation: Recommendation request and response models
    api: Health and run listing responses

Usage:
    from schemas.canonical import PartyRecord, BillRecord
    from schemas.recommendation import RecommendationRequest
    from schemas.api import HealthCheckResponse, RunSummary

Validation:
    Raw schemas accept anything the feed sends and keep unknown fields;
    canonical schemas enforce required fields. Request schemas bound topic
    weights to 1..5 and a request to at most ten topics.
"""

__all__ = [
    "raw",
    "canonical",
    "recommendation",
    "api",
]
