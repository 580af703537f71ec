"""
Request and response models for party recommendations
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

ConfidenceLevel = Literal["high", "medium", "low"]


class TopicWeight(BaseModel):
    id: str = Field(..., min_length=1)
    weight: int = Field(..., ge=1, le=5)


class RecommendationRequest(BaseModel):
    """
    User topic weights.

    ideological_preference is accepted and echoed for transparency only;
    it never affects scoring.
    """
    topics: List[TopicWeight] = Field(..., min_length=1, max_length=10)
    free_text: Optional[str] = Field(None, max_length=500)
    ideological_preference: Optional[Literal["right", "center", "left", "none"]] = None


class SourceRef(BaseModel):
    label: str
    url: str
    external_source: str
    external_id: Optional[str] = None
    
    class Config:
        from_attributes = True


class PartySummary(BaseModel):
    id: str
    name: str
    abbreviation: Optional[str] = None
    seat_count: Optional[int] = None
    sources: List[SourceRef] = Field(default_factory=list)


class TopicBreakdown(BaseModel):
    topic_id: str
    label: str
    weight: int
    normalized_score: float = Field(..., ge=0, le=1)
    bill_count: int = Field(..., ge=0)


class HighlightBill(BaseModel):
    bill_id: str
    title: str
    status: str
    topic: str
    role: str
    sources: List[SourceRef]


class RecommendationResult(BaseModel):
    rank: int = Field(..., ge=1)
    party: PartySummary
    personal_score: float = Field(..., ge=0, le=100)
    confidence: ConfidenceLevel
    topic_breakdown: List[TopicBreakdown]
    highlights: List[HighlightBill]


class FreeTextSuggestion(BaseModel):
    matched_keyword: str
    suggested_topic_id: str
    label: str


class RecommendationMeta(BaseModel):
    parties_evaluated: int
    topics_requested: int
    data_as_of: Optional[datetime] = None
    methodology_url: str
    warning: str


class RecommendationResponse(BaseModel):
    results: List[RecommendationResult]
    free_text_suggestions: Optional[List[FreeTextSuggestion]] = None
    meta: RecommendationMeta
