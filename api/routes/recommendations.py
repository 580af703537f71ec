"""
Personal party recommendations
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from api.dependencies import get_context
from core.context import PipelineContext
from core.exceptions import AggregatesNotComputed
from schemas.recommendation import RecommendationRequest, RecommendationResponse
from scoring import recommendation

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Recommendations"])

RETRY_AFTER_SECONDS = 3600


@router.post("/recommendations", response_model=RecommendationResponse)
async def create_recommendations(
    body: RecommendationRequest,
    request: Request,
    ctx: PipelineContext = Depends(get_context),
):
    """
    Rank active parties by legislative activity on the requested topics.

    Responds 503 when aggregates have never been computed; an empty
    result list means they were computed and nobody scored.
    """
    request_id = getattr(request.state, "request_id", "-")
    logger.info(f"[{request_id}] POST /recommendations topics={[t.id for t in body.topics]}")
    
    try:
        return await recommendation.get_recommendations(ctx, body)
    except AggregatesNotComputed as e:
        logger.warning(f"[{request_id}] {e}")
        raise HTTPException(
            status_code=503,
            detail={
                "error": "Recommendations not computed yet",
                "hint": "Run `knesset-etl aggregate` after a sync, then retry",
            },
            headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
        )
