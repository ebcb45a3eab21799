"""REST API endpoint for channel recommendations by category and priority."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request, status
from pydantic import BaseModel, Field

from src.consumidor.channels.schemas import ChannelRecommendation
from src.consumidor.complaints.schemas import ComplaintCategory, ComplaintPriority
from src.consumidor.core.monitoring import record_channel_recommendation

router = APIRouter(prefix="/channels", tags=["channels"])


class ChannelRecommendationsResponse(BaseModel):
    """Candidate channels and their ranked analysis."""

    category: str
    priority: str
    recommended_channels: list[str] = Field(default_factory=list)
    channel_analysis: list[ChannelRecommendation] = Field(default_factory=list)


def _get_channel_scorer(request: Request) -> Any:
    """Retrieve ChannelScorer from app.state, 503 if not available."""
    scorer = getattr(request.app.state, "channel_scorer", None)
    if scorer is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Channel scorer not initialized",
        )
    return scorer


@router.get("/recommendations", response_model=ChannelRecommendationsResponse)
async def get_channel_recommendations(
    request: Request,
    category: str = Query(..., min_length=1, max_length=50),
    priority: str = Query(default=ComplaintPriority.MEDIUM.value, max_length=20),
) -> ChannelRecommendationsResponse:
    """Recommend and rank channels. Unknown categories get the generic list."""
    scorer = _get_channel_scorer(request)

    candidates = scorer.recommend_channels(category, priority)
    analysis = scorer.rank_and_explain(candidates, category, priority)

    # Bounded label values: unknown inputs collapse to "other"
    parsed_category = ComplaintCategory.parse(category)
    parsed_priority = ComplaintPriority.parse(priority)
    record_channel_recommendation(
        parsed_category.value if parsed_category else "other",
        parsed_priority.value if parsed_priority else "other",
    )

    return ChannelRecommendationsResponse(
        category=category,
        priority=priority,
        recommended_channels=candidates,
        channel_analysis=analysis,
    )
