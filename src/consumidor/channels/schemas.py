"""Pydantic data models for channel recommendations."""

from __future__ import annotations

from pydantic import BaseModel

from src.consumidor.channels.effectiveness import ChannelEffectiveness


class ChannelRecommendation(BaseModel):
    """A scored and explained channel.

    Attributes:
        channel: Channel display name.
        score: Integer suitability score. Not clamped: affinity can push it
            above 100.
        explanation: User-facing Portuguese explanation ("" for unknown channels).
        effectiveness: Snapshot of the channel's reference figures.
        recommended: Whether the score reached the recommendation threshold.
    """

    channel: str
    score: int
    explanation: str
    effectiveness: ChannelEffectiveness
    recommended: bool
