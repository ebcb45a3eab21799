"""Pydantic data models for complaint distribution plans and results."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from src.consumidor.channels.schemas import ChannelRecommendation


class AdvisorySuggestion(BaseModel):
    """Optional output of a mediation advisor. Never affects channel scores.

    Attributes:
        recommended_channels: Channels the advisor would pick.
        success_probability: Estimated success percentage (0-100).
        estimated_resolution_time: Free-text estimate, e.g. "15 dias".
        similar_cases: Short descriptions of comparable resolved cases.
        reasoning: Free-text rationale.
    """

    recommended_channels: list[str] = Field(default_factory=list)
    success_probability: Optional[float] = Field(default=None, ge=0, le=100)
    estimated_resolution_time: Optional[str] = None
    similar_cases: list[str] = Field(default_factory=list)
    reasoning: Optional[str] = None


class DistributionStrategy(BaseModel):
    reasoning: str
    estimated_success_rate: float
    estimated_resolution_time: str


class DistributionPlan(BaseModel):
    """Ranked channel plan for a complaint, before anything is submitted.

    Attributes:
        complaint_id: Complaint the plan was built for.
        category: Complaint category.
        priority: Complaint priority.
        company_name: Name of the company complained about.
        recommended_channels: Candidate channels in recommendation order.
        channel_analysis: Candidates scored and sorted by score.
        primary_channels: Top three channels of the analysis.
        secondary_channels: Remaining channels of the analysis.
        advisory: Advisor output, when one was available and succeeded.
        strategy: Reasoning and headline estimates.
    """

    complaint_id: str
    category: str
    priority: str
    company_name: str
    recommended_channels: list[str]
    channel_analysis: list[ChannelRecommendation]
    primary_channels: list[str]
    secondary_channels: list[str]
    advisory: Optional[AdvisorySuggestion] = None
    strategy: DistributionStrategy


class SubmissionResult(BaseModel):
    """Outcome of submitting a complaint to one external channel."""

    channel: str
    success: bool
    protocol: Optional[str] = None
    tracking_url: Optional[str] = None
    error: Optional[str] = None
    submitted_at: datetime


class DistributionResult(BaseModel):
    """Outcome of distributing a complaint to the selected channels.

    Attributes:
        complaint_id: Complaint that was distributed.
        selected_channels: Channels chosen by the user, as given.
        channel_analysis: Selected channels scored and sorted by score.
        total_channels: Number of selected channels.
        recommended_channels: How many selected channels are recommended.
        estimated_resolution_time: Fastest average resolution (days) among
            the selected channels.
        submissions: Per-channel submission outcomes (empty if the gateway failed).
        successful_submissions: Count of successful submissions.
        tracking_urls: Tracking links returned by the channels.
        next_steps: User-facing follow-up guidance.
    """

    complaint_id: str
    selected_channels: list[str]
    channel_analysis: list[ChannelRecommendation]
    total_channels: int
    recommended_channels: int
    estimated_resolution_time: int
    submissions: list[SubmissionResult] = Field(default_factory=list)
    successful_submissions: int = 0
    tracking_urls: list[str] = Field(default_factory=list)
    next_steps: list[str] = Field(default_factory=list)
