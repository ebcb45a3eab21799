"""Pydantic data models for company reputation projections.

CompanyReputation is a derived snapshot: it is recomputed on demand from the
complaint history and can always be discarded and regenerated. Its field set
matches the upsert shape of the optional reputation store.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from src.consumidor.complaints.schemas import CompanyRead, ComplaintRecord

Trend = Literal["improving", "stable", "declining"]


class CategoryRanking(BaseModel):
    """A company's position among same-category peers over the ranking window.

    Attributes:
        category: Category the cohort was drawn from.
        rank: 1-based position after sorting peers by resolution score.
        total_companies: Cohort size (always >= 2).
    """

    category: str
    rank: int = Field(ge=1)
    total_companies: int = Field(ge=2)


class ReputationMetrics(BaseModel):
    """Raw (un-normalized) metrics that feed the overall score blend.

    Attributes:
        resolution_rate: Resolved / total, 0.0-1.0.
        average_resolution_time: Mean days to resolution (resolved only).
        satisfaction_score: Blended resolution/speed metric.
        complaint_volume: Total complaint count.
        repeat_complaint_rate: Share of repeat complaints. Always 0.0 until
            repeat detection exists.
        transparency_score: Response rate, 0.0-1.0.
    """

    resolution_rate: float = 0.0
    average_resolution_time: float = 0.0
    satisfaction_score: float = 0.0
    complaint_volume: int = 0
    repeat_complaint_rate: float = 0.0
    transparency_score: float = 0.0


class CompanyReputation(BaseModel):
    """Reputation snapshot for a single company.

    Attributes:
        company_id: Company this snapshot summarizes.
        company_name: Display name of the company.
        overall_score: Weighted 0-100 trust score.
        total_complaints: Full-history complaint count.
        resolved_complaints: Complaints with status RESOLVED.
        pending_complaints: total_complaints - resolved_complaints.
        average_resolution_time: Mean days to resolution, rounded.
        response_rate: Percentage (0-100) of complaints with >= 1 update.
        satisfaction_score: Rounded resolution/speed blend.
        trend: 30-day vs prior-30-day resolution rate classification.
        badges: Qualitative labels, in rule order.
        category_ranking: Rank among category peers, if meaningful.
        last_updated: When the snapshot was computed.
    """

    company_id: str
    company_name: str
    overall_score: int = Field(ge=0, le=100)
    total_complaints: int = Field(ge=0)
    resolved_complaints: int = Field(ge=0)
    pending_complaints: int = Field(ge=0)
    average_resolution_time: int = Field(ge=0)
    response_rate: int = Field(ge=0, le=100)
    satisfaction_score: int
    trend: Trend = "stable"
    badges: list[str] = Field(default_factory=list)
    category_ranking: Optional[CategoryRanking] = None
    last_updated: datetime


class ReputationHistoryPoint(BaseModel):
    """One dated point of a company's reputation history."""

    company_id: str
    date: datetime
    score: int
    total_complaints: int = 0
    resolved_complaints: int = 0


class CompanyStatistics(BaseModel):
    """Complaint counts over a company's full history.

    Attributes:
        total_complaints: All complaints filed against the company.
        resolved_complaints: Complaints with status RESOLVED.
        pending_complaints: total_complaints - resolved_complaints.
        resolution_rate: resolved / total, 0.0-1.0 (0.0 without complaints).
    """

    total_complaints: int = 0
    resolved_complaints: int = 0
    pending_complaints: int = 0
    resolution_rate: float = 0.0


class CompanyDetails(BaseModel):
    """Company profile: reputation, statistics, distributions, latest complaints."""

    company: CompanyRead
    reputation: CompanyReputation
    statistics: CompanyStatistics
    status_distribution: dict[str, int] = Field(default_factory=dict)
    category_distribution: dict[str, int] = Field(default_factory=dict)
    recent_complaints: list[ComplaintRecord] = Field(default_factory=list)
