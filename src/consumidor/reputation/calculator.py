"""Deterministic company reputation scoring from a complaint history.

Computes a 0-100 overall trust score from six weighted components, a
30-day resolution-rate trend, and qualitative badges. The calculator is pure:
it receives the company, its complaints and the evaluation instant, and never
touches the store. Fetching and persistence live in ReputationService.

Exports:
    ReputationCalculator: Metric aggregation, weighted score, trend and badges.
    SCORE_WEIGHTS: Component weights of the overall score (sum = 1.0).
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from src.consumidor.complaints.schemas import CompanyRead, ComplaintRecord
from src.consumidor.core.numeric import round_half_up, safe_ratio
from src.consumidor.reputation.schemas import (
    CategoryRanking,
    CompanyReputation,
    ReputationMetrics,
    Trend,
)

SCORE_WEIGHTS: dict[str, float] = {
    "resolution_rate": 0.35,
    "response_time": 0.25,
    "satisfaction": 0.20,
    "complaint_volume": 0.10,
    "repeat_complaints": 0.05,
    "transparency": 0.05,
}

_SECONDS_PER_DAY = 86_400


class ReputationCalculator:
    """Compute a CompanyReputation from one company's complaints.

    Normalized components (each 0-100 before weighting):
        resolution_rate:   resolution_rate * 100
        response_time:     max(0, 100 - avg_days * 3)
        satisfaction:      resolution_rate * 0.6 + speed * 0.4,
                           speed = max(0, 100 - avg_days * 2)
        complaint_volume:  max(0, 100 - min(total * 2, 100))
        repeat_complaints: max(0, 100 - repeat_rate * 100)
        transparency:      response_rate * 100

    The weighted sum is clamped to [0, 100] and rounded half up. Badges are
    assigned from the unrounded values.

    Args:
        trend_window_days: Length of each trend comparison window.
        trend_min_complaints: Below this many complaints the trend is "stable".
        trend_significance: Minimum resolution-rate difference for a non-stable
            trend.
    """

    def __init__(
        self,
        *,
        trend_window_days: int = 30,
        trend_min_complaints: int = 5,
        trend_significance: float = 0.05,
    ) -> None:
        self._trend_window = timedelta(days=trend_window_days)
        self._trend_min_complaints = trend_min_complaints
        self._trend_significance = trend_significance

    # ── Component Scorers (private static) ──────────────────────────────────

    @staticmethod
    def _resolution_days(complaints: list[ComplaintRecord]) -> list[float]:
        """Days to resolution of every RESOLVED complaint carrying a timestamp."""
        return [
            (c.resolved_at - c.created_at).total_seconds() / _SECONDS_PER_DAY
            for c in complaints
            if c.is_resolved and c.resolved_at is not None
        ]

    @staticmethod
    def _overall_score(metrics: ReputationMetrics) -> float:
        """Weighted blend of the normalized components, clamped to 0-100."""
        normalized = {
            "resolution_rate": metrics.resolution_rate * 100,
            "response_time": max(0.0, 100 - metrics.average_resolution_time * 3),
            "satisfaction": metrics.satisfaction_score,
            "complaint_volume": max(0.0, 100 - min(metrics.complaint_volume * 2, 100)),
            "repeat_complaints": max(0.0, 100 - metrics.repeat_complaint_rate * 100),
            "transparency": metrics.transparency_score * 100,
        }
        weighted = sum(normalized[k] * w for k, w in SCORE_WEIGHTS.items())
        return min(100.0, max(0.0, weighted))

    @staticmethod
    def _badges(
        overall_score: float,
        resolution_rate: float,
        average_resolution_time: float,
        has_complaints: bool,
    ) -> list[str]:
        """Qualitative labels in rule order."""
        badges: list[str] = []

        if overall_score >= 90:
            badges.append("Excelente")
        elif overall_score >= 75:
            badges.append("Bom")
        elif overall_score >= 60:
            badges.append("Regular")

        if resolution_rate >= 0.9:
            badges.append("Resolutivo")

        # A company with no complaints has nothing to be fast at.
        if has_complaints:
            if average_resolution_time <= 7:
                badges.append("Rápido")
            if average_resolution_time <= 3:
                badges.append("Muito Rápido")

        return badges

    def _trend(self, complaints: list[ComplaintRecord], now: datetime) -> Trend:
        """Compare the recent window's resolution rate to the one before it."""
        if len(complaints) < self._trend_min_complaints:
            return "stable"

        recent_start = now - self._trend_window
        previous_start = recent_start - self._trend_window

        recent = [c for c in complaints if c.created_at >= recent_start]
        previous = [
            c for c in complaints if previous_start <= c.created_at < recent_start
        ]

        recent_rate = safe_ratio(sum(c.is_resolved for c in recent), len(recent))
        previous_rate = safe_ratio(sum(c.is_resolved for c in previous), len(previous))
        difference = recent_rate - previous_rate

        if difference > self._trend_significance:
            return "improving"
        if difference < -self._trend_significance:
            return "declining"
        return "stable"

    # ── Public API ──────────────────────────────────────────────────────────

    def compute_metrics(self, complaints: list[ComplaintRecord]) -> ReputationMetrics:
        """Aggregate the raw (unrounded) metrics of a complaint history."""
        total = len(complaints)
        resolved = sum(1 for c in complaints if c.is_resolved)
        responded = sum(1 for c in complaints if c.updates)

        resolution_days = self._resolution_days(complaints)
        average_days = safe_ratio(sum(resolution_days), len(resolution_days))

        resolution_rate = safe_ratio(resolved, total)
        speed_score = max(0.0, 100 - average_days * 2)

        return ReputationMetrics(
            resolution_rate=resolution_rate,
            average_resolution_time=average_days,
            satisfaction_score=resolution_rate * 0.6 + speed_score * 0.4,
            complaint_volume=total,
            repeat_complaint_rate=0.0,
            transparency_score=safe_ratio(responded, total),
        )

    def calculate(
        self,
        company: CompanyRead,
        complaints: list[ComplaintRecord],
        *,
        now: datetime,
        category_ranking: Optional[CategoryRanking] = None,
    ) -> CompanyReputation:
        """Build the reputation snapshot of ``company`` as of ``now``.

        Args:
            company: Company being scored.
            complaints: Its full complaint history (with updates).
            now: Evaluation instant; anchors the trend windows and last_updated.
            category_ranking: Pre-computed peer ranking, if any.

        Returns:
            CompanyReputation with rounded output fields.
        """
        metrics = self.compute_metrics(complaints)
        overall = self._overall_score(metrics)
        resolved = sum(1 for c in complaints if c.is_resolved)

        return CompanyReputation(
            company_id=company.id,
            company_name=company.name,
            overall_score=round_half_up(overall),
            total_complaints=metrics.complaint_volume,
            resolved_complaints=resolved,
            pending_complaints=metrics.complaint_volume - resolved,
            average_resolution_time=round_half_up(metrics.average_resolution_time),
            response_rate=round_half_up(metrics.transparency_score * 100),
            satisfaction_score=round_half_up(metrics.satisfaction_score),
            trend=self._trend(complaints, now),
            badges=self._badges(
                overall,
                metrics.resolution_rate,
                metrics.average_resolution_time,
                metrics.complaint_volume > 0,
            ),
            category_ranking=category_ranking,
            last_updated=now,
        )


__all__ = ["ReputationCalculator", "SCORE_WEIGHTS"]
