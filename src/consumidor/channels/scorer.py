"""Deterministic channel scoring, explanation, and recommendation.

Scores external resolution channels for a complaint from the static
effectiveness table, the complaint priority and the category affinity
multipliers, then explains each score in user-facing Portuguese.

Nothing here raises on degraded input: unknown channels score 0 with an
empty explanation, and unknown categories or priorities fall back to the
generic candidate list with no adjustment.

Exports:
    ChannelScorer: Scores, explains, recommends and ranks channels.
"""

from __future__ import annotations

import structlog

from src.consumidor.channels.effectiveness import (
    CATEGORY_AFFINITY,
    CATEGORY_CHANNELS,
    CHANNEL_EFFECTIVENESS,
    DEFAULT_CHANNELS,
    ESCALATION_CHANNELS,
    SPECIALIZATIONS,
    UNKNOWN_EFFECTIVENESS,
    ChannelEffectiveness,
)
from src.consumidor.channels.schemas import ChannelRecommendation
from src.consumidor.complaints.schemas import ComplaintCategory, ComplaintPriority
from src.consumidor.core.numeric import round_half_up

logger = structlog.get_logger(__name__)


class ChannelScorer:
    """Score and rank external channels for a complaint's category and priority.

    Score computation:
        base = success_rate * 100
        URGENT: +20 if avg_time < 60 else -10
        HIGH:   +15 if avg_time < 90 else -5
        MEDIUM/LOW: no adjustment
        result = round_half_up(base * category affinity)

    The result is NOT clamped to 100; a specialist channel with a strong
    affinity can exceed it.

    Args:
        recommendation_threshold: Minimum score for ``recommended=True``.
    """

    def __init__(self, *, recommendation_threshold: int = 70) -> None:
        self._recommendation_threshold = recommendation_threshold

    # ── Component Scorers (private static) ──────────────────────────────────

    @staticmethod
    def _priority_adjustment(avg_time: int, priority: ComplaintPriority | None) -> float:
        """Speed bonus or penalty for time-sensitive priorities."""
        if priority is ComplaintPriority.URGENT:
            return 20.0 if avg_time < 60 else -10.0
        if priority is ComplaintPriority.HIGH:
            return 15.0 if avg_time < 90 else -5.0
        return 0.0

    @staticmethod
    def _affinity(channel: str, category: ComplaintCategory | None) -> float:
        if category is None:
            return 1.0
        return CATEGORY_AFFINITY.get(category, {}).get(channel, 1.0)

    @staticmethod
    def _speed_phrase(avg_time: int) -> str:
        if avg_time <= 30:
            return ", tempo médio de resolução rápido (até 30 dias)"
        if avg_time <= 90:
            return ", tempo médio de resolução moderado (30-90 dias)"
        return ", tempo médio de resolução mais longo (90+ dias)"

    @staticmethod
    def _priority_caveat(avg_time: int, priority: ComplaintPriority | None) -> str:
        if priority is not ComplaintPriority.URGENT:
            return ""
        if avg_time > 90:
            return ". Não recomendado para casos urgentes devido ao tempo de resposta"
        if avg_time <= 30:
            return ". Excelente para casos urgentes"
        return ""

    # ── Public API ──────────────────────────────────────────────────────────

    def score_channel(self, channel: str, category: str, priority: str) -> int:
        """Compute the integer suitability score of one channel.

        Args:
            channel: Channel display name.
            category: Complaint category string.
            priority: Complaint priority string.

        Returns:
            Integer score; 0 for channels absent from the effectiveness table.
        """
        effectiveness = CHANNEL_EFFECTIVENESS.get(channel)
        if effectiveness is None:
            return 0

        score = effectiveness.success_rate * 100
        score += self._priority_adjustment(
            effectiveness.avg_time, ComplaintPriority.parse(priority)
        )
        score *= self._affinity(channel, ComplaintCategory.parse(category))
        return round_half_up(score)

    def explain_channel(
        self, channel: str, score: int, category: str, priority: str
    ) -> str:
        """Build the Portuguese explanation for a scored channel.

        ``score`` is accepted for interface symmetry with ``score_channel``
        but does not change the text.
        """
        effectiveness = CHANNEL_EFFECTIVENESS.get(channel)
        if effectiveness is None:
            return ""

        parsed_category = ComplaintCategory.parse(category)
        parsed_priority = ComplaintPriority.parse(priority)

        explanation = (
            f"{channel}: Taxa de sucesso de "
            f"{round_half_up(effectiveness.success_rate * 100)}%"
        )
        explanation += self._speed_phrase(effectiveness.avg_time)

        specialization = SPECIALIZATIONS.get((parsed_category, channel))
        if specialization:
            explanation += f". {specialization}"

        explanation += self._priority_caveat(effectiveness.avg_time, parsed_priority)
        return explanation

    def recommend_channels(self, category: str, priority: str) -> list[str]:
        """Candidate channels for a category and priority, unranked.

        Unknown categories get the generic list. HIGH and URGENT complaints
        add the escalation channels. Duplicates keep their first position.
        Callers must pass the result through ``rank_and_explain`` to order it.
        """
        parsed_category = ComplaintCategory.parse(category)
        candidates = list(
            CATEGORY_CHANNELS[parsed_category] if parsed_category else DEFAULT_CHANNELS
        )

        if ComplaintPriority.parse(priority) in (
            ComplaintPriority.HIGH,
            ComplaintPriority.URGENT,
        ):
            candidates.extend(ESCALATION_CHANNELS)

        return list(dict.fromkeys(candidates))

    def rank_and_explain(
        self, channels: list[str], category: str, priority: str
    ) -> list[ChannelRecommendation]:
        """Score, explain and sort channels by score descending.

        The sort is stable: equal scores keep their input order.
        """
        recommendations: list[ChannelRecommendation] = []
        for channel in channels:
            score = self.score_channel(channel, category, priority)
            effectiveness: ChannelEffectiveness = CHANNEL_EFFECTIVENESS.get(
                channel, UNKNOWN_EFFECTIVENESS
            )
            recommendations.append(
                ChannelRecommendation(
                    channel=channel,
                    score=score,
                    explanation=self.explain_channel(channel, score, category, priority),
                    effectiveness=effectiveness,
                    recommended=score >= self._recommendation_threshold,
                )
            )

        ranked = sorted(recommendations, key=lambda r: -r.score)
        logger.debug(
            "channel_scorer.ranked",
            category=category,
            priority=priority,
            channels=[r.channel for r in ranked],
        )
        return ranked


__all__ = ["ChannelScorer"]
