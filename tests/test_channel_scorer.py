"""Deterministic scoring tests for ChannelScorer.

Uses the real ChannelScorer (no mocking) since scoring is pure deterministic
Python over the static effectiveness table.

Covers:
    - Anatel / telecom / URGENT -> 80 - 10 = 70, x1.3 = 91
    - Affinity can push scores above 100 (no clamp)
    - Half-up rounding of affinity products
    - Priority monotonicity for channels faster than 60 days
    - Unknown channel -> 0 score, "" explanation, zeroed effectiveness
    - Explanation text: speed buckets, specializations, urgent caveats
    - recommend_channels: category lists, escalation, dedup, unknown category
    - rank_and_explain: descending, stable on ties, threshold flag
"""

from __future__ import annotations

import pytest

from src.consumidor.channels.effectiveness import (
    CATEGORY_CHANNELS,
    CHANNEL_EFFECTIVENESS,
    DEFAULT_CHANNELS,
)
from src.consumidor.channels.scorer import ChannelScorer
from src.consumidor.complaints.schemas import ComplaintCategory


@pytest.fixture
def scorer() -> ChannelScorer:
    return ChannelScorer()


# -- Test Class: score_channel -------------------------------------------------


class TestScoreChannel:
    def test_anatel_telecom_urgent(self, scorer: ChannelScorer) -> None:
        """base 80, avg_time 60 is not < 60 so -10 -> 70, x1.3 telecom = 91."""
        assert scorer.score_channel("Anatel", "telecom", "URGENT") == 91

    def test_medium_priority_has_no_adjustment(self, scorer: ChannelScorer) -> None:
        assert scorer.score_channel("Reclame Aqui", "retail", "MEDIUM") == 65
        assert scorer.score_channel("Ouvidoria da Empresa", "retail", "LOW") == 55

    def test_urgent_bonus_for_fast_channel(self, scorer: ChannelScorer) -> None:
        """Reclame Aqui avg 30 < 60 -> 65 + 20 = 85."""
        assert scorer.score_channel("Reclame Aqui", "retail", "URGENT") == 85

    def test_high_penalty_for_slow_channel(self, scorer: ChannelScorer) -> None:
        """Ministério Público avg 180 >= 90 -> 90 - 5 = 85."""
        assert scorer.score_channel("Ministério Público", "retail", "HIGH") == 85

    def test_score_is_not_clamped(self, scorer: ChannelScorer) -> None:
        """ANS health HIGH: (78 + 15) x 1.3 = 120.9 -> 121."""
        assert scorer.score_channel("ANS", "health", "HIGH") == 121
        # Banco Central banking HIGH: (85 - 5) x 1.4 = 112
        assert scorer.score_channel("Banco Central", "banking", "HIGH") == 112

    def test_half_up_rounding(self, scorer: ChannelScorer) -> None:
        """Procon telecom MEDIUM: 75 x 1.1 = 82.5 -> 83."""
        assert scorer.score_channel("Procon", "telecom", "MEDIUM") == 83

    def test_affinity_only_applies_to_matching_category(self, scorer: ChannelScorer) -> None:
        assert scorer.score_channel("Anatel", "banking", "MEDIUM") == 80
        assert scorer.score_channel("Anatel", "telecom", "MEDIUM") == 104

    def test_unknown_channel_scores_zero(self, scorer: ChannelScorer) -> None:
        assert scorer.score_channel("Consumidor.gov", "telecom", "URGENT") == 0
        assert scorer.score_channel("Ouvidoria do Banco", "banking", "HIGH") == 0

    def test_unknown_category_and_priority_degrade(self, scorer: ChannelScorer) -> None:
        assert scorer.score_channel("Procon", "imobiliario", "CRITICAL") == 75

    @pytest.mark.parametrize(
        "channel",
        [name for name, eff in CHANNEL_EFFECTIVENESS.items() if eff.avg_time < 60],
    )
    def test_priority_monotonic_for_fast_channels(
        self, scorer: ChannelScorer, channel: str
    ) -> None:
        urgent = scorer.score_channel(channel, "retail", "URGENT")
        high = scorer.score_channel(channel, "retail", "HIGH")
        medium = scorer.score_channel(channel, "retail", "MEDIUM")
        assert urgent >= high >= medium

    def test_deterministic(self, scorer: ChannelScorer) -> None:
        scores = {scorer.score_channel("ANS", "health", "URGENT") for _ in range(5)}
        assert len(scores) == 1


# -- Test Class: explain_channel -----------------------------------------------


class TestExplainChannel:
    def test_specialized_moderate_channel(self, scorer: ChannelScorer) -> None:
        text = scorer.explain_channel("Anatel", 91, "telecom", "URGENT")
        assert text == (
            "Anatel: Taxa de sucesso de 80%, tempo médio de resolução moderado "
            "(30-90 dias). Especializado em regulamentação de telecomunicações"
        )

    def test_fast_channel_urgent_affirmation(self, scorer: ChannelScorer) -> None:
        text = scorer.explain_channel("Ouvidoria da Empresa", 75, "retail", "URGENT")
        assert text == (
            "Ouvidoria da Empresa: Taxa de sucesso de 55%, tempo médio de "
            "resolução rápido (até 30 dias). Excelente para casos urgentes"
        )

    def test_slow_channel_urgent_warning(self, scorer: ChannelScorer) -> None:
        text = scorer.explain_channel("MEC", 81, "education", "URGENT")
        assert text == (
            "MEC: Taxa de sucesso de 70%, tempo médio de resolução mais longo "
            "(90+ dias). Ministério responsável pela educação. Não recomendado "
            "para casos urgentes devido ao tempo de resposta"
        )

    def test_no_caveat_outside_urgent(self, scorer: ChannelScorer) -> None:
        text = scorer.explain_channel("MEC", 91, "education", "HIGH")
        assert "urgentes" not in text

    def test_no_specialization_outside_affinity_pair(self, scorer: ChannelScorer) -> None:
        text = scorer.explain_channel("Banco Central", 85, "telecom", "MEDIUM")
        assert text == (
            "Banco Central: Taxa de sucesso de 85%, tempo médio de resolução "
            "moderado (30-90 dias)"
        )

    def test_unknown_channel_has_empty_explanation(self, scorer: ChannelScorer) -> None:
        assert scorer.explain_channel("Consumidor.gov", 0, "telecom", "URGENT") == ""


# -- Test Class: recommend_channels --------------------------------------------


class TestRecommendChannels:
    def test_every_category_starts_with_procon(self, scorer: ChannelScorer) -> None:
        for category in ComplaintCategory:
            assert scorer.recommend_channels(category.value, "MEDIUM")[0] == "Procon"
        assert set(CATEGORY_CHANNELS) == set(ComplaintCategory)

    def test_telecom_medium(self, scorer: ChannelScorer) -> None:
        assert scorer.recommend_channels("telecom", "MEDIUM") == [
            "Procon",
            "Anatel",
            "Reclame Aqui",
            "Ouvidoria da Empresa",
        ]

    def test_retail_is_deduplicated(self, scorer: ChannelScorer) -> None:
        channels = scorer.recommend_channels("retail", "LOW")
        assert channels == ["Procon", "Reclame Aqui", "Ouvidoria da Empresa"]
        assert len(channels) == len(set(channels))

    def test_banking_urgent_adds_escalation(self, scorer: ChannelScorer) -> None:
        assert scorer.recommend_channels("banking", "URGENT") == [
            "Procon",
            "Banco Central",
            "Reclame Aqui",
            "Ouvidoria do Banco",
            "Ministério Público",
            "Defensoria Pública",
        ]

    def test_unknown_category_uses_default_list(self, scorer: ChannelScorer) -> None:
        assert scorer.recommend_channels("unknown_category", "MEDIUM") == list(DEFAULT_CHANNELS)
        assert scorer.recommend_channels("unknown_category", "HIGH") == [
            *DEFAULT_CHANNELS,
            "Ministério Público",
            "Defensoria Pública",
        ]

    def test_low_and_medium_never_escalate(self, scorer: ChannelScorer) -> None:
        for priority in ("LOW", "MEDIUM"):
            assert "Ministério Público" not in scorer.recommend_channels("health", priority)


# -- Test Class: rank_and_explain ----------------------------------------------


class TestRankAndExplain:
    def test_sorted_descending(self, scorer: ChannelScorer) -> None:
        candidates = scorer.recommend_channels("telecom", "URGENT")
        ranked = scorer.rank_and_explain(candidates, "telecom", "URGENT")

        assert [r.channel for r in ranked] == [
            "Procon",  # (75 + 20) x 1.1 = 104.5 -> 105
            "Anatel",  # 91
            "Reclame Aqui",  # 85
            "Ministério Público",  # 80
            "Defensoria Pública",  # 78
            "Ouvidoria da Empresa",  # 75
        ]
        assert [r.score for r in ranked] == [105, 91, 85, 80, 78, 75]
        assert all(r.recommended for r in ranked)

    def test_ties_keep_input_order(self, scorer: ChannelScorer) -> None:
        channels = ["Canal B", "Reclame Aqui", "Canal A", "Canal C"]
        ranked = scorer.rank_and_explain(channels, "retail", "MEDIUM")
        assert [r.channel for r in ranked] == ["Reclame Aqui", "Canal B", "Canal A", "Canal C"]

    def test_unknown_channel_carries_zeroed_snapshot(self, scorer: ChannelScorer) -> None:
        [rec] = scorer.rank_and_explain(["Consumidor.gov"], "telecom", "HIGH")
        assert rec.score == 0
        assert rec.explanation == ""
        assert rec.recommended is False
        assert rec.effectiveness.success_rate == 0.0
        assert rec.effectiveness.avg_time == 0
        assert rec.effectiveness.cost == 0

    def test_recommended_threshold_is_inclusive(self, scorer: ChannelScorer) -> None:
        """Ouvidoria da Empresa HIGH: 55 + 15 = 70 -> recommended."""
        [rec] = scorer.rank_and_explain(["Ouvidoria da Empresa"], "retail", "HIGH")
        assert rec.score == 70
        assert rec.recommended is True

    def test_custom_threshold(self) -> None:
        strict = ChannelScorer(recommendation_threshold=90)
        ranked = strict.rank_and_explain(["Reclame Aqui", "Anatel"], "telecom", "URGENT")
        assert [(r.channel, r.recommended) for r in ranked] == [
            ("Anatel", True),
            ("Reclame Aqui", False),
        ]

    def test_empty_input(self, scorer: ChannelScorer) -> None:
        assert scorer.rank_and_explain([], "telecom", "LOW") == []
