"""Static reference data for external resolution channels.

Effectiveness figures are historical averages per channel. They are read-only
at runtime; changing them is a code change reviewed like any other scoring
change.

Exports:
    ChannelEffectiveness: Success rate / average resolution time / cost triple.
    CHANNEL_EFFECTIVENESS: Known channels keyed by display name.
    CATEGORY_AFFINITY: Per-category score multipliers for specialist channels.
    CATEGORY_CHANNELS: Candidate channel list per complaint category.
    DEFAULT_CHANNELS: Candidate list for unknown categories.
    ESCALATION_CHANNELS: Channels appended for HIGH and URGENT complaints.
    SPECIALIZATIONS: Explanation sentence for each (category, channel) affinity pair.
    UNKNOWN_EFFECTIVENESS: Zeroed snapshot reported for unknown channels.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from src.consumidor.complaints.schemas import ComplaintCategory


class ChannelEffectiveness(BaseModel):
    """Historical performance of one channel.

    Attributes:
        success_rate: Share of complaints resolved through this channel (0-1).
        avg_time: Mean days to resolution.
        cost: Cost to the consumer. Every known channel is free.
    """

    model_config = {"frozen": True}

    success_rate: float = Field(ge=0.0, le=1.0)
    avg_time: int = Field(ge=0)
    cost: int = 0


# ── Effectiveness Table ─────────────────────────────────────────────────────

CHANNEL_EFFECTIVENESS: dict[str, ChannelEffectiveness] = {
    "Procon": ChannelEffectiveness(success_rate=0.75, avg_time=45),
    "Reclame Aqui": ChannelEffectiveness(success_rate=0.65, avg_time=30),
    "Anatel": ChannelEffectiveness(success_rate=0.80, avg_time=60),
    "Banco Central": ChannelEffectiveness(success_rate=0.85, avg_time=90),
    "ANS": ChannelEffectiveness(success_rate=0.78, avg_time=75),
    "MEC": ChannelEffectiveness(success_rate=0.70, avg_time=120),
    "Ouvidoria da Empresa": ChannelEffectiveness(success_rate=0.55, avg_time=15),
    "Ministério Público": ChannelEffectiveness(success_rate=0.90, avg_time=180),
    "Defensoria Pública": ChannelEffectiveness(success_rate=0.88, avg_time=150),
}

UNKNOWN_EFFECTIVENESS = ChannelEffectiveness(success_rate=0.0, avg_time=0)

# ── Category Affinity ───────────────────────────────────────────────────────

CATEGORY_AFFINITY: dict[ComplaintCategory, dict[str, float]] = {
    ComplaintCategory.TELECOM: {"Anatel": 1.3, "Procon": 1.1},
    ComplaintCategory.BANKING: {"Banco Central": 1.4, "Procon": 1.2},
    ComplaintCategory.HEALTH: {"ANS": 1.3, "Procon": 1.1},
    ComplaintCategory.EDUCATION: {"MEC": 1.3, "Procon": 1.1},
}

SPECIALIZATIONS: dict[tuple[ComplaintCategory, str], str] = {
    (ComplaintCategory.TELECOM, "Anatel"): "Especializado em regulamentação de telecomunicações",
    (ComplaintCategory.BANKING, "Banco Central"): "Autoridade máxima em questões bancárias",
    (ComplaintCategory.HEALTH, "ANS"): "Agência reguladora de saúde suplementar",
    (ComplaintCategory.EDUCATION, "MEC"): "Ministério responsável pela educação",
}

# ── Candidate Lists ─────────────────────────────────────────────────────────

CATEGORY_CHANNELS: dict[ComplaintCategory, tuple[str, ...]] = {
    ComplaintCategory.TELECOM: ("Procon", "Anatel", "Reclame Aqui", "Ouvidoria da Empresa"),
    ComplaintCategory.BANKING: ("Procon", "Banco Central", "Reclame Aqui", "Ouvidoria do Banco"),
    ComplaintCategory.RETAIL: ("Procon", "Reclame Aqui", "Ouvidoria da Empresa"),
    ComplaintCategory.HEALTH: ("Procon", "ANS", "Reclame Aqui", "Ouvidoria da Empresa"),
    ComplaintCategory.EDUCATION: ("Procon", "MEC", "Reclame Aqui", "Ouvidoria da Instituição"),
}

DEFAULT_CHANNELS: tuple[str, ...] = ("Procon", "Reclame Aqui", "Ouvidoria da Empresa")

ESCALATION_CHANNELS: tuple[str, ...] = ("Ministério Público", "Defensoria Pública")

# A new category must come with its own candidate list.
_missing = set(ComplaintCategory) - set(CATEGORY_CHANNELS)
if _missing:
    raise RuntimeError(f"CATEGORY_CHANNELS missing categories: {sorted(_missing)}")
del _missing


__all__ = [
    "ChannelEffectiveness",
    "CHANNEL_EFFECTIVENESS",
    "CATEGORY_AFFINITY",
    "CATEGORY_CHANNELS",
    "DEFAULT_CHANNELS",
    "ESCALATION_CHANNELS",
    "SPECIALIZATIONS",
    "UNKNOWN_EFFECTIVENESS",
]
