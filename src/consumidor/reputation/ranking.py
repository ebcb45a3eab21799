"""Category ranking -- position of a company among same-category peers.

Peers are scored by their resolution rate (resolved / total * 100) over
complaints created within the ranking window, then sorted descending with a
stable sort so ties keep the store's fetch order.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional, Protocol

import structlog

from src.consumidor.complaints.schemas import CompanyComplaints
from src.consumidor.core.numeric import safe_ratio
from src.consumidor.reputation.schemas import CategoryRanking

logger = structlog.get_logger(__name__)


class PeerSource(Protocol):
    async def list_category_peers(
        self, category: str, since: datetime
    ) -> list[CompanyComplaints]: ...


class CategoryRankingAggregator:
    """Rank a company within its category cohort.

    Args:
        store: Anything exposing ``list_category_peers(category, since)``.
        window_days: Only complaints created in the last N days count.
    """

    def __init__(self, store: PeerSource, *, window_days: int = 90) -> None:
        self._store = store
        self._window = timedelta(days=window_days)

    @staticmethod
    def peer_score(peer: CompanyComplaints) -> float:
        """Resolution rate of one peer as a percentage (0 without complaints)."""
        resolved = sum(1 for c in peer.complaints if c.is_resolved)
        return safe_ratio(resolved, len(peer.complaints)) * 100

    @classmethod
    def rank(
        cls, company_id: str, category: str, peers: list[CompanyComplaints]
    ) -> Optional[CategoryRanking]:
        """Rank ``company_id`` among already-windowed ``peers``.

        Returns:
            CategoryRanking, or None when the cohort has at most one company
            or does not contain ``company_id``.
        """
        if len(peers) <= 1:
            return None

        ordered = sorted(peers, key=lambda p: -cls.peer_score(p))
        for position, peer in enumerate(ordered, start=1):
            if peer.company.id == company_id:
                return CategoryRanking(
                    category=category,
                    rank=position,
                    total_companies=len(ordered),
                )
        return None

    async def rank_in_category(
        self, company_id: str, category: str, *, now: datetime
    ) -> Optional[CategoryRanking]:
        """Fetch the windowed cohort from the store and rank ``company_id``."""
        peers = await self._store.list_category_peers(category, now - self._window)
        ranking = self.rank(company_id, category, peers)
        logger.debug(
            "category_ranking.computed",
            company_id=company_id,
            category=category,
            cohort_size=len(peers),
            rank=ranking.rank if ranking else None,
        )
        return ranking


__all__ = ["CategoryRankingAggregator", "PeerSource"]
