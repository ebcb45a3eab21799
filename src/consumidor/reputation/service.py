"""Reputation service -- fetches complaint data and runs the scoring engines.

Wires the complaint store to ReputationCalculator and
CategoryRankingAggregator, and owns the optional persistence of snapshots
and history points. Calculation itself never writes; only
``update_reputation`` does.

Exports:
    ReputationService: calculate_reputation, get_company_details,
        rank_in_category, get_top_companies, update_reputation,
        get_reputation_history.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog

from src.consumidor.complaints.schemas import CompanyRead, ComplaintRecord, ComplaintStatus
from src.consumidor.complaints.store import ComplaintStore
from src.consumidor.core.errors import CompanyNotFoundError
from src.consumidor.core.monitoring import track_reputation_calculation
from src.consumidor.core.numeric import safe_ratio
from src.consumidor.reputation.calculator import ReputationCalculator
from src.consumidor.reputation.ranking import CategoryRankingAggregator
from src.consumidor.reputation.schemas import (
    CategoryRanking,
    CompanyDetails,
    CompanyReputation,
    CompanyStatistics,
    ReputationHistoryPoint,
)

logger = structlog.get_logger(__name__)

TOP_COMPANIES_MAX = 100
HISTORY_MIN_DAYS = 7
HISTORY_MAX_DAYS = 365
RECENT_COMPLAINTS_LIMIT = 5


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReputationService:
    """Company reputation operations over a complaint store.

    Args:
        store: Complaint record store (ComplaintRepository or a test double).
        calculator: Scoring engine; defaults to ReputationCalculator().
        ranking: Peer ranking engine; defaults to one built over ``store``.
        clock: Returns the evaluation instant. Injected so identical data
            and an identical clock yield identical snapshots.
    """

    def __init__(
        self,
        store: ComplaintStore,
        *,
        calculator: Optional[ReputationCalculator] = None,
        ranking: Optional[CategoryRankingAggregator] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._calculator = calculator or ReputationCalculator()
        self._ranking = ranking or CategoryRankingAggregator(store)
        self._clock = clock

    async def _require_company(self, company_id: str) -> CompanyRead:
        company = await self._store.get_company(company_id)
        if company is None:
            raise CompanyNotFoundError(company_id)
        return company

    async def _safe_ranking(
        self, company: CompanyRead, now: datetime
    ) -> Optional[CategoryRanking]:
        """Ranking for a reputation snapshot; failures degrade to None."""
        try:
            return await self._ranking.rank_in_category(
                company.id, company.category, now=now
            )
        except Exception:
            logger.warning(
                "reputation.ranking_failed",
                company_id=company.id,
                category=company.category,
                exc_info=True,
            )
            return None

    # ── Calculation ─────────────────────────────────────────────────────────

    async def calculate_reputation(self, company_id: str) -> CompanyReputation:
        """Compute the reputation snapshot of a company from its full history.

        Raises:
            CompanyNotFoundError: If the company does not exist.
        """
        async with track_reputation_calculation():
            company, complaints = await self._load(company_id)
            reputation = await self._score(company, complaints)
        return reputation

    async def _load(self, company_id: str) -> tuple[CompanyRead, list[ComplaintRecord]]:
        company = await self._require_company(company_id)
        return company, await self._store.list_complaints_for_company(company_id)

    async def _score(
        self, company: CompanyRead, complaints: list[ComplaintRecord]
    ) -> CompanyReputation:
        now = self._clock()
        reputation = self._calculator.calculate(
            company,
            complaints,
            now=now,
            category_ranking=await self._safe_ranking(company, now),
        )

        logger.info(
            "reputation.calculated",
            company_id=company.id,
            overall_score=reputation.overall_score,
            total_complaints=reputation.total_complaints,
            trend=reputation.trend,
        )
        return reputation

    async def get_company_details(
        self, company_id: str, *, recent_limit: int = RECENT_COMPLAINTS_LIMIT
    ) -> CompanyDetails:
        """Company profile with reputation, statistics and distributions.

        Statistics and distributions cover the full complaint history;
        ``recent_complaints`` holds the newest ``recent_limit`` of it.

        Raises:
            CompanyNotFoundError: If the company does not exist.
        """
        async with track_reputation_calculation():
            company, complaints = await self._load(company_id)
            reputation = await self._score(company, complaints)

        status_distribution = {s.value: 0 for s in ComplaintStatus}
        for complaint in complaints:
            status_distribution[complaint.status.value] += 1

        return CompanyDetails(
            company=company,
            reputation=reputation,
            statistics=CompanyStatistics(
                total_complaints=reputation.total_complaints,
                resolved_complaints=reputation.resolved_complaints,
                pending_complaints=reputation.pending_complaints,
                resolution_rate=safe_ratio(
                    reputation.resolved_complaints, reputation.total_complaints
                ),
            ),
            status_distribution=status_distribution,
            category_distribution=dict(Counter(c.category for c in complaints)),
            recent_complaints=sorted(
                complaints, key=lambda c: c.created_at, reverse=True
            )[:recent_limit],
        )

    async def rank_in_category(
        self, company_id: str, category: Optional[str] = None
    ) -> Optional[CategoryRanking]:
        """Rank a company among category peers.

        ``category`` defaults to the company's own category, which requires
        the company to exist. With an explicit category the cohort alone
        decides, and an unknown company simply has no ranking.

        Raises:
            CompanyNotFoundError: If ``category`` is None and the company
                does not exist.
        """
        if category is None:
            category = (await self._require_company(company_id)).category
        return await self._ranking.rank_in_category(
            company_id, category, now=self._clock()
        )

    async def get_top_companies(
        self, limit: int = 10, category: Optional[str] = None
    ) -> list[CompanyReputation]:
        """Highest-scoring companies, optionally within one category.

        Companies whose calculation fails are logged and skipped.

        Raises:
            ValueError: If ``limit`` is outside 1-100.
        """
        if not 1 <= limit <= TOP_COMPANIES_MAX:
            raise ValueError(f"limit must be between 1 and {TOP_COMPANIES_MAX}")

        companies = await self._store.list_companies(category)
        results = await asyncio.gather(
            *(self.calculate_reputation(c.id) for c in companies),
            return_exceptions=True,
        )

        reputations: list[CompanyReputation] = []
        for company, result in zip(companies, results):
            if isinstance(result, BaseException):
                logger.warning(
                    "reputation.top_companies_skipped",
                    company_id=company.id,
                    error=str(result),
                )
                continue
            reputations.append(result)

        ranked = sorted(reputations, key=lambda r: -r.overall_score)
        return ranked[:limit]

    # ── Persistence ─────────────────────────────────────────────────────────

    async def update_reputation(self, company_id: str) -> CompanyReputation:
        """Recalculate, upsert the snapshot, and append a history point.

        Raises:
            CompanyNotFoundError: If the company does not exist.
        """
        reputation = await self.calculate_reputation(company_id)
        await self._store.upsert_reputation(reputation)
        await self._store.add_reputation_history(
            ReputationHistoryPoint(
                company_id=company_id,
                date=reputation.last_updated,
                score=reputation.overall_score,
                total_complaints=reputation.total_complaints,
                resolved_complaints=reputation.resolved_complaints,
            )
        )
        logger.info(
            "reputation.persisted",
            company_id=company_id,
            overall_score=reputation.overall_score,
        )
        return reputation

    async def get_reputation_history(
        self, company_id: str, days: int = 90
    ) -> list[ReputationHistoryPoint]:
        """History points of the last ``days`` days, oldest first.

        Raises:
            ValueError: If ``days`` is outside 7-365.
            CompanyNotFoundError: If the company does not exist.
        """
        if not HISTORY_MIN_DAYS <= days <= HISTORY_MAX_DAYS:
            raise ValueError(
                f"days must be between {HISTORY_MIN_DAYS} and {HISTORY_MAX_DAYS}"
            )
        await self._require_company(company_id)
        since = self._clock() - timedelta(days=days)
        points = await self._store.list_reputation_history(company_id, since)
        return sorted(points, key=lambda p: p.date)


__all__ = ["ReputationService"]
