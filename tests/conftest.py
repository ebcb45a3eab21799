"""Shared test fixtures for the reputation, channel and distribution tests.

Provides:
- InMemoryComplaintStore: complaint store double with seeding helpers
- NOW / fixed clock: deterministic evaluation instant
- store / clock fixtures
"""

from __future__ import annotations

import itertools
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import pytest

from src.consumidor.complaints.schemas import (
    CompanyComplaints,
    CompanyRead,
    ComplaintRecord,
    ComplaintStatus,
    ComplaintUpdate,
    UpdateSource,
)
from src.consumidor.core.errors import ComplaintNotFoundError
from src.consumidor.reputation.schemas import CompanyReputation, ReputationHistoryPoint

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


# ── In-Memory Test Double ────────────────────────────────────────────────────


class InMemoryComplaintStore:
    """In-memory ComplaintRepository for testing without database.

    Companies keep insertion order, which is the "fetch order" used to break
    category ranking ties.
    """

    def __init__(self) -> None:
        self._companies: dict[str, CompanyRead] = {}
        self._complaints: dict[str, ComplaintRecord] = {}
        self._ids = itertools.count(1)
        self.reputations: dict[str, CompanyReputation] = {}
        self.history: list[ReputationHistoryPoint] = []
        self.fail_peer_query = False
        self.distributions: list[dict[str, Any]] = []

    # ── Seeding ──────────────────────────────────────────────────────────

    def add_company(
        self, company_id: str, *, name: Optional[str] = None, category: str = "telecom"
    ) -> CompanyRead:
        company = CompanyRead(id=company_id, name=name or company_id.title(), category=category)
        self._companies[company_id] = company
        return company

    def add_complaint(
        self,
        company_id: str,
        *,
        days_ago: float = 10,
        status: ComplaintStatus = ComplaintStatus.ANALYSIS,
        resolved_after_days: Optional[float] = None,
        updates: int = 0,
        category: Optional[str] = None,
        priority: str = "MEDIUM",
        complaint_id: Optional[str] = None,
    ) -> ComplaintRecord:
        created_at = NOW - timedelta(days=days_ago)
        resolved_at = (
            created_at + timedelta(days=resolved_after_days)
            if resolved_after_days is not None
            else None
        )
        complaint = ComplaintRecord(
            id=complaint_id or f"c-{next(self._ids)}",
            company_id=company_id,
            user_id="user-1",
            title="Cobrança indevida",
            description="Fui cobrado por um serviço que não contratei.",
            category=category or self._companies[company_id].category,
            priority=priority,
            status=status,
            created_at=created_at,
            resolved_at=resolved_at,
            updates=[
                ComplaintUpdate(
                    message=f"update {i}",
                    source=UpdateSource.COMPANY,
                    created_at=created_at + timedelta(hours=i + 1),
                )
                for i in range(updates)
            ],
        )
        self._complaints[complaint.id] = complaint
        return complaint

    # ── Store Contract ───────────────────────────────────────────────────

    async def get_company(self, company_id: str) -> Optional[CompanyRead]:
        return self._companies.get(company_id)

    async def list_companies(self, category: Optional[str] = None) -> list[CompanyRead]:
        return [
            c for c in self._companies.values() if category is None or c.category == category
        ]

    async def list_complaints_for_company(self, company_id: str) -> list[ComplaintRecord]:
        return [c for c in self._complaints.values() if c.company_id == company_id]

    async def list_category_peers(
        self, category: str, since: datetime
    ) -> list[CompanyComplaints]:
        if self.fail_peer_query:
            raise RuntimeError("peer query unavailable")
        return [
            CompanyComplaints(
                company=company,
                complaints=[
                    c
                    for c in self._complaints.values()
                    if c.company_id == company.id and c.created_at >= since
                ],
            )
            for company in self._companies.values()
            if company.category == category
        ]

    async def get_complaint(self, complaint_id: str) -> Optional[ComplaintRecord]:
        return self._complaints.get(complaint_id)

    async def upsert_reputation(self, reputation: CompanyReputation) -> None:
        self.reputations[reputation.company_id] = reputation

    async def add_reputation_history(self, point: ReputationHistoryPoint) -> None:
        self.history.append(point)

    async def list_reputation_history(
        self, company_id: str, since: datetime
    ) -> list[ReputationHistoryPoint]:
        return [p for p in self.history if p.company_id == company_id and p.date >= since]

    async def record_distribution(
        self,
        complaint_id: str,
        channels: list[str],
        tracking: dict[str, Any],
        update: ComplaintUpdate,
    ) -> ComplaintRecord:
        complaint = self._complaints.get(complaint_id)
        if complaint is None:
            raise ComplaintNotFoundError(complaint_id)
        updated = complaint.model_copy(
            update={
                "channels": list(channels),
                "status": ComplaintStatus.WAITING,
                "external_tracking": tracking,
                "updates": [*complaint.updates, update],
            }
        )
        self._complaints[complaint_id] = updated
        self.distributions.append(
            {"complaint_id": complaint_id, "channels": channels, "tracking": tracking}
        )
        return updated


# ── Fixtures ─────────────────────────────────────────────────────────────────


@pytest.fixture
def store() -> InMemoryComplaintStore:
    return InMemoryComplaintStore()


@pytest.fixture
def clock():
    return lambda: NOW
