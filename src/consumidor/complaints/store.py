"""Structural interface of the complaint record store.

ComplaintRepository (SQLAlchemy) is the production implementation; tests use
an in-memory double with the same methods.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Protocol

from src.consumidor.complaints.schemas import (
    CompanyComplaints,
    CompanyRead,
    ComplaintRecord,
    ComplaintUpdate,
)
from src.consumidor.reputation.schemas import CompanyReputation, ReputationHistoryPoint


class ComplaintStore(Protocol):
    async def get_company(self, company_id: str) -> Optional[CompanyRead]: ...

    async def list_companies(self, category: Optional[str] = None) -> list[CompanyRead]: ...

    async def list_complaints_for_company(self, company_id: str) -> list[ComplaintRecord]: ...

    async def list_category_peers(
        self, category: str, since: datetime
    ) -> list[CompanyComplaints]: ...

    async def get_complaint(self, complaint_id: str) -> Optional[ComplaintRecord]: ...

    async def upsert_reputation(self, reputation: CompanyReputation) -> None: ...

    async def add_reputation_history(self, point: ReputationHistoryPoint) -> None: ...

    async def list_reputation_history(
        self, company_id: str, since: datetime
    ) -> list[ReputationHistoryPoint]: ...

    async def record_distribution(
        self,
        complaint_id: str,
        channels: list[str],
        tracking: dict[str, Any],
        update: ComplaintUpdate,
    ) -> ComplaintRecord: ...


__all__ = ["ComplaintStore"]
