"""Mediation advisor interface.

An advisor produces free-text suggestions (e.g. from a language model) for a
complaint. Its output is untrusted and advisory only: the orchestrator shows
it next to the deterministic channel ranking and ignores it on any failure.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from src.consumidor.complaints.schemas import ComplaintRecord
from src.consumidor.distribution.schemas import AdvisorySuggestion


@runtime_checkable
class MediationAdvisor(Protocol):
    async def suggest(
        self, complaint: ComplaintRecord, company_name: str
    ) -> AdvisorySuggestion: ...


__all__ = ["MediationAdvisor"]
