"""REST API endpoints for company reputation.

Reputation snapshots and company profiles are computed on demand; the
refresh endpoint is the only one that persists (snapshot upsert plus a
history point).
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Query, Request, status
from pydantic import BaseModel

from src.consumidor.core.errors import CompanyNotFoundError
from src.consumidor.reputation.schemas import (
    CategoryRanking,
    CompanyDetails,
    CompanyReputation,
    ReputationHistoryPoint,
)

router = APIRouter(prefix="/companies", tags=["companies"])


# ── Response Schemas ─────────────────────────────────────────────────────────


class CategoryRankingResponse(BaseModel):
    """Ranking of a company in its category (null when not meaningful)."""

    company_id: str
    category_ranking: Optional[CategoryRanking] = None


# ── Helpers ──────────────────────────────────────────────────────────────────


def _get_reputation_service(request: Request) -> Any:
    """Retrieve ReputationService from app.state, 503 if not available."""
    service = getattr(request.app.state, "reputation_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Reputation service not initialized",
        )
    return service


def _not_found(exc: CompanyNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


# ── Endpoints ────────────────────────────────────────────────────────────────


@router.get("/top", response_model=list[CompanyReputation])
async def get_top_companies(
    request: Request,
    limit: int = Query(default=10, ge=1, le=100),
    category: Optional[str] = Query(default=None),
) -> list[CompanyReputation]:
    """Highest-scoring companies, optionally restricted to one category."""
    service = _get_reputation_service(request)
    return await service.get_top_companies(limit=limit, category=category)


@router.get("/{company_id}/reputation", response_model=CompanyReputation)
async def get_company_reputation(company_id: str, request: Request) -> CompanyReputation:
    """Compute the current reputation snapshot of a company."""
    service = _get_reputation_service(request)
    try:
        return await service.calculate_reputation(company_id)
    except CompanyNotFoundError as exc:
        raise _not_found(exc) from exc


@router.post("/{company_id}/reputation/refresh", response_model=CompanyReputation)
async def refresh_company_reputation(
    company_id: str, request: Request
) -> CompanyReputation:
    """Recompute and persist the reputation snapshot, appending a history point."""
    service = _get_reputation_service(request)
    try:
        return await service.update_reputation(company_id)
    except CompanyNotFoundError as exc:
        raise _not_found(exc) from exc


@router.get(
    "/{company_id}/reputation/history",
    response_model=list[ReputationHistoryPoint],
)
async def get_reputation_history(
    company_id: str,
    request: Request,
    days: int = Query(default=90, ge=7, le=365),
) -> list[ReputationHistoryPoint]:
    """Persisted reputation points of the last ``days`` days, oldest first."""
    service = _get_reputation_service(request)
    try:
        return await service.get_reputation_history(company_id, days=days)
    except CompanyNotFoundError as exc:
        raise _not_found(exc) from exc


@router.get("/{company_id}/ranking", response_model=CategoryRankingResponse)
async def get_category_ranking(company_id: str, request: Request) -> CategoryRankingResponse:
    """Rank of a company among its category peers over the ranking window."""
    service = _get_reputation_service(request)
    try:
        ranking = await service.rank_in_category(company_id)
    except CompanyNotFoundError as exc:
        raise _not_found(exc) from exc
    return CategoryRankingResponse(company_id=company_id, category_ranking=ranking)


@router.get("/{company_id}", response_model=CompanyDetails)
async def get_company_details(company_id: str, request: Request) -> CompanyDetails:
    """Company profile: reputation, statistics, status/category counts, latest complaints."""
    service = _get_reputation_service(request)
    try:
        return await service.get_company_details(company_id)
    except CompanyNotFoundError as exc:
        raise _not_found(exc) from exc
