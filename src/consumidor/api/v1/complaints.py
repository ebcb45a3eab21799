"""REST API endpoints for complaint distribution.

GET returns the ranked channel plan for a complaint; POST distributes it to
the channels the user selected. Distribution requires explicit user
authorization in the request body.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Request, status
from pydantic import BaseModel, Field, field_validator

from src.consumidor.core.errors import ComplaintNotFoundError
from src.consumidor.distribution.schemas import DistributionPlan, DistributionResult

router = APIRouter(prefix="/complaints", tags=["complaints"])


# ── Request Schemas ──────────────────────────────────────────────────────────


class DistributeRequest(BaseModel):
    """Request body for distributing a complaint."""

    selected_channels: list[str] = Field(min_length=1)
    custom_message: Optional[str] = Field(default=None, max_length=1000)
    authorize_distribution: bool

    @field_validator("authorize_distribution")
    @classmethod
    def _must_authorize(cls, value: bool) -> bool:
        if not value:
            raise ValueError("distribution must be explicitly authorized")
        return value


# ── Helpers ──────────────────────────────────────────────────────────────────


def _get_orchestrator(request: Request) -> Any:
    """Retrieve DistributionOrchestrator from app.state, 503 if not available."""
    orchestrator = getattr(request.app.state, "distribution_orchestrator", None)
    if orchestrator is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Distribution not initialized",
        )
    return orchestrator


# ── Endpoints ────────────────────────────────────────────────────────────────


@router.get("/{complaint_id}/distribution", response_model=DistributionPlan)
async def get_distribution_plan(complaint_id: str, request: Request) -> DistributionPlan:
    """Ranked channel plan with strategy reasoning for a complaint."""
    orchestrator = _get_orchestrator(request)
    try:
        return await orchestrator.build_plan(complaint_id)
    except ComplaintNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.post("/{complaint_id}/distribution", response_model=DistributionResult)
async def distribute_complaint(
    complaint_id: str,
    body: DistributeRequest,
    request: Request,
) -> DistributionResult:
    """Submit a complaint to the selected channels and record the distribution."""
    orchestrator = _get_orchestrator(request)
    try:
        return await orchestrator.distribute(
            complaint_id,
            body.selected_channels,
            custom_message=body.custom_message,
        )
    except ComplaintNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
