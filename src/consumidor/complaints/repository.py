"""Complaint record store -- async data access for complaints and companies.

Provides ComplaintRepository with the session_factory callable pattern.
Read methods serve the reputation calculator, the category ranking
aggregator and the distribution orchestrator; the write methods persist
reputation snapshots/history and distribution results on behalf of callers
(the scoring engines themselves never write).

SQLAlchemy rows are converted to Pydantic schemas at this boundary so the
engines only ever see ComplaintRecord / CompanyRead values.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable
from datetime import datetime, timezone
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload, with_loader_criteria

from src.consumidor.complaints.models import (
    CompanyModel,
    CompanyReputationModel,
    ComplaintModel,
    ComplaintUpdateModel,
    ReputationHistoryModel,
)
from src.consumidor.complaints.schemas import (
    CompanyComplaints,
    CompanyRead,
    ComplaintRecord,
    ComplaintStatus,
    ComplaintUpdate,
    UpdateSource,
)
from src.consumidor.core.errors import ComplaintNotFoundError
from src.consumidor.reputation.schemas import (
    CompanyReputation,
    ReputationHistoryPoint,
)

logger = structlog.get_logger(__name__)


# ── Serialization Helpers ───────────────────────────────────────────────────


def _as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC.

    asyncpg returns aware values for the timestamptz columns; naive values
    only appear for rows written without a zone and are read as UTC.
    """
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _model_to_company(model: CompanyModel) -> CompanyRead:
    """Convert CompanyModel to CompanyRead schema."""
    return CompanyRead(id=model.id, name=model.name, category=model.category)


def _model_to_update(model: ComplaintUpdateModel) -> ComplaintUpdate:
    """Convert ComplaintUpdateModel to ComplaintUpdate schema."""
    try:
        source = UpdateSource(model.source)
    except ValueError:
        source = UpdateSource.SYSTEM
    return ComplaintUpdate(
        message=model.message,
        source=source,
        metadata=model.metadata_json,
        created_at=_as_utc(model.created_at),
    )


def _model_to_complaint(
    model: ComplaintModel, *, with_updates: bool = True
) -> ComplaintRecord:
    """Convert ComplaintModel to ComplaintRecord schema."""
    return ComplaintRecord(
        id=model.id,
        company_id=model.company_id,
        user_id=model.user_id,
        title=model.title,
        description=model.description,
        category=model.category,
        priority=model.priority,
        status=ComplaintStatus(model.status),
        created_at=_as_utc(model.created_at),
        resolved_at=_as_utc(model.resolved_at),
        updates=[_model_to_update(u) for u in model.updates] if with_updates else [],
        channels=list(model.channels or []),
        external_tracking=dict(model.external_tracking or {}),
    )


# ── Repository ──────────────────────────────────────────────────────────────


class ComplaintRepository:
    """Async access to complaints, companies and reputation snapshots.

    Args:
        session_factory: Async callable that yields AsyncSession instances.
    """

    def __init__(
        self, session_factory: Callable[..., AsyncGenerator[AsyncSession, None]]
    ) -> None:
        self._session_factory = session_factory

    # ── Companies ───────────────────────────────────────────────────────────

    async def get_company(self, company_id: str) -> CompanyRead | None:
        """Get a company by ID.

        Returns:
            CompanyRead if found, None otherwise.
        """
        async for session in self._session_factory():
            model = await session.get(CompanyModel, company_id)
            if model is None:
                return None
            return _model_to_company(model)

    async def list_companies(self, category: str | None = None) -> list[CompanyRead]:
        """List companies, optionally restricted to one category."""
        async for session in self._session_factory():
            stmt = select(CompanyModel).order_by(CompanyModel.name, CompanyModel.id)
            if category is not None:
                stmt = stmt.where(CompanyModel.category == category)
            result = await session.execute(stmt)
            return [_model_to_company(m) for m in result.scalars().all()]

    # ── Complaints ──────────────────────────────────────────────────────────

    async def get_complaint(self, complaint_id: str) -> ComplaintRecord | None:
        """Get a complaint with its update history."""
        async for session in self._session_factory():
            stmt = (
                select(ComplaintModel)
                .where(ComplaintModel.id == complaint_id)
                .options(selectinload(ComplaintModel.updates))
            )
            result = await session.execute(stmt)
            model = result.scalar_one_or_none()
            if model is None:
                return None
            return _model_to_complaint(model)

    async def list_complaints_for_company(self, company_id: str) -> list[ComplaintRecord]:
        """Full complaint history of a company, including update sequences."""
        async for session in self._session_factory():
            stmt = (
                select(ComplaintModel)
                .where(ComplaintModel.company_id == company_id)
                .options(selectinload(ComplaintModel.updates))
                .order_by(ComplaintModel.created_at, ComplaintModel.id)
            )
            result = await session.execute(stmt)
            return [_model_to_complaint(m) for m in result.scalars().all()]

    async def list_category_peers(
        self, category: str, since: datetime
    ) -> list[CompanyComplaints]:
        """Companies in a category with their complaints created at/after ``since``.

        Companies without complaints in the window are still returned (with
        an empty list). Order is stable (name, id) so ranking ties resolve
        reproducibly.
        """
        async for session in self._session_factory():
            stmt = (
                select(CompanyModel)
                .where(CompanyModel.category == category)
                .options(
                    selectinload(CompanyModel.complaints),
                    with_loader_criteria(
                        ComplaintModel,
                        ComplaintModel.created_at >= since,
                        include_aliases=True,
                    ),
                )
                .order_by(CompanyModel.name, CompanyModel.id)
            )
            result = await session.execute(stmt)
            return [
                CompanyComplaints(
                    company=_model_to_company(m),
                    complaints=[
                        _model_to_complaint(c, with_updates=False) for c in m.complaints
                    ],
                )
                for m in result.scalars().all()
            ]

    async def record_distribution(
        self,
        complaint_id: str,
        channels: list[str],
        tracking: dict[str, Any],
        update: ComplaintUpdate,
    ) -> ComplaintRecord:
        """Persist a distribution: channels, WAITING status, tracking and an update.

        Raises:
            ComplaintNotFoundError: If the complaint does not exist.
        """
        async for session in self._session_factory():
            stmt = (
                select(ComplaintModel)
                .where(ComplaintModel.id == complaint_id)
                .options(selectinload(ComplaintModel.updates))
            )
            result = await session.execute(stmt)
            model = result.scalar_one_or_none()
            if model is None:
                raise ComplaintNotFoundError(complaint_id)

            model.channels = list(channels)
            model.status = ComplaintStatus.WAITING.value
            model.external_tracking = tracking
            model.updates.append(
                ComplaintUpdateModel(
                    message=update.message,
                    source=update.source.value,
                    metadata_json=update.metadata,
                    created_at=update.created_at,
                )
            )
            await session.commit()
            await session.refresh(model, attribute_names=["updates"])
            logger.info(
                "complaint_repository.distribution_recorded",
                complaint_id=complaint_id,
                channel_count=len(channels),
            )
            return _model_to_complaint(model)

    # ── Reputation Snapshots ────────────────────────────────────────────────

    async def upsert_reputation(self, reputation: CompanyReputation) -> None:
        """Insert or replace the last known reputation snapshot of a company."""
        async for session in self._session_factory():
            model = await session.get(CompanyReputationModel, reputation.company_id)
            if model is None:
                model = CompanyReputationModel(company_id=reputation.company_id)
                session.add(model)

            model.overall_score = reputation.overall_score
            model.total_complaints = reputation.total_complaints
            model.resolved_complaints = reputation.resolved_complaints
            model.average_resolution_time = float(reputation.average_resolution_time)
            model.response_rate = reputation.response_rate
            model.satisfaction_score = reputation.satisfaction_score
            model.trend = reputation.trend
            model.badges = list(reputation.badges)
            model.category_ranking = (
                reputation.category_ranking.model_dump(mode="json")
                if reputation.category_ranking
                else None
            )
            model.last_updated = reputation.last_updated
            await session.commit()

    async def add_reputation_history(self, point: ReputationHistoryPoint) -> None:
        """Append a reputation history point."""
        async for session in self._session_factory():
            session.add(
                ReputationHistoryModel(
                    company_id=point.company_id,
                    date=point.date,
                    score=point.score,
                    total_complaints=point.total_complaints,
                    resolved_complaints=point.resolved_complaints,
                )
            )
            await session.commit()

    async def list_reputation_history(
        self, company_id: str, since: datetime
    ) -> list[ReputationHistoryPoint]:
        """History points for a company at/after ``since``, oldest first."""
        async for session in self._session_factory():
            stmt = (
                select(ReputationHistoryModel)
                .where(
                    ReputationHistoryModel.company_id == company_id,
                    ReputationHistoryModel.date >= since,
                )
                .order_by(ReputationHistoryModel.date, ReputationHistoryModel.id)
            )
            result = await session.execute(stmt)
            return [
                ReputationHistoryPoint(
                    company_id=m.company_id,
                    date=_as_utc(m.date),
                    score=m.score,
                    total_complaints=m.total_complaints,
                    resolved_complaints=m.resolved_complaints,
                )
                for m in result.scalars().all()
            ]
