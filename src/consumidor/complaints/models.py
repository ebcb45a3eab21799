"""Complaint store persistence models.

Five SQLAlchemy models on the shared declarative Base:
- CompanyModel: Companies complaints are filed against
- ComplaintModel: Consumer grievances with distribution channels and tracking
- ComplaintUpdateModel: Append-only update events per complaint
- CompanyReputationModel: Last known reputation snapshot (one row per company)
- ReputationHistoryModel: Dated score points appended on every snapshot refresh

Channels, metadata, badges and category rankings are JSON columns rather
than encoded text so they round-trip as structured values.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    JSON,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.consumidor.core.database import Base


class CompanyModel(Base):
    """Company registered in the portal."""

    __tablename__ = "companies"
    __table_args__ = (Index("ix_companies_category", "category"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(300), nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    complaints: Mapped[list[ComplaintModel]] = relationship(
        back_populates="company",
        order_by="ComplaintModel.created_at",
    )


class ComplaintModel(Base):
    """Consumer complaint against a company.

    Never deleted; only status-transitioned. ``resolved_at`` is set when the
    status becomes RESOLVED.
    """

    __tablename__ = "complaints"
    __table_args__ = (
        Index("ix_complaints_company_created", "company_id", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    company_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("companies.id"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    title: Mapped[str] = mapped_column(String(300), nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    priority: Mapped[str] = mapped_column(String(20), nullable=False, default="MEDIUM")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="ANALYSIS")
    channels: Mapped[list] = mapped_column(JSON, default=list)
    external_tracking: Mapped[dict] = mapped_column(JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    resolved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        onupdate=func.now(),
        nullable=True,
    )

    company: Mapped[CompanyModel] = relationship(back_populates="complaints")
    updates: Mapped[list[ComplaintUpdateModel]] = relationship(
        back_populates="complaint",
        order_by="ComplaintUpdateModel.id",
    )


class ComplaintUpdateModel(Base):
    """Append-only event on a complaint. Ordered by insertion (autoincrement id)."""

    __tablename__ = "complaint_updates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    complaint_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("complaints.id"), nullable=False, index=True
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    source: Mapped[str] = mapped_column(String(20), nullable=False, default="system")
    metadata_json: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    complaint: Mapped[ComplaintModel] = relationship(back_populates="updates")


class CompanyReputationModel(Base):
    """Last known reputation snapshot for a company (upserted, not authoritative)."""

    __tablename__ = "company_reputations"

    company_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("companies.id"), primary_key=True
    )
    overall_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_complaints: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    resolved_complaints: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    average_resolution_time: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    response_rate: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    satisfaction_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    trend: Mapped[str] = mapped_column(String(20), nullable=False, default="stable")
    badges: Mapped[list] = mapped_column(JSON, default=list)
    category_ranking: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )


class ReputationHistoryModel(Base):
    """Dated reputation score point, appended whenever a snapshot is persisted."""

    __tablename__ = "reputation_history"
    __table_args__ = (
        Index("ix_reputation_history_company_date", "company_id", "date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    company_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("companies.id"), nullable=False
    )
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    total_complaints: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    resolved_complaints: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
