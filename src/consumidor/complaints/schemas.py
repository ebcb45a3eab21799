"""Pydantic data models for complaints, their update history, and companies.

These are the read shapes returned by the complaint record store and
consumed by the reputation calculator, the category ranking aggregator and
the distribution orchestrator. Enumerations use ``str`` mixins so raw
strings from the database or request bodies compare equal to members.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator


# ── Enumerations ────────────────────────────────────────────────────────────


class ComplaintCategory(str, Enum):
    """Complaint categories with dedicated channel routing."""

    TELECOM = "telecom"
    BANKING = "banking"
    RETAIL = "retail"
    HEALTH = "health"
    EDUCATION = "education"

    @classmethod
    def parse(cls, value: str | None) -> ComplaintCategory | None:
        """Return the member matching ``value`` or None for unknown input."""
        if value is None:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class ComplaintPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"

    @classmethod
    def parse(cls, value: str | None) -> ComplaintPriority | None:
        """Return the member matching ``value`` or None for unknown input."""
        if value is None:
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


class ComplaintStatus(str, Enum):
    ANALYSIS = "ANALYSIS"
    WAITING = "WAITING"
    RESPONDED = "RESPONDED"
    RESOLVED = "RESOLVED"
    NOT_RESOLVED = "NOT_RESOLVED"
    CANCELLED = "CANCELLED"


class UpdateSource(str, Enum):
    SYSTEM = "system"
    USER = "user"
    COMPANY = "company"
    CHANNEL = "channel"


# ── Records ─────────────────────────────────────────────────────────────────


class ComplaintUpdate(BaseModel):
    """Timestamped, append-only event attached to a complaint.

    Attributes:
        message: Free-text description of the event.
        source: Who produced the event.
        metadata: Optional structured payload (e.g., distribution details).
        created_at: When the event was recorded.
    """

    message: str
    source: UpdateSource = UpdateSource.SYSTEM
    metadata: Optional[dict[str, Any]] = None
    created_at: datetime


class ComplaintRecord(BaseModel):
    """One consumer grievance with its ordered update history.

    ``category`` and ``priority`` are kept as plain strings: the scoring
    engines resolve them through ``ComplaintCategory.parse`` and
    ``ComplaintPriority.parse`` and degrade gracefully on unknown values.

    Attributes:
        id: Complaint identifier.
        company_id: Company the complaint is filed against.
        user_id: Owning user reference.
        title: Short summary.
        description: Full complaint text.
        category: Category string (see ComplaintCategory).
        priority: Priority string (see ComplaintPriority).
        status: Current lifecycle status.
        created_at: Submission timestamp.
        resolved_at: Resolution timestamp, set when status becomes RESOLVED.
        updates: Update events in insertion order.
        channels: Channels the complaint has been distributed to.
        external_tracking: Submission results and tracking URLs.
    """

    id: str
    company_id: str
    user_id: str = ""
    title: str = ""
    description: str = ""
    category: str
    priority: str = ComplaintPriority.MEDIUM.value
    status: ComplaintStatus = ComplaintStatus.ANALYSIS
    created_at: datetime
    resolved_at: Optional[datetime] = None
    updates: list[ComplaintUpdate] = Field(default_factory=list)
    channels: list[str] = Field(default_factory=list)
    external_tracking: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_resolution_timestamp(self) -> ComplaintRecord:
        """resolved_at, when present, must not precede created_at.

        Legacy rows may be RESOLVED without a timestamp; they still count as
        resolved but are left out of resolution-time averages.
        """
        if self.resolved_at is not None and self.resolved_at < self.created_at:
            raise ValueError("resolved_at must not precede created_at")
        return self

    @property
    def is_resolved(self) -> bool:
        return self.status == ComplaintStatus.RESOLVED


class CompanyRead(BaseModel):
    """Company record."""

    id: str
    name: str
    category: str


class CompanyComplaints(BaseModel):
    """A company together with a (possibly windowed) slice of its complaints.

    Returned by the store's peer query for category ranking, in fetch order.
    """

    company: CompanyRead
    complaints: list[ComplaintRecord] = Field(default_factory=list)
