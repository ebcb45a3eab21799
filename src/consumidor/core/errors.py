"""Domain exceptions that are allowed to cross the scoring core boundary.

Only "not found" conditions are raised. Every other degraded input (unknown
channel, unrecognized category, company without complaints) resolves to a
safe default inside the engines instead of raising.
"""

from __future__ import annotations


class NotFoundError(LookupError):
    """Base class for lookups that resolved to no record.

    Attributes:
        entity: Human-readable entity kind ("company", "complaint").
        entity_id: Identifier that failed to resolve.
    """

    entity = "record"

    def __init__(self, entity_id: str) -> None:
        self.entity_id = entity_id
        super().__init__(f"{self.entity} not found: {entity_id}")


class CompanyNotFoundError(NotFoundError):
    """Raised when a company id does not resolve to a company record."""

    entity = "company"


class ComplaintNotFoundError(NotFoundError):
    """Raised when a complaint id does not resolve to a complaint record."""

    entity = "complaint"


__all__ = ["NotFoundError", "CompanyNotFoundError", "ComplaintNotFoundError"]
