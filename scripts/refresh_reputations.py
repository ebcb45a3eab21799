#!/usr/bin/env python3
"""CLI script to recompute and persist company reputation snapshots.

Usage:
    uv run python scripts/refresh_reputations.py
    uv run python scripts/refresh_reputations.py --category telecom
    uv run python scripts/refresh_reputations.py --company acme-telecom --company banco-x

Connects directly to the database using DATABASE_URL from environment or .env file.
For every selected company, recalculates the reputation from its complaint
history, upserts the snapshot, and appends a reputation history point.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

# Ensure project root is on sys.path so we can import src.consumidor
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dotenv import load_dotenv  # noqa: E402

# Load .env from project root
load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))


async def refresh(company_ids: list[str], category: str | None) -> int:
    """Refresh snapshots; returns the number of companies that failed."""
    from src.consumidor.api.middleware.logging import configure_structlog
    from src.consumidor.complaints.repository import ComplaintRepository
    from src.consumidor.core.database import close_db, get_session, init_db
    from src.consumidor.core.errors import CompanyNotFoundError
    from src.consumidor.reputation.service import ReputationService

    configure_structlog()
    await init_db()

    repository = ComplaintRepository(session_factory=get_session)
    service = ReputationService(repository)

    if not company_ids:
        company_ids = [c.id for c in await repository.list_companies(category)]

    failures = 0
    for company_id in company_ids:
        try:
            reputation = await service.update_reputation(company_id)
        except CompanyNotFoundError:
            print(f"  {company_id}: not found")
            failures += 1
            continue
        print(
            f"  {company_id}: score={reputation.overall_score} "
            f"trend={reputation.trend} badges={', '.join(reputation.badges) or '-'}"
        )

    print(f"Refreshed {len(company_ids) - failures} of {len(company_ids)} companies")
    await close_db()
    return failures


def main() -> None:
    parser = argparse.ArgumentParser(description="Recompute company reputation snapshots")
    parser.add_argument(
        "--company",
        action="append",
        default=[],
        dest="companies",
        help="Company id to refresh (repeatable; default: all companies)",
    )
    parser.add_argument("--category", default=None, help="Only companies in this category")
    args = parser.parse_args()

    if args.companies and args.category:
        parser.error("--company and --category are mutually exclusive")

    failures = asyncio.run(refresh(args.companies, args.category))
    sys.exit(1 if failures else 0)


if __name__ == "__main__":
    main()
