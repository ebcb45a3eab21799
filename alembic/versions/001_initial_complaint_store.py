"""Initial complaint store: companies, complaints, updates, reputation tables.

Revision ID: 001_initial_complaint_store
Revises:
Create Date: 2026-10-19

Creates five tables:
- companies: Companies complaints are filed against
- complaints: Consumer complaints with distribution channels and tracking
- complaint_updates: Append-only update events per complaint
- company_reputations: Last known reputation snapshot per company
- reputation_history: Dated score points appended on every snapshot refresh
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_initial_complaint_store"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── companies table ─────────────────────────────────────────────────

    op.create_table(
        "companies",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(300), nullable=False),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    )
    op.create_index("ix_companies_category", "companies", ["category"])

    # ── complaints table ────────────────────────────────────────────────

    op.create_table(
        "complaints",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column(
            "company_id",
            sa.String(64),
            sa.ForeignKey("companies.id"),
            nullable=False,
        ),
        sa.Column("user_id", sa.String(64), nullable=False, server_default=""),
        sa.Column("title", sa.String(300), nullable=False, server_default=""),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("priority", sa.String(20), nullable=False, server_default="MEDIUM"),
        sa.Column("status", sa.String(20), nullable=False, server_default="ANALYSIS"),
        sa.Column("channels", sa.JSON(), nullable=True),
        sa.Column("external_tracking", sa.JSON(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "ix_complaints_company_created",
        "complaints",
        ["company_id", "created_at"],
    )

    # ── complaint_updates table ─────────────────────────────────────────

    op.create_table(
        "complaint_updates",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "complaint_id",
            sa.String(64),
            sa.ForeignKey("complaints.id"),
            nullable=False,
        ),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("source", sa.String(20), nullable=False, server_default="system"),
        sa.Column("metadata_json", sa.JSON(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    )
    op.create_index(
        "ix_complaint_updates_complaint_id",
        "complaint_updates",
        ["complaint_id"],
    )

    # ── company_reputations table ───────────────────────────────────────

    op.create_table(
        "company_reputations",
        sa.Column(
            "company_id",
            sa.String(64),
            sa.ForeignKey("companies.id"),
            primary_key=True,
        ),
        sa.Column("overall_score", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_complaints", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("resolved_complaints", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("average_resolution_time", sa.Float(), nullable=False, server_default="0"),
        sa.Column("response_rate", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("satisfaction_score", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("trend", sa.String(20), nullable=False, server_default="stable"),
        sa.Column("badges", sa.JSON(), nullable=True),
        sa.Column("category_ranking", sa.JSON(), nullable=True),
        sa.Column(
            "last_updated",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    )

    # ── reputation_history table ────────────────────────────────────────

    op.create_table(
        "reputation_history",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "company_id",
            sa.String(64),
            sa.ForeignKey("companies.id"),
            nullable=False,
        ),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("total_complaints", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("resolved_complaints", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index(
        "ix_reputation_history_company_date",
        "reputation_history",
        ["company_id", "date"],
    )


def downgrade() -> None:
    op.drop_index("ix_reputation_history_company_date", table_name="reputation_history")
    op.drop_table("reputation_history")
    op.drop_table("company_reputations")
    op.drop_index("ix_complaint_updates_complaint_id", table_name="complaint_updates")
    op.drop_table("complaint_updates")
    op.drop_index("ix_complaints_company_created", table_name="complaints")
    op.drop_table("complaints")
    op.drop_index("ix_companies_category", table_name="companies")
    op.drop_table("companies")
