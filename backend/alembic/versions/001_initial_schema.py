"""Initial schema — business_plans (versioned plans), companies (KPI history).

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "business_plans",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("championship_id", sa.String(64), nullable=False),
        sa.Column("team_id", sa.String(64), nullable=False),
        sa.Column("round", sa.Integer, nullable=False),
        sa.Column("version", sa.Integer, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("data", sa.JSON, nullable=False),
        sa.Column("visibility", sa.String(20), nullable=False, server_default="private"),
        sa.Column("is_template", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("shared_with", sa.JSON, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint(
            "team_id", "round", "version", name="uq_business_plans_lineage_version",
        ),
    )
    op.create_index(
        "ix_business_plans_team_round", "business_plans", ["team_id", "round"],
    )

    op.create_table(
        "companies",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("team_id", sa.String(64), nullable=False),
        sa.Column("championship_id", sa.String(64), nullable=False),
        sa.Column("round", sa.Integer, nullable=False),
        sa.Column("kpis", sa.JSON, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_companies_team_id", "companies", ["team_id"])


def downgrade() -> None:
    op.drop_index("ix_companies_team_id", table_name="companies")
    op.drop_table("companies")
    op.drop_index("ix_business_plans_team_round", table_name="business_plans")
    op.drop_table("business_plans")
