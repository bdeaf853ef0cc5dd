"""BusinessPlan ORM — one row per saved version of a team's plan for a round.

Invariants:
    - (team_id, round, version) is unique: versions of a lineage never collide
    - version starts at 1; rows are never updated in place
    - data holds {steps, canvas, empathy, epicenter} as JSON

Design Decisions:
    - JSON column for plan data: the wizard schema is small and always read whole
    - Composite index on (team_id, round) serves the latest-version lookup
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, DateTime, Index, Integer, JSON, String, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from empirion.db.base import Base


class BusinessPlan(Base):
    """A single persisted version of a plan."""
    __tablename__ = "business_plans"
    __table_args__ = (
        UniqueConstraint(
            "team_id", "round", "version", name="uq_business_plans_lineage_version",
        ),
        Index("ix_business_plans_team_round", "team_id", "round"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    championship_id: Mapped[str] = mapped_column(String(64), nullable=False)
    team_id: Mapped[str] = mapped_column(String(64), nullable=False)
    round: Mapped[int] = mapped_column(Integer, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="draft",
    )
    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    visibility: Mapped[str] = mapped_column(
        String(20), nullable=False, default="private",
    )
    is_template: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    shared_with: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
