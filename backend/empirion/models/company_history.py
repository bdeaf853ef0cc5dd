"""CompanyHistory ORM — KPI snapshot written by the simulation engine per round.

Invariants:
    - Read-only to this service: rows are produced by the external engine
    - kpis holds the sparse indicator mapping, including nested statements

Design Decisions:
    - No unique (team_id, round) constraint: the engine owns uniqueness and the
      aggregator re-validates it (DuplicateRoundError) on every read
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from empirion.db.base import Base


class CompanyHistory(Base):
    """Per-round KPI snapshot for a team."""
    __tablename__ = "companies"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    team_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    championship_id: Mapped[str] = mapped_column(String(64), nullable=False)
    round: Mapped[int] = mapped_column(Integer, nullable=False)
    kpis: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
