"""SQL Plan Repository — PlanRepository implementation on SQLAlchemy async sessions.

Invariants:
    - save_plan inserts exactly one business_plans row; existing rows never change
    - The status transition is checked first, against the latest persisted row in
      the same transaction: a stale copy of a submitted plan fails with
      InvalidTransitionError, never with a version error
    - The persisted version is stamped as latest + 1 inside that transaction, so
      versions stay gapless and two saves from the same loaded copy become two
      sequential versions (the later payload wins)
    - A unique-constraint collision with a concurrent insert is restamped, up to
      _MAX_STAMP_ATTEMPTS, then surfaces as ValidationRejectedError(VERSION_CONFLICT)
    - Any failure rolls the session back before the error leaves save_plan

Design Decisions:
    - Loaded rows go through plan_from_record (merge-with-defaults); stray keys
      found in legacy rows are logged, then dropped
    - Repository bound to one AsyncSession: the request owns the unit of work
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from empirion.core.domain_types import DEFAULT_WIZARD_STEP_COUNT, PlanStatus, TeamId
from empirion.core.enforce_transition import ensure_transition
from empirion.core.errors import EmpirionError, ErrorContext, ValidationRejectedError
from empirion.core.kpi_history import KPISnapshot
from empirion.core.plan_document import PlanDocument
from empirion.core.plan_snapshot import (
    find_stray_keys, plan_data_to_json, plan_from_record,
)
from empirion.infrastructure.database import map_db_error
from empirion.models.business_plan import BusinessPlan
from empirion.models.company_history import CompanyHistory

logger = logging.getLogger(__name__)

_MAX_STAMP_ATTEMPTS = 3


def _persisted_status(row: BusinessPlan, context: ErrorContext) -> PlanStatus:
    try:
        return PlanStatus(row.status)
    except ValueError:
        raise ValidationRejectedError(
            f"Persisted plan has invalid status {row.status!r}",
            "INVALID_RECORD",
            context,
        ) from None


class SqlPlanRepository:
    """Plan and KPI history persistence backed by the relational store."""

    def __init__(
        self, db: AsyncSession, step_count: int = DEFAULT_WIZARD_STEP_COUNT,
    ):
        self._db = db
        self._step_count = step_count

    async def load_active_plan(
        self, team_id: TeamId, round_number: int,
    ) -> PlanDocument | None:
        try:
            row = await self._latest_row(team_id, round_number)
        except SQLAlchemyError as e:
            raise map_db_error(e, "load_active_plan") from e
        return self._to_document(row) if row else None

    async def save_plan(self, document: PlanDocument) -> PlanDocument:
        context = ErrorContext(
            team_id=document.team_id,
            round_number=document.round,
            plan_version=document.version,
        )
        for attempt in range(1, _MAX_STAMP_ATTEMPTS + 1):
            try:
                row = await self._insert_next_version(document, context)
            except IntegrityError as e:
                await self._db.rollback()
                if attempt == _MAX_STAMP_ATTEMPTS:
                    raise ValidationRejectedError(
                        "Concurrent saves kept claiming the next plan version",
                        "VERSION_CONFLICT",
                        context,
                    ) from e
                logger.warning(
                    "Plan version taken by a concurrent save, restamping",
                    extra={
                        "team_id": document.team_id,
                        "round_number": document.round,
                        "attempt": attempt,
                    },
                )
                continue
            except SQLAlchemyError as e:
                await self._db.rollback()
                raise map_db_error(e, "save_plan") from e
            except EmpirionError:
                await self._db.rollback()
                raise
            break

        logger.info(
            "Plan version persisted",
            extra={
                "team_id": row.team_id,
                "round_number": row.round,
                "plan_version": row.version,
                "plan_status": row.status,
            },
        )
        return self._to_document(row)

    async def load_team_history(self, team_id: TeamId) -> list[KPISnapshot]:
        try:
            result = await self._db.execute(
                select(CompanyHistory)
                .where(CompanyHistory.team_id == team_id)
                .order_by(CompanyHistory.round),
            )
            rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise map_db_error(e, "load_team_history") from e
        return [KPISnapshot(round=row.round, kpis=row.kpis or {}) for row in rows]

    async def load_lineage(
        self, team_id: TeamId, round_number: int,
    ) -> list[PlanDocument]:
        try:
            result = await self._db.execute(
                select(BusinessPlan)
                .where(
                    BusinessPlan.team_id == team_id,
                    BusinessPlan.round == round_number,
                )
                .order_by(BusinessPlan.version),
            )
            rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise map_db_error(e, "load_lineage") from e
        return [self._to_document(row) for row in rows]

    async def _insert_next_version(
        self, document: PlanDocument, context: ErrorContext,
    ) -> BusinessPlan:
        latest = await self._latest_row(document.team_id, document.round)
        ensure_transition(
            _persisted_status(latest, context) if latest else None,
            document.status,
            context,
        )
        row = self._to_row(document, version=(latest.version if latest else 0) + 1)
        self._db.add(row)
        await self._db.commit()
        await self._db.refresh(row)
        return row

    async def _latest_row(
        self, team_id: TeamId, round_number: int,
    ) -> BusinessPlan | None:
        result = await self._db.execute(
            select(BusinessPlan)
            .where(
                BusinessPlan.team_id == team_id,
                BusinessPlan.round == round_number,
            )
            .order_by(BusinessPlan.version.desc())
            .limit(1),
        )
        return result.scalar_one_or_none()

    def _to_document(self, row: BusinessPlan) -> PlanDocument:
        stray = find_stray_keys(row.data, self._step_count)
        if stray:
            logger.warning(
                f"Dropping fields outside the plan schema: {', '.join(stray)}",
                extra={
                    "team_id": row.team_id,
                    "round_number": row.round,
                    "plan_version": row.version,
                },
            )
        return plan_from_record(
            {
                "id": row.id,
                "championship_id": row.championship_id,
                "team_id": row.team_id,
                "round": row.round,
                "version": row.version,
                "status": row.status,
                "data": row.data,
                "visibility": row.visibility,
                "is_template": row.is_template,
                "shared_with": row.shared_with,
            },
            self._step_count,
        )

    @staticmethod
    def _to_row(document: PlanDocument, version: int) -> BusinessPlan:
        return BusinessPlan(
            championship_id=document.championship_id,
            team_id=document.team_id,
            round=document.round,
            version=version,
            status=document.status.value,
            data=plan_data_to_json(document),
            visibility=document.visibility.value,
            is_template=document.is_template,
            shared_with=list(document.shared_with),
        )
