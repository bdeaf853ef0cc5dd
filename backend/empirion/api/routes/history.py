"""History Routes — round-by-round KPI comparison table for the dashboard.

Invariants:
    - Unknown indicator or statement names → 400 UNKNOWN_INDICATOR
    - Duplicate rounds in stored history → 422 DUPLICATE_ROUND (never deduplicated)
    - Missing values serialize as null, never 0
"""

import logging

from fastapi import APIRouter, Depends, Query

from empirion.api.dependencies import get_plan_repository
from empirion.core.domain_types import TeamId
from empirion.core.kpi_catalogue import get_indicator, statement_indicators
from empirion.infrastructure.plan_repository import SqlPlanRepository
from empirion.schemas.history import HistoryResponse, HistoryRow
from empirion.services.team_history import load_history_table

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/teams/{team_id}/history", tags=["history"])

DASHBOARD_INDICATORS: tuple[str, ...] = (
    "roi", "bep", "solvency_index", "liquidity_current", "scissors_effect", "equity",
)


@router.get("", response_model=HistoryResponse)
async def get_history(
    team_id: str,
    indicator: list[str] | None = Query(None),
    statement: str | None = Query(None),
    repository: SqlPlanRepository = Depends(get_plan_repository),
):
    """KPI values per recorded round; statement=dre|cash_flow|balance_sheet for line items."""
    if statement:
        names = statement_indicators(statement)
    else:
        names = list(indicator or DASHBOARD_INDICATORS)
        for name in names:
            get_indicator(name)

    table = await load_history_table(repository, TeamId(team_id))
    rows = [
        HistoryRow(
            indicator=row["indicator"],
            statement=row["statement"],
            values=row["values"],
            deltas=[table.delta(r, row["indicator"]) for r in table.rounds],
        )
        for row in table.rows(names)
    ]
    return HistoryResponse(
        team_id=team_id,
        rounds=list(table.rounds),
        latest_round=table.latest_round,
        rows=rows,
    )
