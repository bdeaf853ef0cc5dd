"""Team History — loads a team's KPI snapshots and builds the history table.

Invariants:
    - Exactly one repository round-trip per call
    - RepositoryUnavailableError and DuplicateRoundError propagate unchanged
    - A team with no recorded rounds yields an empty table, not an error
"""

import logging

from empirion.core.domain_types import TeamId
from empirion.core.kpi_history import HistoryTable, aggregate
from empirion.core.repository_protocols import PlanRepository

logger = logging.getLogger(__name__)


async def load_history_table(
    repository: PlanRepository, team_id: TeamId,
) -> HistoryTable:
    snapshots = await repository.load_team_history(team_id)
    table = aggregate(snapshots)
    if table.is_empty:
        logger.info("No KPI history recorded yet", extra={"team_id": team_id})
        return table
    logger.debug(
        f"History table built with {len(table.rounds)} round(s)",
        extra={"team_id": team_id},
    )
    return table
