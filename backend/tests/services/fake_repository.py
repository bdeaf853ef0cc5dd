"""In-Memory Plan Repository — PlanRepository fake for lifecycle and advisor tests.

Invariants:
    - Stores deep copies: tests cannot mutate persisted versions by accident
    - Same save rules as SqlPlanRepository: transition checked against the latest
      stored version first, then the version stamped as latest + 1
    - fail_with injects one failure into the next call of a method
    - calls records every repository method invoked, in order

Design Decisions:
    - Structural fake (no inheritance): PlanRepository is a Protocol
"""

import copy
from dataclasses import replace

from empirion.core.enforce_transition import ensure_transition
from empirion.core.kpi_history import KPISnapshot


class InMemoryPlanRepository:
    """Dict-backed PlanRepository with failure injection."""

    def __init__(self, history: dict | None = None):
        self.plans: dict[tuple, list] = {}
        self.history: dict[str, list[KPISnapshot]] = history or {}
        self.calls: list[str] = []
        self._failures: dict[str, Exception] = {}

    def fail_with(self, method: str, error: Exception) -> None:
        """Raise `error` on the next call to `method`."""
        self._failures[method] = error

    def _record(self, method: str) -> None:
        self.calls.append(method)
        error = self._failures.pop(method, None)
        if error is not None:
            raise error

    async def load_active_plan(self, team_id, round_number):
        self._record("load_active_plan")
        lineage = self.plans.get((team_id, round_number))
        return copy.deepcopy(lineage[-1]) if lineage else None

    async def save_plan(self, document):
        self._record("save_plan")
        lineage = self.plans.setdefault((document.team_id, document.round), [])
        ensure_transition(lineage[-1].status if lineage else None, document.status)
        persisted = replace(copy.deepcopy(document), version=len(lineage) + 1)
        lineage.append(persisted)
        return copy.deepcopy(persisted)

    async def load_team_history(self, team_id):
        self._record("load_team_history")
        return list(self.history.get(team_id, []))

    async def load_lineage(self, team_id, round_number):
        self._record("load_lineage")
        return copy.deepcopy(self.plans.get((team_id, round_number), []))
