"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection
    - "No plan yet" is a successful None, never an error

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Async in Protocol: boundary methods are async because implementations do IO,
      but core pure functions are never async themselves — the shell
      orchestrates the async calls around the pure logic
"""

from typing import Protocol

from empirion.core.domain_types import TeamId
from empirion.core.kpi_history import KPISnapshot
from empirion.core.plan_document import PlanDocument


class PlanRepository(Protocol):
    """Contract for plan and KPI history persistence — implemented by shell.

    Raises RepositoryUnavailableError on transport failure and
    ValidationRejectedError when the store refuses a record.
    """
    async def load_active_plan(
        self, team_id: TeamId, round_number: int,
    ) -> PlanDocument | None: ...
    async def save_plan(self, document: PlanDocument) -> PlanDocument: ...
    async def load_team_history(self, team_id: TeamId) -> list[KPISnapshot]: ...
    async def load_lineage(
        self, team_id: TeamId, round_number: int,
    ) -> list[PlanDocument]: ...


class SuggestionService(Protocol):
    """Contract for advisory AI text — output is opaque to the core."""
    async def suggest_field(
        self,
        step_label: str,
        domain_hint: str,
        current_state_json: str,
        context_prompt: str,
        branch: str,
    ) -> str: ...
    async def audit_plan(
        self, step_label: str, plan_snapshot_json: str, history: list[dict],
    ) -> str: ...
