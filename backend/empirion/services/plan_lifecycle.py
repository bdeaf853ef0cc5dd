"""Plan Lifecycle — load, edit and save plan versions for a team's round.

Invariants:
    - load_or_init and save perform exactly one repository round-trip each
    - Field updates are pure and delegate to core/plan_updates.py
    - save never mutates the caller's document; on repository failure the error
      propagates unchanged and the same document can be saved again
    - No automatic retry, no background work

Design Decisions:
    - Thin class over pure functions: the class only carries the repository and
      the configured wizard size, every rule lives in core/
    - "Not found" on load is the normal first-visit case: a default document with
      version 0 is returned instead of raising
"""

import logging

from empirion.core.domain_types import (
    ChampionshipId, DEFAULT_WIZARD_STEP_COUNT, PlanStatus, TeamId,
)
from empirion.core.enforce_transition import prepare_for_save
from empirion.core.errors import UnknownFieldError
from empirion.core.plan_audit import AuditEntry, audit_trail
from empirion.core.plan_document import (
    PlanDocument, ensure_valid_round, new_plan_document,
)
from empirion.core import plan_updates
from empirion.core.repository_protocols import PlanRepository

logger = logging.getLogger(__name__)


def parse_status(value: PlanStatus | str) -> PlanStatus:
    try:
        return PlanStatus(value)
    except ValueError:
        raise UnknownFieldError("status", str(value)) from None


class PlanLifecycle:
    """Status machine, versioning and field edits for PlanDocuments."""

    def __init__(
        self,
        repository: PlanRepository,
        step_count: int = DEFAULT_WIZARD_STEP_COUNT,
    ):
        self._repository = repository
        self.step_count = step_count

    async def load_or_init(
        self,
        team_id: TeamId,
        round_number: int,
        championship_id: ChampionshipId,
    ) -> PlanDocument:
        """Latest persisted version for (team, round), or a fresh default plan."""
        ensure_valid_round(round_number)
        doc = await self._repository.load_active_plan(team_id, round_number)
        if doc is None:
            logger.info(
                "No plan persisted yet, starting from defaults",
                extra={"team_id": team_id, "round_number": round_number},
            )
            return new_plan_document(team_id, championship_id, round_number)
        return doc

    def update_step(self, doc: PlanDocument, step_index: int, text: str) -> PlanDocument:
        return plan_updates.update_step(doc, step_index, text, self.step_count)

    def update_canvas_block(self, doc: PlanDocument, block_name: str, text: str) -> PlanDocument:
        return plan_updates.update_canvas_block(doc, block_name, text)

    def update_empathy_block(self, doc: PlanDocument, block_name: str, text: str) -> PlanDocument:
        return plan_updates.update_empathy_block(doc, block_name, text)

    def set_epicenter(self, doc: PlanDocument, value: str) -> PlanDocument:
        return plan_updates.set_epicenter(doc, value)

    async def save(
        self, doc: PlanDocument, target_status: PlanStatus | str,
    ) -> PlanDocument:
        """Persist doc as the next version of its lineage with target_status."""
        prepared = prepare_for_save(doc, parse_status(target_status))
        persisted = await self._repository.save_plan(prepared)
        logger.info(
            "Plan saved",
            extra={
                "team_id": persisted.team_id,
                "round_number": persisted.round,
                "plan_version": persisted.version,
                "plan_status": persisted.status.value,
            },
        )
        return persisted

    async def submit(self, doc: PlanDocument) -> PlanDocument:
        return await self.save(doc, PlanStatus.SUBMITTED)

    async def load_audit_trail(
        self, team_id: TeamId, round_number: int,
    ) -> list[AuditEntry]:
        """Field-level change log across every saved version of the lineage."""
        ensure_valid_round(round_number)
        lineage = await self._repository.load_lineage(team_id, round_number)
        return audit_trail(lineage)
