"""Plan Document — versioned composite record for one team's plan in one round.

Invariants:
    - canvas always holds exactly the 9 CanvasBlock keys, empathy the 6 EmpathyBlock keys
    - steps holds only indices in 0..step_count-1; unset steps are absent, never None
    - version == 0 means "never persisted" (lineage status is none)
    - round is a positive integer

Design Decisions:
    - Plain dataclass, updated by returning copies (core/plan_updates.py) — callers
      keep their previous value for retry after a failed save
    - Defaults built by functions, not module-level dicts: no shared mutable state
"""

from dataclasses import dataclass, field

from empirion.core.domain_types import (
    CanvasBlock, ChampionshipId, EmpathyBlock, Epicenter, PlanId, PlanStatus,
    TeamId, Visibility,
)
from empirion.core.errors import InvalidRoundError


def default_canvas() -> dict[CanvasBlock, str]:
    return {block: "" for block in CanvasBlock}


def default_empathy() -> dict[EmpathyBlock, str]:
    return {block: "" for block in EmpathyBlock}


@dataclass
class PlanDocument:
    """One version of a team's business plan for a round."""

    team_id: TeamId
    championship_id: ChampionshipId
    round: int
    id: PlanId | None = None
    version: int = 0
    status: PlanStatus = PlanStatus.DRAFT

    # Wizard pillars — step index -> {"text": str, ...}
    steps: dict[int, dict] = field(default_factory=dict)
    canvas: dict[CanvasBlock, str] = field(default_factory=default_canvas)
    empathy: dict[EmpathyBlock, str] = field(default_factory=default_empathy)
    epicenter: Epicenter = Epicenter.OFFER

    # Access-control metadata (reset on every save)
    visibility: Visibility = Visibility.PRIVATE
    is_template: bool = False
    shared_with: tuple[str, ...] = ()

    @property
    def is_persisted(self) -> bool:
        return self.version > 0

    @property
    def lineage_status(self) -> PlanStatus | None:
        """Status the lineage is in, or None when nothing has been saved yet."""
        return self.status if self.is_persisted else None

    def step_text(self, step_index: int) -> str:
        return self.steps.get(step_index, {}).get("text", "")


def ensure_valid_round(round_number: object) -> int:
    """Reject anything that is not a positive int (bool excluded)."""
    if (
        isinstance(round_number, bool)
        or not isinstance(round_number, int)
        or round_number < 1
    ):
        raise InvalidRoundError(round_number)
    return round_number


def new_plan_document(
    team_id: TeamId, championship_id: ChampionshipId, round_number: int,
) -> PlanDocument:
    """Fresh, unpersisted plan with every schema default applied."""
    return PlanDocument(
        team_id=team_id,
        championship_id=championship_id,
        round=ensure_valid_round(round_number),
    )
