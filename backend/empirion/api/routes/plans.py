"""Plan Routes — load, save and audit a team's plan for a round.

Invariants:
    - PUT applies field edits through PlanLifecycle, so unknown blocks, bad step
      indices and backward transitions fail with the same domain errors as in-process
    - PUT checks the requested status against the latest persisted status before
      anything else: a locked plan answers 409 INVALID_TRANSITION
    - PUT always creates the next version (latest + 1); base_version is an opt-in
      guard that rejects a stale client copy with 422 VERSION_CONFLICT
    - GET never 404s: an unsaved plan comes back with version 0 and defaults

Design Decisions:
    - (team, round) in the path, championship in query/body: the plan lineage key
      is (team, round), the championship only labels new documents
"""

import logging

from fastapi import APIRouter, Depends, Path, Query, status

from empirion.api.dependencies import get_plan_lifecycle
from empirion.core.domain_types import ChampionshipId, TeamId
from empirion.core.enforce_transition import ensure_transition
from empirion.core.errors import ErrorContext, ValidationRejectedError
from empirion.core.plan_document import PlanDocument
from empirion.schemas.plan import AuditEntryResponse, PlanResponse, PlanSaveRequest
from empirion.services.plan_lifecycle import PlanLifecycle, parse_status

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/teams/{team_id}/plans", tags=["plans"])


def _apply_edits(
    lifecycle: PlanLifecycle, doc: PlanDocument, body: PlanSaveRequest,
) -> PlanDocument:
    for step_index, text in sorted(body.steps.items()):
        doc = lifecycle.update_step(doc, step_index, text)
    for block_name, text in body.canvas.items():
        doc = lifecycle.update_canvas_block(doc, block_name, text)
    for block_name, text in body.empathy.items():
        doc = lifecycle.update_empathy_block(doc, block_name, text)
    if body.epicenter is not None:
        doc = lifecycle.set_epicenter(doc, body.epicenter)
    return doc


@router.get("/{round_number}", response_model=PlanResponse)
async def get_plan(
    team_id: str,
    round_number: int = Path(ge=1),
    championship_id: str = Query(min_length=1, max_length=64),
    lifecycle: PlanLifecycle = Depends(get_plan_lifecycle),
):
    """Latest plan version for the round, or an unsaved default plan."""
    doc = await lifecycle.load_or_init(
        TeamId(team_id), round_number, ChampionshipId(championship_id),
    )
    return PlanResponse.from_document(doc)


@router.put(
    "/{round_number}", response_model=PlanResponse,
    status_code=status.HTTP_201_CREATED,
)
async def save_plan(
    team_id: str,
    body: PlanSaveRequest,
    round_number: int = Path(ge=1),
    lifecycle: PlanLifecycle = Depends(get_plan_lifecycle),
):
    """Create the next plan version with the given edits and status."""
    doc = await lifecycle.load_or_init(
        TeamId(team_id), round_number, ChampionshipId(body.championship_id),
    )
    target = parse_status(body.status)
    ensure_transition(doc.lineage_status, target, ErrorContext(
        team_id=team_id, round_number=round_number, plan_version=doc.version,
    ))
    if body.base_version is not None and doc.version != body.base_version:
        raise ValidationRejectedError(
            f"Plan was saved as version {doc.version} since version "
            f"{body.base_version} was loaded",
            "VERSION_CONFLICT",
            ErrorContext(
                team_id=team_id, round_number=round_number, plan_version=doc.version,
            ),
        )
    doc = _apply_edits(lifecycle, doc, body)
    persisted = await lifecycle.save(doc, target)
    return PlanResponse.from_document(persisted)


@router.get(
    "/{round_number}/audit-trail", response_model=list[AuditEntryResponse],
)
async def get_audit_trail(
    team_id: str,
    round_number: int = Path(ge=1),
    lifecycle: PlanLifecycle = Depends(get_plan_lifecycle),
):
    """Field-level change log across all versions of the round's plan."""
    entries = await lifecycle.load_audit_trail(TeamId(team_id), round_number)
    return [AuditEntryResponse.from_entry(e) for e in entries]
