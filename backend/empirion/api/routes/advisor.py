"""Advisor Routes — AI field suggestions and plan audits for the wizard.

Invariants:
    - Advisory endpoints answer 200 with fallback=True when the AI call fails
    - Repository failures while loading the plan/history still propagate (503)
"""

import logging

from fastapi import APIRouter, Depends, Path

from empirion.api.dependencies import (
    get_plan_advisor, get_plan_lifecycle, get_plan_repository,
)
from empirion.core.domain_types import ChampionshipId, TeamId
from empirion.infrastructure.plan_repository import SqlPlanRepository
from empirion.schemas.advisor import (
    AdviceResponse, AuditPlanRequest, SuggestFieldRequest,
)
from empirion.services.plan_advisor import PlanAdvisor
from empirion.services.plan_lifecycle import PlanLifecycle
from empirion.services.team_history import load_history_table

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/advisor", tags=["advisor"])


@router.post("/suggest", response_model=AdviceResponse)
async def suggest_field(
    body: SuggestFieldRequest,
    advisor: PlanAdvisor = Depends(get_plan_advisor),
):
    advice = await advisor.suggest_field(
        body.step_label,
        body.domain_hint,
        body.current_state,
        body.context_prompt,
        body.branch,
    )
    return AdviceResponse(text=advice.text, fallback=advice.fallback)


@router.post(
    "/teams/{team_id}/plans/{round_number}/audit", response_model=AdviceResponse,
)
async def audit_plan(
    team_id: str,
    body: AuditPlanRequest,
    round_number: int = Path(ge=1),
    lifecycle: PlanLifecycle = Depends(get_plan_lifecycle),
    repository: SqlPlanRepository = Depends(get_plan_repository),
    advisor: PlanAdvisor = Depends(get_plan_advisor),
):
    """Audit the latest plan version against the team's KPI history."""
    doc = await lifecycle.load_or_init(
        TeamId(team_id), round_number, ChampionshipId(body.championship_id),
    )
    history = await load_history_table(repository, TeamId(team_id))
    advice = await advisor.audit_plan(body.step_label, doc, history)
    return AdviceResponse(text=advice.text, fallback=advice.fallback)
