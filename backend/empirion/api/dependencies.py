"""Route Dependencies — wires repositories and services for request handlers.

Invariants:
    - One SqlPlanRepository per request, bound to the request's AsyncSession
    - Wizard size always comes from Settings.plan_wizard_steps

Design Decisions:
    - Factories as FastAPI dependencies: tests swap them via dependency_overrides
    - Placeholder API key => no SuggestionService; PlanAdvisor answers with fallbacks
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from empirion.config import get_settings
from empirion.infrastructure.anthropic_client import ResilientAnthropicClient
from empirion.infrastructure.database import get_db
from empirion.infrastructure.plan_repository import SqlPlanRepository
from empirion.infrastructure.suggestion_client import AnthropicSuggestionService
from empirion.services.plan_advisor import PlanAdvisor
from empirion.services.plan_lifecycle import PlanLifecycle


def get_plan_repository(db: AsyncSession = Depends(get_db)) -> SqlPlanRepository:
    return SqlPlanRepository(db, get_settings().plan_wizard_steps)


def get_plan_lifecycle(
    repository: SqlPlanRepository = Depends(get_plan_repository),
) -> PlanLifecycle:
    return PlanLifecycle(repository, get_settings().plan_wizard_steps)


@lru_cache
def _suggestion_service() -> AnthropicSuggestionService | None:
    settings = get_settings()
    if not settings.advisor_enabled:
        return None
    client = ResilientAnthropicClient(
        api_key=settings.anthropic_api_key,
        max_retries=settings.anthropic_max_retries,
        base_delay_ms=settings.anthropic_base_delay_ms,
        max_delay_ms=settings.anthropic_max_delay_ms,
        timeout_seconds=settings.anthropic_timeout_seconds,
    )
    return AnthropicSuggestionService(
        client, settings.advisor_model, settings.advisor_max_tokens,
    )


def get_plan_advisor() -> PlanAdvisor:
    return PlanAdvisor(_suggestion_service())
