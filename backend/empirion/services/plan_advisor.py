"""Plan Advisor — best-effort AI suggestions and audits for the plan wizard.

Invariants:
    - Never raises: any failure of the SuggestionService becomes fallback text
    - Never touches a PlanDocument; the caller decides where suggested text goes
    - Fallback results are flagged so the UI can show them differently

Design Decisions:
    - Broad except on the advisory path only: suggestion quality is not part of
      the plan's correctness contract, so a broken model call must not block editing
    - No service configured (e.g. missing API key) is treated like a failed call
"""

import json
import logging
from dataclasses import dataclass

from empirion.core.kpi_history import HistoryTable
from empirion.core.plan_document import PlanDocument
from empirion.core.plan_snapshot import plan_to_record
from empirion.core.repository_protocols import SuggestionService

logger = logging.getLogger(__name__)

SUGGESTION_FALLBACK = "AI assistance is unavailable right now. Please write this field manually."
AUDIT_FALLBACK = "Plan audit is unavailable right now. Please review the plan manually."


@dataclass(frozen=True)
class Advice:
    """Text returned to the wizard; fallback=True when the service failed."""
    text: str
    fallback: bool = False


class PlanAdvisor:
    """Wraps a SuggestionService with graceful degradation."""

    def __init__(self, service: SuggestionService | None):
        self._service = service

    async def suggest_field(
        self,
        step_label: str,
        domain_hint: str,
        current_state: dict,
        context_prompt: str,
        branch: str,
    ) -> Advice:
        if self._service is None:
            return Advice(SUGGESTION_FALLBACK, fallback=True)
        try:
            text = await self._service.suggest_field(
                step_label,
                domain_hint,
                json.dumps(current_state, ensure_ascii=False),
                context_prompt,
                branch,
            )
        except Exception as e:
            logger.warning(
                f"Field suggestion failed, using fallback: {e}",
                extra={"error_code": getattr(e, "code", None)},
            )
            return Advice(SUGGESTION_FALLBACK, fallback=True)
        return Advice(text)

    async def audit_plan(
        self, step_label: str, doc: PlanDocument, history: HistoryTable,
    ) -> Advice:
        if self._service is None:
            return Advice(AUDIT_FALLBACK, fallback=True)
        try:
            text = await self._service.audit_plan(
                step_label,
                json.dumps(plan_to_record(doc), ensure_ascii=False),
                history.to_history_payload(),
            )
        except Exception as e:
            logger.warning(
                f"Plan audit failed, using fallback: {e}",
                extra={
                    "team_id": doc.team_id,
                    "round_number": doc.round,
                    "error_code": getattr(e, "code", None),
                },
            )
            return Advice(AUDIT_FALLBACK, fallback=True)
        return Advice(text)
