"""Anthropic Suggestion Service — SuggestionService implementation for plan advice.

Invariants:
    - Output is plain text; nothing here parses or validates it for the core
    - An empty model response raises SuggestionServiceError("empty_response")
    - Plan snapshot and KPI history are passed verbatim as JSON

Design Decisions:
    - Prompt text kept in this module: it is glue, never consulted by core rules
    - One system prompt per operation (field suggestion vs. plan audit)
"""

import json
import logging

from empirion.core.errors import ErrorContext, SuggestionServiceError
from empirion.infrastructure.anthropic_client import ResilientAnthropicClient

logger = logging.getLogger(__name__)

_SUGGEST_SYSTEM = (
    "You are a senior strategy consultant coaching a team in a business "
    "simulation. Write the requested business plan field in at most two short "
    "paragraphs. Be concrete and consistent with the team's current plan. "
    "Return only the field text."
)

_AUDIT_SYSTEM = (
    "You are an auditor reviewing a team's business plan in a business "
    "simulation. Compare the plan with the team's KPI history, point out "
    "inconsistencies, and give 3 improvement bullet points and 1 strategic "
    "highlight. Use clean markdown."
)


def _response_text(response) -> str:
    return "".join(
        block.text for block in response.content
        if getattr(block, "type", None) == "text"
    ).strip()


class AnthropicSuggestionService:
    """Advisory text generation on the Anthropic Messages API."""

    def __init__(
        self,
        client: ResilientAnthropicClient,
        model: str,
        max_tokens: int = 1024,
    ):
        self._client = client
        self._model = model
        self._max_tokens = max_tokens

    async def suggest_field(
        self,
        step_label: str,
        domain_hint: str,
        current_state_json: str,
        context_prompt: str,
        branch: str,
    ) -> str:
        content = (
            f"Business plan section: {step_label}\n"
            f"Field: {domain_hint}\n"
            f"Industry branch: {branch}\n"
            f"Guidance: {context_prompt}\n\n"
            f"Current plan state (JSON):\n{current_state_json}"
        )
        return await self._complete(_SUGGEST_SYSTEM, content, "suggest_field")

    async def audit_plan(
        self, step_label: str, plan_snapshot_json: str, history: list[dict],
    ) -> str:
        content = (
            f"Business plan section under review: {step_label}\n\n"
            f"Plan snapshot (JSON):\n{plan_snapshot_json}\n\n"
            f"KPI history by round (JSON):\n"
            f"{json.dumps(history, ensure_ascii=False)}"
        )
        return await self._complete(_AUDIT_SYSTEM, content, "audit_plan")

    async def _complete(self, system: str, content: str, operation: str) -> str:
        response = await self._client.create_message(
            model=self._model,
            max_tokens=self._max_tokens,
            system=system,
            messages=[{"role": "user", "content": content}],
            context=ErrorContext(debug_info={"operation": operation}),
        )
        text = _response_text(response)
        if not text:
            raise SuggestionServiceError(
                f"{operation} returned no text", "empty_response",
            )
        return text
