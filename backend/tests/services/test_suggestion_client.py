"""Anthropic Suggestion Service — prompt assembly and response handling."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from empirion.core.errors import SuggestionServiceError
from empirion.infrastructure.suggestion_client import AnthropicSuggestionService

from tests.services.mock_anthropic import empty_message, text_message


def _service(response):
    client = MagicMock()
    client.create_message = AsyncMock(return_value=response)
    return AnthropicSuggestionService(client, model="test-model", max_tokens=256), client


async def test_suggest_field_builds_prompt():
    service, client = _service(text_message("Sell to ", "SMEs."))
    text = await service.suggest_field(
        "Market analysis", "target customers", '{"canvas": {}}', "B2B only", "commercial",
    )
    assert text == "Sell to SMEs."
    kwargs = client.create_message.await_args.kwargs
    assert kwargs["model"] == "test-model"
    assert kwargs["max_tokens"] == 256
    content = kwargs["messages"][0]["content"]
    assert "Market analysis" in content
    assert "commercial" in content
    assert '{"canvas": {}}' in content


async def test_audit_plan_includes_history_json():
    service, client = _service(text_message("- tighten costs"))
    history = [{"round": 1, "kpis": {"roi": 2.0}}]
    await service.audit_plan("Financial plan", '{"version": 1}', history)
    content = client.create_message.await_args.kwargs["messages"][0]["content"]
    assert json.dumps(history) in content
    assert '{"version": 1}' in content


async def test_empty_response_raises():
    service, _ = _service(empty_message())
    with pytest.raises(SuggestionServiceError) as exc:
        await service.suggest_field("s", "d", "{}", "", "industrial")
    assert exc.value.api_error_type == "empty_response"


async def test_client_errors_propagate():
    service, client = _service(None)
    client.create_message.side_effect = SuggestionServiceError("down", "timeout")
    with pytest.raises(SuggestionServiceError):
        await service.audit_plan("s", "{}", [])
