"""Resilient Anthropic Client — retry, backoff and error mapping.

Invariants:
    - 429 / 5xx / 529 / connection errors retried up to max_retries
    - Timeouts and other 4xx fail immediately as SuggestionServiceError
    - Retry-After header is honoured and reported in milliseconds
"""

from unittest.mock import AsyncMock

import pytest

from empirion.core.errors import SuggestionServiceError
from empirion.infrastructure.anthropic_client import (
    ResilientAnthropicClient, classify_failure, retry_after_ms,
)

from tests.services.mock_anthropic import (
    connection_error, status_error, text_message, timeout_error,
)


def _client(*side_effect, max_retries=2) -> ResilientAnthropicClient:
    client = ResilientAnthropicClient(
        api_key="sk-ant-test", max_retries=max_retries, base_delay_ms=0,
    )
    client.client.messages.create = AsyncMock(side_effect=list(side_effect))
    return client


async def _call(client):
    return await client.create_message(
        model="m", max_tokens=10, system="s",
        messages=[{"role": "user", "content": "hi"}],
    )


async def test_success_first_try():
    client = _client(text_message("ok"))
    response = await _call(client)
    assert response.content[0].text == "ok"
    assert client.client.messages.create.await_count == 1


@pytest.mark.parametrize("error", [
    status_error(429), status_error(500), status_error(529), connection_error(),
])
async def test_transient_errors_are_retried(error):
    client = _client(error, text_message("ok"))
    response = await _call(client)
    assert response.content[0].text == "ok"
    assert client.client.messages.create.await_count == 2


async def test_rate_limit_exhausted_reports_retry_after():
    error = status_error(429, headers={"retry-after": "0"})
    client = _client(error, error, error, max_retries=2)
    with pytest.raises(SuggestionServiceError) as exc:
        await _call(client)
    assert exc.value.api_error_type == "rate_limit"
    assert exc.value.context.retry_after_ms == 0
    assert client.client.messages.create.await_count == 3


async def test_connection_errors_exhausted():
    client = _client(connection_error(), connection_error(), max_retries=1)
    with pytest.raises(SuggestionServiceError) as exc:
        await _call(client)
    assert exc.value.api_error_type == "connection_error"


async def test_client_error_not_retried():
    client = _client(status_error(400), text_message("never"))
    with pytest.raises(SuggestionServiceError) as exc:
        await _call(client)
    assert exc.value.api_error_type == "client_error"
    assert client.client.messages.create.await_count == 1


async def test_timeout_not_retried():
    client = _client(timeout_error(), text_message("never"))
    with pytest.raises(SuggestionServiceError) as exc:
        await _call(client)
    assert exc.value.api_error_type == "timeout"


def test_backoff_is_capped():
    client = ResilientAnthropicClient(
        api_key="sk-ant-test", base_delay_ms=1000, max_delay_ms=2000,
    )
    assert 1500 <= client._backoff(5) <= 2500


def test_classify_failure():
    assert classify_failure(status_error(529)) == ("connection_error", True)
    assert classify_failure(status_error(400)) == ("client_error", False)
    assert classify_failure(timeout_error()) == ("timeout", False)


def test_retry_after_parsing():
    assert retry_after_ms(status_error(429, {"retry-after": "1.5"})) == 1500
    assert retry_after_ms(status_error(429, {"retry-after": "soon"})) is None
    assert retry_after_ms(status_error(429)) is None
