"""Resilient Anthropic Client — Messages API calls with bounded retry for the advisor.

Invariants:
    - At most max_retries + 1 attempts per create_message call
    - Retried: 429 (honouring Retry-After), 5xx, 529 overloaded, connection failures
    - Not retried: timeouts and every other 4xx
    - Whatever escapes is a SuggestionServiceError carrying the failure kind
      (rate_limit, connection_error, timeout, client_error)

Design Decisions:
    - Retry lives only on the advisory path; plan persistence never retries
    - SDK retries disabled (max_retries=0) so attempts are counted in one place
    - ±25% jitter on the exponential backoff
"""

import asyncio
import logging
import random

import anthropic
from anthropic import (
    APIConnectionError, APIError, APIStatusError, APITimeoutError, RateLimitError,
)

from empirion.core.errors import ErrorContext, SuggestionServiceError

logger = logging.getLogger(__name__)

_OVERLOADED = 529


def classify_failure(e: APIError) -> tuple[str, bool]:
    """(failure kind, retryable) for an SDK exception."""
    if isinstance(e, RateLimitError):
        return "rate_limit", True
    if isinstance(e, APITimeoutError):
        return "timeout", False
    if isinstance(e, APIConnectionError):
        return "connection_error", True
    if isinstance(e, APIStatusError) and (
        e.status_code >= 500 or e.status_code == _OVERLOADED
    ):
        return "connection_error", True
    return "client_error", False


def retry_after_ms(e: APIError) -> int | None:
    """Retry-After header in milliseconds, when the API sent a usable one."""
    response = getattr(e, "response", None)
    raw = response.headers.get("retry-after") if response is not None else None
    try:
        return int(float(raw) * 1000) if raw else None
    except ValueError:
        return None


class ResilientAnthropicClient:
    """AsyncAnthropic wrapper: retry with backoff, errors mapped to SuggestionServiceError."""

    def __init__(
        self,
        api_key: str,
        max_retries: int = 3,
        base_delay_ms: int = 1000,
        max_delay_ms: int = 30_000,
        timeout_seconds: int = 60,
    ):
        self.client = anthropic.AsyncAnthropic(
            api_key=api_key, timeout=timeout_seconds, max_retries=0,
        )
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms

    async def create_message(
        self,
        *,
        model: str,
        max_tokens: int,
        system: str,
        messages: list,
        context: ErrorContext | None = None,
    ):
        attempt = 0
        while True:
            try:
                response = await self.client.messages.create(
                    model=model,
                    max_tokens=max_tokens,
                    system=system,
                    messages=messages,
                )
            except APIError as e:
                kind, retryable = classify_failure(e)
                hint_ms = retry_after_ms(e) if kind == "rate_limit" else None
                if not retryable or attempt >= self.max_retries:
                    raise SuggestionServiceError(
                        f"{e} (after {attempt + 1} attempt(s))",
                        kind,
                        retry_after_ms=hint_ms,
                        context=context,
                    ) from e
                delay_ms = hint_ms if hint_ms is not None else self._backoff(attempt)
                logger.warning(
                    f"Anthropic {kind}, retrying in {delay_ms}ms",
                    extra={"attempt": attempt + 1},
                )
                await asyncio.sleep(delay_ms / 1000)
                attempt += 1
                continue

            usage = getattr(response, "usage", None)
            logger.info(
                "Anthropic call succeeded",
                extra={
                    "attempt": attempt + 1,
                    "input_tokens": getattr(usage, "input_tokens", None),
                    "output_tokens": getattr(usage, "output_tokens", None),
                },
            )
            return response

    def _backoff(self, attempt: int) -> int:
        delay = min(self.max_delay_ms, self.base_delay_ms * 2 ** attempt)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311
