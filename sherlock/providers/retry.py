"""Fixed-delay retry policy for provider calls.

Wraps a zero-argument coroutine factory in ``tenacity.AsyncRetrying``:

- every failure is classified into a ``ProviderError`` first
- MISSING_API_KEY, UNSUPPORTED_OPERATION and PARSE_ERROR stop immediately
- RATE_LIMITED and UPSTREAM_ERROR are retried after a fixed delay until the
  budget (``retries`` extra attempts) is spent, then the last error is raised
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, TypeVar

from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_fixed

from sherlock.config import get_settings
from sherlock.models.ai_models import AIProvider
from sherlock.observability.debug_log import log_provider_debug
from sherlock.observability.metrics import (
    track_provider_attempt,
    track_provider_failure,
    track_provider_latency,
)
from sherlock.providers.errors import (
    ProviderError,
    ProviderErrorCode,
    UpstreamHttpError,
    to_provider_error,
)
from sherlock.providers.types import ProviderOperation

T = TypeVar("T")


def _should_retry(error: BaseException) -> bool:
    return isinstance(error, ProviderError) and error.is_retryable


async def with_provider_retry(
    fn: Callable[[], Awaitable[T]],
    *,
    provider: AIProvider,
    model_id: str,
    operation: ProviderOperation,
    retries: int | None = None,
    delay_ms: int | None = None,
    attempt_timeout: float | None = None,
    sleep: Callable[[float], Awaitable[Any]] | None = None,
) -> T:
    """
    Run ``fn`` under the provider retry policy.

    Args:
        fn: Coroutine factory; called once per attempt.
        provider: Provider being called (for classification and logging).
        model_id: Model id (for logging).
        operation: Logical operation (for classification and logging).
        retries: Extra attempts after the first. Defaults to PROVIDER_MAX_RETRIES.
        delay_ms: Fixed delay between attempts. Defaults to PROVIDER_RETRY_DELAY_MS.
        attempt_timeout: Optional per-attempt deadline in seconds. Defaults to
            PROVIDER_ATTEMPT_TIMEOUT (unset means no deadline).
        sleep: Awaitable sleep used between attempts.

    Returns:
        The value produced by the first successful attempt.

    Raises:
        ProviderError: The classified error of the final failed attempt.
    """
    settings = get_settings()
    retries = settings.PROVIDER_MAX_RETRIES if retries is None else max(0, retries)
    delay_seconds = settings.retry_delay_seconds if delay_ms is None else max(0, delay_ms) / 1000.0
    if attempt_timeout is None:
        attempt_timeout = settings.PROVIDER_ATTEMPT_TIMEOUT

    retrying = AsyncRetrying(
        stop=stop_after_attempt(retries + 1),
        wait=wait_fixed(delay_seconds),
        retry=retry_if_exception(_should_retry),
        sleep=sleep or asyncio.sleep,
        reraise=True,
    )

    async for attempt in retrying:
        with attempt:
            retry_count = attempt.retry_state.attempt_number - 1
            log_provider_debug(
                provider=provider.value,
                model_id=model_id,
                operation=operation.value,
                retry_count=retry_count,
            )
            track_provider_attempt(provider.value, operation.value)

            try:
                with track_provider_latency(provider.value, operation.value):
                    if attempt_timeout:
                        return await asyncio.wait_for(fn(), timeout=attempt_timeout)
                    return await fn()
            except asyncio.TimeoutError as e:
                wrapped = to_provider_error(
                    provider,
                    operation,
                    UpstreamHttpError(f"Provider attempt timed out after {attempt_timeout}s"),
                )
                _record_failure(wrapped, model_id, retry_count)
                raise wrapped from e
            except Exception as e:
                wrapped = to_provider_error(provider, operation, e)
                _record_failure(wrapped, model_id, retry_count)
                if wrapped is e:
                    raise
                raise wrapped from e

    # Should not be reached
    raise ProviderError(
        code=ProviderErrorCode.UPSTREAM_ERROR,
        provider=provider,
        operation=operation,
        message="Retry loop exhausted unexpectedly.",
    )


def _record_failure(error: ProviderError, model_id: str, retry_count: int) -> None:
    log_provider_debug(
        provider=error.provider.value,
        model_id=model_id,
        operation=error.operation.value,
        retry_count=retry_count,
        error_class=error.code.value,
        message=error.message,
    )
    track_provider_failure(error.provider.value, error.operation.value, error.code.value)


__all__ = ["with_provider_retry"]
