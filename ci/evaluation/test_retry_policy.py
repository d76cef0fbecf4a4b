"""
Provider Retry Policy and Error Classification Tests.

Tests for the retry wrapper every adapter call goes through:
- Error classification by message content and HTTP status
- Retry budget for transient errors (RATE_LIMITED, UPSTREAM_ERROR)
- Immediate stop for terminal errors (MISSING_API_KEY, UNSUPPORTED_OPERATION, PARSE_ERROR)
- Per-attempt debug records and failure metrics

Usage:
    pytest ci/evaluation/test_retry_policy.py -v
"""

from __future__ import annotations

import asyncio
import logging
from unittest.mock import AsyncMock

import pytest
from prometheus_client import REGISTRY

from sherlock.config import get_settings
from sherlock.models.ai_models import AIProvider
from sherlock.providers.errors import (
    MissingApiKeyError,
    ProviderError,
    ProviderErrorCode,
    UpstreamHttpError,
    infer_error_code,
    to_provider_error,
)
from sherlock.providers.json_parsing import JsonExtractionError, parse_json_with_fallback
from sherlock.providers.retry import with_provider_retry
from sherlock.providers.types import ProviderOperation


def _flaky(failures: list[BaseException], result: str = "ok") -> AsyncMock:
    """Coroutine mock raising each of ``failures`` once, then returning ``result``."""
    return AsyncMock(side_effect=[*failures, result])


async def _run(fn: AsyncMock, sleep: AsyncMock, **kwargs: object) -> object:
    return await with_provider_retry(
        fn,
        provider=AIProvider.OPENAI,
        model_id="gpt-4.1-mini",
        operation=ProviderOperation.INVESTIGATE,
        sleep=sleep,
        **kwargs,
    )


# =============================================================================
# Classification Tests
# =============================================================================


class TestErrorClassification:
    """Tests for mapping foreign exceptions onto provider error codes."""

    @pytest.mark.parametrize(
        "error,expected",
        [
            (MissingApiKeyError(AIProvider.GEMINI), ProviderErrorCode.MISSING_API_KEY),
            (RuntimeError("429 Too Many Requests"), ProviderErrorCode.RATE_LIMITED),
            (RuntimeError("rate limit exceeded"), ProviderErrorCode.RATE_LIMITED),
            (UpstreamHttpError("slow down", 429), ProviderErrorCode.RATE_LIMITED),
            (JsonExtractionError(), ProviderErrorCode.PARSE_ERROR),
            (RuntimeError("Unsupported modality"), ProviderErrorCode.UNSUPPORTED_OPERATION),
            (RuntimeError("connection reset"), ProviderErrorCode.UPSTREAM_ERROR),
        ],
    )
    def test_infer_error_code(self, error: BaseException, expected: ProviderErrorCode) -> None:
        """Test that classification checks key, rate, parse, unsupported in order."""
        assert infer_error_code(error) == expected

    def test_missing_key_wins_over_rate(self) -> None:
        """Test that MISSING_API_KEY is matched before rate limiting."""
        assert infer_error_code(RuntimeError("MISSING_API_KEY after 429")) == ProviderErrorCode.MISSING_API_KEY

    def test_wrap_preserves_status_and_cause(self) -> None:
        """Test that wrapping keeps the HTTP status and original exception."""
        original = UpstreamHttpError("UPSTREAM_ERROR: boom", 502)
        wrapped = to_provider_error(AIProvider.OPENAI, ProviderOperation.SCAN_ANOMALIES, original)

        assert wrapped.code == ProviderErrorCode.UPSTREAM_ERROR
        assert wrapped.status == 502
        assert wrapped.cause is original
        assert wrapped.provider == AIProvider.OPENAI
        assert wrapped.operation == ProviderOperation.SCAN_ANOMALIES
        assert wrapped.is_retryable

    def test_provider_error_never_double_wrapped(self) -> None:
        """Test that an existing ProviderError passes through unchanged."""
        error = ProviderError(
            code=ProviderErrorCode.PARSE_ERROR,
            provider=AIProvider.GEMINI,
            operation=ProviderOperation.LIVE_INTEL,
            message="bad json",
        )
        assert to_provider_error(AIProvider.OPENAI, ProviderOperation.TTS, error) is error
        assert not error.is_retryable

    def test_empty_message_falls_back_to_type_name(self) -> None:
        """Test that message-less exceptions still get a message."""
        wrapped = to_provider_error(AIProvider.OPENAI, ProviderOperation.TTS, ValueError())
        assert wrapped.message == "ValueError"


# =============================================================================
# Retry Loop Tests
# =============================================================================


@pytest.mark.asyncio
class TestRetryLoop:
    """Tests for the fixed-delay retry loop."""

    async def test_returns_first_success(self) -> None:
        """Test that a successful first attempt is returned without sleeping."""
        fn = AsyncMock(return_value="done")
        sleep = AsyncMock()

        assert await _run(fn, sleep, retries=3, delay_ms=100) == "done"
        assert fn.await_count == 1
        sleep.assert_not_awaited()

    async def test_recovers_after_transient_failures(self) -> None:
        """Test that upstream errors are retried with the fixed delay."""
        fn = _flaky([UpstreamHttpError("UPSTREAM_ERROR: 503", 503), RuntimeError("socket closed")])
        sleep = AsyncMock()

        assert await _run(fn, sleep, retries=3, delay_ms=250) == "ok"
        assert fn.await_count == 3
        assert sleep.await_count == 2
        for call in sleep.await_args_list:
            assert call.args[0] == pytest.approx(0.25)

    async def test_exhausts_retry_budget(self) -> None:
        """Test that retries + 1 attempts are made before the last error is raised."""
        fn = AsyncMock(side_effect=RuntimeError("upstream unavailable"))
        sleep = AsyncMock()

        with pytest.raises(ProviderError) as exc_info:
            await _run(fn, sleep, retries=3, delay_ms=0)

        assert fn.await_count == 4
        assert sleep.await_count == 3
        assert exc_info.value.code == ProviderErrorCode.UPSTREAM_ERROR
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    async def test_rate_limit_is_retried(self) -> None:
        """Test that RATE_LIMITED is a transient error."""
        fn = _flaky([RuntimeError("HTTP 429: quota")])
        sleep = AsyncMock()

        assert await _run(fn, sleep, retries=1, delay_ms=0) == "ok"
        assert fn.await_count == 2

    @pytest.mark.parametrize(
        "error,code",
        [
            (JsonExtractionError(), ProviderErrorCode.PARSE_ERROR),
            (MissingApiKeyError(AIProvider.OPENAI), ProviderErrorCode.MISSING_API_KEY),
            (RuntimeError("UNSUPPORTED_OPERATION: no tts"), ProviderErrorCode.UNSUPPORTED_OPERATION),
        ],
    )
    async def test_terminal_errors_stop_immediately(self, error: BaseException, code: ProviderErrorCode) -> None:
        """Test that terminal errors make exactly one attempt."""
        fn = AsyncMock(side_effect=error)
        sleep = AsyncMock()

        with pytest.raises(ProviderError) as exc_info:
            await _run(fn, sleep, retries=3, delay_ms=0)

        assert exc_info.value.code == code
        assert fn.await_count == 1
        sleep.assert_not_awaited()

    async def test_deeply_nested_output_is_not_retried(self) -> None:
        """Test that pathologically nested model output fails once as PARSE_ERROR."""
        attempts = 0

        async def parse_nested() -> object:
            nonlocal attempts
            attempts += 1
            return parse_json_with_fallback("[" * 100_000 + "]" * 100_000)

        sleep = AsyncMock()
        with pytest.raises(ProviderError) as exc_info:
            await with_provider_retry(
                parse_nested,
                provider=AIProvider.GEMINI,
                model_id="gemini-3-flash-preview",
                operation=ProviderOperation.INVESTIGATE,
                retries=3,
                delay_ms=0,
                sleep=sleep,
            )

        assert exc_info.value.code == ProviderErrorCode.PARSE_ERROR
        assert attempts == 1
        sleep.assert_not_awaited()

    async def test_existing_provider_error_reraised_as_is(self) -> None:
        """Test that a ProviderError raised by the callee is not rewrapped."""
        error = ProviderError(
            code=ProviderErrorCode.UNSUPPORTED_OPERATION,
            provider=AIProvider.OPENAI,
            operation=ProviderOperation.TTS,
            message="nope",
        )
        fn = AsyncMock(side_effect=error)

        with pytest.raises(ProviderError) as exc_info:
            await _run(fn, AsyncMock(), retries=2, delay_ms=0)

        assert exc_info.value is error

    async def test_zero_retries_single_attempt(self) -> None:
        """Test that retries=0 disables retrying."""
        fn = AsyncMock(side_effect=RuntimeError("boom"))

        with pytest.raises(ProviderError):
            await _run(fn, AsyncMock(), retries=0, delay_ms=0)
        assert fn.await_count == 1

    async def test_attempt_timeout_is_upstream_error(self) -> None:
        """Test that an attempt exceeding its deadline is classified UPSTREAM_ERROR."""

        async def slow() -> str:
            await asyncio.sleep(5)
            return "late"

        with pytest.raises(ProviderError) as exc_info:
            await with_provider_retry(
                slow,
                provider=AIProvider.GEMINI,
                model_id="gemini-3-flash-preview",
                operation=ProviderOperation.LIVE_INTEL,
                retries=0,
                attempt_timeout=0.01,
            )

        assert exc_info.value.code == ProviderErrorCode.UPSTREAM_ERROR
        assert "timed out" in exc_info.value.message

    async def test_settings_supply_defaults(self) -> None:
        """Test that the retry budget defaults come from settings."""
        fn = AsyncMock(side_effect=RuntimeError("boom"))
        sleep = AsyncMock()

        with pytest.raises(ProviderError):
            await _run(fn, sleep)

        # PROVIDER_MAX_RETRIES default is 3; the test env zeroes the delay.
        assert fn.await_count == 4
        for call in sleep.await_args_list:
            assert call.args[0] == 0

    async def test_delay_setting_in_milliseconds(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that PROVIDER_RETRY_DELAY_MS is applied as seconds between attempts."""
        monkeypatch.setenv("PROVIDER_RETRY_DELAY_MS", "1500")
        get_settings.cache_clear()
        fn = _flaky([RuntimeError("socket closed")])
        sleep = AsyncMock()

        assert await _run(fn, sleep, retries=1) == "ok"

        assert get_settings().retry_delay_seconds == pytest.approx(1.5)
        sleep.assert_awaited_once()
        assert sleep.await_args.args[0] == pytest.approx(1.5)


# =============================================================================
# Observability Tests
# =============================================================================


@pytest.mark.asyncio
class TestRetryObservability:
    """Tests for debug records and metrics emitted per attempt."""

    async def test_debug_record_per_attempt(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that every attempt and failure logs a provider-router line."""
        fn = _flaky([RuntimeError("HTTP 429")])

        with caplog.at_level(logging.WARNING, logger="sherlock.providers"):
            await _run(fn, AsyncMock(), retries=2, delay_ms=0)

        lines = [r.getMessage() for r in caplog.records if r.name == "sherlock.providers"]
        assert lines[0] == (
            "[provider-router] provider=OPENAI modelId=gpt-4.1-mini "
            "operation=INVESTIGATE retryCount=0 errorClass=NONE"
        )
        assert any("retryCount=0 errorClass=RATE_LIMITED message=HTTP 429" in line for line in lines)
        assert any("retryCount=1 errorClass=NONE" in line for line in lines)

    async def test_failure_metric_by_code(self) -> None:
        """Test that failed attempts are counted by error code."""
        labels = {"provider": "ANTHROPIC", "operation": "SCAN_ANOMALIES", "code": "PARSE_ERROR"}
        before = REGISTRY.get_sample_value("sherlock_provider_failures_total", labels) or 0.0

        with pytest.raises(ProviderError):
            await with_provider_retry(
                AsyncMock(side_effect=JsonExtractionError()),
                provider=AIProvider.ANTHROPIC,
                model_id="claude-3-5-haiku-latest",
                operation=ProviderOperation.SCAN_ANOMALIES,
                sleep=AsyncMock(),
            )

        after = REGISTRY.get_sample_value("sherlock_provider_failures_total", labels)
        assert after == before + 1
