"""HTTP transport and adapter base for JSON chat-style providers.

``ProviderHttpClient`` wraps one ``httpx.AsyncClient`` per provider,
created lazily on first use with the provider credential baked into its
headers. ``HttpProviderAdapter`` implements the three text operations on
top of it; concrete providers supply the endpoint, headers, request body,
and the way text is read out of a successful response.
"""

from __future__ import annotations

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from sherlock.config import get_settings
from sherlock.models.ai_models import AIProvider, supports_structured_output
from sherlock.models.contracts import FeedItem, InvestigationReport, MonitorEvent
from sherlock.providers.common import (
    FEED_ID_PREFIX,
    LIVE_ID_PREFIX,
    MAX_TOKENS,
    build_investigation_report,
    current_time_label,
    fallback_feed_items,
    fallback_live_events,
    primary_category,
    with_degraded_fallback,
)
from sherlock.providers.errors import UpstreamHttpError
from sherlock.providers.json_parsing import parse_json_with_fallback, to_display_text
from sherlock.providers.keys import get_api_key_or_raise
from sherlock.providers.normalizers import normalize_feed_items, normalize_live_events
from sherlock.providers.prompts import (
    REPORT_DETAIL_INSTRUCTION,
    REPORT_JSON_INSTRUCTION,
    build_anomaly_prompt,
    build_investigation_prompt,
    build_live_intel_prompt,
)
from sherlock.providers.retry import with_provider_retry
from sherlock.providers.types import (
    InvestigationRequest,
    LiveIntelRequest,
    ProviderOperation,
    ScanAnomaliesOptions,
    ScanAnomaliesRequest,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Transport
# =============================================================================


class ProviderHttpClient:
    """Async HTTP client bound to one provider endpoint and credential."""

    def __init__(
        self,
        provider: AIProvider,
        base_url: str,
        headers: dict[str, str],
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.provider = provider
        self.base_url = base_url.rstrip("/")
        self.headers = headers
        self.timeout = timeout or get_settings().HTTP_TIMEOUT
        self._transport = transport

        self._client: httpx.AsyncClient | None = None
        self._initialized = False
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Initialize the HTTP client."""
        if self._initialized:
            return

        async with self._lock:
            if self._initialized:
                return

            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout, connect=10.0),
                headers={**self.headers, "Content-Type": "application/json"},
                transport=self._transport,
            )

            self._initialized = True
            logger.info(f"{self.provider.value} HTTP client initialized")

    async def _ensure_initialized(self) -> httpx.AsyncClient:
        """Ensure client is initialized and return it."""
        if not self._initialized or self._client is None:
            await self.initialize()
        return self._client  # type: ignore

    async def post_json(self, path: str, body: dict[str, Any]) -> tuple[int, Any]:
        """
        POST a JSON body.

        Returns:
            (status code, decoded JSON payload or None when the body is not JSON)
        """
        client = await self._ensure_initialized()
        response = await client.post(path, json=body)

        try:
            payload = json.loads(response.text) if response.text else None
        except ValueError:
            payload = None
        return response.status_code, payload

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            self._initialized = False
            logger.info(f"{self.provider.value} HTTP client closed")


# =============================================================================
# Adapter base
# =============================================================================


class HttpProviderAdapter(ABC):
    """Investigate / scan / live-intel over a JSON chat endpoint."""

    provider: AIProvider
    label: str
    endpoint_path: str

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        self._transport = transport
        self._client: ProviderHttpClient | None = None
        self._client_lock = asyncio.Lock()

    # ---- provider hooks -------------------------------------------------

    @abstractmethod
    def base_url(self) -> str: ...

    @abstractmethod
    def build_headers(self, api_key: str) -> dict[str, str]: ...

    @abstractmethod
    def build_body(self, model_id: str, prompt: str, max_tokens: int, json_mode: bool) -> dict[str, Any]: ...

    @abstractmethod
    def extract_text(self, payload: dict[str, Any]) -> tuple[str, str | None]:
        """Return (response text, finish reason) from a success payload."""

    # ---- transport ------------------------------------------------------

    async def get_client(self) -> ProviderHttpClient:
        """Get or create this provider's client; needs a configured API key."""
        if self._client is not None:
            return self._client

        async with self._client_lock:
            if self._client is None:
                api_key = get_api_key_or_raise(self.provider)
                client = ProviderHttpClient(
                    provider=self.provider,
                    base_url=self.base_url(),
                    headers=self.build_headers(api_key),
                    transport=self._transport,
                )
                await client.initialize()
                self._client = client
        return self._client

    async def reset_client(self) -> None:
        """Drop the cached client; the next call rebuilds it with the current key."""
        if self._client is not None:
            await self._client.close()
        self._client = None

    async def close(self) -> None:
        await self.reset_client()

    def parse_response(self, status: int, payload: Any) -> str:
        """Read the completion text from a provider response, or raise."""
        if not 200 <= status < 300:
            error = payload.get("error") if isinstance(payload, dict) else None
            message = error.get("message") if isinstance(error, dict) else None
            if not isinstance(message, str) or not message.strip():
                message = f"UPSTREAM_ERROR: {self.label} request failed with status {status}"
            raise UpstreamHttpError(message, status)

        text, finish_reason = self.extract_text(payload if isinstance(payload, dict) else {})
        if not text:
            raise UpstreamHttpError(
                f"UPSTREAM_ERROR: {self.label} returned an empty response "
                f"(finish_reason: {finish_reason or 'unknown'})",
                status,
            )
        return text

    async def complete(
        self,
        model_id: str,
        prompt: str,
        operation: ProviderOperation,
        json_mode: bool = False,
    ) -> str:
        client = await self.get_client()
        body = self.build_body(model_id, prompt, MAX_TOKENS[operation], json_mode)
        status, payload = await client.post_json(self.endpoint_path, body)
        return self.parse_response(status, payload)

    # ---- operations -----------------------------------------------------

    async def investigate(self, request: InvestigationRequest) -> InvestigationReport:
        config = request.config
        prompt = "\n".join(
            [
                build_investigation_prompt(
                    request.topic,
                    request.scope,
                    config,
                    request.parent_context,
                    request.date_override,
                ),
                f"CRITICAL: {REPORT_JSON_INSTRUCTION}",
                REPORT_DETAIL_INSTRUCTION,
            ]
        )
        json_mode = supports_structured_output(config.model_id)

        async def attempt() -> InvestigationReport:
            raw_text = await self.complete(config.model_id, prompt, ProviderOperation.INVESTIGATE, json_mode)
            parsed = parse_json_with_fallback(raw_text)
            return build_investigation_report(
                topic=request.topic,
                config=config,
                parsed=parsed,
                raw_text=raw_text,
                parent_context=request.parent_context,
            )

        return await with_provider_retry(
            attempt,
            provider=self.provider,
            model_id=config.model_id,
            operation=ProviderOperation.INVESTIGATE,
        )

    async def scan_anomalies(self, request: ScanAnomaliesRequest) -> list[FeedItem]:
        config = request.config
        options = request.options or ScanAnomaliesOptions()
        limit = options.limit or 8
        prompt = build_anomaly_prompt(
            region=request.region,
            category=request.category,
            limit=limit,
            priority_sources=options.priority_sources or "",
            scope=request.scope,
            date_range=request.date_range,
        )

        async def attempt() -> list[FeedItem]:
            raw_text = await self.complete(config.model_id, prompt, ProviderOperation.SCAN_ANOMALIES)
            return normalize_feed_items(
                parse_json_with_fallback(raw_text),
                primary_category(request.scope),
                current_time_label(),
                FEED_ID_PREFIX,
            )

        return await with_degraded_fallback(
            lambda: with_provider_retry(
                attempt,
                provider=self.provider,
                model_id=config.model_id,
                operation=ProviderOperation.SCAN_ANOMALIES,
            ),
            lambda: fallback_feed_items(request.scope, limit),
            provider=self.provider,
            operation=ProviderOperation.SCAN_ANOMALIES,
        )

    async def get_live_intel(self, request: LiveIntelRequest) -> list[MonitorEvent]:
        config = request.config
        prompt = build_live_intel_prompt(
            request.topic,
            request.monitor_config,
            request.scope,
            request.existing_content,
        )

        async def attempt() -> list[MonitorEvent]:
            raw_text = await self.complete(config.model_id, prompt, ProviderOperation.LIVE_INTEL)
            return normalize_live_events(parse_json_with_fallback(raw_text), LIVE_ID_PREFIX)

        return await with_degraded_fallback(
            lambda: with_provider_retry(
                attempt,
                provider=self.provider,
                model_id=config.model_id,
                operation=ProviderOperation.LIVE_INTEL,
            ),
            lambda: fallback_live_events(request.topic),
            provider=self.provider,
            operation=ProviderOperation.LIVE_INTEL,
        )


def first_display_text(*values: Any) -> str:
    """First value whose display text is non-blank, trimmed."""
    for value in values:
        text = to_display_text(value).strip()
        if text:
            return text
    return ""


__all__ = [
    "ProviderHttpClient",
    "HttpProviderAdapter",
    "first_display_text",
]
