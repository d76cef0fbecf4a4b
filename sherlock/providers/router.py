"""Provider router.

Resolves the effective system config, picks the adapter for the provider
implied by the configured model, checks capabilities, and forwards the
request with defaults filled in. Every error that reaches the caller is a
``ProviderError``.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Mapping

from sherlock.data.presets import get_default_scope
from sherlock.models.ai_models import (
    AI_PROVIDERS,
    AIProvider,
    get_model_provider,
    get_provider_option,
    provider_supports_tts,
)
from sherlock.models.contracts import FeedItem, InvestigationReport, MonitorEvent, SystemConfig
from sherlock.observability.debug_log import log_provider_debug
from sherlock.observability.metrics import track_dispatch
from sherlock.providers.anthropic import anthropic_adapter
from sherlock.providers.errors import ProviderError, ProviderErrorCode
from sherlock.providers.gemini import gemini_adapter
from sherlock.providers.openai import openai_adapter
from sherlock.providers.openrouter import openrouter_adapter
from sherlock.providers.types import (
    InvestigationRequest,
    LiveIntelConfig,
    LiveIntelRequest,
    ProviderAdapter,
    ProviderOperation,
    RouterInvestigationRequest,
    RouterLiveIntelRequest,
    RouterScanRequest,
    RouterTtsRequest,
    ScanAnomaliesRequest,
    TtsRequest,
)
from sherlock.storage import KeyValueStore
from sherlock.system_config import load_system_config, merge_config_override

logger = logging.getLogger(__name__)

ADAPTER_REGISTRY: dict[AIProvider, Any] = {
    AIProvider.GEMINI: gemini_adapter,
    AIProvider.OPENROUTER: openrouter_adapter,
    AIProvider.OPENAI: openai_adapter,
    AIProvider.ANTHROPIC: anthropic_adapter,
}

DEFAULT_SCAN_REGION = ""
DEFAULT_SCAN_CATEGORY = "All"


class ProviderRouter:
    """
    Dispatches logical operations to provider adapters.

    Usage:
        router = ProviderRouter()
        report = await router.dispatch(
            ProviderOperation.INVESTIGATE,
            RouterInvestigationRequest(topic="Acme Corp"),
        )
    """

    def __init__(
        self,
        registry: Mapping[AIProvider, Any] | None = None,
        store: KeyValueStore | None = None,
    ):
        self._registry = registry
        self._store = store

    @property
    def registry(self) -> Mapping[AIProvider, Any]:
        # Read at call time so tests can patch the module registry.
        return ADAPTER_REGISTRY if self._registry is None else self._registry

    # =========================================================================
    # Resolution
    # =========================================================================

    def resolve_effective_config(self, config_override: Mapping[str, Any] | None = None) -> SystemConfig:
        return merge_config_override(load_system_config(self._store), config_override)

    def resolve_adapter(self, config: SystemConfig, operation: ProviderOperation) -> ProviderAdapter:
        """Adapter for the provider implied by the configured model."""
        provider = get_model_provider(config.model_id)
        if provider != config.provider:
            logger.debug(
                f"Model {config.model_id} belongs to {provider.value}; "
                f"overriding configured provider {config.provider.value}"
            )

        adapter = self.registry.get(provider)
        if adapter is None:
            raise ProviderError(
                code=ProviderErrorCode.UPSTREAM_ERROR,
                provider=provider,
                operation=operation,
                message=f"No adapter is registered for provider {provider.value}.",
            )
        return adapter

    def assert_capability(self, adapter: Any, operation: ProviderOperation, model_id: str) -> None:
        if operation != ProviderOperation.TTS:
            return

        if not provider_supports_tts(adapter.provider):
            label = get_provider_option(adapter.provider).label
            raise ProviderError(
                code=ProviderErrorCode.UNSUPPORTED_OPERATION,
                provider=adapter.provider,
                operation=operation,
                message=f"{label} does not support TTS for model {model_id}.",
            )

        if not callable(getattr(adapter, "generate_audio_briefing", None)):
            raise ProviderError(
                code=ProviderErrorCode.UNSUPPORTED_OPERATION,
                provider=adapter.provider,
                operation=operation,
                message=f"{adapter.provider.value} does not implement TTS yet.",
            )

    def _prepare(
        self,
        operation: ProviderOperation,
        config_override: Mapping[str, Any] | None = None,
    ) -> tuple[SystemConfig, Any]:
        config = self.resolve_effective_config(config_override)
        adapter = self.resolve_adapter(config, operation)
        self.assert_capability(adapter, operation, config.model_id)

        log_provider_debug(
            provider=adapter.provider.value,
            model_id=config.model_id,
            operation=operation.value,
            retry_count=0,
        )
        track_dispatch(adapter.provider.value, operation.value)
        return config, adapter

    # =========================================================================
    # Operations
    # =========================================================================

    async def dispatch(self, operation: ProviderOperation, request: Any) -> Any:
        """
        Run one operation through the router.

        Args:
            operation: Logical operation to perform.
            request: The matching ``Router*Request``.

        Returns:
            The adapter result for the operation.

        Raises:
            ProviderError: On any routing, capability or provider failure.
        """
        operation = ProviderOperation(operation)
        if operation == ProviderOperation.INVESTIGATE:
            return await self.investigate(request)
        if operation == ProviderOperation.SCAN_ANOMALIES:
            return await self.scan_anomalies(request)
        if operation == ProviderOperation.LIVE_INTEL:
            return await self.get_live_intel(request)
        return await self.generate_audio_briefing(request)

    async def investigate(self, request: RouterInvestigationRequest) -> InvestigationReport:
        config, adapter = self._prepare(ProviderOperation.INVESTIGATE, request.config_override)
        return await adapter.investigate(
            InvestigationRequest(
                topic=request.topic,
                config=config,
                scope=request.scope or get_default_scope(),
                parent_context=request.parent_context,
                date_override=request.date_override,
            )
        )

    async def scan_anomalies(self, request: RouterScanRequest) -> list[FeedItem]:
        config, adapter = self._prepare(ProviderOperation.SCAN_ANOMALIES)
        return await adapter.scan_anomalies(
            ScanAnomaliesRequest(
                region=request.region or DEFAULT_SCAN_REGION,
                category=request.category or DEFAULT_SCAN_CATEGORY,
                config=config,
                scope=request.scope or get_default_scope(),
                date_range=request.date_range,
                options=request.options,
            )
        )

    async def get_live_intel(self, request: RouterLiveIntelRequest) -> list[MonitorEvent]:
        config, adapter = self._prepare(ProviderOperation.LIVE_INTEL)
        return await adapter.get_live_intel(
            LiveIntelRequest(
                topic=request.topic,
                config=config,
                scope=request.scope or get_default_scope(),
                monitor_config=request.monitor_config or LiveIntelConfig(),
                existing_content=list(request.existing_content or []),
            )
        )

    async def generate_audio_briefing(self, request: RouterTtsRequest) -> str:
        config, adapter = self._prepare(ProviderOperation.TTS)
        return await adapter.generate_audio_briefing(TtsRequest(text=request.text, config=config))

    def get_registered_providers(self) -> list[AIProvider]:
        """Catalog providers that have an adapter, in catalog order."""
        return [option.id for option in AI_PROVIDERS if option.id in self.registry]


# =============================================================================
# Module-level convenience API
# =============================================================================


async def investigate_with_provider_router(request: RouterInvestigationRequest) -> InvestigationReport:
    return await ProviderRouter().investigate(request)


async def scan_anomalies_with_provider_router(request: RouterScanRequest) -> list[FeedItem]:
    return await ProviderRouter().scan_anomalies(request)


async def get_live_intel_with_provider_router(request: RouterLiveIntelRequest) -> list[MonitorEvent]:
    return await ProviderRouter().get_live_intel(request)


async def generate_audio_briefing_with_provider_router(request: RouterTtsRequest) -> str:
    return await ProviderRouter().generate_audio_briefing(request)


def get_registered_providers() -> list[AIProvider]:
    return ProviderRouter().get_registered_providers()


async def reset_provider_clients() -> None:
    """Drop every cached provider client (after a key change)."""
    for adapter in ADAPTER_REGISTRY.values():
        reset = getattr(adapter, "reset_client", None)
        if reset is None:
            continue
        result = reset()
        if inspect.isawaitable(result):
            await result


__all__ = [
    "ADAPTER_REGISTRY",
    "ProviderRouter",
    "investigate_with_provider_router",
    "scan_anomalies_with_provider_router",
    "get_live_intel_with_provider_router",
    "generate_audio_briefing_with_provider_router",
    "get_registered_providers",
    "reset_provider_clients",
]
