"""Sherlock Providers Module.

Routes investigation, anomaly-scan, live-intel and TTS requests to one of
four upstream AI providers and normalizes whatever comes back into the
shared contracts.

Core Components:
- ProviderRouter: config resolution, adapter selection, capability checks
- Adapters: Gemini (google-genai SDK), OpenAI, OpenRouter, Anthropic (httpx)
- with_provider_retry: fixed-delay retry with error classification
- parse_json_with_fallback / normalizers: tolerant model-output parsing

Example:
    ```python
    from sherlock.providers import (
        RouterInvestigationRequest,
        investigate_with_provider_router,
    )

    report = await investigate_with_provider_router(
        RouterInvestigationRequest(topic="Acme Shell Holdings")
    )
    print(report.summary)
    ```
"""

from sherlock.providers.errors import (
    MissingApiKeyError,
    ProviderError,
    ProviderErrorCode,
    UpstreamHttpError,
    infer_error_code,
    to_provider_error,
)
from sherlock.providers.json_parsing import (
    JsonExtractionError,
    parse_json_with_fallback,
    to_display_text,
)
from sherlock.providers.keys import (
    ApiKeyValidationResult,
    clear_api_key,
    get_api_key,
    get_api_key_or_raise,
    get_stored_api_key,
    has_api_key,
    infer_provider_from_api_key,
    set_api_key,
    validate_api_key,
)
from sherlock.providers.retry import with_provider_retry
from sherlock.providers.router import (
    ADAPTER_REGISTRY,
    ProviderRouter,
    generate_audio_briefing_with_provider_router,
    get_live_intel_with_provider_router,
    get_registered_providers,
    investigate_with_provider_router,
    reset_provider_clients,
    scan_anomalies_with_provider_router,
)
from sherlock.providers.types import (
    DateRangeOverride,
    InvestigationRequest,
    LiveIntelConfig,
    LiveIntelRequest,
    ParentContext,
    ProviderAdapter,
    ProviderOperation,
    RouterInvestigationRequest,
    RouterLiveIntelRequest,
    RouterScanRequest,
    RouterTtsRequest,
    ScanAnomaliesOptions,
    ScanAnomaliesRequest,
    TtsRequest,
)

__all__ = [
    # Router
    "ADAPTER_REGISTRY",
    "ProviderRouter",
    "investigate_with_provider_router",
    "scan_anomalies_with_provider_router",
    "get_live_intel_with_provider_router",
    "generate_audio_briefing_with_provider_router",
    "get_registered_providers",
    "reset_provider_clients",
    # Errors
    "ProviderError",
    "ProviderErrorCode",
    "MissingApiKeyError",
    "UpstreamHttpError",
    "infer_error_code",
    "to_provider_error",
    # Parsing
    "JsonExtractionError",
    "parse_json_with_fallback",
    "to_display_text",
    # Keys
    "ApiKeyValidationResult",
    "get_stored_api_key",
    "get_api_key",
    "get_api_key_or_raise",
    "has_api_key",
    "infer_provider_from_api_key",
    "validate_api_key",
    "set_api_key",
    "clear_api_key",
    # Retry
    "with_provider_retry",
    # Types
    "ProviderOperation",
    "ProviderAdapter",
    "DateRangeOverride",
    "ParentContext",
    "InvestigationRequest",
    "ScanAnomaliesOptions",
    "ScanAnomaliesRequest",
    "LiveIntelConfig",
    "LiveIntelRequest",
    "TtsRequest",
    "RouterInvestigationRequest",
    "RouterScanRequest",
    "RouterLiveIntelRequest",
    "RouterTtsRequest",
]
