"""
Sherlock Models Package - catalog and contracts for the provider pipeline.

This package provides:
- AI provider/model catalog and capability lookups
- Frozen pydantic contracts for reports, feed items, monitor events
- Investigation scope and persisted system configuration models
"""

from .ai_models import (
    AI_MODELS,
    AI_PROVIDERS,
    DEFAULT_MODEL_ID,
    DEFAULT_PROVIDER,
    AIModelOption,
    AIProvider,
    AIProviderOption,
    get_default_model_for_provider,
    get_model_option,
    get_model_provider,
    get_models_for_provider,
    get_provider_option,
    provider_supports_tts,
    supports_structured_output,
)
from .contracts import (
    DateRangeConfig,
    DateRangeStrategy,
    Entity,
    EntityType,
    EventType,
    FeedItem,
    InvestigationReport,
    InvestigationScope,
    MonitorEvent,
    PersonaDefinition,
    ReportConfig,
    RiskLevel,
    SearchDepth,
    Sentiment,
    Source,
    SourceCategory,
    SuggestedSource,
    SystemConfig,
    ThreatLevel,
)

__all__ = [
    # Catalog
    "AIProvider",
    "AIProviderOption",
    "AIModelOption",
    "AI_PROVIDERS",
    "AI_MODELS",
    "DEFAULT_PROVIDER",
    "DEFAULT_MODEL_ID",
    "get_provider_option",
    "get_model_option",
    "get_models_for_provider",
    "get_default_model_for_provider",
    "get_model_provider",
    "supports_structured_output",
    "provider_supports_tts",
    # Enumerations
    "EntityType",
    "Sentiment",
    "RiskLevel",
    "EventType",
    "ThreatLevel",
    "SearchDepth",
    "DateRangeStrategy",
    # Contracts
    "Source",
    "Entity",
    "ReportConfig",
    "InvestigationReport",
    "FeedItem",
    "MonitorEvent",
    "DateRangeConfig",
    "SuggestedSource",
    "SourceCategory",
    "PersonaDefinition",
    "InvestigationScope",
    "SystemConfig",
]
