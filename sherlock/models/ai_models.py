"""Provider and model catalog.

Declares the upstream providers, the models offered for each, their
capabilities, and the default model per provider. Model-to-provider
inference falls back to id heuristics for models not in the catalog.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class AIProvider(str, Enum):
    """Upstream AI providers."""

    GEMINI = "GEMINI"
    OPENROUTER = "OPENROUTER"
    OPENAI = "OPENAI"
    ANTHROPIC = "ANTHROPIC"

    @classmethod
    def parse(cls, value: object) -> AIProvider | None:
        """Return the provider for a raw value, or None when unrecognized."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                return None
        return None


@dataclass(frozen=True)
class ProviderCapabilities:
    supports_thinking_budget: bool = False
    supports_tts: bool = False
    supports_web_search: bool = False


@dataclass(frozen=True)
class AIProviderOption:
    id: AIProvider
    label: str
    description: str
    default_model_id: str
    capabilities: ProviderCapabilities


@dataclass(frozen=True)
class ModelCapabilities:
    supports_thinking_budget: bool = False
    supports_structured_output: bool = False
    supports_web_search: bool = False


@dataclass(frozen=True)
class AIModelOption:
    id: str
    name: str
    description: str
    provider: AIProvider
    capabilities: ModelCapabilities


# =============================================================================
# Catalog
# =============================================================================

DEFAULT_PROVIDER = AIProvider.GEMINI
DEFAULT_MODEL_ID = "gemini-3-flash-preview"

DEFAULT_MODELS_BY_PROVIDER: dict[AIProvider, str] = {
    AIProvider.GEMINI: DEFAULT_MODEL_ID,
    AIProvider.OPENROUTER: "stepfun/step-3.5-flash:free",
    AIProvider.OPENAI: "gpt-4.1-mini",
    AIProvider.ANTHROPIC: "claude-3-5-haiku-latest",
}

AI_PROVIDERS: tuple[AIProviderOption, ...] = (
    AIProviderOption(
        id=AIProvider.GEMINI,
        label="Google Gemini",
        description="Primary default provider",
        default_model_id=DEFAULT_MODELS_BY_PROVIDER[AIProvider.GEMINI],
        capabilities=ProviderCapabilities(
            supports_thinking_budget=True,
            supports_tts=True,
            supports_web_search=True,
        ),
    ),
    AIProviderOption(
        id=AIProvider.OPENROUTER,
        label="OpenRouter",
        description="Aggregator for third-party models",
        default_model_id=DEFAULT_MODELS_BY_PROVIDER[AIProvider.OPENROUTER],
        capabilities=ProviderCapabilities(),
    ),
    AIProviderOption(
        id=AIProvider.OPENAI,
        label="OpenAI",
        description="Direct provider adapter",
        default_model_id=DEFAULT_MODELS_BY_PROVIDER[AIProvider.OPENAI],
        capabilities=ProviderCapabilities(),
    ),
    AIProviderOption(
        id=AIProvider.ANTHROPIC,
        label="Anthropic",
        description="Direct provider adapter",
        default_model_id=DEFAULT_MODELS_BY_PROVIDER[AIProvider.ANTHROPIC],
        capabilities=ProviderCapabilities(),
    ),
)

_GEMINI_STRUCTURED = ModelCapabilities(
    supports_thinking_budget=True,
    supports_structured_output=True,
    supports_web_search=True,
)
_GEMINI_TEXT = ModelCapabilities(
    supports_thinking_budget=True,
    supports_structured_output=False,
    supports_web_search=True,
)
_OPENROUTER_FREE = ModelCapabilities()


def _openrouter(model_id: str, name: str, description: str = "OpenRouter free tier") -> AIModelOption:
    return AIModelOption(
        id=model_id,
        name=name,
        description=description,
        provider=AIProvider.OPENROUTER,
        capabilities=_OPENROUTER_FREE,
    )


AI_MODELS: tuple[AIModelOption, ...] = (
    AIModelOption("gemini-3-pro-preview", "Gemini 3 Pro", "Most capable", AIProvider.GEMINI, _GEMINI_STRUCTURED),
    AIModelOption("gemini-3-flash-preview", "Gemini 3 Flash", "Fast and balanced", AIProvider.GEMINI, _GEMINI_STRUCTURED),
    AIModelOption("gemini-2.5-pro", "Gemini 2.5 Pro", "Advanced reasoning", AIProvider.GEMINI, _GEMINI_TEXT),
    AIModelOption("gemini-2.5-flash", "Gemini 2.5 Flash", "Cost effective", AIProvider.GEMINI, _GEMINI_TEXT),
    AIModelOption("gemini-2.5-flash-lite", "Gemini 2.5 Flash-Lite", "High throughput", AIProvider.GEMINI, _GEMINI_TEXT),
    _openrouter("stepfun/step-3.5-flash:free", "StepFun Step-3.5-Flash"),
    _openrouter("arcee-ai/trinity-large-preview:free", "Arcee Trinity Large Preview"),
    _openrouter("tngtech/deepseek-r1t2-chimera:free", "TNGTech DeepSeek R1T2 Chimera"),
    _openrouter("tngtech/deepseek-r1t-chimera:free", "TNGTech DeepSeek R1T Chimera"),
    _openrouter("deepseek/deepseek-r1-0528:free", "DeepSeek R1 0528"),
    _openrouter("z-ai/glm-4.5-air:free", "Z.AI GLM 4.5 Air"),
    _openrouter("openrouter/pony-alpha", "Pony Alpha", "OpenRouter preview model"),
    AIModelOption(
        "gpt-4.1-mini",
        "GPT-4.1 Mini",
        "Fast general-purpose model",
        AIProvider.OPENAI,
        ModelCapabilities(supports_structured_output=True),
    ),
    AIModelOption(
        "claude-3-5-haiku-latest",
        "Claude 3.5 Haiku",
        "Fast general-purpose model",
        AIProvider.ANTHROPIC,
        ModelCapabilities(supports_structured_output=True),
    ),
)

_MODELS_BY_ID: dict[str, AIModelOption] = {model.id: model for model in AI_MODELS}
_PROVIDERS_BY_ID: dict[AIProvider, AIProviderOption] = {p.id: p for p in AI_PROVIDERS}


# =============================================================================
# Lookups
# =============================================================================


def get_provider_option(provider: AIProvider) -> AIProviderOption:
    return _PROVIDERS_BY_ID[provider]


def get_model_option(model_id: str) -> AIModelOption | None:
    return _MODELS_BY_ID.get(model_id)


def get_models_for_provider(provider: AIProvider) -> list[AIModelOption]:
    return [model for model in AI_MODELS if model.provider == provider]


def get_default_model_for_provider(provider: AIProvider) -> str:
    return DEFAULT_MODELS_BY_PROVIDER.get(provider, DEFAULT_MODEL_ID)


def get_model_display_name(model_id: str) -> str:
    model = get_model_option(model_id)
    return model.name if model else model_id


def get_model_provider(model_id: str) -> AIProvider:
    """Infer the provider that serves a model id.

    Catalog entries win; unknown ids are matched by naming convention
    (``gemini-``, ``gpt-``/``o1-``/``o3-``, ``claude-``, vendor-prefixed
    ``org/model`` ids for OpenRouter) and default to Gemini.
    """
    model = get_model_option(model_id)
    if model:
        return model.provider

    normalized = (model_id or "").strip().lower()
    if normalized.startswith("gemini-"):
        return AIProvider.GEMINI
    if normalized.startswith(("gpt-", "o1-", "o3-")):
        return AIProvider.OPENAI
    if normalized.startswith("claude-"):
        return AIProvider.ANTHROPIC
    if "/" in normalized:
        return AIProvider.OPENROUTER
    return DEFAULT_PROVIDER


def supports_structured_output(model_id: str) -> bool:
    """Whether a model can be asked for schema-constrained JSON.

    Unknown Gemini ids are assumed capable unless they belong to the 2.5
    family.
    """
    model = get_model_option(model_id)
    if model:
        return model.capabilities.supports_structured_output
    normalized = (model_id or "").lower()
    return "2.5" not in normalized and "2-5" not in normalized


def provider_supports_tts(provider: AIProvider) -> bool:
    option = _PROVIDERS_BY_ID.get(provider)
    return bool(option and option.capabilities.supports_tts)


__all__ = [
    "AIProvider",
    "ProviderCapabilities",
    "AIProviderOption",
    "ModelCapabilities",
    "AIModelOption",
    "DEFAULT_PROVIDER",
    "DEFAULT_MODEL_ID",
    "DEFAULT_MODELS_BY_PROVIDER",
    "AI_PROVIDERS",
    "AI_MODELS",
    "get_provider_option",
    "get_model_option",
    "get_models_for_provider",
    "get_default_model_for_provider",
    "get_model_display_name",
    "get_model_provider",
    "supports_structured_output",
    "provider_supports_tts",
]
