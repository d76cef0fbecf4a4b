"""Per-provider API key resolution.

Keys are looked up in the local store first and the process environment
second. Reads never write. ``set_api_key`` validates the key format before
persisting it, and Gemini keys are mirrored to the legacy
``sherlock_api_key`` slot.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from sherlock.models.ai_models import AI_PROVIDERS, AIProvider
from sherlock.providers.errors import MissingApiKeyError
from sherlock.storage import KeyValueStore, get_local_store

logger = logging.getLogger(__name__)

LEGACY_GEMINI_STORAGE_KEY = "sherlock_api_key"


@dataclass(frozen=True)
class ProviderKeyConfig:
    storage_keys: tuple[str, ...]
    env_keys: tuple[str, ...]


KEY_CONFIG: dict[AIProvider, ProviderKeyConfig] = {
    AIProvider.GEMINI: ProviderKeyConfig(
        storage_keys=("GEMINI_API_KEY", LEGACY_GEMINI_STORAGE_KEY),
        env_keys=("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY"),
    ),
    AIProvider.OPENROUTER: ProviderKeyConfig(
        storage_keys=("OPENROUTER_API_KEY",),
        env_keys=("OPENROUTER_API_KEY",),
    ),
    AIProvider.OPENAI: ProviderKeyConfig(
        storage_keys=("OPENAI_API_KEY",),
        env_keys=("OPENAI_API_KEY",),
    ),
    AIProvider.ANTHROPIC: ProviderKeyConfig(
        storage_keys=("ANTHROPIC_API_KEY",),
        env_keys=("ANTHROPIC_API_KEY",),
    ),
}


@dataclass(frozen=True)
class ApiKeyValidationResult:
    is_valid: bool
    message: str | None = None


def _first_non_blank(values: list[str | None]) -> str | None:
    for value in values:
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


# =============================================================================
# Reads
# =============================================================================


def get_stored_api_key(provider: AIProvider, store: KeyValueStore | None = None) -> str | None:
    store = store or get_local_store()
    return _first_non_blank([store.get_item(name) for name in KEY_CONFIG[provider].storage_keys])


def get_environment_api_key(provider: AIProvider) -> str | None:
    return _first_non_blank([os.environ.get(name) for name in KEY_CONFIG[provider].env_keys])


def get_api_key(provider: AIProvider, store: KeyValueStore | None = None) -> str | None:
    """Stored key first, then environment."""
    return get_stored_api_key(provider, store) or get_environment_api_key(provider)


def has_api_key(provider: AIProvider | None = None, store: KeyValueStore | None = None) -> bool:
    """Whether a key exists for ``provider``, or for any provider when omitted."""
    if provider is not None:
        return get_api_key(provider, store) is not None
    return any(get_api_key(option.id, store) is not None for option in AI_PROVIDERS)


def get_api_key_or_raise(provider: AIProvider, store: KeyValueStore | None = None) -> str:
    """
    Resolve a key for a provider call.

    Raises:
        MissingApiKeyError: No stored or environment key. Classified as
            MISSING_API_KEY by the retry policy.
    """
    key = get_api_key(provider, store)
    if not key:
        raise MissingApiKeyError(provider)
    return key


# =============================================================================
# Format checks
# =============================================================================


def infer_provider_from_api_key(raw_key: str) -> AIProvider | None:
    key = (raw_key or "").strip()
    if not key:
        return None
    if key.startswith("sk-or-"):
        return AIProvider.OPENROUTER
    if key.startswith("sk-ant-"):
        return AIProvider.ANTHROPIC
    if key.startswith("AIza"):
        return AIProvider.GEMINI
    if key.startswith("sk-"):
        return AIProvider.OPENAI
    return None


def validate_api_key(provider: AIProvider, raw_key: str) -> ApiKeyValidationResult:
    key = (raw_key or "").strip()
    if not key:
        return ApiKeyValidationResult(False, "API key is required.")

    if provider == AIProvider.GEMINI and not key.startswith("AIza"):
        return ApiKeyValidationResult(False, 'Gemini keys usually start with "AIza".')
    if provider == AIProvider.OPENROUTER and not key.startswith("sk-or-"):
        return ApiKeyValidationResult(False, 'OpenRouter keys usually start with "sk-or-".')
    if provider == AIProvider.ANTHROPIC and not key.startswith("sk-ant-"):
        return ApiKeyValidationResult(False, 'Anthropic keys usually start with "sk-ant-".')
    if provider == AIProvider.OPENAI and (
        not key.startswith("sk-") or key.startswith(("sk-or-", "sk-ant-"))
    ):
        return ApiKeyValidationResult(False, 'OpenAI keys usually start with "sk-".')

    return ApiKeyValidationResult(True)


# =============================================================================
# Writes
# =============================================================================


def set_api_key(provider: AIProvider, raw_key: str, store: KeyValueStore | None = None) -> ApiKeyValidationResult:
    """Validate and persist a key. Invalid keys are not written."""
    validation = validate_api_key(provider, raw_key)
    if not validation.is_valid:
        return validation

    store = store or get_local_store()
    key = raw_key.strip()
    store.set_item(KEY_CONFIG[provider].storage_keys[0], key)
    if provider == AIProvider.GEMINI:
        store.set_item(LEGACY_GEMINI_STORAGE_KEY, key)

    logger.info(f"Stored API key for {provider.value}")
    return validation


def clear_api_key(provider: AIProvider | None = None, store: KeyValueStore | None = None) -> None:
    """Remove stored keys for one provider, or all providers when omitted."""
    store = store or get_local_store()
    providers = [provider] if provider is not None else list(KEY_CONFIG)
    for candidate in providers:
        for name in KEY_CONFIG[candidate].storage_keys:
            store.remove_item(name)


__all__ = [
    "LEGACY_GEMINI_STORAGE_KEY",
    "KEY_CONFIG",
    "ProviderKeyConfig",
    "ApiKeyValidationResult",
    "get_stored_api_key",
    "get_environment_api_key",
    "get_api_key",
    "has_api_key",
    "get_api_key_or_raise",
    "infer_provider_from_api_key",
    "validate_api_key",
    "set_api_key",
    "clear_api_key",
]
