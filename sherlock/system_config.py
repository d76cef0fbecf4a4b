"""Persisted system configuration.

The user's AI settings live as one JSON object under ``sherlock_config``
in the local store, in camelCase (the browser client's format). Values
written by other components are preserved on save. Every read goes
through ``migrate_system_config`` so legacy or hand-edited values always
come back as a coherent provider/model pair.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping

from pydantic.alias_generators import to_camel

from sherlock.models.ai_models import (
    DEFAULT_MODEL_ID,
    AIProvider,
    get_default_model_for_provider,
    get_model_provider,
)
from sherlock.models.contracts import SearchDepth, SystemConfig
from sherlock.storage import KeyValueStore, get_local_store

logger = logging.getLogger(__name__)

STORAGE_KEY = "sherlock_config"
DEFAULT_PERSONA = "general-investigator"

LEGACY_MODEL_IDS: dict[str, str] = {
    "gemini-2.5-flash-latest": "gemini-2.5-flash",
    "gemini-3-flash": "gemini-3-flash-preview",
    "gemini-3-pro": "gemini-3-pro-preview",
}

_CONFIG_FIELDS = tuple(SystemConfig.model_fields)


def _camel_keys(raw: Mapping[str, Any] | SystemConfig | None) -> dict[str, Any]:
    """Copy a raw config, renaming snake_case config fields to their camelCase form."""
    if raw is None:
        return {}
    if isinstance(raw, SystemConfig):
        return raw.model_dump(by_alias=True, mode="json")

    result = dict(raw)
    for name in _CONFIG_FIELDS:
        alias = to_camel(name)
        if name != alias and name in result:
            result[alias] = result.pop(name)
    return result


def _normalize_model_id(model_id: Any) -> str | None:
    if not isinstance(model_id, str) or not model_id.strip():
        return None
    model_id = model_id.strip()
    return LEGACY_MODEL_IDS.get(model_id, model_id)


def migrate_system_config(value: Mapping[str, Any] | SystemConfig | None = None) -> SystemConfig:
    """
    Repair a raw persisted config into a valid ``SystemConfig``.

    - legacy model ids are remapped
    - a missing or unknown provider is inferred from the model id
    - a missing model id becomes the provider default
    - a model that belongs to another provider is replaced by the provider default
    - persona, search depth and thinking budget fall back to defaults

    Args:
        value: Raw mapping (camelCase or snake_case keys) or an existing config.

    Returns:
        A fully populated config.
    """
    raw = _camel_keys(value)

    model_id = _normalize_model_id(raw.get("modelId"))
    provider = AIProvider.parse(raw.get("provider")) or get_model_provider(model_id or DEFAULT_MODEL_ID)
    model_id = model_id or get_default_model_for_provider(provider)

    if get_model_provider(model_id) != provider:
        provider_default = get_default_model_for_provider(provider)
        if get_model_provider(provider_default) == provider:
            logger.debug(f"Realigning model {model_id} to {provider_default} for provider {provider.value}")
            model_id = provider_default

    persona = raw.get("persona")
    if not isinstance(persona, str) or not persona.strip():
        persona = DEFAULT_PERSONA

    thinking_budget = raw.get("thinkingBudget")
    if isinstance(thinking_budget, bool) or not isinstance(thinking_budget, (int, float)):
        thinking_budget = 0

    return SystemConfig(
        provider=provider,
        model_id=model_id,
        thinking_budget=int(thinking_budget),
        persona=persona,
        search_depth=SearchDepth.DEEP if raw.get("searchDepth") == "DEEP" else SearchDepth.STANDARD,
        auto_normalize_entities=raw.get("autoNormalizeEntities", True) is not False,
        quiet_mode=raw.get("quietMode") is True,
    )


def _read_stored_config(store: KeyValueStore) -> dict[str, Any]:
    stored = store.get_item(STORAGE_KEY)
    if not stored:
        return {}
    try:
        parsed = json.loads(stored)
    except ValueError:
        logger.warning(f"Ignoring unreadable {STORAGE_KEY} value in local store")
        return {}
    return parsed if isinstance(parsed, dict) else {}


def load_system_config(store: KeyValueStore | None = None) -> SystemConfig:
    """Read and migrate the persisted config (defaults when nothing is stored)."""
    return migrate_system_config(_read_stored_config(store or get_local_store()))


def save_system_config(
    partial_config: Mapping[str, Any] | SystemConfig,
    extra_values: Mapping[str, Any] | None = None,
    store: KeyValueStore | None = None,
) -> SystemConfig:
    """
    Merge a partial config into the stored one, migrate, and persist.

    Keys in the stored object that are not config fields are kept, and
    ``extra_values`` are written alongside.

    Returns:
        The migrated config that was persisted.
    """
    store = store or get_local_store()
    existing = _read_stored_config(store)
    next_config = migrate_system_config({**existing, **_camel_keys(partial_config)})

    persisted = {
        **existing,
        **next_config.model_dump(by_alias=True, mode="json"),
        **dict(extra_values or {}),
    }
    store.set_item(STORAGE_KEY, json.dumps(persisted))
    return next_config


def merge_config_override(base: SystemConfig, override: Mapping[str, Any] | None) -> SystemConfig:
    """Shallow-merge a caller override onto ``base`` and migrate the result."""
    merged = {**_camel_keys(base), **_camel_keys(override)}
    return migrate_system_config(merged)


__all__ = [
    "STORAGE_KEY",
    "DEFAULT_PERSONA",
    "LEGACY_MODEL_IDS",
    "migrate_system_config",
    "load_system_config",
    "save_system_config",
    "merge_config_override",
]
