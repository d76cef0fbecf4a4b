"""
Sherlock Provider Pipeline - Pytest Fixtures and Configuration.

This module provides shared fixtures for the provider tests:
- Test environment defaults (no retry delay, isolated storage path)
- A fresh in-memory key/value store per test
- Scope and system config fixtures
- Stored API keys for every provider
"""

from __future__ import annotations

import os
from typing import Any, Generator

import pytest

# Ensure test environment variables are loaded before settings are read
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("STORAGE_PATH", ".sherlock/test-storage.json")
os.environ.setdefault("PROVIDER_RETRY_DELAY_MS", "0")

from sherlock.config import get_settings, setup_logging  # noqa: E402
from sherlock.models.ai_models import AIProvider  # noqa: E402
from sherlock.models.contracts import (  # noqa: E402
    InvestigationScope,
    PersonaDefinition,
    SearchDepth,
    SystemConfig,
)
from sherlock.providers.keys import KEY_CONFIG  # noqa: E402
from sherlock.storage import MemoryStore, set_local_store  # noqa: E402


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers for provider tests."""
    config.addinivalue_line(
        "markers", "contract: adapter contract test against recorded provider payloads"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as integration test (requires live provider keys)"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
    setup_logging()


# =============================================================================
# Environment Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def clean_provider_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove provider keys inherited from the developer's shell."""
    for key_config in KEY_CONFIG.values():
        for name in key_config.env_keys:
            monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def local_store() -> Generator[MemoryStore, None, None]:
    """Install a fresh in-memory store as the process-wide store."""
    store = MemoryStore()
    set_local_store(store)
    get_settings.cache_clear()
    yield store
    set_local_store(None)
    get_settings.cache_clear()


@pytest.fixture
def provider_keys(local_store: MemoryStore) -> dict[str, str]:
    """Store a well-formed key for every provider."""
    keys = {
        "GEMINI_API_KEY": "AIza-test-gemini",
        "OPENROUTER_API_KEY": "sk-or-v1-test-openrouter",
        "OPENAI_API_KEY": "sk-test-openai",
        "ANTHROPIC_API_KEY": "sk-ant-test-anthropic",
    }
    for name, value in keys.items():
        local_store.set_item(name, value)
    return keys


# =============================================================================
# Domain Fixtures
# =============================================================================


@pytest.fixture
def scope_fixture() -> InvestigationScope:
    """Minimal open-investigation scope with two categories."""
    return InvestigationScope(
        id="open-investigation",
        name="Open Investigation",
        description="Fixture scope",
        domain_context="General OSINT",
        investigation_objective="Find risks",
        categories=["Finance", "Procurement"],
        personas=[
            PersonaDefinition(
                id="general-investigator",
                label="General Investigator",
                instruction="Investigate comprehensively.",
            )
        ],
    )


@pytest.fixture
def make_config() -> Any:
    """Factory for a system config on a given provider/model."""

    def _make(provider: AIProvider, model_id: str, thinking_budget: int | None = None) -> SystemConfig:
        if thinking_budget is None:
            thinking_budget = 1024 if provider == AIProvider.GEMINI else 0
        return SystemConfig(
            provider=provider,
            model_id=model_id,
            persona="general-investigator",
            search_depth=SearchDepth.STANDARD,
            thinking_budget=thinking_budget,
        )

    return _make
