"""
Application Configuration for the Sherlock OSINT provider pipeline.

Uses pydantic-settings for type-safe configuration with environment
variable loading, validation, and sensible defaults.

Configuration is loaded from:
1. Environment variables (highest priority)
2. .env file in project root
3. Default values defined here (lowest priority)

Provider API keys are not part of these settings: they are resolved per
call by ``sherlock.providers.keys`` from the local store first and the
process environment second.

The package never configures logging on import. The embedding application
calls ``setup_logging()`` once at startup; the test suite does so from
``pytest_configure``.
"""

from __future__ import annotations

import logging
import sys
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables using
    the same name (case-insensitive).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Application Settings
    # =========================================================================

    APP_NAME: str = Field(
        default="Sherlock AI",
        description="Application name, also sent as the OpenRouter X-Title header",
    )

    APP_ENV: Literal["development", "test", "staging", "production"] = Field(
        default="development",
        description="Current application environment",
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging)",
    )

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level for the application",
    )

    # =========================================================================
    # Local Storage Settings
    # =========================================================================

    STORAGE_PATH: str = Field(
        default=".sherlock/storage.json",
        description="JSON file backing the local key/value store (API keys, system config)",
    )

    # =========================================================================
    # Provider Endpoints
    # =========================================================================

    OPENAI_BASE_URL: str = Field(
        default="https://api.openai.com/v1",
        description="OpenAI API base URL",
    )

    ANTHROPIC_BASE_URL: str = Field(
        default="https://api.anthropic.com/v1",
        description="Anthropic API base URL",
    )

    ANTHROPIC_VERSION: str = Field(
        default="2023-06-01",
        description="Value of the anthropic-version request header",
    )

    OPENROUTER_BASE_URL: str = Field(
        default="https://openrouter.ai/api/v1",
        description="OpenRouter API base URL",
    )

    OPENROUTER_HTTP_REFERER: str = Field(
        default="http://localhost:3000",
        description="HTTP-Referer attribution header sent to OpenRouter",
    )

    HTTP_TIMEOUT: float = Field(
        default=120.0,
        ge=5.0,
        le=600.0,
        description="httpx client timeout in seconds for provider requests",
    )

    # =========================================================================
    # Retry Settings
    # =========================================================================

    PROVIDER_MAX_RETRIES: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Retries after the first attempt for retryable provider errors",
    )

    PROVIDER_RETRY_DELAY_MS: int = Field(
        default=2000,
        ge=0,
        le=60000,
        description="Fixed delay between provider attempts in milliseconds",
    )

    PROVIDER_ATTEMPT_TIMEOUT: float | None = Field(
        default=None,
        description="Optional per-attempt deadline in seconds (unset means no deadline)",
    )

    # =========================================================================
    # Speech Synthesis Settings
    # =========================================================================

    GEMINI_TTS_MODEL: str = Field(
        default="gemini-2.5-flash-preview-tts",
        description="Gemini model used for audio briefings",
    )

    GEMINI_TTS_VOICE: str = Field(
        default="Kore",
        description="Prebuilt Gemini voice used for audio briefings",
    )

    TTS_MAX_CHARS: int = Field(
        default=800,
        ge=50,
        le=5000,
        description="Briefing text is truncated to this many characters",
    )

    @field_validator("PROVIDER_ATTEMPT_TIMEOUT", mode="before")
    @classmethod
    def empty_timeout_is_none(cls, v: object) -> object:
        """Treat an empty env value as 'no deadline'."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("OPENAI_BASE_URL", "ANTHROPIC_BASE_URL", "OPENROUTER_BASE_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def retry_delay_seconds(self) -> float:
        return self.PROVIDER_RETRY_DELAY_MS / 1000.0


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload settings.

    Returns:
        Settings: Application settings instance
    """
    return Settings()


# =============================================================================
# Logging
# =============================================================================


def setup_logging(level: str | None = None) -> None:
    """Configure root logging from settings.

    Args:
        level: Optional level name overriding ``LOG_LEVEL``.
    """
    settings = get_settings()
    resolved = level or ("DEBUG" if settings.DEBUG else settings.LOG_LEVEL)
    logging.basicConfig(
        level=getattr(logging, resolved.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )


# =============================================================================
# Type Exports
# =============================================================================

__all__ = [
    "Settings",
    "get_settings",
    "setup_logging",
]
