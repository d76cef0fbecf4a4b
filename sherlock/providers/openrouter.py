"""OpenRouter adapter.

OpenRouter speaks the OpenAI chat completions format and asks callers to
identify themselves with ``HTTP-Referer`` and ``X-Title`` headers. The
free-tier models it fronts do not reliably honour ``response_format``,
so JSON is always requested in the prompt instead.
"""

from __future__ import annotations

from typing import Any

from sherlock.config import get_settings
from sherlock.models.ai_models import AIProvider
from sherlock.providers.http_adapter import HttpProviderAdapter
from sherlock.providers.openai import read_chat_completion


class OpenRouterAdapter(HttpProviderAdapter):
    provider = AIProvider.OPENROUTER
    label = "OpenRouter"
    endpoint_path = "/chat/completions"

    def base_url(self) -> str:
        return get_settings().OPENROUTER_BASE_URL

    def build_headers(self, api_key: str) -> dict[str, str]:
        settings = get_settings()
        return {
            "Authorization": f"Bearer {api_key}",
            "HTTP-Referer": settings.OPENROUTER_HTTP_REFERER,
            "X-Title": settings.APP_NAME,
        }

    def build_body(self, model_id: str, prompt: str, max_tokens: int, json_mode: bool) -> dict[str, Any]:
        return {
            "model": model_id,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": max_tokens,
        }

    def extract_text(self, payload: dict[str, Any]) -> tuple[str, str | None]:
        return read_chat_completion(payload)


openrouter_adapter = OpenRouterAdapter()

__all__ = ["OpenRouterAdapter", "openrouter_adapter"]
