"""Anthropic Messages API adapter."""

from __future__ import annotations

from typing import Any

from sherlock.config import get_settings
from sherlock.models.ai_models import AIProvider
from sherlock.providers.http_adapter import HttpProviderAdapter, first_display_text


class AnthropicAdapter(HttpProviderAdapter):
    provider = AIProvider.ANTHROPIC
    label = "Anthropic"
    endpoint_path = "/messages"

    def base_url(self) -> str:
        return get_settings().ANTHROPIC_BASE_URL

    def build_headers(self, api_key: str) -> dict[str, str]:
        return {
            "x-api-key": api_key,
            "anthropic-version": get_settings().ANTHROPIC_VERSION,
        }

    def build_body(self, model_id: str, prompt: str, max_tokens: int, json_mode: bool) -> dict[str, Any]:
        # No response_format on this API; JSON is requested in the prompt.
        return {
            "model": model_id,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }

    def extract_text(self, payload: dict[str, Any]) -> tuple[str, str | None]:
        blocks = payload.get("content")
        blocks = blocks if isinstance(blocks, list) else []

        text_parts = [
            block.get("text")
            for block in blocks
            if isinstance(block, dict) and block.get("type", "text") == "text"
        ]
        thinking_parts = [
            block.get("thinking")
            for block in blocks
            if isinstance(block, dict) and block.get("type") == "thinking"
        ]
        text = first_display_text(
            "\n".join(part for part in text_parts if isinstance(part, str)),
            thinking_parts,
        )
        return text, payload.get("stop_reason")


anthropic_adapter = AnthropicAdapter()

__all__ = ["AnthropicAdapter", "anthropic_adapter"]
