"""OpenAI chat completions adapter."""

from __future__ import annotations

from typing import Any

from sherlock.config import get_settings
from sherlock.models.ai_models import AIProvider
from sherlock.providers.http_adapter import HttpProviderAdapter, first_display_text


def read_chat_completion(payload: dict[str, Any]) -> tuple[str, str | None]:
    """Text and finish reason of the first choice of a chat completion.

    Reads message content, then reasoning, then refusal, then the legacy
    choice ``text`` field.
    """
    choices = payload.get("choices")
    choice = choices[0] if isinstance(choices, list) and choices and isinstance(choices[0], dict) else {}
    message = choice.get("message") if isinstance(choice.get("message"), dict) else {}

    text = first_display_text(
        message.get("content"),
        message.get("reasoning"),
        message.get("refusal"),
        choice.get("text"),
    )
    return text, choice.get("finish_reason")


class OpenAIAdapter(HttpProviderAdapter):
    provider = AIProvider.OPENAI
    label = "OpenAI"
    endpoint_path = "/chat/completions"

    def base_url(self) -> str:
        return get_settings().OPENAI_BASE_URL

    def build_headers(self, api_key: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {api_key}"}

    def build_body(self, model_id: str, prompt: str, max_tokens: int, json_mode: bool) -> dict[str, Any]:
        body: dict[str, Any] = {
            "model": model_id,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": max_tokens,
        }
        if json_mode:
            body["response_format"] = {"type": "json_object"}
        return body

    def extract_text(self, payload: dict[str, Any]) -> tuple[str, str | None]:
        return read_chat_completion(payload)


openai_adapter = OpenAIAdapter()

__all__ = ["OpenAIAdapter", "openai_adapter", "read_chat_completion"]
