"""Gemini adapter (google-genai SDK).

All three text operations run with the Google Search tool enabled, so
reports pick up grounding citations ahead of any sources the model
declares itself. Models that support it get a response schema; the rest
get a JSON instruction appended to the prompt.
"""

from __future__ import annotations

import asyncio
import base64
import logging
from typing import Any, Callable

from google import genai
from google.genai import types

from sherlock.config import get_settings
from sherlock.models.ai_models import AIProvider, supports_structured_output
from sherlock.models.contracts import FeedItem, InvestigationReport, MonitorEvent, SystemConfig
from sherlock.providers.common import (
    FEED_ID_PREFIX,
    LIVE_ID_PREFIX,
    build_investigation_report,
    current_time_label,
    fallback_feed_items,
    fallback_live_events,
    primary_category,
    with_degraded_fallback,
)
from sherlock.providers.errors import UpstreamHttpError
from sherlock.providers.json_parsing import parse_json_with_fallback
from sherlock.providers.keys import get_api_key_or_raise
from sherlock.providers.normalizers import (
    extract_sources_from_grounding,
    normalize_feed_items,
    normalize_live_events,
)
from sherlock.providers.prompts import (
    REPORT_DETAIL_INSTRUCTION,
    REPORT_JSON_INSTRUCTION,
    build_anomaly_prompt,
    build_investigation_prompt,
    build_live_intel_prompt,
)
from sherlock.providers.retry import with_provider_retry
from sherlock.providers.types import (
    InvestigationRequest,
    LiveIntelRequest,
    ProviderOperation,
    ScanAnomaliesOptions,
    ScanAnomaliesRequest,
    TtsRequest,
)

logger = logging.getLogger(__name__)

SCAN_JSON_INSTRUCTION = (
    "CRITICAL: You MUST respond with ONLY a valid JSON array. No other text.\n"
    'Each item must have: id (string), title (string), category (string), riskLevel ("LOW" | "MEDIUM" | "HIGH")'
)
LIVE_JSON_INSTRUCTION = (
    "CRITICAL: Respond with ONLY a valid JSON array. Items: id, type, sourceName, content, "
    'timestamp, sentiment, threatLevel ("INFO" | "CAUTION" | "CRITICAL"), url (opt)'
)
TTS_PROMPT_PREFIX = "Read this investigative summary clearly and professionally: "

SAFETY_SETTINGS = [
    types.SafetySetting(category=category, threshold=types.HarmBlockThreshold.BLOCK_ONLY_HIGH)
    for category in (
        types.HarmCategory.HARM_CATEGORY_HARASSMENT,
        types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
        types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
        types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
    )
]


# =============================================================================
# Response schemas
# =============================================================================


def _string(enum: list[str] | None = None) -> types.Schema:
    return types.Schema(type=types.Type.STRING, enum=enum)


def _string_array() -> types.Schema:
    return types.Schema(type=types.Type.ARRAY, items=_string())


REPORT_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "summary": _string(),
        "entities": types.Schema(
            type=types.Type.ARRAY,
            items=types.Schema(
                type=types.Type.OBJECT,
                properties={
                    "name": _string(),
                    "type": _string(["PERSON", "ORGANIZATION", "UNKNOWN"]),
                    "role": _string(),
                    "sentiment": _string(["POSITIVE", "NEGATIVE", "NEUTRAL"]),
                },
                required=["name", "type", "role", "sentiment"],
            ),
        ),
        "agendas": _string_array(),
        "leads": _string_array(),
        "sources": types.Schema(
            type=types.Type.ARRAY,
            items=types.Schema(
                type=types.Type.OBJECT,
                properties={"title": _string(), "url": _string()},
                required=["title", "url"],
            ),
        ),
    },
    required=["summary", "entities", "agendas", "leads", "sources"],
)

FEED_SCHEMA = types.Schema(
    type=types.Type.ARRAY,
    items=types.Schema(
        type=types.Type.OBJECT,
        properties={
            "id": _string(),
            "title": _string(),
            "category": _string(),
            "riskLevel": _string(["LOW", "MEDIUM", "HIGH"]),
        },
        required=["id", "title", "category", "riskLevel"],
    ),
)

LIVE_SCHEMA = types.Schema(
    type=types.Type.ARRAY,
    items=types.Schema(
        type=types.Type.OBJECT,
        properties={
            "id": _string(),
            "type": _string(["SOCIAL", "NEWS", "OFFICIAL"]),
            "sourceName": _string(),
            "content": _string(),
            "timestamp": _string(),
            "sentiment": _string(["NEGATIVE", "NEUTRAL", "POSITIVE"]),
            "threatLevel": _string(["INFO", "CAUTION", "CRITICAL"]),
            "url": _string(),
        },
        required=["id", "type", "sourceName", "content", "timestamp", "sentiment", "threatLevel"],
    ),
)


def build_generation_config(
    config: SystemConfig,
    schema: types.Schema | None,
    use_thinking: bool = True,
) -> types.GenerateContentConfig:
    """Search-grounded generation config, schema-constrained when ``schema`` is given."""
    kwargs: dict[str, Any] = {
        "tools": [types.Tool(google_search=types.GoogleSearch())],
        "safety_settings": SAFETY_SETTINGS,
    }
    if use_thinking and config.thinking_budget > 0:
        kwargs["thinking_config"] = types.ThinkingConfig(thinking_budget=config.thinking_budget)
    if schema is not None:
        kwargs["response_mime_type"] = "application/json"
        kwargs["response_schema"] = schema
    return types.GenerateContentConfig(**kwargs)


def truncate_briefing(text: str, limit: int | None = None) -> str:
    limit = get_settings().TTS_MAX_CHARS if limit is None else limit
    return f"{text[:limit]}..." if len(text) > limit else text


def extract_inline_audio(response: Any) -> str | None:
    """Base64 audio from the first part of the first candidate, if any."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    if not parts:
        return None
    inline = getattr(parts[0], "inline_data", None)
    data = getattr(inline, "data", None)
    if not data:
        return None
    if isinstance(data, (bytes, bytearray)):
        return base64.b64encode(bytes(data)).decode("ascii")
    return str(data)


# =============================================================================
# Adapter
# =============================================================================


class GeminiAdapter:
    """Gemini implementation of the provider operations, including TTS."""

    provider = AIProvider.GEMINI

    def __init__(self, client_factory: Callable[..., Any] | None = None):
        self._client_factory = client_factory or genai.Client
        self._client: Any = None
        self._lock = asyncio.Lock()

    async def get_client(self) -> Any:
        """Get or create the SDK client; needs a configured API key."""
        if self._client is not None:
            return self._client

        async with self._lock:
            if self._client is None:
                api_key = get_api_key_or_raise(self.provider)
                self._client = self._client_factory(api_key=api_key)
                logger.info("Gemini client initialized")
        return self._client

    def reset_client(self) -> None:
        self._client = None

    async def _generate(self, model: str, contents: str, config: types.GenerateContentConfig) -> Any:
        client = await self.get_client()
        return await client.aio.models.generate_content(model=model, contents=contents, config=config)

    async def investigate(self, request: InvestigationRequest) -> InvestigationReport:
        config = request.config
        structured = supports_structured_output(config.model_id)

        parts = [
            build_investigation_prompt(
                request.topic,
                request.scope,
                config,
                request.parent_context,
                request.date_override,
            )
        ]
        if not structured:
            parts.append(f"CRITICAL: {REPORT_JSON_INSTRUCTION}")
        parts.append(REPORT_DETAIL_INSTRUCTION)
        prompt = " ".join(parts)
        generation_config = build_generation_config(config, REPORT_SCHEMA if structured else None)

        async def attempt() -> InvestigationReport:
            response = await self._generate(config.model_id, prompt, generation_config)
            raw_text = getattr(response, "text", None) or "{}"
            return build_investigation_report(
                topic=request.topic,
                config=config,
                parsed=parse_json_with_fallback(raw_text),
                raw_text=raw_text,
                parent_context=request.parent_context,
                leading_sources=extract_sources_from_grounding(response),
            )

        return await with_provider_retry(
            attempt,
            provider=self.provider,
            model_id=config.model_id,
            operation=ProviderOperation.INVESTIGATE,
        )

    async def scan_anomalies(self, request: ScanAnomaliesRequest) -> list[FeedItem]:
        config = request.config
        options = request.options or ScanAnomaliesOptions()
        limit = options.limit or 8
        structured = supports_structured_output(config.model_id)

        prompt = build_anomaly_prompt(
            region=request.region,
            category=request.category,
            limit=limit,
            priority_sources=options.priority_sources or "",
            scope=request.scope,
            date_range=request.date_range,
        )
        prompt = f"{prompt}\n{'' if structured else SCAN_JSON_INSTRUCTION}"
        generation_config = build_generation_config(config, FEED_SCHEMA if structured else None)

        async def attempt() -> list[FeedItem]:
            response = await self._generate(config.model_id, prompt, generation_config)
            raw_text = getattr(response, "text", None) or "[]"
            return normalize_feed_items(
                parse_json_with_fallback(raw_text),
                primary_category(request.scope),
                current_time_label(),
                FEED_ID_PREFIX,
            )

        return await with_degraded_fallback(
            lambda: with_provider_retry(
                attempt,
                provider=self.provider,
                model_id=config.model_id,
                operation=ProviderOperation.SCAN_ANOMALIES,
            ),
            lambda: fallback_feed_items(request.scope, limit),
            provider=self.provider,
            operation=ProviderOperation.SCAN_ANOMALIES,
        )

    async def get_live_intel(self, request: LiveIntelRequest) -> list[MonitorEvent]:
        config = request.config
        structured = supports_structured_output(config.model_id)

        prompt = build_live_intel_prompt(
            request.topic,
            request.monitor_config,
            request.scope,
            request.existing_content,
        )
        prompt = f"{prompt}\n{'' if structured else LIVE_JSON_INSTRUCTION}"
        # Live polling stays fast: no thinking budget.
        generation_config = build_generation_config(
            config, LIVE_SCHEMA if structured else None, use_thinking=False
        )

        async def attempt() -> list[MonitorEvent]:
            response = await self._generate(config.model_id, prompt, generation_config)
            raw_text = getattr(response, "text", None) or "[]"
            return normalize_live_events(parse_json_with_fallback(raw_text), LIVE_ID_PREFIX)

        return await with_degraded_fallback(
            lambda: with_provider_retry(
                attempt,
                provider=self.provider,
                model_id=config.model_id,
                operation=ProviderOperation.LIVE_INTEL,
            ),
            lambda: fallback_live_events(request.topic),
            provider=self.provider,
            operation=ProviderOperation.LIVE_INTEL,
        )

    async def generate_audio_briefing(self, request: TtsRequest) -> str:
        """
        Synthesize a spoken briefing.

        Returns:
            Base64-encoded audio from the TTS model.
        """
        settings = get_settings()
        contents = f"{TTS_PROMPT_PREFIX}{truncate_briefing(request.text)}"
        speech_config = types.GenerateContentConfig(
            response_modalities=["AUDIO"],
            speech_config=types.SpeechConfig(
                voice_config=types.VoiceConfig(
                    prebuilt_voice_config=types.PrebuiltVoiceConfig(
                        voice_name=settings.GEMINI_TTS_VOICE,
                    ),
                ),
            ),
        )

        async def attempt() -> str:
            response = await self._generate(settings.GEMINI_TTS_MODEL, contents, speech_config)
            audio = extract_inline_audio(response)
            if not audio:
                raise UpstreamHttpError("UPSTREAM_ERROR: No audio data returned")
            return audio

        return await with_provider_retry(
            attempt,
            provider=self.provider,
            model_id=request.config.model_id,
            operation=ProviderOperation.TTS,
        )


gemini_adapter = GeminiAdapter()

__all__ = [
    "SAFETY_SETTINGS",
    "REPORT_SCHEMA",
    "FEED_SCHEMA",
    "LIVE_SCHEMA",
    "build_generation_config",
    "truncate_briefing",
    "extract_inline_audio",
    "GeminiAdapter",
    "gemini_adapter",
]
