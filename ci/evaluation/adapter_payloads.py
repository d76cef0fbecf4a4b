"""Recorded provider payloads for adapter contract tests.

One model answer per operation (report object, anomaly feed array, live
event array), wrapped in each provider's response envelope. The second
feed and live items are deliberately malformed.
"""

from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any

REPORT_PAYLOAD: dict[str, Any] = {
    "summary": {"text": "Investigation summary from fixture."},
    "agendas": ["Potential shell-company layering", {"content": "Watch procurement anomalies"}],
    "leads": ["Trace vendor ownership chain", {"text": "Cross-check payment timing"}],
    "entities": [
        {
            "name": "Atlas Holdings",
            "type": "ORGANIZATION",
            "role": "Primary contractor",
            "sentiment": "NEGATIVE",
        },
        {
            "name": "Jordan Vale",
            "type": "PERSON",
            "role": "Director",
            "sentiment": "NEUTRAL",
        },
    ],
    "sources": [
        {
            "title": "Public Contract Registry",
            "url": "https://example.com/contracts/atlas",
        },
    ],
}

FEED_PAYLOAD: list[dict[str, Any]] = [
    {
        "id": "feed-1",
        "title": "Large award spike detected",
        "category": "Finance",
        "riskLevel": "HIGH",
        "timestamp": "08:10",
    },
    {
        "title": "Secondary anomaly with partial fields",
        "riskLevel": "UNKNOWN",
    },
]

LIVE_PAYLOAD: list[dict[str, Any]] = [
    {
        "id": "evt-1",
        "type": "NEWS",
        "sourceName": "State Ledger",
        "content": "Budget revision posted for Atlas contract lot.",
        "timestamp": "5m ago",
        "sentiment": "NEGATIVE",
        "threatLevel": "CAUTION",
        "url": "https://example.com/news/atlas",
    },
    {
        "type": "INVALID",
        "sourceName": 42,
        "content": {"text": "Malformed item to normalize"},
        "timestamp": 123,
        "sentiment": "OTHER",
        "threatLevel": "NONE",
    },
]

REPORT_JSON = json.dumps(REPORT_PAYLOAD)
FEED_JSON = json.dumps(FEED_PAYLOAD)
LIVE_JSON = json.dumps(LIVE_PAYLOAD)


def _fenced(text: str) -> str:
    return f"```json\n{text}\n```"


def _chat(content: str) -> dict[str, Any]:
    return {"choices": [{"message": {"content": content}, "finish_reason": "stop"}]}


def _messages(text: str) -> dict[str, Any]:
    return {"content": [{"type": "text", "text": text}], "stop_reason": "end_turn"}


OPENAI_FIXTURES: dict[str, dict[str, Any]] = {
    "investigate": _chat(_fenced(REPORT_JSON)),
    "scan": _chat(FEED_JSON),
    "live": _chat(LIVE_JSON),
}

OPENROUTER_FIXTURES: dict[str, dict[str, Any]] = {
    "investigate": _chat(_fenced(REPORT_JSON)),
    "scan": _chat(FEED_JSON),
    "live": _chat(LIVE_JSON),
}

ANTHROPIC_FIXTURES: dict[str, dict[str, Any]] = {
    "investigate": _messages(_fenced(REPORT_JSON)),
    "scan": _messages(FEED_JSON),
    "live": _messages(LIVE_JSON),
}

GROUNDING_TITLE = "Grounding Source"
GROUNDING_URL = "https://example.com/grounding"


def gemini_response(text: str | None, grounding: bool = False) -> SimpleNamespace:
    """Stand-in for a google-genai ``GenerateContentResponse``."""
    candidates = []
    if grounding:
        candidates.append(
            SimpleNamespace(
                grounding_metadata=SimpleNamespace(
                    grounding_chunks=[
                        SimpleNamespace(web=SimpleNamespace(title=GROUNDING_TITLE, uri=GROUNDING_URL)),
                    ]
                )
            )
        )
    return SimpleNamespace(text=text, candidates=candidates)


def gemini_audio_response(data: bytes | None) -> SimpleNamespace:
    inline = SimpleNamespace(data=data, mime_type="audio/L16;rate=24000") if data is not None else None
    part = SimpleNamespace(inline_data=inline)
    return SimpleNamespace(text=None, candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])


__all__ = [
    "REPORT_PAYLOAD",
    "FEED_PAYLOAD",
    "LIVE_PAYLOAD",
    "REPORT_JSON",
    "FEED_JSON",
    "LIVE_JSON",
    "OPENAI_FIXTURES",
    "OPENROUTER_FIXTURES",
    "ANTHROPIC_FIXTURES",
    "GROUNDING_TITLE",
    "GROUNDING_URL",
    "gemini_response",
    "gemini_audio_response",
]
