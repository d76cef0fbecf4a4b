"""Normalizers from loosely-typed model JSON to pipeline contracts.

Every function here is total: malformed input degrades to defaults or is
dropped, and nothing raises.
"""

from __future__ import annotations

import re
import time
from typing import Any, Iterable, Mapping
from urllib.parse import urlsplit, urlunsplit

from sherlock.models.contracts import (
    Entity,
    EntityType,
    EventType,
    FeedItem,
    MonitorEvent,
    RiskLevel,
    Sentiment,
    Source,
    ThreatLevel,
)
from sherlock.providers.json_parsing import to_display_text

UNTITLED_SOURCE = "Untitled Source"
REFERENCED_SOURCE = "Referenced Source"
UNTITLED_SIGNAL = "Untitled signal"
UNKNOWN_SOURCE_NAME = "Unknown Source"

URL_PATTERN = re.compile(r"https?://[^\s<>\"'`)\]}]+", re.IGNORECASE)
_TRAILING_PUNCTUATION = re.compile(r"[),.;\]}]+$")
_DEFAULT_PORTS = {"http": 80, "https": 443}


def _field(record: Any, *names: str) -> Any:
    """Read the first present attribute or key among ``names``."""
    if record is None:
        return None
    for name in names:
        if isinstance(record, Mapping):
            if name in record:
                return record[name]
        else:
            value = getattr(record, name, None)
            if value is not None:
                return value
    return None


def _enum_or(enum_cls: type, value: Any, default: Any) -> Any:
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().upper())
        except ValueError:
            return default
    return default


def _non_blank(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _generated_id(prefix: str, index: int) -> str:
    return f"{prefix}-{int(time.time() * 1000)}-{index}"


# =============================================================================
# Sources
# =============================================================================


def sanitize_url(value: Any) -> str | None:
    """Canonicalize a URL, or return None when it is not an absolute web URL.

    Trailing punctuation picked up from prose is stripped, the fragment is
    dropped, and scheme and host are lower-cased.
    """
    if not isinstance(value, str):
        return None
    cleaned = _TRAILING_PUNCTUATION.sub("", value.strip())
    if not cleaned:
        return None

    try:
        parts = urlsplit(cleaned)
        hostname = parts.hostname
        port = parts.port
    except ValueError:
        return None

    scheme = parts.scheme.lower()
    if scheme not in _DEFAULT_PORTS or not hostname:
        return None

    host = f"[{hostname}]" if ":" in hostname else hostname
    userinfo = parts.netloc.rpartition("@")[0]
    netloc = f"{userinfo}@{host}" if userinfo else host
    if port is not None and port != _DEFAULT_PORTS[scheme]:
        netloc = f"{netloc}:{port}"

    return urlunsplit((scheme, netloc, parts.path or "/", parts.query, ""))


def normalize_source(record: Any) -> Source | None:
    """Build a ``Source`` from a ``{title, url}`` (or legacy ``{title, uri}``) record."""
    raw_url = _field(record, "url")
    if not isinstance(raw_url, str):
        raw_url = _field(record, "uri")
    url = sanitize_url(raw_url)
    if not url:
        return None

    title = _field(record, "title")
    if isinstance(title, str) and title.strip():
        return Source(title=title.strip(), url=url)
    return Source(title=UNTITLED_SOURCE, url=url)


def dedupe_sources(records: Iterable[Any]) -> list[Source]:
    """Normalize and deduplicate by case-insensitive URL; the first record wins."""
    unique: dict[str, Source] = {}
    for record in records or []:
        source = record if isinstance(record, Source) else normalize_source(record)
        if source is None:
            continue
        key = source.url.lower()
        if key not in unique:
            unique[key] = source
    return list(unique.values())


def extract_sources_from_grounding(response: Any) -> list[Source]:
    """Read Google Search grounding citations from a Gemini response.

    Works on SDK response objects (snake_case attributes) and on plain dicts
    in either snake_case or camelCase.
    """
    found: list[Source] = []
    candidates = _field(response, "candidates") or []
    if not isinstance(candidates, (list, tuple)):
        return []

    for candidate in candidates:
        metadata = _field(candidate, "grounding_metadata", "groundingMetadata")
        chunks = _field(metadata, "grounding_chunks", "groundingChunks") or []
        if not isinstance(chunks, (list, tuple)):
            continue
        for chunk in chunks:
            web = _field(chunk, "web")
            if web is None:
                continue
            source = normalize_source({"title": _field(web, "title"), "uri": _field(web, "uri")})
            if source:
                found.append(source)

    return dedupe_sources(found)


def extract_sources_from_text(text: Any) -> list[Source]:
    if not isinstance(text, str) or not text:
        return []
    return dedupe_sources({"title": REFERENCED_SOURCE, "url": match} for match in URL_PATTERN.findall(text))


# =============================================================================
# Report fields
# =============================================================================


def normalize_string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    items = (to_display_text(item).strip() for item in value)
    return [item for item in items if item]


def normalize_entities(value: Any) -> list[Entity]:
    if not isinstance(value, list):
        return []

    entities: list[Entity] = []
    for entry in value:
        if isinstance(entry, str):
            name = entry.strip()
            if name:
                entities.append(Entity(name=name, type=EntityType.UNKNOWN))
            continue
        if not isinstance(entry, dict):
            continue

        name = to_display_text(entry.get("name")).strip()
        if not name:
            continue

        entities.append(
            Entity(
                name=name,
                type=_enum_or(EntityType, to_display_text(entry.get("type")), EntityType.UNKNOWN),
                role=to_display_text(entry.get("role")).strip() or None,
                sentiment=_enum_or(Sentiment, to_display_text(entry.get("sentiment")), None),
            )
        )
    return entities


# =============================================================================
# Feed and live events
# =============================================================================


def normalize_feed_items(
    value: Any,
    fallback_category: str,
    now: str,
    id_prefix: str,
) -> list[FeedItem]:
    """Normalize an anomaly feed array; every element yields one item."""
    if not isinstance(value, list):
        return []

    items: list[FeedItem] = []
    for index, entry in enumerate(value):
        record = entry if isinstance(entry, dict) else {}
        items.append(
            FeedItem(
                id=_non_blank(record.get("id")) or _generated_id(id_prefix, index),
                title=_non_blank(record.get("title")) or UNTITLED_SIGNAL,
                category=_non_blank(record.get("category")) or fallback_category,
                risk_level=_enum_or(RiskLevel, record.get("riskLevel", record.get("risk_level")), RiskLevel.MEDIUM),
                timestamp=_non_blank(record.get("timestamp")) or now,
            )
        )
    return items


def normalize_live_events(value: Any, id_prefix: str, now: str = "now") -> list[MonitorEvent]:
    """Normalize a live-intel array; every element yields one event."""
    if not isinstance(value, list):
        return []

    events: list[MonitorEvent] = []
    for index, entry in enumerate(value):
        record = entry if isinstance(entry, dict) else {}
        url = record.get("url")
        events.append(
            MonitorEvent(
                id=_non_blank(record.get("id")) or _generated_id(id_prefix, index),
                type=_enum_or(EventType, record.get("type"), EventType.NEWS),
                source_name=_non_blank(record.get("sourceName", record.get("source_name"))) or UNKNOWN_SOURCE_NAME,
                content=to_display_text(record.get("content")),
                timestamp=_non_blank(record.get("timestamp")) or now,
                sentiment=_enum_or(Sentiment, record.get("sentiment"), Sentiment.NEUTRAL),
                threat_level=_enum_or(ThreatLevel, record.get("threatLevel", record.get("threat_level")), ThreatLevel.INFO),
                url=sanitize_url(url) if isinstance(url, str) else None,
            )
        )
    return events


__all__ = [
    "UNTITLED_SOURCE",
    "REFERENCED_SOURCE",
    "UNTITLED_SIGNAL",
    "UNKNOWN_SOURCE_NAME",
    "URL_PATTERN",
    "sanitize_url",
    "normalize_source",
    "dedupe_sources",
    "extract_sources_from_grounding",
    "extract_sources_from_text",
    "normalize_string_list",
    "normalize_entities",
    "normalize_feed_items",
    "normalize_live_events",
]
