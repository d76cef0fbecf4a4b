"""Pieces shared by every provider adapter.

- report assembly from parsed model JSON plus extra citations
- synthetic feed/live items returned in degraded mode
- the degraded-mode wrapper itself
"""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime
from typing import Any, Awaitable, Callable, Sequence, TypeVar

from sherlock.models.ai_models import AIProvider
from sherlock.models.contracts import (
    EventType,
    FeedItem,
    InvestigationReport,
    InvestigationScope,
    MonitorEvent,
    ReportConfig,
    RiskLevel,
    Sentiment,
    Source,
    SystemConfig,
    ThreatLevel,
)
from sherlock.observability.metrics import track_provider_fallback
from sherlock.providers.errors import ProviderError, ProviderErrorCode
from sherlock.providers.json_parsing import to_display_text
from sherlock.providers.normalizers import (
    dedupe_sources,
    extract_sources_from_text,
    normalize_entities,
    normalize_string_list,
)
from sherlock.providers.types import ParentContext, ProviderOperation

logger = logging.getLogger(__name__)

T = TypeVar("T")

SUMMARY_PLACEHOLDER = "Analysis pending..."
FEED_ID_PREFIX = "feed"
LIVE_ID_PREFIX = "evt"
FALLBACK_FEED_ID_PREFIX = "fallback"
FALLBACK_LIVE_ID_PREFIX = "sim"
DEFAULT_FEED_CATEGORY = "General"

# Errors that always reach the caller, even from degradable operations.
PROPAGATED_ERROR_CODES = frozenset(
    {ProviderErrorCode.MISSING_API_KEY, ProviderErrorCode.UNSUPPORTED_OPERATION}
)

MAX_TOKENS: dict[ProviderOperation, int] = {
    ProviderOperation.INVESTIGATE: 3200,
    ProviderOperation.SCAN_ANOMALIES: 1800,
    ProviderOperation.LIVE_INTEL: 2200,
}


def current_date_label() -> str:
    return datetime.now().strftime("%m/%d/%Y")


def current_time_label() -> str:
    return datetime.now().strftime("%H:%M")


def _category_at(scope: InvestigationScope, index: int, default: str) -> str:
    if len(scope.categories) > index and scope.categories[index]:
        return scope.categories[index]
    return default


def primary_category(scope: InvestigationScope) -> str:
    return _category_at(scope, 0, DEFAULT_FEED_CATEGORY)


# =============================================================================
# Report assembly
# =============================================================================


def build_investigation_report(
    *,
    topic: str,
    config: SystemConfig,
    parsed: Any,
    raw_text: str,
    parent_context: ParentContext | None = None,
    leading_sources: Sequence[Source] = (),
) -> InvestigationReport:
    """
    Assemble a report from the parsed model payload.

    Sources are merged in precedence order: ``leading_sources`` (transport
    citations such as search grounding), then sources the model declared,
    then URLs found in the raw text, summary and leads.

    Args:
        topic: Investigation target.
        config: Effective system config (snapshotted into the report).
        parsed: Output of the JSON extractor; non-objects count as empty.
        raw_text: The model's raw text, scanned for fallback URLs.
        parent_context: Parent investigation for deep dives.
        leading_sources: Citations that take precedence over model-declared ones.

    Returns:
        A fully populated report.
    """
    data: dict[str, Any] = parsed if isinstance(parsed, dict) else {}
    summary = to_display_text(data.get("summary")).strip()
    leads = normalize_string_list(data.get("leads"))

    declared = data.get("sources")
    model_sources = dedupe_sources(declared) if isinstance(declared, list) else []
    text_sources = extract_sources_from_text("\n".join([raw_text, summary, *leads]))

    return InvestigationReport(
        topic=topic,
        parent_topic=parent_context.topic if parent_context else None,
        date_str=current_date_label(),
        summary=summary or SUMMARY_PLACEHOLDER,
        entities=normalize_entities(data.get("entities")),
        agendas=normalize_string_list(data.get("agendas")),
        leads=leads,
        sources=dedupe_sources([*leading_sources, *model_sources, *text_sources]),
        raw_text=json.dumps(data, indent=2, ensure_ascii=False),
        config=ReportConfig(
            provider=config.provider,
            model_id=config.model_id,
            persona=config.persona,
            search_depth=config.search_depth,
            thinking_budget=config.thinking_budget,
        ),
    )


# =============================================================================
# Degraded mode
# =============================================================================


def fallback_feed_items(scope: InvestigationScope, limit: int) -> list[FeedItem]:
    """Synthetic anomaly feed shown when the upstream call fails."""
    headline_category = _category_at(scope, 1, DEFAULT_FEED_CATEGORY)
    items = [
        FeedItem(
            id=f"{FALLBACK_FEED_ID_PREFIX}-1",
            title=f"Notable development in {headline_category}",
            category=headline_category,
            timestamp="10:42 AM",
            risk_level=RiskLevel.HIGH,
        ),
        FeedItem(
            id=f"{FALLBACK_FEED_ID_PREFIX}-2",
            title="Emerging pattern detected",
            category=_category_at(scope, 2, "Analysis"),
            timestamp="09:15 AM",
            risk_level=RiskLevel.MEDIUM,
        ),
        FeedItem(
            id=f"{FALLBACK_FEED_ID_PREFIX}-3",
            title="New information surfaced",
            category=_category_at(scope, 0, DEFAULT_FEED_CATEGORY),
            timestamp="08:30 AM",
            risk_level=RiskLevel.HIGH,
        ),
    ]
    return items[: max(0, limit)]


def fallback_live_events(topic: str) -> list[MonitorEvent]:
    """Synthetic live-intel events shown when the upstream call fails."""
    now = int(time.time() * 1000)
    return [
        MonitorEvent(
            id=f"{FALLBACK_LIVE_ID_PREFIX}-{now}-1",
            type=EventType.NEWS,
            source_name="News Source",
            content=f"New developments regarding {topic}.",
            timestamp="5m ago",
            sentiment=Sentiment.NEGATIVE,
            threat_level=ThreatLevel.CAUTION,
        ),
        MonitorEvent(
            id=f"{FALLBACK_LIVE_ID_PREFIX}-{now}-2",
            type=EventType.SOCIAL,
            source_name="Social Media",
            content=f"Discussion emerging about {topic}.",
            timestamp="12m ago",
            sentiment=Sentiment.NEGATIVE,
            threat_level=ThreatLevel.CRITICAL,
        ),
        MonitorEvent(
            id=f"{FALLBACK_LIVE_ID_PREFIX}-{now}-3",
            type=EventType.OFFICIAL,
            source_name="Official Source",
            content="Related announcement published.",
            timestamp="1h ago",
            sentiment=Sentiment.NEUTRAL,
            threat_level=ThreatLevel.INFO,
        ),
    ]


async def with_degraded_fallback(
    call: Callable[[], Awaitable[T]],
    fallback: Callable[[], T],
    *,
    provider: AIProvider,
    operation: ProviderOperation,
) -> T:
    """Await ``call``; on a recoverable ``ProviderError`` return ``fallback()`` instead."""
    try:
        return await call()
    except ProviderError as e:
        if e.code in PROPAGATED_ERROR_CODES:
            raise
        logger.warning(
            f"{provider.value} {operation.value} failed ({e.code.value}: {e.message}); "
            "serving synthetic fallback data"
        )
        track_provider_fallback(provider.value, operation.value)
        return fallback()


__all__ = [
    "SUMMARY_PLACEHOLDER",
    "FEED_ID_PREFIX",
    "LIVE_ID_PREFIX",
    "FALLBACK_FEED_ID_PREFIX",
    "FALLBACK_LIVE_ID_PREFIX",
    "DEFAULT_FEED_CATEGORY",
    "PROPAGATED_ERROR_CODES",
    "MAX_TOKENS",
    "current_date_label",
    "current_time_label",
    "primary_category",
    "build_investigation_report",
    "fallback_feed_items",
    "fallback_live_events",
    "with_degraded_fallback",
]
