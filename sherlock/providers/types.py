"""Request types and the adapter contract for provider operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from sherlock.models.ai_models import AIProvider
from sherlock.models.contracts import (
    FeedItem,
    InvestigationReport,
    InvestigationScope,
    MonitorEvent,
    SystemConfig,
)


class ProviderOperation(str, Enum):
    """Logical operations a caller can request."""

    INVESTIGATE = "INVESTIGATE"
    SCAN_ANOMALIES = "SCAN_ANOMALIES"
    LIVE_INTEL = "LIVE_INTEL"
    TTS = "TTS"


@dataclass(frozen=True)
class DateRangeOverride:
    start: str | None = None
    end: str | None = None

    @property
    def is_set(self) -> bool:
        return bool(self.start or self.end)


@dataclass(frozen=True)
class ParentContext:
    topic: str
    summary: str


# =============================================================================
# Adapter Requests
# =============================================================================


@dataclass
class InvestigationRequest:
    topic: str
    config: SystemConfig
    scope: InvestigationScope
    parent_context: ParentContext | None = None
    date_override: DateRangeOverride | None = None


@dataclass
class ScanAnomaliesOptions:
    limit: int = 8
    priority_sources: str = ""


@dataclass
class ScanAnomaliesRequest:
    region: str
    category: str
    config: SystemConfig
    scope: InvestigationScope
    date_range: DateRangeOverride | None = None
    options: ScanAnomaliesOptions | None = None


@dataclass
class LiveIntelConfig:
    social_count: int = 2
    news_count: int = 2
    official_count: int = 2
    priority_sources: str = ""
    date_range: DateRangeOverride | None = None


@dataclass
class LiveIntelRequest:
    topic: str
    config: SystemConfig
    scope: InvestigationScope
    monitor_config: LiveIntelConfig
    existing_content: list[str] = field(default_factory=list)


@dataclass
class TtsRequest:
    text: str
    config: SystemConfig


# =============================================================================
# Router Requests (config and scope resolved by the router)
# =============================================================================


@dataclass
class RouterInvestigationRequest:
    topic: str
    parent_context: ParentContext | None = None
    config_override: dict[str, Any] | None = None
    scope: InvestigationScope | None = None
    date_override: DateRangeOverride | None = None


@dataclass
class RouterScanRequest:
    region: str | None = None
    category: str | None = None
    date_range: DateRangeOverride | None = None
    options: ScanAnomaliesOptions | None = None
    scope: InvestigationScope | None = None


@dataclass
class RouterLiveIntelRequest:
    topic: str
    monitor_config: LiveIntelConfig | None = None
    existing_content: list[str] | None = None
    scope: InvestigationScope | None = None


@dataclass
class RouterTtsRequest:
    text: str


# =============================================================================
# Adapter Contract
# =============================================================================


@runtime_checkable
class ProviderAdapter(Protocol):
    """Uniform async surface every provider implements.

    ``generate_audio_briefing`` is optional; the router checks for it with
    ``getattr`` before dispatching TTS.
    """

    provider: AIProvider

    async def investigate(self, request: InvestigationRequest) -> InvestigationReport: ...

    async def scan_anomalies(self, request: ScanAnomaliesRequest) -> list[FeedItem]: ...

    async def get_live_intel(self, request: LiveIntelRequest) -> list[MonitorEvent]: ...


__all__ = [
    "ProviderOperation",
    "DateRangeOverride",
    "ParentContext",
    "InvestigationRequest",
    "ScanAnomaliesOptions",
    "ScanAnomaliesRequest",
    "LiveIntelConfig",
    "LiveIntelRequest",
    "TtsRequest",
    "RouterInvestigationRequest",
    "RouterScanRequest",
    "RouterLiveIntelRequest",
    "RouterTtsRequest",
    "ProviderAdapter",
]
