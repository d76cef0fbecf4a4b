"""
Normalized result contracts for the OSINT provider pipeline.

Every value that leaves an adapter is one of these models. They are
immutable and fully populated: list fields are always lists, optional
fields are explicitly ``None``, and required display strings are never
empty. Serialization uses camelCase aliases so persisted cases keep the
same shape as the browser client.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from sherlock.models.ai_models import AIProvider


# =============================================================================
# Enumerations
# =============================================================================


class EntityType(str, Enum):
    PERSON = "PERSON"
    ORGANIZATION = "ORGANIZATION"
    UNKNOWN = "UNKNOWN"


class Sentiment(str, Enum):
    POSITIVE = "POSITIVE"
    NEGATIVE = "NEGATIVE"
    NEUTRAL = "NEUTRAL"


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class EventType(str, Enum):
    SOCIAL = "SOCIAL"
    NEWS = "NEWS"
    OFFICIAL = "OFFICIAL"


class ThreatLevel(str, Enum):
    INFO = "INFO"
    CAUTION = "CAUTION"
    CRITICAL = "CRITICAL"


class SearchDepth(str, Enum):
    STANDARD = "STANDARD"
    DEEP = "DEEP"


# =============================================================================
# Base
# =============================================================================


class ContractModel(BaseModel):
    """Frozen base for all pipeline contracts."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_dict(self) -> dict:
        """Serialize with camelCase keys and plain enum values."""
        return self.model_dump(by_alias=True, mode="json")


# =============================================================================
# Report Contracts
# =============================================================================


class Source(ContractModel):
    """A citation. ``url`` is canonical (absolute, fragment stripped)."""

    title: str = Field(default="Untitled Source", min_length=1)
    url: str = Field(..., min_length=1)


class Entity(ContractModel):
    name: str = Field(..., min_length=1)
    type: EntityType = EntityType.UNKNOWN
    role: str | None = None
    sentiment: Sentiment | None = None


class ReportConfig(ContractModel):
    """Snapshot of the settings an investigation ran with."""

    provider: AIProvider
    model_id: str
    persona: str
    search_depth: SearchDepth = SearchDepth.STANDARD
    thinking_budget: int = 0


class InvestigationReport(ContractModel):
    topic: str
    parent_topic: str | None = None
    date_str: str
    summary: str = Field(default="Analysis pending...", min_length=1)
    entities: list[Entity] = Field(default_factory=list)
    agendas: list[str] = Field(default_factory=list)
    leads: list[str] = Field(default_factory=list)
    sources: list[Source] = Field(default_factory=list)
    raw_text: str = ""
    config: ReportConfig


class FeedItem(ContractModel):
    id: str = Field(..., min_length=1)
    title: str = Field(default="Untitled signal", min_length=1)
    category: str
    risk_level: RiskLevel = RiskLevel.MEDIUM
    timestamp: str


class MonitorEvent(ContractModel):
    id: str = Field(..., min_length=1)
    type: EventType = EventType.NEWS
    source_name: str = Field(default="Unknown Source", min_length=1)
    content: str = ""
    timestamp: str
    sentiment: Sentiment = Sentiment.NEUTRAL
    threat_level: ThreatLevel = ThreatLevel.INFO
    url: str | None = None


# =============================================================================
# Scope Contracts
# =============================================================================


class DateRangeStrategy(str, Enum):
    RELATIVE = "RELATIVE"
    ABSOLUTE = "ABSOLUTE"
    NONE = "NONE"


class DateRangeConfig(ContractModel):
    strategy: DateRangeStrategy = DateRangeStrategy.NONE
    relative_years: int | None = None
    absolute_start: str | None = None
    absolute_end: str | None = None


class SuggestedSource(ContractModel):
    label: str
    url: str


class SourceCategory(ContractModel):
    name: str
    sources: list[SuggestedSource] = Field(default_factory=list)


class PersonaDefinition(ContractModel):
    id: str
    label: str
    instruction: str


class InvestigationScope(ContractModel):
    """A domain preset: what to look for, where, and in whose voice."""

    id: str
    name: str
    description: str = ""
    domain_context: str
    investigation_objective: str
    default_date_range: DateRangeConfig | None = None
    suggested_sources: list[SourceCategory] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    personas: list[PersonaDefinition] = Field(default_factory=list)
    default_persona: str = "general-investigator"
    icon: str = ""
    is_built_in: bool = False

    @field_validator("categories")
    @classmethod
    def strip_blank_categories(cls, v: list[str]) -> list[str]:
        return [c for c in v if c and c.strip()]


# =============================================================================
# Persisted System Configuration
# =============================================================================


class SystemConfig(ContractModel):
    """User-level AI settings persisted in the local store."""

    provider: AIProvider
    model_id: str
    thinking_budget: int = 0
    persona: str = "general-investigator"
    search_depth: SearchDepth = SearchDepth.STANDARD
    auto_normalize_entities: bool = True
    quiet_mode: bool = False


__all__ = [
    "EntityType",
    "Sentiment",
    "RiskLevel",
    "EventType",
    "ThreatLevel",
    "SearchDepth",
    "ContractModel",
    "Source",
    "Entity",
    "ReportConfig",
    "InvestigationReport",
    "FeedItem",
    "MonitorEvent",
    "DateRangeStrategy",
    "DateRangeConfig",
    "SuggestedSource",
    "SourceCategory",
    "PersonaDefinition",
    "InvestigationScope",
    "SystemConfig",
]
