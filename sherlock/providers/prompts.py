"""Prompt construction for the three text operations.

Prompts are plain strings assembled from the investigation scope, the
system config (persona, search depth), and per-request details. The
wording is free to change; the inputs each prompt carries are not.
"""

from __future__ import annotations

from datetime import date

from sherlock.data.presets import BUILTIN_SCOPES
from sherlock.models.contracts import (
    DateRangeConfig,
    DateRangeStrategy,
    InvestigationScope,
    SearchDepth,
    SystemConfig,
)
from sherlock.providers.types import DateRangeOverride, LiveIntelConfig, ParentContext

SUGGESTED_SOURCES_LIMIT = 10
ANOMALY_SOURCES_LIMIT = 5
LIVE_HISTORY_LIMIT = 20

LEGACY_PERSONAS: dict[str, str] = {
    "JOURNALIST": (
        "You are an award-winning investigative journalist. Focus on public interest, uncovering "
        "corruption, and verifying sources with extreme rigor. Your tone is objective but compelling."
    ),
    "INTELLIGENCE_OFFICER": (
        "You are a senior intelligence analyst. Focus on threat assessment, geopolitical implications, "
        "and connecting disparate data points. Your tone is clinical, brief, and highly classified."
    ),
    "CONSPIRACY_ANALYST": (
        "You are a fringe researcher looking for hidden patterns. You are skeptical of official "
        "narratives and look for deep state connections, though you must still rely on finding "
        "evidence. Your tone is urgent."
    ),
    "FORENSIC_ACCOUNTANT": (
        "You are a world-class forensic accountant and OSINT investigator. Focus on financial "
        "discrepancies, money trails, and regulatory violations. Your tone is professional and "
        "evidence-based."
    ),
}

GENERIC_PERSONA = (
    "You are a versatile OSINT investigator. Adapt your approach to the subject matter. "
    "Your tone is professional and thorough."
)

# Appended to investigation prompts for models without schema-constrained output.
REPORT_JSON_INSTRUCTION = (
    "Return ONLY valid JSON with this shape: "
    '{"summary": string, "entities": [{"name": string, "type": "PERSON" | "ORGANIZATION" | "UNKNOWN", '
    '"role": string, "sentiment": "POSITIVE" | "NEGATIVE" | "NEUTRAL"}], "agendas": string[], '
    '"leads": string[], "sources": [{"title": string, "url": string}]}. '
    "Do not wrap the JSON in commentary."
)

REPORT_DETAIL_INSTRUCTION = (
    "Extract at least 4 actionable leads and cite 3-8 unique sources with working URLs."
)


def get_persona_instruction(persona_id: str, scope: InvestigationScope | None = None) -> str:
    """Resolve a persona id to its instruction text.

    Lookup order: the scope's own personas, the legacy built-in ids, any
    built-in scope persona, then a generic investigator voice.
    """
    if scope is not None:
        for persona in scope.personas:
            if persona.id == persona_id:
                return persona.instruction

    if persona_id in LEGACY_PERSONAS:
        return LEGACY_PERSONAS[persona_id]

    for builtin_scope in BUILTIN_SCOPES:
        for persona in builtin_scope.personas:
            if persona.id == persona_id:
                return persona.instruction

    return GENERIC_PERSONA


def resolve_date_range(
    date_config: DateRangeConfig | None = None,
    override: DateRangeOverride | None = None,
    today: date | None = None,
) -> str:
    """Temporal scope sentence; an explicit override beats the scope default."""
    if override is not None and override.is_set:
        start = override.start or "historical records"
        end = override.end or "present"
        return f"Focus on the time period from {start} to {end}."

    if date_config is None or date_config.strategy == DateRangeStrategy.NONE:
        return ""

    if date_config.strategy == DateRangeStrategy.RELATIVE and date_config.relative_years:
        start_year = (today or date.today()).year - date_config.relative_years
        return f"Focus on the time period from {start_year} to present."

    if date_config.strategy == DateRangeStrategy.ABSOLUTE and (
        date_config.absolute_start or date_config.absolute_end
    ):
        start = date_config.absolute_start or "historical records"
        end = date_config.absolute_end or "present"
        return f"Focus on the time period from {start} to {end}."

    return ""


def _source_labels(scope: InvestigationScope, limit: int) -> list[str]:
    labels = [source.label for category in scope.suggested_sources for source in category.sources]
    return labels[:limit]


def format_suggested_sources(scope: InvestigationScope, limit: int = SUGGESTED_SOURCES_LIMIT) -> str:
    labels = _source_labels(scope, limit)
    if not labels:
        return ""
    return f"SUGGESTED SOURCES: {', '.join(labels)}"


def _lines(*parts: str | None) -> str:
    """Join prompt lines, skipping omitted (None) sections."""
    return "\n".join(part for part in parts if part is not None)


# =============================================================================
# Builders
# =============================================================================


def build_investigation_prompt(
    topic: str,
    scope: InvestigationScope,
    config: SystemConfig,
    parent_context: ParentContext | None = None,
    date_override: DateRangeOverride | None = None,
) -> str:
    date_instruction = resolve_date_range(scope.default_date_range, date_override)

    prompt = _lines(
        get_persona_instruction(config.persona, scope),
        "",
        f"INVESTIGATION CONTEXT: {scope.domain_context}",
        f"OBJECTIVE: {scope.investigation_objective}",
        f'TARGET: "{topic}"',
        f"TEMPORAL SCOPE: {date_instruction}" if date_instruction else None,
        format_suggested_sources(scope) or None,
    )

    if config.search_depth == SearchDepth.DEEP:
        prompt += (
            "\nSTRICT REQUIREMENT: Prioritize obscure filings, local reports, and deep-web sources. "
            "Cross-reference multiple sources."
        )

    if parent_context is not None:
        prompt += (
            f'\nCONTEXT: This is a deep dive from parent investigation "{parent_context.topic}". '
            f'Parent summary: "{parent_context.summary}". Build upon these findings.'
        )

    prompt += "\n\nAnalyze thoroughly and extract entities, develop hypotheses, and identify actionable leads."
    return prompt


def build_anomaly_prompt(
    region: str,
    category: str,
    limit: int,
    priority_sources: str,
    scope: InvestigationScope,
    date_range: DateRangeOverride | None = None,
) -> str:
    location = region if region.strip() else "globally"
    objective = scope.investigation_objective
    topic_scope = f"{category}-related issues within the scope of: {objective}" if category != "All" else objective
    date_instruction = resolve_date_range(scope.default_date_range, date_range)

    priority_instruction: str | None = None
    if priority_sources.strip():
        priority_instruction = (
            "PRIORITY: Actively search for and prioritize information from these specific "
            f"sources/handles: {priority_sources}."
        )
    else:
        labels = _source_labels(scope, ANOMALY_SOURCES_LIMIT)
        if labels:
            priority_instruction = f"SUGGESTED SOURCES: Consider {', '.join(labels)}."

    return _lines(
        f"CONTEXT: {scope.domain_context}",
        "",
        "Analyze real-time news, official reports, and social media discussions to identify "
        f"{limit} potential issues related to: {topic_scope} in {location}.",
        f"TEMPORAL SCOPE: {date_instruction}" if date_instruction else None,
        priority_instruction,
        "Focus on high-value findings, discrepancies, and notable developments.",
        "CRITICAL: Return ONLY a valid JSON array.",
        'Each item MUST include: id, title, category, riskLevel ("LOW" | "MEDIUM" | "HIGH").',
    )


def build_live_intel_prompt(
    topic: str,
    monitor_config: LiveIntelConfig,
    scope: InvestigationScope,
    existing_content: list[str],
) -> str:
    count_instruction = (
        f"Retrieve exactly: {monitor_config.news_count} items of type 'NEWS', "
        f"{monitor_config.social_count} items of type 'SOCIAL', "
        f"{monitor_config.official_count} items of type 'OFFICIAL'"
    )
    if monitor_config.priority_sources.strip():
        priority_instruction = f"PRIORITY: Prioritize {monitor_config.priority_sources}."
    else:
        priority_instruction = format_suggested_sources(scope) or None

    date_instruction = resolve_date_range(scope.default_date_range, monitor_config.date_range)
    recent_history = "; ".join(existing_content[:LIVE_HISTORY_LIMIT])

    return _lines(
        f"CONTEXT: {scope.domain_context}",
        "",
        f'Search intelligence for: "{topic}".',
        count_instruction,
        priority_instruction,
        f"TEMPORAL SCOPE: {date_instruction}" if date_instruction else None,
        f'CRITICAL EXCLUSION: Do NOT return items similar to: "{recent_history}".' if recent_history else None,
        "CRITICAL: Respond with ONLY a valid JSON array.",
        'Items must include: id, type ("SOCIAL" | "NEWS" | "OFFICIAL"), sourceName, content, timestamp, '
        'sentiment ("NEGATIVE" | "NEUTRAL" | "POSITIVE"), threatLevel ("INFO" | "CAUTION" | "CRITICAL"), '
        "url (optional).",
    )


__all__ = [
    "LEGACY_PERSONAS",
    "GENERIC_PERSONA",
    "REPORT_JSON_INSTRUCTION",
    "REPORT_DETAIL_INSTRUCTION",
    "get_persona_instruction",
    "resolve_date_range",
    "format_suggested_sources",
    "build_investigation_prompt",
    "build_anomaly_prompt",
    "build_live_intel_prompt",
]
