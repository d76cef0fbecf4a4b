"""
Prompt Construction Tests.

Tests that each prompt carries the inputs it is built from:
- Persona resolution (scope, legacy ids, built-in scopes, generic fallback)
- Temporal scope from overrides and scope defaults
- Suggested and priority sources
- Deep-dive parent context and live-intel exclusion history

Usage:
    pytest ci/evaluation/test_prompts.py -v
"""

from __future__ import annotations

from datetime import date

import pytest

from sherlock.data.presets import BUILTIN_SCOPES, DEFAULT_SCOPE_ID, get_all_scopes, get_scope_by_id
from sherlock.models.ai_models import AIProvider
from sherlock.models.contracts import (
    DateRangeConfig,
    DateRangeStrategy,
    InvestigationScope,
    SearchDepth,
    SourceCategory,
    SuggestedSource,
)
from sherlock.providers.prompts import (
    GENERIC_PERSONA,
    LEGACY_PERSONAS,
    build_anomaly_prompt,
    build_investigation_prompt,
    build_live_intel_prompt,
    format_suggested_sources,
    get_persona_instruction,
    resolve_date_range,
)
from sherlock.providers.types import DateRangeOverride, LiveIntelConfig, ParentContext


@pytest.fixture
def sourced_scope(scope_fixture: InvestigationScope) -> InvestigationScope:
    """Fixture scope with a dozen suggested sources over two categories."""
    categories = [
        SourceCategory(
            name=f"Group {g}",
            sources=[SuggestedSource(label=f"Source {g}-{i}", url=f"https://s{g}{i}.example") for i in range(6)],
        )
        for g in range(2)
    ]
    return scope_fixture.model_copy(update={"suggested_sources": categories})


# =============================================================================
# Building Blocks
# =============================================================================


class TestPersonaResolution:
    """Tests for persona instruction lookup order."""

    def test_scope_persona_first(self, scope_fixture: InvestigationScope) -> None:
        """Test that the scope's own persona wins."""
        assert get_persona_instruction("general-investigator", scope_fixture) == "Investigate comprehensively."

    def test_legacy_persona(self) -> None:
        """Test that legacy persona ids resolve without a scope."""
        assert get_persona_instruction("JOURNALIST") == LEGACY_PERSONAS["JOURNALIST"]

    def test_builtin_scope_persona(self) -> None:
        """Test that personas from other built-in scopes are found."""
        persona = BUILTIN_SCOPES[0].personas[0]
        assert get_persona_instruction(persona.id) == persona.instruction

    def test_generic_fallback(self) -> None:
        """Test that unknown personas get the generic voice."""
        assert get_persona_instruction("does-not-exist") == GENERIC_PERSONA


class TestDateRange:
    """Tests for temporal scope resolution."""

    def test_override_beats_scope(self) -> None:
        """Test that an explicit override wins over the scope default."""
        config = DateRangeConfig(strategy=DateRangeStrategy.RELATIVE, relative_years=5)
        text = resolve_date_range(config, DateRangeOverride(start="2020-01-01"))
        assert text == "Focus on the time period from 2020-01-01 to present."

    def test_relative_years(self) -> None:
        """Test relative ranges count back from today."""
        config = DateRangeConfig(strategy=DateRangeStrategy.RELATIVE, relative_years=3)
        assert resolve_date_range(config, today=date(2025, 6, 1)) == "Focus on the time period from 2022 to present."

    def test_absolute_range(self) -> None:
        """Test absolute ranges with an open end."""
        config = DateRangeConfig(strategy=DateRangeStrategy.ABSOLUTE, absolute_start="2019")
        assert resolve_date_range(config) == "Focus on the time period from 2019 to present."

    @pytest.mark.parametrize(
        "config",
        [
            None,
            DateRangeConfig(strategy=DateRangeStrategy.NONE),
            DateRangeConfig(strategy=DateRangeStrategy.ABSOLUTE),
        ],
    )
    def test_no_range(self, config: DateRangeConfig | None) -> None:
        """Test that missing or empty ranges yield no sentence."""
        assert resolve_date_range(config, DateRangeOverride()) == ""

    def test_suggested_sources_capped(self, sourced_scope: InvestigationScope) -> None:
        """Test that suggested sources are flattened and capped at ten."""
        text = format_suggested_sources(sourced_scope)
        assert text.startswith("SUGGESTED SOURCES: Source 0-0, ")
        assert "Source 1-3" in text
        assert "Source 1-4" not in text

    def test_no_suggested_sources(self, scope_fixture: InvestigationScope) -> None:
        """Test that a scope without sources yields an empty string."""
        assert format_suggested_sources(scope_fixture) == ""


# =============================================================================
# Builders
# =============================================================================


class TestInvestigationPrompt:
    """Tests for the investigation prompt."""

    def test_carries_scope_and_topic(self, scope_fixture: InvestigationScope, make_config) -> None:
        """Test that persona, context, objective and target are present."""
        prompt = build_investigation_prompt(
            "Atlas Holdings", scope_fixture, make_config(AIProvider.OPENAI, "gpt-4.1-mini")
        )

        assert prompt.startswith("Investigate comprehensively.\n\nINVESTIGATION CONTEXT: General OSINT")
        assert "OBJECTIVE: Find risks" in prompt
        assert 'TARGET: "Atlas Holdings"' in prompt
        assert "TEMPORAL SCOPE" not in prompt
        assert "STRICT REQUIREMENT" not in prompt
        assert "deep dive" not in prompt

    def test_deep_search_and_parent_context(self, scope_fixture: InvestigationScope, make_config) -> None:
        """Test deep search wording, parent context and date override."""
        config = make_config(AIProvider.GEMINI, "gemini-3-flash-preview").model_copy(
            update={"search_depth": SearchDepth.DEEP}
        )
        prompt = build_investigation_prompt(
            "Jordan Vale",
            scope_fixture,
            config,
            ParentContext(topic="Procurement Case", summary="Prior signals"),
            DateRangeOverride(start="2021", end="2023"),
        )

        assert "STRICT REQUIREMENT: Prioritize obscure filings" in prompt
        assert 'deep dive from parent investigation "Procurement Case"' in prompt
        assert 'Parent summary: "Prior signals"' in prompt
        assert "TEMPORAL SCOPE: Focus on the time period from 2021 to 2023." in prompt


class TestAnomalyPrompt:
    """Tests for the anomaly scan prompt."""

    def test_category_region_and_limit(self, scope_fixture: InvestigationScope) -> None:
        """Test category scoping, location and item count."""
        prompt = build_anomaly_prompt("Ohio", "Finance", 6, "", scope_fixture)

        assert prompt.startswith("CONTEXT: General OSINT\n\n")
        assert "identify 6 potential issues related to: Finance-related issues within the scope of: Find risks in Ohio." in prompt
        assert "CRITICAL: Return ONLY a valid JSON array." in prompt

    def test_all_categories_globally(self, scope_fixture: InvestigationScope) -> None:
        """Test the 'All' category and blank region defaults."""
        prompt = build_anomaly_prompt("  ", "All", 8, "", scope_fixture)
        assert "related to: Find risks in globally." in prompt

    def test_priority_sources_beat_suggestions(self, sourced_scope: InvestigationScope) -> None:
        """Test that explicit priority sources replace scope suggestions."""
        prompt = build_anomaly_prompt("", "All", 8, "@watchdog", sourced_scope)
        assert "sources/handles: @watchdog." in prompt
        assert "SUGGESTED SOURCES" not in prompt

    def test_suggestions_capped_at_five(self, sourced_scope: InvestigationScope) -> None:
        """Test that scope suggestions are limited to five labels."""
        prompt = build_anomaly_prompt("", "All", 8, "", sourced_scope)
        assert "SUGGESTED SOURCES: Consider Source 0-0, Source 0-1, Source 0-2, Source 0-3, Source 0-4." in prompt


class TestLiveIntelPrompt:
    """Tests for the live-intel prompt."""

    def test_counts_and_exclusions(self, scope_fixture: InvestigationScope) -> None:
        """Test per-type counts and the recent-history exclusion."""
        history = [f"item {i}" for i in range(25)]
        prompt = build_live_intel_prompt(
            "Atlas Holdings",
            LiveIntelConfig(social_count=1, news_count=3, official_count=0, priority_sources="@ledger"),
            scope_fixture,
            history,
        )

        assert 'Search intelligence for: "Atlas Holdings".' in prompt
        assert "Retrieve exactly: 3 items of type 'NEWS', 1 items of type 'SOCIAL', 0 items of type 'OFFICIAL'" in prompt
        assert "PRIORITY: Prioritize @ledger." in prompt
        assert "item 19" in prompt
        assert "item 20" not in prompt

    def test_no_history_no_exclusion(self, scope_fixture: InvestigationScope) -> None:
        """Test that an empty history omits the exclusion line."""
        prompt = build_live_intel_prompt("x", LiveIntelConfig(), scope_fixture, [])
        assert "CRITICAL EXCLUSION" not in prompt


# =============================================================================
# Presets
# =============================================================================


class TestPresets:
    """Tests for the built-in scope catalog."""

    def test_default_scope_is_open_investigation(self) -> None:
        """Test the default scope id and lookup."""
        scope = get_scope_by_id(DEFAULT_SCOPE_ID)
        assert scope is not None
        assert scope.id == "open-investigation"
        assert scope.is_built_in

    def test_builtin_scopes_are_complete(self) -> None:
        """Test that every built-in scope carries personas and categories."""
        assert len(BUILTIN_SCOPES) == 6
        assert len({scope.id for scope in BUILTIN_SCOPES}) == 6
        for scope in BUILTIN_SCOPES:
            assert scope.personas
            assert scope.categories
            assert scope.default_persona in {persona.id for persona in scope.personas}

    def test_custom_scopes_appended(self, scope_fixture: InvestigationScope) -> None:
        """Test that custom scopes follow the built-ins."""
        scopes = get_all_scopes([scope_fixture])
        assert scopes[-1] is scope_fixture
        assert len(scopes) == 7
