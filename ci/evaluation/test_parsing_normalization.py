"""
Model Output Parsing and Normalization Tests.

Tests for the tolerant parsing layer between raw model text and the
pipeline contracts:
- JSON extraction from fenced, wrapped and malformed responses
- Display-text coercion of nested values
- Source URL canonicalization, deduplication and grounding extraction
- Entity, feed item and live event normalization

Usage:
    pytest ci/evaluation/test_parsing_normalization.py -v
"""

from __future__ import annotations

import time
from types import SimpleNamespace

import pytest

from sherlock.models.contracts import (
    Entity,
    EntityType,
    EventType,
    RiskLevel,
    Sentiment,
    Source,
    ThreatLevel,
)
from sherlock.providers.json_parsing import (
    BALANCED_SCAN_LIMIT,
    MAX_DISPLAY_DEPTH,
    JsonExtractionError,
    parse_json_with_fallback,
    to_display_text,
)
from sherlock.providers.normalizers import (
    REFERENCED_SOURCE,
    UNKNOWN_SOURCE_NAME,
    UNTITLED_SIGNAL,
    UNTITLED_SOURCE,
    dedupe_sources,
    extract_sources_from_grounding,
    extract_sources_from_text,
    normalize_entities,
    normalize_feed_items,
    normalize_live_events,
    normalize_string_list,
    sanitize_url,
)


# =============================================================================
# JSON Extraction
# =============================================================================


class TestParseJsonWithFallback:
    """Tests for candidate-based JSON extraction."""

    def test_parses_plain_json(self) -> None:
        """Test that a bare JSON document parses directly."""
        assert parse_json_with_fallback('  {"a": 1}  ') == {"a": 1}

    def test_parses_markdown_wrapped_json(self) -> None:
        """Test that prose around a fenced block is ignored."""
        raw = "\n".join(
            [
                "Model preamble that should be ignored",
                "```json",
                '{"summary":"ready","leads":["A"]}',
                "```",
                "Trailing note",
            ]
        )
        assert parse_json_with_fallback(raw) == {"summary": "ready", "leads": ["A"]}

    def test_recovers_later_valid_candidate(self) -> None:
        """Test that a malformed fenced block falls through to a later array."""
        raw = "\n".join(
            [
                "```json",
                "{invalid}",
                "```",
                "Fallback payload:",
                '[{"id":"evt-1","type":"NEWS"}]',
            ]
        )
        assert parse_json_with_fallback(raw) == [{"id": "evt-1", "type": "NEWS"}]

    def test_extracts_object_from_prose(self) -> None:
        """Test that an object embedded in a sentence is found."""
        raw = 'Here is the result: {"summary": "ok", "leads": []} Let me know.'
        assert parse_json_with_fallback(raw) == {"summary": "ok", "leads": []}

    def test_balanced_scan_handles_braces_inside_strings(self) -> None:
        """Test that braces inside string values do not end a span early."""
        raw = 'noise {"note": "a } inside", "n": 2} trailing } junk'
        assert parse_json_with_fallback(raw) == {"note": "a } inside", "n": 2}

    def test_first_fenced_block_wins(self) -> None:
        """Test that the first parseable fenced block is preferred."""
        raw = '```json\n{"first": true}\n```\n```json\n{"second": true}\n```'
        assert parse_json_with_fallback(raw) == {"first": True}

    @pytest.mark.parametrize("raw", ["no json structure here", "", "```json\n{broken\n```"])
    def test_raises_parse_error(self, raw: str) -> None:
        """Test that unparseable text raises a PARSE_ERROR without echoing input."""
        with pytest.raises(JsonExtractionError, match="PARSE_ERROR") as exc_info:
            parse_json_with_fallback(raw)
        if raw:
            assert raw not in str(exc_info.value)

    def test_recovers_inner_object_of_truncated_payload(self) -> None:
        """Test that a complete inner object survives a cut-off outer payload."""
        raw = '{"items": [{"a": 1}, {"b": 2'
        assert parse_json_with_fallback(raw) == {"a": 1}

    def test_deep_nesting_is_parse_error(self) -> None:
        """Test that decoder recursion limits surface as PARSE_ERROR."""
        raw = "[" * 100_000 + "]" * 100_000
        with pytest.raises(JsonExtractionError, match="PARSE_ERROR"):
            parse_json_with_fallback(raw)

    def test_unclosed_openers_scan_is_linear(self) -> None:
        """Test that a long run of unclosed braces is rejected quickly."""
        raw = "Here is the data: " + "{" * 19_000

        started = time.perf_counter()
        with pytest.raises(JsonExtractionError):
            parse_json_with_fallback(raw)

        assert time.perf_counter() - started < 1.0


class TestBalancedScanLimit:
    """Tests for the bounded balanced-span scan."""

    @staticmethod
    def _prose_with_object(padding: int) -> str:
        # The stray opener keeps the widest-span candidate unparseable.
        return "{ stray note " + "x" * padding + ' then {"found": 1} and more prose'

    def test_object_inside_limit_recovered(self) -> None:
        """Test that a balanced object starting before the limit is found."""
        raw = self._prose_with_object(100)
        assert raw.index('{"found"') < BALANCED_SCAN_LIMIT
        assert parse_json_with_fallback(raw) == {"found": 1}

    def test_object_past_limit_not_recovered(self) -> None:
        """Test that a balanced object starting after the limit is ignored."""
        raw = self._prose_with_object(BALANCED_SCAN_LIMIT)
        assert raw.index('{"found"') > BALANCED_SCAN_LIMIT
        with pytest.raises(JsonExtractionError):
            parse_json_with_fallback(raw)


class TestToDisplayText:
    """Tests for display-text coercion."""

    def test_nested_and_mixed_values(self) -> None:
        """Test that lists, text and content fields flatten in order."""
        value = ["alpha", {"text": "beta"}, {"content": ["gamma"]}]
        assert to_display_text(value) == "alpha beta gamma"

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, ""),
            ("plain", "plain"),
            (42, "42"),
            (True, "true"),
            (False, "false"),
            ({"text": "t", "content": "c"}, "t"),
            ({"content": "c"}, "c"),
        ],
    )
    def test_scalars_and_objects(self, value: object, expected: str) -> None:
        """Test scalar coercion and the text-before-content preference."""
        assert to_display_text(value) == expected

    def test_object_without_text_is_dumped(self) -> None:
        """Test that other objects fall back to compact JSON."""
        assert to_display_text({"k": 1}) == '{"k":1}'

    @staticmethod
    def _nested_list(levels: int) -> object:
        value: object = "x"
        for _ in range(levels):
            value = [value]
        return value

    def test_nesting_within_limit_is_flattened(self) -> None:
        """Test that moderately nested lists still yield their text."""
        assert to_display_text(self._nested_list(MAX_DISPLAY_DEPTH)) == "x"

    def test_deep_nesting_renders_empty(self) -> None:
        """Test that values nested past the depth limit render as empty text."""
        deep = self._nested_list(900)

        assert to_display_text(deep) == ""
        assert normalize_string_list([deep, "kept"]) == ["kept"]

    def test_deep_object_dump_is_empty(self) -> None:
        """Test that an unserializably deep object renders as empty text."""
        value: dict = {}
        for _ in range(100_000):
            value = {"k": value}
        assert to_display_text(value) == ""


# =============================================================================
# Sources
# =============================================================================


class TestSources:
    """Tests for URL sanitization and source merging."""

    def test_sanitize_strips_fragment_and_trailing_punctuation(self) -> None:
        """Test that prose punctuation and fragments are removed."""
        assert sanitize_url("https://example.com/path#frag).") == "https://example.com/path"

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("HTTPS://Example.COM/Path", "https://example.com/Path"),
            ("https://example.com", "https://example.com/"),
            ("http://example.com:80/a", "http://example.com/a"),
            ("https://example.com:8443/a?q=1", "https://example.com:8443/a?q=1"),
        ],
    )
    def test_sanitize_canonicalizes(self, value: str, expected: str) -> None:
        """Test scheme/host lower-casing, default ports and empty paths."""
        assert sanitize_url(value) == expected

    @pytest.mark.parametrize("value", ["not-a-url", "ftp://example.com/file", "", None, 42, "https://"])
    def test_sanitize_rejects_non_web_urls(self, value: object) -> None:
        """Test that relative, non-http and non-string values are rejected."""
        assert sanitize_url(value) is None

    def test_dedupe_keeps_first_title_per_url(self) -> None:
        """Test case-insensitive URL dedupe with first-wins titles."""
        sources = dedupe_sources(
            [
                {"title": "One", "url": "https://Example.com/a"},
                {"title": "Two", "uri": "https://example.com/a"},
                {"title": "Three", "url": "invalid"},
            ]
        )
        assert sources == [Source(title="One", url="https://example.com/a")]

    def test_dedupe_defaults_blank_titles(self) -> None:
        """Test that missing titles become the untitled placeholder."""
        sources = dedupe_sources([{"title": "   ", "url": "https://example.com/b"}])
        assert sources[0].title == UNTITLED_SOURCE

    def test_extracts_urls_from_text(self) -> None:
        """Test that inline URLs become referenced sources."""
        text = "See https://example.com/one, and (https://example.com/two). Again https://example.com/one"
        sources = extract_sources_from_text(text)
        assert [s.url for s in sources] == ["https://example.com/one", "https://example.com/two"]
        assert all(s.title == REFERENCED_SOURCE for s in sources)

    def test_grounding_from_sdk_objects(self) -> None:
        """Test grounding extraction from snake_case response objects."""
        response = SimpleNamespace(
            candidates=[
                SimpleNamespace(
                    grounding_metadata=SimpleNamespace(
                        grounding_chunks=[
                            SimpleNamespace(web=SimpleNamespace(title="Registry", uri="https://example.com/r")),
                            SimpleNamespace(web=None),
                        ]
                    )
                )
            ]
        )
        assert extract_sources_from_grounding(response) == [
            Source(title="Registry", url="https://example.com/r")
        ]

    def test_grounding_from_camel_case_dicts(self) -> None:
        """Test grounding extraction from camelCase plain dicts."""
        response = {
            "candidates": [
                {"groundingMetadata": {"groundingChunks": [{"web": {"title": "G", "uri": "https://example.com/g"}}]}}
            ]
        }
        assert extract_sources_from_grounding(response) == [Source(title="G", url="https://example.com/g")]

    def test_grounding_missing_metadata(self) -> None:
        """Test that responses without grounding yield no sources."""
        assert extract_sources_from_grounding(SimpleNamespace(candidates=None)) == []
        assert extract_sources_from_grounding({}) == []


# =============================================================================
# Report Fields
# =============================================================================


class TestReportFieldNormalization:
    """Tests for string list and entity normalization."""

    def test_string_list_render_safe(self) -> None:
        """Test that mixed list values become non-blank strings."""
        normalized = normalize_string_list(
            ["plain", 42, {"text": "inline"}, {"content": ["nested", True]}, None, "   "]
        )
        assert normalized == ["plain", "42", "inline", "nested true"]

    def test_string_list_non_list(self) -> None:
        """Test that non-list input yields an empty list."""
        assert normalize_string_list("not a list") == []

    def test_entities_with_safe_fallbacks(self) -> None:
        """Test entity coercion, enum fallbacks and blank-name dropping."""
        entities = normalize_entities(
            [
                "Raw Person",
                {"name": "Org Name", "type": "ORGANIZATION", "role": "Vendor", "sentiment": "POSITIVE"},
                {"name": "Untrusted Type", "type": "ALIEN", "sentiment": "MAYBE"},
                {"name": "", "type": "PERSON"},
                "   ",
                7,
            ]
        )
        assert entities == [
            Entity(name="Raw Person", type=EntityType.UNKNOWN),
            Entity(
                name="Org Name",
                type=EntityType.ORGANIZATION,
                role="Vendor",
                sentiment=Sentiment.POSITIVE,
            ),
            Entity(name="Untrusted Type", type=EntityType.UNKNOWN),
        ]

    def test_entity_enums_case_insensitive(self) -> None:
        """Test that lower-case enum values are accepted."""
        [entity] = normalize_entities([{"name": "x", "type": "person", "sentiment": "negative"}])
        assert entity.type == EntityType.PERSON
        assert entity.sentiment == Sentiment.NEGATIVE


# =============================================================================
# Feed and Live Events
# =============================================================================


class TestFeedAndLiveNormalization:
    """Tests for anomaly feed and live event normalization."""

    def test_feed_items_stable_contract(self) -> None:
        """Test field defaults and risk level fallback for feed items."""
        feed = normalize_feed_items(
            [
                {"id": "f1", "title": "Known", "category": "Cyber", "riskLevel": "HIGH", "timestamp": "08:00"},
                {"title": "Missing fields", "riskLevel": "UNKNOWN"},
                "not an object",
            ],
            "General",
            "now",
            "feed",
        )

        assert len(feed) == 3
        assert feed[0].id == "f1"
        assert feed[0].risk_level == RiskLevel.HIGH
        assert feed[1].risk_level == RiskLevel.MEDIUM
        assert feed[1].category == "General"
        assert feed[1].timestamp == "now"
        assert feed[1].id.startswith("feed-") and feed[1].id.endswith("-1")
        assert feed[2].title == UNTITLED_SIGNAL

    def test_feed_accepts_snake_case_risk(self) -> None:
        """Test that risk_level is read when riskLevel is absent."""
        [item] = normalize_feed_items([{"title": "t", "risk_level": "low"}], "General", "now", "feed")
        assert item.risk_level == RiskLevel.LOW

    def test_feed_non_list(self) -> None:
        """Test that a non-list payload yields no items."""
        assert normalize_feed_items({"items": []}, "General", "now", "feed") == []

    def test_live_events_stable_contract(self) -> None:
        """Test enum fallbacks and content coercion for live events."""
        live = normalize_live_events(
            [
                {
                    "id": "e1",
                    "type": "NEWS",
                    "sourceName": "Desk",
                    "content": "Update",
                    "timestamp": "1m",
                    "threatLevel": "CRITICAL",
                    "sentiment": "NEGATIVE",
                    "url": "https://example.com/e1#top",
                },
                {"type": "INVALID", "sentiment": "OTHER", "threatLevel": "NONE", "content": 7, "sourceName": 42},
            ],
            "evt",
        )

        assert len(live) == 2
        assert live[0].type == EventType.NEWS
        assert live[0].threat_level == ThreatLevel.CRITICAL
        assert live[0].url == "https://example.com/e1"
        assert live[1].type == EventType.NEWS
        assert live[1].sentiment == Sentiment.NEUTRAL
        assert live[1].threat_level == ThreatLevel.INFO
        assert live[1].content == "7"
        assert live[1].source_name == UNKNOWN_SOURCE_NAME
        assert live[1].timestamp == "now"
        assert live[1].url is None
        assert live[1].id.startswith("evt-")

    def test_live_invalid_url_dropped(self) -> None:
        """Test that an unusable url is dropped rather than kept raw."""
        [event] = normalize_live_events([{"content": "x", "url": "javascript:alert(1)"}], "evt")
        assert event.url is None
