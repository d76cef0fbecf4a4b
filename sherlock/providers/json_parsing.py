"""JSON extraction from free-form model output.

Models wrap JSON in prose, markdown fences, or both. ``parse_json_with_fallback``
tries a fixed sequence of candidate substrings and returns the first one
that parses. Every step is linear in the input length, and hostile nesting
ends in ``JsonExtractionError`` rather than ``RecursionError``.
"""

from __future__ import annotations

import json
import re
from typing import Any

BALANCED_SCAN_LIMIT = 20_000
MAX_DISPLAY_DEPTH = 100

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)
_CLOSER_TO_OPENER = {"}": "{", "]": "["}


class JsonExtractionError(ValueError):
    """No candidate substring of a model response parsed as JSON."""

    def __init__(self) -> None:
        super().__init__("PARSE_ERROR: Failed to parse JSON payload from model response")


def to_display_text(value: Any) -> str:
    """Coerce an arbitrary JSON value into display text.

    Strings pass through, scalars are stringified, lists are joined with
    spaces, and objects prefer their ``text`` then ``content`` fields before
    falling back to a JSON dump. Values nested deeper than
    ``MAX_DISPLAY_DEPTH`` render as empty text.
    """
    return _display_text(value, 0)


def _display_text(value: Any, depth: int) -> str:
    if value is None or depth > MAX_DISPLAY_DEPTH:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (list, tuple)):
        parts = (_display_text(v, depth + 1) for v in value)
        return " ".join(part for part in parts if part).strip()
    if isinstance(value, dict):
        text = value.get("text")
        if isinstance(text, str):
            return text
        content = value.get("content")
        if isinstance(content, str):
            return content
        if content:
            nested = _display_text(content, depth + 1)
            if nested:
                return nested
        try:
            return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
        except (TypeError, ValueError, RecursionError):
            return ""
    return ""


def _widest_span(text: str, opener: str, closer: str) -> str | None:
    """First ``opener`` through last ``closer``, as a greedy regex would match."""
    start = text.find(opener)
    end = text.rfind(closer)
    if start < 0 or end < start:
        return None
    return text[start : end + 1]


def _balanced_candidates(text: str) -> list[str]:
    """Top-level balanced ``{...}``/``[...]`` spans in one pass.

    Each bracket type is matched on its own stack. Quotes only open a string
    while some bracket is open, so prose before a span cannot shift its
    string state. Unclosed openers are skipped, which lets complete inner
    spans of a truncated payload surface as candidates.
    """
    source = text[:BALANCED_SCAN_LIMIT]
    open_at: dict[str, list[int]] = {"{": [], "[": []}
    spans: dict[int, int] = {}
    in_string = False
    escaped = False

    for index, ch in enumerate(source):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = bool(open_at["{"] or open_at["["])
        elif ch in open_at:
            open_at[ch].append(index)
        elif ch in _CLOSER_TO_OPENER:
            stack = open_at[_CLOSER_TO_OPENER[ch]]
            if stack:
                spans[stack.pop()] = index

    candidates: list[str] = []
    last_end = -1
    for start in sorted(spans):
        if start > last_end:
            last_end = spans[start]
            candidates.append(source[start : last_end + 1])
    return candidates


def _candidates(raw: str) -> list[str]:
    trimmed = raw.strip()
    ordered: list[str | None] = [trimmed]

    first_fence = _FENCE_RE.search(trimmed)
    if first_fence:
        ordered.append(first_fence.group(1).strip())
    else:
        ordered.append(_widest_span(trimmed, "{", "}"))
        ordered.append(_widest_span(trimmed, "[", "]"))

    ordered.extend(match.group(1).strip() for match in _FENCE_RE.finditer(trimmed))
    ordered.extend(_balanced_candidates(trimmed))

    seen: set[str] = set()
    unique: list[str] = []
    for candidate in ordered:
        if candidate and candidate not in seen:
            seen.add(candidate)
            unique.append(candidate)
    return unique


def parse_json_with_fallback(raw: str) -> Any:
    """
    Parse the first JSON value found in a model response.

    Candidates, in order: the trimmed text; the first fenced block (or, when
    there is none, the widest ``{...}`` then ``[...]`` span); every fenced
    block; balanced spans within the first 20,000 characters.

    Raises:
        JsonExtractionError: No candidate parsed. The raw text is not included.
    """
    for candidate in _candidates(raw or ""):
        try:
            return json.loads(candidate)
        except (ValueError, RecursionError):
            continue

    raise JsonExtractionError()


__all__ = [
    "BALANCED_SCAN_LIMIT",
    "MAX_DISPLAY_DEPTH",
    "JsonExtractionError",
    "to_display_text",
    "parse_json_with_fallback",
]
