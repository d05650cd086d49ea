"""Human-readable rendering of parse outcomes for CLI output."""

from __future__ import annotations

import json

from core.enrich.models import EnhancedParseResult
from core.enrich.summary import summarize
from core.parsing.models import ParseResult


def render_parse_outcome(outcome: ParseResult | EnhancedParseResult) -> str:
    """Render a one-screen summary of a parse (and enrichment, when present)."""

    lines: list[str] = []
    if not outcome.success:
        lines.append("result=FAILED")
        lines.extend(f"error: {error}" for error in outcome.errors)
        return "\n".join(lines)

    lines.append(f"result=OK confidence={outcome.confidence}")
    lines.append(f"event: {outcome.event_name}")

    properties = outcome.properties or {}
    matches = outcome.properties_matches if isinstance(outcome, EnhancedParseResult) else {}
    if properties:
        lines.append("properties:")
        for key, value in properties.items():
            marker = _match_marker(matches.get(key)) if matches else ""
            lines.append(f"  {key} = {_to_string(value)}{marker}")
    else:
        lines.append("properties: none")

    if isinstance(outcome, EnhancedParseResult):
        event_match = outcome.event_name_match
        if event_match is not None and event_match.exists:
            lines.append("event_status: existing")
        elif event_match is not None and event_match.similar is not None:
            lines.append(
                f"event_status: new (similar to {event_match.similar}, "
                f"{round((event_match.similarity or 0) * 100)}%)"
            )
        else:
            lines.append("event_status: new")

        summary = summarize(outcome)
        if summary is not None:
            lines.append(
                f"counts: new_properties={summary.new_properties_count} "
                f"new_values={summary.new_values_count} boosted={summary.boosted_matches} "
                f"contextual_values={summary.contextual_values_count}"
            )

    lines.extend(f"warning: {warning}" for warning in outcome.warnings)
    if isinstance(outcome, EnhancedParseResult):
        lines.extend(f"suggestion: {suggestion}" for suggestion in outcome.suggestions)
    return "\n".join(lines)


def _match_marker(match) -> str:
    if match is None:
        return ""
    tags: list[str] = []
    if match.key_exists:
        tags.append("known key")
    elif match.is_new_key:
        tags.append("new key")
    else:
        tags.append("similar key")
    if match.value_exists:
        tags.append("known value")
    elif match.value_similar is not None:
        tags.append(f"value ~ {match.value_similar}")
    elif match.is_new_value:
        tags.append("new value")
    if match.boosted:
        tags.append("learned")
    return f"  [{', '.join(tags)}]"


def _to_string(value: object) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)
