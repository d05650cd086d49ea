"""Cross-reference a parse result against the known corpus of a scope.

Adds duplicate detection for the event name, existence checks for property
keys and values, similarity suggestions, and new-item detection. Findings are
informational: they land in ``warnings``/``suggestions`` and never change
``success``.
"""

from __future__ import annotations

from typing import Any

from core.config.models import MatchingSettings
from core.enrich.models import (
    EnhancedParseResult,
    EventNameMatch,
    ImportContext,
    PropertyMatch,
)
from core.learning.store import NullBoostSource
from core.matching.similarity import BoostSource, find_best_match_with_learning, has_exact_match
from core.parsing.models import ParseResult

_LEARNED_MARKER = " [learned]"
_BASE_FIELDS = set(ParseResult.model_fields) - {"kind"}


def enrich(
    result: ParseResult,
    context: ImportContext,
    scope_id: str,
    *,
    boost_source: BoostSource | None = None,
    settings: MatchingSettings | None = None,
) -> EnhancedParseResult:
    """Return ``result`` annotated with matches against ``context``."""

    base = result.model_dump(include=_BASE_FIELDS)
    if not result.success or not result.event_name:
        return EnhancedParseResult(**base)

    source = boost_source or NullBoostSource()
    effective = settings or MatchingSettings()
    warnings = list(result.warnings)
    suggestions: list[str] = []

    event_name_match = _check_event_name(
        result.event_name, context, scope_id, source, effective, warnings, suggestions
    )
    properties_matches = _check_properties(
        result.properties or {}, context, scope_id, source, effective, warnings, suggestions
    )

    base.update(warnings=warnings)
    return EnhancedParseResult(
        **base,
        event_name_match=event_name_match,
        properties_matches=properties_matches,
        suggestions=suggestions,
    )


def _check_event_name(
    event_name: str,
    context: ImportContext,
    scope_id: str,
    boost_source: BoostSource,
    settings: MatchingSettings,
    warnings: list[str],
    suggestions: list[str],
) -> EventNameMatch:
    if has_exact_match(event_name, context.event_names):
        warnings.append(f'An event "{event_name}" already exists')
        return EventNameMatch(exists=True)

    similar = find_best_match_with_learning(
        event_name,
        context.event_names,
        scope_id,
        "event",
        settings.event_threshold,
        boost_source,
    )
    if similar is None:
        return EventNameMatch(exists=False)

    suggestions.append(
        f'Similar event: "{similar.value}" ({round(similar.score * 100)}% similar)'
        f"{_LEARNED_MARKER if similar.boosted else ''}"
    )
    return EventNameMatch(exists=False, similar=similar.value, similarity=similar.score)


def _check_properties(
    properties: dict[str, Any],
    context: ImportContext,
    scope_id: str,
    boost_source: BoostSource,
    settings: MatchingSettings,
    warnings: list[str],
    suggestions: list[str],
) -> dict[str, PropertyMatch]:
    property_ids = {item.name: item.id for item in reversed(context.properties)}
    value_ids = {item.value: item.id for item in reversed(context.suggested_values)}
    property_names = [item.name for item in context.properties]
    suggested_values = [item.value for item in context.suggested_values]

    matches: dict[str, PropertyMatch] = {}
    for key, value in properties.items():
        fields: dict[str, Any] = {}

        key_match = find_best_match_with_learning(
            key, property_names, scope_id, "property", settings.property_threshold, boost_source
        )
        if key_match is None:
            fields["is_new_key"] = True
            warnings.append(f'New property: "{key}"')
        elif key_match.score >= 1:
            fields["key_exists"] = True
            fields["key_id"] = property_ids.get(key_match.value)
        else:
            suggestions.append(
                f'For key "{key}", similar property: "{key_match.value}"'
                f"{_LEARNED_MARKER if key_match.boosted else ''}"
            )

        if _is_matchable_value(value):
            value_match = find_best_match_with_learning(
                str(value),
                suggested_values,
                scope_id,
                "value",
                settings.value_threshold,
                boost_source,
            )
            if value_match is None:
                fields["is_new_value"] = True
            elif value_match.score >= 1:
                fields["value_exists"] = True
                fields["value_id"] = value_ids.get(value_match.value)
                fields["boosted"] = value_match.boosted
            else:
                fields["value_similar"] = value_match.value
                fields["value_similarity"] = value_match.score
                fields["boosted"] = value_match.boosted

        matches[key] = PropertyMatch(**fields)

    return matches


def _is_matchable_value(value: object) -> bool:
    # bool is an int subclass but is never value-matched.
    if isinstance(value, bool):
        return False
    return isinstance(value, (str, int, float))
