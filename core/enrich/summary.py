"""Editor-facing summary of an import: counts of new and learned items."""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from core.enrich.models import EnhancedParseResult
from core.parsing.models import Confidence, ParseResult

# "$" followed by a letter or underscore; "$19" or "Price: $0" are not variables.
_CONTEXTUAL_VALUE_RE = re.compile(r"\$[a-zA-Z_]")


class ImportSummary(BaseModel):
    """Flattened view handed to the event editor."""

    model_config = ConfigDict(extra="forbid")

    event_name: str
    properties: dict[str, Any] = Field(default_factory=dict)
    confidence: Confidence
    warnings: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    new_properties_count: int = 0
    new_values_count: int = 0
    boosted_matches: int = 0
    contextual_values_count: int = 0


def is_contextual_value(value: str) -> bool:
    """Whether ``value`` holds a variable placeholder such as ``$page-name``."""

    return _CONTEXTUAL_VALUE_RE.search(value) is not None


def summarize(outcome: ParseResult | EnhancedParseResult) -> ImportSummary | None:
    """Build the editor summary; ``None`` for failed parses."""

    if not outcome.success or not outcome.event_name:
        return None

    properties = dict(outcome.properties or {})
    contextual = sum(
        1 for value in properties.values() if isinstance(value, str) and is_contextual_value(value)
    )

    if not isinstance(outcome, EnhancedParseResult):
        return ImportSummary(
            event_name=outcome.event_name,
            properties=properties,
            confidence=outcome.confidence,
            warnings=list(outcome.warnings),
            contextual_values_count=contextual,
        )

    matches = outcome.properties_matches.values()
    return ImportSummary(
        event_name=outcome.event_name,
        properties=properties,
        confidence=outcome.confidence,
        warnings=list(outcome.warnings),
        suggestions=list(outcome.suggestions),
        new_properties_count=sum(1 for match in matches if match.is_new_key),
        new_values_count=sum(1 for match in matches if match.is_new_value),
        boosted_matches=sum(1 for match in matches if match.boosted),
        contextual_values_count=contextual,
    )
