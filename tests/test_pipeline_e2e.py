from __future__ import annotations

import logging

import pytest

from core.enrich.models import EnhancedParseResult, ImportContext
from core.learning.backends import InMemoryBackend
from core.learning.store import LearningStore
from core.orchestrator.pipeline import (
    EMPTY_INPUT_ERROR,
    INTERNAL_ERROR,
    UNRECOGNIZED_FORMAT_ERROR,
    parse_event_data,
    parse_only,
    supported_formats_message,
)
from core.parsing.models import ParseResult


class _ExplodingBoost:
    def get_boost_score(self, user_input, candidate, scope_id, match_type) -> float:
        raise RuntimeError("boost backend exploded")


def _context() -> ImportContext:
    return ImportContext.model_validate(
        {
            "eventNames": ["purchase", "add_to_cart"],
            "properties": [
                {"id": "p1", "name": "currency"},
                {"id": "p2", "name": "page_name"},
            ],
            "suggestedValues": [
                {"id": "v1", "value": "EUR"},
                {"id": "v2", "value": "$page-name", "isContextual": True},
            ],
        }
    )


@pytest.mark.parametrize("text", ["", "   ", "\n\t\n"])
def test_blank_input_fails_without_parsing(text: str) -> None:
    result = parse_only(text)

    assert result.success is False
    assert result.errors == [EMPTY_INPUT_ERROR]
    assert result.properties is None
    assert result.confidence == "low"


@pytest.mark.parametrize(
    ("text", "confidence"),
    [
        ('{"event": "purchase", "currency": "EUR"}', "high"),
        ("event\tpurchase\ncurrency\tEUR", "high"),
        ("event: purchase\ncurrency: EUR", "medium"),
        ("| event | purchase |\n| currency | EUR |", "medium"),
    ],
)
def test_same_event_in_every_supported_encoding(text: str, confidence: str) -> None:
    result = parse_only(text)

    assert result.success is True
    assert result.event_name == "purchase"
    assert result.properties == {"currency": "EUR"}
    assert result.confidence == confidence
    assert result.errors == []


def test_surrounding_whitespace_is_trimmed_before_parsing() -> None:
    result = parse_only('\n   {"event": "purchase"}   \n')

    assert result.success is True
    assert result.properties == {}


def test_unrecognized_input_lists_formats_and_diagnostics() -> None:
    result = parse_only('{"currency": "EUR"}')

    assert result.success is False
    assert result.errors[0] == UNRECOGNIZED_FORMAT_ERROR
    assert result.errors[1] == supported_formats_message()
    assert "JSON" in result.errors[1]
    assert "Jira (markdown table)" in result.errors[1]
    assert any("event, name, event_name, eventName" in error for error in result.errors[2:])
    assert 'Event name not found (add a line "event: event_name")' in result.errors


def test_parsing_is_deterministic() -> None:
    text = "event: purchase\namount: 10"

    assert parse_only(text) == parse_only(text)


def test_key_value_abort_falls_through_to_jira() -> None:
    result = parse_only("| event | purchase |\n| currency | EUR |\n|orphan")

    assert result.success is True
    assert result.confidence == "medium"
    assert result.properties == {"currency": "EUR"}


def test_without_context_or_scope_result_is_not_enriched() -> None:
    text = "event: purchase"

    assert type(parse_event_data(text)) is ParseResult
    assert type(parse_event_data(text, _context(), None)) is ParseResult
    assert type(parse_event_data(text, None, "prod1")) is ParseResult


def test_enrichment_suggests_similar_event() -> None:
    result = parse_event_data("event: purchace\ncurrency: EUR", _context(), "prod1")

    assert isinstance(result, EnhancedParseResult)
    assert result.kind == "enhanced"
    assert result.success is True
    assert result.event_name_match is not None
    assert result.event_name_match.exists is False
    assert result.event_name_match.similar == "purchase"
    assert result.event_name_match.similarity == pytest.approx(0.875)
    assert result.suggestions == ['Similar event: "purchase" (88% similar)']
    assert result.properties_matches["currency"].key_exists is True
    assert result.properties_matches["currency"].value_exists is True


def test_learned_match_boosts_event_suggestion() -> None:
    store = LearningStore(InMemoryBackend())
    store.record_accepted_match("purchace", "purchase", "prod1", "event")

    result = parse_event_data(
        "event: purchace\ncurrency: EUR", _context(), "prod1", boost_source=store
    )

    assert isinstance(result, EnhancedParseResult)
    assert result.event_name_match is not None
    assert result.event_name_match.similarity == pytest.approx(1.0)
    assert result.suggestions == ['Similar event: "purchase" (100% similar) [learned]']


def test_learned_match_is_scoped() -> None:
    store = LearningStore(InMemoryBackend())
    store.record_accepted_match("purchace", "purchase", "other-product", "event")

    result = parse_event_data("event: purchace", _context(), "prod1", boost_source=store)

    assert isinstance(result, EnhancedParseResult)
    assert result.suggestions == ['Similar event: "purchase" (88% similar)']


def test_failed_parse_with_context_passes_through_as_enhanced() -> None:
    result = parse_event_data("", _context(), "prod1")

    assert isinstance(result, EnhancedParseResult)
    assert result.success is False
    assert result.errors == [EMPTY_INPUT_ERROR]
    assert result.event_name_match is None
    assert result.properties_matches == {}
    assert result.suggestions == []


def test_internal_fault_becomes_failure(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.ERROR, logger="evimport.pipeline")

    result = parse_event_data(
        "event: purchace", _context(), "prod1", boost_source=_ExplodingBoost()
    )

    assert result.success is False
    assert result.errors == [INTERNAL_ERROR]
    assert any(record.message == "event data parsing failed" for record in caplog.records)
