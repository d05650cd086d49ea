"""Orchestration pipeline: format detection -> extraction -> optional enrichment."""

from __future__ import annotations

import logging

from core.config.models import MatchingSettings
from core.enrich.context_enricher import enrich
from core.enrich.models import EnhancedParseResult, ImportContext
from core.matching.similarity import BoostSource
from core.parsing.models import Malformed, Matched, ParseResult
from core.parsing.registry import FORMAT_LABELS, PARSERS
from core.utils.log_events import log_event

logger = logging.getLogger("evimport.pipeline")

EMPTY_INPUT_ERROR = "Empty input"
UNRECOGNIZED_FORMAT_ERROR = "Unrecognized format."
INTERNAL_ERROR = "Internal error while parsing; the input could not be processed."


def supported_formats_message() -> str:
    return f"Supported formats: {', '.join(FORMAT_LABELS.values())}"


def parse_only(raw_text: str) -> ParseResult:
    """Detect the format of ``raw_text`` and extract the event, without enrichment.

    Rules:
    - blank input fails immediately without running any parser
    - parsers run in priority order; the first match is returned unmodified
    - when nothing matches, the generic format error is followed by the
      diagnostics of every parser that recognized but rejected the input
    """

    trimmed = raw_text.strip()
    if not trimmed:
        return ParseResult.failure([EMPTY_INPUT_ERROR])

    diagnostics: list[str] = []
    for name, parser in PARSERS.items():
        outcome = parser(trimmed)
        if isinstance(outcome, Matched):
            log_event(
                logger,
                logging.DEBUG,
                "matched",
                parser=name,
                confidence=outcome.result.confidence,
                property_count=len(outcome.result.properties or {}),
            )
            return outcome.result
        if isinstance(outcome, Malformed):
            diagnostics.extend(outcome.errors)

    log_event(logger, logging.DEBUG, "unrecognized", diagnostics=len(diagnostics))
    return ParseResult.failure(
        [UNRECOGNIZED_FORMAT_ERROR, supported_formats_message(), *diagnostics]
    )


def parse_event_data(
    raw_text: str,
    context: ImportContext | None = None,
    scope_id: str | None = None,
    *,
    boost_source: BoostSource | None = None,
    settings: MatchingSettings | None = None,
) -> ParseResult | EnhancedParseResult:
    """Parse pasted event data and enrich it when a corpus and scope are given.

    Unexpected internal faults never escape: they are logged and reported as a
    total parse failure.
    """

    try:
        result = parse_only(raw_text)
        if context is None or not scope_id:
            return result
        return enrich(
            result,
            context,
            scope_id,
            boost_source=boost_source,
            settings=settings,
        )
    except Exception:  # noqa: BLE001
        logger.exception("event data parsing failed")
        return ParseResult.failure([INTERNAL_ERROR])
