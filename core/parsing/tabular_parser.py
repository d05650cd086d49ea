"""Tab-separated parser for spreadsheet copy-paste."""

from __future__ import annotations

from typing import Any

from core.parsing.models import NOT_THIS_FORMAT, Malformed, Matched, ParseResult, ParserOutcome
from core.parsing.values import coerce_scalar, is_event_name_key, looks_like_header


def try_parse_tabular(raw_text: str) -> ParserOutcome:
    """Parse ``key<TAB>value`` rows, optionally under a header row.

    Cells after the key are joined with single spaces, so values split over
    several spreadsheet columns are recovered. Rows with fewer than two
    non-empty cells are skipped.
    """

    lines = [line for line in raw_text.splitlines() if line.strip()]
    if not any("\t" in line for line in lines):
        return NOT_THIS_FORMAT

    rows = [_split_cells(line) for line in lines]
    if rows and looks_like_header(rows[0]):
        rows = rows[1:]

    event_name: str | None = None
    properties: dict[str, Any] = {}
    for cells in rows:
        if len(cells) < 2:
            continue
        key, *value_parts = cells
        value = " ".join(value_parts)
        if is_event_name_key(key):
            event_name = value
        else:
            properties[key] = coerce_scalar(value)

    if not event_name:
        return Malformed(("Event name not found in the table (add an 'event' row)",))
    return Matched(ParseResult.parsed(event_name, properties, "high"))


def _split_cells(line: str) -> list[str]:
    return [cell.strip() for cell in line.split("\t") if cell.strip()]
