"""Jira / markdown table parser.

Example input::

    | Property | Value    |
    |----------|----------|
    | event    | purchase |
"""

from __future__ import annotations

import re
from typing import Any

from core.parsing.models import NOT_THIS_FORMAT, Malformed, Matched, ParseResult, ParserOutcome
from core.parsing.values import coerce_scalar, is_event_name_key, looks_like_header

_SEPARATOR_ROW_RE = re.compile(r"^\s*\|[\s\-:|]+\|\s*$")


def try_parse_jira(raw_text: str) -> ParserOutcome:
    """Parse ``| key | value |`` rows; only the first two cells of a row are used."""

    lines = [line for line in raw_text.splitlines() if line.strip()]
    if not any("|" in line for line in lines):
        return NOT_THIS_FORMAT

    rows = [_split_cells(line) for line in lines if not _SEPARATOR_ROW_RE.match(line)]
    if rows and looks_like_header(rows[0]):
        rows = rows[1:]

    event_name: str | None = None
    properties: dict[str, Any] = {}
    for cells in rows:
        if len(cells) < 2:
            continue
        key, value = cells[0], cells[1]
        if is_event_name_key(key):
            event_name = value
        else:
            properties[key] = coerce_scalar(value)

    if not event_name:
        return Malformed(("Event name not found in the Jira table",))
    return Matched(ParseResult.parsed(event_name, properties, "medium"))


def _split_cells(line: str) -> list[str]:
    return [cell.strip() for cell in line.split("|") if cell.strip()]
