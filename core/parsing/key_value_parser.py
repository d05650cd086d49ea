"""Line-by-line key-value parser (``key: value``, ``key = value``, ...)."""

from __future__ import annotations

import re
from typing import Any

from core.parsing.models import Malformed, Matched, ParseResult, ParserOutcome
from core.parsing.values import coerce_scalar, is_event_name_key

# Explicit separators first, then a whitespace fallback with a one-word key.
_LINE_PATTERNS = (
    re.compile(r"^(.+?):\s*(.+)$"),
    re.compile(r"^(.+?)\s*=\s*(.+)$"),
    re.compile(r"^(.+?)\|\s*(.+)$"),
    re.compile(r"^(\S+)\s+(.+)$"),
)


def try_parse_key_value(raw_text: str) -> ParserOutcome:
    """Parse one ``key <sep> value`` pair per non-blank line.

    A single line matching none of the patterns rejects the whole input.
    """

    event_name: str | None = None
    properties: dict[str, Any] = {}

    for line in raw_text.splitlines():
        if not line.strip():
            continue
        pair = _match_line(line.strip())
        if pair is None:
            return Malformed(
                ('Invalid line format. Use "key: value" or "key = value"',)
            )
        key, value = pair
        if is_event_name_key(key):
            event_name = value
        else:
            properties[key] = coerce_scalar(value)

    if not event_name:
        return Malformed(('Event name not found (add a line "event: event_name")',))
    return Matched(ParseResult.parsed(event_name, properties, "medium"))


def _match_line(line: str) -> tuple[str, str] | None:
    for pattern in _LINE_PATTERNS:
        match = pattern.match(line)
        if match is not None:
            return match.group(1).strip(), match.group(2).strip()
    return None
