"""JSON object parser (highest structural confidence)."""

from __future__ import annotations

import json
from typing import Any

from core.parsing.models import NOT_THIS_FORMAT, Malformed, Matched, ParseResult, ParserOutcome
from core.parsing.values import JSON_EVENT_NAME_KEYS

_MISSING_EVENT_NAME_ERROR = (
    f"Could not detect the event name. Use one of the keys: {', '.join(JSON_EVENT_NAME_KEYS)}"
)


def try_parse_json(raw_text: str) -> ParserOutcome:
    """Parse a JSON object such as ``{"event": "purchase", "value": 99.99}``.

    The event name comes from the first of ``event``, ``name``, ``event_name``,
    ``eventName`` holding a string; an empty string there is an error, not a
    reason to look further. Every other key, other event-name keys included,
    becomes a property with its native JSON value, nested structures included.
    """

    try:
        parsed = json.loads(raw_text)
    except json.JSONDecodeError:
        return NOT_THIS_FORMAT

    if not isinstance(parsed, dict):
        return Malformed(("JSON must be an object, not an array or a primitive value",))

    found = _find_event_name(parsed)
    if found is None or not found[1]:
        return Malformed((_MISSING_EVENT_NAME_ERROR,))

    name_key, event_name = found
    properties = {key: value for key, value in parsed.items() if key != name_key}
    return Matched(ParseResult.parsed(event_name, properties, "high"))


def _find_event_name(parsed: dict[str, Any]) -> tuple[str, str] | None:
    for key in JSON_EVENT_NAME_KEYS:
        value = parsed.get(key)
        if isinstance(value, str):
            return key, value
    return None
