"""Helpers shared by the line-oriented parsers."""

from __future__ import annotations

import re

from core.text.normalizer import normalize

JSON_EVENT_NAME_KEYS = ("event", "name", "event_name", "eventName")
LINE_EVENT_NAME_KEYS = frozenset({"event", "name", "event_name", "eventname"})

_HEADER_KEY_WORDS = frozenset(
    {"property", "properties", "key", "field", "name", "propriete"}
)
_HEADER_VALUE_WORDS = frozenset({"value", "values", "valeur"})
_NUMBER_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_INT_RE = re.compile(r"[+-]?\d+")

ScalarValue = bool | int | float | str


def coerce_scalar(raw: str) -> ScalarValue:
    """Type a pasted cell: ``true``/``false`` -> bool, numeric -> number, else str."""

    value = raw.strip()
    lowered = value.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if _INT_RE.fullmatch(value):
        return int(value)
    if _NUMBER_RE.fullmatch(value):
        return float(value)
    return value


def is_event_name_key(key: str) -> bool:
    return key.strip().lower() in LINE_EVENT_NAME_KEYS


def looks_like_header(cells: list[str]) -> bool:
    """Whether a first row reads as column titles (``Property | Value``).

    A row whose key cell is a header word but whose second cell is real data
    (``name | purchase``) is not a header.
    """

    if not cells:
        return False
    if normalize(cells[0]) not in _HEADER_KEY_WORDS:
        return False
    if len(cells) == 1:
        return True
    return normalize(cells[1]) in _HEADER_VALUE_WORDS
