"""String normalization used as the single comparison basis for matching."""

from __future__ import annotations

import re
import unicodedata

_COMBINING_MARKS_RE = re.compile(r"[\u0300-\u036f]")
_WHITESPACE_RE = re.compile(r"\s+")
_NON_WORD_RE = re.compile(r"[^a-zA-Z0-9_]")


def normalize(value: str) -> str:
    """Normalize a string for comparison.

    Rules:
    - lowercase and trim
    - decompose (NFD) and drop combining diacritical marks
    - collapse whitespace runs into a single underscore

    Example: ``"  Événement Achat "`` -> ``"evenement_achat"``.
    """

    folded = value.lower().strip()
    decomposed = unicodedata.normalize("NFD", folded)
    stripped = _COMBINING_MARKS_RE.sub("", decomposed)
    return _WHITESPACE_RE.sub("_", stripped)


def strip_punctuation(value: str) -> str:
    """Keep only ASCII letters, digits and underscores."""

    return _NON_WORD_RE.sub("", value)


def normalize_aggressive(value: str) -> str:
    """Normalize then strip punctuation (``"Page-View!"`` -> ``"pageview"``)."""

    return strip_punctuation(normalize(value))
