"""Fuzzy matching on normalized identifiers using bounded Levenshtein distance."""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal, Protocol

from core.text.normalizer import normalize

MatchType = Literal["event", "property", "value"]

COMMON_TOKENS = frozenset(
    {"event", "click", "view", "page", "button", "user", "action", "submit"}
)
MAX_LENGTH_DIFF = 5


@dataclass(frozen=True)
class Match:
    """Best candidate found by a fuzzy lookup."""

    value: str
    score: float
    boosted: bool = False


class BoostSource(Protocol):
    """Anything that can bias a fuzzy match from previously accepted suggestions."""

    def get_boost_score(
        self, user_input: str, candidate: str, scope_id: str, match_type: MatchType
    ) -> float:
        """Return an additive boost for ``candidate`` given ``user_input``."""


def levenshtein_distance(a: str, b: str, max_length_diff: int = MAX_LENGTH_DIFF) -> float:
    """Edit distance between ``a`` and ``b``.

    Returns ``math.inf`` when the length difference exceeds ``max_length_diff``;
    identifiers that far apart are never worth comparing.
    """

    if not a:
        return len(b)
    if not b:
        return len(a)
    if abs(len(a) - len(b)) > max_length_diff:
        return math.inf

    previous = list(range(len(a) + 1))
    for row, char_b in enumerate(b, start=1):
        current = [row]
        for column, char_a in enumerate(a, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(
                min(
                    previous[column] + 1,
                    current[column - 1] + 1,
                    previous[column - 1] + cost,
                )
            )
        previous = current
    return previous[-1]


def similarity(target: str, candidate: str, ignore_common_tokens: bool = True) -> float:
    """Similarity score in ``[0, 1]`` between two identifiers.

    Rules:
    - both sides are normalized first
    - with ``ignore_common_tokens``, generic tokens (``click``, ``view``...) are
      removed before comparing
    - if filtering empties either side, only literally equal normalized
      strings score 1
    """

    norm_target = normalize(target)
    norm_candidate = normalize(candidate)

    clean_target = norm_target
    clean_candidate = norm_candidate
    if ignore_common_tokens:
        clean_target = _drop_common_tokens(norm_target)
        clean_candidate = _drop_common_tokens(norm_candidate)

    if not clean_target or not clean_candidate:
        return 1.0 if norm_target == norm_candidate else 0.0

    distance = levenshtein_distance(clean_target, clean_candidate)
    if math.isinf(distance):
        return 0.0
    return 1 - distance / max(len(clean_target), len(clean_candidate))


def find_best_match(
    target: str, candidates: Iterable[str], threshold: float = 0.75
) -> Match | None:
    """Return the highest scoring candidate at or above ``threshold``.

    Ties keep the first candidate encountered.
    """

    best: Match | None = None
    for candidate in candidates:
        score = similarity(target, candidate)
        if score >= threshold and (best is None or score > best.score):
            best = Match(value=candidate, score=score)
    return best


def find_best_match_with_learning(
    target: str,
    candidates: Iterable[str],
    scope_id: str,
    match_type: MatchType,
    threshold: float,
    boost_source: BoostSource,
) -> Match | None:
    """Like ``find_best_match`` but adds the learned boost, capped at 1."""

    best: Match | None = None
    for candidate in candidates:
        base_score = similarity(target, candidate)
        boost = boost_source.get_boost_score(target, candidate, scope_id, match_type)
        final_score = min(1.0, base_score + boost)
        if final_score >= threshold and (best is None or final_score > best.score):
            best = Match(value=candidate, score=final_score, boosted=boost > 0)
    return best


def has_exact_match(target: str, candidates: Iterable[str]) -> bool:
    """Whether any candidate equals ``target`` after normalization."""

    normalized = normalize(target)
    return any(normalize(candidate) == normalized for candidate in candidates)


def _drop_common_tokens(value: str) -> str:
    return "_".join(token for token in value.split("_") if token not in COMMON_TOKENS)
