"""Pure scoring and retention rules for learned matches.

Every function here works on an explicit snapshot of matches and an explicit
``now`` so decay behaviour can be tested without a clock or storage.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from datetime import datetime, timedelta

from core.learning.models import LearnedMatch, LearningStats
from core.matching.similarity import MatchType

DEFAULT_MAX_STORED = 500
DEFAULT_DECAY_PERIOD = timedelta(days=30)
DEFAULT_MAX_BOOST = 0.2

_EXACT_FLOOR_RATIO = 0.75
_PATTERN_BOOST_STEP = 0.01
_PATTERN_BOOST_CAP = 0.05
_PATTERN_SIMILARITY_MIN = 0.8


def record_match(
    matches: Sequence[LearnedMatch],
    match: LearnedMatch,
    max_stored: int = DEFAULT_MAX_STORED,
) -> tuple[LearnedMatch, ...]:
    """Prepend ``match`` (most recent first) and keep at most ``max_stored``."""

    return (match, *matches)[:max_stored]


def prune_expired(
    matches: Sequence[LearnedMatch],
    now: datetime,
    decay_period: timedelta = DEFAULT_DECAY_PERIOD,
) -> tuple[LearnedMatch, ...]:
    """Drop matches older than twice the decay period."""

    cutoff = now - decay_period * 2
    return tuple(match for match in matches if match.timestamp > cutoff)


def boost_score(
    matches: Sequence[LearnedMatch],
    user_input: str,
    candidate: str,
    scope_id: str,
    match_type: MatchType,
    now: datetime,
    decay_period: timedelta = DEFAULT_DECAY_PERIOD,
    max_boost: float = DEFAULT_MAX_BOOST,
) -> float:
    """Additive boost in ``[0, max_boost]`` for ``candidate``.

    Rules:
    - only matches with the same normalized input, scope and type count
    - a prior acceptance of ``candidate`` itself gives ``0.75 * max_boost``
      plus up to ``0.25 * max_boost`` for recency; the floor stays after decay
    - otherwise each prior acceptance that contains (or is contained in)
      ``candidate`` adds 0.01, capped at 0.05
    """

    relevant = [
        match
        for match in matches
        if match.user_input == user_input
        and match.scope_id == scope_id
        and match.type == match_type
    ]
    if not relevant:
        return 0.0

    for match in relevant:
        if match.accepted_suggestion == candidate:
            age = now - match.timestamp
            recency = min(1.0, max(0.0, 1 - age / decay_period))
            return max_boost * (_EXACT_FLOOR_RATIO + (1 - _EXACT_FLOOR_RATIO) * recency)

    similar_count = sum(
        1
        for match in relevant
        if containment_similarity(match.accepted_suggestion, candidate) > _PATTERN_SIMILARITY_MIN
    )
    return min(_PATTERN_BOOST_CAP, max_boost, similar_count * _PATTERN_BOOST_STEP)


def containment_similarity(first: str, second: str) -> float:
    """Cheap case-insensitive similarity: length ratio when one contains the other."""

    a = first.lower()
    b = second.lower()
    if a == b:
        return 1.0
    if a in b or b in a:
        shorter, longer = sorted((a, b), key=len)
        return len(shorter) / len(longer)
    return 0.0


def compute_stats(matches: Sequence[LearnedMatch]) -> LearningStats:
    """Summarize matches by type and scope."""

    by_type: Counter[str] = Counter(match.type for match in matches)
    by_scope: Counter[str] = Counter(match.scope_id for match in matches)
    return LearningStats(
        total=len(matches),
        by_type=dict(sorted(by_type.items())),
        by_scope=dict(sorted(by_scope.items())),
        oldest_match=matches[-1].timestamp if matches else None,
        newest_match=matches[0].timestamp if matches else None,
    )
