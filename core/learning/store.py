"""Learning store: accepted suggestions biasing future fuzzy matches.

The store owns an immutable snapshot of learned matches. Writes are
serialized with a lock and swap the snapshot; readers never lock and may see
a slightly stale view. Persistence failures are logged and never raised.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from pydantic import ValidationError

from core.learning import scoring
from core.learning.backends import KeyValueBackend
from core.learning.models import LEARNED_MATCHES_ADAPTER, LearnedMatch, LearningStats
from core.matching.similarity import MatchType
from core.text.normalizer import normalize
from core.utils.log_events import log_event

STORAGE_KEY = "evimport_learned_matches"

logger = logging.getLogger("evimport.learning")

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LearningStore:
    """Records user-accepted suggestions and turns them into match boosts."""

    def __init__(
        self,
        backend: KeyValueBackend,
        *,
        max_stored: int = scoring.DEFAULT_MAX_STORED,
        decay_period: timedelta = scoring.DEFAULT_DECAY_PERIOD,
        max_boost: float = scoring.DEFAULT_MAX_BOOST,
        clock: Clock = _utc_now,
        storage_key: str = STORAGE_KEY,
    ) -> None:
        if max_stored < 1:
            raise ValueError(f"max_stored must be positive, got {max_stored}")
        if decay_period <= timedelta(0):
            raise ValueError("decay_period must be positive")
        if not 0 <= max_boost <= scoring.DEFAULT_MAX_BOOST:
            raise ValueError(
                f"max_boost must be within [0, {scoring.DEFAULT_MAX_BOOST}], got {max_boost}"
            )

        self._backend = backend
        self._max_stored = max_stored
        self._decay_period = decay_period
        self._max_boost = max_boost
        self._clock = clock
        self._storage_key = storage_key
        self._lock = threading.Lock()

        loaded = self._load()
        pruned = scoring.prune_expired(loaded, self._clock(), self._decay_period)
        self._matches: tuple[LearnedMatch, ...] = pruned[: self._max_stored]
        if len(self._matches) != len(loaded):
            log_event(
                logger,
                logging.INFO,
                "pruned",
                removed=len(loaded) - len(self._matches),
                kept=len(self._matches),
            )
            self._save(self._matches)

    @property
    def matches(self) -> tuple[LearnedMatch, ...]:
        """Current snapshot, most recent first."""

        return self._matches

    def __len__(self) -> int:
        return len(self._matches)

    def record_accepted_match(
        self,
        user_input: str,
        accepted_suggestion: str,
        scope_id: str,
        match_type: MatchType,
    ) -> LearnedMatch:
        """Record that ``accepted_suggestion`` was chosen for ``user_input``."""

        match = LearnedMatch(
            user_input=normalize(user_input),
            accepted_suggestion=accepted_suggestion,
            timestamp=self._clock(),
            scope_id=scope_id,
            type=match_type,
        )
        with self._lock:
            self._matches = scoring.record_match(self._matches, match, self._max_stored)
            snapshot = self._matches
            self._save(snapshot)
        log_event(
            logger,
            logging.INFO,
            "recorded",
            scope_id=scope_id,
            type=match_type,
            total=len(snapshot),
        )
        return match

    def get_boost_score(
        self,
        user_input: str,
        candidate: str,
        scope_id: str,
        match_type: MatchType,
    ) -> float:
        """Boost in ``[0, max_boost]`` learned for ``candidate``."""

        return scoring.boost_score(
            self._matches,
            normalize(user_input),
            candidate,
            scope_id,
            match_type,
            now=self._clock(),
            decay_period=self._decay_period,
            max_boost=self._max_boost,
        )

    def stats(self) -> LearningStats:
        return scoring.compute_stats(self._matches)

    def clear(self) -> None:
        """Forget every learned match."""

        with self._lock:
            self._matches = ()
            self._save(self._matches)

    def _load(self) -> tuple[LearnedMatch, ...]:
        try:
            raw = self._backend.get(self._storage_key)
        except Exception as exc:  # noqa: BLE001
            log_event(logger, logging.WARNING, "load_failed", error=str(exc))
            return ()

        if not raw:
            return ()

        try:
            return tuple(LEARNED_MATCHES_ADAPTER.validate_json(raw))
        except ValidationError as exc:
            log_event(
                logger,
                logging.WARNING,
                "load_failed",
                error=f"invalid learned matches: {exc.error_count()} errors",
            )
            return ()

    def _save(self, matches: tuple[LearnedMatch, ...]) -> None:
        payload = LEARNED_MATCHES_ADAPTER.dump_json(list(matches)).decode("utf-8")
        try:
            self._backend.set(self._storage_key, payload)
        except Exception as exc:  # noqa: BLE001
            log_event(logger, logging.WARNING, "save_failed", error=str(exc))


class NullBoostSource:
    """Boost source used when no learned state is available."""

    def get_boost_score(
        self,
        user_input: str,
        candidate: str,
        scope_id: str,
        match_type: MatchType,
    ) -> float:
        return 0.0
