from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from core.learning.backends import InMemoryBackend, JsonFileBackend
from core.learning.store import STORAGE_KEY, LearningStore, NullBoostSource


class _Clock:
    def __init__(self) -> None:
        self.now = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


class _BrokenDriverBackend:
    def get(self, key: str) -> str | None:
        raise RuntimeError("driver disconnected")

    def set(self, key: str, value: str) -> None:
        raise RuntimeError("driver disconnected")


class _FailingBackend:
    def get(self, key: str) -> str | None:
        raise OSError("disk unavailable")

    def set(self, key: str, value: str) -> None:
        raise OSError("disk unavailable")


def test_store_starts_empty_with_fresh_backend() -> None:
    store = LearningStore(InMemoryBackend())

    assert len(store) == 0
    assert store.get_boost_score("purchace", "purchase", "prod1", "event") == 0.0


def test_record_then_boost_for_same_input() -> None:
    clock = _Clock()
    store = LearningStore(InMemoryBackend(), clock=clock)

    store.record_accepted_match("purchace", "purchase", "prod1", "event")

    assert store.get_boost_score("purchace", "purchase", "prod1", "event") == pytest.approx(0.2)
    clock.advance(timedelta(days=90))
    assert store.get_boost_score("purchace", "purchase", "prod1", "event") == pytest.approx(0.15)


def test_record_normalizes_user_input() -> None:
    store = LearningStore(InMemoryBackend(), clock=_Clock())

    match = store.record_accepted_match("  Purchace ", "purchase", "prod1", "event")

    assert match.user_input == "purchace"
    assert store.get_boost_score("PURCHACE", "purchase", "prod1", "event") == pytest.approx(0.2)


def test_store_never_exceeds_capacity_and_keeps_most_recent_first() -> None:
    store = LearningStore(InMemoryBackend(), max_stored=3, clock=_Clock())

    for index in range(5):
        store.record_accepted_match(f"input{index}", f"suggestion{index}", "prod1", "value")

    assert len(store) == 3
    assert [item.accepted_suggestion for item in store.matches] == [
        "suggestion4",
        "suggestion3",
        "suggestion2",
    ]


def test_repeated_recording_keeps_boost_bounded() -> None:
    store = LearningStore(InMemoryBackend(), clock=_Clock())

    for _ in range(20):
        store.record_accepted_match("purchace", "purchase", "prod1", "event")

    assert 0.0 <= store.get_boost_score("purchace", "purchase", "prod1", "event") <= 0.2


def test_store_round_trips_through_backend() -> None:
    backend = InMemoryBackend()
    clock = _Clock()
    store_a = LearningStore(backend, clock=clock)
    store_a.record_accepted_match("purchace", "purchase", "prod1", "event")
    store_a.record_accepted_match("eur", "EUR", "prod2", "value")

    store_b = LearningStore(backend, clock=clock)

    assert store_b.matches == store_a.matches


def test_load_prunes_entries_older_than_twice_decay_period() -> None:
    backend = InMemoryBackend()
    clock = _Clock()
    store_a = LearningStore(backend, clock=clock)
    store_a.record_accepted_match("old", "old_event", "prod1", "event")
    clock.advance(timedelta(days=31))
    store_a.record_accepted_match("recent", "recent_event", "prod1", "event")
    clock.advance(timedelta(days=30))

    store_b = LearningStore(backend, clock=clock)

    assert [item.accepted_suggestion for item in store_b.matches] == ["recent_event"]
    persisted = json.loads(backend.get(STORAGE_KEY) or "[]")
    assert [item["accepted_suggestion"] for item in persisted] == ["recent_event"]


@pytest.mark.parametrize("payload", ["{not json", '[{"foo": 1}]', '{"a": 1}'])
def test_corrupt_payload_resets_to_empty_store(
    payload: str, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.WARNING, logger="evimport.learning")
    backend = InMemoryBackend({STORAGE_KEY: payload})

    store = LearningStore(backend, clock=_Clock())

    assert len(store) == 0
    messages = [record.message for record in caplog.records if record.name == "evimport.learning"]
    assert any('"event":"load_failed"' in message for message in messages)


def test_backend_failures_are_logged_not_raised(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="evimport.learning")
    store = LearningStore(_FailingBackend(), clock=_Clock())

    store.record_accepted_match("purchace", "purchase", "prod1", "event")

    assert len(store) == 1
    assert store.get_boost_score("purchace", "purchase", "prod1", "event") == pytest.approx(0.2)
    messages = [record.message for record in caplog.records if record.name == "evimport.learning"]
    assert any('"event":"load_failed"' in message for message in messages)
    assert any('"event":"save_failed"' in message for message in messages)


def test_clear_forgets_everything_and_persists() -> None:
    backend = InMemoryBackend()
    store = LearningStore(backend, clock=_Clock())
    store.record_accepted_match("purchace", "purchase", "prod1", "event")

    store.clear()

    assert len(store) == 0
    assert len(LearningStore(backend, clock=_Clock())) == 0


def test_stats_reflect_recorded_matches() -> None:
    store = LearningStore(InMemoryBackend(), clock=_Clock())
    store.record_accepted_match("purchace", "purchase", "prod1", "event")
    store.record_accepted_match("eur", "EUR", "prod1", "value")

    stats = store.stats()

    assert stats.total == 2
    assert stats.by_type == {"event": 1, "value": 1}
    assert stats.by_scope == {"prod1": 2}


def test_concurrent_records_respect_capacity() -> None:
    store = LearningStore(InMemoryBackend(), max_stored=50, clock=_Clock())

    def _worker(worker_id: int) -> None:
        for index in range(40):
            store.record_accepted_match(f"in{worker_id}-{index}", "out", "prod1", "value")

    threads = [threading.Thread(target=_worker, args=(worker_id,)) for worker_id in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(store) == 50


def test_invalid_store_configuration_raises() -> None:
    with pytest.raises(ValueError, match="max_stored"):
        LearningStore(InMemoryBackend(), max_stored=0)
    with pytest.raises(ValueError, match="decay_period"):
        LearningStore(InMemoryBackend(), decay_period=timedelta(0))
    with pytest.raises(ValueError, match="max_boost"):
        LearningStore(InMemoryBackend(), max_boost=0.5)
    with pytest.raises(ValueError, match="max_boost"):
        LearningStore(InMemoryBackend(), max_boost=-0.1)


def test_null_boost_source_is_always_zero() -> None:
    assert NullBoostSource().get_boost_score("a", "a", "prod1", "event") == 0.0


def test_json_file_backend_persists_across_instances(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "learned.json"
    store_a = LearningStore(JsonFileBackend(path), clock=_Clock())
    store_a.record_accepted_match("purchace", "purchase", "prod1", "event")

    store_b = LearningStore(JsonFileBackend(path), clock=_Clock())

    assert path.exists()
    assert store_b.matches == store_a.matches
    raw = json.loads(path.read_text(encoding="utf-8"))
    assert list(raw) == [STORAGE_KEY]


def test_json_file_backend_recovers_from_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "learned.json"
    path.write_text("{invalid", encoding="utf-8")

    store = LearningStore(JsonFileBackend(path), clock=_Clock())
    store.record_accepted_match("purchace", "purchase", "prod1", "event")

    assert len(LearningStore(JsonFileBackend(path), clock=_Clock())) == 1


def test_json_file_backend_rejects_non_object_file(tmp_path: Path) -> None:
    path = tmp_path / "learned.json"
    path.write_text("[]", encoding="utf-8")

    with pytest.raises(ValueError, match="must contain a JSON object"):
        JsonFileBackend(path).get(STORAGE_KEY)


def test_unexpected_backend_errors_are_logged_not_raised(
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.WARNING, logger="evimport.learning")

    store = LearningStore(_BrokenDriverBackend(), clock=_Clock())
    store.record_accepted_match("purchace", "purchase", "prod1", "event")

    assert len(store) == 1
    messages = [record.message for record in caplog.records if record.name == "evimport.learning"]
    assert any("driver disconnected" in message for message in messages)
    assert any('"event":"save_failed"' in message for message in messages)
