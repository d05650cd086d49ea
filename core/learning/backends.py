"""Key-value persistence backends for the learning store."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Protocol


class KeyValueBackend(Protocol):
    """Minimal string key-value persistence handle."""

    def get(self, key: str) -> str | None:
        """Return the stored string or ``None`` when missing."""

    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``."""


class InMemoryBackend:
    """Dict-backed backend for tests and ephemeral sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileBackend:
    """Persist keys in one local JSON object file, written atomically."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> str | None:
        value = self._read_data().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        try:
            data = self._read_data()
        except ValueError:
            # Corrupt files are overwritten.
            data = {}
        data[key] = value
        self._write_data(data)

    def _read_data(self) -> dict[str, object]:
        if not self._path.exists():
            return {}

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid store JSON: {self._path}") from exc

        if not isinstance(raw, dict):
            raise ValueError(f"Store file must contain a JSON object: {self._path}")
        return raw

    def _write_data(self, data: dict[str, object]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self._path.with_suffix(f"{self._path.suffix}.tmp")
        temp_path.write_text(
            json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False),
            encoding="utf-8",
        )
        temp_path.replace(self._path)
