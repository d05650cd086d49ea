"""Custom exceptions for core logic."""

from __future__ import annotations

from pathlib import Path


class SettingsError(ValueError):
    """Raised when the matching settings file cannot be loaded or validated."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class ContextLoadError(ValueError):
    """Raised when an import context payload is unreadable or invalid."""

    def __init__(self, message: str, *, source: str | None = None) -> None:
        super().__init__(message)
        self.source = source
