"""Settings loading utilities for matching thresholds."""

from __future__ import annotations

from pathlib import Path

import yaml  # type: ignore[import-untyped]
from pydantic import ValidationError

from core.config.models import MatchingSettings
from core.utils.errors import SettingsError


def default_settings_path() -> Path:
    return Path(__file__).with_name("settings.yaml")


def load_settings(path: Path | None = None) -> MatchingSettings:
    """Load and validate matching settings from YAML.

    An empty file yields the built-in defaults.
    """

    settings_path = path or default_settings_path()

    try:
        raw = yaml.safe_load(settings_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise SettingsError(
            f"Settings file not found: {settings_path}", path=settings_path
        ) from exc
    except yaml.YAMLError as exc:
        raise SettingsError(
            f"Invalid YAML in settings file: {settings_path}", path=settings_path
        ) from exc

    if raw is None:
        return MatchingSettings()
    if not isinstance(raw, dict):
        raise SettingsError(
            f"Settings file must contain a mapping: {settings_path}", path=settings_path
        )

    try:
        return MatchingSettings.model_validate(raw)
    except ValidationError as exc:
        raise SettingsError(
            f"Invalid settings schema: {settings_path}", path=settings_path
        ) from exc
