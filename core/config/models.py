"""Settings models for matching thresholds and learned-match retention."""

from __future__ import annotations

from datetime import timedelta

from pydantic import BaseModel, ConfigDict, Field


class LearningSettings(BaseModel):
    """Capacity and decay of the learning store."""

    model_config = ConfigDict(extra="forbid")

    max_stored: int = Field(default=500, ge=1)
    decay_days: float = Field(default=30, gt=0)
    max_boost: float = Field(default=0.2, ge=0, le=0.2)

    @property
    def decay_period(self) -> timedelta:
        return timedelta(days=self.decay_days)


class MatchingSettings(BaseModel):
    """Fuzzy matching thresholds used during enrichment."""

    model_config = ConfigDict(extra="forbid")

    event_threshold: float = Field(default=0.75, ge=0, le=1)
    property_threshold: float = Field(default=0.80, ge=0, le=1)
    value_threshold: float = Field(default=0.75, ge=0, le=1)
    learning: LearningSettings = Field(default_factory=LearningSettings)
