"""Data models for learned matches and learning statistics."""

from __future__ import annotations

from datetime import datetime

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, TypeAdapter

from core.matching.similarity import MatchType


class LearnedMatch(BaseModel):
    """One user-confirmed suggestion acceptance."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    user_input: str
    accepted_suggestion: str
    timestamp: AwareDatetime
    scope_id: str
    type: MatchType


class LearningStats(BaseModel):
    """Aggregate view over the learned matches currently held."""

    model_config = ConfigDict(extra="forbid")

    total: int
    by_type: dict[str, int] = Field(default_factory=dict)
    by_scope: dict[str, int] = Field(default_factory=dict)
    oldest_match: datetime | None = None
    newest_match: datetime | None = None


LEARNED_MATCHES_ADAPTER: TypeAdapter[list[LearnedMatch]] = TypeAdapter(list[LearnedMatch])
