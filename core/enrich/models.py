"""Data models for the reference corpus and enrichment annotations."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator
from pydantic.alias_generators import to_camel

from core.parsing.models import ParseResult


class _ContextModel(BaseModel):
    """Read-only corpus models; accept camelCase keys from the context service."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class AssociatedValue(_ContextModel):
    id: str
    value: str


class PropertyContext(_ContextModel):
    id: str
    name: str
    associated_values: list[AssociatedValue] = Field(default_factory=list)


class SuggestedValueContext(_ContextModel):
    id: str
    value: str
    is_contextual: bool = False


class PaginationTotals(_ContextModel):
    events: int
    properties: int
    suggested_values: int


class PaginationHasMore(_ContextModel):
    events: bool
    properties: bool
    suggested_values: bool


class PaginationMetadata(_ContextModel):
    limit: int
    offset: int
    totals: PaginationTotals
    has_more: PaginationHasMore


class ImportContext(_ContextModel):
    """Known event names, properties and suggested values for one scope.

    Only the subset supplied by the caller is ever consulted.
    """

    event_names: list[str] = Field(default_factory=list)
    properties: list[PropertyContext] = Field(default_factory=list)
    suggested_values: list[SuggestedValueContext] = Field(default_factory=list)
    pagination: PaginationMetadata | None = None


class EventNameMatch(BaseModel):
    """Duplicate / near-duplicate status of the parsed event name."""

    model_config = ConfigDict(extra="forbid")

    exists: bool
    similar: str | None = None
    similarity: float | None = Field(default=None, ge=0, le=1)


class PropertyMatch(BaseModel):
    """Enrichment record for one parsed property.

    Rules:
    - key_exists and is_new_key are mutually exclusive
    - value_exists and is_new_value are mutually exclusive
    """

    model_config = ConfigDict(extra="forbid")

    key_exists: bool = False
    key_id: str | None = None
    value_exists: bool = False
    value_id: str | None = None
    value_similar: str | None = None
    value_similarity: float | None = Field(default=None, ge=0, le=1)
    is_new_key: bool = False
    is_new_value: bool = False
    boosted: bool | None = None

    @model_validator(mode="after")
    def _check_exclusive_flags(self) -> PropertyMatch:
        if self.key_exists and self.is_new_key:
            raise ValueError("key_exists and is_new_key are mutually exclusive")
        if self.value_exists and self.is_new_value:
            raise ValueError("value_exists and is_new_value are mutually exclusive")
        return self


class EnhancedParseResult(ParseResult):
    """Parse result cross-referenced against an ``ImportContext``."""

    kind: Literal["enhanced"] = "enhanced"  # type: ignore[assignment]
    event_name_match: EventNameMatch | None = None
    properties_matches: dict[str, PropertyMatch] = Field(default_factory=dict)
    suggestions: list[str] = Field(default_factory=list)


ParseOutcome = Annotated[ParseResult | EnhancedParseResult, Field(discriminator="kind")]
PARSE_OUTCOME_ADAPTER: TypeAdapter[ParseResult | EnhancedParseResult] = TypeAdapter(ParseOutcome)
