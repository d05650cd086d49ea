"""Data models for format detection and field extraction results."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

Confidence = Literal["high", "medium", "low"]


class ParseResult(BaseModel):
    """Outcome of parsing one pasted blob.

    Rules:
    - success implies a non-empty event_name and a properties dict
    - failure carries no properties
    """

    model_config = ConfigDict(extra="forbid")

    kind: Literal["base"] = "base"
    success: bool
    event_name: str | None = None
    properties: dict[str, Any] | None = None
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    confidence: Confidence = "low"

    @model_validator(mode="after")
    def _check_success_invariant(self) -> ParseResult:
        if self.success:
            if not self.event_name:
                raise ValueError("successful parse requires a non-empty event_name")
            if self.properties is None:
                raise ValueError("successful parse requires properties")
        elif self.properties is not None:
            raise ValueError("failed parse must not carry properties")
        return self

    @classmethod
    def parsed(
        cls, event_name: str, properties: dict[str, Any], confidence: Confidence
    ) -> ParseResult:
        return cls(
            success=True,
            event_name=event_name,
            properties=properties,
            confidence=confidence,
        )

    @classmethod
    def failure(cls, errors: list[str]) -> ParseResult:
        return cls(success=False, errors=errors, confidence="low")


@dataclass(frozen=True)
class Matched:
    """The parser recognized its format and extracted an event."""

    result: ParseResult


@dataclass(frozen=True)
class NotThisFormat:
    """The input does not look like the parser's format."""


@dataclass(frozen=True)
class Malformed:
    """The input looks like the parser's format but extraction failed."""

    errors: tuple[str, ...]


NOT_THIS_FORMAT = NotThisFormat()

ParserOutcome = Matched | NotThisFormat | Malformed
Parser = Callable[[str], ParserOutcome]
