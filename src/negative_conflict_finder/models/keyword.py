"""Keyword data models."""

from enum import Enum

from pydantic import ConfigDict, Field, field_validator

from negative_conflict_finder.models.base import BaseNCFModel


class MatchType(str, Enum):
    """Keyword match type values."""

    EXACT = "EXACT"
    PHRASE = "PHRASE"
    BROAD = "BROAD"


class UnknownMatchTypePolicy(str, Enum):
    """How the normalizer treats a match type outside EXACT, PHRASE and BROAD.

    - SKIP: reject the keyword (it never enters the index)
    - BROAD: keep the keyword and treat it as broad match
    """

    SKIP = "skip"
    BROAD = "broad"


class NormalizedKeyword(BaseNCFModel):
    """Canonical, comparable form of a keyword."""

    model_config = ConfigDict(frozen=True)

    display_text: str = Field(
        ..., description="Cleaned text decorated for its match type: \"phrase\", [exact], broad"
    )
    raw_text: str = Field(
        ..., min_length=1, description="Lowercased, single-spaced text without match type markers"
    )
    match_type: MatchType = Field(..., description="Canonical match type")

    @field_validator("raw_text")
    @classmethod
    def validate_raw_text(cls, v: str) -> str:
        """Reject raw text that is blank."""
        if not v.strip():
            raise ValueError("raw_text must not be blank")
        return v

    @property
    def tokens(self) -> tuple[str, ...]:
        """Whitespace-delimited words of the raw text."""
        return tuple(self.raw_text.split())

    def __str__(self) -> str:
        return self.display_text
