"""Conflict output models."""

from enum import Enum

from pydantic import Field

from negative_conflict_finder.models.base import BaseNCFModel

ACCOUNT_LEVEL_LOCATION = "Account Level"


class ConflictLevel(str, Enum):
    """Scope a negative keyword was found at."""

    AD_GROUP = "AD_GROUP"
    CAMPAIGN = "CAMPAIGN"
    SHARED_LIST = "SHARED_LIST"
    ACCOUNT = "ACCOUNT"


class ConflictRecord(BaseNCFModel):
    """A negative keyword and the positives it blocks at one location."""

    negative_display_text: str = Field(..., description="Negative keyword as displayed")
    location_description: str = Field(
        ..., description="Where the negative lives, e.g. 'Campaign: Brand'"
    )
    blocked_positive_display_texts: list[str] = Field(
        ..., min_length=1, description="Blocked positives in encounter order"
    )
    level: ConflictLevel = Field(..., description="Scope of the negative keyword")
    campaign_name: str | None = Field(None, description="Campaign of the blocked positives")
    ad_group_name: str | None = Field(None, description="Ad group of the blocked positives")
    shared_list_name: str | None = Field(None, description="Shared list holding the negative")

    @property
    def blocked_positives_joined(self) -> str:
        return ", ".join(self.blocked_positive_display_texts)

    def to_row(self) -> list[str]:
        """Render as [negative, location, blocked positives]."""
        return [
            self.negative_display_text,
            self.location_description,
            self.blocked_positives_joined,
        ]


def ad_group_location(ad_group_name: str, campaign_name: str) -> str:
    return f"Ad Group: {ad_group_name} (Campaign: {campaign_name})"


def campaign_location(campaign_name: str) -> str:
    return f"Campaign: {campaign_name}"


def shared_list_location(list_name: str, campaign_name: str) -> str:
    return f"Shared List: {list_name} (Applied to Campaign: {campaign_name})"
