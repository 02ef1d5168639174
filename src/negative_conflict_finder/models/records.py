"""Typed adapters for records returned by a keyword data source.

Data sources return nested dictionaries shaped like Google Ads query rows
(``{"campaign": {"id": ...}, "ad_group_criterion": {"keyword": {...}}}``).
These adapters validate and convert them at the fetch boundary so raw
records never travel past the index builder. Every field is optional:
an absent nested field simply comes back as ``None``.
"""

import re
from typing import Any

from pydantic import Field, field_validator

from negative_conflict_finder.models.base import SourceRecord

SHARED_SET_RESOURCE_PATTERN = re.compile(r"sharedSets/(\d+)$")


def _id_to_str(v: Any) -> str | None:
    if v is None or v == "":
        return None
    if isinstance(v, bool):
        raise ValueError("id must be a string or integer")
    if isinstance(v, (int, str)):
        return str(v)
    raise ValueError(f"id must be a string or integer, got {type(v).__name__}")


class KeywordInfo(SourceRecord):
    text: str | None = None
    match_type: str | None = None


class Criterion(SourceRecord):
    """Keyword criterion at ad group, campaign, shared set or customer scope."""

    keyword: KeywordInfo | None = None
    # Kept untyped: anything other than a real bool is reported by the builder
    negative: Any = None
    status: str | None = None

    @property
    def text(self) -> str | None:
        return self.keyword.text if self.keyword else None

    @property
    def match_type(self) -> str | None:
        return self.keyword.match_type if self.keyword else None


class NamedResource(SourceRecord):
    """Campaign, ad group or shared set identity."""

    id: str | None = None
    name: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str | None:
        return _id_to_str(v)


class CampaignSharedSet(SourceRecord):
    shared_set: str | None = Field(
        None, description="Opaque resource name, e.g. customers/1/sharedSets/2"
    )


class AdGroupKeywordRow(SourceRecord):
    """Ad group keyword criterion (positive or negative) with its owners."""

    campaign: NamedResource | None = None
    ad_group: NamedResource | None = None
    ad_group_criterion: Criterion | None = None

    @property
    def campaign_id(self) -> str | None:
        return self.campaign.id if self.campaign else None

    @property
    def campaign_name(self) -> str | None:
        return self.campaign.name if self.campaign else None

    @property
    def ad_group_id(self) -> str | None:
        return self.ad_group.id if self.ad_group else None

    @property
    def ad_group_name(self) -> str | None:
        return self.ad_group.name if self.ad_group else None

    @property
    def criterion(self) -> Criterion:
        return self.ad_group_criterion or Criterion()


class CampaignNegativeRow(SourceRecord):
    """Campaign level negative keyword criterion."""

    campaign: NamedResource | None = None
    campaign_criterion: Criterion | None = None

    @property
    def campaign_id(self) -> str | None:
        return self.campaign.id if self.campaign else None

    @property
    def criterion(self) -> Criterion:
        return self.campaign_criterion or Criterion()


class SharedListKeywordRow(SourceRecord):
    """Keyword belonging to a shared negative keyword list."""

    shared_set: NamedResource | None = None
    shared_criterion: Criterion | None = None

    @property
    def list_id(self) -> str | None:
        return self.shared_set.id if self.shared_set else None

    @property
    def list_name(self) -> str | None:
        return self.shared_set.name if self.shared_set else None

    @property
    def criterion(self) -> Criterion:
        return self.shared_criterion or Criterion()


class CampaignSharedSetRow(SourceRecord):
    """Association between a campaign and a shared negative list."""

    campaign: NamedResource | None = None
    campaign_shared_set: CampaignSharedSet | None = None

    @property
    def campaign_id(self) -> str | None:
        return self.campaign.id if self.campaign else None

    @property
    def shared_set_resource_name(self) -> str | None:
        if self.campaign_shared_set is None:
            return None
        return self.campaign_shared_set.shared_set

    @property
    def list_id(self) -> str | None:
        """Trailing numeric shared set ID of the resource name, if it has one."""
        resource_name = self.shared_set_resource_name
        if not resource_name:
            return None
        match = SHARED_SET_RESOURCE_PATTERN.search(resource_name)
        return match.group(1) if match else None


class AccountNegativeRow(SourceRecord):
    """Account (customer) level negative keyword criterion."""

    customer_negative_criterion: Criterion | None = None

    @property
    def criterion(self) -> Criterion:
        return self.customer_negative_criterion or Criterion()
