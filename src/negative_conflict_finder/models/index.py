"""Per-account keyword index models.

The index is built once per account by the keyword index builder and is
read-only afterwards. Campaigns reference shared lists by id only; a shared
list never knows which campaigns use it.
"""

from pydantic import Field

from negative_conflict_finder.models.base import BaseNCFModel
from negative_conflict_finder.models.keyword import NormalizedKeyword


class AdGroupEntry(BaseNCFModel):
    """Keywords of a single ad group."""

    name: str = Field(default="", description="Ad group name")
    positives: list[NormalizedKeyword] = Field(default_factory=list)
    negatives: list[NormalizedKeyword] = Field(default_factory=list)


class SharedListRef(BaseNCFModel):
    """Non-owning reference from a campaign to a shared negative list."""

    list_id: str = Field(..., description="Shared set ID")
    list_name: str = Field(default="", description="Shared set name cached for reporting")


class CampaignEntry(BaseNCFModel):
    """Ad groups, campaign negatives and shared list associations of a campaign."""

    name: str = Field(default="", description="Campaign name")
    ad_groups: dict[str, AdGroupEntry] = Field(default_factory=dict)
    negatives: list[NormalizedKeyword] = Field(default_factory=list)
    shared_list_refs: list[SharedListRef] = Field(default_factory=list)

    def has_shared_list(self, list_id: str) -> bool:
        """Check whether the campaign already references a shared list."""
        return any(ref.list_id == list_id for ref in self.shared_list_refs)


class SharedListEntry(BaseNCFModel):
    """A shared negative keyword list."""

    name: str = Field(default="", description="Shared set name")
    negatives: list[NormalizedKeyword] = Field(default_factory=list)


class KeywordIndex(BaseNCFModel):
    """Everything the conflict analyzer needs for one account."""

    campaigns: dict[str, CampaignEntry] = Field(default_factory=dict)
    shared_lists: dict[str, SharedListEntry] = Field(default_factory=dict)
    account_negatives: list[NormalizedKeyword] = Field(default_factory=list)

    def get_or_create_campaign(self, campaign_id: str, name: str | None) -> CampaignEntry:
        """Return the campaign entry, creating it on first sight."""
        campaign = self.campaigns.get(campaign_id)
        if campaign is None:
            campaign = CampaignEntry(name=name or "")
            self.campaigns[campaign_id] = campaign
        return campaign

    def get_or_create_ad_group(
        self,
        campaign_id: str,
        campaign_name: str | None,
        ad_group_id: str,
        ad_group_name: str | None,
    ) -> AdGroupEntry:
        """Return the ad group entry, creating it and its campaign on first sight."""
        campaign = self.get_or_create_campaign(campaign_id, campaign_name)
        ad_group = campaign.ad_groups.get(ad_group_id)
        if ad_group is None:
            ad_group = AdGroupEntry(name=ad_group_name or "")
            campaign.ad_groups[ad_group_id] = ad_group
        return ad_group

    def get_or_create_shared_list(self, list_id: str, name: str | None) -> SharedListEntry:
        """Return the shared list entry, creating it on first sight."""
        shared_list = self.shared_lists.get(list_id)
        if shared_list is None:
            shared_list = SharedListEntry(name=name or "")
            self.shared_lists[list_id] = shared_list
        return shared_list

    def add_shared_list_ref(self, campaign_id: str, list_id: str) -> bool:
        """Associate a known shared list with a known campaign.

        Returns:
            True if a new association was added, False if it already existed
        """
        campaign = self.campaigns[campaign_id]
        if campaign.has_shared_list(list_id):
            return False
        campaign.shared_list_refs.append(
            SharedListRef(list_id=list_id, list_name=self.shared_lists[list_id].name)
        )
        return True

    def resolve_shared_list(self, ref: SharedListRef) -> SharedListEntry | None:
        """Look up the shared list a campaign reference points to."""
        return self.shared_lists.get(ref.list_id)

    @property
    def ad_group_count(self) -> int:
        return sum(len(c.ad_groups) for c in self.campaigns.values())

    @property
    def positive_count(self) -> int:
        return sum(
            len(ag.positives)
            for c in self.campaigns.values()
            for ag in c.ad_groups.values()
        )

    @property
    def negative_count(self) -> int:
        ad_group_negatives = sum(
            len(ag.negatives)
            for c in self.campaigns.values()
            for ag in c.ad_groups.values()
        )
        campaign_negatives = sum(len(c.negatives) for c in self.campaigns.values())
        shared_negatives = sum(len(s.negatives) for s in self.shared_lists.values())
        return (
            ad_group_negatives
            + campaign_negatives
            + shared_negatives
            + len(self.account_negatives)
        )
