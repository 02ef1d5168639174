"""Base interfaces for keyword data sources and account enumeration."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from negative_conflict_finder.models.account import AccountContext

LabelPredicate = Callable[[list[str]], bool]


def has_label(label_name: str) -> LabelPredicate:
    """Build a predicate matching accounts that carry the given label."""

    def predicate(labels: list[str]) -> bool:
        return label_name in labels

    return predicate


class KeywordDataProvider(ABC):
    """Interface for sources of keyword criteria for a single account.

    Each method performs one fetch and returns records shaped like Google Ads
    query rows, keyed by snake_case resource name. Records may be missing any
    nested field; the index builder validates them.
    """

    @abstractmethod
    async def fetch_ad_group_keywords(self, customer_id: str) -> list[dict[str, Any]]:
        """Fetch ad group keyword criteria, positive and negative.

        Records carry: campaign.id/name, ad_group.id/name,
        ad_group_criterion.keyword.text/match_type, ad_group_criterion.negative
        and ad_group_criterion.status.
        """
        pass

    @abstractmethod
    async def fetch_campaign_negatives(self, customer_id: str) -> list[dict[str, Any]]:
        """Fetch campaign level negative keywords.

        Records carry: campaign.id, campaign_criterion.keyword.text/match_type.
        """
        pass

    @abstractmethod
    async def fetch_shared_list_keywords(self, customer_id: str) -> list[dict[str, Any]]:
        """Fetch keywords of shared negative keyword lists.

        Records carry: shared_set.id/name, shared_criterion.keyword.text/match_type.
        """
        pass

    @abstractmethod
    async def fetch_campaign_shared_sets(self, customer_id: str) -> list[dict[str, Any]]:
        """Fetch campaign to shared negative list associations.

        Records carry: campaign.id and campaign_shared_set.shared_set, the
        shared set resource name (``customers/<id>/sharedSets/<id>``).
        """
        pass

    @abstractmethod
    async def fetch_account_negatives(self, customer_id: str) -> list[dict[str, Any]]:
        """Fetch account level negative keywords.

        Records carry: customer_negative_criterion.keyword.text/match_type.
        """
        pass


class AccountEnumerator(ABC):
    """Interface for listing the accounts a multi-account run covers."""

    @abstractmethod
    async def list_accounts(
        self, label_predicate: LabelPredicate | None = None
    ) -> list[AccountContext]:
        """List client accounts whose label names satisfy the predicate.

        Args:
            label_predicate: Called with an account's label names; None selects all

        Returns:
            Accounts to analyze, each an independent unit of work
        """
        pass
