"""In-memory data provider for testing and local runs."""

import copy
from typing import Any

from negative_conflict_finder.data_providers.base import (
    AccountEnumerator,
    KeywordDataProvider,
    LabelPredicate,
)
from negative_conflict_finder.models.account import AccountContext

FETCH_NAMES = (
    "ad_group_keywords",
    "campaign_negatives",
    "shared_list_keywords",
    "campaign_shared_sets",
    "account_negatives",
)


class StaticDataProvider(KeywordDataProvider, AccountEnumerator):
    """Data provider that serves predefined records.

    Records are keyed by customer ID and fetch name (see ``FETCH_NAMES``).
    Any fetch listed in ``failures`` raises the configured exception instead,
    which lets tests exercise fetch-level failure handling.
    """

    def __init__(
        self,
        records: dict[str, dict[str, list[dict[str, Any]]]] | None = None,
        accounts: list[AccountContext] | None = None,
        failures: dict[str, dict[str, Exception]] | None = None,
    ):
        """Initialize the static data provider.

        Args:
            records: customer ID -> fetch name -> records
            accounts: Accounts returned by list_accounts
            failures: customer ID -> fetch name -> exception to raise
        """
        self.records = records or {}
        self.accounts = accounts or []
        self.failures = failures or {}
        self.calls: list[tuple[str, str]] = []

    def _serve(self, customer_id: str, fetch_name: str) -> list[dict[str, Any]]:
        self.calls.append((customer_id, fetch_name))

        failure = self.failures.get(customer_id, {}).get(fetch_name)
        if failure is not None:
            raise failure

        # Callers get copies so one run can never alter the next
        return copy.deepcopy(self.records.get(customer_id, {}).get(fetch_name, []))

    async def fetch_ad_group_keywords(self, customer_id: str) -> list[dict[str, Any]]:
        return self._serve(customer_id, "ad_group_keywords")

    async def fetch_campaign_negatives(self, customer_id: str) -> list[dict[str, Any]]:
        return self._serve(customer_id, "campaign_negatives")

    async def fetch_shared_list_keywords(self, customer_id: str) -> list[dict[str, Any]]:
        return self._serve(customer_id, "shared_list_keywords")

    async def fetch_campaign_shared_sets(self, customer_id: str) -> list[dict[str, Any]]:
        return self._serve(customer_id, "campaign_shared_sets")

    async def fetch_account_negatives(self, customer_id: str) -> list[dict[str, Any]]:
        return self._serve(customer_id, "account_negatives")

    async def list_accounts(
        self, label_predicate: LabelPredicate | None = None
    ) -> list[AccountContext]:
        """Return the configured accounts whose labels satisfy the predicate."""
        if label_predicate is None:
            return list(self.accounts)
        return [account for account in self.accounts if label_predicate(account.labels)]


def ad_group_keyword_record(
    campaign_id: str,
    campaign_name: str,
    ad_group_id: str,
    ad_group_name: str,
    text: str,
    match_type: str,
    negative: Any = False,
    status: str = "ENABLED",
) -> dict[str, Any]:
    """Build an ad group keyword record in the shape data providers return."""
    return {
        "campaign": {"id": campaign_id, "name": campaign_name},
        "ad_group": {"id": ad_group_id, "name": ad_group_name},
        "ad_group_criterion": {
            "keyword": {"text": text, "match_type": match_type},
            "negative": negative,
            "status": status,
        },
    }


def campaign_negative_record(campaign_id: str, text: str, match_type: str) -> dict[str, Any]:
    """Build a campaign negative keyword record."""
    return {
        "campaign": {"id": campaign_id},
        "campaign_criterion": {"keyword": {"text": text, "match_type": match_type}},
    }


def shared_list_keyword_record(
    list_id: str, list_name: str, text: str, match_type: str
) -> dict[str, Any]:
    """Build a shared negative list keyword record."""
    return {
        "shared_set": {"id": list_id, "name": list_name},
        "shared_criterion": {"keyword": {"text": text, "match_type": match_type}},
    }


def campaign_shared_set_record(
    campaign_id: str, list_id: str, customer_id: str = "1234567890"
) -> dict[str, Any]:
    """Build a campaign to shared list association record."""
    return {
        "campaign": {"id": campaign_id},
        "campaign_shared_set": {
            "shared_set": f"customers/{customer_id}/sharedSets/{list_id}"
        },
    }


def account_negative_record(text: str, match_type: str) -> dict[str, Any]:
    """Build an account level negative keyword record."""
    return {
        "customer_negative_criterion": {
            "keyword": {"text": text, "match_type": match_type}
        }
    }
