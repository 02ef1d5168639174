"""Google Ads data provider implementation."""

import asyncio
import logging
from typing import Any

from google.ads.googleads.client import GoogleAdsClient  # type: ignore[import-untyped]
from google.ads.googleads.errors import (
    GoogleAdsException,  # type: ignore[import-untyped]
)

from negative_conflict_finder.core.config import Settings
from negative_conflict_finder.core.exceptions import (
    APIError,
    AuthenticationError,
    RateLimitError,
)
from negative_conflict_finder.data_providers.base import (
    AccountEnumerator,
    KeywordDataProvider,
    LabelPredicate,
)
from negative_conflict_finder.models.account import AccountContext
from negative_conflict_finder.utils.validation import validate_customer_id

logger = logging.getLogger(__name__)

AD_GROUP_KEYWORDS_QUERY = """
    SELECT
        campaign.id,
        campaign.name,
        ad_group.id,
        ad_group.name,
        ad_group_criterion.keyword.text,
        ad_group_criterion.keyword.match_type,
        ad_group_criterion.negative,
        ad_group_criterion.status
    FROM keyword_view
    WHERE campaign.status = 'ENABLED'
        AND ad_group.status = 'ENABLED'
        AND ad_group_criterion.status = 'ENABLED'
        AND ad_group_criterion.type = 'KEYWORD'
""".strip()

CAMPAIGN_NEGATIVES_QUERY = """
    SELECT
        campaign.id,
        campaign_criterion.keyword.text,
        campaign_criterion.keyword.match_type
    FROM campaign_criterion
    WHERE campaign_criterion.negative = TRUE
        AND campaign_criterion.type = 'KEYWORD'
        AND campaign.status = 'ENABLED'
        AND campaign_criterion.status = 'ENABLED'
""".strip()

SHARED_LIST_KEYWORDS_QUERY = """
    SELECT
        shared_set.id,
        shared_set.name,
        shared_criterion.keyword.text,
        shared_criterion.keyword.match_type
    FROM shared_criterion
    WHERE shared_set.type = 'NEGATIVE_KEYWORDS'
        AND shared_set.status = 'ENABLED'
        AND shared_criterion.type = 'KEYWORD'
""".strip()

CAMPAIGN_SHARED_SETS_QUERY = """
    SELECT
        campaign.id,
        campaign_shared_set.shared_set
    FROM campaign_shared_set
    WHERE campaign_shared_set.status = 'ENABLED'
        AND campaign.status = 'ENABLED'
        AND shared_set.type = 'NEGATIVE_KEYWORDS'
        AND shared_set.status = 'ENABLED'
""".strip()

ACCOUNT_NEGATIVES_QUERY = """
    SELECT
        customer_negative_criterion.keyword.text,
        customer_negative_criterion.keyword.match_type
    FROM customer_negative_criterion
    WHERE customer_negative_criterion.type = 'KEYWORD'
""".strip()

CLIENT_ACCOUNTS_QUERY = """
    SELECT
        customer_client.id,
        customer_client.descriptive_name,
        customer_client.applied_labels
    FROM customer_client
    WHERE customer_client.manager = FALSE
        AND customer_client.status = 'ENABLED'
""".strip()

LABELS_QUERY = """
    SELECT
        label.resource_name,
        label.name
    FROM label
""".strip()


def _keyword_dict(criterion: Any) -> dict[str, Any]:
    return {
        "text": criterion.keyword.text,
        "match_type": criterion.keyword.match_type.name,
    }


class GoogleAdsDataProvider(KeywordDataProvider, AccountEnumerator):
    """Keyword data provider and account enumerator for the Google Ads API.

    Each fetch runs one GAQL query through GoogleAdsService.search in the
    default executor and converts the returned rows into plain dictionaries.
    """

    def __init__(
        self,
        developer_token: str,
        client_id: str,
        client_secret: str,
        refresh_token: str,
        login_customer_id: str | None = None,
    ):
        """Initialize the Google Ads data provider.

        Args:
            developer_token: Google Ads API developer token
            client_id: OAuth2 client ID
            client_secret: OAuth2 client secret
            refresh_token: OAuth2 refresh token
            login_customer_id: Manager account ID (required for account enumeration)
        """
        self.developer_token = developer_token
        self.client_id = client_id
        self.client_secret = client_secret
        self.refresh_token = refresh_token
        self.login_customer_id = login_customer_id
        self._client: GoogleAdsClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "GoogleAdsDataProvider":
        """Create a provider from application settings."""
        settings.validate_required_settings()
        config = settings.google_ads
        return cls(
            developer_token=config.developer_token.get_secret_value(),
            client_id=config.client_id,
            client_secret=config.client_secret.get_secret_value(),
            refresh_token=config.refresh_token.get_secret_value(),
            login_customer_id=config.login_customer_id,
        )

    def _get_client(self) -> GoogleAdsClient:
        """Get or create Google Ads client instance."""
        if self._client is None:
            credentials = {
                "developer_token": self.developer_token,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "refresh_token": self.refresh_token,
                "use_proto_plus": True,
            }

            if self.login_customer_id:
                credentials["login_customer_id"] = self.login_customer_id

            try:
                self._client = GoogleAdsClient.load_from_dict(credentials)
            except Exception as ex:
                logger.error(f"Failed to initialize Google Ads client: {ex}")
                raise AuthenticationError(
                    f"Failed to authenticate with Google Ads API: {str(ex)}"
                ) from ex

        return self._client

    async def _search(self, customer_id: str, query: str) -> list[Any]:
        """Run a GAQL query and return all result rows.

        Raises:
            AuthenticationError: For authentication failures
            RateLimitError: For rate limit errors
            APIError: For other API errors
        """
        customer_id = validate_customer_id(customer_id)
        ga_service = self._get_client().get_service("GoogleAdsService")

        try:
            return await asyncio.get_running_loop().run_in_executor(
                None,
                lambda: list(ga_service.search(customer_id=customer_id, query=query)),
            )
        except GoogleAdsException as e:
            self._handle_google_ads_exception(e)

    async def fetch_ad_group_keywords(self, customer_id: str) -> list[dict[str, Any]]:
        """Fetch enabled ad group keyword criteria from Google Ads."""
        rows = await self._search(customer_id, AD_GROUP_KEYWORDS_QUERY)
        records = []
        for row in rows:
            criterion = row.ad_group_criterion
            records.append(
                {
                    "campaign": {"id": str(row.campaign.id), "name": row.campaign.name},
                    "ad_group": {"id": str(row.ad_group.id), "name": row.ad_group.name},
                    "ad_group_criterion": {
                        "keyword": _keyword_dict(criterion),
                        "negative": criterion.negative,
                        "status": criterion.status.name,
                    },
                }
            )
        logger.info(f"Fetched {len(records)} ad group keywords for customer {customer_id}")
        return records

    async def fetch_campaign_negatives(self, customer_id: str) -> list[dict[str, Any]]:
        """Fetch campaign level negative keywords from Google Ads."""
        rows = await self._search(customer_id, CAMPAIGN_NEGATIVES_QUERY)
        records = [
            {
                "campaign": {"id": str(row.campaign.id)},
                "campaign_criterion": {"keyword": _keyword_dict(row.campaign_criterion)},
            }
            for row in rows
        ]
        logger.info(
            f"Fetched {len(records)} campaign negative keywords for customer {customer_id}"
        )
        return records

    async def fetch_shared_list_keywords(self, customer_id: str) -> list[dict[str, Any]]:
        """Fetch keywords of enabled shared negative lists from Google Ads."""
        rows = await self._search(customer_id, SHARED_LIST_KEYWORDS_QUERY)
        records = [
            {
                "shared_set": {"id": str(row.shared_set.id), "name": row.shared_set.name},
                "shared_criterion": {"keyword": _keyword_dict(row.shared_criterion)},
            }
            for row in rows
        ]
        logger.info(
            f"Fetched {len(records)} shared list keywords for customer {customer_id}"
        )
        return records

    async def fetch_campaign_shared_sets(self, customer_id: str) -> list[dict[str, Any]]:
        """Fetch campaign to shared negative list associations from Google Ads."""
        rows = await self._search(customer_id, CAMPAIGN_SHARED_SETS_QUERY)
        records = [
            {
                "campaign": {"id": str(row.campaign.id)},
                "campaign_shared_set": {"shared_set": row.campaign_shared_set.shared_set},
            }
            for row in rows
        ]
        logger.info(
            f"Fetched {len(records)} shared list associations for customer {customer_id}"
        )
        return records

    async def fetch_account_negatives(self, customer_id: str) -> list[dict[str, Any]]:
        """Fetch account level negative keywords from Google Ads."""
        rows = await self._search(customer_id, ACCOUNT_NEGATIVES_QUERY)
        records = [
            {
                "customer_negative_criterion": {
                    "keyword": _keyword_dict(row.customer_negative_criterion)
                }
            }
            for row in rows
        ]
        logger.info(
            f"Fetched {len(records)} account negative keywords for customer {customer_id}"
        )
        return records

    async def list_accounts(
        self, label_predicate: LabelPredicate | None = None
    ) -> list[AccountContext]:
        """List enabled client accounts under the login (manager) account.

        Raises:
            ValueError: If no login customer ID is configured
        """
        if not self.login_customer_id:
            raise ValueError("A login (manager) customer ID is required to list accounts")

        label_rows = await self._search(self.login_customer_id, LABELS_QUERY)
        label_names = {row.label.resource_name: row.label.name for row in label_rows}

        client_rows = await self._search(self.login_customer_id, CLIENT_ACCOUNTS_QUERY)
        accounts = []
        for row in client_rows:
            client = row.customer_client
            labels = [
                label_names[resource_name]
                for resource_name in client.applied_labels
                if resource_name in label_names
            ]
            if label_predicate is not None and not label_predicate(labels):
                continue
            accounts.append(
                AccountContext(
                    customer_id=str(client.id),
                    descriptive_name=client.descriptive_name or None,
                    labels=labels,
                )
            )

        logger.info(
            f"Found {len(accounts)} matching client accounts under {self.login_customer_id}"
        )
        return accounts

    def _handle_google_ads_exception(self, exception: GoogleAdsException) -> None:
        """Handle Google Ads API exceptions.

        Args:
            exception: The GoogleAdsException to handle

        Raises:
            AuthenticationError: For authentication failures
            RateLimitError: For rate limit errors
            APIError: For other API errors
        """
        error_messages = []

        for error in exception.failure.errors:
            error_messages.append(f"{error.error_code}: {error.message}")

            # Check for specific error types
            if "AUTHENTICATION" in str(error.error_code):
                raise AuthenticationError(f"Authentication failed: {error.message}")
            elif "RATE_EXCEEDED" in str(error.error_code):
                raise RateLimitError(f"Rate limit exceeded: {error.message}")

        full_message = "; ".join(error_messages)
        logger.error(f"Google Ads API error: {full_message}")
        raise APIError(f"Google Ads API error: {full_message}")
