"""Tests for the GoogleAdsDataProvider."""

from unittest.mock import MagicMock, Mock, patch

import pytest
from google.ads.googleads.errors import GoogleAdsException

from negative_conflict_finder.core.config import GoogleAdsConfig, Settings
from negative_conflict_finder.core.exceptions import (
    APIError,
    AuthenticationError,
    ConfigurationError,
    RateLimitError,
)
from negative_conflict_finder.data_providers.base import has_label
from negative_conflict_finder.data_providers.google_ads import GoogleAdsDataProvider


def make_google_ads_exception(error_code: str, message: str) -> GoogleAdsException:
    """Create a GoogleAdsException carrying a single error."""
    exception = GoogleAdsException(None, None, None, None)
    exception.failure = MagicMock()
    error = MagicMock()
    error.error_code = error_code
    error.message = message
    exception.failure.errors = [error]
    return exception


class TestGoogleAdsDataProvider:
    """Test the Google Ads data provider implementation."""

    @pytest.fixture
    def ga_service(self):
        """Mock GoogleAdsService."""
        return Mock()

    @pytest.fixture
    def provider(self, ga_service):
        """Create a provider with a mocked Google Ads client."""
        provider = GoogleAdsDataProvider(
            developer_token="dev-token",
            client_id="client-id",
            client_secret="client-secret",
            refresh_token="refresh-token",
            login_customer_id="9998887777",
        )
        client = Mock()
        client.get_service.return_value = ga_service
        provider._client = client
        return provider

    @pytest.mark.asyncio
    async def test_fetch_ad_group_keywords_converts_rows(self, provider, ga_service):
        row = MagicMock()
        row.campaign.id = 111
        row.campaign.name = "Brand"
        row.ad_group.id = 222
        row.ad_group.name = "Shoes"
        row.ad_group_criterion.keyword.text = "running shoes"
        row.ad_group_criterion.keyword.match_type.name = "PHRASE"
        row.ad_group_criterion.negative = False
        row.ad_group_criterion.status.name = "ENABLED"
        ga_service.search.return_value = [row]

        records = await provider.fetch_ad_group_keywords("123-456-7890")

        assert records == [
            {
                "campaign": {"id": "111", "name": "Brand"},
                "ad_group": {"id": "222", "name": "Shoes"},
                "ad_group_criterion": {
                    "keyword": {"text": "running shoes", "match_type": "PHRASE"},
                    "negative": False,
                    "status": "ENABLED",
                },
            }
        ]
        kwargs = ga_service.search.call_args.kwargs
        assert kwargs["customer_id"] == "1234567890"
        assert "FROM keyword_view" in kwargs["query"]
        assert "ad_group_criterion.status = 'ENABLED'" in kwargs["query"]

    @pytest.mark.asyncio
    async def test_fetch_campaign_negatives(self, provider, ga_service):
        row = MagicMock()
        row.campaign.id = 111
        row.campaign_criterion.keyword.text = "cheap"
        row.campaign_criterion.keyword.match_type.name = "BROAD"
        ga_service.search.return_value = [row]

        records = await provider.fetch_campaign_negatives("1234567890")

        assert records == [
            {
                "campaign": {"id": "111"},
                "campaign_criterion": {"keyword": {"text": "cheap", "match_type": "BROAD"}},
            }
        ]
        assert "campaign_criterion.negative = TRUE" in ga_service.search.call_args.kwargs["query"]

    @pytest.mark.asyncio
    async def test_fetch_shared_list_keywords(self, provider, ga_service):
        row = MagicMock()
        row.shared_set.id = 55
        row.shared_set.name = "Brand Negatives"
        row.shared_criterion.keyword.text = "free"
        row.shared_criterion.keyword.match_type.name = "EXACT"
        ga_service.search.return_value = [row]

        records = await provider.fetch_shared_list_keywords("1234567890")

        assert records[0]["shared_set"] == {"id": "55", "name": "Brand Negatives"}
        assert "shared_set.type = 'NEGATIVE_KEYWORDS'" in ga_service.search.call_args.kwargs["query"]

    @pytest.mark.asyncio
    async def test_fetch_campaign_shared_sets(self, provider, ga_service):
        row = MagicMock()
        row.campaign.id = 111
        row.campaign_shared_set.shared_set = "customers/1234567890/sharedSets/55"
        ga_service.search.return_value = [row]

        records = await provider.fetch_campaign_shared_sets("1234567890")

        assert records == [
            {
                "campaign": {"id": "111"},
                "campaign_shared_set": {"shared_set": "customers/1234567890/sharedSets/55"},
            }
        ]

    @pytest.mark.asyncio
    async def test_fetch_account_negatives(self, provider, ga_service):
        row = MagicMock()
        row.customer_negative_criterion.keyword.text = "jobs"
        row.customer_negative_criterion.keyword.match_type.name = "BROAD"
        ga_service.search.return_value = [row]

        records = await provider.fetch_account_negatives("1234567890")

        assert records == [
            {"customer_negative_criterion": {"keyword": {"text": "jobs", "match_type": "BROAD"}}}
        ]
        assert "FROM customer_negative_criterion" in ga_service.search.call_args.kwargs["query"]

    @pytest.mark.asyncio
    async def test_invalid_customer_id(self, provider, ga_service):
        with pytest.raises(ValueError, match="Invalid customer ID format"):
            await provider.fetch_ad_group_keywords("12-34")

        ga_service.search.assert_not_called()

    @pytest.mark.asyncio
    async def test_list_accounts_resolves_labels(self, provider, ga_service):
        label_row = MagicMock()
        label_row.label.resource_name = "customers/9998887777/labels/1"
        label_row.label.name = "CM - Search"

        labeled = MagicMock()
        labeled.customer_client.id = 1111111111
        labeled.customer_client.descriptive_name = "Store A"
        labeled.customer_client.applied_labels = ["customers/9998887777/labels/1"]

        unlabeled = MagicMock()
        unlabeled.customer_client.id = 2222222222
        unlabeled.customer_client.descriptive_name = ""
        unlabeled.customer_client.applied_labels = []

        ga_service.search.side_effect = [[label_row], [labeled, unlabeled]]

        all_accounts = await provider.list_accounts()
        assert [a.customer_id for a in all_accounts] == ["1111111111", "2222222222"]
        assert all_accounts[0].labels == ["CM - Search"]
        assert all_accounts[1].display_name == "Account ID: 2222222222"

        ga_service.search.side_effect = [[label_row], [labeled, unlabeled]]
        filtered = await provider.list_accounts(has_label("CM - Search"))
        assert [a.descriptive_name for a in filtered] == ["Store A"]

    @pytest.mark.asyncio
    async def test_list_accounts_requires_login_customer_id(self, provider):
        provider.login_customer_id = None

        with pytest.raises(ValueError, match="login"):
            await provider.list_accounts()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error_code,expected",
        [
            ("AUTHENTICATION_ERROR", AuthenticationError),
            ("RATE_EXCEEDED", RateLimitError),
            ("INTERNAL_ERROR", APIError),
        ],
    )
    async def test_google_ads_exception_mapping(self, provider, ga_service, error_code, expected):
        ga_service.search.side_effect = make_google_ads_exception(error_code, "went wrong")

        with pytest.raises(expected, match="went wrong"):
            await provider.fetch_account_negatives("1234567890")

    def test_client_initialization_failure(self):
        provider = GoogleAdsDataProvider("dev", "id", "secret", "refresh")

        with patch(
            "negative_conflict_finder.data_providers.google_ads.GoogleAdsClient"
        ) as mock_client_class:
            mock_client_class.load_from_dict.side_effect = ValueError("bad credentials")

            with pytest.raises(AuthenticationError, match="bad credentials"):
                provider._get_client()

    def test_client_created_once_with_login_customer_id(self):
        provider = GoogleAdsDataProvider("dev", "id", "secret", "refresh", "9998887777")

        with patch(
            "negative_conflict_finder.data_providers.google_ads.GoogleAdsClient"
        ) as mock_client_class:
            first = provider._get_client()
            second = provider._get_client()

        assert first is second
        credentials = mock_client_class.load_from_dict.call_args.args[0]
        assert credentials["login_customer_id"] == "9998887777"
        assert credentials["use_proto_plus"] is True


class TestFromSettings:
    """Test building the provider from settings."""

    def test_from_settings(self):
        settings = Settings(
            google_ads=GoogleAdsConfig(
                developer_token="dev",
                client_id="id",
                client_secret="secret",
                refresh_token="refresh",
                login_customer_id="999-888-7777",
            )
        )

        provider = GoogleAdsDataProvider.from_settings(settings)

        assert provider.developer_token == "dev"
        assert provider.client_secret == "secret"
        assert provider.login_customer_id == "9998887777"

    def test_from_settings_without_credentials(self):
        with pytest.raises(ConfigurationError, match="NCF_GOOGLE_ADS__DEVELOPER_TOKEN"):
            GoogleAdsDataProvider.from_settings(Settings(google_ads=None))
