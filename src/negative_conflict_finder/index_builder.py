"""Keyword index builder.

Fetches an account's keyword criteria from a data provider and assembles the
per-account KeywordIndex the conflict analyzer walks. Raw records are
validated through the adapters in ``models.records`` and normalized
immediately; nothing untyped leaves this module.
"""

import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from pydantic import ValidationError

from negative_conflict_finder.core.exceptions import DataError
from negative_conflict_finder.data_providers.base import KeywordDataProvider
from negative_conflict_finder.models.base import SourceRecord
from negative_conflict_finder.models.index import KeywordIndex
from negative_conflict_finder.models.keyword import (
    NormalizedKeyword,
    UnknownMatchTypePolicy,
)
from negative_conflict_finder.models.records import (
    AccountNegativeRow,
    AdGroupKeywordRow,
    CampaignNegativeRow,
    CampaignSharedSetRow,
    Criterion,
    SharedListKeywordRow,
)
from negative_conflict_finder.utils.normalization import normalize_keyword

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=SourceRecord)
Fetch = Callable[[str], Awaitable[list[dict[str, Any]]]]


class KeywordIndexBuilder:
    """Build the keyword index for one account.

    Fetches run sequentially in a fixed order: ad group keywords, campaign
    negatives, shared list keywords, campaign/shared list associations and
    account negatives. Only a failure of the ad group keyword fetch aborts the
    build; any other failing fetch contributes no data.
    """

    def __init__(
        self,
        provider: KeywordDataProvider,
        unknown_match_type_policy: UnknownMatchTypePolicy = UnknownMatchTypePolicy.SKIP,
        progress_interval: int = 1000,
    ):
        """Initialize the builder.

        Args:
            provider: Source of keyword criteria
            unknown_match_type_policy: Passed to the normalizer for every keyword
            progress_interval: Log progress every N source rows
        """
        self.provider = provider
        self.unknown_match_type_policy = unknown_match_type_policy
        self.progress_interval = max(1, progress_interval)

    async def build_index(self, customer_id: str) -> KeywordIndex | None:
        """Build a fresh index for an account.

        Args:
            customer_id: Account to index

        Returns:
            The populated index, or None if ad group keywords could not be fetched
        """
        logger.info(f"Building keyword index for customer {customer_id}")
        start_time = time.perf_counter()
        index = KeywordIndex()

        rows = await self._fetch(
            "ad group keywords", self.provider.fetch_ad_group_keywords, customer_id
        )
        if rows is None:
            logger.error(
                f"Skipping customer {customer_id}: ad group keywords could not be fetched"
            )
            return None
        self._add_ad_group_keywords(index, rows)

        rows = await self._fetch(
            "campaign negatives", self.provider.fetch_campaign_negatives, customer_id
        )
        if rows:
            self._add_campaign_negatives(index, rows)

        rows = await self._fetch(
            "shared list keywords", self.provider.fetch_shared_list_keywords, customer_id
        )
        if rows:
            self._add_shared_list_keywords(index, rows)

        if index.shared_lists:
            rows = await self._fetch(
                "shared list associations",
                self.provider.fetch_campaign_shared_sets,
                customer_id,
            )
            if rows:
                self._add_shared_list_associations(index, rows)
        else:
            logger.debug(
                f"No shared negative lists indexed for customer {customer_id}; "
                "skipping association fetch"
            )

        rows = await self._fetch(
            "account negatives", self.provider.fetch_account_negatives, customer_id
        )
        if rows:
            self._add_account_negatives(index, rows)

        duration = time.perf_counter() - start_time
        logger.info(
            f"Keyword index for customer {customer_id} built in {duration:.2f}s: "
            f"{len(index.campaigns)} campaigns, {index.ad_group_count} ad groups, "
            f"{index.positive_count} positives, {index.negative_count} negatives, "
            f"{len(index.shared_lists)} shared lists"
        )
        return index

    async def _fetch(
        self, label: str, fetch: Fetch, customer_id: str
    ) -> list[dict[str, Any]] | None:
        """Run one fetch, returning None if it raised."""
        start_time = time.perf_counter()
        try:
            rows = await fetch(customer_id)
            if not isinstance(rows, list):
                raise DataError(f"expected a list of records, got {type(rows).__name__}")
        except Exception as e:
            logger.error(
                f"Failed to fetch {label} for customer {customer_id}: {e}",
                exc_info=True,
            )
            return None

        duration = time.perf_counter() - start_time
        logger.info(f"Fetched {len(rows)} {label} rows in {duration:.2f}s")
        return rows

    def _parse(
        self, model: type[RecordT], record: Any, label: str, row_number: int
    ) -> RecordT | None:
        """Validate one raw record, returning None for malformed ones."""
        if row_number % self.progress_interval == 0:
            logger.info(f"...processed {row_number} {label} rows")

        try:
            return model.model_validate(record)
        except ValidationError as e:
            logger.warning(
                f"Skipping malformed {label} row {row_number}: "
                f"{e.error_count()} validation error(s): {e.errors()[0]['msg']}"
            )
            return None

    def _normalize(self, criterion: Criterion, context: str) -> NormalizedKeyword | None:
        keyword = normalize_keyword(
            criterion.text, criterion.match_type, self.unknown_match_type_policy
        )
        if keyword is None:
            logger.debug(f"Skipped keyword {criterion.text!r} in {context}")
        return keyword

    def _add_ad_group_keywords(
        self, index: KeywordIndex, rows: list[dict[str, Any]]
    ) -> None:
        label = "ad group keywords"
        for row_number, record in enumerate(rows, start=1):
            row = self._parse(AdGroupKeywordRow, record, label, row_number)
            if row is None:
                continue

            if not row.campaign_id or not row.ad_group_id:
                logger.warning(
                    f"Skipping ad group keyword row {row_number}: "
                    "missing campaign or ad group ID"
                )
                continue

            criterion = row.criterion
            keyword = self._normalize(
                criterion, f"ad group {row.ad_group_id} (campaign {row.campaign_id})"
            )
            if keyword is None:
                continue

            ad_group = index.get_or_create_ad_group(
                row.campaign_id, row.campaign_name, row.ad_group_id, row.ad_group_name
            )

            if criterion.negative is True:
                ad_group.negatives.append(keyword)
            else:
                if criterion.negative is not False:
                    logger.warning(
                        f"Keyword {keyword.display_text!r} in ad group "
                        f"{row.ad_group_id} has a missing or non-boolean negative "
                        f"flag ({criterion.negative!r}); treating it as positive"
                    )
                ad_group.positives.append(keyword)

    def _add_campaign_negatives(
        self, index: KeywordIndex, rows: list[dict[str, Any]]
    ) -> None:
        label = "campaign negatives"
        added = 0
        for row_number, record in enumerate(rows, start=1):
            row = self._parse(CampaignNegativeRow, record, label, row_number)
            if row is None:
                continue

            if not row.campaign_id:
                logger.warning(f"Skipping campaign negative row {row_number}: missing campaign ID")
                continue

            campaign = index.campaigns.get(row.campaign_id)
            if campaign is None:
                logger.warning(
                    f"Dropping negative {row.criterion.text!r} for campaign "
                    f"{row.campaign_id}: campaign has no indexed ad groups"
                )
                continue

            keyword = self._normalize(row.criterion, f"campaign {row.campaign_id}")
            if keyword is None:
                continue
            campaign.negatives.append(keyword)
            added += 1

        logger.info(f"Added {added} campaign negatives")

    def _add_shared_list_keywords(
        self, index: KeywordIndex, rows: list[dict[str, Any]]
    ) -> None:
        label = "shared list keywords"
        for row_number, record in enumerate(rows, start=1):
            row = self._parse(SharedListKeywordRow, record, label, row_number)
            if row is None:
                continue

            if not row.list_id:
                logger.warning(
                    f"Skipping shared list keyword row {row_number}: missing shared set ID"
                )
                continue

            keyword = self._normalize(row.criterion, f"shared list {row.list_id}")
            if keyword is None:
                continue
            index.get_or_create_shared_list(row.list_id, row.list_name).negatives.append(
                keyword
            )

        logger.info(f"Indexed {len(index.shared_lists)} shared negative lists")

    def _add_shared_list_associations(
        self, index: KeywordIndex, rows: list[dict[str, Any]]
    ) -> None:
        label = "shared list associations"
        added = 0
        for row_number, record in enumerate(rows, start=1):
            row = self._parse(CampaignSharedSetRow, record, label, row_number)
            if row is None:
                continue

            list_id = row.list_id
            if list_id is None:
                logger.warning(
                    f"Dropping association row {row_number}: cannot extract a shared set "
                    f"ID from {row.shared_set_resource_name!r}"
                )
                continue

            if not row.campaign_id or row.campaign_id not in index.campaigns:
                logger.debug(
                    f"Dropping association of shared list {list_id}: campaign "
                    f"{row.campaign_id} is not in the index"
                )
                continue

            if list_id not in index.shared_lists:
                logger.debug(
                    f"Dropping association with campaign {row.campaign_id}: shared "
                    f"list {list_id} is not in the index"
                )
                continue

            if index.add_shared_list_ref(row.campaign_id, list_id):
                added += 1

        logger.info(f"Linked {added} shared lists to campaigns")

    def _add_account_negatives(
        self, index: KeywordIndex, rows: list[dict[str, Any]]
    ) -> None:
        label = "account negatives"
        for row_number, record in enumerate(rows, start=1):
            row = self._parse(AccountNegativeRow, record, label, row_number)
            if row is None:
                continue

            keyword = self._normalize(row.criterion, "account negatives")
            if keyword is not None:
                index.account_negatives.append(keyword)

        logger.info(f"Added {len(index.account_negatives)} account negatives")
