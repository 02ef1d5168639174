"""Negative Keyword Conflict Analyzer.

This analyzer identifies negative keywords blocking positive keywords
within a single account's keyword index.
"""

import logging
import time
from collections.abc import Callable

from negative_conflict_finder.analyzers.matching import negative_blocks_positive
from negative_conflict_finder.models.conflict import (
    ACCOUNT_LEVEL_LOCATION,
    ConflictLevel,
    ConflictRecord,
    ad_group_location,
    campaign_location,
    shared_list_location,
)
from negative_conflict_finder.models.index import KeywordIndex
from negative_conflict_finder.models.keyword import NormalizedKeyword

logger = logging.getLogger(__name__)

# Log analysis progress every N campaigns
CAMPAIGN_PROGRESS_INTERVAL = 50

BlockingRule = Callable[[NormalizedKeyword, NormalizedKeyword], bool]


class NegativeConflictAnalyzer:
    """Identify negative keywords that block positive keywords.

    For every ad group with positive keywords, negatives are checked at four
    levels in a fixed order: ad group, campaign, each shared list applied to
    the campaign, and account. Each negative that blocks at least one
    positive yields one ConflictRecord for that location.
    """

    def __init__(self, blocking_rule: BlockingRule = negative_blocks_positive):
        self.blocking_rule = blocking_rule

    def find_conflicts(self, index: KeywordIndex) -> list[ConflictRecord]:
        """Find all conflicts in an account's keyword index.

        Args:
            index: Fully built keyword index; it is not modified

        Returns:
            Conflict records grouped by campaign, ad group, then level
        """
        logger.info("Starting conflict analysis for the current account")
        start_time = time.perf_counter()

        conflicts: list[ConflictRecord] = []
        campaigns_checked = 0
        ad_groups_checked = 0

        for campaign_id, campaign in index.campaigns.items():
            campaigns_checked += 1

            for ad_group in campaign.ad_groups.values():
                ad_groups_checked += 1
                positives = ad_group.positives
                if not positives:
                    continue

                context = {
                    "campaign_name": campaign.name,
                    "ad_group_name": ad_group.name,
                }

                self._check_level(
                    conflicts,
                    ad_group.negatives,
                    positives,
                    ad_group_location(ad_group.name, campaign.name),
                    ConflictLevel.AD_GROUP,
                    **context,
                )

                self._check_level(
                    conflicts,
                    campaign.negatives,
                    positives,
                    campaign_location(campaign.name),
                    ConflictLevel.CAMPAIGN,
                    **context,
                )

                for ref in campaign.shared_list_refs:
                    shared_list = index.resolve_shared_list(ref)
                    if shared_list is None:
                        logger.debug(
                            f"Shared list {ref.list_id} referenced by campaign "
                            f"{campaign_id} is not in the index"
                        )
                        continue
                    list_name = ref.list_name or f"List ID {ref.list_id}"
                    self._check_level(
                        conflicts,
                        shared_list.negatives,
                        positives,
                        shared_list_location(list_name, campaign.name),
                        ConflictLevel.SHARED_LIST,
                        shared_list_name=list_name,
                        **context,
                    )

                self._check_level(
                    conflicts,
                    index.account_negatives,
                    positives,
                    ACCOUNT_LEVEL_LOCATION,
                    ConflictLevel.ACCOUNT,
                    **context,
                )

            if campaigns_checked % CAMPAIGN_PROGRESS_INTERVAL == 0:
                logger.info(
                    f"...conflict analysis checked {campaigns_checked} campaigns "
                    f"and {ad_groups_checked} ad groups"
                )

        duration = time.perf_counter() - start_time
        logger.info(
            f"Conflict analysis complete: {len(conflicts)} conflicts across "
            f"{campaigns_checked} campaigns and {ad_groups_checked} ad groups "
            f"({duration:.2f}s)"
        )
        return conflicts

    def _check_level(
        self,
        conflicts: list[ConflictRecord],
        negatives: list[NormalizedKeyword],
        positives: list[NormalizedKeyword],
        location: str,
        level: ConflictLevel,
        campaign_name: str | None = None,
        ad_group_name: str | None = None,
        shared_list_name: str | None = None,
    ) -> None:
        """Check one level's negatives against an ad group's positives."""
        for negative in negatives:
            blocked = [
                positive.display_text
                for positive in positives
                if self._blocks(negative, positive, location)
            ]
            if blocked:
                conflicts.append(
                    ConflictRecord(
                        negative_display_text=negative.display_text,
                        location_description=location,
                        blocked_positive_display_texts=blocked,
                        level=level,
                        campaign_name=campaign_name,
                        ad_group_name=ad_group_name,
                        shared_list_name=shared_list_name,
                    )
                )

    def _blocks(
        self, negative: NormalizedKeyword, positive: NormalizedKeyword, location: str
    ) -> bool:
        """Apply the blocking rule; a failing comparison counts as not blocking."""
        try:
            return self.blocking_rule(negative, positive)
        except Exception as e:
            logger.error(
                f"Error during conflict check between negative "
                f"{negative.display_text!r} and positive {positive.display_text!r} "
                f"at {location}: {e}",
                exc_info=True,
            )
            return False
