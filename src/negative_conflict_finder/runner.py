"""Conflict report orchestration.

Runs the build-and-analyze pass for one account or for every account an
enumerator yields, writing rows to a tabular sink one account at a time.
"""

import logging
import time
from collections.abc import Callable

from negative_conflict_finder.analyzers.negative_conflicts import NegativeConflictAnalyzer
from negative_conflict_finder.core.config import Settings
from negative_conflict_finder.core.exceptions import IndexBuildError
from negative_conflict_finder.data_providers.base import (
    AccountEnumerator,
    KeywordDataProvider,
    LabelPredicate,
)
from negative_conflict_finder.exporters.tabular import (
    MULTI_ACCOUNT_HEADERS,
    NO_CONFLICTS_ROW,
    SINGLE_ACCOUNT_HEADERS,
    TabularSink,
    error_row,
    no_conflict_row,
)
from negative_conflict_finder.index_builder import KeywordIndexBuilder
from negative_conflict_finder.models.account import AccountContext, RunSummary
from negative_conflict_finder.models.conflict import ConflictRecord

logger = logging.getLogger(__name__)

INDEX_UNAVAILABLE_REASON = "Keyword data could not be fetched"


class ConflictReportRunner:
    """Find negative keyword conflicts and write them to a sink.

    Each account is analyzed in isolation: a fresh index is built, analyzed
    and discarded before the next account starts. A failing account becomes
    an ERROR row and never stops the run.
    """

    def __init__(
        self,
        provider: KeywordDataProvider,
        settings: Settings | None = None,
        analyzer: NegativeConflictAnalyzer | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.provider = provider
        self.settings = settings or Settings()
        self.analyzer = analyzer or NegativeConflictAnalyzer()
        self.clock = clock

        conflicts_config = self.settings.conflicts
        self.builder = KeywordIndexBuilder(
            provider,
            unknown_match_type_policy=conflicts_config.unknown_match_type_policy,
            progress_interval=conflicts_config.progress_log_interval,
        )
        self.max_runtime_seconds = conflicts_config.max_runtime_seconds

    async def analyze_account(self, customer_id: str) -> list[ConflictRecord] | None:
        """Build the account's index and find its conflicts.

        Returns:
            Conflict records, or None if the index could not be built
        """
        index = await self.builder.build_index(customer_id)
        if index is None:
            return None
        return self.analyzer.find_conflicts(index)

    async def run_single_account(self, customer_id: str, sink: TabularSink) -> RunSummary:
        """Write a single-account conflict report."""
        start_time = self.clock()
        summary = RunSummary(accounts_seen=1)
        sink.write_header(SINGLE_ACCOUNT_HEADERS)

        try:
            conflicts = await self._analyze_or_raise(customer_id)
        except Exception as e:
            logger.error(f"Conflict check failed for customer {customer_id}: {e}", exc_info=True)
            sink.append_rows([error_row(_failure_reason(e))])
            summary.accounts_failed = 1
        else:
            summary.accounts_analyzed = 1
            if conflicts:
                sink.append_rows([conflict.to_row() for conflict in conflicts])
                summary.accounts_with_conflicts = 1
                summary.total_conflicts = len(conflicts)
            else:
                sink.append_rows([list(NO_CONFLICTS_ROW)])

        summary.elapsed_seconds = self.clock() - start_time
        logger.info(
            f"Conflict check for customer {customer_id} finished: "
            f"{summary.total_conflicts} conflicts"
        )
        return summary

    async def run_accounts(
        self,
        enumerator: AccountEnumerator,
        label_predicate: LabelPredicate | None,
        sink: TabularSink,
    ) -> RunSummary:
        """Write a multi-account conflict report.

        Accounts are processed one at a time. The wall-clock budget is checked
        before each account; once it is spent no further account is started.
        """
        start_time = self.clock()
        sink.write_header(MULTI_ACCOUNT_HEADERS)

        accounts = await enumerator.list_accounts(label_predicate)
        summary = RunSummary(accounts_seen=len(accounts))
        logger.info(f"Checking {len(accounts)} accounts for negative keyword conflicts")

        for position, account in enumerate(accounts, start=1):
            elapsed = self.clock() - start_time
            if elapsed >= self.max_runtime_seconds:
                logger.warning(
                    f"Runtime budget of {self.max_runtime_seconds:.0f}s reached after "
                    f"{position - 1} of {len(accounts)} accounts; stopping early"
                )
                summary.stopped_early = True
                break

            logger.info(
                f"Processing account {position}/{len(accounts)}: "
                f"{account.display_name} ({account.customer_id})"
            )
            rows = await self._account_rows(account, summary)
            try:
                sink.append_rows(rows)
            except Exception as e:
                logger.error(
                    f"Failed to write report rows for account {account.display_name}: {e}",
                    exc_info=True,
                )
                summary.accounts_failed += 1
                continue

        summary.elapsed_seconds = self.clock() - start_time
        logger.info(
            f"Conflict run finished: {summary.accounts_analyzed} analyzed, "
            f"{summary.accounts_failed} failed, {summary.total_conflicts} conflicts "
            f"in {summary.elapsed_seconds:.1f}s"
        )
        return summary

    async def _account_rows(
        self, account: AccountContext, summary: RunSummary
    ) -> list[list[str]]:
        account_name = account.display_name
        try:
            conflicts = await self._analyze_or_raise(account.customer_id)
        except Exception as e:
            logger.error(
                f"Conflict check failed for account {account_name}: {e}", exc_info=True
            )
            summary.accounts_failed += 1
            return [error_row(_failure_reason(e), account_name)]

        summary.accounts_analyzed += 1
        if not conflicts:
            return [no_conflict_row(account_name)]

        summary.accounts_with_conflicts += 1
        summary.total_conflicts += len(conflicts)
        return [[account_name, *conflict.to_row()] for conflict in conflicts]

    async def _analyze_or_raise(self, customer_id: str) -> list[ConflictRecord]:
        conflicts = await self.analyze_account(customer_id)
        if conflicts is None:
            raise IndexBuildError(customer_id, INDEX_UNAVAILABLE_REASON)
        return conflicts


def _failure_reason(error: Exception) -> str:
    if isinstance(error, IndexBuildError):
        return error.reason
    return str(error) or error.__class__.__name__
