"""Tabular sinks for conflict report rows.

A sink receives one header row and then batches of rows, one batch per
account, so peak memory stays at one account's conflicts.
"""

import csv
import logging
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)

SINGLE_ACCOUNT_HEADERS = [
    "Conflicting Negative Keyword",
    "Level & Location",
    "Blocked Positive Keywords",
]
MULTI_ACCOUNT_HEADERS = ["Account Name", *SINGLE_ACCOUNT_HEADERS]

NO_CONFLICTS_ROW = ["No conflicts found.", "", ""]
NO_CONFLICT_STATUS = "NO CONFLICT"
ERROR_STATUS = "ERROR"


def no_conflict_row(account_name: str) -> list[str]:
    """Sentinel row for an account analyzed without conflicts."""
    return [account_name, NO_CONFLICT_STATUS, "", ""]


def error_row(reason: str, account_name: str | None = None) -> list[str]:
    """Row reporting a whole-account failure."""
    if account_name is None:
        return [ERROR_STATUS, reason, ""]
    return [account_name, ERROR_STATUS, reason, ""]


class TabularSink(ABC):
    """Destination for report rows."""

    @abstractmethod
    def write_header(self, headers: list[str]) -> None:
        """Start a new report with the given header row."""
        pass

    @abstractmethod
    def append_rows(self, rows: list[list[str]]) -> None:
        """Append a batch of rows after everything written so far."""
        pass


class CSVTabularSink(TabularSink):
    """Write report rows to a CSV file.

    ``write_header`` truncates the file; every ``append_rows`` call opens it
    in append mode, so rows already written survive an interrupted run.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self.rows_written = 0

    def write_header(self, headers: list[str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", newline="", encoding="utf-8") as f:
            csv.writer(f, quoting=csv.QUOTE_ALL).writerow(headers)
        self.rows_written = 0
        logger.debug(f"Headers written to {self.path}: {len(headers)} columns")

    def append_rows(self, rows: list[list[str]]) -> None:
        if not rows:
            return
        with self.path.open("a", newline="", encoding="utf-8") as f:
            csv.writer(f, quoting=csv.QUOTE_ALL).writerows(rows)
        self.rows_written += len(rows)
        logger.debug(f"Appended {len(rows)} rows to {self.path}")


class MemoryTabularSink(TabularSink):
    """Keep report rows in memory."""

    def __init__(self) -> None:
        self.headers: list[str] = []
        self.rows: list[list[str]] = []

    def write_header(self, headers: list[str]) -> None:
        self.headers = list(headers)
        self.rows = []

    def append_rows(self, rows: list[list[str]]) -> None:
        self.rows.extend(list(row) for row in rows)
