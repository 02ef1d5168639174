"""Exporters for conflict report rows."""

from negative_conflict_finder.exporters.tabular import (
    MULTI_ACCOUNT_HEADERS,
    NO_CONFLICTS_ROW,
    SINGLE_ACCOUNT_HEADERS,
    CSVTabularSink,
    MemoryTabularSink,
    TabularSink,
    error_row,
    no_conflict_row,
)

__all__ = [
    "CSVTabularSink",
    "MULTI_ACCOUNT_HEADERS",
    "MemoryTabularSink",
    "NO_CONFLICTS_ROW",
    "SINGLE_ACCOUNT_HEADERS",
    "TabularSink",
    "error_row",
    "no_conflict_row",
]
