"""Data providers module for the negative conflict finder.

This module provides a unified interface for reading keyword criteria:
- Google Ads API
- Static in-memory records for testing and local runs
"""

from negative_conflict_finder.data_providers.base import (
    AccountEnumerator,
    KeywordDataProvider,
    LabelPredicate,
    has_label,
)
from negative_conflict_finder.data_providers.google_ads import GoogleAdsDataProvider
from negative_conflict_finder.data_providers.mock_provider import StaticDataProvider

__all__ = [
    "AccountEnumerator",
    "GoogleAdsDataProvider",
    "KeywordDataProvider",
    "LabelPredicate",
    "StaticDataProvider",
    "has_label",
]
