"""Pytest configuration and shared fixtures for conflict finder tests."""

import pytest

from negative_conflict_finder.core.config import get_settings
from negative_conflict_finder.models.index import KeywordIndex
from negative_conflict_finder.models.keyword import NormalizedKeyword
from negative_conflict_finder.utils.normalization import normalize_keyword


@pytest.fixture(autouse=True)
def clear_settings_cache(monkeypatch):
    """Isolate tests from the developer's environment and cached settings."""
    for name in (
        "GOOGLE_ADS_DEVELOPER_TOKEN",
        "GOOGLE_ADS_CLIENT_ID",
        "GOOGLE_ADS_CLIENT_SECRET",
        "GOOGLE_ADS_REFRESH_TOKEN",
        "GOOGLE_ADS_LOGIN_CUSTOMER_ID",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def kw():
    """Factory for normalized keywords: kw("running shoes", "PHRASE")."""

    def make(text: str, match_type: str = "BROAD") -> NormalizedKeyword:
        keyword = normalize_keyword(text, match_type)
        assert keyword is not None, f"{text!r} ({match_type}) did not normalize"
        return keyword

    return make


@pytest.fixture
def empty_index():
    """A fresh keyword index."""
    return KeywordIndex()
