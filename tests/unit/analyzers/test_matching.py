"""Tests for the match type blocking rules."""

import logging

import pytest

from negative_conflict_finder.analyzers.matching import (
    contains_phrase,
    has_all_tokens,
    negative_blocks_positive,
)
from negative_conflict_finder.models.keyword import NormalizedKeyword

ALL_MATCH_TYPES = ["EXACT", "PHRASE", "BROAD"]


class TestHelpers:
    """Test the token and phrase containment helpers."""

    def test_has_all_tokens_ignores_order(self):
        assert has_all_tokens(("red", "shoes"), ("shoes", "red", "cheap"))

    def test_has_all_tokens_requires_every_token(self):
        assert not has_all_tokens(("red", "shoes"), ("red", "boots"))

    def test_has_all_tokens_matches_whole_words(self):
        assert not has_all_tokens(("shoe",), ("shoes",))

    def test_has_all_tokens_on_keyword_tokens(self, kw):
        negative = kw("+Red +Shoes", "BROAD")
        positive = kw("[shoes for red dresses]", "EXACT")

        assert has_all_tokens(negative.tokens, positive.tokens)

    def test_empty_needle_is_vacuously_contained(self):
        assert has_all_tokens((), ("anything",))
        assert contains_phrase("", "anything")

    def test_contains_phrase_needs_contiguous_words(self):
        assert contains_phrase("running shoes", "buy running shoes online")
        assert not contains_phrase("running shoes", "shoes running fast")
        assert not contains_phrase("running shoes", "running red shoes")

    def test_contains_phrase_respects_word_boundaries(self):
        assert not contains_phrase("run", "running shoes")
        assert contains_phrase("shoes", "running shoes")

    def test_contains_phrase_empty_haystack(self):
        assert not contains_phrase("shoes", "")


class TestExactNegative:
    """Exact negatives block only identical text."""

    @pytest.mark.parametrize("positive_type", ALL_MATCH_TYPES)
    def test_identical_text_blocks_any_positive_type(self, kw, positive_type):
        assert negative_blocks_positive(kw("running shoes", "EXACT"), kw("running shoes", positive_type))

    @pytest.mark.parametrize("positive_type", ALL_MATCH_TYPES)
    def test_different_text_never_blocks(self, kw, positive_type):
        negative = kw("running shoes", "EXACT")
        assert not negative_blocks_positive(negative, kw("buy running shoes", positive_type))
        assert not negative_blocks_positive(negative, kw("shoes running", positive_type))

    def test_comparison_uses_normalized_text(self, kw):
        assert negative_blocks_positive(kw("[Running Shoes]", "EXACT"), kw("+running +shoes", "BROAD"))


class TestPhraseNegative:
    """Phrase negatives block contiguous word runs, exact positives only on identity."""

    def test_blocks_phrase_containing_it(self, kw):
        assert negative_blocks_positive(kw("running shoes", "PHRASE"), kw("buy running shoes online", "PHRASE"))

    def test_blocks_broad_containing_it(self, kw):
        assert negative_blocks_positive(kw("running shoes", "PHRASE"), kw("buy running shoes online", "BROAD"))

    def test_does_not_block_reordered_words(self, kw):
        assert not negative_blocks_positive(kw("running shoes", "PHRASE"), kw("shoes running fast", "BROAD"))

    def test_reordered_phrase_negative_against_broad(self, kw):
        assert not negative_blocks_positive(kw('"shoes running"', "PHRASE"), kw("running shoes", "BROAD"))

    def test_exact_positive_needs_identical_text(self, kw):
        negative = kw("running shoes", "PHRASE")
        assert negative_blocks_positive(negative, kw("running shoes", "EXACT"))
        assert not negative_blocks_positive(negative, kw("buy running shoes", "EXACT"))


class TestBroadNegative:
    """Broad negatives block positives containing all their words."""

    def test_order_does_not_matter(self, kw):
        assert negative_blocks_positive(kw("red shoes", "BROAD"), kw("shoes red cheap", "BROAD"))

    def test_single_token_blocks_phrase(self, kw):
        assert negative_blocks_positive(kw("running", "BROAD"), kw('"running shoes"', "PHRASE"))

    def test_blocks_exact_positive(self, kw):
        assert negative_blocks_positive(kw("shoes", "BROAD"), kw("[shoes]", "EXACT"))

    @pytest.mark.parametrize("positive_type", ALL_MATCH_TYPES)
    def test_missing_token_does_not_block(self, kw, positive_type):
        assert not negative_blocks_positive(kw("red shoes", "BROAD"), kw("blue shoes", positive_type))

    def test_repeated_tokens_are_a_set(self, kw):
        assert negative_blocks_positive(kw("shoes shoes", "BROAD"), kw("shoes", "BROAD"))


class TestUnexpectedMatchType:
    """A negative with an unexpected match type never blocks."""

    def test_unknown_type_fails_closed(self, kw, caplog):
        negative = NormalizedKeyword.model_construct(
            display_text="shoes", raw_text="shoes", match_type="FUZZY"
        )

        with caplog.at_level(logging.WARNING):
            assert not negative_blocks_positive(negative, kw("shoes", "BROAD"))
        assert "Unexpected negative match type" in caplog.text
