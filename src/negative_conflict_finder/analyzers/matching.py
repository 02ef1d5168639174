"""Match type rules deciding whether a negative keyword blocks a positive one.

The negative keyword's match type selects the rule:

- EXACT negative: blocks any positive whose raw text is identical.
- PHRASE negative: blocks an EXACT positive only on identical text; blocks
  PHRASE and BROAD positives that contain the negative's words contiguously
  and in order.
- BROAD negative: blocks any positive that contains every negative word,
  in any order and position.
"""

import logging
from collections.abc import Sequence

from negative_conflict_finder.models.keyword import MatchType, NormalizedKeyword

logger = logging.getLogger(__name__)


def has_all_tokens(needle: Sequence[str], haystack: Sequence[str]) -> bool:
    """Check that every word of needle appears somewhere in haystack.

    An empty needle is contained in anything.
    """
    return set(needle).issubset(haystack)


def contains_phrase(needle: str, haystack: str) -> bool:
    """Check that needle occurs in haystack as a run of whole words."""
    if not needle:
        return True
    if not haystack:
        return False
    return f" {needle} " in f" {haystack} "


def negative_blocks_positive(
    negative: NormalizedKeyword, positive: NormalizedKeyword
) -> bool:
    """Determine if a negative keyword prevents a positive keyword from serving.

    Args:
        negative: Normalized negative keyword
        positive: Normalized positive keyword

    Returns:
        True if the negative blocks the positive
    """
    if negative.match_type == MatchType.EXACT:
        return positive.raw_text == negative.raw_text

    if negative.match_type == MatchType.PHRASE:
        if positive.match_type == MatchType.EXACT:
            return positive.raw_text == negative.raw_text
        return contains_phrase(negative.raw_text, positive.raw_text)

    if negative.match_type == MatchType.BROAD:
        return has_all_tokens(negative.tokens, positive.tokens)

    logger.warning(
        f"Unexpected negative match type {negative.match_type!r} for "
        f"{negative.display_text!r}; treating as non-blocking"
    )
    return False
