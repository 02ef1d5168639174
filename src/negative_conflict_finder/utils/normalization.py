"""Keyword text and match type normalization.

Turns a (text, match type) pair as stored in Google Ads into a
:class:`NormalizedKeyword` that the conflict rules can compare:

- match type: uppercased, trailing ``_MATCH`` removed (``BROAD_MATCH`` -> ``BROAD``)
- raw text: trimmed, ``[...]``/``"..."`` wrapper removed when it agrees with the
  match type, leading ``+`` characters removed from every word, whitespace collapsed,
  lowercased
- display text: raw text re-wrapped for its match type
"""

import logging
from typing import Any

from negative_conflict_finder.models.keyword import (
    MatchType,
    NormalizedKeyword,
    UnknownMatchTypePolicy,
)

logger = logging.getLogger(__name__)

MATCH_SUFFIX = "_MATCH"
BROAD_MATCH_MODIFIER = "+"

# Wrapper characters for each match type as (open, close)
MATCH_TYPE_WRAPPERS: dict[MatchType, tuple[str, str]] = {
    MatchType.EXACT: ("[", "]"),
    MatchType.PHRASE: ('"', '"'),
}


def normalize_match_type(match_type: Any) -> MatchType | None:
    """Canonicalize a match type string.

    Args:
        match_type: Match type as returned by the data source, e.g. "PHRASE"
            or "broad_match"

    Returns:
        The canonical MatchType, or None if it is missing or unrecognized
    """
    if not isinstance(match_type, str) or not match_type.strip():
        return None

    canonical = match_type.strip().upper()
    if canonical.endswith(MATCH_SUFFIX):
        canonical = canonical[: -len(MATCH_SUFFIX)]

    try:
        return MatchType(canonical)
    except ValueError:
        return None


def strip_wrapper(text: str, match_type: MatchType) -> str:
    """Remove the match type wrapper from the edges of text, if both edges carry it."""
    wrapper = MATCH_TYPE_WRAPPERS.get(match_type)
    if wrapper is None:
        return text

    open_char, close_char = wrapper
    if len(text) >= 2 and text.startswith(open_char) and text.endswith(close_char):
        return text[len(open_char) : -len(close_char)].strip()
    return text


def clean_keyword_text(text: str, match_type: MatchType) -> str:
    """Produce the raw comparison text for a keyword."""
    cleaned = strip_wrapper(text.strip(), match_type)
    words = [word.lstrip(BROAD_MATCH_MODIFIER) for word in cleaned.split()]
    return " ".join(word for word in words if word).lower()


def format_display_text(raw_text: str, match_type: MatchType) -> str:
    """Decorate raw text the way Google Ads displays the match type."""
    wrapper = MATCH_TYPE_WRAPPERS.get(match_type)
    if wrapper is None:
        return raw_text
    open_char, close_char = wrapper
    return f"{open_char}{raw_text}{close_char}"


def normalize_keyword(
    text: Any,
    match_type: Any,
    unknown_match_type_policy: UnknownMatchTypePolicy = UnknownMatchTypePolicy.SKIP,
) -> NormalizedKeyword | None:
    """Normalize a keyword for conflict comparison.

    Args:
        text: Keyword text
        match_type: Keyword match type
        unknown_match_type_policy: Whether an unrecognized match type rejects
            the keyword (SKIP) or falls back to broad match (BROAD)

    Returns:
        NormalizedKeyword, or None if the keyword cannot be used. A warning
        is logged for every rejected keyword.
    """
    if not isinstance(text, str) or not text.strip():
        logger.warning(f"Invalid or empty keyword text received: {text!r}")
        return None

    if not isinstance(match_type, str) or not match_type.strip():
        logger.warning(f"Missing match type {match_type!r} for keyword {text!r}")
        return None

    canonical = normalize_match_type(match_type)
    if canonical is None:
        if unknown_match_type_policy == UnknownMatchTypePolicy.BROAD:
            logger.warning(
                f"Unrecognized match type {match_type!r} for keyword {text!r}; "
                "treating it as BROAD"
            )
            canonical = MatchType.BROAD
        else:
            logger.warning(
                f"Unrecognized match type {match_type!r} for keyword {text!r}; "
                "keyword skipped"
            )
            return None

    raw_text = clean_keyword_text(text, canonical)
    if not raw_text:
        logger.warning(
            f"Keyword text became empty after normalization: {text!r} ({match_type})"
        )
        return None

    return NormalizedKeyword(
        display_text=format_display_text(raw_text, canonical),
        raw_text=raw_text,
        match_type=canonical,
    )
