"""Analyzers module for the negative conflict finder.

This module contains the match type rules and the analyzer that walks an
account's keyword index looking for negatives that block positives.
"""

from negative_conflict_finder.analyzers.matching import (
    contains_phrase,
    has_all_tokens,
    negative_blocks_positive,
)
from negative_conflict_finder.analyzers.negative_conflicts import NegativeConflictAnalyzer

__all__ = [
    "NegativeConflictAnalyzer",
    "contains_phrase",
    "has_all_tokens",
    "negative_blocks_positive",
]
