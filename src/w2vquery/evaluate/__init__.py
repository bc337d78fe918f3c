"""Intrinsic evaluation of embedding tables."""

from .intrinsic import (
    AnalogyReport,
    SectionScore,
    WordPairReport,
    evaluate_analogies,
    evaluate_word_pairs,
)

__all__ = [
    "AnalogyReport",
    "SectionScore",
    "WordPairReport",
    "evaluate_analogies",
    "evaluate_word_pairs",
]
