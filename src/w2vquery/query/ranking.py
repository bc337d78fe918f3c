"""
Top-N similarity ranking over an embedding table.

Every non-excluded entry is scored by the dot product of its stored vector
with the query vector. Results are ordered by descending score, with ties
broken by ascending word, so the same query always returns the same list.

Stored vectors are not renormalized at query time: scores are cosine
similarities only when the table holds unit-length vectors.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, List, NamedTuple

import numpy as np

from ..common.errors import DimensionMismatchError
from ..common.vector_math import VectorLike, as_vector

if TYPE_CHECKING:
    from .table import EmbeddingTable

__all__ = [
    "RankedEntry",
    "SimilarityRanker",
]


class RankedEntry(NamedTuple):
    """A (word, score) pair in a ranking."""
    word: str
    score: float


class SimilarityRanker:
    """Linear-scan top-N ranking by dot product."""

    @staticmethod
    def rank(
        table: "EmbeddingTable",
        query_vector: VectorLike,
        top_n: int,
        exclude: Iterable[str] = (),
    ) -> List[RankedEntry]:
        """
        Rank the table's entries against a query vector.

        Args:
            table: Table to scan.
            query_vector: Vector of length ``table.vector_size``.
            top_n: Maximum number of entries to return (>= 0).
            exclude: Words left out of the ranking. Unknown words are ignored.

        Returns:
            list[RankedEntry]: At most ``top_n`` entries, descending by score,
            ties in ascending word order. All eligible entries when fewer than
            ``top_n`` exist.

        Raises:
            DimensionMismatchError: If the query length differs from the table's
                vector size.
            ValueError: If ``top_n`` is negative.
        """
        if isinstance(top_n, bool) or not isinstance(top_n, (int, np.integer)):
            raise TypeError(f"top_n must be an int, got {type(top_n).__name__}")
        if top_n < 0:
            raise ValueError(f"top_n must be >= 0, got {top_n}")

        query = as_vector(query_vector)
        if query.shape[0] != table.vector_size:
            raise DimensionMismatchError(table.vector_size, query.shape[0], what="query vector")

        if top_n == 0 or table.vocabulary_size == 0:
            return []

        scores = table.vectors @ query
        # NaN rows (corrupt vectors) rank last
        scores[np.isnan(scores)] = -np.inf

        eligible = np.ones(table.vocabulary_size, dtype=bool)
        for word in exclude:
            row = table.row_of(word)
            if row is not None:
                eligible[row] = False
        candidates = np.flatnonzero(eligible)
        if candidates.size == 0:
            return []

        candidate_scores = scores[candidates]
        if top_n < candidates.size:
            # Keep everything scoring at least the N-th best, ties at the cut included
            cut = candidates.size - top_n
            threshold = np.partition(candidate_scores, cut)[cut]
            keep = candidate_scores >= threshold
            candidates = candidates[keep]
            candidate_scores = candidate_scores[keep]

        words = table.words
        ranked = sorted(
            zip(candidates.tolist(), candidate_scores.tolist()),
            key=lambda item: (-item[1], words[item[0]]),
        )
        return [RankedEntry(words[row], score) for row, score in ranked[:top_n]]
