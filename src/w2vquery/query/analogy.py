"""Analogy solving by vector arithmetic: a is to b as c is to ?"""
from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from ..common.vector_math import add, normalize, subtract
from .ranking import RankedEntry, SimilarityRanker

if TYPE_CHECKING:
    from .table import EmbeddingTable

__all__ = ["AnalogySolver"]


class AnalogySolver:
    """Answers analogy queries with ``normalize((b - a) + c)``."""

    @staticmethod
    def target_vector(table: "EmbeddingTable", a: str, b: str, c: str):
        """
        Compute the unit-length analogy target, or None if a word is missing.
        """
        va, vb, vc = table.get_vector(a), table.get_vector(b), table.get_vector(c)
        if va is None or vb is None or vc is None:
            return None
        # add() returns a new array, so stored rows are never touched
        return normalize(add(subtract(vb, va), vc))

    @classmethod
    def solve(
        cls,
        table: "EmbeddingTable",
        a: str,
        b: str,
        c: str,
        top_n: int = 10,
    ) -> Optional[List[RankedEntry]]:
        """
        Rank candidate answers to "a is to b as c is to ?".

        Args:
            table: Table to query.
            a: First word of the known pair (e.g., "man").
            b: Second word of the known pair (e.g., "king").
            c: First word of the incomplete pair (e.g., "woman").
            top_n: Maximum number of answers.

        Returns:
            list[RankedEntry] or None: Ranked answers with a, b and c excluded,
            or None if any of the three words is not in the table.
        """
        target = cls.target_vector(table, a, b, c)
        if target is None:
            return None
        return SimilarityRanker.rank(table, target, top_n, exclude={a, b, c})
