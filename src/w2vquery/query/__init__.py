"""Querying loaded embedding tables."""

from .ranking import RankedEntry, SimilarityRanker
from .analogy import AnalogySolver
from .table import EmbeddingTable

__all__ = [
    "RankedEntry",
    "SimilarityRanker",
    "AnalogySolver",
    "EmbeddingTable",
]
