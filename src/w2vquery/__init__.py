"""
Offline word-embedding queries over pre-trained word2vec tables.

This package loads a binary word2vec model file into an immutable table and
answers nearest-neighbour and analogy queries against it.

Main components:
    - model_io: Binary format decoding and the table loader
    - query: EmbeddingTable, similarity ranking and analogy solving
    - common: Vector arithmetic, exceptions and gensim interop
    - evaluate: Intrinsic benchmarks (analogy accuracy, word-pair correlation)

Example:
    >>> from w2vquery import load_embedding_table
    >>> table = load_embedding_table("vectors.bin")
    >>> table.find_analogy("man", "king", "woman", top_n=1)
"""

from .common.errors import (
    EmbeddingError,
    ModelNotFoundError,
    MalformedHeaderError,
    MalformedRecordError,
    UnexpectedEOFError,
    DimensionMismatchError,
)
from .model_io import EmbeddingTableLoader, LoaderConfig, load_embedding_table
from .query import AnalogySolver, EmbeddingTable, RankedEntry, SimilarityRanker

__version__ = "0.1.0"

__all__ = [
    "EmbeddingError",
    "ModelNotFoundError",
    "MalformedHeaderError",
    "MalformedRecordError",
    "UnexpectedEOFError",
    "DimensionMismatchError",
    "EmbeddingTableLoader",
    "LoaderConfig",
    "load_embedding_table",
    "AnalogySolver",
    "EmbeddingTable",
    "RankedEntry",
    "SimilarityRanker",
]
