"""Conversion between EmbeddingTable and gensim KeyedVectors."""
from __future__ import annotations

import numpy as np
from gensim.models import KeyedVectors

from ..query.table import EmbeddingTable

__all__ = [
    "to_keyed_vectors",
    "from_keyed_vectors",
]


def to_keyed_vectors(table: EmbeddingTable) -> KeyedVectors:
    """
    Copy a table into a gensim KeyedVectors instance.

    Useful for gensim-side tooling such as ``evaluate_word_analogies`` or
    ``save_word2vec_format``. Row order is preserved.

    Args:
        table (EmbeddingTable): Source table.

    Returns:
        KeyedVectors: New instance holding copies of the table's vectors.
    """
    kv = KeyedVectors(vector_size=table.vector_size, count=0, dtype=np.float32)
    if table.vocabulary_size:
        kv.add_vectors(list(table.words), np.array(table.vectors, dtype=np.float32))
    return kv


def from_keyed_vectors(kv: KeyedVectors) -> EmbeddingTable:
    """
    Build an EmbeddingTable from a gensim KeyedVectors instance.

    Args:
        kv (KeyedVectors): Source vectors. Keys are converted with ``str()``.

    Returns:
        EmbeddingTable: New immutable table.
    """
    words = [str(key) for key in kv.index_to_key]
    vectors = np.array(kv.vectors[:len(words)], dtype=np.float32)
    return EmbeddingTable._adopt(words, vectors, kv.vector_size)
