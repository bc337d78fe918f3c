"""
Reading binary word2vec model files.

Key components:
    - encoding: Byte cursor, header and record decoding
    - config: LoaderConfig
    - loader: EmbeddingTableLoader and load_embedding_table()
"""

from .config import LoaderConfig
from .loader import EmbeddingTableLoader, load_embedding_table

__all__ = [
    "LoaderConfig",
    "EmbeddingTableLoader",
    "load_embedding_table",
]
