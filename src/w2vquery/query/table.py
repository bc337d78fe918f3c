"""
Immutable word -> vector table with similarity and analogy queries.

Tables are built once (by the loader, ``from_mapping`` or the gensim bridge)
and never modified afterwards. The backing matrix is flagged read-only, so
concurrent read-only queries from several threads need no locking.

Query methods return None for unknown words instead of raising; a missing
query term is a routine outcome, not an error.
"""
from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from ..common.errors import DimensionMismatchError
from ..common.vector_math import VectorLike, as_vector, dot_product, normalize_rows
from .analogy import AnalogySolver
from .ranking import RankedEntry, SimilarityRanker

__all__ = ["EmbeddingTable"]


class EmbeddingTable:
    """
    An immutable mapping from words to fixed-length float32 vectors.

    Attributes:
        vocabulary_size (int): Number of entries.
        vector_size (int): Dimensionality shared by every vector.
    """

    def __init__(self, words: Sequence[str], vectors: np.ndarray, vector_size: int):
        """
        Build a table from parallel words and rows.

        Args:
            words: Unique words; ``words[i]`` owns ``vectors[i]``.
            vectors: Array of shape (len(words), vector_size).
            vector_size: Declared dimensionality.

        Raises:
            ValueError: If words repeat or the row count does not match.
            DimensionMismatchError: If the row length differs from vector_size.
        """
        # Private copy: later changes to the caller's buffer must not leak in
        self._setup(words, np.array(vectors, dtype=np.float32, copy=True), vector_size)

    @classmethod
    def _adopt(cls, words: Sequence[str], vectors: np.ndarray, vector_size: int) -> "EmbeddingTable":
        """Build a table that takes ownership of a freshly built ``vectors`` array."""
        table = cls.__new__(cls)
        table._setup(words, np.ascontiguousarray(vectors, dtype=np.float32), vector_size)
        return table

    def _setup(self, words: Sequence[str], vectors: np.ndarray, vector_size: int) -> None:
        words = tuple(words)
        if vectors.ndim != 2:
            vectors = vectors.reshape(len(words), vector_size)
        if vectors.shape[0] != len(words):
            raise ValueError(f"Got {len(words)} words but {vectors.shape[0]} vectors")
        if vectors.shape[1] != vector_size:
            raise DimensionMismatchError(vector_size, vectors.shape[1])

        self._rows: Dict[str, int] = {word: i for i, word in enumerate(words)}
        if len(self._rows) != len(words):
            raise ValueError("Words in a table must be unique")

        self._words = words
        self._vectors = vectors
        self._vectors.flags.writeable = False
        self.vector_size = vector_size
        self.vocabulary_size = len(words)

    @classmethod
    def from_mapping(
        cls,
        mapping: Mapping[str, VectorLike],
        vector_size: Optional[int] = None,
    ) -> "EmbeddingTable":
        """
        Build a table from a word -> vector mapping.

        Args:
            mapping: Words and their vectors.
            vector_size: Expected dimensionality. Inferred from the first vector
                when omitted; required for an empty mapping.

        Returns:
            EmbeddingTable: New table with the mapping's entries.

        Raises:
            DimensionMismatchError: If any vector has a different length.
            ValueError: If the mapping is empty and vector_size is not given.

        Example:
            >>> table = EmbeddingTable.from_mapping({"cat": [1, 0], "dog": [0, 1]})
            >>> table.vocabulary_size
            2
        """
        rows = [as_vector(v) for v in mapping.values()]
        if vector_size is None:
            if not rows:
                raise ValueError("vector_size is required for an empty mapping")
            vector_size = rows[0].shape[0]

        for word, row in zip(mapping, rows):
            if row.shape[0] != vector_size:
                raise DimensionMismatchError(vector_size, row.shape[0], what=f"word {word!r}")

        matrix = np.vstack(rows) if rows else np.empty((0, vector_size), dtype=np.float32)
        return cls._adopt(list(mapping), matrix, vector_size)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    @property
    def words(self) -> Tuple[str, ...]:
        """Words in row order."""
        return self._words

    @property
    def vectors(self) -> np.ndarray:
        """Read-only (vocabulary_size, vector_size) float32 matrix."""
        return self._vectors

    def row_of(self, word: str) -> Optional[int]:
        """Row index of ``word``, or None."""
        return self._rows.get(word)

    def get_vector(self, word: str) -> Optional[np.ndarray]:
        """
        Return the stored vector for ``word``, or None if it is not present.

        The returned array is a read-only view; copy it before modifying.
        """
        row = self._rows.get(word)
        if row is None:
            return None
        return self._vectors[row]

    def has_word(self, word: str) -> bool:
        """Membership test."""
        return word in self._rows

    def __contains__(self, word) -> bool:
        return word in self._rows

    def __len__(self) -> int:
        return self.vocabulary_size

    def __iter__(self) -> Iterator[str]:
        return iter(self._words)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(vocabulary_size={self.vocabulary_size}, "
            f"vector_size={self.vector_size})"
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def rank(
        self,
        query_vector: VectorLike,
        top_n: int = 10,
        exclude: Iterable[str] = (),
    ) -> List[RankedEntry]:
        """Rank all entries against an arbitrary query vector."""
        return SimilarityRanker.rank(self, query_vector, top_n, exclude)

    def find_similar(self, word: str, top_n: int = 10) -> Optional[List[RankedEntry]]:
        """
        Find the entries most similar to ``word``.

        Args:
            word: Query word.
            top_n: Maximum number of results.

        Returns:
            list[RankedEntry] or None: Up to ``top_n`` (word, score) pairs by
            descending dot product, excluding ``word`` itself. None if ``word``
            is not in the table.
        """
        vector = self.get_vector(word)
        if vector is None:
            return None
        return SimilarityRanker.rank(self, vector, top_n, exclude={word})

    def find_analogy(
        self,
        a: str,
        b: str,
        c: str,
        top_n: int = 10,
    ) -> Optional[List[RankedEntry]]:
        """
        Solve "a is to b as c is to ?".

        Returns:
            list[RankedEntry] or None: Candidates ranked against
            ``normalize((b - a) + c)`` with a, b and c excluded; None if any of
            the three words is missing.

        Example:
            >>> table.find_analogy("man", "king", "woman", top_n=1)
            [RankedEntry(word='queen', score=...)]
        """
        return AnalogySolver.solve(self, a, b, c, top_n)

    def similarity(self, word1: str, word2: str) -> Optional[float]:
        """
        Dot product of two stored vectors, or None if either word is missing.
        """
        v1, v2 = self.get_vector(word1), self.get_vector(word2)
        if v1 is None or v2 is None:
            return None
        return dot_product(v1, v2)

    # ------------------------------------------------------------------
    # Normalization
    # ------------------------------------------------------------------

    def is_normalized(self, tolerance: float = 1e-6) -> bool:
        """
        Check if all vectors have unit L2 norm (zero rows count as not normalized).

        Args:
            tolerance (float): Allowed deviation from norm 1.

        Returns:
            bool: True if every row is unit length, or the table is empty.
        """
        if self.vocabulary_size == 0:
            return True
        norms = np.linalg.norm(self._vectors, axis=1)
        return bool(np.all(np.abs(norms - 1) < tolerance))

    def normalized(self) -> "EmbeddingTable":
        """
        Return a new table with every non-zero vector scaled to unit length.

        On the new table ``find_similar`` scores are cosine similarities.
        This table is left unchanged.
        """
        return type(self)._adopt(self._words, normalize_rows(self._vectors), self.vector_size)
