"""Loader for binary word2vec embedding tables."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import BinaryIO, Dict, Optional, Union

import numpy as np
from tqdm import tqdm

from ..common.errors import (
    MalformedRecordError,
    ModelNotFoundError,
    UnexpectedEOFError,
)
from ..query.table import EmbeddingTable
from .config import LoaderConfig
from .encoding import (
    NEWLINE,
    SPACE,
    VECTOR_DTYPE,
    ByteCursor,
    decode_vector,
    decode_word,
    parse_header,
)

logger = logging.getLogger(__name__)

__all__ = [
    "EmbeddingTableLoader",
    "load_embedding_table",
]

def _grow(vectors: np.ndarray, limit: int) -> np.ndarray:
    """Return a copy of ``vectors`` with room for twice as many rows, capped at ``limit``."""
    rows = min(max(1, 2 * len(vectors)), limit)
    grown = np.empty((rows, vectors.shape[1]), dtype=vectors.dtype)
    grown[:len(vectors)] = vectors
    return grown


class EmbeddingTableLoader:
    """
    Parse a binary word2vec file into an immutable EmbeddingTable.

    Loading contract:
        - The header declares ``vocabulary_size`` and ``vector_size``. Reading
          stops after ``vocabulary_size`` records or at end of stream,
          whichever comes first.
        - Duplicate words are last-write-wins: a later record replaces the
          vector of an earlier record with the same word. The table keeps the
          row position of the first occurrence.
        - A record with an empty word is handled by ``empty_word_policy``. With
          "skip" the record's vector bytes are still consumed, so every
          following record stays aligned; the entry is left out of the table.
          With "error" the load fails with MalformedRecordError.
        - Any error aborts the whole load; no partial table is returned.

    Vectors are stored as read. Similarity scores are raw dot products, so
    they are cosine similarities only if the file holds unit-normalized
    vectors (see ``EmbeddingTable.normalized()``).
    """

    def __init__(self, config: Optional[LoaderConfig] = None):
        self.config = config or LoaderConfig()

    def load(self, path: Union[str, os.PathLike]) -> EmbeddingTable:
        """
        Load a table from a binary model file.

        Args:
            path: Path to the binary .bin/.vec file.

        Returns:
            EmbeddingTable: The fully parsed table.

        Raises:
            ModelNotFoundError: If the file does not exist.
            MalformedHeaderError: If the header is missing or malformed.
            MalformedRecordError: If a word is rejected (see LoaderConfig).
            UnexpectedEOFError: If the stream ends inside a record.
        """
        path = Path(path)
        if not path.exists():
            raise ModelNotFoundError(path)

        logger.info(f"Loading embedding table from {path}")
        with open(path, "rb") as stream:
            table = self.load_stream(stream)
        logger.info(
            f"Loaded {table.vocabulary_size} words "
            f"(vector size {table.vector_size}) from {path.name}"
        )
        return table

    def load_stream(self, stream: BinaryIO) -> EmbeddingTable:
        """
        Load a table from an open binary stream positioned at the header.

        Raises:
            MalformedHeaderError, MalformedRecordError, UnexpectedEOFError:
                See ``load``.
        """
        config = self.config
        cursor = ByteCursor(stream, chunk_size=config.chunk_size)

        header, _ = cursor.read_until(NEWLINE)
        vocabulary_size, vector_size = parse_header(header)
        logger.debug(f"Header declares {vocabulary_size} words of size {vector_size}")

        vector_bytes = vector_size * VECTOR_DTYPE.itemsize
        # The header count may overstate the file, so rows grow as records arrive
        vectors = np.empty((0, vector_size), dtype=np.float32)
        rows: Dict[str, int] = {}
        duplicates = 0
        skipped = 0

        records = range(vocabulary_size)
        if config.show_progress:
            records = tqdm(records, desc="Loading vectors", unit="word")

        parsed = 0
        for index in records:
            if cursor.at_eof():
                break

            record_offset = cursor.offset
            word_bytes, found = cursor.read_until(SPACE)
            if not found:
                raise UnexpectedEOFError(
                    f"Stream ended inside a word: {word_bytes[:50]!r}",
                    offset=record_offset,
                    index=index,
                )

            vector_offset = cursor.offset
            data = cursor.read_exact(vector_bytes)
            if len(data) < vector_bytes:
                raise UnexpectedEOFError(
                    f"Vector truncated: expected {vector_bytes} bytes, got {len(data)}",
                    offset=vector_offset,
                    index=index,
                )
            cursor.skip_byte_if(NEWLINE)
            parsed += 1

            word = decode_word(
                word_bytes,
                errors=config.unicode_errors,
                offset=record_offset,
                index=index,
            )

            if not word:
                if config.empty_word_policy == "error":
                    raise MalformedRecordError(
                        "Empty word", offset=record_offset, index=index
                    )
                skipped += 1
                logger.warning(
                    f"Skipping record {index} with empty word at byte offset {record_offset}"
                )
                continue

            row = rows.get(word)
            if row is None:
                row = len(rows)
                rows[word] = row
                if row == len(vectors):
                    vectors = _grow(vectors, vocabulary_size)
            else:
                duplicates += 1
                logger.debug(f"Duplicate word {word!r} at record {index} replaces earlier vector")
            vectors[row] = decode_vector(data, vector_size)

        if parsed < vocabulary_size:
            logger.warning(
                f"Stream ended after {parsed} of {vocabulary_size} declared records"
            )
        if duplicates:
            logger.warning(f"{duplicates} duplicate word(s) replaced earlier entries")
        if skipped:
            logger.warning(f"{skipped} record(s) with empty words were skipped")

        if len(rows) < len(vectors):
            vectors = vectors[:len(rows)].copy()
        table = EmbeddingTable._adopt(list(rows), vectors, vector_size)
        self._check_normalization(table)
        return table

    def _check_normalization(self, table: EmbeddingTable) -> None:
        """Warn when sampled rows are not unit length."""
        sample = self.config.normalization_check_sample
        if sample == 0 or table.vocabulary_size == 0:
            return

        step = max(1, table.vocabulary_size // sample)
        norms = np.linalg.norm(table.vectors[::step][:sample], axis=1)
        off = np.abs(norms - 1.0) > self.config.normalization_tolerance
        if np.any(off):
            logger.warning(
                f"{int(off.sum())} of {len(norms)} sampled vectors are not unit length; "
                "similarity scores are raw dot products, not cosine similarities"
            )


def load_embedding_table(
    path: Union[str, os.PathLike],
    config: Optional[LoaderConfig] = None,
) -> EmbeddingTable:
    """
    Load a binary word2vec model file.

    Args:
        path: Path to the model file.
        config: Optional loader configuration.

    Returns:
        EmbeddingTable: The loaded table.

    Example:
        >>> table = load_embedding_table("GoogleNews-vectors-negative300.bin")
        >>> table.find_similar("king", top_n=3)
    """
    return EmbeddingTableLoader(config).load(path)
