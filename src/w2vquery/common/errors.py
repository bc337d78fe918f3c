"""Exceptions raised while loading and querying embedding tables."""
from __future__ import annotations

from typing import Optional

__all__ = [
    "EmbeddingError",
    "ModelNotFoundError",
    "MalformedHeaderError",
    "MalformedRecordError",
    "UnexpectedEOFError",
    "DimensionMismatchError",
]


class EmbeddingError(Exception):
    """Base exception for all w2vquery errors."""
    pass


class ModelNotFoundError(EmbeddingError, FileNotFoundError):
    """The model file does not exist."""

    def __init__(self, path):
        super().__init__(f"Model file not found: {path}")
        self.path = path


class _ParseError(EmbeddingError):
    """Error tied to a position in the model byte stream."""

    def __init__(
        self,
        message: str,
        offset: Optional[int] = None,
        index: Optional[int] = None,
    ):
        location = []
        if index is not None:
            location.append(f"record {index}")
        if offset is not None:
            location.append(f"byte offset {offset}")
        if location:
            message = f"{message} ({', '.join(location)})"
        super().__init__(message)
        self.offset = offset
        self.index = index


class MalformedHeaderError(_ParseError, ValueError):
    """
    The header line is missing or does not hold two non-negative integers.
    """
    pass


class MalformedRecordError(_ParseError, ValueError):
    """
    A record's word could not be accepted.

    Raised when:
    - The word is empty and the loader runs with ``empty_word_policy="error"``
    - The word bytes are not valid UTF-8 and ``unicode_errors="strict"``
    """
    pass


class UnexpectedEOFError(_ParseError, EOFError):
    """The stream ended in the middle of a record."""
    pass


class DimensionMismatchError(EmbeddingError, ValueError):
    """Two vectors (or a vector and a table) have different lengths."""

    def __init__(self, expected: int, actual: int, what: str = "vector"):
        super().__init__(
            f"Dimension mismatch for {what}: expected {expected}, got {actual}"
        )
        self.expected = expected
        self.actual = actual
