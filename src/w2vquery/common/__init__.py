"""Vector arithmetic and exceptions shared across w2vquery."""

from . import vector_math
from .errors import (
    EmbeddingError,
    ModelNotFoundError,
    MalformedHeaderError,
    MalformedRecordError,
    UnexpectedEOFError,
    DimensionMismatchError,
)

__all__ = [
    "vector_math",
    "EmbeddingError",
    "ModelNotFoundError",
    "MalformedHeaderError",
    "MalformedRecordError",
    "UnexpectedEOFError",
    "DimensionMismatchError",
]
