"""
Vector arithmetic on fixed-length float32 vectors.

All functions are stateless. Inputs may be any 1-D float sequence; they are
coerced to ``float32`` numpy arrays. Functions that combine two vectors
require equal lengths and raise ``DimensionMismatchError`` otherwise.
"""
from __future__ import annotations

from typing import Sequence, Union

import numpy as np

from .errors import DimensionMismatchError

__all__ = [
    "REAL",
    "as_vector",
    "dot_product",
    "norm",
    "normalize",
    "normalize_rows",
    "add",
    "subtract",
]

REAL = np.float32

VectorLike = Union[np.ndarray, Sequence[float]]


def as_vector(values: VectorLike) -> np.ndarray:
    """
    Coerce a float sequence to a 1-D float32 array.

    Arrays that already have the right dtype are returned as-is (no copy).

    Raises:
        ValueError: If the input is not one-dimensional.
    """
    vector = np.asarray(values, dtype=REAL)
    if vector.ndim != 1:
        raise ValueError(f"Expected a 1-D vector, got shape {vector.shape}")
    return vector


def _check_lengths(v1: np.ndarray, v2: np.ndarray) -> None:
    if v1.shape[0] != v2.shape[0]:
        raise DimensionMismatchError(v1.shape[0], v2.shape[0])


def dot_product(v1: VectorLike, v2: VectorLike) -> float:
    """
    Sum of elementwise products of two equal-length vectors.

    Args:
        v1: First vector.
        v2: Second vector.

    Returns:
        float: The dot product.

    Raises:
        DimensionMismatchError: If the vectors differ in length.
    """
    a, b = as_vector(v1), as_vector(v2)
    _check_lengths(a, b)
    return float(np.dot(a, b))


def norm(v: VectorLike) -> float:
    """L2 norm of a vector."""
    a = as_vector(v)
    return float(np.sqrt(np.dot(a, a)))


def normalize(v: np.ndarray) -> np.ndarray:
    """
    Scale a vector in place to unit L2 norm.

    A zero vector is left unchanged.

    Args:
        v (np.ndarray): Caller-owned float array, modified in place.

    Returns:
        np.ndarray: The same array, for chaining.

    Raises:
        TypeError: If ``v`` is not a floating-point numpy array (integer arrays
            cannot hold the scaled values in place).
    """
    if not isinstance(v, np.ndarray):
        raise TypeError(f"normalize() needs a numpy array, got {type(v).__name__}")
    if not np.issubdtype(v.dtype, np.floating):
        raise TypeError(f"normalize() needs a floating-point array, got dtype {v.dtype}")
    if v.ndim != 1:
        raise ValueError(f"Expected a 1-D vector, got shape {v.shape}")

    magnitude = norm(v)
    if magnitude > 0:
        v /= magnitude
    return v


def normalize_rows(matrix: np.ndarray) -> np.ndarray:
    """
    Return a copy of ``matrix`` with every non-zero row scaled to unit length.

    Zero rows are copied unchanged.
    """
    matrix = np.asarray(matrix, dtype=REAL)
    norms = np.linalg.norm(matrix, axis=1, keepdims=True)
    # Zero rows divide by 1 and stay zero
    norms[norms == 0] = 1.0
    return (matrix / norms).astype(REAL, copy=False)


def add(v1: VectorLike, v2: VectorLike) -> np.ndarray:
    """
    Elementwise sum of two equal-length vectors, as a new array.

    Raises:
        DimensionMismatchError: If the vectors differ in length.
    """
    a, b = as_vector(v1), as_vector(v2)
    _check_lengths(a, b)
    return a + b


def subtract(v1: VectorLike, v2: VectorLike) -> np.ndarray:
    """
    Elementwise difference ``v1 - v2`` of two equal-length vectors, as a new array.

    Raises:
        DimensionMismatchError: If the vectors differ in length.
    """
    a, b = as_vector(v1), as_vector(v2)
    _check_lengths(a, b)
    return a - b
