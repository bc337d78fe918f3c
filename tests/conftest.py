"""
Shared test fixtures and configuration for pytest.
"""

import struct
import sys
from pathlib import Path
from typing import Iterable, Sequence, Tuple

import pytest

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from w2vquery import EmbeddingTable


# ============================================================================
# Binary model helpers
# ============================================================================

def encode_header(vocabulary_size, vector_size) -> bytes:
    return f"{vocabulary_size} {vector_size}\n".encode("ascii")


def encode_record(word, vector: Sequence[float], newline: bool = True) -> bytes:
    word_bytes = word if isinstance(word, bytes) else word.encode("utf-8")
    data = word_bytes + b" " + struct.pack(f"<{len(vector)}f", *vector)
    return data + (b"\n" if newline else b"")


def encode_model(
    records: Iterable[Tuple[str, Sequence[float]]],
    vector_size: int,
    vocabulary_size: int = None,
    newline: bool = True,
) -> bytes:
    records = list(records)
    if vocabulary_size is None:
        vocabulary_size = len(records)
    body = b"".join(encode_record(word, vec, newline=newline) for word, vec in records)
    return encode_header(vocabulary_size, vector_size) + body


# ============================================================================
# Fixtures
# ============================================================================

ANIMALS = [
    ("cat", [1.0, 0.0, 0.0]),
    ("dog", [0.9, 0.1, 0.0]),
    ("fish", [0.0, 1.0, 0.0]),
]

ROYALTY = {
    "man": [1.0, 0.0, 0.0],
    "king": [1.0, 1.0, 0.0],
    "woman": [0.0, 1.0, 0.0],
    "queen": [0.0, 2.0, 0.0],
}


@pytest.fixture
def write_model(tmp_path):
    """Write raw model bytes to a temporary file and return its path."""
    def _write(data: bytes, name: str = "model.bin") -> Path:
        path = tmp_path / name
        path.write_bytes(data)
        return path
    return _write


@pytest.fixture
def animals_path(write_model):
    return write_model(encode_model(ANIMALS, vector_size=3))


@pytest.fixture
def animals_table():
    return EmbeddingTable.from_mapping(dict(ANIMALS))


@pytest.fixture
def royalty_table():
    return EmbeddingTable.from_mapping(ROYALTY)
