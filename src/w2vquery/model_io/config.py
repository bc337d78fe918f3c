"""Configuration for loading binary embedding tables."""
from __future__ import annotations

import codecs
from dataclasses import dataclass

__all__ = [
    "EMPTY_WORD_POLICIES",
    "LoaderConfig",
]

# "skip": consume the vector bytes of an empty-word record, then drop it.
# "error": raise MalformedRecordError.
EMPTY_WORD_POLICIES = ("skip", "error")


@dataclass(frozen=True)
class LoaderConfig:
    """Configuration for EmbeddingTableLoader.

    Attributes:
        empty_word_policy: What to do with a record whose word is empty.
            "skip" still consumes the record's vector bytes (so the next record
            stays aligned) and leaves it out of the table; "error" aborts the
            load with MalformedRecordError.
        unicode_errors: Codec error handler used to decode word bytes
            ("strict", "replace", "ignore", ...). With "strict", invalid UTF-8
            raises MalformedRecordError.
        chunk_size: Number of bytes requested from the file per read.
        show_progress: Show a tqdm progress bar over the records.
        normalization_check_sample: Rows sampled after loading to check that
            vectors are unit-normalized (0 disables the check).
        normalization_tolerance: Allowed deviation of a sampled row's norm from 1.
    """
    empty_word_policy: str = "skip"
    unicode_errors: str = "strict"
    chunk_size: int = 1 << 20
    show_progress: bool = False
    normalization_check_sample: int = 1000
    normalization_tolerance: float = 1e-3

    def __post_init__(self):
        if self.empty_word_policy not in EMPTY_WORD_POLICIES:
            raise ValueError(
                f"empty_word_policy must be one of {EMPTY_WORD_POLICIES}, "
                f"got {self.empty_word_policy!r}"
            )
        try:
            codecs.lookup_error(self.unicode_errors)
        except LookupError:
            raise ValueError(f"Unknown unicode error handler: {self.unicode_errors!r}")
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        if self.normalization_check_sample < 0:
            raise ValueError("normalization_check_sample must be >= 0")
