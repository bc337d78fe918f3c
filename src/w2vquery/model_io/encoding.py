"""Byte-level decoding for the binary word2vec model format.

File layout:
    Header: b"<vocabulary_size> <vector_size>\\n" (ASCII decimal)
    Record: <word bytes> b" " <vector_size * 4 bytes> [b"\\n"]

Word bytes are UTF-8 and contain no space or newline. Vector bytes are
little-endian IEEE-754 float32. The trailing newline is optional: the C
word2vec tool writes it, gensim's ``save_word2vec_format(binary=True)``
does not.
"""
from __future__ import annotations

from typing import BinaryIO, Optional, Tuple

import numpy as np

from ..common.errors import MalformedHeaderError, MalformedRecordError

__all__ = [
    "SPACE",
    "NEWLINE",
    "VECTOR_DTYPE",
    "ByteCursor",
    "parse_header",
    "decode_word",
    "decode_vector",
]

SPACE = 0x20
NEWLINE = 0x0A

VECTOR_DTYPE = np.dtype("<f4")


class ByteCursor:
    """
    Forward-only reader over a binary stream with delimiter search.

    Reads the stream in chunks and keeps track of the absolute byte offset,
    so parse errors can report where the file went wrong.
    """

    def __init__(self, stream: BinaryIO, chunk_size: int = 1 << 20):
        self._stream = stream
        self._chunk_size = chunk_size
        self._buffer = b""
        self._pos = 0
        self._consumed = 0  # bytes dropped from the front of the buffer
        self._eof = False

    @property
    def offset(self) -> int:
        """Absolute offset of the next unread byte."""
        return self._consumed + self._pos

    def _fill(self) -> bool:
        """Append the next chunk to the buffer. Returns False at end of stream."""
        if self._eof:
            return False
        chunk = self._stream.read(self._chunk_size)
        if not chunk:
            self._eof = True
            return False
        self._consumed += self._pos
        self._buffer = self._buffer[self._pos:] + chunk
        self._pos = 0
        return True

    def at_eof(self) -> bool:
        """True when no bytes remain."""
        return self._pos >= len(self._buffer) and not self._fill()

    def read_until(self, delimiter: int) -> Tuple[bytes, bool]:
        """
        Read bytes up to the next ``delimiter`` byte.

        The delimiter is consumed but not returned.

        Returns:
            Tuple of (bytes read, whether the delimiter was found). When the
            delimiter is not found, everything up to end of stream is returned.
        """
        search_from = self._pos
        while True:
            end = self._buffer.find(bytes((delimiter,)), search_from)
            if end != -1:
                data = self._buffer[self._pos:end]
                self._pos = end + 1
                return data, True
            # _fill() rebases the buffer on self._pos
            scanned = len(self._buffer) - self._pos
            if not self._fill():
                data = self._buffer[self._pos:]
                self._pos = len(self._buffer)
                return data, False
            search_from = scanned

    def read_exact(self, size: int) -> bytes:
        """Read up to ``size`` bytes; fewer are returned only at end of stream."""
        while len(self._buffer) - self._pos < size:
            if not self._fill():
                break
        data = self._buffer[self._pos:self._pos + size]
        self._pos += len(data)
        return data

    def peek_byte(self) -> Optional[int]:
        """Return the next byte without consuming it, or None at end of stream."""
        if self._pos >= len(self._buffer) and not self._fill():
            return None
        return self._buffer[self._pos]

    def skip_byte_if(self, value: int) -> bool:
        """Consume the next byte only if it equals ``value``."""
        if self.peek_byte() == value:
            self._pos += 1
            return True
        return False


def parse_header(line: bytes) -> Tuple[int, int]:
    """
    Parse the header line into (vocabulary_size, vector_size).

    Fields beyond the first two are ignored, as is surrounding whitespace
    (including a trailing carriage return).

    Args:
        line: Header bytes without the terminating newline.

    Returns:
        Tuple of (vocabulary_size, vector_size)

    Raises:
        MalformedHeaderError: If the header is not text or does not start with
            two non-negative integers.

    Example:
        >>> parse_header(b"3 300")
        (3, 300)
    """
    try:
        text = line.decode("utf-8")
    except UnicodeDecodeError:
        raise MalformedHeaderError("Header is not valid UTF-8 text", offset=0)

    parts = text.split()
    if len(parts) < 2:
        raise MalformedHeaderError(
            f"Header must hold '<vocabulary_size> <vector_size>', got {text!r}",
            offset=0,
        )

    try:
        vocabulary_size, vector_size = int(parts[0]), int(parts[1])
    except ValueError:
        raise MalformedHeaderError(f"Header fields are not integers: {text!r}", offset=0)

    if vocabulary_size < 0 or vector_size < 0:
        raise MalformedHeaderError(f"Header fields must be non-negative: {text!r}", offset=0)

    return vocabulary_size, vector_size


def decode_word(
    data: bytes,
    errors: str = "strict",
    offset: Optional[int] = None,
    index: Optional[int] = None,
) -> str:
    """
    Decode a record's word bytes as UTF-8.

    Raises:
        MalformedRecordError: If the bytes are not valid UTF-8 and ``errors``
            is "strict".
    """
    try:
        return data.decode("utf-8", errors=errors)
    except UnicodeDecodeError as e:
        raise MalformedRecordError(
            f"Word is not valid UTF-8: {data!r} ({e.reason})",
            offset=offset,
            index=index,
        )


def decode_vector(data: bytes, vector_size: int) -> np.ndarray:
    """
    Decode ``vector_size * 4`` little-endian float32 bytes.

    Returns:
        Native-endian float32 array of length ``vector_size``.

    Example:
        >>> import struct
        >>> decode_vector(struct.pack("<2f", 1.0, 0.5), 2).tolist()
        [1.0, 0.5]
    """
    return np.frombuffer(data, dtype=VECTOR_DTYPE, count=vector_size).astype(np.float32)
