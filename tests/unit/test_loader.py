"""
Unit tests for the binary model loader.

Tests for:
- Header and record parsing, with and without trailing newlines
- Stream exhaustion before the declared record count
- Duplicate words (last write wins)
- Empty-word policy ("skip" keeps alignment, "error" aborts)
- Error taxonomy (not found, malformed header, truncated vectors)
"""

import io
import logging
import struct

import numpy as np
import pytest

from w2vquery import (
    EmbeddingTableLoader,
    LoaderConfig,
    MalformedHeaderError,
    MalformedRecordError,
    ModelNotFoundError,
    UnexpectedEOFError,
    load_embedding_table,
)

from conftest import ANIMALS, encode_header, encode_model, encode_record


class TestLoad:
    """Tests for loading well-formed files."""

    def test_three_records(self, animals_path):
        """Test header "3 3" with three records."""
        table = load_embedding_table(animals_path)
        assert table.vocabulary_size == 3
        assert table.vector_size == 3
        assert set(table.words) == {"cat", "dog", "fish"}
        np.testing.assert_allclose(table.get_vector("dog"), [0.9, 0.1, 0.0], rtol=1e-6)

    def test_accepts_str_path(self, animals_path):
        table = load_embedding_table(str(animals_path))
        assert len(table) == 3

    def test_without_trailing_newlines(self, write_model):
        """Test gensim-style records with no newline after the vector."""
        path = write_model(encode_model(ANIMALS, vector_size=3, newline=False))
        table = load_embedding_table(path)
        assert table.words == ("cat", "dog", "fish")

    def test_mixed_newlines(self, write_model):
        data = (
            encode_header(2, 2)
            + encode_record("a", [1.0, 2.0], newline=False)
            + encode_record("b", [3.0, 4.0], newline=True)
        )
        table = load_embedding_table(write_model(data))
        np.testing.assert_array_equal(table.get_vector("a"), [1.0, 2.0])
        np.testing.assert_array_equal(table.get_vector("b"), [3.0, 4.0])

    def test_vector_bytes_equal_to_newline_and_space(self, write_model):
        """Test vector payloads containing 0x0A / 0x20 bytes are read by length."""
        tricky = struct.unpack("<f", b"\n \n ")[0]
        data = encode_model([("w", [tricky]), ("z", [1.0])], vector_size=1, newline=False)
        table = load_embedding_table(write_model(data))
        assert table.words == ("w", "z")
        assert table.get_vector("w")[0] == np.float32(tricky)

    def test_utf8_words(self, write_model):
        path = write_model(encode_model([("naïve", [1.0]), ("東京", [2.0])], vector_size=1))
        table = load_embedding_table(path)
        assert table.has_word("naïve")
        assert table.has_word("東京")

    def test_stops_at_declared_count(self, write_model):
        """Test trailing bytes beyond the declared records are ignored."""
        data = encode_model(ANIMALS, vector_size=3, vocabulary_size=2) + b"garbage"
        table = load_embedding_table(write_model(data))
        assert table.words == ("cat", "dog")

    def test_stream_exhausted_early(self, write_model, caplog):
        """Test fewer records than declared loads what is there."""
        data = encode_model(ANIMALS, vector_size=3, vocabulary_size=10)
        with caplog.at_level(logging.WARNING, logger="w2vquery.model_io.loader"):
            table = load_embedding_table(write_model(data))
        assert table.vocabulary_size == 3
        assert "3 of 10" in caplog.text

    def test_empty_model(self, write_model):
        table = load_embedding_table(write_model(b"0 5\n"))
        assert table.vocabulary_size == 0
        assert table.vector_size == 5

    def test_header_without_records(self, write_model):
        table = load_embedding_table(write_model(b"4 2"))
        assert table.vocabulary_size == 0
        assert table.vector_size == 2

    def test_small_chunks(self, write_model):
        """Test parsing is independent of the read chunk size."""
        path = write_model(encode_model(ANIMALS, vector_size=3))
        table = EmbeddingTableLoader(LoaderConfig(chunk_size=3)).load(path)
        assert table.words == ("cat", "dog", "fish")
        np.testing.assert_allclose(table.get_vector("fish"), [0.0, 1.0, 0.0])

    def test_load_stream(self):
        data = encode_model(ANIMALS, vector_size=3)
        table = EmbeddingTableLoader().load_stream(io.BytesIO(data))
        assert table.vocabulary_size == 3

    def test_progress_bar(self, animals_path):
        table = EmbeddingTableLoader(LoaderConfig(show_progress=True)).load(animals_path)
        assert table.vocabulary_size == 3

    def test_table_is_read_only(self, animals_path):
        table = load_embedding_table(animals_path)
        with pytest.raises(ValueError):
            table.get_vector("cat")[0] = 5.0


class TestDuplicates:
    """Tests for duplicate words."""

    def test_last_write_wins(self, write_model):
        data = encode_model(
            [("cat", [1.0, 0.0]), ("dog", [0.0, 1.0]), ("cat", [0.5, 0.5])],
            vector_size=2,
        )
        table = load_embedding_table(write_model(data))
        assert table.vocabulary_size == 2
        np.testing.assert_array_equal(table.get_vector("cat"), [0.5, 0.5])
        assert table.words == ("cat", "dog")


class TestEmptyWords:
    """Tests for records with an empty word."""

    def _data(self):
        return encode_model(
            [("cat", [1.0, 2.0]), ("", [9.0, 9.0]), ("dog", [3.0, 4.0])],
            vector_size=2,
        )

    def test_skip_keeps_alignment(self, write_model, caplog):
        """Test the empty word's vector is consumed so later records parse."""
        with caplog.at_level(logging.WARNING, logger="w2vquery.model_io.loader"):
            table = load_embedding_table(write_model(self._data()))
        assert table.words == ("cat", "dog")
        assert table.vocabulary_size == 2
        np.testing.assert_array_equal(table.get_vector("dog"), [3.0, 4.0])
        assert "empty word" in caplog.text

    def test_error_policy(self, write_model):
        config = LoaderConfig(empty_word_policy="error")
        with pytest.raises(MalformedRecordError) as exc_info:
            load_embedding_table(write_model(self._data()), config)
        assert exc_info.value.index == 1

    def test_invalid_policy(self):
        with pytest.raises(ValueError):
            LoaderConfig(empty_word_policy="ignore")


class TestErrors:
    """Tests for load failures."""

    def test_not_found(self, tmp_path):
        with pytest.raises(ModelNotFoundError):
            load_embedding_table(tmp_path / "missing.bin")

    def test_not_found_is_file_not_found(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_embedding_table(tmp_path / "missing.bin")

    @pytest.mark.parametrize("header", [b"three 3\n", b"3\n", b"\n", b"", b"3 -1\n"])
    def test_malformed_header(self, write_model, header):
        with pytest.raises(MalformedHeaderError):
            load_embedding_table(write_model(header + encode_record("a", [1.0])))

    def test_truncated_vector(self, write_model):
        data = encode_model(ANIMALS, vector_size=3)[:-6]
        with pytest.raises(UnexpectedEOFError) as exc_info:
            load_embedding_table(write_model(data))
        assert exc_info.value.index == 2

    def test_truncated_word(self, write_model):
        data = encode_header(2, 1) + encode_record("a", [1.0]) + b"unfinished"
        with pytest.raises(UnexpectedEOFError):
            load_embedding_table(write_model(data))

    def test_eof_error_is_eof(self, write_model):
        with pytest.raises(EOFError):
            load_embedding_table(write_model(encode_header(1, 4) + b"a " + b"\x00" * 3))

    def test_invalid_utf8_word(self, write_model):
        data = encode_header(1, 1) + encode_record(b"\xff\xfe", [1.0])
        with pytest.raises(MalformedRecordError):
            load_embedding_table(write_model(data))

    def test_invalid_utf8_word_replaced(self, write_model):
        data = encode_header(1, 1) + encode_record(b"a\xff", [1.0])
        table = load_embedding_table(write_model(data), LoaderConfig(unicode_errors="replace"))
        assert table.has_word("a�")


class TestNormalizationCheck:
    """Tests for the post-load unit-norm warning."""

    def test_warns_for_raw_vectors(self, write_model, caplog):
        path = write_model(encode_model([("a", [3.0, 4.0])], vector_size=2))
        with caplog.at_level(logging.WARNING, logger="w2vquery.model_io.loader"):
            load_embedding_table(path)
        assert "not unit length" in caplog.text

    def test_silent_for_unit_vectors(self, write_model, caplog):
        path = write_model(encode_model([("a", [0.6, 0.8]), ("b", [1.0, 0.0])], vector_size=2))
        with caplog.at_level(logging.WARNING, logger="w2vquery.model_io.loader"):
            load_embedding_table(path)
        assert "not unit length" not in caplog.text


class TestDeclaredCountOverstated:
    """Tests for headers that declare far more than the file holds."""

    def test_huge_vocabulary_size(self, write_model):
        """Test storage is sized by the records read, not the header count."""
        data = encode_header(10 ** 12, 300) + encode_record("a", [0.5] * 300)
        table = load_embedding_table(write_model(data))
        assert table.vocabulary_size == 1
        assert table.vector_size == 300
        assert table.get_vector("a")[0] == 0.5

    def test_huge_vector_size(self, write_model):
        data = encode_header(1, 10 ** 12) + b"a " + b"\x00" * 16
        with pytest.raises(UnexpectedEOFError):
            load_embedding_table(write_model(data))

    def test_storage_grows_across_many_records(self, write_model):
        records = [(f"w{i}", [float(i), -float(i)]) for i in range(100)]
        table = load_embedding_table(write_model(encode_model(records, vector_size=2)))
        assert table.vocabulary_size == 100
        assert table.vectors.shape == (100, 2)
        np.testing.assert_array_equal(table.get_vector("w73"), [73.0, -73.0])
        np.testing.assert_array_equal(table.get_vector("w0"), [0.0, 0.0])


class TestWordsEmptyAfterDecoding:
    """Tests for words that only become empty once decoded."""

    def _data(self):
        return (
            encode_header(2, 1)
            + encode_record(b"\xff\xfe", [1.0])
            + encode_record("ok", [2.0])
        )

    def test_ignored_bytes_follow_skip_policy(self, write_model):
        config = LoaderConfig(unicode_errors="ignore")
        table = load_embedding_table(write_model(self._data()), config)
        assert table.words == ("ok",)
        assert not table.has_word("")

    def test_ignored_bytes_follow_error_policy(self, write_model):
        config = LoaderConfig(unicode_errors="ignore", empty_word_policy="error")
        with pytest.raises(MalformedRecordError) as exc_info:
            load_embedding_table(write_model(self._data()), config)
        assert exc_info.value.index == 0
