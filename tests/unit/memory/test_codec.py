"""Tests for episode row encoding and decoding."""

from datetime import UTC, datetime

import pytest

from engram.db.errors import DecodeError, ValidationError
from engram.memory.codec import (
    EPISODE_COLUMNS,
    decode_episode,
    decode_metadata,
    decode_tags,
    decode_timestamp,
    encode_embedding,
    encode_tags,
    format_vector_literal,
)


def make_row(**overrides) -> tuple:
    values = {
        "id": "ep-1",
        "content": "User prefers dark mode",
        "name": None,
        "source": "agent-a",
        "source_model": None,
        "source_description": None,
        "group_id": "default",
        "tags": ["ui"],
        "embedding": [1.0, 0.0, 0.0, 0.0],
        "created_at": datetime(2025, 1, 1, tzinfo=UTC),
        "valid_at": None,
        "expired_at": None,
        "metadata": None,
    }
    values.update(overrides)
    return tuple(values[column] for column in EPISODE_COLUMNS)


class TestEncoding:
    """Tests for values bound on insert."""

    def test_empty_tags_become_null(self) -> None:
        assert encode_tags([]) is None
        assert encode_tags(None) is None
        assert encode_tags(("a", "b")) == ["a", "b"]

    def test_empty_embedding_becomes_null(self) -> None:
        assert encode_embedding([], 4) is None
        assert encode_embedding(None, 4) is None

    def test_embedding_converted_to_floats(self) -> None:
        assert encode_embedding([1, 0, 0.5, 0], 4) == [1.0, 0.0, 0.5, 0.0]

    def test_wrong_length_embedding_rejected(self) -> None:
        with pytest.raises(ValidationError, match="expected 4"):
            encode_embedding([0.1, 0.2, 0.3], 4)

    def test_non_finite_embedding_rejected(self) -> None:
        with pytest.raises(ValidationError):
            encode_embedding([0.1, float("nan"), 0.3, 0.4], 4)


class TestVectorLiteral:
    """Tests for the inlined query vector."""

    def test_literal_is_a_typed_constant(self) -> None:
        assert format_vector_literal([1.0, 0.5, 0, -2], 4) == "[1.0, 0.5, 0.0, -2.0]::FLOAT[4]"

    def test_wrong_length_rejected(self) -> None:
        with pytest.raises(ValueError):
            format_vector_literal([1.0], 4)

    def test_non_numeric_rejected(self) -> None:
        with pytest.raises(ValueError):
            format_vector_literal([1.0, "0); DROP TABLE episodes; --", 0.0, 0.0], 4)  # type: ignore[list-item]

    def test_infinite_rejected(self) -> None:
        with pytest.raises(ValueError):
            format_vector_literal([1.0, float("inf"), 0.0, 0.0], 4)


class TestDecoding:
    """Tests for converting engine values back into episodes."""

    def test_decode_full_row(self) -> None:
        episode = decode_episode(make_row(metadata='{"a":1}'))

        assert episode.id == "ep-1"
        assert episode.tags == ["ui"]
        assert episode.embedding == [1.0, 0.0, 0.0, 0.0]
        assert episode.created_at == datetime(2025, 1, 1, tzinfo=UTC)
        assert episode.metadata == '{"a":1}'

    def test_null_tags_decode_to_empty_list(self) -> None:
        assert decode_tags(None) == []

    def test_naive_timestamp_read_as_utc(self) -> None:
        result = decode_timestamp("created_at", datetime(2025, 1, 1, 9, 0))
        assert result == datetime(2025, 1, 1, 9, 0, tzinfo=UTC)

    def test_structured_metadata_reencoded(self) -> None:
        assert decode_metadata({"a": [1, 2]}) == '{"a":[1,2]}'
        assert decode_metadata('{"kept": "verbatim"}') == '{"kept": "verbatim"}'

    @pytest.mark.parametrize(
        "column,value",
        [
            ("tags", "ui,prefs"),
            ("tags", [1, 2]),
            ("embedding", "[1,0,0,0]"),
            ("created_at", "2025-01-01"),
            ("metadata", 42),
            ("content", b"bytes"),
        ],
    )
    def test_unexpected_shapes_raise(self, column: str, value: object) -> None:
        with pytest.raises(DecodeError):
            decode_episode(make_row(**{column: value}))

    def test_short_row_raises(self) -> None:
        with pytest.raises(DecodeError):
            decode_episode(("ep-1", "content"))
