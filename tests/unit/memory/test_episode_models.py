"""Tests for episode models."""

from datetime import UTC, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from engram.memory.models import Episode, SearchParams, UpdateParams, ensure_utc


class TestEnsureUtc:
    """Tests for timestamp normalization."""

    def test_naive_is_interpreted_as_utc(self) -> None:
        assert ensure_utc(datetime(2025, 1, 1, 12, 0)) == datetime(2025, 1, 1, 12, 0, tzinfo=UTC)

    def test_aware_is_converted_to_utc(self) -> None:
        plus_two = timezone(timedelta(hours=2))
        result = ensure_utc(datetime(2025, 1, 1, 14, 0, tzinfo=plus_two))

        assert result == datetime(2025, 1, 1, 12, 0, tzinfo=UTC)
        assert result.tzinfo is UTC

    def test_none_passes_through(self) -> None:
        assert ensure_utc(None) is None


class TestEpisode:
    """Tests for Episode model."""

    def test_minimal_episode(self) -> None:
        episode = Episode(content="remember this", source="agent")

        assert episode.id == ""
        assert episode.group_id == ""
        assert episode.tags == []
        assert episode.embedding is None
        assert episode.created_at is None

    def test_content_and_source_required(self) -> None:
        with pytest.raises(ValidationError):
            Episode(content="no source")  # type: ignore[call-arg]

    def test_timestamps_normalized_on_assignment(self) -> None:
        episode = Episode(content="c", source="s")
        episode.valid_at = datetime(2025, 6, 1, 8, 30)

        assert episode.valid_at.tzinfo is UTC

    def test_is_expired(self) -> None:
        now = datetime(2025, 6, 1, tzinfo=UTC)
        live = Episode(content="c", source="s")
        retired = Episode(content="c", source="s", expired_at=now - timedelta(seconds=1))
        expiring = Episode(content="c", source="s", expired_at=now + timedelta(days=1))

        assert live.is_expired(now) is False
        assert retired.is_expired(now) is True
        assert expiring.is_expired(now) is False


class TestSearchParams:
    """Tests for SearchParams."""

    def test_defaults(self) -> None:
        params = SearchParams()

        assert params.query == ""
        assert params.tags == []
        assert params.include_expired is False
        assert params.limit == 10

    @pytest.mark.parametrize("max_results,expected", [(3, 3), (0, 10), (-1, 10), (50, 50)])
    def test_limit(self, max_results: int, expected: int) -> None:
        assert SearchParams(max_results=max_results).limit == expected

    def test_bounds_normalized(self) -> None:
        params = SearchParams(before=datetime(2025, 1, 1))
        assert params.before == datetime(2025, 1, 1, tzinfo=UTC)


class TestUpdateParams:
    """Tests for UpdateParams."""

    def test_empty(self) -> None:
        assert UpdateParams().is_empty() is True

    def test_empty_tag_list_is_an_update(self) -> None:
        assert UpdateParams(tags=[]).is_empty() is False

    def test_metadata_only(self) -> None:
        assert UpdateParams(metadata="{}").is_empty() is False
