"""Tests for weekly freshness evaluation."""

from datetime import datetime, timedelta, timezone

import pytest

from podtally.config.schema import ShowConfig
from podtally.episodes.freshness import (
    evaluate_freshness,
    is_released_this_week,
    sunday_index,
    week_start,
)
from podtally.feeds.models import Episode

# Wednesday, 10 January 2024, local time
WEDNESDAY = datetime(2024, 1, 10, 15, 30)


def make_show(weekday: str = "wednesday") -> ShowConfig:
    return ShowConfig(name="Show", weekday=weekday, locator="https://example.com/feed.rss")


def make_episode(published: datetime) -> Episode:
    return Episode(number=1, title="Episode", published=published)


class TestWeekStart:
    """Tests for the Sunday-anchored week boundary."""

    def test_midweek(self) -> None:
        """Test the boundary is the preceding Sunday at local midnight."""
        assert week_start(WEDNESDAY) == datetime(2024, 1, 7).astimezone()

    def test_on_sunday(self) -> None:
        """Test Sunday itself starts the week."""
        assert week_start(datetime(2024, 1, 7, 23, 59)) == datetime(2024, 1, 7).astimezone()

    def test_on_saturday(self) -> None:
        """Test Saturday belongs to the week that started six days earlier."""
        assert week_start(datetime(2024, 1, 13, 8, 0)) == datetime(2024, 1, 7).astimezone()

    def test_result_is_aware(self) -> None:
        """Test the boundary carries the local timezone."""
        assert week_start(WEDNESDAY).tzinfo is not None

    @pytest.mark.parametrize(
        "day,index",
        [(7, 0), (8, 1), (9, 2), (10, 3), (11, 4), (12, 5), (13, 6)],
    )
    def test_sunday_index(self, day: int, index: int) -> None:
        """Test weekday positions in Sunday-first order."""
        assert sunday_index(datetime(2024, 1, day)) == index


class TestIsReleasedThisWeek:
    """Tests for the data-driven freshness check."""

    def test_sunday_midnight_is_this_week(self) -> None:
        """Test an episode at Sunday 00:00:00 counts."""
        episode = make_episode(datetime(2024, 1, 7, 0, 0, 0))
        assert is_released_this_week(make_show(), episode, now=WEDNESDAY) is True

    def test_preceding_saturday_is_last_week(self) -> None:
        """Test an episode the Saturday before does not count."""
        episode = make_episode(datetime(2024, 1, 6, 23, 59, 59))
        assert is_released_this_week(make_show(), episode, now=WEDNESDAY) is False

    def test_aware_timestamp_compared_in_local_time(self) -> None:
        """Test aware timestamps are converted before comparing."""
        boundary = datetime(2024, 1, 7).astimezone()
        just_after = (boundary + timedelta(seconds=1)).astimezone(timezone.utc)
        just_before = (boundary - timedelta(seconds=1)).astimezone(timezone.utc)

        assert is_released_this_week(make_show(), make_episode(just_after), now=WEDNESDAY)
        assert not is_released_this_week(make_show(), make_episode(just_before), now=WEDNESDAY)

    def test_result_records_episode_basis(self) -> None:
        """Test results from data say so."""
        episode = make_episode(datetime(2024, 1, 9, 10, 0))

        result = evaluate_freshness(make_show(), episode, now=WEDNESDAY)

        assert result.released is True
        assert result.basis == "episode"
        assert result.episode is episode
        assert result.week_start == datetime(2024, 1, 7).astimezone()


class TestScheduleFallback:
    """Tests for shows without stored episodes."""

    @pytest.mark.parametrize(
        "weekday,expected",
        [
            ("sunday", True),
            ("monday", True),
            ("wednesday", True),
            ("thursday", False),
            ("saturday", False),
        ],
    )
    def test_schedule_comparison(self, weekday: str, expected: bool) -> None:
        """Test today's position is compared with the scheduled weekday."""
        result = evaluate_freshness(make_show(weekday), None, now=WEDNESDAY)

        assert result.released is expected
        assert result.basis == "schedule"
        assert result.episode is None

    def test_portuguese_weekday(self) -> None:
        """Test aliases feed the same fallback."""
        assert is_released_this_week(make_show("quarta"), None, now=WEDNESDAY) is True
        assert is_released_this_week(make_show("sábado"), None, now=WEDNESDAY) is False
