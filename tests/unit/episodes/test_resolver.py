"""Tests for episode number resolution."""

from datetime import datetime, timedelta, timezone

import pytest

from podtally.config.defaults import DEFAULT_SHOWS
from podtally.config.schema import NumberingStrategy, ShowConfig
from podtally.episodes.resolver import resolve_episodes, resolve_with_report
from podtally.feeds.models import RawEntry


def make_show(strategy: NumberingStrategy, name: str = "Test Show", **kwargs) -> ShowConfig:
    return ShowConfig(
        name=name, weekday="monday", locator="https://example.com/feed.rss",
        strategy=strategy, **kwargs,
    )


class TestOrdering:
    """Tests for ordering and duplicate handling."""

    @pytest.mark.parametrize("strategy", list(NumberingStrategy))
    def test_output_strictly_ascending(self, strategy: NumberingStrategy, make_entries) -> None:
        """Test output is strictly ascending whatever the convention."""
        titles = {
            NumberingStrategy.TRAILING_HASH: ["C | #3", "A | #1", "B | #2", "B2 | #2"],
            NumberingStrategy.LEADING_COLON: ["3 : C", "1 : A", "2 : B", "2 : B2"],
            NumberingStrategy.NAMED_PREFIX: ["Test Show #3 - C", "Test Show #1 - A", "Test Show #2 - B"],
            NumberingStrategy.DECIMAL_BONUS: ["C | #3", "A | #0.5", "B | #2", "B | #2.0"],
            NumberingStrategy.GENERIC: ["Ep 3", "Ep 1", "Extra", "Ep 2", "Ep 2 again"],
        }[strategy]

        episodes = resolve_episodes(make_show(strategy), make_entries(*titles))
        values = [episode.sort_value for episode in episodes]

        assert values == sorted(values)
        assert len(values) == len(set(values))

    def test_later_publish_wins_duplicates(self, make_entries) -> None:
        """Test the most recently published entry wins a number."""
        # make_entries lists newest first
        entries = make_entries("2 : Corrected", "2 : Original", "1 : First")

        episodes = resolve_episodes(make_show(NumberingStrategy.LEADING_COLON), entries)

        assert [(ep.number, ep.title) for ep in episodes] == [(1, "First"), (2, "Corrected")]

    def test_equal_timestamp_keeps_first_seen(self) -> None:
        """Test exact timestamp ties keep feed order."""
        published = datetime(2024, 3, 1, tzinfo=timezone.utc)
        entries = [
            RawEntry(title="5 : First seen", published=published),
            RawEntry(title="5 : Second seen", published=published),
        ]

        episodes = resolve_episodes(make_show(NumberingStrategy.LEADING_COLON), entries)

        assert len(episodes) == 1
        assert episodes[0].title == "First seen"

    def test_integer_and_decimal_of_same_value_collapse(self, make_entries) -> None:
        """Test '2' and '2.0' are the same episode."""
        entries = make_entries("Newer | #2.0", "Older | #2")

        report = resolve_with_report(make_show(NumberingStrategy.DECIMAL_BONUS), entries)

        assert len(report.episodes) == 1
        assert report.episodes[0].number == "2.0"
        assert report.duplicates == 1

    def test_large_numbers_are_not_merged(self, make_entries) -> None:
        """Test integers beyond float precision stay separate episodes."""
        entries = make_entries("B | #9007199254740993", "A | #9007199254740992")

        report = resolve_with_report(make_show(NumberingStrategy.DECIMAL_BONUS), entries)

        assert [episode.number for episode in report.episodes] == [
            9007199254740992,
            9007199254740993,
        ]
        assert report.duplicates == 0

    def test_empty_input(self) -> None:
        """Test an empty feed resolves to nothing."""
        assert resolve_episodes(make_show(NumberingStrategy.GENERIC), []) == []


class TestDecimalPreservation:
    """Tests for decimal bonus numbering."""

    def test_decimal_number_and_verbatim_title(self, make_entries) -> None:
        """Test '| #0.95' yields '0.95' and the untouched title."""
        title = "Bônus: conversa perdida | #0.95"
        entries = make_entries("Segundo | #2", title, "Primeiro | #1")

        episodes = resolve_episodes(
            make_show(NumberingStrategy.DECIMAL_BONUS, name="Velho amigo"), entries
        )

        assert [ep.number for ep in episodes] == ["0.95", 1, 2]
        assert episodes[0].number == "0.95"
        assert episodes[0].title == title

    def test_bundled_velho_amigo_accepts_both_formats(self, make_entries) -> None:
        """Test newer 'velho amigo #N' titles resolve next to older decimals."""
        show = ShowConfig(**DEFAULT_SHOWS["velho-amigo"])
        entries = make_entries(
            "a amizade | velho amigo #12", "outro | velho amigo #11", "antigo | #0.95"
        )

        report = resolve_with_report(show, entries)

        assert [ep.number for ep in report.episodes] == ["0.95", 11, 12]
        assert report.episodes[-1].title == "a amizade | velho amigo #12"
        assert report.unparseable == 0


class TestStrictStrategies:
    """Tests for strategies that drop unmatched titles."""

    def test_named_prefix_rejects_unmatched(self, make_entries) -> None:
        """Test non-matching titles are dropped, not numbered."""
        entries = make_entries("Prata da Casa #12 - Tema X", "Something else entirely")

        report = resolve_with_report(
            make_show(NumberingStrategy.NAMED_PREFIX, name="Prata da Casa"), entries
        )

        assert len(report.episodes) == 1
        assert report.episodes[0].number == 12
        assert report.episodes[0].title == "Tema X"
        assert report.unparseable == 1
        assert report.positional == 0
        assert report.dropped == 1

    def test_leading_colon_scenario(self, ze_carioca, make_entries) -> None:
        """Test the Zé Carioca titles resolve to a single episode."""
        entries = make_entries("45 : Episode Forty Five", "not numbered")

        episodes = resolve_episodes(ze_carioca, entries)

        assert len(episodes) == 1
        assert episodes[0].number == 45
        assert episodes[0].title == "Episode Forty Five"

    def test_all_dropped(self, make_entries) -> None:
        """Test a feed with no matching titles yields nothing."""
        entries = make_entries("Trailer", "Bastidores")
        assert resolve_episodes(make_show(NumberingStrategy.TRAILING_HASH), entries) == []


class TestGenericFallback:
    """Tests for positional numbering of the generic convention."""

    def test_positional_numbers_newest_first(self, make_entries) -> None:
        """Test the first entry in feed order gets the highest number."""
        entries = make_entries("Newest", "Middle", "Oldest")

        report = resolve_with_report(make_show(NumberingStrategy.GENERIC), entries)
        numbers = {ep.title: ep.number for ep in report.episodes}

        assert numbers == {"Newest": 3, "Middle": 2, "Oldest": 1}
        assert report.positional == 3
        assert report.dropped == 0

    def test_positional_fallback_is_logged(self, make_entries, caplog) -> None:
        """Test positional numbering is reported at WARNING."""
        caplog.set_level("WARNING", logger="podtally.episodes.resolver")

        resolve_with_report(make_show(NumberingStrategy.GENERIC), make_entries("Sem número"))

        assert any("feed position" in record.getMessage() for record in caplog.records)

    def test_titles_are_not_modified(self, make_entries) -> None:
        """Test generic titles stay as published."""
        episodes = resolve_episodes(
            make_show(NumberingStrategy.GENERIC), make_entries("Episódio 7 - Final")
        )
        assert episodes[0].title == "Episódio 7 - Final"


class TestCollapseSameDay:
    """Tests for the per-show same-date collapse."""

    def test_keeps_latest_per_date(self) -> None:
        """Test only the most recent episode of a day survives."""
        morning = datetime(2024, 5, 6, 9, 0)
        entries = [
            RawEntry(title="Ep 11", published=morning + timedelta(hours=2)),
            RawEntry(title="Ep 10", published=morning),
            RawEntry(title="Ep 9", published=morning - timedelta(days=2)),
        ]

        report = resolve_with_report(
            make_show(NumberingStrategy.GENERIC, collapse_same_day=True), entries
        )

        assert [ep.number for ep in report.episodes] == [9, 11]
        assert report.same_day == 1

    def test_disabled_by_default(self) -> None:
        """Test episodes sharing a date are all kept unless asked."""
        morning = datetime(2024, 5, 6, 9, 0)
        entries = [
            RawEntry(title="Ep 11", published=morning + timedelta(hours=2)),
            RawEntry(title="Ep 10", published=morning),
        ]

        episodes = resolve_episodes(make_show(NumberingStrategy.GENERIC), entries)

        assert [ep.number for ep in episodes] == [10, 11]
