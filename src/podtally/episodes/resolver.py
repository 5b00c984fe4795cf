"""Episode number resolution.

Turns the raw entries of one feed fetch into the show's canonical episode
sequence:

1. Parse every title with the parser bound to the show.
2. Unmatched titles are dropped (strict conventions) or numbered by feed
   position, ``len(entries) - index`` (generic convention only).
3. Collapse entries whose numbers have the same numeric value, keeping the
   most recently published one.
4. Sort ascending by numeric value.

Resolution never raises for odd titles; it reports counts instead.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from podtally.config.schema import ShowConfig
from podtally.episodes.strategies import get_parser
from podtally.feeds.models import Episode, RawEntry
from podtally.utils.datetime import to_local

logger = logging.getLogger(__name__)


@dataclass
class ResolutionReport:
    """Result of one resolution pass with diagnostic counters."""

    episodes: list[Episode] = field(default_factory=list)
    total_entries: int = 0
    unparseable: int = 0  # titles that did not match the show's convention
    positional: int = 0  # generic titles numbered by feed position
    duplicates: int = 0  # entries collapsed by the tie-break
    same_day: int = 0  # episodes collapsed by collapse_same_day

    @property
    def dropped(self) -> int:
        """Entries that produced no episode at all."""
        return self.unparseable - self.positional


def resolve_with_report(show: ShowConfig, raw_entries: list[RawEntry]) -> ResolutionReport:
    """Resolve raw feed entries and report what happened to each of them.

    Args:
        show: Show configuration (its strategy binding selects the parser)
        raw_entries: Entries in feed order, typically newest first

    Returns:
        ResolutionReport whose ``episodes`` are strictly ascending by number
    """
    parser = get_parser(show)
    report = ResolutionReport(total_entries=len(raw_entries))

    # Keyed by numeric value so "2" and "2.0" can't both survive
    best: dict[Decimal, Episode] = {}

    for index, entry in enumerate(raw_entries):
        title = entry.title.strip()
        parsed = parser.parse(title)

        if parsed is None:
            report.unparseable += 1
            if parser.drops_unmatched:
                logger.debug(
                    f"{show.name}: ignoring title without {show.strategy.value} "
                    f"numbering: {title!r}"
                )
                continue
            number = len(raw_entries) - index
            cleaned = title
            report.positional += 1
            logger.debug(f"{show.name}: no number in {title!r}, using feed position {number}")
        else:
            number, cleaned = parsed.number, parsed.title

        episode = Episode(
            number=number,
            title=cleaned,
            published=entry.published,
            link=entry.link,
            guid=entry.guid,
        )

        key = episode.sort_value
        current = best.get(key)
        if current is None:
            best[key] = episode
            continue

        report.duplicates += 1
        # Later publish date wins (a re-published or corrected episode)
        if episode.published > current.published:
            best[key] = episode

    episodes = list(best.values())
    if show.collapse_same_day:
        episodes = _collapse_same_day(episodes, report)

    report.episodes = sorted(episodes, key=lambda ep: ep.sort_value)

    if report.positional:
        logger.warning(
            f"{show.name}: {report.positional} episode(s) numbered by feed position; "
            "numbers may shift if the feed only returns a partial window"
        )

    logger.debug(
        f"{show.name}: resolved {len(report.episodes)} episode(s) from "
        f"{report.total_entries} entries ({report.unparseable} unparseable, "
        f"{report.duplicates} duplicate)"
    )
    return report


def _collapse_same_day(episodes: list[Episode], report: ResolutionReport) -> list[Episode]:
    """Keep one episode per local calendar date, the most recently published."""
    by_day: dict = {}
    for episode in episodes:
        day = to_local(episode.published).date()
        current = by_day.get(day)
        if current is None:
            by_day[day] = episode
            continue
        report.same_day += 1
        if (episode.published, episode.sort_value) > (current.published, current.sort_value):
            by_day[day] = episode
    return list(by_day.values())


def resolve_episodes(show: ShowConfig, raw_entries: list[RawEntry]) -> list[Episode]:
    """Resolve raw feed entries into the show's canonical episode list.

    Pure function: no I/O, no clock.

    Args:
        show: Show configuration
        raw_entries: Entries in feed order

    Returns:
        Episodes sorted ascending by numeric episode number, without duplicates.
        An empty feed (or one where nothing matched) gives an empty list.
    """
    return resolve_with_report(show, raw_entries).episodes
