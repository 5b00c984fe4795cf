"""Weekly freshness evaluation.

A week starts on Sunday at local midnight. A show counts as "released this
week" when its latest known episode was published at or after that instant.
Shows with no stored episodes fall back to their configured weekday.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Literal

from podtally.config.schema import ShowConfig
from podtally.feeds.models import Episode
from podtally.utils.datetime import now_local, to_local

FreshnessBasis = Literal["episode", "schedule"]


@dataclass(frozen=True)
class FreshnessResult:
    """Outcome of one freshness evaluation."""

    released: bool
    episode: Episode | None
    week_start: datetime
    basis: FreshnessBasis  # "schedule" means no episode data was available


def sunday_index(moment: datetime) -> int:
    """Position of ``moment``'s weekday in the Sunday-first order."""
    # datetime.weekday() is Monday=0
    return (moment.weekday() + 1) % 7


def week_start(now: datetime | None = None) -> datetime:
    """Local midnight of the most recent Sunday (today, if today is Sunday)."""
    current = to_local(now) if now is not None else now_local()
    midnight = current.replace(hour=0, minute=0, second=0, microsecond=0)
    sunday = midnight - timedelta(days=sunday_index(current))
    # Re-localize so a DST change inside the week gets the right offset
    return sunday.replace(tzinfo=None).astimezone()


def evaluate_freshness(
    show: ShowConfig,
    latest_episode: Episode | None,
    now: datetime | None = None,
) -> FreshnessResult:
    """Decide whether a show has released this week.

    Args:
        show: Show configuration (its weekday drives the no-data fallback)
        latest_episode: Most recent stored episode, or None if there is none
        now: Reference time, defaults to the current local time

    Returns:
        FreshnessResult with ``basis`` telling data-driven results apart
        from the schedule heuristic
    """
    current = to_local(now) if now is not None else now_local()
    start = week_start(current)

    if latest_episode is None:
        released = sunday_index(current) >= show.weekday_index
        return FreshnessResult(released, None, start, "schedule")

    released = to_local(latest_episode.published) >= start
    return FreshnessResult(released, latest_episode, start, "episode")


def is_released_this_week(
    show: ShowConfig,
    latest_episode: Episode | None,
    now: datetime | None = None,
) -> bool:
    """True if the show's latest episode falls in the current week."""
    return evaluate_freshness(show, latest_episode, now).released
