"""History merging: decide which resolved episodes are new for a show."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Protocol

from podtally.episodes.freshness import week_start
from podtally.feeds.models import Episode, EpisodeNumber
from podtally.utils.datetime import to_local

logger = logging.getLogger(__name__)


class EpisodeLookup(Protocol):
    """Callable answering whether an episode is already stored."""

    def __call__(self, show_id: str, number: EpisodeNumber) -> bool: ...


@dataclass
class MergeResult:
    """Episodes to persist for one show, plus what was left out."""

    show_id: str
    to_insert: list[Episode] = field(default_factory=list)
    skipped: int = 0  # already stored, or repeated within the input
    inserted: int = 0  # set once the store has applied ``to_insert``


def plan_merge(show_id: str, resolved: list[Episode], exists: EpisodeLookup) -> MergeResult:
    """Compute the merge delta for a show.

    Args:
        show_id: Show identifier
        resolved: Resolved episodes, any order
        exists: Store lookup for (show_id, number)

    Returns:
        MergeResult whose ``to_insert`` is ascending and free of numbers
        already stored or repeated in the input
    """
    result = MergeResult(show_id=show_id)
    seen: set[Decimal] = set()

    for episode in sorted(resolved, key=lambda ep: ep.sort_value):
        key = episode.sort_value
        if key in seen or exists(show_id, episode.number):
            result.skipped += 1
            continue
        seen.add(key)
        result.to_insert.append(episode)

    logger.debug(
        f"{show_id}: {len(result.to_insert)} new episode(s), {result.skipped} already known"
    )
    return result


def merge_history(show_id: str, resolved: list[Episode], exists: EpisodeLookup) -> list[Episode]:
    """Return the episodes of ``resolved`` that are not stored yet, ascending.

    Running it again after the returned episodes were persisted yields an
    empty list.
    """
    return plan_merge(show_id, resolved, exists).to_insert


def should_skip_update(latest_episode: Episode | None, now: datetime | None = None) -> bool:
    """Whether a routine poll can skip a show.

    A show is skipped when its latest stored episode was published in the
    current week. Backfills never consult this.
    """
    if latest_episode is None:
        return False
    return to_local(latest_episode.published) >= week_start(now)
