"""Sync service: fetch, resolve and merge episodes for configured shows.

Shows are processed concurrently up to ``max_concurrency`` at a time. A
feed that cannot be fetched fails only its own show; the error is recorded
in that show's result and the other shows carry on.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime

from podtally.config.schema import ShowConfig
from podtally.episodes.merger import plan_merge, should_skip_update
from podtally.episodes.resolver import ResolutionReport, resolve_with_report
from podtally.feeds.fetcher import FeedFetcher
from podtally.storage.store import EpisodeRepository
from podtally.utils.errors import FeedUnavailableError

logger = logging.getLogger(__name__)


@dataclass
class ShowSyncResult:
    """What happened to one show during a sync run."""

    show_id: str
    fetched: int = 0  # raw feed entries
    resolved: int = 0  # episodes after resolution
    inserted: int = 0
    skipped: int = 0  # resolved episodes already stored
    up_to_date: bool = False  # routine poll skipped the fetch
    error: str | None = None
    report: ResolutionReport | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass
class SyncSummary:
    """Results of a sync run across shows."""

    results: list[ShowSyncResult] = field(default_factory=list)

    @property
    def inserted(self) -> int:
        return sum(result.inserted for result in self.results)

    @property
    def failures(self) -> list[ShowSyncResult]:
        return [result for result in self.results if result.failed]

    @property
    def all_failed(self) -> bool:
        """True when there was at least one show and none of them succeeded."""
        return bool(self.results) and all(result.failed for result in self.results)


class SyncService:
    """Orchestrates fetch, resolution and merge for a set of shows.

    Example:
        >>> async with FeedFetcher(config.fetch) as fetcher:
        ...     service = SyncService(store, fetcher)
        ...     summary = await service.sync_all(shows)
    """

    def __init__(
        self,
        store: EpisodeRepository,
        fetcher: FeedFetcher,
        max_concurrency: int = 5,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.store = store
        self.fetcher = fetcher
        self.max_concurrency = max_concurrency
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, show_id: str) -> asyncio.Lock:
        return self._locks.setdefault(show_id, asyncio.Lock())

    async def sync_all(
        self, shows: dict[str, ShowConfig], now: datetime | None = None
    ) -> SyncSummary:
        """Routine poll: skip shows that already have an episode this week."""
        return await self._run(shows, full=False, now=now)

    async def backfill(self, shows: dict[str, ShowConfig]) -> SyncSummary:
        """Full history import: every show is fetched and merged."""
        return await self._run(shows, full=True, now=None)

    async def _run(
        self, shows: dict[str, ShowConfig], full: bool, now: datetime | None
    ) -> SyncSummary:
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def bounded(show_id: str, show: ShowConfig) -> ShowSyncResult:
            async with semaphore:
                return await self.sync_show(show_id, show, full=full, now=now)

        results = await asyncio.gather(
            *(bounded(show_id, show) for show_id, show in shows.items())
        )
        summary = SyncSummary(results=list(results))

        logger.info(
            f"{'Backfill' if full else 'Sync'} finished: {len(summary.results)} show(s), "
            f"{summary.inserted} new episode(s), {len(summary.failures)} failure(s)"
        )
        return summary

    async def sync_show(
        self,
        show_id: str,
        show: ShowConfig,
        full: bool = False,
        now: datetime | None = None,
    ) -> ShowSyncResult:
        """Fetch, resolve and merge one show.

        Args:
            show_id: Show identifier
            show: Show configuration
            full: Backfill mode (never skipped as up to date)
            now: Reference time for the skip check

        Returns:
            ShowSyncResult; fetch failures are recorded in ``error``
        """
        result = ShowSyncResult(show_id=show_id)

        if not full:
            latest = await asyncio.to_thread(self.store.latest_episode, show_id)
            if should_skip_update(latest, now):
                logger.debug(f"{show_id}: already has an episode this week, skipping")
                result.up_to_date = True
                return result

        try:
            entries = await self.fetcher.fetch(show.locator, show.kind)
        except FeedUnavailableError as e:
            logger.warning(f"{show_id}: could not refresh feed: {e}")
            result.error = str(e)
            return result

        report = resolve_with_report(show, entries)
        result.fetched = len(entries)
        result.resolved = len(report.episodes)
        result.report = report

        # Store calls block, so they run in a worker thread; the lock keeps
        # two merges of the same show from interleaving while they do
        async with self._lock_for(show_id):
            merge = await asyncio.to_thread(
                plan_merge, show_id, report.episodes, self.store.exists
            )
            merge.inserted = await asyncio.to_thread(
                self.store.insert_episodes, show_id, merge.to_insert
            )

        result.inserted = merge.inserted
        result.skipped = merge.skipped + (len(merge.to_insert) - merge.inserted)

        if result.inserted:
            logger.info(f"{show_id}: stored {result.inserted} new episode(s)")
        return result
