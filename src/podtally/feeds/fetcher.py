"""Feed fetching for RSS and YouTube Atom sources.

Downloads feed documents with httpx and turns them into ``RawEntry``
objects with feedparser. Transport problems are retried with backoff and
finally reported as ``FeedUnavailableError``; an empty feed is not an error.
"""

import asyncio
import logging
from calendar import timegm
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import feedparser
import httpx

from podtally.config.schema import FetchConfig, SourceKind
from podtally.feeds.models import RawEntry
from podtally.utils.errors import FeedParseError, FeedUnavailableError
from podtally.utils.retry import (
    InvalidRequestError,
    NetworkConnectionError,
    NetworkTimeoutError,
    NonRetryableError,
    RetryableError,
    RetryConfig,
    classify_http_error,
    with_retry,
)

logger = logging.getLogger(__name__)

YOUTUBE_FEED_URL = "https://www.youtube.com/feeds/videos.xml?channel_id={channel_id}"


def build_feed_url(locator: str, kind: SourceKind) -> str:
    """Turn a show's source locator into a fetchable URL.

    YouTube shows are configured with a bare channel ID; anything that
    already looks like a URL is used unchanged.
    """
    if kind == "youtube" and not urlparse(locator).scheme:
        return YOUTUBE_FEED_URL.format(channel_id=locator)
    return locator


def _local_path(locator: str) -> Path | None:
    """Return a filesystem path if the locator points at a local file."""
    parsed = urlparse(locator)
    if parsed.scheme == "file":
        return Path(parsed.path)
    if parsed.scheme in ("http", "https"):
        return None
    candidate = Path(locator).expanduser()
    if candidate.is_absolute() or candidate.exists():
        return candidate
    return None


def _entry_timestamp(entry: Any) -> datetime | None:
    # feedparser normalizes dates to UTC struct_time
    for key in ("published_parsed", "updated_parsed"):
        parsed = entry.get(key)
        if parsed:
            return datetime.fromtimestamp(timegm(parsed), tz=timezone.utc)
    return None


def parse_feed(content: bytes | str, locator: str = "<memory>") -> list[RawEntry]:
    """Parse an RSS or Atom document into raw entries, in feed order.

    Entries without a title or a usable publish date are skipped.

    Raises:
        FeedParseError: If the document is not a feed at all
    """
    parsed = feedparser.parse(content)

    if parsed.bozo and not parsed.entries and not parsed.get("feed"):
        raise FeedParseError(
            f"Could not parse feed from {locator}: {parsed.get('bozo_exception')}",
            locator=locator,
        )

    entries: list[RawEntry] = []
    skipped = 0
    for item in parsed.entries:
        title = (item.get("title") or "").strip()
        published = _entry_timestamp(item)
        if not title or published is None:
            logger.debug(f"Skipping feed item without title/date in {locator}: {title!r}")
            skipped += 1
            continue

        entries.append(
            RawEntry(
                title=title,
                published=published,
                guid=item.get("yt_videoid") or item.get("id"),
                link=item.get("link"),
            )
        )

    if skipped:
        # Positional numbering only sees the entries that were kept
        logger.debug(
            f"Skipped {skipped} of {len(parsed.entries)} feed item(s) "
            f"without title/date in {locator}"
        )
    return entries


class FeedFetcher:
    """Fetch and parse show feeds.

    Use as an async context manager so the underlying HTTP client is closed:

        async with FeedFetcher(config.fetch) as fetcher:
            entries = await fetcher.fetch(show.locator, show.kind)
    """

    def __init__(
        self,
        config: FetchConfig | None = None,
        client: httpx.AsyncClient | None = None,
        retry_config: RetryConfig | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            config: Timeout/retry settings (defaults to FetchConfig())
            client: Optional pre-built httpx client (not closed by the fetcher)
            retry_config: Backoff settings (defaults to max_attempts from config)
        """
        self.config = config or FetchConfig()
        self.retry_config = retry_config or RetryConfig(max_attempts=self.config.max_attempts)
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=self.config.timeout_seconds,
            follow_redirects=True,
            headers={"User-Agent": self.config.user_agent},
        )

    async def __aenter__(self) -> "FeedFetcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def fetch(self, locator: str, kind: SourceKind) -> list[RawEntry]:
        """Fetch a feed and return its entries in feed order (newest first, usually).

        Args:
            locator: RSS URL, YouTube channel ID/URL, or local file path
            kind: Source kind of the show

        Returns:
            Raw entries; an empty list when the feed has no items

        Raises:
            FeedUnavailableError: If the feed could not be retrieved or parsed
        """
        try:
            local = _local_path(locator)
            url = build_feed_url(locator, kind)
        except ValueError as e:
            raise FeedUnavailableError(
                f"Invalid feed locator {locator!r}: {e}", locator=locator
            ) from e

        if local is not None:
            content = await self._read_local(local, locator)
            return parse_feed(content, locator)

        logger.debug(f"Fetching {kind} feed {url}")

        try:
            content = await with_retry(config=self.retry_config)(self._download)(url)
        except (RetryableError, NonRetryableError) as e:
            raise FeedUnavailableError(
                f"Failed to fetch feed {url}: {e}",
                locator=locator,
                status_code=e.status_code,
            ) from e

        entries = parse_feed(content, url)
        logger.debug(f"Fetched {len(entries)} entries from {url}")
        return entries

    async def _download(self, url: str) -> bytes:
        try:
            response = await self.client.get(url)
        except httpx.InvalidURL as e:
            raise InvalidRequestError(f"Invalid feed URL {url}: {e}") from e
        except httpx.TimeoutException as e:
            raise NetworkTimeoutError(f"Timed out fetching {url}") from e
        except httpx.TransportError as e:
            raise NetworkConnectionError(f"Connection error fetching {url}: {e}") from e

        if response.status_code >= 400:
            raise classify_http_error(response.status_code, response.reason_phrase)

        return response.content

    @staticmethod
    async def _read_local(path: Path, locator: str) -> bytes:
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise FeedUnavailableError(
                f"Cannot read feed file {path}: {e}", locator=locator
            ) from e
