"""Shared fixtures for Podtally tests."""

import logging
from collections.abc import Callable, Iterator
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from pathlib import Path
from xml.sax.saxutils import escape

import pytest

from podtally.config.schema import NumberingStrategy, ShowConfig
from podtally.feeds.models import RawEntry
from podtally.storage.store import EpisodeStore

BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def reset_podtally_logger() -> Iterator[None]:
    """Undo CLI logging setup so caplog sees package records."""
    yield
    logger = logging.getLogger("podtally")
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def sample_config_dict() -> dict:
    """Global config as it appears in config.yaml."""
    return {
        "version": "1",
        "log_level": "INFO",
        "fetch": {
            "timeout_seconds": 10,
            "max_attempts": 2,
            "max_concurrency": 3,
        },
    }


@pytest.fixture
def sample_shows_dict() -> dict:
    """Show registry as it appears in shows.yaml."""
    return {
        "shows": {
            "ze-carioca": {
                "name": "Zé Carioca",
                "weekday": "segunda",
                "kind": "rss",
                "locator": "https://example.com/ze.rss",
                "strategy": "leading_colon",
            },
            "my-channel": {
                "name": "My Channel",
                "weekday": "friday",
                "kind": "youtube",
                "locator": "UC1234567890",
                "strategy": "trailing_hash",
                "marker": "watch.tm",
            },
        }
    }


@pytest.fixture
def ze_carioca() -> ShowConfig:
    return ShowConfig(
        name="Zé Carioca",
        weekday="monday",
        locator="https://example.com/ze.rss",
        strategy=NumberingStrategy.LEADING_COLON,
    )


@pytest.fixture
def make_entries() -> Callable[..., list[RawEntry]]:
    """Build raw entries newest first, one day apart, from titles."""

    def _make(*titles: str, start: datetime = BASE_TIME) -> list[RawEntry]:
        count = len(titles)
        return [
            RawEntry(title=title, published=start + timedelta(days=count - index))
            for index, title in enumerate(titles)
        ]

    return _make


@pytest.fixture
def rss_feed() -> Callable[[list[tuple[str, datetime]]], str]:
    """Render (title, published) pairs as an RSS 2.0 document."""

    def _render(items: list[tuple[str, datetime]]) -> str:
        rendered = "".join(
            f"""
    <item>
      <title>{escape(title)}</title>
      <guid>episode-{index}</guid>
      <link>https://example.com/episodes/{index}</link>
      <pubDate>{format_datetime(published)}</pubDate>
    </item>"""
            for index, (title, published) in enumerate(items)
        )
        return f"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Test Show</title>
    <link>https://example.com</link>
    <description>Test feed</description>{rendered}
  </channel>
</rss>
"""

    return _render


@pytest.fixture
def store(tmp_path: Path) -> Iterator[EpisodeStore]:
    episode_store = EpisodeStore(tmp_path / "episodes.db")
    yield episode_store
    episode_store.close()
