"""Feed retrieval and feed-level data models."""

from podtally.feeds.fetcher import FeedFetcher, build_feed_url, parse_feed
from podtally.feeds.models import (
    Episode,
    EpisodeNumber,
    RawEntry,
    episode_number_value,
    format_episode_number,
    parse_episode_number,
)

__all__ = [
    "Episode",
    "EpisodeNumber",
    "FeedFetcher",
    "RawEntry",
    "build_feed_url",
    "episode_number_value",
    "format_episode_number",
    "parse_episode_number",
    "parse_feed",
]
