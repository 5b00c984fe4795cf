"""Episode identity resolution, freshness and history merging."""

from podtally.episodes.freshness import (
    FreshnessResult,
    evaluate_freshness,
    is_released_this_week,
    week_start,
)
from podtally.episodes.merger import (
    EpisodeLookup,
    MergeResult,
    merge_history,
    plan_merge,
    should_skip_update,
)
from podtally.episodes.resolver import ResolutionReport, resolve_episodes, resolve_with_report
from podtally.episodes.strategies import TitleParser, get_parser

__all__ = [
    "EpisodeLookup",
    "FreshnessResult",
    "MergeResult",
    "ResolutionReport",
    "TitleParser",
    "evaluate_freshness",
    "get_parser",
    "is_released_this_week",
    "merge_history",
    "plan_merge",
    "resolve_episodes",
    "resolve_with_report",
    "should_skip_update",
    "week_start",
]
