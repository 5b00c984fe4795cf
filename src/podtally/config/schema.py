"""Configuration schema models using Pydantic."""

from enum import Enum
from pathlib import Path
from typing import Literal
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator, model_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
SourceKind = Literal["rss", "youtube"]

# Sunday-first, as used by the freshness fallback
WEEKDAYS: tuple[str, ...] = (
    "sunday",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
)

WEEKDAY_ALIASES: dict[str, str] = {
    "domingo": "sunday",
    "segunda": "monday",
    "terça": "tuesday",
    "terca": "tuesday",
    "quarta": "wednesday",
    "quinta": "thursday",
    "sexta": "friday",
    "sábado": "saturday",
    "sabado": "saturday",
}


class NumberingStrategy(str, Enum):
    """How a show encodes episode numbers in its titles."""

    TRAILING_HASH = "trailing_hash"  # "Title | #12"
    LEADING_COLON = "leading_colon"  # "12 : Title"
    NAMED_PREFIX = "named_prefix"  # "Show Name #12 - Title"
    DECIMAL_BONUS = "decimal_bonus"  # "Title | #0.95"
    GENERIC = "generic"  # first 1-4 digit run, else feed position


# Strategies whose number token can be configured with ``marker``
MARKER_STRATEGIES = (NumberingStrategy.TRAILING_HASH, NumberingStrategy.DECIMAL_BONUS)


class FetchConfig(BaseModel):
    """Outbound feed request settings."""

    timeout_seconds: float = Field(default=30.0, gt=0)
    max_attempts: int = Field(default=3, ge=1)
    max_concurrency: int = Field(default=5, ge=1)
    user_agent: str = "podtally/0.1 (+https://github.com/podtally/podtally)"


class ShowConfig(BaseModel):
    """Configuration for a single tracked show."""

    name: str = Field(..., min_length=1)
    weekday: str
    kind: SourceKind = "rss"
    locator: str = Field(..., min_length=1)  # RSS URL, YouTube channel ID or local file
    strategy: NumberingStrategy = NumberingStrategy.GENERIC
    marker: str | None = None  # trailing_hash/decimal_bonus token, defaults to "#"
    prefix: str | None = None  # named_prefix text, defaults to name
    collapse_same_day: bool = False  # keep one episode per publish date
    link: str | None = None

    @field_validator("weekday")
    @classmethod
    def normalize_weekday(cls, value: str) -> str:
        day = value.strip().lower()
        day = WEEKDAY_ALIASES.get(day, day)
        if day not in WEEKDAYS:
            raise ValueError(f"Unknown weekday '{value}'. Expected one of: {', '.join(WEEKDAYS)}")
        return day

    @field_validator("locator")
    @classmethod
    def strip_locator(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("locator must not be blank")
        try:
            urlparse(value)
        except ValueError as e:
            raise ValueError(f"locator is not a valid URL: {e}") from e
        return value

    @model_validator(mode="after")
    def check_strategy_options(self) -> "ShowConfig":
        if self.marker is not None and self.strategy not in MARKER_STRATEGIES:
            raise ValueError(
                "marker is only used by the trailing_hash and decimal_bonus strategies"
            )
        if self.prefix is not None and self.strategy != NumberingStrategy.NAMED_PREFIX:
            raise ValueError("prefix is only used by the named_prefix strategy")
        return self

    @property
    def weekday_index(self) -> int:
        """Position of the scheduled weekday in the Sunday-first order."""
        return WEEKDAYS.index(self.weekday)


class GlobalConfig(BaseModel):
    """Global Podtally configuration."""

    version: str = "1"
    log_level: LogLevel = "INFO"
    database_path: Path | None = None  # None -> platform data dir
    fetch: FetchConfig = Field(default_factory=FetchConfig)


class Shows(BaseModel):
    """Collection of tracked shows keyed by identifier."""

    shows: dict[str, ShowConfig] = Field(default_factory=dict)
