"""Data models for raw feed entries and resolved episodes."""

import re
from datetime import datetime
from decimal import Decimal
from typing import Union

from pydantic import BaseModel, Field, field_validator

from podtally.utils.datetime import ensure_aware

# Either a plain integer or a decimal kept verbatim as text ("0.95")
EpisodeNumber = Union[int, str]

_DECIMAL_NUMBER = re.compile(r"^\d+\.\d+$")


def parse_episode_number(text: str) -> EpisodeNumber:
    """Parse a stored or extracted number token.

    Tokens with a decimal point stay strings so "0.95" never becomes 0.9500001
    or 95; everything else becomes an int.

    Raises:
        ValueError: If the token is not a non-negative number
    """
    token = text.strip()
    if _DECIMAL_NUMBER.match(token):
        return token
    if token.isdigit():
        return int(token)
    raise ValueError(f"Not an episode number: {text!r}")


def episode_number_value(number: EpisodeNumber) -> Decimal:
    """Exact numeric value used for ordering and duplicate detection.

    Decimal rather than float, so large integers never compare equal and
    "2" and "2.0" still do.
    """
    return Decimal(str(number))


def format_episode_number(number: EpisodeNumber) -> str:
    """Canonical text form, as stored in the episode table."""
    return str(number)


class RawEntry(BaseModel):
    """One unprocessed item from a fetched feed."""

    title: str
    published: datetime
    guid: str | None = None
    link: str | None = None

    @field_validator("published")
    @classmethod
    def localize_published(cls, value: datetime) -> datetime:
        return ensure_aware(value)


class Episode(BaseModel):
    """A resolved episode belonging to one show."""

    number: EpisodeNumber
    title: str
    published: datetime
    link: str | None = None
    guid: str | None = Field(default=None, exclude=True)

    @field_validator("published")
    @classmethod
    def localize_published(cls, value: datetime) -> datetime:
        return ensure_aware(value)

    @field_validator("number")
    @classmethod
    def check_number(cls, value: EpisodeNumber) -> EpisodeNumber:
        if isinstance(value, int):
            if value < 0:
                raise ValueError("episode number must be non-negative")
            return value
        if not _DECIMAL_NUMBER.match(value):
            raise ValueError(f"invalid decimal episode number: {value!r}")
        return value

    @property
    def sort_value(self) -> Decimal:
        """Numeric value of the episode number."""
        return episode_number_value(self.number)

    @property
    def number_text(self) -> str:
        return format_episode_number(self.number)

    def __str__(self) -> str:
        return f"#{self.number} {self.title}"
