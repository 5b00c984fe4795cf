"""Title parsers for each episode numbering convention.

Every show is bound to exactly one ``NumberingStrategy`` in its
configuration. ``get_parser`` turns that binding into a parser; parsers
never look at other shows or guess the convention from the title.

Conventions:

- ``trailing_hash``: ``"Title | #12"`` (separator optional, marker configurable)
- ``leading_colon``: ``"12 : Title"``
- ``named_prefix``: ``"Prata da Casa #12 - Title"``
- ``decimal_bonus``: ``"Title | #0.95"``, title kept verbatim (marker configurable)
- ``generic``: first run of 1-4 digits, otherwise the feed position
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar

from podtally.config.schema import NumberingStrategy, ShowConfig
from podtally.feeds.models import EpisodeNumber, parse_episode_number

DEFAULT_MARKER = "#"


@dataclass(frozen=True)
class ParsedTitle:
    """Episode identity extracted from one title."""

    number: EpisodeNumber
    title: str


class TitleParser(ABC):
    """Extracts an episode number and a cleaned title from a feed title."""

    strategy: ClassVar[NumberingStrategy]

    # Strict conventions drop titles that don't match; only the generic
    # parser lets the resolver fall back to the feed position.
    drops_unmatched: ClassVar[bool] = True

    @abstractmethod
    def parse(self, title: str) -> ParsedTitle | None:
        """Return the parsed identity, or None if the title doesn't match."""


class TrailingHashParser(TitleParser):
    """``<title> [|-:] #<digits>`` at the end of the title."""

    strategy = NumberingStrategy.TRAILING_HASH

    def __init__(self, marker: str = DEFAULT_MARKER) -> None:
        self.marker = marker
        self.pattern = re.compile(
            rf"^(?P<title>.+?)\s*[|:\-–—]?\s*{re.escape(marker)}\s*(?P<number>\d{{1,4}})$",
            re.IGNORECASE,
        )

    def parse(self, title: str) -> ParsedTitle | None:
        match = self.pattern.match(title)
        if not match:
            return None
        cleaned = match.group("title").strip()
        if not cleaned:
            return None
        return ParsedTitle(int(match.group("number")), cleaned)


class LeadingColonParser(TitleParser):
    """``<digits> : <title>`` at the start of the title."""

    strategy = NumberingStrategy.LEADING_COLON

    pattern = re.compile(r"^(?P<number>\d{1,4})\s*:\s*(?P<title>.+)$")

    def parse(self, title: str) -> ParsedTitle | None:
        match = self.pattern.match(title)
        if not match:
            return None
        return ParsedTitle(int(match.group("number")), match.group("title").strip())


class NamedPrefixParser(TitleParser):
    """``<prefix> #<digits> - <title>``, prefix compared case-insensitively."""

    strategy = NumberingStrategy.NAMED_PREFIX

    def __init__(self, prefix: str) -> None:
        self.prefix = prefix.strip()
        prefix_pattern = r"\s+".join(re.escape(word) for word in self.prefix.split())
        self.pattern = re.compile(
            rf"^{prefix_pattern}\s*#(?P<number>\d{{1,4}})\s*-\s*(?P<title>.+)$",
            re.IGNORECASE,
        )

    def parse(self, title: str) -> ParsedTitle | None:
        match = self.pattern.match(title)
        if not match:
            return None
        return ParsedTitle(int(match.group("number")), match.group("title").strip())


class DecimalBonusParser(TitleParser):
    """``<title> | #<int or decimal>`` at the end; the title is not modified.

    Decimal tokens ("0.95") are kept as strings so bonus episodes keep their
    exact number. A show that renamed its numbering (``| velho amigo #12``)
    sets ``marker``; the plain ``#`` keeps matching its older episodes.
    """

    strategy = NumberingStrategy.DECIMAL_BONUS

    def __init__(self, marker: str = DEFAULT_MARKER) -> None:
        self.marker = marker
        tokens = sorted({DEFAULT_MARKER, marker}, key=len, reverse=True)
        alternatives = "|".join(re.escape(token) for token in tokens)
        self.pattern = re.compile(
            rf"\|\s*(?:{alternatives})\s*(?P<number>\d+(?:\.\d+)?)$",
            re.IGNORECASE,
        )

    def parse(self, title: str) -> ParsedTitle | None:
        match = self.pattern.search(title)
        if not match:
            return None
        return ParsedTitle(parse_episode_number(match.group("number")), title)


class GenericParser(TitleParser):
    """First run of 1-4 digits anywhere in the title."""

    strategy = NumberingStrategy.GENERIC
    drops_unmatched = False

    pattern = re.compile(r"\d{1,4}")

    def parse(self, title: str) -> ParsedTitle | None:
        match = self.pattern.search(title)
        if not match:
            return None
        return ParsedTitle(int(match.group(0)), title)


def get_parser(show: ShowConfig) -> TitleParser:
    """Build the title parser bound to a show.

    Args:
        show: Show configuration carrying the strategy binding

    Returns:
        Parser for the show's numbering convention
    """
    strategy = show.strategy
    if strategy == NumberingStrategy.TRAILING_HASH:
        return TrailingHashParser(show.marker or DEFAULT_MARKER)
    if strategy == NumberingStrategy.LEADING_COLON:
        return LeadingColonParser()
    if strategy == NumberingStrategy.NAMED_PREFIX:
        return NamedPrefixParser(show.prefix or show.name)
    if strategy == NumberingStrategy.DECIMAL_BONUS:
        return DecimalBonusParser(show.marker or DEFAULT_MARKER)
    if strategy == NumberingStrategy.GENERIC:
        return GenericParser()
    raise ValueError(f"Unknown numbering strategy: {strategy}")
