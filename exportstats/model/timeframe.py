"""
Timeframe and duration parsing.

A timeframe is written either as five tokens, "1 hour @ 1 minute", or in the
compact form "1h1m". Unit codes are case sensitive: "m" is a minute and "M" is
a month.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import StrEnum
import re


class ParseError(ValueError):
    """
    Raised when a timeframe, duration or unit can't be parsed.
    """


class TimeUnit(StrEnum):
    MINUTE = "m"
    HOUR = "h"
    DAY = "d"
    WEEK = "w"
    MONTH = "M"
    YEAR = "y"

    @classmethod
    def parse(cls, text: str) -> "TimeUnit":
        """
        Resolve a unit code or a singular/plural unit word.

        Args:
            text: The unit token, e.g. "m", "minute" or "minutes".

        Returns: The matching TimeUnit.
        """
        try:
            return _UNIT_ALIASES[text]
        except KeyError:
            raise ParseError(f"Unknown TimeUnit {text!r}") from None


_UNIT_ALIASES = {
    alias: unit
    for unit, words in [
        (TimeUnit.MINUTE, ("minute", "minutes")),
        (TimeUnit.HOUR, ("hour", "hours")),
        (TimeUnit.DAY, ("day", "days")),
        (TimeUnit.WEEK, ("week", "weeks")),
        (TimeUnit.MONTH, ("month", "months")),
        (TimeUnit.YEAR, ("year", "years")),
    ]
    for alias in (unit.value, *words)
}

_INT = re.compile(r"[0-9]+")
_COMPACT_TIMEFRAME = re.compile(r"([0-9]+)([a-zA-Z]+)([0-9]+)([a-zA-Z]+)")
_COMPACT_DURATION = re.compile(r"([0-9]+)([a-zA-Z]+)")


def _parse_value(text: str) -> int:
    if not _INT.fullmatch(text) or int(text) < 1:
        raise ParseError(f"Expected a positive integer, got {text!r}")
    return int(text)


@dataclass(eq=True, frozen=True)
class Duration:
    value: int
    unit: TimeUnit

    def format(self) -> str:
        return f"{self.value}{self.unit}"

    def __str__(self) -> str:
        return self.format()


@dataclass(eq=True, frozen=True)
class Timeframe:
    """
    A span of data to retrieve, sampled at some interval. When start is unset
    the span ends now.
    """

    duration_value: int
    duration_unit: TimeUnit
    interval_value: int
    interval_unit: TimeUnit
    start: datetime | None = None

    @property
    def duration(self) -> Duration:
        return Duration(self.duration_value, self.duration_unit)

    @property
    def interval(self) -> Duration:
        return Duration(self.interval_value, self.interval_unit)

    def with_start(self, start: datetime | None) -> "Timeframe":
        """
        Anchor the timeframe at an absolute instant.

        Args:
            start: The instant the span starts at, or None for "ending now".

        Returns: A copy of this timeframe with the start set.
        """
        return replace(self, start=start)

    def format(self) -> str:
        """
        The compact form understood by the upstream provider, e.g. "1h1m".
        """
        return f"{self.duration.format()}{self.interval.format()}"

    def __str__(self) -> str:
        # Used as the cache key suffix, so the start has to be part of it.
        text = f"{self.duration.format()}@{self.interval.format()}"
        if self.start is not None:
            text += f"-{int(self.start.timestamp())}"
        return text


def parse_timeframe(text: str) -> Timeframe:
    """
    Parse "<int> <unit> @ <int> <unit>" or the compact "<int><unit><int><unit>".

    Args:
        text: The timeframe text.

    Returns: The parsed timeframe, without a start.
    """
    parts = text.split(" ")
    if len(parts) == 5:
        if parts[2] != "@":
            raise ParseError(f"Parse Timeframe error: expected '@' in {text!r}")
        duration_value, duration_unit, _, interval_value, interval_unit = parts
    else:
        match = _COMPACT_TIMEFRAME.fullmatch(text)
        if match is None:
            raise ParseError(f"Parse Timeframe error: {text!r}")
        duration_value, duration_unit, interval_value, interval_unit = match.groups()

    return Timeframe(
        duration_value=_parse_value(duration_value),
        duration_unit=TimeUnit.parse(duration_unit),
        interval_value=_parse_value(interval_value),
        interval_unit=TimeUnit.parse(interval_unit),
    )


def parse_duration(text: str) -> Duration:
    """
    Parse "<int> <unit>" or the compact "<int><unit>".
    """
    parts = text.split(" ")
    if len(parts) == 2:
        value, unit = parts
    else:
        match = _COMPACT_DURATION.fullmatch(text)
        if match is None:
            raise ParseError(f"Parse Duration error: {text!r}")
        value, unit = match.groups()

    return Duration(_parse_value(value), TimeUnit.parse(unit))


# Used when a request doesn't name a timeframe.
DEFAULT_TIMEFRAME = parse_timeframe("1 hour @ 1 minute")
