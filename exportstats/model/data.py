"""
Public HTTP API dataclasses
"""

from dataclasses import dataclass, field

from exportstats.model.timeframe import Timeframe


@dataclass(eq=True, frozen=True)
class Point:
    time: int
    value: float

    def to_csv(self) -> list[str]:
        return [f"{self.value:.6f}", str(self.time)]

    def __str__(self) -> str:
        return f"(v: {self.value}, t: {self.time})"


@dataclass
class Dataset:
    """
    A named series of points in ascending time order, as fetched for a timeframe.
    """

    name: str
    timeframe: Timeframe
    points: list[Point] = field(default_factory=list)

    def __str__(self) -> str:
        points = " ".join(str(point) for point in self.points)
        return f"{self.name}: {self.timeframe} - [{points}]"


@dataclass(eq=True, frozen=True)
class Stat:
    """
    Upstream metadata for a named series.
    """

    id: str
    name: str
    public: bool = False
    counter: bool = False
