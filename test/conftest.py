"""
Shared fixtures: a call-counting fetcher and a controllable clock.
"""

import threading

import pytest

from exportstats.db import DB
from exportstats.fetcher import Fetcher, NotFoundError
from exportstats.model.data import Dataset, Point
from exportstats.model.timeframe import Timeframe


class StubFetcher(Fetcher):
    """
    Serves canned series and counts the calls per series name.
    """

    def __init__(self):
        self.series: dict[str, list[Point]] = {}
        self.errors: dict[str, Exception] = {}
        self.calls: dict[str, int] = {}
        self._lock = threading.Lock()

    def add(self, name: str, values: list[float], start: int = 1700000000):
        self.series[name] = [
            Point(start + 60 * i, value) for i, value in enumerate(values)
        ]

    def get(self, name: str, timeframe: Timeframe) -> Dataset:
        with self._lock:
            self.calls[name] = self.calls.get(name, 0) + 1
        if name in self.errors:
            raise self.errors[name]
        if name not in self.series:
            raise NotFoundError(name)
        return Dataset(name, timeframe, list(self.series[name]))


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def fetcher() -> StubFetcher:
    return StubFetcher()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def db(fetcher: StubFetcher, clock: FakeClock) -> DB:
    return DB(fetcher, clock=clock)
