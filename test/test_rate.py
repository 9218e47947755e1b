"""
Unit tests for the rate computation.
"""

import logging

import pytest

from exportstats.db import DB
from exportstats.fetcher import NotFoundError
from exportstats.model.data import Dataset, Point
from exportstats.model.timeframe import parse_timeframe
from exportstats.rate import combine_rate, safe_rate

TF = parse_timeframe("1 hour @ 1 minute")


@pytest.mark.parametrize(
    "a, b, expected",
    [
        (0, 5, 0.0),
        (10, -1, 0.0),
        (-10, -5, 0.0),
        (10, 10, 1.0),
        (10, 15, 0.0),
        (10, 5, 0.5),
        (4, 1, 0.25),
    ],
)
def test_safe_rate(a: float, b: float, expected: float):
    assert safe_rate(a, b) == pytest.approx(expected)


def test_longer_base_zeroes_the_tail(db: DB, fetcher):
    fetcher.add("visits", [10.0, 20.0, 40.0, 50.0, 60.0])
    fetcher.add("returns", [5.0, 20.0, 10.0])

    rate = db.get_rate("visits", "returns", TF)

    assert [p.value for p in rate.points] == pytest.approx([0.5, 1.0, 0.25, 0, 0])
    assert [p.time for p in rate.points] == [p.time for p in fetcher.series["visits"]]
    assert rate.name == "visits"
    assert rate.timeframe == TF


def test_longer_retained_is_truncated(db: DB, fetcher):
    fetcher.add("visits", [10.0, 10.0])
    fetcher.add("returns", [5.0, 5.0, 5.0, 5.0])

    rate = db.get_rate("visits", "returns", TF)

    assert [p.value for p in rate.points] == pytest.approx([0.5, 0.5])


def test_cache_is_not_mutated(db: DB, fetcher):
    fetcher.add("visits", [10.0, 20.0, 40.0])
    fetcher.add("returns", [5.0])

    before = db.get("visits", TF)
    values = [p.value for p in before.points]
    db.get_rate("visits", "returns", TF)
    after = db.get("visits", TF)

    assert after is before
    assert [p.value for p in after.points] == values
    assert fetcher.calls == {"visits": 1, "returns": 1}


def test_rate_uses_the_cache(db: DB, fetcher):
    fetcher.add("visits", [10.0])
    fetcher.add("returns", [5.0])

    db.get_rate("visits", "returns", TF)
    db.get_rate("visits", "returns", TF)

    assert fetcher.calls == {"visits": 1, "returns": 1}


def test_time_mismatch_is_logged(caplog):
    a = Dataset("a", TF, [Point(0, 10.0), Point(60, 10.0)])
    b = Dataset("b", TF, [Point(0, 5.0), Point(120, 5.0)])

    with caplog.at_level(logging.WARNING, logger="exportstats.rate"):
        rate = combine_rate(a, b)

    assert [p.value for p in rate.points] == pytest.approx([0.5, 0.5])
    assert "time didn't match" in caplog.text


def test_cutoff_is_logged(caplog):
    a = Dataset("a", TF, [Point(0, 10.0), Point(60, 10.0)])
    b = Dataset("b", TF, [Point(0, 5.0)])

    with caplog.at_level(logging.ERROR, logger="exportstats.rate"):
        combine_rate(a, b)

    assert "missing 1 points" in caplog.text


def test_empty_series():
    rate = combine_rate(Dataset("a", TF, []), Dataset("b", TF, []))
    assert rate.points == []


def test_first_error_wins(db: DB, fetcher):
    fetcher.errors["visits"] = ConnectionError("visits down")

    with pytest.raises(ConnectionError, match="visits down"):
        db.get_rate("visits", "returns", TF)

    # Both were fetched even though one failed.
    assert fetcher.calls == {"visits": 1, "returns": 1}


def test_second_error_surfaces(db: DB, fetcher):
    fetcher.add("visits", [10.0])

    with pytest.raises(NotFoundError):
        db.get_rate("visits", "returns", TF)
