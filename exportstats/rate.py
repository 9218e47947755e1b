"""
Retention rate between two series.
"""

import logging

from exportstats.model.data import Dataset, Point

logger = logging.getLogger(__name__)


def safe_rate(a: float, b: float) -> float:
    """
    The share of `a` retained in `b`. Non-positive inputs and rates outside
    [0, 1] yield 0 rather than being clamped.
    """
    if a <= 0 or b <= 0:
        return 0.0

    rate = 1.0 - ((a - b) / a)
    if rate > 1 or rate < 0:
        return 0.0
    return rate


def combine_rate(a: Dataset, b: Dataset) -> Dataset:
    """
    Compute the point-wise rate of `b` relative to `a`. Points are aligned by
    position, not by time.

    Args:
        a: The base series.
        b: The retained series.

    Returns: A new dataset with a's name, timeframe and timestamps. Points of a
        with no counterpart in b are 0. Neither input is modified.
    """
    logger.debug(
        "rate %s: %d points, %s: %d points",
        a.name,
        len(a.points),
        b.name,
        len(b.points),
    )

    overlap = min(len(a.points), len(b.points))
    cutoff = len(a.points) - overlap

    points = []
    for pa, pb in zip(a.points[:overlap], b.points[:overlap]):
        if pa.time != pb.time:
            logger.warning(
                "time didn't match %s: %d, %s: %d dt: %d",
                a.name,
                pa.time,
                b.name,
                pb.time,
                pa.time - pb.time,
            )
        points.append(Point(pa.time, safe_rate(pa.value, pb.value)))

    if cutoff > 0:
        logger.error(
            "%s is missing %d points of %s, zeroing the tail", b.name, cutoff, a.name
        )
        points.extend(Point(pa.time, 0.0) for pa in a.points[overlap:])

    return Dataset(a.name, a.timeframe, points)
