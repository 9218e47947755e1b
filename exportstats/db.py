"""
The short-lived dataset cache sitting in front of the upstream fetcher.
"""

from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
import logging
import threading
import time
from typing import Callable

from exportstats.fetcher import Fetcher
from exportstats.model.data import Dataset
from exportstats.model.timeframe import Timeframe
from exportstats.rate import combine_rate

logger = logging.getLogger(__name__)

# How often the sweeper wakes up, in seconds.
SWEEP_INTERVAL = 30.0

# How long a dataset is served from the cache, in seconds.
ENTRY_TTL = 10 * 60.0


@dataclass
class _Entry:
    age: float
    dataset: Dataset


class DB:
    """
    Caches fetched datasets per (name, timeframe) and evicts them once stale.

    The lock only guards the map. It is never held while fetching, so two
    concurrent misses on the same key will both hit the upstream and the last
    one to finish wins. Failed fetches are never cached.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        ttl: float = ENTRY_TTL,
        sweep_interval: float = SWEEP_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Constructor.

        Args:
            fetcher: Where datasets come from on a miss.
            ttl: Seconds an entry lives before the sweeper removes it.
            sweep_interval: Seconds between two sweeps.
            clock: Monotonic time source, in seconds.
        """
        self.fetcher = fetcher
        self.ttl = ttl
        self.sweep_interval = sweep_interval
        self.num_hits = 0
        self.num_misses = 0
        self.num_errors = 0

        self._clock = clock
        self._cache: dict[str, _Entry] = {}
        self._lock = threading.Lock()
        self._stopped = threading.Event()
        self._sweeper: threading.Thread | None = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def __enter__(self) -> "DB":
        self.start()
        return self

    def __exit__(self, *exc_info):
        self.stop()

    def start(self):
        """
        Start sweeping stale entries in the background.
        """
        if self._sweeper is not None and self._sweeper.is_alive():
            return

        self._stopped.clear()
        self._sweeper = threading.Thread(
            target=self._sweep_loop, name="exportstats-sweeper", daemon=True
        )
        self._sweeper.start()

    def stop(self, timeout: float | None = None):
        """
        Stop the background sweeper and wait for it to exit.

        Args:
            timeout: Seconds to wait for the thread, forever if None.
        """
        self._stopped.set()
        if self._sweeper is not None:
            self._sweeper.join(timeout)
            self._sweeper = None

    def sweep(self) -> int:
        """
        Evict every entry older than the TTL.

        Returns: The number of entries evicted.
        """
        now = self._clock()
        with self._lock:
            stale = [k for k, v in self._cache.items() if now - v.age > self.ttl]
            for key in stale:
                del self._cache[key]
            counts = (
                len(self._cache),
                self.num_hits,
                self.num_misses,
                self.num_errors,
            )

        logger.debug(
            "swept %d entries, %d cached, hits=%d misses=%d errors=%d",
            len(stale),
            *counts,
        )
        return len(stale)

    def get(self, name: str, timeframe: Timeframe) -> Dataset:
        """
        Get a dataset, from the cache if it's there and from the fetcher if not.

        Args:
            name: The series name.
            timeframe: The timeframe to fetch.

        Returns: The dataset. It is shared with the cache and must not be mutated.
        """
        key = self._key(name, timeframe)
        with self._lock:
            entry = self._cache.get(key)
            if entry is not None:
                self.num_hits += 1
                return entry.dataset
            self.num_misses += 1

        return self._fetch_remote(key, name, timeframe)

    def get_rate(self, name_a: str, name_b: str, timeframe: Timeframe) -> Dataset:
        """
        Fetch two series in parallel and compute the rate of b relative to a.

        Args:
            name_a: The base series.
            name_b: The retained series.
            timeframe: The timeframe for both.

        Returns: A fresh dataset holding the rates.

        Raises: a's error if fetching a failed, otherwise b's.
        """
        with ThreadPoolExecutor(max_workers=2) as pool:
            future_a = pool.submit(self.get, name_a, timeframe)
            future_b = pool.submit(self.get, name_b, timeframe)
            wait([future_a, future_b])

        return combine_rate(future_a.result(), future_b.result())

    def _key(self, name: str, timeframe: Timeframe) -> str:
        return name + str(timeframe)

    def _fetch_remote(self, key: str, name: str, timeframe: Timeframe) -> Dataset:
        try:
            dataset = self.fetcher.get(name, timeframe)
        except Exception:
            with self._lock:
                self.num_errors += 1
            raise

        with self._lock:
            self._cache[key] = _Entry(self._clock(), dataset)
        return dataset

    def _sweep_loop(self):
        # Sleep first, nothing is stale right after startup.
        while not self._stopped.wait(self.sweep_interval):
            self.sweep()
