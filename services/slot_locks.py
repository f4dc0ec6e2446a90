"""
Per-time-bucket locks serializing admissions that can compete for seats.

Time is cut into buckets as wide as the conflict window. An admission for
arrival ``a`` holds every bucket touched by ``[a - window, a + window]``.
Two arrivals within one window of each other always share the bucket that
contains the earlier one, so their check-then-act sequences never interleave,
while admissions far apart in time proceed in parallel.
"""

import logging
import math
from contextlib import ExitStack, contextmanager
from datetime import datetime, timedelta
from threading import Lock
from typing import Iterator, List
from weakref import WeakValueDictionary


logger = logging.getLogger(__name__)


class SlotLockRegistry:
    """Process-local lock table keyed by time bucket."""

    def __init__(self, window: timedelta):
        if window <= timedelta(0):
            raise ValueError("Lock bucket width must be positive")
        self.window = window
        self._bucket_seconds = window.total_seconds()
        # Entries vanish once no admission holds or waits on the bucket
        self._locks: "WeakValueDictionary[int, Lock]" = WeakValueDictionary()
        self._guard = Lock()

    def bucket_of(self, moment: datetime) -> int:
        return math.floor(moment.timestamp() / self._bucket_seconds)

    def buckets_for(self, arrival: datetime) -> List[int]:
        """Sorted bucket ids covering the conflict span around ``arrival``."""
        first = self.bucket_of(arrival - self.window)
        last = self.bucket_of(arrival + self.window)
        return list(range(first, last + 1))

    def _lock(self, bucket: int) -> Lock:
        with self._guard:
            lock = self._locks.get(bucket)
            if lock is None:
                lock = self._locks[bucket] = Lock()
            return lock

    @contextmanager
    def hold(self, arrival: datetime) -> Iterator[List[int]]:
        """
        Hold every bucket lock for ``arrival`` until the block exits.

        Buckets are acquired in ascending order, so overlapping holders
        cannot deadlock.
        """
        buckets = self.buckets_for(arrival)
        with ExitStack() as stack:
            for bucket in buckets:
                stack.enter_context(self._lock(bucket))
            logger.debug(f"Holding slot buckets {buckets} for {arrival.isoformat()}")
            yield buckets
