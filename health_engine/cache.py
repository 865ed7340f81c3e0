"""
Bounded in-memory store of the latest health score per customer.

The cache drives trend detection and update scheduling. It is owned by a
HealthEngine instance (no module-level state). Writes move a customer to
the most-recent end; when the cache grows past capacity the
least-recently-written entries are evicted.

Two levels of locking:
- a striped per-customer lock (lock()) that callers hold across
  read-prior -> compute -> write, so concurrent scoring of the same
  customer cannot interleave;
- an internal lock around every map mutation and the eviction sweep.
"""

import itertools
import threading
import zlib
from collections import OrderedDict
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterator, List, Optional

from .results import CustomerHealthScore

DEFAULT_CAPACITY = 1000
LOCK_STRIPES = 64


@dataclass(frozen=True)
class HealthScoreCacheEntry:
    customer_id: str
    score: CustomerHealthScore
    timestamp: datetime
    sequence: int  # monotonic write counter, orders entries by write time


class HealthScoreCache:
    """Bounded, timestamped, thread-safe store of the latest scores."""

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        clock: Callable[[], datetime] = datetime.now,
    ):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self.clock = clock
        self._entries: "OrderedDict[str, HealthScoreCacheEntry]" = OrderedDict()
        self._lock = threading.Lock()
        self._stripes = [threading.RLock() for _ in range(LOCK_STRIPES)]
        self._sequence = itertools.count(1)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, customer_id: str) -> bool:
        with self._lock:
            return customer_id in self._entries

    @contextmanager
    def lock(self, customer_id: str) -> Iterator[None]:
        """Hold the customer's lock for a read-modify-write sequence."""
        stripe = self._stripes[zlib.crc32(customer_id.encode("utf-8")) % LOCK_STRIPES]
        with stripe:
            yield

    def get(self, customer_id: str) -> Optional[HealthScoreCacheEntry]:
        with self._lock:
            return self._entries.get(customer_id)

    def get_score(self, customer_id: str) -> Optional[CustomerHealthScore]:
        entry = self.get(customer_id)
        return entry.score if entry is not None else None

    def put(self, score: CustomerHealthScore) -> HealthScoreCacheEntry:
        """Store a score as the customer's latest, evicting the oldest writes if full."""
        with self._lock:
            entry = HealthScoreCacheEntry(
                customer_id=score.customer_id,
                score=score,
                timestamp=self.clock(),
                sequence=next(self._sequence),
            )
            self._entries[score.customer_id] = entry
            self._entries.move_to_end(score.customer_id)
            while len(self._entries) > self.capacity:
                self._entries.popitem(last=False)
            return entry

    def entries(self) -> List[HealthScoreCacheEntry]:
        """Snapshot of all entries, oldest write first."""
        with self._lock:
            return list(self._entries.values())

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
