"""
Thread-safe cache with least-recently-used batch eviction.
"""

from __future__ import annotations

import itertools
import math
import threading
from dataclasses import dataclass
from typing import Any, Generic, Hashable, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

DEFAULT_MAX_SIZE = 1000
DEFAULT_EVICT_FRACTION = 0.2


@dataclass
class CacheEntry(Generic[V]):
    value: V
    # Logical clock tick of the last read or write
    last_access: int


class Cache(Generic[K, V]):
    """
    Bounded key/value cache shared by the analyzers.

    When an insert finds the cache full, the ``ceil(max_size * evict_fraction)``
    least recently accessed entries (at least one) are dropped in one batch.
    """

    def __init__(self, max_size: int = DEFAULT_MAX_SIZE, evict_fraction: float = DEFAULT_EVICT_FRACTION):
        if max_size <= 0:
            max_size = DEFAULT_MAX_SIZE
        if evict_fraction <= 0 or evict_fraction >= 1:
            evict_fraction = DEFAULT_EVICT_FRACTION

        self.max_size = max_size
        self.evict_fraction = evict_fraction
        self._items: dict[K, CacheEntry[V]] = {}
        self._clock = itertools.count()
        self._lock = threading.Lock()

    def get(self, key: K, default: Any = None) -> V | Any:
        """Return the cached value (refreshing its access time) or ``default``."""
        with self._lock:
            entry = self._items.get(key)
            if entry is None:
                return default
            entry.last_access = next(self._clock)
            return entry.value

    def __contains__(self, key: K) -> bool:
        with self._lock:
            return key in self._items

    def set(self, key: K, value: V) -> None:
        with self._lock:
            if key not in self._items:
                self._enforce_limit()
            self._items[key] = CacheEntry(value=value, last_access=next(self._clock))

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def _enforce_limit(self) -> None:
        # Caller holds the lock
        if len(self._items) < self.max_size:
            return

        oldest_first = sorted(self._items.items(), key=lambda item: item[1].last_access)
        to_evict = max(1, math.ceil(self.max_size * self.evict_fraction))
        for key, _ in oldest_first[:to_evict]:
            del self._items[key]
