"""
Bounded in-memory cache with per-entry TTL.

Sandi Metz Principles:
- Single Responsibility: One cache tier
- Small methods: Each operation isolated
- Dependency Injection: Clock injected for testability

Eviction order is configurable. ``insertion`` drops the oldest-inserted key
and does not reorder on reads. ``recency`` moves a key to the back on every
hit, giving true least-recently-used eviction.
"""

import math
import threading
import time
from collections import OrderedDict
from enum import Enum
from typing import Callable, Generic, Hashable, Optional, TypeVar

from voicegate.exceptions import ConfigurationError
from voicegate.models.cache_entry import CacheEntry
from voicegate.models.statistics import CacheTierStats
from voicegate.utils.logger import get_logger

logger = get_logger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

PRUNE_THRESHOLD = 0.9
PRUNE_FRACTION = 0.25


class EvictionPolicy(str, Enum):
    """Order in which entries leave a full cache."""

    INSERTION = "insertion"
    RECENCY = "recency"


class LRUCache(Generic[K, V]):
    """
    Capacity-bounded cache tier with lazy TTL expiry.

    Every public method holds the tier lock, so readers never see a
    half-applied insert or eviction.
    """

    def __init__(
        self,
        name: str,
        capacity: int,
        ttl_seconds: float,
        eviction_policy: EvictionPolicy = EvictionPolicy.INSERTION,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize cache tier.

        Args:
            name: Tier name used in logs and stats
            capacity: Maximum resident entries
            ttl_seconds: Entry lifetime
            eviction_policy: Overflow eviction order
            clock: Monotonic time source in seconds

        Raises:
            ConfigurationError: If capacity or TTL is not positive
        """
        if capacity < 1:
            raise ConfigurationError(f"Cache '{name}' capacity must be >= 1")
        if ttl_seconds <= 0:
            raise ConfigurationError(f"Cache '{name}' TTL must be > 0")

        self._name = name
        self._capacity = capacity
        self._ttl = float(ttl_seconds)
        self._policy = EvictionPolicy(eviction_policy)
        self._clock = clock
        self._entries: "OrderedDict[K, CacheEntry[V]]" = OrderedDict()
        self._lock = threading.RLock()

        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._expirations = 0

    @property
    def name(self) -> str:
        """Tier name."""
        return self._name

    @property
    def capacity(self) -> int:
        """Maximum resident entries."""
        return self._capacity

    @property
    def ttl_seconds(self) -> float:
        """Entry lifetime."""
        return self._ttl

    @property
    def eviction_policy(self) -> EvictionPolicy:
        """Configured eviction order."""
        return self._policy

    def get(self, key: K) -> Optional[V]:
        """
        Look up a live entry.

        Expired entries count as misses but stay resident until the next
        sweep or overflow eviction.

        Args:
            key: Cache key

        Returns:
            Cached value, or None on miss
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or entry.is_expired(self._clock()):
                self._misses += 1
                return None

            if self._policy is EvictionPolicy.RECENCY:
                self._entries.move_to_end(key)
            self._hits += 1
            return entry.value

    def set(self, key: K, value: V) -> None:
        """
        Insert or overwrite an entry.

        Args:
            key: Cache key
            value: Value to cache
        """
        with self._lock:
            if key in self._entries:
                del self._entries[key]
            elif len(self._entries) >= self._capacity:
                self._evict_oldest()

            self._entries[key] = CacheEntry(
                value=value, expires_at=self._clock() + self._ttl
            )

    def delete(self, key: K) -> bool:
        """
        Remove an entry.

        Args:
            key: Cache key

        Returns:
            True if an entry was removed
        """
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> int:
        """
        Remove every entry.

        Returns:
            Number of entries removed
        """
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            return count

    def purge_expired(self) -> int:
        """
        Physically remove expired entries.

        Returns:
            Number of entries removed
        """
        with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if e.is_expired(now)]
            for key in expired:
                del self._entries[key]
            self._expirations += len(expired)
            return len(expired)

    def prune(
        self, threshold: float = PRUNE_THRESHOLD, fraction: float = PRUNE_FRACTION
    ) -> int:
        """
        Relieve memory pressure by dropping the oldest entries.

        Runs only when the tier holds at least ``capacity * threshold``
        entries, then removes ``floor(size * fraction)`` of them in
        eviction order regardless of TTL.

        Args:
            threshold: Fill ratio that triggers pruning
            fraction: Share of resident entries to remove

        Returns:
            Number of entries removed
        """
        with self._lock:
            size = len(self._entries)
            if size < self._capacity * threshold:
                return 0

            to_remove = math.floor(size * fraction)
            for _ in range(to_remove):
                self._evict_oldest()
            return to_remove

    def stats(self) -> CacheTierStats:
        """Snapshot tier statistics."""
        with self._lock:
            return CacheTierStats(
                name=self._name,
                size=len(self._entries),
                capacity=self._capacity,
                ttl_seconds=self._ttl,
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
                expirations=self._expirations,
            )

    def _evict_oldest(self) -> None:
        # caller holds the lock
        key, _ = self._entries.popitem(last=False)
        self._evictions += 1
        logger.debug("Cache entry evicted", tier=self._name, key=str(key)[-12:])

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            entry = self._entries.get(key)  # type: ignore[arg-type]
            return entry is not None and not entry.is_expired(self._clock())
