"""
Connection pool for provider handles.

Sandi Metz Principles:
- Single Responsibility: Connection pooling
- Small methods: Each operation isolated
- Configurable: Flexible pool settings

Acquire never waits: when every pooled slot is busy a temporary slot is
built and destroyed again on release.
"""

import itertools
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Generic, Iterator, List, Optional, Set, TypeVar

from voicegate.exceptions import ConfigurationError, PoolClosedError
from voicegate.models.statistics import PoolStats
from voicegate.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

_slot_ids = itertools.count(1)


@dataclass
class PoolConfig:
    """Connection pool configuration."""

    pool_size: int = 5
    stale_after_seconds: float = 300.0  # 5 minutes

    def __post_init__(self) -> None:
        if self.pool_size < 1:
            raise ConfigurationError("Pool size must be >= 1")
        if self.stale_after_seconds <= 0:
            raise ConfigurationError("Staleness threshold must be > 0")


@dataclass(eq=False)
class PoolSlot(Generic[T]):
    """A handle managed by the pool."""

    handle: T
    created_at: float
    last_used_at: float
    temporary: bool = False
    in_use: bool = False
    refreshing: bool = False
    slot_id: int = field(default_factory=lambda: next(_slot_ids))

    def mark_used(self, now: float) -> None:
        """Mark slot as handed out."""
        self.in_use = True
        self.last_used_at = now

    def mark_released(self, now: float) -> None:
        """Mark slot as free."""
        self.in_use = False
        self.last_used_at = now

    @property
    def is_free(self) -> bool:
        """Neither handed out nor being refreshed."""
        return not self.in_use and not self.refreshing

    def is_stale(self, now: float, stale_after: float) -> bool:
        """Check if a free slot has been idle too long."""
        return self.is_free and (now - self.last_used_at) > stale_after


@dataclass
class PoolStatistics:
    """Monotonic pool counters."""

    created: int = 0
    reused: int = 0
    destroyed: int = 0
    refreshed: int = 0
    maintenance_failures: int = 0


class ConnectionPool(Generic[T]):
    """
    Manages a fixed set of reusable handles plus overflow.

    The slot list and counters are guarded by one lock, so two concurrent
    callers never receive the same pooled slot.
    """

    def __init__(
        self,
        factory: Callable[[], T],
        close_fn: Optional[Callable[[T], None]] = None,
        config: Optional[PoolConfig] = None,
        clock: Callable[[], float] = time.monotonic,
        name: str = "pool",
    ):
        """
        Initialize pool manager.

        Args:
            factory: Function to create new handles
            close_fn: Function to close a handle
            config: Pool configuration
            clock: Monotonic time source in seconds
            name: Pool name used in logs
        """
        self._factory = factory
        self._close_fn = close_fn or (lambda h: None)
        self._config = config or PoolConfig()
        self._clock = clock
        self._name = name

        self._slots: List[PoolSlot[T]] = []
        self._temporary: Set[PoolSlot[T]] = set()
        self._lock = threading.Lock()
        self._stats = PoolStatistics()
        self._initialized = False
        self._closed = False

    @property
    def config(self) -> PoolConfig:
        """Pool configuration."""
        return self._config

    @property
    def is_initialized(self) -> bool:
        """Whether the reusable slots have been built."""
        return self._initialized

    @property
    def is_closed(self) -> bool:
        """Whether the pool has been shut down."""
        return self._closed

    def initialize(self) -> None:
        """
        Eagerly build the reusable slots.

        Raises:
            PoolClosedError: If the pool was closed
        """
        with self._lock:
            if self._closed:
                raise PoolClosedError(f"Pool '{self._name}' is closed")
            if self._initialized:
                return

            slots: List[PoolSlot[T]] = []
            try:
                for _ in range(self._config.pool_size):
                    slots.append(self._create_slot(temporary=False))
            except Exception:
                for built in slots:
                    self._stats.destroyed += 1
                    self._close_handle(built.handle)
                raise
            self._slots = slots
            self._initialized = True

        logger.info(
            "Connection pool initialized",
            pool=self._name,
            pool_size=self._config.pool_size,
        )

    def acquire(self) -> PoolSlot[T]:
        """
        Hand out a free pooled slot, or a temporary one when none is free.

        Returns:
            Slot in use by the caller

        Raises:
            PoolClosedError: If the pool was closed
        """
        if not self._initialized:
            self.initialize()

        with self._lock:
            if self._closed:
                raise PoolClosedError(f"Pool '{self._name}' is closed")

            for slot in self._slots:
                if slot.is_free:
                    slot.mark_used(self._clock())
                    self._stats.reused += 1
                    return slot

        logger.debug("All pooled handles in use, creating temporary", pool=self._name)
        slot = self._create_slot(temporary=True)
        slot.mark_used(self._clock())

        with self._lock:
            if self._closed:
                self._close_handle(slot.handle)
                raise PoolClosedError(f"Pool '{self._name}' is closed")
            self._stats.created += 1
            self._temporary.add(slot)
        return slot

    def release(self, slot: PoolSlot[T]) -> None:
        """
        Return a slot to the pool.

        Temporary slots are closed; pooled slots become free again.

        Args:
            slot: Slot obtained from acquire
        """
        if slot.temporary:
            with self._lock:
                if slot not in self._temporary:
                    logger.warning("Unknown temporary slot released", pool=self._name)
                    return
                self._temporary.discard(slot)
                slot.in_use = False
                self._stats.destroyed += 1
            self._close_handle(slot.handle)
            return

        with self._lock:
            if slot not in self._slots:
                logger.warning("Slot does not belong to pool", pool=self._name)
                return
            if not slot.in_use:
                logger.warning(
                    "Slot released twice", pool=self._name, slot_id=slot.slot_id
                )
                return
            slot.mark_released(self._clock())

    @contextmanager
    def slot(self) -> Iterator[PoolSlot[T]]:
        """
        Acquire a slot for the duration of a block.

        Usage:
            with pool.slot() as slot:
                slot.handle.do_work()
        """
        acquired = self.acquire()
        try:
            yield acquired
        finally:
            self.release(acquired)

    def perform_maintenance(self) -> int:
        """
        Recreate handles of free pooled slots idle beyond the threshold.

        Stale slots are reserved under the lock and rebuilt outside it, so
        acquire and release never wait on the factory. Slots in use are
        skipped. A failing slot is logged and the sweep continues.

        Returns:
            Number of refreshed slots
        """
        with self._lock:
            if self._closed:
                return 0
            now = self._clock()
            stale = [
                slot
                for slot in self._slots
                if slot.is_stale(now, self._config.stale_after_seconds)
            ]
            for slot in stale:
                slot.refreshing = True

        refreshed = 0
        for slot in stale:
            if self._refresh_slot(slot):
                refreshed += 1

        if refreshed:
            logger.info("Refreshed stale handles", pool=self._name, count=refreshed)
        return refreshed

    def stats(self) -> PoolStats:
        """Snapshot pool statistics."""
        with self._lock:
            in_use = sum(1 for slot in self._slots if slot.in_use)
            free = sum(1 for slot in self._slots if slot.is_free)
            return PoolStats(
                pool_size=self._config.pool_size,
                in_use=in_use,
                available=free,
                created=self._stats.created,
                reused=self._stats.reused,
                destroyed=self._stats.destroyed,
                refreshed=self._stats.refreshed,
                temporary_in_use=len(self._temporary),
            )

    @property
    def maintenance_failures(self) -> int:
        """Count of slots that failed to refresh."""
        return self._stats.maintenance_failures

    def health_check(self) -> bool:
        """
        Check the pool can serve a pooled handle right now.

        Returns:
            True if initialized, open and at least one slot is free
        """
        with self._lock:
            if not self._initialized or self._closed:
                return False
            return any(slot.is_free for slot in self._slots)

    def close_all(self) -> None:
        """Close every handle, in use or not, and shut the pool down."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            slots = self._slots + list(self._temporary)
            self._stats.destroyed += len(slots)
            self._slots = []
            self._temporary.clear()

        for slot in slots:
            slot.in_use = False
            self._close_handle(slot.handle)

        logger.info("Connection pool closed", pool=self._name, closed=len(slots))

    def _refresh_slot(self, slot: PoolSlot[T]) -> bool:
        """
        Swap a fresh handle into a reserved slot.

        The factory and close calls run outside the lock.

        Returns:
            True if the slot now holds a new handle
        """
        try:
            handle = self._factory()
        except Exception as e:
            with self._lock:
                slot.refreshing = False
                self._stats.maintenance_failures += 1
            logger.error(
                "Failed to refresh stale handle",
                pool=self._name,
                slot_id=slot.slot_id,
                error=str(e),
            )
            return False

        with self._lock:
            slot.refreshing = False
            swapped = not self._closed
            if swapped:
                handle, slot.handle = slot.handle, handle
                now = self._clock()
                slot.created_at = now
                slot.last_used_at = now
                self._stats.refreshed += 1
        self._close_handle(handle)
        return swapped

    def _create_slot(self, temporary: bool) -> PoolSlot[T]:
        now = self._clock()
        handle = self._factory()
        if not temporary:
            self._stats.created += 1
        return PoolSlot(
            handle=handle, created_at=now, last_used_at=now, temporary=temporary
        )

    def _close_handle(self, handle: T) -> None:
        try:
            self._close_fn(handle)
        except Exception as e:
            logger.warning("Error closing handle", pool=self._name, error=str(e))
