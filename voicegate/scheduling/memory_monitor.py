"""
Process memory watchdog.

Sandi Metz Principles:
- Single Responsibility: Memory threshold checks
- Dependency Injection: Reader and pressure callbacks injected
"""

import gc
import inspect
import os
import resource
import sys
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Union

from voicegate.utils.logger import get_logger

logger = get_logger(__name__)

PressureCallback = Callable[[], Union[object, Awaitable[object]]]

_STATM = Path("/proc/self/statm")


def read_rss_mb() -> float:
    """
    Read resident memory of this process.

    Uses /proc on Linux (current RSS) and falls back to the peak RSS
    reported by getrusage elsewhere.

    Returns:
        Resident memory in MB
    """
    if _STATM.exists():
        resident_pages = int(_STATM.read_text().split()[1])
        return resident_pages * os.sysconf("SC_PAGE_SIZE") / (1024 * 1024)

    usage = resource.getrusage(resource.RUSAGE_SELF)
    if sys.platform == "darwin":
        return usage.ru_maxrss / (1024 * 1024)  # bytes on macOS
    return usage.ru_maxrss / 1024  # KB on Linux/BSD


class MemoryMonitor:
    """
    Triggers cleanup callbacks when memory crosses a threshold.
    """

    def __init__(
        self,
        threshold_mb: float,
        on_pressure: Optional[List[PressureCallback]] = None,
        reader: Callable[[], float] = read_rss_mb,
    ):
        """
        Initialize monitor.

        Args:
            threshold_mb: Resident memory that counts as pressure
            on_pressure: Cleanup callbacks (sync or async)
            reader: Memory reader in MB
        """
        self._threshold = threshold_mb
        self._callbacks = list(on_pressure or [])
        self._reader = reader
        self._peak_mb = 0.0
        self._pressure_events = 0

    @property
    def peak_mb(self) -> float:
        """Highest reading seen."""
        return self._peak_mb

    @property
    def pressure_events(self) -> int:
        """Number of checks that triggered cleanup."""
        return self._pressure_events

    async def check(self) -> bool:
        """
        Read memory and run cleanup callbacks above threshold.

        Each callback is isolated; one failing does not skip the rest.

        Returns:
            True if cleanup was triggered
        """
        current = self._reader()
        self._peak_mb = max(self._peak_mb, current)

        if current <= self._threshold:
            return False

        self._pressure_events += 1
        logger.warning(
            "High memory usage", memory_mb=round(current, 2), threshold=self._threshold
        )

        for callback in self._callbacks:
            try:
                result = callback()
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error("Memory cleanup callback failed", error=str(e))

        collected = gc.collect()
        logger.info("Garbage collection triggered", objects_collected=collected)
        return True
