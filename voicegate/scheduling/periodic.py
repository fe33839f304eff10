"""
Recurring background tasks.

Sandi Metz Principles:
- Single Responsibility: Interval scheduling
- Small methods: Start, stop and one tick kept apart
- Observable: Run and failure counters
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional, Union

from voicegate.utils.logger import get_logger

logger = get_logger(__name__)

Action = Callable[[], Union[Any, Awaitable[Any]]]


class PeriodicTask:
    """
    Runs an action on a fixed interval on the event loop.

    A failing run is logged and the loop keeps going.
    """

    def __init__(self, name: str, interval_seconds: float, action: Action):
        """
        Initialize task.

        Args:
            name: Task name used in logs
            interval_seconds: Delay between runs
            action: Sync or async callable to run
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")

        self._name = name
        self._interval = interval_seconds
        self._action = action
        self._task: Optional[asyncio.Task] = None
        self._runs = 0
        self._failures = 0

    @property
    def name(self) -> str:
        """Task name."""
        return self._name

    @property
    def interval_seconds(self) -> float:
        """Delay between runs."""
        return self._interval

    @property
    def runs(self) -> int:
        """Completed runs (successful or not)."""
        return self._runs

    @property
    def failures(self) -> int:
        """Runs that raised."""
        return self._failures

    @property
    def is_running(self) -> bool:
        """Whether the loop is scheduled."""
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the loop on the running event loop."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._loop(), name=f"periodic:{self._name}")
        logger.info("Periodic task started", task=self._name, interval=self._interval)

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        if self._task is None:
            return

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Periodic task stopped", task=self._name, runs=self._runs)

    async def run_once(self) -> Any:
        """
        Run the action one time.

        Returns:
            The action result, or None if it raised
        """
        self._runs += 1
        try:
            result = self._action()
            if inspect.isawaitable(result):
                result = await result
            return result
        except Exception as e:
            self._failures += 1
            logger.error("Periodic task failed", task=self._name, error=str(e))
            return None

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            await self.run_once()
