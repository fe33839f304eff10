"""Test periodic background tasks."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from voicegate.scheduling.periodic import PeriodicTask


class TestPeriodicTask:
    """Test interval scheduling."""

    def test_should_reject_non_positive_interval(self):
        """Test validation."""
        with pytest.raises(ValueError):
            PeriodicTask("bad", 0, lambda: None)

    @pytest.mark.asyncio
    async def test_run_once_calls_sync_action(self):
        """Test sync action."""
        action = MagicMock(return_value=3)
        task = PeriodicTask("sync", 1, action)

        assert await task.run_once() == 3
        assert task.runs == 1

    @pytest.mark.asyncio
    async def test_run_once_awaits_async_action(self):
        """Test async action."""
        action = AsyncMock(return_value=7)
        task = PeriodicTask("async", 1, action)

        assert await task.run_once() == 7
        action.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failure_is_counted_not_raised(self):
        """Test failing action."""
        task = PeriodicTask("fail", 1, MagicMock(side_effect=RuntimeError("boom")))

        assert await task.run_once() is None
        assert task.failures == 1

    @pytest.mark.asyncio
    async def test_loop_runs_repeatedly_until_stopped(self):
        """Test start and stop."""
        action = MagicMock()
        task = PeriodicTask("loop", 0.01, action)

        task.start()
        assert task.is_running
        await asyncio.sleep(0.1)
        await task.stop()

        assert task.is_running is False
        assert action.call_count >= 2

    @pytest.mark.asyncio
    async def test_loop_survives_failures(self):
        """Test a failing run does not stop the loop."""
        calls = {"n": 0}

        def action():
            calls["n"] += 1
            if calls["n"] == 1:
                raise RuntimeError("boom")

        task = PeriodicTask("flaky", 0.01, action)

        task.start()
        await asyncio.sleep(0.1)
        await task.stop()

        assert task.failures >= 1
        assert task.runs >= 2

    @pytest.mark.asyncio
    async def test_stop_without_start_is_noop(self):
        """Test stop before start."""
        task = PeriodicTask("idle", 1, MagicMock())
        await task.stop()
        assert task.runs == 0
