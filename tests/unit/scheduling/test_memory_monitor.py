"""Test memory watchdog."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from voicegate.scheduling.memory_monitor import MemoryMonitor, read_rss_mb


class TestReadRss:
    """Test memory reader."""

    def test_should_return_positive_megabytes(self):
        """Test reading this process."""
        assert read_rss_mb() > 0


class TestMemoryMonitor:
    """Test threshold checks."""

    @pytest.mark.asyncio
    async def test_should_do_nothing_below_threshold(self):
        """Test no pressure."""
        callback = MagicMock()
        monitor = MemoryMonitor(400, [callback], reader=lambda: 120.0)

        assert await monitor.check() is False
        callback.assert_not_called()
        assert monitor.peak_mb == 120.0

    @pytest.mark.asyncio
    async def test_should_run_callbacks_above_threshold(self):
        """Test sync and async cleanup callbacks."""
        prune = MagicMock(return_value=10)
        cleanup = AsyncMock(return_value=2)
        monitor = MemoryMonitor(400, [prune, cleanup], reader=lambda: 450.0)

        with patch("voicegate.scheduling.memory_monitor.gc.collect") as collect:
            assert await monitor.check() is True
            collect.assert_called_once()

        prune.assert_called_once()
        cleanup.assert_awaited_once()
        assert monitor.pressure_events == 1

    @pytest.mark.asyncio
    async def test_failing_callback_does_not_skip_others(self):
        """Test callback isolation."""
        failing = MagicMock(side_effect=RuntimeError("boom"))
        other = MagicMock()
        monitor = MemoryMonitor(1, [failing, other], reader=lambda: 2.0)

        assert await monitor.check() is True
        other.assert_called_once()
