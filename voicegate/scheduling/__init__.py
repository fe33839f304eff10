"""
Background scheduling module.

Periodic maintenance tasks and the memory watchdog.
"""

from voicegate.scheduling.memory_monitor import MemoryMonitor, read_rss_mb
from voicegate.scheduling.periodic import PeriodicTask

__all__ = ["MemoryMonitor", "PeriodicTask", "read_rss_mb"]
