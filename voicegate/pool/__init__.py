"""
Connection pool module.

Reusable provider handles with overflow and staleness refresh.
"""

from voicegate.pool.connection_pool import (
    ConnectionPool,
    PoolConfig,
    PoolSlot,
    PoolStatistics,
)
from voicegate.pool.speech_handle import (
    SpeechHandle,
    SpeechHandleFactory,
    close_speech_handle,
)

__all__ = [
    "ConnectionPool",
    "PoolConfig",
    "PoolSlot",
    "PoolStatistics",
    "SpeechHandle",
    "SpeechHandleFactory",
    "close_speech_handle",
]
