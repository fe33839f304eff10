"""
Conversation session storage.

In-memory and Redis-backed stores plus the Redis distributed lock.
"""

from voicegate.session.base import SessionStore, new_session_id
from voicegate.session.locks import DistributedLock
from voicegate.session.memory_store import InMemorySessionStore
from voicegate.session.redis_store import RedisSessionStore, create_redis_pool

__all__ = [
    "DistributedLock",
    "InMemorySessionStore",
    "RedisSessionStore",
    "SessionStore",
    "create_redis_pool",
    "new_session_id",
]
