"""
In-process session store.

Sandi Metz Principles:
- Single Responsibility: Local session storage
- Composition: Built on the bounded TTL cache
"""

import asyncio
import time
from typing import Callable, Optional

from voicegate.cache.lru_cache import EvictionPolicy, LRUCache
from voicegate.models.session import Session
from voicegate.session.base import SessionStore, ThreadFactory, new_session_id
from voicegate.utils.logger import get_logger

logger = get_logger(__name__)


class InMemorySessionStore(SessionStore):
    """
    Session store kept in process memory.

    Sessions expire after ``ttl_seconds`` without activity; the least
    recently active session is dropped when ``max_sessions`` is reached.
    """

    def __init__(
        self,
        thread_factory: ThreadFactory,
        ttl_seconds: float = 86400,
        max_sessions: int = 10000,
        history_limit: int = 50,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize store.

        Args:
            thread_factory: Creates an agent thread for a new session
            ttl_seconds: Idle lifetime of a session
            max_sessions: Sessions kept before eviction
            history_limit: Turns kept per session
            clock: Monotonic time source
        """
        self._thread_factory = thread_factory
        self._history_limit = history_limit
        self._sessions: LRUCache[str, Session] = LRUCache(
            name="sessions",
            capacity=max_sessions,
            ttl_seconds=ttl_seconds,
            eviction_policy=EvictionPolicy.RECENCY,
            clock=clock,
        )
        self._create_lock = asyncio.Lock()

    async def get_or_create(self, session_id: Optional[str] = None) -> Session:
        session_id = session_id or new_session_id()
        session = await self.get(session_id)
        if session is not None:
            return session

        async with self._create_lock:
            session = await self.get(session_id)
            if session is None:
                thread_id = await self._thread_factory()
                session = Session(id=session_id, thread_id=thread_id)
                self._sessions.set(session_id, session)
                logger.info("Session created", session_id=session_id)
        return session

    async def get(self, session_id: str) -> Optional[Session]:
        session = self._sessions.get(session_id)
        if session is not None:
            # re-insert to slide the expiry
            self._sessions.set(session_id, session)
        return session

    async def update(
        self,
        session_id: str,
        message: str,
        response: str,
        language: Optional[str] = None,
    ) -> Session:
        session = await self.get_or_create(session_id)
        session.record_turn(message, response, language, self._history_limit)
        self.save(session)
        return session

    def save(self, session: Session) -> None:
        """Store a session as-is."""
        self._sessions.set(session.id, session)

    async def delete(self, session_id: str) -> bool:
        return self._sessions.delete(session_id)

    async def active_count(self) -> int:
        return len(self._sessions)

    async def cleanup_expired(self) -> int:
        removed = self._sessions.purge_expired()
        if removed:
            logger.info("Expired sessions removed", count=removed)
        return removed
