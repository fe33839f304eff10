"""
Redis session store shared across instances.

Sandi Metz Principles:
- Single Responsibility: Shared session storage
- Small methods: Each operation isolated
- Dependency Injection: Redis pool, lock and fallback injected

Sessions live under ``session:<id>`` with a sliding expiry. A short local
cache tier absorbs repeated reads; other instances evict it through
pub/sub. Any Redis failure sends the operation to the in-memory fallback.
"""

import asyncio
import json
import time
import uuid
from typing import Callable, Optional

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

from voicegate.cache.lru_cache import EvictionPolicy, LRUCache
from voicegate.config import AppConfig
from voicegate.models.session import Session
from voicegate.session.base import SessionStore, ThreadFactory, new_session_id
from voicegate.session.locks import DistributedLock
from voicegate.session.memory_store import InMemorySessionStore
from voicegate.utils.logger import get_logger

logger = get_logger(__name__)

SESSION_PREFIX = "session:"
LOCK_PREFIX = "lock:session:"
UPDATE_CHANNEL = "session:update"
DELETE_CHANNEL = "session:delete"


async def create_redis_pool(settings: AppConfig) -> ConnectionPool:
    """
    Create Redis connection pool.

    Args:
        settings: Application configuration

    Returns:
        Redis connection pool
    """
    return ConnectionPool.from_url(
        settings.redis_url,
        max_connections=settings.redis_max_connections,
        decode_responses=True,
    )


class RedisSessionStore(SessionStore):
    """
    Session store backed by Redis with a local read tier.
    """

    def __init__(
        self,
        pool: ConnectionPool,
        thread_factory: ThreadFactory,
        fallback: InMemorySessionStore,
        lock: Optional[DistributedLock] = None,
        ttl_seconds: int = 86400,
        local_cache_seconds: float = 60.0,
        local_cache_size: int = 1000,
        lock_ttl_seconds: int = 5,
        history_limit: int = 50,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize store.

        Args:
            pool: Redis connection pool
            thread_factory: Creates an agent thread for a new session
            fallback: Store used while Redis is failing
            lock: Distributed lock helper (built from pool when None)
            ttl_seconds: Session expiry in Redis
            local_cache_seconds: Local read tier lifetime
            local_cache_size: Local read tier capacity
            lock_ttl_seconds: Creation lock expiry
            history_limit: Turns kept per session
            clock: Monotonic time source for the local tier
        """
        self._pool = pool
        self._thread_factory = thread_factory
        self._fallback = fallback
        self._lock = lock or DistributedLock(pool)
        self._ttl = ttl_seconds
        self._lock_ttl = lock_ttl_seconds
        self._history_limit = history_limit
        self._instance_id = uuid.uuid4().hex
        self._local: LRUCache[str, Session] = LRUCache(
            name="sessions_local",
            capacity=local_cache_size,
            ttl_seconds=local_cache_seconds,
            eviction_policy=EvictionPolicy.RECENCY,
            clock=clock,
        )
        self._listener: Optional[asyncio.Task] = None

    @property
    def instance_id(self) -> str:
        """Origin id attached to published events."""
        return self._instance_id

    async def get(self, session_id: str) -> Optional[Session]:
        local = self._local.get(session_id)
        if local is not None:
            return local

        try:
            session = await self._fetch(session_id)
        except RedisError as e:
            logger.warning("Redis session read failed, using fallback", error=str(e))
            return await self._fallback.get(session_id)

        if session is not None:
            self._local.set(session_id, session)
        return session

    async def get_or_create(self, session_id: Optional[str] = None) -> Session:
        session_id = session_id or new_session_id()
        session = await self.get(session_id)
        if session is not None:
            return session

        try:
            return await self._create(session_id)
        except RedisError as e:
            logger.warning("Redis session create failed, using fallback", error=str(e))
            return await self._fallback.get_or_create(session_id)

    async def update(
        self,
        session_id: str,
        message: str,
        response: str,
        language: Optional[str] = None,
    ) -> Session:
        session = await self.get_or_create(session_id)
        session.record_turn(message, response, language, self._history_limit)

        try:
            await self._store(session)
            await self._publish(UPDATE_CHANNEL, session_id)
        except RedisError as e:
            logger.warning("Redis session write failed, using fallback", error=str(e))
            self._fallback.save(session)
            return session

        self._local.set(session_id, session)
        return session

    async def delete(self, session_id: str) -> bool:
        self._local.delete(session_id)
        fallback_deleted = await self._fallback.delete(session_id)

        try:
            async with Redis(connection_pool=self._pool) as client:
                removed = await client.delete(self._key(session_id))
            await self._publish(DELETE_CHANNEL, session_id)
        except RedisError as e:
            logger.warning("Redis session delete failed", error=str(e))
            return fallback_deleted

        return removed > 0 or fallback_deleted

    async def active_count(self) -> int:
        local_count = await self._fallback.active_count()
        try:
            count = 0
            async with Redis(connection_pool=self._pool) as client:
                async for _ in client.scan_iter(match=f"{SESSION_PREFIX}*"):
                    count += 1
            return count + local_count
        except RedisError as e:
            logger.warning("Redis session count failed", error=str(e))
            return local_count

    async def cleanup_expired(self) -> int:
        """
        Drop expired local entries.

        Redis expires shared sessions on its own.

        Returns:
            Number of local entries removed
        """
        return self._local.purge_expired() + await self._fallback.cleanup_expired()

    async def start_listener(self) -> None:
        """Subscribe to invalidation events from other instances."""
        if self._listener is None or self._listener.done():
            self._listener = asyncio.create_task(self._listen())

    async def handle_event(self, channel: str, data: str) -> None:
        """
        Apply one invalidation event to the local tier.

        Args:
            channel: Event channel
            data: JSON payload with sessionId and origin
        """
        try:
            payload = json.loads(data)
        except (TypeError, ValueError):
            logger.warning("Malformed session event", channel=channel)
            return

        if payload.get("origin") == self._instance_id:
            return

        session_id = payload.get("sessionId")
        if session_id and channel in (UPDATE_CHANNEL, DELETE_CHANNEL):
            self._local.delete(session_id)
            logger.debug("Local session evicted", session_id=session_id, channel=channel)

    async def close(self) -> None:
        """Stop the listener and disconnect the pool."""
        if self._listener is not None:
            self._listener.cancel()
            try:
                await self._listener
            except asyncio.CancelledError:
                pass
            self._listener = None
        await self._pool.disconnect()

    async def _create(self, session_id: str) -> Session:
        """
        Create a session under the distributed lock.

        Another instance may have won the race; its session is returned.
        """
        async with self._lock.hold(LOCK_PREFIX + session_id, self._lock_ttl):
            existing = await self._fetch(session_id)
            if existing is not None:
                self._local.set(session_id, existing)
                return existing

            thread_id = await self._thread_factory()
            session = Session(id=session_id, thread_id=thread_id)
            await self._store(session)

        self._local.set(session_id, session)
        logger.info("Session created", session_id=session_id, backend="redis")
        return session

    async def _fetch(self, session_id: str) -> Optional[Session]:
        key = self._key(session_id)
        async with Redis(connection_pool=self._pool) as client:
            data = await client.get(key)
            if data is None:
                return None
            await client.expire(key, self._ttl)
        return Session.model_validate_json(data)

    async def _store(self, session: Session) -> None:
        async with Redis(connection_pool=self._pool) as client:
            await client.setex(self._key(session.id), self._ttl, session.model_dump_json())

    async def _publish(self, channel: str, session_id: str) -> None:
        payload = json.dumps({"sessionId": session_id, "origin": self._instance_id})
        async with Redis(connection_pool=self._pool) as client:
            await client.publish(channel, payload)

    async def _listen(self) -> None:
        client = Redis(connection_pool=self._pool)
        pubsub = client.pubsub()
        try:
            await pubsub.subscribe(UPDATE_CHANNEL, DELETE_CHANNEL)
            async for message in pubsub.listen():
                if message.get("type") != "message":
                    continue
                await self.handle_event(message["channel"], message["data"])
        except RedisError as e:
            logger.error("Session event listener stopped", error=str(e))
        finally:
            await pubsub.aclose()
            await client.aclose()

    def _key(self, session_id: str) -> str:
        return f"{SESSION_PREFIX}{session_id}"
