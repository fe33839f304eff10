"""
Redis-backed distributed lock.

Sandi Metz Principles:
- Single Responsibility: Mutual exclusion across instances
- Small methods: Acquire, release and the retrying context kept apart

A lock is a key set with NX and a short expiry; release deletes the key
only while it still holds the caller's owner token.
"""

import asyncio
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from redis.asyncio import ConnectionPool, Redis

from voicegate.exceptions import LockAcquisitionError
from voicegate.utils.logger import get_logger

logger = get_logger(__name__)

RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""


class DistributedLock:
    """
    Short-lived lock shared through Redis.
    """

    def __init__(
        self,
        pool: ConnectionPool,
        retries: int = 3,
        retry_delay_seconds: float = 0.1,
    ):
        """
        Initialize lock helper.

        Args:
            pool: Redis connection pool
            retries: Extra attempts made by ``hold``
            retry_delay_seconds: Pause between attempts
        """
        self._pool = pool
        self._retries = retries
        self._retry_delay = retry_delay_seconds

    async def acquire(self, key: str, owner: str, ttl_seconds: int) -> bool:
        """
        Try once to take the lock.

        Args:
            key: Lock key
            owner: Owner token stored in the key
            ttl_seconds: Lock expiry

        Returns:
            True if the lock was taken
        """
        async with Redis(connection_pool=self._pool) as client:
            acquired = await client.set(key, owner, nx=True, ex=ttl_seconds)
        return bool(acquired)

    async def release(self, key: str, owner: str) -> bool:
        """
        Release the lock if still owned.

        Args:
            key: Lock key
            owner: Owner token used on acquire

        Returns:
            True if the key was deleted
        """
        async with Redis(connection_pool=self._pool) as client:
            deleted = await client.eval(RELEASE_SCRIPT, 1, key, owner)
        return bool(deleted)

    @asynccontextmanager
    async def hold(
        self, key: str, ttl_seconds: int, owner: Optional[str] = None
    ) -> AsyncIterator[str]:
        """
        Hold the lock for the duration of a block.

        Args:
            key: Lock key
            ttl_seconds: Lock expiry
            owner: Owner token, generated when None

        Yields:
            Owner token

        Raises:
            LockAcquisitionError: If the lock stays taken after all retries
        """
        owner = owner or uuid.uuid4().hex
        for attempt in range(self._retries + 1):
            if await self.acquire(key, owner, ttl_seconds):
                break
            if attempt < self._retries:
                await asyncio.sleep(self._retry_delay)
        else:
            raise LockAcquisitionError(f"Could not acquire lock '{key}'")

        try:
            yield owner
        finally:
            try:
                await self.release(key, owner)
            except Exception as e:
                logger.warning("Lock release failed", key=key, error=str(e))
