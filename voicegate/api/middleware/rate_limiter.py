"""
API Rate Limiting Middleware.

Limits request rates per client address.

Sandi Metz Principles:
- Single Responsibility: Rate limiting
- Configurable: Limit and excluded paths
- Dependency Injection: Clock injected for testability
"""

import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Dict, List, Optional, Tuple

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from voicegate.utils.logger import get_logger

logger = get_logger(__name__)

WINDOW_SECONDS = 60


@dataclass
class RateLimitConfig:
    """Rate limit configuration."""

    requests_per_minute: int = 30
    enabled: bool = True
    excluded_paths: List[str] = field(default_factory=lambda: ["/api/health"])


class InMemoryRateLimiter:
    """
    Sliding-window rate limiter kept in process memory.
    """

    def __init__(
        self,
        config: RateLimitConfig,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize rate limiter.

        Args:
            config: Rate limit configuration
            clock: Time source in seconds
        """
        self._config = config
        self._clock = clock
        self._requests: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def client_key(request: Request) -> str:
        """Get unique client identifier."""
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
        return request.client.host if request.client else "unknown"

    def is_allowed(self, key: str) -> Tuple[bool, int]:
        """
        Check and record one request for a client.

        Args:
            key: Client identifier

        Returns:
            Tuple of (allowed, retry_after_seconds)
        """
        if not self._config.enabled:
            return (True, 0)

        now = self._clock()
        with self._lock:
            window = self._requests.setdefault(key, deque())
            self._drop_old(window, now)

            if len(window) >= self._config.requests_per_minute:
                retry_after = WINDOW_SECONDS - int(now - window[0])
                logger.warning(
                    "Rate limit exceeded",
                    client=key,
                    count=len(window),
                    limit=self._config.requests_per_minute,
                )
                return (False, max(1, retry_after))

            window.append(now)
            return (True, 0)

    def remaining(self, key: str) -> int:
        """Get remaining requests in current window."""
        with self._lock:
            window = self._requests.get(key)
            if window is None:
                return self._config.requests_per_minute
            self._drop_old(window, self._clock())
            return max(0, self._config.requests_per_minute - len(window))

    def cleanup(self) -> int:
        """
        Forget clients with no requests in the current window.

        Returns:
            Number of clients removed
        """
        now = self._clock()
        with self._lock:
            idle = []
            for key, window in self._requests.items():
                self._drop_old(window, now)
                if not window:
                    idle.append(key)
            for key in idle:
                del self._requests[key]
        return len(idle)

    def _drop_old(self, window: Deque[float], now: float) -> None:
        cutoff = now - WINDOW_SECONDS
        while window and window[0] <= cutoff:
            window.popleft()


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    FastAPI middleware for rate limiting.

    Adds rate limiting headers to responses.
    """

    def __init__(
        self,
        app,
        rate_limiter: Optional[InMemoryRateLimiter] = None,
        config: Optional[RateLimitConfig] = None,
    ):
        """
        Initialize middleware.

        Args:
            app: FastAPI application
            rate_limiter: Rate limiter instance
            config: Rate limit configuration
        """
        super().__init__(app)
        self._config = config or RateLimitConfig()
        self._limiter = rate_limiter or InMemoryRateLimiter(self._config)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request with rate limiting.

        Args:
            request: Incoming request
            call_next: Next middleware/handler

        Returns:
            Response with rate limit headers, or 429
        """
        if request.url.path in self._config.excluded_paths:
            return await call_next(request)

        key = self._limiter.client_key(request)
        allowed, retry_after = self._limiter.is_allowed(key)

        if not allowed:
            return JSONResponse(
                status_code=429,
                content={"detail": "Too many requests, please try again later."},
                headers={"Retry-After": str(retry_after)},
            )

        response = await call_next(request)

        response.headers["X-RateLimit-Limit"] = str(self._config.requests_per_minute)
        response.headers["X-RateLimit-Remaining"] = str(self._limiter.remaining(key))
        return response
