"""
API Request Logging Middleware.

Logs every request with a request id, timing and status.

Sandi Metz Principles:
- Single Responsibility: Request/response logging
- Non-intrusive: Doesn't modify request/response bodies
- Configurable: Excluded paths and slow threshold
"""

import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from voicegate.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class LoggingConfig:
    """Logging configuration."""

    enabled: bool = True
    excluded_paths: List[str] = field(default_factory=lambda: ["/api/health"])
    slow_request_threshold_ms: float = 1000.0


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    FastAPI middleware for request/response logging.

    The request id is bound into the structlog context so every log line
    written while handling the request carries it.
    """

    def __init__(
        self,
        app,
        config: Optional[LoggingConfig] = None,
    ):
        """
        Initialize middleware.

        Args:
            app: FastAPI application
            config: Logging configuration
        """
        super().__init__(app)
        self._config = config or LoggingConfig()

    def _generate_request_id(self) -> str:
        """Generate unique request ID."""
        return str(uuid.uuid4())[:8]

    def _should_log(self, path: str) -> bool:
        """Check if path should be logged."""
        if not self._config.enabled:
            return False
        return path not in self._config.excluded_paths

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request with logging.

        Args:
            request: Incoming request
            call_next: Next middleware/handler

        Returns:
            Response
        """
        request_id = request.headers.get("X-Request-ID") or self._generate_request_id()

        if not self._should_log(request.url.path):
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response

        structlog.contextvars.bind_contextvars(request_id=request_id)
        start_time = time.perf_counter()
        logger.info(
            "Request started",
            method=request.method,
            path=request.url.path,
            client=request.client.host if request.client else "unknown",
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
                error=str(e),
            )
            raise
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

        duration_ms = (time.perf_counter() - start_time) * 1000
        response_log = {
            "request_id": request_id,
            "status": response.status_code,
            "duration_ms": round(duration_ms, 2),
        }

        if duration_ms > self._config.slow_request_threshold_ms:
            logger.warning("Slow request detected", **response_log)
        else:
            logger.info("Request completed", **response_log)

        response.headers["X-Request-ID"] = request_id
        return response


default_logging_config = LoggingConfig()
