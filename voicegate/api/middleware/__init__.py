"""
API Middleware module.

Contains middleware for:
- Rate limiting
- Request logging
"""

from voicegate.api.middleware.logging import (
    LoggingConfig,
    RequestLoggingMiddleware,
    default_logging_config,
)
from voicegate.api.middleware.rate_limiter import (
    InMemoryRateLimiter,
    RateLimitConfig,
    RateLimitMiddleware,
)

__all__ = [
    # Rate Limiting
    "RateLimitMiddleware",
    "RateLimitConfig",
    "InMemoryRateLimiter",
    # Logging
    "RequestLoggingMiddleware",
    "LoggingConfig",
    "default_logging_config",
]
