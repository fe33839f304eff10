"""
Structured logging configuration.

Following Sandi Metz principles:
- Single Responsibility: Logging setup and configuration
- Small functions: Each setup step isolated
- Clear naming: Descriptive function names
"""

import logging
import sys
from typing import Any

import structlog


def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure structured logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structured logger
    """
    return structlog.get_logger(name)


def log_cache_hit(tier: str, key: str, **kwargs: Any) -> None:
    """
    Log cache hit.

    Args:
        tier: Cache tier name (response/transcript/language)
        key: Cache key
        **kwargs: Additional context
    """
    logger = get_logger("cache")
    logger.debug("cache_hit", tier=tier, key=key[-12:], **kwargs)


def log_cache_miss(tier: str, key: str, **kwargs: Any) -> None:
    """
    Log cache miss.

    Args:
        tier: Cache tier name
        key: Cache key
        **kwargs: Additional context
    """
    logger = get_logger("cache")
    logger.debug("cache_miss", tier=tier, key=key[-12:], **kwargs)


def log_provider_call(provider: str, operation: str, latency_ms: float, **kwargs: Any) -> None:
    """
    Log external provider call.

    Args:
        provider: Provider name
        operation: Operation (transcribe/synthesize/converse)
        latency_ms: Call latency in milliseconds
        **kwargs: Additional context
    """
    logger = get_logger("provider")
    logger.info(
        "provider_call",
        provider=provider,
        operation=operation,
        latency_ms=round(latency_ms, 2),
        **kwargs,
    )
