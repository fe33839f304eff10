"""
Request metrics.

Tracks request volume, errors, cache effectiveness and latency.

Sandi Metz Principles:
- Single Responsibility: Request counters
- Observable: Snapshot exposed to the metrics endpoint
"""

import threading
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class RequestCounters:
    """Aggregated request counters."""

    total_requests: int = 0
    chat_requests: int = 0
    voice_requests: int = 0
    errors: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    total_latency_ms: float = 0.0
    max_latency_ms: float = 0.0
    languages: Dict[str, int] = field(default_factory=lambda: defaultdict(int))

    @property
    def avg_latency_ms(self) -> float:
        """Get average latency."""
        if self.total_requests == 0:
            return 0.0
        return self.total_latency_ms / self.total_requests

    @property
    def cache_hit_rate(self) -> float:
        """Get cache hit rate."""
        total = self.cache_hits + self.cache_misses
        if total == 0:
            return 0.0
        return self.cache_hits / total

    @property
    def error_rate(self) -> float:
        """Get error rate."""
        if self.total_requests == 0:
            return 0.0
        return self.errors / self.total_requests


class RequestMetrics:
    """
    Thread-safe request metrics recorder.
    """

    def __init__(self):
        self._counters = RequestCounters()
        self._lock = threading.Lock()
        self._started_at = time.time()

    def record_request(self, kind: str, latency_ms: float) -> None:
        """
        Record a finished request.

        Args:
            kind: "chat" or "voice"
            latency_ms: Request latency
        """
        with self._lock:
            c = self._counters
            c.total_requests += 1
            if kind == "chat":
                c.chat_requests += 1
            elif kind == "voice":
                c.voice_requests += 1
            c.total_latency_ms += latency_ms
            c.max_latency_ms = max(c.max_latency_ms, latency_ms)

    def record_error(self) -> None:
        """Record a failed request."""
        with self._lock:
            self._counters.errors += 1

    def record_cache(self, hit: bool) -> None:
        """Record a response cache lookup."""
        with self._lock:
            if hit:
                self._counters.cache_hits += 1
            else:
                self._counters.cache_misses += 1

    def record_language(self, language: str) -> None:
        """Record a detected language."""
        with self._lock:
            self._counters.languages[language] += 1

    def reset(self) -> None:
        """Reset all counters."""
        with self._lock:
            self._counters = RequestCounters()
            self._started_at = time.time()

    def snapshot(self) -> Dict[str, Any]:
        """
        Get a consistent copy of the counters.

        Returns:
            Metrics dictionary
        """
        with self._lock:
            c = self._counters
            return {
                "totalRequests": c.total_requests,
                "chatRequests": c.chat_requests,
                "voiceRequests": c.voice_requests,
                "errors": c.errors,
                "errorRate": round(c.error_rate, 4),
                "cacheHits": c.cache_hits,
                "cacheMisses": c.cache_misses,
                "cacheHitRate": round(c.cache_hit_rate, 4),
                "avgLatencyMs": round(c.avg_latency_ms, 2),
                "maxLatencyMs": round(c.max_latency_ms, 2),
                "languages": dict(c.languages),
                "uptimeSeconds": round(time.time() - self._started_at, 1),
            }
