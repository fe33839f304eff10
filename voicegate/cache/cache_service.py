"""
Multi-tier response/transcript/language cache.

Sandi Metz Principles:
- Single Responsibility: Cache operations orchestration
- Small methods: Each operation < 10 lines
- Dependency Injection: Tiers built from injected settings

Three independent tiers short-circuit provider round-trips:
agent responses keyed by (message, session), transcripts and language
detections keyed by audio fingerprint.
"""

import time
from typing import Any, Callable, Dict, Optional

from voicegate.cache.lru_cache import EvictionPolicy, LRUCache
from voicegate.config import AppConfig
from voicegate.models.speech import LanguageDetection, TranscriptResult
from voicegate.models.statistics import CacheStats
from voicegate.utils.hasher import (
    DEFAULT_FINGERPRINT_BYTES,
    generate_audio_fingerprint,
    generate_language_key,
    generate_response_key,
    generate_transcript_key,
)
from voicegate.utils.logger import get_logger, log_cache_hit, log_cache_miss

logger = get_logger(__name__)

RESPONSE_TIER = "response"
TRANSCRIPT_TIER = "transcript"
LANGUAGE_TIER = "language"


class CacheService:
    """
    Cache engine shared by all request handlers.

    Construct once per process and inject.
    """

    def __init__(
        self,
        response_cache: LRUCache[str, Any],
        transcript_cache: LRUCache[str, TranscriptResult],
        language_cache: LRUCache[str, LanguageDetection],
        fingerprint_bytes: int = DEFAULT_FINGERPRINT_BYTES,
    ):
        """
        Initialize cache service.

        Args:
            response_cache: Tier for agent responses
            transcript_cache: Tier for transcripts
            language_cache: Tier for language detections
            fingerprint_bytes: Head/tail bytes used to fingerprint audio
        """
        self._tiers: Dict[str, LRUCache] = {
            RESPONSE_TIER: response_cache,
            TRANSCRIPT_TIER: transcript_cache,
            LANGUAGE_TIER: language_cache,
        }
        self._fingerprint_bytes = fingerprint_bytes
        logger.info(
            "Cache service initialized",
            tiers={name: tier.capacity for name, tier in self._tiers.items()},
        )

    @classmethod
    def from_config(
        cls, settings: AppConfig, clock: Callable[[], float] = time.monotonic
    ) -> "CacheService":
        """
        Build the three tiers from settings.

        Args:
            settings: Application configuration
            clock: Time source shared by all tiers

        Returns:
            Cache service
        """
        policy = EvictionPolicy(settings.cache_eviction_policy)
        return cls(
            response_cache=LRUCache(
                RESPONSE_TIER,
                settings.response_cache_max_size,
                settings.response_cache_ttl_seconds,
                policy,
                clock,
            ),
            transcript_cache=LRUCache(
                TRANSCRIPT_TIER,
                settings.transcript_cache_max_size,
                settings.transcript_cache_ttl_seconds,
                policy,
                clock,
            ),
            language_cache=LRUCache(
                LANGUAGE_TIER,
                settings.language_cache_max_size,
                settings.language_cache_ttl_seconds,
                policy,
                clock,
            ),
            fingerprint_bytes=settings.audio_fingerprint_bytes,
        )

    def audio_fingerprint(self, audio: bytes) -> str:
        """
        Fingerprint raw audio for transcript/language lookups.

        Args:
            audio: Raw audio bytes

        Returns:
            Audio fingerprint
        """
        return generate_audio_fingerprint(audio, self._fingerprint_bytes)

    def get_response(self, message: str, session_id: str) -> Optional[Any]:
        """
        Get cached agent response.

        Args:
            message: User message
            session_id: Session identifier

        Returns:
            Cached response, or None
        """
        return self._get(RESPONSE_TIER, generate_response_key(message, session_id))

    def set_response(self, message: str, session_id: str, response: Any) -> None:
        """
        Cache agent response.

        Args:
            message: User message
            session_id: Session identifier
            response: Response payload
        """
        self._set(RESPONSE_TIER, generate_response_key(message, session_id), response)

    def get_transcript(self, fingerprint: str) -> Optional[TranscriptResult]:
        """Get cached transcript for an audio fingerprint."""
        return self._get(TRANSCRIPT_TIER, generate_transcript_key(fingerprint))

    def set_transcript(self, fingerprint: str, transcript: TranscriptResult) -> None:
        """Cache transcript for an audio fingerprint."""
        self._set(TRANSCRIPT_TIER, generate_transcript_key(fingerprint), transcript)

    def get_language(self, fingerprint: str) -> Optional[LanguageDetection]:
        """Get cached language detection for an audio fingerprint."""
        return self._get(LANGUAGE_TIER, generate_language_key(fingerprint))

    def set_language(self, fingerprint: str, detection: LanguageDetection) -> None:
        """Cache language detection for an audio fingerprint."""
        self._set(LANGUAGE_TIER, generate_language_key(fingerprint), detection)

    def clear_all(self) -> int:
        """
        Empty every tier.

        Returns:
            Number of entries removed
        """
        cleared = sum(tier.clear() for tier in self._tiers.values())
        logger.info("All caches cleared", cleared=cleared)
        return cleared

    def clear_expired(self) -> int:
        """
        Sweep expired entries from every tier.

        A failing tier is logged and skipped.

        Returns:
            Number of entries removed
        """
        cleared = 0
        for name, tier in self._tiers.items():
            try:
                cleared += tier.purge_expired()
            except Exception as e:
                logger.error("Expiry sweep failed", tier=name, error=str(e))

        if cleared:
            logger.info("Cleared expired cache entries", cleared=cleared)
        return cleared

    def prune(self) -> int:
        """
        Drop the oldest quarter of any tier that is at least 90% full.

        Returns:
            Number of entries removed
        """
        pruned = 0
        for name, tier in self._tiers.items():
            try:
                pruned += tier.prune()
            except Exception as e:
                logger.error("Cache prune failed", tier=name, error=str(e))

        if pruned:
            logger.info("Pruned cache entries", pruned=pruned)
        return pruned

    def stats(self) -> CacheStats:
        """Snapshot per-tier statistics."""
        return CacheStats(
            tiers={name: tier.stats() for name, tier in self._tiers.items()}
        )

    def tier(self, name: str) -> LRUCache:
        """
        Get a tier by name.

        Raises:
            KeyError: If the tier does not exist
        """
        return self._tiers[name]

    def _get(self, tier_name: str, key: str) -> Optional[Any]:
        value = self.tier(tier_name).get(key)
        if value is None:
            log_cache_miss(tier_name, key)
        else:
            log_cache_hit(tier_name, key)
        return value

    def _set(self, tier_name: str, key: str, value: Any) -> None:
        tier = self.tier(tier_name)
        tier.set(key, value)
        logger.debug(
            "Cache stored", tier=tier_name, size=len(tier), capacity=tier.capacity
        )
