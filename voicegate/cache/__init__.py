"""
Cache module.

In-memory cache tiers for agent responses, transcripts and language
detections.
"""

from voicegate.cache.cache_service import CacheService
from voicegate.cache.lru_cache import EvictionPolicy, LRUCache

__all__ = ["CacheService", "EvictionPolicy", "LRUCache"]
