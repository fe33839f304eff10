"""
Cache administration endpoints.

Sandi Metz Principles:
- Single Responsibility: Cache and pool statistics and maintenance
- Small functions: One operation per endpoint
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Request

from voicegate.api.deps import get_app_state, get_cache_service
from voicegate.cache.cache_service import CacheService
from voicegate.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.post("/cache/clear")
async def clear_cache(
    cache: CacheService = Depends(get_cache_service),  # noqa: B008
) -> Dict[str, Any]:
    """Empty every cache tier."""
    cleared = cache.clear_all()
    logger.info("Cache cleared via API", cleared=cleared)
    return {"success": True, "message": "All caches cleared", "cleared": cleared}


@router.post("/cache/prune")
async def prune_cache(
    cache: CacheService = Depends(get_cache_service),  # noqa: B008
) -> Dict[str, Any]:
    """Prune tiers that are nearly full."""
    return {"success": True, "pruned": cache.prune()}


@router.get("/cache/stats")
async def cache_stats(request: Request) -> Dict[str, Any]:
    """Get cache tier and speech pool statistics."""
    state = get_app_state(request)
    return {
        "cache": state.cache.stats().to_dict(),
        "speechPool": state.pool.stats().to_dict(),
    }
