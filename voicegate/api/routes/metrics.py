"""
Metrics endpoint for monitoring.

Sandi Metz Principles:
- Single Responsibility: Metrics exposure
- Observable: All key metrics tracked
"""

from typing import Any, Dict

from fastapi import APIRouter, Request

from voicegate import __version__
from voicegate.api.deps import get_app_state
from voicegate.scheduling.memory_monitor import read_rss_mb
from voicegate.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/metrics")
async def get_metrics(request: Request) -> Dict[str, Any]:
    """
    Get application metrics.

    Returns:
        Dictionary of metrics
    """
    state = get_app_state(request)
    settings = state.settings

    memory: Dict[str, Any] = {"thresholdMb": settings.memory_threshold_mb}
    try:
        memory["rssMb"] = round(read_rss_mb(), 2)
    except (OSError, ValueError) as e:
        logger.debug("Could not read memory usage", error=str(e))
    if state.memory_monitor is not None:
        memory["peakMb"] = round(state.memory_monitor.peak_mb, 2)
        memory["pressureEvents"] = state.memory_monitor.pressure_events

    return {
        "application": {
            "name": settings.app_name,
            "environment": settings.app_env,
            "version": __version__,
        },
        "requests": state.metrics.snapshot(),
        "cache": state.cache.stats().to_dict(),
        "speechPool": state.pool.stats().to_dict(),
        "sessions": {
            "active": await state.sessions.active_count(),
            "backend": settings.session_backend,
        },
        "memory": memory,
        "tasks": {
            task.name: {"runs": task.runs, "failures": task.failures}
            for task in state.tasks
        },
    }
