"""
Health check endpoint.

Sandi Metz Principles:
- Single Responsibility: Health check logic only
- Small functions: Each check isolated
- Clear naming: Descriptive endpoint names
"""

import time
from typing import Any, Dict, Literal, Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from voicegate import __version__
from voicegate.api.deps import get_app_state
from voicegate.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)

Status = Literal["healthy", "unhealthy", "degraded"]


class ComponentHealth(BaseModel):
    """Health status of a component."""

    status: Status = Field(..., description="Component status")
    latency_ms: Optional[float] = Field(None, description="Check latency in ms")
    message: Optional[str] = Field(None, description="Status message")


class HealthResponse(BaseModel):
    """Health check response."""

    status: Status = Field(..., description="Overall status")
    environment: str = Field(..., description="Environment name")
    version: str = Field(..., description="Application version")
    components: Dict[str, ComponentHealth] = Field(default_factory=dict)
    cache: Dict[str, Any] = Field(default_factory=dict, description="Cache stats")
    active_sessions: int = Field(0, description="Live sessions")
    uptime_seconds: float = Field(..., description="Uptime in seconds")


async def check_component(name: str, check) -> ComponentHealth:
    """
    Run one async health check.

    Args:
        name: Component name for logs
        check: Async callable returning bool

    Returns:
        Component health
    """
    start = time.perf_counter()
    try:
        healthy = await check()
    except Exception as e:
        logger.error("Health check failed", component=name, error=str(e))
        return ComponentHealth(status="unhealthy", message=str(e))

    latency = round((time.perf_counter() - start) * 1000, 2)
    if healthy:
        return ComponentHealth(status="healthy", latency_ms=latency)
    return ComponentHealth(status="degraded", latency_ms=latency)


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """
    Service health with component status.

    Returns:
        Health status response
    """
    state = get_app_state(request)
    components = {
        "speech": await check_component("speech", state.speech.health_check),
        "agent": await check_component("agent", state.agent.health_check),
    }

    statuses = [c.status for c in components.values()]
    if all(s == "healthy" for s in statuses):
        overall: Status = "healthy"
    elif any(s == "unhealthy" for s in statuses):
        overall = "unhealthy"
    else:
        overall = "degraded"

    return HealthResponse(
        status=overall,
        environment=state.settings.app_env,
        version=__version__,
        components=components,
        cache=state.cache.stats().to_dict(),
        active_sessions=await state.sessions.active_count(),
        uptime_seconds=round(time.time() - state.started_at, 1),
    )
