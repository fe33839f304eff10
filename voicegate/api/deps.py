"""
API dependency injection.

Sandi Metz Principles:
- Single Responsibility: Dependency lookup and injection
- Dependency Inversion: Routes receive services, never build them
"""

from fastapi import Request

from voicegate.cache.cache_service import CacheService
from voicegate.services.chat_service import ChatService
from voicegate.services.voice_service import VoiceService
from voicegate.session.base import SessionStore


def get_app_state(request: Request):
    """
    Get the application state built at startup.

    Args:
        request: FastAPI request

    Returns:
        Application state
    """
    return request.app.state.app_state


def get_chat_service(request: Request) -> ChatService:
    """Get chat service."""
    return get_app_state(request).chat_service


def get_voice_service(request: Request) -> VoiceService:
    """Get voice service."""
    return get_app_state(request).voice_service


def get_cache_service(request: Request) -> CacheService:
    """Get cache service."""
    return get_app_state(request).cache


def get_session_store(request: Request) -> SessionStore:
    """Get session store."""
    return get_app_state(request).sessions
