"""
API Routes module.

Contains all API endpoint routers.
"""

from voicegate.api.routes import cache, chat, health, metrics, sessions, voice

__all__ = ["cache", "chat", "health", "metrics", "sessions", "voice"]
