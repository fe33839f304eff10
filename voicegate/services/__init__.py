"""
Request orchestration services.
"""

from voicegate.services.chat_service import ChatService
from voicegate.services.voice_service import VoiceService

__all__ = ["ChatService", "VoiceService"]
