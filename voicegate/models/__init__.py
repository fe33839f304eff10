"""
Models package for VoiceGate.

Exports all model classes for easy imports throughout the application.
"""

# Cache models
from voicegate.models.cache_entry import CacheEntry

# Chat models
from voicegate.models.chat import ChatRequest, ChatResponse, VoiceResponse

# Session models
from voicegate.models.session import (
    ConversationTurn,
    Session,
    SessionMetrics,
    SessionPreferences,
)

# Speech models
from voicegate.models.speech import (
    AgentReply,
    LanguageDetection,
    SynthesisResult,
    TranscriptResult,
)

# Statistics models
from voicegate.models.statistics import CacheStats, CacheTierStats, PoolStats

__all__ = [
    "CacheEntry",
    "ChatRequest",
    "ChatResponse",
    "VoiceResponse",
    "ConversationTurn",
    "Session",
    "SessionMetrics",
    "SessionPreferences",
    "AgentReply",
    "LanguageDetection",
    "SynthesisResult",
    "TranscriptResult",
    "CacheStats",
    "CacheTierStats",
    "PoolStats",
]
