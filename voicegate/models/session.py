"""
Conversation session models.

Sandi Metz Principles:
- Single Responsibility: Session data structure
- Clear naming: Descriptive fields
"""

import time
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class SessionPreferences(BaseModel):
    """Per-session user preferences."""

    language: Literal["auto", "en-US", "ne-NP"] = Field(default="auto")
    voice_gender: Literal["female", "male"] = Field(default="female")


class SessionMetrics(BaseModel):
    """Per-session usage counters."""

    message_count: int = Field(default=0, ge=0)
    voice_count: int = Field(default=0, ge=0)


class ConversationTurn(BaseModel):
    """One exchanged message pair."""

    message: str
    response: str
    language: Optional[str] = None
    timestamp: float = Field(default_factory=time.time)


class Session(BaseModel):
    """A user conversation session bound to one agent thread."""

    id: str = Field(..., description="Session id")
    thread_id: str = Field(..., description="Agent thread id")
    created_at: float = Field(default_factory=time.time)
    last_activity: float = Field(default_factory=time.time)
    messages: List[ConversationTurn] = Field(default_factory=list)
    preferences: SessionPreferences = Field(default_factory=SessionPreferences)
    metrics: SessionMetrics = Field(default_factory=SessionMetrics)

    def record_turn(
        self,
        message: str,
        response: str,
        language: Optional[str] = None,
        history_limit: int = 50,
    ) -> None:
        """Append a turn, keeping at most ``history_limit`` turns."""
        self.messages.append(
            ConversationTurn(message=message, response=response, language=language)
        )
        if history_limit >= 0 and len(self.messages) > history_limit:
            self.messages = self.messages[len(self.messages) - history_limit :]
        self.metrics.message_count += 1
        if language:
            self.metrics.voice_count += 1
        self.touch()

    def touch(self) -> None:
        """Refresh last activity time."""
        self.last_activity = time.time()
