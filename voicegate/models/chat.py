"""
Chat and voice request/response models.

Sandi Metz Principles:
- Small classes with clear purpose
- Immutable response data
- Clear naming conventions

Field aliases keep the camelCase wire names the web widget sends.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from voicegate.models.speech import LanguageTag


class ChatRequest(BaseModel):
    """Incoming text chat request."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(
        ...,
        min_length=1,
        max_length=4000,
        description="User message",
        examples=["What does the new reform say about local elections?"],
    )
    session_id: str = Field(
        ..., alias="sessionId", min_length=1, max_length=200, description="Session id"
    )

    @field_validator("message", "session_id")
    @classmethod
    def strip_text(cls, v: str) -> str:
        """Reject whitespace-only values."""
        v = v.strip()
        if not v:
            raise ValueError("Value cannot be empty")
        return v


class ChatResponse(BaseModel):
    """Text chat response."""

    model_config = ConfigDict(populate_by_name=True)

    response: str = Field(..., description="Assistant reply")
    sources: List[str] = Field(default_factory=list, description="Cited sources")
    session_id: str = Field(..., alias="sessionId", description="Session id")
    cached: bool = Field(default=False, description="Served from response cache")


class VoiceResponse(BaseModel):
    """Voice chat response."""

    model_config = ConfigDict(populate_by_name=True)

    transcript: str = Field(..., description="Recognized user speech")
    response: str = Field(..., description="Assistant reply")
    sources: List[str] = Field(default_factory=list, description="Cited sources")
    detected_language: LanguageTag = Field(..., alias="detectedLanguage")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Language confidence")
    session_id: str = Field(..., alias="sessionId", description="Session id")
    processing_time_ms: float = Field(..., ge=0, alias="processingTime")
    audio_response: Optional[str] = Field(
        None, alias="audioResponse", description="Base64 WAV reply audio"
    )
    transcript_cached: bool = Field(default=False, alias="transcriptCached")
    response_cached: bool = Field(default=False, alias="responseCached")
