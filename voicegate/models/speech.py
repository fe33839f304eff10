"""
Speech provider result models.

Sandi Metz Principles:
- Small classes focused on data validation
- Clear property names
- Single responsibility per model
"""

from typing import Literal

from pydantic import BaseModel, Field

LanguageTag = Literal["en-US", "ne-NP"]
VoiceGender = Literal["female", "male"]

SUPPORTED_LANGUAGES: tuple[str, ...] = ("en-US", "ne-NP")
DEFAULT_LANGUAGE = "en-US"


class TranscriptResult(BaseModel):
    """Speech-to-text outcome."""

    transcript: str = Field(..., description="Recognized text")
    language: LanguageTag = Field(DEFAULT_LANGUAGE, description="Detected language")
    confidence: float = Field(0.0, ge=0.0, le=1.0, description="Detection confidence")

    @property
    def is_empty(self) -> bool:
        """Check if no speech was recognized."""
        return not self.transcript.strip()


class LanguageDetection(BaseModel):
    """Language detection outcome."""

    language: LanguageTag = Field(DEFAULT_LANGUAGE, description="Detected language")
    confidence: float = Field(0.5, ge=0.0, le=1.0, description="Confidence")


class SynthesisResult(BaseModel):
    """Text-to-speech outcome."""

    audio: bytes = Field(..., description="Synthesized audio (WAV)")
    language: LanguageTag = Field(DEFAULT_LANGUAGE, description="Spoken language")
    voice: str = Field(..., description="Voice used")


class AgentReply(BaseModel):
    """Conversation agent reply."""

    text: str = Field(..., description="Assistant reply")
    thread_id: str = Field(..., description="Conversation thread")
