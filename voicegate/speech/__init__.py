"""
Speech provider module.

Speech-to-text with language detection and text-to-speech.
"""

from voicegate.speech.base import SpeechProvider, SynthesisProvider, TranscriptionProvider
from voicegate.speech.openai_speech import OpenAISpeechService

__all__ = [
    "OpenAISpeechService",
    "SpeechProvider",
    "SynthesisProvider",
    "TranscriptionProvider",
]
