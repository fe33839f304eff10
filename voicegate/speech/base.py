"""
Speech provider base classes and interface.

Sandi Metz Principles:
- Single Responsibility: Provider abstraction
- Interface Segregation: Separate transcription and synthesis interfaces
- Dependency Inversion: Depend on abstraction, not concrete classes
"""

from abc import ABC, abstractmethod

from voicegate.models.speech import SynthesisResult, TranscriptResult


class TranscriptionProvider(ABC):
    """
    Abstract base class for speech-to-text providers.
    """

    @abstractmethod
    async def transcribe(self, audio: bytes) -> TranscriptResult:
        """
        Transcribe audio and detect its language.

        Args:
            audio: Raw audio bytes

        Returns:
            Transcript result (empty transcript when no speech was found)

        Raises:
            TranscriptionError: If transcription fails
        """
        pass


class SynthesisProvider(ABC):
    """
    Abstract base class for text-to-speech providers.
    """

    @abstractmethod
    async def synthesize(
        self, text: str, language: str = "en-US", gender: str = "female"
    ) -> SynthesisResult:
        """
        Synthesize speech for text.

        Args:
            text: Text to speak
            language: Language tag (en-US or ne-NP)
            gender: Voice gender (female or male)

        Returns:
            Synthesis result

        Raises:
            SynthesisError: If synthesis fails
        """
        pass


class SpeechProvider(TranscriptionProvider, SynthesisProvider):
    """Provider implementing both speech directions."""

    @abstractmethod
    def get_name(self) -> str:
        """
        Get provider name.

        Returns:
            Provider name
        """
        pass

    async def health_check(self) -> bool:
        """Check provider readiness."""
        return True

    def _build_error_message(self, error: Exception, context: str) -> str:
        """
        Build error message with context.

        Args:
            error: The exception that occurred
            context: Context description

        Returns:
            Formatted error message
        """
        return f"{context}: {type(error).__name__} - {str(error)}"
