"""
OpenAI speech provider implementation.

Sandi Metz Principles:
- Single Responsibility: Speech API interaction
- Small methods: Provider call, parsing and error wrapping kept apart
- Dependency Injection: Connection pool and settings injected
"""

import asyncio
import time
from typing import Dict, Optional

from openai import OpenAIError

from voicegate.exceptions import PoolClosedError, SynthesisError, TranscriptionError
from voicegate.models.speech import DEFAULT_LANGUAGE, SynthesisResult, TranscriptResult
from voicegate.pool.connection_pool import ConnectionPool
from voicegate.pool.speech_handle import SpeechHandle
from voicegate.speech.base import SpeechProvider
from voicegate.speech.languages import confidence_from_logprobs, resolve_language
from voicegate.utils.logger import get_logger, log_provider_call

logger = get_logger(__name__)

DEFAULT_GENDER = "female"


class OpenAISpeechService(SpeechProvider):
    """
    Speech-to-text and text-to-speech over pooled OpenAI clients.

    Every provider call borrows one handle from the pool for its duration
    and runs on a worker thread.
    """

    def __init__(
        self,
        pool: ConnectionPool[SpeechHandle],
        transcription_model: str = "whisper-1",
        tts_model: str = "tts-1",
        voice_map: Optional[Dict[str, Dict[str, str]]] = None,
        min_audio_bytes: int = 1000,
    ):
        """
        Initialize speech service.

        Args:
            pool: Pool of speech handles
            transcription_model: Speech-to-text model
            tts_model: Text-to-speech model
            voice_map: Voices keyed by language then gender
            min_audio_bytes: Smallest audio accepted for transcription
        """
        self._pool = pool
        self._transcription_model = transcription_model
        self._tts_model = tts_model
        self._voice_map = voice_map or {
            "en-US": {"female": "nova", "male": "onyx"},
            "ne-NP": {"female": "shimmer", "male": "echo"},
        }
        self._min_audio_bytes = min_audio_bytes

    def get_name(self) -> str:
        """
        Get provider name.

        Returns:
            Provider name
        """
        return "openai"

    async def health_check(self) -> bool:
        """Check that the handle pool can serve requests."""
        return self._pool.health_check()

    async def transcribe(self, audio: bytes) -> TranscriptResult:
        """
        Transcribe audio with automatic English/Nepali detection.

        Args:
            audio: Raw audio bytes

        Returns:
            Transcript result (empty transcript when no speech was found)

        Raises:
            TranscriptionError: If audio is too short or the call fails
        """
        if len(audio) < self._min_audio_bytes:
            raise TranscriptionError("Audio too short or empty")

        try:
            return await asyncio.to_thread(self._transcribe_sync, audio)
        except (OpenAIError, PoolClosedError) as e:
            logger.error("Transcription failed", error=str(e))
            raise TranscriptionError(
                self._build_error_message(e, "Speech recognition failed")
            ) from e

    async def synthesize(
        self, text: str, language: str = DEFAULT_LANGUAGE, gender: str = DEFAULT_GENDER
    ) -> SynthesisResult:
        """
        Synthesize text to WAV audio.

        Args:
            text: Text to speak
            language: Language tag (en-US or ne-NP)
            gender: Voice gender (female or male)

        Returns:
            Synthesis result

        Raises:
            SynthesisError: If text is empty or the call fails
        """
        if not text.strip():
            raise SynthesisError("Nothing to synthesize")

        voice = self.select_voice(language, gender)
        try:
            audio = await asyncio.to_thread(self._synthesize_sync, text, voice)
        except (OpenAIError, PoolClosedError) as e:
            logger.error("Speech synthesis failed", error=str(e), voice=voice)
            raise SynthesisError(
                self._build_error_message(e, "Speech synthesis failed")
            ) from e

        if not audio:
            raise SynthesisError("Speech synthesis returned no audio")

        tag = language if language in self._voice_map else DEFAULT_LANGUAGE
        return SynthesisResult(audio=audio, language=tag, voice=voice)

    def select_voice(self, language: str, gender: str) -> str:
        """
        Pick a voice, falling back to English and to the female voice.

        Args:
            language: Language tag
            gender: Voice gender

        Returns:
            Voice name
        """
        voices = self._voice_map.get(language) or self._voice_map[DEFAULT_LANGUAGE]
        return voices.get(gender) or voices[DEFAULT_GENDER]

    def _transcribe_sync(self, audio: bytes) -> TranscriptResult:
        start = time.perf_counter()
        with self._pool.slot() as slot:
            response = slot.handle.client.audio.transcriptions.create(
                model=self._transcription_model,
                file=("audio.wav", audio),
                response_format="verbose_json",
            )

        result = self._parse_transcription(response)
        log_provider_call(
            provider=self.get_name(),
            operation="transcribe",
            latency_ms=(time.perf_counter() - start) * 1000,
            language=result.language,
            audio_bytes=len(audio),
        )
        return result

    def _synthesize_sync(self, text: str, voice: str) -> bytes:
        start = time.perf_counter()
        with self._pool.slot() as slot:
            response = slot.handle.client.audio.speech.create(
                model=self._tts_model,
                voice=voice,
                input=text,
                response_format="wav",
            )
            audio = response.content

        log_provider_call(
            provider=self.get_name(),
            operation="synthesize",
            latency_ms=(time.perf_counter() - start) * 1000,
            voice=voice,
            audio_bytes=len(audio),
        )
        return audio

    def _parse_transcription(self, response: object) -> TranscriptResult:
        """
        Build a transcript result from a verbose transcription response.

        Args:
            response: Provider response with text, language and segments

        Returns:
            Transcript result
        """
        text = (getattr(response, "text", "") or "").strip()
        segments = getattr(response, "segments", None) or []
        confidence = confidence_from_logprobs(
            segment.avg_logprob for segment in segments
        )
        language, confidence = resolve_language(
            getattr(response, "language", None), confidence
        )
        return TranscriptResult(
            transcript=text, language=language, confidence=confidence
        )
