"""
Voice processing service.

Orchestrates transcription, language detection, the chat turn and
optional speech synthesis.

Sandi Metz Principles:
- Single Responsibility: Voice turn orchestration
- Composition: Reuses the chat service for the reply step
- Dependency Injection: Cache, speech provider and sessions injected
"""

import base64
import time
from typing import Optional, Tuple

from voicegate.cache.cache_service import CacheService
from voicegate.exceptions import SynthesisError, TranscriptionError
from voicegate.models.chat import VoiceResponse
from voicegate.models.session import Session
from voicegate.models.speech import LanguageDetection, TranscriptResult
from voicegate.monitoring.request_metrics import RequestMetrics
from voicegate.services.chat_service import ChatService
from voicegate.session.base import SessionStore
from voicegate.speech.base import SpeechProvider
from voicegate.utils.logger import get_logger

logger = get_logger(__name__)


class VoiceService:
    """
    Voice chat service.

    Order: Transcript cache -> Transcription -> Chat turn -> Synthesis
    """

    def __init__(
        self,
        cache: CacheService,
        speech: SpeechProvider,
        chat: ChatService,
        sessions: SessionStore,
        metrics: Optional[RequestMetrics] = None,
    ):
        """
        Initialize service.

        Args:
            cache: Tiered cache service
            speech: Speech provider
            chat: Chat service used for the reply
            sessions: Session store
            metrics: Optional request metrics
        """
        self._cache = cache
        self._speech = speech
        self._chat = chat
        self._sessions = sessions
        self._metrics = metrics or RequestMetrics()

    async def process(
        self,
        audio: bytes,
        session_id: Optional[str] = None,
        return_audio: bool = True,
    ) -> VoiceResponse:
        """
        Answer a spoken message.

        Args:
            audio: Raw audio bytes
            session_id: Session id, generated when None
            return_audio: Synthesize the reply as base64 WAV

        Returns:
            Voice response

        Raises:
            TranscriptionError: If no usable speech was recognized
            AgentError: If the agent fails
        """
        start = time.perf_counter()
        try:
            result, transcript_cached = await self._transcribe(audio)
            if result.is_empty:
                raise TranscriptionError("No speech detected")

            session = await self._sessions.get_or_create(session_id)
            reply, response_cached = await self._chat.respond(
                result.transcript, session, result.language
            )
            session = await self._sessions.update(
                session.id, result.transcript, reply, result.language
            )
        except Exception:
            self._metrics.record_error()
            raise

        self._metrics.record_language(result.language)
        audio_response = None
        if return_audio:
            audio_response = await self._synthesize(reply, result.language, session)

        elapsed_ms = (time.perf_counter() - start) * 1000
        self._metrics.record_request("voice", elapsed_ms)

        return VoiceResponse(
            transcript=result.transcript,
            response=reply,
            detected_language=result.language,
            confidence=result.confidence,
            session_id=session.id,
            processing_time_ms=round(elapsed_ms, 2),
            audio_response=audio_response,
            transcript_cached=transcript_cached,
            response_cached=response_cached,
        )

    async def detect_language(self, audio: bytes) -> LanguageDetection:
        """
        Detect the spoken language.

        Consults the language tier, then the transcript tier, then
        transcribes.

        Args:
            audio: Raw audio bytes

        Returns:
            Language detection
        """
        fingerprint = self._cache.audio_fingerprint(audio)
        detection = self._cache.get_language(fingerprint)
        if detection is not None:
            return detection

        result, _ = await self._transcribe(audio, fingerprint)
        detection = LanguageDetection(
            language=result.language, confidence=result.confidence
        )
        if not result.is_empty:
            self._cache.set_language(fingerprint, detection)
        return detection

    async def _transcribe(
        self, audio: bytes, fingerprint: Optional[str] = None
    ) -> Tuple[TranscriptResult, bool]:
        """
        Get a transcript from the transcript tier or the provider.

        Empty transcripts are not cached.

        Returns:
            (transcript result, served from cache)
        """
        fingerprint = fingerprint or self._cache.audio_fingerprint(audio)
        cached = self._cache.get_transcript(fingerprint)
        if cached is not None:
            return cached, True

        result = await self._speech.transcribe(audio)
        if not result.is_empty:
            self._cache.set_transcript(fingerprint, result)
            self._cache.set_language(
                fingerprint,
                LanguageDetection(language=result.language, confidence=result.confidence),
            )
        return result, False

    async def _synthesize(
        self, text: str, language: str, session: Session
    ) -> Optional[str]:
        """
        Synthesize the reply; failures leave the text reply intact.

        Returns:
            Base64 WAV audio, or None if synthesis failed
        """
        try:
            result = await self._speech.synthesize(
                text, language, session.preferences.voice_gender
            )
        except SynthesisError as e:
            logger.warning("Reply synthesis failed", error=str(e), session_id=session.id)
            return None
        return base64.b64encode(result.audio).decode("ascii")
