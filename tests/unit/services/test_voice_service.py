"""Test voice service."""

import base64

import pytest

from voicegate.exceptions import AgentError, SynthesisError, TranscriptionError
from voicegate.models.speech import TranscriptResult
from voicegate.monitoring.request_metrics import RequestMetrics
from voicegate.services.chat_service import ChatService
from voicegate.services.voice_service import VoiceService

AUDIO = b"RIFF" + bytes(range(256)) * 20


@pytest.fixture
def metrics():
    """Fresh request metrics."""
    return RequestMetrics()


@pytest.fixture
def service(cache_service, fake_speech, fake_agent, session_store, metrics):
    """Voice service over fakes."""
    chat = ChatService(cache_service, fake_agent, session_store, metrics)
    return VoiceService(cache_service, fake_speech, chat, session_store, metrics)


class TestProcess:
    """Test voice turns."""

    @pytest.mark.asyncio
    async def test_should_transcribe_answer_and_speak(
        self, service, fake_speech, fake_agent
    ):
        """Test full voice turn."""
        response = await service.process(AUDIO, "s1")

        assert response.transcript == "namaste"
        assert response.response == "Hello there"
        assert response.detected_language == "ne-NP"
        assert response.confidence == 0.9
        assert base64.b64decode(response.audio_response) == b"RIFFwav"
        assert fake_agent.calls == [("thread-1", "namaste", "ne-NP")]
        assert fake_speech.synthesize_calls == [("Hello there", "ne-NP", "female")]

    @pytest.mark.asyncio
    async def test_should_generate_session_id(self, service):
        """Test missing session id."""
        response = await service.process(AUDIO)
        assert response.session_id.startswith("session_")

    @pytest.mark.asyncio
    async def test_repeat_audio_uses_cached_transcript(self, service, fake_speech):
        """Test transcript tier hit skips transcription."""
        await service.process(AUDIO, "s1")
        response = await service.process(AUDIO, "s1")

        assert fake_speech.transcribe_calls == 1
        assert response.transcript_cached is True
        assert response.response_cached is True

    @pytest.mark.asyncio
    async def test_should_skip_synthesis_when_not_requested(self, service, fake_speech):
        """Test returnAudio false."""
        response = await service.process(AUDIO, "s1", return_audio=False)

        assert response.audio_response is None
        assert fake_speech.synthesize_calls == []

    @pytest.mark.asyncio
    async def test_synthesis_failure_keeps_text_reply(self, service, fake_speech):
        """Test degraded reply without audio."""
        fake_speech.synthesis_error = SynthesisError("tts down")

        response = await service.process(AUDIO, "s1")

        assert response.response == "Hello there"
        assert response.audio_response is None

    @pytest.mark.asyncio
    async def test_empty_transcript_raises_and_is_not_cached(
        self, service, fake_speech, cache_service, metrics
    ):
        """Test no speech detected."""
        fake_speech.result = TranscriptResult(transcript="  ", language="en-US")

        with pytest.raises(TranscriptionError):
            await service.process(AUDIO, "s1")

        fingerprint = cache_service.audio_fingerprint(AUDIO)
        assert cache_service.get_transcript(fingerprint) is None
        assert metrics.snapshot()["errors"] == 1

    @pytest.mark.asyncio
    async def test_agent_failure_propagates(self, service, fake_agent, session_store):
        """Test agent error leaves the session untouched."""
        fake_agent.fail = True

        with pytest.raises(AgentError):
            await service.process(AUDIO, "s1")

        session = await session_store.get("s1")
        assert session.messages == []

    @pytest.mark.asyncio
    async def test_should_record_language_and_voice_count(
        self, service, metrics, session_store
    ):
        """Test metrics and session counters."""
        await service.process(AUDIO, "s1")

        assert metrics.snapshot()["languages"] == {"ne-NP": 1}
        assert metrics.snapshot()["voiceRequests"] == 1
        session = await session_store.get("s1")
        assert session.metrics.voice_count == 1


class TestDetectLanguage:
    """Test language detection."""

    @pytest.mark.asyncio
    async def test_should_transcribe_once_then_cache(self, service, fake_speech):
        """Test language tier."""
        first = await service.detect_language(AUDIO)
        second = await service.detect_language(AUDIO)

        assert first.language == second.language == "ne-NP"
        assert fake_speech.transcribe_calls == 1

    @pytest.mark.asyncio
    async def test_should_reuse_voice_turn_transcription(self, service, fake_speech):
        """Test detection after a voice turn."""
        await service.process(AUDIO, "s1", return_audio=False)
        detection = await service.detect_language(AUDIO)

        assert detection.confidence == 0.9
        assert fake_speech.transcribe_calls == 1

    @pytest.mark.asyncio
    async def test_should_use_transcript_tier(self, service, fake_speech, cache_service):
        """Test transcript tier consulted before transcribing."""
        fingerprint = cache_service.audio_fingerprint(AUDIO)
        cache_service.set_transcript(
            fingerprint,
            TranscriptResult(transcript="hello", language="en-US", confidence=0.7),
        )

        detection = await service.detect_language(AUDIO)

        assert detection.language == "en-US"
        assert fake_speech.transcribe_calls == 0
        assert cache_service.get_language(fingerprint).confidence == 0.7
