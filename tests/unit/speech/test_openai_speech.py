"""Test OpenAI speech service."""

import math
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from openai import OpenAIError

from voicegate.exceptions import SynthesisError, TranscriptionError
from voicegate.pool.connection_pool import ConnectionPool, PoolConfig
from voicegate.speech.openai_speech import OpenAISpeechService

AUDIO = b"\x00" * 2000


@pytest.fixture
def client():
    """Mocked synchronous OpenAI client."""
    client = MagicMock()
    client.audio.transcriptions.create.return_value = SimpleNamespace(
        text=" namaste ",
        language="nepali",
        segments=[SimpleNamespace(avg_logprob=-0.1), SimpleNamespace(avg_logprob=-0.3)],
    )
    client.audio.speech.create.return_value = SimpleNamespace(content=b"RIFFdata")
    return client


@pytest.fixture
def pool(client):
    """Pool whose handles share the mocked client."""
    return ConnectionPool(
        factory=lambda: SimpleNamespace(client=client),
        config=PoolConfig(pool_size=2),
    )


@pytest.fixture
def service(pool, test_config):
    """Speech service over the mocked pool."""
    return OpenAISpeechService(
        pool=pool,
        voice_map=test_config.voice_map,
        min_audio_bytes=1000,
    )


class TestTranscribe:
    """Test speech-to-text."""

    @pytest.mark.asyncio
    async def test_should_transcribe_and_normalize_language(self, service, client):
        """Test successful transcription."""
        result = await service.transcribe(AUDIO)

        assert result.transcript == "namaste"
        assert result.language == "ne-NP"
        assert result.confidence == pytest.approx(math.exp(-0.2))
        kwargs = client.audio.transcriptions.create.call_args.kwargs
        assert kwargs["response_format"] == "verbose_json"
        assert kwargs["file"] == ("audio.wav", AUDIO)

    @pytest.mark.asyncio
    async def test_should_release_slot_after_call(self, service, pool):
        """Test pool slot is returned."""
        await service.transcribe(AUDIO)
        stats = pool.stats()
        assert stats.in_use == 0
        assert stats.reused == 1

    @pytest.mark.asyncio
    async def test_should_fall_back_for_unsupported_language(self, service, client):
        """Test unsupported language falls back to English at 0.5."""
        client.audio.transcriptions.create.return_value = SimpleNamespace(
            text="bonjour", language="french", segments=[]
        )

        result = await service.transcribe(AUDIO)

        assert result.language == "en-US"
        assert result.confidence == 0.5

    @pytest.mark.asyncio
    async def test_should_return_empty_transcript_for_silence(self, service, client):
        """Test no-speech result."""
        client.audio.transcriptions.create.return_value = SimpleNamespace(
            text="", language="english", segments=None
        )

        result = await service.transcribe(AUDIO)

        assert result.is_empty

    @pytest.mark.asyncio
    async def test_should_reject_short_audio(self, service, client):
        """Test minimum audio size."""
        with pytest.raises(TranscriptionError, match="too short"):
            await service.transcribe(b"\x00" * 999)
        client.audio.transcriptions.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_should_wrap_sdk_errors(self, service, client, pool):
        """Test provider failure."""
        client.audio.transcriptions.create.side_effect = OpenAIError("down")

        with pytest.raises(TranscriptionError):
            await service.transcribe(AUDIO)
        assert pool.stats().in_use == 0


class TestSynthesize:
    """Test text-to-speech."""

    @pytest.mark.asyncio
    async def test_should_synthesize_with_mapped_voice(self, service, client):
        """Test voice selection by language and gender."""
        result = await service.synthesize("namaste", "ne-NP", "male")

        assert result.audio == b"RIFFdata"
        assert result.voice == "echo"
        kwargs = client.audio.speech.create.call_args.kwargs
        assert kwargs["voice"] == "echo"
        assert kwargs["response_format"] == "wav"

    def test_voice_fallbacks(self, service):
        """Test unknown language and gender fall back."""
        assert service.select_voice("fr-FR", "male") == "onyx"
        assert service.select_voice("ne-NP", "other") == "shimmer"

    @pytest.mark.asyncio
    async def test_should_wrap_sdk_errors(self, service, client):
        """Test provider failure."""
        client.audio.speech.create.side_effect = OpenAIError("down")
        with pytest.raises(SynthesisError):
            await service.synthesize("hello")

    @pytest.mark.asyncio
    async def test_should_reject_empty_text(self, service):
        """Test empty input."""
        with pytest.raises(SynthesisError):
            await service.synthesize("   ")


class TestHealth:
    """Test readiness."""

    @pytest.mark.asyncio
    async def test_should_follow_pool_health(self, service, pool):
        """Test health uses the pool."""
        assert await service.health_check() is False
        pool.initialize()
        assert await service.health_check() is True
