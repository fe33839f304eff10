"""
Pytest configuration and fixtures.

Provides common fixtures for testing.
"""

from typing import List, Optional

import pytest

from voicegate.agent.base import ConversationAgent
from voicegate.cache.cache_service import CacheService
from voicegate.config import AppConfig
from voicegate.exceptions import AgentError
from voicegate.models.speech import AgentReply, SynthesisResult, TranscriptResult
from voicegate.session.memory_store import InMemorySessionStore
from voicegate.speech.base import SpeechProvider


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeAgent(ConversationAgent):
    """Agent returning scripted replies."""

    def __init__(self, reply: str = "Hello there", fail: bool = False):
        self.reply = reply
        self.fail = fail
        self.calls: List[tuple] = []
        self.threads = 0

    async def create_thread(self) -> str:
        self.threads += 1
        return f"thread-{self.threads}"

    async def converse(
        self, thread_id: str, message: str, language: Optional[str] = None
    ) -> AgentReply:
        self.calls.append((thread_id, message, language))
        if self.fail:
            raise AgentError("agent unavailable")
        return AgentReply(text=self.reply, thread_id=thread_id)


class FakeSpeech(SpeechProvider):
    """Speech provider returning scripted results."""

    def __init__(
        self,
        transcript: str = "namaste",
        language: str = "ne-NP",
        confidence: float = 0.9,
        synthesis_error: Optional[Exception] = None,
    ):
        self.result = TranscriptResult(
            transcript=transcript, language=language, confidence=confidence
        )
        self.synthesis_error = synthesis_error
        self.transcribe_calls = 0
        self.synthesize_calls: List[tuple] = []

    def get_name(self) -> str:
        return "fake"

    async def transcribe(self, audio: bytes) -> TranscriptResult:
        self.transcribe_calls += 1
        return self.result

    async def synthesize(
        self, text: str, language: str = "en-US", gender: str = "female"
    ) -> SynthesisResult:
        self.synthesize_calls.append((text, language, gender))
        if self.synthesis_error:
            raise self.synthesis_error
        return SynthesisResult(audio=b"RIFFwav", language=language, voice="nova")


@pytest.fixture
def test_config() -> AppConfig:
    """
    Create test configuration.

    Returns:
        Test configuration instance
    """
    return AppConfig(
        app_env="development",
        openai_api_key="test-key",
        rate_limit_enabled=False,
        session_backend="memory",
    )


@pytest.fixture
def clock() -> FakeClock:
    """Manually advanced clock."""
    return FakeClock()


@pytest.fixture
def cache_service(test_config, clock) -> CacheService:
    """Cache service on the fake clock."""
    return CacheService.from_config(test_config, clock=clock)


@pytest.fixture
def fake_agent() -> FakeAgent:
    """Scripted conversation agent."""
    return FakeAgent()


@pytest.fixture
def fake_speech() -> FakeSpeech:
    """Scripted speech provider."""
    return FakeSpeech()


@pytest.fixture
def session_store(fake_agent, clock) -> InMemorySessionStore:
    """In-memory session store bound to the fake agent."""
    return InMemorySessionStore(
        thread_factory=fake_agent.create_thread, ttl_seconds=3600, clock=clock
    )
