"""
OpenAI conversation agent.

Sandi Metz Principles:
- Single Responsibility: Chat completion calls and thread history
- Small methods: Message building, API call and history kept apart
- Dependency Injection: Client and settings injected
"""

import asyncio
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from openai import AsyncOpenAI, OpenAIError

from voicegate.agent.base import ConversationAgent
from voicegate.cache.lru_cache import EvictionPolicy, LRUCache
from voicegate.exceptions import AgentError
from voicegate.models.speech import AgentReply
from voicegate.utils.logger import get_logger, log_provider_call

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful bilingual voice assistant. "
    "Answer in the same language the user writes in, English or Nepali. "
    "Keep answers short and easy to read aloud."
)

LANGUAGE_HINTS = {
    "ne-NP": "Reply in Nepali (Devanagari script).",
    "en-US": "Reply in English.",
}

FALLBACK_REPLY = "I'm sorry, I couldn't come up with an answer. Please try again."


@dataclass
class _Thread:
    """Conversation history for one thread."""

    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    history: List[Dict[str, str]] = field(default_factory=list)


class OpenAIConversationAgent(ConversationAgent):
    """
    Conversation agent backed by OpenAI chat completions.

    Each thread keeps its last ``history_limit`` messages. Turns on the
    same thread are serialized so history stays in order.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        max_tokens: int = 800,
        temperature: float = 0.4,
        history_limit: int = 20,
        max_threads: int = 10000,
        thread_ttl_seconds: float = 86400.0,
        timeout_seconds: float = 20.0,
        base_url: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        """
        Initialize agent.

        Args:
            api_key: OpenAI API key
            model: Chat model
            max_tokens: Reply token limit
            temperature: Sampling temperature
            history_limit: Messages kept per thread
            max_threads: Threads kept before the least recent is dropped
            thread_ttl_seconds: Idle time before a thread is forgotten
            timeout_seconds: Per-request timeout
            base_url: Optional API base URL override
            client: Optional preconfigured client
        """
        self._api_key = api_key
        self._base_url = base_url or None
        self._timeout = timeout_seconds
        self._client = client
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._history_limit = history_limit
        self._threads: LRUCache[str, _Thread] = LRUCache(
            name="agent_threads",
            capacity=max_threads,
            ttl_seconds=thread_ttl_seconds,
            eviction_policy=EvictionPolicy.RECENCY,
        )

    async def create_thread(self) -> str:
        """
        Start a new conversation thread.

        Returns:
            Thread id
        """
        thread_id = f"thread_{uuid.uuid4().hex}"
        self._threads.set(thread_id, _Thread())
        logger.debug("Agent thread created", thread_id=thread_id)
        return thread_id

    async def converse(
        self, thread_id: str, message: str, language: Optional[str] = None
    ) -> AgentReply:
        """
        Send a user message on a thread.

        Unknown or expired threads start with empty history.

        Args:
            thread_id: Conversation thread
            message: User message
            language: Optional language hint (en-US or ne-NP)

        Returns:
            Agent reply

        Raises:
            AgentError: If the API call fails
        """
        thread = self._get_thread(thread_id)

        async with thread.lock:
            messages = self._build_messages(thread.history, message, language)
            try:
                text = await self._make_api_call(messages)
            except OpenAIError as e:
                logger.error("Agent call failed", error=str(e), thread_id=thread_id)
                raise AgentError(f"Agent call failed: {type(e).__name__} - {e}") from e

            if not text:
                logger.warning("Agent returned empty reply", thread_id=thread_id)
                text = FALLBACK_REPLY

            self._append_history(thread, message, text)
            self._threads.set(thread_id, thread)

        return AgentReply(text=text, thread_id=thread_id)

    async def health_check(self) -> bool:
        """Check that credentials are configured."""
        return bool(self._api_key) or self._client is not None

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.close()
            self._client = None

    def thread_count(self) -> int:
        """Number of live threads."""
        return len(self._threads)

    def history(self, thread_id: str) -> List[Dict[str, str]]:
        """Copy of a thread's history."""
        thread = self._threads.get(thread_id)
        return list(thread.history) if thread else []

    def _get_thread(self, thread_id: str) -> _Thread:
        thread = self._threads.get(thread_id)
        if thread is None:
            thread = _Thread()
            self._threads.set(thread_id, thread)
        return thread

    def _build_messages(
        self,
        history: List[Dict[str, str]],
        message: str,
        language: Optional[str],
    ) -> List[Dict[str, str]]:
        """
        Build the chat message list.

        Args:
            history: Prior turns
            message: New user message
            language: Optional language hint

        Returns:
            Messages for the completion call
        """
        system = SYSTEM_PROMPT
        if language in LANGUAGE_HINTS:
            system = f"{system} {LANGUAGE_HINTS[language]}"

        return [
            {"role": "system", "content": system},
            *history,
            {"role": "user", "content": message},
        ]

    async def _make_api_call(self, messages: List[Dict[str, str]]) -> str:
        start = time.perf_counter()
        response = await self._get_client().chat.completions.create(
            model=self._model,
            messages=messages,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )

        log_provider_call(
            provider="openai",
            operation="converse",
            latency_ms=(time.perf_counter() - start) * 1000,
            model=response.model,
            tokens=response.usage.total_tokens if response.usage else 0,
        )

        if not response.choices:
            return ""
        return (response.choices[0].message.content or "").strip()

    def _append_history(self, thread: _Thread, message: str, reply: str) -> None:
        thread.history.append({"role": "user", "content": message})
        thread.history.append({"role": "assistant", "content": reply})
        if len(thread.history) > self._history_limit:
            del thread.history[: len(thread.history) - self._history_limit]

    def _get_client(self) -> AsyncOpenAI:
        """
        Get or create OpenAI client.

        Returns:
            OpenAI async client
        """
        if not self._client:
            self._client = AsyncOpenAI(
                api_key=self._api_key,
                base_url=self._base_url,
                timeout=self._timeout,
            )
        return self._client
