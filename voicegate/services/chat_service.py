"""
Chat processing service.

Orchestrates session lookup, response cache and agent calls.

Sandi Metz Principles:
- Single Responsibility: Text turn orchestration
- Small methods: Each step isolated
- Dependency Injection: Cache, agent, sessions and metrics injected
"""

import time
from typing import Optional, Tuple

from voicegate.agent.base import ConversationAgent
from voicegate.cache.cache_service import CacheService
from voicegate.models.chat import ChatResponse
from voicegate.models.session import Session
from voicegate.monitoring.request_metrics import RequestMetrics
from voicegate.session.base import SessionStore
from voicegate.utils.logger import get_logger

logger = get_logger(__name__)


class ChatService:
    """
    Text chat service.

    Order: Session -> Response cache -> Agent
    """

    def __init__(
        self,
        cache: CacheService,
        agent: ConversationAgent,
        sessions: SessionStore,
        metrics: Optional[RequestMetrics] = None,
    ):
        """
        Initialize service.

        Args:
            cache: Tiered cache service
            agent: Conversation agent
            sessions: Session store
            metrics: Optional request metrics
        """
        self._cache = cache
        self._agent = agent
        self._sessions = sessions
        self._metrics = metrics or RequestMetrics()

    async def process(self, message: str, session_id: str) -> ChatResponse:
        """
        Answer a text message.

        Args:
            message: User message
            session_id: Session id

        Returns:
            Chat response

        Raises:
            AgentError: If the agent fails (nothing is cached)
        """
        start = time.perf_counter()
        try:
            session = await self._sessions.get_or_create(session_id)
            reply, cached = await self.respond(message, session)
            await self._sessions.update(session.id, message, reply)
        except Exception:
            self._metrics.record_error()
            raise

        self._metrics.record_request("chat", (time.perf_counter() - start) * 1000)
        return ChatResponse(response=reply, session_id=session.id, cached=cached)

    async def respond(
        self, message: str, session: Session, language: Optional[str] = None
    ) -> Tuple[str, bool]:
        """
        Get a reply from the response cache or the agent.

        Only successful agent replies are cached.

        Args:
            message: User message
            session: Conversation session
            language: Optional language hint

        Returns:
            (reply text, served from cache)
        """
        cached = self._cache.get_response(message, session.id)
        self._metrics.record_cache(hit=cached is not None)
        if cached is not None:
            return cached, True

        reply = await self._agent.converse(session.thread_id, message, language)
        self._cache.set_response(message, session.id, reply.text)
        return reply.text, False
