"""
Conversation agent interface.

Sandi Metz Principles:
- Single Responsibility: Agent abstraction
- Dependency Inversion: Services depend on this, not on a vendor SDK
"""

from abc import ABC, abstractmethod
from typing import Optional

from voicegate.models.speech import AgentReply


class ConversationAgent(ABC):
    """
    Abstract base class for stateful conversation agents.

    Conversation state lives with the agent and is addressed by thread id.
    """

    @abstractmethod
    async def create_thread(self) -> str:
        """
        Start a new conversation thread.

        Returns:
            Thread id
        """
        pass

    @abstractmethod
    async def converse(
        self, thread_id: str, message: str, language: Optional[str] = None
    ) -> AgentReply:
        """
        Send a user message and get the assistant reply.

        Args:
            thread_id: Conversation thread
            message: User message
            language: Optional language hint for the reply

        Returns:
            Agent reply

        Raises:
            AgentError: If the agent call fails
        """
        pass

    async def health_check(self) -> bool:
        """Check agent readiness."""
        return True

    async def close(self) -> None:
        """Release provider resources."""
        return None
