"""
Session store interface.

Sandi Metz Principles:
- Single Responsibility: Session persistence contract
- Dependency Inversion: Services depend on this, not on a backend
"""

import uuid
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional

from voicegate.models.session import Session

ThreadFactory = Callable[[], Awaitable[str]]


def new_session_id() -> str:
    """Generate a session id."""
    return f"session_{uuid.uuid4().hex}"


class SessionStore(ABC):
    """
    Abstract base class for conversation session storage.

    Every session is bound to one agent thread, created on first use.
    """

    @abstractmethod
    async def get_or_create(self, session_id: Optional[str] = None) -> Session:
        """
        Get a session, creating it (and its agent thread) if missing.

        Args:
            session_id: Session id, generated when None

        Returns:
            Session
        """
        pass

    @abstractmethod
    async def get(self, session_id: str) -> Optional[Session]:
        """
        Get a session if it exists.

        Args:
            session_id: Session id

        Returns:
            Session or None
        """
        pass

    @abstractmethod
    async def update(
        self,
        session_id: str,
        message: str,
        response: str,
        language: Optional[str] = None,
    ) -> Session:
        """
        Record a conversation turn.

        Args:
            session_id: Session id
            message: User message
            response: Assistant reply
            language: Detected language for voice turns

        Returns:
            Updated session
        """
        pass

    @abstractmethod
    async def delete(self, session_id: str) -> bool:
        """
        Delete a session.

        Args:
            session_id: Session id

        Returns:
            True if a session was removed
        """
        pass

    @abstractmethod
    async def active_count(self) -> int:
        """Number of live sessions."""
        pass

    @abstractmethod
    async def cleanup_expired(self) -> int:
        """
        Drop expired sessions.

        Returns:
            Number of sessions removed
        """
        pass

    async def close(self) -> None:
        """Release backend resources."""
        return None
