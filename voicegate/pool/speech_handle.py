"""
Pooled speech-service handles.

Sandi Metz Principles:
- Single Responsibility: Provider client lifecycle
- Explicit lifecycle: open() and close() are always paired
"""

from typing import Optional

from openai import OpenAI

from voicegate.config import AppConfig
from voicegate.utils.logger import get_logger

logger = get_logger(__name__)


class SpeechHandle:
    """
    One configured speech-service client.

    The client is synchronous; callers run it through ``asyncio.to_thread``.
    Retries are disabled so provider failures surface on the first attempt.
    """

    def __init__(
        self,
        api_key: str,
        timeout_seconds: float,
        base_url: Optional[str] = None,
    ):
        """
        Initialize handle (not yet connected).

        Args:
            api_key: Provider API key
            timeout_seconds: Per-request timeout
            base_url: Optional API base URL override
        """
        self._api_key = api_key
        self._timeout = timeout_seconds
        self._base_url = base_url or None
        self._client: Optional[OpenAI] = None

    @property
    def is_open(self) -> bool:
        """Whether the underlying client exists."""
        return self._client is not None

    @property
    def client(self) -> OpenAI:
        """
        Underlying client.

        Raises:
            RuntimeError: If the handle is not open
        """
        if self._client is None:
            raise RuntimeError("Speech handle is not open")
        return self._client

    def open(self) -> "SpeechHandle":
        """Create the underlying client."""
        if self._client is None:
            self._client = OpenAI(
                api_key=self._api_key,
                base_url=self._base_url,
                timeout=self._timeout,
                max_retries=0,
            )
        return self

    def close(self) -> None:
        """Release the underlying HTTP connections."""
        if self._client is not None:
            client, self._client = self._client, None
            client.close()


class SpeechHandleFactory:
    """Builds opened speech handles for the connection pool."""

    def __init__(self, settings: AppConfig):
        """
        Initialize factory.

        Args:
            settings: Application configuration
        """
        self._settings = settings

    def __call__(self) -> SpeechHandle:
        handle = SpeechHandle(
            api_key=self._settings.openai_api_key,
            timeout_seconds=self._settings.provider_timeout_seconds,
            base_url=self._settings.openai_base_url,
        )
        return handle.open()


def close_speech_handle(handle: SpeechHandle) -> None:
    """Pool close function for speech handles."""
    handle.close()
