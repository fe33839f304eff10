"""
Custom exceptions for the application.

Cache misses and pool exhaustion are normal outcomes and have no exception.
"""


class AppError(Exception):
    """Base exception for application errors."""

    pass


class ConfigurationError(AppError):
    """Raised when configuration is invalid."""

    pass


class ProviderError(AppError):
    """Raised when an external speech or agent provider fails."""

    pass


class TranscriptionError(ProviderError):
    """Raised when speech-to-text fails or yields no usable transcript."""

    pass


class SynthesisError(ProviderError):
    """Raised when text-to-speech fails."""

    pass


class AgentError(ProviderError):
    """Raised when the conversation agent fails."""

    pass


class PoolClosedError(AppError):
    """Raised when acquiring from a pool that has been shut down."""

    pass


class SessionError(AppError):
    """Raised when session storage fails."""

    pass


class LockAcquisitionError(SessionError):
    """Raised when a distributed lock cannot be obtained in time."""

    pass
