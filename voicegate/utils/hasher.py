"""
Cache key generation utilities.

Sandi Metz Principles:
- Single Responsibility: Hash generation
- Small functions: Each does one thing
- Pure functions: No side effects

Audio is fingerprinted from its first and last ``sample_size`` bytes only,
so two recordings sharing head and tail but differing in the middle map to
the same fingerprint. Transcript and language lookups treat that as a hit.
"""

import hashlib
import json

DEFAULT_FINGERPRINT_BYTES = 1024


def _digest(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def generate_cache_key(value: str, prefix: str) -> str:
    """
    Generate a namespaced cache key.

    Args:
        value: Key material
        prefix: Key namespace (e.g. "response", "transcript", "lang")

    Returns:
        Cache key (prefix:sha256hash)
    """
    return f"{prefix}:{_digest(value.encode('utf-8'))}"


def generate_response_key(message: str, session_id: str) -> str:
    """
    Generate cache key for an agent response.

    Distinct (message, session) pairs never share a key.

    Args:
        message: User message
        session_id: Session identifier

    Returns:
        Response cache key
    """
    return generate_cache_key(
        json.dumps([message, session_id], ensure_ascii=False), prefix="response"
    )


def generate_audio_fingerprint(
    audio: bytes, sample_size: int = DEFAULT_FINGERPRINT_BYTES
) -> str:
    """
    Fingerprint audio from its head and tail bytes.

    Args:
        audio: Raw audio payload
        sample_size: Bytes taken from each end

    Returns:
        Hex digest of head + tail
    """
    head = audio[:sample_size]
    tail = audio[-sample_size:] if audio else b""
    return _digest(head + tail)


def generate_transcript_key(fingerprint: str) -> str:
    """Generate cache key for a transcript."""
    return generate_cache_key(fingerprint, prefix="transcript")


def generate_language_key(fingerprint: str) -> str:
    """Generate cache key for a language detection result."""
    return generate_cache_key(fingerprint, prefix="lang")
