"""
Language tag normalization.

Sandi Metz Principles:
- Pure functions: No side effects
"""

import math
from typing import Iterable, Optional, Tuple

from voicegate.models.speech import DEFAULT_LANGUAGE, SUPPORTED_LANGUAGES

FALLBACK_CONFIDENCE = 0.5
DEFAULT_CONFIDENCE = 0.8

_ALIASES = {
    "english": "en-US",
    "en": "en-US",
    "en-us": "en-US",
    "nepali": "ne-NP",
    "ne": "ne-NP",
    "ne-np": "ne-NP",
}


def normalize_language(language: Optional[str]) -> Optional[str]:
    """
    Map a provider language name or code to a supported tag.

    Args:
        language: Provider value (e.g. "english", "ne", "ne-NP")

    Returns:
        Supported tag, or None if unsupported
    """
    if not language:
        return None
    tag = _ALIASES.get(language.strip().lower())
    return tag if tag in SUPPORTED_LANGUAGES else None


def confidence_from_logprobs(logprobs: Iterable[float]) -> float:
    """
    Convert segment average log-probabilities to a 0..1 confidence.

    Args:
        logprobs: Per-segment average log-probabilities

    Returns:
        Confidence, DEFAULT_CONFIDENCE when there are no segments
    """
    values = list(logprobs)
    if not values:
        return DEFAULT_CONFIDENCE
    mean = sum(values) / len(values)
    return min(1.0, max(0.0, math.exp(mean)))


def resolve_language(
    language: Optional[str], confidence: float
) -> Tuple[str, float]:
    """
    Resolve a detected language, falling back to English when unsupported.

    Args:
        language: Provider language value
        confidence: Provider confidence

    Returns:
        (tag, confidence)
    """
    tag = normalize_language(language)
    if tag is None:
        return DEFAULT_LANGUAGE, FALLBACK_CONFIDENCE
    return tag, confidence
