"""
Cache entry models.

Sandi Metz Principles:
- Single Responsibility: Cache data structure
- Clear naming: Descriptive fields
- Immutable data: All fields are read-only after creation
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

V = TypeVar("V")


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    """A cached value with its absolute expiry time."""

    value: V
    expires_at: float

    def is_expired(self, now: float) -> bool:
        """Check whether the entry is logically absent at ``now``."""
        return now >= self.expires_at
