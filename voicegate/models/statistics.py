"""
Cache and pool statistics models.

Sandi Metz Principles:
- Single Responsibility: Observability data
- Read-only snapshots
"""

from typing import Dict

from pydantic import BaseModel, Field


class CacheTierStats(BaseModel):
    """Snapshot of one cache tier."""

    name: str = Field(..., description="Tier name")
    size: int = Field(..., ge=0, description="Resident entries")
    capacity: int = Field(..., ge=1, description="Max entries")
    ttl_seconds: float = Field(..., gt=0, description="Entry time-to-live")
    hits: int = Field(default=0, ge=0, description="Lookup hits")
    misses: int = Field(default=0, ge=0, description="Lookup misses")
    evictions: int = Field(default=0, ge=0, description="Overflow/prune removals")
    expirations: int = Field(default=0, ge=0, description="Expiry purges")

    @property
    def hit_rate(self) -> float:
        """Hit ratio over all lookups."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total

    @property
    def utilization(self) -> float:
        """Fill ratio."""
        return self.size / self.capacity


class CacheStats(BaseModel):
    """Snapshot of all cache tiers."""

    tiers: Dict[str, CacheTierStats] = Field(default_factory=dict)

    @property
    def total_size(self) -> int:
        """Entries across all tiers."""
        return sum(tier.size for tier in self.tiers.values())

    def to_dict(self) -> dict:
        """Convert to the API payload shape."""
        payload = {
            name: {
                "size": tier.size,
                "maxSize": tier.capacity,
                "ttlSeconds": tier.ttl_seconds,
                "hits": tier.hits,
                "misses": tier.misses,
                "hitRate": round(tier.hit_rate, 4),
                "utilization": round(tier.utilization, 4),
                "evictions": tier.evictions,
                "expirations": tier.expirations,
            }
            for name, tier in self.tiers.items()
        }
        payload["totalSize"] = self.total_size
        return payload


class PoolStats(BaseModel):
    """Snapshot of the connection pool."""

    pool_size: int = Field(..., ge=0, description="Reusable slots")
    in_use: int = Field(..., ge=0, description="Reusable slots in use")
    available: int = Field(..., ge=0, description="Reusable slots free")
    created: int = Field(default=0, ge=0, description="Handles created")
    reused: int = Field(default=0, ge=0, description="Pooled acquisitions")
    destroyed: int = Field(default=0, ge=0, description="Temporary handles closed")
    refreshed: int = Field(default=0, ge=0, description="Stale handles recreated")
    temporary_in_use: int = Field(default=0, ge=0, description="Overflow handles out")

    @property
    def reuse_rate(self) -> float:
        """Share of acquisitions served by pooled handles."""
        total = self.created + self.reused
        if total == 0:
            return 0.0
        return self.reused / total

    def to_dict(self) -> dict:
        """Convert to the API payload shape."""
        return {
            "poolSize": self.pool_size,
            "inUse": self.in_use,
            "available": self.available,
            "created": self.created,
            "reused": self.reused,
            "destroyed": self.destroyed,
            "refreshed": self.refreshed,
            "temporaryInUse": self.temporary_in_use,
            "reuseRate": round(self.reuse_rate, 4),
        }
