"""Cache configuration model.

This module contains the cache configuration model for the in-memory TTL
layer in front of the persistent store.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from localvault.shared.constants import CacheConfig


class CacheSettings(BaseModel):
    """Cache configuration."""

    default_ttl: float = Field(
        default=CacheConfig.DEFAULT_TTL,
        ge=0,
        description="Cache entry time-to-live in seconds",
    )
    invalidate_on_external_change: bool = Field(
        default=CacheConfig.INVALIDATE_ON_EXTERNAL_CHANGE,
        description="Drop cached keys changed by another execution context",
    )


__all__ = ["CacheSettings"]
