"""
Cache Statistics Module

Counters for the cache layer: hits, misses, store round-trips, expiries,
malformed values and failing change listeners.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import asdict, dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class CacheMetrics:
    """Container for cache counters."""

    hits: int = 0
    misses: int = 0
    store_reads: int = 0
    store_writes: int = 0
    expirations: int = 0
    decode_errors: int = 0
    listener_errors: int = 0


class CacheStatistics:
    """Aggregator for cache and notifier counters."""

    def __init__(self) -> None:
        self.metrics = CacheMetrics()
        self.decode_error_keys: Counter[str] = Counter()

    def record_hit(self, key: str) -> None:
        self.metrics.hits += 1
        logger.debug("Cache hit for '%s'", key)

    def record_miss(self, key: str) -> None:
        self.metrics.misses += 1
        logger.debug("Cache miss for '%s'", key)

    def record_store_read(self) -> None:
        self.metrics.store_reads += 1

    def record_store_write(self) -> None:
        self.metrics.store_writes += 1

    def record_expiration(self, key: str) -> None:
        self.metrics.expirations += 1
        logger.debug("Cache entry expired for '%s'", key)

    def record_decode_error(self, key: str) -> None:
        """Record a malformed persisted value, counted per key."""
        self.metrics.decode_errors += 1
        self.decode_error_keys[key] += 1

    def record_listener_error(self) -> None:
        self.metrics.listener_errors += 1

    def hit_ratio(self) -> float:
        """Get the cache hit ratio.

        Returns:
            Hit ratio as a percentage (0.0 to 100.0)
        """
        total = self.metrics.hits + self.metrics.misses
        if total == 0:
            return 0.0
        return (self.metrics.hits / total) * 100.0

    def summary(self) -> dict[str, Any]:
        summary = asdict(self.metrics)
        summary["hit_ratio"] = round(self.hit_ratio(), 2)
        return summary

    def reset(self) -> None:
        self.metrics = CacheMetrics()
        self.decode_error_keys.clear()
