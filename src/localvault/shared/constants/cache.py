"""
Cache Configuration Constants

TTL values and cache tuning knobs shared by the cache layer and settings.
"""

# Base time units for TTL calculations (seconds)
BASE_SECOND = 1
BASE_MINUTE = 60 * BASE_SECOND


class CacheConfig:
    """In-memory cache configuration."""

    DEFAULT_TTL = 5 * BASE_MINUTE
    MIN_TTL = 0

    # Toggle for dropping cache entries when another context writes a key
    INVALIDATE_ON_EXTERNAL_CHANGE = True


class TimeCodec:
    """Encoding of time values stored as Unix milliseconds."""

    MILLIS_PER_SECOND = 1000
