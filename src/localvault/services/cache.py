"""Write-through TTL cache in front of a persistent store.

TTLCache serves recent reads from memory and forwards every write to the
backing store before touching its own entries, so a cached value is never
newer than the stored one. Entries expire ``ttl`` seconds after they were
filled; the next read after expiry goes back to the store.

Typed accessors (bool, int, float, time, JSON) are thin codecs over
``get``/``set``. A malformed stored value makes the typed getter return the
caller's default; the condition is logged and counted, never raised.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, TypeVar

from localvault.core.statistics import CacheStatistics
from localvault.services import codecs
from localvault.services.notifier import ChangeListener, ChangeNotifier
from localvault.shared.constants import CacheConfig
from localvault.shared.errors import (
    DomainError,
    ErrorCode,
    ErrorContext,
    LocalVaultError,
    StoreUnavailableError,
    create_decode_error,
    create_encode_error,
)
from localvault.shared.logging import log_operation_error
from localvault.storage.base import PersistentStore, StorageEvent

logger = logging.getLogger(__name__)

T = TypeVar("T")
Clock = Callable[[], float]


@dataclass
class CacheEntry:
    """A cached value and the clock reading at which it goes stale."""

    key: str
    value: str
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


def _validate_ttl(ttl: float, key: str | None = None) -> float:
    if ttl < CacheConfig.MIN_TTL:
        raise DomainError(
            ErrorCode.VALIDATION_ERROR,
            f"TTL must be non-negative, got {ttl}",
            ErrorContext(key=key, operation="set_ttl"),
        )
    return float(ttl)


class TTLCache:
    """Write-through cache with per-key expiry.

    Args:
        store: Backing persistent store (the store of record).
        notifier: Change notifier told about every mutation. A new one bound
            to ``store`` is created when omitted.
        default_ttl: Lifetime of an entry in seconds.
        clock: Monotonic clock in seconds, injectable for tests.
        statistics: Counter sink, shared with the notifier by default.
        invalidate_on_external_change: Drop the cached entry of a key when
            another execution context changes it.
    """

    def __init__(
        self,
        store: PersistentStore,
        notifier: ChangeNotifier | None = None,
        default_ttl: float = CacheConfig.DEFAULT_TTL,
        *,
        clock: Clock = time.monotonic,
        statistics: CacheStatistics | None = None,
        invalidate_on_external_change: bool = CacheConfig.INVALIDATE_ON_EXTERNAL_CHANGE,
    ) -> None:
        self.store = store
        self.default_ttl = _validate_ttl(default_ttl)
        self._clock = clock
        if statistics is None:
            statistics = notifier.statistics if notifier is not None else CacheStatistics()
        self.statistics = statistics
        self.notifier = notifier or ChangeNotifier(store, statistics=statistics)

        self._entries: dict[str, CacheEntry] = {}
        self._ttl_overrides: dict[str, float] = {}

        if invalidate_on_external_change:
            self.notifier.add_external_hook(self._on_external_change)

    # ------------------------------------------------------------------
    # Raw access
    # ------------------------------------------------------------------

    def get(self, key: str) -> str | None:
        """Return the value of ``key``, or None if the store has none.

        A live entry is served without touching the store. Otherwise the
        store is read and a present value is cached; absence is not cached.
        An unavailable store reads as absent.
        """
        now = self._clock()
        entry = self._entries.get(key)
        if entry is not None:
            if not entry.is_expired(now):
                self.statistics.record_hit(key)
                return entry.value
            del self._entries[key]
            self.statistics.record_expiration(key)

        self.statistics.record_miss(key)
        try:
            value = self._read_store(key)
        except StoreUnavailableError as e:
            log_operation_error(logger, e, "cache_get", level=logging.WARNING)
            return None

        if value is not None:
            self._entries[key] = CacheEntry(key, value, now + self.ttl_for(key))
        return value

    def set(self, key: str, value: str) -> None:
        """Write ``value`` through to the store, then cache it.

        Listeners receive the value the store held before the write, not the
        cached one, so a stale entry never leaks into the notification.

        Raises:
            EncodeError: If ``value`` is not a string. Nothing is written.
            StoreUnavailableError: If the store rejects the write. The cache
                entry for ``key`` is dropped.
        """
        if not isinstance(value, str):
            error = create_encode_error(key, type(value).__name__)
            log_operation_error(logger, error, "cache_set")
            raise error

        try:
            old_value = self._read_store(key)
            self.store.set_item(key, value)
        except LocalVaultError as e:
            self._entries.pop(key, None)
            log_operation_error(logger, e, "cache_set")
            raise
        self.statistics.record_store_write()

        self._entries[key] = CacheEntry(key, value, self._clock() + self.ttl_for(key))
        logger.debug("Set '%s' (%d chars)", key, len(value))
        self.notifier.notify(key, old_value, value)

    def remove(self, key: str) -> None:
        """Delete ``key`` from the store and the cache.

        Listeners are notified only if the key existed.
        """
        old_value = self._read_store(key)
        try:
            self.store.remove_item(key)
        finally:
            self._entries.pop(key, None)
        self.statistics.record_store_write()

        logger.debug("Removed '%s'", key)
        if old_value is not None:
            self.notifier.notify(key, old_value, None)

    def clear(self) -> int:
        """Delete every key from the store and the cache.

        Listeners get one notification per key that existed, each with
        ``new_value=None``.

        Returns:
            Number of keys removed.
        """
        previous = {key: self._read_store(key) for key in self.store.keys()}
        try:
            self.store.clear()
        finally:
            self._entries.clear()
        self.statistics.record_store_write()

        logger.debug("Cleared %d key(s)", len(previous))
        for key, old_value in previous.items():
            self.notifier.notify(key, old_value, None)
        return len(previous)

    def has_key(self, key: str) -> bool:
        return key in self.keys()

    def keys(self) -> list[str]:
        """Return every stored key. An unavailable store has none."""
        try:
            return self.store.keys()
        except StoreUnavailableError as e:
            log_operation_error(logger, e, "cache_keys", level=logging.WARNING)
            return []

    # ------------------------------------------------------------------
    # Cache-only operations
    # ------------------------------------------------------------------

    def invalidate(self, key: str) -> None:
        """Drop the cached entry of ``key``. The store is not touched."""
        self._entries.pop(key, None)

    def invalidate_all(self) -> None:
        """Drop every cached entry. The store is not touched."""
        self._entries.clear()

    def set_ttl(self, key: str, ttl: float) -> None:
        """Use ``ttl`` seconds for ``key`` from now on.

        A live entry for the key is re-armed to expire ``ttl`` seconds from
        now.
        """
        ttl = _validate_ttl(ttl, key)
        self._ttl_overrides[key] = ttl
        entry = self._entries.get(key)
        if entry is not None:
            entry.expires_at = self._clock() + ttl

    def ttl_for(self, key: str) -> float:
        return self._ttl_overrides.get(key, self.default_ttl)

    def is_cached(self, key: str) -> bool:
        """Whether a live entry exists for ``key``."""
        entry = self._entries.get(key)
        return entry is not None and not entry.is_expired(self._clock())

    def purge_expired(self) -> int:
        """Drop all expired entries.

        Returns:
            Number of entries dropped.
        """
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
            self.statistics.record_expiration(key)
        return len(expired)

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    def observe(self, key: str, callback: ChangeListener) -> None:
        self.notifier.observe(key, callback)

    def observe_all(self, callback: ChangeListener) -> None:
        self.notifier.observe_all(callback)

    # ------------------------------------------------------------------
    # Typed accessors
    # ------------------------------------------------------------------

    def get_bool(self, key: str, default: bool = False) -> bool:
        return self._get_decoded(key, default, codecs.decode_bool, "bool")

    def set_bool(self, key: str, value: bool) -> None:
        self.set(key, self._encode(key, value, codecs.encode_bool))

    def get_int(self, key: str, default: int = 0) -> int:
        return self._get_decoded(key, default, codecs.decode_int, "int")

    def set_int(self, key: str, value: int) -> None:
        self.set(key, self._encode(key, value, codecs.encode_int))

    def get_float(self, key: str, default: float = 0.0) -> float:
        return self._get_decoded(key, default, codecs.decode_float, "float")

    def set_float(self, key: str, value: float) -> None:
        self.set(key, self._encode(key, value, codecs.encode_float))

    def get_time(self, key: str, default: datetime | None = None) -> datetime | None:
        return self._get_decoded(key, default, codecs.decode_time, "time")

    def set_time(self, key: str, value: datetime) -> None:
        self.set(key, self._encode(key, value, codecs.encode_time))

    def get_json(self, key: str, default: Any = None) -> Any:
        return self._get_decoded(key, default, codecs.decode_json, "json")

    def set_json(self, key: str, value: Any) -> None:
        """Serialize ``value`` as JSON and write it through.

        Raises:
            EncodeError: If serialization fails. Neither the store nor the
                cache is modified.
        """
        self.set(key, self._encode(key, value, codecs.encode_json))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _read_store(self, key: str) -> str | None:
        value = self.store.get_item(key)
        self.statistics.record_store_read()
        return value

    def _get_decoded(
        self,
        key: str,
        default: T,
        decoder: Callable[[str], Any],
        type_name: str,
    ) -> T:
        raw = self.get(key)
        if raw is None:
            return default
        try:
            return decoder(raw)
        except ValueError as e:
            error = create_decode_error(key, type_name, e)
            self.statistics.record_decode_error(key)
            log_operation_error(logger, error, "cache_decode", level=logging.WARNING)
            return default

    def _encode(self, key: str, value: Any, encoder: Callable[[Any], str]) -> str:
        try:
            return encoder(value)
        except (TypeError, ValueError) as e:
            error = create_encode_error(key, type(value).__name__, e)
            log_operation_error(logger, error, "cache_encode")
            raise error from e

    def _on_external_change(self, event: StorageEvent) -> None:
        if event.key is None:
            self.invalidate_all()
        else:
            self.invalidate(event.key)
