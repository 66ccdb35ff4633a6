"""Tests for the write-through TTL cache."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from localvault.core.models import Todo
from localvault.services.cache import CacheEntry, TTLCache
from localvault.shared.errors import (
    DomainError,
    EncodeError,
    StoreUnavailableError,
    create_store_unavailable_error,
)
from localvault.storage.memory_store import MemoryStore


class TestCacheEntry:
    """Test CacheEntry expiry."""

    def test_entry_expires_at_boundary(self):
        """An entry is stale once the clock reaches expires_at."""
        entry = CacheEntry(key="k", value="v", expires_at=10.0)

        assert not entry.is_expired(9.999)
        assert entry.is_expired(10.0)
        assert entry.is_expired(11.0)


class TestWriteThrough:
    """Test that writes reach the store before the cache."""

    def test_set_writes_store_and_cache(self, cache, memory_store):
        cache.set("k", "v")

        assert memory_store.get_item("k") == "v"
        assert cache.is_cached("k")
        assert cache.get("k") == "v"

    def test_get_serves_live_entry_without_store_read(self, cache, statistics):
        cache.set("k", "v")
        reads_before = statistics.metrics.store_reads

        assert cache.get("k") == "v"
        assert statistics.metrics.store_reads == reads_before
        assert statistics.metrics.hits == 1

    def test_get_reads_store_after_ttl(self, cache, memory_store, clock):
        """After expiry the next read goes back to the store."""
        cache.set("k", "v1")
        memory_store.set_item("k", "v2")

        clock.advance(59)
        assert cache.get("k") == "v1"

        clock.advance(1)
        assert cache.get("k") == "v2"

    def test_absence_is_not_cached(self, cache, memory_store):
        assert cache.get("missing") is None
        assert not cache.is_cached("missing")

        memory_store.set_item("missing", "now here")
        assert cache.get("missing") == "now here"

    def test_last_set_wins(self, cache, memory_store):
        cache.set("k", "first")
        cache.set("k", "second")

        assert memory_store.get_item("k") == "second"
        assert cache.get("k") == "second"

    def test_set_rejects_non_string(self, cache, memory_store):
        with pytest.raises(EncodeError):
            cache.set("k", 42)  # type: ignore[arg-type]

        assert memory_store.get_item("k") is None

    def test_failed_write_drops_entry(self, cache, memory_store, mocker):
        cache.set("k", "v1")
        mocker.patch.object(
            memory_store,
            "set_item",
            side_effect=create_store_unavailable_error("set_item", key="k"),
        )

        with pytest.raises(StoreUnavailableError):
            cache.set("k", "v2")

        assert not cache.is_cached("k")
        assert memory_store.get_item("k") == "v1"


class TestRemoveAndClear:
    """Test remove and clear."""

    def test_remove_deletes_from_both(self, cache, memory_store):
        cache.set("k", "v")
        cache.remove("k")

        assert memory_store.get_item("k") is None
        assert not cache.is_cached("k")
        assert cache.get("k") is None

    def test_remove_missing_key_does_not_notify(self, cache):
        events = []
        cache.observe_all(events.append)

        cache.remove("missing")

        assert events == []

    def test_clear_notifies_once_per_key(self, cache):
        """Clearing {k1, k2} yields two notifications with new_value None."""
        cache.set("k1", "a")
        cache.set("k2", "b")
        events = []
        cache.observe_all(events.append)

        removed = cache.clear()

        assert removed == 2
        assert [(e.key, e.old_value, e.new_value) for e in events] == [
            ("k1", "a", None),
            ("k2", "b", None),
        ]
        assert cache.keys() == []

    def test_clear_empties_cache(self, cache):
        cache.set("k", "v")
        cache.clear()

        assert not cache.is_cached("k")


class TestCacheOnlyOperations:
    """Test invalidate, TTL overrides and purge."""

    def test_invalidate_keeps_store(self, cache, memory_store):
        cache.set("k", "v")
        cache.invalidate("k")

        assert not cache.is_cached("k")
        assert memory_store.get_item("k") == "v"

    def test_invalidate_does_not_notify(self, cache):
        cache.set("k", "v")
        events = []
        cache.observe_all(events.append)

        cache.invalidate("k")
        cache.invalidate_all()

        assert events == []

    def test_invalidate_all(self, cache):
        cache.set("a", "1")
        cache.set("b", "2")
        cache.invalidate_all()

        assert not cache.is_cached("a")
        assert not cache.is_cached("b")

    def test_set_ttl_applies_to_new_entries(self, cache, clock):
        cache.set_ttl("short", 5)
        cache.set("short", "v")

        clock.advance(5)
        assert not cache.is_cached("short")
        assert cache.ttl_for("other") == 60

    def test_set_ttl_rearms_live_entry(self, cache, clock):
        cache.set("k", "v")
        clock.advance(50)

        cache.set_ttl("k", 30)
        clock.advance(20)

        assert cache.is_cached("k")

    def test_zero_ttl_never_serves_from_cache(self, cache, statistics):
        cache.set_ttl("k", 0)
        cache.set("k", "v")

        assert cache.get("k") == "v"
        assert statistics.metrics.hits == 0

    def test_negative_ttl_rejected(self, cache):
        with pytest.raises(DomainError):
            cache.set_ttl("k", -1)

    def test_purge_expired(self, cache, clock, statistics):
        cache.set("a", "1")
        cache.set_ttl("b", 120)
        cache.set("b", "2")
        clock.advance(60)

        assert cache.purge_expired() == 1
        assert statistics.metrics.expirations == 1
        assert cache.is_cached("b")


class TestNotifications:
    """Test notifications sent by mutations."""

    def test_set_reports_store_old_value(self, cache, memory_store):
        """The old value comes from the store, not from a stale entry."""
        cache.set("k", "v1")
        memory_store.set_item("k", "v-external")
        events = []
        cache.observe("k", events.append)

        cache.set("k", "v2")

        assert len(events) == 1
        assert events[0].old_value == "v-external"
        assert events[0].new_value == "v2"
        assert events[0].origin == "local"

    def test_listener_order_for_one_set(self, cache):
        calls = []
        cache.observe("k", lambda event: calls.append("L1"))
        cache.observe("k", lambda event: calls.append("L2"))

        cache.set("k", "v")

        assert calls == ["L1", "L2"]

    def test_failing_listener_does_not_break_set(self, cache, memory_store, statistics):
        def broken(event):
            raise RuntimeError("boom")

        cache.observe("k", broken)
        cache.set("k", "v")

        assert memory_store.get_item("k") == "v"
        assert statistics.metrics.listener_errors == 1


class TestExternalChanges:
    """Test cache invalidation on changes from other contexts."""

    def test_external_change_invalidates_key(self, cache, memory_store):
        cache.set("k", "v1")
        cache.observe("k", lambda event: None)

        memory_store.emit_external_change("k", "v2")

        assert not cache.is_cached("k")
        assert cache.get("k") == "v2"

    def test_external_clear_invalidates_everything(self, cache, memory_store):
        cache.set("a", "1")
        cache.set("b", "2")
        cache.observe_all(lambda event: None)

        memory_store.emit_external_change(None, None)

        assert not cache.is_cached("a")
        assert not cache.is_cached("b")

    def test_external_invalidation_can_be_disabled(self, memory_store, clock):
        cache = TTLCache(memory_store, clock=clock, invalidate_on_external_change=False)
        cache.set("k", "v1")
        cache.observe("k", lambda event: None)

        memory_store.emit_external_change("k", "v2")

        assert cache.get("k") == "v1"


class TestUnavailableStore:
    """Test behaviour when the host denies storage access."""

    def test_get_returns_none(self, clock):
        cache = TTLCache(MemoryStore(available=False), clock=clock)

        assert cache.get("k") is None
        assert cache.get_int("k", default=7) == 7

    def test_key_listing_reads_as_empty(self, clock):
        cache = TTLCache(MemoryStore(available=False), clock=clock)

        assert cache.keys() == []
        assert cache.has_key("k") is False

    def test_set_drops_entry_when_store_goes_away(self, clock):
        store = MemoryStore()
        cache = TTLCache(store, clock=clock)
        cache.set("k", "v1")
        store.available = False

        with pytest.raises(StoreUnavailableError):
            cache.set("k", "v2")

        assert not cache.is_cached("k")

    def test_set_raises(self, clock):
        cache = TTLCache(MemoryStore(available=False), clock=clock)

        with pytest.raises(StoreUnavailableError):
            cache.set("k", "v")

        assert not cache.is_cached("k")


class TestTypedAccessors:
    """Test the typed get/set helpers."""

    def test_bool_roundtrip(self, cache, memory_store):
        cache.set_bool("flag", True)

        assert memory_store.get_item("flag") == "true"
        assert cache.get_bool("flag") is True

    def test_bool_accepts_parse_literals(self, cache, memory_store):
        memory_store.set_item("flag", "T")

        assert cache.get_bool("flag") is True

    def test_int_and_float(self, cache):
        cache.set_int("count", -3)
        cache.set_float("ratio", 0.25)

        assert cache.get_int("count") == -3
        assert cache.get_float("ratio") == 0.25

    def test_time_is_unix_millis(self, cache, memory_store):
        moment = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
        cache.set_time("seen", moment)

        assert memory_store.get_item("seen") == str(int(moment.timestamp() * 1000))
        assert cache.get_time("seen") == moment

    def test_json_with_model(self, cache):
        todo = Todo(id="1", text="a", created_at=100)
        cache.set_json("todos", [todo])

        assert cache.get_json("todos") == [
            {
                "id": "1",
                "text": "a",
                "completed": False,
                "createdAt": 100,
                "position": 0,
                "priority": 0,
                "tags": [],
            }
        ]

    def test_missing_key_returns_default(self, cache):
        assert cache.get_bool("nope", default=True) is True
        assert cache.get_int("nope", default=5) == 5
        assert cache.get_json("nope", default=[]) == []
        assert cache.get_time("nope") is None

    def test_malformed_value_returns_default(self, cache, memory_store, statistics):
        """A malformed stored value is reported, not raised."""
        memory_store.set_item("count", "twelve")

        assert cache.get_int("count", default=0) == 0
        assert statistics.metrics.decode_errors == 1
        assert statistics.decode_error_keys == {"count": 1}

    def test_out_of_range_time_returns_default(self, cache, memory_store, statistics):
        memory_store.set_item("seen", "99999999999999999999")

        assert cache.get_time("seen", default=None) is None
        assert statistics.decode_error_keys == {"seen": 1}

    def test_malformed_json_returns_default(self, cache, memory_store):
        memory_store.set_item("doc", "{not json")

        assert cache.get_json("doc", default={}) == {}

    def test_encode_failure_writes_nothing(self, cache, memory_store):
        with pytest.raises(EncodeError):
            cache.set_json("doc", {"bad": object()})
        with pytest.raises(EncodeError):
            cache.set_int("count", "3")  # type: ignore[arg-type]

        assert memory_store.keys() == []
        assert not cache.is_cached("doc")
