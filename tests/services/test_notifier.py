"""Tests for ChangeNotifier."""

from __future__ import annotations

from localvault.core.statistics import CacheStatistics
from localvault.services.notifier import ChangeNotifier
from localvault.storage.base import StorageEvent
from localvault.storage.memory_store import MemoryStore


class TestRegistration:
    """Test observer registration and lazy host wiring."""

    def test_not_subscribed_before_first_observer(self, notifier):
        assert not notifier.is_subscribed

    def test_first_observer_wires_host_signal(self, notifier):
        notifier.observe("k", lambda event: None)

        assert notifier.is_subscribed

    def test_host_signal_wired_once(self, mocker):
        store = MemoryStore()
        spy = mocker.spy(store, "add_change_listener")
        notifier = ChangeNotifier(store)

        notifier.observe("a", lambda event: None)
        notifier.observe("b", lambda event: None)
        notifier.observe_all(lambda event: None)

        assert spy.call_count == 1
        assert notifier.ensure_subscribed() is False

    def test_external_hook_does_not_wire(self, notifier):
        notifier.add_external_hook(lambda event: None)

        assert not notifier.is_subscribed

    def test_no_store_never_subscribes(self):
        notifier = ChangeNotifier()
        notifier.observe("k", lambda event: None)

        assert not notifier.is_subscribed
        assert notifier.storage_area == ""

    def test_listener_count(self, notifier):
        notifier.observe("a", lambda event: None)
        notifier.observe("a", lambda event: None)
        notifier.observe_all(lambda event: None)

        assert notifier.listener_count("a") == 2
        assert notifier.listener_count("*") == 1
        assert notifier.listener_count() == 3


class TestDispatch:
    """Test dispatch order and isolation."""

    def test_key_listeners_before_wildcard(self, notifier):
        calls = []
        notifier.observe_all(lambda event: calls.append("all"))
        notifier.observe("k", lambda event: calls.append("L1"))
        notifier.observe("k", lambda event: calls.append("L2"))

        notifier.notify("k", None, "v")

        assert calls == ["L1", "L2", "all"]

    def test_other_keys_not_called(self, notifier):
        calls = []
        notifier.observe("other", lambda event: calls.append(event))

        notifier.notify("k", None, "v")

        assert calls == []

    def test_notify_builds_event(self, notifier):
        event = notifier.notify("k", "old", "new")

        assert event == StorageEvent(
            key="k",
            old_value="old",
            new_value="new",
            storage_area="local",
            origin="local",
        )

    def test_failing_listener_isolated(self):
        statistics = CacheStatistics()
        notifier = ChangeNotifier(MemoryStore(), statistics=statistics)
        calls = []

        def broken(event):
            raise ValueError("listener bug")

        notifier.observe("k", broken)
        notifier.observe("k", lambda event: calls.append("after"))

        notifier.notify("k", None, "v")

        assert calls == ["after"]
        assert statistics.metrics.listener_errors == 1


class TestExternalEvents:
    """Test events bridged from the host change signal."""

    def test_external_event_reaches_listeners(self, notifier, memory_store):
        events = []
        notifier.observe("k", events.append)

        memory_store.emit_external_change("k", "v")

        assert len(events) == 1
        assert events[0].origin == "external"
        assert events[0].new_value == "v"

    def test_external_clear_reaches_wildcard_only(self, notifier, memory_store):
        keyed = []
        wildcard = []
        notifier.observe("k", keyed.append)
        notifier.observe_all(wildcard.append)

        memory_store.emit_external_change(None, None)

        assert keyed == []
        assert len(wildcard) == 1
        assert wildcard[0].key is None

    def test_hooks_run_before_listeners(self, notifier, memory_store):
        calls = []
        notifier.add_external_hook(lambda event: calls.append("hook"))
        notifier.observe("k", lambda event: calls.append("listener"))

        memory_store.emit_external_change("k", "v")

        assert calls == ["hook", "listener"]

    def test_local_notify_skips_hooks(self, notifier):
        calls = []
        notifier.add_external_hook(lambda event: calls.append("hook"))

        notifier.notify("k", None, "v")

        assert calls == []
