"""Change notification for store mutations.

ChangeNotifier keeps an observer registry keyed by storage key (plus a
wildcard entry) and delivers every mutation to it, whether the mutation was
made through this process or arrived through the store's host change signal.

Dispatch order for one event:
    1. listeners registered for the event's key, in registration order
    2. wildcard listeners, in registration order

A failing listener is logged and counted; the remaining listeners still run
and the mutation that triggered the dispatch never sees the error.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable

from localvault.core.statistics import CacheStatistics
from localvault.shared.constants import ChangeOrigin, Observers
from localvault.storage.base import PersistentStore, StorageEvent

logger = logging.getLogger(__name__)

ChangeListener = Callable[[StorageEvent], None]


class ChangeNotifier:
    """Observer registry bridging local and cross-context changes.

    Registrations live as long as the notifier; there is no unsubscribe.
    The host change signal of ``store`` is wired lazily, once, on the first
    registration.

    Args:
        store: Store whose host change signal is bridged into ``notify``.
            When None only local notifications are delivered.
        statistics: Counter sink for listener failures.
    """

    def __init__(
        self,
        store: PersistentStore | None = None,
        statistics: CacheStatistics | None = None,
    ) -> None:
        self._store = store
        self._observers: dict[str, list[ChangeListener]] = {}
        self._external_hooks: list[ChangeListener] = []
        self._subscribed = False
        self.statistics = statistics or CacheStatistics()

    @property
    def storage_area(self) -> str:
        return self._store.storage_area if self._store is not None else ""

    @property
    def is_subscribed(self) -> bool:
        """Whether the host change signal has been wired."""
        return self._subscribed

    def observe(self, key: str, callback: ChangeListener) -> None:
        """Register ``callback`` for changes of ``key``.

        Registering under the wildcard key is the same as ``observe_all``.
        """
        self._observers.setdefault(key, []).append(callback)
        self.ensure_subscribed()

    def observe_all(self, callback: ChangeListener) -> None:
        """Register ``callback`` for changes of every key."""
        self.observe(Observers.WILDCARD, callback)

    def add_external_hook(self, hook: ChangeListener) -> None:
        """Run ``hook`` before listeners for every external change.

        Hooks are not observer registrations: adding one does not wire the
        host change signal.
        """
        self._external_hooks.append(hook)

    def ensure_subscribed(self) -> bool:
        """Wire the host change signal if not done yet.

        Returns:
            True if this call performed the wiring.
        """
        if self._subscribed or self._store is None:
            return False
        self._store.add_change_listener(self._on_host_change)
        self._subscribed = True
        logger.debug("Subscribed to host change signal of %s", self.storage_area)
        return True

    def listener_count(self, key: str | None = None) -> int:
        """Number of listeners for ``key``, or across all keys when None."""
        if key is None:
            return sum(len(listeners) for listeners in self._observers.values())
        return len(self._observers.get(key, []))

    def notify(
        self,
        key: str | None,
        old_value: str | None,
        new_value: str | None,
        origin: str = ChangeOrigin.LOCAL,
    ) -> StorageEvent:
        """Build a change event and dispatch it to listeners."""
        event = StorageEvent(
            key=key,
            old_value=old_value,
            new_value=new_value,
            storage_area=self.storage_area,
            origin=origin,
        )
        self.dispatch(event)
        return event

    def dispatch(self, event: StorageEvent) -> None:
        """Deliver ``event`` to key listeners, then wildcard listeners."""
        listeners: list[ChangeListener] = []
        if event.key is not None and event.key != Observers.WILDCARD:
            listeners.extend(self._observers.get(event.key, ()))
        listeners.extend(self._observers.get(Observers.WILDCARD, ()))

        for listener in listeners:
            self._call_isolated(listener, event)

    def _on_host_change(self, event: StorageEvent) -> None:
        if event.origin != ChangeOrigin.EXTERNAL:
            event = replace(event, origin=ChangeOrigin.EXTERNAL)
        for hook in list(self._external_hooks):
            self._call_isolated(hook, event)
        self.dispatch(event)

    def _call_isolated(self, listener: ChangeListener, event: StorageEvent) -> None:
        try:
            listener(event)
        except Exception:
            self.statistics.record_listener_error()
            logger.exception(
                "Change listener %r failed for key '%s'",
                listener,
                event.key,
            )
