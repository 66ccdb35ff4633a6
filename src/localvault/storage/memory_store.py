"""In-memory persistent store.

Mirrors the semantics of a browser ``localStorage`` area: insertion-ordered
keys, string values, and a change signal that only fires for mutations made
by another execution context (simulated through ``emit_external_change``).
"""

from __future__ import annotations

import logging

from localvault.shared.constants import ChangeOrigin, StorageArea
from localvault.shared.errors import create_store_unavailable_error
from localvault.storage.base import StorageEvent, StoreListener

logger = logging.getLogger(__name__)


class MemoryStore:
    """Dict-backed store.

    Args:
        storage_area: Name reported in change events.
        available: When False every operation raises StoreUnavailableError,
            which models a host that denies storage access.
    """

    def __init__(
        self,
        storage_area: str = StorageArea.LOCAL,
        *,
        available: bool = True,
    ) -> None:
        self._items: dict[str, str] = {}
        self._listeners: list[StoreListener] = []
        self._storage_area = storage_area
        self.available = available

    @property
    def storage_area(self) -> str:
        return self._storage_area

    @property
    def length(self) -> int:
        self._check_available("length")
        return len(self._items)

    def _check_available(self, operation: str, key: str | None = None) -> None:
        if not self.available:
            raise create_store_unavailable_error(
                operation,
                key=key,
                storage_area=self._storage_area,
            )

    def get_item(self, key: str) -> str | None:
        self._check_available("get_item", key)
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._check_available("set_item", key)
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._check_available("remove_item", key)
        self._items.pop(key, None)

    def clear(self) -> None:
        self._check_available("clear")
        self._items.clear()

    def key(self, index: int) -> str | None:
        self._check_available("key")
        if 0 <= index < len(self._items):
            return list(self._items)[index]
        return None

    def keys(self) -> list[str]:
        self._check_available("keys")
        return list(self._items)

    def add_change_listener(self, listener: StoreListener) -> None:
        self._listeners.append(listener)

    def emit_external_change(self, key: str | None, new_value: str | None) -> None:
        """Apply a change as if another execution context had made it.

        ``key=None`` clears the whole store. Host listeners receive exactly
        one event for the change.
        """
        if key is None:
            self._items.clear()
            old_value = None
        else:
            old_value = self._items.get(key)
            if new_value is None:
                self._items.pop(key, None)
            else:
                self._items[key] = new_value

        event = StorageEvent(
            key=key,
            old_value=old_value,
            new_value=new_value,
            storage_area=self._storage_area,
            origin=ChangeOrigin.EXTERNAL,
        )
        logger.debug("External change on '%s' in %s", key, self._storage_area)
        for listener in list(self._listeners):
            listener(event)
