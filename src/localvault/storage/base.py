"""Persistent store contract.

A persistent store is a synchronous, string-keyed key-value store with an
enumerable key set. Besides the plain get/set/remove/clear calls it exposes a
host-level change signal: listeners added through ``add_change_listener`` are
told about mutations made by *other* execution contexts, never about the
store's own local writes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol, runtime_checkable

from localvault.shared.constants import ChangeOrigin


@dataclass(frozen=True)
class StorageEvent:
    """A single key change.

    Attributes:
        key: Changed key, or None when the whole store was cleared elsewhere.
        old_value: Value before the change (None when the key did not exist).
        new_value: Value after the change (None when the key was removed).
        storage_area: Name of the storage area the change happened in.
        origin: ``"local"`` for writes through this process, ``"external"``
            for changes bridged from the host change signal.
    """

    key: str | None
    old_value: str | None
    new_value: str | None
    storage_area: str
    origin: str = ChangeOrigin.LOCAL


StoreListener = Callable[[StorageEvent], None]


@runtime_checkable
class PersistentStore(Protocol):
    """Protocol every backing store implements."""

    @property
    def storage_area(self) -> str: ...

    @property
    def length(self) -> int: ...

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def clear(self) -> None: ...

    def key(self, index: int) -> str | None: ...

    def keys(self) -> list[str]: ...

    def add_change_listener(self, listener: StoreListener) -> None: ...
