"""JSON file backed persistent store.

All keys live in one JSON object file. Writes replace the file atomically
(temporary file + ``os.replace``) so a crash never leaves a half-written
store behind. Other processes sharing the file play the role of other
browser tabs: ``poll_external_changes`` picks up their writes and emits one
change event per differing key to the host listeners.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import orjson

from localvault.shared.constants import ChangeOrigin, StorageArea
from localvault.shared.errors import (
    ErrorCode,
    ErrorContext,
    InfrastructureError,
    create_store_unavailable_error,
)
from localvault.storage.base import StorageEvent, StoreListener

logger = logging.getLogger(__name__)


class JsonFileStore:
    """Persistent store kept in a single JSON file.

    Args:
        path: Location of the JSON file. It is created on first write.
        storage_area: Name reported in change events, defaults to
            ``"file:<file name>"``.

    Raises:
        StoreUnavailableError: If an existing file cannot be read.
        InfrastructureError: If the file exists but is not a JSON object of
            string values.
    """

    def __init__(self, path: Path | str, storage_area: str | None = None) -> None:
        self.path = Path(path)
        self._storage_area = storage_area or f"{StorageArea.FILE}:{self.path.name}"
        self._listeners: list[StoreListener] = []
        self._mtime_ns: int | None = None
        self._items: dict[str, str] = self._read_file()

    @property
    def storage_area(self) -> str:
        return self._storage_area

    @property
    def length(self) -> int:
        return len(self._items)

    def _stat_mtime(self) -> int | None:
        try:
            return self.path.stat().st_mtime_ns
        except FileNotFoundError:
            return None
        except OSError as e:
            raise create_store_unavailable_error(
                "stat",
                storage_area=self._storage_area,
                original_error=e,
            ) from e

    def _read_file(self) -> dict[str, str]:
        mtime_ns = self._stat_mtime()
        if mtime_ns is None:
            self._mtime_ns = None
            return {}

        try:
            raw = self.path.read_bytes()
        except OSError as e:
            raise create_store_unavailable_error(
                "read",
                storage_area=self._storage_area,
                original_error=e,
            ) from e

        try:
            data = orjson.loads(raw) if raw.strip() else {}
        except orjson.JSONDecodeError as e:
            raise InfrastructureError(
                ErrorCode.STORE_READ_FAILED,
                f"Store file is not valid JSON: {self.path}",
                ErrorContext(operation="read", additional_data={"path": self.path}),
                e,
            ) from e

        if not isinstance(data, dict) or not all(
            isinstance(value, str) for value in data.values()
        ):
            raise InfrastructureError(
                ErrorCode.STORE_READ_FAILED,
                f"Store file must hold a JSON object of strings: {self.path}",
                ErrorContext(operation="read", additional_data={"path": self.path}),
            )

        self._mtime_ns = mtime_ns
        return data

    def _write_file(self, operation: str, key: str | None = None) -> None:
        payload = orjson.dumps(self._items, option=orjson.OPT_INDENT_2)
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(payload)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise create_store_unavailable_error(
                operation,
                key=key,
                storage_area=self._storage_area,
                original_error=e,
            ) from e
        self._mtime_ns = self._stat_mtime()

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        had_key = key in self._items
        previous = self._items.get(key)
        self._items[key] = value
        try:
            self._write_file("set_item", key)
        except InfrastructureError:
            if had_key:
                self._items[key] = previous  # type: ignore[assignment]
            else:
                del self._items[key]
            raise

    def remove_item(self, key: str) -> None:
        if key not in self._items:
            return
        previous = self._items.pop(key)
        try:
            self._write_file("remove_item", key)
        except InfrastructureError:
            self._items[key] = previous
            raise

    def clear(self) -> None:
        previous = self._items
        self._items = {}
        try:
            self._write_file("clear")
        except InfrastructureError:
            self._items = previous
            raise

    def key(self, index: int) -> str | None:
        if 0 <= index < len(self._items):
            return list(self._items)[index]
        return None

    def keys(self) -> list[str]:
        return list(self._items)

    def add_change_listener(self, listener: StoreListener) -> None:
        self._listeners.append(listener)

    def poll_external_changes(self) -> int:
        """Reload the file if another process changed it.

        Returns:
            Number of change events emitted to host listeners.
        """
        if self._stat_mtime() == self._mtime_ns:
            return 0

        old_items = self._items
        new_items = self._read_file()
        self._items = new_items

        changed = [key for key in old_items if old_items[key] != new_items.get(key)]
        changed.extend(key for key in new_items if key not in old_items)

        for key in changed:
            event = StorageEvent(
                key=key,
                old_value=old_items.get(key),
                new_value=new_items.get(key),
                storage_area=self._storage_area,
                origin=ChangeOrigin.EXTERNAL,
            )
            for listener in list(self._listeners):
                listener(event)

        if changed:
            logger.debug(
                "Picked up %d external change(s) from %s",
                len(changed),
                self.path,
            )
        return len(changed)
