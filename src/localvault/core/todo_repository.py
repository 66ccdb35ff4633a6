"""Todo list persistence on top of the TTL cache.

TodoRepository keeps the loaded list in memory, sorted by position, and
writes the whole list back through the cache after every mutation. A failed
write restores the previous in-memory list.

Reordering is a critical section: while the reconciled list is being saved
(which includes dispatching change notifications) every other mutation is
rejected with ReorderInProgressError.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from pydantic import TypeAdapter, ValidationError

from localvault.core.models import Todo
from localvault.core.positions import (
    has_unique_positions,
    next_position,
    normalize_positions,
    reconcile_positions,
    sort_by_position,
)
from localvault.core.todo_text import clean_text, extract_priority, extract_tags
from localvault.services.cache import TTLCache
from localvault.shared.constants import Priority, StorageKeys, TodoFilters
from localvault.shared.errors import (
    DomainError,
    ErrorCode,
    ErrorContext,
    LocalVaultError,
    ReorderInProgressError,
    create_decode_error,
)
from localvault.shared.logging import log_operation_error

logger = logging.getLogger(__name__)

_TODO_LIST = TypeAdapter(list[Todo])


def _default_id() -> str:
    return str(time.time_ns())


class TodoRepository:
    """Load, mutate and save the todo list.

    Args:
        cache: Cache the list is read from and written through.
        key: Storage key of the todo list.
        clock: Wall clock in seconds used for ``created_at``.
        id_factory: Generator of new todo ids.
    """

    def __init__(
        self,
        cache: TTLCache,
        key: str = StorageKeys.DEFAULT_PREFIX + StorageKeys.TODOS,
        *,
        clock: Callable[[], float] = time.time,
        id_factory: Callable[[], str] = _default_id,
    ) -> None:
        self.cache = cache
        self.key = key
        self._clock = clock
        self._id_factory = id_factory
        self._todos: list[Todo] = []
        self._reordering = False

    @property
    def todos(self) -> list[Todo]:
        return list(self._todos)

    def load(self) -> list[Todo]:
        """Read the list from the cache and sort it by position.

        A list that does not validate is treated as empty. Duplicate
        positions are renumbered in sorted order.
        """
        records = self.cache.get_json(self.key, default=[])
        try:
            todos = _TODO_LIST.validate_python(records)
        except ValidationError as e:
            error = create_decode_error(self.key, "todo list", e)
            self.cache.statistics.record_decode_error(self.key)
            log_operation_error(logger, error, "load_todos", level=logging.WARNING)
            todos = []

        todos = sort_by_position(todos)
        if not has_unique_positions(todos):
            logger.warning("Duplicate todo positions under '%s', renumbering", self.key)
            todos = normalize_positions(todos)

        self._todos = todos
        return self.todos

    def save(self) -> None:
        self.cache.set_json(self.key, [todo.to_record() for todo in self._todos])

    def get(self, todo_id: str) -> Todo | None:
        for todo in self._todos:
            if todo.id == todo_id:
                return todo
        return None

    def add(self, text: str) -> Todo:
        """Append a todo parsed from ``text`` after every existing item."""
        self._ensure_idle()
        cleaned = clean_text(text)
        if not cleaned:
            raise DomainError(
                ErrorCode.VALIDATION_ERROR,
                "Todo text must not be empty",
                ErrorContext(key=self.key, operation="add_todo"),
            )

        todo = Todo(
            id=self._id_factory(),
            text=cleaned,
            created_at=int(self._clock()),
            position=next_position(self._todos),
            priority=extract_priority(text),
            tags=extract_tags(text),
        )
        self._commit([*self._todos, todo])
        return todo

    def toggle(self, todo_id: str) -> Todo:
        self._ensure_idle()
        todo = self._require(todo_id)
        updated = todo.model_copy(update={"completed": not todo.completed})
        self._commit([updated if item is todo else item for item in self._todos])
        return updated

    def edit(self, todo_id: str, text: str) -> Todo:
        self._ensure_idle()
        todo = self._require(todo_id)
        cleaned = clean_text(text)
        if not cleaned:
            raise DomainError(
                ErrorCode.VALIDATION_ERROR,
                "Todo text must not be empty",
                ErrorContext(key=self.key, operation="edit_todo"),
            )
        updated = todo.model_copy(
            update={
                "text": cleaned,
                "priority": extract_priority(text),
                "tags": extract_tags(text),
            }
        )
        self._commit([updated if item is todo else item for item in self._todos])
        return updated

    def delete(self, todo_id: str) -> Todo:
        self._ensure_idle()
        todo = self._require(todo_id)
        self._commit([item for item in self._todos if item is not todo])
        return todo

    def clear_completed(self) -> int:
        """Delete every completed todo.

        Returns:
            Number of todos deleted.
        """
        self._ensure_idle()
        remaining = [todo for todo in self._todos if not todo.completed]
        removed = len(self._todos) - len(remaining)
        if removed:
            self._commit(remaining)
        return removed

    def toggle_all(self) -> int:
        """Complete every todo, or reopen all of them if all are complete.

        Returns:
            Number of todos whose state changed.
        """
        self._ensure_idle()
        all_completed = all(todo.completed for todo in self._todos)
        updated = []
        changed = 0
        for todo in self._todos:
            if todo.completed == all_completed:
                todo = todo.model_copy(update={"completed": not all_completed})
                changed += 1
            updated.append(todo)
        if changed:
            self._commit(updated)
        return changed

    def reorder(self, source_id: str, target_id: str) -> list[Todo]:
        """Move ``source_id`` onto ``target_id``'s position and save.

        Moving an item onto itself is a no-op and writes nothing.

        Raises:
            ReorderInProgressError: If called while a reorder is being saved.
            DomainError: If either id is unknown.
        """
        self._ensure_idle()
        if source_id == target_id:
            return self.todos

        self._reordering = True
        try:
            updated = reconcile_positions(source_id, target_id, self._todos)
            self._commit(sort_by_position(updated))
        finally:
            self._reordering = False
        return self.todos

    def filtered(self, filter_name: str = TodoFilters.ALL) -> list[Todo]:
        if filter_name == TodoFilters.ACTIVE:
            return [todo for todo in self._todos if not todo.completed]
        if filter_name == TodoFilters.COMPLETED:
            return [todo for todo in self._todos if todo.completed]
        if filter_name == TodoFilters.PRIORITY:
            return [todo for todo in self._todos if todo.priority >= Priority.LOW]
        return self.todos

    def stats(self) -> dict[str, int]:
        active = [todo for todo in self._todos if not todo.completed]
        return {
            "total": len(self._todos),
            "active": len(active),
            "completed": len(self._todos) - len(active),
            "high_priority": sum(1 for todo in active if todo.priority >= Priority.MEDIUM),
        }

    def _require(self, todo_id: str) -> Todo:
        todo = self.get(todo_id)
        if todo is None:
            raise DomainError(
                ErrorCode.ITEM_NOT_FOUND,
                f"No todo with id '{todo_id}'",
                ErrorContext(key=self.key, additional_data={"todo_id": todo_id}),
            )
        return todo

    def _ensure_idle(self) -> None:
        if self._reordering:
            raise ReorderInProgressError(
                ErrorCode.REORDER_IN_PROGRESS,
                "Todo list is being reordered",
                ErrorContext(key=self.key, operation="mutate_todos"),
            )

    def _commit(self, todos: list[Todo]) -> None:
        previous = self._todos
        self._todos = todos
        try:
            self.save()
        except LocalVaultError:
            self._todos = previous
            raise
