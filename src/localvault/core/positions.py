"""Position reconciliation for ordered collections.

Items carry an integer ``position``. Moving one item onto another item's
slot shifts every item in between one slot toward the mover's old slot::

    positions  A:0 B:1 C:2 D:3
    move A -> C
    positions  A:2 B:0 C:1 D:3

The set of positions is only permuted, never extended or shrunk, so a dense
order stays dense and no position is ever shared or negative.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Sequence
from operator import attrgetter
from typing import Any, Protocol, TypeVar

from pydantic import BaseModel

from localvault.shared.errors import DomainError, ErrorCode, ErrorContext

logger = logging.getLogger(__name__)


class Orderable(Protocol):
    id: str
    position: int


T = TypeVar("T", bound=Orderable)


def _with_position(item: T, position: int) -> T:
    if isinstance(item, BaseModel):
        return item.model_copy(update={"position": position})
    if dataclasses.is_dataclass(item):
        return dataclasses.replace(item, position=position)  # type: ignore[type-var]
    msg = f"Cannot copy {type(item).__name__} with a new position"
    raise TypeError(msg)


def _find(items: Sequence[T], item_id: str) -> T:
    for item in items:
        if item.id == item_id:
            return item
    raise DomainError(
        ErrorCode.ITEM_NOT_FOUND,
        f"No item with id '{item_id}'",
        ErrorContext(operation="reconcile_positions", additional_data={"item_id": item_id}),
    )


def reconcile_positions(
    source_id: str,
    target_id: str,
    collection: Sequence[T],
) -> list[T]:
    """Move ``source_id`` to the position held by ``target_id``.

    Items between the two slots shift one slot toward the source's old slot;
    all other items keep their positions. Slots are taken in sorted order,
    so a gapped order such as 0, 2, 5 is permuted just like a dense one. The
    input is not modified: moved items are returned as copies, untouched
    items as-is, in input order.

    Raises:
        DomainError: If either id is not in the collection.
    """
    items = list(collection)
    if source_id == target_id:
        return items

    source = _find(items, source_id)
    target = _find(items, target_id)

    order = sorted(range(len(items)), key=lambda index: items[index].position)
    slots = [items[index].position for index in order]
    source_rank = next(rank for rank, index in enumerate(order) if items[index] is source)
    target_rank = next(rank for rank, index in enumerate(order) if items[index] is target)

    moved = order[:source_rank] + order[source_rank + 1 :]
    moved.insert(target_rank, order[source_rank])

    new_positions: dict[int, int] = {}
    for rank in range(min(source_rank, target_rank), max(source_rank, target_rank) + 1):
        index = moved[rank]
        if items[index].position != slots[rank]:
            new_positions[index] = slots[rank]

    result = [
        _with_position(item, new_positions[index]) if index in new_positions else item
        for index, item in enumerate(items)
    ]

    logger.debug(
        "Moved '%s' from position %d to %d",
        source_id,
        source.position,
        target.position,
    )
    return result


def sort_by_position(collection: Sequence[T]) -> list[T]:
    """Stable ascending sort by position."""
    return sorted(collection, key=attrgetter("position"))


def has_unique_positions(collection: Sequence[Any]) -> bool:
    positions = [item.position for item in collection]
    return len(positions) == len(set(positions))


def normalize_positions(collection: Sequence[T]) -> list[T]:
    """Renumber positions to 0..n-1 following the current sorted order."""
    ordered = sort_by_position(collection)
    return [
        item if item.position == index else _with_position(item, index)
        for index, item in enumerate(ordered)
    ]


def next_position(collection: Sequence[Any]) -> int:
    """Position for an item appended after every existing one."""
    if not collection:
        return 0
    return max(item.position for item in collection) + 1
