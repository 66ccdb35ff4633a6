"""Todo list schema upgrade (versions 0/1 -> 2).

Version 2 added ``position``, ``priority`` and ``tags`` to every todo record.
Records missing any of them get ``priority`` = 0 and ``tags`` = []. If any
record lacks ``position``, every record gets its index in the stored list,
so a partly upgraded list never ends up with shared positions. The legacy
fields ``id``, ``text``,
``completed`` and ``createdAt`` are required; a record without them, or with
a value of the wrong type, is corruption and fails the migration.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from localvault.core.models import Todo
from localvault.services import codecs
from localvault.services.migration.manager import MigrationBody
from localvault.shared.constants import Priority, SchemaConfig
from localvault.shared.errors import ErrorCode, create_migration_error
from localvault.storage.base import PersistentStore

logger = logging.getLogger(__name__)


def _check_required_fields(
    record: dict[str, Any],
    index: int,
    from_version: int,
    to_version: int,
) -> None:
    for field, accepted in SchemaConfig.REQUIRED_TODO_FIELDS.items():
        if field not in record or record[field] is None:
            raise create_migration_error(
                f"Todo record {index} is missing required field '{field}'",
                from_version,
                to_version,
                record_index=index,
                code=ErrorCode.MIGRATION_CORRUPT_RECORD,
            )
        value = record[field]
        wrong_type = not isinstance(value, accepted) or (
            isinstance(value, bool) and bool not in accepted
        )
        if not wrong_type and isinstance(value, float) and not value.is_integer():
            wrong_type = True
        if wrong_type:
            raise create_migration_error(
                f"Todo record {index} has malformed field '{field}' "
                f"({type(value).__name__})",
                from_version,
                to_version,
                record_index=index,
                code=ErrorCode.MIGRATION_CORRUPT_RECORD,
            )


def migrate_todo_records(
    records: Any,
    from_version: int,
    to_version: int,
) -> list[Todo]:
    """Convert raw stored records into version 2 todos.

    Raises:
        MigrationError: If the payload is not a list of objects or a record
            fails validation.
    """
    if not isinstance(records, list):
        raise create_migration_error(
            f"Stored todos must be a JSON array, got {type(records).__name__}",
            from_version,
            to_version,
            code=ErrorCode.MIGRATION_CORRUPT_RECORD,
        )

    renumber = any(
        not isinstance(record, dict) or record.get("position") is None for record in records
    )
    migrated: list[Todo] = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise create_migration_error(
                f"Todo record {index} is not an object",
                from_version,
                to_version,
                record_index=index,
                code=ErrorCode.MIGRATION_CORRUPT_RECORD,
            )
        _check_required_fields(record, index, from_version, to_version)

        data = {
            "id": record["id"],
            "text": record["text"],
            "completed": record["completed"],
            "createdAt": int(record["createdAt"]),
            "position": index if renumber else record["position"],
            "priority": Priority.NONE if record.get("priority") is None else record["priority"],
            "tags": [] if record.get("tags") is None else record["tags"],
        }
        try:
            migrated.append(Todo.model_validate(data))
        except ValidationError as e:
            raise create_migration_error(
                f"Todo record {index} failed validation: {e.error_count()} error(s)",
                from_version,
                to_version,
                record_index=index,
                code=ErrorCode.MIGRATION_CORRUPT_RECORD,
                original_error=e,
            ) from e

    return migrated


def make_todo_migration(store: PersistentStore, todos_key: str) -> MigrationBody:
    """Build the migration body for the todo list stored under ``todos_key``."""

    def migrate(from_version: int, to_version: int) -> None:
        raw = store.get_item(todos_key)
        if raw is None:
            logger.info("No stored todos, nothing to migrate")
            return

        try:
            records = codecs.decode_json(raw)
        except ValueError as e:
            raise create_migration_error(
                f"Stored todos under '{todos_key}' are not valid JSON",
                from_version,
                to_version,
                code=ErrorCode.MIGRATION_CORRUPT_RECORD,
                original_error=e,
            ) from e

        if records is None:
            logger.info("Stored todos are null, nothing to migrate")
            return

        if from_version < SchemaConfig.TODO_SCHEMA_VERSION <= to_version:
            todos = migrate_todo_records(records, from_version, to_version)
            store.set_item(todos_key, codecs.encode_json([todo.to_record() for todo in todos]))
            logger.info("Migrated %d todo record(s)", len(todos))

    return migrate
