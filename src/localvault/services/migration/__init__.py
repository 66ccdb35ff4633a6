"""Schema migration module.

This module provides version-gated schema migration management.
"""

from localvault.services.migration.manager import (
    MigrationBody,
    MigrationResult,
    SchemaMigrator,
)
from localvault.services.migration.todo_schema import (
    make_todo_migration,
    migrate_todo_records,
)

__all__ = [
    "MigrationBody",
    "MigrationResult",
    "SchemaMigrator",
    "make_todo_migration",
    "migrate_todo_records",
]
