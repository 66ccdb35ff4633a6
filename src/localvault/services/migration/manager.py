"""Schema migration manager.

The schema version is a non-negative integer persisted under a well-known
key. ``run_migration`` invokes a migration body only when the stored version
is below the target and advances the marker only after the body succeeds:

    current >= target   body not called, nothing written
    body raises         MigrationError, marker untouched (retried next start)
    body succeeds       marker set to target
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from localvault.services import codecs
from localvault.shared.constants import SchemaConfig, StorageKeys
from localvault.shared.errors import (
    ErrorCode,
    MigrationError,
    create_decode_error,
    create_migration_error,
)
from localvault.shared.logging import (
    log_operation_error,
    log_operation_start,
    log_operation_success,
)
from localvault.storage.base import PersistentStore

logger = logging.getLogger(__name__)

# Called with (from_version, to_version). Raising, or returning False,
# fails the migration.
MigrationBody = Callable[[int, int], "bool | None"]


@dataclass(frozen=True)
class MigrationResult:
    """Outcome of a successful ``run_migration`` call."""

    applied: bool
    from_version: int
    to_version: int


class SchemaMigrator:
    """Version-gated, one-shot schema upgrades against a persistent store.

    Args:
        store: Store holding both the version marker and the migrated data.
        version_key: Key of the schema version marker.
    """

    def __init__(
        self,
        store: PersistentStore,
        version_key: str = StorageKeys.DEFAULT_PREFIX + StorageKeys.SCHEMA_VERSION,
    ) -> None:
        self.store = store
        self.version_key = version_key

    def get_current_version(self) -> int:
        """Read the stored schema version.

        Returns:
            Stored version, or 0 when the marker is absent or malformed.
        """
        raw = self.store.get_item(self.version_key)
        if raw is None:
            return SchemaConfig.INITIAL_VERSION
        try:
            version = codecs.decode_int(raw)
        except ValueError as e:
            log_operation_error(
                logger,
                create_decode_error(self.version_key, "int", e),
                "read_schema_version",
                level=logging.WARNING,
            )
            return SchemaConfig.INITIAL_VERSION
        return max(version, SchemaConfig.INITIAL_VERSION)

    def _write_version(self, version: int) -> None:
        self.store.set_item(self.version_key, codecs.encode_int(version))

    def run_migration(self, target_version: int, body: MigrationBody) -> MigrationResult:
        """Run ``body`` once to move the schema to ``target_version``.

        Raises:
            MigrationError: If the target is negative or the body fails. The
                version marker is not advanced.
        """
        if target_version < SchemaConfig.INITIAL_VERSION:
            raise create_migration_error(
                f"Invalid target version: {target_version}",
                SchemaConfig.INITIAL_VERSION,
                target_version,
                code=ErrorCode.INVALID_SCHEMA_VERSION,
            )

        current = self.get_current_version()
        if current >= target_version:
            logger.debug("Schema already at version %d (target %d)", current, target_version)
            return MigrationResult(applied=False, from_version=current, to_version=current)

        logger.info("Migrating schema from version %d to %d", current, target_version)
        log_operation_start(
            logger,
            "run_migration",
            {"from_version": current, "to_version": target_version},
        )
        started = time.perf_counter()
        try:
            outcome = body(current, target_version)
        except MigrationError as e:
            log_operation_error(logger, e, "run_migration")
            raise
        except Exception as e:
            error = create_migration_error(
                f"Migration from version {current} to {target_version} failed: {e!s}",
                current,
                target_version,
                original_error=e,
            )
            log_operation_error(logger, error, "run_migration")
            raise error from e

        if outcome is False:
            error = create_migration_error(
                f"Migration from version {current} to {target_version} reported failure",
                current,
                target_version,
            )
            log_operation_error(logger, error, "run_migration")
            raise error

        self._write_version(target_version)
        log_operation_success(
            logger,
            "run_migration",
            duration_ms=(time.perf_counter() - started) * 1000,
            result_info={"from_version": current, "to_version": target_version},
        )
        return MigrationResult(applied=True, from_version=current, to_version=target_version)
