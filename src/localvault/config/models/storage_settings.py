"""Storage configuration model.

Selects the persistent store backend and names the keys LocalVault owns.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from localvault.shared.constants import CLIDefaults, SchemaConfig, StorageKeys


class StorageSettings(BaseModel):
    """Persistent store configuration."""

    backend: Literal["memory", "file"] = Field(
        default="file",
        description="Persistent store backend (memory, file)",
    )
    path: str = Field(
        default=CLIDefaults.STORE_FILE,
        description="JSON store file used by the file backend",
    )
    key_prefix: str = Field(
        default=StorageKeys.DEFAULT_PREFIX,
        description="Prefix of every key LocalVault writes",
    )
    schema_version: int = Field(
        default=SchemaConfig.TODO_SCHEMA_VERSION,
        ge=0,
        description="Schema version the stored data is migrated to on startup",
    )

    @property
    def todos_key(self) -> str:
        return f"{self.key_prefix}{StorageKeys.TODOS}"

    @property
    def schema_version_key(self) -> str:
        return f"{self.key_prefix}{StorageKeys.SCHEMA_VERSION}"


__all__ = ["StorageSettings"]
