"""
LocalVault Constants Module

Centralized constants for LocalVault. Magic values live here so the cache,
store, migration and CLI layers agree on them.
"""

from .cache import BASE_MINUTE, BASE_SECOND, CacheConfig, TimeCodec
from .cli import CLICommands, CLIDefaults, CLIHelp, CLIMessages
from .storage import (
    ChangeOrigin,
    Observers,
    Priority,
    SchemaConfig,
    StorageArea,
    StorageKeys,
    TodoFilters,
)

__all__ = [
    "BASE_MINUTE",
    "BASE_SECOND",
    "CLICommands",
    "CLIDefaults",
    "CLIHelp",
    "CLIMessages",
    "CacheConfig",
    "ChangeOrigin",
    "Observers",
    "Priority",
    "SchemaConfig",
    "StorageArea",
    "StorageKeys",
    "TimeCodec",
    "TodoFilters",
]
