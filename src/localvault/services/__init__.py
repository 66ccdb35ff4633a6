"""LocalVault services: cache, change notification and schema migration."""

from localvault.services.cache import CacheEntry, TTLCache
from localvault.services.migration import MigrationResult, SchemaMigrator
from localvault.services.notifier import ChangeListener, ChangeNotifier

__all__ = [
    "CacheEntry",
    "ChangeListener",
    "ChangeNotifier",
    "MigrationResult",
    "SchemaMigrator",
    "TTLCache",
]
