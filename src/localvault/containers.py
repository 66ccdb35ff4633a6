"""Dependency Injection container for LocalVault.

This module wires the persistence stack with dependency-injector:

- Settings (Singleton)
- Persistent store selected by ``storage.backend`` (Singleton)
- ChangeNotifier bound to the store (Singleton)
- TTLCache in front of the store (Singleton)
- SchemaMigrator, TodoRepository and Preferences on top of them

Every provider is a singleton per container, so all call sites holding the
same container share one cache map and one observer registry.

Example:
    >>> container = Container()
    >>> bootstrap(container)
    >>> repository = container.todo_repository()
    >>> repository.load()
"""

from __future__ import annotations

import logging

from dependency_injector import containers, providers

from localvault.config.loader import load_settings
from localvault.config.models.settings import Settings
from localvault.core.preferences import Preferences
from localvault.core.statistics import CacheStatistics
from localvault.core.todo_repository import TodoRepository
from localvault.services.cache import TTLCache
from localvault.services.migration import (
    MigrationResult,
    SchemaMigrator,
    make_todo_migration,
)
from localvault.services.notifier import ChangeNotifier
from localvault.storage.base import PersistentStore
from localvault.storage.file_store import JsonFileStore
from localvault.storage.memory_store import MemoryStore

logger = logging.getLogger(__name__)


def create_store(config: Settings) -> PersistentStore:
    """Build the persistent store named by ``config.storage.backend``."""
    if config.storage.backend == "memory":
        return MemoryStore()
    return JsonFileStore(config.storage.path)


class Container(containers.DeclarativeContainer):
    """Dependency Injection container for LocalVault services."""

    # Configuration
    config = providers.Singleton(load_settings)

    statistics = providers.Singleton(CacheStatistics)

    store = providers.Singleton(create_store, config=config)

    notifier = providers.Singleton(
        ChangeNotifier,
        store=store,
        statistics=statistics,
    )

    cache = providers.Singleton(
        TTLCache,
        store=store,
        notifier=notifier,
        default_ttl=providers.Callable(
            lambda config: config.cache.default_ttl,
            config=config,
        ),
        statistics=statistics,
        invalidate_on_external_change=providers.Callable(
            lambda config: config.cache.invalidate_on_external_change,
            config=config,
        ),
    )

    migrator = providers.Singleton(
        SchemaMigrator,
        store=store,
        version_key=providers.Callable(
            lambda config: config.storage.schema_version_key,
            config=config,
        ),
    )

    todo_repository = providers.Singleton(
        TodoRepository,
        cache=cache,
        key=providers.Callable(
            lambda config: config.storage.todos_key,
            config=config,
        ),
    )

    preferences = providers.Singleton(
        Preferences,
        cache=cache,
        key_prefix=providers.Callable(
            lambda config: config.storage.key_prefix,
            config=config,
        ),
    )


def bootstrap(container: Container, target_version: int | None = None) -> MigrationResult:
    """Run the todo schema migration before the cache is used.

    The migration writes to the store directly, so the cache is emptied
    afterwards.

    Raises:
        MigrationError: If the stored todos cannot be migrated.
    """
    settings = container.config()
    target = settings.storage.schema_version if target_version is None else target_version
    store = container.store()

    result = container.migrator().run_migration(
        target,
        make_todo_migration(store, settings.storage.todos_key),
    )
    container.cache().invalidate_all()
    if result.applied:
        logger.info(
            "Storage migrated from v%d to v%d",
            result.from_version,
            result.to_version,
        )
    return result


__all__ = ["Container", "bootstrap", "create_store"]
