"""
Pytest configuration and shared fixtures for LocalVault tests.

This module provides common fixtures used across the test packages: an
injectable clock, in-memory stores and a cache wired to them.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from localvault.core.statistics import CacheStatistics
from localvault.services.cache import TTLCache
from localvault.services.notifier import ChangeNotifier
from localvault.storage.file_store import JsonFileStore
from localvault.storage.memory_store import MemoryStore


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    """Clock starting at t=1000s."""
    return FakeClock()


@pytest.fixture
def memory_store() -> MemoryStore:
    """Empty, available in-memory store."""
    return MemoryStore()


@pytest.fixture
def statistics() -> CacheStatistics:
    return CacheStatistics()


@pytest.fixture
def notifier(memory_store: MemoryStore, statistics: CacheStatistics) -> ChangeNotifier:
    return ChangeNotifier(memory_store, statistics=statistics)


@pytest.fixture
def cache(
    memory_store: MemoryStore,
    notifier: ChangeNotifier,
    clock: FakeClock,
    statistics: CacheStatistics,
) -> TTLCache:
    """TTL cache with a 60s default TTL over the memory store."""
    return TTLCache(
        memory_store,
        notifier,
        default_ttl=60,
        clock=clock,
        statistics=statistics,
    )


@pytest.fixture
def store_file(tmp_path: Path) -> Path:
    """Location of a not yet existing JSON store file."""
    return tmp_path / "store.json"


@pytest.fixture
def file_store(store_file: Path) -> JsonFileStore:
    return JsonFileStore(store_file)
