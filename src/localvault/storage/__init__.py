"""Persistent store implementations for LocalVault."""

from localvault.storage.base import PersistentStore, StorageEvent, StoreListener
from localvault.storage.file_store import JsonFileStore
from localvault.storage.memory_store import MemoryStore

__all__ = [
    "JsonFileStore",
    "MemoryStore",
    "PersistentStore",
    "StorageEvent",
    "StoreListener",
]
