"""Configuration models for LocalVault."""

from localvault.config.models.cache_settings import CacheSettings
from localvault.config.models.logging_settings import LoggingSettings
from localvault.config.models.settings import Settings
from localvault.config.models.storage_settings import StorageSettings

__all__ = [
    "CacheSettings",
    "LoggingSettings",
    "Settings",
    "StorageSettings",
]
