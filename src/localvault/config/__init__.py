"""LocalVault Configuration Module

This module provides unified access to configuration models and settings
management:
- Settings: Main configuration facade
- Loader functions: get_config, load_settings, reload_config
- Domain models: Cache, Storage, Logging settings
"""

from __future__ import annotations

from .loader import get_config, load_settings, reload_config
from .models import CacheSettings, LoggingSettings, Settings, StorageSettings

__all__ = [
    "CacheSettings",
    "LoggingSettings",
    "Settings",
    "StorageSettings",
    "get_config",
    "load_settings",
    "reload_config",
]
