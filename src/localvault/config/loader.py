"""Settings loader and singleton manager.

This module handles:
- Environment variable loading from .env files
- Configuration file loading from TOML
- Thread-safe singleton pattern for the Settings instance
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from dotenv import load_dotenv

from localvault.config.models.settings import Settings
from localvault.shared.errors import create_config_error

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATHS: tuple[Path, ...] = (
    Path("config/localvault.toml"),
    Path("localvault.toml"),
    Path.home() / ".localvault" / "config.toml",
)


def _load_env_file(env_file: Path = Path(".env")) -> bool:
    """Load environment variables from a .env file if one exists.

    Variables already present in the environment win.

    Returns:
        True if a file was loaded.
    """
    if not env_file.exists():
        return False
    loaded = load_dotenv(env_file, override=False)
    logger.debug("Loaded environment from %s", env_file)
    return loaded


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings from a TOML file or the environment.

    Args:
        config_path: Optional TOML file. When None the default locations are
            tried in order, falling back to environment variables only.

    Raises:
        ApplicationError: If the given file is missing or invalid.
    """
    _load_env_file()

    if config_path:
        try:
            return Settings.from_toml_file(config_path)
        except (OSError, ValueError) as e:
            raise create_config_error(
                f"Cannot load configuration from {config_path}: {e}",
                operation="load_settings",
                original_error=e,
            ) from e

    for default_path in DEFAULT_CONFIG_PATHS:
        if default_path.exists():
            return Settings.from_toml_file(default_path)

    return Settings()


class SettingsLoader:
    """Thread-safe singleton manager for Settings.

    Uses double-checked locking so the lock is only taken while loading.
    """

    _instance: Settings | None = None
    _lock: threading.RLock = threading.RLock()

    def get_config(self) -> Settings:
        if self._instance is None:
            with self._lock:
                if self._instance is None:
                    self._instance = load_settings()
        return self._instance

    def reload_config(self) -> Settings:
        with self._lock:
            self._instance = load_settings()
        return self._instance


_loader = SettingsLoader()


def get_config() -> Settings:
    """Get the global settings instance, loading it if necessary."""
    return _loader.get_config()


def reload_config() -> Settings:
    """Reload the global settings instance from configuration files."""
    return _loader.reload_config()


__all__ = [
    "SettingsLoader",
    "get_config",
    "load_settings",
    "reload_config",
]
