"""
CLI Context Management Module

Holds the options parsed by the main callback and the lazily built service
container shared by every command of one invocation.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any

from dependency_injector import providers
from pydantic import BaseModel, Field

from localvault.config.loader import get_config
from localvault.containers import Container
from localvault.shared.logging import setup_structured_logger

logger = logging.getLogger(__name__)


class LogLevel(str, Enum):
    """Log level enumeration for type safety."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class CliContext(BaseModel):
    """
    CLI context model for managing per-invocation state.

    Attributes:
        store_path: JSON store file overriding the configured one
        json_output: Whether to output in JSON format
        log_level: Logging level
    """

    store_path: Path | None = Field(default=None, description="Store file override")
    json_output: bool = Field(default=False, description="Output JSON")
    log_level: LogLevel = Field(default=LogLevel.WARNING, description="Logging level")
    # dependency-injector returns a DynamicContainer instance, not a Container
    container: Any = Field(default=None, exclude=True)

    def get_container(self) -> Container:
        """Build the service container on first use."""
        if self.container is not None:
            return self.container

        settings = get_config()
        if self.store_path is not None:
            storage = settings.storage.model_copy(
                update={"backend": "file", "path": str(self.store_path)},
            )
            settings = settings.model_copy(update={"storage": storage})

        setup_structured_logger(
            level=self.log_level.value,
            log_file=settings.logging.file,
            use_rich_console=settings.logging.use_rich,
        )

        container = Container()
        container.config.override(providers.Object(settings))
        self.container = container
        logger.debug("Using %s store at %s", settings.storage.backend, settings.storage.path)
        return container
