"""Logging configuration model."""

from __future__ import annotations

from pydantic import BaseModel, Field


class LoggingSettings(BaseModel):
    """Logging configuration.

    This class manages logging behavior including level, file output and
    whether the console handler renders through rich.
    """

    level: str = Field(default="WARNING", description="Logging level")
    file: str | None = Field(default=None, description="JSON log file path")
    use_rich: bool = Field(default=True, description="Render console logs with rich")


__all__ = ["LoggingSettings"]
