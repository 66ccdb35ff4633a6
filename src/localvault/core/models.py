"""Todo domain model.

Records are persisted as JSON objects using the camelCase field names of the
stored schema (``createdAt``); Python code uses snake_case attributes.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from localvault.shared.constants import Priority


class Todo(BaseModel):
    """A single todo item (schema version 2).

    Attributes:
        id: Unique identifier.
        text: Todo text with priority markers and tags stripped.
        completed: Completion status.
        created_at: Creation time as Unix seconds.
        position: Ordering key; unique and non-negative across a list.
        priority: 0 (none) to 3 (high).
        tags: Tags parsed from ``#tag`` words.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1)
    text: str
    completed: bool = False
    created_at: int = Field(..., alias="createdAt", ge=0)
    position: int = Field(default=0, ge=0)
    priority: int = Field(default=Priority.NONE, ge=Priority.NONE, le=Priority.HIGH)
    tags: list[str] = Field(default_factory=list)

    def to_record(self) -> dict[str, object]:
        """Dump in the stored (camelCase) layout."""
        return self.model_dump(by_alias=True)
