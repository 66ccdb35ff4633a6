"""
Storage Key and Area Constants

Well-known keys persisted by LocalVault and the names of storage areas that
travel with every change event.
"""

from typing import ClassVar


class StorageArea:
    """Storage area names carried in change events."""

    LOCAL = "local"
    SESSION = "session"
    FILE = "file"


class StorageKeys:
    """Key suffixes, joined with the configured key prefix."""

    DEFAULT_PREFIX = "localvault-"

    TODOS = "todos"
    SCHEMA_VERSION = "schema-version"
    FILTER = "filter"
    THEME = "theme"
    DARK_MODE = "dark-mode"
    ANIM_SPEED = "anim-speed"
    FONT_SIZE = "font-size"


class ChangeOrigin:
    """Where a change notification came from."""

    LOCAL = "local"
    EXTERNAL = "external"


class Observers:
    """Observer registry constants."""

    WILDCARD = "*"


class SchemaConfig:
    """Schema version bookkeeping."""

    INITIAL_VERSION = 0
    TODO_SCHEMA_VERSION = 2

    # Fields every legacy todo record must carry, with the accepted types
    REQUIRED_TODO_FIELDS: ClassVar[dict[str, tuple[type, ...]]] = {
        "id": (str,),
        "text": (str,),
        "completed": (bool,),
        "createdAt": (int, float),
    }


class TodoFilters:
    """Todo list filter names."""

    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"
    PRIORITY = "priority"

    VALUES: ClassVar[tuple[str, ...]] = (ALL, ACTIVE, COMPLETED, PRIORITY)


class Priority:
    """Priority markers parsed from todo text, highest first."""

    NONE = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3

    MARKERS: ClassVar[tuple[tuple[str, int], ...]] = (
        ("!!!", HIGH),
        ("!!", MEDIUM),
        ("!", LOW),
    )
    TAG_PREFIX = "#"
