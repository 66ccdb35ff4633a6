"""
CLI Configuration Constants

Command names, help text and defaults for the localvault command line.
"""


class CLIDefaults:
    """CLI default values."""

    VERSION = "0.3.0"
    STORE_FILE = "localvault.json"
    EXIT_ERROR = 1


class CLICommands:
    """Command names."""

    GET = "get"
    SET = "set"
    REMOVE = "remove"
    KEYS = "keys"
    CLEAR = "clear"
    MIGRATE = "migrate"
    TODOS = "todos"
    LIST = "list"
    ADD = "add"
    MOVE = "move"
    TOGGLE = "toggle"


class CLIHelp:
    """Help strings."""

    APP_NAME = "localvault"
    APP_DESCRIPTION = "Inspect and edit a LocalVault key-value store."
    APP_STYLE = "rich"
    VERSION_TEXT = "LocalVault v{version}"

    STORE_HELP = "Path of the JSON store file"
    JSON_HELP = "Print machine-readable JSON output"
    LOG_LEVEL_HELP = "Log level (DEBUG, INFO, WARNING, ERROR)"
    TARGET_HELP = "Schema version to migrate to"
    TODOS_HELP = "Manage the todo list"


class CLIMessages:
    """Message templates."""

    KEY_NOT_FOUND = "Key '{key}' not found"
    KEY_SET = "Set '{key}'"
    KEY_REMOVED = "Removed '{key}'"
    STORE_CLEARED = "Cleared {count} key(s)"
    MIGRATION_APPLIED = "Migrated schema from v{from_version} to v{to_version}"
    MIGRATION_SKIPPED = "Schema already at v{version}, nothing to do"
    TODO_ADDED = "Added todo {todo_id}"
    TODO_MOVED = "Moved {source_id} to position {position}"
    TODO_TOGGLED = "Todo {todo_id} is now {state}"
    ERROR = "[red]Error:[/red] {error}"
