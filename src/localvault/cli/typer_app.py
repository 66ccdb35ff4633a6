"""
LocalVault Typer CLI Application

Command line front end over the persistence stack: raw key access through
the TTL cache, schema migration and a small todo list manager.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, Any, Optional

import orjson
import typer
from rich.console import Console
from rich.table import Table

from localvault.cli.context import CliContext, LogLevel
from localvault.containers import bootstrap
from localvault.core.models import Todo
from localvault.shared.constants import (
    CLICommands,
    CLIDefaults,
    CLIHelp,
    CLIMessages,
    TodoFilters,
)
from localvault.shared.errors import LocalVaultError

logger = logging.getLogger(__name__)

# Version information
__version__ = CLIDefaults.VERSION

console = Console()
error_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version information and exit."""
    if value:
        typer.echo(CLIHelp.VERSION_TEXT.format(version=__version__))
        raise typer.Exit


def _emit_json(payload: Any, *, err: bool = False) -> None:
    typer.echo(orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode("utf-8"), err=err)


@contextmanager
def handle_errors(cli_context: CliContext, command: str) -> Iterator[None]:
    """Turn LocalVault errors into an error message and exit code 1."""
    try:
        yield
    except LocalVaultError as e:
        logger.debug("Command '%s' failed: %s", command, e)
        if cli_context.json_output:
            _emit_json(
                {"success": False, "command": command, "error": e.to_dict()},
                err=True,
            )
        else:
            error_console.print(CLIMessages.ERROR.format(error=e.message))
        raise typer.Exit(CLIDefaults.EXIT_ERROR) from e


def _get_context(ctx: typer.Context) -> CliContext:
    if isinstance(ctx.obj, CliContext):
        return ctx.obj
    return CliContext()


app = typer.Typer(
    name=CLIHelp.APP_NAME,
    help=CLIHelp.APP_DESCRIPTION,
    rich_markup_mode=CLIHelp.APP_STYLE,
    no_args_is_help=True,
)

todos_app = typer.Typer(help=CLIHelp.TODOS_HELP, no_args_is_help=True)
app.add_typer(todos_app, name=CLICommands.TODOS)


@app.callback()
def main(
    ctx: typer.Context,
    store: Annotated[
        Optional[Path],
        typer.Option("--store", "-s", help=CLIHelp.STORE_HELP, dir_okay=False),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help=CLIHelp.JSON_HELP),
    ] = False,
    log_level: Annotated[
        LogLevel,
        typer.Option("--log-level", help=CLIHelp.LOG_LEVEL_HELP, case_sensitive=False),
    ] = LogLevel.WARNING,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """Process the common options shared by every command."""
    ctx.obj = CliContext(store_path=store, json_output=json_output, log_level=log_level)


@app.command(CLICommands.GET)
def get_command(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Key to read")],
) -> None:
    """Print the value stored under KEY."""
    cli_context = _get_context(ctx)
    with handle_errors(cli_context, CLICommands.GET):
        value = cli_context.get_container().cache().get(key)

    if cli_context.json_output:
        _emit_json({"key": key, "value": value})
        if value is None:
            raise typer.Exit(CLIDefaults.EXIT_ERROR)
        return
    if value is None:
        error_console.print(CLIMessages.KEY_NOT_FOUND.format(key=key))
        raise typer.Exit(CLIDefaults.EXIT_ERROR)
    typer.echo(value)


@app.command(CLICommands.SET)
def set_command(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Key to write")],
    value: Annotated[str, typer.Argument(help="String value")],
) -> None:
    """Store VALUE under KEY."""
    cli_context = _get_context(ctx)
    with handle_errors(cli_context, CLICommands.SET):
        cli_context.get_container().cache().set(key, value)

    if cli_context.json_output:
        _emit_json({"success": True, "key": key})
    else:
        console.print(CLIMessages.KEY_SET.format(key=key))


@app.command(CLICommands.REMOVE)
def remove_command(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Key to delete")],
) -> None:
    """Delete KEY from the store."""
    cli_context = _get_context(ctx)
    with handle_errors(cli_context, CLICommands.REMOVE):
        cache = cli_context.get_container().cache()
        existed = cache.has_key(key)
        if existed:
            cache.remove(key)

    if cli_context.json_output:
        _emit_json({"success": existed, "key": key})
    elif existed:
        console.print(CLIMessages.KEY_REMOVED.format(key=key))
    else:
        error_console.print(CLIMessages.KEY_NOT_FOUND.format(key=key))
    if not existed:
        raise typer.Exit(CLIDefaults.EXIT_ERROR)


@app.command(CLICommands.KEYS)
def keys_command(ctx: typer.Context) -> None:
    """List every stored key."""
    cli_context = _get_context(ctx)
    with handle_errors(cli_context, CLICommands.KEYS):
        cache = cli_context.get_container().cache()
        rows = [(key, cache.get(key) or "") for key in cache.keys()]

    if cli_context.json_output:
        _emit_json({"keys": [key for key, _value in rows]})
        return

    table = Table(title=CLIHelp.APP_NAME)
    table.add_column("Key", style="cyan")
    table.add_column("Length", justify="right")
    for key, value in rows:
        table.add_row(key, str(len(value)))
    console.print(table)


@app.command(CLICommands.CLEAR)
def clear_command(
    ctx: typer.Context,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Do not ask for confirmation"),
    ] = False,
) -> None:
    """Delete every key from the store."""
    cli_context = _get_context(ctx)
    if not yes:
        typer.confirm("Delete every stored key?", abort=True)

    with handle_errors(cli_context, CLICommands.CLEAR):
        count = cli_context.get_container().cache().clear()

    if cli_context.json_output:
        _emit_json({"success": True, "removed": count})
    else:
        console.print(CLIMessages.STORE_CLEARED.format(count=count))


@app.command(CLICommands.MIGRATE)
def migrate_command(
    ctx: typer.Context,
    target: Annotated[
        Optional[int],
        typer.Option("--target", "-t", help=CLIHelp.TARGET_HELP, min=0),
    ] = None,
) -> None:
    """Upgrade the stored todo schema."""
    cli_context = _get_context(ctx)
    with handle_errors(cli_context, CLICommands.MIGRATE):
        result = bootstrap(cli_context.get_container(), target_version=target)

    if cli_context.json_output:
        _emit_json(
            {
                "applied": result.applied,
                "from_version": result.from_version,
                "to_version": result.to_version,
            }
        )
    elif result.applied:
        console.print(
            CLIMessages.MIGRATION_APPLIED.format(
                from_version=result.from_version,
                to_version=result.to_version,
            )
        )
    else:
        console.print(CLIMessages.MIGRATION_SKIPPED.format(version=result.to_version))


def _todo_table(todos: list[Todo]) -> Table:
    table = Table(title="Todos")
    table.add_column("Pos", justify="right")
    table.add_column("ID", style="dim")
    table.add_column("Done")
    table.add_column("Text")
    table.add_column("Priority", justify="right")
    table.add_column("Tags", style="magenta")
    for todo in todos:
        table.add_row(
            str(todo.position),
            todo.id,
            "x" if todo.completed else "",
            todo.text,
            str(todo.priority),
            " ".join(todo.tags),
        )
    return table


@todos_app.command(CLICommands.LIST)
def todos_list_command(
    ctx: typer.Context,
    filter_name: Annotated[
        Optional[str],
        typer.Option("--filter", "-f", help="all, active, completed or priority"),
    ] = None,
) -> None:
    """Show the todo list in position order."""
    cli_context = _get_context(ctx)
    with handle_errors(cli_context, CLICommands.LIST):
        container = cli_context.get_container()
        bootstrap(container)
        repository = container.todo_repository()
        repository.load()
        if filter_name is None:
            filter_name = container.preferences().filter
        elif filter_name not in TodoFilters.VALUES:
            raise typer.BadParameter(
                f"must be one of {', '.join(TodoFilters.VALUES)}",
                param_hint="--filter",
            )
        todos = repository.filtered(filter_name)

    if cli_context.json_output:
        _emit_json([todo.to_record() for todo in todos])
    else:
        console.print(_todo_table(todos))


@todos_app.command(CLICommands.ADD)
def todos_add_command(
    ctx: typer.Context,
    text: Annotated[str, typer.Argument(help="Todo text; !, !! or !!! set priority, #word adds a tag")],
) -> None:
    """Append a todo to the end of the list."""
    cli_context = _get_context(ctx)
    with handle_errors(cli_context, CLICommands.ADD):
        container = cli_context.get_container()
        bootstrap(container)
        repository = container.todo_repository()
        repository.load()
        todo = repository.add(text)

    if cli_context.json_output:
        _emit_json(todo.to_record())
    else:
        console.print(CLIMessages.TODO_ADDED.format(todo_id=todo.id))


@todos_app.command(CLICommands.MOVE)
def todos_move_command(
    ctx: typer.Context,
    source_id: Annotated[str, typer.Argument(help="ID of the todo to move")],
    target_id: Annotated[str, typer.Argument(help="ID of the todo whose slot it takes")],
) -> None:
    """Move a todo onto another todo's position."""
    cli_context = _get_context(ctx)
    with handle_errors(cli_context, CLICommands.MOVE):
        container = cli_context.get_container()
        bootstrap(container)
        repository = container.todo_repository()
        repository.load()
        todos = repository.reorder(source_id, target_id)
        moved = repository.get(source_id)

    if cli_context.json_output:
        _emit_json([todo.to_record() for todo in todos])
    elif moved is not None:
        console.print(
            CLIMessages.TODO_MOVED.format(source_id=source_id, position=moved.position)
        )


@todos_app.command(CLICommands.TOGGLE)
def todos_toggle_command(
    ctx: typer.Context,
    todo_id: Annotated[str, typer.Argument(help="ID of the todo")],
) -> None:
    """Flip the completion state of a todo."""
    cli_context = _get_context(ctx)
    with handle_errors(cli_context, CLICommands.TOGGLE):
        container = cli_context.get_container()
        bootstrap(container)
        repository = container.todo_repository()
        repository.load()
        todo = repository.toggle(todo_id)

    if cli_context.json_output:
        _emit_json(todo.to_record())
    else:
        state = "completed" if todo.completed else "active"
        console.print(CLIMessages.TODO_TOGGLED.format(todo_id=todo.id, state=state))


if __name__ == "__main__":
    app()
