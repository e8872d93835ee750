"""Taskflow CLI -- terminal interface for tasks and automation rules.

This module is NEVER imported from taskflow/__init__.py.
It is only loaded via the ``taskflow`` entry point defined in pyproject.toml.
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

try:
    import click
except ImportError:
    raise ImportError(
        "CLI dependencies not installed. Install with: pip install taskflow[cli]"
    ) from None

from taskflow.cli.formatting import format_error, get_console

if TYPE_CHECKING:
    from collections.abc import Iterator

    from rich.console import Console

    from taskflow.board import TaskBoard


@click.group()
@click.option(
    "--db",
    default=".taskflow.db",
    envvar="TASKFLOW_DB",
    help="Path to taskflow database.",
)
@click.option("-v", "--verbose", is_flag=True, help="Log engine activity to stderr.")
@click.pass_context
def cli(ctx: click.Context, db: str, verbose: bool) -> None:
    """Taskflow: tasks with trigger -> condition -> action automation."""
    ctx.ensure_object(dict)
    ctx.obj["db_path"] = db
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )


def _get_board(ctx: click.Context) -> TaskBoard:
    """Open a TaskBoard from Click context."""
    from taskflow.board import TaskBoard

    return TaskBoard.open(path=ctx.obj["db_path"])


@contextmanager
def _board_session(ctx: click.Context) -> Iterator[tuple[TaskBoard, Console]]:
    """Context manager that opens a TaskBoard, yields (board, console), and handles cleanup.

    Ensures the board is closed on exit and formats exceptions as CLI errors.
    """
    console = get_console()
    try:
        board = _get_board(ctx)
        try:
            yield board, console
        finally:
            board.close()
    except SystemExit:
        raise
    except Exception as e:
        format_error(str(e), console)
        raise SystemExit(1) from None


def _load_json(path: str) -> Any:
    """Read a JSON document from *path* (``-`` for stdin)."""
    if path == "-":
        return json.load(click.get_text_stream("stdin"))
    return json.loads(Path(path).read_text(encoding="utf-8"))


# Register subcommands after cli group is defined
from taskflow.cli.commands.rules import rules  # noqa: E402
from taskflow.cli.commands.tasks import task  # noqa: E402
from taskflow.cli.commands.log import log  # noqa: E402
from taskflow.cli.commands.evaluate import evaluate  # noqa: E402

cli.add_command(rules)
cli.add_command(task)
cli.add_command(log)
cli.add_command(evaluate)
