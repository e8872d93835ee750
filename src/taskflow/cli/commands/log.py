"""taskflow log -- show the rule firing audit log."""

from __future__ import annotations

import click


@click.command()
@click.option("--rule", "rule_id", default=None, help="Only firings of this rule.")
@click.option("--task", "task_id", default=None, help="Only firings on this task.")
@click.option("-n", "--limit", default=20, type=int, help="Maximum number of entries to show.")
@click.pass_context
def log(ctx: click.Context, rule_id: str | None, task_id: str | None, limit: int) -> None:
    """Show recent rule firings, newest first."""
    from taskflow.cli import _board_session
    from taskflow.cli.formatting import format_firing_log

    with _board_session(ctx) as (board, console):
        entries = board.firing_log(rule_id, task_id=task_id, limit=limit)
        format_firing_log(entries, console)
