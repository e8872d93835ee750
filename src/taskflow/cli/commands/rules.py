"""taskflow rules -- manage automation rules."""

from __future__ import annotations

import json
from pathlib import Path

import click


@click.group()
def rules() -> None:
    """List, inspect and edit automation rules."""


@rules.command("list")
@click.pass_context
def list_rules(ctx: click.Context) -> None:
    """List all rules in evaluation order."""
    from taskflow.cli import _board_session
    from taskflow.cli.formatting import format_rules_table

    with _board_session(ctx) as (board, console):
        format_rules_table(board.list_rules(), console)


@rules.command()
@click.argument("rule_id")
@click.pass_context
def show(ctx: click.Context, rule_id: str) -> None:
    """Show RULE_ID with its conditions and actions."""
    from taskflow.cli import _board_session
    from taskflow.cli.formatting import format_rule_detail

    with _board_session(ctx) as (board, console):
        format_rule_detail(board.get_rule(rule_id), console)


@rules.command()
@click.argument("file", type=click.Path(allow_dash=True))
@click.option("--replace", is_flag=True, help="Overwrite rules whose id already exists.")
@click.pass_context
def add(ctx: click.Context, file: str, replace: bool) -> None:
    """Add rules from a JSON FILE (one rule object or a list of them).

    Use ``-`` to read from stdin.
    """
    from taskflow.cli import _board_session, _load_json

    with _board_session(ctx) as (board, console):
        data = _load_json(file)
        if isinstance(data, dict):
            data = [data]
        if not isinstance(data, list):
            raise click.UsageError("Rule file must contain an object or a list of objects.")
        added = board.import_rules(data, replace=replace)
        for rule in added:
            console.print(f"Added rule [yellow]{rule.id}[/yellow] ({rule.name})")


def _set_enabled(ctx: click.Context, rule_id: str, enabled: bool) -> None:
    from taskflow.cli import _board_session

    with _board_session(ctx) as (board, console):
        rule = board.toggle_rule(rule_id, enabled)
        state = "enabled" if enabled else "disabled"
        console.print(f"Rule [yellow]{rule.id}[/yellow] {state}")


@rules.command()
@click.argument("rule_id")
@click.pass_context
def enable(ctx: click.Context, rule_id: str) -> None:
    """Enable RULE_ID."""
    _set_enabled(ctx, rule_id, True)


@rules.command()
@click.argument("rule_id")
@click.pass_context
def disable(ctx: click.Context, rule_id: str) -> None:
    """Disable RULE_ID."""
    _set_enabled(ctx, rule_id, False)


@rules.command()
@click.argument("rule_id")
@click.pass_context
def remove(ctx: click.Context, rule_id: str) -> None:
    """Delete RULE_ID."""
    from taskflow.cli import _board_session

    with _board_session(ctx) as (board, console):
        board.delete_rule(rule_id)
        console.print(f"Removed rule [yellow]{rule_id}[/yellow]")


@rules.command()
@click.argument("file", required=False, type=click.Path(dir_okay=False))
@click.pass_context
def export(ctx: click.Context, file: str | None) -> None:
    """Export all rules as JSON to FILE, or stdout if omitted."""
    from taskflow.cli import _board_session

    with _board_session(ctx) as (board, console):
        text = json.dumps(board.export_rules(), indent=2)
        if file is None:
            click.echo(text)
        else:
            Path(file).write_text(text + "\n", encoding="utf-8")
            console.print(f"Exported rules to {file}")
