"""Rich formatting helpers for the Taskflow CLI.

Provides functions that format SDK data structures for terminal display.
Rich auto-detects TTY and degrades gracefully when piped (no ANSI codes).
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from taskflow.models.result import (
        AutomationResult,
        FiringLogEntry,
        MutationResult,
        Notification,
    )
    from taskflow.models.rule import AutomationRule
    from taskflow.models.task import Task

_STATUS_STYLES = {
    "todo": "white",
    "in-progress": "cyan",
    "review": "magenta",
    "blocked": "red",
    "done": "green",
}

_PRIORITY_STYLES = {
    "low": "dim",
    "medium": "white",
    "high": "yellow",
    "urgent": "bold red",
}


def get_console() -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=False)


def _value(v: object) -> str:
    return str(getattr(v, "value", v))


def _when(dt: datetime | None, fmt: str = "%Y-%m-%d %H:%M") -> str:
    return dt.strftime(fmt) if isinstance(dt, datetime) else "-"


def _styled(value: object, styles: dict[str, str]) -> str:
    text = _value(value)
    style = styles.get(text, "white")
    return f"[{style}]{escape(text)}[/{style}]"


def format_tasks_table(tasks: list[Task], console: Console) -> None:
    """Display tasks in compact table format."""
    if not tasks:
        console.print("[dim]No tasks.[/dim]")
        return

    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("ID", style="yellow")
    table.add_column("Status")
    table.add_column("Priority")
    table.add_column("Assignee", style="cyan")
    table.add_column("Due", style="dim")
    table.add_column("Title")

    for task in tasks:
        table.add_row(
            task.id,
            _styled(task.status, _STATUS_STYLES),
            _styled(task.priority, _PRIORITY_STYLES),
            escape(task.assigned_to or "-"),
            _when(task.due_date),
            escape(task.title),
        )

    console.print(table)


def format_task_detail(task: Task, console: Console) -> None:
    """Display every field of a single task."""
    console.print(f"[yellow]task {task.id}[/yellow]")
    console.print(f"  Title:     {escape(task.title)}")
    if task.description:
        console.print(f"  About:     {escape(task.description)}")
    console.print(f"  Status:    {_styled(task.status, _STATUS_STYLES)}")
    console.print(f"  Priority:  {_styled(task.priority, _PRIORITY_STYLES)}")
    console.print(f"  Category:  {_value(task.category)}")
    if task.tags:
        console.print(f"  Tags:      {escape(', '.join(task.tags))}")
    if task.assigned_to:
        console.print(f"  Assignee:  [cyan]{escape(task.assigned_to)}[/cyan]")
    if task.due_date:
        console.print(f"  Due:       {_when(task.due_date)}")
    if task.completion_percentage is not None:
        console.print(f"  Progress:  {task.completion_percentage:g}%")
    if task.estimated_hours is not None:
        console.print(f"  Estimate:  {task.estimated_hours:g}h")
    console.print(f"  Created:   {_when(task.created_at, '%Y-%m-%d %H:%M:%S')}")
    console.print(f"  Updated:   {_when(task.updated_at, '%Y-%m-%d %H:%M:%S')}")


def format_rules_table(rules: list[AutomationRule], console: Console) -> None:
    """Display automation rules in compact table format."""
    if not rules:
        console.print("[dim]No rules.[/dim]")
        return

    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("ID", style="yellow")
    table.add_column("On")
    table.add_column("Trigger", style="cyan")
    table.add_column("Conds", justify="right")
    table.add_column("Actions", justify="right")
    table.add_column("Fired", justify="right", style="green")
    table.add_column("Name")

    for rule in rules:
        table.add_row(
            rule.id,
            "[green]yes[/green]" if rule.enabled is True else "[dim]no[/dim]",
            escape(_value(rule.trigger)),
            str(len(rule.conditions)),
            str(len(rule.actions)),
            str(rule.trigger_count),
            escape(rule.name),
        )

    console.print(table)


def format_rule_detail(rule: AutomationRule, console: Console) -> None:
    """Display a rule with its conditions and actions."""
    state = "[green]enabled[/green]" if rule.enabled is True else "[dim]disabled[/dim]"
    console.print(f"[yellow]rule {rule.id}[/yellow] ({state})")
    console.print(f"  Name:      {escape(rule.name)}")
    if rule.description:
        console.print(f"  About:     {escape(rule.description)}")
    console.print(f"  Trigger:   [cyan]{escape(_value(rule.trigger))}[/cyan]")
    console.print(f"  Fired:     {rule.trigger_count} time(s)")
    if rule.last_triggered:
        console.print(f"  Last:      {_when(rule.last_triggered, '%Y-%m-%d %H:%M:%S')}")

    if rule.conditions:
        console.print()
        console.print("[bold]When:[/bold]")
        for cond in rule.conditions:
            console.print(
                f"  {escape(cond.field)} {escape(_value(cond.operator))} {escape(repr(cond.value))}"
            )

    if rule.actions:
        console.print()
        console.print("[bold]Then:[/bold]")
        for action in rule.actions:
            params = ", ".join(f"{k}={v!r}" for k, v in action.parameters.items())
            console.print(f"  {escape(_value(action.action))}({escape(params)})")


def format_notifications(notifications: list[Notification], console: Console) -> None:
    for n in notifications:
        console.print(
            f"[magenta]notify[/magenta] [dim]({escape(n.rule_name or n.rule_id)})[/dim] "
            f"{escape(n.message)}"
        )


def format_mutation(result: MutationResult, console: Console, *, verb: str) -> None:
    """Summarize a create/update: the task id plus whatever automation did."""
    task = result.task
    console.print(
        f"{verb} [yellow]{task.id}[/yellow] "
        f"{_styled(task.status, _STATUS_STYLES)} {_styled(task.priority, _PRIORITY_STYLES)} "
        f"{escape(task.title)}"
    )
    if result.fired_rule_ids:
        console.print(f"  Rules fired: {escape(', '.join(result.fired_rule_ids))}")
    format_notifications(result.notifications, console)


def format_evaluation(result: AutomationResult, console: Console) -> None:
    """Display a dry-run engine result: per-rule patches and notifications."""
    if not result.fired:
        console.print("[dim]No rules fired.[/dim]")
        return

    for rule_id in result.fired_rule_ids:
        patch = result.patches.get(rule_id, {})
        changes = ", ".join(f"{k}={_value(v)}" for k, v in patch.items()) or "no field changes"
        console.print(f"[green]fired[/green] [yellow]{escape(rule_id)}[/yellow]: {escape(changes)}")
    format_notifications(result.notifications, console)


def format_firing_log(entries: list[FiringLogEntry], console: Console) -> None:
    """Display the rule firing audit log."""
    if not entries:
        console.print("[dim]No rule firings.[/dim]")
        return

    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Time", style="dim")
    table.add_column("Rule", style="yellow")
    table.add_column("Task", style="cyan")
    table.add_column("Event")
    table.add_column("Changes")
    table.add_column("Notification")

    for entry in entries:
        changes = ", ".join(f"{k}={v}" for k, v in entry.patch.items())
        table.add_row(
            _when(entry.created_at),
            escape(entry.rule_name or entry.rule_id),
            entry.task_id,
            entry.event,
            escape(changes),
            escape(entry.notification or ""),
        )

    console.print(table)


def format_error(message: str, console: Console) -> None:
    """Display an error message."""
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)
