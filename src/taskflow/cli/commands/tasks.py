"""taskflow task -- create, update and inspect tasks."""

from __future__ import annotations

from datetime import datetime

import click

from taskflow.models.task import TaskCategory, TaskPriority, TaskStatus

_DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M", "%Y-%m-%dT%H:%M:%S"]

_STATUS = click.Choice([s.value for s in TaskStatus])
_PRIORITY = click.Choice([p.value for p in TaskPriority])
_CATEGORY = click.Choice([c.value for c in TaskCategory])


@click.group()
def task() -> None:
    """Create, update and inspect tasks."""


@task.command()
@click.option("--title", required=True, help="Task title.")
@click.option("--description", default=None, help="Longer description.")
@click.option("--status", type=_STATUS, default=None, help="Initial status.")
@click.option("--priority", type=_PRIORITY, default=None, help="Initial priority.")
@click.option("--category", type=_CATEGORY, default=None, help="Task category.")
@click.option("--tag", "tags", multiple=True, help="Tag (repeatable).")
@click.option("--assign", "assigned_to", default=None, help="Assignee.")
@click.option("--due", "due_date", type=click.DateTime(_DATE_FORMATS), default=None, help="Due date (UTC).")
@click.pass_context
def add(
    ctx: click.Context,
    title: str,
    description: str | None,
    status: str | None,
    priority: str | None,
    category: str | None,
    tags: tuple[str, ...],
    assigned_to: str | None,
    due_date: datetime | None,
) -> None:
    """Create a task; ``created`` rules run on it."""
    from taskflow.cli import _board_session
    from taskflow.cli.formatting import format_mutation

    fields: dict = {"title": title}
    if description is not None:
        fields["description"] = description
    if status is not None:
        fields["status"] = status
    if priority is not None:
        fields["priority"] = priority
    if category is not None:
        fields["category"] = category
    if tags:
        fields["tags"] = list(tags)
    if assigned_to is not None:
        fields["assigned_to"] = assigned_to
    if due_date is not None:
        fields["due_date"] = due_date

    with _board_session(ctx) as (board, console):
        format_mutation(board.create_task(**fields), console, verb="Created")


@task.command()
@click.argument("task_id")
@click.option("--title", default=None, help="New title.")
@click.option("--status", type=_STATUS, default=None, help="New status.")
@click.option("--priority", type=_PRIORITY, default=None, help="New priority.")
@click.option("--assign", "assigned_to", default=None, help="New assignee.")
@click.option("--unassign", is_flag=True, help="Clear the assignee.")
@click.option("--due", "due_date", type=click.DateTime(_DATE_FORMATS), default=None, help="New due date (UTC).")
@click.option("--progress", type=click.FloatRange(0, 100), default=None, help="Completion percentage.")
@click.option("--hours", type=click.FloatRange(min=0), default=None, help="Estimated hours.")
@click.pass_context
def update(
    ctx: click.Context,
    task_id: str,
    title: str | None,
    status: str | None,
    priority: str | None,
    assigned_to: str | None,
    unassign: bool,
    due_date: datetime | None,
    progress: float | None,
    hours: float | None,
) -> None:
    """Update TASK_ID; matching rules run on the change."""
    from taskflow.cli import _board_session
    from taskflow.cli.formatting import format_error, format_mutation, get_console

    if unassign and assigned_to is not None:
        format_error("--assign and --unassign are mutually exclusive.", get_console())
        raise SystemExit(1)

    changes: dict = {}
    if title is not None:
        changes["title"] = title
    if status is not None:
        changes["status"] = status
    if priority is not None:
        changes["priority"] = priority
    if assigned_to is not None:
        changes["assigned_to"] = assigned_to
    if unassign:
        changes["assigned_to"] = None
    if due_date is not None:
        changes["due_date"] = due_date
    if progress is not None:
        changes["completion_percentage"] = progress
    if hours is not None:
        changes["estimated_hours"] = hours

    with _board_session(ctx) as (board, console):
        format_mutation(board.update_task(task_id, **changes), console, verb="Updated")


@task.command("list")
@click.option("--status", type=_STATUS, default=None, help="Only tasks with this status.")
@click.pass_context
def list_tasks(ctx: click.Context, status: str | None) -> None:
    """List tasks in creation order."""
    from taskflow.cli import _board_session
    from taskflow.cli.formatting import format_tasks_table

    with _board_session(ctx) as (board, console):
        format_tasks_table(board.list_tasks(status=status), console)


@task.command()
@click.argument("task_id")
@click.pass_context
def show(ctx: click.Context, task_id: str) -> None:
    """Show every field of TASK_ID."""
    from taskflow.cli import _board_session
    from taskflow.cli.formatting import format_task_detail

    with _board_session(ctx) as (board, console):
        format_task_detail(board.get_task(task_id), console)
