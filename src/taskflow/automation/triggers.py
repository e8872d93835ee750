"""Trigger matching -- decides whether a rule is eligible to run.

Disabled rules never match.  The change-driven triggers look at the change
set plus the old/new values; ``due_date_approaching`` ignores the change set
and is recomputed from the evaluation clock on every call, so it keeps
matching for as long as the task sits inside the due window.
"""

from __future__ import annotations

from datetime import datetime

from taskflow.automation.changes import CREATED_ONLY
from taskflow.automation.fields import WatchedField
from taskflow.models.config import EngineConfig
from taskflow.models.rule import AutomationRule, RuleTrigger, enum_or_raw
from taskflow.models.task import Task, ensure_utc, utcnow


def hours_until(due: datetime, now: datetime) -> float:
    """Hours from *now* until *due* (negative once overdue)."""
    return (ensure_utc(due) - ensure_utc(now)).total_seconds() / 3600.0


def is_due_soon(due: datetime | None, now: datetime, window_hours: float = 24.0) -> bool:
    """True iff ``0 < hours_until(due) <= window_hours``."""
    if not isinstance(due, datetime):
        return False
    remaining = hours_until(due, now)
    return 0 < remaining <= window_hours


def matches(
    rule: AutomationRule,
    old_task: Task | None,
    new_task: Task,
    changes: frozenset[str],
    *,
    now: datetime | None = None,
    config: EngineConfig | None = None,
) -> bool:
    """Return True if *rule*'s trigger fires for this mutation."""
    if getattr(rule, "enabled", False) is not True:
        return False

    trigger = enum_or_raw(RuleTrigger, getattr(rule, "trigger", None))

    if trigger is RuleTrigger.STATUS_CHANGED:
        return (
            WatchedField.STATUS.value in changes
            and old_task is not None
            and old_task.status != new_task.status
        )

    if trigger is RuleTrigger.PRIORITY_CHANGED:
        return (
            WatchedField.PRIORITY.value in changes
            and old_task is not None
            and old_task.priority != new_task.priority
        )

    if trigger is RuleTrigger.ASSIGNED:
        return (
            WatchedField.ASSIGNED_TO.value in changes
            and old_task is not None
            and old_task.assigned_to != new_task.assigned_to
            and bool(new_task.assigned_to)
        )

    if trigger is RuleTrigger.CREATED:
        return changes == CREATED_ONLY

    if trigger is RuleTrigger.DUE_DATE_APPROACHING:
        window = (config or EngineConfig()).due_window_hours
        return is_due_soon(new_task.due_date, now or utcnow(), window)

    return False
