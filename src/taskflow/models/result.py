"""Result types produced by the automation engine and the task board.

Immutable: once evaluation completes, the result is final.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from taskflow.models.task import Task


@dataclass(frozen=True)
class Notification:
    """A ``send_notification`` action reported by a fired rule.

    The engine never delivers notifications; the caller routes them.
    """

    rule_id: str
    rule_name: str
    task_id: str
    message: str


@dataclass(frozen=True)
class ActionOutcome:
    """Effect of applying one action: a field patch and an optional message."""

    patch: dict[str, Any] = field(default_factory=dict)
    notification: str | None = None

    @property
    def is_noop(self) -> bool:
        return not self.patch and self.notification is None


@dataclass(frozen=True)
class AutomationResult:
    """Outcome of one pass of the automation engine over a task mutation.

    ``patches`` maps each fired rule id to the merged patch it applied
    (empty for notification-only rules).
    """

    task: Task
    fired_rule_ids: list[str] = field(default_factory=list)
    notifications: list[Notification] = field(default_factory=list)
    patches: dict[str, dict[str, Any]] = field(default_factory=dict)

    @property
    def fired(self) -> bool:
        return bool(self.fired_rule_ids)


@dataclass(frozen=True)
class MutationResult:
    """What :class:`~taskflow.board.TaskBoard` returns for a create or update."""

    task: Task
    fired_rule_ids: list[str] = field(default_factory=list)
    notifications: list[Notification] = field(default_factory=list)


@dataclass(frozen=True)
class FiringLogEntry:
    """A log entry recording one rule firing for audit purposes.

    Maps 1:1 with RuleFiringRow in the database.
    """

    id: int
    rule_id: str
    rule_name: str
    task_id: str
    event: str  # "created" or "updated"
    patch: dict[str, Any]
    notification: str | None
    created_at: datetime
