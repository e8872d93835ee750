"""Action application -- turns one rule action into a task patch.

Patches use Task attribute names (``assigned_to``), ready for
``Task.model_copy(update=patch)``.  Missing or unusable parameters make the
action a no-op; nothing here raises.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from taskflow.models.config import EngineConfig
from taskflow.models.result import ActionOutcome
from taskflow.models.rule import ActionItem, ActionKind, enum_or_raw
from taskflow.models.task import Task, TaskPriority, TaskStatus

logger = logging.getLogger(__name__)

_NOOP = ActionOutcome()


def _member(enum_cls: type[enum.Enum], value: object) -> enum.Enum | None:
    if not value:
        return None
    member = enum_or_raw(enum_cls, value)
    if isinstance(member, enum_cls):
        return member
    logger.debug("Ignoring unknown %s value %r", enum_cls.__name__, value)
    return None


def apply_action(
    task: Task, action: ActionItem, *, config: EngineConfig | None = None
) -> ActionOutcome:
    """Compute the effect of *action* on *task*."""
    kind = enum_or_raw(ActionKind, getattr(action, "action", None))
    params = getattr(action, "parameters", None)
    if not isinstance(params, Mapping):
        params = {}

    if kind is ActionKind.SET_STATUS:
        status = _member(TaskStatus, params.get("status"))
        return ActionOutcome(patch={"status": status}) if status else _NOOP

    if kind is ActionKind.SET_PRIORITY:
        priority = _member(TaskPriority, params.get("priority"))
        return ActionOutcome(patch={"priority": priority}) if priority else _NOOP

    if kind is ActionKind.ASSIGN_TO:
        # An explicit empty string (or null) unassigns; only a missing key is a no-op.
        if "assignedTo" not in params:
            return _NOOP
        assignee = params["assignedTo"]
        if assignee is not None and not isinstance(assignee, str):
            return _NOOP
        return ActionOutcome(patch={"assigned_to": assignee})

    if kind is ActionKind.ADD_TAG:
        tag = params.get("tag")
        if not isinstance(tag, str) or not tag or tag in task.tags:
            return _NOOP
        return ActionOutcome(patch={"tags": [*task.tags, tag]})

    if kind is ActionKind.SEND_NOTIFICATION:
        message = params.get("message")
        if not isinstance(message, str) or not message:
            message = (config or EngineConfig()).default_notification_message
        return ActionOutcome(notification=message)

    logger.debug("Unknown action kind %r", kind)
    return _NOOP


def fold_actions(
    task: Task, actions: Iterable[ActionItem], *, config: EngineConfig | None = None
) -> tuple[dict[str, Any], list[str]]:
    """Apply *actions* in order and merge them into one patch.

    Every action is computed against *task* as it stood before the rule,
    and later actions overwrite fields set by earlier ones.  Returns
    ``(patch, messages)``.
    """
    patch: dict[str, Any] = {}
    messages: list[str] = []
    for action in actions:
        outcome = apply_action(task, action, config=config)
        patch.update(outcome.patch)
        if outcome.notification is not None:
            messages.append(outcome.notification)
    return patch, messages
