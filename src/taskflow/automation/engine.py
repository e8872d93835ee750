"""Automation engine -- runs rules against a task mutation.

One call is one forward pass: rules are visited once, oldest first, and
each firing rule's patch is folded into a working snapshot that every later
rule sees.  There is no re-evaluation loop, so a rule fires at most once per
call and a rule whose condition only becomes true after a later rule's
action does not fire in that pass.

Bookkeeping (trigger counters) is a separate step:
:func:`update_rule_trigger_count`, called by the owner of the rules once per
:func:`execute_automation_rules` call.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any

from taskflow.automation.actions import fold_actions
from taskflow.automation.changes import detect_changes
from taskflow.automation.conditions import evaluate_conditions
from taskflow.automation.triggers import matches
from taskflow.models.config import EngineConfig
from taskflow.models.result import AutomationResult, Notification
from taskflow.models.rule import AutomationRule
from taskflow.models.task import Task, ensure_utc, utcnow

logger = logging.getLogger(__name__)


def _order_key(rule: AutomationRule) -> tuple[float, str]:
    created_at = getattr(rule, "created_at", None)
    ts = ensure_utc(created_at).timestamp() if isinstance(created_at, datetime) else 0.0
    return ts, str(getattr(rule, "id", ""))


def sort_rules(rules: Iterable[AutomationRule]) -> list[AutomationRule]:
    """Rules in evaluation order: ascending created_at, ties broken by id."""
    return sorted(rules, key=_order_key)


def execute_automation_rules(
    old_task: Task | None,
    new_task: Task,
    rules: Iterable[AutomationRule],
    *,
    now: datetime | None = None,
    config: EngineConfig | None = None,
) -> AutomationResult:
    """Evaluate *rules* for the mutation ``old_task -> new_task``.

    Args:
        old_task: Snapshot before the mutation, or None for a new task.
        new_task: Candidate snapshot after the mutation.
        rules: Every rule, enabled or not.  Disabled rules are skipped by
            the trigger matcher, not filtered up front.
        now: Evaluation time for ``due_date_approaching``.  Defaults to the
            current UTC time.
        config: Engine settings.  Defaults created if *None*.

    Returns:
        AutomationResult with the patched task, the ids of fired rules in
        firing order, and any notifications they produced.
    """
    config = config or EngineConfig()
    now = now or utcnow()
    changes = detect_changes(old_task, new_task)

    current = new_task
    fired: list[str] = []
    notifications: list[Notification] = []
    patches: dict[str, dict[str, Any]] = {}

    for rule in sort_rules(rules):
        try:
            if not matches(rule, old_task, current, changes, now=now, config=config):
                continue
            if not evaluate_conditions(current, rule.conditions):
                continue
            patch, messages = fold_actions(current, rule.actions, config=config)
        except Exception as exc:
            logger.error(
                "Rule '%s' raised %s: %s",
                getattr(rule, "id", "?"),
                type(exc).__name__,
                exc,
            )
            continue

        if not patch and not messages:
            continue

        if patch:
            current = current.model_copy(update=patch)
        fired.append(rule.id)
        patches[rule.id] = patch
        logger.debug("Rule '%s' (%s) fired: %s", rule.name, rule.id, patch)

        for message in messages:
            notifications.append(
                Notification(
                    rule_id=rule.id,
                    rule_name=rule.name,
                    task_id=current.id,
                    message=message,
                )
            )
            logger.info("Notification from rule '%s': %s", rule.name, message)

    return AutomationResult(
        task=current,
        fired_rule_ids=fired,
        notifications=notifications,
        patches=patches,
    )


def update_rule_trigger_count(
    rules: Sequence[AutomationRule],
    fired_rule_ids: Iterable[str],
    *,
    now: datetime | None = None,
) -> list[AutomationRule]:
    """Bump ``trigger_count`` and stamp ``last_triggered`` for fired rules.

    Rules not named in *fired_rule_ids* are returned unchanged and order is
    preserved.  Each call increments again: calling this twice with the
    same ids counts twice, so call it once per engine pass.
    """
    fired = set(fired_rule_ids)
    if not fired:
        return list(rules)

    now = now or utcnow()
    return [
        rule.model_copy(
            update={
                "trigger_count": rule.trigger_count + 1,
                "last_triggered": now,
                "updated_at": now,
            }
        )
        if rule.id in fired
        else rule
        for rule in rules
    ]
