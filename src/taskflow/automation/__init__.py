"""Automation engine package -- rule evaluation for task mutations.

Provides the pure engine entry points plus the building blocks they are
made of (field access, change detection, trigger matching, condition
evaluation, action application).
"""

from taskflow.automation.actions import apply_action, fold_actions
from taskflow.automation.changes import CREATED, detect_changes
from taskflow.automation.conditions import evaluate_condition, evaluate_conditions
from taskflow.automation.engine import (
    execute_automation_rules,
    sort_rules,
    update_rule_trigger_count,
)
from taskflow.automation.fields import MISSING, WatchedField, get_field
from taskflow.automation.triggers import is_due_soon, matches

__all__ = [
    "execute_automation_rules",
    "update_rule_trigger_count",
    "sort_rules",
    "detect_changes",
    "CREATED",
    "matches",
    "is_due_soon",
    "evaluate_condition",
    "evaluate_conditions",
    "apply_action",
    "fold_actions",
    "get_field",
    "MISSING",
    "WatchedField",
]
