"""Taskflow: task tracking with trigger -> condition -> action automation rules.

The automation engine is a pure function pair
(:func:`execute_automation_rules` / :func:`update_rule_trigger_count`);
:class:`TaskBoard` wraps it with SQLite persistence, an audit log and
notification routing.
"""

from taskflow._version import __version__

# Core entry point
from taskflow.board import TaskBoard

# Engine
from taskflow.automation.engine import (
    execute_automation_rules,
    sort_rules,
    update_rule_trigger_count,
)

# Models
from taskflow.models.config import BoardConfig, EngineConfig
from taskflow.models.result import (
    AutomationResult,
    FiringLogEntry,
    MutationResult,
    Notification,
)
from taskflow.models.rule import (
    ActionItem,
    ActionKind,
    AutomationRule,
    ConditionItem,
    ConditionOperator,
    RuleTrigger,
)
from taskflow.models.task import Task, TaskCategory, TaskPriority, TaskStatus

# Exceptions
from taskflow.exceptions import (
    DuplicateRuleError,
    RuleNotFoundError,
    RuleValidationError,
    TaskflowError,
    TaskNotFoundError,
    TaskValidationError,
)

__all__ = [
    "__version__",
    # Core
    "TaskBoard",
    # Engine
    "execute_automation_rules",
    "update_rule_trigger_count",
    "sort_rules",
    # Tasks
    "Task",
    "TaskStatus",
    "TaskPriority",
    "TaskCategory",
    # Rules
    "AutomationRule",
    "ConditionItem",
    "ActionItem",
    "RuleTrigger",
    "ConditionOperator",
    "ActionKind",
    # Config
    "EngineConfig",
    "BoardConfig",
    # Results
    "AutomationResult",
    "MutationResult",
    "Notification",
    "FiringLogEntry",
    # Exceptions
    "TaskflowError",
    "TaskNotFoundError",
    "RuleNotFoundError",
    "DuplicateRuleError",
    "RuleValidationError",
    "TaskValidationError",
]
