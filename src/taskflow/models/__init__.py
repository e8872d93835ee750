"""Domain models for Taskflow."""

from taskflow.models.config import BoardConfig, EngineConfig
from taskflow.models.result import (
    ActionOutcome,
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

__all__ = [
    "Task",
    "TaskStatus",
    "TaskPriority",
    "TaskCategory",
    "AutomationRule",
    "ConditionItem",
    "ActionItem",
    "RuleTrigger",
    "ConditionOperator",
    "ActionKind",
    "EngineConfig",
    "BoardConfig",
    "ActionOutcome",
    "AutomationResult",
    "MutationResult",
    "Notification",
    "FiringLogEntry",
]
