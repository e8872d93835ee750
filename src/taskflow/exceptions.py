"""Taskflow exception hierarchy.

All Taskflow-specific exceptions inherit from TaskflowError.

The automation engine itself never raises: malformed rules degrade to
no-ops.  These exceptions belong to the store, board and CLI layers.
"""


class TaskflowError(Exception):
    """Base exception for all Taskflow errors."""


class TaskNotFoundError(TaskflowError):
    """Raised when a task id lookup fails."""

    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"Task not found: {task_id}")


class RuleNotFoundError(TaskflowError):
    """Raised when a rule id lookup fails."""

    def __init__(self, rule_id: str) -> None:
        self.rule_id = rule_id
        super().__init__(f"Rule not found: {rule_id}")


class DuplicateRuleError(TaskflowError):
    """Raised when adding a rule whose id already exists."""

    def __init__(self, rule_id: str) -> None:
        self.rule_id = rule_id
        super().__init__(f"Rule already exists: {rule_id}")


class RuleValidationError(TaskflowError):
    """Raised when rule data fails authoring-time validation.

    Named RuleValidationError (not ValidationError) to avoid
    collision with pydantic.ValidationError.
    """


class TaskValidationError(TaskflowError):
    """Raised when task fields fail validation on create or update."""
