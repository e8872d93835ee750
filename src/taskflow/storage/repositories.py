"""Abstract repository interfaces for Taskflow storage.

Defines ABC interfaces for all database operations. No SQLAlchemy
imports here -- pure abstract contracts.

Concrete implementations are in sqlite.py.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from taskflow.storage.schema import RuleFiringRow, RuleRow, TaskRow


class TaskRepository(ABC):
    """Abstract interface for task storage operations."""

    @abstractmethod
    def get(self, task_id: str) -> TaskRow | None:
        """Get a task by id. Returns None if not found."""
        ...

    @abstractmethod
    def save(self, task: TaskRow) -> None:
        """Insert or replace a task."""
        ...

    @abstractmethod
    def delete(self, task_id: str) -> bool:
        """Delete a task. Returns True if a row was removed."""
        ...

    @abstractmethod
    def list(self, *, status: str | None = None) -> Sequence[TaskRow]:
        """List tasks ordered by created_at ascending, optionally by status."""
        ...


class RuleRepository(ABC):
    """Abstract interface for automation rule storage."""

    @abstractmethod
    def get(self, rule_id: str) -> RuleRow | None:
        """Get a rule by id. Returns None if not found."""
        ...

    @abstractmethod
    def save(self, rule: RuleRow) -> None:
        """Insert or replace a rule."""
        ...

    @abstractmethod
    def delete(self, rule_id: str) -> bool:
        """Delete a rule. Returns True if a row was removed."""
        ...

    @abstractmethod
    def get_all(self) -> Sequence[RuleRow]:
        """All rules, ordered by created_at then rule_id."""
        ...


class FiringLogRepository(ABC):
    """Abstract interface for the rule firing audit log."""

    @abstractmethod
    def save_entry(self, entry: RuleFiringRow) -> None:
        """Append a firing entry."""
        ...

    @abstractmethod
    def get_log(
        self,
        *,
        rule_id: str | None = None,
        task_id: str | None = None,
        limit: int = 100,
    ) -> Sequence[RuleFiringRow]:
        """Most recent entries first, optionally filtered by rule or task."""
        ...
