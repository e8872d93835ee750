"""SQLite implementations of the Taskflow repositories.

All repositories share one Session and only flush; committing is the
caller's job (TaskBoard commits once per mutation).
"""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import and_, select
from sqlalchemy.orm import Session

from taskflow.storage.repositories import (
    FiringLogRepository,
    RuleRepository,
    TaskRepository,
)
from taskflow.storage.schema import RuleFiringRow, RuleRow, TaskRow


class SqliteTaskRepository(TaskRepository):
    """SQLite implementation of task storage."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, task_id: str) -> TaskRow | None:
        return self._session.get(TaskRow, task_id)

    def save(self, task: TaskRow) -> None:
        self._session.merge(task)
        self._session.flush()

    def delete(self, task_id: str) -> bool:
        row = self.get(task_id)
        if row is None:
            return False
        self._session.delete(row)
        self._session.flush()
        return True

    def list(self, *, status: str | None = None) -> Sequence[TaskRow]:
        stmt = select(TaskRow)
        if status is not None:
            stmt = stmt.where(TaskRow.status == status)
        stmt = stmt.order_by(TaskRow.created_at, TaskRow.task_id)
        return list(self._session.execute(stmt).scalars().all())


class SqliteRuleRepository(RuleRepository):
    """SQLite implementation of automation rule storage."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, rule_id: str) -> RuleRow | None:
        return self._session.get(RuleRow, rule_id)

    def save(self, rule: RuleRow) -> None:
        self._session.merge(rule)
        self._session.flush()

    def delete(self, rule_id: str) -> bool:
        row = self.get(rule_id)
        if row is None:
            return False
        self._session.delete(row)
        self._session.flush()
        return True

    def get_all(self) -> Sequence[RuleRow]:
        stmt = select(RuleRow).order_by(RuleRow.created_at, RuleRow.rule_id)
        return list(self._session.execute(stmt).scalars().all())


class SqliteFiringLogRepository(FiringLogRepository):
    """SQLite implementation of the rule firing audit log."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def save_entry(self, entry: RuleFiringRow) -> None:
        self._session.add(entry)
        self._session.flush()

    def get_log(
        self,
        *,
        rule_id: str | None = None,
        task_id: str | None = None,
        limit: int = 100,
    ) -> Sequence[RuleFiringRow]:
        conditions = []
        if rule_id is not None:
            conditions.append(RuleFiringRow.rule_id == rule_id)
        if task_id is not None:
            conditions.append(RuleFiringRow.task_id == task_id)

        stmt = select(RuleFiringRow)
        if conditions:
            stmt = stmt.where(and_(*conditions))
        stmt = stmt.order_by(RuleFiringRow.id.desc()).limit(limit)
        return list(self._session.execute(stmt).scalars().all())
