"""Shared test fixtures for Taskflow.

Provides in-memory SQLite engine, session, and repository fixtures, plus
small builders for tasks and rules.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from sqlalchemy.orm import Session, sessionmaker

from taskflow.models.rule import AutomationRule
from taskflow.models.task import Task
from taskflow.storage.engine import create_taskflow_engine, init_db
from taskflow.storage.sqlite import (
    SqliteFiringLogRepository,
    SqliteRuleRepository,
    SqliteTaskRepository,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    """In-memory SQLite engine with all tables created."""
    eng = create_taskflow_engine(":memory:")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine):
    """Session with automatic rollback after each test."""
    SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)
    sess = SessionLocal()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture
def task_repo(session: Session) -> SqliteTaskRepository:
    return SqliteTaskRepository(session)


@pytest.fixture
def rule_repo(session: Session) -> SqliteRuleRepository:
    return SqliteRuleRepository(session)


@pytest.fixture
def firing_repo(session: Session) -> SqliteFiringLogRepository:
    return SqliteFiringLogRepository(session)


@pytest.fixture
def board():
    """In-memory TaskBoard with a fixed clock."""
    from taskflow import TaskBoard

    b = TaskBoard.open(":memory:", clock=lambda: NOW)
    yield b
    b.close()


# ------------------------------------------------------------------
# Shared test helpers
# ------------------------------------------------------------------

def make_task(**overrides) -> Task:
    """A valid task stamped at NOW; keyword overrides use attribute names."""
    fields = {
        "id": "task-1",
        "title": "Write report",
        "created_at": NOW,
        "updated_at": NOW,
    }
    fields.update(overrides)
    return Task.model_validate(fields)


def cond(field: str, operator: str, value=None) -> dict:
    return {"field": field, "operator": operator, "value": value}


def act(action: str, **parameters) -> dict:
    return {"action": action, "parameters": parameters}


def make_rule(
    rule_id: str,
    trigger: str,
    *,
    conditions: list[dict] | None = None,
    actions: list[dict] | None = None,
    **extra,
) -> AutomationRule:
    """Build a strictly validated rule from wire-style pieces."""
    data = {
        "id": rule_id,
        "name": extra.pop("name", rule_id),
        "trigger": trigger,
        "conditions": conditions or [],
        "actions": actions or [],
        "createdAt": NOW,
        "updatedAt": NOW,
    }
    data.update(extra)
    return AutomationRule.model_validate(data)
