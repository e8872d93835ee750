"""Tests for the SQLite repositories and database initialization."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest
from sqlalchemy import inspect, select

from taskflow.storage.engine import SCHEMA_VERSION, create_taskflow_engine, init_db
from taskflow.storage.schema import RuleFiringRow, RuleRow, TaskflowMetaRow, TaskRow

T0 = datetime(2024, 6, 1, 12, 0)


def _task_row(task_id: str, status: str = "todo", offset: int = 0) -> TaskRow:
    return TaskRow(
        task_id=task_id,
        title=f"Task {task_id}",
        status=status,
        priority="medium",
        payload_json={"id": task_id, "title": f"Task {task_id}", "status": status},
        created_at=T0 + timedelta(minutes=offset),
        updated_at=T0 + timedelta(minutes=offset),
    )


def _rule_row(rule_id: str, offset: int = 0) -> RuleRow:
    return RuleRow(
        rule_id=rule_id,
        name=rule_id,
        enabled=True,
        trigger="created",
        trigger_count=0,
        payload_json={"id": rule_id, "name": rule_id, "trigger": "created"},
        created_at=T0 + timedelta(minutes=offset),
        updated_at=T0 + timedelta(minutes=offset),
    )


def _firing_row(rule_id: str, task_id: str) -> RuleFiringRow:
    return RuleFiringRow(
        rule_id=rule_id,
        rule_name=rule_id,
        task_id=task_id,
        event="created",
        patch_json={"priority": "urgent"},
        notification=None,
        created_at=T0,
    )


class TestInitDb:
    def test_creates_tables(self, engine):
        tables = set(inspect(engine).get_table_names())
        assert {"tasks", "automation_rules", "rule_firings", "_taskflow_meta"} <= tables

    def test_records_schema_version(self, session):
        row = session.execute(
            select(TaskflowMetaRow).where(TaskflowMetaRow.key == "schema_version")
        ).scalar_one()
        assert row.value == SCHEMA_VERSION

    def test_idempotent(self, engine):
        init_db(engine)
        init_db(engine)

    def test_file_database(self, tmp_path):
        eng = create_taskflow_engine(str(tmp_path / "board.db"))
        init_db(eng)
        assert "tasks" in inspect(eng).get_table_names()
        eng.dispose()


class TestTaskRepository:
    def test_save_and_get(self, task_repo):
        task_repo.save(_task_row("t1"))
        row = task_repo.get("t1")
        assert row is not None
        assert row.payload_json["title"] == "Task t1"

    def test_get_missing(self, task_repo):
        assert task_repo.get("nope") is None

    def test_save_replaces(self, task_repo):
        task_repo.save(_task_row("t1"))
        task_repo.save(_task_row("t1", status="done"))
        assert task_repo.get("t1").status == "done"
        assert len(task_repo.list()) == 1

    def test_list_in_creation_order(self, task_repo):
        task_repo.save(_task_row("b", offset=2))
        task_repo.save(_task_row("a", offset=1))
        assert [r.task_id for r in task_repo.list()] == ["a", "b"]

    def test_list_by_status(self, task_repo):
        task_repo.save(_task_row("t1", status="todo"))
        task_repo.save(_task_row("t2", status="done"))
        assert [r.task_id for r in task_repo.list(status="done")] == ["t2"]

    def test_delete(self, task_repo):
        task_repo.save(_task_row("t1"))
        assert task_repo.delete("t1") is True
        assert task_repo.get("t1") is None
        assert task_repo.delete("t1") is False


class TestRuleRepository:
    def test_save_and_get(self, rule_repo):
        rule_repo.save(_rule_row("r1"))
        assert rule_repo.get("r1").trigger == "created"

    def test_get_all_ordered(self, rule_repo):
        rule_repo.save(_rule_row("z", offset=0))
        rule_repo.save(_rule_row("b", offset=5))
        rule_repo.save(_rule_row("a", offset=5))
        assert [r.rule_id for r in rule_repo.get_all()] == ["z", "a", "b"]

    def test_delete(self, rule_repo):
        rule_repo.save(_rule_row("r1"))
        assert rule_repo.delete("r1") is True
        assert rule_repo.get_all() == []
        assert rule_repo.delete("r1") is False


class TestFiringLogRepository:
    def test_newest_first(self, firing_repo):
        firing_repo.save_entry(_firing_row("r1", "t1"))
        firing_repo.save_entry(_firing_row("r2", "t1"))
        assert [e.rule_id for e in firing_repo.get_log()] == ["r2", "r1"]

    def test_filters(self, firing_repo):
        firing_repo.save_entry(_firing_row("r1", "t1"))
        firing_repo.save_entry(_firing_row("r2", "t1"))
        firing_repo.save_entry(_firing_row("r1", "t2"))
        assert len(firing_repo.get_log(rule_id="r1")) == 2
        assert len(firing_repo.get_log(task_id="t1")) == 2
        assert len(firing_repo.get_log(rule_id="r1", task_id="t2")) == 1

    @pytest.mark.parametrize("limit", [1, 2])
    def test_limit(self, firing_repo, limit):
        for i in range(3):
            firing_repo.save_entry(_firing_row(f"r{i}", "t1"))
        assert len(firing_repo.get_log(limit=limit)) == limit

    def test_patch_round_trips(self, firing_repo):
        firing_repo.save_entry(_firing_row("r1", "t1"))
        assert firing_repo.get_log()[0].patch_json == {"priority": "urgent"}
