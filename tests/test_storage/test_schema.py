"""Tests for SQLAlchemy ORM schema.

Covers:
- Expected indexes exist
- TaskRow JSON payload round-trip
- RuleRow primary key uniqueness
- RuleFiringRow autoincrement ID
"""

from datetime import datetime

import pytest
from sqlalchemy import inspect, select
from sqlalchemy.exc import IntegrityError

from taskflow.storage.schema import RuleFiringRow, RuleRow, TaskRow

NOW = datetime(2024, 6, 1, 12, 0)


class TestIndexes:
    def test_task_indexes(self, engine):
        names = {ix["name"] for ix in inspect(engine).get_indexes("tasks")}
        assert "ix_tasks_created" in names
        assert "ix_tasks_status" in names

    def test_rule_indexes(self, engine):
        indexes = {ix["name"]: ix for ix in inspect(engine).get_indexes("automation_rules")}
        assert indexes["ix_rules_created"]["column_names"] == ["created_at", "rule_id"]

    def test_firing_indexes(self, engine):
        names = {ix["name"] for ix in inspect(engine).get_indexes("rule_firings")}
        assert {"ix_rule_firings_time", "ix_rule_firings_rule_id", "ix_rule_firings_task_id"} <= names


class TestTaskRow:
    def test_payload_round_trip(self, session):
        payload = {
            "id": "t1",
            "title": "Pour slab",
            "tags": ["site", "concrete"],
            "customFields": {"crew": 4, "inspected": False},
        }
        session.add(
            TaskRow(
                task_id="t1",
                title="Pour slab",
                status="todo",
                priority="high",
                payload_json=payload,
                created_at=NOW,
                updated_at=NOW,
            )
        )
        session.flush()
        session.expunge_all()

        row = session.get(TaskRow, "t1")
        assert row.payload_json == payload
        assert row.assigned_to is None
        assert row.due_date is None


class TestRuleRow:
    def _row(self, rule_id: str) -> RuleRow:
        return RuleRow(
            rule_id=rule_id,
            name="Escalate",
            trigger="status_changed",
            payload_json={"id": rule_id},
            created_at=NOW,
            updated_at=NOW,
        )

    def test_defaults(self, session):
        session.add(self._row("r1"))
        session.flush()
        row = session.get(RuleRow, "r1")
        assert row.enabled is True
        assert row.trigger_count == 0

    def test_duplicate_id_rejected(self, session):
        session.add(self._row("r1"))
        session.flush()
        session.expunge_all()
        session.add(self._row("r1"))
        with pytest.raises(IntegrityError):
            session.flush()

    def test_unknown_trigger_string_stored(self, session):
        row = self._row("legacy")
        row.trigger = "on_archive"
        session.add(row)
        session.flush()
        assert session.get(RuleRow, "legacy").trigger == "on_archive"


class TestRuleFiringRow:
    def test_autoincrement(self, session):
        for task_id in ("t1", "t2"):
            session.add(
                RuleFiringRow(
                    rule_id="r1",
                    rule_name="Escalate",
                    task_id=task_id,
                    event="updated",
                    patch_json={},
                    created_at=NOW,
                )
            )
        session.flush()

        ids = session.execute(select(RuleFiringRow.id).order_by(RuleFiringRow.id)).scalars().all()
        assert len(ids) == 2
        assert ids[0] < ids[1]
