"""Tests for trigger matching and the due-date window."""

from __future__ import annotations

from datetime import timedelta

import pytest

from taskflow.automation.changes import detect_changes
from taskflow.automation.triggers import hours_until, is_due_soon, matches
from taskflow.models.config import EngineConfig
from taskflow.models.rule import AutomationRule
from tests.conftest import NOW, make_rule, make_task


def _matches(rule, old, new, **kwargs) -> bool:
    return matches(rule, old, new, detect_changes(old, new), now=kwargs.pop("now", NOW), **kwargs)


class TestDueWindow:
    def test_hours_until(self):
        assert hours_until(NOW + timedelta(hours=5), NOW) == 5

    def test_hours_until_naive_due(self):
        naive = (NOW + timedelta(hours=2)).replace(tzinfo=None)
        assert hours_until(naive, NOW) == 2

    @pytest.mark.parametrize(
        "delta,expected",
        [
            (timedelta(hours=0), False),
            (timedelta(seconds=1), True),
            (timedelta(hours=12), True),
            (timedelta(hours=24), True),
            (timedelta(hours=24, seconds=1), False),
            (timedelta(hours=-1), False),
        ],
    )
    def test_boundaries(self, delta, expected):
        assert is_due_soon(NOW + delta, NOW) is expected

    def test_no_due_date(self):
        assert is_due_soon(None, NOW) is False

    def test_custom_window(self):
        assert is_due_soon(NOW + timedelta(hours=30), NOW, window_hours=48)
        assert not is_due_soon(NOW + timedelta(hours=30), NOW)


class TestStatusChanged:
    rule = make_rule("r", "status_changed")

    def test_fires_on_change(self):
        assert _matches(self.rule, make_task(), make_task(status="review"))

    def test_not_on_other_change(self):
        assert not _matches(self.rule, make_task(), make_task(priority="high"))

    def test_not_on_create(self):
        assert not _matches(self.rule, None, make_task(status="review"))


class TestPriorityChanged:
    rule = make_rule("r", "priority_changed")

    def test_fires_on_change(self):
        assert _matches(self.rule, make_task(), make_task(priority="urgent"))

    def test_not_on_status_change(self):
        assert not _matches(self.rule, make_task(), make_task(status="done"))


class TestAssigned:
    rule = make_rule("r", "assigned")

    def test_fires_on_new_assignee(self):
        assert _matches(self.rule, make_task(), make_task(assigned_to="bob"))

    def test_fires_on_reassignment(self):
        assert _matches(self.rule, make_task(assigned_to="alice"), make_task(assigned_to="bob"))

    def test_not_on_unassign(self):
        assert not _matches(self.rule, make_task(assigned_to="alice"), make_task())

    def test_not_on_empty_assignee(self):
        assert not _matches(self.rule, make_task(assigned_to="alice"), make_task(assigned_to=""))

    def test_not_on_create_with_assignee(self):
        assert not _matches(self.rule, None, make_task(assigned_to="bob"))


class TestCreated:
    rule = make_rule("r", "created")

    def test_fires_on_create(self):
        assert _matches(self.rule, None, make_task())

    def test_not_on_update(self):
        assert not _matches(self.rule, make_task(), make_task(status="done"))

    def test_not_on_noop_update(self):
        assert not _matches(self.rule, make_task(), make_task())


class TestDueDateApproaching:
    rule = make_rule("r", "due_date_approaching")

    def test_fires_inside_window(self):
        task = make_task(due_date=NOW + timedelta(hours=3))
        assert _matches(self.rule, task, task)

    def test_fires_on_create(self):
        assert _matches(self.rule, None, make_task(due_date=NOW + timedelta(hours=3)))

    def test_not_outside_window(self):
        task = make_task(due_date=NOW + timedelta(days=3))
        assert not _matches(self.rule, task, task)

    def test_not_when_overdue(self):
        task = make_task(due_date=NOW - timedelta(hours=1))
        assert not _matches(self.rule, task, task)

    def test_config_window(self):
        task = make_task(due_date=NOW + timedelta(hours=30))
        config = EngineConfig(due_window_hours=48)
        assert _matches(self.rule, task, task, config=config)


class TestEligibility:
    def test_disabled_never_matches(self):
        rule = make_rule("r", "created", enabled=False)
        assert not _matches(rule, None, make_task())

    def test_unknown_trigger_never_matches(self):
        rule = AutomationRule.from_untrusted(
            {"id": "r", "name": "r", "trigger": "on_delete", "conditions": [], "actions": []}
        )
        assert not _matches(rule, None, make_task())
        assert not _matches(rule, make_task(), make_task(status="done"))
