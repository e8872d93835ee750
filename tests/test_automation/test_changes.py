"""Tests for change detection between task snapshots."""

from __future__ import annotations

from datetime import timedelta

from hypothesis import given

from taskflow.automation.changes import CREATED, CREATED_ONLY, detect_changes
from taskflow.automation.fields import WatchedField
from tests.conftest import NOW, make_task
from tests.strategies import tasks


class TestDetectChanges:
    def test_no_old_task_is_created(self):
        assert detect_changes(None, make_task()) == frozenset({CREATED})
        assert detect_changes(None, make_task()) == CREATED_ONLY

    def test_identical_tasks(self):
        assert detect_changes(make_task(), make_task()) == frozenset()

    def test_single_field(self):
        changes = detect_changes(make_task(), make_task(status="done"))
        assert changes == {"status"}

    def test_reports_wire_names(self):
        changes = detect_changes(
            make_task(),
            make_task(assigned_to="bob", due_date=NOW + timedelta(days=1), completion_percentage=10),
        )
        assert changes == {"assignedTo", "dueDate", "completionPercentage"}

    def test_unwatched_fields_ignored(self):
        old = make_task()
        new = make_task(tags=["x"], updated_at=NOW + timedelta(hours=1), custom_fields={"a": 1})
        assert detect_changes(old, new) == frozenset()

    def test_title_and_description_watched(self):
        changes = detect_changes(make_task(), make_task(title="New", description="d"))
        assert changes == {"title", "description"}

    @given(old=tasks, new=tasks)
    def test_only_watched_names(self, old, new):
        allowed = {f.value for f in WatchedField}
        assert detect_changes(old, new) <= allowed

    @given(task=tasks)
    def test_self_comparison_empty(self, task):
        assert detect_changes(task, task) == frozenset()
