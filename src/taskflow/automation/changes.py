"""Change detection between two task snapshots."""

from __future__ import annotations

from taskflow.automation.fields import WatchedField, get_field
from taskflow.models.task import Task

CREATED = "created"
CREATED_ONLY: frozenset[str] = frozenset({CREATED})


def detect_changes(old_task: Task | None, new_task: Task) -> frozenset[str]:
    """Return the wire names of watched fields that differ.

    With no prior snapshot the result is exactly ``{"created"}``.  Only
    :class:`WatchedField` members are compared; every other field is
    ignored even when it differs.
    """
    if old_task is None:
        return CREATED_ONLY
    return frozenset(
        f.value
        for f in WatchedField
        if get_field(old_task, f.value) != get_field(new_task, f.value)
    )
