"""Field access on task snapshots.

Rules address task fields by name, usually the camelCase wire name
(``assignedTo``).  The lookup table below is built once from the Task model
and accepts both wire names and Python attribute names.  Unknown names
resolve to :data:`MISSING` instead of raising, so a rule that references a
removed or misspelled field simply never matches.
"""

from __future__ import annotations

import enum

from pydantic.alias_generators import to_camel

from taskflow.models.task import Task


class WatchedField(str, enum.Enum):
    """Fields compared by the change detector, by wire name."""

    STATUS = "status"
    PRIORITY = "priority"
    CATEGORY = "category"
    ASSIGNED_TO = "assignedTo"
    DUE_DATE = "dueDate"
    START_DATE = "startDate"
    COMPLETION_PERCENTAGE = "completionPercentage"
    ESTIMATED_HOURS = "estimatedHours"
    TITLE = "title"
    DESCRIPTION = "description"


class _Missing:
    """Sentinel for a field name the Task model does not define."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()


def _build_field_table() -> dict[str, str]:
    table: dict[str, str] = {}
    for name, info in Task.model_fields.items():
        table[name] = name
        table[info.alias or to_camel(name)] = name
    return table


_FIELD_TABLE: dict[str, str] = _build_field_table()


def attribute_name(field_name: object) -> str | None:
    """Map a wire or attribute field name to the Task attribute, or None."""
    if isinstance(field_name, enum.Enum):
        field_name = field_name.value
    if not isinstance(field_name, str):
        return None
    return _FIELD_TABLE.get(field_name)


def get_field(task: Task, field_name: object) -> object:
    """Return the value of *field_name* on *task*, or MISSING if unknown."""
    attr = attribute_name(field_name)
    if attr is None:
        return MISSING
    return getattr(task, attr, MISSING)
