"""Automation rule models.

A rule pairs one trigger with a conjunction of conditions and an ordered
list of actions.  Triggers, operators and action kinds are closed enums;
condition values and action parameters are restricted to a small value
union (str | int | float | bool | list[str] | None).

Two construction paths exist:

- Normal construction (``AutomationRule(...)`` / ``model_validate``) is
  strict and raises ``pydantic.ValidationError`` on unknown kinds, bad
  values or missing required action parameters.
- :meth:`AutomationRule.from_untrusted` accepts legacy or corrupted rule
  data without raising.  Unknown kinds are kept verbatim and the engine
  treats them as no-ops.
"""

from __future__ import annotations

import enum
import logging
import uuid
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    TypeAdapter,
    ValidationError,
    model_validator,
)
from pydantic.alias_generators import to_camel

from taskflow.models.task import TaskPriority, TaskStatus, utcnow

logger = logging.getLogger(__name__)

RuleValue = Union[StrictBool, StrictInt, StrictFloat, StrictStr, list[StrictStr], None]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_datetime_adapter: TypeAdapter[datetime] = TypeAdapter(datetime)


class RuleTrigger(str, enum.Enum):
    """What kind of task mutation makes a rule eligible to run."""

    STATUS_CHANGED = "status_changed"
    PRIORITY_CHANGED = "priority_changed"
    DUE_DATE_APPROACHING = "due_date_approaching"
    ASSIGNED = "assigned"
    CREATED = "created"


class ConditionOperator(str, enum.Enum):
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    CONTAINS = "contains"


class ActionKind(str, enum.Enum):
    SET_STATUS = "set_status"
    SET_PRIORITY = "set_priority"
    ASSIGN_TO = "assign_to"
    ADD_TAG = "add_tag"
    SEND_NOTIFICATION = "send_notification"


# Parameter key each action kind needs; send_notification has none.
REQUIRED_PARAMETERS: dict[ActionKind, str] = {
    ActionKind.SET_STATUS: "status",
    ActionKind.SET_PRIORITY: "priority",
    ActionKind.ASSIGN_TO: "assignedTo",
    ActionKind.ADD_TAG: "tag",
}


def enum_or_raw(enum_cls: type[enum.Enum], value: object) -> object:
    """Return the enum member for *value*, or *value* itself if it is not one."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except (ValueError, TypeError):
        return value


class ConditionItem(BaseModel):
    """A single ``field operator value`` test against a task."""

    model_config = ConfigDict(frozen=True)

    field: str = Field(min_length=1)
    operator: ConditionOperator
    value: RuleValue = None


class ActionItem(BaseModel):
    """An action applied to a task when its rule fires."""

    model_config = ConfigDict(frozen=True)

    action: ActionKind
    parameters: dict[str, RuleValue] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_parameters(self) -> ActionItem:
        key = REQUIRED_PARAMETERS.get(self.action)
        if key is None:
            return self
        if key not in self.parameters:
            raise ValueError(f"{self.action.value} requires parameter '{key}'")
        value = self.parameters[key]
        if self.action is ActionKind.ASSIGN_TO:
            if value is not None and not isinstance(value, str):
                raise ValueError("assignedTo must be a string or null")
            return self
        if not isinstance(value, str) or not value:
            raise ValueError(f"'{key}' must be a non-empty string")
        if self.action is ActionKind.SET_STATUS:
            TaskStatus(value)
        elif self.action is ActionKind.SET_PRIORITY:
            TaskPriority(value)
        return self


class AutomationRule(BaseModel):
    """A named, independently enabled trigger -> conditions -> actions unit."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, min_length=1)
    name: str
    description: str = ""
    enabled: StrictBool = True
    trigger: RuleTrigger
    conditions: list[ConditionItem] = Field(default_factory=list)
    actions: list[ActionItem] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    trigger_count: int = Field(default=0, ge=0)
    last_triggered: Optional[datetime] = None

    def to_wire(self) -> dict[str, Any]:
        """JSON-compatible dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, warnings=False)

    @classmethod
    def from_untrusted(cls, data: object) -> AutomationRule | None:
        """Build a rule from legacy or corrupted data without raising.

        Valid data goes through normal validation.  Otherwise each field is
        salvaged on its own: unknown trigger/operator/action strings are kept
        as-is, bad timestamps fall back to the epoch, a non-boolean
        ``enabled`` flag disables the rule.  Returns None when *data* is not a
        mapping or carries no usable id.
        """
        if isinstance(data, AutomationRule):
            return data
        if not isinstance(data, Mapping):
            return None
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            logger.debug("Salvaging rule data after %d validation error(s)", exc.error_count())

        rule_id = _pick(data, "id")
        if not isinstance(rule_id, str) or not rule_id:
            return None

        enabled = _pick(data, "enabled", default=True)
        count = _pick(data, "triggerCount", "trigger_count", default=0)
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            count = 0
        created_at = _lenient_datetime(_pick(data, "createdAt", "created_at")) or _EPOCH

        return cls.model_construct(
            id=rule_id,
            name=str(_pick(data, "name", default="") or ""),
            description=str(_pick(data, "description", default="") or ""),
            enabled=enabled if isinstance(enabled, bool) else False,
            trigger=enum_or_raw(RuleTrigger, _pick(data, "trigger")),
            conditions=[_lenient_condition(c) for c in _as_list(_pick(data, "conditions"))],
            actions=[_lenient_action(a) for a in _as_list(_pick(data, "actions"))],
            created_at=created_at,
            updated_at=_lenient_datetime(_pick(data, "updatedAt", "updated_at")) or created_at,
            trigger_count=count,
            last_triggered=_lenient_datetime(_pick(data, "lastTriggered", "last_triggered")),
        )


def _pick(data: Mapping, *keys: str, default: object = None) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return default


def _as_list(value: object) -> list:
    return list(value) if isinstance(value, (list, tuple)) else []


def _lenient_datetime(value: object) -> datetime | None:
    if value is None:
        return None
    try:
        return _datetime_adapter.validate_python(value)
    except ValidationError:
        return None


def _lenient_condition(raw: object) -> ConditionItem:
    if isinstance(raw, ConditionItem):
        return raw
    data = raw if isinstance(raw, Mapping) else {}
    return ConditionItem.model_construct(
        field=str(data.get("field") or ""),
        operator=enum_or_raw(ConditionOperator, data.get("operator")),
        value=data.get("value"),
    )


def _lenient_action(raw: object) -> ActionItem:
    if isinstance(raw, ActionItem):
        return raw
    data = raw if isinstance(raw, Mapping) else {}
    params = data.get("parameters")
    return ActionItem.model_construct(
        action=enum_or_raw(ActionKind, data.get("action")),
        parameters=dict(params) if isinstance(params, Mapping) else {},
    )
