"""Condition evaluation.

Every operator returns a plain bool and never raises.  Comparisons follow
the rule data's loose typing: ``equals`` is strict (no cross-type
coercion), the ordering operators coerce both sides to numbers, and
``contains`` is list membership or a case-insensitive substring test.
"""

from __future__ import annotations

import enum
import logging
import math
import re
from collections.abc import Callable, Iterable
from datetime import datetime

from taskflow.automation.fields import MISSING, get_field
from taskflow.models.rule import ConditionItem, ConditionOperator, enum_or_raw
from taskflow.models.task import Task, ensure_utc

logger = logging.getLogger(__name__)

_NAN = float("nan")

_DECIMAL = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_RADIX = re.compile(r"0(?:[xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)")
_INFINITY = {"Infinity": math.inf, "+Infinity": math.inf, "-Infinity": -math.inf}


def _unwrap(value: object) -> object:
    return value.value if isinstance(value, enum.Enum) else value


def strict_equals(a: object, b: object) -> bool:
    """Value equality without coercion between strings, numbers and booleans."""
    if a is MISSING or b is MISSING:
        return False
    a, b = _unwrap(a), _unwrap(b)
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return a == b
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        return len(a) == len(b) and all(strict_equals(x, y) for x, y in zip(a, b))
    if type(a) is not type(b):
        return False
    return a == b


def to_number(value: object) -> float:
    """Coerce *value* to a float; anything non-numeric becomes NaN.

    Blank strings count as 0 and datetimes as epoch milliseconds.  Strings
    parse as decimal literals, unsigned ``0x``/``0o``/``0b`` integers, or
    ``Infinity``; ``"inf"``, ``"nan"`` and digit separators are NaN.
    """
    value = _unwrap(value)
    if value is None or value is MISSING:
        return _NAN
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        if text in _INFINITY:
            return _INFINITY[text]
        if _DECIMAL.fullmatch(text):
            return float(text)
        if _RADIX.fullmatch(text):
            return float(int(text, 0))
        return _NAN
    if isinstance(value, datetime):
        return ensure_utc(value).timestamp() * 1000.0
    return _NAN


def to_text(value: object) -> str:
    """String form used by ``contains`` on non-list fields."""
    value = _unwrap(value)
    if value is None or value is MISSING:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return ",".join(to_text(v) for v in value)
    return str(value)


def _equals(actual: object, expected: object) -> bool:
    return strict_equals(actual, expected)


def _not_equals(actual: object, expected: object) -> bool:
    return not strict_equals(actual, expected)


def _greater_than(actual: object, expected: object) -> bool:
    return to_number(actual) > to_number(expected)


def _less_than(actual: object, expected: object) -> bool:
    return to_number(actual) < to_number(expected)


def _contains(actual: object, expected: object) -> bool:
    if isinstance(actual, (list, tuple)):
        return any(strict_equals(item, expected) for item in actual)
    return to_text(expected).lower() in to_text(actual).lower()


_OPERATORS: dict[ConditionOperator, Callable[[object, object], bool]] = {
    ConditionOperator.EQUALS: _equals,
    ConditionOperator.NOT_EQUALS: _not_equals,
    ConditionOperator.GREATER_THAN: _greater_than,
    ConditionOperator.LESS_THAN: _less_than,
    ConditionOperator.CONTAINS: _contains,
}


def evaluate_condition(task: Task, condition: ConditionItem) -> bool:
    """Evaluate a single condition against *task*.

    Unknown fields and unknown operators evaluate to False.
    """
    operator = enum_or_raw(ConditionOperator, getattr(condition, "operator", None))
    handler = _OPERATORS.get(operator) if isinstance(operator, ConditionOperator) else None
    if handler is None:
        logger.debug("Unknown condition operator %r", operator)
        return False
    actual = get_field(task, getattr(condition, "field", None))
    if actual is MISSING:
        return False
    return handler(actual, getattr(condition, "value", None))


def evaluate_conditions(task: Task, conditions: Iterable[ConditionItem]) -> bool:
    """Conjunction of *conditions*; an empty list is vacuously true."""
    return all(evaluate_condition(task, c) for c in conditions)
