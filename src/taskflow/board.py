"""TaskBoard -- the public entry point for Taskflow.

Ties together storage and the automation engine into a user-facing API.
Users interact with ``TaskBoard.open()``, ``board.create_task()``,
``board.update_task()``, ``board.add_rule()``, etc.

Every task mutation runs one automation pass, persists the resulting task,
bumps the trigger counters of the rules that fired, records the firings and
commits once.  Notifications are dispatched to registered handlers after the
commit.

Not thread-safe.  Each thread should open its own ``TaskBoard``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
from pydantic.alias_generators import to_camel
from pydantic_core import to_jsonable_python

from taskflow.automation.engine import (
    execute_automation_rules,
    update_rule_trigger_count,
)
from taskflow.automation.fields import attribute_name
from taskflow.exceptions import (
    DuplicateRuleError,
    RuleNotFoundError,
    RuleValidationError,
    TaskNotFoundError,
    TaskValidationError,
)
from taskflow.models.config import BoardConfig
from taskflow.models.result import FiringLogEntry, MutationResult, Notification
from taskflow.models.rule import AutomationRule
from taskflow.models.task import Task, TaskStatus, ensure_utc, utcnow
from taskflow.storage.engine import create_session_factory, create_taskflow_engine, init_db
from taskflow.storage.schema import RuleFiringRow, RuleRow, TaskRow
from taskflow.storage.sqlite import (
    SqliteFiringLogRepository,
    SqliteRuleRepository,
    SqliteTaskRepository,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy import Engine
    from sqlalchemy.orm import Session

    from taskflow.models.result import AutomationResult

logger = logging.getLogger(__name__)


class TaskBoard:
    """A persistent task board with rule-based automation.

    Create a board via :meth:`TaskBoard.open`.

    Example::

        with TaskBoard.open() as board:
            board.add_rule({
                "id": "urgent-review",
                "name": "Urgent review",
                "trigger": "status_changed",
                "conditions": [
                    {"field": "status", "operator": "equals", "value": "review"},
                ],
                "actions": [
                    {"action": "set_priority", "parameters": {"priority": "urgent"}},
                ],
            })
            task = board.create_task(title="Ship it").task
            result = board.update_task(task.id, status="review")
            assert result.task.priority == "urgent"
    """

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def __init__(
        self,
        *,
        engine: Engine | None,
        session: Session,
        config: BoardConfig,
        task_repo: SqliteTaskRepository,
        rule_repo: SqliteRuleRepository,
        firing_repo: SqliteFiringLogRepository,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._engine = engine
        self._session = session
        self._config = config
        self._task_repo = task_repo
        self._rule_repo = rule_repo
        self._firing_repo = firing_repo
        self._clock = clock or utcnow
        self._handlers: list[Callable[[Notification], None]] = []
        self._closed = False

    @classmethod
    def open(
        cls,
        path: str | None = None,
        *,
        config: BoardConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> TaskBoard:
        """Open (or create) a task board.

        Args:
            path: SQLite path.  ``":memory:"`` for in-memory (default).
                When *config* is given, defaults to ``config.db_path``.
            config: Board configuration.  Defaults created if *None*.
                ``config.db_url``, when set, takes precedence over the path.
            clock: Callable returning the current time.  UTC now by
                default; override for deterministic due-date tests.

        Returns:
            A ready-to-use ``TaskBoard`` instance.

        Raises:
            ValueError: If *path* and ``config.db_path`` disagree.
        """
        if config is None:
            config = BoardConfig(db_path=path or ":memory:")
        elif path is not None and path != config.db_path:
            raise ValueError(
                f"path {path!r} conflicts with config.db_path {config.db_path!r}"
            )

        engine = create_taskflow_engine(config.db_path, url=config.db_url)
        init_db(engine)
        session = create_session_factory(engine)()

        return cls(
            engine=engine,
            session=session,
            config=config,
            task_repo=SqliteTaskRepository(session),
            rule_repo=SqliteRuleRepository(session),
            firing_repo=SqliteFiringLogRepository(session),
            clock=clock,
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> BoardConfig:
        return self._config

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def on_notification(self, handler: Callable[[Notification], None]) -> None:
        """Register *handler* to receive notifications from fired rules.

        Handlers run after the mutation is committed, in registration order.
        A handler that raises is logged and does not affect the others.
        """
        self._handlers.append(handler)

    def _dispatch(self, notifications: Iterable[Notification]) -> None:
        for notification in notifications:
            for handler in self._handlers:
                try:
                    handler(notification)
                except Exception as exc:
                    logger.error(
                        "Notification handler %r raised %s: %s",
                        handler,
                        type(exc).__name__,
                        exc,
                    )

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def create_task(self, **fields: Any) -> MutationResult:
        """Create a task and run ``created`` automation on it.

        Field names may be snake_case or camelCase (``assigned_to`` or
        ``assignedTo``).

        Raises:
            TaskValidationError: If the fields do not form a valid task, or
                the given id is already taken.
        """
        now = self._clock()
        data = _normalize_task_fields(fields)
        data.setdefault("created_at", now)
        data.setdefault("updated_at", now)
        candidate = _validate_task(data)

        if self._task_repo.get(candidate.id) is not None:
            raise TaskValidationError(f"Task already exists: {candidate.id}")

        return self._run_automation(None, candidate, "created", now)

    def update_task(self, task_id: str, **changes: Any) -> MutationResult:
        """Apply *changes* to a task and run automation on the mutation.

        Raises:
            TaskNotFoundError: If no task has *task_id*.
            TaskValidationError: If the changes produce an invalid task.
        """
        old = self.get_task(task_id)
        now = self._clock()
        data = _normalize_task_fields(changes)
        if data.get("id", task_id) != task_id:
            raise TaskValidationError("Task id cannot be changed")

        merged = old.model_dump()
        merged.update(data)
        merged["updated_at"] = now
        candidate = _validate_task(merged)

        return self._run_automation(old, candidate, "updated", now)

    def get_task(self, task_id: str) -> Task:
        """Get a task by id.

        Raises:
            TaskNotFoundError: If no task has *task_id*.
        """
        row = self._task_repo.get(task_id)
        if row is None:
            raise TaskNotFoundError(task_id)
        return Task.model_validate(row.payload_json)

    def list_tasks(self, status: TaskStatus | str | None = None) -> list[Task]:
        """All tasks in creation order, optionally filtered by status.

        Raises:
            TaskValidationError: If *status* is not a known task status.
        """
        status_value = None
        if status is not None:
            try:
                status_value = TaskStatus(status).value
            except ValueError:
                raise TaskValidationError(f"Unknown task status: {status!r}") from None
        rows = self._task_repo.list(status=status_value)
        return [Task.model_validate(row.payload_json) for row in rows]

    def delete_task(self, task_id: str) -> None:
        """Delete a task.

        Raises:
            TaskNotFoundError: If no task has *task_id*.
        """
        if not self._task_repo.delete(task_id):
            raise TaskNotFoundError(task_id)
        self._session.commit()

    def _run_automation(
        self,
        old_task: Task | None,
        candidate: Task,
        event: str,
        now: datetime,
    ) -> MutationResult:
        rules = self.list_rules()
        result = execute_automation_rules(
            old_task,
            candidate,
            rules,
            now=now,
            config=self._config.engine,
        )

        try:
            self._task_repo.save(_task_to_row(result.task))
            if result.fired_rule_ids:
                fired = set(result.fired_rule_ids)
                for rule in update_rule_trigger_count(rules, fired, now=now):
                    if rule.id in fired:
                        self._rule_repo.save(_rule_to_row(rule))
                if self._config.record_firings:
                    self._record_firings(result, rules, event, now)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        if result.fired_rule_ids:
            logger.info(
                "Task '%s' %s: %d rule(s) fired",
                result.task.id,
                event,
                len(result.fired_rule_ids),
            )
        self._dispatch(result.notifications)

        return MutationResult(
            task=result.task,
            fired_rule_ids=list(result.fired_rule_ids),
            notifications=list(result.notifications),
        )

    def _record_firings(
        self,
        result: AutomationResult,
        rules: list[AutomationRule],
        event: str,
        now: datetime,
    ) -> None:
        names = {rule.id: rule.name for rule in rules}
        for rule_id in result.fired_rule_ids:
            messages = [n.message for n in result.notifications if n.rule_id == rule_id]
            self._firing_repo.save_entry(
                RuleFiringRow(
                    rule_id=rule_id,
                    rule_name=names.get(rule_id, ""),
                    task_id=result.task.id,
                    event=event,
                    patch_json=to_jsonable_python(result.patches.get(rule_id, {})),
                    notification="\n".join(messages) if messages else None,
                    created_at=_naive_utc(now),
                )
            )

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def add_rule(self, rule: AutomationRule | Mapping[str, Any]) -> AutomationRule:
        """Validate and store a new rule.

        Raises:
            RuleValidationError: If *rule* is not a valid rule.
            DuplicateRuleError: If a rule with the same id already exists.
        """
        validated = _validate_rule(rule)
        if self._rule_repo.get(validated.id) is not None:
            raise DuplicateRuleError(validated.id)
        self._rule_repo.save(_rule_to_row(validated))
        self._session.commit()
        return validated

    def update_rule(self, rule_id: str, **changes: Any) -> AutomationRule:
        """Replace fields of a stored rule, re-validating the result.

        ``updated_at`` is stamped automatically; ``id`` cannot change.

        Raises:
            RuleNotFoundError: If no rule has *rule_id*.
            RuleValidationError: If the result is not a valid rule.
        """
        existing = self.get_rule(rule_id)
        if changes.get("id", rule_id) != rule_id:
            raise RuleValidationError("Rule id cannot be changed")

        data = existing.model_dump(warnings=False)
        for key, value in changes.items():
            data[_rule_attribute(key)] = value
        data["updated_at"] = self._clock()

        updated = _validate_rule(data)
        self._rule_repo.save(_rule_to_row(updated))
        self._session.commit()
        return updated

    def toggle_rule(self, rule_id: str, enabled: bool) -> AutomationRule:
        """Enable or disable a rule.

        Works on legacy rules that no longer validate, so a broken rule
        can always be switched off.

        Raises:
            RuleNotFoundError: If no rule has *rule_id*.
        """
        existing = self.get_rule(rule_id)
        updated = existing.model_copy(
            update={"enabled": bool(enabled), "updated_at": self._clock()}
        )
        self._rule_repo.save(_rule_to_row(updated))
        self._session.commit()
        return updated

    def delete_rule(self, rule_id: str) -> None:
        """Delete a rule.

        Raises:
            RuleNotFoundError: If no rule has *rule_id*.
        """
        if not self._rule_repo.delete(rule_id):
            raise RuleNotFoundError(rule_id)
        self._session.commit()

    def get_rule(self, rule_id: str) -> AutomationRule:
        """Get a rule by id.

        Raises:
            RuleNotFoundError: If no rule has *rule_id*, or its stored data
                is beyond repair.
        """
        row = self._rule_repo.get(rule_id)
        rule = AutomationRule.from_untrusted(row.payload_json) if row is not None else None
        if rule is None:
            raise RuleNotFoundError(rule_id)
        return rule

    def list_rules(self) -> list[AutomationRule]:
        """All stored rules in evaluation order (oldest first).

        Stored data is read leniently: rules written by older versions
        still load, and any part the engine does not understand is a no-op.
        """
        rules = []
        for row in self._rule_repo.get_all():
            rule = AutomationRule.from_untrusted(row.payload_json)
            if rule is None:
                logger.warning("Skipping unreadable rule row '%s'", row.rule_id)
                continue
            rules.append(rule)
        return rules

    def export_rules(self) -> list[dict[str, Any]]:
        """All rules as JSON-compatible dicts with camelCase keys."""
        return [rule.to_wire() for rule in self.list_rules()]

    def import_rules(
        self,
        data: Iterable[AutomationRule | Mapping[str, Any]],
        *,
        replace: bool = False,
    ) -> list[AutomationRule]:
        """Validate and store many rules at once.

        All rules are validated before anything is written; one invalid
        rule aborts the whole import.

        Args:
            data: Rules or rule mappings (e.g. the output of
                :meth:`export_rules`).
            replace: Overwrite rules whose id already exists instead of
                raising.

        Raises:
            RuleValidationError: If any entry is not a valid rule.
            DuplicateRuleError: If an id repeats, or exists and *replace*
                is False.
        """
        rules: list[AutomationRule] = []
        seen: set[str] = set()
        for index, item in enumerate(data):
            try:
                rule = _validate_rule(item)
            except RuleValidationError as exc:
                raise RuleValidationError(f"Rule #{index}: {exc}") from exc
            if rule.id in seen:
                raise DuplicateRuleError(rule.id)
            if not replace and self._rule_repo.get(rule.id) is not None:
                raise DuplicateRuleError(rule.id)
            seen.add(rule.id)
            rules.append(rule)

        try:
            for rule in rules:
                self._rule_repo.save(_rule_to_row(rule))
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        logger.info("Imported %d rule(s)", len(rules))
        return rules

    # ------------------------------------------------------------------
    # Audit log
    # ------------------------------------------------------------------

    def firing_log(
        self,
        rule_id: str | None = None,
        *,
        task_id: str | None = None,
        limit: int = 100,
    ) -> list[FiringLogEntry]:
        """Recorded rule firings, most recent first."""
        rows = self._firing_repo.get_log(rule_id=rule_id, task_id=task_id, limit=limit)
        return [
            FiringLogEntry(
                id=row.id,
                rule_id=row.rule_id,
                rule_name=row.rule_name,
                task_id=row.task_id,
                event=row.event,
                patch=dict(row.patch_json or {}),
                notification=row.notification,
                created_at=ensure_utc(row.created_at),
            )
            for row in rows
        ]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the session and dispose the engine."""
        if self._closed:
            return
        self._closed = True
        self._session.close()
        if self._engine is not None:
            self._engine.dispose()

    def __enter__(self) -> TaskBoard:
        return self

    def __exit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: object) -> None:
        self.close()

    def __repr__(self) -> str:
        if self._closed:
            return f"TaskBoard(db='{self._config.db_path}', closed=True)"
        return f"TaskBoard(db='{self._config.db_path}')"


# ----------------------------------------------------------------------
# Row <-> model helpers
# ----------------------------------------------------------------------


def _naive_utc(value: datetime) -> datetime:
    return ensure_utc(value).replace(tzinfo=None)


def _task_to_row(task: Task) -> TaskRow:
    return TaskRow(
        task_id=task.id,
        title=task.title,
        status=task.status.value,
        priority=task.priority.value,
        assigned_to=task.assigned_to,
        due_date=_naive_utc(task.due_date) if task.due_date else None,
        payload_json=task.to_wire(),
        created_at=_naive_utc(task.created_at),
        updated_at=_naive_utc(task.updated_at),
    )


def _rule_to_row(rule: AutomationRule) -> RuleRow:
    created_at = rule.created_at if isinstance(rule.created_at, datetime) else utcnow()
    updated_at = rule.updated_at if isinstance(rule.updated_at, datetime) else created_at
    return RuleRow(
        rule_id=rule.id,
        name=rule.name,
        enabled=rule.enabled is True,
        trigger=str(getattr(rule.trigger, "value", rule.trigger)),
        trigger_count=rule.trigger_count,
        payload_json=rule.to_wire(),
        created_at=_naive_utc(created_at),
        updated_at=_naive_utc(updated_at),
    )


def _normalize_task_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    data: dict[str, Any] = {}
    for key, value in fields.items():
        name = attribute_name(key)
        if name is None:
            raise TaskValidationError(f"Unknown task field: {key}")
        data[name] = value
    return data


def _validate_task(data: Mapping[str, Any]) -> Task:
    try:
        return Task.model_validate(data)
    except ValidationError as exc:
        raise TaskValidationError(str(exc)) from exc


def _rule_attribute(key: str) -> str:
    for name, info in AutomationRule.model_fields.items():
        if key == name or key == (info.alias or to_camel(name)):
            return name
    raise RuleValidationError(f"Unknown rule field: {key}")


def _validate_rule(rule: AutomationRule | Mapping[str, Any]) -> AutomationRule:
    try:
        if isinstance(rule, AutomationRule):
            return AutomationRule.model_validate(rule.model_dump(warnings=False))
        return AutomationRule.model_validate(rule)
    except ValidationError as exc:
        raise RuleValidationError(str(exc)) from exc
