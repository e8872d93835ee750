"""SQLAlchemy ORM schema for Taskflow.

Defines all database tables: tasks, automation_rules, rule_firings,
_taskflow_meta.

Tasks and rules are stored as their full wire payload (``payload_json``)
plus a few denormalized columns used for filtering and ordering.  The
payload is authoritative; the columns are rewritten on every save.
Timestamps in columns are naive UTC.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Index, Integer, JSON, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all Taskflow ORM models."""

    pass


class TaskRow(Base):
    """A task snapshot."""

    __tablename__ = "tasks"

    task_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    priority: Mapped[str] = mapped_column(String(32), nullable=False)
    assigned_to: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    payload_json: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (
        Index("ix_tasks_created", "created_at"),
    )


class RuleRow(Base):
    """An automation rule.

    ``trigger`` is a plain string column: legacy rows may carry trigger
    kinds the engine no longer knows, and those must still load.
    """

    __tablename__ = "automation_rules"

    rule_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    trigger: Mapped[str] = mapped_column(String(50), nullable=False)
    trigger_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    payload_json: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (
        Index("ix_rules_created", "created_at", "rule_id"),
    )


class RuleFiringRow(Base):
    """Audit log entry for one rule firing on one task mutation."""

    __tablename__ = "rule_firings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    rule_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    rule_name: Mapped[str] = mapped_column(String(255), nullable=False)
    task_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    event: Mapped[str] = mapped_column(
        String(20), nullable=False
    )  # "created" or "updated"
    patch_json: Mapped[dict] = mapped_column(JSON, nullable=False)
    notification: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (
        Index("ix_rule_firings_time", "created_at"),
    )


class TaskflowMetaRow(Base):
    """Key-value metadata for the Taskflow database itself (e.g., schema version)."""

    __tablename__ = "_taskflow_meta"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
