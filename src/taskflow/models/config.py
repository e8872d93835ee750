"""Configuration models for Taskflow.

EngineConfig tunes the automation engine.
BoardConfig holds per-board settings (storage and engine).
"""

from __future__ import annotations

from pydantic import BaseModel, Field

DEFAULT_NOTIFICATION_MESSAGE = "Task automation triggered"


class EngineConfig(BaseModel):
    """Automation engine settings."""

    model_config = {"frozen": True}

    due_window_hours: float = Field(default=24.0, gt=0)
    default_notification_message: str = DEFAULT_NOTIFICATION_MESSAGE


class BoardConfig(BaseModel):
    """Per-board configuration."""

    db_path: str = ":memory:"
    db_url: str | None = None
    engine: EngineConfig = Field(default_factory=EngineConfig)
    record_firings: bool = True
