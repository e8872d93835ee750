"""Engine and session factory for Taskflow storage.

Provides SQLite engine creation with performance pragmas,
session factory creation, and database initialization.
"""

from __future__ import annotations

import logging

from sqlalchemy import Engine, create_engine, event, select
from sqlalchemy.orm import Session, sessionmaker

from taskflow.storage.schema import Base, TaskflowMetaRow

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1"


def create_taskflow_engine(
    db_path: str = ":memory:",
    *,
    url: str | None = None,
) -> Engine:
    """Create a SQLAlchemy engine for Taskflow storage.

    Args:
        db_path: Path to SQLite database file, or ``":memory:"`` for
            in-memory.  Ignored when *url* is provided.
        url: Full SQLAlchemy database URL, e.g.
            ``"sqlite:///path/to/file.db"``.

    Returns:
        Configured SQLAlchemy Engine.  SQLite pragmas (WAL, busy_timeout,
        foreign keys) are applied when the dialect is SQLite.
    """
    if url is not None:
        engine = create_engine(url, echo=False)
    elif db_path == ":memory:":
        engine = create_engine("sqlite://", echo=False)
    else:
        engine = create_engine(f"sqlite:///{db_path}", echo=False)

    if engine.dialect.name == "sqlite":

        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_conn, connection_record):  # type: ignore[no-untyped-def]
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA busy_timeout=5000")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create a session factory bound to the given engine.

    Uses expire_on_commit=False to prevent lazy-load issues
    when accessing attributes after commit.
    """
    return sessionmaker(bind=engine, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create all tables and record the schema version (idempotent)."""
    Base.metadata.create_all(engine)

    SessionLocal = create_session_factory(engine)
    with SessionLocal() as session:
        existing = session.execute(
            select(TaskflowMetaRow).where(TaskflowMetaRow.key == "schema_version")
        ).scalar_one_or_none()
        if existing is None:
            session.add(TaskflowMetaRow(key="schema_version", value=SCHEMA_VERSION))
            session.commit()
            logger.debug("Initialized taskflow schema v%s", SCHEMA_VERSION)
        elif existing.value != SCHEMA_VERSION:
            logger.warning(
                "Database schema version %s differs from %s",
                existing.value,
                SCHEMA_VERSION,
            )
