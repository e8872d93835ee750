"""Storage layer for Taskflow: SQLAlchemy schema, engine and repositories."""
