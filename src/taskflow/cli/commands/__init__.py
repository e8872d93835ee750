"""Taskflow CLI subcommands."""
