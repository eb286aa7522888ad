"""Periodic task dispatcher: runs due tasks from a task store through type-specific handlers."""

__version__ = "0.1.0"
