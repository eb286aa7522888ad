# src/task_dispatcher/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the dispatcher.

The dispatcher depends on Protocols instead of concrete implementations.
This keeps the task store and handler types swappable and makes testing easier.
"""

from datetime import datetime
from typing import Any, Protocol, Sequence

from ..tasks.task_models import Task, TaskListItem, TaskResult


class TaskRepo(Protocol):
    """
    Durable task storage.

    list_tasks() returns an empty sequence when there is nothing queued and
    raises when the listing itself fails. A None entry marks a record that
    could not be read.
    """

    def list_tasks(self) -> Sequence[TaskListItem | None]: ...
    def get_task(self, task_id: int) -> Task | None: ...
    def delete_task(self, task_id: int) -> bool: ...
    def add_task(
            self,
            *,
            task_type: str,
            data: Any,
            due_time: datetime | None = None,
    ) -> int: ...


class TaskHandler(Protocol):
    """Type-specific executor for a task payload."""
    def run(self, data: Any) -> TaskResult: ...


class HandlerFactory(Protocol):
    """Builds a handler for a type tag; raises if the tag is unknown or construction fails."""
    def create(self, task_type: str) -> TaskHandler: ...
