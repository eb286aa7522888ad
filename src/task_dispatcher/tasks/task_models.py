# src/task_dispatcher/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any


@dataclass(slots=True, frozen=True)
class TaskListItem:
    """
    Lightweight task entry as returned by TaskStore.list_tasks().

    The payload is intentionally not loaded here; the dispatcher fetches
    the full Task only once the entry is known to be due.
    """

    id: int
    task_type: str
    due_time: datetime | None


@dataclass(slots=True)
class Task:
    id: int
    task_type: str
    due_time: datetime | None
    data: Any


@dataclass(slots=True, frozen=True)
class TaskResult:
    """
    Outcome of a handler run.

    Notes:
    - reschedule is only honoured when success is False.
    - due_time None means "as soon as possible" (resolved to now by the store).
    - data None means "keep the original payload".
    """

    success: bool
    reschedule: bool = False
    due_time: datetime | str | float | None = None
    data: Any = None

    @classmethod
    def ok(cls) -> TaskResult:
        return cls(success=True)

    @classmethod
    def failed(cls) -> TaskResult:
        return cls(success=False)

    @classmethod
    def retry(cls, *, due_time: datetime | str | float | None = None, data: Any = None) -> TaskResult:
        return cls(success=False, reschedule=True, due_time=due_time, data=data)


class EntryOutcome(StrEnum):
    """What happened to one listed entry during a dispatcher pass."""

    INVALID = "invalid"  # unreadable entry, left untouched
    NOT_DUE = "not_due"
    PURGED = "purged"  # deleted without a handler run
    FINISHED = "finished"
    RESCHEDULED = "rescheduled"
    DROPPED = "dropped"  # handler ran but delete or re-registration failed
