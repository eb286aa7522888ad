# src/task_dispatcher/tasks/dispatcher.py

from __future__ import annotations

"""
Task dispatcher.

One call to Dispatcher.run() is one pass over the task store:
- list every stored task,
- purge entries that can never run (no type, unreadable payload, unknown handler),
- leave entries that are not yet due,
- run the handler for due entries, delete them, and re-register those that ask for a retry.

Repetition (timers, polling) belongs to the caller; see task_loop.py.
"""

import logging
from collections import Counter
from collections.abc import Callable
from datetime import datetime
from typing import Any

from ..core.ports import HandlerFactory, TaskRepo
from .task_models import EntryOutcome, TaskListItem, TaskResult
from .timeutil import coerce_due_time, format_timestamp, is_due, utc_now

logger = logging.getLogger(__name__)


class Dispatcher:
    def __init__(
        self,
        task_store: TaskRepo,
        handlers: HandlerFactory,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = task_store
        self._handlers = handlers
        self._clock = clock
        self.last_pass: Counter[EntryOutcome] = Counter()

    # ---- public API ----

    def run(self) -> bool:
        """
        Perform exactly one pass over all stored tasks.

        Returns False only if the task list could not be read; every
        per-task problem is logged and the pass moves on.
        """
        try:
            items = self._store.list_tasks()
        except Exception:
            logger.exception("Can't get task list")
            return False

        outcomes: Counter[EntryOutcome] = Counter()
        self.last_pass = outcomes

        if not items:
            return True

        for item in items:
            outcomes[self._process_entry(item)] += 1

        logger.debug(
            "Pass done: %s",
            ", ".join(f"{k.value}={v}" for k, v in sorted(outcomes.items())) or "nothing",
        )
        return True

    def register(self, task_type: Any, data: Any, due_time: Any = None) -> int | None:
        """
        Validate and store a new task.

            task_id = dispatcher.register(
                "HTTPRequest",
                {"url": "https://example.com/hook", "body": {...}},
                due_time="2026-01-19 23:59:59",   # optional, defaults to now
            )

        A due time without an offset ("2026-01-19 23:59:59", naive datetime)
        is read as UTC; pass an aware datetime or an ISO string with an offset
        to schedule in local time.

        Returns the new task id, or None if validation or storage failed.
        Nothing is written when validation fails.
        """
        if not isinstance(task_type, str) or not task_type.strip():
            logger.error("Got no task type with content!")
            return None

        if data is None:
            logger.error("Got undefined task data for type=%s!", task_type)
            return None

        try:
            due = coerce_due_time(due_time)
        except ValueError as e:
            logger.error("Got invalid due time for type=%s: %s", task_type, e)
            return None

        try:
            task_id = self._store.add_task(task_type=task_type, data=data, due_time=due)
        except Exception:
            logger.exception("Task could not be registered type=%s", task_type)
            return None

        if not task_id:
            logger.error("Task could not be registered type=%s", task_type)
            return None

        return task_id

    # ---- per-entry steps ----

    def _delete(self, task_id: int) -> bool:
        try:
            return bool(self._store.delete_task(task_id))
        except Exception:
            logger.exception("delete_task failed task_id=%s", task_id)
            return False

    def _purge(self, task_id: int) -> EntryOutcome:
        if not self._delete(task_id):
            logger.error("Can't delete task %s", task_id)
        return EntryOutcome.PURGED

    def _process_entry(self, item: TaskListItem | None) -> EntryOutcome:
        task_id = getattr(item, "id", None)
        if item is None or task_id is None:
            logger.error("Got invalid task list entry!")
            return EntryOutcome.INVALID

        task_type = getattr(item, "task_type", None)
        if not isinstance(task_type, str) or not task_type.strip():
            logger.error("Task %s will be deleted because type is not set!", task_id)
            return self._purge(task_id)

        try:
            due_time = coerce_due_time(getattr(item, "due_time", None))
        except ValueError as e:
            logger.error("Task %s will be deleted because its due time is invalid: %s", task_id, e)
            return self._purge(task_id)

        if not is_due(due_time, self._clock()):
            return EntryOutcome.NOT_DUE

        try:
            task = self._store.get_task(task_id)
        except Exception:
            logger.exception("get_task failed task_id=%s", task_id)
            task = None

        fetched_type = getattr(task, "task_type", None) if task else None
        if not isinstance(fetched_type, str) or not fetched_type.strip():
            logger.error("Got invalid task data for task %s!", task_id)
            return self._purge(task_id)

        if fetched_type != task_type:
            logger.warning(
                "Task %s type changed between list and fetch (%s -> %s)",
                task_id,
                task_type,
                fetched_type,
            )
        task_type = fetched_type

        try:
            handler = self._handlers.create(task_type)
        except Exception as e:
            logger.error("Can't create %s task handler object! %s", task_type, e)
            return self._purge(task_id)

        result = self._run_handler(handler, task_id, task_type, task.data)

        if not self._delete(task_id):
            logger.error("Can't delete task %s after run; skipping re-schedule", task_id)
            return EntryOutcome.DROPPED

        if result.success or not result.reschedule:
            return EntryOutcome.FINISHED

        new_data = result.data if result.data is not None else task.data
        new_id = self.register(task_type, new_data, result.due_time or None)
        if not new_id:
            logger.error("Can't re-schedule task %s type=%s", task_id, task_type)
            return EntryOutcome.DROPPED

        logger.info(
            "Task %s type=%s is re-scheduled as %s (due %s)",
            task_id,
            task_type,
            new_id,
            format_timestamp(coerce_due_time(result.due_time)),
        )
        return EntryOutcome.RESCHEDULED

    @staticmethod
    def _run_handler(handler: Any, task_id: int, task_type: str, data: Any) -> TaskResult:
        try:
            result = handler.run(data)
        except Exception:
            logger.exception("Task handler raised task_id=%s type=%s", task_id, task_type)
            return TaskResult.failed()

        if not isinstance(result, TaskResult):
            logger.error(
                "Task handler for type=%s returned %s instead of TaskResult",
                task_type,
                type(result).__name__,
            )
            return TaskResult.failed()

        return result
