# src/task_dispatcher/handlers/registry.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..core.ports import TaskHandler

HandlerFactoryFunc = Callable[[], TaskHandler]

logger = logging.getLogger(__name__)


class TaskHandlerError(Exception):
    """A handler could not be constructed for a task type."""

    def __init__(self, task_type: str, message: str) -> None:
        super().__init__(f"{task_type}: {message}")
        self.task_type = task_type


class UnknownTaskTypeError(TaskHandlerError):
    def __init__(self, task_type: str) -> None:
        super().__init__(task_type, "no handler registered for this task type")


class TaskHandlerRegistry:
    """Maps task type tags to handler factories."""

    def __init__(self) -> None:
        self._factories: dict[str, HandlerFactoryFunc] = {}

    def register(self, task_type: str, factory: HandlerFactoryFunc) -> None:
        key = (task_type or "").strip()
        if not key:
            raise ValueError("task_type is required")
        if key in self._factories:
            logger.warning("Handler for task type=%s already exists, overriding", key)
        self._factories[key] = factory
        logger.debug("Registered task handler: %s", key)

    def unregister(self, task_type: str) -> None:
        self._factories.pop(task_type, None)

    def known_types(self) -> list[str]:
        return sorted(self._factories)

    def __contains__(self, task_type: object) -> bool:
        return task_type in self._factories

    def create(self, task_type: str) -> TaskHandler:
        """
        Build a fresh handler instance for task_type.

        Raises UnknownTaskTypeError for unregistered tags and TaskHandlerError
        (chained to the original exception) when the factory itself fails.
        """
        factory = self._factories.get(task_type)
        if factory is None:
            raise UnknownTaskTypeError(task_type)
        try:
            return factory()
        except Exception as e:
            raise TaskHandlerError(task_type, f"handler construction failed: {e}") from e
