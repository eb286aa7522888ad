# src/task_dispatcher/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the SQLite task store and the built-in handler registry into a Dispatcher.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..handlers.builtin import build_default_registry
from ..tasks.dispatcher import Dispatcher
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_dispatcher(*, settings=None) -> Dispatcher:
    """
    Create a Dispatcher from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    registry = build_default_registry(settings)
    logger.info("Task handlers: %s", ", ".join(registry.known_types()))

    return Dispatcher(TaskStore(settings.tasks_db_path), registry)
