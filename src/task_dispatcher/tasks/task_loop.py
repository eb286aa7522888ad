# src/task_dispatcher/tasks/task_loop.py

from __future__ import annotations

import asyncio
import logging

from .dispatcher import Dispatcher

logger = logging.getLogger(__name__)


async def run_dispatcher_loop(
        dispatcher: Dispatcher,
        *,
        interval_seconds: float = 15.0,
        stop_event: asyncio.Event | None = None,
) -> None:
    """
    Simple polling driver.

    Every interval_seconds:
    - run one dispatcher pass in a worker thread (handlers may block on I/O)
    - wait for the pass to finish before sleeping, so passes never overlap

    Stops when stop_event is set, or when the coroutine/task is cancelled.
    """
    sleep_s = max(0.5, float(interval_seconds))

    while stop_event is None or not stop_event.is_set():
        try:
            ok = await asyncio.to_thread(dispatcher.run)
            if not ok:
                logger.warning("Dispatcher pass failed; retrying in %.1fs", sleep_s)
        except Exception:
            logger.exception("Dispatcher pass raised")

        if stop_event is None:
            await asyncio.sleep(sleep_s)
            continue

        try:
            await asyncio.wait_for(stop_event.wait(), timeout=sleep_s)
        except asyncio.TimeoutError:
            pass
