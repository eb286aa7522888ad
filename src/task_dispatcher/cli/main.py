# src/task_dispatcher/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds the Dispatcher, then either:
- runs a single pass and exits (DISPATCH_RUN_ONCE=1), or
- polls every DISPATCH_POLL_INTERVAL_SECONDS until SIGINT/SIGTERM.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
import sys

from ..cli.bootstrap import create_dispatcher
from ..config import get_settings
from ..logging_setup import setup_logging
from ..tasks.dispatcher import Dispatcher
from ..tasks.task_loop import run_dispatcher_loop

logger = logging.getLogger(__name__)


async def _serve(dispatcher: Dispatcher, interval_seconds: float) -> None:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()

    def _handle_signal(signum: int) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        # Not available on every platform (e.g. Windows event loops).
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.add_signal_handler(sig, _handle_signal, sig)

    await run_dispatcher_loop(dispatcher, interval_seconds=interval_seconds, stop_event=stop)


def main() -> int:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    dispatcher = create_dispatcher(settings=settings)

    if settings.run_once:
        ok = dispatcher.run()
        logger.info("Single pass finished ok=%s", ok)
        return 0 if ok else 1

    try:
        asyncio.run(_serve(dispatcher, settings.poll_interval_seconds))
    except KeyboardInterrupt:
        pass

    logger.info("Bye.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
