# tests/test_task_loop.py

from __future__ import annotations

import asyncio

import pytest

from task_dispatcher.tasks.task_loop import run_dispatcher_loop


class CountingDispatcher:
    def __init__(self, results: list[object]) -> None:
        self.results = list(results)
        self.calls = 0
        self.stop: asyncio.Event | None = None
        self.loop: asyncio.AbstractEventLoop | None = None

    def run(self) -> bool:
        self.calls += 1
        outcome = self.results.pop(0) if self.results else True
        if not self.results and self.stop is not None and self.loop is not None:
            self.loop.call_soon_threadsafe(self.stop.set)
        if isinstance(outcome, Exception):
            raise outcome
        return bool(outcome)


@pytest.mark.asyncio
async def test_loop_stops_when_event_is_set() -> None:
    stop = asyncio.Event()
    dispatcher = CountingDispatcher([True])
    dispatcher.stop = stop
    dispatcher.loop = asyncio.get_running_loop()

    await asyncio.wait_for(
        run_dispatcher_loop(dispatcher, interval_seconds=0.5, stop_event=stop),
        timeout=5.0,
    )

    assert dispatcher.calls == 1


@pytest.mark.asyncio
async def test_loop_survives_failed_and_raising_passes() -> None:
    stop = asyncio.Event()
    dispatcher = CountingDispatcher([False, RuntimeError("boom"), True])
    dispatcher.stop = stop
    dispatcher.loop = asyncio.get_running_loop()

    await asyncio.wait_for(
        run_dispatcher_loop(dispatcher, interval_seconds=0.5, stop_event=stop),
        timeout=10.0,
    )

    assert dispatcher.calls == 3


@pytest.mark.asyncio
async def test_loop_without_event_runs_until_cancelled() -> None:
    dispatcher = CountingDispatcher([])

    runner = asyncio.create_task(run_dispatcher_loop(dispatcher, interval_seconds=0.5))
    await asyncio.sleep(0.2)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner

    assert dispatcher.calls == 1
