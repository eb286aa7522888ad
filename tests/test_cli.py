# tests/test_cli.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from task_dispatcher.cli import main as cli_main
from task_dispatcher.logging_setup import setup_logging
from task_dispatcher.tasks.task_store import TaskStore


def test_main_run_once_processes_due_tasks(monkeypatch, settings) -> None:
    calls: list[dict] = []
    monkeypatch.setattr(cli_main, "get_settings", lambda: settings)
    monkeypatch.setattr(cli_main, "setup_logging", lambda **kw: calls.append(kw))

    settings.data_dir.mkdir(parents=True, exist_ok=True)
    store = TaskStore(settings.tasks_db_path)
    store.add_task(task_type="Test", data={"success": True})

    assert cli_main.main() == 0
    assert store.count_tasks() == 0
    assert calls and calls[0]["console_level"] == logging.DEBUG


@pytest.fixture()
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)
    logging.captureWarnings(False)


def test_setup_logging_writes_file(tmp_path: Path, restore_root_logging) -> None:
    setup_logging(log_dir=tmp_path, console_level=logging.WARNING)

    logging.getLogger("task_dispatcher.test").debug("hello file")
    for h in logging.getLogger().handlers:
        h.flush()

    assert "hello file" in (tmp_path / "task_dispatcher.log").read_text("utf-8")
    assert logging.getLogger("httpx").level == logging.WARNING


def test_console_filter_keeps_own_records_and_quiets_libraries(tmp_path: Path, restore_root_logging) -> None:
    setup_logging(log_dir=tmp_path, console_level=logging.DEBUG)
    console = logging.getLogger().handlers[0]

    def record(name: str, level: int) -> logging.LogRecord:
        return logging.LogRecord(name, level, __file__, 1, "msg", None, None)

    assert console.filter(record("task_dispatcher.tasks.dispatcher", logging.DEBUG))
    assert not console.filter(record("httpx", logging.INFO))
    assert console.filter(record("httpx", logging.WARNING))
    assert not console.filter(record("py.warnings", logging.WARNING))
