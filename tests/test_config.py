# tests/test_config.py

from __future__ import annotations

from pathlib import Path

from task_dispatcher.config import Settings


def test_settings_defaults(monkeypatch) -> None:
    for name in (
        "DISPATCH_DATA_DIR",
        "DISPATCH_TASKS_DB_PATH",
        "DISPATCH_POLL_INTERVAL_SECONDS",
        "DISPATCH_RUN_ONCE",
        "DISPATCH_HTTP_MAX_ATTEMPTS",
    ):
        monkeypatch.delenv(name, raising=False)

    s = Settings.from_env()

    assert s.data_dir == Path(".local/task_dispatcher")
    assert s.tasks_db_path == s.data_dir / "tasks.sqlite3"
    assert s.poll_interval_seconds == 15.0
    assert s.run_once is False
    assert s.http_max_attempts == 5


def test_settings_from_env(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("DISPATCH_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("DISPATCH_TASKS_DB_PATH", raising=False)
    monkeypatch.setenv("DISPATCH_POLL_INTERVAL_SECONDS", "2.5")
    monkeypatch.setenv("DISPATCH_RUN_ONCE", "yes")
    monkeypatch.setenv("DISPATCH_HTTP_MAX_ATTEMPTS", "not-a-number")

    s = Settings.from_env()

    assert s.tasks_db_path == tmp_path / "tasks.sqlite3"
    assert s.poll_interval_seconds == 2.5
    assert s.run_once is True
    assert s.http_max_attempts == 5
