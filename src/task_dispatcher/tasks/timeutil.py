# src/task_dispatcher/tasks/timeutil.py

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(dt: datetime) -> datetime:
    # Naive datetimes are treated as UTC, not local time.
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _coerce(value: Any) -> datetime | None:
    if value is None:
        return None

    if isinstance(value, datetime):
        return _as_utc(value)

    # bool is an int subclass; a flag is never a timestamp.
    if isinstance(value, bool):
        raise ValueError(f"invalid due time: {value!r}")

    if isinstance(value, (int, float)):
        return from_epoch(float(value))

    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        try:
            return _as_utc(datetime.strptime(s, TIMESTAMP_FORMAT))
        except ValueError:
            pass
        try:
            return _as_utc(datetime.fromisoformat(s))
        except ValueError as e:
            raise ValueError(f"invalid due time: {value!r}") from e

    raise ValueError(f"invalid due time type: {type(value).__name__}")


def coerce_due_time(value: Any) -> datetime | None:
    """
    Normalize a due time into an aware UTC datetime.

    Accepted:
    - None or "" -> None ("now", resolved by the store)
    - datetime (naive values are UTC)
    - int/float epoch seconds
    - "YYYY-MM-DD HH:MM:SS" (read as UTC) or any ISO-8601 string;
      add an offset ("+02:00") to give a local wall-clock time

    Raises ValueError for anything else, including values outside the
    representable date range.
    """
    try:
        return _coerce(value)
    except (OverflowError, OSError) as e:
        raise ValueError(f"due time out of range: {value!r}") from e


def is_due(due_time: datetime | None, now: datetime) -> bool:
    """Strictly future tasks wait; everything else (including None) is due."""
    if due_time is None:
        return True
    return not (_as_utc(due_time) > _as_utc(now))


def to_epoch(dt: datetime) -> float:
    return _as_utc(dt).timestamp()


def from_epoch(ts: float) -> datetime:
    return datetime.fromtimestamp(float(ts), tz=timezone.utc)


def format_timestamp(dt: datetime | None) -> str:
    if dt is None:
        return "-"
    return _as_utc(dt).strftime(TIMESTAMP_FORMAT)
