# src/task_dispatcher/handlers/builtin.py

"""
Built-in handler types.

- Test: turns its payload straight into a TaskResult (smoke tests, sanity checks).
- HTTPRequest: calls a remote HTTP endpoint and asks for a retry on transient failures.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

import httpx

from ..tasks.task_models import TaskResult
from ..tasks.timeutil import format_timestamp, utc_now
from .registry import TaskHandlerRegistry

logger = logging.getLogger(__name__)

TEST_TASK_TYPE = "Test"
HTTP_REQUEST_TASK_TYPE = "HTTPRequest"

_RETRYABLE_STATUS = {408, 425, 429}


def _payload_flag(data: dict[str, Any], key: str, default: bool) -> bool:
    # JSON booleans, or the strings "true"/"false"; anything else keeps the default.
    value = data.get(key)
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        s = value.strip().lower()
        if s in {"1", "true", "yes", "on"}:
            return True
        if s in {"0", "false", "no", "off"}:
            return False
    return default


class EchoTaskHandler:
    """
    Payload keys: success, reschedule, due_time, data.
    Anything that is not a dict is treated as a plain success.
    """

    def run(self, data: Any) -> TaskResult:
        if not isinstance(data, dict):
            return TaskResult.ok()
        return TaskResult(
            success=_payload_flag(data, "success", True),
            reschedule=_payload_flag(data, "reschedule", False),
            due_time=data.get("due_time"),
            data=data.get("data"),
        )


class HttpRequestTaskHandler:
    """
    Perform a single HTTP request described by the task payload.

    Payload:
        {"url": "...", "method": "POST", "headers": {...}, "body": <json>, "attempt": 0}

    Outcome:
    - 2xx -> success
    - transport error, 5xx, 408/425/429 -> retry after retry_delay_seconds,
      until max_attempts is reached
    - any other status, or a malformed payload -> failure, no retry
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = 10.0,
        retry_delay_seconds: float = 60.0,
        max_attempts: int = 5,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._timeout = httpx.Timeout(max(0.1, float(timeout_seconds)))
        self._retry_delay = max(1.0, float(retry_delay_seconds))
        self._max_attempts = max(1, int(max_attempts))
        self._transport = transport

    def _retry(self, data: dict[str, Any], attempt: int, reason: str) -> TaskResult:
        if attempt >= self._max_attempts:
            logger.error("HTTP task gave up after %d attempts: %s", attempt, reason)
            return TaskResult.failed()

        due = utc_now() + timedelta(seconds=self._retry_delay)
        logger.warning(
            "HTTP task attempt %d/%d failed (%s); retry at %s",
            attempt,
            self._max_attempts,
            reason,
            format_timestamp(due),
        )
        return TaskResult.retry(due_time=due, data={**data, "attempt": attempt})

    def run(self, data: Any) -> TaskResult:
        if not isinstance(data, dict):
            logger.error("HTTP task payload must be an object, got %s", type(data).__name__)
            return TaskResult.failed()

        url = str(data.get("url") or "").strip()
        if not url:
            logger.error("HTTP task payload has no url")
            return TaskResult.failed()
        try:
            scheme = httpx.URL(url).scheme
        except httpx.InvalidURL:
            scheme = ""
        if scheme not in ("http", "https"):
            logger.error("HTTP task has an invalid url=%s", url)
            return TaskResult.failed()

        method = str(data.get("method") or "POST").upper()
        headers = data.get("headers") or {}
        if not isinstance(headers, dict):
            logger.error("HTTP task headers must be an object")
            return TaskResult.failed()
        body = data.get("body")
        try:
            attempt = int(data.get("attempt") or 0) + 1
        except (TypeError, ValueError):
            attempt = 1

        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                resp = client.request(method, url, headers=headers, json=body)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol):
            logger.error("HTTP task has an invalid url=%s", url)
            return TaskResult.failed()
        except httpx.HTTPError as e:
            return self._retry(data, attempt, f"{e.__class__.__name__}: {e}")

        if resp.is_success:
            logger.info("HTTP task %s %s -> %s", method, url, resp.status_code)
            return TaskResult.ok()

        if resp.status_code >= 500 or resp.status_code in _RETRYABLE_STATUS:
            return self._retry(data, attempt, f"HTTP {resp.status_code}")

        logger.error("HTTP task %s %s rejected with %s", method, url, resp.status_code)
        return TaskResult.failed()


def build_default_registry(settings=None) -> TaskHandlerRegistry:
    """
    Registry with the built-in handler types.

    HTTP tuning is read from settings when given (attribute access is
    best-effort so that test doubles can be passed in).
    """
    timeout_s = float(getattr(settings, "http_timeout_seconds", 10.0))
    retry_s = float(getattr(settings, "http_retry_delay_seconds", 60.0))
    max_attempts = int(getattr(settings, "http_max_attempts", 5))

    registry = TaskHandlerRegistry()
    registry.register(TEST_TASK_TYPE, EchoTaskHandler)
    registry.register(
        HTTP_REQUEST_TASK_TYPE,
        lambda: HttpRequestTaskHandler(
            timeout_seconds=timeout_s,
            retry_delay_seconds=retry_s,
            max_attempts=max_attempts,
        ),
    )
    return registry
