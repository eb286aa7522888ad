# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "DISPATCH_APP_NAME": "App display name (default: task-dispatcher).",
    "DISPATCH_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Storage
    "DISPATCH_DATA_DIR": "Directory for the task database and log file (default: .local/task_dispatcher).",
    "DISPATCH_TASKS_DB_PATH": "SQLite task database (default: <DATA_DIR>/tasks.sqlite3).",
    # Dispatcher loop
    "DISPATCH_POLL_INTERVAL_SECONDS": "Seconds between passes (default: 15, minimum 0.5).",
    "DISPATCH_RUN_ONCE": "Run a single pass and exit (true/false, default: false).",
    # HTTPRequest handler
    "DISPATCH_HTTP_TIMEOUT_SECONDS": "Per-request timeout (default: 10).",
    "DISPATCH_HTTP_RETRY_DELAY_SECONDS": "Delay before a failed request is retried (default: 60).",
    "DISPATCH_HTTP_MAX_ATTEMPTS": "Attempts before a request task is dropped (default: 5).",
}
