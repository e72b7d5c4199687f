# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real tokens. Use .env (local, gitignored).

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "OTASKS_APP_NAME": "App display name (default: offline-tasks).",
    "OTASKS_LOG_LEVEL": "Console logging level (default: INFO).",
    # Front-end
    "OTASKS_CONSOLE_ENABLED": "Run the console REPL (true/false, default: true).",
    "OTASKS_NOTIFICATIONS_ENABLED": "Permission to show sync/creation notifications (default: false).",
    # Remote store
    "OTASKS_REMOTE_BASE_URL": "Remote task API base URL (default: http://127.0.0.1:8080/api).",
    "OTASKS_REMOTE_TIMEOUT_SECONDS": "HTTP client timeout for remote calls (default: 10).",
    # Identity (supplied externally)
    "OTASKS_USER_ID": "User id the remote collection belongs to.",
    "OTASKS_AUTH_TOKEN": "Bearer token for the remote store.",
    # Connectivity
    "OTASKS_START_ONLINE": "Initial connectivity state before the first probe (default: false).",
    "OTASKS_PROBE_HOST": "Host used for the TCP reachability probe (default: 1.1.1.1).",
    "OTASKS_PROBE_PORT": "Port used for the probe (default: 53).",
    "OTASKS_PROBE_INTERVAL_SECONDS": "Probe period; 0 disables the probe (use /online, /offline).",
    "OTASKS_PROBE_TIMEOUT_SECONDS": "Probe connect timeout (default: 3).",
    # Paths (gitignored)
    "OTASKS_DATA_DIR": "Local data directory (default: .local/offline-tasks).",
    "OTASKS_TASKS_DB_PATH": "TaskStore SQLite path (default: <data_dir>/tasks.sqlite3).",
    "OTASKS_BACKGROUND_SYNC_PATH": (
        "Deferred sync registrations (default: <data_dir>/background_sync.json)."
    ),
}
