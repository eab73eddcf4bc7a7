# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TODO_APP_NAME": "Title shown at the top of the UI (default: CLI TODO APP).",
    "TODO_LOG_LEVEL": "Console logging level for the daemon (default: INFO).",
    # Storage
    "TODO_BACKEND": "sqlite or flat (default: sqlite).",
    "TODO_DATA_DIR": "Local data directory for stores and logs (default: ~/.local/share/todo).",
    "TODO_DB_PATH": "SQLite database path (default: <data_dir>/todo.sqlite3).",
    "TODO_TASKS_FILE": "Flat-file tasks path (default: <data_dir>/todo.db).",
    "TODO_NOTIFICATIONS_FILE": "Flat-file reminders path (default: <data_dir>/notifications.db).",
    "TODO_FLAT_DELIMITER": "Field delimiter for flat files: ';' or '|' (default: ';').",
    # Reminder daemon
    "TODO_POLL_INTERVAL_SECONDS": "How often the daemon rescans the store (default: 1).",
    "TODO_REMINDER_GRACE_SECONDS": (
        "Reminders older than this are marked done without notifying; 0 fires them all (default: 0)."
    ),
    "TODO_NOTIFY_COMMAND": "Notification command; title and message are appended (default: notify-send).",
    "TODO_NOTIFY_TITLE": "Notification title (default: TODO!).",
}
