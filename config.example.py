# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets; keep them in .env (local, gitignored).
"""

ENV_VARS = {
    # App / logging
    "PLANNER_APP_NAME": "App display name (default: task-planner).",
    "PLANNER_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Connectors
    "PLANNER_CONSOLE_ENABLED": "Run the interactive console (true/false, default: true).",
    "PLANNER_MATRIX_ENABLED": "Deliver reminders to a Matrix room instead of the console (true/false).",
    # Matrix
    "PLANNER_MATRIX_HOMESERVER": "Matrix homeserver URL.",
    "PLANNER_MATRIX_USER_ID": "Matrix user ID used to post reminders.",
    "PLANNER_MATRIX_PASSWORD": "Password for first login (session stored locally).",
    "PLANNER_MATRIX_NOTIFY_ROOM": "Room ID that receives reminders.",
    # Paths (gitignored)
    "PLANNER_DATA_DIR": "Local data directory (default: .local/planner).",
    "PLANNER_TASKS_DB_PATH": "SQLite path for tasks, settings and preferences (default: <data_dir>/tasks.sqlite3).",
    "PLANNER_MATRIX_STORE_PATH": "Matrix session directory (default: <data_dir>/matrix_store).",
    # Reminders
    "PLANNER_REMINDER_INTERVAL_SECONDS": "How often the reminder loop ticks (default: 60, min 1).",
    "PLANNER_DEFAULT_REMINDER_MINUTES": "Lead time stored by /notify on (default: 15).",
    # First run
    "PLANNER_SEED_DEMO_DATA": "Seed lookup lists and demo tasks into an empty store (default: true).",
}
