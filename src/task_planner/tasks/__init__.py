"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus, ConflictResult, ...)
- task_store.py: SQLite-backed storage + live subscription feed
- lookup_store.py: allowed codes / channels / types
- conflicts.py: same-day double-booking check
- audit.py: audit workflow (request / approve / cancel / reopen)
- queries.py: read-side views over a task snapshot
- task_api.py: validated task creation
"""
