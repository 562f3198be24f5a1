"""
Reminder subsystem.

- preference_store.py: per-user {enabled, reminder_minutes}
- reminder.py: threshold-crossing scheduler and permission bootstrap
"""
