"""Scheduled tasks with an audit/approval workflow and per-user reminders."""

__version__ = "0.1.0"
