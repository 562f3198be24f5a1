# src/task_planner/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Union, cast

from ..core.session import login, logout
from ..core.state import AppState
from ..errors import PlannerError
from ..notifications.reminder import enable_notifications
from ..tasks import queries
from ..tasks.conflicts import detect_conflicts
from ..tasks.task_api import canonical_participants, create_task
from ..tasks.task_models import LOOKUP_KINDS, NotificationPreference, Task, TaskDraft

CommandEmitter = Callable[[str], None]
CommandResult = Union[str, Awaitable[str]]
CommandHandler2 = Callable[[AppState, list[str]], CommandResult]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], CommandResult]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

SHORT_ID = 8


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /tasks, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        Domain errors (validation, store failures, permissions) become the reply.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        try:
            if nparams >= 3:
                result = cast(CommandHandler3, handler)(state, args, emit)
            else:
                result = cast(CommandHandler2, handler)(state, args)
            if inspect.isawaitable(result):
                result = await result
        except PlannerError as e:
            logger.info("/%s failed: %s", name, e.detail)
            return f"Error: {e.detail}"
        return result

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- formatting helpers ----


def format_task(task: Task) -> str:
    line = (
        f"[{task.id[:SHORT_ID]}] {task.date} {task.start_time or '--:--'}-{task.end_time or '--:--'} "
        f"{task.code}/{task.channel} {task.type}: {task.action} "
        f"({', '.join(task.participants)}) | {task.status}"
    )
    if task.audit_request and not task.audit_approved_by:
        line += f" | audit requested by {task.audit_requested_by}"
    if task.audit_approved_by:
        line += f" | approved by {task.audit_approved_by} at {task.audit_approved_at}"
    return line


def _format_list(title: str, tasks: list[Task]) -> str:
    if not tasks:
        return f"{title}: none."
    return "\n".join([f"{title}:"] + [f"  {format_task(t)}" for t in tasks])


def _require_admin(state: AppState) -> str | None:
    user = state.current_user
    if user is None:
        return "Please /login first."
    if not user.is_admin:
        return "This command is only available to admins."
    return None


def _resolve_task(state: AppState, ref: str) -> Task | str:
    """Accept a full id or a unique prefix of one."""
    ref = (ref or "").strip()
    if not ref:
        return "Task id is required."
    matches = [t for t in state.task_store.list_tasks() if t.id.startswith(ref)]
    if not matches:
        return f"No task matches {ref!r}."
    if len(matches) > 1:
        return f"{ref!r} matches {len(matches)} tasks; use a longer id."
    return matches[0]


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_login(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /login <username>"
    user = login(state, args[0])
    if user is None:
        return f"Unknown user {args[0]!r}."
    return f"Welcome, {user.display_name} ({user.role})."


def cmd_logout(state: AppState, args: list[str]) -> str:
    if state.current_user is None:
        return "Not logged in."
    logout(state)
    return "Logged out. Reminders stopped."


def cmd_whoami(state: AppState, args: list[str]) -> str:
    user = state.current_user
    if user is None:
        return "Not logged in."
    return f"{user.username} ({user.display_name}, {user.role})"


def cmd_tasks(state: AppState, args: list[str]) -> str:
    """
    /tasks                -> my tasks
    /tasks team           -> open tasks of everyone
    /tasks completed      -> completed tasks (newest first)
    /tasks audits         -> pending audit requests
    /tasks upcoming [N]   -> my open tasks in the next N days (default 7)
    /tasks all            -> everything in store order
    """
    tasks = state.task_store.list_tasks()
    sub = args[0].lower() if args else "mine"

    if sub == "team":
        return _format_list("Team calendar", queries.team_calendar(tasks))
    if sub == "completed":
        return _format_list("Completed tasks", queries.completed_tasks(tasks))
    if sub == "audits":
        return _format_list("Pending audits", queries.pending_audits(tasks))
    if sub == "all":
        return _format_list("All tasks", tasks)

    user = state.current_user
    if user is None:
        return "Please /login first."

    if sub == "upcoming":
        days = 7
        if len(args) > 1:
            try:
                days = int(args[1])
            except ValueError:
                return "Usage: /tasks upcoming [days]"
        return _format_list(
            f"Upcoming tasks ({days} days)", queries.upcoming_tasks_for_user(tasks, user.username, days)
        )
    if sub == "mine":
        return _format_list("My tasks", queries.tasks_for_user(tasks, user.username))

    return "Usage: /tasks [mine|team|completed|audits|upcoming [days]|all]"


def _parse_add(args: list[str]) -> tuple[TaskDraft, bool] | str:
    usage = "Usage: /add YYYY-MM-DD HH:MM HH:MM code channel type p1,p2,... [--force] -- action text"
    force = "--force" in args
    args = [a for a in args if a != "--force"]
    if "--" not in args:
        return usage
    sep = args.index("--")
    head, action = args[:sep], " ".join(args[sep + 1 :]).strip()
    if len(head) != 7:
        return usage

    date, start, end, code, channel, type_, people = head
    participants = [p.strip() for p in people.split(",") if p.strip()]
    draft = TaskDraft(
        date=date,
        start_time=start,
        end_time=end,
        code=code,
        action=action,
        channel=channel,
        type=type_,
        participants=participants,
    )
    return draft, force


def cmd_add(state: AppState, args: list[str]) -> str:
    denied = _require_admin(state)
    if denied:
        return denied

    parsed = _parse_add(args)
    if isinstance(parsed, str):
        return parsed
    draft, force = parsed

    result = create_task(
        state.task_store,
        draft,
        lookup=state.lookup_store.get(),
        users=state.users,
        allow_conflicts=force,
    )
    if result.task_id is None:
        return _format_list(
            "Not created: participants already booked that day (repeat with --force to add anyway)",
            result.conflicts.conflicting_tasks,
        )

    reply = f"Task created [{result.task_id[:SHORT_ID]}]."
    if result.conflicts.has_conflict:
        reply += f" Warning: {len(result.conflicts.conflicting_tasks)} conflicting task(s) on {draft.date}."
    return reply


def cmd_conflicts(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return "Usage: /conflicts YYYY-MM-DD p1,p2,..."
    names = [p.strip() for a in args[1:] for p in a.split(",") if p.strip()]
    participants = canonical_participants(names, state.users)
    candidate = TaskDraft(
        date=args[0],
        start_time="",
        end_time="",
        code="",
        action="",
        channel="",
        type="",
        participants=participants,
    )
    result = detect_conflicts(candidate, state.task_store.list_tasks())
    if not result.has_conflict:
        return "No conflicts."
    return _format_list("Conflicts", result.conflicting_tasks)


def cmd_request(state: AppState, args: list[str]) -> str:
    user = state.current_user
    if user is None:
        return "Please /login first."
    if not args:
        return "Usage: /request <task-id>"
    task = _resolve_task(state, args[0])
    if isinstance(task, str):
        return task

    updated = state.workflow.request_audit(task.id, user.username, expected_version=task.version)
    if updated is None:
        return "Audit cannot be requested for a completed task."
    return f"Audit requested: {format_task(updated)}"


def cmd_approve(state: AppState, args: list[str]) -> str:
    denied = _require_admin(state)
    if denied or state.current_user is None:
        return denied or "Please /login first."
    if not args:
        return "Usage: /approve <task-id>"
    task = _resolve_task(state, args[0])
    if isinstance(task, str):
        return task

    updated = state.workflow.approve_audit(task.id, state.current_user.username, expected_version=task.version)
    if updated is None:
        return "Nothing to approve."
    return f"Approved: {format_task(updated)}"


def cmd_cancel(state: AppState, args: list[str]) -> str:
    denied = _require_admin(state)
    if denied:
        return denied
    if not args:
        return "Usage: /cancel <task-id>"
    task = _resolve_task(state, args[0])
    if isinstance(task, str):
        return task

    updated = state.workflow.cancel_approval(task.id, expected_version=task.version)
    if updated is None:
        return "Task is not approved; nothing to cancel."
    return f"Approval cancelled: {format_task(updated)}"


def cmd_reopen(state: AppState, args: list[str]) -> str:
    denied = _require_admin(state)
    if denied:
        return denied
    if not args:
        return "Usage: /reopen <task-id>"
    task = _resolve_task(state, args[0])
    if isinstance(task, str):
        return task

    updated = state.workflow.reopen_task(task.id, expected_version=task.version)
    if updated is None:
        return "Task no longer exists."
    return f"Reopened: {format_task(updated)}"


def cmd_delete(state: AppState, args: list[str]) -> str:
    denied = _require_admin(state)
    if denied:
        return denied
    if not args:
        return "Usage: /delete <task-id>"
    task = _resolve_task(state, args[0])
    if isinstance(task, str):
        return task
    state.task_store.delete_task(task.id)
    return f"Deleted [{task.id[:SHORT_ID]}]."


def cmd_settings(state: AppState, args: list[str]) -> str:
    """
    /settings                      -> show codes / channels / types
    /settings add <kind> <value>   -> admin only
    /settings remove <kind> <value>
    """
    if not args:
        current = state.lookup_store.get()
        return "\n".join(
            ["Settings:"] + [f"  {kind}: {', '.join(current.values_for(kind))}" for kind in LOOKUP_KINDS]
        )

    sub = args[0].lower()
    if sub not in ("add", "remove") or len(args) < 3:
        return f"Usage: /settings [add|remove] <{'|'.join(LOOKUP_KINDS)}> <value>"

    denied = _require_admin(state)
    if denied:
        return denied

    kind, value = args[1].lower(), " ".join(args[2:])
    if sub == "add":
        state.lookup_store.add_value(kind, value)
        return f"Added {value!r} to {kind}."
    state.lookup_store.remove_value(kind, value)
    return f"Removed {value!r} from {kind}."


async def cmd_notify(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /notify             -> show my reminder preference
    /notify on          -> ask for permission, enable with the default lead time
    /notify off         -> disable reminders (no scanning at all)
    /notify minutes N   -> remind N minutes before start
    """
    user = state.current_user
    if user is None:
        return "Please /login first."

    current = state.preferences.get(user.username)
    if not args:
        if current is None:
            return "Reminders are not set up. Use /notify on."
        status = "ON" if current.enabled else "OFF"
        return f"Reminders are {status}, {current.reminder_minutes} minute(s) before start."

    sub = args[0].lower()
    if sub == "on":
        if emit:
            emit("Requesting notification permission...")
        default_minutes = int(getattr(state.settings, "default_reminder_minutes", 15))
        minutes = current.reminder_minutes if current is not None else default_minutes
        pref = await enable_notifications(
            state.notifier,
            state.preferences,
            user.username,
            default=NotificationPreference(enabled=True, reminder_minutes=minutes),
        )
        return f"Reminders ON, {pref.reminder_minutes} minute(s) before start."

    if sub == "off":
        minutes = current.reminder_minutes if current is not None else 15
        state.preferences.put(user.username, NotificationPreference(enabled=False, reminder_minutes=minutes))
        return "Reminders OFF."

    if sub == "minutes" and len(args) > 1:
        try:
            minutes = int(args[1])
        except ValueError:
            return "Usage: /notify minutes N"
        enabled = current.enabled if current is not None else True
        state.preferences.put(user.username, NotificationPreference(enabled=enabled, reminder_minutes=minutes))
        return f"Reminders will fire {minutes} minute(s) before start."

    return "Usage: /notify [on|off|minutes N]"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("login", cmd_login, help_text="Sign in by username: /login kns.")
registry.register("logout", cmd_logout, help_text="Sign out and stop reminders.")
registry.register("whoami", cmd_whoami, help_text="Show the signed-in user.")
registry.register(
    "tasks", cmd_tasks, help_text="List tasks: /tasks [mine|team|completed|audits|upcoming [days]|all]."
)
registry.register("add", cmd_add, help_text="Create a task (admin): /add date start end code channel type p1,p2 -- action.")
registry.register("conflicts", cmd_conflicts, help_text="Check bookings: /conflicts date p1,p2.")
registry.register("request", cmd_request, help_text="Request an audit: /request <id>.")
registry.register("approve", cmd_approve, help_text="Approve an audit (admin): /approve <id>.")
registry.register("cancel", cmd_cancel, help_text="Cancel an approval (admin): /cancel <id>.")
registry.register("reopen", cmd_reopen, help_text="Reopen a task (admin): /reopen <id>.")
registry.register("delete", cmd_delete, help_text="Delete a task (admin): /delete <id>.")
registry.register("settings", cmd_settings, help_text="Show or edit codes/channels/types.")
registry.register("notify", cmd_notify, help_text="Reminder preferences: /notify [on|off|minutes N].")
