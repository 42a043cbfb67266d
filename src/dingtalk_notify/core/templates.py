"""Templates - Markdown bodies for session and task notifications.

All functions are pure. The wall clock is passed in as ``now`` and only feeds
the human-readable timestamp lines.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import NamedTuple

from .git import UNKNOWN_USER
from .session_log import SessionStats

# =============================================================================
# Constants
# =============================================================================

DEFAULT_SESSION_TYPE = "assistance session"
DEFAULT_DURATION = "just completed"
DEFAULT_SUMMARY = "session completed"

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
DATE_FORMAT = "%Y-%m-%d"

MAX_REPORT_FILES = 10
MAX_REPORT_TASKS = 5
MAX_REPORT_ERRORS = 3


class TaskStatus(str, Enum):
    """Outcome of a finished task."""

    SUCCESS = "success"
    FAILED = "failed"
    WARNING = "warning"

    @property
    def emoji(self) -> str:
        return {
            TaskStatus.SUCCESS: "✅",
            TaskStatus.FAILED: "❌",
            TaskStatus.WARNING: "⚠️",
        }[self]

    @property
    def label(self) -> str:
        return {
            TaskStatus.SUCCESS: "Task Completed",
            TaskStatus.FAILED: "Task Failed",
            TaskStatus.WARNING: "Task Warning",
        }[self]


class RenderedNotification(NamedTuple):
    """Markdown title and body ready for the message builder."""

    title: str
    text: str


# =============================================================================
# Helpers
# =============================================================================


def format_duration(start: datetime, end: datetime) -> str:
    """Format an elapsed time as "N min" or "H h M min"."""
    minutes = max(0, round((end - start).total_seconds() / 60))
    if minutes < 60:
        return f"{minutes} min"
    hours, mins = divmod(minutes, 60)
    return f"{hours} h {mins} min"


def append_sender(text: str, username: str, markdown: bool = False) -> str:
    """Append a sender footer to a message body."""
    if markdown:
        return f"{text}\n\n---\n👤 **Sender:** {username}"
    return f"{text}\n\n---\n👤 Sender: {username}"


def _bullets(items: list[str], limit: int | None = None, noun: str = "items") -> str:
    shown = items if limit is None else items[:limit]
    lines = [f"- {item}" for item in shown]
    if limit is not None and len(items) > limit:
        lines.append(f"- ...and {len(items) - limit} more {noun}")
    return "\n".join(lines)


# =============================================================================
# Session End
# =============================================================================


def render_session_end(
    session_type: str | None = None,
    duration: str | None = None,
    main_tasks: list[str] | None = None,
    summary: str | None = None,
    files_count: int | None = None,
    tools_used: int | None = None,
    operator: str = UNKNOWN_USER,
    now: datetime | None = None,
) -> RenderedNotification:
    """Render the session completion notification.

    Every absent (or empty) field falls back to its default value.
    """
    now = now or datetime.now()
    session_type = session_type or DEFAULT_SESSION_TYPE
    duration = duration or DEFAULT_DURATION
    summary = summary or DEFAULT_SUMMARY
    tasks = [t.strip() for t in (main_tasks or []) if t and t.strip()]

    title = f"🤖 Claude Code {session_type} completed"

    sections = [
        f"## {title}",
        f"**Completed at:** {now.strftime(TIMESTAMP_FORMAT)}\n"
        f"**Duration:** {duration}\n"
        f"**Operator:** {operator}",
        f"### 📋 This Session\n{summary}",
    ]
    if tasks:
        sections.append(f"### ✅ Main Tasks\n{_bullets(tasks)}")
    sections.append(
        "### 📊 Activity\n"
        f"- **Files touched:** {files_count or 0}\n"
        f"- **Tools used:** {tools_used or 0}"
    )
    sections.append(f"---\n*Claude Code notification | {now.strftime(DATE_FORMAT)}*")

    return RenderedNotification(title, "\n\n".join(sections))


# =============================================================================
# Task Complete
# =============================================================================


def render_task_complete(
    task_name: str,
    status: TaskStatus | str,
    details: str | None = None,
    duration: str | None = None,
    operator: str = UNKNOWN_USER,
    now: datetime | None = None,
) -> RenderedNotification:
    """Render a task outcome notification.

    The details section is included verbatim, and only when details are given.
    """
    now = now or datetime.now()
    status = TaskStatus(status)

    title = f"{status.emoji} {task_name} - {status.label}"

    text = (
        f"## {status.emoji} {status.label}\n\n"
        f"**Task:** {task_name}\n"
        f"**Status:** {status.label}\n"
        f"**Time:** {now.strftime(TIMESTAMP_FORMAT)}\n"
        f"**Operator:** {operator}"
    )
    if duration:
        text += f"\n**Duration:** {duration}"
    if details:
        text += f"\n\n**Details:**\n{details}"
    text += "\n\n---\n*Sent by the dingtalk-notify MCP server*"

    return RenderedNotification(title, text)


# =============================================================================
# Session Report (log based)
# =============================================================================


def summarize_stats(stats: SessionStats) -> str:
    """One-line summary of session activity."""
    parts = []
    if stats.message_count:
        parts.append(f"{stats.message_count} messages")
    if stats.tool_calls:
        parts.append(f"{stats.tool_calls} tool calls")
    if stats.files_modified:
        parts.append(f"{len(stats.files_modified)} files modified")
    if stats.tasks_completed:
        parts.append(f"{len(stats.tasks_completed)} tasks completed")
    return ", ".join(parts) if parts else "session ended"


def render_session_report(stats: SessionStats, now: datetime | None = None) -> RenderedNotification:
    """Render a detailed report from statistics scraped out of a session log."""
    now = now or datetime.now()
    title = "🤖 Claude Code session completed"

    if stats.start_time is not None:
        period = (
            f"**Session time:** {stats.start_time.strftime(TIMESTAMP_FORMAT)} - "
            f"{stats.end_time.strftime(TIMESTAMP_FORMAT)}\n"
            f"**Duration:** {format_duration(stats.start_time, stats.end_time)}"
        )
    else:
        period = f"**Ended at:** {stats.end_time.strftime(TIMESTAMP_FORMAT)}"

    sections = [
        f"## {title}",
        period,
        "### 📊 Session Statistics\n"
        f"- **Messages:** {stats.message_count}\n"
        f"- **Tool calls:** {stats.tool_calls}\n"
        f"- **Files:** {len(stats.files_modified)}\n"
        f"- **Tasks completed:** {len(stats.tasks_completed)}",
    ]
    if stats.files_modified:
        sections.append(
            f"### 📝 Modified Files\n{_bullets(stats.files_modified, MAX_REPORT_FILES, 'files')}"
        )
    if stats.tasks_completed:
        sections.append(
            f"### ✅ Completed Tasks\n{_bullets(stats.tasks_completed, MAX_REPORT_TASKS, 'tasks')}"
        )
    if stats.errors:
        sections.append(f"### ⚠️ Errors\n{_bullets(stats.errors, MAX_REPORT_ERRORS, 'errors')}")
    sections.append(f"### 📋 Summary\n{summarize_stats(stats)}")
    sections.append(f"---\n*Claude Code notification | {now.strftime(DATE_FORMAT)}*")

    return RenderedNotification(title, "\n\n".join(sections))
