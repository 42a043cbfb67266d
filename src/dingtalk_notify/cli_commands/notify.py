"""Notify commands - task outcome, quick session summary and log-based report."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from ..core.session_log import DEFAULT_LOG_FILE, read_session_log
from ..core.templates import TaskStatus, render_session_report
from ..mcp.tools import ToolName
from .common import console, run_tool


def notify_task(
    task_name: str = typer.Argument(..., help="Name of the finished task"),
    status: TaskStatus = typer.Option(TaskStatus.SUCCESS, "--status", "-s", help="Task outcome"),
    details: str | None = typer.Option(None, "--details", "-d", help="Details, sent verbatim"),
    duration: str | None = typer.Option(None, "--duration", help="How long the task took"),
    at_all: bool = typer.Option(False, "--at-all", help="@mention all group members"),
) -> None:
    """Send a task completion notification.

    Examples:
        dingtalk-notify notify-task "Migrate database"
        dingtalk-notify notify-task "Nightly build" -s failed -d "3 tests failing"
    """
    run_tool(
        ToolName.NOTIFY_TASK_COMPLETE.value,
        {
            "taskName": task_name,
            "status": status.value,
            "details": details,
            "duration": duration,
            "atAll": at_all,
        },
    )


def notify_session(
    session_type: str | None = typer.Option(
        None, "--type", "-t", envvar="CLAUDE_SESSION_TYPE", help="Kind of session"
    ),
    duration: str | None = typer.Option(
        None, "--duration", envvar="CLAUDE_SESSION_DURATION", help="Session duration"
    ),
    tasks: str | None = typer.Option(
        None, "--tasks", envvar="CLAUDE_MAIN_TASKS", help="Comma-separated main tasks"
    ),
    summary: str | None = typer.Option(
        None, "--summary", envvar="CLAUDE_SESSION_SUMMARY", help="Short session summary"
    ),
    files_count: int | None = typer.Option(
        None, "--files", envvar="CLAUDE_FILES_COUNT", help="Files touched"
    ),
    tools_used: int | None = typer.Option(
        None, "--tools", envvar="CLAUDE_TOOLS_USED", help="Tool calls made"
    ),
    at_all: bool = typer.Option(False, "--at-all", help="@mention all group members"),
) -> None:
    """Send a quick session completion summary.

    Every option falls back to its CLAUDE_* environment variable, then to a
    default, so this works as a bare session-end hook.

    Examples:
        dingtalk-notify notify-session
        dingtalk-notify notify-session -t "code review" --tasks "auth fix,tests" --files 4
    """
    run_tool(
        ToolName.NOTIFY_SESSION_END.value,
        {
            "sessionType": session_type,
            "duration": duration,
            "mainTasks": tasks,
            "summary": summary,
            "filesCount": files_count,
            "toolsUsed": tools_used,
            "atAll": at_all,
        },
    )


def session_report(
    log_file: Path = typer.Option(
        Path(DEFAULT_LOG_FILE),
        "--log-file",
        "-l",
        envvar="CLAUDE_SESSION_LOG",
        help="Session log to scan",
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the report without sending"),
    at_all: bool = typer.Option(False, "--at-all", help="@mention all group members"),
) -> None:
    """Scan a session log and send a statistics report.

    Examples:
        dingtalk-notify session-report
        dingtalk-notify session-report -l ~/.claude-session.log --dry-run
    """
    stats = read_session_log(log_file)

    table = Table(title="Session Statistics", show_header=False)
    table.add_row("Messages", str(stats.message_count))
    table.add_row("Tool calls", str(stats.tool_calls))
    table.add_row("Files", str(len(stats.files_modified)))
    table.add_row("Tasks completed", str(len(stats.tasks_completed)))
    table.add_row("Errors", str(len(stats.errors)))
    console.print(table)

    rendered = render_session_report(stats)
    if dry_run:
        console.print(Panel(Markdown(rendered.text), title=rendered.title, border_style="dim"))
        raise typer.Exit(0)

    run_tool(
        ToolName.SEND_MARKDOWN.value,
        {"title": rendered.title, "text": rendered.text, "atAll": at_all},
    )


def register_notify_commands(app: typer.Typer) -> None:
    """Register notification commands with the Typer app."""
    app.command(name="notify-task")(notify_task)
    app.command(name="notify-session")(notify_session)
    app.command(name="session-report")(session_report)
