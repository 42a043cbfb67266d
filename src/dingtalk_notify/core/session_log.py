"""Session log reader - aggregate activity counts from a free-text session log.

The log has no fixed schema. Lines are scanned for a handful of markers:

- ``user:`` / ``assistant:``          → one conversation message
- ``tool_use:`` / ``function_call:``  → one tool call
- edit / write / create + a file path  → a modified file (deduplicated)
- ``✅`` / ``completed`` / ``finished`` lines → a completed task, captured
  from the text after ``completed:`` / ``finished:`` / ``done:``
- ``❌`` / ``error`` / ``failed``       → an error line (first 5 kept)
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_LOG_FILE = "./.claude-session.log"
MAX_ERRORS = 5

MESSAGE_MARKERS = ("user:", "assistant:")
TOOL_MARKERS = ("tool_use:", "function_call:")
TASK_MARKERS = ("✅", "completed", "finished")
ERROR_MARKERS = ("❌", "error", "failed")

FILE_PATTERN = re.compile(r"(?:edit|write|create).*?([\w\-/.]+\.\w+)", re.IGNORECASE)
TASK_PATTERN = re.compile(r"(?:completed|finished|done):\s*(.+)", re.IGNORECASE)


class SessionStats(BaseModel):
    """Aggregate activity of one assistant session."""

    start_time: datetime | None = None
    end_time: datetime = Field(default_factory=datetime.now)
    message_count: int = 0
    tool_calls: int = 0
    files_modified: list[str] = Field(default_factory=list)
    tasks_completed: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)


def parse_session_log(
    text: str,
    start_time: datetime | None = None,
    end_time: datetime | None = None,
) -> SessionStats:
    """Scan log text and count activity markers."""
    message_count = 0
    tool_calls = 0
    files: dict[str, None] = {}
    tasks: list[str] = []
    errors: list[str] = []

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        if any(marker in line for marker in MESSAGE_MARKERS):
            message_count += 1

        if any(marker in line for marker in TOOL_MARKERS):
            tool_calls += 1

        file_match = FILE_PATTERN.search(line)
        if file_match:
            files.setdefault(file_match.group(1))

        if any(marker in line for marker in TASK_MARKERS):
            task_match = TASK_PATTERN.search(line)
            if task_match:
                tasks.append(task_match.group(1).strip())

        if any(marker in line for marker in ERROR_MARKERS):
            errors.append(line)

    return SessionStats(
        start_time=start_time,
        end_time=end_time or datetime.now(),
        message_count=message_count,
        tool_calls=tool_calls,
        files_modified=list(files),
        tasks_completed=tasks,
        errors=errors[:MAX_ERRORS],
    )


def read_session_log(
    path: Path | str,
    start_time: datetime | None = None,
    end_time: datetime | None = None,
) -> SessionStats:
    """Read and parse a session log file.

    A missing or unreadable file yields empty statistics rather than an error.
    """
    log_path = Path(path)
    if not log_path.exists():
        logger.info(f"Session log {log_path} not found, using empty statistics")
        return SessionStats(start_time=start_time, end_time=end_time or datetime.now())

    try:
        text = log_path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.warning(f"Failed to read session log {log_path}: {e}")
        return SessionStats(start_time=start_time, end_time=end_time or datetime.now())

    return parse_session_log(text, start_time=start_time, end_time=end_time)
