"""Tests for session and task notification templates."""

from datetime import datetime, timedelta

import pytest

from dingtalk_notify.core.session_log import SessionStats
from dingtalk_notify.core.templates import (
    DEFAULT_DURATION,
    DEFAULT_SESSION_TYPE,
    DEFAULT_SUMMARY,
    TaskStatus,
    append_sender,
    format_duration,
    render_session_end,
    render_session_report,
    render_task_complete,
    summarize_stats,
)

NOW = datetime(2025, 3, 14, 15, 9, 26)


class TestTaskStatus:
    @pytest.mark.parametrize(
        ("status", "emoji", "label"),
        [
            (TaskStatus.SUCCESS, "✅", "Task Completed"),
            (TaskStatus.FAILED, "❌", "Task Failed"),
            (TaskStatus.WARNING, "⚠️", "Task Warning"),
        ],
    )
    def test_emoji_and_label(self, status, emoji, label) -> None:
        assert status.emoji == emoji
        assert status.label == label


class TestHelpers:
    @pytest.mark.parametrize(
        ("minutes", "expected"),
        [(0, "0 min"), (45, "45 min"), (60, "1 h 0 min"), (135, "2 h 15 min")],
    )
    def test_format_duration(self, minutes, expected) -> None:
        start = datetime(2025, 1, 1, 8, 0)
        end = start + timedelta(minutes=minutes)
        assert format_duration(start, end) == expected

    def test_format_duration_never_negative(self) -> None:
        assert format_duration(NOW, datetime(2025, 1, 1)) == "0 min"

    def test_append_sender_plain(self) -> None:
        assert append_sender("hi", "Ada") == "hi\n\n---\n👤 Sender: Ada"

    def test_append_sender_markdown(self) -> None:
        assert append_sender("## hi", "Ada", markdown=True) == "## hi\n\n---\n👤 **Sender:** Ada"


class TestRenderSessionEnd:
    def test_all_defaults(self) -> None:
        rendered = render_session_end(operator="Ada", now=NOW)
        assert rendered.title == f"🤖 Claude Code {DEFAULT_SESSION_TYPE} completed"
        assert rendered.text.startswith(f"## {rendered.title}")
        assert "**Completed at:** 2025-03-14 15:09:26" in rendered.text
        assert f"**Duration:** {DEFAULT_DURATION}" in rendered.text
        assert "**Operator:** Ada" in rendered.text
        assert f"### 📋 This Session\n{DEFAULT_SUMMARY}" in rendered.text
        assert "Main Tasks" not in rendered.text
        assert "- **Files touched:** 0" in rendered.text
        assert "- **Tools used:** 0" in rendered.text
        assert "*Claude Code notification | 2025-03-14*" in rendered.text

    def test_all_fields(self) -> None:
        rendered = render_session_end(
            session_type="code review",
            duration="42 min",
            main_tasks=["fix auth", " ", "add tests "],
            summary="Reviewed the auth module",
            files_count=4,
            tools_used=17,
            operator="Ada",
            now=NOW,
        )
        assert rendered.title == "🤖 Claude Code code review completed"
        assert "**Duration:** 42 min" in rendered.text
        assert "### ✅ Main Tasks\n- fix auth\n- add tests" in rendered.text
        assert "Reviewed the auth module" in rendered.text
        assert "- **Files touched:** 4" in rendered.text
        assert "- **Tools used:** 17" in rendered.text

    def test_empty_strings_fall_back(self) -> None:
        rendered = render_session_end(session_type="", summary="", duration="", now=NOW)
        assert DEFAULT_SESSION_TYPE in rendered.title
        assert DEFAULT_SUMMARY in rendered.text
        assert DEFAULT_DURATION in rendered.text
        assert "**Operator:** Unknown User" in rendered.text


class TestRenderTaskComplete:
    def test_success_without_details(self) -> None:
        rendered = render_task_complete("Migrate DB", "success", operator="Ada", now=NOW)
        assert rendered.title == "✅ Migrate DB - Task Completed"
        assert rendered.text.startswith("## ✅ Task Completed")
        assert "**Task:** Migrate DB" in rendered.text
        assert "**Time:** 2025-03-14 15:09:26" in rendered.text
        assert "**Operator:** Ada" in rendered.text
        assert "Details" not in rendered.text
        assert "Duration" not in rendered.text
        assert rendered.text.endswith("*Sent by the dingtalk-notify MCP server*")

    def test_failed_with_details_verbatim(self) -> None:
        details = "3 tests failing:\n- test_a\n- test_b"
        rendered = render_task_complete(
            "Nightly build", TaskStatus.FAILED, details=details, duration="5 min", now=NOW
        )
        assert rendered.title == "❌ Nightly build - Task Failed"
        assert "**Status:** Task Failed" in rendered.text
        assert "**Duration:** 5 min" in rendered.text
        assert f"**Details:**\n{details}" in rendered.text

    def test_warning(self) -> None:
        rendered = render_task_complete("Lint", "warning", now=NOW)
        assert rendered.title == "⚠️ Lint - Task Warning"

    def test_invalid_status(self) -> None:
        with pytest.raises(ValueError):
            render_task_complete("Lint", "maybe", now=NOW)


class TestSessionReport:
    def test_summary_without_activity(self) -> None:
        assert summarize_stats(SessionStats()) == "session ended"

    def test_summary_with_activity(self) -> None:
        stats = SessionStats(message_count=3, tool_calls=2, files_modified=["a.py"])
        assert summarize_stats(stats) == "3 messages, 2 tool calls, 1 files modified"

    def test_report_truncates_lists(self) -> None:
        stats = SessionStats(
            start_time=datetime(2025, 3, 14, 13, 0),
            end_time=datetime(2025, 3, 14, 14, 30),
            files_modified=[f"f{i}.py" for i in range(12)],
            tasks_completed=[f"task {i}" for i in range(6)],
            errors=["e1", "e2", "e3", "e4"],
        )
        rendered = render_session_report(stats, now=NOW)
        assert rendered.title == "🤖 Claude Code session completed"
        assert "**Duration:** 1 h 30 min" in rendered.text
        assert "- f9.py" in rendered.text
        assert "- f10.py" not in rendered.text
        assert "- ...and 2 more files" in rendered.text
        assert "- ...and 1 more tasks" in rendered.text
        assert "- ...and 1 more errors" in rendered.text

    def test_report_without_start_time(self) -> None:
        stats = SessionStats(end_time=NOW)
        rendered = render_session_report(stats, now=NOW)
        assert "**Ended at:** 2025-03-14 15:09:26" in rendered.text
        assert "Modified Files" not in rendered.text
        assert "### 📋 Summary\nsession ended" in rendered.text
