"""Shared pytest fixtures for dingtalk-notify tests."""

from __future__ import annotations

import shutil
import tempfile
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import httpx
import pytest

from dingtalk_notify.core.config import DingTalkConfig
from dingtalk_notify.mcp.tools import ToolRouter

WEBHOOK_URL = "https://oapi.dingtalk.com/robot/send?access_token=test-token"
SECRET = "SEC-test-secret"
FIXED_NOW = datetime(2025, 3, 14, 15, 9, 26)


def make_response(
    payload: Any = None, status_code: int = 200, json_error: bool = False
) -> MagicMock:
    """Build a mock httpx.Response."""
    response = MagicMock(spec=httpx.Response)
    response.status_code = status_code
    if json_error:
        response.json.side_effect = ValueError("Expecting value: line 1 column 1 (char 0)")
    else:
        response.json.return_value = (
            payload if payload is not None else {"errcode": 0, "errmsg": "ok"}
        )
    return response


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create a temporary directory for tests."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    # Cleanup
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture(autouse=True)
def _clean_dingtalk_env(monkeypatch):
    """Keep real DINGTALK_* / CLAUDE_* variables out of every test."""
    for var in (
        "DINGTALK_WEBHOOK",
        "DINGTALK_SECRET",
        "DINGTALK_KEYWORDS",
        "DINGTALK_TIMEOUT",
        "DINGTALK_INCLUDE_SENDER",
        "CLAUDE_SESSION_TYPE",
        "CLAUDE_SESSION_DURATION",
        "CLAUDE_MAIN_TASKS",
        "CLAUDE_SESSION_SUMMARY",
        "CLAUDE_FILES_COUNT",
        "CLAUDE_TOOLS_USED",
        "CLAUDE_SESSION_LOG",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def config() -> DingTalkConfig:
    """Unsigned webhook configuration."""
    return DingTalkConfig(endpoint=WEBHOOK_URL)


@pytest.fixture
def signed_config() -> DingTalkConfig:
    """Webhook configuration with a signing secret."""
    return DingTalkConfig(endpoint=WEBHOOK_URL, secret=SECRET)


@pytest.fixture
def mock_post() -> Iterator[MagicMock]:
    """Patch httpx.post to return a successful DingTalk response."""
    with patch.object(httpx, "post", return_value=make_response()) as post:
        yield post


@pytest.fixture
def router(config) -> ToolRouter:
    """Configured router with a fixed operator and clock."""
    return ToolRouter(config, username_provider=lambda: "Ada Lovelace", clock=lambda: FIXED_NOW)


@pytest.fixture
def unconfigured_router() -> ToolRouter:
    """Router without any webhook configuration."""
    return ToolRouter(None, username_provider=lambda: "Ada Lovelace", clock=lambda: FIXED_NOW)


@pytest.fixture
def cli_runner():
    """Provide a Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
