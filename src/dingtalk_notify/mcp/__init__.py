"""MCP (Model Context Protocol) server for DingTalk notifications.

This module exposes DingTalk robot messaging as tools that an AI coding
assistant can call to report task and session completion.
"""

from dingtalk_notify.mcp.server import create_server, run_server

__all__ = ["create_server", "run_server"]
