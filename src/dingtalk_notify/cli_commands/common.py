"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import Any

import typer
from rich.console import Console

from ..core.config import load_config_from_env
from ..core.exceptions import ErrorKind
from ..mcp.tools import ToolResult, ToolRouter

console = Console()


def get_router() -> ToolRouter:
    """Build a router from the DINGTALK_* environment variables."""
    return ToolRouter(load_config_from_env())


def run_tool(name: str, arguments: dict[str, Any]) -> None:
    """Dispatch one tool call, print the outcome and exit with its status."""
    result = get_router().call(name, {k: v for k, v in arguments.items() if v is not None})
    print_result(result)
    raise typer.Exit(0 if result.success else 1)


def print_result(result: ToolResult) -> None:
    if result.success:
        console.print(f"[green]{result.display_text}[/green]")
    elif result.error_kind is ErrorKind.CONFIGURATION_MISSING:
        console.print(f"[yellow]{result.display_text}[/yellow]")
        console.print("[dim]Set DINGTALK_WEBHOOK to enable notifications.[/dim]")
    else:
        console.print(f"[red]{result.display_text}[/red]")
