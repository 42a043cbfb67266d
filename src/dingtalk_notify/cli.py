"""CLI entry point for DingTalk Notify."""

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .cli_commands.notify import register_notify_commands
from .cli_commands.send import register_send_commands
from .mcp.tools import ToolRouter


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console = Console()
        console.print(f"DingTalk Notify v{__version__}")
        raise typer.Exit(0)


app = typer.Typer(
    name="dingtalk-notify",
    help="""DingTalk robot notifications for AI coding sessions.

Sends messages to a DingTalk group through a custom robot webhook, either
directly from the command line or as MCP tools for an assistant.

Configuration comes from the environment:
  DINGTALK_WEBHOOK    robot webhook URL (required)
  DINGTALK_SECRET     signing secret (optional)
  DINGTALK_KEYWORDS   comma-separated security keywords (optional)

Quick start:
  dingtalk-notify send-text "Hello from the terminal"
  dingtalk-notify notify-task "Refactor auth" --status success
  dingtalk-notify serve
""",
    add_completion=False,
)
console = Console()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """DingTalk Notify - robot notifications for AI coding sessions."""
    pass


# Register commands from submodules
register_send_commands(app)  # send-text, send-markdown, send-link
register_notify_commands(app)  # notify-task, notify-session, session-report


@app.command()
def serve(
    name: str = typer.Option("dingtalk-notify", "--name", help="Server name reported to clients"),
    transport: str = typer.Option("stdio", "--transport", help="stdio, sse or streamable-http"),
    log_level: str = typer.Option("INFO", "--log-level", help="Log level (stderr)"),
) -> None:
    """Run the MCP server.

    The webhook is read from DINGTALK_* environment variables when set;
    otherwise the server starts unconfigured and waits for dingtalk_configure.

    Examples:
        dingtalk-notify serve
        dingtalk-notify serve --transport sse
    """
    from .core.config import load_config_from_env
    from .mcp.server import configure_logging, run_server

    if transport not in ("stdio", "sse", "streamable-http"):
        console.print(f"[red]Unknown transport: {transport}[/red]")
        raise typer.Exit(2)

    configure_logging(log_level)
    config = load_config_from_env()
    run_server(name=name, config=config, transport=transport)  # type: ignore[arg-type]


@app.command()
def tools() -> None:
    """List the MCP tools and their required arguments."""
    table = Table(title="DingTalk MCP Tools")
    table.add_column("Tool", style="cyan")
    table.add_column("Description")
    table.add_column("Required", style="yellow")

    for spec in ToolRouter.catalog():
        table.add_row(spec.name, spec.description, ", ".join(spec.required) or "-")

    console.print(table)


if __name__ == "__main__":
    app()
