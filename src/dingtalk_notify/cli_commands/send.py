"""Send commands - send-text, send-markdown, send-link."""

from __future__ import annotations

import typer

from ..mcp.tools import ToolName
from .common import run_tool


def send_text(
    content: str = typer.Argument(..., help="Text content to send"),
    at_all: bool = typer.Option(False, "--at-all", help="@mention all group members"),
    at_mobile: list[str] | None = typer.Option(
        None, "--at-mobile", help="Mobile number to @mention (repeatable)"
    ),
) -> None:
    """Send a plain text message.

    Examples:
        dingtalk-notify send-text "Deploy finished"
        dingtalk-notify send-text "Build broken" --at-all
    """
    run_tool(
        ToolName.SEND_TEXT.value,
        {"content": content, "atAll": at_all, "atMobiles": at_mobile or None},
    )


def send_markdown(
    title: str = typer.Argument(..., help="Message title"),
    text: str = typer.Argument(..., help="Markdown body"),
    at_all: bool = typer.Option(False, "--at-all", help="@mention all group members"),
) -> None:
    """Send a markdown message.

    Examples:
        dingtalk-notify send-markdown "Release" "## v1.2.0 is out"
    """
    run_tool(ToolName.SEND_MARKDOWN.value, {"title": title, "text": text, "atAll": at_all})


def send_link(
    title: str = typer.Argument(..., help="Link title"),
    text: str = typer.Argument(..., help="Link description"),
    message_url: str = typer.Argument(..., help="Target URL"),
    pic_url: str | None = typer.Option(None, "--pic-url", help="Image shown on the card"),
) -> None:
    """Send a link card."""
    run_tool(
        ToolName.SEND_LINK.value,
        {"title": title, "text": text, "messageUrl": message_url, "picUrl": pic_url},
    )


def register_send_commands(app: typer.Typer) -> None:
    """Register send commands with the Typer app."""
    app.command(name="send-text")(send_text)
    app.command(name="send-markdown")(send_markdown)
    app.command(name="send-link")(send_link)
