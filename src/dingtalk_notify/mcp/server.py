"""MCP Server - FastMCP binding for the DingTalk notification tools.

The server is a thin layer: every tool forwards its arguments to a ToolRouter
and returns the router's display text. Configuration is injected; only
``main()`` reads the environment.

Usage:
    dingtalk-notify-mcp                  # stdio, configured from DINGTALK_* env vars

    # Claude Code MCP registration
    claude mcp add dingtalk -e DINGTALK_WEBHOOK=... -- dingtalk-notify-mcp
"""

import json
import logging
import os
import sys
import time
from typing import Any, Literal

from mcp.server.fastmcp import FastMCP

from ..core.config import DingTalkConfig, load_config_from_env
from . import tools
from .tools import ToolName, ToolRouter

logger = logging.getLogger(__name__)

DEFAULT_SERVER_NAME = "dingtalk-notify"

TransportType = Literal["stdio", "sse", "streamable-http"]

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _compact(**arguments: Any) -> dict[str, Any]:
    """Drop arguments the client did not send."""
    return {key: value for key, value in arguments.items() if value is not None}


def create_server(
    name: str = DEFAULT_SERVER_NAME,
    config: DingTalkConfig | None = None,
    router: ToolRouter | None = None,
) -> FastMCP:
    """Create the FastMCP server with the DingTalk tools registered.

    Args:
        name: Server name reported to MCP clients.
        config: Initial configuration. None starts the server unconfigured.
        router: Pre-built router, mainly for tests. Takes precedence over config.

    Returns:
        The configured FastMCP instance.
    """
    router = router or ToolRouter(config)
    start_time = time.time()

    mcp = FastMCP(
        name,
        instructions=(
            "Send notifications to a DingTalk group through a custom robot webhook. "
            "Use dingtalk_notify_task_complete or dingtalk_notify_session_end when a "
            "task or session finishes."
        ),
    )

    # =========================================================================
    # Tools
    # =========================================================================
    # Every parameter defaults to None; required arguments and enum values
    # are checked by the router so errors come back as tool result text.

    @mcp.tool(
        name=ToolName.CONFIGURE.value,
        description=tools.TOOL_DESCRIPTIONS[ToolName.CONFIGURE],
    )
    def dingtalk_configure(
        endpoint: str | None = None,
        secret: str | None = None,
        keywords: list[str] | None = None,
        timeout: float | None = None,
        includeSender: bool | None = None,  # noqa: N803
    ) -> str:
        """Configure the DingTalk webhook, replacing any previous configuration."""
        arguments = _compact(
            endpoint=endpoint,
            secret=secret,
            keywords=keywords,
            timeout=timeout,
            includeSender=includeSender,
        )
        return router.call(ToolName.CONFIGURE.value, arguments).display_text

    @mcp.tool(
        name=ToolName.SEND_TEXT.value,
        description=tools.TOOL_DESCRIPTIONS[ToolName.SEND_TEXT],
    )
    def dingtalk_send_text(
        content: str | None = None,
        atAll: bool = False,  # noqa: N803
        atMobiles: list[str] | None = None,  # noqa: N803
        atUserIds: list[str] | None = None,  # noqa: N803
    ) -> str:
        """Send a plain text message."""
        arguments = _compact(
            content=content, atAll=atAll, atMobiles=atMobiles, atUserIds=atUserIds
        )
        return router.call(ToolName.SEND_TEXT.value, arguments).display_text

    @mcp.tool(
        name=ToolName.SEND_MARKDOWN.value,
        description=tools.TOOL_DESCRIPTIONS[ToolName.SEND_MARKDOWN],
    )
    def dingtalk_send_markdown(
        title: str | None = None,
        text: str | None = None,
        atAll: bool = False,  # noqa: N803
        atMobiles: list[str] | None = None,  # noqa: N803
        atUserIds: list[str] | None = None,  # noqa: N803
    ) -> str:
        """Send a markdown message."""
        arguments = _compact(
            title=title, text=text, atAll=atAll, atMobiles=atMobiles, atUserIds=atUserIds
        )
        return router.call(ToolName.SEND_MARKDOWN.value, arguments).display_text

    @mcp.tool(
        name=ToolName.SEND_LINK.value,
        description=tools.TOOL_DESCRIPTIONS[ToolName.SEND_LINK],
    )
    def dingtalk_send_link(
        title: str | None = None,
        text: str | None = None,
        messageUrl: str | None = None,  # noqa: N803
        picUrl: str | None = None,  # noqa: N803
    ) -> str:
        """Send a link card."""
        arguments = _compact(title=title, text=text, messageUrl=messageUrl, picUrl=picUrl)
        return router.call(ToolName.SEND_LINK.value, arguments).display_text

    @mcp.tool(
        name=ToolName.NOTIFY_SESSION_END.value,
        description=tools.TOOL_DESCRIPTIONS[ToolName.NOTIFY_SESSION_END],
    )
    def dingtalk_notify_session_end(
        sessionType: str | None = None,  # noqa: N803
        duration: str | None = None,
        mainTasks: list[str] | None = None,  # noqa: N803
        summary: str | None = None,
        filesCount: int | None = None,  # noqa: N803
        toolsUsed: int | None = None,  # noqa: N803
        atAll: bool = False,  # noqa: N803
    ) -> str:
        """Send a session completion summary. All fields are optional."""
        arguments = _compact(
            sessionType=sessionType,
            duration=duration,
            mainTasks=mainTasks,
            summary=summary,
            filesCount=filesCount,
            toolsUsed=toolsUsed,
            atAll=atAll,
        )
        return router.call(ToolName.NOTIFY_SESSION_END.value, arguments).display_text

    @mcp.tool(
        name=ToolName.NOTIFY_TASK_COMPLETE.value,
        description=tools.TOOL_DESCRIPTIONS[ToolName.NOTIFY_TASK_COMPLETE],
    )
    def dingtalk_notify_task_complete(
        taskName: str | None = None,  # noqa: N803
        status: str | None = None,
        details: str | None = None,
        duration: str | None = None,
        atAll: bool = False,  # noqa: N803
    ) -> str:
        """Send a task outcome notification."""
        arguments = _compact(
            taskName=taskName, status=status, details=details, duration=duration, atAll=atAll
        )
        return router.call(ToolName.NOTIFY_TASK_COMPLETE.value, arguments).display_text

    # =========================================================================
    # Resources
    # =========================================================================

    @mcp.resource("dingtalk://status")
    def status_resource() -> str:
        """Active webhook configuration, without the access token."""
        return tools.resource_status(router)

    @mcp.resource("dingtalk://tools")
    def tools_resource() -> str:
        """The tool catalog."""
        return tools.resource_catalog()

    @mcp.resource("dingtalk://health")
    def health_resource() -> str:
        """Server health as JSON."""
        return json.dumps(tools.health_check(router, name, start_time))

    return mcp


def run_server(
    name: str = DEFAULT_SERVER_NAME,
    config: DingTalkConfig | None = None,
    transport: TransportType = "stdio",
) -> None:
    """Create and run the MCP server.

    Args:
        name: Server name reported to MCP clients.
        config: Initial configuration, or None to start unconfigured.
        transport: MCP transport. stdio is what Claude Code uses.
    """
    server = create_server(name=name, config=config)
    logger.info(f"DingTalk MCP server running on {transport}")
    server.run(transport=transport)


def configure_logging(level: str | None = None) -> None:
    """Send log output to stderr; stdout carries the MCP protocol."""
    level_name = (level or os.environ.get("DINGTALK_LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT, stream=sys.stderr
    )


def main() -> None:
    """Console entry point: bootstrap from the environment and serve on stdio."""
    configure_logging()
    config = load_config_from_env()
    if config is not None:
        logger.info("DingTalk client initialized from environment variables")
    else:
        logger.info("DINGTALK_WEBHOOK not set; waiting for dingtalk_configure")
    run_server(config=config)


if __name__ == "__main__":
    main()
