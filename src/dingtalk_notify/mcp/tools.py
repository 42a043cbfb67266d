"""MCP Tools - Tool catalog and dispatch for DingTalk notifications.

Each tool has a typed request model; raw ``arguments`` mappings are validated
into it once, at the router boundary. ``ToolRouter.dispatch`` never raises:
unknown tools, invalid arguments, a missing configuration and transport
failures all come back as a ToolResult with a readable message.

Tool names:
    dingtalk_configure             - (re)configure the webhook
    dingtalk_send_text             - plain text message
    dingtalk_send_markdown         - markdown message
    dingtalk_send_link             - link card
    dingtalk_notify_session_end    - session completion summary
    dingtalk_notify_task_complete  - task outcome notification
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from datetime import datetime
from enum import Enum
from typing import Any, Literal
from urllib.parse import urlsplit, urlunsplit

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from .. import __version__
from ..core.config import DEFAULT_TIMEOUT, DingTalkConfig
from ..core.exceptions import (
    ConfigurationMissingError,
    DingTalkNotifyError,
    ErrorKind,
    ToolValidationError,
    UnknownToolError,
)
from ..core.git import get_git_username
from ..core.templates import append_sender, render_session_end, render_task_complete
from ..webhooks.client import DingTalkClient, WebhookDeliveryResult
from ..webhooks.messages import (
    MentionDirective,
    build_link,
    build_markdown,
    build_mention,
    build_text,
)

logger = logging.getLogger(__name__)

# =============================================================================
# Tool Names
# =============================================================================


class ToolName(str, Enum):
    """The fixed tool catalog."""

    CONFIGURE = "dingtalk_configure"
    SEND_TEXT = "dingtalk_send_text"
    SEND_MARKDOWN = "dingtalk_send_markdown"
    SEND_LINK = "dingtalk_send_link"
    NOTIFY_SESSION_END = "dingtalk_notify_session_end"
    NOTIFY_TASK_COMPLETE = "dingtalk_notify_task_complete"


class RouterState(str, Enum):
    UNCONFIGURED = "unconfigured"
    CONFIGURED = "configured"


# =============================================================================
# Request Models
# =============================================================================


class ToolRequest(BaseModel):
    """Base for tool arguments. Wire names are camelCase."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class MentionArgs(ToolRequest):
    """Optional mention arguments shared by the send tools."""

    at_all: bool = Field(default=False, alias="atAll", description="Whether to @all members.")
    at_mobiles: list[str] | None = Field(
        default=None, alias="atMobiles", description="Mobile numbers to @mention."
    )
    at_user_ids: list[str] | None = Field(
        default=None, alias="atUserIds", description="DingTalk user IDs to @mention."
    )

    def mention(self) -> MentionDirective | None:
        return build_mention(self.at_all, self.at_mobiles, self.at_user_ids)


class ConfigureRequest(ToolRequest):
    endpoint: str = Field(
        min_length=1,
        validation_alias=AliasChoices("endpoint", "webhook"),
        description="DingTalk webhook URL with access token.",
    )
    secret: str | None = Field(default=None, description="Optional secret for request signing.")
    keywords: list[str] | None = Field(
        default=None, description="Optional security keywords (advisory only)."
    )
    timeout: float | None = Field(default=None, gt=0, description="Request timeout in seconds.")
    include_sender: bool = Field(
        default=False,
        alias="includeSender",
        description="Append the git user name to text and markdown messages.",
    )

    @field_validator("endpoint", mode="before")
    @classmethod
    def _strip_endpoint(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("keywords", mode="before")
    @classmethod
    def _split_keywords(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.split(",")
        return value

    def to_config(self) -> DingTalkConfig:
        """Build the configuration this request describes.

        Raises:
            ToolValidationError: If the values are rejected by DingTalkConfig.
        """
        try:
            return DingTalkConfig(
                endpoint=self.endpoint,
                secret=self.secret,
                keywords=self.keywords,
                timeout=self.timeout or DEFAULT_TIMEOUT,
                include_sender=self.include_sender,
            )
        except ValidationError as e:
            raise _validation_error(ToolName.CONFIGURE, e) from e


class SendTextRequest(MentionArgs):
    content: str = Field(description="Text content to send.")


class SendMarkdownRequest(MentionArgs):
    title: str = Field(description="Message title shown in the notification preview.")
    text: str = Field(description="Markdown formatted text content.")


class SendLinkRequest(MentionArgs):
    title: str = Field(description="Link title.")
    text: str = Field(description="Link description text.")
    message_url: str = Field(alias="messageUrl", description="Target URL.")
    pic_url: str | None = Field(default=None, alias="picUrl", description="Optional image URL.")


class NotifySessionEndRequest(MentionArgs):
    session_type: str | None = Field(
        default=None,
        alias="sessionType",
        description='Type of session, e.g. "development", "code review".',
    )
    duration: str | None = Field(default=None, description='Session duration, e.g. "30 min".')
    main_tasks: list[str] | None = Field(
        default=None, alias="mainTasks", description="Main tasks completed in this session."
    )
    summary: str | None = Field(default=None, description="Brief summary of the session.")
    files_count: int | None = Field(
        default=None, ge=0, alias="filesCount", description="Number of files modified or created."
    )
    tools_used: int | None = Field(
        default=None, ge=0, alias="toolsUsed", description="Number of tools or commands used."
    )

    @field_validator("main_tasks", mode="before")
    @classmethod
    def _split_tasks(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [t for t in value.split(",") if t.strip()]
        return value


class NotifyTaskCompleteRequest(MentionArgs):
    task_name: str = Field(alias="taskName", description="Name of the task.")
    status: Literal["success", "failed", "warning"] = Field(description="Task outcome.")
    details: str | None = Field(default=None, description="Optional details, included verbatim.")
    duration: str | None = Field(default=None, description="Optional task duration.")


REQUEST_MODELS: dict[ToolName, type[ToolRequest]] = {
    ToolName.CONFIGURE: ConfigureRequest,
    ToolName.SEND_TEXT: SendTextRequest,
    ToolName.SEND_MARKDOWN: SendMarkdownRequest,
    ToolName.SEND_LINK: SendLinkRequest,
    ToolName.NOTIFY_SESSION_END: NotifySessionEndRequest,
    ToolName.NOTIFY_TASK_COMPLETE: NotifyTaskCompleteRequest,
}

TOOL_DESCRIPTIONS: dict[ToolName, str] = {
    ToolName.CONFIGURE: "Configure DingTalk webhook settings",
    ToolName.SEND_TEXT: "Send a text message to DingTalk group",
    ToolName.SEND_MARKDOWN: "Send a markdown message to DingTalk group",
    ToolName.SEND_LINK: "Send a link message to DingTalk group",
    ToolName.NOTIFY_SESSION_END: "Send a session completion notification with session statistics",
    ToolName.NOTIFY_TASK_COMPLETE: "Send a task completion notification with status",
}


# =============================================================================
# Response Models
# =============================================================================


class ToolInvocation(BaseModel):
    """A call-by-name request from the MCP client."""

    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class ToolResult(BaseModel):
    """Outcome of one tool call. Always produced, success or not."""

    display_text: str
    success: bool
    error_kind: ErrorKind | None = None

    @classmethod
    def ok(cls, text: str) -> ToolResult:
        return cls(display_text=text, success=True)

    @classmethod
    def from_error(cls, error: DingTalkNotifyError) -> ToolResult:
        return cls(display_text=f"Error: {error}", success=False, error_kind=error.kind)


class ToolSpec(BaseModel):
    """Catalog entry describing one tool."""

    name: str
    description: str
    required: list[str]
    input_schema: dict[str, Any]


def required_fields(model: type[ToolRequest]) -> list[str]:
    """Wire names of the required arguments of a request model."""
    return [
        field.alias or name for name, field in model.model_fields.items() if field.is_required()
    ]


def parse_request(name: ToolName, arguments: dict[str, Any] | None) -> ToolRequest:
    """Validate raw tool arguments into the tool's request model.

    Raises:
        ToolValidationError: If required fields are missing or values are invalid.
    """
    model = REQUEST_MODELS[name]
    try:
        return model.model_validate(arguments or {})
    except ValidationError as e:
        raise _validation_error(name, e) from e


def _validation_error(name: ToolName, error: ValidationError) -> ToolValidationError:
    missing_fields = []
    invalid_fields = []
    for item in error.errors():
        field = ".".join(str(loc) for loc in item["loc"])
        if item["type"] == "missing":
            missing_fields.append(field)
        else:
            invalid_fields.append(f"{field}: {item['msg']}")
    return ToolValidationError(name.value, missing_fields, invalid_fields)


# =============================================================================
# Router
# =============================================================================


class ToolRouter:
    """Dispatches tool invocations against the active DingTalk configuration.

    The router is Unconfigured until it holds a DingTalkConfig, either passed
    to the constructor or installed by ``dingtalk_configure``. Reconfiguring
    replaces the whole configuration and client.
    """

    def __init__(
        self,
        config: DingTalkConfig | None = None,
        client_factory: Callable[[DingTalkConfig], DingTalkClient] = DingTalkClient,
        username_provider: Callable[[], str] = get_git_username,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._client_factory = client_factory
        self._username_provider = username_provider
        self._clock = clock
        self._lock = threading.Lock()
        self._config: DingTalkConfig | None = None
        self._client: DingTalkClient | None = None
        if config is not None:
            self.configure(config)

        self._handlers: dict[ToolName, Callable[[Any], ToolResult]] = {
            ToolName.CONFIGURE: self._handle_configure,
            ToolName.SEND_TEXT: self._handle_send_text,
            ToolName.SEND_MARKDOWN: self._handle_send_markdown,
            ToolName.SEND_LINK: self._handle_send_link,
            ToolName.NOTIFY_SESSION_END: self._handle_notify_session_end,
            ToolName.NOTIFY_TASK_COMPLETE: self._handle_notify_task_complete,
        }

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def config(self) -> DingTalkConfig | None:
        return self._config

    @property
    def state(self) -> RouterState:
        return RouterState.CONFIGURED if self._config is not None else RouterState.UNCONFIGURED

    def configure(self, config: DingTalkConfig) -> None:
        """Install a new configuration, replacing any previous one."""
        client = self._client_factory(config)
        with self._lock:
            self._config = config
            self._client = client
        logger.info(f"DingTalk client configured (signed={config.signed})")

    def _active(self) -> tuple[DingTalkConfig, DingTalkClient]:
        with self._lock:
            config, client = self._config, self._client
        if config is None or client is None:
            raise ConfigurationMissingError()
        return config, client

    # -------------------------------------------------------------------------
    # Catalog & Dispatch
    # -------------------------------------------------------------------------

    @staticmethod
    def catalog() -> list[ToolSpec]:
        """Describe every tool in the catalog."""
        return [
            ToolSpec(
                name=name.value,
                description=TOOL_DESCRIPTIONS[name],
                required=required_fields(model),
                input_schema=model.model_json_schema(by_alias=True),
            )
            for name, model in REQUEST_MODELS.items()
        ]

    def dispatch(self, invocation: ToolInvocation) -> ToolResult:
        """Route a tool invocation to its handler and return the outcome.

        Checks run in a fixed order: tool name, then arguments, then the
        configuration. A send with invalid arguments on an unconfigured router
        therefore reports a validation error, not a missing configuration.
        """
        try:
            try:
                name = ToolName(invocation.name)
            except ValueError:
                raise UnknownToolError(invocation.name) from None

            request = parse_request(name, invocation.arguments)
            return self._handlers[name](request)
        except DingTalkNotifyError as e:
            logger.info(f"Tool {invocation.name} failed: {e.message}")
            return ToolResult.from_error(e)
        except Exception as e:
            logger.exception(f"Unexpected error in tool {invocation.name}")
            return ToolResult(
                display_text=f"Error: {e}",
                success=False,
                error_kind=ErrorKind.INTERNAL_ERROR,
            )

    def call(self, name: str, arguments: dict[str, Any] | None = None) -> ToolResult:
        """Shorthand for ``dispatch(ToolInvocation(name=..., arguments=...))``."""
        return self.dispatch(ToolInvocation(name=name, arguments=arguments or {}))

    # -------------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------------

    def _handle_configure(self, request: ConfigureRequest) -> ToolResult:
        config = request.to_config()
        self.configure(config)
        suffix = " with request signing" if config.signed else ""
        return ToolResult.ok(f"✅ DingTalk client configured successfully{suffix}")

    def _handle_send_text(self, request: SendTextRequest) -> ToolResult:
        config, client = self._active()
        content = request.content
        if config.include_sender:
            content = append_sender(content, self._username_provider())
        result = client.deliver(build_text(content, request.mention()))
        return _delivery_result(result, "Text message")

    def _handle_send_markdown(self, request: SendMarkdownRequest) -> ToolResult:
        config, client = self._active()
        text = request.text
        if config.include_sender:
            text = append_sender(text, self._username_provider(), markdown=True)
        result = client.deliver(build_markdown(request.title, text, request.mention()))
        return _delivery_result(result, "Markdown message")

    def _handle_send_link(self, request: SendLinkRequest) -> ToolResult:
        _, client = self._active()
        message = build_link(
            request.title,
            request.text,
            request.message_url,
            request.pic_url,
            request.mention(),
        )
        return _delivery_result(client.deliver(message), "Link message")

    def _handle_notify_session_end(self, request: NotifySessionEndRequest) -> ToolResult:
        _, client = self._active()
        rendered = render_session_end(
            session_type=request.session_type,
            duration=request.duration,
            main_tasks=request.main_tasks,
            summary=request.summary,
            files_count=request.files_count,
            tools_used=request.tools_used,
            operator=self._username_provider(),
            now=self._clock(),
        )
        result = client.deliver(build_markdown(rendered.title, rendered.text, request.mention()))
        return _delivery_result(result, "Session completion notification", rendered.title)

    def _handle_notify_task_complete(self, request: NotifyTaskCompleteRequest) -> ToolResult:
        _, client = self._active()
        rendered = render_task_complete(
            task_name=request.task_name,
            status=request.status,
            details=request.details,
            duration=request.duration,
            operator=self._username_provider(),
            now=self._clock(),
        )
        result = client.deliver(build_markdown(rendered.title, rendered.text, request.mention()))
        return _delivery_result(result, "Task completion notification", rendered.title)


# =============================================================================
# Resources & Health
# =============================================================================


class HealthCheckResult(BaseModel):
    status: str
    version: str
    server_name: str
    uptime_seconds: float | None = None
    configured: bool


def redact_endpoint(endpoint: str) -> str:
    """Endpoint without its query string, so the access token is not exposed."""
    parts = urlsplit(endpoint)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def resource_status(router: ToolRouter) -> str:
    """Human-readable description of the active configuration."""
    config = router.config
    if config is None:
        return "Not configured. Call dingtalk_configure or set DINGTALK_WEBHOOK."

    keywords = ", ".join(sorted(config.keywords)) if config.keywords else "none"
    return (
        f"Endpoint: {redact_endpoint(config.endpoint)}\n"
        f"Signed: {'yes' if config.signed else 'no'}\n"
        f"Keywords: {keywords}\n"
        f"Timeout: {config.timeout}s"
    )


def resource_catalog() -> str:
    """Tool catalog as one line per tool."""
    lines = []
    for spec in ToolRouter.catalog():
        required = ", ".join(spec.required) if spec.required else "none"
        lines.append(f"{spec.name}: {spec.description} (required: {required})")
    return "\n".join(lines)


def health_check(
    router: ToolRouter, server_name: str, start_time: float | None = None
) -> dict[str, Any]:
    """Report server health."""
    uptime = time.time() - start_time if start_time is not None else None
    return HealthCheckResult(
        status="healthy",
        version=__version__,
        server_name=server_name,
        uptime_seconds=uptime,
        configured=router.state is RouterState.CONFIGURED,
    ).model_dump()


def _delivery_result(
    result: WebhookDeliveryResult, what: str, title: str | None = None
) -> ToolResult:
    suffix = f" ({title})" if title else ""
    if result.success:
        return ToolResult.ok(f"✅ {what} sent successfully{suffix}")
    return ToolResult(
        display_text=f"❌ Failed to send {what[0].lower()}{what[1:]}{suffix}: {result.describe()}",
        success=False,
        error_kind=ErrorKind.TRANSPORT_ERROR,
    )
