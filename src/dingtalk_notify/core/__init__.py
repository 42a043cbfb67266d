"""Core module - exports configuration, exceptions and templates."""

from dingtalk_notify.core.config import (
    DingTalkConfig,
    load_config_from_env,
    parse_keywords,
)

from dingtalk_notify.core.exceptions import (
    ErrorKind,
    DingTalkNotifyError,
    ConfigurationMissingError,
    ToolValidationError,
    UnknownToolError,
    WebhookDeliveryError,
    WebhookTimeoutError,
)

from dingtalk_notify.core.git import UNKNOWN_USER, get_git_username

from dingtalk_notify.core.session_log import (
    SessionStats,
    parse_session_log,
    read_session_log,
)

from dingtalk_notify.core.templates import (
    RenderedNotification,
    TaskStatus,
    render_session_end,
    render_session_report,
    render_task_complete,
)

__all__ = [
    # Configuration
    "DingTalkConfig",
    "load_config_from_env",
    "parse_keywords",
    # Exceptions
    "ErrorKind",
    "DingTalkNotifyError",
    "ConfigurationMissingError",
    "ToolValidationError",
    "UnknownToolError",
    "WebhookDeliveryError",
    "WebhookTimeoutError",
    # Collaborators
    "UNKNOWN_USER",
    "get_git_username",
    "SessionStats",
    "parse_session_log",
    "read_session_log",
    # Templates
    "RenderedNotification",
    "TaskStatus",
    "render_session_end",
    "render_session_report",
    "render_task_complete",
]
