"""Exceptions - Error taxonomy for the notification tools.

Every error raised inside the tool layer derives from DingTalkNotifyError and
carries a short message plus optional details. The tool router resolves all of
them into a textual ToolResult; none of them is allowed to end the process.
"""

from __future__ import annotations

from enum import Enum

# =============================================================================
# Error Kinds
# =============================================================================


class ErrorKind(str, Enum):
    """Machine-readable category attached to a failed ToolResult."""

    CONFIGURATION_MISSING = "configuration_missing"
    VALIDATION_ERROR = "validation_error"
    TRANSPORT_ERROR = "transport_error"
    UNKNOWN_OPERATION = "unknown_operation"
    INTERNAL_ERROR = "internal_error"


# =============================================================================
# Custom Exception Classes
# =============================================================================


class DingTalkNotifyError(Exception):
    """Base exception for all notification errors."""

    kind: ErrorKind = ErrorKind.INTERNAL_ERROR

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.details:
            return f"{self.message}\n  Details: {self.details}"
        return self.message


class ConfigurationMissingError(DingTalkNotifyError):
    """Raised when a send is requested before any webhook is configured."""

    kind = ErrorKind.CONFIGURATION_MISSING

    def __init__(self) -> None:
        super().__init__(
            "DingTalk client not configured",
            "Use dingtalk_configure first or set DINGTALK_WEBHOOK (and optionally "
            "DINGTALK_SECRET) before starting the server.",
        )


class ToolValidationError(DingTalkNotifyError):
    """Raised when tool arguments are missing or have the wrong type."""

    kind = ErrorKind.VALIDATION_ERROR

    def __init__(
        self,
        tool: str,
        missing: list[str] | None = None,
        invalid: list[str] | None = None,
    ):
        self.tool = tool
        self.missing = missing or []
        self.invalid = invalid or []

        details_parts = []
        if self.missing:
            details_parts.append(f"Missing required fields: {', '.join(self.missing)}")
        if self.invalid:
            details_parts.append(f"Invalid fields: {'; '.join(self.invalid)}")

        super().__init__(
            f"Invalid arguments for {tool}",
            " | ".join(details_parts) if details_parts else None,
        )


class UnknownToolError(DingTalkNotifyError):
    """Raised when a tool name is not part of the catalog."""

    kind = ErrorKind.UNKNOWN_OPERATION

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class WebhookDeliveryError(DingTalkNotifyError):
    """Raised inside the transport when a POST cannot be completed.

    Covers network failures, malformed responses and provider error codes.
    The client converts it into a failed WebhookDeliveryResult.
    """

    kind = ErrorKind.TRANSPORT_ERROR

    def __init__(
        self,
        message: str,
        details: str | None = None,
        status_code: int | None = None,
        errcode: int | None = None,
    ):
        self.status_code = status_code
        self.errcode = errcode
        super().__init__(message, details)


class WebhookTimeoutError(WebhookDeliveryError):
    """Raised when the webhook endpoint does not answer in time."""

    def __init__(self, url: str, timeout: float):
        self.url = url
        self.timeout = timeout
        super().__init__(
            "Timed out while posting to DingTalk webhook",
            f"Request timed out after {timeout} seconds.",
        )
