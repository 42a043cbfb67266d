"""Webhook Transport - Single signed POST to a DingTalk robot.

Delivery is best-effort and at-most-once: one POST per send, no retries.
Every failure (network error, non-JSON body, non-zero ``errcode``) becomes a
failed WebhookDeliveryResult and a WARNING log line; nothing is raised to the
caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from ..core.config import DingTalkConfig
from ..core.exceptions import WebhookDeliveryError, WebhookTimeoutError
from .messages import (
    LinkMessage,
    MarkdownMessage,
    MentionDirective,
    TextMessage,
    build_link,
    build_markdown,
    build_text,
    encode_payload,
)
from .signer import sign_url

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


@dataclass(frozen=True)
class WebhookDeliveryResult:
    """Outcome of one webhook POST."""

    success: bool
    status_code: int | None = None
    errcode: int | None = None
    errmsg: str | None = None
    error: str | None = None

    def describe(self) -> str:
        """Short human-readable reason for a failed delivery."""
        if self.success:
            return "ok"
        if self.error:
            return self.error
        if self.errcode is not None:
            return f"errcode={self.errcode}, errmsg={self.errmsg or 'unknown error'}"
        return "unknown error"


class DingTalkClient:
    """Sends messages to one configured robot webhook."""

    def __init__(self, config: DingTalkConfig):
        self.config = config

    def request_url(self) -> str:
        """Endpoint URL for the next request, signed when a secret is set."""
        signed = sign_url(self.config.endpoint, self.config.secret)
        return signed.url if signed else self.config.endpoint

    def deliver(
        self, message: TextMessage | MarkdownMessage | LinkMessage
    ) -> WebhookDeliveryResult:
        """POST a message and report the detailed outcome."""
        try:
            status_code, data = self._post(message)
        except WebhookDeliveryError as e:
            logger.warning(f"DingTalk notification failed: {e}")
            if e.errcode is not None:
                return WebhookDeliveryResult(
                    success=False, status_code=e.status_code, errcode=e.errcode, errmsg=e.details
                )
            reason = f"{e.message}: {e.details}" if e.details else e.message
            return WebhookDeliveryResult(success=False, status_code=e.status_code, error=reason)

        logger.debug(f"DingTalk accepted {message.msgtype} message (HTTP {status_code})")
        return WebhookDeliveryResult(
            success=True,
            status_code=status_code,
            errcode=0,
            errmsg=data.get("errmsg"),
        )

    def send(self, message: TextMessage | MarkdownMessage | LinkMessage) -> bool:
        return self.deliver(message).success

    def send_text(self, content: str, mention: MentionDirective | None = None) -> bool:
        return self.send(build_text(content, mention))

    def send_markdown(self, title: str, text: str, mention: MentionDirective | None = None) -> bool:
        return self.send(build_markdown(title, text, mention))

    def send_link(
        self,
        title: str,
        text: str,
        message_url: str,
        pic_url: str | None = None,
        mention: MentionDirective | None = None,
    ) -> bool:
        return self.send(build_link(title, text, message_url, pic_url, mention))

    def _post(
        self, message: TextMessage | MarkdownMessage | LinkMessage
    ) -> tuple[int, dict[str, Any]]:
        """Perform the POST and return (status_code, response JSON).

        Raises:
            WebhookTimeoutError: If the endpoint does not answer in time.
            WebhookDeliveryError: On network errors, malformed responses or a
                non-zero provider errcode.
        """
        url = self.request_url()
        try:
            response = httpx.post(
                url,
                content=encode_payload(message),
                headers=JSON_HEADERS,
                timeout=self.config.timeout,
            )
        except httpx.TimeoutException as e:
            raise WebhookTimeoutError(self.config.endpoint, self.config.timeout) from e
        except httpx.HTTPError as e:
            raise WebhookDeliveryError("Failed to reach DingTalk webhook", str(e)) from e

        status_code = response.status_code
        try:
            data = response.json()
        except ValueError as e:
            raise WebhookDeliveryError(
                f"DingTalk returned a non-JSON response (HTTP {status_code})",
                status_code=status_code,
            ) from e

        if not isinstance(data, dict):
            raise WebhookDeliveryError(
                f"DingTalk returned an unexpected response (HTTP {status_code})",
                str(data)[:200],
                status_code=status_code,
            )

        errcode = data.get("errcode")
        if errcode != 0:
            raise WebhookDeliveryError(
                "DingTalk rejected the message",
                str(data.get("errmsg") or "unknown error"),
                status_code=status_code,
                errcode=errcode if isinstance(errcode, int) else None,
            )

        return status_code, data
