"""Webhook delivery for DingTalk custom robots.

This module provides:

- DingTalkClient: HTTP client posting messages with optional HMAC signatures
- Message builders for the text, markdown and link shapes
- Signer helpers producing the ``timestamp`` / ``sign`` query parameters

Usage:
    from dingtalk_notify.webhooks import DingTalkClient, build_markdown

    client = DingTalkClient(DingTalkConfig(endpoint=url, secret="SEC..."))
    client.send(build_markdown("Build", "## Build passed"))
"""

from __future__ import annotations

from dingtalk_notify.core.exceptions import WebhookDeliveryError, WebhookTimeoutError
from dingtalk_notify.webhooks.client import DingTalkClient, WebhookDeliveryResult
from dingtalk_notify.webhooks.messages import (
    LinkMessage,
    MarkdownMessage,
    MentionDirective,
    OutboundMessage,
    TextMessage,
    build_link,
    build_markdown,
    build_mention,
    build_text,
    encode_payload,
    to_payload,
)
from dingtalk_notify.webhooks.signer import (
    Signature,
    SignedRequest,
    append_query_params,
    compute_signature,
    sign,
    sign_url,
)

__all__ = [
    # Transport
    "DingTalkClient",
    "WebhookDeliveryError",
    "WebhookDeliveryResult",
    "WebhookTimeoutError",
    # Messages
    "LinkMessage",
    "MarkdownMessage",
    "MentionDirective",
    "OutboundMessage",
    "TextMessage",
    "build_link",
    "build_markdown",
    "build_mention",
    "build_text",
    "encode_payload",
    "to_payload",
    # Signing
    "Signature",
    "SignedRequest",
    "append_query_params",
    "compute_signature",
    "sign",
    "sign_url",
]
