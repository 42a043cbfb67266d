"""Message Builder - Outbound DingTalk robot message shapes.

Three shapes are supported, selected by ``msgtype``:

- ``text``: plain text body
- ``markdown``: title (shown in the notification preview) and markdown body
- ``link``: card with title, description, target URL and optional image

Any shape may carry a MentionDirective, serialised as the ``at`` object.
String content is not validated here; if the robot has security keywords
configured, DingTalk itself rejects messages that lack them.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Models
# =============================================================================


class MentionDirective(BaseModel):
    """Who the chat client should notify for this message."""

    model_config = ConfigDict(frozen=True)

    at_mobiles: tuple[str, ...] = ()
    at_user_ids: tuple[str, ...] = ()
    at_all: bool = False

    @property
    def is_empty(self) -> bool:
        return not (self.at_mobiles or self.at_user_ids or self.at_all)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if self.at_mobiles:
            payload["atMobiles"] = list(self.at_mobiles)
        if self.at_user_ids:
            payload["atUserIds"] = list(self.at_user_ids)
        if self.at_all:
            payload["isAtAll"] = True
        return payload


class TextMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    msgtype: Literal["text"] = "text"
    content: str
    mention: MentionDirective | None = None

    def body(self) -> dict[str, Any]:
        return {"content": self.content}


class MarkdownMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    msgtype: Literal["markdown"] = "markdown"
    title: str
    text: str
    mention: MentionDirective | None = None

    def body(self) -> dict[str, Any]:
        return {"title": self.title, "text": self.text}


class LinkMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    msgtype: Literal["link"] = "link"
    title: str
    text: str
    message_url: str
    pic_url: str | None = None
    mention: MentionDirective | None = None

    def body(self) -> dict[str, Any]:
        body = {"title": self.title, "text": self.text, "messageUrl": self.message_url}
        if self.pic_url:
            body["picUrl"] = self.pic_url
        return body


OutboundMessage = Annotated[
    TextMessage | MarkdownMessage | LinkMessage,
    Field(discriminator="msgtype"),
]


# =============================================================================
# Builders
# =============================================================================


def build_mention(
    at_all: bool = False,
    at_mobiles: list[str] | tuple[str, ...] | None = None,
    at_user_ids: list[str] | tuple[str, ...] | None = None,
) -> MentionDirective | None:
    """Build a mention directive, or None when nobody is to be mentioned."""
    mention = MentionDirective(
        at_mobiles=tuple(dict.fromkeys(at_mobiles or ())),
        at_user_ids=tuple(dict.fromkeys(at_user_ids or ())),
        at_all=at_all,
    )
    return None if mention.is_empty else mention


def build_text(content: str, mention: MentionDirective | None = None) -> TextMessage:
    return TextMessage(content=content, mention=mention)


def build_markdown(
    title: str, text: str, mention: MentionDirective | None = None
) -> MarkdownMessage:
    return MarkdownMessage(title=title, text=text, mention=mention)


def build_link(
    title: str,
    text: str,
    message_url: str,
    pic_url: str | None = None,
    mention: MentionDirective | None = None,
) -> LinkMessage:
    return LinkMessage(
        title=title, text=text, message_url=message_url, pic_url=pic_url, mention=mention
    )


# =============================================================================
# Serialization
# =============================================================================


def to_payload(message: TextMessage | MarkdownMessage | LinkMessage) -> dict[str, Any]:
    """Convert a message to the robot's JSON wire shape."""
    payload: dict[str, Any] = {"msgtype": message.msgtype, message.msgtype: message.body()}
    if message.mention is not None and not message.mention.is_empty:
        payload["at"] = message.mention.to_payload()
    return payload


def encode_payload(message: TextMessage | MarkdownMessage | LinkMessage) -> bytes:
    """Serialize a message as UTF-8 JSON, keeping non-ASCII characters as-is."""
    return json.dumps(to_payload(message), ensure_ascii=False).encode("utf-8")
