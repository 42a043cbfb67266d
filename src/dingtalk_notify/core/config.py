"""Configuration Model - Pydantic model for the DingTalk webhook configuration.

A DingTalkConfig is immutable: a configure call replaces the whole value,
it never patches individual fields. The environment is read only by
`load_config_from_env()`, which entry points call explicitly at start-up.

Environment Variable Mapping:
| Config Key       | Environment Variable      |
|------------------|---------------------------|
| endpoint         | DINGTALK_WEBHOOK          |
| secret           | DINGTALK_SECRET           |
| keywords         | DINGTALK_KEYWORDS         |
| timeout          | DINGTALK_TIMEOUT          |
| include_sender   | DINGTALK_INCLUDE_SENDER   |
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

ENV_WEBHOOK = "DINGTALK_WEBHOOK"
ENV_SECRET = "DINGTALK_SECRET"
ENV_KEYWORDS = "DINGTALK_KEYWORDS"
ENV_TIMEOUT = "DINGTALK_TIMEOUT"
ENV_INCLUDE_SENDER = "DINGTALK_INCLUDE_SENDER"

DEFAULT_TIMEOUT = 10.0

_TRUTHY = {"1", "true", "yes", "on"}


# =============================================================================
# Configuration Model
# =============================================================================


class DingTalkConfig(BaseModel):
    """Webhook settings for one DingTalk custom robot.

    Example:
    ```python
    config = DingTalkConfig(
        endpoint="https://oapi.dingtalk.com/robot/send?access_token=XXX",
        secret="SEC...",
        keywords={"build", "deploy"},
    )
    ```
    """

    model_config = ConfigDict(frozen=True)

    endpoint: str = Field(
        min_length=1,
        description="Robot webhook URL including the access_token query parameter.",
    )
    secret: str | None = Field(
        default=None,
        description="Shared secret for request signing. Unsigned when absent.",
    )
    keywords: frozenset[str] | None = Field(
        default=None,
        description="Security keywords configured on the robot. Advisory only, not enforced.",
    )
    timeout: float = Field(
        default=DEFAULT_TIMEOUT,
        gt=0,
        description="Timeout in seconds for the webhook POST.",
    )
    include_sender: bool = Field(
        default=False,
        description="Append a sender footer (git user name) to text and markdown sends.",
    )

    @field_validator("secret")
    @classmethod
    def _blank_secret_is_none(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value

    @field_validator("keywords", mode="before")
    @classmethod
    def _normalize_keywords(cls, value: object) -> object:
        if value is None:
            return None
        if isinstance(value, str):
            return parse_keywords(value)
        if isinstance(value, Iterable):
            cleaned = {str(k).strip() for k in value if str(k).strip()}
            return frozenset(cleaned) if cleaned else None
        return value

    @property
    def signed(self) -> bool:
        """Whether sends to this endpoint carry a signature."""
        return self.secret is not None


# =============================================================================
# Environment Loading
# =============================================================================


def parse_keywords(raw: str | None) -> frozenset[str] | None:
    """Split a comma-separated keyword list into a trimmed set.

    Returns:
        The keyword set, or None when no non-empty keyword remains.
    """
    if not raw:
        return None
    keywords = frozenset(k.strip() for k in raw.split(",") if k.strip())
    return keywords or None


def load_config_from_env(environ: Mapping[str, str] | None = None) -> DingTalkConfig | None:
    """Build a DingTalkConfig from environment variables.

    Args:
        environ: Mapping to read from. Defaults to os.environ.

    Returns:
        The configuration, or None when DINGTALK_WEBHOOK is unset or blank.
    """
    env = os.environ if environ is None else environ

    endpoint = (env.get(ENV_WEBHOOK) or "").strip()
    if not endpoint:
        return None

    timeout = DEFAULT_TIMEOUT
    raw_timeout = env.get(ENV_TIMEOUT)
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError:
            logger.warning(f"Ignoring invalid {ENV_TIMEOUT}={raw_timeout!r}, using {timeout}s")
        else:
            if timeout <= 0:
                logger.warning(f"Ignoring non-positive {ENV_TIMEOUT}, using {DEFAULT_TIMEOUT}s")
                timeout = DEFAULT_TIMEOUT

    include_sender = (env.get(ENV_INCLUDE_SENDER) or "").strip().lower() in _TRUTHY

    return DingTalkConfig(
        endpoint=endpoint,
        secret=env.get(ENV_SECRET) or None,
        keywords=parse_keywords(env.get(ENV_KEYWORDS)),
        timeout=timeout,
        include_sender=include_sender,
    )
