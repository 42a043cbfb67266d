"""Request signing for DingTalk robots with "additional signature" security.

The robot expects two extra query parameters on every POST:

    timestamp = current epoch time in milliseconds
    sign      = urlencode(base64(HMAC-SHA256(secret, f"{timestamp}\\n{secret}")))

The provider rejects timestamps older than about an hour, so a signature must be
computed right before each send. Staleness is not checked locally.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import time
from collections.abc import Mapping
from urllib.parse import urlencode, urlsplit, urlunsplit

from pydantic import BaseModel, ConfigDict


class Signature(BaseModel):
    """Timestamp and base64 signature for one request."""

    model_config = ConfigDict(frozen=True)

    timestamp_ms: int
    sign: str

    def as_params(self) -> dict[str, str]:
        return {"timestamp": str(self.timestamp_ms), "sign": self.sign}


class SignedRequest(BaseModel):
    """Endpoint URL with the signature parameters merged into its query."""

    model_config = ConfigDict(frozen=True)

    url: str
    timestamp_ms: int
    sign: str


def current_millis() -> int:
    """Current epoch time in milliseconds."""
    return time.time_ns() // 1_000_000


def compute_signature(secret: str, timestamp_ms: int) -> str:
    """Compute the base64 HMAC-SHA256 signature for a timestamp.

    Deterministic: the same secret and timestamp always give the same value.
    """
    string_to_sign = f"{timestamp_ms}\n{secret}"
    digest = hmac.new(
        secret.encode("utf-8"),
        string_to_sign.encode("utf-8"),
        hashlib.sha256,
    ).digest()
    return base64.b64encode(digest).decode("ascii")


def sign(secret: str | None, timestamp_ms: int | None = None) -> Signature | None:
    """Sign a request, or return None when no secret is configured.

    Args:
        secret: Shared robot secret. None or empty means unsigned.
        timestamp_ms: Override for the timestamp, defaults to now.
    """
    if not secret:
        return None
    if timestamp_ms is None:
        timestamp_ms = current_millis()
    return Signature(timestamp_ms=timestamp_ms, sign=compute_signature(secret, timestamp_ms))


def append_query_params(url: str, params: Mapping[str, str]) -> str:
    """Merge query parameters into a URL.

    The existing query string is kept verbatim and the new parameters are
    appended with ``&``; a URL without a query string gets ``?``. Values are
    percent-encoded, so ``+``, ``/`` and ``=`` in a base64 signature survive.
    """
    if not params:
        return url
    parts = urlsplit(url)
    extra = urlencode(dict(params))
    query = f"{parts.query}&{extra}" if parts.query else extra
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def sign_url(
    endpoint: str, secret: str | None, timestamp_ms: int | None = None
) -> SignedRequest | None:
    """Produce the signed request URL for an endpoint.

    Returns:
        SignedRequest, or None when unsigned (send to the endpoint unchanged).
    """
    signature = sign(secret, timestamp_ms)
    if signature is None:
        return None
    return SignedRequest(
        url=append_query_params(endpoint, signature.as_params()),
        timestamp_ms=signature.timestamp_ms,
        sign=signature.sign,
    )
