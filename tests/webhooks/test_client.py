"""Tests for the DingTalk webhook client.

httpx.post is patched throughout; no request leaves the process.
"""

import json
import logging
from unittest.mock import patch
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest

from dingtalk_notify.core.config import DingTalkConfig
from dingtalk_notify.webhooks.client import DingTalkClient, WebhookDeliveryResult
from dingtalk_notify.webhooks.messages import build_mention, build_text
from tests.conftest import WEBHOOK_URL, make_response


def sent_body(post) -> dict:
    return json.loads(post.call_args.kwargs["content"].decode("utf-8"))


class TestRequestUrl:
    def test_unsigned_uses_endpoint(self, config) -> None:
        assert DingTalkClient(config).request_url() == WEBHOOK_URL

    def test_signed_adds_timestamp_and_sign(self, signed_config) -> None:
        url = DingTalkClient(signed_config).request_url()
        query = parse_qs(urlsplit(url).query)
        assert query["access_token"] == ["test-token"]
        assert "timestamp" in query
        assert "sign" in query


class TestDeliver:
    def test_success(self, config, mock_post) -> None:
        result = DingTalkClient(config).deliver(build_text("hello"))

        assert result == WebhookDeliveryResult(
            success=True, status_code=200, errcode=0, errmsg="ok"
        )
        assert result.describe() == "ok"
        mock_post.assert_called_once()
        assert mock_post.call_args.args[0] == WEBHOOK_URL
        assert mock_post.call_args.kwargs["headers"] == {"Content-Type": "application/json"}
        assert mock_post.call_args.kwargs["timeout"] == config.timeout
        assert sent_body(mock_post) == {"msgtype": "text", "text": {"content": "hello"}}

    def test_mention_is_sent(self, config, mock_post) -> None:
        DingTalkClient(config).deliver(build_text("hello", build_mention(at_mobiles=["139"])))
        assert sent_body(mock_post)["at"] == {"atMobiles": ["139"]}

    def test_custom_timeout(self, mock_post) -> None:
        client = DingTalkClient(DingTalkConfig(endpoint=WEBHOOK_URL, timeout=2.5))
        client.deliver(build_text("hello"))
        assert mock_post.call_args.kwargs["timeout"] == 2.5

    def test_provider_error_code(self, config, caplog) -> None:
        response = make_response({"errcode": 310000, "errmsg": "keywords not in content"})
        with (
            patch.object(httpx, "post", return_value=response),
            caplog.at_level(logging.WARNING, logger="dingtalk_notify.webhooks.client"),
        ):
            result = DingTalkClient(config).deliver(build_text("hello"))

        assert result.success is False
        assert result.errcode == 310000
        assert result.errmsg == "keywords not in content"
        assert result.describe() == "errcode=310000, errmsg=keywords not in content"
        assert "DingTalk notification failed" in caplog.text

    def test_missing_errcode_is_failure(self, config) -> None:
        with patch.object(httpx, "post", return_value=make_response({"errmsg": "??"})):
            result = DingTalkClient(config).deliver(build_text("hello"))
        assert result.success is False
        assert "DingTalk rejected the message" in result.describe()

    def test_non_json_response(self, config) -> None:
        response = make_response(status_code=502, json_error=True)
        with patch.object(httpx, "post", return_value=response):
            result = DingTalkClient(config).deliver(build_text("hello"))
        assert result.success is False
        assert result.status_code == 502
        assert "non-JSON" in result.describe()

    def test_non_object_response(self, config) -> None:
        with patch.object(httpx, "post", return_value=make_response(["ok"])):
            result = DingTalkClient(config).deliver(build_text("hello"))
        assert result.success is False
        assert "unexpected response" in result.describe()

    def test_network_error(self, config) -> None:
        error = httpx.ConnectError("Name or service not known")
        with patch.object(httpx, "post", side_effect=error):
            result = DingTalkClient(config).deliver(build_text("hello"))
        assert result.success is False
        assert result.status_code is None
        assert result.describe() == "Failed to reach DingTalk webhook: Name or service not known"

    def test_timeout(self, config) -> None:
        with patch.object(httpx, "post", side_effect=httpx.ReadTimeout("timed out")):
            result = DingTalkClient(config).deliver(build_text("hello"))
        assert result.success is False
        assert "Timed out" in result.describe()

    def test_exactly_one_post_on_failure(self, config) -> None:
        with patch.object(httpx, "post", side_effect=httpx.ConnectError("refused")) as post:
            DingTalkClient(config).deliver(build_text("hello"))
        assert post.call_count == 1


class TestConvenienceSenders:
    def test_send_returns_bool(self, config, mock_post) -> None:
        assert DingTalkClient(config).send(build_text("hello")) is True

    def test_send_text(self, config, mock_post) -> None:
        assert DingTalkClient(config).send_text("hello") is True
        assert sent_body(mock_post)["msgtype"] == "text"

    def test_send_markdown(self, config, mock_post) -> None:
        assert DingTalkClient(config).send_markdown("Build", "## ok") is True
        assert sent_body(mock_post)["markdown"] == {"title": "Build", "text": "## ok"}

    def test_send_link(self, config, mock_post) -> None:
        assert DingTalkClient(config).send_link("Docs", "Read", "https://example/docs") is True
        assert sent_body(mock_post)["link"]["messageUrl"] == "https://example/docs"

    def test_send_false_on_failure(self, config) -> None:
        with patch.object(httpx, "post", side_effect=httpx.ConnectError("refused")):
            assert DingTalkClient(config).send_text("hello") is False


@pytest.mark.parametrize(
    ("result", "expected"),
    [
        (WebhookDeliveryResult(success=True), "ok"),
        (WebhookDeliveryResult(success=False, error="boom"), "boom"),
        (WebhookDeliveryResult(success=False, errcode=1), "errcode=1, errmsg=unknown error"),
        (WebhookDeliveryResult(success=False), "unknown error"),
    ],
)
def test_describe(result, expected) -> None:
    assert result.describe() == expected
