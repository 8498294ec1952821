"""Unit tests for Mux URL builders and webhook verification."""

import hashlib
import hmac

from mux_console.infrastructure.mux.helpers import (
    playback_url,
    thumbnail_url,
    verify_webhook_signature,
)

SECRET = "whsec_test"
BODY = b'{"type":"video.asset.ready","data":{"id":"asset123"}}'
NOW = 1_700_000_000


def sign(body: bytes, timestamp: int, secret: str = SECRET) -> str:
    digest = hmac.new(
        secret.encode(), f"{timestamp}.".encode() + body, hashlib.sha256
    ).hexdigest()
    return f"t={timestamp},v1={digest}"


class TestUrls:
    def test_playback_url(self) -> None:
        assert playback_url("abc") == "https://stream.mux.com/abc.m3u8"

    def test_thumbnail_url_without_options(self) -> None:
        assert thumbnail_url("abc") == "https://image.mux.com/abc/thumbnail.jpg"

    def test_thumbnail_url_with_options(self) -> None:
        url = thumbnail_url("abc", width=320, height=180, time=5)
        assert url == "https://image.mux.com/abc/thumbnail.jpg?width=320&height=180&time=5"


class TestWebhookSignature:
    def test_valid_signature(self) -> None:
        assert verify_webhook_signature(BODY, sign(BODY, NOW), SECRET, now=NOW) is True

    def test_str_body(self) -> None:
        assert verify_webhook_signature(BODY.decode(), sign(BODY, NOW), SECRET, now=NOW)

    def test_tampered_body(self) -> None:
        header = sign(BODY, NOW)
        assert verify_webhook_signature(BODY + b" ", header, SECRET, now=NOW) is False

    def test_wrong_secret(self) -> None:
        header = sign(BODY, NOW, secret="other")
        assert verify_webhook_signature(BODY, header, SECRET, now=NOW) is False

    def test_stale_timestamp(self) -> None:
        header = sign(BODY, NOW - 301)
        assert verify_webhook_signature(BODY, header, SECRET, now=NOW) is False

    def test_custom_tolerance(self) -> None:
        header = sign(BODY, NOW - 301)
        assert verify_webhook_signature(BODY, header, SECRET, tolerance_seconds=600, now=NOW)

    def test_any_of_several_signatures(self) -> None:
        header = sign(BODY, NOW) + ",v1=deadbeef"
        assert verify_webhook_signature(BODY, header, SECRET, now=NOW) is True

    def test_malformed_headers(self) -> None:
        for header in (None, "", "garbage", "t=abc,v1=00", f"t={NOW}", "v1=00"):
            assert verify_webhook_signature(BODY, header, SECRET, now=NOW) is False

    def test_missing_secret(self) -> None:
        assert verify_webhook_signature(BODY, sign(BODY, NOW), "", now=NOW) is False
