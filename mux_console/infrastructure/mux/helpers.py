"""URL builders and webhook verification for Mux."""

import hashlib
import hmac
import time
from urllib.parse import urlencode

STREAM_BASE_URL = "https://stream.mux.com"
IMAGE_BASE_URL = "https://image.mux.com"
DEFAULT_WEBHOOK_TOLERANCE_SECONDS = 300


def playback_url(playback_id: str) -> str:
    """HLS playback URL for a playback id."""
    return f"{STREAM_BASE_URL}/{playback_id}.m3u8"


def thumbnail_url(
    playback_id: str,
    width: int | None = None,
    height: int | None = None,
    time: float | None = None,
) -> str:
    """Thumbnail image URL for a playback id."""
    params = {
        key: value
        for key, value in (("width", width), ("height", height), ("time", time))
        if value is not None
    }
    query = urlencode(params)
    url = f"{IMAGE_BASE_URL}/{playback_id}/thumbnail.jpg"
    return f"{url}?{query}" if query else url


def verify_webhook_signature(
    raw_body: bytes | str,
    signature_header: str | None,
    secret: str,
    tolerance_seconds: int = DEFAULT_WEBHOOK_TOLERANCE_SECONDS,
    now: float | None = None,
) -> bool:
    """
    Verify a ``Mux-Signature`` header of the form ``t=<timestamp>,v1=<hex digest>``.

    The digest is HMAC-SHA256 over ``"<timestamp>.<raw body>"`` keyed with the
    webhook signing secret. Signatures older (or newer) than
    ``tolerance_seconds`` are rejected.

    Returns:
        True only when the header is well formed, fresh, and matches
    """
    if not signature_header or not secret:
        return False

    parts: dict[str, list[str]] = {}
    for item in signature_header.split(","):
        key, sep, value = item.strip().partition("=")
        if sep:
            parts.setdefault(key, []).append(value)

    timestamps = parts.get("t")
    signatures = parts.get("v1")
    if not timestamps or not signatures:
        return False

    try:
        timestamp = int(timestamps[0])
    except ValueError:
        return False

    current = time.time() if now is None else now
    if abs(current - timestamp) > tolerance_seconds:
        return False

    body = raw_body.encode("utf-8") if isinstance(raw_body, str) else raw_body
    payload = f"{timestamp}.".encode() + body
    expected = hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()

    return any(hmac.compare_digest(expected, candidate) for candidate in signatures)
