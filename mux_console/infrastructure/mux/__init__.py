"""Mux API integration."""

from mux_console.infrastructure.mux.client import MuxClient
from mux_console.infrastructure.mux.helpers import (
    playback_url,
    thumbnail_url,
    verify_webhook_signature,
)

__all__ = ["MuxClient", "playback_url", "thumbnail_url", "verify_webhook_signature"]
