"""Periodic sweep of expired upload tokens and sessions.

Both stores also drop expired records lazily, but only when those records are
looked up again; the sweep keeps abandoned ones from piling up.
"""

import asyncio
import logging

from mux_console.domain.protocols import SessionStore, UploadTokenStore

logger = logging.getLogger(__name__)


async def purge_expired(tokens: UploadTokenStore, sessions: SessionStore) -> tuple[int, int]:
    """Run one sweep. Returns the number of (tokens, sessions) removed."""
    removed_tokens = await tokens.cleanup_expired_tokens()
    removed_sessions = await sessions.cleanup_expired_sessions()
    return removed_tokens, removed_sessions


async def run_periodic_cleanup(
    tokens: UploadTokenStore,
    sessions: SessionStore,
    interval_seconds: float,
) -> None:
    """Sweep every ``interval_seconds`` until cancelled.

    A failed sweep is logged and the next one runs on schedule.
    """
    logger.info(f"Expired record cleanup every {interval_seconds}s")
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await purge_expired(tokens, sessions)
        except Exception as e:
            logger.error(f"Expired record cleanup failed: {e}")
