"""Asset and direct-upload workflows over the video platform.

Each function catches platform failures at the call site and returns a
``Result`` so callers never branch on exceptions.
"""

import asyncio
import logging
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any

from mux_console.domain.exceptions import is_not_found
from mux_console.domain.models import (
    UploadStatus,
    is_asset_errored,
    is_asset_ready,
    is_upload_complete,
)
from mux_console.shared.result import Err, Ok, Result

if TYPE_CHECKING:
    from mux_console.domain.protocols import VideoPlatform

logger = logging.getLogger(__name__)

_FAILED_UPLOAD_STATES = frozenset(
    {UploadStatus.ERRORED.value, UploadStatus.CANCELLED.value, UploadStatus.TIMED_OUT.value}
)


class AssetWorkflowError(str, Enum):
    MUX_CREATE_ASSET_FAILED = "MUX_CREATE_ASSET_FAILED"
    MUX_GET_ASSET_FAILED = "MUX_GET_ASSET_FAILED"
    MUX_ASSET_FAILED = "MUX_ASSET_FAILED"
    MUX_ASSET_TIMEOUT = "MUX_ASSET_TIMEOUT"
    MUX_DIRECT_UPLOAD_FAILED = "MUX_DIRECT_UPLOAD_FAILED"
    MUX_DIRECT_UPLOAD_TIMEOUT = "MUX_DIRECT_UPLOAD_TIMEOUT"


def error_message(error: BaseException, fallback: str) -> str:
    """Human-readable message of a caught failure."""
    message = str(error)
    return message if message else fallback


async def create_asset_from_url(
    platform: "VideoPlatform", url: str
) -> Result[dict[str, Any], AssetWorkflowError]:
    """Create a publicly playable asset ingested from ``url``."""
    try:
        asset = await platform.create_asset(input_url=url, playback_policy=["public"])
    except Exception as e:
        logger.warning(f"Mux create asset failed for {url}: {e}")
        return Err(
            AssetWorkflowError.MUX_CREATE_ASSET_FAILED,
            error_message(e, "Mux createAsset failed"),
        )
    return Ok(asset)


async def get_asset_with_retry(
    platform: "VideoPlatform",
    asset_id: str,
    max_retries: int = 3,
    backoff_seconds: float = 1.0,
) -> Result[dict[str, Any] | None, AssetWorkflowError]:
    """Fetch an asset, retrying failures with linear backoff.

    Returns:
        Ok(asset), Ok(None) when the platform reports the asset missing,
        Err(MUX_GET_ASSET_FAILED) once retries are exhausted
    """
    for attempt in range(max_retries + 1):
        try:
            return Ok(await platform.get_asset(asset_id))
        except Exception as e:
            if is_not_found(e):
                return Ok(None)
            if attempt == max_retries:
                logger.error(f"Mux get asset {asset_id} failed after {max_retries} retries: {e}")
                return Err(
                    AssetWorkflowError.MUX_GET_ASSET_FAILED,
                    error_message(e, "Mux getAsset failed"),
                )
            await asyncio.sleep(backoff_seconds * (attempt + 1))

    return Ok(None)


async def wait_for_asset_ready(
    platform: "VideoPlatform",
    asset_id: str,
    max_attempts: int = 30,
    interval_seconds: float = 3.0,
) -> Result[dict[str, Any], AssetWorkflowError]:
    """Poll an asset until it is ready, errored, or the attempts run out.

    Platform failures while polling propagate to the caller.
    """
    for _ in range(max_attempts):
        asset = await platform.get_asset(asset_id)

        if is_asset_ready(asset):
            return Ok(asset)

        if is_asset_errored(asset):
            messages = (asset.get("errors") or {}).get("messages") or []
            detail = ", ".join(messages) if messages else "unknown error"
            return Err(
                AssetWorkflowError.MUX_ASSET_FAILED,
                f"Asset {asset_id} failed to process: {detail}",
            )

        await asyncio.sleep(interval_seconds)

    return Err(
        AssetWorkflowError.MUX_ASSET_TIMEOUT,
        f"Asset {asset_id} did not become ready within {max_attempts} attempts",
    )


async def poll_direct_upload_status(
    platform: "VideoPlatform",
    upload_id: str,
    on_status_change: Callable[[dict[str, Any]], None] | None = None,
    max_attempts: int = 60,
    interval_seconds: float = 2.0,
) -> Result[dict[str, Any], AssetWorkflowError]:
    """Poll a direct upload until its asset exists.

    ``on_status_change`` is called with every fetched upload.
    """
    for _ in range(max_attempts):
        upload = await platform.get_direct_upload(upload_id)

        if on_status_change is not None:
            on_status_change(upload)

        if is_upload_complete(upload):
            return Ok(upload)

        if upload.get("status") in _FAILED_UPLOAD_STATES:
            return Err(
                AssetWorkflowError.MUX_DIRECT_UPLOAD_FAILED,
                f"Upload {upload_id} failed with status: {upload.get('status')}",
            )

        await asyncio.sleep(interval_seconds)

    return Err(
        AssetWorkflowError.MUX_DIRECT_UPLOAD_TIMEOUT,
        f"Upload {upload_id} did not complete within {max_attempts} attempts",
    )


async def enforce_restriction_on_asset(
    platform: "VideoPlatform", asset_id: str, restriction_id: str
) -> dict[str, Any]:
    """Give an asset a signed playback id governed by the playback restriction.

    Signed playback ids are checked against the account's restriction
    (``restriction_id``) when tokens are minted.
    """
    playback = await platform.create_playback_id(asset_id, policy="signed")
    logger.info(
        f"Applied playback restriction {restriction_id} to asset {asset_id} "
        f"(playback id {playback.get('id')})"
    )
    return playback
