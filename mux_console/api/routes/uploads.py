"""Direct upload API routes.

A direct upload hands the browser a signed Mux URL. Every handed-out URL is
recorded as an upload token; polling the upload marks the token used once the
asset exists and applies the configured playback restriction to that asset.
"""

import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from mux_console.api.dependencies import (
    get_current_caller,
    get_enforced_asset_ids,
    get_mux_client,
    get_settings,
    get_settings_store,
    get_store,
)
from mux_console.api.models import DirectUploadCreated, DirectUploadQuery
from mux_console.api.responses import respond, status_table
from mux_console.api.validation import describe_validation_error
from mux_console.application.assets import enforce_restriction_on_asset, error_message
from mux_console.domain.exceptions import is_not_found
from mux_console.domain.models import CallerIdentity
from mux_console.domain.protocols import SettingsStore, UploadTokenStore, VideoPlatform
from mux_console.infrastructure.storage.memory import RecentIdSet
from mux_console.shared.config import Settings
from mux_console.shared.result import Err, Ok, Result

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/upload", tags=["Uploads"])

POLL_CACHE_HEADERS = {"Cache-Control": "private, max-age=3"}

# Mux's default lifetime of an unused direct upload URL
DEFAULT_UPLOAD_TIMEOUT_SECONDS = 3600


class CreateUploadError(str, Enum):
    AUTH_REQUIRED = "AUTH_REQUIRED"
    MUX_CREATE_DIRECT_UPLOAD_FAILED = "MUX_CREATE_DIRECT_UPLOAD_FAILED"
    DB_CREATE_TOKEN_FAILED = "DB_CREATE_TOKEN_FAILED"


class GetUploadError(str, Enum):
    AUTH_REQUIRED = "AUTH_REQUIRED"
    INVALID_QUERY = "INVALID_QUERY"
    UPLOAD_NOT_FOUND = "UPLOAD_NOT_FOUND"
    MUX_GET_DIRECT_UPLOAD_FAILED = "MUX_GET_DIRECT_UPLOAD_FAILED"


CREATE_UPLOAD_STATUS = status_table(
    CreateUploadError,
    {
        CreateUploadError.AUTH_REQUIRED: 401,
        CreateUploadError.MUX_CREATE_DIRECT_UPLOAD_FAILED: 502,
        CreateUploadError.DB_CREATE_TOKEN_FAILED: 500,
    },
)

GET_UPLOAD_STATUS = status_table(
    GetUploadError,
    {
        GetUploadError.AUTH_REQUIRED: 401,
        GetUploadError.INVALID_QUERY: 400,
        GetUploadError.UPLOAD_NOT_FOUND: 404,
        GetUploadError.MUX_GET_DIRECT_UPLOAD_FAILED: 502,
    },
)


async def create_direct_upload(
    caller: CallerIdentity | None,
    cors_origin: str,
    platform: VideoPlatform,
    tokens: UploadTokenStore,
) -> Result[DirectUploadCreated, CreateUploadError]:
    if caller is None:
        return Err(CreateUploadError.AUTH_REQUIRED)

    try:
        upload = await platform.create_direct_upload(
            cors_origin=cors_origin, new_asset_settings={"playback_policy": ["public"]}
        )
        upload_id = upload["id"]
        upload_url = upload["url"]
        timeout = int(upload.get("timeout") or DEFAULT_UPLOAD_TIMEOUT_SECONDS)
    except (KeyError, TypeError, ValueError) as e:
        logger.error(f"Mux returned a malformed direct upload: {e!r}")
        return Err(
            CreateUploadError.MUX_CREATE_DIRECT_UPLOAD_FAILED,
            "Mux returned a malformed direct upload",
        )
    except Exception as e:
        logger.error(f"Mux create direct upload failed: {e}")
        return Err(
            CreateUploadError.MUX_CREATE_DIRECT_UPLOAD_FAILED,
            error_message(e, "Failed to create direct upload"),
        )

    expires_at = datetime.now(timezone.utc) + timedelta(seconds=timeout)
    try:
        await tokens.create_upload_token(token=upload_id, url=upload_url, expires_at=expires_at)
    except Exception as e:
        logger.error(f"Recording upload token for {upload_id} failed: {e}")
        return Err(
            CreateUploadError.DB_CREATE_TOKEN_FAILED,
            error_message(e, "Failed to record upload token"),
        )

    logger.info(f"Created direct upload {upload_id} for origin {cors_origin}")
    return Ok(
        DirectUploadCreated(id=upload_id, url=upload_url, status=upload.get("status", "waiting"))
    )


async def _after_asset_created(
    asset_id: str,
    upload_id: str,
    platform: VideoPlatform,
    tokens: UploadTokenStore,
    settings_store: SettingsStore,
    enforced_asset_ids: RecentIdSet,
) -> None:
    """Mark the upload token used and apply the playback restriction, once per asset.

    Failures are logged and never fail the poll.
    """
    try:
        await tokens.mark_token_used_by_value(upload_id)
    except Exception as e:
        logger.warning(f"Failed to mark upload token {upload_id} as used: {e}")

    if asset_id in enforced_asset_ids:
        return

    try:
        restriction = await settings_store.get_playback_restriction()
        if restriction.enabled and restriction.restriction_id:
            await enforce_restriction_on_asset(platform, asset_id, restriction.restriction_id)
            enforced_asset_ids.add(asset_id)
    except Exception as e:
        logger.error(f"Failed to apply restriction to direct upload asset {asset_id}: {e}")


async def get_direct_upload(
    caller: CallerIdentity | None,
    query_params: dict[str, str],
    platform: VideoPlatform,
    tokens: UploadTokenStore,
    settings_store: SettingsStore,
    enforced_asset_ids: RecentIdSet,
) -> Result[dict[str, Any], GetUploadError]:
    if caller is None:
        return Err(GetUploadError.AUTH_REQUIRED)

    try:
        query = DirectUploadQuery.model_validate(query_params)
    except ValidationError as e:
        return Err(GetUploadError.INVALID_QUERY, describe_validation_error(e))

    try:
        upload = await platform.get_direct_upload(query.id)
    except Exception as e:
        if is_not_found(e):
            return Err(GetUploadError.UPLOAD_NOT_FOUND, "Upload not found")
        logger.error(f"Mux get direct upload {query.id} failed: {e}")
        return Err(
            GetUploadError.MUX_GET_DIRECT_UPLOAD_FAILED,
            error_message(e, "Failed to get direct upload"),
        )

    asset_id = upload.get("asset_id")
    if asset_id:
        await _after_asset_created(
            asset_id, query.id, platform, tokens, settings_store, enforced_asset_ids
        )

    return Ok(upload)


@router.post("/direct", summary="Create a direct upload URL")
async def create_direct_upload_endpoint(
    request: Request,
    caller: CallerIdentity | None = Depends(get_current_caller),
    platform: VideoPlatform = Depends(get_mux_client),
    tokens: UploadTokenStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    origin = request.headers.get("origin") or settings.app_url
    result = await create_direct_upload(caller, origin, platform, tokens)
    return respond(result, CREATE_UPLOAD_STATUS, strict=settings.strict_status_tables)


@router.get("/direct", summary="Poll a direct upload")
async def get_direct_upload_endpoint(
    request: Request,
    caller: CallerIdentity | None = Depends(get_current_caller),
    platform: VideoPlatform = Depends(get_mux_client),
    tokens: UploadTokenStore = Depends(get_store),
    settings_store: SettingsStore = Depends(get_settings_store),
    enforced_asset_ids: RecentIdSet = Depends(get_enforced_asset_ids),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    result = await get_direct_upload(
        caller, dict(request.query_params), platform, tokens, settings_store, enforced_asset_ids
    )
    return respond(
        result, GET_UPLOAD_STATUS, POLL_CACHE_HEADERS, strict=settings.strict_status_tables
    )
