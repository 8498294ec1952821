"""Playback restriction settings routes.

Enabling the restriction creates it on Mux the first time and updates its
referrer and user-agent rules afterwards; the Mux restriction id is kept with
the local settings.
"""

import logging
from enum import Enum

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from mux_console.api.dependencies import (
    get_current_caller,
    get_mux_client,
    get_settings,
    get_settings_store,
)
from mux_console.api.models import PlaybackRestrictionRequest
from mux_console.api.responses import respond, status_table
from mux_console.api.validation import describe_validation_error, read_json
from mux_console.application.assets import error_message
from mux_console.domain.models import CallerIdentity, PlaybackRestrictionSettings
from mux_console.domain.protocols import SettingsStore, VideoPlatform
from mux_console.shared.config import Settings
from mux_console.shared.result import Err, Ok, Result

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/settings", tags=["Settings"])


class ReadSettingsError(str, Enum):
    AUTH_REQUIRED = "AUTH_REQUIRED"
    SETTINGS_READ_FAILED = "SETTINGS_READ_FAILED"


class WriteSettingsError(str, Enum):
    AUTH_REQUIRED = "AUTH_REQUIRED"
    INVALID_JSON = "INVALID_JSON"
    INVALID_INPUT = "INVALID_INPUT"
    MUX_CREATE_OR_UPDATE_RESTRICTION_FAILED = "MUX_CREATE_OR_UPDATE_RESTRICTION_FAILED"
    SETTINGS_WRITE_FAILED = "SETTINGS_WRITE_FAILED"


READ_SETTINGS_STATUS = status_table(
    ReadSettingsError,
    {
        ReadSettingsError.AUTH_REQUIRED: 401,
        ReadSettingsError.SETTINGS_READ_FAILED: 500,
    },
)

WRITE_SETTINGS_STATUS = status_table(
    WriteSettingsError,
    {
        WriteSettingsError.AUTH_REQUIRED: 401,
        WriteSettingsError.INVALID_JSON: 400,
        WriteSettingsError.INVALID_INPUT: 400,
        WriteSettingsError.MUX_CREATE_OR_UPDATE_RESTRICTION_FAILED: 502,
        WriteSettingsError.SETTINGS_WRITE_FAILED: 500,
    },
)


async def read_playback_restriction(
    caller: CallerIdentity | None,
    settings_store: SettingsStore,
) -> Result[PlaybackRestrictionSettings, ReadSettingsError]:
    if caller is None:
        return Err(ReadSettingsError.AUTH_REQUIRED)

    try:
        return Ok(await settings_store.get_playback_restriction())
    except Exception as e:
        logger.error(f"Reading playback restriction settings failed: {e}")
        return Err(ReadSettingsError.SETTINGS_READ_FAILED, error_message(e, "Read failed"))


async def _sync_restriction(
    platform: VideoPlatform, desired: PlaybackRestrictionRequest, restriction_id: str | None
) -> str:
    """Create or update the Mux restriction and return its id."""
    if restriction_id is None:
        created = await platform.create_playback_restriction(
            allowed_domains=desired.allowed_domains,
            allow_no_referrer=desired.allow_no_referrer,
            allow_no_user_agent=desired.allow_no_user_agent,
            allow_high_risk_user_agent=desired.allow_high_risk_user_agent,
        )
        restriction_id = created.get("id")
        if not restriction_id:
            raise ValueError("Mux returned no restriction id")
        logger.info(f"Created Mux playback restriction {restriction_id}")
        return restriction_id

    await platform.update_restriction_referrer(
        restriction_id,
        allowed_domains=desired.allowed_domains,
        allow_no_referrer=desired.allow_no_referrer,
    )
    await platform.update_restriction_user_agent(
        restriction_id,
        allow_no_user_agent=desired.allow_no_user_agent,
        allow_high_risk_user_agent=desired.allow_high_risk_user_agent,
    )
    logger.info(f"Updated Mux playback restriction {restriction_id}")
    return restriction_id


async def write_playback_restriction(
    caller: CallerIdentity | None,
    request: Request,
    platform: VideoPlatform,
    settings_store: SettingsStore,
) -> Result[PlaybackRestrictionSettings, WriteSettingsError]:
    if caller is None:
        return Err(WriteSettingsError.AUTH_REQUIRED)

    try:
        body = await read_json(request)
    except ValueError:
        return Err(WriteSettingsError.INVALID_JSON, "Request body is not valid JSON")

    try:
        desired = PlaybackRestrictionRequest.model_validate(body if body is not None else {})
    except ValidationError as e:
        return Err(WriteSettingsError.INVALID_INPUT, describe_validation_error(e))

    restriction_id: str | None = None
    if desired.enabled:
        try:
            current = await settings_store.get_playback_restriction()
            restriction_id = await _sync_restriction(platform, desired, current.restriction_id)
        except Exception as e:
            logger.error(f"Creating or updating the Mux playback restriction failed: {e}")
            return Err(
                WriteSettingsError.MUX_CREATE_OR_UPDATE_RESTRICTION_FAILED,
                error_message(e, "Restriction update failed"),
            )

    updated = PlaybackRestrictionSettings(
        **desired.model_dump(), restriction_id=restriction_id
    )
    try:
        await settings_store.set_playback_restriction(updated)
    except Exception as e:
        logger.error(f"Writing playback restriction settings failed: {e}")
        return Err(WriteSettingsError.SETTINGS_WRITE_FAILED, error_message(e, "Write failed"))

    return Ok(updated)


@router.get("/playback-restriction", summary="Read playback restriction settings")
async def read_playback_restriction_endpoint(
    caller: CallerIdentity | None = Depends(get_current_caller),
    settings_store: SettingsStore = Depends(get_settings_store),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    result = await read_playback_restriction(caller, settings_store)
    return respond(result, READ_SETTINGS_STATUS, strict=settings.strict_status_tables)


@router.put("/playback-restriction", summary="Update playback restriction settings")
async def write_playback_restriction_endpoint(
    request: Request,
    caller: CallerIdentity | None = Depends(get_current_caller),
    platform: VideoPlatform = Depends(get_mux_client),
    settings_store: SettingsStore = Depends(get_settings_store),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    result = await write_playback_restriction(caller, request, platform, settings_store)
    return respond(result, WRITE_SETTINGS_STATUS, strict=settings.strict_status_tables)
