"""Analytics API routes backed by the Mux Data API."""

import asyncio
import logging
from enum import Enum
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from mux_console.api.dependencies import (
    get_current_caller,
    get_mux_client,
    get_settings,
    get_store,
)
from mux_console.api.models import (
    AnalyticsOverview,
    AnalyticsSummary,
    AssetIdParam,
    AssetViewsQuery,
    PeriodQuery,
    TopVideo,
)
from mux_console.api.responses import respond, status_table
from mux_console.api.validation import describe_validation_error
from mux_console.application.analytics import (
    get_asset_views,
    get_top_assets_by_views,
    get_total_views,
    get_views_by_country,
    get_views_by_device,
    timeframe_for_days,
)
from mux_console.application.assets import error_message
from mux_console.domain.models import CallerIdentity
from mux_console.domain.protocols import AssetMetadataStore, VideoPlatform
from mux_console.shared.config import Settings
from mux_console.shared.result import Err, Ok, Result

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analytics", tags=["Analytics"])

SUMMARY_CACHE_HEADERS = {"Cache-Control": "private, max-age=30"}
TOP_ASSETS_LIMIT = 5


class SummaryError(str, Enum):
    AUTH_REQUIRED = "AUTH_REQUIRED"
    INVALID_QUERY = "INVALID_QUERY"
    MUX_DATA_FAILED = "MUX_DATA_FAILED"
    DB_READ_METADATA_FAILED = "DB_READ_METADATA_FAILED"


class AssetViewsError(str, Enum):
    AUTH_REQUIRED = "AUTH_REQUIRED"
    INVALID_PARAM = "INVALID_PARAM"
    INVALID_QUERY = "INVALID_QUERY"
    MUX_DATA_FAILED = "MUX_DATA_FAILED"


SUMMARY_STATUS = status_table(
    SummaryError,
    {
        SummaryError.AUTH_REQUIRED: 401,
        SummaryError.INVALID_QUERY: 400,
        SummaryError.MUX_DATA_FAILED: 502,
        SummaryError.DB_READ_METADATA_FAILED: 500,
    },
)

ASSET_VIEWS_STATUS = status_table(
    AssetViewsError,
    {
        AssetViewsError.AUTH_REQUIRED: 401,
        AssetViewsError.INVALID_PARAM: 400,
        AssetViewsError.INVALID_QUERY: 400,
        AssetViewsError.MUX_DATA_FAILED: 502,
    },
)


async def analytics_summary(
    caller: CallerIdentity | None,
    query_params: dict[str, str],
    platform: VideoPlatform,
    store: AssetMetadataStore,
) -> Result[AnalyticsSummary, SummaryError]:
    """Total views, device and country breakdowns, and the most viewed assets.

    Top assets are titled from local metadata, falling back to the asset id.
    """
    if caller is None:
        return Err(SummaryError.AUTH_REQUIRED)

    try:
        query = PeriodQuery.model_validate(query_params)
    except ValidationError as e:
        return Err(SummaryError.INVALID_QUERY, describe_validation_error(e))

    timeframe = timeframe_for_days(query.period)
    try:
        total_views, by_country, by_device, top_assets = await asyncio.gather(
            get_total_views(platform, timeframe),
            get_views_by_country(platform, timeframe),
            get_views_by_device(platform, timeframe),
            get_top_assets_by_views(platform, TOP_ASSETS_LIMIT, timeframe),
        )
    except Exception as e:
        logger.error(f"Mux Data query for analytics summary failed: {e}")
        return Err(
            SummaryError.MUX_DATA_FAILED, error_message(e, "Failed to fetch analytics summary")
        )

    try:
        metadata = await store.get_asset_metadata_many([item.asset_id for item in top_assets])
    except Exception as e:
        logger.error(f"Reading metadata for top assets failed: {e}")
        return Err(SummaryError.DB_READ_METADATA_FAILED, error_message(e, "Read failed"))

    top_videos = []
    for item in top_assets:
        record = metadata.get(item.asset_id)
        title = record.title if record is not None and record.title else item.asset_id
        top_videos.append(TopVideo(id=item.asset_id, title=title, views=item.views))

    return Ok(
        AnalyticsSummary(
            overview=AnalyticsOverview(total_views=total_views),
            top_videos=top_videos,
            device_breakdown=by_device,
            geographic_data=by_country,
        )
    )


async def asset_views(
    caller: CallerIdentity | None,
    asset_id: str,
    query_params: dict[str, str],
    platform: VideoPlatform,
) -> Result[list[dict[str, Any]], AssetViewsError]:
    if caller is None:
        return Err(AssetViewsError.AUTH_REQUIRED)

    try:
        AssetIdParam(id=asset_id)
    except ValidationError:
        return Err(AssetViewsError.INVALID_PARAM, "Invalid asset id")

    try:
        query = AssetViewsQuery.model_validate(query_params)
    except ValidationError as e:
        return Err(AssetViewsError.INVALID_QUERY, describe_validation_error(e))

    match await get_asset_views(platform, asset_id, timeframe_for_days(query.period)):
        case Ok(views):
            return Ok(views)
        case Err(error):
            return Err(AssetViewsError.MUX_DATA_FAILED, error.message)


@router.get("/summary", summary="Analytics summary")
async def analytics_summary_endpoint(
    request: Request,
    caller: CallerIdentity | None = Depends(get_current_caller),
    platform: VideoPlatform = Depends(get_mux_client),
    store: AssetMetadataStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    result = await analytics_summary(caller, dict(request.query_params), platform, store)
    return respond(
        result, SUMMARY_STATUS, SUMMARY_CACHE_HEADERS, strict=settings.strict_status_tables
    )


@router.get("/assets/{asset_id}", summary="Views of one asset")
async def asset_views_endpoint(
    asset_id: str,
    request: Request,
    caller: CallerIdentity | None = Depends(get_current_caller),
    platform: VideoPlatform = Depends(get_mux_client),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    result = await asset_views(caller, asset_id, dict(request.query_params), platform)
    return respond(result, ASSET_VIEWS_STATUS, strict=settings.strict_status_tables)
