"""Usage and cost report route."""

import logging
from datetime import date, datetime, timedelta, timezone
from enum import Enum

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
    PeriodQuery,
    UsageCurrentMonth,
    UsageDay,
    UsageGrowth,
    UsageMeter,
    UsageReport,
)
from mux_console.api.responses import respond, status_table
from mux_console.api.validation import describe_validation_error
from mux_console.application import usage as pricing
from mux_console.application.assets import error_message
from mux_console.domain.models import CallerIdentity
from mux_console.domain.protocols import UsageStore, VideoPlatform
from mux_console.shared.config import Settings
from mux_console.shared.result import Err, Ok, Result

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Usage"])

USAGE_CACHE_HEADERS = {"Cache-Control": "private, max-age=30"}
RECENT_DAYS = 7
ASSET_PAGE_SIZE = 100


class UsageError(str, Enum):
    AUTH_REQUIRED = "AUTH_REQUIRED"
    INVALID_QUERY = "INVALID_QUERY"
    DB_USAGE_FAILED = "DB_USAGE_FAILED"


USAGE_STATUS = status_table(
    UsageError,
    {
        UsageError.AUTH_REQUIRED: 401,
        UsageError.INVALID_QUERY: 400,
        UsageError.DB_USAGE_FAILED: 500,
    },
)


async def usage_report(
    caller: CallerIdentity | None,
    query_params: dict[str, str],
    platform: VideoPlatform,
    store: UsageStore,
    today: date | None = None,
) -> Result[UsageReport, UsageError]:
    """Current-month usage against plan limits, recent daily usage and growth.

    When Mux assets cannot be listed, encoding minutes are estimated from the
    streamed minutes on record.
    """
    if caller is None:
        return Err(UsageError.AUTH_REQUIRED)

    try:
        query = PeriodQuery.model_validate(query_params)
    except ValidationError as e:
        return Err(UsageError.INVALID_QUERY, describe_validation_error(e))

    today = today or datetime.now(timezone.utc).date()
    try:
        daily = await store.get_daily_usage(today - timedelta(days=query.period), today)
        totals = await store.get_total_usage()
    except Exception as e:
        logger.error(f"Reading usage records failed: {e}")
        return Err(UsageError.DB_USAGE_FAILED, error_message(e, "Failed to fetch usage data"))

    this_month = pricing.month_start(today)
    try:
        assets = await platform.list_assets(limit=ASSET_PAGE_SIZE)
        encoding = pricing.encoding_minutes(pricing.assets_created_between(assets, this_month))
    except Exception as e:
        logger.warning(f"Could not fetch assets for encoding calculation: {e}")
        assets = []
        encoding = pricing.estimated_encoding_minutes(totals.total_streamed_minutes)

    streaming = pricing.streamed_gb(totals.total_streamed_minutes)
    storage = round(totals.total_storage_gb)

    encoding_cost = round(encoding * pricing.ENCODING_PRICE_PER_MINUTE, 2)
    streaming_cost = round(streaming * pricing.STREAMING_PRICE_PER_GB, 2)
    storage_cost = round(storage * pricing.STORAGE_PRICE_PER_GB_MONTH, 2)
    total_cost = round(encoding_cost + streaming_cost + storage_cost, 2)

    recent = []
    for row in daily[-RECENT_DAYS:]:
        day_streaming = pricing.streamed_gb(row.streamed_minutes)
        day_storage = round(row.storage_gb)
        recent.append(
            UsageDay(
                date=row.day.isoformat(),
                encoding=row.encoded_minutes,
                streaming=day_streaming,
                storage=day_storage,
                cost=pricing.daily_cost(row.encoded_minutes, day_streaming, day_storage),
            )
        )

    previous_assets = pricing.assets_created_between(
        assets, pricing.previous_month_start(today), this_month
    )
    previous_cost = len(previous_assets) * pricing.PREVIOUS_MONTH_COST_PER_ASSET
    growth = pricing.growth_percentage(total_cost, previous_cost)

    return Ok(
        UsageReport(
            current_month=UsageCurrentMonth(
                encoding=UsageMeter(
                    used=encoding, limit=pricing.ENCODING_MINUTES_LIMIT, cost=encoding_cost
                ),
                streaming=UsageMeter(
                    used=streaming, limit=pricing.STREAMING_GB_LIMIT, cost=streaming_cost
                ),
                storage=UsageMeter(
                    used=storage, limit=pricing.STORAGE_GB_LIMIT, cost=storage_cost
                ),
            ),
            recent_usage=recent,
            growth=UsageGrowth(percentage=growth, is_positive=growth >= 0),
            total_cost=total_cost,
        )
    )


@router.get("/usage", summary="Usage and cost report")
async def usage_endpoint(
    request: Request,
    caller: CallerIdentity | None = Depends(get_current_caller),
    platform: VideoPlatform = Depends(get_mux_client),
    store: UsageStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    result = await usage_report(caller, dict(request.query_params), platform, store)
    return respond(result, USAGE_STATUS, USAGE_CACHE_HEADERS, strict=settings.strict_status_tables)
