"""View analytics over the Mux Data API.

Aggregations raise on platform failure; callers classify the error.
``get_asset_views`` returns a ``Result`` like the asset workflows.
"""

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any

from mux_console.domain.models import AssetViews, CountryViews, DeviceViews
from mux_console.shared.result import Err, Ok, Result

if TYPE_CHECKING:
    from mux_console.domain.protocols import VideoPlatform

logger = logging.getLogger(__name__)

VIEWS_METRIC = "views"
DEFAULT_TIMEFRAME = ["30:days"]


class AnalyticsError(str, Enum):
    MUX_DATA_FAILED = "MUX_DATA_FAILED"


def timeframe_for_days(days: int) -> list[str]:
    return [f"{days}:days"]


def _views(item: dict[str, Any]) -> int:
    for key in ("views", "value"):
        raw = item.get(key)
        try:
            return int(raw)
        except (TypeError, ValueError):
            continue
    return 0


def _label(item: dict[str, Any], *keys: str) -> str:
    for key in keys:
        raw = item.get(key)
        if isinstance(raw, str) and raw.strip():
            return raw
    return "Unknown"


async def get_asset_views(
    platform: "VideoPlatform", asset_id: str, timeframe: list[str] | None = None
) -> Result[list[dict[str, Any]], AnalyticsError]:
    """Individual views of one asset."""
    try:
        views = await platform.list_video_views(
            timeframe=timeframe or ["7:days"], filters=[f"asset_id:{asset_id}"]
        )
    except Exception as e:
        logger.warning(f"Mux video views query failed for asset {asset_id}: {e}")
        return Err(AnalyticsError.MUX_DATA_FAILED, str(e) or "Mux data query failed")
    return Ok(views)


async def get_total_views(platform: "VideoPlatform", timeframe: list[str] | None = None) -> int:
    overall = await platform.get_overall_values(
        VIEWS_METRIC, timeframe=timeframe or DEFAULT_TIMEFRAME, measurement="count"
    )
    total = overall.get("total_views", overall.get("value"))
    try:
        return int(total)
    except (TypeError, ValueError):
        return 0


async def get_views_by_country(
    platform: "VideoPlatform", timeframe: list[str] | None = None
) -> list[CountryViews]:
    rows = await platform.get_metric_breakdown(
        VIEWS_METRIC,
        group_by="country",
        timeframe=timeframe or DEFAULT_TIMEFRAME,
        measurement="count",
    )
    return [CountryViews(country=_label(row, "field", "country"), views=_views(row)) for row in rows]


async def get_views_by_device(
    platform: "VideoPlatform", timeframe: list[str] | None = None
) -> list[DeviceViews]:
    rows = await platform.get_metric_breakdown(
        VIEWS_METRIC,
        group_by="device_category",
        timeframe=timeframe or DEFAULT_TIMEFRAME,
        measurement="count",
    )
    return [
        DeviceViews(device=_label(row, "field", "device_category"), views=_views(row))
        for row in rows
    ]


async def get_top_assets_by_views(
    platform: "VideoPlatform", limit: int = 5, timeframe: list[str] | None = None
) -> list[AssetViews]:
    """The ``limit`` most viewed assets, most viewed first. Rows without an asset id are skipped."""
    rows = await platform.get_metric_breakdown(
        VIEWS_METRIC,
        group_by="asset_id",
        timeframe=timeframe or DEFAULT_TIMEFRAME,
        measurement="count",
        order_by="views",
        order_direction="desc",
    )

    items = []
    for row in rows:
        asset_id = row.get("field", row.get("asset_id"))
        if isinstance(asset_id, str) and asset_id.strip():
            items.append(AssetViews(asset_id=asset_id, views=_views(row)))

    items.sort(key=lambda item: item.views, reverse=True)
    return items[: max(0, limit)]
