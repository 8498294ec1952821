"""Usage and cost estimation.

Encoding minutes come from this month's ready assets on Mux; streaming and
storage come from the daily usage records. Prices and plan limits are
account-level constants.
"""

import math
from datetime import date, datetime, timezone
from typing import Any

ENCODING_PRICE_PER_MINUTE = 0.20
STREAMING_PRICE_PER_GB = 0.02
STORAGE_PRICE_PER_GB_MONTH = 0.01

ENCODING_MINUTES_LIMIT = 1000
STREAMING_GB_LIMIT = 50_000
STORAGE_GB_LIMIT = 10_000

# Rough conversions used when no direct measurement is available
GB_PER_STREAMED_MINUTE = 0.1
ENCODING_MINUTES_PER_STREAMED_MINUTE = 0.05
PREVIOUS_MONTH_COST_PER_ASSET = 10.0


def month_start(day: date) -> datetime:
    return datetime(day.year, day.month, 1, tzinfo=timezone.utc)


def previous_month_start(day: date) -> datetime:
    if day.month == 1:
        return datetime(day.year - 1, 12, 1, tzinfo=timezone.utc)
    return datetime(day.year, day.month - 1, 1, tzinfo=timezone.utc)


def asset_created_at(asset: dict[str, Any]) -> datetime | None:
    """Creation time of a Mux asset (epoch seconds string or ISO 8601)."""
    raw = asset.get("created_at")
    if raw is None:
        return None
    try:
        return datetime.fromtimestamp(int(raw), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError):
        pass
    try:
        parsed = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def assets_created_between(
    assets: list[dict[str, Any]], start: datetime, end: datetime | None = None
) -> list[dict[str, Any]]:
    selected = []
    for asset in assets:
        created = asset_created_at(asset)
        if created is None or created < start:
            continue
        if end is not None and created >= end:
            continue
        selected.append(asset)
    return selected


def encoding_minutes(assets: list[dict[str, Any]]) -> int:
    """Billable encoding minutes of ready assets, each rounded up to a whole minute."""
    total = 0
    for asset in assets:
        duration = asset.get("duration")
        if isinstance(duration, (int, float)) and duration > 0 and asset.get("status") == "ready":
            total += math.ceil(duration / 60)
    return total


def estimated_encoding_minutes(total_streamed_minutes: int) -> int:
    return round(total_streamed_minutes * ENCODING_MINUTES_PER_STREAMED_MINUTE)


def streamed_gb(streamed_minutes: int) -> int:
    return round(streamed_minutes * GB_PER_STREAMED_MINUTE)


def daily_cost(encoding: int, streaming_gb: int, storage_gb: int) -> float:
    return round(
        encoding * ENCODING_PRICE_PER_MINUTE
        + streaming_gb * STREAMING_PRICE_PER_GB
        + storage_gb * STORAGE_PRICE_PER_GB_MONTH,
        2,
    )


def growth_percentage(current_cost: float, previous_cost: float) -> int:
    """Month-over-month change in percent; 100 when there was no previous cost."""
    if previous_cost > 0:
        return round((current_cost - previous_cost) / previous_cost * 100)
    if current_cost > 0:
        return 100
    return 0
