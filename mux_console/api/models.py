"""API request/response models.

Separate from domain models to allow different validation rules. Request
models are validated inside the handlers (not by FastAPI) so that malformed
input surfaces as an enveloped INVALID_* error rather than a 422.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, HttpUrl, field_validator

from mux_console.domain.models import CountryViews, DeviceViews

MAX_URLS_PER_REQUEST = 10
MAX_ALLOWED_DOMAINS = 10

ASSET_ID_PATTERN = r"^[A-Za-z0-9_-]{1,128}$"
SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


# ============================================================================
# Requests
# ============================================================================


class AssetIdParam(BaseModel):
    id: str = Field(pattern=ASSET_ID_PATTERN, description="Mux asset id")


class AssetQuery(BaseModel):
    """Query parameters of the asset listing."""

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=25, ge=1, le=100)
    search: str | None = Field(default=None, max_length=200)


class PeriodQuery(BaseModel):
    """Reporting window in days."""

    period: int = Field(default=30, ge=1, le=365)


class AssetViewsQuery(PeriodQuery):
    period: int = Field(default=7, ge=1, le=365)


class SearchQuery(BaseModel):
    search: str = Field(default="", max_length=200)


class DirectUploadQuery(BaseModel):
    id: str = Field(min_length=1, max_length=128, description="Mux direct upload id")


class CreateAssetsRequest(BaseModel):
    """URLs to ingest as new assets.

    ``urls`` accepts either a list or a newline-separated string; blank lines
    are ignored.
    """

    urls: list[HttpUrl] = Field(min_length=1, max_length=MAX_URLS_PER_REQUEST)

    @field_validator("urls", mode="before")
    @classmethod
    def split_lines(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [line.strip() for line in value.split("\n") if line.strip()]
        return value


class MetadataUpdateRequest(BaseModel):
    """Partial update of locally stored asset metadata."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=1000)
    tags: list[str] | None = Field(default=None, max_length=20)

    @field_validator("tags")
    @classmethod
    def check_tags(cls, tags: list[str] | None) -> list[str] | None:
        if tags is not None:
            for tag in tags:
                if not 1 <= len(tag) <= 50:
                    raise ValueError("tags must be 1-50 characters long")
        return tags


class CreateLibraryRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    slug: str = Field(min_length=1, max_length=100, pattern=SLUG_PATTERN)
    description: str | None = Field(default=None, max_length=500)


class PlaybackRestrictionRequest(BaseModel):
    """Desired playback restriction; omitted fields take their defaults."""

    enabled: bool = False
    allowed_domains: list[str] = Field(default_factory=list, max_length=MAX_ALLOWED_DOMAINS)
    allow_no_referrer: bool = False
    allow_no_user_agent: bool = True
    allow_high_risk_user_agent: bool = True


class LoginRequest(BaseModel):
    email: str
    password: str


# ============================================================================
# Responses
# ============================================================================


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    has_more: bool


class AssetList(BaseModel):
    assets: list[dict[str, Any]]
    pagination: Pagination


class AssetCreation(BaseModel):
    """Outcome of ingesting one URL."""

    url: str
    success: bool
    asset: dict[str, Any] | None = None
    error: str | None = None


class AssetCreationBatch(BaseModel):
    results: list[AssetCreation]


class AssetDeleted(BaseModel):
    asset_id: str
    deleted: bool = True


class DirectUploadCreated(BaseModel):
    id: str
    url: str
    status: str


class AnalyticsOverview(BaseModel):
    total_views: int


class TopVideo(BaseModel):
    id: str
    title: str
    views: int


class AnalyticsSummary(BaseModel):
    overview: AnalyticsOverview
    top_videos: list[TopVideo]
    device_breakdown: list[DeviceViews]
    geographic_data: list[CountryViews]


class LibrarySummary(BaseModel):
    id: str
    name: str
    slug: str
    description: str | None
    created_at: datetime
    asset_count: int


class UsageMeter(BaseModel):
    used: float
    limit: float
    cost: float


class UsageCurrentMonth(BaseModel):
    encoding: UsageMeter
    streaming: UsageMeter
    storage: UsageMeter


class UsageDay(BaseModel):
    date: str
    encoding: int
    streaming: int
    storage: int
    cost: float


class UsageGrowth(BaseModel):
    percentage: int
    is_positive: bool


class UsageReport(BaseModel):
    current_month: UsageCurrentMonth
    recent_usage: list[UsageDay]
    growth: UsageGrowth
    total_cost: float


class SessionInfo(BaseModel):
    email: str
    expires_at: datetime


class LoggedOut(BaseModel):
    logged_out: bool = True
