"""Domain models for the video admin console.

All models use Pydantic for validation, serialization, and type safety.
Remote Mux payloads are kept as plain dicts; only local records and the
values derived from them are modelled here.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# ============================================================================
# Mux status vocabularies
# ============================================================================


class AssetStatus(str, Enum):
    """Processing states of a Mux asset."""

    PREPARING = "preparing"
    READY = "ready"
    ERRORED = "errored"


class UploadStatus(str, Enum):
    """States of a Mux direct upload."""

    WAITING = "waiting"
    ASSET_CREATED = "asset_created"
    ERRORED = "errored"
    CANCELLED = "cancelled"
    TIMED_OUT = "timed_out"


class PlaybackPolicy(str, Enum):
    """Playback policy of a playback id."""

    PUBLIC = "public"
    SIGNED = "signed"


def is_asset_ready(asset: dict[str, Any]) -> bool:
    return asset.get("status") == AssetStatus.READY.value


def is_asset_errored(asset: dict[str, Any]) -> bool:
    return asset.get("status") == AssetStatus.ERRORED.value


def is_asset_preparing(asset: dict[str, Any]) -> bool:
    return asset.get("status") == AssetStatus.PREPARING.value


def is_upload_complete(upload: dict[str, Any]) -> bool:
    return upload.get("status") == UploadStatus.ASSET_CREATED.value


def is_upload_errored(upload: dict[str, Any]) -> bool:
    return upload.get("status") == UploadStatus.ERRORED.value


def is_upload_waiting(upload: dict[str, Any]) -> bool:
    return upload.get("status") == UploadStatus.WAITING.value


# ============================================================================
# Caller identity
# ============================================================================


class CallerIdentity(BaseModel):
    """Authenticated caller resolved from a session."""

    user_id: str = Field(description="Identifier of the logged-in user")
    email: str = Field(description="Email the user logged in with")

    model_config = ConfigDict(frozen=True)


class SessionRecord(BaseModel):
    """Server-side session keyed by an opaque token."""

    token: str
    user_id: str
    email: str
    created_at: datetime
    expires_at: datetime

    model_config = ConfigDict(frozen=True)


# ============================================================================
# Local records
# ============================================================================


class AssetMetadata(BaseModel):
    """Locally stored metadata for a remote asset."""

    asset_id: str
    title: str | None = None
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    duration: float | None = None
    aspect_ratio: str | None = None
    created_at: datetime
    updated_at: datetime


class LibraryAsset(BaseModel):
    """Membership of an asset in a library, ordered by position."""

    library_id: str
    asset_id: str
    position: int = Field(ge=1)


class Library(BaseModel):
    """Named collection of assets."""

    id: str
    name: str
    slug: str
    description: str | None = None
    created_at: datetime
    assets: list[LibraryAsset] = Field(default_factory=list)


class UploadToken(BaseModel):
    """Record of a direct-upload URL handed out to a client."""

    id: str
    token: str
    url: str
    expires_at: datetime
    used: bool = False
    used_at: datetime | None = None
    created_at: datetime


class DailyUsage(BaseModel):
    """Usage totals for one calendar day."""

    day: date
    streamed_minutes: int = Field(default=0, ge=0)
    storage_gb: float = Field(default=0.0, ge=0.0)
    encoded_minutes: int = Field(default=0, ge=0)


class UsageTotals(BaseModel):
    """Aggregate of all daily usage rows."""

    total_streamed_minutes: int = 0
    total_storage_gb: float = 0.0

    model_config = ConfigDict(frozen=True)


class PlaybackRestrictionSettings(BaseModel):
    """Referrer / user-agent playback restriction applied to new assets."""

    enabled: bool = False
    allowed_domains: list[str] = Field(default_factory=list)
    allow_no_referrer: bool = False
    allow_no_user_agent: bool = True
    allow_high_risk_user_agent: bool = True
    restriction_id: str | None = None


# ============================================================================
# Analytics aggregates
# ============================================================================


class CountryViews(BaseModel):
    country: str
    views: int


class DeviceViews(BaseModel):
    device: str
    views: int


class AssetViews(BaseModel):
    asset_id: str
    views: int
