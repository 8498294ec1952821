"""Protocol definitions for dependency inversion.

These protocols define interfaces that infrastructure implementations must satisfy.
Route handlers depend on these abstractions, never on concrete clients or stores.
"""

from datetime import date
from typing import Any, Protocol

from mux_console.domain.models import (
    AssetMetadata,
    CallerIdentity,
    DailyUsage,
    Library,
    LibraryAsset,
    PlaybackRestrictionSettings,
    SessionRecord,
    UploadToken,
    UsageTotals,
)


class VideoPlatform(Protocol):
    """Protocol for the remote video platform (Mux), reached only through the rate limiter.

    Every method returns the platform's native payload and raises on failure
    (``MuxApiError`` for non-2xx responses, httpx transport errors otherwise).
    """

    async def create_asset(
        self,
        input_url: str,
        playback_policy: list[str] | None = None,
        mp4_support: str = "standard",
        passthrough: str | None = None,
    ) -> dict[str, Any]: ...

    async def get_asset(self, asset_id: str) -> dict[str, Any]: ...

    async def list_assets(
        self, limit: int | None = None, page: int | None = None
    ) -> list[dict[str, Any]]: ...

    async def delete_asset(self, asset_id: str) -> None: ...

    async def create_playback_id(self, asset_id: str, policy: str = "public") -> dict[str, Any]: ...

    async def create_direct_upload(
        self, cors_origin: str, new_asset_settings: dict[str, Any] | None = None
    ) -> dict[str, Any]: ...

    async def get_direct_upload(self, upload_id: str) -> dict[str, Any]: ...

    async def list_video_views(
        self,
        timeframe: list[str] | None = None,
        filters: list[str] | None = None,
        order_direction: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]: ...

    async def get_metric_breakdown(
        self,
        metric_id: str,
        group_by: str,
        timeframe: list[str] | None = None,
        filters: list[str] | None = None,
        measurement: str | None = None,
        order_by: str | None = None,
        order_direction: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]: ...

    async def get_overall_values(
        self,
        metric_id: str,
        timeframe: list[str] | None = None,
        filters: list[str] | None = None,
        measurement: str | None = None,
    ) -> dict[str, Any]: ...

    async def create_playback_restriction(
        self,
        allowed_domains: list[str],
        allow_no_referrer: bool,
        allow_no_user_agent: bool,
        allow_high_risk_user_agent: bool,
    ) -> dict[str, Any]: ...

    async def update_restriction_referrer(
        self, restriction_id: str, allowed_domains: list[str], allow_no_referrer: bool
    ) -> dict[str, Any]: ...

    async def update_restriction_user_agent(
        self, restriction_id: str, allow_no_user_agent: bool, allow_high_risk_user_agent: bool
    ) -> dict[str, Any]: ...


class AssetMetadataStore(Protocol):
    """Protocol for locally stored asset metadata."""

    async def get_asset_metadata(self, asset_id: str) -> AssetMetadata | None: ...

    async def get_asset_metadata_many(self, asset_ids: list[str]) -> dict[str, AssetMetadata]: ...

    async def upsert_asset_metadata(self, asset_id: str, **fields: Any) -> AssetMetadata: ...

    async def delete_asset_metadata(self, asset_id: str) -> None: ...

    async def search_assets_by_metadata(self, query: str) -> list[str]: ...


class LibraryStore(Protocol):
    """Protocol for asset libraries."""

    async def get_libraries(self) -> list[Library]: ...

    async def get_library_by_slug(self, slug: str) -> Library | None: ...

    async def create_library(
        self, name: str, slug: str, description: str | None = None
    ) -> Library: ...

    async def add_asset_to_library(self, library_id: str, asset_id: str) -> LibraryAsset: ...

    async def remove_asset_from_library(self, library_id: str, asset_id: str) -> None: ...

    async def reorder_library_assets(self, library_id: str, asset_ids: list[str]) -> None: ...


class UploadTokenStore(Protocol):
    """Protocol for direct-upload token records."""

    async def create_upload_token(self, token: str, url: str, expires_at: Any) -> UploadToken: ...

    async def get_upload_tokens(self) -> list[UploadToken]: ...

    async def get_active_upload_tokens(self) -> list[UploadToken]: ...

    async def mark_token_used_by_value(self, token: str) -> UploadToken | None: ...

    async def cleanup_expired_tokens(self) -> int: ...


class UsageStore(Protocol):
    """Protocol for daily usage records."""

    async def get_daily_usage(self, start: date, end: date) -> list[DailyUsage]: ...

    async def upsert_daily_usage(self, day: date, **fields: Any) -> DailyUsage: ...

    async def get_total_usage(self) -> UsageTotals: ...


class SettingsStore(Protocol):
    """Protocol for persisted console settings."""

    async def get_playback_restriction(self) -> PlaybackRestrictionSettings: ...

    async def set_playback_restriction(self, value: PlaybackRestrictionSettings) -> None: ...


class SessionStore(Protocol):
    """Protocol for server-side sessions."""

    async def create_session(self, user_id: str, email: str) -> SessionRecord: ...

    async def get_session(self, token: str) -> SessionRecord | None: ...

    async def delete_session(self, token: str) -> None: ...

    async def cleanup_expired_sessions(self) -> int: ...


class Authorizer(Protocol):
    """Resolves the current caller; ``None`` means no valid session."""

    async def resolve_caller(self, session_token: str | None) -> CallerIdentity | None: ...
