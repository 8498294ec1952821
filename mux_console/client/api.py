"""Typed client for the console API.

Each method maps to one endpoint and returns a ``ClientResult`` whose
success payload is validated against the endpoint's response model.
"""

from typing import Any

import httpx

from mux_console.api.models import (
    AnalyticsSummary,
    AssetCreationBatch,
    AssetDeleted,
    AssetList,
    DirectUploadCreated,
    LibrarySummary,
    LoggedOut,
    SessionInfo,
    UsageReport,
)
from mux_console.client.fetch import ClientResult, build_search_params, safe_fetch
from mux_console.domain.models import AssetMetadata, PlaybackRestrictionSettings, UploadToken


class AdminApiClient:
    """
    Client for the admin API.

    The session cookie set by ``login`` is kept by the underlying httpx
    client and sent with every later call.

    Attributes:
        _http: httpx async client pointed at the console
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._http = http_client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def close(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "AdminApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _get(self, path: str, response_type: Any, **query: Any) -> ClientResult[Any]:
        search = build_search_params(query)
        url = f"{path}?{search}" if search else path
        return await safe_fetch(self._http, url, method="GET", response_type=response_type)

    async def _send(
        self, method: str, path: str, response_type: Any, body: Any = None
    ) -> ClientResult[Any]:
        return await safe_fetch(
            self._http, path, method=method, json=body, response_type=response_type
        )

    # Auth

    async def login(self, email: str, password: str) -> ClientResult[SessionInfo]:
        return await self._send(
            "POST", "/api/auth/login", SessionInfo, {"email": email, "password": password}
        )

    async def logout(self) -> ClientResult[LoggedOut]:
        return await self._send("POST", "/api/auth/logout", LoggedOut)

    # Assets

    async def list_assets(
        self, page: int | None = None, limit: int | None = None, search: str | None = None
    ) -> ClientResult[AssetList]:
        return await self._get(
            "/api/assets", AssetList, page=page, limit=limit, search=search or None
        )

    async def create_assets(self, urls: list[str]) -> ClientResult[AssetCreationBatch]:
        return await self._send("POST", "/api/assets", AssetCreationBatch, {"urls": urls})

    async def get_asset(self, asset_id: str) -> ClientResult[dict[str, Any]]:
        return await self._get(f"/api/assets/{asset_id}", dict[str, Any])

    async def delete_asset(self, asset_id: str) -> ClientResult[AssetDeleted]:
        return await self._send("DELETE", f"/api/assets/{asset_id}", AssetDeleted)

    async def get_metadata(self, asset_id: str) -> ClientResult[AssetMetadata | None]:
        return await self._get(f"/api/assets/{asset_id}/metadata", AssetMetadata | None)

    async def update_metadata(
        self,
        asset_id: str,
        title: str | None = None,
        description: str | None = None,
        tags: list[str] | None = None,
    ) -> ClientResult[AssetMetadata]:
        body = {
            key: value
            for key, value in (("title", title), ("description", description), ("tags", tags))
            if value is not None
        }
        return await self._send("PUT", f"/api/assets/{asset_id}/metadata", AssetMetadata, body)

    # Direct uploads

    async def create_direct_upload(self) -> ClientResult[DirectUploadCreated]:
        return await self._send("POST", "/api/upload/direct", DirectUploadCreated)

    async def get_direct_upload(self, upload_id: str) -> ClientResult[dict[str, Any]]:
        return await self._get("/api/upload/direct", dict[str, Any], id=upload_id)

    # Analytics

    async def analytics_summary(self, period: int | None = None) -> ClientResult[AnalyticsSummary]:
        return await self._get("/api/analytics/summary", AnalyticsSummary, period=period)

    async def asset_views(
        self, asset_id: str, period: int | None = None
    ) -> ClientResult[list[dict[str, Any]]]:
        return await self._get(
            f"/api/analytics/assets/{asset_id}", list[dict[str, Any]], period=period
        )

    # Libraries and tokens

    async def list_libraries(self, search: str | None = None) -> ClientResult[list[LibrarySummary]]:
        return await self._get("/api/libraries", list[LibrarySummary], search=search or None)

    async def create_library(
        self, name: str, slug: str, description: str | None = None
    ) -> ClientResult[LibrarySummary]:
        body: dict[str, Any] = {"name": name, "slug": slug}
        if description is not None:
            body["description"] = description
        return await self._send("POST", "/api/libraries", LibrarySummary, body)

    async def list_tokens(self, search: str | None = None) -> ClientResult[list[UploadToken]]:
        return await self._get("/api/tokens", list[UploadToken], search=search or None)

    # Usage

    async def get_usage(self, period: int | None = None) -> ClientResult[UsageReport]:
        return await self._get("/api/usage", UsageReport, period=period)

    # Settings

    async def get_playback_restriction(self) -> ClientResult[PlaybackRestrictionSettings]:
        return await self._get("/api/settings/playback-restriction", PlaybackRestrictionSettings)

    async def update_playback_restriction(
        self,
        enabled: bool,
        allowed_domains: list[str] | None = None,
        allow_no_referrer: bool = False,
        allow_no_user_agent: bool = True,
        allow_high_risk_user_agent: bool = True,
    ) -> ClientResult[PlaybackRestrictionSettings]:
        body = {
            "enabled": enabled,
            "allowed_domains": allowed_domains or [],
            "allow_no_referrer": allow_no_referrer,
            "allow_no_user_agent": allow_no_user_agent,
            "allow_high_risk_user_agent": allow_high_risk_user_agent,
        }
        return await self._send(
            "PUT", "/api/settings/playback-restriction", PlaybackRestrictionSettings, body
        )
