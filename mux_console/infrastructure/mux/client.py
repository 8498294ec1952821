"""
Mux REST API client.

This module provides the concrete implementation of the VideoPlatform protocol
over Mux's Video and Data APIs using an async httpx client.

Every call passes through one shared IntervalRateLimiter so the platform's
request ceiling holds no matter how many requests the console is serving.
Idempotent reads are retried with exponential backoff on transport errors;
each retry waits for a fresh permit.
"""

import logging
from typing import Any

import httpx

from mux_console.domain.exceptions import MuxApiError
from mux_console.infrastructure.rate_limit import IntervalRateLimiter
from mux_console.shared.config import Settings
from mux_console.shared.retry import call_with_retry

logger = logging.getLogger(__name__)


class MuxClient:
    """
    Rate-limited Mux API client implementing the VideoPlatform protocol.

    Operations cover assets, playback ids, direct uploads, playback
    restrictions and Data API metrics. Methods return the ``data`` member of
    Mux's response body and raise ``MuxApiError`` (with ``status_code``) on
    non-2xx answers. httpx transport errors propagate unchanged.

    Attributes:
        _http: httpx async client with basic auth against the Mux API
        _limiter: Shared rate limiter gating every outbound call
        _max_retries: Transport-error retries for idempotent reads
    """

    def __init__(
        self,
        token_id: str,
        token_secret: str,
        limiter: IntervalRateLimiter,
        base_url: str = "https://api.mux.com",
        timeout: float = 30.0,
        max_retries: int = 2,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            token_id: Mux access token id
            token_secret: Mux access token secret
            limiter: Rate limiter shared by every caller in the process
            base_url: Mux API base URL
            timeout: Per-request timeout in seconds
            max_retries: Transport-error retries for idempotent reads
            http_client: Pre-built httpx client (tests inject a MockTransport-backed one)
        """
        if http_client is None:
            if not token_id or not token_secret:
                raise RuntimeError("MUX_TOKEN_ID and MUX_TOKEN_SECRET must be set")
            http_client = httpx.AsyncClient(
                base_url=base_url,
                auth=(token_id, token_secret),
                timeout=timeout,
                headers={"Accept": "application/json"},
            )
        self._http = http_client
        self._limiter = limiter
        self._max_retries = max_retries

        logger.info(
            f"Initialized MuxClient - base_url: {base_url}, "
            f"rate limit: {limiter.capacity}/{limiter.interval}s"
        )

    @classmethod
    def from_settings(cls, settings: Settings, limiter: IntervalRateLimiter) -> "MuxClient":
        """Build a client from application settings."""
        return cls(
            token_id=settings.mux_token_id,
            token_secret=settings.mux_token_secret,
            limiter=limiter,
            base_url=settings.mux_base_url,
            timeout=settings.mux_timeout,
            max_retries=settings.mux_max_retries,
        )

    @property
    def limiter(self) -> IntervalRateLimiter:
        return self._limiter

    # ========================================================================
    # Assets
    # ========================================================================

    async def create_asset(
        self,
        input_url: str,
        playback_policy: list[str] | None = None,
        mp4_support: str = "standard",
        passthrough: str | None = None,
    ) -> dict[str, Any]:
        """Create an asset ingested from a URL."""
        body: dict[str, Any] = {
            "input": [{"url": input_url}],
            "playback_policy": playback_policy or ["public"],
            "mp4_support": mp4_support,
        }
        if passthrough is not None:
            body["passthrough"] = passthrough
        return await self._request("POST", "/video/v1/assets", json=body)

    async def get_asset(self, asset_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/video/v1/assets/{asset_id}")

    async def list_assets(
        self, limit: int | None = None, page: int | None = None
    ) -> list[dict[str, Any]]:
        params = _compact({"limit": limit, "page": page})
        return await self._request("GET", "/video/v1/assets", params=params) or []

    async def delete_asset(self, asset_id: str) -> None:
        await self._request("DELETE", f"/video/v1/assets/{asset_id}")

    async def update_asset(self, asset_id: str, passthrough: str | None = None) -> dict[str, Any]:
        body = _compact({"passthrough": passthrough})
        return await self._request("PATCH", f"/video/v1/assets/{asset_id}", json=body)

    async def update_mp4_support(self, asset_id: str, mp4_support: str) -> dict[str, Any]:
        return await self._request(
            "PUT", f"/video/v1/assets/{asset_id}/mp4-support", json={"mp4_support": mp4_support}
        )

    # ========================================================================
    # Playback IDs
    # ========================================================================

    async def create_playback_id(self, asset_id: str, policy: str = "public") -> dict[str, Any]:
        return await self._request(
            "POST", f"/video/v1/assets/{asset_id}/playback-ids", json={"policy": policy}
        )

    async def delete_playback_id(self, asset_id: str, playback_id: str) -> None:
        await self._request("DELETE", f"/video/v1/assets/{asset_id}/playback-ids/{playback_id}")

    # ========================================================================
    # Direct uploads
    # ========================================================================

    async def create_direct_upload(
        self, cors_origin: str, new_asset_settings: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        body = {
            "cors_origin": cors_origin,
            "new_asset_settings": new_asset_settings or {"playback_policy": ["public"]},
        }
        return await self._request("POST", "/video/v1/uploads", json=body)

    async def get_direct_upload(self, upload_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/video/v1/uploads/{upload_id}")

    async def cancel_direct_upload(self, upload_id: str) -> dict[str, Any]:
        return await self._request("PUT", f"/video/v1/uploads/{upload_id}/cancel")

    async def list_direct_uploads(
        self, limit: int | None = None, page: int | None = None
    ) -> list[dict[str, Any]]:
        params = _compact({"limit": limit, "page": page})
        return await self._request("GET", "/video/v1/uploads", params=params) or []

    # ========================================================================
    # Playback restrictions
    # ========================================================================

    async def create_playback_restriction(
        self,
        allowed_domains: list[str],
        allow_no_referrer: bool,
        allow_no_user_agent: bool,
        allow_high_risk_user_agent: bool,
    ) -> dict[str, Any]:
        body = {
            "referrer": {
                "allowed_domains": allowed_domains,
                "allow_no_referrer": allow_no_referrer,
            },
            "user_agent": {
                "allow_no_user_agent": allow_no_user_agent,
                "allow_high_risk_user_agent": allow_high_risk_user_agent,
            },
        }
        return await self._request("POST", "/video/v1/playback-restrictions", json=body)

    async def update_restriction_referrer(
        self, restriction_id: str, allowed_domains: list[str], allow_no_referrer: bool
    ) -> dict[str, Any]:
        body = {"allowed_domains": allowed_domains, "allow_no_referrer": allow_no_referrer}
        return await self._request(
            "PUT", f"/video/v1/playback-restrictions/{restriction_id}/referrer", json=body
        )

    async def update_restriction_user_agent(
        self, restriction_id: str, allow_no_user_agent: bool, allow_high_risk_user_agent: bool
    ) -> dict[str, Any]:
        body = {
            "allow_no_user_agent": allow_no_user_agent,
            "allow_high_risk_user_agent": allow_high_risk_user_agent,
        }
        return await self._request(
            "PUT", f"/video/v1/playback-restrictions/{restriction_id}/user_agent", json=body
        )

    # ========================================================================
    # Data API
    # ========================================================================

    async def list_video_views(
        self,
        timeframe: list[str] | None = None,
        filters: list[str] | None = None,
        order_direction: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """List individual video views, optionally filtered (e.g. ``asset_id:<id>``)."""
        params = _compact(
            {
                "timeframe[]": timeframe,
                "filters[]": filters,
                "order_direction": order_direction,
                "limit": limit,
            }
        )
        return await self._request("GET", "/data/v1/video-views", params=params) or []

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
    ) -> list[dict[str, Any]]:
        """Break a metric down by a grouping dimension (country, device_category, asset_id...)."""
        params = _compact(
            {
                "group_by": group_by,
                "timeframe[]": timeframe,
                "filters[]": filters,
                "measurement": measurement,
                "order_by": order_by,
                "order_direction": order_direction,
                "limit": limit,
            }
        )
        return (
            await self._request("GET", f"/data/v1/metrics/{metric_id}/breakdown", params=params)
            or []
        )

    async def get_overall_values(
        self,
        metric_id: str,
        timeframe: list[str] | None = None,
        filters: list[str] | None = None,
        measurement: str | None = None,
    ) -> dict[str, Any]:
        """Fetch a metric's overall value (and total view count) for a timeframe."""
        params = _compact(
            {"timeframe[]": timeframe, "filters[]": filters, "measurement": measurement}
        )
        return (
            await self._request("GET", f"/data/v1/metrics/{metric_id}/overall", params=params)
            or {}
        )

    async def list_realtime_metrics(self) -> list[dict[str, Any]]:
        return await self._request("GET", "/data/v1/realtime/metrics") or []

    # ========================================================================
    # Transport
    # ========================================================================

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Send one rate-limited request and unwrap Mux's ``data`` member.

        Raises:
            MuxApiError: If Mux answers with a non-2xx status
            httpx.TransportError: If the request could not be completed
        """

        async def send() -> httpx.Response:
            return await self._limiter.run(
                lambda: self._http.request(method, path, params=params, json=json)
            )

        if method == "GET" and self._max_retries > 0:
            response = await call_with_retry(
                send, max_retries=self._max_retries, exceptions=(httpx.TransportError,)
            )
        else:
            response = await send()

        if response.is_error:
            body = _safe_json(response)
            message = _error_message(body) or f"Mux API returned HTTP {response.status_code}"
            logger.warning(f"Mux {method} {path} failed: {response.status_code} {message}")
            raise MuxApiError(response.status_code, message, body)

        logger.debug(f"Mux {method} {path} -> {response.status_code}")

        if response.status_code == 204 or not response.content:
            return None
        body = response.json()
        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._http.aclose()


def _compact(params: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in params.items() if value is not None}


def _safe_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _error_message(body: Any) -> str | None:
    """Pull a readable message out of Mux's ``{"error": {"type", "messages"}}`` body."""
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if not isinstance(error, dict):
        return None
    messages = error.get("messages")
    if isinstance(messages, list) and messages:
        return ", ".join(str(m) for m in messages)
    error_type = error.get("type")
    return str(error_type) if error_type else None
