"""Dependency injection for FastAPI.

Provides singleton instances of infrastructure components. The rate limiter is
constructed once here and threaded into the Mux client, so every request in
the process shares one gate. Tests replace any of these through
``app.dependency_overrides``.
"""

from datetime import timedelta
from functools import lru_cache

from fastapi import Depends, Request

from mux_console.domain.models import CallerIdentity
from mux_console.infrastructure.auth.sessions import SessionAuthorizer
from mux_console.infrastructure.mux.client import MuxClient
from mux_console.infrastructure.rate_limit import IntervalRateLimiter
from mux_console.infrastructure.storage.memory import (
    InMemorySessionStore,
    InMemoryStore,
    RecentIdSet,
)
from mux_console.infrastructure.storage.settings_file import JsonSettingsStore
from mux_console.shared.config import Settings


@lru_cache
def get_settings() -> Settings:
    """Get application settings (singleton).

    Returns:
        Application settings
    """
    return Settings()


@lru_cache
def get_rate_limiter() -> IntervalRateLimiter:
    """Get the process-wide Mux rate limiter (singleton)."""
    settings = get_settings()
    return IntervalRateLimiter(
        capacity=settings.rate_limit_capacity,
        interval=settings.rate_limit_interval_seconds,
        max_pending=settings.rate_limit_max_pending,
    )


@lru_cache
def get_mux_client() -> MuxClient:
    """Get the Mux client (singleton).

    Cached for connection pooling and so all callers share the rate limiter.

    Raises:
        RuntimeError: If Mux credentials are not configured
    """
    return MuxClient.from_settings(get_settings(), get_rate_limiter())


@lru_cache
def get_store() -> InMemoryStore:
    """Get the record store for metadata, libraries, upload tokens and usage (singleton)."""
    return InMemoryStore()


@lru_cache
def get_settings_store() -> JsonSettingsStore:
    return JsonSettingsStore(get_settings().settings_file)


@lru_cache
def get_session_store() -> InMemorySessionStore:
    return InMemorySessionStore(ttl=timedelta(hours=get_settings().session_ttl_hours))


@lru_cache
def get_authorizer() -> SessionAuthorizer:
    return SessionAuthorizer(get_session_store())


@lru_cache
def get_enforced_asset_ids() -> RecentIdSet:
    """Assets that recently received the playback restriction in this process."""
    return RecentIdSet(get_settings().enforced_asset_cache_size)


async def get_current_caller(
    request: Request,
    authorizer: SessionAuthorizer = Depends(get_authorizer),
    settings: Settings = Depends(get_settings),
) -> CallerIdentity | None:
    """Resolve the caller from the session cookie.

    Returns None rather than raising so handlers can answer AUTH_REQUIRED
    inside the response envelope.
    """
    token = request.cookies.get(settings.session_cookie_name)
    return await authorizer.resolve_caller(token)
