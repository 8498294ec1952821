"""Main FastAPI application.

Entry point for the Mux admin console API.
"""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from mux_console.api.dependencies import (
    get_mux_client,
    get_session_store,
    get_settings,
    get_store,
)
from mux_console.api.envelope import ApiError, ApiErrorBody
from mux_console.api.routes import analytics, assets, auth, libraries, uploads, usage
from mux_console.api.routes import settings as settings_routes
from mux_console.infrastructure.storage.cleanup import run_periodic_cleanup
from mux_console.shared.logging_config import configure_logging

# Configure logging
settings = get_settings()
configure_logging(settings.log_level)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Validates critical configuration on startup, sweeps expired tokens and
    sessions in the background, and closes the Mux client on shutdown.
    """
    logger.info(f"Starting {settings.api_title} v{settings.api_version}")

    # CRITICAL: Validate required configuration
    errors: list[str] = []

    if not settings.mux_token_id:
        errors.append("MUX_TOKEN_ID is not set")
    if not settings.mux_token_secret:
        errors.append("MUX_TOKEN_SECRET is not set")

    if errors:
        error_msg = "CRITICAL CONFIGURATION ERRORS:\n" + "\n".join(f"  - {e}" for e in errors)
        logger.critical(error_msg)
        raise RuntimeError(error_msg)

    if not settings.admin_email or not settings.admin_password_hash:
        logger.warning("ADMIN_EMAIL / ADMIN_PASSWORD_HASH not set - logins will be refused")

    logger.info(
        f"Mux rate limit: {settings.rate_limit_capacity} calls per "
        f"{settings.rate_limit_interval_seconds}s"
    )
    logger.info("Configuration validation passed - all critical settings are present")

    # Build the client (and its shared rate limiter) before the first request
    client = get_mux_client()

    overrides = app.dependency_overrides
    cleanup_task = asyncio.create_task(
        run_periodic_cleanup(
            overrides.get(get_store, get_store)(),
            overrides.get(get_session_store, get_session_store)(),
            settings.cleanup_interval_seconds,
        )
    )

    yield

    logger.info(f"Shutting down {settings.api_title}")
    cleanup_task.cancel()
    with suppress(asyncio.CancelledError):
        await cleanup_task
    await client.close()


app = FastAPI(
    lifespan=lifespan,
    title=settings.api_title,
    version=settings.api_version,
    description="""
# Mux Console API

Admin API for a video library hosted on Mux.

## Response envelope

Every endpoint answers with the same envelope:

- success: `{"ok": true, "data": ...}`
- failure: `{"ok": false, "error": {"code": "...", "message": "..."}}`

Error codes are stable per endpoint; the HTTP status is derived from the code.

## Rate limiting

Calls to Mux are funnelled through one process-wide limiter (20 per second by
default). Requests beyond the ceiling wait their turn instead of failing.

## Authentication

Log in with `POST /api/auth/login`; the session cookie authenticates every
other `/api` endpoint.
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {"name": "Assets", "description": "Mux assets and their local metadata"},
        {"name": "Uploads", "description": "Direct browser uploads to Mux"},
        {"name": "Analytics", "description": "View analytics from Mux Data"},
        {"name": "Libraries", "description": "Asset libraries and upload tokens"},
        {"name": "Usage", "description": "Usage and cost estimates"},
        {"name": "Settings", "description": "Playback restriction settings"},
        {"name": "Auth", "description": "Admin login and logout"},
        {"name": "Health & Status", "description": "Service health check and status endpoints"},
    ],
)

# Configure CORS
# Credentials are allowed so the session cookie travels; this requires explicit origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials="*" not in settings.cors_allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_envelope(status_code: int, code: str, message: str) -> JSONResponse:
    body = ApiError(ok=False, error=ApiErrorBody(code=code, message=message))
    return JSONResponse(status_code=status_code, content=body.model_dump())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Keep framework-level validation failures inside the envelope."""
    details = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
        for err in exc.errors()
    )
    return _error_envelope(400, "INVALID_INPUT", details or "Invalid request")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return _error_envelope(500, "INTERNAL_ERROR", "Internal server error")


# Include routers
app.include_router(assets.router)
app.include_router(uploads.router)
app.include_router(analytics.router)
app.include_router(libraries.router)
app.include_router(usage.router)
app.include_router(settings_routes.router)
app.include_router(auth.router)


@app.get("/", include_in_schema=False)
async def root():
    """Redirect root to API documentation."""
    return RedirectResponse(url="/docs")


@app.get(
    "/health",
    status_code=200,
    summary="Service health check",
    responses={
        200: {
            "description": "Service is healthy and operational",
            "content": {
                "application/json": {
                    "example": {
                        "status": "healthy",
                        "service": "Mux Console",
                        "version": "0.1.0",
                        "rate_limit": {"capacity": 20, "interval_seconds": 1.0},
                    }
                }
            },
        }
    },
    tags=["Health & Status"],
)
async def health_check():
    """Service health check endpoint.

    Returns:
        Dictionary containing service health status and metadata
    """
    return {
        "status": "healthy",
        "service": settings.api_title,
        "version": settings.api_version,
        "rate_limit": {
            "capacity": settings.rate_limit_capacity,
            "interval_seconds": settings.rate_limit_interval_seconds,
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "mux_console.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )
