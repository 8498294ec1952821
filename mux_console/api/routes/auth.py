"""Admin login and logout routes.

A successful login creates a server-side session and hands its token to the
browser in an HTTP-only cookie.
"""

import logging
from enum import Enum

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from mux_console.api.dependencies import get_session_store, get_settings
from mux_console.api.models import LoggedOut, LoginRequest, SessionInfo
from mux_console.api.responses import respond, status_table
from mux_console.api.validation import describe_validation_error, read_json
from mux_console.domain.models import SessionRecord
from mux_console.domain.protocols import SessionStore
from mux_console.infrastructure.auth.passwords import authenticate_admin, validate_credentials
from mux_console.shared.config import Settings
from mux_console.shared.result import Err, Ok, Result

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])

ADMIN_USER_ID = "admin"


class LoginError(str, Enum):
    INVALID_JSON = "INVALID_JSON"
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    AUTH_NOT_CONFIGURED = "AUTH_NOT_CONFIGURED"


class LogoutError(str, Enum):
    SESSION_DELETE_FAILED = "SESSION_DELETE_FAILED"


LOGIN_STATUS = status_table(
    LoginError,
    {
        LoginError.INVALID_JSON: 400,
        LoginError.INVALID_INPUT: 400,
        LoginError.INVALID_CREDENTIALS: 401,
        LoginError.AUTH_NOT_CONFIGURED: 500,
    },
)

LOGOUT_STATUS = status_table(LogoutError, {LogoutError.SESSION_DELETE_FAILED: 500})


async def login(
    request: Request,
    sessions: SessionStore,
    settings: Settings,
) -> Result[SessionRecord, LoginError]:
    try:
        body = await read_json(request)
    except ValueError:
        return Err(LoginError.INVALID_JSON, "Request body is not valid JSON")

    try:
        credentials = LoginRequest.model_validate(body)
    except ValidationError as e:
        return Err(LoginError.INVALID_INPUT, describe_validation_error(e))

    check = validate_credentials(credentials.email, credentials.password)
    if not check.is_valid:
        return Err(LoginError.INVALID_INPUT, ", ".join(check.errors))

    outcome = authenticate_admin(
        credentials.email,
        credentials.password,
        admin_email=settings.admin_email,
        admin_password_hash=settings.admin_password_hash,
    )
    if not outcome.configured:
        logger.error("Login attempted but admin credentials are not configured")
        return Err(LoginError.AUTH_NOT_CONFIGURED, outcome.error)
    if not outcome.success:
        logger.warning(f"Failed login attempt for {credentials.email}")
        return Err(LoginError.INVALID_CREDENTIALS, outcome.error)

    session = await sessions.create_session(ADMIN_USER_ID, credentials.email)
    return Ok(session)


@router.post("/login", summary="Log in as the admin")
async def login_endpoint(
    request: Request,
    sessions: SessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    result = await login(request, sessions, settings)
    response = respond(
        result.map(lambda s: SessionInfo(email=s.email, expires_at=s.expires_at)),
        LOGIN_STATUS,
        strict=settings.strict_status_tables,
    )
    if isinstance(result, Ok):
        response.set_cookie(
            key=settings.session_cookie_name,
            value=result.data.token,
            max_age=settings.session_ttl_hours * 3600,
            httponly=True,
            secure=settings.session_cookie_secure,
            samesite="lax",
            path="/",
        )
    return response


async def logout(token: str | None, sessions: SessionStore) -> Result[LoggedOut, LogoutError]:
    if not token:
        return Ok(LoggedOut())
    try:
        await sessions.delete_session(token)
    except Exception as e:
        logger.error(f"Deleting session failed: {e}")
        return Err(LogoutError.SESSION_DELETE_FAILED, str(e) or "Failed to delete session")
    return Ok(LoggedOut())


@router.post("/logout", summary="Log out")
async def logout_endpoint(
    request: Request,
    sessions: SessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    result = await logout(request.cookies.get(settings.session_cookie_name), sessions)
    response = respond(result, LOGOUT_STATUS, strict=settings.strict_status_tables)
    response.delete_cookie(settings.session_cookie_name, path="/")
    return response
