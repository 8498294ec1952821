"""Library and upload-token listing routes."""

import logging
from enum import Enum

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from mux_console.api.dependencies import get_current_caller, get_settings, get_store
from mux_console.api.models import CreateLibraryRequest, LibrarySummary, SearchQuery
from mux_console.api.responses import respond, status_table
from mux_console.api.validation import describe_validation_error, read_json
from mux_console.application.assets import error_message
from mux_console.domain.exceptions import ConflictError
from mux_console.domain.models import CallerIdentity, Library, UploadToken
from mux_console.domain.protocols import LibraryStore, UploadTokenStore
from mux_console.shared.config import Settings
from mux_console.shared.result import Err, Ok, Result

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Libraries"])

LISTING_CACHE_HEADERS = {"Cache-Control": "private, max-age=10"}


class ListLibrariesError(str, Enum):
    AUTH_REQUIRED = "AUTH_REQUIRED"
    DB_LIST_LIBRARIES_FAILED = "DB_LIST_LIBRARIES_FAILED"


class CreateLibraryError(str, Enum):
    AUTH_REQUIRED = "AUTH_REQUIRED"
    INVALID_JSON = "INVALID_JSON"
    INVALID_INPUT = "INVALID_INPUT"
    LIBRARY_SLUG_TAKEN = "LIBRARY_SLUG_TAKEN"
    DB_CREATE_LIBRARY_FAILED = "DB_CREATE_LIBRARY_FAILED"


class ListTokensError(str, Enum):
    AUTH_REQUIRED = "AUTH_REQUIRED"
    DB_LIST_TOKENS_FAILED = "DB_LIST_TOKENS_FAILED"


LIST_LIBRARIES_STATUS = status_table(
    ListLibrariesError,
    {
        ListLibrariesError.AUTH_REQUIRED: 401,
        ListLibrariesError.DB_LIST_LIBRARIES_FAILED: 500,
    },
)

CREATE_LIBRARY_STATUS = status_table(
    CreateLibraryError,
    {
        CreateLibraryError.AUTH_REQUIRED: 401,
        CreateLibraryError.INVALID_JSON: 400,
        CreateLibraryError.INVALID_INPUT: 400,
        CreateLibraryError.LIBRARY_SLUG_TAKEN: 409,
        CreateLibraryError.DB_CREATE_LIBRARY_FAILED: 500,
    },
)

LIST_TOKENS_STATUS = status_table(
    ListTokensError,
    {
        ListTokensError.AUTH_REQUIRED: 401,
        ListTokensError.DB_LIST_TOKENS_FAILED: 500,
    },
)


def _search_term(query_params: dict[str, str]) -> str:
    # Over-long or malformed search terms are treated as no filter
    try:
        return SearchQuery.model_validate(query_params).search.strip().lower()
    except ValidationError:
        return ""


def _summarize(library: Library) -> LibrarySummary:
    return LibrarySummary(
        id=library.id,
        name=library.name,
        slug=library.slug,
        description=library.description,
        created_at=library.created_at,
        asset_count=len(library.assets),
    )


async def list_libraries(
    caller: CallerIdentity | None,
    query_params: dict[str, str],
    libraries: LibraryStore,
) -> Result[list[LibrarySummary], ListLibrariesError]:
    """Libraries newest first, filtered by name, slug or description."""
    if caller is None:
        return Err(ListLibrariesError.AUTH_REQUIRED)

    needle = _search_term(query_params)
    try:
        summaries = [_summarize(library) for library in await libraries.get_libraries()]
    except Exception as e:
        logger.error(f"Listing libraries failed: {e}")
        return Err(ListLibrariesError.DB_LIST_LIBRARIES_FAILED, error_message(e, "List failed"))

    if needle:
        summaries = [
            lib
            for lib in summaries
            if needle in lib.name.lower()
            or needle in lib.slug.lower()
            or needle in (lib.description or "").lower()
        ]
    return Ok(summaries)


async def create_library(
    caller: CallerIdentity | None,
    request: Request,
    libraries: LibraryStore,
) -> Result[LibrarySummary, CreateLibraryError]:
    if caller is None:
        return Err(CreateLibraryError.AUTH_REQUIRED)

    try:
        body = await read_json(request)
    except ValueError:
        return Err(CreateLibraryError.INVALID_JSON, "Request body is not valid JSON")

    try:
        payload = CreateLibraryRequest.model_validate(body)
    except ValidationError as e:
        return Err(CreateLibraryError.INVALID_INPUT, describe_validation_error(e))

    try:
        library = await libraries.create_library(
            name=payload.name, slug=payload.slug, description=payload.description
        )
    except ConflictError:
        return Err(CreateLibraryError.LIBRARY_SLUG_TAKEN, f"Slug '{payload.slug}' is taken")
    except Exception as e:
        logger.error(f"Creating library {payload.slug} failed: {e}")
        return Err(CreateLibraryError.DB_CREATE_LIBRARY_FAILED, error_message(e, "Create failed"))

    logger.info(f"Created library {library.slug}")
    return Ok(_summarize(library))


async def list_tokens(
    caller: CallerIdentity | None,
    query_params: dict[str, str],
    tokens: UploadTokenStore,
) -> Result[list[UploadToken], ListTokensError]:
    """Upload tokens newest first, filtered by id, token or URL."""
    if caller is None:
        return Err(ListTokensError.AUTH_REQUIRED)

    needle = _search_term(query_params)
    try:
        records = await tokens.get_upload_tokens()
    except Exception as e:
        logger.error(f"Listing upload tokens failed: {e}")
        return Err(ListTokensError.DB_LIST_TOKENS_FAILED, error_message(e, "List failed"))

    if needle:
        records = [
            t
            for t in records
            if needle in t.id.lower() or needle in t.token.lower() or needle in t.url.lower()
        ]
    return Ok(records)


@router.get("/libraries", summary="List libraries")
async def list_libraries_endpoint(
    request: Request,
    caller: CallerIdentity | None = Depends(get_current_caller),
    libraries: LibraryStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    result = await list_libraries(caller, dict(request.query_params), libraries)
    return respond(
        result, LIST_LIBRARIES_STATUS, LISTING_CACHE_HEADERS, strict=settings.strict_status_tables
    )


@router.post("/libraries", summary="Create a library")
async def create_library_endpoint(
    request: Request,
    caller: CallerIdentity | None = Depends(get_current_caller),
    libraries: LibraryStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    result = await create_library(caller, request, libraries)
    return respond(result, CREATE_LIBRARY_STATUS, strict=settings.strict_status_tables)


@router.get("/tokens", summary="List upload tokens")
async def list_tokens_endpoint(
    request: Request,
    caller: CallerIdentity | None = Depends(get_current_caller),
    tokens: UploadTokenStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    result = await list_tokens(caller, dict(request.query_params), tokens)
    return respond(
        result, LIST_TOKENS_STATUS, LISTING_CACHE_HEADERS, strict=settings.strict_status_tables
    )
