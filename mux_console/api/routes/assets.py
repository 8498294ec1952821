"""Asset API routes.

Each endpoint runs the same guard sequence: resolve the caller, validate
input, call Mux and/or the store, then map the Result to an enveloped
response. Failures from collaborators are caught at the call site and
re-expressed as the endpoint's error codes.
"""

import asyncio
import logging
from enum import Enum
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from mux_console.api.dependencies import (
    get_current_caller,
    get_mux_client,
    get_settings,
    get_store,
)
from mux_console.api.models import (
    AssetCreation,
    AssetCreationBatch,
    AssetDeleted,
    AssetIdParam,
    AssetList,
    AssetQuery,
    CreateAssetsRequest,
    MetadataUpdateRequest,
    Pagination,
)
from mux_console.api.responses import respond, status_table
from mux_console.api.validation import describe_validation_error, read_json
from mux_console.application.assets import create_asset_from_url, error_message
from mux_console.domain.exceptions import NotFoundError, is_not_found
from mux_console.domain.models import AssetMetadata, CallerIdentity
from mux_console.domain.protocols import AssetMetadataStore, VideoPlatform
from mux_console.shared.config import Settings
from mux_console.shared.result import Err, Ok, Result

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/assets", tags=["Assets"])


class ListAssetsError(str, Enum):
    AUTH_REQUIRED = "AUTH_REQUIRED"
    INVALID_QUERY = "INVALID_QUERY"
    DB_SEARCH_METADATA_FAILED = "DB_SEARCH_METADATA_FAILED"
    MUX_LIST_ASSETS_FAILED = "MUX_LIST_ASSETS_FAILED"


class CreateAssetsError(str, Enum):
    AUTH_REQUIRED = "AUTH_REQUIRED"
    INVALID_JSON = "INVALID_JSON"
    INVALID_INPUT = "INVALID_INPUT"


class GetAssetError(str, Enum):
    AUTH_REQUIRED = "AUTH_REQUIRED"
    INVALID_PARAM = "INVALID_PARAM"
    ASSET_NOT_FOUND = "ASSET_NOT_FOUND"
    MUX_GET_ASSET_FAILED = "MUX_GET_ASSET_FAILED"


class DeleteAssetError(str, Enum):
    AUTH_REQUIRED = "AUTH_REQUIRED"
    INVALID_PARAM = "INVALID_PARAM"
    ASSET_NOT_FOUND = "ASSET_NOT_FOUND"
    MUX_DELETE_ASSET_FAILED = "MUX_DELETE_ASSET_FAILED"
    DB_DELETE_METADATA_FAILED = "DB_DELETE_METADATA_FAILED"


class GetMetadataError(str, Enum):
    AUTH_REQUIRED = "AUTH_REQUIRED"
    INVALID_ASSET_ID = "INVALID_ASSET_ID"
    DB_READ_METADATA_FAILED = "DB_READ_METADATA_FAILED"


class UpdateMetadataError(str, Enum):
    AUTH_REQUIRED = "AUTH_REQUIRED"
    INVALID_ASSET_ID = "INVALID_ASSET_ID"
    INVALID_JSON = "INVALID_JSON"
    INVALID_INPUT = "INVALID_INPUT"
    UPDATE_FAILED = "UPDATE_FAILED"


LIST_ASSETS_STATUS = status_table(
    ListAssetsError,
    {
        ListAssetsError.AUTH_REQUIRED: 401,
        ListAssetsError.INVALID_QUERY: 400,
        ListAssetsError.DB_SEARCH_METADATA_FAILED: 500,
        ListAssetsError.MUX_LIST_ASSETS_FAILED: 502,
    },
)

CREATE_ASSETS_STATUS = status_table(
    CreateAssetsError,
    {
        CreateAssetsError.AUTH_REQUIRED: 401,
        CreateAssetsError.INVALID_JSON: 400,
        CreateAssetsError.INVALID_INPUT: 400,
    },
)

GET_ASSET_STATUS = status_table(
    GetAssetError,
    {
        GetAssetError.AUTH_REQUIRED: 401,
        GetAssetError.INVALID_PARAM: 400,
        GetAssetError.ASSET_NOT_FOUND: 404,
        GetAssetError.MUX_GET_ASSET_FAILED: 502,
    },
)

DELETE_ASSET_STATUS = status_table(
    DeleteAssetError,
    {
        DeleteAssetError.AUTH_REQUIRED: 401,
        DeleteAssetError.INVALID_PARAM: 400,
        DeleteAssetError.ASSET_NOT_FOUND: 404,
        DeleteAssetError.MUX_DELETE_ASSET_FAILED: 502,
        DeleteAssetError.DB_DELETE_METADATA_FAILED: 500,
    },
)

GET_METADATA_STATUS = status_table(
    GetMetadataError,
    {
        GetMetadataError.AUTH_REQUIRED: 401,
        GetMetadataError.INVALID_ASSET_ID: 400,
        GetMetadataError.DB_READ_METADATA_FAILED: 500,
    },
)

UPDATE_METADATA_STATUS = status_table(
    UpdateMetadataError,
    {
        UpdateMetadataError.AUTH_REQUIRED: 401,
        UpdateMetadataError.INVALID_ASSET_ID: 400,
        UpdateMetadataError.INVALID_JSON: 400,
        UpdateMetadataError.INVALID_INPUT: 400,
        UpdateMetadataError.UPDATE_FAILED: 500,
    },
)


def _matches(asset: dict[str, Any], needle: str, metadata_ids: set[str]) -> bool:
    asset_id = str(asset.get("id", ""))
    passthrough = str(asset.get("passthrough") or "")
    return (
        needle in asset_id.lower()
        or needle in passthrough.lower()
        or asset_id in metadata_ids
    )


def _valid_asset_id(asset_id: str) -> bool:
    try:
        AssetIdParam(id=asset_id)
    except ValidationError:
        return False
    return True


# ============================================================================
# Operations
# ============================================================================


async def list_assets(
    caller: CallerIdentity | None,
    query_params: dict[str, str],
    platform: VideoPlatform,
    store: AssetMetadataStore,
) -> Result[AssetList, ListAssetsError]:
    if caller is None:
        return Err(ListAssetsError.AUTH_REQUIRED)

    try:
        query = AssetQuery.model_validate(query_params)
    except ValidationError as e:
        return Err(ListAssetsError.INVALID_QUERY, describe_validation_error(e))

    search = (query.search or "").strip()
    metadata_ids: set[str] = set()
    if search:
        try:
            metadata_ids = set(await store.search_assets_by_metadata(search))
        except Exception as e:
            logger.error(f"Metadata search failed: {e}")
            return Err(
                ListAssetsError.DB_SEARCH_METADATA_FAILED, error_message(e, "Search failed")
            )

    try:
        assets = await platform.list_assets(limit=query.limit, page=query.page)
    except Exception as e:
        logger.error(f"Mux list assets failed: {e}")
        return Err(
            ListAssetsError.MUX_LIST_ASSETS_FAILED, error_message(e, "Failed to fetch assets")
        )

    if search:
        needle = search.lower()
        assets = [asset for asset in assets if _matches(asset, needle, metadata_ids)]

    return Ok(
        AssetList(
            assets=assets,
            pagination=Pagination(
                page=query.page,
                limit=query.limit,
                total=len(assets),
                has_more=len(assets) == query.limit,
            ),
        )
    )


async def create_assets(
    caller: CallerIdentity | None,
    request: Request,
    platform: VideoPlatform,
) -> Result[AssetCreationBatch, CreateAssetsError]:
    """Ingest every URL of the request; per-URL failures are reported in the payload."""
    if caller is None:
        return Err(CreateAssetsError.AUTH_REQUIRED)

    try:
        body = await read_json(request)
    except ValueError:
        return Err(CreateAssetsError.INVALID_JSON, "Request body is not valid JSON")

    try:
        payload = CreateAssetsRequest.model_validate(body)
    except ValidationError as e:
        return Err(CreateAssetsError.INVALID_INPUT, describe_validation_error(e))

    urls = [str(url) for url in payload.urls]
    outcomes = await asyncio.gather(*(create_asset_from_url(platform, url) for url in urls))

    results = []
    for url, outcome in zip(urls, outcomes):
        match outcome:
            case Ok(asset):
                results.append(AssetCreation(url=url, success=True, asset=asset))
            case Err(error):
                results.append(AssetCreation(url=url, success=False, error=error.message))

    created = sum(1 for result in results if result.success)
    logger.info(f"Created {created}/{len(results)} assets from URLs")
    return Ok(AssetCreationBatch(results=results))


async def get_asset(
    caller: CallerIdentity | None,
    asset_id: str,
    platform: VideoPlatform,
) -> Result[dict[str, Any], GetAssetError]:
    if caller is None:
        return Err(GetAssetError.AUTH_REQUIRED)
    if not _valid_asset_id(asset_id):
        return Err(GetAssetError.INVALID_PARAM, "Invalid asset id")

    try:
        return Ok(await platform.get_asset(asset_id))
    except Exception as e:
        if is_not_found(e):
            return Err(GetAssetError.ASSET_NOT_FOUND, "Asset not found")
        logger.error(f"Mux get asset {asset_id} failed: {e}")
        return Err(GetAssetError.MUX_GET_ASSET_FAILED, error_message(e, "Failed to fetch asset"))


async def delete_asset(
    caller: CallerIdentity | None,
    asset_id: str,
    platform: VideoPlatform,
    store: AssetMetadataStore,
) -> Result[AssetDeleted, DeleteAssetError]:
    """Delete the remote asset, then its local metadata (absent metadata is fine)."""
    if caller is None:
        return Err(DeleteAssetError.AUTH_REQUIRED)
    if not _valid_asset_id(asset_id):
        return Err(DeleteAssetError.INVALID_PARAM, "Invalid asset id")

    try:
        await platform.delete_asset(asset_id)
    except Exception as e:
        if is_not_found(e):
            return Err(DeleteAssetError.ASSET_NOT_FOUND, "Asset not found")
        logger.error(f"Mux delete asset {asset_id} failed: {e}")
        return Err(
            DeleteAssetError.MUX_DELETE_ASSET_FAILED, error_message(e, "Failed to delete asset")
        )

    try:
        await store.delete_asset_metadata(asset_id)
    except NotFoundError:
        pass
    except Exception as e:
        logger.error(f"Asset {asset_id} deleted on Mux but metadata removal failed: {e}")
        return Err(
            DeleteAssetError.DB_DELETE_METADATA_FAILED,
            "Asset deleted but its metadata could not be removed: "
            + error_message(e, "storage error"),
        )

    logger.info(f"Deleted asset {asset_id}")
    return Ok(AssetDeleted(asset_id=asset_id))


async def get_metadata(
    caller: CallerIdentity | None,
    asset_id: str,
    store: AssetMetadataStore,
) -> Result[AssetMetadata | None, GetMetadataError]:
    if caller is None:
        return Err(GetMetadataError.AUTH_REQUIRED)
    if not _valid_asset_id(asset_id):
        return Err(GetMetadataError.INVALID_ASSET_ID, "Invalid asset id")

    try:
        return Ok(await store.get_asset_metadata(asset_id))
    except Exception as e:
        logger.error(f"Reading metadata for {asset_id} failed: {e}")
        return Err(GetMetadataError.DB_READ_METADATA_FAILED, error_message(e, "Read failed"))


async def update_metadata(
    caller: CallerIdentity | None,
    asset_id: str,
    request: Request,
    store: AssetMetadataStore,
) -> Result[AssetMetadata, UpdateMetadataError]:
    if caller is None:
        return Err(UpdateMetadataError.AUTH_REQUIRED)
    if not _valid_asset_id(asset_id):
        return Err(UpdateMetadataError.INVALID_ASSET_ID, "Invalid asset id")

    try:
        body = await read_json(request)
    except ValueError:
        return Err(UpdateMetadataError.INVALID_JSON, "Request body is not valid JSON")

    try:
        update = MetadataUpdateRequest.model_validate(body)
    except ValidationError as e:
        return Err(UpdateMetadataError.INVALID_INPUT, describe_validation_error(e))

    fields = update.model_dump(exclude_unset=True, exclude_none=True)
    try:
        return Ok(await store.upsert_asset_metadata(asset_id, **fields))
    except Exception as e:
        logger.error(f"Updating metadata for {asset_id} failed: {e}")
        return Err(UpdateMetadataError.UPDATE_FAILED, error_message(e, "Update failed"))


# ============================================================================
# Endpoints
# ============================================================================


@router.get("", summary="List assets")
async def list_assets_endpoint(
    request: Request,
    caller: CallerIdentity | None = Depends(get_current_caller),
    platform: VideoPlatform = Depends(get_mux_client),
    store: AssetMetadataStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    result = await list_assets(caller, dict(request.query_params), platform, store)
    return respond(result, LIST_ASSETS_STATUS, strict=settings.strict_status_tables)


@router.post("", summary="Create assets from URLs")
async def create_assets_endpoint(
    request: Request,
    caller: CallerIdentity | None = Depends(get_current_caller),
    platform: VideoPlatform = Depends(get_mux_client),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    result = await create_assets(caller, request, platform)
    return respond(result, CREATE_ASSETS_STATUS, strict=settings.strict_status_tables)


@router.get("/{asset_id}", summary="Get an asset")
async def get_asset_endpoint(
    asset_id: str,
    caller: CallerIdentity | None = Depends(get_current_caller),
    platform: VideoPlatform = Depends(get_mux_client),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    result = await get_asset(caller, asset_id, platform)
    return respond(result, GET_ASSET_STATUS, strict=settings.strict_status_tables)


@router.delete("/{asset_id}", summary="Delete an asset and its metadata")
async def delete_asset_endpoint(
    asset_id: str,
    caller: CallerIdentity | None = Depends(get_current_caller),
    platform: VideoPlatform = Depends(get_mux_client),
    store: AssetMetadataStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    result = await delete_asset(caller, asset_id, platform, store)
    return respond(result, DELETE_ASSET_STATUS, strict=settings.strict_status_tables)


@router.get("/{asset_id}/metadata", summary="Get local asset metadata")
async def get_metadata_endpoint(
    asset_id: str,
    caller: CallerIdentity | None = Depends(get_current_caller),
    store: AssetMetadataStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    result = await get_metadata(caller, asset_id, store)
    return respond(result, GET_METADATA_STATUS, strict=settings.strict_status_tables)


@router.put("/{asset_id}/metadata", summary="Update local asset metadata")
async def update_metadata_endpoint(
    asset_id: str,
    request: Request,
    caller: CallerIdentity | None = Depends(get_current_caller),
    store: AssetMetadataStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    result = await update_metadata(caller, asset_id, request, store)
    return respond(result, UPDATE_METADATA_STATUS, strict=settings.strict_status_tables)
