"""Typed HTTP fetch for consumers of the console API.

``safe_fetch`` turns a raw HTTP exchange into a ``ClientResult`` so calling
code never deals with transport details. Classification runs in a fixed
order: network failure, unparseable body, envelope shape mismatch, API-level
error, HTTP-level error, success. A well-formed error envelope is therefore
always reported as an API error, whatever the HTTP status.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, TypeVar, Union
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from mux_console.api.envelope import ApiError, api_result_adapter

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}


# ============================================================================
# Fetch errors
# ============================================================================


@dataclass(frozen=True)
class NetworkError:
    """The request never produced a response (DNS, refused or reset connection, timeout)."""

    message: str

    type: ClassVar[str] = "NETWORK_ERROR"


@dataclass(frozen=True)
class ValidationFailure:
    """The body was JSON but not a valid envelope for the expected payload."""

    message: str

    type: ClassVar[str] = "VALIDATION_ERROR"


@dataclass(frozen=True)
class ApiFailure:
    """The server answered with an error envelope."""

    code: str
    message: str

    type: ClassVar[str] = "API_ERROR"


@dataclass(frozen=True)
class HttpFailure:
    """The body could not be parsed, or a success envelope came with an error status."""

    status: int
    message: str

    type: ClassVar[str] = "HTTP_ERROR"


FetchError = Union[NetworkError, ValidationFailure, ApiFailure, HttpFailure]


@dataclass(frozen=True)
class ClientOk(Generic[T]):
    data: T

    ok: ClassVar[bool] = True


@dataclass(frozen=True)
class ClientErr:
    error: FetchError

    ok: ClassVar[bool] = False


ClientResult = Union[ClientOk[T], ClientErr]


class ClientFetchError(Exception):
    """Exception form of a failed ``ClientResult``."""

    def __init__(self, error: FetchError, message: str) -> None:
        super().__init__(message)
        self.error = error


# ============================================================================
# Fetch
# ============================================================================


async def safe_fetch(
    http: httpx.AsyncClient,
    url: str,
    *,
    response_type: Any,
    method: str = "GET",
    json: Any = None,
    headers: Mapping[str, str] | None = None,
    params: Mapping[str, Any] | None = None,
) -> ClientResult[Any]:
    """Issue a request and classify the outcome.

    Args:
        http: Client the request is sent with (carries base URL and cookies)
        url: Request URL or path
        response_type: Type of the ``data`` member of a success envelope
        method: HTTP method
        json: JSON request body
        headers: Extra headers, overriding the JSON defaults
        params: Query parameters

    Returns:
        ClientOk with the validated payload, or ClientErr with a FetchError
    """
    try:
        response = await http.request(
            method,
            url,
            json=json,
            headers={**DEFAULT_HEADERS, **(headers or {})},
            params=params,
        )
    except httpx.RequestError as e:
        logger.warning(f"{method} {url} failed before a response: {e}")
        return ClientErr(NetworkError(str(e) or "Network request failed"))

    try:
        body = response.json()
    except ValueError:
        return ClientErr(
            HttpFailure(
                response.status_code, f"HTTP {response.status_code}: Invalid JSON response"
            )
        )

    try:
        envelope = api_result_adapter(response_type).validate_python(body)
    except ValidationError as e:
        return ClientErr(ValidationFailure(f"Invalid response format: {e}"))

    if isinstance(envelope, ApiError):
        return ClientErr(ApiFailure(envelope.error.code, envelope.error.message))

    if response.is_error:
        return ClientErr(
            HttpFailure(response.status_code, f"HTTP {response.status_code}: Request failed")
        )

    return ClientOk(envelope.data)


def build_search_params(params: Mapping[str, str | int | bool | None]) -> str:
    """Encode query parameters, skipping ``None`` values."""
    pairs = []
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        pairs.append((key, str(value)))
    return urlencode(pairs)


def client_result_to_error(result: ClientResult[Any]) -> ClientFetchError:
    """Convert a failed result into an exception for callers that raise.

    Raises:
        ValueError: If the result is a success
    """
    if isinstance(result, ClientOk):
        raise ValueError("Cannot convert successful result to error")

    error = result.error
    match error:
        case ApiFailure(code=code, message=message):
            return ClientFetchError(error, f"{code}: {message}")
        case HttpFailure(status=status, message=message):
            return ClientFetchError(error, f"HTTP {status}: {message}")
        case ValidationFailure(message=message):
            return ClientFetchError(error, f"Validation Error: {message}")
        case NetworkError(message=message):
            return ClientFetchError(error, f"Network Error: {message}")
    raise TypeError(f"Unknown fetch error: {error!r}")
