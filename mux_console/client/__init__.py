"""Typed client for the console API."""

from mux_console.client.api import AdminApiClient
from mux_console.client.fetch import (
    ApiFailure,
    ClientErr,
    ClientFetchError,
    ClientOk,
    ClientResult,
    FetchError,
    HttpFailure,
    NetworkError,
    ValidationFailure,
    build_search_params,
    client_result_to_error,
    safe_fetch,
)

__all__ = [
    "AdminApiClient",
    "ApiFailure",
    "ClientErr",
    "ClientFetchError",
    "ClientOk",
    "ClientResult",
    "FetchError",
    "HttpFailure",
    "NetworkError",
    "ValidationFailure",
    "build_search_params",
    "client_result_to_error",
    "safe_fetch",
]
