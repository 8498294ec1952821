"""Result-to-HTTP mapping.

``result_to_response`` is pure: Ok always maps to 200, Err maps to the
endpoint's table entry for its code or to 500 when the code is missing. It
neither logs nor rewrites payloads.

Status tables are built once per endpoint with ``status_table``, which refuses
to build a table that leaves any member of the endpoint's error-code enum
unmapped.
"""

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from mux_console.shared.result import Err, Ok, Result

logger = logging.getLogger(__name__)

DEFAULT_ERROR_STATUS = 500


class UnmappedErrorCodeError(Exception):
    """Raised when a status table omits codes of its error-code enum."""

    def __init__(self, enum_cls: type[Enum], missing: list[str]):
        super().__init__(f"{enum_cls.__name__} has no HTTP status for: {', '.join(missing)}")
        self.enum_cls = enum_cls
        self.missing = missing


def status_table(enum_cls: type[Enum], mapping: Mapping[Enum | str, int]) -> dict[str, int]:
    """Build a code→status table covering every member of ``enum_cls``.

    Raises:
        UnmappedErrorCodeError: If any member has no status
    """
    table = {
        str(code.value if isinstance(code, Enum) else code): status
        for code, status in mapping.items()
    }
    missing = [member.value for member in enum_cls if member.value not in table]
    if missing:
        raise UnmappedErrorCodeError(enum_cls, missing)
    return table


def result_to_response(
    result: Result[Any, Any],
    table: Mapping[str, int],
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    """Translate a Result into an enveloped JSON response."""
    match result:
        case Ok(data):
            return JSONResponse(
                content={"ok": True, "data": jsonable_encoder(data)},
                status_code=200,
                headers=dict(headers) if headers else None,
            )
        case Err(error):
            return JSONResponse(
                content={"ok": False, "error": {"code": error.code, "message": error.message}},
                status_code=table.get(error.code, DEFAULT_ERROR_STATUS),
                headers=dict(headers) if headers else None,
            )
    raise TypeError(f"Expected Ok or Err, got {type(result).__name__}")


def respond(
    result: Result[Any, Any],
    table: Mapping[str, int],
    headers: Mapping[str, str] | None = None,
    *,
    strict: bool = False,
) -> JSONResponse:
    """``result_to_response`` plus logging of codes that fell back to the default status."""
    if strict and isinstance(result, Err) and result.error.code not in table:
        logger.error(
            f"Error code {result.error.code} has no status mapping; "
            f"responding {DEFAULT_ERROR_STATUS}"
        )
    return result_to_response(result, table, headers)
