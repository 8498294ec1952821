"""Wire envelope shared by every API response.

Success: ``{"ok": true, "data": ...}``
Failure: ``{"ok": false, "error": {"code": "...", "message": "..."}}``

``api_result_adapter(SomeModel)`` builds the single generic envelope
validator for a given payload shape; the browser-side client uses it to
validate responses.
"""

from functools import lru_cache
from typing import Annotated, Any, Generic, Literal, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

T = TypeVar("T")


class ApiOk(BaseModel, Generic[T]):
    """Successful response envelope."""

    ok: Literal[True]
    data: T


class ApiErrorBody(BaseModel):
    """Machine-readable error code plus human-readable message."""

    code: str = Field(description="Stable error code, e.g. ASSET_NOT_FOUND")
    message: str = Field(description="Human-readable description")

    model_config = ConfigDict(frozen=True)


class ApiError(BaseModel):
    """Failure response envelope."""

    ok: Literal[False]
    error: ApiErrorBody


@lru_cache(maxsize=None)
def api_result_adapter(data_type: Any) -> TypeAdapter:
    """Envelope validator for responses whose success payload is ``data_type``."""
    return TypeAdapter(Annotated[Union[ApiOk[data_type], ApiError], Field(discriminator="ok")])
