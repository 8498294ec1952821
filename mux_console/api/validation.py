"""Helpers for validating raw request input inside handlers."""

import json
from typing import Any

from fastapi import Request
from pydantic import ValidationError


async def read_json(request: Request) -> Any:
    """Parse the request body as JSON.

    Raises:
        ValueError: If the body is empty or not valid JSON
    """
    raw = await request.body()
    return json.loads(raw)


def describe_validation_error(error: ValidationError) -> str:
    """One-line summary of a pydantic validation error."""
    parts = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail.get("loc", ()))
        message = detail.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid input"

