"""Result type for functional error handling.

This module implements a Rust-style Result type that makes error handling
explicit in type signatures without relying on exceptions for control flow.

Errors carry a machine-readable code drawn from a closed set (usually a
``str``-valued Enum) plus a human-readable message. When no message is
supplied the message is the code itself.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Generic, NoReturn, TypeVar, Union

T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error code type
U = TypeVar("U")  # Map target type


def code_value(code: Any) -> str:
    """Return the plain string form of an error code (Enum members unwrap to their value)."""
    if isinstance(code, Enum):
        return str(code.value)
    return str(code)


@dataclass(frozen=True)
class ErrorInfo(Generic[E]):
    """Typed error payload: a closed-set code plus a message."""

    code: str
    message: str


class ResultError(Exception):
    """Raised when unwrapping an Err."""

    def __init__(self, error: ErrorInfo) -> None:
        super().__init__(f"[{error.code}] {error.message}")
        self.error = error


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful result containing data."""

    data: T

    ok: ClassVar[bool] = True

    def is_ok(self) -> bool:
        """Check if this is a success result."""
        return True

    def is_err(self) -> bool:
        """Check if this is an error result."""
        return False

    def unwrap(self) -> T:
        """Get the data (safe because this is Ok)."""
        return self.data

    def unwrap_or(self, default: T) -> T:
        """Get the data or default (returns data because this is Ok)."""
        return self.data

    def map(self, func: Callable[[T], U]) -> "Ok[U]":
        """Transform the success data."""
        return Ok(func(self.data))

    def __repr__(self) -> str:
        return f"Ok({self.data!r})"


@dataclass(frozen=True, init=False)
class Err(Generic[E]):
    """Error result carrying a typed code and a message.

    ``Err(code)`` uses the code verbatim as the message.
    """

    error: ErrorInfo[E]

    ok: ClassVar[bool] = False

    def __init__(self, code: E, message: str | None = None) -> None:
        value = code_value(code)
        object.__setattr__(
            self, "error", ErrorInfo(code=value, message=value if message is None else message)
        )

    def is_ok(self) -> bool:
        """Check if this is a success result."""
        return False

    def is_err(self) -> bool:
        """Check if this is an error result."""
        return True

    def unwrap(self) -> NoReturn:
        """Get the data (raises because this is Err)."""
        raise ResultError(self.error)

    def unwrap_or(self, default: T) -> T:
        """Get the data or default (returns default because this is Err)."""
        return default

    def map(self, func: Callable[[Any], U]) -> "Err[E]":
        """Transform the success data (does nothing for Err)."""
        return self

    def __repr__(self) -> str:
        return f"Err({self.error.code!r}, {self.error.message!r})"


# Type alias for clearer function signatures
Result = Union[Ok[T], Err[E]]
