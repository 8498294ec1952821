"""Admin authentication: password hashes and session resolution."""

from mux_console.infrastructure.auth.passwords import (
    authenticate_admin,
    hash_password,
    validate_credentials,
    verify_password,
)
from mux_console.infrastructure.auth.sessions import SessionAuthorizer

__all__ = [
    "SessionAuthorizer",
    "authenticate_admin",
    "hash_password",
    "validate_credentials",
    "verify_password",
]
