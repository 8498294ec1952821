"""
Admin password hashing and credential checks.

Hashes use PBKDF2-HMAC-SHA256 and are stored as
``pbkdf2_sha256$<iterations>$<salt hex>$<hash hex>``.
"""

import hashlib
import hmac
import logging
import re
import secrets
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

ALGORITHM = "pbkdf2_sha256"
DEFAULT_ITERATIONS = 600_000
MIN_PASSWORD_LENGTH = 8

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass(frozen=True)
class CredentialCheck:
    """Outcome of credential format validation."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class AuthOutcome:
    """Outcome of an admin login attempt; ``configured`` is False when no admin is set up."""

    success: bool
    configured: bool = True
    error: str | None = None


def hash_password(password: str, iterations: int = DEFAULT_ITERATIONS) -> str:
    salt = secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return f"{ALGORITHM}${iterations}${salt.hex()}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    """Check ``password`` against an encoded hash. Malformed hashes never verify."""
    try:
        algorithm, iterations, salt_hex, hash_hex = encoded.split("$")
        if algorithm != ALGORITHM:
            return False
        salt = bytes.fromhex(salt_hex)
        expected = bytes.fromhex(hash_hex)
        rounds = int(iterations)
    except ValueError:
        logger.error("Password hash is malformed")
        return False

    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, rounds)
    return hmac.compare_digest(digest, expected)


def validate_credentials(email: str | None, password: str | None) -> CredentialCheck:
    errors: list[str] = []

    if not email or not email.strip():
        errors.append("Email is required")
    elif not _EMAIL_PATTERN.match(email):
        errors.append("Invalid email format")

    if not password or not password.strip():
        errors.append("Password is required")
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    return CredentialCheck(is_valid=not errors, errors=errors)


def authenticate_admin(
    email: str, password: str, admin_email: str, admin_password_hash: str
) -> AuthOutcome:
    """Check a login attempt against the configured admin account."""
    if not admin_email or not admin_password_hash:
        return AuthOutcome(
            success=False, configured=False, error="Admin credentials not configured"
        )

    email_matches = hmac.compare_digest(email.encode("utf-8"), admin_email.encode("utf-8"))
    password_matches = verify_password(password, admin_password_hash)
    if not (email_matches and password_matches):
        return AuthOutcome(success=False, error="Invalid credentials")

    return AuthOutcome(success=True)
