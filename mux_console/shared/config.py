"""Configuration management using Pydantic Settings.

Loads configuration from environment variables with validation.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    api_title: str = Field(default="Mux Console", description="API title")
    api_version: str = Field(default="0.1.0", description="API version")
    api_description: str = Field(
        default="Admin API for managing video assets hosted on Mux",
        description="API description",
    )

    # Mux Configuration
    mux_token_id: str = Field(default="", description="Mux access token id")
    mux_token_secret: str = Field(default="", description="Mux access token secret")
    mux_base_url: str = Field(default="https://api.mux.com", description="Mux API base URL")
    mux_timeout: float = Field(
        default=30.0, gt=0.0, le=300.0, description="Timeout for Mux API calls in seconds"
    )
    mux_max_retries: int = Field(
        default=2,
        ge=0,
        le=10,
        description="Retries for idempotent Mux reads on transport errors (0 = no retry)",
    )

    # Rate Limiting
    rate_limit_capacity: int = Field(
        default=20, ge=1, le=1000, description="Mux calls permitted per rate-limit interval"
    )
    rate_limit_interval_seconds: float = Field(
        default=1.0, gt=0.0, le=60.0, description="Length of the rate-limit window in seconds"
    )
    rate_limit_max_pending: int | None = Field(
        default=None,
        ge=1,
        description="Maximum queued Mux calls before rejecting (None = unbounded)",
    )

    # Authentication
    admin_email: str = Field(default="", description="Admin login email")
    admin_password_hash: str = Field(
        default="", description="Admin password hash (pbkdf2_sha256$iterations$salt$hash)"
    )
    session_cookie_name: str = Field(
        default="mux-console-session", description="Name of the session cookie"
    )
    session_ttl_hours: int = Field(
        default=168, ge=1, le=24 * 90, description="Session lifetime in hours (default: 1 week)"
    )
    session_cookie_secure: bool = Field(
        default=False, description="Only send the session cookie over HTTPS"
    )

    # Housekeeping
    cleanup_interval_seconds: float = Field(
        default=300.0,
        gt=0,
        description="Seconds between sweeps of expired upload tokens and sessions",
    )
    enforced_asset_cache_size: int = Field(
        default=10_000,
        ge=1,
        description="How many restricted asset ids are remembered before the oldest is forgotten",
    )

    # Storage
    settings_file: str = Field(
        default="./.data/settings.json",
        description="JSON file holding playback restriction settings",
    )

    # Direct uploads
    app_url: str = Field(
        default="http://localhost:3000",
        description="Fallback CORS origin for direct uploads when the request has no Origin",
    )

    # Error mapping
    strict_status_tables: bool = Field(
        default=False,
        description="Log an error whenever an error code falls through to the default status",
    )

    # CORS Configuration
    cors_allowed_origins: list[str] = Field(default=["*"], description="Allowed CORS origins")

    # Logging
    log_level: str = Field(
        default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )
