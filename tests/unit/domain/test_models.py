"""Unit tests for domain models, status predicates and exceptions."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from mux_console.domain.exceptions import (
    MuxApiError,
    NotFoundError,
    RateLimitQueueFullError,
    StorageError,
    is_not_found,
    status_code_of,
)
from mux_console.domain.models import (
    CallerIdentity,
    DailyUsage,
    PlaybackRestrictionSettings,
    is_asset_errored,
    is_asset_preparing,
    is_asset_ready,
    is_upload_complete,
    is_upload_errored,
    is_upload_waiting,
)


class TestStatusPredicates:
    @pytest.mark.parametrize(
        ("status", "ready", "errored", "preparing"),
        [
            ("ready", True, False, False),
            ("errored", False, True, False),
            ("preparing", False, False, True),
            (None, False, False, False),
        ],
    )
    def test_asset(self, status, ready, errored, preparing):
        asset = {"id": "a1", "status": status}

        assert is_asset_ready(asset) is ready
        assert is_asset_errored(asset) is errored
        assert is_asset_preparing(asset) is preparing

    def test_upload(self):
        assert is_upload_complete({"status": "asset_created"})
        assert is_upload_errored({"status": "errored"})
        assert is_upload_waiting({"status": "waiting"})
        assert not is_upload_complete({"status": "waiting"})
        assert not is_upload_waiting({})


class TestModels:
    def test_caller_is_frozen(self):
        caller = CallerIdentity(user_id="admin", email="admin@example.com")

        with pytest.raises(ValidationError):
            caller.email = "other@example.com"

    def test_playback_restriction_defaults(self):
        settings = PlaybackRestrictionSettings()

        assert settings.enabled is False
        assert settings.allowed_domains == []
        assert settings.allow_no_referrer is False
        assert settings.allow_no_user_agent is True
        assert settings.allow_high_risk_user_agent is True
        assert settings.restriction_id is None

    def test_daily_usage_rejects_negative_values(self):
        with pytest.raises(ValidationError):
            DailyUsage(day=datetime.now(timezone.utc).date(), streamed_minutes=-1)


class TestExceptions:
    def test_mux_api_error(self):
        error = MuxApiError(404, "Not found", body={"error": {}})

        assert error.status_code == 404
        assert error.body == {"error": {}}
        assert str(error) == "Not found (status=404)"

    def test_queue_full_error(self):
        assert RateLimitQueueFullError(3).max_pending == 3

    def test_status_code_of(self):
        assert status_code_of(MuxApiError(502, "bad gateway")) == 502
        assert status_code_of(type("E", (Exception,), {"status": "404"})()) == 404
        assert status_code_of(ValueError("plain")) is None

    def test_is_not_found(self):
        assert is_not_found(MuxApiError(404, "missing"))
        assert is_not_found(NotFoundError("missing"))
        assert not is_not_found(StorageError("disk"))
        assert not is_not_found(MuxApiError(500, "boom"))
