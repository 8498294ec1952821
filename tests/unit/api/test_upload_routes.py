"""Unit tests for direct upload routes."""

import asyncio

from mux_console.domain.exceptions import MuxApiError
from mux_console.domain.models import PlaybackRestrictionSettings


class TestCreateDirectUpload:
    def test_records_token(self, client, mock_platform, store, sample_upload):
        mock_platform.create_direct_upload.return_value = sample_upload

        response = client.post("/api/upload/direct", headers={"Origin": "https://admin.example"})

        assert response.status_code == 200
        assert response.json()["data"] == {
            "id": "upload123",
            "url": sample_upload["url"],
            "status": "waiting",
        }
        mock_platform.create_direct_upload.assert_awaited_once_with(
            cors_origin="https://admin.example",
            new_asset_settings={"playback_policy": ["public"]},
        )
        tokens = asyncio.run(store.get_upload_tokens())
        assert [t.token for t in tokens] == ["upload123"]
        assert tokens[0].used is False

    def test_origin_defaults_to_app_url(self, client, mock_platform, sample_upload):
        mock_platform.create_direct_upload.return_value = sample_upload

        client.post("/api/upload/direct")

        kwargs = mock_platform.create_direct_upload.await_args.kwargs
        assert kwargs["cors_origin"] == "http://localhost:3000"

    def test_mux_failure(self, client, mock_platform, store):
        mock_platform.create_direct_upload.side_effect = MuxApiError(500, "boom")

        response = client.post("/api/upload/direct")

        assert response.status_code == 502
        assert response.json()["error"]["code"] == "MUX_CREATE_DIRECT_UPLOAD_FAILED"
        assert asyncio.run(store.get_upload_tokens()) == []

    def test_malformed_mux_upload(self, client, mock_platform, store, sample_upload):
        mock_platform.create_direct_upload.return_value = {
            k: v for k, v in sample_upload.items() if k != "url"
        }

        response = client.post("/api/upload/direct")

        assert response.status_code == 502
        assert response.json()["error"] == {
            "code": "MUX_CREATE_DIRECT_UPLOAD_FAILED",
            "message": "Mux returned a malformed direct upload",
        }
        assert asyncio.run(store.get_upload_tokens()) == []

    def test_requires_login(self, anonymous_client, mock_platform):
        response = anonymous_client.post("/api/upload/direct")

        assert response.status_code == 401
        mock_platform.create_direct_upload.assert_not_awaited()


class TestPollDirectUpload:
    def test_missing_id(self, client, mock_platform):
        response = client.get("/api/upload/direct")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_QUERY"
        mock_platform.get_direct_upload.assert_not_awaited()

    def test_waiting_upload_is_cacheable(self, client, mock_platform, sample_upload):
        mock_platform.get_direct_upload.return_value = sample_upload

        response = client.get("/api/upload/direct", params={"id": "upload123"})

        assert response.status_code == 200
        assert response.json()["data"] == sample_upload
        assert response.headers["cache-control"] == "private, max-age=3"
        mock_platform.create_playback_id.assert_not_awaited()

    def test_not_found(self, client, mock_platform):
        mock_platform.get_direct_upload.side_effect = MuxApiError(404, "Not found")

        response = client.get("/api/upload/direct", params={"id": "gone"})

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "UPLOAD_NOT_FOUND"

    def test_completed_upload_marks_token_and_applies_restriction_once(
        self, client, mock_platform, store, settings_store, enforced_asset_ids, sample_upload
    ):
        asyncio.run(
            settings_store.set_playback_restriction(
                PlaybackRestrictionSettings(
                    enabled=True, allowed_domains=["example.com"], restriction_id="r1"
                )
            )
        )
        mock_platform.create_direct_upload.return_value = sample_upload
        client.post("/api/upload/direct")
        mock_platform.get_direct_upload.return_value = {
            **sample_upload,
            "status": "asset_created",
            "asset_id": "asset123",
        }
        mock_platform.create_playback_id.return_value = {"id": "signed1", "policy": "signed"}

        first = client.get("/api/upload/direct", params={"id": "upload123"})
        second = client.get("/api/upload/direct", params={"id": "upload123"})

        assert first.status_code == 200
        assert second.status_code == 200
        mock_platform.create_playback_id.assert_awaited_once_with("asset123", policy="signed")
        assert list(enforced_asset_ids) == ["asset123"]
        token = asyncio.run(store.get_upload_tokens())[0]
        assert token.used is True

    def test_restriction_failure_does_not_fail_poll(
        self, client, mock_platform, settings_store, enforced_asset_ids, sample_upload
    ):
        asyncio.run(
            settings_store.set_playback_restriction(
                PlaybackRestrictionSettings(enabled=True, restriction_id="r1")
            )
        )
        mock_platform.get_direct_upload.return_value = {
            **sample_upload,
            "status": "asset_created",
            "asset_id": "asset123",
        }
        mock_platform.create_playback_id.side_effect = MuxApiError(500, "boom")

        response = client.get("/api/upload/direct", params={"id": "upload123"})

        assert response.status_code == 200
        assert len(enforced_asset_ids) == 0

    def test_disabled_restriction_is_not_applied(self, client, mock_platform, sample_upload):
        mock_platform.get_direct_upload.return_value = {
            **sample_upload,
            "status": "asset_created",
            "asset_id": "asset123",
        }

        client.get("/api/upload/direct", params={"id": "upload123"})

        mock_platform.create_playback_id.assert_not_awaited()
