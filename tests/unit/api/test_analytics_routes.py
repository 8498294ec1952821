"""Unit tests for analytics routes."""

import asyncio

from mux_console.domain.exceptions import MuxApiError


def _breakdown(metric, group_by, **kwargs):
    rows = {
        "country": [{"field": "US", "views": 7}, {"field": "DE", "views": 3}],
        "device_category": [{"field": "desktop", "views": 6}, {"field": "phone", "views": 4}],
        "asset_id": [{"field": "a1", "views": 8}, {"field": "a2", "views": 2}],
    }
    return rows[group_by]


class TestAnalyticsSummary:
    def test_summary(self, client, mock_platform, store):
        asyncio.run(store.upsert_asset_metadata("a1", title="Launch video"))
        mock_platform.get_overall_values.return_value = {"total_views": 10}
        mock_platform.get_metric_breakdown.side_effect = _breakdown

        response = client.get("/api/analytics/summary", params={"period": 7})

        assert response.status_code == 200
        assert response.headers["cache-control"] == "private, max-age=30"
        data = response.json()["data"]
        assert data["overview"] == {"total_views": 10}
        assert data["top_videos"] == [
            {"id": "a1", "title": "Launch video", "views": 8},
            {"id": "a2", "title": "a2", "views": 2},
        ]
        assert data["device_breakdown"][0] == {"device": "desktop", "views": 6}
        assert data["geographic_data"][1] == {"country": "DE", "views": 3}
        for call in mock_platform.get_metric_breakdown.await_args_list:
            assert call.kwargs["timeframe"] == ["7:days"]

    def test_data_api_failure(self, client, mock_platform):
        mock_platform.get_metric_breakdown.side_effect = MuxApiError(500, "Data API down")

        response = client.get("/api/analytics/summary")

        assert response.status_code == 502
        assert response.json()["error"]["code"] == "MUX_DATA_FAILED"

    def test_invalid_period(self, client, mock_platform):
        response = client.get("/api/analytics/summary", params={"period": 0})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_QUERY"
        mock_platform.get_overall_values.assert_not_awaited()

    def test_requires_login(self, anonymous_client):
        assert anonymous_client.get("/api/analytics/summary").status_code == 401


class TestAssetViews:
    def test_views(self, client, mock_platform):
        mock_platform.list_video_views.return_value = [{"id": "view1"}]

        response = client.get("/api/analytics/assets/asset123", params={"period": 3})

        assert response.json() == {"ok": True, "data": [{"id": "view1"}]}
        mock_platform.list_video_views.assert_awaited_once_with(
            timeframe=["3:days"], filters=["asset_id:asset123"]
        )

    def test_default_period(self, client, mock_platform):
        client.get("/api/analytics/assets/asset123")

        assert mock_platform.list_video_views.await_args.kwargs["timeframe"] == ["7:days"]

    def test_invalid_asset_id(self, client, mock_platform):
        response = client.get("/api/analytics/assets/bad$id")

        assert response.json()["error"]["code"] == "INVALID_PARAM"
        mock_platform.list_video_views.assert_not_awaited()

    def test_failure(self, client, mock_platform):
        mock_platform.list_video_views.side_effect = MuxApiError(500, "down")

        response = client.get("/api/analytics/assets/asset123")

        assert response.status_code == 502
        assert response.json()["error"]["code"] == "MUX_DATA_FAILED"
