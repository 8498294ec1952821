"""Fixtures for route tests.

Every collaborator of the routes is replaced through
``app.dependency_overrides``; overrides are cleared after each test.
"""

import pytest
from fastapi.testclient import TestClient

from mux_console.api.dependencies import (
    get_current_caller,
    get_enforced_asset_ids,
    get_mux_client,
    get_session_store,
    get_settings_store,
    get_store,
)
from mux_console.infrastructure.storage.memory import RecentIdSet


@pytest.fixture
def enforced_asset_ids() -> RecentIdSet:
    return RecentIdSet(max_size=100)


@pytest.fixture
def app(mock_platform, store, settings_store, session_store, enforced_asset_ids):
    """Application with in-memory collaborators and no logged-in caller."""
    from mux_console.main import app

    app.dependency_overrides[get_mux_client] = lambda: mock_platform
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_settings_store] = lambda: settings_store
    app.dependency_overrides[get_session_store] = lambda: session_store
    app.dependency_overrides[get_enforced_asset_ids] = lambda: enforced_asset_ids
    app.dependency_overrides[get_current_caller] = lambda: None

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def client(app, caller) -> TestClient:
    """Client whose requests are made by the logged-in admin."""
    app.dependency_overrides[get_current_caller] = lambda: caller
    return TestClient(app)
