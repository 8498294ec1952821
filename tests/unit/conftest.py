"""Test configuration and fixtures.

Provides:
- Mocked Mux platform and in-memory stores
- A logged-in caller
- Sample Mux payloads
"""

import sys
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from mux_console.domain.models import CallerIdentity
from mux_console.infrastructure.storage.memory import InMemorySessionStore, InMemoryStore
from mux_console.infrastructure.storage.settings_file import JsonSettingsStore

# Add project root to Python path for imports
project_root = Path(__file__).parent.parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


# ============================================================================
# Mock Collaborators
# ============================================================================


@pytest.fixture
def mock_platform() -> AsyncMock:
    """Create mock video platform with empty default answers."""
    mock = AsyncMock()
    mock.list_assets = AsyncMock(return_value=[])
    mock.list_video_views = AsyncMock(return_value=[])
    mock.get_metric_breakdown = AsyncMock(return_value=[])
    mock.get_overall_values = AsyncMock(return_value={"total_views": 0})
    return mock


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def settings_store(tmp_path) -> JsonSettingsStore:
    return JsonSettingsStore(tmp_path / "settings.json")


@pytest.fixture
def caller() -> CallerIdentity:
    """Logged-in admin."""
    return CallerIdentity(user_id="admin", email="admin@example.com")


# ============================================================================
# Sample Data Generators
# ============================================================================


@pytest.fixture
def sample_asset() -> dict:
    """Sample ready Mux asset."""
    return {
        "id": "asset123",
        "status": "ready",
        "duration": 125.4,
        "aspect_ratio": "16:9",
        "created_at": "1700000000",
        "playback_ids": [{"id": "play123", "policy": "public"}],
        "passthrough": "Launch video",
    }


@pytest.fixture
def sample_upload() -> dict:
    """Sample waiting Mux direct upload."""
    return {
        "id": "upload123",
        "url": "https://storage.googleapis.com/video-storage/upload123",
        "status": "waiting",
        "timeout": 3600,
        "cors_origin": "http://localhost:3000",
    }
