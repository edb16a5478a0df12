"""
Shared pytest fixtures for all tests.

This module provides common fixtures including:
- A fixed clock
- Sample trees, zones and season records
- Mock API client
- FastAPI test client
"""
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient

from app.main import app
from app.api.rate_limit import limiter
from app.domain.models import GeoPoint, SeasonRecord, TreeData, ZoneData
from app.infrastructure.external_api_client import FarmRecordsClient


# ============================================================
# Clock Fixtures
# ============================================================

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    """Fixed current time used across tests."""
    return NOW


# ============================================================
# Sample Data Fixtures
# ============================================================

@pytest.fixture
def sample_tree() -> TreeData:
    """A tree with a stored position and a running tally."""
    return TreeData(
        id="tree_42",
        farmId="farm_1",
        latitude=10.0,
        longitude=106.0,
        manualFruitCount=37,
        gpsAccuracy=4.5,
    )


@pytest.fixture
def unplaced_tree() -> TreeData:
    """A tree that has never had a position."""
    return TreeData(id="tree_7", farmId="farm_1", manualFruitCount=3)


@pytest.fixture
def sample_season(now) -> SeasonRecord:
    """Season that closed 40 days ago, with legacy breakdown shapes."""
    return SeasonRecord(
        id="season_2026",
        name="Mùa 2026",
        endDate=now - timedelta(days=40),
        perTreeBreakdown={
            "tree_42": {"numberOfFrust": "120"},
            "tree_7": 15,
        },
    )


@pytest.fixture
def square_boundary() -> list[GeoPoint]:
    """0.001° square at the equator."""
    return [
        GeoPoint(latitude=0.0, longitude=0.0),
        GeoPoint(latitude=0.0, longitude=0.001),
        GeoPoint(latitude=0.001, longitude=0.001),
        GeoPoint(latitude=0.001, longitude=0.0),
    ]


@pytest.fixture
def sample_zone(square_boundary) -> ZoneData:
    """Zone with a usable boundary."""
    return ZoneData(id="zone_a", name="Khu A", boundaries=square_boundary, area=5000.0)


# ============================================================
# Mock API Client Fixtures
# ============================================================

@pytest.fixture
def mock_api_client(sample_tree, sample_season, sample_zone):
    """Create a mock farm-records API client."""
    mock_client = AsyncMock(spec=FarmRecordsClient)
    mock_client.get_tree.return_value = sample_tree
    mock_client.get_latest_season.return_value = sample_season
    mock_client.get_zone.return_value = sample_zone
    return mock_client


# ============================================================
# FastAPI Test Client Fixtures
# ============================================================

@pytest.fixture(autouse=True)
def reset_rate_limiter():
    """Start every test with an empty rate-limit window."""
    limiter.reset()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def test_client() -> TestClient:
    """Create a synchronous test client for FastAPI."""
    return TestClient(app)
