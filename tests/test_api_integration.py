"""
Integration tests for API endpoints.

Tests the full HTTP request/response cycle with mocked farm-records data
and a fixed clock.
"""
import httpx
import pytest
import respx
from datetime import timedelta

from app.main import app
from app.api.dependencies import get_clock
from app.domain.models import ZoneData
from app.infrastructure.external_api_client import (
    ExternalAPIError,
    FarmRecordsClient,
    get_api_client,
)


RECORDS_URL = "https://records.test/api"


@pytest.fixture
def wired_client(test_client, mock_api_client, now):
    """Test client with the mock API client and fixed clock injected."""
    app.dependency_overrides[get_api_client] = lambda: mock_api_client
    app.dependency_overrides[get_clock] = lambda: (lambda: now)
    return test_client


@pytest.fixture
def store_client(test_client, now):
    """Test client reading through a real API client from a mocked store."""
    records = FarmRecordsClient(base_url=RECORDS_URL)
    app.dependency_overrides[get_api_client] = lambda: records
    app.dependency_overrides[get_clock] = lambda: (lambda: now)
    return test_client


# ============================================================
# Health Check Tests
# ============================================================

class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_root_endpoint(self, test_client):
        response = test_client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "service" in data
        assert "version" in data

    def test_health_endpoint(self, test_client):
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


# ============================================================
# Season Phase Endpoint Tests
# ============================================================

class TestTreeSeasonPhaseEndpoint:
    """Tests for the per-tree season phase endpoint."""

    def test_post_harvest_resets_count(self, wired_client):
        response = wired_client.get("/api/v1/farms/farm_1/trees/tree_42/season-phase")

        assert response.status_code == 200
        data = response.json()
        assert data["tree_id"] == "tree_42"
        assert data["phase"]["phase"] == "post_harvest"
        assert data["phase"]["last_count"] == 120
        assert data["phase"]["should_reset_count"] is True
        assert data["current_count"] == 0

    def test_growing_keeps_manual_count(self, wired_client, mock_api_client, sample_season, now):
        mock_api_client.get_latest_season.return_value = sample_season.model_copy(
            update={"end_date": now - timedelta(days=200)}
        )

        response = wired_client.get("/api/v1/farms/farm_1/trees/tree_42/season-phase")

        data = response.json()
        assert data["phase"]["phase"] == "growing"
        assert data["phase"]["next_phase"] == "flowering"
        assert data["current_count"] == 37

    def test_farm_without_seasons(self, wired_client, mock_api_client):
        mock_api_client.get_latest_season.return_value = None

        response = wired_client.get("/api/v1/farms/farm_1/trees/tree_42/season-phase")

        assert response.status_code == 200
        assert response.json()["phase"]["phase"] == "new_tree"

    def test_unknown_tree(self, wired_client, mock_api_client):
        mock_api_client.get_tree.side_effect = ExternalAPIError("missing", status_code=404)

        response = wired_client.get("/api/v1/farms/farm_1/trees/nope/season-phase")

        assert response.status_code == 404

    def test_upstream_failure(self, wired_client, mock_api_client):
        mock_api_client.get_latest_season.side_effect = ExternalAPIError("boom", status_code=502)

        response = wired_client.get("/api/v1/farms/farm_1/trees/tree_42/season-phase")

        assert response.status_code == 502


# ============================================================
# Relocation Endpoint Tests
# ============================================================

class TestTreeRelocationEndpoint:
    """Tests for the per-tree relocation endpoint."""

    def test_small_move_is_accepted(self, wired_client):
        response = wired_client.post(
            "/api/v1/farms/farm_1/trees/tree_42/relocation",
            json={"proposed": {"latitude": 10.00003, "longitude": 106.00003}},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["result"]["accepted"] is True
        assert data["position"] == {"latitude": 10.00003, "longitude": 106.00003}

    def test_large_move_keeps_stored_position(self, wired_client):
        response = wired_client.post(
            "/api/v1/farms/farm_1/trees/tree_42/relocation",
            json={"proposed": {"lat": 10.0001, "lng": 106.0001}},
        )

        data = response.json()
        assert data["result"]["accepted"] is False
        assert data["result"]["reason"] == "too_far_from_previous"
        assert data["result"]["distance_m"] == pytest.approx(15.6, abs=0.1)
        assert data["position"] == {"latitude": 10.0, "longitude": 106.0}

    def test_invalid_body(self, wired_client):
        response = wired_client.post(
            "/api/v1/farms/farm_1/trees/tree_42/relocation",
            json={"proposed": {"latitude": "north"}},
        )

        assert response.status_code == 422


# ============================================================
# Zone Area Endpoint Tests
# ============================================================

class TestZoneAreaEndpoint:
    """Tests for the zone area endpoint."""

    def test_area_from_boundary(self, wired_client):
        response = wired_client.get("/api/v1/farms/farm_1/zones/zone_a/area")

        assert response.status_code == 200
        area = response.json()["area"]
        assert area["source"] == "boundary"
        assert area["hectares"] == pytest.approx(1.2364, rel=1e-3)

    def test_area_falls_back_to_stored(self, wired_client, mock_api_client, sample_zone):
        mock_api_client.get_zone.return_value = sample_zone.model_copy(update={"boundaries": []})

        response = wired_client.get("/api/v1/farms/farm_1/zones/zone_a/area")

        area = response.json()["area"]
        assert area["source"] == "stored"
        assert area["hectares"] == pytest.approx(0.5)


# ============================================================
# Stateless Endpoint Tests
# ============================================================

class TestStatelessEndpoints:
    """Tests for the season and geo endpoints."""

    def test_classify_phase(self, wired_client):
        response = wired_client.post(
            "/api/v1/seasons/phase",
            json={
                "now": "2026-10-18T12:00:00Z",
                "last_season_end_date": "2025-09-13T12:00:00Z",
                "prior_count": 4,
            },
        )

        data = response.json()
        assert data["phase"] == "new_season"
        assert data["next_season_year"] == 2026
        assert data["last_count"] == 4

    def test_classify_phase_uses_clock(self, wired_client):
        response = wired_client.post("/api/v1/seasons/phase", json={"record_exists": True})

        data = response.json()
        assert data["end_date_estimated"] is True
        assert data["phase"] == "post_harvest"

    def test_classify_without_record(self, wired_client):
        response = wired_client.post("/api/v1/seasons/phase", json={})

        assert response.json()["phase"] == "new_tree"

    def test_current_season(self, wired_client):
        response = wired_client.get("/api/v1/seasons/current")

        assert response.json() == {"year": 2026, "phase": "post_season"}

    def test_geo_relocation_without_previous(self, wired_client):
        response = wired_client.post(
            "/api/v1/geo/relocation",
            json={"proposed": {"latitude": 45.0, "longitude": 7.0}},
        )

        assert response.json()["accepted"] is True

    def test_geo_relocation_out_of_range(self, wired_client):
        response = wired_client.post(
            "/api/v1/geo/relocation",
            json={
                "previous": {"latitude": 10.0, "longitude": 106.0},
                "proposed": {"latitude": 10.0, "longitude": 190.0},
            },
        )

        data = response.json()
        assert response.status_code == 200
        assert data["reason"] == "out_of_range"
        assert data["violated_bound"] == "longitude"

    def test_geo_area_insufficient_points(self, wired_client):
        response = wired_client.post(
            "/api/v1/geo/area",
            json={"points": [{"latitude": 0, "longitude": 0}, {"latitude": 1, "longitude": 1}]},
        )

        data = response.json()
        assert data["source"] == "unknown"
        assert data["hectares"] == 0.0


# ============================================================
# Malformed Store Data Tests
# ============================================================

class TestMalformedStoreData:
    """Broken records in the store are reported as upstream failures."""

    def test_zone_with_broken_vertex_uses_stored_area(self, store_client):
        with respx.mock(base_url=RECORDS_URL) as store:
            store.get("/farms/farm_1/zones/zone_a").mock(
                return_value=httpx.Response(200, json={
                    "id": "zone_a",
                    "boundary": [
                        {"latitude": 0, "longitude": 0},
                        {"latitude": 0},
                        {"latitude": 0.001, "longitude": 0.001},
                        {"latitude": 0.001, "longitude": 0},
                    ],
                    "area": 12000,
                })
            )

            response = store_client.get("/api/v1/farms/farm_1/zones/zone_a/area")

        assert response.status_code == 200
        area = response.json()["area"]
        assert area["source"] == "stored"
        assert area["hectares"] == pytest.approx(1.2)

    def test_unparseable_season_end_date_is_bad_gateway(self, store_client):
        with respx.mock(base_url=RECORDS_URL) as store:
            store.get("/farms/farm_1/trees/tree_42").mock(
                return_value=httpx.Response(200, json={"id": "tree_42", "manualFruitCount": 3})
            )
            store.get("/farms/farm_1/seasons").mock(
                return_value=httpx.Response(200, json={
                    "results": [{"id": "s1", "endDate": "not-a-date"}]
                })
            )

            response = store_client.get("/api/v1/farms/farm_1/trees/tree_42/season-phase")

        assert response.status_code == 502

    def test_tree_without_id_is_bad_gateway(self, store_client):
        with respx.mock(base_url=RECORDS_URL) as store:
            store.get("/farms/farm_1/trees/tree_42").mock(
                return_value=httpx.Response(200, json={"latitude": 10.0, "longitude": 106.0})
            )

            response = store_client.post(
                "/api/v1/farms/farm_1/trees/tree_42/relocation",
                json={"proposed": {"latitude": 10.0, "longitude": 106.0}},
            )

        assert response.status_code == 502

    def test_record_validation_error_is_not_blamed_on_caller(self, wired_client, mock_api_client):
        def malformed_zone(*args, **kwargs):
            return ZoneData.model_validate({"name": "Khu A"})

        mock_api_client.get_zone.side_effect = malformed_zone

        response = wired_client.get("/api/v1/farms/farm_1/zones/zone_a/area")

        assert response.status_code == 502
        assert response.json()["error"] == "Farm-records API error"


# ============================================================
# Response Format Tests
# ============================================================

class TestResponseFormats:
    """Tests for API response formats."""

    def test_openapi_schema_available(self, test_client):
        response = test_client.get("/openapi.json")

        assert response.status_code == 200
        paths = response.json()["paths"]
        assert "/api/v1/farms/{farm_id}/trees/{tree_id}/season-phase" in paths
        assert "/api/v1/farms/{farm_id}/zones/{zone_id}/area" in paths
        assert "/api/v1/geo/area" in paths

    def test_rate_limit_documented_in_openapi(self, test_client):
        paths = test_client.get("/openapi.json").json()["paths"]

        season_phase = paths["/api/v1/farms/{farm_id}/trees/{tree_id}/season-phase"]
        assert "429" in season_phase["get"]["responses"]

    def test_docs_endpoint_available(self, test_client):
        response = test_client.get("/docs")

        assert response.status_code == 200


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
