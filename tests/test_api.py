import asyncio

import httpx
import pytest
from fastapi.testclient import TestClient

from birdspot.core.config import settings
from birdspot.main import app
from birdspot.services import ebird
from conftest import hotspot, north_of


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setattr(settings, "ebird_api_key", "test-key")


def test_root_and_ping(client):
    assert client.get("/").json()["message"] == "OK"
    r = client.get("/api/_ping")
    assert r.status_code == 200
    assert r.text == "ok"


def test_rank_endpoint(client, ref):
    body = {
        "lat": ref.lat,
        "lng": ref.lng,
        "locations": [
            hotspot("L1", north_of(ref, 12)),
            hotspot("L2", north_of(ref, 3), numSpeciesAllTime=99),
            hotspot("L3", north_of(ref, 1)),
        ],
        "observations": [
            {"comName": "Blue Jay", "speciesCode": "blujay", "locId": "L2", "obsDt": "2024-05-01 07:30"},
        ],
    }
    r = client.post("/api/rank", json=body)
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ok"
    assert data["total_candidates"] == 3
    assert [h["loc_id"] for h in data["hotspots"]] == ["L3", "L2"]
    l2 = data["hotspots"][1]
    assert l2["distance_text"] == "3.0 km"
    assert l2["num_species_all_time"] == 99
    assert l2["species"] == [{
        "name": "Blue Jay", "key": "blujay", "sci_name": None,
        "obs_dt": "2024-05-01 07:30", "matched_by": "id",
    }]


def test_rank_endpoint_empty_outcomes(client, ref):
    empty = client.post("/api/rank", json={"lat": ref.lat, "lng": ref.lng}).json()
    assert empty["status"] == "no_candidates"

    far = {"lat": ref.lat, "lng": ref.lng,
           "locations": [hotspot(f"F{i}", north_of(ref, 20 + i)) for i in range(5)]}
    filtered = client.post("/api/rank", json=far).json()
    assert filtered["status"] == "all_filtered"
    assert filtered["total_candidates"] == 5
    assert filtered["hotspots"] == []
    assert filtered["message"] != empty["message"]

    no_ref = client.post("/api/rank", json={**far, "lat": None}).json()
    assert no_ref["status"] == "all_filtered"


def test_nearby_pipeline(client, ref, monkeypatch):
    calls = {}

    async def fake_hotspots(lat, lng, dist=None, max_results=None):
        calls["hotspots"] = (lat, lng, dist, max_results)
        return [hotspot("L1", north_of(ref, 2)), hotspot("L2", north_of(ref, 30))]

    async def fake_obs(lat, lng, max_results=None):
        calls["obs"] = max_results
        return [{"comName": "Osprey", "speciesCode": "osprey",
                 "lat": north_of(ref, 2.1).lat, "lng": ref.lng}]

    monkeypatch.setattr(ebird, "nearby_hotspots", fake_hotspots)
    monkeypatch.setattr(ebird, "recent_observations_near", fake_obs)

    r = client.get("/api/nearby", params={"lat": ref.lat, "lng": ref.lng, "dist": 25, "maxResults": 10})
    assert r.status_code == 200
    data = r.json()
    assert [h["loc_id"] for h in data["hotspots"]] == ["L1"]
    assert data["hotspots"][0]["species"][0]["matched_by"] == "proximity"
    assert calls["hotspots"] == (ref.lat, ref.lng, 25, 10)
    assert calls["obs"] == settings.obs_max_results


def test_missing_params(client):
    r = client.get("/api/hotspots", params={"lat": 1})
    assert r.status_code == 400
    assert "latitude or longitude" in r.json()["detail"]
    assert client.get("/api/nearby").status_code == 400
    assert client.get("/api/recentObservations", params={"lng": 1}).status_code == 400
    assert client.get("/api/hotspotSpecies").status_code == 400


def test_key_not_configured(client, monkeypatch):
    monkeypatch.setattr(settings, "ebird_api_key", None)
    r = client.get("/api/hotspots", params={"lat": 1, "lng": 2})
    assert r.status_code == 500
    assert r.json()["detail"] == "Server-side API key not configured."


def test_upstream_error_is_passed_through(client, api_key, monkeypatch):
    async def failing(url, headers=None, params=None, timeout=30.0):
        assert headers == {"X-eBirdApiToken": "test-key"}
        request = httpx.Request("GET", url)
        response = httpx.Response(403, text="Invalid token", request=request)
        raise httpx.HTTPStatusError("forbidden", request=request, response=response)

    monkeypatch.setattr(ebird, "get_json", failing)
    r = client.get("/api/recentObservations", params={"lat": 1, "lng": 2})
    assert r.status_code == 403
    assert r.json()["detail"] == "eBird API Error: 403. Details: Invalid token..."


def test_proxy_builds_ebird_request(client, api_key, monkeypatch):
    seen = {}

    async def fake_get_json(url, headers=None, params=None, timeout=30.0):
        seen.update(url=url, params=params)
        return [{"locId": "L1"}]

    monkeypatch.setattr(ebird, "get_json", fake_get_json)
    r = client.get("/api/hotspots", params={"lat": 40.7, "lng": -74.0})
    assert r.json() == [{"locId": "L1"}]
    assert seen["url"] == f"{settings.ebird_base}/ref/hotspot/geo"
    assert seen["params"] == {"lat": 40.7, "lng": -74.0, "dist": settings.search_dist_km,
                              "maxResults": settings.search_max_results, "fmt": "json"}


def test_hotspot_species(client, api_key, monkeypatch):
    seen = {}

    async def fake_get_json(url, headers=None, params=None, timeout=30.0):
        seen.update(url=url, params=params)
        return [
            {"comName": "Mallard", "speciesCode": "mallar3", "sciName": "Anas platyrhynchos"},
            {"comName": "Mallard", "speciesCode": "mallar3"},
            {"sciName": "Ardea alba"},
            {"howMany": 3},
        ]

    monkeypatch.setattr(ebird, "get_json", fake_get_json)
    r = client.get("/api/hotspotSpecies", params={"locId": "L 1/2"})
    assert r.status_code == 200
    data = r.json()
    assert data["loc_id"] == "L 1/2"
    assert [s["name"] for s in data["species"]] == ["Mallard", "Ardea alba"]
    assert seen["url"].endswith("/data/obs/hotspot/recent/L%201%2F2")
    assert seen["params"] == {"maxResults": settings.species_max_results}


def test_non_list_payload_means_no_records(api_key, monkeypatch):
    async def fake_get_json(url, headers=None, params=None, timeout=30.0):
        return {"errors": []}

    monkeypatch.setattr(ebird, "get_json", fake_get_json)
    assert asyncio.run(ebird.recent_observations_near(1, 2)) == []


def test_rank_survives_overflowing_record(client, ref):
    body = {
        "lat": ref.lat,
        "lng": ref.lng,
        "locations": [
            {"locId": "BAD", "lat": 10 ** 400, "lng": 1, "numSpeciesAllTime": 10 ** 400},
            hotspot("L1", north_of(ref, 1)),
        ],
        "observations": [{"comName": "Wren", "lat": 10 ** 400, "lng": 1}],
    }
    r = client.post("/api/rank", json=body)
    assert r.status_code == 200
    data = r.json()
    assert [h["loc_id"] for h in data["hotspots"]] == ["L1"]
    assert data["total_candidates"] == 2


def test_transport_failure_is_internal_error(client, api_key, monkeypatch):
    async def unreachable(url, headers=None, params=None, timeout=30.0):
        raise httpx.ConnectError("connection refused", request=httpx.Request("GET", url))

    monkeypatch.setattr(ebird, "get_json", unreachable)
    r = client.get("/api/hotspots", params={"lat": 1, "lng": 2})
    assert r.status_code == 500
    assert r.json()["detail"] == "Internal server error during fetch to eBird."


def test_nearby_cancels_other_feed_on_failure(client, ref, monkeypatch):
    state = {}

    async def failing_hotspots(lat, lng, dist=None, max_results=None):
        raise ebird.EBirdUpstreamError(403, "Invalid token")

    async def slow_obs(lat, lng, max_results=None):
        try:
            await asyncio.sleep(30)
        except asyncio.CancelledError:
            state["cancelled"] = True
            raise
        return []

    monkeypatch.setattr(ebird, "nearby_hotspots", failing_hotspots)
    monkeypatch.setattr(ebird, "recent_observations_near", slow_obs)

    r = client.get("/api/nearby", params={"lat": ref.lat, "lng": ref.lng})
    assert r.status_code == 403
    assert state == {"cancelled": True}
