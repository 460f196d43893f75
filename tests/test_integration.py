import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from route_planner.config import settings
from route_planner.errors import OracleMisconfigured
from route_planner.main import create_app
from route_planner.models.domain import GroundingChunk, OracleReply
from route_planner.persistence.filesystem import FileStorage
from route_planner.persistence.saved_routes import RouteStore
from route_planner.services.routing.service import RouteOptimizer

REPLY = {
    "route": [
        {"stop": 1, "address": "B", "instructions": "Head north.", "travelTimeFromPrevious": "10 minutes"},
        {"stop": 2, "address": "C", "instructions": "Turn right.", "travelTimeFromPrevious": "20 minutes"},
    ],
    "totalTravelTime": "30 minutes",
}


class DummyOracle:
    requests: list = []

    def generate(self, request):
        DummyOracle.requests.append(request)
        return OracleReply(
            raw_text=json.dumps(REPLY),
            grounding_chunks=(GroundingChunk(title="B", uri="https://maps.example/b"),),
        )


@pytest.fixture
def store(tmp_path: Path) -> RouteStore:
    return RouteStore(FileStorage(root=tmp_path), slot="deliveryRoutes")


@pytest.fixture
def api_client(store: RouteStore, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    from route_planner.api.routes import routes as routes_api
    from route_planner.api.routes import saved_routes as saved_routes_api

    DummyOracle.requests = []
    optimizer = RouteOptimizer(DummyOracle, config=settings.model_copy(update={"timezone": "UTC"}))
    monkeypatch.setattr(routes_api, "get_optimizer", lambda: optimizer)
    monkeypatch.setattr(saved_routes_api, "get_route_store", lambda: store)

    return TestClient(create_app())


def _optimize(api_client: TestClient, **overrides) -> dict:
    body = {"startAddress": "Warehouse A", "deliveryAddresses": ["B", "C"], "roundTrip": False}
    body.update(overrides)
    response = api_client.post("/api/routes/optimize", json=body)
    assert response.status_code == 200, response.text
    return response.json()


def test_health(api_client: TestClient):
    assert api_client.get("/api/health").json() == {"status": "ok"}
    payload = api_client.get("/api/health/oracle").json()
    assert payload["service"] == "oracle"
    assert "configured" in payload


def test_optimize_endpoint(api_client: TestClient):
    payload = _optimize(api_client, location={"latitude": -33.87, "longitude": 151.21})

    assert [step["stop"] for step in payload["route"]] == [1, 2]
    assert all("estimatedArrivalTime" in step for step in payload["route"])
    assert payload["totalTravelTime"] == "30 minutes"
    assert payload["groundingChunks"] == [{"maps": {"title": "B", "uri": "https://maps.example/b"}}]
    assert payload["mapsUrl"].endswith("/B/C")
    assert DummyOracle.requests[0].location.latitude == -33.87


def test_optimize_accepts_address_block(api_client: TestClient):
    payload = _optimize(api_client, deliveryAddresses="B\n\n  C  \n")

    assert payload["deliveryAddresses"] == ["B", "C"]


def test_optimize_rejects_blank_input(api_client: TestClient):
    response = api_client.post(
        "/api/routes/optimize",
        json={"startAddress": " ", "deliveryAddresses": ["B"]},
    )

    assert response.status_code == 400
    assert "warehouse" in response.json()["detail"]
    assert DummyOracle.requests == []


def test_optimize_reports_misconfigured_oracle(api_client: TestClient, monkeypatch: pytest.MonkeyPatch):
    from route_planner.api.routes import routes as routes_api

    class Unconfigured:
        def generate(self, request):
            raise OracleMisconfigured("Gemini API key is not configured.")

    monkeypatch.setattr(routes_api, "get_optimizer", lambda: RouteOptimizer(Unconfigured))

    response = api_client.post("/api/routes/optimize", json={"startAddress": "A", "deliveryAddresses": ["B"]})

    assert response.status_code == 503


def test_saved_route_lifecycle(api_client: TestClient, tmp_path: Path):
    optimized = _optimize(api_client)

    created = api_client.post(
        "/api/saved-routes",
        json={
            "startAddress": optimized["startAddress"],
            "deliveryAddresses": optimized["deliveryAddresses"],
            "optimizedRoute": optimized["route"],
            "totalTravelTime": optimized["totalTravelTime"],
        },
    )
    assert created.status_code == 201
    saved = created.json()
    assert saved["id"].startswith("route-")
    assert saved["name"] == "Route from Warehouse A (2 stops)"
    assert saved["optimizedRoute"] == optimized["route"]

    listing = api_client.get("/api/saved-routes").json()
    assert [item["id"] for item in listing] == [saved["id"]]

    loaded = api_client.get(f"/api/saved-routes/{saved['id']}")
    assert loaded.status_code == 200
    assert loaded.json() == saved

    stored = json.loads((tmp_path / "deliveryRoutes.json").read_text(encoding="utf-8"))
    assert stored[0]["id"] == saved["id"]

    assert api_client.delete(f"/api/saved-routes/{saved['id']}").status_code == 204
    assert api_client.delete(f"/api/saved-routes/{saved['id']}").status_code == 204
    assert api_client.get(f"/api/saved-routes/{saved['id']}").status_code == 404
    assert api_client.get("/api/saved-routes").json() == []


def test_save_requires_stops(api_client: TestClient):
    response = api_client.post(
        "/api/saved-routes",
        json={"startAddress": "A", "deliveryAddresses": ["B"], "optimizedRoute": [], "totalTravelTime": "0 minutes"},
    )

    assert response.status_code == 422


def test_recalculate_saved_route(api_client: TestClient, store: RouteStore):
    optimized = _optimize(api_client)
    saved = api_client.post(
        "/api/saved-routes",
        json={
            "name": "Friday",
            "startAddress": optimized["startAddress"],
            "deliveryAddresses": optimized["deliveryAddresses"],
            "optimizedRoute": optimized["route"],
            "totalTravelTime": optimized["totalTravelTime"],
        },
    ).json()

    response = api_client.post(f"/api/saved-routes/{saved['id']}/recalculate", params={"roundTrip": True})

    assert response.status_code == 200
    assert response.json()["roundTrip"] is True
    assert DummyOracle.requests[-1].deliveries == ("B", "C")
    assert store.load(saved["id"]).name == "Friday"


def test_recalculate_unknown_route(api_client: TestClient):
    assert api_client.post("/api/saved-routes/route-missing/recalculate").status_code == 404


def test_optimize_reports_out_of_range_duration_as_bad_gateway(api_client: TestClient, monkeypatch: pytest.MonkeyPatch):
    from route_planner.api.routes import routes as routes_api

    class HugeDurationOracle:
        def generate(self, request):
            step = {"stop": 1, "address": "B", "instructions": "Drive.", "travelTimeFromPrevious": "99999999999 hours"}
            return OracleReply(raw_text=json.dumps({"route": [step], "totalTravelTime": "forever"}))

    optimizer = RouteOptimizer(HugeDurationOracle, config=settings.model_copy(update={"timezone": "UTC"}))
    monkeypatch.setattr(routes_api, "get_optimizer", lambda: optimizer)

    response = api_client.post("/api/routes/optimize", json={"startAddress": "A", "deliveryAddresses": ["B"]})

    assert response.status_code == 502
    assert "travel time" in response.json()["detail"]


@pytest.mark.parametrize(
    "overrides",
    [
        {"startAddress": "   "},
        {"totalTravelTime": ""},
        {"totalTravelTime": "  "},
        {"optimizedRoute": [{}]},
        {"optimizedRoute": [{"stop": 1, "address": "B", "instructions": "Go.", "travelTimeFromPrevious": "5 minutes"}]},
    ],
)
def test_save_rejects_incomplete_routes(api_client: TestClient, store: RouteStore, overrides: dict):
    optimized = _optimize(api_client)
    body = {
        "startAddress": optimized["startAddress"],
        "deliveryAddresses": optimized["deliveryAddresses"],
        "optimizedRoute": optimized["route"],
        "totalTravelTime": optimized["totalTravelTime"],
    }
    body.update(overrides)

    response = api_client.post("/api/saved-routes", json=body)

    assert response.status_code == 422
    assert store.list() == []


def test_save_keeps_extra_step_fields(api_client: TestClient):
    optimized = _optimize(api_client)
    steps = [dict(step, note="side gate") for step in optimized["route"]]

    response = api_client.post(
        "/api/saved-routes",
        json={
            "startAddress": "  Warehouse A  ",
            "deliveryAddresses": optimized["deliveryAddresses"],
            "optimizedRoute": steps,
            "totalTravelTime": optimized["totalTravelTime"],
        },
    )

    assert response.status_code == 201
    saved = response.json()
    assert saved["startAddress"] == "Warehouse A"
    assert saved["optimizedRoute"] == steps
