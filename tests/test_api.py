"""Tests for the HTTP API: test-level handoff, health, and CORS."""

import pytest
from fastapi.testclient import TestClient

from config import SERVICE_NAME, Settings
from engine.store import TestLevelStore
from main import create_app

EDITOR_ORIGIN = "http://localhost:5173"
ENDPOINT = "/api/test-level"


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def app():
    return create_app(Settings(allowed_origins=(EDITOR_ORIGIN,)))


@pytest.fixture
def client(app):
    return TestClient(app)


def _fields(resp) -> set[tuple[str, str]]:
    return {(d["field"], d["keyword"]) for d in resp.json()["details"]}


class TestHealth:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "service": SERVICE_NAME}


class TestPostTestLevel:
    """Tests for POST /api/test-level."""

    def test_valid_level_is_stored(self, client, minimal_level):
        resp = client.post(ENDPOINT, json=minimal_level)
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "message": "Test level stored successfully"}

    def test_empty_object_lists_required_fields(self, client):
        resp = client.post(ENDPOINT, json={})
        assert resp.status_code == 400
        body = resp.json()
        assert body["error"] == "Invalid level payload"
        required = {d["field"] for d in body["details"] if d["keyword"] == "required"}
        assert {"id", "name", "gridSize", "snake", "snakeDirection", "totalFood"} <= required

    def test_malformed_fields_all_reported(self, client, minimal_level):
        minimal_level["id"] = "abc"
        minimal_level["gridSize"]["width"] = "12"
        minimal_level["snakeDirection"] = "Up"
        resp = client.post(ENDPOINT, json=minimal_level)
        assert resp.status_code == 400
        assert _fields(resp) >= {
            ("id", "type"),
            ("gridSize.width", "type"),
            ("snakeDirection", "enum"),
        }

    def test_unknown_property_rejected(self, client, minimal_level):
        minimal_level["portals"] = []
        resp = client.post(ENDPOINT, json=minimal_level)
        assert resp.status_code == 400
        assert ("portals", "additionalProperties") in _fields(resp)

    def test_out_of_bounds_coordinates(self, client, minimal_level):
        minimal_level["food"] = [{"x": 12, "y": 5}]
        minimal_level["exit"] = {"x": 3, "y": 10}
        resp = client.post(ENDPOINT, json=minimal_level)
        assert resp.status_code == 400
        details = resp.json()["details"]
        assert {(d["field"], d["keyword"]) for d in details} == {
            ("food.0.x", "maximum"),
            ("exit.y", "maximum"),
        }
        food_detail = next(d for d in details if d["field"] == "food.0.x")
        assert food_detail["message"] == "must be less than gridSize.width (12)"

    def test_malformed_json(self, client):
        resp = client.post(
            ENDPOINT,
            content=b'{"id":999999',
            headers={"content-type": "application/json"},
        )
        assert resp.status_code == 400
        assert resp.json() == {"error": "Malformed JSON payload"}

    def test_deeply_nested_json(self, client):
        resp = client.post(
            ENDPOINT,
            content=b"[" * 100000 + b"]" * 100000,
            headers={"content-type": "application/json"},
        )
        assert resp.status_code == 400
        assert resp.json() == {"error": "Malformed JSON payload"}

    def test_non_object_payload(self, client):
        resp = client.post(ENDPOINT, json=[1, 2, 3])
        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid level payload"

    def test_rejected_post_keeps_previous_level(self, client, minimal_level):
        client.post(ENDPOINT, json=minimal_level)
        client.post(ENDPOINT, json={})
        assert client.get(ENDPOINT).json() == minimal_level


class TestGetTestLevel:
    """Tests for GET /api/test-level."""

    def test_empty_returns_404(self, client):
        resp = client.get(ENDPOINT)
        assert resp.status_code == 404
        assert resp.json() == {"error": "No test level available"}

    def test_returns_posted_payload_unchanged(self, client, minimal_level):
        minimal_level["totalFood"] = 7  # Not cross-checked against food arrays
        client.post(ENDPOINT, json=minimal_level)
        resp = client.get(ENDPOINT)
        assert resp.status_code == 200
        assert resp.json() == minimal_level

    def test_last_write_wins(self, client, minimal_level):
        client.post(ENDPOINT, json=minimal_level)
        second = dict(minimal_level, id=4242, name="Second")
        client.post(ENDPOINT, json=second)
        assert client.get(ENDPOINT).json()["id"] == 4242

    def test_expired_level(self, app, client, minimal_level):
        clock = FakeClock()
        app.state.store = TestLevelStore(ttl_seconds=10, clock=clock)
        client.post(ENDPOINT, json=minimal_level)

        clock.now = 11
        resp = client.get(ENDPOINT)
        assert resp.status_code == 404
        assert resp.json() == {"error": "Test level has expired"}

        resp = client.get(ENDPOINT)
        assert resp.json() == {"error": "No test level available"}


class TestMethodNotAllowed:
    @pytest.mark.parametrize("method", ["PUT", "PATCH", "DELETE", "TRACE"])
    def test_unsupported_methods(self, client, method):
        resp = client.request(method, ENDPOINT)
        assert resp.status_code == 405
        assert resp.headers["allow"] == "GET, POST"
        assert resp.json() == {"error": "Method not allowed", "allowedMethods": ["GET", "POST"]}

    def test_head_gets_structured_405(self, client):
        resp = client.head(ENDPOINT)
        assert resp.status_code == 405
        assert resp.headers["allow"] == "GET, POST"


class TestCors:
    """Tests for the origin allow-list."""

    def test_allowed_origin_gets_cors_headers(self, client):
        resp = client.get("/health", headers={"Origin": EDITOR_ORIGIN})
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == EDITOR_ORIGIN
        assert resp.headers["access-control-allow-credentials"] == "true"

    def test_unlisted_origin_rejected(self, client, minimal_level):
        resp = client.post(ENDPOINT, json=minimal_level, headers={"Origin": "http://evil.test"})
        assert resp.status_code == 403
        assert resp.json() == {"error": "Not allowed by CORS"}
        assert client.get(ENDPOINT).status_code == 404

    def test_no_origin_allowed(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert "access-control-allow-origin" not in resp.headers

    def test_preflight_from_allowed_origin(self, client):
        resp = client.options(
            ENDPOINT,
            headers={
                "Origin": EDITOR_ORIGIN,
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "content-type",
            },
        )
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == EDITOR_ORIGIN
