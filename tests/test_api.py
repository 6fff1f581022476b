"""
API tests.

Requests go through the FastAPI TestClient against in-memory services.
"""
import pytest
from fastapi.testclient import TestClient

from spellwatch.api.main import create_app
from spellwatch.core import build_services
from spellwatch.store.memory import MemoryStore
from spellwatch.utils.errors import StoreError


class BrokenStore(MemoryStore):
    def query(self, collection, where=None, order_by=None, descending=False, limit=None):
        raise StoreError("deadline exceeded talking to backend")

    def health_check(self):
        return False


def create_point(client, city, **payload):
    return client.post(f"/api/v1/cities/{city}/points", json=payload)


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["database"] == "connected"

    def test_roles(self, client):
        assert client.get("/api/v1/roles").json()["roles"] == ["super-admin", "city-user", "viewer"]


class TestPointsApi:
    def test_create_and_list(self, client):
        response = create_point(client, "Lahore", name="Jail Road", currentSpell=4, ponding=1)
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Ponding point created successfully."}

        data = client.get("/api/v1/cities/Lahore/points").json()
        assert data["count"] == 1
        point = data["points"][0]
        assert point["name"] == "Jail Road"
        assert point["isRaining"] is True
        assert point["dailyMaxSpell"] == 4
        assert point["updatedAt"].startswith("2025-07-14T06:00:00")

    def test_validation_error_names_field(self, client):
        response = create_point(client, "Lahore", name="X", currentSpell=-1, ponding=0)
        assert response.status_code == 422
        assert response.json() == {
            "success": False,
            "error": "Spell must be a positive number.",
            "field": "currentSpell",
        }

    def test_clearance_required_is_conflict(self, client, lahore_points):
        a, _ = lahore_points
        response = create_point(client, "Lahore", id=a.point_id, name="A", currentSpell=5, ponding=0)
        assert response.status_code == 409
        assert '"A"' in response.json()["error"]

    def test_batch_update(self, client, lahore_points):
        a, b = lahore_points
        response = client.post("/api/v1/cities/Lahore/points/batch", json={"points": [
            {"id": a.point_id, "currentSpell": 6, "ponding": 2},
            {"id": b.point_id, "currentSpell": 6, "ponding": 1},
        ]})
        assert response.status_code == 200
        assert response.json()["message"] == "2 ponding point(s) updated successfully."

        summary = client.get("/api/v1/cities/Lahore/summary").json()
        assert summary["maxCurrentSpell"] == 6
        assert summary["rainingPoints"] == 2

    def test_empty_batch(self, client):
        response = client.post("/api/v1/cities/Lahore/points/batch", json={})
        assert response.status_code == 422

    def test_delete_point(self, client, lahore_points):
        a, _ = lahore_points
        response = client.delete(f"/api/v1/cities/Lahore/points/{a.point_id}")
        assert response.json()["message"] == "Ponding point deleted successfully."
        assert client.get("/api/v1/cities/Lahore/points").json()["count"] == 1

    def test_delete_unknown_point(self, client):
        assert client.delete("/api/v1/cities/Lahore/points/nope").status_code == 404


class TestSpellApi:
    def test_spell_lifecycle(self, client, lahore_points):
        a, b = lahore_points
        assert client.get("/api/v1/cities/Lahore/spell").json()["active"] is False

        started = client.post("/api/v1/cities/Lahore/spell/start")
        assert started.status_code == 200
        assert started.json()["spell"]["status"] == "active"
        assert client.post("/api/v1/cities/Lahore/spell/start").status_code == 409

        blocked = client.post("/api/v1/cities/Lahore/spell/stop")
        assert blocked.status_code == 409
        assert '"A"' in blocked.json()["error"]

        for point, ponding in ((a, 2), (b, 0)):
            create_point(client, "Lahore", id=point.point_id, name=point.name, currentSpell=0, ponding=ponding)
        stopped = client.post("/api/v1/cities/Lahore/spell/stop")
        assert stopped.status_code == 200
        assert stopped.json()["message"] == "Spell data saved and rainfall values reset."
        totals = {e["pointName"]: e["totalRainfall"] for e in stopped.json()["spell"]["spellData"]}
        assert totals == {"A": 5, "B": 3}

        report = client.get("/api/v1/cities/Lahore/report").json()
        assert [r["pointName"] for r in report["rows"]] == ["A", "B"]
        assert report["rows"][1]["ponding"] == "No Ponding"

        text = client.get("/api/v1/cities/Lahore/report", params={"format": "text"})
        assert text.headers["content-type"].startswith("text/plain")
        assert "WASA LAHORE" in text.text

    def test_stop_without_spell(self, client):
        response = client.post("/api/v1/cities/Lahore/spell/stop")
        assert response.status_code == 409
        assert response.json()["error"] == "No active spell found for Lahore."

    def test_report_missing(self, client):
        response = client.get("/api/v1/cities/Lahore/report")
        assert response.status_code == 404
        assert response.json()["error"] == "There are no completed spell reports for Lahore yet."

    def test_report_bad_format(self, client):
        assert client.get("/api/v1/cities/Lahore/report", params={"format": "pdf"}).status_code == 422


class TestAdminApi:
    def test_create_city(self, client):
        response = client.post("/api/v1/cities", json={"name": "Sahiwal", "latitude": 30.66, "longitude": 73.1})
        assert response.status_code == 201
        city = response.json()["city"]
        assert response.json()["message"] == f'City "Sahiwal" created with ID: {city["id"]}.'
        assert client.get("/api/v1/cities").json()["count"] == 1

    def test_request_and_review(self, client):
        response = client.post("/api/v1/requests", json={"email": "ali@example.com", "role": "viewer"})
        assert response.status_code == 201
        assert client.post("/api/v1/requests", json={"email": "ali@example.com", "role": "viewer"}).status_code == 409

        (pending,) = client.get("/api/v1/requests").json()["requests"]
        reviewed = client.post(f"/api/v1/requests/{pending['id']}/review", json={"status": "approved"})
        assert reviewed.json()["request"]["status"] == "approved"
        assert client.get("/api/v1/requests").json()["count"] == 0

    def test_review_unknown_request(self, client):
        response = client.post("/api/v1/requests/missing/review", json={"status": "approved"})
        assert response.status_code == 404


class TestWeatherApi:
    def test_weather_for_registered_cities(self, client):
        client.post("/api/v1/cities", json={"name": "Lahore", "latitude": 31.5, "longitude": 74.3})
        client.post("/api/v1/cities/Lahore/spell/start")

        (reading,) = client.get("/api/v1/weather").json()["weather"]
        assert reading["city"] == "Lahore"
        assert reading["isSpellActive"] is True
        assert reading["condition"] in ("Rainy", "Thunderstorm", "Snow")

    def test_weather_for_one_city(self, client):
        (reading,) = client.get("/api/v1/weather", params={"city": "Multan"}).json()["weather"]
        assert reading["city"] == "Multan"
        assert reading["isSpellActive"] is False


class TestStoreFailure:
    @pytest.fixture
    def broken_client(self, clock, weather):
        services = build_services(BrokenStore(clock=clock), weather=weather, clock=clock)
        with TestClient(create_app(services=services)) as client:
            yield client

    def test_store_error_is_generic_503(self, broken_client):
        response = broken_client.get("/api/v1/cities/Lahore/points")
        assert response.status_code == 503
        assert "deadline" not in response.json()["error"]
        assert response.json()["success"] is False

    def test_health_degraded(self, broken_client):
        assert broken_client.get("/health").json()["status"] == "degraded"
