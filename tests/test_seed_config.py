"""Tests for YAML seeding and settings loading."""
from spellwatch.store.seed import seed_database
from spellwatch.utils.config import Settings, get_project_root, get_settings
from spellwatch.utils.constants import CITIES_COLLECTION, POINTS_COLLECTION

CITIES_YAML = """
cities:
  - name: Lahore
    latitude: 31.52
    longitude: 74.36
    ponding_points:
      - Lakshmi Chowk
      - Jail Road
  - name: Okara
    latitude: 30.81
    longitude: 73.45
"""


def test_seed_database_is_idempotent(store, tmp_path):
    path = tmp_path / "cities.yaml"
    path.write_text(CITIES_YAML)

    assert seed_database(store, path) == {"cities": 2, "ponding_points": 2}
    assert seed_database(store, path) == {"cities": 0, "ponding_points": 0}

    points = store.query(POINTS_COLLECTION, where={"cityName": "Lahore"}, order_by="name")
    assert [p.data["name"] for p in points] == ["Jail Road", "Lakshmi Chowk"]
    assert points[0].data["currentSpell"] == 0
    assert len(store.query(CITIES_COLLECTION)) == 2


def test_seed_missing_file(store, tmp_path):
    assert seed_database(store, tmp_path / "nope.yaml") == {"cities": 0, "ponding_points": 0}


def test_bundled_city_file(store):
    result = seed_database(store, get_project_root() / Settings().region.cities_file)
    assert result["cities"] > 0
    assert result["ponding_points"] > 0


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("STORE_BACKEND", "firestore")
    monkeypatch.setenv("WEATHER_PROVIDER", "openweathermap")
    monkeypatch.setenv("OPENWEATHERMAP_API_KEY", "abc123")

    settings = get_settings("development")

    assert settings.store.backend == "firestore"
    assert settings.weather.provider == "openweathermap"
    assert settings.weather.api_key == "abc123"
    assert settings.region.timezone == "Asia/Karachi"


def test_unknown_environment_uses_defaults(monkeypatch):
    for var in ("STORE_BACKEND", "WEATHER_PROVIDER", "OPENWEATHERMAP_API_KEY", "FIRESTORE_PROJECT_ID"):
        monkeypatch.delenv(var, raising=False)
    settings = get_settings("no-such-env")
    assert settings.store.backend == "memory"
    assert settings.weather.provider == "sample"
