"""
Pytest fixtures for Spellwatch tests.

Every test runs against a fresh in-memory store and a controllable clock,
so server timestamps and calendar-day checks are deterministic.
"""
from datetime import datetime, timedelta, timezone

import pytest
import pytz
from fastapi.testclient import TestClient

from spellwatch.api.main import create_app
from spellwatch.core import build_services
from spellwatch.data_sources.weather_client import WeatherClient
from spellwatch.store.memory import MemoryStore
from spellwatch.utils.config import WeatherConfig

PKT = pytz.timezone("Asia/Karachi")


class FakeClock:
    """Callable clock shared by the store and the services."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    # 11:00 local time in Lahore
    return FakeClock(datetime(2025, 7, 14, 6, 0, tzinfo=timezone.utc))


@pytest.fixture
def store(clock):
    return MemoryStore(clock=clock)


@pytest.fixture
def weather():
    return WeatherClient(WeatherConfig(provider="sample", sample_seed=7))


@pytest.fixture
def services(store, clock, weather):
    return build_services(store, weather=weather, clock=clock, tz=PKT)


@pytest.fixture
def client(services):
    """Test client wired to the in-memory services."""
    app = create_app(services=services)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def find_point(services):
    """Look up a point of a city by name."""
    def _find(city_name: str, name: str):
        return next(p for p in services.points.list_points(city_name) if p.name == name)
    return _find


@pytest.fixture
def lahore_points(services, find_point):
    """Lahore with A (5 mm, 2 in ponding) and B (3 mm, dry)."""
    services.points.add_or_update("Lahore", {"name": "A", "currentSpell": 5, "ponding": 2})
    services.points.add_or_update("Lahore", {"name": "B", "currentSpell": 3, "ponding": 0})
    return find_point("Lahore", "A"), find_point("Lahore", "B")
