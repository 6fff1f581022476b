"""Wiring of the core services around one injected store handle."""

from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Callable, Optional

from spellwatch.core.aggregation import local_timezone
from spellwatch.core.cities import CityDirectory
from spellwatch.core.dashboard import WeatherDashboard
from spellwatch.core.points import PondingPointStore
from spellwatch.core.report import ReportExporter
from spellwatch.core.signup import AccessRequests
from spellwatch.core.spells import SpellLifecycleController
from spellwatch.data_sources.weather_client import WeatherClient
from spellwatch.store.base import DocumentStore


@dataclass
class Services:
    store: DocumentStore
    points: PondingPointStore
    spells: SpellLifecycleController
    cities: CityDirectory
    requests: AccessRequests
    reports: ReportExporter
    dashboard: WeatherDashboard


def build_services(
    store: DocumentStore,
    weather: Optional[WeatherClient] = None,
    clock: Optional[Callable[[], datetime]] = None,
    tz: Optional[tzinfo] = None,
) -> Services:
    tz = tz or local_timezone()
    points = PondingPointStore(store, clock=clock, tz=tz)
    spells = SpellLifecycleController(store, points)
    cities = CityDirectory(store)
    return Services(
        store=store,
        points=points,
        spells=spells,
        cities=cities,
        requests=AccessRequests(store),
        reports=ReportExporter(spells, tz),
        dashboard=WeatherDashboard(cities, spells, weather or WeatherClient(), clock),
    )
