"""Per-city weather feed for the dashboard."""

from datetime import datetime, timezone
from typing import Callable, Optional

from loguru import logger

from spellwatch.core.cities import CityDirectory
from spellwatch.core.spells import SpellLifecycleController
from spellwatch.data_sources.weather_client import WeatherClient, apply_spell_override
from spellwatch.store.models import WeatherData
from spellwatch.utils.errors import StoreError, WeatherUnavailableError


class WeatherDashboard:
    def __init__(
        self,
        cities: CityDirectory,
        spells: SpellLifecycleController,
        weather: WeatherClient,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.cities = cities
        self.spells = spells
        self.weather = weather
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def _city_weather(self, weather_id: str, city_name: str) -> WeatherData:
        current = self.weather.get_current(city_name)
        active = self.spells.get_active_spell(city_name) is not None
        return WeatherData(
            weather_id=weather_id,
            city=current["city"],
            condition=apply_spell_override(current["condition"], active),
            temperature=current["temperature"],
            last_updated=self.clock(),
            is_spell_active=active,
        )

    def fetch(self) -> list[WeatherData]:
        """Weather for every registered city.

        Cities that fail are logged and left out; if all of them fail the
        first error is raised. Configuration errors are raised immediately.
        """
        self.weather.check_configuration()
        cities = self.cities.list_cities()
        if not cities:
            logger.info("No cities registered; dashboard is empty")
            return []

        results, errors = [], []
        for city in cities:
            try:
                results.append(self._city_weather(city.city_id, city.name))
            except (WeatherUnavailableError, StoreError) as e:
                logger.error(f"Failed to fetch weather for {city.name}: {e.message}")
                errors.append(e.message)

        if not results:
            raise WeatherUnavailableError(
                f'Failed to fetch weather for all cities. Example error: "{errors[0]}"'
            )
        return results

    def fetch_city(self, city_name: str) -> WeatherData:
        return self._city_weather(city_name.lower().replace(" ", ""), city_name)
