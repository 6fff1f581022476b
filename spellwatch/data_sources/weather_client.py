"""Current-weather client: OpenWeatherMap or generated sample data."""

import random
from typing import Optional

import httpx
from loguru import logger

from spellwatch.utils.config import WeatherConfig, settings
from spellwatch.utils.constants import OPENWEATHER_ICONS, WEATHER_CONDITIONS, WET_CONDITIONS
from spellwatch.utils.errors import WeatherConfigError, WeatherUnavailableError


def map_condition(icon: str) -> str:
    """OpenWeatherMap icon code to dashboard condition (ClearDay when unknown)."""
    return OPENWEATHER_ICONS.get(icon, "ClearDay")


def apply_spell_override(condition: str, spell_active: bool) -> str:
    """An active spell always shows as wet weather."""
    if spell_active and condition not in WET_CONDITIONS:
        return "Rainy"
    return condition


def sample_reading(city: str, rng: random.Random) -> dict:
    """Generated reading used when the provider is `sample`."""
    return {
        "city": city,
        "condition": rng.choice(WEATHER_CONDITIONS),
        "temperature": rng.randint(15, 39),
    }


class WeatherClient:
    """Current conditions for a city from the configured provider."""

    def __init__(
        self,
        config: Optional[WeatherConfig] = None,
        http_client: Optional[httpx.Client] = None,
        rng: Optional[random.Random] = None,
    ):
        self.config = config or settings.weather
        self._http = http_client
        self.rng = rng or random.Random(self.config.sample_seed)

    @property
    def provider(self) -> str:
        return self.config.provider

    def check_configuration(self) -> None:
        if self.provider == "sample":
            return
        if self.provider != "openweathermap":
            raise WeatherConfigError(f"Unknown weather provider: {self.provider}")
        if not self.config.api_key:
            logger.error("OpenWeatherMap API key is not configured")
            raise WeatherConfigError("Server configuration error: Weather service is unavailable.")

    def get_current(self, city: str) -> dict:
        self.check_configuration()
        if self.provider == "sample":
            return sample_reading(city, self.rng)
        return self._fetch_openweathermap(city)

    def _fetch_openweathermap(self, city: str) -> dict:
        params = {"q": city, "appid": self.config.api_key, "units": self.config.units}
        try:
            if self._http is not None:
                resp = self._http.get(self.config.base_url, params=params)
            else:
                with httpx.Client(timeout=self.config.timeout_seconds) as client:
                    resp = client.get(self.config.base_url, params=params)
        except httpx.HTTPError as e:
            logger.error(f"Weather request for {city} failed: {e}")
            raise WeatherUnavailableError(f"Failed to fetch weather for {city}: {e}") from e

        if resp.status_code == 404:
            raise WeatherUnavailableError(f"City not found: {city}")
        if resp.status_code >= 400:
            try:
                detail = resp.json().get("message") or resp.reason_phrase
            except ValueError:
                detail = resp.reason_phrase
            raise WeatherUnavailableError(f"Failed to fetch weather for {city}: {detail}")

        data = resp.json()
        return {
            "city": data.get("name", city),
            "condition": map_condition(data["weather"][0]["icon"]),
            "temperature": round(data["main"]["temp"]),
        }
