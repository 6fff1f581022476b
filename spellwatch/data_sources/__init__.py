"""Data sources module."""

from spellwatch.data_sources.weather_client import (
    WeatherClient,
    apply_spell_override,
    sample_reading,
    map_condition,
)

__all__ = ["WeatherClient", "apply_spell_override", "sample_reading", "map_condition"]
