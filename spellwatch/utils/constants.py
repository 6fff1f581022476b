"""Project-wide constants."""

CITIES_COLLECTION = "cities"
POINTS_COLLECTION = "ponding_points"
SPELLS_COLLECTION = "spells"
SPELL_LOCKS_COLLECTION = "spell_locks"
USER_REQUESTS_COLLECTION = "user_requests"

ROLES = ["super-admin", "city-user", "viewer"]

SPELL_ACTIVE = "active"
SPELL_COMPLETED = "completed"

REQUEST_PENDING = "pending"
REQUEST_APPROVED = "approved"
REQUEST_REJECTED = "rejected"

WEATHER_CONDITIONS = [
    "ClearDay",
    "ClearNight",
    "PartlyCloudyDay",
    "PartlyCloudyNight",
    "Cloudy",
    "Rainy",
    "Thunderstorm",
    "Snow",
    "Fog",
]

# Conditions left untouched when a spell is active
WET_CONDITIONS = {"Rainy", "Thunderstorm", "Snow"}

# OpenWeatherMap icon code -> condition
OPENWEATHER_ICONS = {
    "01d": "ClearDay",
    "01n": "ClearNight",
    "02d": "PartlyCloudyDay",
    "02n": "PartlyCloudyNight",
    "03d": "Cloudy",
    "03n": "Cloudy",
    "04d": "Cloudy",
    "04n": "Cloudy",
    "09d": "Rainy",
    "09n": "Rainy",
    "10d": "Rainy",
    "10n": "Rainy",
    "11d": "Thunderstorm",
    "11n": "Thunderstorm",
    "13d": "Snow",
    "13n": "Snow",
    "50d": "Fog",
    "50n": "Fog",
}

REPORT_FOOTER = "Monsoon Control Room, WASA Head Office {city}"
NO_PONDING_LABEL = "No Ponding"
EMPTY_CELL = "—"
