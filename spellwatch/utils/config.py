"""Configuration loader for Spellwatch."""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


class StoreConfig(BaseModel):
    backend: str = "memory"  # memory | firestore


class FirestoreConfig(BaseModel):
    project_id: Optional[str] = None
    database: str = "(default)"
    credentials_file: Optional[str] = None


class WeatherConfig(BaseModel):
    provider: str = "sample"  # sample | openweathermap
    base_url: str = "https://api.openweathermap.org/data/2.5/weather"
    api_key: Optional[str] = None
    units: str = "metric"
    timeout_seconds: int = 10
    sample_seed: Optional[int] = None


class APIConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = True
    cors_origins: list[str] = ["http://localhost:3000"]


class RegionConfig(BaseModel):
    name: str = "Punjab"
    timezone: str = "Asia/Karachi"
    cities_file: str = "config/cities/punjab.yaml"


class LoggingConfig(BaseModel):
    level: str = "DEBUG"
    format: str = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"
    rotation: str = "10 MB"
    retention: str = "7 days"
    to_file: bool = True


class AppConfig(BaseModel):
    name: str = "spellwatch"
    version: str = "0.1.0"
    environment: str = "development"
    debug: bool = True


class Settings(BaseModel):
    app: AppConfig = AppConfig()
    logging: LoggingConfig = LoggingConfig()
    store: StoreConfig = StoreConfig()
    firestore: FirestoreConfig = FirestoreConfig()
    weather: WeatherConfig = WeatherConfig()
    api: APIConfig = APIConfig()
    region: RegionConfig = RegionConfig()


def get_project_root() -> Path:
    return Path(__file__).parent.parent.parent


def load_yaml_config(env: str = "development") -> dict[str, Any]:
    config_path = get_project_root() / "config" / "environments" / f"{env}.yaml"
    if not config_path.exists():
        return {}
    with open(config_path, "r") as f:
        return yaml.safe_load(f) or {}


def get_settings(env: Optional[str] = None) -> Settings:
    env = env or os.getenv("APP_ENV", "development")
    yaml_config = load_yaml_config(env)

    # Override with env vars
    if os.getenv("STORE_BACKEND"):
        yaml_config.setdefault("store", {})["backend"] = os.getenv("STORE_BACKEND")
    if os.getenv("FIRESTORE_PROJECT_ID"):
        yaml_config.setdefault("firestore", {})["project_id"] = os.getenv("FIRESTORE_PROJECT_ID")
    if os.getenv("GOOGLE_APPLICATION_CREDENTIALS"):
        yaml_config.setdefault("firestore", {})["credentials_file"] = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
    if os.getenv("WEATHER_PROVIDER"):
        yaml_config.setdefault("weather", {})["provider"] = os.getenv("WEATHER_PROVIDER")
    if os.getenv("OPENWEATHERMAP_API_KEY"):
        yaml_config.setdefault("weather", {})["api_key"] = os.getenv("OPENWEATHERMAP_API_KEY")

    return Settings(**yaml_config) if yaml_config else Settings()


settings = get_settings()
