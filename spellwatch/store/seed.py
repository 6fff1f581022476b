"""Database seeding from YAML configs."""

from pathlib import Path
from typing import Optional

import yaml
from loguru import logger

from spellwatch.store.base import SERVER_TIMESTAMP, DocumentStore
from spellwatch.store.models import City, PondingPoint
from spellwatch.utils.config import Settings, get_project_root, settings as default_settings
from spellwatch.utils.constants import CITIES_COLLECTION, POINTS_COLLECTION


def load_yaml(path: Path) -> dict:
    with open(path) as f:
        return yaml.safe_load(f) or {}


def seed_cities(store: DocumentStore, config: dict) -> int:
    """Add cities that are not registered yet."""
    logger.info("Seeding cities...")
    count = 0
    for entry in config.get("cities", []):
        if store.query(CITIES_COLLECTION, where={"name": entry["name"]}, limit=1):
            logger.debug(f"City exists: {entry['name']}")
            continue
        city = City(city_id="", name=entry["name"], latitude=entry["latitude"], longitude=entry["longitude"])
        store.add(CITIES_COLLECTION, city.to_document())
        count += 1

    logger.info(f"Seeded {count} cities")
    return count


def seed_ponding_points(store: DocumentStore, config: dict) -> int:
    """Add each city's ponding points with zeroed readings."""
    logger.info("Seeding ponding points...")
    count = 0
    for entry in config.get("cities", []):
        city_name = entry["name"]
        existing = {
            d.data.get("name")
            for d in store.query(POINTS_COLLECTION, where={"cityName": city_name})
        }
        for name in entry.get("ponding_points", []):
            if name in existing:
                continue
            point = PondingPoint(point_id="", name=name, city_name=city_name)
            store.add(POINTS_COLLECTION, {**point.to_document(), "updatedAt": SERVER_TIMESTAMP})
            count += 1

    logger.info(f"Seeded {count} ponding points")
    return count


def seed_database(store: DocumentStore, path: Optional[Path] = None, settings: Optional[Settings] = None) -> dict:
    """Full database seeding."""
    settings = settings or default_settings
    path = path or get_project_root() / settings.region.cities_file
    logger.info("=" * 50)
    logger.info(f"SEEDING DATABASE from {path}")
    logger.info("=" * 50)

    if not path.exists():
        logger.error(f"Not found: {path}")
        return {"cities": 0, "ponding_points": 0}

    config = load_yaml(path)
    cities = seed_cities(store, config)
    points = seed_ponding_points(store, config)

    logger.info("=" * 50)
    logger.info(f"Done: {cities} cities, {points} ponding points")
    logger.info("=" * 50)

    return {"cities": cities, "ponding_points": points}
