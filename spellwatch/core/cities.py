"""City directory."""

from typing import Optional

from loguru import logger

from spellwatch.core.validation import CityInput, parse_input
from spellwatch.store.base import DocumentStore
from spellwatch.store.models import City
from spellwatch.utils.constants import CITIES_COLLECTION


class CityDirectory:
    def __init__(self, store: DocumentStore):
        self.store = store

    def create_city(self, data: dict) -> tuple[City, str]:
        form = parse_input(CityInput, data)
        city = City(city_id="", name=form.name, latitude=form.latitude, longitude=form.longitude)
        city.city_id = self.store.add(CITIES_COLLECTION, city.to_document())
        logger.info(f"Created city {city.name} ({city.city_id})")
        return city, f'City "{city.name}" created with ID: {city.city_id}.'

    def list_cities(self) -> list[City]:
        docs = self.store.query(CITIES_COLLECTION, order_by="name")
        return [City.from_document(d.doc_id, d.data) for d in docs]

    def find_by_name(self, name: str) -> Optional[City]:
        docs = self.store.query(CITIES_COLLECTION, where={"name": name}, limit=1)
        return City.from_document(docs[0].doc_id, docs[0].data) if docs else None
