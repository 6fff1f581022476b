"""Store module."""
from loguru import logger

from spellwatch.store.base import SERVER_TIMESTAMP, Document, DocumentStore, WriteBatch
from spellwatch.store.memory import MemoryStore
from spellwatch.store.models import City, PondingPoint, Spell, SpellEntry, UserRequest, WeatherData
from spellwatch.utils.config import Settings


def create_store(settings: Settings) -> DocumentStore:
    """Build the store handle selected by ``store.backend``."""
    backend = settings.store.backend
    if backend == "firestore":
        from spellwatch.store.connection import FirestoreStore
        return FirestoreStore(settings.firestore)
    if backend == "memory":
        logger.warning("Using in-memory store; data is lost when the process exits")
        return MemoryStore()
    raise ValueError(f"Unknown store backend: {backend}")
