"""Spell lifecycle: start, stop and archive per city."""

from typing import Optional
from urllib.parse import quote

from loguru import logger

from spellwatch.core.points import PondingPointStore
from spellwatch.store.base import SERVER_TIMESTAMP, DocumentStore
from spellwatch.store.models import Spell, SpellEntry
from spellwatch.utils.constants import (
    POINTS_COLLECTION,
    SPELL_ACTIVE,
    SPELL_COMPLETED,
    SPELL_LOCKS_COLLECTION,
    SPELLS_COLLECTION,
)
from spellwatch.utils.errors import (
    AlreadyActiveError,
    DocumentExistsError,
    NoActiveSpellError,
    RainfallStillActiveError,
)


def lock_id(city_name: str) -> str:
    """Document id of the per-city active-spell lock.

    The city name is kept exact and percent-encoded, so "/" never reaches the
    id and distinct names never share a lock.
    """
    return "city-" + quote(city_name, safe="")


class SpellLifecycleController:
    """Per-city state machine: NoActiveSpell <-> SpellActive.

    A spell document is created on start and mutated exactly once on stop,
    when the final readings of every point are archived into ``spellData``.
    While a spell is active a lock document keyed by city exists in
    ``spell_locks``; it is created and deleted in the same batches as the
    spell transitions, so two concurrent starts cannot both commit.
    """

    def __init__(self, store: DocumentStore, points: Optional[PondingPointStore] = None):
        self.store = store
        self.points = points or PondingPointStore(store)

    def get_active_spell(self, city_name: str) -> Optional[Spell]:
        docs = self.store.query(
            SPELLS_COLLECTION,
            where={"cityName": city_name, "status": SPELL_ACTIVE},
            limit=1,
        )
        if not docs:
            return None
        return Spell.from_document(docs[0].doc_id, docs[0].data)

    def get_spell(self, spell_id: str) -> Optional[Spell]:
        doc = self.store.get(SPELLS_COLLECTION, spell_id)
        return Spell.from_document(doc.doc_id, doc.data) if doc else None

    def _release_stale_lock(self, city_name: str) -> None:
        lock = self.store.get(SPELL_LOCKS_COLLECTION, lock_id(city_name))
        if lock is None:
            return
        spell = self.get_spell(lock.data.get("spellId", ""))
        if spell is None or not spell.is_active:
            logger.warning(f"Releasing stale spell lock for {city_name}")
            self.store.delete(SPELL_LOCKS_COLLECTION, lock_id(city_name))

    def start_spell(self, city_name: str) -> Spell:
        if self.get_active_spell(city_name):
            raise AlreadyActiveError(city_name)

        self._release_stale_lock(city_name)

        spell_id = self.store.new_id(SPELLS_COLLECTION)
        batch = self.store.batch()
        batch.create(SPELL_LOCKS_COLLECTION, lock_id(city_name), {
            "cityName": city_name,
            "spellId": spell_id,
            "lockedAt": SERVER_TIMESTAMP,
        })
        batch.set(SPELLS_COLLECTION, spell_id, {
            "cityName": city_name,
            "status": SPELL_ACTIVE,
            "startTime": SERVER_TIMESTAMP,
            "endTime": None,
            "spellData": [],
        })
        try:
            batch.commit()
        except DocumentExistsError:
            logger.warning(f"Concurrent spell start for {city_name} lost the lock")
            raise AlreadyActiveError(city_name) from None

        logger.info(f"Spell {spell_id} started for {city_name}")
        return self.get_spell(spell_id)

    def stop_spell(self, city_name: str) -> Spell:
        spell = self.get_active_spell(city_name)
        if spell is None:
            raise NoActiveSpellError(city_name)

        points = self.points.list_points(city_name)
        raining = [p.name for p in points if p.current_spell > 0]
        if raining:
            raise RainfallStillActiveError(city_name, raining)

        # Readings captured before the reset below
        entries = [
            SpellEntry(
                point_id=p.point_id,
                point_name=p.name,
                total_rainfall=max(p.max_spell_rainfall, p.current_spell),
                ponding_level=p.ponding,
                cleared_in_time=p.cleared_in_time,
            )
            for p in points
        ]

        batch = self.store.batch()
        batch.update(SPELLS_COLLECTION, spell.spell_id, {
            "status": SPELL_COMPLETED,
            "endTime": SERVER_TIMESTAMP,
            "spellData": [e.to_dict() for e in entries],
        })
        for p in points:
            batch.update(POINTS_COLLECTION, p.point_id, {
                "currentSpell": 0,
                "isRaining": False,
                "maxSpellRainfall": 0,
            })
        batch.delete(SPELL_LOCKS_COLLECTION, lock_id(city_name))
        batch.commit()

        logger.info(f"Spell {spell.spell_id} stopped for {city_name}: archived {len(entries)} point(s)")
        return self.get_spell(spell.spell_id)

    def get_latest_report(self, city_name: str) -> Optional[Spell]:
        """Most recently completed spell of the city, or None."""
        docs = self.store.query(
            SPELLS_COLLECTION,
            where={"cityName": city_name, "status": SPELL_COMPLETED},
            order_by="endTime",
            descending=True,
            limit=1,
        )
        if not docs:
            return None
        return Spell.from_document(docs[0].doc_id, docs[0].data)
