"""Ponding-point records scoped by city."""

from datetime import datetime, timezone, tzinfo
from typing import Callable, Iterable, Optional

from loguru import logger

from spellwatch.core.aggregation import apply_reading, local_timezone, summarize_city, CityRainfallSummary
from spellwatch.core.clearance import ClearanceRule, clearance_rule
from spellwatch.core.validation import PondingPointInput, ReadingInput, parse_input
from spellwatch.store.base import SERVER_TIMESTAMP, DocumentStore
from spellwatch.store.models import PondingPoint
from spellwatch.utils.constants import POINTS_COLLECTION
from spellwatch.utils.errors import ClearanceRequiredError, PointNotFoundError, ValidationError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PondingPointStore:
    """CRUD over ponding points, applying the clearance rule and the
    rainfall aggregates on every write."""

    def __init__(
        self,
        store: DocumentStore,
        clock: Optional[Callable[[], datetime]] = None,
        tz: Optional[tzinfo] = None,
        rule: ClearanceRule = clearance_rule,
    ):
        self.store = store
        self.clock = clock or _utcnow
        self.tz = tz or local_timezone()
        self.rule = rule

    def list_points(self, city_name: str) -> list[PondingPoint]:
        docs = self.store.query(POINTS_COLLECTION, where={"cityName": city_name})
        points = [PondingPoint.from_document(d.doc_id, d.data) for d in docs]
        return sorted(points, key=lambda p: p.name.lower())

    def get_point(self, city_name: str, point_id: str) -> PondingPoint:
        doc = self.store.get(POINTS_COLLECTION, point_id)
        if doc is None or doc.data.get("cityName") != city_name:
            raise PointNotFoundError(point_id, city_name)
        return PondingPoint.from_document(doc.doc_id, doc.data)

    def summary(self, city_name: str) -> CityRainfallSummary:
        return summarize_city(city_name, self.list_points(city_name), self.clock(), self.tz)

    def _apply(
        self,
        existing: Optional[PondingPoint],
        current_spell: float,
        ponding: float,
        cleared_in_time: Optional[str],
        now: datetime,
    ) -> dict:
        """Fields written for one reading (everything except name/city)."""
        aggregate = apply_reading(existing, current_spell, now, self.tz)
        if cleared_in_time is None:
            cleared_in_time = existing.cleared_in_time if existing else ""
        return {
            "currentSpell": current_spell,
            "ponding": ponding,
            "clearedInTime": cleared_in_time,
            "isRaining": current_spell > 0,
            "dailyMaxSpell": aggregate.daily_max_spell,
            "maxSpellRainfall": aggregate.max_spell_rainfall,
            "updatedAt": SERVER_TIMESTAMP,
        }

    def add_or_update(self, city_name: str, data: dict) -> str:
        """Create a point (no ``id``) or update an existing one.

        Returns the message shown to the operator.
        """
        form = parse_input(PondingPointInput, data)
        now = self.clock()

        if form.id:
            existing = self.get_point(city_name, form.id)
            self.rule.validate(existing.ponding, form.ponding, form.cleared_in_time, existing.name)
            fields = self._apply(existing, form.current_spell, form.ponding, form.cleared_in_time, now)
            fields.update({"name": form.name, "cityName": city_name})
            self.store.set(POINTS_COLLECTION, form.id, fields, merge=True)
            logger.info(f"Updated ponding point {form.name} ({form.id}) in {city_name}")
            return "Ponding point updated successfully."

        fields = self._apply(None, form.current_spell, form.ponding, form.cleared_in_time, now)
        fields.update({"name": form.name, "cityName": city_name})
        point_id = self.store.add(POINTS_COLLECTION, fields)
        logger.info(f"Created ponding point {form.name} ({point_id}) in {city_name}")
        return "Ponding point created successfully."

    def batch_update(self, city_name: str, readings: Iterable[dict]) -> str:
        """Apply many readings as one atomic write.

        Every reading is validated before anything is written. A clearance
        failure on any point rejects the whole batch, naming each failing point.
        """
        forms = [parse_input(ReadingInput, r) for r in readings]
        if not forms:
            raise ValidationError("No readings submitted.", field="points")

        seen = set()
        for form in forms:
            if form.id in seen:
                raise ValidationError(f"Point {form.id} appears more than once in the batch.", field="points")
            seen.add(form.id)

        now = self.clock()
        existing = {form.id: self.get_point(city_name, form.id) for form in forms}

        missing_clearance = [
            existing[form.id].name
            for form in forms
            if self.rule.requires_clearance(existing[form.id].ponding, form.ponding, form.cleared_in_time)
        ]
        if missing_clearance:
            logger.warning(f"Batch for {city_name} rejected, clearance time missing: {missing_clearance}")
            raise ClearanceRequiredError(missing_clearance)

        batch = self.store.batch()
        for form in forms:
            fields = self._apply(existing[form.id], form.current_spell, form.ponding, form.cleared_in_time, now)
            batch.update(POINTS_COLLECTION, form.id, fields)
        batch.commit()

        logger.info(f"Batch updated {len(forms)} ponding point(s) in {city_name}")
        return f"{len(forms)} ponding point(s) updated successfully."

    def delete(self, city_name: str, point_id: Optional[str]) -> str:
        if not point_id:
            raise ValidationError("Cannot delete point without an ID.", field="id")
        point = self.get_point(city_name, point_id)
        self.store.delete(POINTS_COLLECTION, point_id)
        logger.info(f"Deleted ponding point {point.name} ({point_id}) from {city_name}")
        return "Ponding point deleted successfully."
