"""Derived rainfall aggregates for ponding points."""

from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from typing import Iterable, Optional

import pytz

from spellwatch.store.models import PondingPoint
from spellwatch.utils.config import settings


def local_timezone(name: Optional[str] = None) -> tzinfo:
    return pytz.timezone(name or settings.region.timezone)


def local_date(moment: datetime, tz: tzinfo) -> date:
    """Calendar date of ``moment`` in ``tz``. Naive values are taken as already local."""
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(tz).date()


def is_same_day(a: Optional[datetime], b: datetime, tz: tzinfo) -> bool:
    if a is None:
        return False
    return local_date(a, tz) == local_date(b, tz)


@dataclass(frozen=True)
class ReadingAggregate:
    daily_max_spell: float
    max_spell_rainfall: float


@dataclass(frozen=True)
class CityRainfallSummary:
    city_name: str
    max_current_spell: float
    max_spell_today: float
    raining_points: int
    point_count: int

    def to_dict(self) -> dict:
        return {
            "cityName": self.city_name,
            "maxCurrentSpell": self.max_current_spell,
            "maxSpellToday": self.max_spell_today,
            "rainingPoints": self.raining_points,
            "pointCount": self.point_count,
        }


def apply_reading(
    existing: Optional[PondingPoint],
    new_current_spell: float,
    now: datetime,
    tz: Optional[tzinfo] = None,
) -> ReadingAggregate:
    """Fold a new current-spell reading into the point's high-water marks.

    ``existing`` is None for a newly created point, in which case both
    aggregates start at the reading. The daily max resets when the stored
    ``updated_at`` falls on an earlier local calendar day than ``now``; the
    spell max only resets when the spell stops.
    """
    tz = tz or local_timezone()
    if existing is None:
        return ReadingAggregate(new_current_spell, new_current_spell)

    if is_same_day(existing.updated_at, now, tz):
        daily_max = max(existing.daily_max_spell or 0, new_current_spell)
    else:
        daily_max = new_current_spell

    spell_max = max(existing.max_spell_rainfall or 0, new_current_spell)
    return ReadingAggregate(daily_max_spell=daily_max, max_spell_rainfall=spell_max)


def summarize_city(
    city_name: str,
    points: Iterable[PondingPoint],
    now: datetime,
    tz: Optional[tzinfo] = None,
) -> CityRainfallSummary:
    tz = tz or local_timezone()
    points = list(points)

    max_current = max((p.current_spell for p in points), default=0.0)
    max_today = max(
        (p.daily_max_spell for p in points if is_same_day(p.updated_at, now, tz)),
        default=0.0,
    )
    return CityRainfallSummary(
        city_name=city_name,
        max_current_spell=max(max_current, 0.0),
        max_spell_today=max(max_today, 0.0),
        raining_points=sum(1 for p in points if p.current_spell > 0),
        point_count=len(points),
    )
