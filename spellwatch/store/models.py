"""Data models for the document store."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if isinstance(value, datetime) else value


def _number(value, default: float = 0.0) -> float:
    return float(value) if value is not None else default


@dataclass
class City:
    """Monitored city."""
    city_id: str
    name: str
    latitude: float
    longitude: float

    def to_document(self) -> dict:
        return {"name": self.name, "latitude": self.latitude, "longitude": self.longitude}

    def to_dict(self) -> dict:
        return {"id": self.city_id, **self.to_document()}

    @classmethod
    def from_document(cls, doc_id: str, data: dict) -> "City":
        return cls(
            city_id=doc_id,
            name=data.get("name", ""),
            latitude=_number(data.get("latitude")),
            longitude=_number(data.get("longitude")),
        )


@dataclass
class PondingPoint:
    """Monitored location where standing water is measured."""
    point_id: str
    name: str
    city_name: str
    current_spell: float = 0.0
    ponding: float = 0.0
    cleared_in_time: str = ""
    is_raining: bool = False
    max_spell_rainfall: float = 0.0
    daily_max_spell: float = 0.0
    updated_at: Optional[datetime] = None

    def to_document(self) -> dict:
        return {
            "name": self.name,
            "cityName": self.city_name,
            "currentSpell": self.current_spell,
            "ponding": self.ponding,
            "clearedInTime": self.cleared_in_time,
            "isRaining": self.is_raining,
            "maxSpellRainfall": self.max_spell_rainfall,
            "dailyMaxSpell": self.daily_max_spell,
            "updatedAt": self.updated_at,
        }

    def to_dict(self) -> dict:
        data = self.to_document()
        data["updatedAt"] = _iso(self.updated_at)
        return {"id": self.point_id, **data}

    @classmethod
    def from_document(cls, doc_id: str, data: dict) -> "PondingPoint":
        return cls(
            point_id=doc_id,
            name=data.get("name", ""),
            city_name=data.get("cityName", ""),
            current_spell=_number(data.get("currentSpell")),
            ponding=_number(data.get("ponding")),
            cleared_in_time=data.get("clearedInTime") or "",
            is_raining=bool(data.get("isRaining", False)),
            max_spell_rainfall=_number(data.get("maxSpellRainfall")),
            daily_max_spell=_number(data.get("dailyMaxSpell")),
            updated_at=data.get("updatedAt"),
        )


@dataclass
class SpellEntry:
    """Final reading of one point, archived when a spell stops."""
    point_id: str
    point_name: str
    total_rainfall: float
    ponding_level: float
    cleared_in_time: str = ""

    def to_dict(self) -> dict:
        return {
            "pointId": self.point_id,
            "pointName": self.point_name,
            "totalRainfall": self.total_rainfall,
            "pondingLevel": self.ponding_level,
            "clearedInTime": self.cleared_in_time,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SpellEntry":
        return cls(
            point_id=data.get("pointId", ""),
            point_name=data.get("pointName", ""),
            total_rainfall=_number(data.get("totalRainfall")),
            ponding_level=_number(data.get("pondingLevel")),
            cleared_in_time=data.get("clearedInTime") or "",
        )


@dataclass
class Spell:
    """Bounded rainfall event for a city."""
    spell_id: str
    city_name: str
    status: str
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    spell_data: list = field(default_factory=list)

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def to_document(self) -> dict:
        return {
            "cityName": self.city_name,
            "status": self.status,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "spellData": [e.to_dict() for e in self.spell_data],
        }

    def to_dict(self) -> dict:
        data = self.to_document()
        data["startTime"] = _iso(self.start_time)
        data["endTime"] = _iso(self.end_time)
        return {"id": self.spell_id, **data}

    @classmethod
    def from_document(cls, doc_id: str, data: dict) -> "Spell":
        return cls(
            spell_id=doc_id,
            city_name=data.get("cityName", ""),
            status=data.get("status", "active"),
            start_time=data.get("startTime"),
            end_time=data.get("endTime"),
            spell_data=[SpellEntry.from_dict(e) for e in data.get("spellData") or []],
        )


@dataclass
class UserRequest:
    """Pending access request submitted through signup."""
    request_id: str
    email: str
    role: str
    status: str = "pending"
    assigned_city: Optional[str] = None
    requested_at: Optional[datetime] = None

    def to_document(self) -> dict:
        return {
            "email": self.email,
            "role": self.role,
            "assignedCity": self.assigned_city,
            "status": self.status,
            "requestedAt": self.requested_at,
        }

    def to_dict(self) -> dict:
        data = self.to_document()
        data["requestedAt"] = _iso(self.requested_at)
        return {"id": self.request_id, **data}

    @classmethod
    def from_document(cls, doc_id: str, data: dict) -> "UserRequest":
        return cls(
            request_id=doc_id,
            email=data.get("email", ""),
            role=data.get("role", "viewer"),
            status=data.get("status", "pending"),
            assigned_city=data.get("assignedCity"),
            requested_at=data.get("requestedAt"),
        )


@dataclass
class WeatherData:
    """Current conditions shown on the dashboard."""
    weather_id: str
    city: str
    condition: str
    temperature: int
    last_updated: datetime
    is_spell_active: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.weather_id,
            "city": self.city,
            "condition": self.condition,
            "temperature": self.temperature,
            "lastUpdated": _iso(self.last_updated),
            "isSpellActive": self.is_spell_active,
        }
