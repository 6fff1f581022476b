"""Input schemas for data-entry and admin forms."""

from typing import ClassVar, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from spellwatch.utils.errors import ValidationError


class FormInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    # field (or alias) -> message shown when that field fails
    error_messages: ClassVar[dict] = {}


T = TypeVar("T", bound=FormInput)


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class PondingPointInput(FormInput):
    id: Optional[str] = None
    name: str = Field(min_length=1)
    current_spell: float = Field(ge=0, allow_inf_nan=False, alias="currentSpell")
    ponding: float = Field(ge=0, allow_inf_nan=False)
    cleared_in_time: Optional[str] = Field(None, alias="clearedInTime")

    error_messages: ClassVar[dict] = {
        "name": "Name is required.",
        "currentSpell": "Spell must be a positive number.",
        "ponding": "Ponding must be a positive number.",
    }

    @field_validator("id", mode="before")
    @classmethod
    def blank_id_to_none(cls, value):
        return _blank_to_none(value)


class ReadingInput(FormInput):
    id: str = Field(min_length=1)
    current_spell: float = Field(ge=0, allow_inf_nan=False, alias="currentSpell")
    ponding: float = Field(ge=0, allow_inf_nan=False)
    cleared_in_time: Optional[str] = Field(None, alias="clearedInTime")

    error_messages: ClassVar[dict] = {
        "id": "Every reading needs a point ID.",
        "currentSpell": "Spell must be a positive number.",
        "ponding": "Ponding must be a positive number.",
    }


class CityInput(FormInput):
    name: str = Field(min_length=1)
    latitude: float = Field(ge=-90, le=90, allow_inf_nan=False)
    longitude: float = Field(ge=-180, le=180, allow_inf_nan=False)

    error_messages: ClassVar[dict] = {
        "name": "City name is required.",
        "latitude": "Invalid latitude.",
        "longitude": "Invalid longitude.",
    }


class AccessRequestInput(FormInput):
    email: EmailStr
    role: Literal["city-user", "viewer"]
    assigned_city: Optional[str] = Field(None, alias="assignedCity")

    error_messages: ClassVar[dict] = {
        "email": "Invalid email address.",
        "role": "Role is required.",
    }

    @field_validator("assigned_city", mode="before")
    @classmethod
    def blank_city_to_none(cls, value):
        return _blank_to_none(value)

    @model_validator(mode="after")
    def check_assigned_city(self):
        if self.role == "city-user" and not self.assigned_city:
            raise ValueError("Assigned city is required for city users.")
        return self


def parse_input(model: type[T], data: dict) -> T:
    """Validate ``data`` and surface the first failing field's message."""
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        err = e.errors()[0]
        field_name = str(err["loc"][0]) if err["loc"] else None
        if err["type"] == "value_error" and "error" in err.get("ctx", {}):
            message = str(err["ctx"]["error"])
        else:
            message = model.error_messages.get(field_name) or err["msg"]
        raise ValidationError(message, field=field_name) from e
