from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from datetime import datetime
from typing import Optional

from eventmi.models import NAME_MAX_LENGTH, PLACE_MAX_LENGTH
from eventmi.timestamps import parse_wire_timestamp


# ============== Event Schemas ==============

class EventRecord(BaseModel):
    """Detached snapshot of a row in the events table."""
    id: int
    name: str
    start: datetime
    end: datetime
    place: str

    class Config:
        from_attributes = True
        frozen = True


class EventForm(BaseModel):
    """Form model posted to the add and edit pages.

    Field aliases are the wire names (``Id``, ``Name``, ...).
    """
    id: Optional[int] = Field(default=None, alias="Id")
    name: str = Field(alias="Name", min_length=1, max_length=NAME_MAX_LENGTH)
    start: datetime = Field(alias="Start")
    end: datetime = Field(alias="End")
    place: str = Field(alias="Place", min_length=1, max_length=PLACE_MAX_LENGTH)

    class Config:
        populate_by_name = True
        str_strip_whitespace = True

    @field_validator("id", mode="before")
    @classmethod
    def _blank_id_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("start", "end", mode="before")
    @classmethod
    def _parse_wire(cls, value):
        if isinstance(value, str):
            return parse_wire_timestamp(value)
        return value

    @model_validator(mode="after")
    def _end_not_before_start(self):
        if self.end < self.start:
            raise ValueError("End must not be before Start")
        return self


def form_errors(exc: ValidationError) -> list[str]:
    """Flatten a ValidationError into messages for redisplay on the form."""
    errors = []
    for err in exc.errors():
        field = " -> ".join(str(loc) for loc in err["loc"])
        errors.append(f"{field}: {err['msg']}" if field else err["msg"])
    return errors
