"""Trip record models."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, Field, field_validator, model_validator

from wanderlog._constants import flag_emoji
from wanderlog._normalize import safe_float, safe_str
from wanderlog.models._base import Timestamp, WanderBaseModel


class RecordKind(StrEnum):
    VISITED = "visited"
    PLANNED = "planned"


class Position(WanderBaseModel):
    """Geographic position of a record.

    Either coordinate may be ``None`` (absent, non-numeric or non-finite in
    the source payload); such a record has no map representation.
    """

    lat: float | None = None
    lng: float | None = None

    @field_validator("lat", "lng", mode="before")
    @classmethod
    def _coerce_coordinate(cls, value: Any) -> float | None:
        return safe_float(value)

    @property
    def is_complete(self) -> bool:
        return self.lat is not None and self.lng is not None

    def as_pair(self) -> tuple[float, float] | None:
        if self.lat is None or self.lng is None:
            return None
        return (self.lat, self.lng)


class RecordDraft(WanderBaseModel):
    """A record as submitted by the UI, before an id is assigned.

    Parameters
    ----------
    city_name : str
        Display name of the city.
    country : str
        Display name of the country.
    emoji : str
        Country flag. Derived from ``country_code`` when left empty.
    country_code : str or None
        Two-letter ISO code from reverse geocoding. Not persisted.
    date : datetime or None
        Visit (or planned) date; ``None`` when missing or unparseable.
    notes : str
        Free text.
    position : Position or None
        Coordinates, possibly partial.
    """

    city_name: str = ""
    country: str = ""
    emoji: str = ""
    country_code: str | None = Field(default=None, exclude=True)
    date: Timestamp = None
    notes: str = ""
    position: Position | None = None

    @field_validator("city_name", "country", "emoji", "notes", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return safe_str(value)

    @field_validator("position", mode="before")
    @classmethod
    def _coerce_position(cls, value: Any) -> Any:
        # Anything that isn't a mapping (or Position) is treated as "no position".
        if isinstance(value, (dict, Position)):
            return value
        return None

    @model_validator(mode="after")
    def _derive_emoji(self) -> RecordDraft:
        code = (self.country_code or "").strip()
        if not self.emoji and len(code) == 2 and code.isalpha():
            object.__setattr__(self, "emoji", flag_emoji(code))
        return self

    @property
    def coordinates(self) -> tuple[float, float] | None:
        """``(lat, lng)`` when both are finite, else ``None``."""
        return self.position.as_pair() if self.position is not None else None


class TripRecord(RecordDraft):
    """A stored visited-or-planned city entry.

    Remote payloads name the identity field ``_id``; it is normalized into
    ``id`` here so the rest of the library only ever sees ``id``.
    """

    id: str = Field(validation_alias=AliasChoices("id", "_id"))

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        text = safe_str(value).strip()
        if not text:
            raise ValueError("id must be non-empty")
        return text

    @classmethod
    def from_draft(cls, draft: RecordDraft, record_id: str) -> TripRecord:
        return cls.model_validate({**draft.model_dump(), "id": record_id})


#: Seed shown to a brand-new guest so the map isn't empty.
DEMO_RECORDS: tuple[TripRecord, ...] = (
    TripRecord(
        id="demo-van",
        city_name="Vancouver",
        country="Canada",
        emoji=flag_emoji("CA"),
        date=datetime(2024, 6, 1),
        notes="Welcome to Guest Mode! This is sample data.",
        position=Position(lat=49.2827, lng=-123.1207),
    ),
)
