"""Base model for wanderlog entities.

Every record-shaped model inherits from :class:`WanderBaseModel` which
provides:

* ``alias_generator=to_camel`` so the camelCase wire/storage keys
  (``cityName``) map to snake_case fields (``city_name``).
* Frozen instances: records are never edited in place, only replaced.
* A ``model_validator(mode="before")`` that drops ``None`` values so the
  field default is used instead.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

from wanderlog._normalize import parse_timestamp

Timestamp = Annotated[datetime | None, BeforeValidator(parse_timestamp)]
"""Annotated type that coerces ISO strings / epoch numbers to UTC datetimes (``None`` if unparseable)."""


class WanderBaseModel(BaseModel):
    """Base for wanderlog entity models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        return {key: value for key, value in values.items() if value is not None}

    def to_payload(self) -> dict[str, Any]:
        """Dump to the camelCase JSON shape used on the wire and in guest storage."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
