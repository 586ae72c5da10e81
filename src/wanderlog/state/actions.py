"""Tagged store actions.

Store operations never touch :class:`~wanderlog.state.reducer.StoreState`
directly; they dispatch one of these outcomes and the reducer derives the
next state.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from wanderlog.models.record import TripRecord


class ActionType(StrEnum):
    LOADING = "loading"
    LOADED = "records/loaded"
    RECORD_LOADED = "record/loaded"
    CREATED = "record/created"
    DELETED = "record/deleted"
    REJECTED = "rejected"


class _Action(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class Loading(_Action):
    type: Literal[ActionType.LOADING] = ActionType.LOADING


class Loaded(_Action):
    """The whole collection was (re)loaded."""

    type: Literal[ActionType.LOADED] = ActionType.LOADED
    records: tuple[TripRecord, ...] = ()


class RecordLoaded(_Action):
    """A single record was looked up and becomes current."""

    type: Literal[ActionType.RECORD_LOADED] = ActionType.RECORD_LOADED
    record: TripRecord


class Created(_Action):
    type: Literal[ActionType.CREATED] = ActionType.CREATED
    record: TripRecord


class Deleted(_Action):
    type: Literal[ActionType.DELETED] = ActionType.DELETED
    record_id: str


class Rejected(_Action):
    """An operation failed.

    ``records`` replaces the collection when given (``()`` after a failed
    load, the pre-operation snapshot after a rolled-back optimistic
    delete) and ``current_record`` is restored alongside it. When
    ``records`` is ``None`` the collection and selection are kept.
    """

    type: Literal[ActionType.REJECTED] = ActionType.REJECTED
    error: str
    records: tuple[TripRecord, ...] | None = None
    current_record: TripRecord | None = None


StoreAction = Annotated[
    Loading | Loaded | RecordLoaded | Created | Deleted | Rejected,
    Field(discriminator="type"),
]
