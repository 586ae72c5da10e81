"""Pure state transitions for record stores.

``reduce`` is deterministic: given the same starting state and the same
sequence of actions it always produces the same states. It never performs
I/O, so it can be driven from any concurrency model (and from tests)
without a store.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from wanderlog.models.record import TripRecord
from wanderlog.state.actions import (
    Created,
    Deleted,
    Loaded,
    Loading,
    RecordLoaded,
    Rejected,
    StoreAction,
)


class StoreState(BaseModel):
    """Immutable snapshot of one store.

    Invariants maintained by :func:`reduce`:

    * ``records`` ids are unique.
    * ``current_record`` is ``None`` or a record present in ``records``.
    * ``is_loading`` and ``error`` are never set together.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    records: tuple[TripRecord, ...] = ()
    is_loading: bool = False
    current_record: TripRecord | None = None
    error: str = ""

    def find(self, record_id: str) -> TripRecord | None:
        wanted = str(record_id)
        for record in self.records:
            if record.id == wanted:
                return record
        return None

    @property
    def current_id(self) -> str | None:
        return self.current_record.id if self.current_record is not None else None


def _dedupe(records: tuple[TripRecord, ...]) -> tuple[TripRecord, ...]:
    """Keep the first record for each id."""
    seen: set[str] = set()
    unique: list[TripRecord] = []
    for record in records:
        if record.id in seen:
            continue
        seen.add(record.id)
        unique.append(record)
    return tuple(unique)


def _keep_if_present(records: tuple[TripRecord, ...], record: TripRecord | None) -> TripRecord | None:
    if record is None:
        return None
    return record if any(r.id == record.id for r in records) else None


def reduce(state: StoreState, action: StoreAction) -> StoreState:
    """Return the state that follows *action*."""
    if isinstance(action, Loading):
        return state.model_copy(update={"is_loading": True, "error": ""})

    if isinstance(action, Loaded):
        records = _dedupe(action.records)
        return state.model_copy(
            update={
                "is_loading": False,
                "records": records,
                "current_record": _keep_if_present(records, state.current_record),
            }
        )

    if isinstance(action, RecordLoaded):
        # The looked-up version wins over the listed one; a record the list
        # didn't know about yet joins the collection so the selection stays valid.
        record = action.record
        if state.find(record.id) is not None:
            records = tuple(record if r.id == record.id else r for r in state.records)
        else:
            records = (*state.records, record)
        return state.model_copy(update={"is_loading": False, "records": records, "current_record": record})

    if isinstance(action, Created):
        record = action.record
        records = tuple(r for r in state.records if r.id != record.id) + (record,)
        return state.model_copy(update={"is_loading": False, "records": records, "current_record": record})

    if isinstance(action, Deleted):
        records = tuple(r for r in state.records if r.id != action.record_id)
        # Deleting always deselects, whichever record was current.
        return state.model_copy(update={"is_loading": False, "records": records, "current_record": None})

    if isinstance(action, Rejected):
        update: dict[str, object] = {"is_loading": False, "error": action.error}
        if action.records is not None:
            records = _dedupe(action.records)
            update["records"] = records
            update["current_record"] = _keep_if_present(records, action.current_record)
        return state.model_copy(update=update)

    raise ValueError(f"Unknown action type: {action!r}")
