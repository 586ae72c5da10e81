"""Records -> time-ordered coordinate path.

Pure functions; the same collection always projects to the same path.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import TypeVar

from wanderlog.models.record import RecordDraft

Coordinate = tuple[float, float]
"""``(lat, lng)``."""

R = TypeVar("R", bound=RecordDraft)


def _date_key(record: RecordDraft) -> tuple[int, float]:
    # (0, ts) for dated records, (1, 0) for undated: undated always sort last.
    date: datetime | None = record.date
    if date is None:
        return (1, 0.0)
    return (0, date.timestamp())


def sort_by_date(records: Iterable[R]) -> list[R]:
    """Sort ascending by date; missing/unparseable dates last, ties keep input order."""
    return sorted(records, key=_date_key)


def project_path(records: Iterable[RecordDraft]) -> list[Coordinate]:
    """Date-ordered ``(lat, lng)`` pairs of every record with a finite position."""
    path: list[Coordinate] = []
    for record in sort_by_date(records):
        pair = record.coordinates
        if pair is not None:
            path.append(pair)
    return path
