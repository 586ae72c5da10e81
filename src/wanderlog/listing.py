"""Sorting and per-country aggregation for the list views."""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum

from wanderlog.models.country import CountrySummary
from wanderlog.models.record import RecordDraft, TripRecord


class SortKey(StrEnum):
    NAME = "name"
    DATE = "date"


class SortOrder(StrEnum):
    ASC = "asc"
    DESC = "desc"


def _timestamp_or_zero(record: RecordDraft) -> float:
    return record.date.timestamp() if record.date is not None else 0.0


def sort_records(
    records: Iterable[TripRecord],
    key: SortKey = SortKey.DATE,
    order: SortOrder = SortOrder.DESC,
) -> list[TripRecord]:
    """Sort for the city list.

    Names compare case-insensitively; undated records count as the epoch.
    The sort is stable in both directions.
    """
    reverse = SortOrder(order) is SortOrder.DESC
    if SortKey(key) is SortKey.NAME:
        return sorted(records, key=lambda r: r.city_name.lower(), reverse=reverse)
    return sorted(records, key=_timestamp_or_zero, reverse=reverse)


def aggregate_countries(records: Iterable[TripRecord]) -> list[CountrySummary]:
    """One summary per country, in first-seen order, with its latest visit date."""
    summaries: dict[str, CountrySummary] = {}
    for record in records:
        previous = summaries.get(record.country)
        if previous is None:
            summaries[record.country] = CountrySummary(
                country=record.country,
                emoji=record.emoji,
                latest_date=record.date,
                city_count=1,
            )
            continue
        latest = previous.latest_date
        if record.date is not None and (latest is None or record.date > latest):
            latest = record.date
        summaries[record.country] = previous.model_copy(
            update={"latest_date": latest, "city_count": previous.city_count + 1}
        )
    return list(summaries.values())


def sort_countries(
    countries: Iterable[CountrySummary],
    key: SortKey = SortKey.NAME,
    order: SortOrder = SortOrder.ASC,
) -> list[CountrySummary]:
    reverse = SortOrder(order) is SortOrder.DESC
    if SortKey(key) is SortKey.NAME:
        return sorted(countries, key=lambda c: c.country.lower(), reverse=reverse)
    return sorted(
        countries,
        key=lambda c: c.latest_date.timestamp() if c.latest_date is not None else 0.0,
        reverse=reverse,
    )
