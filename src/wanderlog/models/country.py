"""Per-country aggregation model."""

from __future__ import annotations

from datetime import datetime

from wanderlog.models._base import WanderBaseModel


class CountrySummary(WanderBaseModel):
    """One row of the country list.

    Parameters
    ----------
    country : str
        Country display name (the aggregation key).
    emoji : str
        Flag of the first record seen for the country.
    latest_date : datetime or None
        Most recent valid record date in the country.
    city_count : int
        Number of records in the country.
    """

    country: str
    emoji: str = ""
    latest_date: datetime | None = None
    city_count: int = 0
