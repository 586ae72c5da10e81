"""Data models for trip records."""

from wanderlog.models._base import Timestamp, WanderBaseModel
from wanderlog.models.country import CountrySummary
from wanderlog.models.record import DEMO_RECORDS, Position, RecordDraft, RecordKind, TripRecord

__all__ = [
    "CountrySummary",
    "DEMO_RECORDS",
    "Position",
    "RecordDraft",
    "RecordKind",
    "Timestamp",
    "TripRecord",
    "WanderBaseModel",
]
