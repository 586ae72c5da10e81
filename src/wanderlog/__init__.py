"""wanderlog - Async travel log with guest/remote record stores and directional map paths."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("wanderlog")
except PackageNotFoundError:
    __version__ = "0+local"
from wanderlog.client import TripLog
from wanderlog.config import WanderConfig
from wanderlog.exceptions import (
    CreateFailedError,
    DeleteFailedError,
    LoadFailedError,
    PersistenceWriteError,
    RecordNotFoundError,
    WanderConfigError,
    WanderError,
    WanderStoreError,
    WanderTransportError,
)
from wanderlog.geometry import (
    ArrowMarker,
    DirectionalPathRenderer,
    PathLayer,
    TripMap,
    WebMercatorViewport,
    arrow_angle,
    compute_arrows,
    project_path,
    resolve_connector,
)
from wanderlog.models import CountrySummary, Position, RecordDraft, RecordKind, TripRecord
from wanderlog.persistence import JsonFilePersistence, LocalPersistence, MemoryPersistence
from wanderlog.session import AuthState, StoreMode
from wanderlog.state.reducer import StoreState
from wanderlog.state.store import RecordStore

__all__ = [
    "__version__",
    "ArrowMarker",
    "AuthState",
    "CountrySummary",
    "CreateFailedError",
    "DeleteFailedError",
    "DirectionalPathRenderer",
    "JsonFilePersistence",
    "LoadFailedError",
    "LocalPersistence",
    "MemoryPersistence",
    "PathLayer",
    "PersistenceWriteError",
    "Position",
    "RecordDraft",
    "RecordKind",
    "RecordNotFoundError",
    "RecordStore",
    "StoreMode",
    "StoreState",
    "TripLog",
    "TripMap",
    "TripRecord",
    "WanderConfig",
    "WanderConfigError",
    "WanderError",
    "WanderStoreError",
    "WanderTransportError",
    "WebMercatorViewport",
    "arrow_angle",
    "compute_arrows",
    "project_path",
    "resolve_connector",
]
