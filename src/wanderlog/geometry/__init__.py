"""Path geometry: projection of records to paths and directional arrows."""

from wanderlog.geometry.arrows import ArrowMarker, DirectionalPathRenderer, PathLayer, arrow_angle, compute_arrows
from wanderlog.geometry.connector import resolve_connector
from wanderlog.geometry.projector import Coordinate, project_path, sort_by_date
from wanderlog.geometry.scene import TripMap
from wanderlog.geometry.viewport import ScreenPoint, Viewport, ViewportEvent, WebMercatorViewport

__all__ = [
    "ArrowMarker",
    "Coordinate",
    "DirectionalPathRenderer",
    "PathLayer",
    "ScreenPoint",
    "TripMap",
    "Viewport",
    "ViewportEvent",
    "WebMercatorViewport",
    "arrow_angle",
    "compute_arrows",
    "project_path",
    "resolve_connector",
    "sort_by_date",
]
