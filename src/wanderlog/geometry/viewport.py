"""Map viewport: geographic -> screen projection plus pan/zoom events.

:class:`WebMercatorViewport` reproduces what a slippy map (EPSG:3857, 256px
tiles) does: at zoom ``z`` the world is ``256 * 2**z`` pixels wide and screen
Y grows downwards.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from enum import StrEnum
from typing import NamedTuple, Protocol

_logger = logging.getLogger(__name__)

#: Latitude limit of the square Web Mercator world.
MAX_LATITUDE = 85.0511287798


class ScreenPoint(NamedTuple):
    x: float
    y: float


class ViewportEvent(StrEnum):
    MOVE = "moveend"
    ZOOM = "zoomend"


ViewportListener = Callable[[ViewportEvent], None]


class Viewport(Protocol):
    """What the arrow renderer needs from a map."""

    def project(self, lat: float, lng: float) -> ScreenPoint: ...

    def subscribe(self, listener: ViewportListener) -> Callable[[], None]: ...


def _world_point(lat: float, lng: float, scale: float) -> ScreenPoint:
    lat = max(-MAX_LATITUDE, min(MAX_LATITUDE, lat))
    sin_lat = math.sin(math.radians(lat))
    x = scale * (lng + 180.0) / 360.0
    y = scale * (0.5 - math.log((1 + sin_lat) / (1 - sin_lat)) / (4 * math.pi))
    return ScreenPoint(x, y)


def _world_latlng(point: ScreenPoint, scale: float) -> tuple[float, float]:
    lng = point.x / scale * 360.0 - 180.0
    n = math.pi - 2 * math.pi * point.y / scale
    lat = math.degrees(math.atan(math.sinh(n)))
    return (lat, lng)


class WebMercatorViewport:
    """A map view of ``width`` x ``height`` pixels centred on ``center``.

    ``project`` returns container pixels (origin at the top-left corner of
    the view), evaluated against the current centre and zoom.
    """

    def __init__(
        self,
        center: tuple[float, float] = (40.0, 0.0),
        zoom: float = 6,
        *,
        size: tuple[int, int] = (1024, 768),
        tile_size: int = 256,
        min_zoom: float = 0,
        max_zoom: float = 19,
    ) -> None:
        self._tile_size = tile_size
        self._min_zoom = min_zoom
        self._max_zoom = max_zoom
        self._size = size
        self._center = (float(center[0]), float(center[1]))
        self._zoom = self._clamp_zoom(zoom)
        self._listeners: list[ViewportListener] = []

    @property
    def center(self) -> tuple[float, float]:
        return self._center

    @property
    def zoom(self) -> float:
        return self._zoom

    @property
    def size(self) -> tuple[int, int]:
        return self._size

    def _clamp_zoom(self, zoom: float) -> float:
        return max(self._min_zoom, min(self._max_zoom, float(zoom)))

    def _scale(self) -> float:
        return self._tile_size * (2.0**self._zoom)

    def project(self, lat: float, lng: float) -> ScreenPoint:
        scale = self._scale()
        point = _world_point(lat, lng, scale)
        origin = _world_point(self._center[0], self._center[1], scale)
        return ScreenPoint(
            point.x - origin.x + self._size[0] / 2,
            point.y - origin.y + self._size[1] / 2,
        )

    def unproject(self, point: ScreenPoint) -> tuple[float, float]:
        scale = self._scale()
        origin = _world_point(self._center[0], self._center[1], scale)
        world = ScreenPoint(
            point.x + origin.x - self._size[0] / 2,
            point.y + origin.y - self._size[1] / 2,
        )
        return _world_latlng(world, scale)

    # ------------------------------------------------------------------
    # Navigation (each emits the matching event)
    # ------------------------------------------------------------------

    def set_view(self, center: tuple[float, float], zoom: float | None = None) -> None:
        new_zoom = self._zoom if zoom is None else self._clamp_zoom(zoom)
        zoom_changed = new_zoom != self._zoom
        self._center = (float(center[0]), float(center[1]))
        self._zoom = new_zoom
        if zoom_changed:
            self._emit(ViewportEvent.ZOOM)
        self._emit(ViewportEvent.MOVE)

    def set_zoom(self, zoom: float) -> None:
        self.set_view(self._center, zoom)

    def pan_by(self, dx: float, dy: float) -> None:
        """Move the view by a pixel offset (positive ``dy`` pans south)."""
        half_w, half_h = self._size[0] / 2, self._size[1] / 2
        self.set_view(self.unproject(ScreenPoint(half_w + dx, half_h + dy)))

    def resize(self, width: int, height: int) -> None:
        self._size = (width, height)
        self._emit(ViewportEvent.MOVE)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def subscribe(self, listener: ViewportListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _emit(self, event: ViewportEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                _logger.warning("Viewport %s listener failed", event, exc_info=True)
