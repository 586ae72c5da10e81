"""Directional arrows along a path.

One arrow per consecutive pair of coordinates, anchored 60% of the way to
the destination and rotated to point at it *on screen*. The rotation depends
on the live projection, so arrows are recomputed whenever the viewport pans
or zooms; a stale angle after a zoom is a correctness bug (Mercator
stretches latitude non-linearly).
"""

from __future__ import annotations

import dataclasses
import logging
import math
from collections.abc import Callable, Sequence

from pydantic import BaseModel, ConfigDict

from wanderlog._constants import ARROW_POSITION
from wanderlog.geometry.projector import Coordinate
from wanderlog.geometry.viewport import ScreenPoint, Viewport, ViewportEvent

_logger = logging.getLogger(__name__)

Projection = Callable[[float, float], ScreenPoint]
MarkersListener = Callable[[list["ArrowMarker"]], None]


@dataclasses.dataclass(frozen=True)
class PathLayer:
    """Styling/z-order group for one kind of path.

    Parameters
    ----------
    name : str
        Layer identifier (``"visited"``, ``"planned"``, ``"connector"``).
    arrow_color : str
        Arrow fill colour.
    line_color : str or None
        Polyline colour; ``None`` uses the map default.
    pane : str
        Map pane the arrows are drawn in.
    z_index : int
        Pane stacking order; later layers draw above earlier ones.
    dashed : bool
        Draw the polyline dashed.
    """

    name: str
    arrow_color: str
    line_color: str | None
    pane: str
    z_index: int
    dashed: bool = False


VISITED_LAYER = PathLayer(name="visited", arrow_color="#2ecc71", line_color=None, pane="arrows", z_index=650)
PLANNED_LAYER = PathLayer(
    name="planned",
    arrow_color="#ff3b30",
    line_color="#ff9800",
    pane="arrows-planned",
    z_index=651,
)
CONNECTOR_LAYER = PathLayer(
    name="connector",
    arrow_color="#ff3b30",
    line_color="#ff9800",
    pane="arrows-connector",
    z_index=652,
    dashed=True,
)


class ArrowMarker(BaseModel):
    """A placed, rotated arrow.

    ``position`` is geographic so the marker can be re-projected by the map;
    ``angle`` is a clockwise-positive screen rotation in degrees for a glyph
    that points right (east) at 0.
    """

    model_config = ConfigDict(frozen=True)

    position: Coordinate
    angle: float
    segment: int
    layer: str = ""

    @property
    def css_transform(self) -> str:
        return f"rotate({self.angle}deg)"


def arrow_angle(start: ScreenPoint, end: ScreenPoint) -> float:
    """Screen rotation (degrees) of an arrow pointing from *start* to *end*."""
    dx = end.x - start.x
    dy = -(end.y - start.y)
    return -(math.atan2(dy, dx) * 180 / math.pi)


def interpolate(a: Coordinate, b: Coordinate, t: float) -> Coordinate:
    """Linear interpolation in lat/lng space."""
    return (a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t)


def compute_arrows(
    coords: Sequence[Coordinate],
    project: Projection,
    *,
    fraction: float = ARROW_POSITION,
    layer: str = "",
) -> list[ArrowMarker]:
    """Arrows for every consecutive pair in *coords*, using *project* as it is right now."""
    markers: list[ArrowMarker] = []
    for index in range(len(coords) - 1):
        a = coords[index]
        b = coords[index + 1]
        p1 = project(a[0], a[1])
        p2 = project(b[0], b[1])
        markers.append(
            ArrowMarker(
                position=interpolate(a, b, fraction),
                angle=arrow_angle(p1, p2),
                segment=index,
                layer=layer,
            )
        )
    return markers


class DirectionalPathRenderer:
    """Keeps one layer's arrows in sync with its path and the viewport.

    Subscribes to the viewport on construction; call :meth:`close` to
    detach. Listeners receive the fresh marker list after every recompute.
    """

    def __init__(
        self,
        viewport: Viewport,
        layer: PathLayer = VISITED_LAYER,
        *,
        fraction: float = ARROW_POSITION,
    ) -> None:
        self._viewport = viewport
        self._layer = layer
        self._fraction = fraction
        self._coords: tuple[Coordinate, ...] = ()
        self._markers: list[ArrowMarker] = []
        self._listeners: list[MarkersListener] = []
        self._unsubscribe: Callable[[], None] | None = viewport.subscribe(self._on_viewport_change)

    @property
    def layer(self) -> PathLayer:
        return self._layer

    @property
    def coordinates(self) -> tuple[Coordinate, ...]:
        return self._coords

    @property
    def markers(self) -> list[ArrowMarker]:
        return list(self._markers)

    @property
    def closed(self) -> bool:
        return self._unsubscribe is None

    def subscribe(self, listener: MarkersListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def set_coordinates(self, coords: Sequence[Coordinate]) -> None:
        """Replace the path and recompute."""
        self._coords = tuple((float(lat), float(lng)) for lat, lng in coords)
        self.recompute()

    def recompute(self) -> list[ArrowMarker]:
        self._markers = compute_arrows(
            self._coords,
            self._viewport.project,
            fraction=self._fraction,
            layer=self._layer.name,
        )
        for listener in list(self._listeners):
            try:
                listener(list(self._markers))
            except Exception:
                _logger.warning("%s arrows listener failed", self._layer.name, exc_info=True)
        return self.markers

    def _on_viewport_change(self, event: ViewportEvent) -> None:
        _logger.debug("%s arrows: recomputing after %s", self._layer.name, event)
        self.recompute()

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
