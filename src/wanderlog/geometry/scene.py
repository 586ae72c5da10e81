"""Visited + planned + connector arrows on one map."""

from __future__ import annotations

import logging
from collections.abc import Callable

from wanderlog.geometry.arrows import (
    CONNECTOR_LAYER,
    PLANNED_LAYER,
    VISITED_LAYER,
    ArrowMarker,
    DirectionalPathRenderer,
    PathLayer,
)
from wanderlog.geometry.connector import resolve_connector
from wanderlog.geometry.projector import Coordinate, project_path
from wanderlog.geometry.viewport import Viewport
from wanderlog.state.reducer import StoreState
from wanderlog.state.store import RecordStore

_logger = logging.getLogger(__name__)


class TripMap:
    """Derives paths from two stores and keeps their arrows current.

    Every store transition re-projects both paths (no cached projections)
    and the connector between them; each of the three layers has its own
    :class:`DirectionalPathRenderer` subscribed to the shared viewport.
    """

    def __init__(self, visited: RecordStore, planned: RecordStore, viewport: Viewport) -> None:
        self._visited = visited
        self._planned = planned
        self._viewport = viewport
        self._renderers: dict[str, DirectionalPathRenderer] = {
            layer.name: DirectionalPathRenderer(viewport, layer)
            for layer in (VISITED_LAYER, PLANNED_LAYER, CONNECTOR_LAYER)
        }
        self._visited_path: list[Coordinate] = []
        self._planned_path: list[Coordinate] = []
        self._connector: list[Coordinate] = []
        self._unsubscribers: list[Callable[[], None]] = [
            visited.subscribe(self._on_store_change),
            planned.subscribe(self._on_store_change),
        ]
        self.refresh()

    @property
    def visited_path(self) -> list[Coordinate]:
        return list(self._visited_path)

    @property
    def planned_path(self) -> list[Coordinate]:
        return list(self._planned_path)

    @property
    def connector(self) -> list[Coordinate]:
        return list(self._connector)

    def renderer(self, layer: str | PathLayer) -> DirectionalPathRenderer:
        name = layer.name if isinstance(layer, PathLayer) else layer
        return self._renderers[name]

    def markers(self) -> dict[str, list[ArrowMarker]]:
        """Current arrows per layer name."""
        return {name: renderer.markers for name, renderer in self._renderers.items()}

    def polylines(self) -> list[tuple[PathLayer, list[Coordinate]]]:
        """Drawable paths in z-order; single-point paths are omitted."""
        lines: list[tuple[PathLayer, list[Coordinate]]] = []
        if len(self._visited_path) >= 2:
            lines.append((VISITED_LAYER, self.visited_path))
        if len(self._planned_path) >= 2:
            lines.append((PLANNED_LAYER, self.planned_path))
        if len(self._connector) == 2:
            lines.append((CONNECTOR_LAYER, self.connector))
        return lines

    def refresh(self) -> None:
        self._visited_path = project_path(self._visited.records)
        self._planned_path = project_path(self._planned.records)
        self._connector = resolve_connector(self._visited_path, self._planned_path)
        self._renderers[VISITED_LAYER.name].set_coordinates(self._visited_path)
        self._renderers[PLANNED_LAYER.name].set_coordinates(self._planned_path)
        self._renderers[CONNECTOR_LAYER.name].set_coordinates(self._connector)
        _logger.debug(
            "Trip map refreshed: visited=%d planned=%d connector=%s",
            len(self._visited_path),
            len(self._planned_path),
            bool(self._connector),
        )

    def _on_store_change(self, _state: StoreState) -> None:
        self.refresh()

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        for renderer in self._renderers.values():
            renderer.close()
