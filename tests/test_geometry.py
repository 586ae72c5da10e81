"""Tests for path projection, the connector and directional arrows."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

import pytest

from wanderlog.geometry.arrows import (
    CONNECTOR_LAYER,
    PLANNED_LAYER,
    DirectionalPathRenderer,
    arrow_angle,
    compute_arrows,
)
from wanderlog.geometry.connector import resolve_connector
from wanderlog.geometry.projector import project_path, sort_by_date
from wanderlog.geometry.viewport import ScreenPoint, ViewportEvent, WebMercatorViewport
from wanderlog.models.record import Position, RecordDraft, TripRecord


def _rec(record_id: str, date: object, lat: object = 1.0, lng: object = 1.0) -> TripRecord:
    return TripRecord.model_validate({"id": record_id, "date": date, "position": {"lat": lat, "lng": lng}})


def _flat(lat: float, lng: float) -> ScreenPoint:
    """Equirectangular projection: east is +x, north is -y (screen Y grows down)."""
    return ScreenPoint(lng, -lat)


class _FakeViewport:
    """Projection with an adjustable vertical stretch, like a map whose scale changed."""

    def __init__(self) -> None:
        self.stretch = 1.0
        self._listeners: list[Callable[[ViewportEvent], None]] = []

    def project(self, lat: float, lng: float) -> ScreenPoint:
        return ScreenPoint(lng, -lat * self.stretch)

    def subscribe(self, listener: Callable[[ViewportEvent], None]) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def zoom(self, stretch: float) -> None:
        self.stretch = stretch
        for listener in list(self._listeners):
            listener(ViewportEvent.ZOOM)


# ------------------------------------------------------------------
# PathProjector
# ------------------------------------------------------------------


class TestProjectPath:
    def test_sorted_by_date_with_invalid_dates_last(self) -> None:
        records = [
            _rec("late", "2024-03-01", 3, 3),
            _rec("bad", "yesterday-ish", 9, 9),
            _rec("early", "2024-01-01", 1, 1),
            _rec("none", None, 8, 8),
            _rec("mid", "2024-02-01", 2, 2),
        ]
        assert project_path(records) == [(1, 1), (2, 2), (3, 3), (9, 9), (8, 8)]

    def test_ties_keep_input_order(self) -> None:
        records = [_rec("a", "2024-01-01", 1, 1), _rec("b", "2024-01-01", 2, 2), _rec("c", None, 3, 3), _rec("d", "?", 4, 4)]
        assert [r.id for r in sort_by_date(records)] == ["a", "b", "c", "d"]

    def test_records_without_finite_position_are_excluded(self) -> None:
        records = [
            _rec("ok", "2024-01-01", 10, 20),
            _rec("nan", "2024-01-02", float("nan"), 1),
            _rec("str", "2024-01-03", "north", 1),
            _rec("partial", "2024-01-04", 5, None),
            TripRecord(id="nopos", date=datetime(2024, 1, 5, tzinfo=UTC)),
            _rec("numeric-string", "2024-01-06", "30.5", "-1"),
        ]
        assert project_path(records) == [(10, 20), (30.5, -1)]

    def test_empty(self) -> None:
        assert project_path([]) == []

    def test_drafts_are_projectable(self) -> None:
        drafts = [RecordDraft(date="2024-02-01", position=Position(lat=2, lng=2)), RecordDraft(date="2024-01-01", position=Position(lat=1, lng=1))]
        assert project_path(drafts) == [(1, 1), (2, 2)]

    def test_deterministic(self) -> None:
        records = [_rec(str(i), f"2024-01-{(i % 28) + 1:02d}", i, i) for i in range(40)]
        assert project_path(records) == project_path(list(records))


# ------------------------------------------------------------------
# ConnectorResolver
# ------------------------------------------------------------------


class TestResolveConnector:
    def test_bridges_end_of_visited_to_start_of_planned(self) -> None:
        visited = [(10.0, 10.0), (20.0, 20.0)]
        planned = [(30.0, 30.0), (40.0, 40.0)]
        assert resolve_connector(visited, planned) == [(20.0, 20.0), (30.0, 30.0)]

    @pytest.mark.parametrize(
        ("visited", "planned"),
        [
            ([], [(1.0, 1.0)]),
            ([(1.0, 1.0)], []),
            ([], []),
        ],
    )
    def test_empty_side_means_no_connector(self, visited: list, planned: list) -> None:
        assert resolve_connector(visited, planned) == []

    def test_identical_boundary_points_mean_no_connector(self) -> None:
        assert resolve_connector([(0.0, 0.0), (5.0, 5.0)], [(5.0, 5.0), (6.0, 6.0)]) == []

    def test_single_point_paths(self) -> None:
        assert resolve_connector([(1.0, 2.0)], [(3.0, 4.0)]) == [(1.0, 2.0), (3.0, 4.0)]


# ------------------------------------------------------------------
# Arrow orientation
# ------------------------------------------------------------------


class TestArrowAngle:
    def test_east_is_zero(self) -> None:
        assert arrow_angle(_flat(0, 0), _flat(0, 10)) == pytest.approx(0.0)

    def test_north_is_minus_ninety(self) -> None:
        # Screen rotation is clockwise-positive, so pointing up is -90.
        assert arrow_angle(_flat(0, 0), _flat(10, 0)) == pytest.approx(-90.0)

    def test_south_is_plus_ninety(self) -> None:
        assert arrow_angle(_flat(10, 0), _flat(0, 0)) == pytest.approx(90.0)

    def test_west_is_half_turn(self) -> None:
        assert abs(arrow_angle(_flat(0, 10), _flat(0, 0))) == pytest.approx(180.0)

    def test_north_east_diagonal(self) -> None:
        assert arrow_angle(ScreenPoint(0, 0), ScreenPoint(5, -5)) == pytest.approx(-45.0)

    def test_mercator_cardinal_directions(self) -> None:
        viewport = WebMercatorViewport((0.0, 0.0), 4)
        origin = viewport.project(10, 10)
        assert arrow_angle(origin, viewport.project(10, 20)) == pytest.approx(0.0, abs=1e-9)
        assert arrow_angle(origin, viewport.project(20, 10)) == pytest.approx(-90.0)
        assert arrow_angle(origin, viewport.project(0, 10)) == pytest.approx(90.0)


class TestComputeArrows:
    def test_one_arrow_per_segment_at_sixty_percent(self) -> None:
        coords = [(0.0, 0.0), (0.0, 10.0), (10.0, 10.0)]
        markers = compute_arrows(coords, _flat, layer="visited")
        assert len(markers) == 2
        assert markers[0].position == pytest.approx((0.0, 6.0))
        assert markers[1].position == pytest.approx((6.0, 10.0))
        assert [m.segment for m in markers] == [0, 1]
        assert markers[0].angle == pytest.approx(0.0)
        assert markers[1].angle == pytest.approx(-90.0)
        assert {m.layer for m in markers} == {"visited"}

    def test_interpolation_is_geographic_not_pixel(self) -> None:
        viewport = WebMercatorViewport((0.0, 0.0), 3)
        (marker,) = compute_arrows([(0.0, 0.0), (60.0, 0.0)], viewport.project)
        # Mercator stretches high latitudes; a pixel-space anchor would land further north.
        assert marker.position == pytest.approx((36.0, 0.0))

    @pytest.mark.parametrize("coords", [[], [(1.0, 1.0)]])
    def test_fewer_than_two_points_has_no_arrows(self, coords: list) -> None:
        assert compute_arrows(coords, _flat) == []

    def test_css_transform(self) -> None:
        (marker,) = compute_arrows([(0.0, 0.0), (10.0, 0.0)], _flat)
        assert marker.css_transform == f"rotate({marker.angle}deg)"
        assert marker.css_transform.startswith("rotate(-90")


# ------------------------------------------------------------------
# DirectionalPathRenderer
# ------------------------------------------------------------------


class TestDirectionalPathRenderer:
    def test_recomputes_on_viewport_change(self) -> None:
        viewport = _FakeViewport()
        renderer = DirectionalPathRenderer(viewport, PLANNED_LAYER)
        renderer.set_coordinates([(0.0, 0.0), (10.0, 10.0)])
        assert renderer.markers[0].angle == pytest.approx(-45.0)

        viewport.zoom(2.0)

        # dy doubles on screen: atan2(20, 10)
        assert renderer.markers[0].angle == pytest.approx(-63.434948822922)
        assert renderer.markers[0].layer == "planned"

    def test_recomputes_on_coordinate_change(self) -> None:
        renderer = DirectionalPathRenderer(_FakeViewport())
        renderer.set_coordinates([(0.0, 0.0), (0.0, 10.0)])
        renderer.set_coordinates([(0.0, 10.0), (0.0, 0.0)])
        assert abs(renderer.markers[0].angle) == pytest.approx(180.0)

    def test_listeners_receive_fresh_markers(self) -> None:
        viewport = WebMercatorViewport((0.0, 0.0), 5)
        renderer = DirectionalPathRenderer(viewport, CONNECTOR_LAYER)
        received: list[int] = []
        renderer.subscribe(lambda markers: received.append(len(markers)))

        renderer.set_coordinates([(0.0, 0.0), (1.0, 1.0), (2.0, 0.0)])
        viewport.set_zoom(7)
        viewport.pan_by(100, 0)

        # set_coordinates, zoomend + moveend, moveend
        assert received == [2, 2, 2, 2]

    def test_close_stops_viewport_updates(self) -> None:
        viewport = _FakeViewport()
        renderer = DirectionalPathRenderer(viewport)
        renderer.set_coordinates([(0.0, 0.0), (10.0, 10.0)])
        renderer.close()
        viewport.zoom(3.0)
        assert renderer.closed
        assert renderer.markers[0].angle == pytest.approx(-45.0)


# ------------------------------------------------------------------
# WebMercatorViewport
# ------------------------------------------------------------------


class TestWebMercatorViewport:
    def test_center_projects_to_middle_of_view(self) -> None:
        viewport = WebMercatorViewport((48.85, 2.35), 10, size=(800, 600))
        point = viewport.project(48.85, 2.35)
        assert point.x == pytest.approx(400)
        assert point.y == pytest.approx(300)

    def test_north_is_up(self) -> None:
        viewport = WebMercatorViewport((0.0, 0.0), 2)
        assert viewport.project(10, 0).y < viewport.project(0, 0).y

    def test_zoom_doubles_distances(self) -> None:
        viewport = WebMercatorViewport((0.0, 0.0), 3)
        before = viewport.project(0, 10).x - viewport.project(0, 0).x
        viewport.set_zoom(4)
        after = viewport.project(0, 10).x - viewport.project(0, 0).x
        assert after == pytest.approx(before * 2)

    def test_unproject_inverts_project(self) -> None:
        viewport = WebMercatorViewport((40.0, -3.0), 6)
        lat, lng = viewport.unproject(viewport.project(38.7, -9.1))
        assert (lat, lng) == pytest.approx((38.7, -9.1))

    def test_events(self) -> None:
        viewport = WebMercatorViewport()
        events: list[ViewportEvent] = []
        unsubscribe = viewport.subscribe(events.append)
        viewport.set_zoom(8)
        viewport.pan_by(10, 10)
        viewport.set_zoom(8)
        unsubscribe()
        viewport.set_zoom(9)
        assert events == [ViewportEvent.ZOOM, ViewportEvent.MOVE, ViewportEvent.MOVE, ViewportEvent.MOVE]

    def test_zoom_is_clamped(self) -> None:
        viewport = WebMercatorViewport(zoom=30, max_zoom=18)
        assert viewport.zoom == 18

    def test_resize_keeps_center_in_the_middle(self) -> None:
        viewport = WebMercatorViewport((10.0, 10.0), 5, size=(200, 100))
        events: list[ViewportEvent] = []
        viewport.subscribe(events.append)
        viewport.resize(400, 300)
        assert viewport.project(10.0, 10.0) == pytest.approx((200, 150))
        assert events == [ViewportEvent.MOVE]
