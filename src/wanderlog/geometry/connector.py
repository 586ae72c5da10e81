"""Bridging segment between the visited and planned paths."""

from __future__ import annotations

from collections.abc import Sequence

from wanderlog.geometry.projector import Coordinate


def resolve_connector(visited: Sequence[Coordinate], planned: Sequence[Coordinate]) -> list[Coordinate]:
    """``[last(visited), first(planned)]``, or ``[]``.

    Empty when either path is empty or when the journey already ends where
    the plan starts (a zero-length segment has no direction to draw).
    """
    if not visited or not planned:
        return []
    start = (visited[-1][0], visited[-1][1])
    end = (planned[0][0], planned[0][1])
    if start == end:
        return []
    return [start, end]
