#!/usr/bin/env python3
"""Dump a travel log: records, projected paths, connector and arrows.

Loads both stores (guest storage or the remote API), projects them onto a
Web Mercator viewport and prints everything the map would draw.

Usage
-----
Guest data from a storage directory::

    export WANDER_STORAGE_DIR="$HOME/.wanderlog"
    python scripts/dump_trip.py --guest

Remote account::

    export WANDER_API_URL="https://example.com/api"
    python scripts/dump_trip.py --token "$TOKEN"

Options::

    --guest              Use guest (local) mode
    --token TOKEN        Bearer token for remote mode
    --zoom Z             Viewport zoom (default 6)
    --center LAT,LNG     Viewport centre (default: first visited point)
    --json               Output as machine-readable JSON
    --output FILE        Write output to FILE instead of stdout
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from wanderlog import AuthState, TripLog, WanderConfig, WebMercatorViewport  # noqa: E402
from wanderlog.listing import aggregate_countries  # noqa: E402
from wanderlog.state.store import RecordStore  # noqa: E402


def _section(title: str) -> str:
    return f"\n{'═' * 60}\n  {title}\n{'═' * 60}"


def _parse_center(value: str) -> tuple[float, float]:
    lat_text, _, lng_text = value.partition(",")
    try:
        return (float(lat_text), float(lng_text))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected LAT,LNG, got {value!r}") from exc


def _dump_store(store: RecordStore, out: list[str]) -> dict[str, Any]:
    state = store.state
    out.append(_section(f"{store.kind.upper()}  mode={store.mode}  records={len(state.records)}"))
    if state.error:
        out.append(f"  !! {state.error}")
    for record in state.records:
        coords = record.coordinates
        where = f"{coords[0]:.4f},{coords[1]:.4f}" if coords else "<no position>"
        when = record.date.date().isoformat() if record.date else "<no date>"
        out.append(f"  {record.emoji or '  '} {record.city_name:<24} {when:<12} {where}  [{record.id}]")
    return {
        "error": state.error,
        "records": [record.to_payload() for record in state.records],
    }


async def main() -> None:
    parser = argparse.ArgumentParser(description="Dump a wanderlog travel log for debugging / development.")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--guest", action="store_true", help="Use guest (local) mode")
    mode.add_argument("--token", help="Bearer token for remote mode")
    parser.add_argument("--zoom", type=float, default=6, help="Viewport zoom")
    parser.add_argument("--center", type=_parse_center, help="Viewport centre as LAT,LNG")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--output", "-o", help="Write output to FILE instead of stdout")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    auth = AuthState.guest() if args.guest or not args.token else AuthState(user_id="cli", token=args.token)
    config = WanderConfig.from_env()
    result: dict[str, Any] = {"timestamp": datetime.now(UTC).isoformat(), "mode": auth.mode}
    out: list[str] = [_section("wanderlog dump_trip"), f"  time : {result['timestamp']}", f"  mode : {auth.mode}"]

    async with TripLog(config) as log:
        await log.set_auth(auth)
        result["visited"] = _dump_store(log.visited, out)
        result["planned"] = _dump_store(log.planned, out)

        out.append(_section("COUNTRIES"))
        countries = aggregate_countries(log.visited.records)
        for country in countries:
            out.append(f"  {country.emoji or '  '} {country.country:<24} cities={country.city_count}")
        result["countries"] = [country.to_payload() for country in countries]

        viewport = WebMercatorViewport(args.center or (40.0, 0.0), args.zoom)
        trip_map = log.attach_map(viewport)
        if args.center is None and trip_map.visited_path:
            viewport.set_view(trip_map.visited_path[0])
        try:
            out.append(_section(f"MAP  center={viewport.center}  zoom={viewport.zoom}"))
            out.append(f"  visited path : {trip_map.visited_path}")
            out.append(f"  planned path : {trip_map.planned_path}")
            out.append(f"  connector    : {trip_map.connector}")
            markers = trip_map.markers()
            for layer, arrows in markers.items():
                for arrow in arrows:
                    lat, lng = arrow.position
                    out.append(f"  {layer:<10} #{arrow.segment}  at {lat:.4f},{lng:.4f}  angle {arrow.angle:7.2f}°")
            result["map"] = {
                "visited": trip_map.visited_path,
                "planned": trip_map.planned_path,
                "connector": trip_map.connector,
                "arrows": {layer: [arrow.model_dump() for arrow in arrows] for layer, arrows in markers.items()},
            }
        finally:
            trip_map.close()

    if args.json_mode:
        payload = json.dumps(result, indent=2, default=str, ensure_ascii=False)
        if args.output:
            Path(args.output).write_text(payload, encoding="utf-8")
            print(f"JSON written to {args.output}", file=sys.stderr)
        else:
            print(payload)
    elif args.output:
        Path(args.output).write_text("\n".join(out), encoding="utf-8")
        print(f"Output written to {args.output}")
    else:
        print("\n".join(out))


if __name__ == "__main__":
    asyncio.run(main())
