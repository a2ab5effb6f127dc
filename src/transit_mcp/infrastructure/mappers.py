from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from transit_mcp.domain.entities import Departure, ServiceAlert, Station
from transit_mcp.domain.value_objects import Direction, TransitSystem
from transit_mcp.infrastructure.time_utils import parse_api_datetime

logger = logging.getLogger(__name__)


def _optional_datetime(value: str | None, field_name: str) -> datetime | None:
    """Parse an optional timestamp; missing, null or unparseable values stay None."""
    if not value:
        return None
    try:
        return parse_api_datetime(value)
    except ValueError:
        logger.warning("Ignoring unparseable %s: %r", field_name, value)
        return None


def _optional_float(value: Any) -> float | None:
    return float(value) if value is not None else None


def _str_list(value: Any) -> list[str]:
    if not value:
        return []
    return [str(v) for v in value]


def _str_tuple(value: Any) -> tuple[str, ...]:
    return tuple(_str_list(value))


def map_station(raw: dict[str, Any]) -> Station:
    """Map a raw station object to a Station entity.

    Raises KeyError when id or name is missing.
    """
    return Station(
        id=str(raw["id"]),
        name=str(raw["name"]),
        latitude=_optional_float(raw.get("latitude")),
        longitude=_optional_float(raw.get("longitude")),
        system=TransitSystem.parse(raw.get("system")),
        lines=_str_tuple(raw.get("lines")),
    )


def station_to_raw(station: Station) -> dict[str, Any]:
    """Inverse of map_station; used to persist station snapshots in API shape."""
    return {
        "id": station.id,
        "name": station.name,
        "latitude": station.latitude,
        "longitude": station.longitude,
        "system": station.system.value if station.system is not None else None,
        "lines": list(station.lines),
    }


def map_departure(raw: dict[str, Any]) -> Departure:
    """Map a raw departure object to a Departure entity.

    Key mappings:
    - raw["departureTime"] → departure_time (None when null/missing, never "now")
    - raw["direction"] → Direction, Unknown when null or unrecognized
    - raw["delayMinutes"] → int, None when null/missing
    - raw["system"] → owning TransitSystem
    """
    delay = raw.get("delayMinutes")
    return Departure(
        destination=str(raw.get("destination") or ""),
        direction=Direction.parse(raw.get("direction")),
        departure_time=_optional_datetime(raw.get("departureTime"), "departureTime"),
        delay_minutes=int(delay) if delay is not None else None,
        status=str(raw.get("status") or ""),
        destination_borough=raw.get("destinationBorough") or None,
        system=TransitSystem.parse(raw.get("system")),
        trip_id=raw.get("tripId") or None,
        route_id=raw.get("routeId") or None,
        route_short_name=raw.get("routeShortName") or None,
        route_long_name=raw.get("routeLongName") or None,
        route_color=raw.get("routeColor") or None,
        route_text_color=raw.get("routeTextColor") or None,
        peak_status=raw.get("peakStatus") or None,
        track=raw.get("track") or None,
    )


def map_alert(raw: dict[str, Any]) -> ServiceAlert:
    """Map a raw alert object to a ServiceAlert entity. Raises KeyError when id is missing."""
    return ServiceAlert(
        id=str(raw["id"]),
        title=str(raw.get("title") or ""),
        description=str(raw.get("description") or ""),
        affected_lines=_str_list(raw.get("affectedLines")),
        affected_lines_labels=_str_list(raw.get("affectedLinesLabels")),
        affected_stations=_str_list(raw.get("affectedStations")),
        affected_stations_labels=_str_list(raw.get("affectedStationsLabels")),
        start_date=_optional_datetime(raw.get("startDate"), "startDate"),
        end_date=_optional_datetime(raw.get("endDate"), "endDate"),
        url=raw.get("url") or None,
    )
