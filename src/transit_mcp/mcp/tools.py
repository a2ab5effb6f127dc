from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from mcp import types
from mcp.server.fastmcp import FastMCP

from transit_mcp.application.alert_service import AlertService
from transit_mcp.application.departure_service import DepartureService
from transit_mcp.application.station_browser import StationBrowser
from transit_mcp.domain.entities import Departure, ServiceAlert, Station
from transit_mcp.domain.exceptions import (
    InvalidResponseError,
    NetworkError,
    RemoteError,
    UnknownError,
    ValidationError,
)
from transit_mcp.domain.organizer import alert_severity, categorize_status
from transit_mcp.domain.value_objects import DEFAULT_TIME_LIMIT, TransitSystem
from transit_mcp.infrastructure.favorites import FavoritesStore
from transit_mcp.infrastructure.time_utils import format_clock, format_distance, now_utc

logger = logging.getLogger(__name__)

_RESULT_URI = "mcp://transit-mcp/result"
_ALL_SYSTEMS = "ALL"


@dataclass
class TransitServices:
    browser: StationBrowser
    departures: DepartureService
    alerts: AlertService
    favorites: FavoritesStore


def _as_resource(json_str: str) -> list[types.EmbeddedResource]:
    """Wrap a JSON string as an embedded resource so the LLM does not narrate it."""
    return [
        types.EmbeddedResource(
            type="resource",
            resource=types.TextResourceContents(
                uri=_RESULT_URI,  # type: ignore[arg-type]
                mimeType="application/json",
                text=json_str,
            ),
        )
    ]


def _result(payload: dict[str, Any]) -> list[types.EmbeddedResource]:
    return _as_resource(json.dumps(payload, default=str, ensure_ascii=False))


def _error_json(message: str) -> str:
    return json.dumps({"error": message}, ensure_ascii=False)


def _handle_exception(exc: Exception) -> list[types.EmbeddedResource]:
    if isinstance(exc, ValidationError):
        return _as_resource(_error_json(str(exc)))
    if isinstance(exc, NetworkError):
        return _as_resource(
            _error_json("Could not reach the transit service. Please try again.")
        )
    if isinstance(exc, InvalidResponseError):
        return _as_resource(_error_json("Invalid response format received from server."))
    if isinstance(exc, RemoteError):
        message = exc.message
        if exc.code is not None:
            message = f"{message} (code {exc.code})"
        return _as_resource(_error_json(message))
    if isinstance(exc, UnknownError):
        return _as_resource(_error_json(f"Request failed: {exc}"))
    logger.exception("Unexpected error in MCP tool: %s", exc)
    return _as_resource(_error_json("An unexpected error occurred."))


def _parse_system(system: str | None) -> TransitSystem | None:
    """Validate a system filter; None, "" and "ALL" mean no filter."""
    if system is None or not system.strip() or system.strip().upper() == _ALL_SYSTEMS:
        return None
    parsed = TransitSystem.parse(system)
    if parsed is None:
        valid = ", ".join([_ALL_SYSTEMS] + [s.value for s in TransitSystem])
        raise ValidationError(f"Unknown transit system: {system}. Expected one of {valid}")
    return parsed


def _require_station_id(station_id: str) -> str:
    cleaned = station_id.strip()
    if not cleaned:
        raise ValidationError("station_id cannot be empty")
    return cleaned


def _station_json(station: Station, is_favorite: bool) -> dict[str, Any]:
    return {
        "id": station.id,
        "name": station.name,
        "latitude": station.latitude,
        "longitude": station.longitude,
        "system": station.system.value if station.system else None,
        "systemName": station.system.display_name if station.system else None,
        "lines": list(station.lines),
        "isFavorite": is_favorite,
    }


def _departure_json(dep: Departure) -> dict[str, Any]:
    status = categorize_status(dep.status)
    return {
        "tripId": dep.trip_id,
        "routeId": dep.route_id,
        "systemRouteId": dep.system_route_id,
        "routeShortName": dep.route_short_name,
        "routeLongName": dep.route_long_name,
        "routeLabel": dep.route_label,
        "routeColor": dep.route_color,
        "routeTextColor": dep.route_text_color,
        "peakStatus": dep.peak_status,
        "destination": dep.destination,
        "direction": dep.direction.value,
        "departureTime": dep.departure_time.isoformat() if dep.departure_time else None,
        "displayTime": format_clock(dep.departure_time) if dep.departure_time else None,
        "delayMinutes": dep.delay_minutes,
        "track": dep.track,
        "status": status.text,
        "statusCategory": status.category.value,
        "destinationBorough": dep.destination_borough,
        "system": dep.system.value if dep.system else None,
    }


def _alert_json(alert: ServiceAlert, now: datetime) -> dict[str, Any]:
    return {
        "id": alert.id,
        "title": alert.title,
        "description": alert.description,
        "severity": alert_severity(alert).value,
        "affectedLines": alert.affected_lines,
        "affectedLinesLabels": alert.affected_lines_labels,
        "affectedStations": alert.affected_stations,
        "affectedStationsLabels": alert.affected_stations_labels,
        "startDate": alert.start_date.isoformat() if alert.start_date else None,
        "endDate": alert.end_date.isoformat() if alert.end_date else None,
        "timing": format_distance(alert.start_date, now) if alert.start_date else "Ongoing",
        "url": alert.url,
    }


def register_tools(mcp: FastMCP, services: TransitServices) -> None:
    """Bind all @mcp.tool decorators. Called once during server setup."""

    @mcp.tool()
    async def search_stations(
        query: str | None = None,
        system: str | None = None,
        refresh: bool = False,
    ) -> list[types.EmbeddedResource]:
        """Search stations by name, favorites first.

        Args:
            query: Optional case-insensitive substring of the station name.
            system: Optional system filter: SUBWAY, LIRR, MNR or ALL (default).
            refresh: Bypass the local station cache and fetch a fresh list.
        """
        try:
            system_filter = _parse_system(system)
            search_text = (query or "").strip()
            listing = await services.browser.load(
                search_text=search_text,
                system=system_filter,
                force_refresh=refresh,
            )
            result = {
                "system": system_filter.value if system_filter else _ALL_SYSTEMS,
                "searchText": search_text,
                "favorites": [_station_json(s, True) for s in listing.favorites],
                "others": [_station_json(s, False) for s in listing.others],
                "count": listing.count,
            }
            return _result(result)
        except Exception as exc:
            return _handle_exception(exc)

    @mcp.tool()
    async def get_departures(
        station_id: str,
        limit_minutes: int = DEFAULT_TIME_LIMIT,
        system: str | None = None,
    ) -> list[types.EmbeddedResource]:
        """Get upcoming departures for a station, grouped by destination borough.

        Args:
            station_id: Station id obtained from search_stations.
            limit_minutes: Only show departures within this many minutes
                           (default 60). 0 shows all departures.
            system: Optional owning system (SUBWAY, LIRR, MNR) used to order
                    sections. Taken from the departures when omitted.
        """
        try:
            station_id = _require_station_id(station_id)
            board = await services.departures.get_board(
                station_id,
                limit_minutes=limit_minutes,
                system=_parse_system(system),
            )
            result = {
                "stationId": board.station_id,
                "limitMinutes": board.limit_minutes or 0,
                "sections": [
                    {
                        "label": section.label,
                        "title": section.title,
                        "departures": [_departure_json(d) for d in section.departures],
                    }
                    for section in board.sections
                ],
                "count": board.count,
            }
            return _result(result)
        except Exception as exc:
            return _handle_exception(exc)

    @mcp.tool()
    async def get_alerts(
        lines: list[str] | None = None,
        station_id: str | None = None,
    ) -> list[types.EmbeddedResource]:
        """Get currently active service alerts.

        Args:
            lines: Optional line identifiers to filter by, e.g. ["SUBWAY-L"].
            station_id: Optional station id to filter by.
        """
        try:
            alerts = await services.alerts.get_alerts(lines, station_id)
            now = now_utc()
            result = {
                "alerts": [_alert_json(a, now) for a in alerts],
                "count": len(alerts),
            }
            return _result(result)
        except Exception as exc:
            return _handle_exception(exc)

    @mcp.tool()
    async def add_favorite(station_id: str) -> list[types.EmbeddedResource]:
        """Star a station so it is listed first in search results.

        Args:
            station_id: Station id obtained from search_stations.
        """
        try:
            station_id = _require_station_id(station_id)
            services.favorites.add_favorite(station_id)
            return _result({"stationId": station_id, "isFavorite": True})
        except Exception as exc:
            return _handle_exception(exc)

    @mcp.tool()
    async def remove_favorite(station_id: str) -> list[types.EmbeddedResource]:
        """Unstar a station.

        Args:
            station_id: Station id obtained from search_stations.
        """
        try:
            station_id = _require_station_id(station_id)
            services.favorites.remove_favorite(station_id)
            return _result({"stationId": station_id, "isFavorite": False})
        except Exception as exc:
            return _handle_exception(exc)
