"""Tests for MCP tool functions — input validation, success and error paths."""
from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from transit_mcp.application.departure_service import DepartureBoard
from transit_mcp.application.station_browser import StationBrowser, StationListing
from transit_mcp.domain.entities import Departure, ServiceAlert, Station
from transit_mcp.domain.exceptions import (
    InvalidResponseError,
    NetworkError,
    RemoteError,
    UnknownError,
    ValidationError,
)
from transit_mcp.domain.organizer import DepartureSection
from transit_mcp.domain.value_objects import Direction, TransitSystem
from transit_mcp.infrastructure.favorites import FavoritesStore
from transit_mcp.infrastructure.station_cache import StationCache
from transit_mcp.infrastructure.storage import MemoryStore
from transit_mcp.mcp.resources import register_resources, systems_document
from transit_mcp.mcp.tools import TransitServices, _parse_system, register_tools


class MockMcp:
    """Collects the functions registered through @mcp.tool / @mcp.resource."""

    def __init__(self) -> None:
        self.tools: dict = {}  # type: ignore[type-arg]
        self.resources: dict = {}  # type: ignore[type-arg]

    def tool(self, meta: dict | None = None):  # type: ignore[type-arg]
        def decorator(fn):  # type: ignore[no-untyped-def]
            self.tools[fn.__name__] = fn
            return fn
        return decorator

    def resource(self, uri: str, *args, **kwargs):  # type: ignore[no-untyped-def]
        def decorator(fn):  # type: ignore[no-untyped-def]
            self.resources[uri] = fn
            return fn
        return decorator


def make_services() -> TransitServices:
    return TransitServices(
        browser=MagicMock(),
        departures=MagicMock(),
        alerts=MagicMock(),
        favorites=FavoritesStore(MemoryStore()),
    )


def build_tool_functions(services: TransitServices) -> dict:  # type: ignore[type-arg]
    mock_mcp = MockMcp()
    register_tools(mock_mcp, services)  # type: ignore[arg-type]
    return mock_mcp.tools


def parse(result: list) -> dict:  # type: ignore[type-arg]
    return json.loads(result[0].resource.text)


# ---------------------------------------------------------------------------
# _parse_system
# ---------------------------------------------------------------------------

def test_parse_system_all_means_no_filter() -> None:
    assert _parse_system(None) is None
    assert _parse_system("") is None
    assert _parse_system("all") is None


def test_parse_system_case_insensitive() -> None:
    assert _parse_system("lirr") is TransitSystem.LIRR


def test_parse_system_invalid_raises() -> None:
    with pytest.raises(ValidationError, match="Unknown transit system: PATH"):
        _parse_system("PATH")


# ---------------------------------------------------------------------------
# search_stations
# ---------------------------------------------------------------------------

async def test_search_stations_returns_sections() -> None:
    services = make_services()
    listing = StationListing(
        system=TransitSystem.MNR,
        search_text="grand",
        favorites=[Station(id="1", name="Grand Central", system=TransitSystem.MNR)],
        others=[Station(id="2", name="Grand Av", system=TransitSystem.MNR)],
    )
    services.browser.load = AsyncMock(return_value=listing)

    tools = build_tool_functions(services)
    parsed = parse(await tools["search_stations"](" grand ", "mnr", True))

    services.browser.load.assert_awaited_once_with(
        search_text="grand", system=TransitSystem.MNR, force_refresh=True
    )
    assert parsed["system"] == "MNR"
    assert parsed["count"] == 2
    assert parsed["favorites"][0]["isFavorite"] is True
    assert parsed["favorites"][0]["systemName"] == "Metro-North"
    assert parsed["others"][0]["isFavorite"] is False


async def test_search_stations_invalid_system_returns_error() -> None:
    services = make_services()
    tools = build_tool_functions(services)

    parsed = parse(await tools["search_stations"](None, "PATH"))
    assert "PATH" in parsed["error"]


async def test_concurrent_searches_for_different_systems_both_succeed() -> None:
    lirr_release = asyncio.Event()
    lists = {
        TransitSystem.LIRR: [Station(id="1", name="Jamaica", system=TransitSystem.LIRR)],
        TransitSystem.MNR: [Station(id="2", name="Grand Central", system=TransitSystem.MNR)],
    }

    async def search(
        query: str | None = None, system: TransitSystem | None = None, cache_bust: bool = False
    ) -> list[Station]:
        if system is TransitSystem.LIRR:
            await lirr_release.wait()
        return lists[system]  # type: ignore[index]

    source = MagicMock()
    source.search_stations = AsyncMock(side_effect=search)
    services = make_services()
    services.browser = StationBrowser(StationCache(source, MemoryStore()), services.favorites)
    tools = build_tool_functions(services)

    slow = asyncio.create_task(tools["search_stations"](None, "LIRR"))
    await asyncio.sleep(0)
    fast = parse(await tools["search_stations"](None, "MNR"))
    lirr_release.set()
    slow_parsed = parse(await slow)

    assert "error" not in slow_parsed
    assert "error" not in fast
    assert [s["id"] for s in slow_parsed["others"]] == ["1"]
    assert [s["id"] for s in fast["others"]] == ["2"]


# ---------------------------------------------------------------------------
# get_departures
# ---------------------------------------------------------------------------

async def test_get_departures_serializes_board() -> None:
    services = make_services()
    dep = Departure(
        destination="Babylon",
        direction=Direction.E,
        departure_time=datetime(2026, 2, 24, 22, 12, tzinfo=timezone.utc),
        delay_minutes=3,
        status="Delayed 3 min",
        destination_borough=None,
        system=TransitSystem.LIRR,
        route_id="1",
        route_short_name="BB",
        route_long_name="Babylon Branch",
        track="19",
    )
    board = DepartureBoard(
        station_id="237",
        limit_minutes=60,
        sections=[DepartureSection("Outbound", "Outbound Departures", [dep])],
    )
    services.departures.get_board = AsyncMock(return_value=board)

    tools = build_tool_functions(services)
    parsed = parse(await tools["get_departures"]("237"))

    services.departures.get_board.assert_awaited_once_with("237", limit_minutes=60, system=None)
    assert parsed["count"] == 1
    section = parsed["sections"][0]
    assert section["title"] == "Outbound Departures"
    item = section["departures"][0]
    assert item["statusCategory"] == "DELAYED"
    assert item["routeLabel"] == "BB: Babylon Branch"
    assert item["systemRouteId"] == "LIRR-1"
    assert item["displayTime"] == "5:12 PM"
    assert item["departureTime"].startswith("2026-02-24T22:12:00")


async def test_get_departures_empty_station_returns_error() -> None:
    services = make_services()
    tools = build_tool_functions(services)

    parsed = parse(await tools["get_departures"]("  "))
    assert "station_id" in parsed["error"]


# ---------------------------------------------------------------------------
# get_alerts
# ---------------------------------------------------------------------------

async def test_get_alerts_serializes_severity_and_timing() -> None:
    services = make_services()
    alerts = [
        ServiceAlert(id="a1", title="L trains suspended", description="", affected_lines=["SUBWAY-L"]),
        ServiceAlert(
            id="a2",
            title="Delays on the 4",
            description="",
            start_date=datetime(2020, 1, 1, tzinfo=timezone.utc),
        ),
    ]
    services.alerts.get_alerts = AsyncMock(return_value=alerts)

    tools = build_tool_functions(services)
    parsed = parse(await tools["get_alerts"](["SUBWAY-L"]))

    assert parsed["count"] == 2
    first, second = parsed["alerts"]
    assert first["severity"] == "SEVERE"
    assert first["timing"] == "Ongoing"
    assert second["severity"] == "WARNING"
    assert second["timing"].endswith("ago")


# ---------------------------------------------------------------------------
# favorites
# ---------------------------------------------------------------------------

async def test_add_and_remove_favorite() -> None:
    services = make_services()
    tools = build_tool_functions(services)

    parsed = parse(await tools["add_favorite"]("635"))
    assert parsed == {"stationId": "635", "isFavorite": True}
    assert services.favorites.is_favorite("635")

    parsed = parse(await tools["remove_favorite"]("635"))
    assert parsed == {"stationId": "635", "isFavorite": False}
    assert not services.favorites.is_favorite("635")


# ---------------------------------------------------------------------------
# Error handling
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    ("exc", "fragment"),
    [
        (NetworkError("refused"), "Could not reach"),
        (InvalidResponseError(), "Invalid response format"),
        (RemoteError("Station not found", code=404), "Station not found (code 404)"),
        (UnknownError("weird"), "weird"),
        (RuntimeError("internal"), "unexpected error"),
    ],
)
async def test_errors_return_resource_not_exception(exc: Exception, fragment: str) -> None:
    services = make_services()
    services.departures.get_board = AsyncMock(side_effect=exc)
    tools = build_tool_functions(services)

    result = await tools["get_departures"]("237")
    assert isinstance(result, list)
    assert fragment in parse(result)["error"]


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------

def test_systems_document() -> None:
    doc = json.loads(systems_document())
    codes = [s["code"] for s in doc["systems"]]
    assert codes == ["ALL", "SUBWAY", "LIRR", "MNR"]
    assert {"title": "Show All", "minutes": 0} in doc["timeLimits"]


def test_favorites_resource_reflects_store() -> None:
    favorites = FavoritesStore(MemoryStore())
    mock_mcp = MockMcp()
    register_resources(mock_mcp, favorites)  # type: ignore[arg-type]

    favorites.add_favorite("635")
    favorites.add_favorite("237")
    doc = json.loads(mock_mcp.resources["transit://favorites"]())
    assert doc == {"stationIds": ["237", "635"]}
