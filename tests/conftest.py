"""Shared pytest fixtures for the transit MCP test suite."""
from __future__ import annotations

import pytest

from transit_mcp.infrastructure.storage import MemoryStore


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def sample_station_raw() -> dict:  # type: ignore[type-arg]
    """Sample raw station matching the backend /stations response schema."""
    return {
        "id": "635",
        "name": "14 St-Union Sq",
        "latitude": 40.734673,
        "longitude": -73.989951,
        "system": "SUBWAY",
        "lines": ["4", "5", "6", "L", "N", "Q", "R", "W"],
    }


@pytest.fixture
def sample_departure_raw() -> dict:  # type: ignore[type-arg]
    """Sample raw departure matching the backend /departures response schema."""
    return {
        "tripId": "GO103_24_2091",
        "routeId": "1",
        "routeShortName": "BB",
        "routeLongName": "Babylon Branch",
        "peakStatus": "Peak",
        "routeColor": "00985F",
        "destination": "Babylon",
        "direction": "E",
        "departureTime": "2026-02-24T17:12:00-05:00",
        "delayMinutes": 3,
        "track": "19",
        "status": "Delayed 3 min",
        "destinationBorough": None,
        "system": "LIRR",
    }


@pytest.fixture
def sample_alert_raw() -> dict:  # type: ignore[type-arg]
    """Sample raw alert matching the backend /alerts response schema."""
    return {
        "id": "lmm:planned_work:21455",
        "title": "L trains are suspended between 8 Av and Broadway Junction",
        "description": "Take free shuttle buses instead.",
        "affectedLines": ["SUBWAY-L"],
        "affectedLinesLabels": ["L"],
        "affectedStationsLabels": ["1 Av", "3 Av"],
        "startDate": "2026-02-24T22:00:00Z",
        "endDate": None,
        "url": "https://new.mta.info/alerts",
    }
