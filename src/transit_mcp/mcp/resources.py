from __future__ import annotations

import json

from mcp.server.fastmcp import FastMCP

from transit_mcp.domain.value_objects import TIME_LIMIT_OPTIONS, TransitSystem
from transit_mcp.infrastructure.favorites import FavoritesStore


def systems_document() -> str:
    return json.dumps(
        {
            "systems": [
                {"code": "ALL", "name": "All Systems"},
                *({"code": s.value, "name": s.display_name} for s in TransitSystem),
            ],
            "timeLimits": [
                {"title": title, "minutes": minutes} for title, minutes in TIME_LIMIT_OPTIONS
            ],
        }
    )


def register_resources(mcp: FastMCP, favorites: FavoritesStore) -> None:
    """Register read-only JSON resources. Called once during server setup."""

    @mcp.resource("transit://systems", mime_type="application/json")
    def systems() -> str:
        """Filterable transit systems and departure time-window options."""
        return systems_document()

    @mcp.resource("transit://favorites", mime_type="application/json")
    def favorite_stations() -> str:
        """Ids of the stations the user has starred."""
        return json.dumps({"stationIds": sorted(favorites.ids)})
