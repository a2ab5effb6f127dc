from __future__ import annotations

import httpx
from mcp.server.fastmcp import FastMCP

from transit_mcp.application.alert_service import AlertService
from transit_mcp.application.departure_service import DepartureService
from transit_mcp.application.station_browser import StationBrowser
from transit_mcp.config import Settings, load_settings
from transit_mcp.infrastructure.favorites import FavoritesStore
from transit_mcp.infrastructure.station_cache import StationCache
from transit_mcp.infrastructure.storage import JsonFileStore
from transit_mcp.infrastructure.transit_client import TransitApiClient
from transit_mcp.mcp.resources import register_resources
from transit_mcp.mcp.tools import TransitServices, register_tools


def create_mcp_app(settings: Settings | None = None) -> FastMCP:
    """Create and configure the FastMCP application with all services wired."""
    settings = settings or load_settings()

    storage = JsonFileStore(settings.store_path)
    favorites = FavoritesStore(storage)
    http_client = httpx.AsyncClient(timeout=settings.http_timeout, follow_redirects=True)
    client = TransitApiClient(http_client, base_url=settings.api_url)
    cache = StationCache(client, storage, ttl=settings.station_cache_ttl)

    services = TransitServices(
        browser=StationBrowser(cache, favorites),
        departures=DepartureService(client),
        alerts=AlertService(client),
        favorites=favorites,
    )

    mcp = FastMCP("NYC Transit MCP", stateless_http=True)
    register_tools(mcp, services)
    register_resources(mcp, favorites)
    return mcp
