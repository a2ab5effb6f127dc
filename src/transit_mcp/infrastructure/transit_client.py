from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any, TypeVar
from urllib.parse import quote

import httpx

from transit_mcp.domain.entities import Departure, ServiceAlert, Station
from transit_mcp.domain.exceptions import (
    InvalidResponseError,
    NetworkError,
    RemoteError,
    TransitError,
    UnknownError,
)
from transit_mcp.domain.value_objects import TransitSystem
from transit_mcp.infrastructure.envelope import ErrorEnvelope, parse_envelope
from transit_mcp.infrastructure.headers import make_headers
from transit_mcp.infrastructure.mappers import map_alert, map_departure, map_station

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3000/api/v1"
DEFAULT_TIMEOUT = 15.0  # seconds

T = TypeVar("T")


class TransitApiClient:
    """HTTP client for the transit backend API.

    A single httpx.AsyncClient instance is shared for the process lifetime.
    Nothing is cached here; station list caching lives in StationCache.
    """

    def __init__(self, http_client: httpx.AsyncClient, base_url: str = DEFAULT_BASE_URL) -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")

    async def search_stations(
        self,
        query: str | None = None,
        system: TransitSystem | None = None,
        cache_bust: bool = False,
    ) -> list[Station]:
        """GET /stations?q=&system= — returns the full list when query is empty."""
        params: dict[str, str] = {}
        if query:
            params["q"] = query
        if system is not None:
            params["system"] = system.value
        if cache_bust:
            # Forced refresh: make sure no intermediary serves a cached body
            params["_"] = str(int(time.time() * 1000))
        return await self._get_list("/stations", params, map_station)

    async def get_departures(
        self,
        station_id: str,
        limit_minutes: int | None = None,
        source: str | None = None,  # "scheduled" | "realtime"
    ) -> list[Departure]:
        """GET /departures/{stationId}.

        limitMinutes is only sent when > 0; omitted or <= 0 means unbounded.
        """
        if not station_id:
            return []
        params: dict[str, str] = {}
        if limit_minutes and limit_minutes > 0:
            params["limitMinutes"] = str(limit_minutes)
        if source:
            params["source"] = source
        path = f"/departures/{quote(station_id, safe='')}"
        return await self._get_list(path, params, map_departure)

    async def get_alerts(
        self,
        lines: list[str] | None = None,
        station_id: str | None = None,
    ) -> list[ServiceAlert]:
        """GET /alerts — always sends activeNow=true and includeLabels=true."""
        params: dict[str, str] = {}
        if lines:
            params["lines"] = ",".join(lines)
        params["activeNow"] = "true"
        params["includeLabels"] = "true"
        if station_id:
            params["stationId"] = station_id
        return await self._get_list("/alerts", params, map_alert)

    async def _get_list(
        self,
        path: str,
        params: dict[str, str],
        mapper: Callable[[dict[str, Any]], T],
    ) -> list[T]:
        """Fetch path, require a JSON array and map every element.

        Every failure leaves this method as a TransitError subclass.
        """
        url = f"{self._base_url}{path}"
        try:
            payload = await self._get(url, params)
            if not isinstance(payload, list):
                raise InvalidResponseError(
                    f"Expected a JSON array from {path}, got {type(payload).__name__}"
                )
            try:
                return [mapper(item) for item in payload]
            except (KeyError, TypeError, ValueError, AttributeError) as exc:
                raise InvalidResponseError(f"Malformed item in response from {path}: {exc}") from exc
        except TransitError as exc:
            logger.warning("Request to %s failed: %s", url, exc)
            raise
        except Exception as exc:
            logger.warning("Unexpected error requesting %s: %r", url, exc)
            raise UnknownError(str(exc) or "An unknown network error occurred.") from exc

    async def _get(self, url: str, params: dict[str, str]) -> Any:
        """Internal GET helper.

        1. Send the request with make_headers().
        2. Raise NetworkError on transport failure.
        3. Raise InvalidResponseError when the body is not JSON.
        4. Raise RemoteError for an error envelope (any status) or a non-2xx status.
        5. Return the decoded payload.
        """
        logger.debug("Fetching %s params=%s", url, params)
        try:
            response = await self._http.get(url, params=params, headers=make_headers())
        except httpx.TransportError as exc:
            raise NetworkError(f"Could not reach transit API: {exc}") from exc

        data = self._decode_json(response)
        result = parse_envelope(data)
        if isinstance(result, ErrorEnvelope):
            raise RemoteError(
                result.message,
                code=result.code,
                details=result.details,
                status_code=response.status_code,
            )
        if response.status_code >= 400:
            raise RemoteError(
                f"HTTP error! status: {response.status_code}",
                status_code=response.status_code,
            )
        return result.payload

    def _decode_json(self, response: httpx.Response) -> Any:
        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            raise InvalidResponseError(
                f"Expected JSON response but got {content_type or 'no content type'}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:  # JSONDecodeError, UnicodeDecodeError
            raise InvalidResponseError(
                "Response body is not valid JSON", status_code=response.status_code
            ) from exc

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._http.aclose()
