from __future__ import annotations

from transit_mcp.domain.entities import ServiceAlert
from transit_mcp.infrastructure.transit_client import TransitApiClient


class AlertService:
    """Service alerts are always fetched fresh; only station lists are cached."""

    def __init__(self, client: TransitApiClient) -> None:
        self._client = client

    async def get_alerts(
        self,
        lines: list[str] | None = None,
        station_id: str | None = None,
    ) -> list[ServiceAlert]:
        cleaned = [line.strip() for line in lines or [] if line.strip()]
        return await self._client.get_alerts(cleaned or None, station_id or None)
