from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from transit_mcp.domain.organizer import (
    DepartureSection,
    filter_by_time_window,
    group_departures_by_borough,
)
from transit_mcp.domain.value_objects import TransitSystem
from transit_mcp.infrastructure.time_utils import now_utc
from transit_mcp.infrastructure.transit_client import TransitApiClient

logger = logging.getLogger(__name__)


@dataclass
class DepartureBoard:
    station_id: str
    limit_minutes: int | None
    sections: list[DepartureSection] = field(default_factory=list)

    @property
    def count(self) -> int:
        return sum(len(s.departures) for s in self.sections)


class DepartureService:
    """Fetches departures for a station and organizes them into board sections."""

    def __init__(self, client: TransitApiClient) -> None:
        self._client = client

    async def get_board(
        self,
        station_id: str,
        limit_minutes: int | None = None,
        system: TransitSystem | None = None,  # None → owning system of the departures
        now: datetime | None = None,  # None → now_utc()
    ) -> DepartureBoard:
        """Fetch, window-filter and group departures for station_id.

        Steps:
        1. Fetch fresh departures (never cached), passing the limit to the backend
        2. Drop departures beyond now + limit_minutes (unknown times are kept)
        3. Group by destination borough with system-specific section order
        """
        effective_limit = limit_minutes if limit_minutes and limit_minutes > 0 else None
        departures = await self._client.get_departures(station_id, effective_limit)

        reference = now if now is not None else now_utc()
        visible = filter_by_time_window(departures, reference, effective_limit)
        if len(visible) != len(departures):
            logger.debug(
                "Time window %s min dropped %d of %d departures for %s",
                effective_limit,
                len(departures) - len(visible),
                len(departures),
                station_id,
            )

        return DepartureBoard(
            station_id=station_id,
            limit_minutes=effective_limit,
            sections=group_departures_by_borough(visible, system),
        )
