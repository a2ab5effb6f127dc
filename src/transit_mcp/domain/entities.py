from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from transit_mcp.domain.value_objects import Direction, TransitSystem


@dataclass(frozen=True)
class Station:
    """A station as returned by the backend. Replaced wholesale on refresh."""

    id: str  # Backend stop_id, unique within a system
    name: str
    latitude: float | None = None
    longitude: float | None = None
    system: TransitSystem | None = None
    lines: tuple[str, ...] = ()  # Route short names serving the station


@dataclass
class Departure:
    """A single upcoming departure from a station board."""

    destination: str
    direction: Direction
    departure_time: datetime | None  # None when unknown / not yet scheduled
    delay_minutes: int | None
    status: str  # e.g. "On Time", "Delayed 5 min", "Due", "Scheduled"
    destination_borough: str | None  # None means outbound / not applicable
    system: TransitSystem | None
    trip_id: str | None = None
    route_id: str | None = None
    route_short_name: str | None = None  # e.g. "L", "4"
    route_long_name: str | None = None  # e.g. "14 St-Canarsie", "Ronkonkoma Branch"
    route_color: str | None = None  # Hex without leading "#"
    route_text_color: str | None = None
    peak_status: str | None = None  # "Peak", "Off Peak"
    track: str | None = None  # Commuter rail only

    @property
    def system_route_id(self) -> str:
        if not self.route_id or self.system is None:
            return ""
        return f"{self.system.value}-{self.route_id}"

    @property
    def route_label(self) -> str:
        """Route tag text: "<short>: <long>", else whichever name is present."""
        if self.route_short_name and self.route_long_name:
            return f"{self.route_short_name}: {self.route_long_name}"
        return self.route_long_name or self.route_short_name or ""


@dataclass
class ServiceAlert:
    """A service alert affecting one or more lines or stations."""

    id: str
    title: str
    description: str
    affected_lines: list[str] = field(default_factory=list)
    affected_lines_labels: list[str] = field(default_factory=list)
    affected_stations: list[str] = field(default_factory=list)
    affected_stations_labels: list[str] = field(default_factory=list)
    start_date: datetime | None = None
    end_date: datetime | None = None  # None means ongoing
    url: str | None = None
