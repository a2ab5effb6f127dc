from __future__ import annotations

import unicodedata
from collections.abc import Collection, Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from transit_mcp.domain.entities import Departure, ServiceAlert, Station
from transit_mcp.domain.value_objects import (
    AlertSeverity,
    DepartureStatus,
    StatusCategory,
    TransitSystem,
)

OUTBOUND = "Outbound"


@dataclass
class StationPartition:
    favorites: list[Station] = field(default_factory=list)
    others: list[Station] = field(default_factory=list)


@dataclass
class DepartureSection:
    label: str  # Borough name or OUTBOUND
    title: str
    departures: list[Departure] = field(default_factory=list)


def collation_key(text: str) -> str:
    """Case-insensitive sort key that also folds accents ("É" sorts with "E")."""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


def filter_stations(stations: Iterable[Station], search_text: str) -> list[Station]:
    """Keep stations whose name contains search_text (case-insensitive)."""
    needle = collation_key(search_text.strip())
    if not needle:
        return list(stations)
    return [s for s in stations if needle in collation_key(s.name)]


def partition_by_favorite(
    stations: Iterable[Station], favorite_ids: Collection[str]
) -> StationPartition:
    """Split stations into favorites and others, each sorted by name.

    sorted() is stable, so stations with equal names keep their fetch order.
    """
    partition = StationPartition()
    for station in stations:
        if station.id in favorite_ids:
            partition.favorites.append(station)
        else:
            partition.others.append(station)
    partition.favorites.sort(key=lambda s: collation_key(s.name))
    partition.others.sort(key=lambda s: collation_key(s.name))
    return partition


def section_title(label: str) -> str:
    if label == OUTBOUND:
        return "Outbound Departures"
    return f"{label}-Bound Departures"


def group_departures_by_borough(
    departures: Iterable[Departure], system: TransitSystem | None = None
) -> list[DepartureSection]:
    """Group departures into sections keyed by destination borough.

    Departures without a borough land in the OUTBOUND section. For commuter
    rail (LIRR, MNR) OUTBOUND comes first and the remaining sections keep
    encounter order; otherwise every section is ordered alphabetically.
    When system is None it is taken from the first departure.
    """
    sections: dict[str, DepartureSection] = {}
    for dep in departures:
        if system is None:
            system = dep.system
        label = dep.destination_borough or OUTBOUND
        section = sections.get(label)
        if section is None:
            section = sections[label] = DepartureSection(label, section_title(label))
        section.departures.append(dep)

    ordered = list(sections.values())
    if system is not None and system.is_commuter_rail:
        ordered.sort(key=lambda s: s.label != OUTBOUND)
    else:
        ordered.sort(key=lambda s: collation_key(s.label))
    return ordered


def categorize_status(status: str) -> DepartureStatus:
    """Map free-text status to a badge category. First match wins."""
    lower = status.lower()
    if "delay" in lower:
        return DepartureStatus(StatusCategory.DELAYED, status)
    if "cancel" in lower:
        return DepartureStatus(StatusCategory.CANCELLED, status)
    if "on time" in lower:
        return DepartureStatus(StatusCategory.ON_TIME, status)
    return DepartureStatus(StatusCategory.RAW, status)


def within_time_window(
    departure: Departure, now: datetime, limit_minutes: int | None
) -> bool:
    """Return True when the departure falls inside the selected window.

    A limit of None or <= 0 is unbounded. Departures with an unknown time are
    always shown.
    """
    if not limit_minutes or limit_minutes <= 0:
        return True
    if departure.departure_time is None:
        return True
    return departure.departure_time <= now + timedelta(minutes=limit_minutes)


def filter_by_time_window(
    departures: Iterable[Departure], now: datetime, limit_minutes: int | None
) -> list[Departure]:
    return [d for d in departures if within_time_window(d, now, limit_minutes)]


def alert_severity(alert: ServiceAlert) -> AlertSeverity:
    title = alert.title.lower()
    if "suspend" in title:
        return AlertSeverity.SEVERE
    if "delay" in title:
        return AlertSeverity.WARNING
    return AlertSeverity.INFO
