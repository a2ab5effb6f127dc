from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TransitSystem(str, Enum):
    """Transit systems a station or departure can belong to.

    Using (str, Enum) for Python 3.10 compatibility (StrEnum requires 3.11+).
    """

    SUBWAY = "SUBWAY"
    LIRR = "LIRR"
    MNR = "MNR"

    @property
    def display_name(self) -> str:
        return _SYSTEM_DISPLAY_NAMES[self]

    @property
    def is_commuter_rail(self) -> bool:
        """LIRR and Metro-North run outbound from a terminal; the subway does not."""
        return self in (TransitSystem.LIRR, TransitSystem.MNR)

    @classmethod
    def parse(cls, value: str | None) -> TransitSystem | None:
        """Return the matching system, or None for empty or unrecognized values."""
        if not value:
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


_SYSTEM_DISPLAY_NAMES = {
    TransitSystem.SUBWAY: "Subway",
    TransitSystem.LIRR: "LIRR",
    TransitSystem.MNR: "Metro-North",
}


class Direction(str, Enum):
    N = "N"
    S = "S"
    E = "E"
    W = "W"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: str | None) -> Direction:
        if not value:
            return cls.UNKNOWN
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class StatusCategory(str, Enum):
    """Badge category derived from a departure's free-text status."""

    DELAYED = "DELAYED"
    CANCELLED = "CANCELLED"
    ON_TIME = "ON_TIME"
    RAW = "RAW"


@dataclass(frozen=True)
class DepartureStatus:
    category: StatusCategory
    text: str  # Original status text, shown as-is for RAW


class AlertSeverity(str, Enum):
    SEVERE = "SEVERE"  # Service suspended
    WARNING = "WARNING"  # Delays
    INFO = "INFO"


# Selectable departure time windows (minutes); 0 means no limit.
TIME_LIMIT_OPTIONS: list[tuple[str, int]] = [
    ("Next 10 Minutes", 10),
    ("Next 30 Minutes", 30),
    ("Next Hour", 60),
    ("Next 2 Hours", 120),
    ("Show All", 0),
]
DEFAULT_TIME_LIMIT = 60
