from __future__ import annotations

import logging
from dataclasses import dataclass, field

from transit_mcp.domain.entities import Station
from transit_mcp.domain.exceptions import TransitError
from transit_mcp.domain.organizer import filter_stations, partition_by_favorite
from transit_mcp.domain.value_objects import TransitSystem
from transit_mcp.infrastructure.favorites import FavoritesStore
from transit_mcp.infrastructure.station_cache import StationCache

logger = logging.getLogger(__name__)


@dataclass
class StationListing:
    """Station list organized for display: favorites first, then the rest."""

    system: TransitSystem | None
    search_text: str
    favorites: list[Station] = field(default_factory=list)
    others: list[Station] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.favorites) + len(self.others)


class StationBrowser:
    """Loads station lists from the cache and organizes them for display.

    load() serves one independent request and is safe to call concurrently.
    update() is for a single caller whose selection changes over time: each
    call takes a new generation number, and a fetch that resolves after a
    newer update() has started is discarded so a late response never answers
    for a since-changed selection.
    """

    def __init__(self, cache: StationCache, favorites: FavoritesStore) -> None:
        self._cache = cache
        self._favorites = favorites
        self._generation = 0

    async def load(
        self,
        search_text: str = "",
        system: TransitSystem | None = None,
        force_refresh: bool = False,
    ) -> StationListing:
        stations = await self._cache.get_stations(system, force_refresh=force_refresh)
        return self.organize(stations, search_text, system)

    async def update(
        self,
        search_text: str = "",
        system: TransitSystem | None = None,
        force_refresh: bool = False,
    ) -> StationListing | None:
        """Load and organize stations for the latest selection.

        Returns None when the result was superseded by a newer update().
        A TransitError for the latest selection is re-raised.
        """
        self._generation += 1
        generation = self._generation

        try:
            listing = await self.load(search_text, system, force_refresh)
        except TransitError as exc:
            if generation != self._generation:
                logger.debug("Dropping error from superseded station load: %s", exc)
                return None
            raise

        if generation != self._generation:
            logger.debug("Dropping superseded station load for %s", system)
            return None
        return listing

    def organize(
        self,
        stations: list[Station],
        search_text: str = "",
        system: TransitSystem | None = None,
    ) -> StationListing:
        partition = partition_by_favorite(
            filter_stations(stations, search_text), self._favorites.ids
        )
        return StationListing(
            system=system,
            search_text=search_text,
            favorites=partition.favorites,
            others=partition.others,
        )
