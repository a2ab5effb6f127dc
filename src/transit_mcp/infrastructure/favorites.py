from __future__ import annotations

import json
import logging

from transit_mcp.infrastructure.storage import KeyValueStore

logger = logging.getLogger(__name__)

FAVORITES_KEY = "favorite_station_ids"


class FavoritesStore:
    """Persisted set of starred station ids.

    Constructed once at startup with the storage backend injected. Every
    mutation is written through to the store before the call returns.
    """

    def __init__(self, storage: KeyValueStore, key: str = FAVORITES_KEY) -> None:
        self._storage = storage
        self._key = key
        self._ids: set[str] = self._load()

    @property
    def ids(self) -> frozenset[str]:
        return frozenset(self._ids)

    def is_favorite(self, station_id: str) -> bool:
        return station_id in self._ids

    def add_favorite(self, station_id: str) -> None:
        """Star a station. Adding an existing favorite is a no-op."""
        if station_id in self._ids:
            return
        self._persist(self._ids | {station_id})
        logger.info("Added favorite station %s", station_id)

    def remove_favorite(self, station_id: str) -> None:
        """Unstar a station. Removing a non-favorite is a no-op."""
        if station_id not in self._ids:
            return
        self._persist(self._ids - {station_id})
        logger.info("Removed favorite station %s", station_id)

    def _persist(self, ids: set[str]) -> None:
        # Write first so a failed write leaves memory and disk in agreement
        self._storage.set(self._key, json.dumps(sorted(ids)))
        self._ids = ids

    def _load(self) -> set[str]:
        raw = self._storage.get(self._key)
        if raw is None:
            return set()
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Stored favorites are not valid JSON; starting empty")
            return set()
        if not isinstance(data, list):
            logger.warning("Stored favorites are not a list; starting empty")
            return set()
        return {str(item) for item in data}
