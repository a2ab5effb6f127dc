from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from transit_mcp.domain.entities import Station
from transit_mcp.domain.value_objects import TransitSystem
from transit_mcp.infrastructure.mappers import map_station, station_to_raw
from transit_mcp.infrastructure.storage import KeyValueStore

logger = logging.getLogger(__name__)

STATION_CACHE_TTL = 7 * 24 * 60 * 60  # seconds; station lists change rarely
ALL_SYSTEMS_KEY = "ALL"
_STORAGE_PREFIX = "station_cache:"


class StationSource(Protocol):
    async def search_stations(
        self,
        query: str | None = None,
        system: TransitSystem | None = None,
        cache_bust: bool = False,
    ) -> list[Station]: ...


class CacheState(str, Enum):
    EMPTY = "EMPTY"
    FRESH = "FRESH"
    STALE = "STALE"


@dataclass(frozen=True)
class StationSnapshot:
    stations: tuple[Station, ...]
    fetched_at: float  # Wall-clock epoch seconds; snapshots outlive the process


def cache_key(system: TransitSystem | None) -> str:
    return system.value if system is not None else ALL_SYSTEMS_KEY


class StationCache:
    """TTL cache of full station lists, one snapshot per system filter.

    Staleness is evaluated lazily on read. Snapshots are persisted in the
    key-value store so they survive restarts. A failed fetch never clears or
    replaces an existing snapshot. Concurrent reads for the same key while a
    fetch is running share that fetch.
    """

    def __init__(
        self,
        source: StationSource,
        storage: KeyValueStore,
        ttl: float = STATION_CACHE_TTL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._source = source
        self._storage = storage
        self._ttl = ttl
        self._clock = clock
        self._snapshots: dict[str, StationSnapshot | None] = {}
        self._inflight: dict[str, asyncio.Future[StationSnapshot]] = {}

    def state(self, system: TransitSystem | None = None) -> CacheState:
        snapshot = self._snapshot(cache_key(system))
        if snapshot is None:
            return CacheState.EMPTY
        return CacheState.FRESH if self._is_fresh(snapshot) else CacheState.STALE

    async def get_stations(
        self, system: TransitSystem | None = None, force_refresh: bool = False
    ) -> list[Station]:
        """Return the station list for system, fetching when empty, stale or forced."""
        key = cache_key(system)
        if not force_refresh:
            snapshot = self._snapshot(key)
            if snapshot is not None and self._is_fresh(snapshot):
                logger.debug("Station cache hit for %s", key)
                return list(snapshot.stations)

        future = self._inflight.get(key)
        if future is None:
            future = asyncio.ensure_future(self._refresh(key, system, force_refresh))
            self._inflight[key] = future
            future.add_done_callback(lambda f, key=key: self._clear_inflight(key, f))
        else:
            logger.debug("Joining in-flight station fetch for %s", key)

        # shield: a cancelled waiter must not cancel the fetch other waiters share
        snapshot = await asyncio.shield(future)
        return list(snapshot.stations)

    async def _refresh(
        self, key: str, system: TransitSystem | None, force_refresh: bool
    ) -> StationSnapshot:
        logger.info("Fetching station list for %s (forced=%s)", key, force_refresh)
        stations = await self._source.search_stations(
            None, system, cache_bust=force_refresh
        )
        snapshot = StationSnapshot(stations=tuple(stations), fetched_at=self._clock())
        self._store(key, snapshot)
        logger.info("Cached %d stations for %s", len(stations), key)
        return snapshot

    def _clear_inflight(self, key: str, future: asyncio.Future[StationSnapshot]) -> None:
        if self._inflight.get(key) is future:
            del self._inflight[key]
        # Retrieve the exception so an unawaited failure is not reported as lost
        if not future.cancelled():
            future.exception()

    def _is_fresh(self, snapshot: StationSnapshot) -> bool:
        return self._clock() - snapshot.fetched_at < self._ttl

    def _snapshot(self, key: str) -> StationSnapshot | None:
        if key not in self._snapshots:
            self._snapshots[key] = self._load(key)
        return self._snapshots[key]

    def _store(self, key: str, snapshot: StationSnapshot) -> None:
        blob = json.dumps(
            {
                "fetched_at": snapshot.fetched_at,
                "stations": [station_to_raw(s) for s in snapshot.stations],
            },
            ensure_ascii=False,
        )
        self._snapshots[key] = snapshot
        try:
            self._storage.set(_STORAGE_PREFIX + key, blob)
        except OSError as exc:
            logger.warning("Could not persist station cache entry %s: %s", key, exc)

    def _load(self, key: str) -> StationSnapshot | None:
        blob = self._storage.get(_STORAGE_PREFIX + key)
        if blob is None:
            return None
        try:
            data = json.loads(blob)
            return StationSnapshot(
                stations=tuple(map_station(raw) for raw in data["stations"]),
                fetched_at=float(data["fetched_at"]),
            )
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("Discarding unreadable station cache entry %s: %s", key, exc)
            return None
