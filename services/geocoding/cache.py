"""
Geocode cache - cell ID -> PlaceInfo for the lifetime of a run.

Warmed once from the database so cells geocoded by earlier runs never hit
Nominatim again, then filled lazily on miss. Entries never expire and there
is no eviction: the number of distinct cells is bounded by the areas being
synced.
"""

import asyncio
from typing import Callable, Dict, Protocol, Tuple, runtime_checkable

from loguru import logger

from db.models.place import PlaceInfo
from lib.cells import cell_to_lat_lng, is_valid_cell


@runtime_checkable
class IPlaceSource(Protocol):
    """Where previously geocoded places are read from."""

    async def get_cached_places(self) -> Dict[str, PlaceInfo]:
        ...


@runtime_checkable
class IReverseGeocoder(Protocol):
    async def reverse(self, lat: float, lng: float) -> PlaceInfo:
        ...


class GeocodeCache:
    """Process-lifetime reverse geocode cache keyed by H3 cell ID."""

    def __init__(
        self,
        source: IPlaceSource,
        geocoder: IReverseGeocoder,
        to_lat_lng: Callable[[str], Tuple[float, float]] = cell_to_lat_lng,
        is_cell: Callable[[str], bool] = is_valid_cell,
    ):
        self._source = source
        self._geocoder = geocoder
        self._to_lat_lng = to_lat_lng
        self._is_cell = is_cell
        self._places: Dict[str, PlaceInfo] = {}
        self._key_locks: Dict[str, asyncio.Lock] = {}
        self._warmed = False
        self.lookups = 0  # upstream calls made

    def __len__(self) -> int:
        return len(self._places)

    def __contains__(self, cell_id: str) -> bool:
        return cell_id in self._places

    async def warm(self) -> int:
        """Load stored places. Must be called exactly once, before resolve()."""
        if self._warmed:
            raise RuntimeError("Geocode cache already warmed")
        self._places.update(await self._source.get_cached_places())
        self._warmed = True
        logger.info(f"Geocode cache warmed with {len(self._places)} places")
        return len(self._places)

    async def resolve(self, cell_id: str) -> PlaceInfo:
        """
        Place info for a cell: cached if known, otherwise reverse geocoded once.

        Concurrent misses for the same cell wait on a per-cell lock, so each
        cell costs at most one request against Nominatim's 1 req/s budget.
        IDs that are not H3 cells (flowers with no cell report "") get an empty
        place and never reach Nominatim.
        """
        if not self._warmed:
            raise RuntimeError("Geocode cache used before warm()")

        place = self._places.get(cell_id)
        if place is not None:
            return place

        if not self._is_cell(cell_id):
            logger.debug(f"Not an H3 cell, skipping reverse geocode: {cell_id!r}")
            return PlaceInfo()

        lock = self._key_locks.setdefault(cell_id, asyncio.Lock())
        async with lock:
            place = self._places.get(cell_id)
            if place is not None:
                return place

            lat, lng = self._to_lat_lng(cell_id)
            place = await self._geocoder.reverse(lat, lng)
            self.lookups += 1
            self._places[cell_id] = place

        self._key_locks.pop(cell_id, None)
        return place
