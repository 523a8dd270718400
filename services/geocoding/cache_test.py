"""Tests for the geocode cache."""

import asyncio
from typing import Dict

import pytest

from db.models.place import PlaceInfo
from services.geocoding.cache import GeocodeCache

NYC_CELL = "852a1393fffffff"
SF_CELL = "85283457fffffff"


class FakeSource:
    def __init__(self, places: Dict[str, PlaceInfo] = None):
        self.places = places or {}
        self.calls = 0

    async def get_cached_places(self) -> Dict[str, PlaceInfo]:
        self.calls += 1
        return dict(self.places)


class FakeGeocoder:
    """Counts upstream calls; optionally yields to let callers race."""

    def __init__(self, fail: bool = False):
        self.calls = []
        self.fail = fail

    async def reverse(self, lat: float, lng: float) -> PlaceInfo:
        self.calls.append((lat, lng))
        await asyncio.sleep(0)
        if self.fail:
            raise RuntimeError("geocoder down")
        return PlaceInfo(lat=lat, lng=lng, address="Somewhere", city="Springfield")


def fake_lat_lng(cell_id: str):
    return (40.0, -74.0) if cell_id == NYC_CELL else (37.7, -122.4)


@pytest.mark.no_db
class TestGeocodeCache:
    """Unit tests for GeocodeCache."""

    @pytest.mark.asyncio
    async def test_warm_entry_served_without_upstream_call(self):
        stored = PlaceInfo(lat=40.7, lng=-73.9, address="Stored", city="New York")
        geocoder = FakeGeocoder()
        cache = GeocodeCache(FakeSource({NYC_CELL: stored}), geocoder, to_lat_lng=fake_lat_lng)

        assert await cache.warm() == 1
        place = await cache.resolve(NYC_CELL)

        assert place == stored
        assert geocoder.calls == []
        assert cache.lookups == 0

    @pytest.mark.asyncio
    async def test_miss_geocodes_cell_centroid_once(self):
        geocoder = FakeGeocoder()
        cache = GeocodeCache(FakeSource(), geocoder, to_lat_lng=fake_lat_lng)
        await cache.warm()

        first = await cache.resolve(SF_CELL)
        second = await cache.resolve(SF_CELL)

        assert first == second
        assert first.lat == 37.7
        assert first.lng == -122.4
        assert first.city == "Springfield"
        assert geocoder.calls == [(37.7, -122.4)]
        assert SF_CELL in cache

    @pytest.mark.asyncio
    async def test_concurrent_misses_single_flight(self):
        geocoder = FakeGeocoder()
        cache = GeocodeCache(FakeSource(), geocoder, to_lat_lng=fake_lat_lng)
        await cache.warm()

        places = await asyncio.gather(*(cache.resolve(NYC_CELL) for _ in range(5)))

        assert len(geocoder.calls) == 1
        assert all(p == places[0] for p in places)

    @pytest.mark.asyncio
    async def test_distinct_cells_each_looked_up(self):
        geocoder = FakeGeocoder()
        cache = GeocodeCache(FakeSource(), geocoder, to_lat_lng=fake_lat_lng)
        await cache.warm()

        await cache.resolve(NYC_CELL)
        await cache.resolve(SF_CELL)

        assert len(geocoder.calls) == 2
        assert len(cache) == 2

    @pytest.mark.asyncio
    async def test_uses_h3_centroid_by_default(self):
        geocoder = FakeGeocoder()
        cache = GeocodeCache(FakeSource(), geocoder)
        await cache.warm()

        place = await cache.resolve(NYC_CELL)

        assert 39.5 < place.lat < 42.0
        assert -75.5 < place.lng < -72.5

    @pytest.mark.asyncio
    async def test_failure_propagates_and_is_not_cached(self):
        geocoder = FakeGeocoder(fail=True)
        cache = GeocodeCache(FakeSource(), geocoder, to_lat_lng=fake_lat_lng)
        await cache.warm()

        with pytest.raises(RuntimeError, match="geocoder down"):
            await cache.resolve(NYC_CELL)

        assert NYC_CELL not in cache
        assert len(geocoder.calls) == 1

    @pytest.mark.asyncio
    async def test_resolve_before_warm_raises(self):
        cache = GeocodeCache(FakeSource(), FakeGeocoder(), to_lat_lng=fake_lat_lng)

        with pytest.raises(RuntimeError, match="before warm"):
            await cache.resolve(NYC_CELL)

    @pytest.mark.asyncio
    async def test_warm_only_once(self):
        source = FakeSource()
        cache = GeocodeCache(source, FakeGeocoder(), to_lat_lng=fake_lat_lng)
        await cache.warm()

        with pytest.raises(RuntimeError, match="already warmed"):
            await cache.warm()

        assert source.calls == 1

    @pytest.mark.asyncio
    async def test_non_cell_gets_empty_place_without_lookup(self):
        geocoder = FakeGeocoder()
        cache = GeocodeCache(FakeSource(), geocoder)
        await cache.warm()

        for cell_id in ("", "nothex", "fffffffffffffff"):
            place = await cache.resolve(cell_id)
            assert place == PlaceInfo()

        assert geocoder.calls == []
        assert cache.lookups == 0
