"""
Geocoding Service - reverse geocode H3 cells to place names, with caching.

Usage:
    from services.geocoding import GeocodeCache, GeocodeRepo, NominatimClient, NominatimConfig

    async with NominatimClient(NominatimConfig.from_env()) as nominatim:
        cache = GeocodeCache(GeocodeRepo(), nominatim)
        await cache.warm()
        place = await cache.resolve("852a1393fffffff")
"""

from services.geocoding.cache import GeocodeCache, IPlaceSource, IReverseGeocoder
from services.geocoding.nominatim import NominatimClient, NominatimConfig, NominatimPlace
from services.geocoding.repo import GeocodeRepo

__all__ = [
    "GeocodeCache",
    "IPlaceSource",
    "IReverseGeocoder",
    "NominatimClient",
    "NominatimConfig",
    "NominatimPlace",
    "GeocodeRepo",
]
