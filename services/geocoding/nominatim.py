"""Reverse geocoding via OpenStreetMap Nominatim.

This is an internal helper module. It does NOT access the database.
Caching is the job of GeocodeCache; this client only rate-limits (Nominatim's
usage policy is 1 req/sec) and maps the response.

Failures are not retried here: transport, HTTP status and decode errors
propagate straight to the caller.
"""

import os
from typing import Optional

import httpx
from dotenv import load_dotenv
from loguru import logger
from pydantic import BaseModel, Field

from db.models.place import PlaceInfo
from lib.rate_limit import RateLimiter

load_dotenv()

NOMINATIM_URL = "https://nominatim.openstreetmap.org"


class NominatimConfig(BaseModel):
    """Settings for the Nominatim reverse geocoder."""

    base_url: str = NOMINATIM_URL
    user_agent: str = "pollen"
    rate_interval: float = Field(default=1.0, description="Seconds between requests")
    timeout: float = 60.0

    @classmethod
    def from_env(cls) -> "NominatimConfig":
        return cls(
            base_url=os.getenv("NOMINATIM_URL", NOMINATIM_URL),
            user_agent=os.getenv("NOMINATIM_USER_AGENT", "pollen"),
            rate_interval=float(os.getenv("NOMINATIM_RATE_INTERVAL", "1.0")),
            timeout=float(os.getenv("NOMINATIM_TIMEOUT", "60")),
        )


class NominatimAddress(BaseModel):
    suburb: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    town: Optional[str] = None
    county: Optional[str] = None


class NominatimPlace(BaseModel):
    """The subset of a /reverse response we keep."""

    display_name: Optional[str] = None
    address: NominatimAddress = Field(default_factory=NominatimAddress)
    error: Optional[str] = None


class NominatimClient:
    """Rate-limited Nominatim /reverse client."""

    def __init__(
        self,
        config: Optional[NominatimConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        rate_limiter: Optional[RateLimiter] = None,
    ):
        self.config = config or NominatimConfig()
        self._http_client = http_client
        self._owns_client = http_client is None
        self.rate_limiter = rate_limiter or RateLimiter(self.config.rate_interval)

    async def __aenter__(self) -> "NominatimClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False

    @property
    def http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.config.timeout)
        return self._http_client

    async def close(self):
        if self._http_client and self._owns_client:
            await self._http_client.aclose()
        self._http_client = None

    async def reverse(self, lat: float, lng: float) -> PlaceInfo:
        """
        Look up the place at (lat, lng).

        Args:
            lat: Latitude
            lng: Longitude

        Returns:
            PlaceInfo carrying the given coordinates and Nominatim's names.
            Places Nominatim can't resolve (open water etc.) come back with
            empty names.

        Raises:
            httpx.HTTPError: On transport errors or non-2xx responses
            pydantic.ValidationError: On a malformed response body
        """
        await self.rate_limiter.acquire()

        resp = await self.http_client.get(
            f"{self.config.base_url.rstrip('/')}/reverse",
            params={"lat": lat, "lon": lng, "format": "json"},
            headers={"User-Agent": self.config.user_agent},
            timeout=self.config.timeout,
        )
        resp.raise_for_status()
        place = NominatimPlace.model_validate_json(resp.content)

        if place.error:
            logger.warning(f"Reverse geocoding found nothing for ({lat}, {lng}): {place.error}")

        return PlaceInfo(
            lat=lat,
            lng=lng,
            address=place.display_name,
            suburb=place.address.suburb,
            city=place.address.city,
            state=place.address.state,
            town=place.address.town,
            county=place.address.county,
        )
