"""Pollen explorer API client.

Every request goes through one wrapper that:
1. waits on the client's rate limiter (1 req / 500ms by default)
2. issues a GET with the explorer's fixed header set
3. decodes the JSON body into the caller's requested type
4. on transport, HTTP status or decode failure, sleeps a fixed wait and
   retries, up to a fixed number of attempts

Usage:
    async with PollenApiClient(PollenApiConfig.from_env()) as api:
        flowers = await api.get_all_flowers()
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type, TypeVar

import httpx
from loguru import logger
from pydantic import TypeAdapter, ValidationError

from lib.pollen.config import PollenApiConfig
from lib.pollen.models import (
    DeviceRewards,
    FlowerListItem,
    HexDetail,
    HexListItem,
    RewardItem,
)
from lib.rate_limit import RateLimiter

T = TypeVar("T")

# Failures worth retrying: anything httpx raises, plus bodies that don't decode
RETRYABLE_ERRORS = (httpx.HTTPError, ValidationError)

_adapters: Dict[Any, TypeAdapter] = {}


def _adapter(response_type: Any) -> TypeAdapter:
    adapter = _adapters.get(response_type)
    if adapter is None:
        adapter = _adapters[response_type] = TypeAdapter(response_type)
    return adapter


class PollenApiClient:
    """Rate-limited, retrying client for the Pollen explorer API."""

    HEXES_PATH = "hexes"
    HEX_PATH = "hex"
    FLOWERS_PATH = "flowers"
    REWARDS_PATH = "device-rewards-all"

    def __init__(
        self,
        config: Optional[PollenApiConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        rate_limiter: Optional[RateLimiter] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.config = config or PollenApiConfig()
        self._http_client = http_client
        self._owns_client = http_client is None
        self.rate_limiter = rate_limiter or RateLimiter(self.config.rate_interval)
        self._sleep = sleep

    async def __aenter__(self) -> "PollenApiClient":
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
        """Close the HTTP client if we created it."""
        if self._http_client and self._owns_client:
            await self._http_client.aclose()
        self._http_client = None

    def url(self, path: str) -> str:
        return f"{self.config.base_url.rstrip('/')}/{path}"

    async def fetch(
        self,
        path: str,
        response_type: Type[T],
        params: Optional[Dict[str, str]] = None,
    ) -> T:
        """
        GET ``path`` and decode the JSON body as ``response_type``.

        Retries on any transport, HTTP status or decode failure, sleeping
        ``retry_wait`` seconds between attempts. Re-raises the last error once
        ``retries`` attempts have failed.
        """
        url = self.url(path)
        last_error: Optional[Exception] = None

        for attempt in range(1, self.config.retries + 1):
            try:
                return await self._fetch_once(url, response_type, params)
            except RETRYABLE_ERRORS as e:
                last_error = e
                logger.warning(
                    f"Pollen API request failed ({attempt}/{self.config.retries}) {url}: {e}"
                )
                if attempt < self.config.retries:
                    await self._sleep(self.config.retry_wait)

        raise last_error

    async def _fetch_once(
        self,
        url: str,
        response_type: Type[T],
        params: Optional[Dict[str, str]],
    ) -> T:
        await self.rate_limiter.acquire()

        resp = await self.http_client.get(
            url,
            params=params,
            headers=self.config.headers(),
            timeout=self.config.timeout,
        )
        resp.raise_for_status()
        return _adapter(response_type).validate_json(resp.content)

    # =========================================================================
    # Endpoints
    # =========================================================================

    async def get_all_hexes(self, area: str) -> List[HexListItem]:
        """Hex grid for a comma-separated list of top-level cells."""
        return await self.fetch(
            self.HEXES_PATH,
            List[HexListItem],
            params={"partial": "true", "h3_hex_top": area},
        )

    async def get_hex_details(self, hex_id: str) -> HexDetail:
        return await self.fetch(self.HEX_PATH, HexDetail, params={"h3_hex": hex_id})

    async def get_all_flowers(self) -> List[FlowerListItem]:
        return await self.fetch(self.FLOWERS_PATH, List[FlowerListItem])

    async def get_rewards(self, device_id: str) -> List[RewardItem]:
        """All rewards for a device, flattened across dates."""
        rewards_by_date = await self.fetch(
            self.REWARDS_PATH, DeviceRewards, params={"device": device_id}
        )
        rewards: List[RewardItem] = []
        for daily_rewards in rewards_by_date.values():
            rewards.extend(daily_rewards or [])
        return rewards
