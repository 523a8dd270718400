"""Tests for the Pollen API client (rate limiting, retries, decoding).

All tests run offline against httpx.MockTransport.
"""

from typing import List

import httpx
import pytest
from pydantic import ValidationError

from lib.pollen.api_client import PollenApiClient
from lib.pollen.config import PollenApiConfig
from lib.pollen.models import HexListItem


class CountingLimiter:
    def __init__(self):
        self.acquired = 0

    async def acquire(self):
        self.acquired += 1


class Upstream:
    """Scripted upstream: each request pops the next response (or exception)."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        # Fresh copy so a scripted response can be served more than once
        return httpx.Response(response.status_code, headers=response.headers, content=response.content)


def make_client(upstream, **config):
    sleeps = []

    async def fake_sleep(seconds):
        sleeps.append(seconds)

    limiter = CountingLimiter()
    client = PollenApiClient(
        PollenApiConfig(api_key="test-key", **config),
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(upstream)),
        rate_limiter=limiter,
        sleep=fake_sleep,
    )
    return client, sleeps, limiter


@pytest.mark.no_db
class TestFetchRetries:
    """Retry policy: fixed attempts, fixed wait between them."""

    @pytest.mark.asyncio
    async def test_exhausts_after_three_attempts(self):
        upstream = Upstream(httpx.ConnectError("connection refused"))
        client, sleeps, limiter = make_client(upstream)

        with pytest.raises(httpx.ConnectError):
            await client.fetch("flowers", List[HexListItem])

        assert len(upstream.requests) == 3
        assert sleeps == [180.0, 180.0]
        assert limiter.acquired == 3

    @pytest.mark.asyncio
    async def test_retry_settings_come_from_config(self):
        upstream = Upstream(httpx.ReadTimeout("timed out"))
        client, sleeps, _ = make_client(upstream, retries=2, retry_wait=0.01)

        with pytest.raises(httpx.ReadTimeout):
            await client.fetch("flowers", List[HexListItem])

        assert len(upstream.requests) == 2
        assert sleeps == [0.01]

    @pytest.mark.asyncio
    async def test_recovers_after_server_error(self):
        upstream = Upstream(
            httpx.Response(503, text="unavailable"),
            httpx.Response(200, json=[{"h3_hex": "892a1008003ffff", "covered": 1, "flower_count": 2}]),
        )
        client, sleeps, _ = make_client(upstream)

        hexes = await client.fetch("hexes", List[HexListItem])

        assert [h.id for h in hexes] == ["892a1008003ffff"]
        assert len(upstream.requests) == 2
        assert sleeps == [180.0]

    @pytest.mark.asyncio
    async def test_decode_failure_is_retried_then_raised(self):
        upstream = Upstream(httpx.Response(200, text="<html>oops</html>"))
        client, sleeps, _ = make_client(upstream)

        with pytest.raises(ValidationError):
            await client.fetch("hexes", List[HexListItem])

        assert len(upstream.requests) == 3
        assert sleeps == [180.0, 180.0]

    @pytest.mark.asyncio
    async def test_success_does_not_sleep(self):
        upstream = Upstream(httpx.Response(200, json=[]))
        client, sleeps, limiter = make_client(upstream)

        assert await client.fetch("hexes", List[HexListItem]) == []
        assert sleeps == []
        assert limiter.acquired == 1


@pytest.mark.no_db
class TestRequests:
    """Request shape: URLs, params and headers."""

    @pytest.mark.asyncio
    async def test_sends_fixed_headers(self):
        upstream = Upstream(httpx.Response(200, json=[]))
        client, _, _ = make_client(upstream)

        await client.get_all_flowers()

        headers = upstream.requests[0].headers
        assert headers["x-api-key"] == "test-key"
        assert headers["accept"] == "application/json"
        assert headers["origin"] == "https://explorer.pollenmobile.io"
        assert headers["referer"] == "https://explorer.pollenmobile.io/"
        assert "Mozilla" in headers["user-agent"]

    @pytest.mark.asyncio
    async def test_per_attempt_timeout(self):
        upstream = Upstream(httpx.Response(200, json=[]))
        client, _, _ = make_client(upstream, timeout=12.0)

        await client.get_all_flowers()

        assert upstream.requests[0].extensions["timeout"]["read"] == 12.0

    @pytest.mark.asyncio
    async def test_get_all_hexes_passes_area(self):
        area = "852a1393fffffff,852a104bfffffff"
        upstream = Upstream(httpx.Response(200, json=[]))
        client, _, _ = make_client(upstream)

        await client.get_all_hexes(area)

        url = upstream.requests[0].url
        assert url.path == "/explorer/hexes"
        assert url.params["partial"] == "true"
        assert url.params["h3_hex_top"] == area

    @pytest.mark.asyncio
    async def test_get_hex_details(self):
        upstream = Upstream(httpx.Response(200, json={"hex": {"attach": "2", "dailyReward": "5"}}))
        client, _, _ = make_client(upstream)

        detail = await client.get_hex_details("892a1008003ffff")

        assert upstream.requests[0].url.params["h3_hex"] == "892a1008003ffff"
        assert detail.hex.attach == 2
        assert detail.hex.daily_reward == 5

    @pytest.mark.asyncio
    async def test_get_rewards_flattens_dates(self):
        upstream = Upstream(httpx.Response(200, json={
            "2022-10-01": [{"rewardID": "a", "coverage": "[]"}],
            "2022-10-02": [{"rewardID": "b"}, {"rewardID": "c", "coverage": ["x"]}],
            "2022-10-03": None,
        }))
        client, _, _ = make_client(upstream)

        rewards = await client.get_rewards("flower-1")

        assert upstream.requests[0].url.path == "/explorer/device-rewards-all"
        assert upstream.requests[0].url.params["device"] == "flower-1"
        assert sorted(r.reward_id for r in rewards) == ["a", "b", "c"]
        assert {r.reward_id: r.coverage for r in rewards}["a"] == []
        assert {r.reward_id: r.coverage for r in rewards}["c"] == ["x"]

    @pytest.mark.asyncio
    async def test_close_leaves_injected_client_open(self):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(Upstream(httpx.Response(200, json=[]))))
        client = PollenApiClient(PollenApiConfig(api_key="k"), http_client=http_client)

        async with client:
            await client.get_all_flowers()

        assert http_client.is_closed is False
        await http_client.aclose()
