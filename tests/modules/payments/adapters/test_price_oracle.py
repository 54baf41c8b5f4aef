# -*- coding: utf-8 -*-
"""
tests/modules/payments/adapters/test_price_oracle.py

Oráculo de precio: respuesta de Pyth Hermes (parsed), precio viejo,
errores HTTP y precio fijo.
"""

import httpx
import pytest

from pylinks.modules.payments.adapters import FixedPriceOracle, PythHermesPriceOracle
from pylinks.modules.payments.errors import InvalidAmount, PriceUnavailable
from tests.fakes import FrozenClock

FEED_ID = "0x" + "f" * 64
HERMES_URL = "https://hermes.example"


def _hermes_body(price: str, expo: int, publish_time: int) -> dict:
    return {
        "binary": {"encoding": "hex", "data": []},
        "parsed": [
            {
                "id": FEED_ID[2:],
                "price": {"price": price, "conf": "50000", "expo": expo, "publish_time": publish_time},
                "ema_price": {"price": price, "conf": "50000", "expo": expo, "publish_time": publish_time},
            }
        ],
    }


def _oracle(handler, clock, max_age_seconds=60):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    oracle = PythHermesPriceOracle(
        client,
        base_url=HERMES_URL + "/",
        feed_id=FEED_ID,
        max_age_seconds=max_age_seconds,
        timeout_seconds=5.0,
        clock=clock,
    )
    return client, oracle


class TestPythHermesPriceOracle:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "price, expo, expected",
        [
            ("99990000", -8, 99_990_000),
            ("999900", -6, 99_990_000),
            ("10000000000", -10, 100_000_000),
        ],
    )
    async def test_scales_to_eight_decimals(self, price, expo, expected):
        clock = FrozenClock()
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_hermes_body(price, expo, int(clock.now.timestamp()) - 5))

        client, oracle = _oracle(handler, clock)
        async with client:
            assert await oracle.get_price() == expected

        [request] = seen
        assert request.url.path == "/v2/updates/price/latest"
        assert request.url.params["ids[]"] == FEED_ID
        assert request.url.params["parsed"] == "true"

    @pytest.mark.asyncio
    async def test_stale_price_is_rejected(self):
        clock = FrozenClock()

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=_hermes_body("99990000", -8, int(clock.now.timestamp()) - 120))

        client, oracle = _oracle(handler, clock, max_age_seconds=60)
        async with client:
            with pytest.raises(PriceUnavailable):
                await oracle.get_price()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(503, text="unavailable"),
            httpx.Response(200, json={"parsed": []}),
            httpx.Response(200, text="<html>"),
            httpx.Response(200, json=_hermes_body("-1", -8, 1_790_000_000)),
        ],
    )
    async def test_bad_responses_raise_price_unavailable(self, response):
        clock = FrozenClock()
        client, oracle = _oracle(lambda request: response, clock, max_age_seconds=10**10)
        async with client:
            with pytest.raises(PriceUnavailable):
                await oracle.get_price()

    @pytest.mark.asyncio
    async def test_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timeout", request=request)

        client, oracle = _oracle(handler, FrozenClock())
        async with client:
            with pytest.raises(PriceUnavailable):
                await oracle.get_price()


class TestFixedPriceOracle:
    @pytest.mark.asyncio
    async def test_from_decimal(self):
        assert await FixedPriceOracle.from_decimal("0.9999").get_price() == 99_990_000

    def test_invalid_price(self):
        with pytest.raises(ValueError):
            FixedPriceOracle(0)
        with pytest.raises(InvalidAmount):
            FixedPriceOracle.from_decimal("uno")
