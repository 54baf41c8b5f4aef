# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/adapters/price_oracle.py

Adaptadores de precio PYUSD/USD.

- PythHermesPriceOracle: lee el último precio publicado en Pyth Hermes
  (GET /v2/updates/price/latest) y lo escala a 8 decimales.
- FixedPriceOracle: precio constante (testnet / tests).

Cualquier fallo del proveedor (HTTP, timeout, formato, precio viejo o no
positivo) se registra en logs y se expone solo como PriceUnavailable; el
detalle del proveedor nunca llega al cliente.

Autor: PyLinks
Fecha: 2026-10-05
"""

from __future__ import annotations

import logging
from typing import Protocol

import httpx

from pylinks.shared.utils.datetime_helpers import Clock, utcnow
from pylinks.modules.payments.errors import PriceUnavailable
from pylinks.modules.payments.metrics import observe_oracle_failure
from pylinks.modules.payments.utils.amounts import USD_DECIMALS, to_fixed_point

logger = logging.getLogger(__name__)


class PriceOracle(Protocol):
    async def get_price(self) -> int:
        """Precio USD de 1 token, en punto fijo de 8 decimales."""
        ...


class FixedPriceOracle:
    def __init__(self, price_units: int):
        if price_units <= 0:
            raise ValueError("price_units debe ser positivo")
        self.price_units = price_units

    @classmethod
    def from_decimal(cls, price: str, usd_decimals: int = USD_DECIMALS) -> "FixedPriceOracle":
        return cls(to_fixed_point(price, usd_decimals))

    async def get_price(self) -> int:
        return self.price_units


class PythHermesPriceOracle:
    """Cliente mínimo de Pyth Hermes sobre un httpx.AsyncClient compartido."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        base_url: str,
        feed_id: str,
        max_age_seconds: int,
        timeout_seconds: float,
        usd_decimals: int = USD_DECIMALS,
        clock: Clock = utcnow,
    ):
        self.http_client = http_client
        self.base_url = base_url.rstrip("/")
        self.feed_id = feed_id
        self.max_age_seconds = max_age_seconds
        self.timeout_seconds = timeout_seconds
        self.usd_decimals = usd_decimals
        self.clock = clock

    async def get_price(self) -> int:
        url = f"{self.base_url}/v2/updates/price/latest"
        try:
            response = await self.http_client.get(
                url,
                params={"ids[]": self.feed_id, "parsed": "true"},
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"[Oracle] Error consultando Pyth Hermes: {e!r}")
            observe_oracle_failure("http")
            raise PriceUnavailable() from e

        try:
            feed = body["parsed"][0]["price"]
            raw_price = int(feed["price"])
            expo = int(feed["expo"])
            publish_time = int(feed["publish_time"])
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.warning(f"[Oracle] Respuesta de Pyth con formato inesperado: {e!r}")
            observe_oracle_failure("parse")
            raise PriceUnavailable() from e

        age = self.clock().timestamp() - publish_time
        if age > self.max_age_seconds:
            logger.warning(
                f"[Oracle] Precio viejo: publicado hace {age:.0f}s (máx {self.max_age_seconds}s)"
            )
            observe_oracle_failure("stale")
            raise PriceUnavailable()

        shift = expo + self.usd_decimals
        price = raw_price * 10 ** shift if shift >= 0 else raw_price // 10 ** (-shift)
        if price <= 0:
            logger.warning(f"[Oracle] Precio no positivo: raw={raw_price} expo={expo}")
            observe_oracle_failure("non_positive")
            raise PriceUnavailable()

        logger.debug(f"[Oracle] Precio PYUSD/USD={price} (1e-{self.usd_decimals})")
        return price


__all__ = ["PriceOracle", "FixedPriceOracle", "PythHermesPriceOracle"]

# Fin del archivo pylinks/modules/payments/adapters/price_oracle.py
