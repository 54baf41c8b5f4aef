# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/container.py

Ensamblado de los servicios de pagos a partir de la configuración.

Todo se construye en el borde (main.py o tests) y se comparte a través de
`app.state.container`; ningún servicio lee estado global.

Autor: PyLinks
Fecha: 2026-10-07
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pylinks.shared.config import PyLinksSettings
from pylinks.shared.utils.datetime_helpers import Clock, utcnow
from pylinks.shared.utils.keyed_lock import KeyedLock
from pylinks.modules.payments.adapters import (
    FixedPriceOracle,
    JsonRpcTransferSource,
    PriceOracle,
    PythHermesPriceOracle,
    TransferSource,
)
from pylinks.modules.payments.middleware.rate_limiter import SlidingWindowRateLimiter
from pylinks.modules.payments.services import (
    AffiliateService,
    ConfirmationTracker,
    EscrowService,
    LedgerService,
    MerchantService,
    SubscriptionService,
    WebhookDispatcher,
    WebhookOutbox,
)

logger = logging.getLogger(__name__)


@dataclass
class PaymentsContainer:
    settings: PyLinksSettings
    session_factory: async_sessionmaker[AsyncSession]
    http_client: httpx.AsyncClient
    price_oracle: PriceOracle
    ledger: LedgerService
    escrow: EscrowService
    dispatcher: WebhookDispatcher
    merchants: MerchantService
    affiliates: AffiliateService
    subscriptions: SubscriptionService
    rate_limiter: SlidingWindowRateLimiter
    tracker: Optional[ConfirmationTracker] = None


def build_price_oracle(
    settings: PyLinksSettings,
    http_client: httpx.AsyncClient,
    clock: Clock = utcnow,
) -> PriceOracle:
    """Precio fijo si PRICE_ORACLE_FIXED_PRICE está definido; si no, Pyth Hermes."""
    if settings.price_oracle_fixed_price:
        logger.info(f"[Oracle] Precio fijo configurado: {settings.price_oracle_fixed_price} USD")
        return FixedPriceOracle.from_decimal(settings.price_oracle_fixed_price, settings.usd_decimals)
    return PythHermesPriceOracle(
        http_client,
        base_url=settings.price_oracle_url,
        feed_id=settings.pyusd_price_feed_id,
        max_age_seconds=settings.price_max_age_seconds,
        timeout_seconds=settings.outbound_timeout_seconds,
        usd_decimals=settings.usd_decimals,
        clock=clock,
    )


def build_transfer_source(
    settings: PyLinksSettings,
    http_client: httpx.AsyncClient,
) -> Optional[TransferSource]:
    if not settings.eth_rpc_url:
        logger.info("[RPC] ETH_RPC_URL no configurado; el rastreo de confirmaciones queda deshabilitado")
        return None
    return JsonRpcTransferSource(
        http_client,
        rpc_url=settings.eth_rpc_url,
        token_contract=settings.pyusd_contract,
        timeout_seconds=settings.outbound_timeout_seconds,
    )


def build_container(
    settings: PyLinksSettings,
    session_factory: async_sessionmaker[AsyncSession],
    *,
    http_client: httpx.AsyncClient,
    clock: Clock = utcnow,
    price_oracle: Optional[PriceOracle] = None,
    transfer_source: Optional[TransferSource] = None,
) -> PaymentsContainer:
    """Crea todos los servicios compartiendo locks, outbox y reloj."""
    price_oracle = price_oracle or build_price_oracle(settings, http_client, clock)
    transfer_source = transfer_source or build_transfer_source(settings, http_client)

    ledger = LedgerService(
        session_factory,
        settings,
        clock=clock,
        locks=KeyedLock(),
        outbox=WebhookOutbox(settings),
    )
    tracker = (
        ConfirmationTracker(session_factory, settings, ledger, transfer_source, clock=clock)
        if transfer_source is not None
        else None
    )

    return PaymentsContainer(
        settings=settings,
        session_factory=session_factory,
        http_client=http_client,
        price_oracle=price_oracle,
        ledger=ledger,
        escrow=EscrowService(ledger, price_oracle, settings, clock=clock),
        dispatcher=WebhookDispatcher(session_factory, settings, http_client, clock=clock),
        merchants=MerchantService(session_factory, clock=clock),
        affiliates=AffiliateService(session_factory, settings, clock=clock),
        subscriptions=SubscriptionService(session_factory, settings, ledger, price_oracle, clock=clock),
        rate_limiter=SlidingWindowRateLimiter(
            settings.rate_limit_max_requests,
            settings.rate_limit_window_seconds,
            enabled=settings.rate_limit_enabled,
        ),
        tracker=tracker,
    )


__all__ = ["PaymentsContainer", "build_container", "build_price_oracle", "build_transfer_source"]

# Fin del archivo pylinks/modules/payments/container.py
