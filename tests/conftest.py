# -*- coding: utf-8 -*-
"""
tests/conftest.py

Config global de tests para PyLinks.

- SQLite (aiosqlite) en un archivo temporal por test; esquema con create_all
- Reloj congelado e inyectable (FrozenClock) compartido por todos los servicios
- Oráculo de precio fijo (1.00 USD) vía PRICE_ORACLE_FIXED_PRICE
- Fuente de transferencias en memoria (FakeTransferSource)
- Receptor de webhooks sobre httpx.MockTransport
- App FastAPI con asgi-lifespan y cliente httpx con ASGITransport
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
import pytest
from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient

from pylinks.main import create_app
from pylinks.modules.payments.container import PaymentsContainer, build_container
from pylinks.shared.config import PyLinksSettings
from pylinks.shared.database import build_engine, build_session_factory, init_models
from tests.fakes import MERCHANT, WEBHOOK_URL, FakeTransferSource, FrozenClock, WebhookReceiver


# -----------------------------------------------------------------------------
# Configuración y base de datos
# -----------------------------------------------------------------------------
@pytest.fixture
def settings(tmp_path) -> PyLinksSettings:
    return PyLinksSettings(
        _env_file=None,
        environment="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'pylinks_test.db'}",
        scheduler_enabled=False,
        price_oracle_fixed_price="1.00",
        arbiter_api_key="arbiter-secret",
        block_confirmation_count=2,
        webhook_retry_count=3,
        webhook_backoff_base_seconds=1.0,
        webhook_backoff_max_seconds=60.0,
        rate_limit_max_requests=1000,
    )


@pytest.fixture
async def engine(settings):
    engine = build_engine(settings.database_url)
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


# -----------------------------------------------------------------------------
# Colaboradores simulados
# -----------------------------------------------------------------------------
@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def transfer_source() -> FakeTransferSource:
    return FakeTransferSource()


@pytest.fixture
def webhook_receiver() -> WebhookReceiver:
    return WebhookReceiver()


@pytest.fixture
async def http_client(webhook_receiver) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(transport=httpx.MockTransport(webhook_receiver)) as client:
        yield client


@pytest.fixture
def container(settings, session_factory, http_client, clock, transfer_source) -> PaymentsContainer:
    return build_container(
        settings,
        session_factory,
        http_client=http_client,
        clock=clock,
        transfer_source=transfer_source,
    )


@pytest.fixture
async def merchant_account(container):
    """Comercio con webhook registrado: (merchant, api_key)."""
    return await container.merchants.register_merchant("Tienda Demo", MERCHANT, webhook_url=WEBHOOK_URL)


# -----------------------------------------------------------------------------
# App FastAPI y cliente HTTP asíncrono
# -----------------------------------------------------------------------------
@pytest.fixture
def app(settings, clock, http_client, transfer_source):
    return create_app(
        settings,
        clock=clock,
        http_client=http_client,
        transfer_source=transfer_source,
    )


@pytest.fixture
async def async_client(app) -> AsyncIterator[AsyncClient]:
    """
    Cliente HTTP asíncrono configurado con la app FastAPI.
    Usa ASGITransport (httpx>=0.28) y asgi-lifespan para startup/shutdown.
    """
    async with LifespanManager(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            yield client
