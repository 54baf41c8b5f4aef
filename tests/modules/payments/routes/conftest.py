# -*- coding: utf-8 -*-
"""
tests/modules/payments/routes/conftest.py

Fixtures HTTP: comercio registrado por la API y sus cabeceras.
"""

import pytest

from tests.fakes import MERCHANT, WEBHOOK_URL


@pytest.fixture
async def registered_merchant(async_client) -> dict:
    response = await async_client.post(
        "/api/merchants",
        json={"name": "Tienda Demo", "wallet_address": MERCHANT, "webhook_url": WEBHOOK_URL},
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def merchant_headers(registered_merchant) -> dict:
    return {"X-API-Key": registered_merchant["api_key"]}
