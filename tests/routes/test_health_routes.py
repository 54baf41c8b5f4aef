# -*- coding: utf-8 -*-
"""
tests/routes/test_health_routes.py

/health y /metrics fuera del prefijo /api.
"""

import pytest

from tests.fakes import make_transfer


class TestHealth:
    @pytest.mark.asyncio
    async def test_health_ok(self, async_client):
        response = await async_client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["environment"] == "test"
        assert data["database"]["reachable"] is True
        assert data["scheduler"]["running"] is False
        assert data["service"]["name"] == "PyLinks Backend"


class TestMetrics:
    @pytest.mark.asyncio
    async def test_metrics_exposes_payment_counters(self, app, async_client):
        merchant = await async_client.post(
            "/api/merchants", json={"name": "Tienda", "wallet_address": "0x" + "a" * 40}
        )
        headers = {"X-API-Key": merchant.json()["api_key"]}
        created = await async_client.post(
            "/api/payments", json={"amount": "1.00", "session_id": "order-1"}, headers=headers
        )
        await app.state.container.ledger.apply_confirmed_transfer(
            make_transfer("order-1", created.json()["amount_units"])
        )

        response = await async_client.get("/metrics")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        body = response.text
        assert "pylinks_payments_created_total" in body
        assert 'pylinks_payment_transitions_total{payment_type="regular",status="paid"}' in body
        assert 'pylinks_transfer_outcomes_total{outcome="applied"}' in body
