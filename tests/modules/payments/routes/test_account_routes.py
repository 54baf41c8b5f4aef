# -*- coding: utf-8 -*-
"""
tests/modules/payments/routes/test_account_routes.py

Endpoints de comercios, suscripciones, afiliados y webhooks fallidos.
"""

import pytest

from tests.fakes import AFFILIATE, CUSTOMER, MERCHANT, STRANGER, WEBHOOK_URL, make_transfer


class TestMerchantRoutes:
    @pytest.mark.asyncio
    async def test_register_returns_credentials_once(self, async_client, registered_merchant, merchant_headers):
        assert registered_merchant["wallet_address"] == MERCHANT
        assert registered_merchant["api_key"].startswith("pk_")
        assert registered_merchant["webhook_secret"].startswith("whsec_")

        me = await async_client.get("/api/merchants/me", headers=merchant_headers)
        assert me.status_code == 200
        assert "api_key" not in me.json()
        assert me.json()["webhook_url"] == WEBHOOK_URL

    @pytest.mark.asyncio
    async def test_duplicate_wallet_conflict(self, async_client, registered_merchant):
        response = await async_client.post("/api/merchants", json={"name": "Copia", "wallet_address": MERCHANT})
        assert response.status_code == 409
        assert response.json()["code"] == "CONFLICT"

    @pytest.mark.asyncio
    async def test_rotate_key(self, async_client, merchant_headers):
        rotated = await async_client.post("/api/merchants/me/api-key", headers=merchant_headers)
        new_headers = {"X-API-Key": rotated.json()["api_key"]}

        assert (await async_client.get("/api/merchants/me", headers=merchant_headers)).status_code == 401
        assert (await async_client.get("/api/merchants/me", headers=new_headers)).status_code == 200

    @pytest.mark.asyncio
    async def test_update_webhook(self, async_client, registered_merchant, merchant_headers):
        response = await async_client.patch(
            "/api/merchants/me/webhook",
            json={"webhook_url": "https://shop.example/v2"},
            headers=merchant_headers,
        )
        assert response.json()["webhook_url"] == "https://shop.example/v2"
        assert response.json()["webhook_secret"] != registered_merchant["webhook_secret"]


class TestSubscriptionRoutes:
    @pytest.mark.asyncio
    async def test_create_get_cancel(self, async_client, merchant_headers):
        created = await async_client.post(
            "/api/subscriptions",
            json={"customer": CUSTOMER, "usd_amount": "9.99", "interval_days": 30, "max_payments": 12},
            headers=merchant_headers,
        )
        assert created.status_code == 201
        data = created.json()
        assert data["usd_amount"] == "9.99000000"
        assert data["interval_seconds"] == 30 * 86_400
        assert data["status"] == "active"

        fetched = await async_client.get(f"/api/subscriptions/{data['id']}")
        assert fetched.json()["max_payments"] == 12

        denied = await async_client.post(f"/api/subscriptions/{data['id']}/cancel", json={"caller": STRANGER})
        assert denied.status_code == 403
        cancelled = await async_client.post(f"/api/subscriptions/{data['id']}/cancel", json={"caller": CUSTOMER})
        assert cancelled.json()["status"] == "cancelled"

    @pytest.mark.asyncio
    async def test_interval_validation(self, async_client, merchant_headers):
        response = await async_client.post(
            "/api/subscriptions",
            json={"customer": CUSTOMER, "usd_amount": "9.99", "interval_days": 0},
            headers=merchant_headers,
        )
        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"


class TestAffiliateRoutes:
    @pytest.mark.asyncio
    async def test_register_and_lookup(self, async_client):
        created = await async_client.post("/api/affiliates", json={"wallet": AFFILIATE, "name": "Ana"})
        assert created.status_code == 201
        code = created.json()["referral_code"]
        assert created.json()["tier"] == "bronze"
        assert created.json()["total_volume"] == "0.000000"

        assert (await async_client.get(f"/api/affiliates/{AFFILIATE}")).json()["referral_code"] == code
        assert (await async_client.get(f"/api/affiliates/code/{code}")).json()["wallet"] == AFFILIATE

        missing = await async_client.get("/api/affiliates/code/NOEXISTE")
        assert missing.status_code == 404
        assert missing.json()["code"] == "AFFILIATE_NOT_FOUND"


class TestWebhookRoutes:
    @pytest.mark.asyncio
    async def test_failed_events_and_redeliver(self, app, async_client, merchant_headers, webhook_receiver):
        container = app.state.container
        webhook_receiver.status_code = 500
        created = await async_client.post(
            "/api/payments", json={"amount": "5.00", "session_id": "order-1"}, headers=merchant_headers
        )
        await container.ledger.apply_confirmed_transfer(make_transfer("order-1", created.json()["amount_units"]))
        [event] = await container.dispatcher.list_for_payment(created.json()["id"])
        for _ in range(3):
            await container.dispatcher.deliver(event.id, force=True)

        failed = await async_client.get("/api/webhooks/failed", headers=merchant_headers)
        assert [e["id"] for e in failed.json()] == [event.id]
        assert failed.json()[0]["status"] == "permanently_failed"
        assert failed.json()[0]["attempts"] == 3

        webhook_receiver.status_code = 200
        requeued = await async_client.post(f"/api/webhooks/{event.id}/redeliver", headers=merchant_headers)
        assert requeued.status_code == 200
        assert requeued.json()["status"] == "pending"
        assert requeued.json()["attempts"] == 0

        assert await container.dispatcher.dispatch_pending() == 1
        assert (await async_client.get("/api/webhooks/failed", headers=merchant_headers)).json() == []
